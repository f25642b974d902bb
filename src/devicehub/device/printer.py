"""
Receipt and office printers.

EscPosPrinter writes ESC/POS command bytes to its transport. OfficePrinter hands documents
to a PlatformPrinter backend, such as the host's print spooler.
"""
import codecs
import logging
import os
import tempfile
import uuid
from collections import namedtuple
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from devicehub.device.capabilities import Printer, Capability
from devicehub.device.lifecycle import DeviceOperations, DeviceInfo, ManagedDevice
from devicehub.errors import DeviceUnavailableError
from devicehub.protocol.escpos import EscPosDriver, BarcodeType, QrErrorCorrection
from devicehub.support.blocking import run_blocking
from devicehub.support.events import EventSource
from devicehub.support.files import read_bytes
from devicehub.support.mixins import CommonEqualityMixin, ReprMixin

logger = logging.getLogger(__name__)


class DeviceProfile(namedtuple('DeviceProfile', 'manufacturer model version protocol options')):
    """ The static description of a device model. The options mapping is read only. """
    __slots__ = ()

    def __new__(cls, manufacturer='', model='', version='1.0', protocol='Generic', options=None):
        return super().__new__(cls, manufacturer, model, version, protocol, MappingProxyType(dict(options or {})))


class PrinterProfile(namedtuple('PrinterProfile', DeviceProfile._fields +
                                ('default_codepage', 'escpos_codepage', 'default_feed_lines',
                                 'supports_cut', 'partial_cut'))):
    """
    A DeviceProfile with the settings of a receipt printer.

    - default_codepage: the Windows/IBM code page used to encode text, e.g. 866.
    - escpos_codepage: the table number sent with ESC t, e.g. 17 for PC866. None sends 0.
    - default_feed_lines: lines fed after each job, at least one is always fed.
    """
    __slots__ = ()

    def __new__(cls, manufacturer='', model='', version='1.0', protocol='Generic', options=None,
                default_codepage=866, escpos_codepage=None, default_feed_lines=2,
                supports_cut=False, partial_cut=False):
        return super().__new__(cls, manufacturer, model, version, protocol, MappingProxyType(dict(options or {})),
                               default_codepage, escpos_codepage, default_feed_lines, supports_cut, partial_cut)

    @property
    def encoding(self):
        """
        The python codec for default_codepage, ascii when the code page is unset or unknown.

        >>> PrinterProfile().encoding
        'cp866'
        >>> PrinterProfile(default_codepage=0).encoding
        'ascii'
        """
        if self.default_codepage and self.default_codepage > 0:
            try:
                return codecs.lookup('cp%d' % self.default_codepage).name
            except LookupError:
                pass
        return 'ascii'


class PrintJobStatus(Enum):
    QUEUED = 'queued'
    PRINTING = 'printing'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'

    def __str__(self):
        return self.value


class PrintJob(namedtuple('PrintJob', 'job_id document_name status submitted_at')):
    __slots__ = ()

    @classmethod
    def submit(cls, document_name, job_id=None):
        return cls(job_id or str(uuid.uuid4()), document_name, PrintJobStatus.QUEUED, datetime.now())


class PrintJobStatusChangedEvent(CommonEqualityMixin, ReprMixin):

    def __init__(self, device_id, job, old, new):
        self.device_id = device_id
        self.job = job
        self.old = old
        self.new = new


class EscPosPrinter(ManagedDevice, Printer):
    """
    A receipt printer reached over a byte transport (tcp or serial).

    Every job is the payload, a line feed of at least one line and, when the profile
    supports it, a cut.
    """
    capabilities = frozenset([Capability.PRINTER])
    device_type = 'printer'

    def __init__(self, device_id, name, transport, address, profile: PrinterProfile = None, driver=None):
        super().__init__(device_id, name, DeviceOperations(self._initialize, self._initialize),
                         transport, address)
        self.profile = profile or PrinterProfile()
        self.driver = driver or EscPosDriver()
        self.job_events = EventSource()

    @property
    def manufacturer(self):
        return self.profile.manufacturer

    @property
    def model(self):
        return self.profile.model

    @property
    def protocol_version(self):
        return self.profile.version

    async def _initialize(self):
        await self.transport.send(self.driver.initialize())
        await self.transport.send(self.driver.set_codepage(self.profile.escpos_codepage or 0))

    async def _describe(self):
        return DeviceInfo(self.device_id, self.name, self.device_type, self.manufacturer, self.model,
                          self.profile.version, self.device_id)

    def _job_changed(self, job, status):
        updated = job._replace(status=status)
        self.job_events.fire(PrintJobStatusChangedEvent(self.device_id, updated, job.status, status))
        return updated

    async def print_raw(self, data, document_name='raw') -> PrintJob:
        async with self.lifecycle.busy("printing %s" % document_name):
            job = self._job_changed(PrintJob.submit(document_name), PrintJobStatus.PRINTING)
            try:
                await self.transport.send(self.driver.raw(data))
                await self.transport.send(self.driver.feed_lines(max(1, self.profile.default_feed_lines)))
                if self.profile.supports_cut:
                    await self.transport.send(self.driver.cut(self.profile.partial_cut))
            except Exception:
                self._job_changed(job, PrintJobStatus.FAILED)
                raise
            job = self._job_changed(job, PrintJobStatus.COMPLETED)
        logger.debug("printer %s completed job %s (%s)" % (self.device_id, job.job_id, document_name))
        return job

    async def print_text(self, text, document_name='text') -> PrintJob:
        return await self.print_raw(self.driver.print_text(text + '\n', self.profile.encoding), document_name)

    async def print_file(self, path) -> PrintJob:
        data = await run_blocking(read_bytes, path)
        return await self.print_raw(data, os.path.basename(path))

    async def print_barcode(self, data, barcode_type=BarcodeType.CODE39, height=100, width=3) -> PrintJob:
        return await self.print_raw(self.driver.barcode(data, barcode_type, height, width), 'barcode')

    async def print_qr(self, data, size=6, error_level=QrErrorCorrection.M) -> PrintJob:
        return await self.print_raw(self.driver.qr(data, size, error_level), 'qr')


class OfficePrinter(ManagedDevice, Printer):
    """
    A printer installed on the host, driven through a PlatformPrinter backend.
    Connecting fails with DeviceUnavailableError when the backend does not list system_name.
    """
    capabilities = frozenset([Capability.PRINTER])
    device_type = 'printer'
    manufacturer = 'system'

    def __init__(self, device_id, name, system_name, backend, transport=None, address=None):
        super().__init__(device_id, name, DeviceOperations(self._initialize), transport, address)
        self.system_name = system_name
        self.backend = backend

    @property
    def model(self):
        return self.system_name

    async def _initialize(self):
        if not await run_blocking(self.backend.is_available, self.system_name):
            raise DeviceUnavailableError(self.device_id, self.system_name)

    async def print_text(self, text, document_name='text') -> PrintJob:
        async with self.lifecycle.busy("printing %s" % document_name):
            job_id = await run_blocking(self.backend.print_text, self.system_name, text)
        return PrintJob(job_id, document_name, PrintJobStatus.QUEUED, datetime.now())

    async def print_file(self, path) -> PrintJob:
        async with self.lifecycle.busy("printing %s" % path):
            job_id = await run_blocking(self.backend.print_file, self.system_name, path)
        return PrintJob(job_id, os.path.basename(path), PrintJobStatus.QUEUED, datetime.now())

    async def print_raw(self, data) -> PrintJob:
        """ spools the data through a temporary file. """
        fd, path = tempfile.mkstemp(prefix='devicehub-', suffix='.prn')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            return await self.print_file(path)
        finally:
            os.unlink(path)
