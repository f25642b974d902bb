"""
The DeviceManager builds devices from plugins and owns them until they are unregistered.
"""
import logging
import threading
from collections import namedtuple

from devicehub.device.capabilities import Capability, implements
from devicehub.errors import CapabilityMismatchError
from devicehub.plugin import PluginCatalog
from devicehub.transport.base import EndpointAddress
from devicehub.transport.factory import TransportFactory, default_transport_factory

logger = logging.getLogger(__name__)


class FanOutResult(namedtuple('FanOutResult', 'succeeded failed')):
    """
    The outcome of an operation applied to every registered device.
    succeeded lists the device ids that completed, failed maps device ids to their error.
    """
    __slots__ = ()

    @property
    def ok(self):
        return not self.failed

    def __bool__(self):
        return self.ok


class DeviceManager:
    """
    Connects to devices by plugin and capability, and keeps a registry of the devices it
    created, keyed by device id.

    The registry may be read and changed from several threads. It is not transactional
    with the devices themselves: closing a device while another task operates on it is
    the caller's concern.

    :param catalog: the PluginCatalog used to resolve plugin ids.
    :param transports: the TransportFactory creating transports for address schemes.
    """

    def __init__(self, catalog: PluginCatalog, transports: TransportFactory = None):
        self.catalog = catalog
        self.transports = transports or default_transport_factory()
        self._devices = dict()
        self._lock = threading.Lock()

    async def connect(self, address: EndpointAddress, plugin_id, capability, device_id=None):
        """
        Builds the device for plugin_id, bound to a new transport for the address, and
        registers it. The transport is not opened; that happens when the device connects.

        Raises PluginNotFoundError, UnsupportedSchemeError or CapabilityMismatchError, in
        which case nothing is registered.
        """
        capability = Capability.parse(capability)
        plugin = self.catalog.resolve(plugin_id)
        transport = self.transports.create(address.scheme)
        try:
            device = plugin.create(transport, address, device_id)
        except Exception:
            await transport.close()
            raise
        if not implements(device, capability):
            await transport.close()
            raise CapabilityMismatchError(plugin_id, capability, getattr(device, 'capabilities', ()))
        await self.register(device)
        logger.info("created %s device %s with plugin %s at %s" % (capability, device.device_id, plugin_id, address))
        return device

    async def register(self, device):
        """
        Adds the device to the registry. A different device registered under the same id
        is replaced and closed. Registering the same device again does nothing.
        """
        with self._lock:
            previous = self._devices.get(device.device_id)
            self._devices[device.device_id] = device
        if previous is not None and previous is not device:
            logger.info("device %s replaced, closing the previous instance" % device.device_id)
            await previous.close()

    async def unregister(self, device_id) -> bool:
        """ removes and closes the device. Returns False when no device had the id. """
        with self._lock:
            device = self._devices.pop(device_id, None)
        if device is None:
            return False
        await device.close()
        logger.info("device %s unregistered" % device_id)
        return True

    def get(self, device_id, default=None):
        with self._lock:
            return self._devices.get(device_id, default)

    def devices(self, capability=None):
        """ the registered devices, optionally only those providing the capability. """
        with self._lock:
            devices = list(self._devices.values())
        if capability is not None:
            devices = [d for d in devices if implements(d, capability)]
        return devices

    def __len__(self):
        with self._lock:
            return len(self._devices)

    def __contains__(self, device_id):
        with self._lock:
            return device_id in self._devices

    async def _fan_out(self, action):
        succeeded, failed = [], {}
        for device in self.devices():
            try:
                await getattr(device, action)()
                succeeded.append(device.device_id)
            except Exception as e:
                logger.warning("%s failed for device %s: %s" % (action, device.device_id, e))
                failed[device.device_id] = e
        return FanOutResult(tuple(succeeded), failed)

    async def connect_all(self) -> FanOutResult:
        """ connects every registered device. A failing device does not stop the others. """
        return await self._fan_out('connect')

    async def disconnect_all(self) -> FanOutResult:
        return await self._fan_out('disconnect')

    async def close(self):
        """ unregisters and closes every device. """
        with self._lock:
            devices = list(self._devices.values())
            self._devices.clear()
        for device in devices:
            try:
                await device.close()
            except Exception:
                logger.exception("error closing device %s" % device.device_id)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
