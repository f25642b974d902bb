"""
The state machine every device runs through.

    DISCONNECTED -> CONNECTING -> READY <-> BUSY
                         |          |        |
                         +-------> ERROR <---+

disconnect() returns any state to DISCONNECTED. ERROR is left only by reset() or disconnect().

The device specific parts (what to send on initialize, how to reset, how to describe the
device) are supplied as a DeviceOperations instance rather than by subclassing.
"""
import asyncio
import logging
from collections import namedtuple
from contextlib import asynccontextmanager
from enum import Enum

from devicehub.errors import NotReadyError, DeviceError
from devicehub.support.events import EventSource
from devicehub.support.mixins import CommonEqualityMixin, ReprMixin

logger = logging.getLogger(__name__)


class DeviceStatus(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    READY = 'ready'
    BUSY = 'busy'
    ERROR = 'error'

    def __str__(self):
        return self.value


class DeviceStatusChangedEvent(CommonEqualityMixin, ReprMixin):
    """ Fired by a lifecycle each time its status changes. """

    def __init__(self, device_id, old, new, message=None):
        self.device_id = device_id
        self.old = old
        self.new = new
        self.message = message


class DeviceOperations(namedtuple('DeviceOperations', 'initialize reset describe')):
    """
    The device specific hooks driven by a DeviceLifecycle. Each is a coroutine function
    taking no arguments.

    - initialize: runs once the transport is open. Raising fails the connect.
    - reset: brings the device back to a known state. None means initialize is run again.
    - describe: returns a DeviceInfo.
    """
    __slots__ = ()

    def __new__(cls, initialize, reset=None, describe=None):
        if initialize is None:
            raise ValueError("initialize is required")
        return super().__new__(cls, initialize, reset, describe)


class DeviceInfo(namedtuple('DeviceInfo', 'device_id device_name device_type manufacturer model '
                                          'firmware_version serial_number')):
    __slots__ = ()

    def __new__(cls, device_id, device_name=None, device_type=None, manufacturer=None, model=None,
                firmware_version=None, serial_number=None):
        return super().__new__(cls, device_id, device_name, device_type, manufacturer, model,
                               firmware_version, serial_number)


class DeviceLifecycle:
    """
    Tracks the status of one device and drives its transport and operations through connect,
    disconnect, reset and close.

    The status is changed only by _set_status(), which records an explanatory message and
    fires a DeviceStatusChangedEvent on `events`.
    """

    def __init__(self, device_id, operations: DeviceOperations, transport=None, address=None):
        self.device_id = device_id
        self.operations = operations
        self.transport = transport
        self.address = address
        self.events = EventSource()
        self._status = DeviceStatus.DISCONNECTED
        self._message = None
        self._closed = False

    @property
    def status(self) -> DeviceStatus:
        return self._status

    @property
    def message(self):
        return self._message

    @property
    def closed(self):
        return self._closed

    def _set_status(self, status, message=None):
        old = self._status
        self._status = status
        self._message = message
        if old is not status:
            logger.debug("device %s: %s -> %s (%s)" % (self.device_id, old, status, message))
            self.events.fire(DeviceStatusChangedEvent(self.device_id, old, status, message))

    def check_ready(self):
        if self._status is not DeviceStatus.READY:
            raise NotReadyError(self.device_id, self._status)

    def check_not_closed(self):
        if self._closed:
            raise DeviceError(self.device_id, "device '%s' is closed" % self.device_id)

    async def connect(self):
        """
        Opens the transport and runs the initialize hook.
        Connecting a READY or BUSY device does nothing. On failure the transport is closed,
        the device enters ERROR and the exception propagates.
        """
        self.check_not_closed()
        if self._status in (DeviceStatus.READY, DeviceStatus.BUSY):
            return
        if self._status is DeviceStatus.CONNECTING:
            raise NotReadyError(self.device_id, self._status)
        self._set_status(DeviceStatus.CONNECTING, "connecting to %s" % (self.address or "device",))
        try:
            await self._open_transport()
            await self.operations.initialize()
        except asyncio.CancelledError:
            await self._close_transport()
            self._set_status(DeviceStatus.DISCONNECTED, "connect cancelled")
            raise
        except Exception as e:
            await self._close_transport()
            self.fail(e)
            raise
        self._set_status(DeviceStatus.READY, "connected")
        logger.info("connected device %s" % self.device_id)

    async def disconnect(self):
        """ closes the transport. Disconnecting a disconnected device does nothing. """
        if self._status is DeviceStatus.DISCONNECTED:
            return
        await self._close_transport()
        self._set_status(DeviceStatus.DISCONNECTED, "disconnected")
        logger.info("disconnected device %s" % self.device_id)

    async def reset(self):
        """
        Runs the reset hook from READY or ERROR, reopening the transport if needed. A device
        without a reset hook is initialized again.
        Success leaves the device READY. Failure leaves it in ERROR and the exception propagates.
        """
        self.check_not_closed()
        if self._status not in (DeviceStatus.READY, DeviceStatus.ERROR):
            raise NotReadyError(self.device_id, self._status)
        try:
            await self._open_transport()
            await (self.operations.reset or self.operations.initialize)()
        except Exception as e:
            self._set_status(DeviceStatus.ERROR, "reset failed: %s" % e)
            raise
        self._set_status(DeviceStatus.READY, "reset")

    async def describe(self) -> DeviceInfo:
        if self.operations.describe is None:
            return DeviceInfo(self.device_id)
        return await self.operations.describe()

    def fail(self, error):
        """ records an operation failure and enters ERROR. """
        self._set_status(DeviceStatus.ERROR, str(error) or type(error).__name__)

    def enter_busy(self, message='busy'):
        """ moves from READY to BUSY, raising NotReadyError from any other state. """
        self.check_ready()
        self._set_status(DeviceStatus.BUSY, message)

    def leave_busy(self, message='ready'):
        """ returns to READY if the device is still BUSY. """
        if self._status is DeviceStatus.BUSY:
            self._set_status(DeviceStatus.READY, message)

    @asynccontextmanager
    async def busy(self, message='busy'):
        """
        Holds the device in BUSY for the duration of an operation.
        A second operation started meanwhile fails with NotReadyError.
        An exception puts the device in ERROR; cancellation returns it to READY.
        """
        self.enter_busy(message)
        try:
            yield self
        except asyncio.CancelledError:
            self.leave_busy("cancelled")
            raise
        except Exception as e:
            if self._status is DeviceStatus.BUSY:
                self.fail(e)
            raise
        self.leave_busy()

    async def close(self):
        """ disconnects the device and marks it unusable. Closing again does nothing. """
        if self._closed:
            return
        self._closed = True
        try:
            await self.disconnect()
        finally:
            self.events.clear()
            logger.debug("closed device %s" % self.device_id)

    async def _open_transport(self):
        if self.transport is not None and not self.transport.is_open:
            await self.transport.open(self.address)

    async def _close_transport(self):
        if self.transport is not None:
            await self.transport.close()


class ManagedDevice:
    """
    Shared Device plumbing for devices that run a DeviceLifecycle. The lifecycle operations
    delegate to `self.lifecycle`; the device provides its hooks through DeviceOperations.
    """
    device_type = None
    manufacturer = None
    model = None
    protocol_version = '1.0'

    def __init__(self, device_id, name, operations: DeviceOperations, transport=None, address=None):
        if operations.describe is None:
            operations = operations._replace(describe=self._describe)
        self._name = name or device_id
        self.lifecycle = DeviceLifecycle(device_id, operations, transport, address)

    @property
    def device_id(self):
        return self.lifecycle.device_id

    @property
    def name(self):
        return self._name

    @property
    def status(self):
        return self.lifecycle.status

    @property
    def status_message(self):
        return self.lifecycle.message

    @property
    def events(self):
        return self.lifecycle.events

    @property
    def transport(self):
        return self.lifecycle.transport

    @property
    def address(self):
        return self.lifecycle.address

    async def connect(self):
        await self.lifecycle.connect()

    async def disconnect(self):
        await self.lifecycle.disconnect()

    async def reset(self):
        await self.lifecycle.reset()

    async def describe(self) -> DeviceInfo:
        return await self.lifecycle.describe()

    async def close(self):
        await self.lifecycle.close()

    async def _describe(self):
        return DeviceInfo(self.device_id, self.name, self.device_type, self.manufacturer, self.model,
                          self.protocol_version)

    def __repr__(self):
        return "%s(%r, %s)" % (type(self).__name__, self.device_id, self.status)
