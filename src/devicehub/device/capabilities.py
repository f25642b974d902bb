"""
Capability tags and the interface that goes with each of them.

A device advertises what it can do through its `capabilities` set, and provides the
operations of the matching interface class. A caller asking for a camera gets a device
that carries the CAMERA tag and is a Camera.
"""
from abc import abstractmethod
from enum import Enum


class Capability(Enum):
    CAMERA = 'camera'
    PRINTER = 'printer'
    SCANNER = 'scanner'
    GATE = 'gate'

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value):
        """
        Accepts a Capability or its name in any case.

        >>> Capability.parse('Camera')
        <Capability.CAMERA: 'camera'>
        """
        if isinstance(value, Capability):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError("unknown capability '%s'" % value) from None


class Device:
    """
    The operations shared by every device, whatever it can do.

    A device is an async context manager that closes itself on exit.
    """
    capabilities = frozenset()

    @property
    @abstractmethod
    def device_id(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def device_type(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def manufacturer(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def model(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def protocol_version(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def status(self):
        """ the DeviceStatus of this device """
        raise NotImplementedError

    @abstractmethod
    async def connect(self):
        """ opens the transport and initializes the device. Connecting a connected device does nothing. """
        raise NotImplementedError

    @abstractmethod
    async def disconnect(self):
        raise NotImplementedError

    @abstractmethod
    async def reset(self):
        raise NotImplementedError

    @abstractmethod
    async def describe(self):
        """ a DeviceInfo snapshot, produced on each call """
        raise NotImplementedError

    @abstractmethod
    async def close(self):
        """ disconnects and releases the device for good. """
        raise NotImplementedError

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class Camera(Device):

    @property
    @abstractmethod
    def supported_resolutions(self):
        """ the (width, height) pairs the camera accepts """
        raise NotImplementedError

    @property
    @abstractmethod
    def max_fps(self) -> int:
        raise NotImplementedError

    @abstractmethod
    async def start(self, options):
        """ validates the CameraStartOptions and enters the streaming state. """
        raise NotImplementedError

    @abstractmethod
    def frames(self, stop_event=None):
        """ an async iterator of CameraFrame, captured as the consumer asks for them. """
        raise NotImplementedError

    @abstractmethod
    async def stop(self):
        raise NotImplementedError

    @abstractmethod
    async def snapshot(self, options=None):
        raise NotImplementedError


class Printer(Device):

    @abstractmethod
    async def print_text(self, text):
        raise NotImplementedError

    @abstractmethod
    async def print_raw(self, data):
        raise NotImplementedError

    @abstractmethod
    async def print_file(self, path):
        raise NotImplementedError


class Scanner(Device):

    @property
    @abstractmethod
    def supported_resolutions(self):
        raise NotImplementedError

    @abstractmethod
    async def scan(self, settings=None):
        """ scans one page and returns a ScannedImage """
        raise NotImplementedError


class Gate(Device):

    @abstractmethod
    async def open(self):
        raise NotImplementedError

    @abstractmethod
    async def close_gate(self):
        raise NotImplementedError


interfaces = {
    Capability.CAMERA: Camera,
    Capability.PRINTER: Printer,
    Capability.SCANNER: Scanner,
    Capability.GATE: Gate,
}


def implements(device, capability) -> bool:
    """ determines if the device both advertises the capability and provides its interface. """
    capability = Capability.parse(capability)
    return capability in getattr(device, 'capabilities', ()) and isinstance(device, interfaces[capability])
