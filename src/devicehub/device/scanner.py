import logging
from collections import namedtuple
from datetime import datetime
from enum import Enum

from devicehub.device.capabilities import Scanner, Capability
from devicehub.device.lifecycle import DeviceOperations, ManagedDevice
from devicehub.errors import DeviceUnavailableError
from devicehub.support.blocking import run_blocking
from devicehub.support.files import write_atomic

logger = logging.getLogger(__name__)

RESOLUTIONS = (75, 150, 200, 300, 600, 1200)


class ColorMode(Enum):
    BLACK_AND_WHITE = 'bw'
    GRAYSCALE = 'gray'
    COLOR = 'color'


class ImageFormat(Enum):
    JPEG = 'jpeg'
    PNG = 'png'
    BMP = 'bmp'
    TIFF = 'tiff'
    PDF = 'pdf'


class ScannerSettings(namedtuple('ScannerSettings', 'resolution color_mode format brightness contrast')):
    """ brightness and contrast range from -127 to 127. """
    __slots__ = ()

    def __new__(cls, resolution=300, color_mode=ColorMode.COLOR, format=ImageFormat.JPEG, brightness=0, contrast=0):
        if resolution <= 0:
            raise ValueError("resolution must be positive, got %r" % resolution)
        for name, value in (('brightness', brightness), ('contrast', contrast)):
            if not -127 <= value <= 127:
                raise ValueError("%s must be between -127 and 127, got %r" % (name, value))
        return super().__new__(cls, resolution, ColorMode(color_mode), ImageFormat(format), brightness, contrast)


class ScannedImage(namedtuple('ScannedImage', 'data width height resolution color_mode format timestamp')):
    __slots__ = ()

    def __new__(cls, data, width, height, resolution, color_mode=ColorMode.COLOR, format=ImageFormat.JPEG,
                timestamp=None):
        if data is None:
            raise ValueError("scanned image data is required")
        return super().__new__(cls, bytes(data), width, height, resolution, color_mode, format,
                               timestamp or datetime.now())


class OfficeScanner(ManagedDevice, Scanner):
    """
    A scanner installed on the host, driven through a PlatformScanner backend.
    """
    capabilities = frozenset([Capability.SCANNER])
    device_type = 'scanner'
    manufacturer = 'system'

    def __init__(self, device_id, name, system_name, backend, settings: ScannerSettings = None,
                 supported_resolutions=RESOLUTIONS, transport=None, address=None):
        super().__init__(device_id, name, DeviceOperations(self._initialize), transport, address)
        self.system_name = system_name
        self.backend = backend
        self.settings = settings or ScannerSettings()
        self._supported_resolutions = tuple(supported_resolutions)

    @property
    def model(self):
        return self.system_name

    @property
    def supported_resolutions(self):
        return self._supported_resolutions

    async def _initialize(self):
        if not await run_blocking(self.backend.is_available, self.system_name):
            raise DeviceUnavailableError(self.device_id, self.system_name)

    async def scan(self, settings=None) -> ScannedImage:
        settings = settings or self.settings
        if settings.resolution not in self._supported_resolutions:
            raise ValueError("resolution %d is not supported by %s" % (settings.resolution, self.name))
        async with self.lifecycle.busy("scanning at %d dpi" % settings.resolution):
            image = await run_blocking(self.backend.scan, self.system_name, settings)
        logger.debug("scanner %s produced %d bytes" % (self.device_id, len(image.data)))
        return image

    async def save_image(self, image: ScannedImage, path):
        await run_blocking(write_atomic, path, image.data)
