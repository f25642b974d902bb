import os
import tempfile
import unittest
from unittest.mock import Mock

from hamcrest import assert_that, is_, calling, raises, contains_exactly

from devicehub.device.lifecycle import DeviceStatus
from devicehub.device.scanner import ScannerSettings, ColorMode, ImageFormat, ScannedImage, OfficeScanner
from devicehub.errors import DeviceUnavailableError
from devicehub.platform import PlatformScanner
from devicehub.support.files import read_bytes


class ScannerSettingsTest(unittest.TestCase):

    def test_defaults(self):
        assert_that(ScannerSettings(), is_(ScannerSettings(300, ColorMode.COLOR, ImageFormat.JPEG, 0, 0)))

    def test_coerces_enum_values(self):
        sut = ScannerSettings(600, 'gray', 'png')
        assert_that(sut.color_mode, is_(ColorMode.GRAYSCALE))
        assert_that(sut.format, is_(ImageFormat.PNG))

    def test_validation(self):
        assert_that(calling(ScannerSettings).with_args(0), raises(ValueError))
        assert_that(calling(ScannerSettings).with_args(brightness=128), raises(ValueError))
        assert_that(calling(ScannerSettings).with_args(contrast=-128), raises(ValueError))
        assert_that(calling(ScannerSettings).with_args(color_mode='sepia'), raises(ValueError))

    def test_scanned_image_requires_data(self):
        assert_that(calling(ScannedImage).with_args(None, 1, 1, 300), raises(ValueError))


class FakeScannerBackend(PlatformScanner):

    def __init__(self, scanners=('Flatbed',)):
        self.scanners = scanners
        self.scans = []

    def available_scanners(self):
        return self.scanners

    def scan(self, scanner_name, settings):
        self.scans.append((scanner_name, settings))
        return ScannedImage(b'image', 2480, 3508, settings.resolution, settings.color_mode, settings.format)


class OfficeScannerTest(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.backend = FakeScannerBackend()
        self.sut = OfficeScanner('s1', 'Flatbed', 'Flatbed', self.backend)

    async def test_unavailable(self):
        sut = OfficeScanner('s2', 'Missing', 'Missing', self.backend)
        with self.assertRaises(DeviceUnavailableError):
            await sut.connect()
        assert_that(sut.status, is_(DeviceStatus.ERROR))

    async def test_scan_with_default_settings(self):
        await self.sut.connect()
        image = await self.sut.scan()
        assert_that(image.data, is_(b'image'))
        assert_that(image.resolution, is_(300))
        assert_that(self.backend.scans, contains_exactly(('Flatbed', ScannerSettings())))
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_unsupported_resolution(self):
        await self.sut.connect()
        with self.assertRaises(ValueError):
            await self.sut.scan(ScannerSettings(400))
        assert_that(self.backend.scans, is_([]))
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_backend_failure(self):
        await self.sut.connect()
        self.backend.scan = Mock(side_effect=OSError('lid open'))
        with self.assertRaises(OSError):
            await self.sut.scan()
        assert_that(self.sut.status, is_(DeviceStatus.ERROR))

    async def test_save_image(self):
        await self.sut.connect()
        image = await self.sut.scan()
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'page.jpg')
            await self.sut.save_image(image, path)
            assert_that(read_bytes(path), is_(b'image'))

    def test_supported_resolutions(self):
        assert_that(self.sut.supported_resolutions, is_((75, 150, 200, 300, 600, 1200)))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
