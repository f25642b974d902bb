import asyncio
import os
import struct
import tempfile
import unittest
from unittest.mock import AsyncMock

from hamcrest import assert_that, is_, calling, raises, has_length, contains_exactly, \
    instance_of

from devicehub.device.camera import StreamingCamera, CameraStartOptions, CameraFrame, LengthPrefixedFrameReader, \
    test_pattern_jpeg, save_frame
from devicehub.device.lifecycle import DeviceStatus
from devicehub.errors import NotReadyError, TransportError
from devicehub.support.files import read_bytes
from devicehub.transport.sdk_transport import SdkTransport
from devicehub.transport.base import EndpointAddress, Transport

FAST = CameraStartOptions(640, 480, 1000)


class CameraStartOptionsTest(unittest.TestCase):

    def test_positive_integers(self):
        for args in ((0, 480, 30), (640, -1, 30), (640, 480, 0), (640.0, 480, 30), (True, 480, 30)):
            assert_that(calling(CameraStartOptions).with_args(*args), raises(ValueError))

    def test_resolution(self):
        assert_that(CameraStartOptions(1280, 720, 30).resolution, is_((1280, 720)))


class CameraFrameTest(unittest.TestCase):

    def test_data_is_immutable_bytes(self):
        frame = CameraFrame(None, bytearray(b'ab'), 'jpeg')
        assert_that(frame.data, is_(instance_of(bytes)))

    def test_data_required(self):
        assert_that(calling(CameraFrame).with_args(None, None), raises(ValueError))


class TestPatternTest(unittest.TestCase):

    def test_jpeg_markers(self):
        data = test_pattern_jpeg(1280, 720, 3)
        assert_that(data[:4], is_(b'\xff\xd8\xff\xe0'))
        assert_that(data[-2:], is_(b'\xff\xd9'))
        assert_that(data[6:11], is_(b'JFIF\x00'))
        assert_that(b'1280x720 #3' in data, is_(True))

    def test_dimensions_in_frame_header(self):
        data = test_pattern_jpeg(1920, 1080)
        sof = data.index(b'\xff\xc0')
        height, width = struct.unpack('>HH', data[sof + 5:sof + 9])
        assert_that((width, height), is_((1920, 1080)))


class ScriptedTransport(Transport):
    """ replays the scripted bytes to receive calls and records what is sent """
    scheme = 'test'

    def __init__(self, data=b''):
        self.data = bytearray(data)
        self.sent = []
        self.opened = False

    @property
    def is_open(self):
        return self.opened

    async def open(self, address):
        self.opened = True

    async def send(self, payload):
        self.check_open()
        self.sent.append(bytes(payload))
        return len(payload)

    async def receive_into(self, buffer):
        self.check_open()
        count = min(len(buffer), len(self.data), 3)     # trickle the data in small chunks
        buffer[:count] = self.data[:count]
        del self.data[:count]
        return count

    async def close(self):
        self.opened = False


class LengthPrefixedFrameReaderTest(unittest.IsolatedAsyncioTestCase):

    async def test_reads_frame(self):
        transport = ScriptedTransport(struct.pack('<I', 5) + b'hello' + b'extra')
        await transport.open(None)
        sut = LengthPrefixedFrameReader(transport)
        assert_that(await sut.read_frame(), is_(b'hello'))
        assert_that(transport.sent, is_([b'CAPTURE\r\n']))

    async def test_truncated_frame(self):
        transport = ScriptedTransport(struct.pack('<I', 10) + b'short')
        await transport.open(None)
        with self.assertRaises(TransportError):
            await LengthPrefixedFrameReader(transport).read_frame()

    async def test_oversized_frame(self):
        transport = ScriptedTransport(struct.pack('<I', 1000))
        await transport.open(None)
        with self.assertRaises(TransportError):
            await LengthPrefixedFrameReader(transport, max_frame_size=999).read_frame()


class StreamingCameraTest(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.grabbed = []

        async def grab(options, index):
            self.grabbed.append(index)
            return b'frame%d' % index

        self.grab = grab
        self.transport = SdkTransport()
        self.sut = StreamingCamera('cam', 'Camera', self.transport, EndpointAddress('sdk'), grab, max_fps=1000)
        await self.sut.connect()

    async def asyncTearDown(self):
        await self.sut.close()

    async def take(self, count, stop_event=None):
        frames = []
        async for frame in self.sut.frames(stop_event):
            frames.append(frame)
            if len(frames) == count:
                break
        return frames

    async def test_start_and_stop(self):
        await self.sut.start(FAST)
        assert_that(self.sut.status, is_(DeviceStatus.BUSY))
        assert_that(self.sut.streaming, is_(True))
        await self.sut.stop()
        assert_that(self.sut.status, is_(DeviceStatus.READY))
        await self.sut.stop()
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_start_validates_options(self):
        with self.assertRaises(ValueError):
            await self.sut.start(CameraStartOptions(800, 600, 30))
        with self.assertRaises(ValueError):
            await self.sut.start(CameraStartOptions(640, 480, 1001))
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_start_requires_ready(self):
        await self.sut.disconnect()
        with self.assertRaises(NotReadyError):
            await self.sut.start(FAST)

    async def test_start_twice(self):
        await self.sut.start(FAST)
        with self.assertRaises(NotReadyError):
            await self.sut.start(FAST)

    async def test_frames_require_streaming(self):
        with self.assertRaises(NotReadyError):
            await self.take(1)

    async def test_stream_is_lazy(self):
        await self.sut.start(FAST)
        frames = self.sut.frames()
        assert_that(self.grabbed, is_([]))
        frame = await frames.__anext__()
        assert_that(frame.data, is_(b'frame0'))
        assert_that(self.grabbed, is_([0]))
        await frames.aclose()

    async def test_frames_in_capture_order(self):
        await self.sut.start(FAST)
        frames = await self.take(3)
        assert_that([f.data for f in frames], contains_exactly(b'frame0', b'frame1', b'frame2'))
        assert_that([f.format for f in frames], is_(['jpeg'] * 3))
        assert_that(frames[0].timestamp <= frames[2].timestamp, is_(True))

    async def test_taking_one_frame_grabs_one_frame(self):
        await self.sut.start(FAST)
        assert_that(await self.take(1), has_length(1))
        assert_that(self.grabbed, is_([0]))

    async def test_stop_ends_iteration(self):
        await self.sut.start(FAST)
        frames = []
        async for frame in self.sut.frames():
            frames.append(frame)
            await self.sut.stop()
        assert_that(frames, has_length(1))
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_stop_event_ends_iteration(self):
        await self.sut.start(FAST)
        stop_event = asyncio.Event()
        frames = []
        async for frame in self.sut.frames(stop_event):
            frames.append(frame)
            if len(frames) == 2:
                stop_event.set()
        assert_that(frames, has_length(2))
        assert_that(self.sut.status, is_(DeviceStatus.BUSY))

    async def test_stop_wakes_a_paced_stream(self):
        await self.sut.start(CameraStartOptions(640, 480, 1))
        frames = []

        async def consume():
            async for frame in self.sut.frames():
                frames.append(frame)

        task = asyncio.ensure_future(consume())
        await asyncio.sleep(0.05)
        await self.sut.stop()
        await asyncio.wait_for(task, 1)
        assert_that(frames, has_length(1))

    async def test_cancelled_mid_iteration(self):
        release = asyncio.Event()
        started = asyncio.Event()

        async def slow_grab(options, index):
            if index == 1:
                started.set()
                await release.wait()
            return b'frame%d' % index

        sut = StreamingCamera('slow', 'Slow', SdkTransport(), EndpointAddress('sdk'), slow_grab, max_fps=1000)
        await sut.connect()
        await sut.start(FAST)
        frames = []

        async def consume():
            async for frame in sut.frames():
                frames.append(frame)

        task = asyncio.ensure_future(consume())
        await started.wait()
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        release.set()
        await asyncio.sleep(0.01)
        assert_that(frames, has_length(1))
        await sut.stop()
        assert_that(sut.status, is_(DeviceStatus.READY))
        await sut.close()

    async def test_deadline(self):
        never = asyncio.Event()

        async def blocked(options, index):
            await never.wait()

        sut = StreamingCamera('blocked', 'Blocked', SdkTransport(), EndpointAddress('sdk'), blocked)
        await sut.connect()
        await sut.start(CameraStartOptions(640, 480, 30))
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(sut.frames().__anext__(), 0.05)
        await sut.stop()
        assert_that(sut.status, is_(DeviceStatus.READY))
        await sut.close()

    async def test_grab_failure_is_an_error(self):
        sut = StreamingCamera('bad', 'Bad', SdkTransport(), EndpointAddress('sdk'),
                              AsyncMock(side_effect=TransportError('lost')))
        await sut.connect()
        await sut.start(CameraStartOptions(640, 480, 30))
        with self.assertRaises(TransportError):
            await sut.frames().__anext__()
        assert_that(sut.status, is_(DeviceStatus.ERROR))
        assert_that(sut.streaming, is_(False))
        await sut.close()

    async def test_snapshot(self):
        frame = await self.sut.snapshot(FAST)
        assert_that(frame.data, is_(b'frame0'))
        assert_that(self.grabbed, is_([0]))
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_snapshot_default_options(self):
        assert_that(self.sut.default_options, is_(CameraStartOptions(640, 480, 30)))
        await self.sut.snapshot()
        assert_that(self.sut.status, is_(DeviceStatus.READY))

    async def test_disconnect_ends_stream(self):
        await self.sut.start(FAST)
        frames = []
        async for frame in self.sut.frames():
            frames.append(frame)
            await self.sut.disconnect()
        assert_that(frames, has_length(1))
        assert_that(self.sut.status, is_(DeviceStatus.DISCONNECTED))

    async def test_save_frame(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'frame.jpg')
            frame = await self.sut.snapshot(FAST)
            await self.sut.save_frame(frame, path)
            assert_that(read_bytes(path), is_(b'frame0'))


class SaveFrameTest(unittest.TestCase):

    def test_requires_path(self):
        assert_that(calling(save_frame).with_args(CameraFrame(None, b'x'), ''), raises(ValueError))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
