"""
Cameras and their capture stream.

A StreamingCamera is started with CameraStartOptions and then yields frames from
frames() for as long as the consumer keeps iterating. Frames are grabbed on demand, one
at a time, so nothing is captured before iteration begins and nothing is left half
captured when the consumer stops early.
"""
import asyncio
import logging
import struct
from collections import namedtuple
from datetime import datetime, timezone

from devicehub.device.capabilities import Camera, Capability
from devicehub.device.lifecycle import DeviceOperations, DeviceStatus, ManagedDevice
from devicehub.errors import NotReadyError, TransportError
from devicehub.support.blocking import run_blocking
from devicehub.support.files import write_atomic

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTIONS = ((640, 480), (1280, 720), (1920, 1080))


class CameraFrame(namedtuple('CameraFrame', 'timestamp data format')):
    __slots__ = ()

    def __new__(cls, timestamp, data, format='jpeg'):
        if data is None:
            raise ValueError("frame data is required")
        return super().__new__(cls, timestamp, bytes(data), format)


class CameraStartOptions(namedtuple('CameraStartOptions', 'width height fps')):
    """
    >>> CameraStartOptions(1280, 720, 30).resolution
    (1280, 720)
    """
    __slots__ = ()

    def __new__(cls, width, height, fps):
        for name, value in (('width', width), ('height', height), ('fps', fps)):
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError("%s must be a positive integer, got %r" % (name, value))
        return super().__new__(cls, width, height, fps)

    @property
    def resolution(self):
        return self.width, self.height


def _segment(marker, payload):
    return struct.pack('>BBH', 0xFF, marker, len(payload) + 2) + payload


def test_pattern_jpeg(width, height, index=0) -> bytes:
    """
    A small JPEG container describing a width x height frame: SOI, JFIF APP0, a comment
    naming the frame, a baseline SOF0 header and EOI. It carries no scan data.
    """
    jfif = b'JFIF\x00' + struct.pack('>BBBHHBB', 1, 1, 0, 1, 1, 0, 0)
    comment = ("devicehub test pattern %dx%d #%d" % (width, height, index)).encode('ascii')
    sof = struct.pack('>BHHBBBB', 8, height & 0xFFFF, width & 0xFFFF, 1, 1, 0x11, 0)
    return b''.join([b'\xff\xd8', _segment(0xE0, jfif), _segment(0xFE, comment),
                     _segment(0xC0, sof), b'\xff\xd9'])


test_pattern_jpeg.__test__ = False     # not collected by pytest when imported into a test module


class LengthPrefixedFrameReader:
    """
    Requests frames from a network camera: sends the capture command, then reads a
    4 byte little-endian length followed by that many bytes of image data.
    """
    length_format = '<I'

    def __init__(self, transport, request=b'CAPTURE\r\n', max_frame_size=32 * 1024 * 1024):
        self.transport = transport
        self.request = request
        self.max_frame_size = max_frame_size

    async def read_frame(self, options=None, index=None) -> bytes:
        await self.transport.send(self.request)
        header = await self.transport.receive_exactly(struct.calcsize(self.length_format))
        size, = struct.unpack(self.length_format, header)
        if size > self.max_frame_size:
            raise TransportError("frame of %d bytes exceeds the limit of %d" % (size, self.max_frame_size))
        return await self.transport.receive_exactly(size)

    __call__ = read_frame


def save_frame(frame: CameraFrame, path):
    """ writes the frame data to path, all or nothing. """
    write_atomic(path, frame.data)


async def _pause(delay, *events):
    """ sleeps for delay seconds or until one of the events is set. """
    waiters = [asyncio.ensure_future(e.wait()) for e in events if e is not None]
    try:
        await asyncio.wait(waiters, timeout=delay, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            waiter.cancel()


class StreamingCamera(ManagedDevice, Camera):
    """
    A camera whose frames come from the grab_frame coroutine function, called as
    grab_frame(options, index) for each frame the consumer asks for.
    """
    capabilities = frozenset([Capability.CAMERA])
    device_type = 'camera'

    def __init__(self, device_id, name, transport, address, grab_frame, initialize=None, reset=None,
                 supported_resolutions=DEFAULT_RESOLUTIONS, max_fps=30, frame_format='jpeg',
                 manufacturer=None, model=None, protocol_version='1.0'):
        """
        :param supported_resolutions: the accepted (width, height) pairs. Empty accepts any.
        """
        super().__init__(device_id, name, DeviceOperations(initialize or self._initialize, reset),
                         transport, address)
        self._grab_frame = grab_frame
        self._supported_resolutions = tuple(tuple(r) for r in supported_resolutions)
        self._max_fps = max_fps
        self.frame_format = frame_format
        self.manufacturer = manufacturer
        self.model = model
        self.protocol_version = protocol_version
        self._options = None
        self._stop_requested = None
        self._index = 0

    @property
    def supported_resolutions(self):
        return self._supported_resolutions

    @property
    def max_fps(self):
        return self._max_fps

    @property
    def options(self):
        """ the options of the current stream, or None when not streaming """
        return self._options

    @property
    def streaming(self):
        return self._options is not None and self.lifecycle.status is DeviceStatus.BUSY

    @property
    def default_options(self):
        width, height = self._supported_resolutions[0] if self._supported_resolutions else (640, 480)
        return CameraStartOptions(width, height, min(self._max_fps, 30))

    async def _initialize(self):
        pass

    def validate(self, options: CameraStartOptions):
        if self._supported_resolutions and options.resolution not in self._supported_resolutions:
            raise ValueError("resolution %dx%d is not supported by %s" % (options.width, options.height, self.name))
        if options.fps > self._max_fps:
            raise ValueError("%d fps exceeds the maximum of %d for %s" % (options.fps, self._max_fps, self.name))

    async def start(self, options: CameraStartOptions):
        self.lifecycle.check_ready()
        self.validate(options)
        self.lifecycle.enter_busy("streaming %dx%d at %d fps" % options)
        self._options = options
        self._stop_requested = asyncio.Event()
        self._index = 0
        logger.info("camera %s started streaming %dx%d at %d fps" % ((self.device_id,) + tuple(options)))

    async def stop(self):
        """ ends the stream and any iteration over it. Stopping a stopped camera does nothing. """
        if self._options is None:
            return
        self._stop_requested.set()
        self._options = None
        self.lifecycle.leave_busy("stopped")
        logger.info("camera %s stopped streaming after %d frames" % (self.device_id, self._index))

    def _running(self, stop_requested, stop_event):
        return (self._stop_requested is stop_requested and not stop_requested.is_set() and self.streaming and
                (stop_event is None or not stop_event.is_set()))

    async def frames(self, stop_event=None):
        """
        Yields frames in capture order until stop() is called, stop_event is set or the
        consuming task is cancelled. A frame grabbed while the stream was being stopped
        is discarded.
        """
        if not self.streaming:
            raise NotReadyError(self.device_id, self.status)
        options = self._options
        stop_requested = self._stop_requested
        interval = 1.0 / options.fps
        loop = asyncio.get_event_loop()
        while self._running(stop_requested, stop_event):
            started = loop.time()
            try:
                data = await self._grab_frame(options, self._index)
            except Exception as e:
                logger.exception("camera %s failed to grab frame %d" % (self.device_id, self._index))
                self._options = None
                self.lifecycle.fail(e)
                raise
            if not self._running(stop_requested, stop_event):
                break
            self._index += 1
            yield CameraFrame(datetime.now(timezone.utc), data, self.frame_format)
            delay = interval - (loop.time() - started)
            if delay > 0:
                await _pause(delay, stop_requested, stop_event)

    async def snapshot(self, options=None) -> CameraFrame:
        """ captures exactly one frame, starting and stopping the stream around it. """
        await self.start(options or self.default_options)
        try:
            frames = self.frames()
            try:
                async for frame in frames:
                    return frame
            finally:
                await frames.aclose()
        finally:
            await self.stop()

    async def save_frame(self, frame: CameraFrame, path):
        await run_blocking(save_frame, frame, path)
        logger.debug("camera %s saved %d bytes to %s" % (self.device_id, len(frame.data), path))
