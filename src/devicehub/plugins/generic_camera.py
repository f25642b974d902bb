"""
A network camera speaking a line command protocol: INIT and RESET commands, and CAPTURE,
which is answered with a length prefixed jpeg.
"""
from devicehub.device.camera import StreamingCamera, LengthPrefixedFrameReader
from devicehub.device.capabilities import Capability
from devicehub.plugin import DevicePlugin

PLUGIN_ID = 'generic.camera'

RESOLUTIONS = ((640, 480), (1280, 720), (1920, 1080), (2560, 1440), (3840, 2160))


def create_camera(device_id, transport, address):
    async def initialize():
        await transport.send(b'INIT\r\n')

    async def reset():
        await transport.send(b'RESET\r\n')

    return StreamingCamera(device_id, 'Generic camera', transport, address, LengthPrefixedFrameReader(transport),
                           initialize=initialize, reset=reset, supported_resolutions=RESOLUTIONS,
                           manufacturer='Generic', model='Camera')


def generic_camera_plugin():
    return DevicePlugin(PLUGIN_ID, '1.0.0', 'camera', [Capability.CAMERA], create_camera,
                        manufacturer='Generic', model='Camera', transports=('tcp',))
