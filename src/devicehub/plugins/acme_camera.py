"""
The Acme X camera. It is driven in-process through the vendor library, so it is reached
over the sdk transport; frames are rendered as test pattern jpegs.
"""
from devicehub.device.camera import StreamingCamera, test_pattern_jpeg
from devicehub.device.capabilities import Capability
from devicehub.plugin import DevicePlugin

PLUGIN_ID = 'AcmeX'
ALIASES = ('acme.camera.x',)

HELLO = b'\x01'
RESOLUTIONS = ((640, 480), (1280, 720), (1920, 1080))


def create_camera(device_id, transport, address):
    async def initialize():
        await transport.send(HELLO)

    async def grab(options, index):
        return test_pattern_jpeg(options.width, options.height, index)

    return StreamingCamera(device_id, 'Acme X', transport, address, grab, initialize=initialize,
                           supported_resolutions=RESOLUTIONS, max_fps=60, manufacturer='Acme', model='X')


def acme_camera_plugin():
    return DevicePlugin(PLUGIN_ID, '1.0.0', 'camera', [Capability.CAMERA], create_camera,
                        manufacturer='Acme', model='X', transports=('sdk',))
