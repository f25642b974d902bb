import logging

from devicehub.device.capabilities import Gate, Capability
from devicehub.device.lifecycle import DeviceOperations, ManagedDevice

logger = logging.getLogger(__name__)


class RelayGate(ManagedDevice, Gate):
    """
    A gate or barrier behind a relay controller that accepts line based ASCII commands.
    """
    capabilities = frozenset([Capability.GATE])
    device_type = 'gate'
    manufacturer = 'generic'
    model = 'relay'

    ping = b'PING\r\n'
    open_command = b'OPEN\r\n'
    close_command = b'CLOSE\r\n'

    def __init__(self, device_id, name, transport, address):
        super().__init__(device_id, name, DeviceOperations(self._initialize), transport, address)

    async def _initialize(self):
        await self.transport.send(self.ping)

    async def open(self):
        async with self.lifecycle.busy("opening"):
            await self.transport.send(self.open_command)
        logger.info("gate %s opened" % self.device_id)

    async def close_gate(self):
        async with self.lifecycle.busy("closing"):
            await self.transport.send(self.close_command)
        logger.info("gate %s closed" % self.device_id)
