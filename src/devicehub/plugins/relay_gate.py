from devicehub.device.capabilities import Capability
from devicehub.device.gate import RelayGate
from devicehub.plugin import DevicePlugin

PLUGIN_ID = 'relay.gate'


def create_gate(device_id, transport, address):
    return RelayGate(device_id, 'Relay gate', transport, address)


def relay_gate_plugin():
    return DevicePlugin(PLUGIN_ID, '1.0.0', 'gate', [Capability.GATE], create_gate,
                        manufacturer='generic', model='relay', transports=('tcp', 'serial'))
