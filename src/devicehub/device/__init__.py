"""
Devices and the capabilities they provide.

- capabilities: the Capability tags and the Camera, Printer, Scanner and Gate interfaces.
- lifecycle: the connect/ready/busy/error state machine shared by all devices.
- camera, printer, scanner, gate: the concrete devices.
"""
from devicehub.device.capabilities import Capability, Device, Camera, Printer, Scanner, Gate, implements
from devicehub.device.lifecycle import DeviceStatus, DeviceStatusChangedEvent, DeviceOperations, DeviceInfo, \
    DeviceLifecycle, ManagedDevice

__all__ = ['Capability', 'Device', 'Camera', 'Printer', 'Scanner', 'Gate', 'implements',
           'DeviceStatus', 'DeviceStatusChangedEvent', 'DeviceOperations', 'DeviceInfo',
           'DeviceLifecycle', 'ManagedDevice']
