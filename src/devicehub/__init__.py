"""


Device Hub

Uniform access to peripheral devices from one process.

- transport: byte channels to devices (tcp, serial, in-process vendor sdk)
- device: the device lifecycle and the camera, printer, scanner and gate capabilities
- protocol: device command sets, such as ESC/POS
- plugin, plugins: the catalog of device models and how to build them
- manager: the DeviceManager, which connects to devices by plugin and capability and keeps them
- config: device configuration files

"""
