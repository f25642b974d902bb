"""
Plugins for printers and scanners installed on the host. They are reached over the sdk
transport; the address names the system device, e.g. sdk://HP LaserJet 400.
The device owns the transport it is created with and closes it on disconnect.
"""
from devicehub.device.capabilities import Capability
from devicehub.device.printer import OfficePrinter
from devicehub.device.scanner import OfficeScanner
from devicehub.plugin import DevicePlugin


def system_name(address):
    return address.host or (address.path or '').lstrip('/')


def office_printer_plugin(backend, plugin_id='office.printer'):
    """ :param backend: the PlatformPrinter of this host """
    def create_printer(device_id, transport, address):
        name = system_name(address)
        return OfficePrinter(device_id, name, name, backend, transport, address)

    return DevicePlugin(plugin_id, '1.0.0', 'printer', [Capability.PRINTER], create_printer,
                        manufacturer='system', transports=('sdk',))


def office_scanner_plugin(backend, plugin_id='office.scanner'):
    """ :param backend: the PlatformScanner of this host """
    def create_scanner(device_id, transport, address):
        name = system_name(address)
        return OfficeScanner(device_id, name, name, backend, transport=transport, address=address)

    return DevicePlugin(plugin_id, '1.0.0', 'scanner', [Capability.SCANNER], create_scanner,
                        manufacturer='system', transports=('sdk',))
