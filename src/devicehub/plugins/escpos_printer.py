from devicehub.device.capabilities import Capability
from devicehub.device.printer import EscPosPrinter, PrinterProfile
from devicehub.plugin import DevicePlugin
from devicehub.protocol.escpos import EscPosDriver

PLUGIN_ID = 'escpos.printer'

GENERIC_PROFILE = PrinterProfile('Generic', 'ESC/POS', protocol='ESC/POS')

# code table 17 is PC866 on the BK3-31 firmware
BIXOLON_BK331_PROFILE = PrinterProfile('Bixolon', 'BK3-31', protocol='ESC/POS', default_codepage=866,
                                       escpos_codepage=17, default_feed_lines=3, supports_cut=True,
                                       partial_cut=True)


def escpos_printer_plugin(profile=GENERIC_PROFILE, plugin_id=PLUGIN_ID, driver_factory=EscPosDriver):
    """ a plugin building EscPosPrinter devices that share the given profile. """
    def create_printer(device_id, transport, address):
        name = ("%s %s" % (profile.manufacturer, profile.model)).strip() or plugin_id
        return EscPosPrinter(device_id, name, transport, address, profile, driver_factory())

    return DevicePlugin(plugin_id, '1.0.0', 'printer', [Capability.PRINTER], create_printer,
                        manufacturer=profile.manufacturer, model=profile.model, transports=('tcp', 'serial'))
