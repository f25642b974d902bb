from devicehub.device.printer import PrinterProfile
from devicehub.plugins.escpos_printer import escpos_printer_plugin
from devicehub.protocol.zpl import ZplDriver

PLUGIN_ID = 'zebra.zpl'

# code page 65001 keeps text in UTF-8, the encoding ZplDriver selects with ^CI28
ZEBRA_PROFILE = PrinterProfile('Zebra', 'ZPL', protocol='ZPL', default_codepage=65001, default_feed_lines=1)


def zebra_printer_plugin(profile=ZEBRA_PROFILE, plugin_id=PLUGIN_ID):
    """ a plugin building label printers that speak ZPL over tcp (port 9100) or serial. """
    return escpos_printer_plugin(profile, plugin_id, ZplDriver)
