"""
The plugins bundled with devicehub.

- AcmeX (alias acme.camera.x): Acme X camera over the sdk transport.
- generic.camera: network camera with length prefixed frames.
- escpos.printer: generic ESC/POS receipt printer.
- bixolon.bk331: Bixolon BK3-31 receipt printer.
- zebra.zpl: Zebra label printer speaking ZPL.
- relay.gate: relay controlled gate.

The office printer and scanner plugins need a platform backend, so they are built with
office_printer_plugin() and office_scanner_plugin() rather than listed here.
"""
from devicehub.plugin import DictPluginCatalog
from devicehub.plugins import acme_camera
from devicehub.plugins.acme_camera import acme_camera_plugin
from devicehub.plugins.escpos_printer import escpos_printer_plugin, BIXOLON_BK331_PROFILE
from devicehub.plugins.generic_camera import generic_camera_plugin
from devicehub.plugins.office import office_printer_plugin, office_scanner_plugin
from devicehub.plugins.relay_gate import relay_gate_plugin
from devicehub.plugins.zebra_printer import zebra_printer_plugin


def builtin_catalog() -> DictPluginCatalog:
    catalog = DictPluginCatalog()
    catalog.register(acme_camera_plugin(), *acme_camera.ALIASES)
    catalog.register(generic_camera_plugin())
    catalog.register(escpos_printer_plugin())
    catalog.register(escpos_printer_plugin(BIXOLON_BK331_PROFILE, 'bixolon.bk331'))
    catalog.register(zebra_printer_plugin())
    catalog.register(relay_gate_plugin())
    return catalog


__all__ = ['builtin_catalog', 'acme_camera_plugin', 'generic_camera_plugin', 'escpos_printer_plugin',
           'relay_gate_plugin', 'zebra_printer_plugin', 'office_printer_plugin', 'office_scanner_plugin']
