"""
Builders for ZPL, the label format of Zebra printers (ZD420, ZD620, ZT231, ZT411 and
compatibles).

Each builder returns one complete ^XA ... ^XZ format. Text is always sent as UTF-8,
the encoding selected by ^CI28. Field data goes through ^FH so that the ^ and ~
command prefixes print as characters.
"""

from devicehub.protocol.escpos import BarcodeType, QrErrorCorrection, barcode_code, clamp

LABEL_WIDTH = 812       # dots across a 4 inch head at 203 dpi
DOTS_PER_LINE = 10
LINE_HEIGHT = 35

SYMBOLOGIES = {
    BarcodeType.CODE39: '^B3N',
    BarcodeType.CODE128: '^BCN',
    BarcodeType.EAN13: '^BEN',
    BarcodeType.EAN8: '^B8N',
    BarcodeType.UPC_A: '^BUN',
    BarcodeType.UPC_E: '^B9N',
    BarcodeType.ITF: '^B2N',
    BarcodeType.CODABAR: '^BKN',
}


def _format(*commands) -> bytes:
    return ('^XA\n' + ''.join(c + '\n' for c in commands) + '^XZ\n').encode('utf-8')


def field_data(text):
    """
    The ^FD command for text, hex escaped when it holds a command prefix.

    >>> field_data('A-1')
    '^FDA-1^FS'
    >>> field_data('5^2')
    '^FH^FD5_5E2^FS'
    """
    if not any(c in text for c in '^~_'):
        return '^FD%s^FS' % text
    escaped = text.replace('_', '_5F').replace('^', '_5E').replace('~', '_7E')
    return '^FH^FD%s^FS' % escaped


def build_initialize() -> bytes:
    """ ^JMA - full dot density. """
    return b'^XA^JMA^XZ\n'


def build_set_codepage(codepage=None) -> bytes:
    """ ^CI28 - UTF-8, whatever table is asked for. """
    return b'^XA^CI28^XZ\n'


def build_print_text(text) -> bytes:
    """
    A label with one field per line of text in font 0, 30 dots high.

    >>> build_print_text('a\\nb\\n')
    b'^XA\\n^FO50,50^A0N,30,30\\n^FDa^FS\\n^FO50,85^A0N,30,30\\n^FDb^FS\\n^XZ\\n'
    """
    lines = text.split('\n')
    if len(lines) > 1 and not lines[-1]:
        lines.pop()
    commands = []
    for index, line in enumerate(lines):
        commands.append('^FO50,%d^A0N,30,30' % (50 + index * LINE_HEIGHT))
        commands.append(field_data(line))
    return _format(*commands)


def build_feed_lines(lines) -> bytes:
    """ A blank label section, ten dots per line. """
    dots = clamp(lines, 1, 255) * DOTS_PER_LINE
    return ('^XA^FO0,0^GB%d,%d,1^FS^XZ\n' % (LABEL_WIDTH, dots)).encode('ascii')


def build_cut(partial) -> bytes:
    """ ^MMT tear-off mode for a partial cut, ^MMC cutter mode otherwise. """
    return b'^XA^MMT^XZ\n' if partial else b'^XA^MMC^XZ\n'


def build_raw(data) -> bytes:
    return bytes(data)


def symbology(barcode_type):
    """
    The ZPL barcode command for a type; unknown types print as Code39.

    >>> symbology('code128'), symbology(0x02), symbology('datamatrix')
    ('^BCN', '^BEN', '^B3N')
    """
    return SYMBOLOGIES[BarcodeType(barcode_code(barcode_type))]


def build_barcode(data, barcode_type=BarcodeType.CODE39, height=100, width=3) -> bytes:
    """
    ^BY sets the module width (1-10 dots), then the symbology with the height
    (1-32000 dots) and the interpretation line printed below.
    """
    return _format('^FO100,100',
                   '^BY%d' % clamp(width, 1, 10),
                   '%s,%d,Y,N,N' % (symbology(barcode_type), clamp(height, 1, 32000)),
                   field_data(data))


def build_qr(data, size=6, error_level=QrErrorCorrection.M) -> bytes:
    """
    ^BQN,2,size prints a model 2 QR code at magnification 1-10. The field data
    starts with the error correction level and A for automatic input mode.
    """
    if not isinstance(error_level, QrErrorCorrection):
        error_level = QrErrorCorrection[str(error_level).upper()]
    return _format('^FO100,100',
                   '^BQN,2,%d' % clamp(size, 1, 10),
                   field_data('%sA,%s' % (error_level.name, data)))


class ZplDriver:
    """
    Binds the ZPL builders with the method set of EscPosDriver, so an EscPosPrinter
    drives a label printer unchanged.
    """
    protocol = 'ZPL'

    def initialize(self):
        return build_initialize()

    def set_codepage(self, codepage):
        return build_set_codepage(codepage)

    def print_text(self, text, encoding='utf-8'):
        return build_print_text(text)

    def feed_lines(self, lines):
        return build_feed_lines(lines)

    def cut(self, partial):
        return build_cut(partial)

    def raw(self, data):
        return build_raw(data)

    def barcode(self, data, barcode_type=BarcodeType.CODE39, height=100, width=3):
        return build_barcode(data, barcode_type, height, width)

    def qr(self, data, size=6, error_level=QrErrorCorrection.M):
        return build_qr(data, size, error_level)
