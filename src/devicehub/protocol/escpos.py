"""
Builders for ESC/POS receipt printer command sequences.

Every function is pure and returns the exact bytes the printer expects. Numeric
parameters that the command set limits to a range are clamped into that range,
never rejected, since a printer given an out of range byte misprints or stalls.
Single byte parameters without a documented range are truncated to a byte.
"""

from enum import Enum

ESC = 0x1B
GS = 0x1D

# GS ( k  - the 2D symbol function prefix, followed by pL pH cn fn [parameters]
QR_FUNCTION = bytes([GS, 0x28, 0x6B])
QR_SYMBOL = 0x31

HRI_BELOW = 0x02


class BarcodeType(Enum):
    """ Symbologies for GS k, valued by the code sent to the printer. """
    UPC_A = 0x00
    UPC_E = 0x01
    EAN13 = 0x02
    EAN8 = 0x03
    CODE39 = 0x04
    ITF = 0x05
    CODABAR = 0x06
    CODE128 = 0x49


class QrErrorCorrection(Enum):
    L = 0x30    # 7%
    M = 0x31    # 15%
    Q = 0x32    # 25%
    H = 0x33    # 30%


def clamp(value, low, high):
    """
    >>> clamp(0, 1, 255), clamp(1000, 1, 255), clamp(42, 1, 255)
    (1, 255, 42)
    """
    return max(low, min(high, int(value)))


def _byte(value):
    return int(value) & 0xFF


def barcode_code(barcode_type):
    """
    The GS k code for a barcode type. Unknown types print as Code39.

    >>> barcode_code(BarcodeType.CODE128)
    73
    >>> barcode_code(0x49)
    73
    >>> barcode_code('pdf417')
    4
    """
    if isinstance(barcode_type, BarcodeType):
        return barcode_type.value
    if isinstance(barcode_type, int):
        try:
            return BarcodeType(barcode_type).value
        except ValueError:
            return BarcodeType.CODE39.value
    try:
        return BarcodeType[str(barcode_type).upper()].value
    except KeyError:
        return BarcodeType.CODE39.value


def build_initialize() -> bytes:
    """ ESC @ - clears the print buffer and resets the printer modes. """
    return bytes([ESC, 0x40])


def build_set_codepage(codepage) -> bytes:
    """ ESC t n - selects character code table n. """
    return bytes([ESC, 0x74, _byte(codepage)])


def build_print_text(text, encoding='ascii') -> bytes:
    """
    Encodes text for printing, with line feeds turned into CR LF.
    Characters the encoding cannot represent print as '?'.

    >>> build_print_text('a\\nb')
    b'a\\r\\nb'
    """
    return text.replace('\n', '\r\n').encode(encoding, errors='replace')


def build_feed_lines(lines) -> bytes:
    """ ESC d n - prints the buffer and feeds n lines. """
    return bytes([ESC, 0x64, _byte(lines)])


def build_cut(partial) -> bytes:
    """ GS V m - full cut (m=0) or partial cut (m=1). """
    return bytes([GS, 0x56, 0x01 if partial else 0x00])


def build_raw(data) -> bytes:
    return bytes(data)


def build_barcode(data, barcode_type=BarcodeType.CODE39, height=100, width=3) -> bytes:
    """
    Prints a barcode with the human readable text below it.

    GS h n (height 1-255 dots), GS w n (module width 2-6), GS H 2, then GS k m n d1..dn.
    """
    payload = data.encode('ascii', errors='replace')
    return b''.join([
        bytes([GS, 0x68, clamp(height, 1, 255)]),
        bytes([GS, 0x77, clamp(width, 2, 6)]),
        bytes([GS, 0x48, HRI_BELOW]),
        bytes([GS, 0x6B, barcode_code(barcode_type), _byte(len(payload))]),
        payload,
    ])


def _qr_function(fn, *parameters):
    size = len(parameters) + 2
    return QR_FUNCTION + bytes([size & 0xFF, (size >> 8) & 0xFF, QR_SYMBOL, fn]) + bytes(parameters)


def build_qr(data, size=6, error_level=QrErrorCorrection.M) -> bytes:
    """
    Stores and prints a model 2 QR code holding the UTF-8 encoding of data.

    The sequence is: select model 2 (fn 65), module size 1-16 (fn 67),
    error correction level (fn 69), store the data (fn 80) and print it (fn 81).
    """
    payload = data.encode('utf-8')
    store_length = len(payload) + 3
    level = error_level.value if isinstance(error_level, QrErrorCorrection) else _byte(error_level)
    return b''.join([
        QR_FUNCTION + bytes([0x04, 0x00, QR_SYMBOL, 0x41, 0x32, 0x00]),
        _qr_function(0x43, clamp(size, 1, 16)),
        _qr_function(0x45, level),
        QR_FUNCTION + bytes([store_length & 0xFF, (store_length >> 8) & 0xFF, QR_SYMBOL, 0x50, 0x30]),
        payload,
        _qr_function(0x51, 0x30),
    ])


class EscPosDriver:
    """
    Binds the ESC/POS builders for a printer device. A vendor dialect overrides
    the commands that differ from the common set.
    """
    protocol = 'ESC/POS'

    def initialize(self):
        return build_initialize()

    def set_codepage(self, codepage):
        return build_set_codepage(codepage)

    def print_text(self, text, encoding='ascii'):
        return build_print_text(text, encoding)

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
