"""
Implements a transport over a serial port.
"""

import logging

import serial
import serial_asyncio

from devicehub.errors import TransportConnectError
from devicehub.transport.base import StreamTransport, EndpointAddress

logger = logging.getLogger(__name__)


class SerialTransport(StreamTransport):
    """
    A transport over a serial port, read and written through pyserial-asyncio streams.
    """
    scheme = 'serial'

    def __init__(self, baudrate=115200, open_connection=serial_asyncio.open_serial_connection):
        """
        :param baudrate: the line speed
        :param open_connection: called as open_connection(url=, baudrate=) and returns the
            (reader, writer) pair for the port
        """
        super().__init__()
        self.baudrate = baudrate
        self._open_connection = open_connection

    async def open(self, address: EndpointAddress):
        if self.is_open:
            return
        try:
            reader, writer = await self._open_connection(url=address.path, baudrate=self.baudrate)
        except (serial.SerialException, OSError) as e:
            logger.warning("error opening serial port %s: %s" % (address.path, e))
            raise TransportConnectError(address, e) from e
        self._connected(address, reader, writer)
