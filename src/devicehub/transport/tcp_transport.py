import asyncio
import logging

from devicehub.errors import TransportConnectError
from devicehub.transport.base import StreamTransport, EndpointAddress

logger = logging.getLogger(__name__)


class TcpTransport(StreamTransport):
    """
    A raw byte stream over a TCP socket. No framing is imposed; the device protocol
    riding on top writes its command bytes verbatim.
    """
    scheme = 'tcp'

    def __init__(self, connect_timeout=5, report_errors=True):
        """
        :param connect_timeout: seconds allowed for the connection handshake.
        :param report_errors: when False, connection failures are logged at debug level only.
        """
        super().__init__()
        self.connect_timeout = connect_timeout
        self._report_errors = report_errors

    async def open(self, address: EndpointAddress):
        if self.is_open:
            return
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(address.host, address.port), self.connect_timeout)
        except (OSError, asyncio.TimeoutError) as e:
            method = logger.warning if self._report_errors else logger.debug
            method("error opening socket to %s: %r" % (address, e))
            raise TransportConnectError(address, e) from e
        self._connected(address, reader, writer)
