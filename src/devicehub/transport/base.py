import logging
from abc import abstractmethod
from collections import namedtuple
from urllib.parse import urlsplit

from devicehub.errors import TransportError, TransportNotOpenError

logger = logging.getLogger(__name__)

# schemes whose endpoints are addressed by host and port, or by a device path
network_schemes = frozenset(['tcp'])
path_schemes = frozenset(['serial'])


class EndpointAddress(namedtuple('EndpointAddress', 'scheme host port path')):
    """
    Describes how to reach a device: the transport scheme plus a host/port or a path.

    The scheme is stored in lower case. Network schemes require a host and port,
    path schemes require a path. Other schemes (e.g. an in-process sdk) need neither.

    >>> EndpointAddress('TCP', '10.0.0.5', 9100).key()
    'tcp://10.0.0.5:9100'
    >>> EndpointAddress('serial', path='/dev/ttyUSB0').key()
    'serial:///dev/ttyUSB0'
    """
    __slots__ = ()

    def __new__(cls, scheme, host=None, port=None, path=None):
        if not scheme:
            raise ValueError("endpoint scheme must not be empty")
        scheme = scheme.lower()
        if port is not None:
            port = int(port)
        if scheme in network_schemes:
            if not host:
                raise ValueError("%s endpoint requires a host" % scheme)
            if port is None or not 0 < port < 65536:
                raise ValueError("%s endpoint requires a port between 1 and 65535, got %s" % (scheme, port))
        if scheme in path_schemes and not path:
            raise ValueError("%s endpoint requires a path" % scheme)
        return super().__new__(cls, scheme, host, port, path)

    @classmethod
    def parse(cls, uri):
        """
        Parses the uri form of an address.

        >>> EndpointAddress.parse('tcp://printer.local:9100')
        EndpointAddress(scheme='tcp', host='printer.local', port=9100, path=None)
        >>> EndpointAddress.parse('serial://COM3').path
        'COM3'
        >>> EndpointAddress.parse('sdk://')
        EndpointAddress(scheme='sdk', host=None, port=None, path=None)
        >>> EndpointAddress.parse('sdk://Office Printer').host
        'Office Printer'
        """
        parts = urlsplit(uri)
        scheme = parts.scheme.lower()
        if scheme in path_schemes:
            return cls(scheme, path=(parts.netloc + parts.path) or None)
        if scheme in network_schemes:
            return cls(scheme, parts.hostname, parts.port, parts.path or None)
        return cls(scheme, parts.netloc or None, path=parts.path or None)

    def key(self):
        if self.host is not None:
            location = self.host if self.port is None else "%s:%d" % (self.host, self.port)
        else:
            location = ''
        return "%s://%s%s" % (self.scheme, location, self.path or '')

    def __str__(self):
        return self.key()


class Transport:
    """
    A byte-level connection to a device: open, send, receive, close.

    A transport is exclusively owned by the device it was created for. Sending or
    receiving before open(), or after close(), raises TransportNotOpenError.
    close() may be called any number of times. The transport is an async context
    manager that closes itself on exit.
    """
    scheme = None

    @property
    @abstractmethod
    def is_open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def open(self, address: EndpointAddress):
        """
        Opens the connection to the address. Opening an open transport does nothing.
        Raises TransportConnectError if the endpoint cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    async def send(self, payload) -> int:
        """ writes the payload and returns the number of bytes written. """
        raise NotImplementedError

    @abstractmethod
    async def receive_into(self, buffer) -> int:
        """ reads available data into the writable buffer, returning the number of bytes read.
            0 means the peer has no more data. """
        raise NotImplementedError

    @abstractmethod
    async def close(self):
        raise NotImplementedError

    async def receive(self, max_bytes=4096) -> bytes:
        buffer = bytearray(max_bytes)
        count = await self.receive_into(buffer)
        return bytes(buffer[:count])

    async def receive_exactly(self, size) -> bytes:
        """
        Reads exactly size bytes.
        Raises TransportError if the stream ends first.
        """
        buffer = bytearray(size)
        view = memoryview(buffer)
        received = 0
        while received < size:
            count = await self.receive_into(view[received:])
            if not count:
                raise TransportError("%s stream ended after %d of %d bytes" % (self.scheme, received, size))
            received += count
        return bytes(buffer)

    def check_open(self):
        if not self.is_open:
            raise TransportNotOpenError(self.scheme)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class StreamTransport(Transport):
    """
    A transport over an asyncio StreamReader/StreamWriter pair. Subclasses open the pair
    in open() and hand it to _connected().

    Data that arrives while no receive is pending stays buffered in the reader, so a
    cancelled receive loses nothing.
    """

    def __init__(self):
        self._reader = None
        self._writer = None
        self.address = None

    @property
    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    def _connected(self, address, reader, writer):
        self.address = address
        self._reader, self._writer = reader, writer
        logger.info("opened %s transport to %s" % (self.scheme, address))

    async def send(self, payload) -> int:
        self.check_open()
        self._writer.write(payload)
        await self._writer.drain()
        return len(payload)

    async def receive_into(self, buffer) -> int:
        self.check_open()
        view = memoryview(buffer)
        data = await self._reader.read(len(view))
        view[:len(data)] = data
        return len(data)

    async def close(self):
        writer = self._writer
        self._reader = self._writer = None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass    # the peer may already have closed the connection
        logger.info("closed %s transport to %s" % (self.scheme, self.address))
