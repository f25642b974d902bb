import logging

from devicehub.errors import UnsupportedSchemeError
from devicehub.transport.sdk_transport import SdkTransport
from devicehub.transport.serial_transport import SerialTransport
from devicehub.transport.tcp_transport import TcpTransport

logger = logging.getLogger(__name__)


class TransportFactory:
    """
    Maps a scheme to the callable that constructs a new, unopened transport for it.

    The mapping is explicit: transports are registered when the application is composed,
    there is no discovery. Each call to create() returns a new instance, so no transport
    is shared between devices.
    """

    def __init__(self, registrations=None):
        """
        :param registrations: optional mapping of scheme to transport constructor
        """
        self._constructors = {}
        for scheme, constructor in (registrations or {}).items():
            self.register(scheme, constructor)

    def register(self, scheme, constructor):
        self._constructors[scheme.lower()] = constructor
        return self

    @property
    def schemes(self):
        return tuple(sorted(self._constructors))

    def supports(self, scheme) -> bool:
        return bool(scheme) and scheme.lower() in self._constructors

    def create(self, scheme):
        """
        Constructs a transport for the scheme.
        Raises UnsupportedSchemeError if no transport is registered for it.
        """
        if not self.supports(scheme):
            raise UnsupportedSchemeError(scheme)
        transport = self._constructors[scheme.lower()]()
        logger.debug("created %s transport %s" % (scheme, transport))
        return transport


def default_transport_factory():
    """ A factory with the tcp, sdk and serial transports registered. """
    return TransportFactory({
        TcpTransport.scheme: TcpTransport,
        SdkTransport.scheme: SdkTransport,
        SerialTransport.scheme: SerialTransport,
    })
