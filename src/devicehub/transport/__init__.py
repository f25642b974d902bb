"""
Transports move raw bytes between devicehub and a device.

- EndpointAddress: the scheme plus host/port or path of a device.
- Transport: open/send/receive/close contract.
- TcpTransport, SerialTransport, SdkTransport: the concrete transports.
- TransportFactory: creates a transport for a scheme.
"""

from devicehub.transport.base import EndpointAddress, Transport
from devicehub.transport.factory import TransportFactory, default_transport_factory
from devicehub.transport.sdk_transport import SdkTransport
from devicehub.transport.serial_transport import SerialTransport
from devicehub.transport.tcp_transport import TcpTransport

__all__ = ['EndpointAddress', 'Transport', 'TransportFactory', 'default_transport_factory',
           'SdkTransport', 'SerialTransport', 'TcpTransport']
