"""
The errors raised by devicehub. Each error carries the identifier it concerns
(scheme, plugin id, device id) as an attribute as well as in its message.
"""


class DeviceHubError(Exception):
    """ Base class for all devicehub errors. """


class TransportError(DeviceHubError):
    """ Indicates an error condition with a transport. """


class TransportConnectError(TransportError, ConnectionError):
    """ The transport could not reach its endpoint. """

    def __init__(self, endpoint, reason=None):
        super().__init__("unable to open %s%s" % (endpoint, ": %s" % reason if reason else ""))
        self.endpoint = endpoint


class TransportNotOpenError(TransportError):
    """ Data was sent or received on a transport that is not open. """

    def __init__(self, scheme):
        super().__init__("%s transport is not open" % scheme)
        self.scheme = scheme


class UnsupportedSchemeError(DeviceHubError):
    """ No transport is registered for the scheme. """

    def __init__(self, scheme):
        super().__init__("unsupported transport scheme '%s'" % scheme)
        self.scheme = scheme


class PluginNotFoundError(DeviceHubError, KeyError):
    """ The plugin catalog has no plugin with the requested id. """

    def __init__(self, plugin_id):
        super().__init__("plugin '%s' not found" % plugin_id)
        self.plugin_id = plugin_id

    def __str__(self):
        return self.args[0]


class CapabilityMismatchError(DeviceHubError):
    """ The device built by a plugin does not provide the requested capability. """

    def __init__(self, plugin_id, capability, provided=()):
        super().__init__("plugin '%s' does not provide a %s device (provides: %s)" %
                         (plugin_id, capability, ", ".join(sorted(str(c) for c in provided)) or "nothing"))
        self.plugin_id = plugin_id
        self.capability = capability
        self.provided = frozenset(provided)


class DeviceError(DeviceHubError):
    """ Indicates an error condition with a device. """

    def __init__(self, device_id, message):
        super().__init__(message)
        self.device_id = device_id


class NotReadyError(DeviceError):
    """ An operation that requires the Ready state was invoked in another state. """

    def __init__(self, device_id, status):
        super().__init__(device_id, "device '%s' is not ready (status: %s)" % (device_id, status))
        self.status = status


class DeviceUnavailableError(DeviceError):
    """ The platform backend reports that the named device is not present. """

    def __init__(self, device_id, name):
        super().__init__(device_id, "device '%s' is not available on this host (name: '%s')" % (device_id, name))
        self.name = name
