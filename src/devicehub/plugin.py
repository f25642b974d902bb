"""
Plugins construct devices. A plugin is looked up by id in a PluginCatalog, and asked to
create a device bound to a transport the caller has chosen for the device's address.
"""
import logging
from abc import abstractmethod

from devicehub.device.capabilities import Capability
from devicehub.errors import PluginNotFoundError
from devicehub.support.mixins import ReprMixin

logger = logging.getLogger(__name__)


class DevicePlugin(ReprMixin):
    """
    Describes a device model and knows how to build it.

    :param factory: called as factory(device_id, transport, address) to build the device.
        The transport is handed over unopened; the device opens it on connect.
    :param transports: the schemes the device is usually reached over, for information.
    """

    def __init__(self, plugin_id, version, device_type, capabilities, factory,
                 manufacturer=None, model=None, transports=()):
        self.plugin_id = plugin_id
        self.version = version
        self.device_type = device_type
        self.capabilities = frozenset(Capability.parse(c) for c in capabilities)
        self.manufacturer = manufacturer
        self.model = model
        self.transports = tuple(transports)
        self._factory = factory

    def create(self, transport, address, device_id=None):
        device_id = device_id or "%s@%s" % (self.plugin_id, address)
        device = self._factory(device_id, transport, address)
        logger.debug("plugin %s created %r" % (self.plugin_id, device))
        return device


class PluginCatalog:
    """ Resolves plugin ids to plugins. """

    @abstractmethod
    def resolve(self, plugin_id) -> DevicePlugin:
        """ Raises PluginNotFoundError when no plugin has the id. """
        raise NotImplementedError


class DictPluginCatalog(PluginCatalog):
    """ A catalog held in memory, filled by register(). Ids are case sensitive. """

    def __init__(self, plugins=()):
        self._plugins = {}
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: DevicePlugin, *aliases):
        """ registers the plugin under its id and any aliases, replacing earlier registrations. """
        for plugin_id in (plugin.plugin_id,) + aliases:
            self._plugins[plugin_id] = plugin
        return self

    def resolve(self, plugin_id) -> DevicePlugin:
        try:
            return self._plugins[plugin_id]
        except KeyError:
            raise PluginNotFoundError(plugin_id) from None

    @property
    def plugin_ids(self):
        return tuple(sorted(self._plugins))

    def __contains__(self, plugin_id):
        return plugin_id in self._plugins

    def __len__(self):
        return len(self._plugins)
