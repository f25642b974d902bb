import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError, flatten_errors
from configobj.validate import Validator

from devicehub.device.capabilities import Capability
from devicehub.device.printer import PrinterProfile
from devicehub.transport.base import EndpointAddress

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'

schema_directory = os.path.dirname(__file__)

# the configuration section listing the devices of each capability
device_sections = {
    'cameras': Capability.CAMERA,
    'printers': Capability.PRINTER,
    'scanners': Capability.SCANNER,
    'gates': Capability.GATE,
}

profile_keys = ('manufacturer', 'model', 'version', 'default_codepage', 'escpos_codepage',
                'default_feed_lines', 'supports_cut', 'partial_cut')


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('devices', 'default')
    'devices.default'
    """
    return name if not flavor else name + '.' + flavor


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def load_config_file(file, must_exist=True) -> ConfigObj:
    """
    Loads a configuration file.
    :param must_exist: when True, a missing file raises IOError, otherwise it reads as empty.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, flavor=None) -> ConfigObj:
    """ loads name.flavor.cfg from the directory, or an empty config when there is no such file. """
    return load_config_file(config_filename(config_flavor(name, flavor), directory), False)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def load_config(name, directory, schema) -> ConfigObj:
    """
    Loads all the configuration files for the given name from the directory, in this order,
    later files overriding earlier ones:

    - name.default.cfg
    - name.<os>.cfg, e.g. devices.linux.cfg
    - ~/name.cfg
    - name.cfg

    The result is validated against the schema file, which also supplies default values.
    Raises ConfigObjError listing the failures if validation fails.
    """
    config = ConfigObj(configspec=schema)
    for layer in (config_flavor_file(name, directory, 'default'),
                  config_flavor_file(name, directory, os_name()),
                  load_config_file(os.path.expanduser('~/' + name + config_extension), must_exist=False),
                  config_flavor_file(name, directory)):
        config.merge(layer)

    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        failures = []
        for sections, key, error in flatten_errors(config, result):
            location = '/'.join(sections + ([key] if key is not None else []))
            failures.append("%s: %s" % (location, error or 'missing'))
        raise ConfigObjError("the config file %s failed validation: %s" % (name, ", ".join(failures)))
    return config


def load_device_config(directory, name='devices') -> ConfigObj:
    """ loads the device configuration `name` from the directory, validated against the devices schema. """
    return load_config(name, directory, config_filename(config_flavor('devices', 'schema'), schema_directory))


def endpoint(section) -> EndpointAddress:
    return EndpointAddress.parse(section['address'])


def printer_profile(section, base: PrinterProfile = None) -> PrinterProfile:
    """
    The profile described by a printer section. Keys that are not set keep their value from base.
    """
    base = base or PrinterProfile()
    overrides = {k: section[k] for k in profile_keys if section.get(k) is not None}
    return base._replace(**overrides)


def configured_devices(config):
    """ yields (device_id, capability, section) for each enabled device in the configuration. """
    for section_name, capability in device_sections.items():
        devices = config.get(section_name)
        for device_id in (devices.sections if devices is not None else ()):
            section = devices[device_id]
            if section['enabled']:
                yield device_id, capability, section
            else:
                logger.debug("skipping disabled device %s" % device_id)


async def configure_manager(manager, config):
    """
    Creates and registers each enabled device in the configuration through the manager.
    Printers that carry a profile get the configured overrides applied to it.
    :return: the devices created
    """
    devices = []
    for device_id, capability, section in configured_devices(config):
        device = await manager.connect(endpoint(section), section['plugin'], capability, device_id)
        if capability is Capability.PRINTER and hasattr(device, 'profile'):
            device.profile = printer_profile(section, device.profile)
        devices.append(device)
    logger.info("configured %d devices" % len(devices))
    return devices
