"""
Some help functions to load the controllers of a pymvc application
"""
import json
import logging
import sys
from contextlib import contextmanager
from pydoc import locate

from .controller import Controller
from .exception import MVCConfigurationError

logger = logging.getLogger(__name__)


@contextmanager
def prepend_to_import_path(import_paths):
    import_paths = import_paths or []
    for p in reversed(import_paths):  # insert the specified plugin paths in the same order
        sys.path.insert(0, p)
    try:
        yield
    finally:
        del sys.path[0:len(import_paths)]  # restore sys.path


def controller_filter(cls):
    """
    Verify that the type is a proper subclass of Controller.

    :type cls: type
    :rtype: bool

    :param cls: A class object
    :return: True if match, else false
    """
    return isinstance(cls, type) and issubclass(cls, Controller) and cls != Controller


def _load_controller_class(plugin_config):
    if "module" not in plugin_config:
        raise MVCConfigurationError("Missing mandatory controller configuration parameter: 'module'")

    module_class = locate(plugin_config["module"])
    if not module_class:
        raise MVCConfigurationError("Can't find module '%s'" % plugin_config["module"])
    if not controller_filter(module_class):
        raise MVCConfigurationError("'%s' is not a Controller" % plugin_config["module"])

    return module_class


def load_controllers(config):
    """
    Load all controllers specified in the config

    :type config: pymvc.mvc_config.MVCConfig
    :rtype: list[pymvc.controller.Controller]

    :param config: The configuration of the application
    :return: A list of controller instances, in configuration order
    """
    controllers = []
    with prepend_to_import_path(config.get("CUSTOM_PLUGIN_MODULE_PATHS")):
        for plugin_config in config["CONTROLLERS"]:
            try:
                module_class = _load_controller_class(plugin_config)
            except MVCConfigurationError as e:
                raise MVCConfigurationError("Configuration error in {}".format(json.dumps(plugin_config))) from e

            name = plugin_config.get("name") or module_class.__name__
            instance = module_class(name=name, config=plugin_config.get("config"))
            controllers.append(instance)

    logger.info("Loaded controllers: %s" % [controller.name for controller in controllers])
    return controllers


def register_controllers(registry, controllers):
    """
    Registers the routes of all controllers and freezes the registry.

    :type registry: pymvc.routing.RouteRegistry
    :type controllers: list[pymvc.controller.Controller]
    :rtype: pymvc.routing.RouteRegistry
    """
    for controller in controllers:
        routes = registry.register_controller(controller)
        logger.debug("Controller {} registered {}".format(controller.name, routes))
    registry.freeze()
    return registry
