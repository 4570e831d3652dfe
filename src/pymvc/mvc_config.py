"""
This module contains all needed to load, verify and read configurations for a pymvc application.
"""
import logging
import os
import os.path

from pymvc.exception import MVCConfigurationError
from pymvc.yaml import load as yaml_load
from pymvc.yaml import YAMLError


logger = logging.getLogger(__name__)


class MVCConfig(object):
    """
    A configuration class for a pymvc application. Verifies that the given config holds all the
    necessary parameters and exposes the application-defined properties.
    """
    environment_keys = ["CONTEXT_PATH", "APPLICATION_PATH", "ERROR_URL"]
    sensitive_dict_keys = ["STATE_ENCRYPTION_KEY"]
    mandatory_dict_keys = ["CONTROLLERS"]
    csrf_settings = {
        "PROTECTION": ["explicit", "implicit", "off"],
        "SCOPE": ["session", "request"],
    }

    def __init__(self, config):
        """
        Reads a given config and builds the MVCConfig.

        :type config: str | dict
        :rtype: pymvc.mvc_config.MVCConfig

        :param config: Can be a file path, a YAML string or a dictionary
        :return: A verified MVCConfig
        """
        parsers = [self._load_dict, self._load_yaml]
        for parser in parsers:
            self._config = parser(config)
            if self._config is not None:
                break

        self._verify_dict(self._config)

        # Load sensitive config from environment variables
        for key in MVCConfig.sensitive_dict_keys:
            val = os.environ.get("PYMVC_{key}".format(key=key))
            if val:
                self._config[key] = val

        for key in MVCConfig.environment_keys:
            val = os.environ.get("PYMVC_{key}".format(key=key))
            if val is not None:
                self._config[key] = val

        controller_configs = []
        for controller_config in self._config["CONTROLLERS"]:
            for parser in parsers:
                loaded = parser(controller_config)
                if isinstance(loaded, dict):
                    controller_configs.append(loaded)
                    break
            else:
                raise MVCConfigurationError("Failed to load controller config '{}'".format(controller_config))
        self._config["CONTROLLERS"] = controller_configs

        self._verify_csrf(self._config.get("CSRF") or {})

    def _verify_dict(self, conf):
        """
        Check that the configuration contains all necessary keys.

        :type conf: dict
        :rtype: None
        :raise MVCConfigurationError: if the configuration is incorrect

        :param conf: config to verify
        :return: None
        """
        if not conf or not isinstance(conf, dict):
            raise MVCConfigurationError("Missing configuration or unknown format")

        for key in MVCConfig.mandatory_dict_keys:
            if key not in conf:
                raise MVCConfigurationError("Missing key '%s' in config" % key)

        if not isinstance(conf["CONTROLLERS"], list):
            raise MVCConfigurationError("'CONTROLLERS' must be a list")

    def _verify_csrf(self, csrf_conf):
        if not isinstance(csrf_conf, dict):
            raise MVCConfigurationError("'CSRF' must be a mapping")
        for key, allowed in MVCConfig.csrf_settings.items():
            value = csrf_conf.get(key)
            if value is not None and str(value).lower() not in allowed:
                raise MVCConfigurationError(
                    "Invalid value '{value}' for 'CSRF.{key}'. Value should be one of: {allowed}".format(
                        value=value, key=key, allowed=allowed
                    )
                )

    def __getitem__(self, item):
        """
        Returns data bound to the key 'item'.

        :type item: str
        :rtype object

        :param item: key to data
        :return: data bound to key 'item'
        """
        return self._config[item]

    def __setitem__(self, key, value):
        self._config[key] = value

    def __contains__(self, key):
        return key in self._config

    def get(self, item, default=None):
        return self._config.get(item, default)

    @property
    def properties(self):
        """
        :rtype: dict[str, Any]
        :return: a copy of the application-defined properties
        """
        return dict(self._config.get("PROPERTIES") or {})

    def get_property(self, name, default=None):
        """
        Returns an application-defined property from the PROPERTIES section.

        :type name: str
        :param name: property name
        :param default: value returned when the property is not set
        """
        return (self._config.get("PROPERTIES") or {}).get(name, default)

    def _load_dict(self, config):
        """
        Load config from dict

        :type config: dict
        :rtype: dict

        :param config: config to load
        :return: Loaded config
        """
        if isinstance(config, dict):
            return config

        return None

    def _load_yaml(self, config_file):
        """
        Load config from yaml file or string

        :type config_file: str
        :rtype: dict

        :param config_file: config to load. Can be file path or yaml string
        :return: Loaded config
        """
        if not isinstance(config_file, str):
            return None

        try:
            if os.path.isfile(config_file):
                with open(os.path.abspath(config_file)) as f:
                    return yaml_load(f.read())
            loaded = yaml_load(config_file)
        except YAMLError as exc:
            logger.error("Could not parse config as YAML: {}".format(exc))
            if hasattr(exc, 'problem_mark'):
                mark = exc.problem_mark
                logger.error("Error position: ({line}:{column})".format(line=mark.line + 1, column=mark.column + 1))
        except IOError as e:
            logger.error("Could not open config file: {}".format(e))
        else:
            if isinstance(loaded, dict):
                return loaded
            logger.error("Config is neither a readable file nor a YAML mapping: {}".format(config_file))

        return None
