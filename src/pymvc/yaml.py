"""
YAML loading for pymvc configuration files.

Besides plain YAML, values can be taken from the environment:
    STATE_ENCRYPTION_KEY: !ENV LIBRARY_STATE_KEY
    ERROR_URL: !ENV [LIBRARY_ERROR_URL, "https://library.example.com/error"]
    PROPERTIES:
      owner: !ENVFILE LIBRARY_OWNER_FILE
"""
import os

import yaml
from yaml import YAMLError


__all__ = ["load", "MVCLoader", "YAMLError", "TAG_ENV", "TAG_ENVFILE"]

TAG_ENV = "!ENV"
TAG_ENVFILE = "!ENVFILE"


def _environment_reference(loader, node):
    """
    :type loader: yaml.SafeLoader
    :type node: yaml.Node
    :rtype: (str, str | None)
    :return: the variable name and its default value, if the tag gave one
    """
    if isinstance(node, yaml.SequenceNode):
        values = loader.construct_sequence(node)
        if len(values) != 2:
            raise YAMLError("{tag} at {mark} takes a variable name and a default".format(
                tag=node.tag, mark=node.start_mark
            ))
        return str(values[0]), str(values[1])
    return loader.construct_scalar(node), None


def _constructor_env_variables(loader, node):
    name, default = _environment_reference(loader, node)
    value = os.environ.get(name, default)
    if value is None:
        raise YAMLError("Environment variable {name} referenced at {mark} is not set".format(
            name=name, mark=node.start_mark
        ))
    return value


def _constructor_envfile_variables(loader, node):
    name, default = _environment_reference(loader, node)
    filepath = os.environ.get(name, default)
    try:
        with open(filepath, "r") as fd:
            return fd.read()
    except (TypeError, IOError) as e:
        raise YAMLError("Cannot read file for {name} referenced at {mark}: {path}".format(
            name=name, mark=node.start_mark, path=filepath
        )) from e


class MVCLoader(yaml.SafeLoader):
    """
    A safe loader that also resolves the !ENV and !ENVFILE tags
    """


MVCLoader.add_constructor(TAG_ENV, _constructor_env_variables)
MVCLoader.add_constructor(TAG_ENVFILE, _constructor_envfile_variables)


def load(stream):
    """
    :type stream: str | IO
    :rtype: Any
    :raise YAMLError: if the YAML is invalid or a referenced variable is missing
    """
    return yaml.load(stream, Loader=MVCLoader)
