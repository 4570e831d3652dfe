"""
Tagged parameter values used when building URIs.

Only a fixed set of value types is accepted as path, query or matrix parameter. Each kind has
one textual form, so the same value always ends up as the same URI text.
"""
import enum
import uuid
from typing import Any, NamedTuple

from pymvc.exception import MVCInvalidArgumentError


class ParamKind(enum.Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    UUID = "uuid"


class ParamValue(NamedTuple):
    kind: ParamKind
    value: Any

    @classmethod
    def of(cls, obj: Any, name: str = None) -> "ParamValue":
        """
        Wraps a plain python value.

        :param obj: the value to wrap
        :param name: parameter name, only used in error messages
        :raise MVCInvalidArgumentError: if the value is None or of an unsupported type
        """
        label = "'{}'".format(name) if name is not None else "value"
        if obj is None:
            raise MVCInvalidArgumentError("Parameter {} must not be None".format(label))
        if isinstance(obj, ParamValue):
            return obj
        if isinstance(obj, enum.Enum):
            return cls.of(obj.value, name)
        # bool before int, bool is a subclass of int
        if isinstance(obj, bool):
            return cls(ParamKind.BOOLEAN, obj)
        if isinstance(obj, int):
            return cls(ParamKind.INTEGER, obj)
        if isinstance(obj, float):
            return cls(ParamKind.FLOAT, obj)
        if isinstance(obj, str):
            return cls(ParamKind.STRING, obj)
        if isinstance(obj, uuid.UUID):
            return cls(ParamKind.UUID, obj)
        raise MVCInvalidArgumentError(
            "Parameter {} has unsupported type {}".format(label, type(obj).__name__)
        )

    def to_text(self) -> str:
        if self.kind is ParamKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is ParamKind.INTEGER:
            return str(int(self.value))
        if self.kind is ParamKind.FLOAT:
            return repr(float(self.value))
        return str(self.value)


def param_text(obj: Any, name: str = None) -> str:
    """
    Shortcut for ``ParamValue.of(obj, name).to_text()``.
    """
    return ParamValue.of(obj, name).to_text()


def param_texts(obj: Any, name: str) -> list:
    """
    Converts a query or matrix parameter value, which may be a list of values, to texts.

    :raise MVCInvalidArgumentError: if any of the values is None or unsupported
    """
    if isinstance(obj, (list, tuple)):
        return [param_text(item, name) for item in obj]
    return [param_text(obj, name)]
