"""
Builds URIs for registered controller methods.
"""
import logging
from collections.abc import Mapping

from pymvc.exception import MVCInvalidArgumentError
from pymvc.params import param_text
from pymvc.params import param_texts
from pymvc.uri_template import encode_query_component


logger = logging.getLogger(__name__)


def _path_texts_from_positional(route, values):
    variables = route.template.variables
    if len(values) != len(variables):
        raise MVCInvalidArgumentError(
            "'{identifier}' expects {expected} path parameter(s) {names}, got {actual}".format(
                identifier=route.identifier, expected=len(variables), names=variables, actual=len(values)
            )
        )
    texts = {}
    for position, (name, value) in enumerate(zip(variables, values)):
        if value is None:
            raise MVCInvalidArgumentError(
                "Path parameter '{}' at position {} of '{}' must not be None".format(name, position, route.identifier)
            )
        texts[name] = param_text(value, name)
    return texts


def _path_texts_from_named(route, values):
    missing = [name for name in route.template.variables if name not in values]
    if missing:
        raise MVCInvalidArgumentError(
            "Missing path parameter(s) {} for '{}'".format(missing, route.identifier)
        )
    texts = {}
    for name in route.template.variables:
        value = values[name]
        if isinstance(value, (list, tuple)):
            if len(value) != 1:
                raise MVCInvalidArgumentError(
                    "Path parameter '{}' of '{}' takes exactly one value, got {}".format(
                        name, route.identifier, len(value)
                    )
                )
            value = value[0]
        texts[name] = param_text(value, name)
    return texts


def _optional_texts(names, values):
    return {name: param_texts(values[name], name) for name in names if name in values}


def render_uri(route, base_path, path_texts, query_texts=None, matrix_texts=None):
    """
    Assembles the final URI.

    Matrix parameters are appended to the last path segment, then the query string follows.
    Both keep the order the route declared the parameters in.

    :type route: pymvc.routing.Route
    :type base_path: str
    :type path_texts: dict[str, str]
    :type query_texts: dict[str, list[str]]
    :type matrix_texts: dict[str, list[str]]
    :rtype: str
    """
    uri = base_path + route.template.expand(path_texts)

    matrix_texts = matrix_texts or {}
    for name in route.matrix_params:
        for value in matrix_texts.get(name, []):
            uri += ";{}={}".format(encode_query_component(name), encode_query_component(value))

    query_texts = query_texts or {}
    query = [
        "{}={}".format(encode_query_component(name), encode_query_component(value))
        for name in route.query_params
        for value in query_texts.get(name, [])
    ]
    if query:
        uri += "?" + "&".join(query)
    return uri


def build_positional(route, base_path, values):
    """
    Builds the URI of a route, assigning the values to the path parameters in template order.

    :type route: pymvc.routing.Route
    :type base_path: str
    :type values: Sequence[Any]
    :rtype: str
    :raise MVCInvalidArgumentError: on a count mismatch or a None value
    """
    return render_uri(route, base_path, _path_texts_from_positional(route, list(values)))


def build_named(route, base_path, values):
    """
    Builds the URI of a route from a mapping of path, query and matrix parameters.
    All path parameters are required, query and matrix parameters are optional and names the
    route does not declare are ignored.

    :type route: pymvc.routing.Route
    :type base_path: str
    :type values: Mapping[str, Any]
    :rtype: str
    :raise MVCInvalidArgumentError: on a missing path parameter or a None value
    """
    return render_uri(
        route,
        base_path,
        _path_texts_from_named(route, values),
        _optional_texts(route.query_params, values),
        _optional_texts(route.matrix_params, values),
    )


class MvcUriBuilder(object):
    """
    Builds an URI for a controller method step by step.

    Example:
        uri = mvc.uri_builder("BookController#show").param("id", 42).param("page", 2).build()
    """

    def __init__(self, route, base_path):
        """
        :type route: pymvc.routing.Route
        :type base_path: str
        """
        self._route = route
        self._base_path = base_path
        self._values = {}

    @property
    def route(self):
        return self._route

    def param(self, name, *values):
        """
        Sets a path, query or matrix parameter. Query and matrix parameters may have several values.

        :type name: str
        :rtype: MvcUriBuilder
        :raise MVCInvalidArgumentError: if no value or a None value is given
        """
        if not values:
            raise MVCInvalidArgumentError("No value given for parameter '{}'".format(name))
        for value in values:
            if value is None:
                raise MVCInvalidArgumentError("Parameter '{}' must not be None".format(name))
        self._values[name] = list(values)
        return self

    def values(self, values):
        """
        Sets several parameters at once.

        :type values: Mapping[str, Any]
        :rtype: MvcUriBuilder
        """
        if not isinstance(values, Mapping):
            raise MVCInvalidArgumentError("values must be a mapping, got {}".format(type(values).__name__))
        for name, value in values.items():
            if isinstance(value, (list, tuple)):
                self.param(name, *value)
            else:
                self.param(name, value)
        return self

    def build(self, *path_values):
        """
        Builds the URI.

        Positional values fill the path parameters in template order, otherwise the path
        parameters must have been set with `param` or `values`. Query and matrix parameters set
        by name are used in both cases.

        :rtype: str
        :raise MVCInvalidArgumentError: if path parameters are missing or of the wrong count
        """
        if path_values:
            path_texts = _path_texts_from_positional(self._route, list(path_values))
        else:
            path_texts = _path_texts_from_named(self._route, self._values)
        uri = render_uri(
            self._route,
            self._base_path,
            path_texts,
            _optional_texts(self._route.query_params, self._values),
            _optional_texts(self._route.matrix_params, self._values),
        )
        logger.debug("Built URI {} for {}".format(uri, self._route.identifier))
        return uri
