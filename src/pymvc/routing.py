"""
Holds pymvc routing logic.

Controllers declare their routes with `route()`. The routes are collected in a `RouteRegistry`
when the application starts, the registry is then frozen and only read from.
"""
import logging
from collections import namedtuple
from urllib.parse import unquote
from urllib.parse import urlsplit

from pymvc.exception import MVCConfigurationError
from pymvc.exception import MVCMethodNotAllowedError
from pymvc.exception import MVCNoBoundEndpointError
from pymvc.exception import MVCRouteNotFoundError
from pymvc.uri_template import UriTemplate
from pymvc.uri_template import encode_literal
from pymvc.util import join_paths


logger = logging.getLogger(__name__)

IDENTIFIER_SEPARATOR = "#"

RouteDefinition = namedtuple(
    "RouteDefinition",
    ["method_name", "path", "handler", "methods", "uri_ref", "query_params", "matrix_params", "csrf_protected"],
)


def route(method_name, path, handler, methods=("GET",), uri_ref=None, query_params=(), matrix_params=(),
          csrf_protected=False):
    """
    Declares a route of a controller.

    Example, in `Controller.register_routes`:
        return [
            route("show", "/{id: \\d+}", self.show, uri_ref="book-show", query_params=["page"]),
        ]

    :type method_name: str
    :type path: str
    :type handler: (pymvc.context.Context) -> pymvc.response.Response | pymvc.view.View
    :type methods: Sequence[str]
    :type uri_ref: str | None
    :type query_params: Sequence[str]
    :type matrix_params: Sequence[str]
    :type csrf_protected: bool
    :rtype: RouteDefinition

    :param method_name: name of the controller method, second half of the route identifier
    :param path: route template, relative to the controller path
    :param handler: callable invoked with the request context
    :param methods: HTTP methods the route accepts
    :param uri_ref: optional alias the route can be referenced by
    :param query_params: query parameter names the route accepts, in URI order
    :param matrix_params: matrix parameter names the route accepts, in URI order
    :param csrf_protected: whether unsafe requests need a CSRF token under EXPLICIT protection
    """
    return RouteDefinition(
        method_name,
        path,
        handler,
        tuple(m.upper() for m in methods),
        uri_ref,
        tuple(query_params),
        tuple(matrix_params),
        bool(csrf_protected),
    )


class Route(object):
    """
    A registered route: a controller method bound to a parsed template
    """

    def __init__(self, controller_name, definition, template, order):
        """
        :type controller_name: str
        :type definition: RouteDefinition
        :type template: str
        :type order: int

        :param controller_name: simple class name of the controller
        :param definition: the route as declared by the controller
        :param template: full template, controller path included
        :param order: registration order, used as the last tie-break when matching
        """
        self.controller_name = controller_name
        self.method_name = definition.method_name
        self.identifier = "{}{}{}".format(controller_name, IDENTIFIER_SEPARATOR, definition.method_name)
        self.uri_ref = definition.uri_ref
        self.template = UriTemplate(template)
        self.handler = definition.handler
        self.methods = frozenset(definition.methods)
        self.query_params = definition.query_params
        self.matrix_params = definition.matrix_params
        self.csrf_protected = definition.csrf_protected
        self.order = order

        overlap = set(self.template.variables) & (set(self.query_params) | set(self.matrix_params))
        overlap |= set(self.query_params) & set(self.matrix_params)
        if overlap:
            raise MVCConfigurationError(
                "Parameter name(s) {} of '{}' used for more than one parameter kind".format(
                    sorted(overlap), self.identifier
                )
            )

    @property
    def identifiers(self):
        """
        :rtype: list[str]
        :return: all names the route can be referenced by
        """
        return [self.identifier] + ([self.uri_ref] if self.uri_ref else [])

    def sort_key(self):
        template = self.template
        return -template.literal_length, -len(template.variables), -template.custom_regex_count, self.order

    def __repr__(self):
        return "Route({!r}, {!r}, methods={})".format(self.identifier, self.template.template, sorted(self.methods))


def split_matrix_params(path):
    """
    Removes matrix parameters from a path.

    :type path: str
    :rtype: (str, dict[str, list[str]])

    :param path: a percent-encoded path, e.g. /books;lang=en/42;format=short
    :return: the percent-encoded path without matrix parameters and the decoded matrix parameters
    """
    segments = []
    matrix_params = {}
    for segment in path.split("/"):
        name, *params = segment.split(";")
        segments.append(name)
        for param in params:
            if not param:
                continue
            key, _, value = param.partition("=")
            matrix_params.setdefault(unquote(key), []).append(unquote(value))
    return "/".join(segments), matrix_params


class RouteRegistry(object):
    """
    Maps route identifiers and request paths to registered routes
    """

    def __init__(self):
        self._routes = []
        self._by_identifier = {}
        self._frozen = False

    @property
    def frozen(self):
        return self._frozen

    @property
    def routes(self):
        """
        :rtype: tuple[Route]
        :return: routes in registration order
        """
        return tuple(self._routes)

    def register(self, controller_name, definition, prefix=""):
        """
        Registers a route.

        :type controller_name: str
        :type definition: RouteDefinition
        :type prefix: str
        :rtype: Route
        :raise MVCConfigurationError: if the registry is frozen or an identifier is already taken

        :param controller_name: simple class name of the controller
        :param definition: the route declaration
        :param prefix: controller path the route template is relative to
        :return: the registered route
        """
        if self._frozen:
            raise MVCConfigurationError(
                "Can not register '{}': routes are frozen".format(definition.method_name)
            )

        new_route = Route(controller_name, definition, join_paths(prefix, definition.path), len(self._routes))
        for identifier in new_route.identifiers:
            if identifier in self._by_identifier:
                raise MVCConfigurationError(
                    "Identifier '{}' is already bound to {}".format(identifier, self._by_identifier[identifier])
                )

        for identifier in new_route.identifiers:
            self._by_identifier[identifier] = new_route
        self._routes.append(new_route)
        logger.debug("Registered route {}".format(new_route))
        return new_route

    def register_controller(self, controller):
        """
        Registers all routes declared by a controller.

        :type controller: pymvc.controller.Controller
        :rtype: list[Route]
        """
        controller_name = type(controller).__name__
        return [
            self.register(controller_name, definition, prefix=controller.path)
            for definition in controller.register_routes()
        ]

    def freeze(self):
        """
        Ends the registration phase, the registry is read-only afterwards.
        """
        self._routes.sort(key=Route.sort_key)
        self._frozen = True
        logger.info("Frozen {} routes: {}".format(len(self._routes), [r.identifier for r in self._routes]))

    def lookup(self, identifier):
        """
        Returns the route bound to a controller method identifier or alias.

        :type identifier: str
        :rtype: Route
        :raise MVCRouteNotFoundError: if no route is bound to the identifier
        """
        try:
            return self._by_identifier[identifier]
        except (KeyError, TypeError):
            raise MVCRouteNotFoundError("No route is bound to '{}'".format(identifier)) from None

    def _candidates(self):
        if self._frozen:
            return self._routes
        return sorted(self._routes, key=Route.sort_key)

    def match(self, path, method=None):
        """
        Finds the route bound to a percent-encoded application relative path.

        Candidates are tried by descending number of literal characters, then descending number
        of template variables, then descending number of variables with a custom regex, then
        registration order.

        :type path: str
        :type method: str | None
        :rtype: (Route, dict[str, str])
        :raise MVCNoBoundEndpointError: if no route template matches the path
        :raise MVCMethodNotAllowedError: if templates match but none for the given method

        :param path: path without query string or matrix parameters
        :param method: the HTTP method, None matches any method
        :return: the matching route and the path parameter values
        """
        allowed = set()
        for candidate in self._candidates():
            path_params = candidate.template.match(path)
            if path_params is None:
                continue
            if method is None or method.upper() in candidate.methods:
                return candidate, path_params
            allowed |= candidate.methods

        if allowed:
            raise MVCMethodNotAllowedError(path, method, sorted(allowed))
        raise MVCNoBoundEndpointError("'{}' not bound to any function".format(path))

    def resolve_uri(self, uri, base_path=""):
        """
        Matches a percent-encoded URI, as built by `MvcContext.uri`, without dispatching it.

        :type uri: str
        :type base_path: str
        :rtype: (Route, dict[str, str], dict[str, list[str]])
        :raise MVCNoBoundEndpointError: if the URI is outside the base path or matches no route

        :return: the route, the decoded path parameters and the decoded matrix parameters
        """
        path = urlsplit(uri).path
        if base_path:
            base_path = encode_literal(base_path)
            if path != base_path and not path.startswith(base_path + "/"):
                raise MVCNoBoundEndpointError("'{}' is not below base path '{}'".format(uri, base_path))
            path = path[len(base_path):] or "/"
        path, matrix_params = split_matrix_params(path)
        matched, path_params = self.match(path)
        return matched, path_params, matrix_params

    def identify(self, uri, base_path=""):
        """
        Resolves an URI, as built by `MvcContext.uri`, back to the route it was built for.

        :type uri: str
        :type base_path: str
        :rtype: Route
        :raise MVCNoBoundEndpointError: if the URI is outside the base path or matches no route
        """
        matched, _, _ = self.resolve_uri(uri, base_path)
        return matched
