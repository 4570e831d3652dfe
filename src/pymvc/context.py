from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any, Optional

from pymvc.exception import MVCBadContextError
from pymvc.exception import MVCInvalidArgumentError
from pymvc.uri_builder import MvcUriBuilder
from pymvc.uri_builder import build_named
from pymvc.uri_builder import build_positional


class Context(object):
    """
    Holds the data of the current request
    """

    def __init__(self) -> None:
        self._path: Optional[str] = None
        # percent-encoded form of path, as sent by the client
        self.raw_path: Optional[str] = None
        self.request_id: Optional[str] = None
        # form or JSON body
        self.request: Optional[dict[str, Any]] = None
        self.request_uri = None
        self.request_method = None
        self.qs_params: dict[str, Any] = {}
        self.matrix_params: dict[str, list[str]] = {}
        self.path_params: dict[str, str] = {}
        self.script_name = ""
        self.http_headers = None
        self.cookie = None
        self.accept_language = None
        self.route = None
        self.state = None
        self.mvc: Optional["MvcContext"] = None
        # This dict carries the models from the controller to the view.
        self.models: dict[str, Any] = {}

    @property
    def path(self) -> Optional[str]:
        """
        Get the path

        :return: request path below the context path
        """
        return self._path

    @path.setter
    def path(self, p: str) -> None:
        """
        Sets the decoded request path, without the context path, for example:
            https://localhost:8080/myapp/resources/hello/42 -> /resources/hello/42
        for an application deployed at the context path /myapp.

        :type p: str

        :param p: A path to an endpoint.
        :return: None
        """
        if not p:
            raise ValueError("path can't be set to None")
        elif not p.startswith("/"):
            raise ValueError("path must start with '/'")
        self._path = p

    def decorate(self, key: str, value: Any) -> "Context":
        """
        Add a model for the view
        """
        self.models[key] = value
        return self

    def get_decoration(self, key: str) -> Any:
        """
        Retrieve a model of the view
        """
        value = self.models.get(key)
        return value


class MvcContext(object):
    """
    Contextual information for the current request, accessible from views as ``mvc``.

    It provides the context, application and base paths, the application configuration,
    the CSRF token, encoders, the request locale and URIs for controller methods.
    An instance belongs to exactly one request and is never shared between requests.
    """

    def __init__(self, config, registry, context_path, application_path, csrf, encoders, locale):
        """
        :type config: pymvc.mvc_config.MVCConfig
        :type registry: pymvc.routing.RouteRegistry
        :type context_path: str
        :type application_path: str | None
        :type csrf: pymvc.security.Csrf
        :type encoders: pymvc.security.Encoders
        :type locale: pymvc.i18n.Locale

        :param context_path: normalized context path, "" for the root context
        :param application_path: normalized application path, None if the application has none
        """
        if context_path and (not context_path.startswith("/") or context_path.endswith("/")):
            raise MVCBadContextError("Context path '{}' is not normalized".format(context_path))
        if application_path and (not application_path.startswith("/") or application_path.endswith("/")):
            raise MVCBadContextError("Application path '{}' is not normalized".format(application_path))

        self._config = config
        self._registry = registry
        self._context_path = context_path
        self._application_path = application_path
        self._csrf = csrf
        self._encoders = encoders
        self._locale = locale

    @property
    def config(self):
        """
        :return: the application configuration, application-defined properties included
        """
        return self._config

    @property
    def context_path(self) -> str:
        """
        For the URI http://host:port/myapp/resources/hello this is /myapp.
        """
        return self._context_path

    @property
    def application_path(self) -> Optional[str]:
        """
        For the URI http://host:port/myapp/resources/hello this is /resources.
        Empty if the application is mapped to the whole context, None if it has no application path.
        """
        return self._application_path

    @property
    def base_path(self) -> str:
        """
        The context path followed by the application path, or only the context path
        when there is no application path.
        """
        if self._application_path is None:
            return self._context_path
        return self._context_path + self._application_path

    @property
    def csrf(self):
        return self._csrf

    @property
    def encoders(self):
        return self._encoders

    @property
    def locale(self):
        return self._locale

    def uri(self, identifier: str, params=None) -> str:
        """
        Creates an URI matched by a controller method, base path included.

        The method is identified by "ControllerClass#method" or by its uri_ref alias.
        `params` is either omitted (the template must not have path parameters), a sequence of
        path parameter values in template order, or a mapping of path, query and matrix
        parameters where every path parameter is required.

        :raise MVCRouteNotFoundError: if no route is bound to the identifier
        :raise MVCInvalidArgumentError: if the parameters do not fit the route template
        """
        route = self._registry.lookup(identifier)
        if params is None:
            return build_positional(route, self.base_path, [])
        if isinstance(params, Mapping):
            return build_named(route, self.base_path, params)
        if isinstance(params, (str, bytes)) or not isinstance(params, Sequence):
            raise MVCInvalidArgumentError(
                "params must be a sequence or a mapping, got {}".format(type(params).__name__)
            )
        return build_positional(route, self.base_path, list(params))

    def uri_builder(self, identifier: str) -> MvcUriBuilder:
        """
        Returns a builder for URIs matched by a controller method.

        :raise MVCRouteNotFoundError: if no route is bound to the identifier
        """
        return MvcUriBuilder(self._registry.lookup(identifier), self.base_path)
