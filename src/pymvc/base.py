"""
The pymvc main module
"""
import logging
import uuid

from pymvc.response import Forbidden
from pymvc.response import MethodNotAllowed
from pymvc.response import NotFound
from pymvc.response import Redirect
from pymvc.response import Response
from .context import MvcContext
from .exception import MVCConfigurationError
from .exception import MVCCsrfValidationError
from .exception import MVCError
from .exception import MVCMethodNotAllowedError
from .exception import MVCNoBoundEndpointError
from .exception import MVCStateError
from .exception import MVCUnknownError
from .i18n import DEFAULT_LOCALE
from .i18n import resolve_locale
from .plugin_loader import load_controllers
from .plugin_loader import register_controllers
from .routing import RouteRegistry
from .routing import split_matrix_params
from .security import CsrfTokenManager
from .security import Encoders
from .state import State
from .state import cookie_to_state
from .state import state_to_cookie
from .uri_template import encode_literal
from .util import normalize_application_path
from .util import normalize_context_path
from .view import View
from .view import ViewRenderer

import pymvc.logging_util as lu


logger = logging.getLogger(__name__)

DEFAULT_STATE_COOKIE_NAME = "MVC_STATE"
DEFAULT_TEMPLATES_DIR = "templates"


class MVCBase(object):
    """
    Base class for a pymvc application.
    Does not contain any server parts.
    """

    def __init__(self, config):
        """
        Creates the application: loads the controllers and freezes their routes.

        :type config: pymvc.mvc_config.MVCConfig
        :param config: application config
        """
        self.config = config
        if not self.config.get("STATE_ENCRYPTION_KEY"):
            raise MVCConfigurationError("Missing key 'STATE_ENCRYPTION_KEY' in config")
        self.state_cookie_name = self.config.get("STATE_COOKIE_NAME", DEFAULT_STATE_COOKIE_NAME)

        logger.info("Loading controllers...")
        controllers = load_controllers(self.config)
        self.registry = register_controllers(RouteRegistry(), controllers)

        self.application_path = normalize_application_path(self.config.get("APPLICATION_PATH"))
        self.csrf_manager = CsrfTokenManager.from_config(self.config)
        self.encoders = Encoders()
        self.view_renderer = ViewRenderer(self.config.get("TEMPLATES_DIR", DEFAULT_TEMPLATES_DIR))
        self.supported_locales = self.config.get("LOCALES")
        self.default_locale = self.config.get("DEFAULT_LOCALE", DEFAULT_LOCALE)

    def context_path(self, context):
        """
        The configured context path, or the path the WSGI server mounted the application at.

        :type context: pymvc.context.Context
        :rtype: str
        """
        if self.config.get("CONTEXT_PATH") is not None:
            return normalize_context_path(self.config["CONTEXT_PATH"])
        return normalize_context_path(context.script_name)

    def _load_state(self, context):
        """
        Load state from cookie to the context

        :type context: pymvc.context.Context
        :param context: Request context
        """
        try:
            state = cookie_to_state(
                context.cookie,
                self.state_cookie_name,
                self.config["STATE_ENCRYPTION_KEY"],
                max_age=self.config.get("COOKIE_MAX_AGE"),
            )
        except MVCStateError:
            state = State()
        finally:
            context.state = state
            msg = "Loaded state {id}".format(id=state.session_id)
            lu.mvc_logging(logger, logging.DEBUG, msg, context)

    def _save_state(self, resp, context):
        """
        Saves a state from context to cookie

        :type resp: pymvc.response.Response
        :type context: pymvc.context.Context

        :param resp: The response
        :param context: Request context
        """
        cookie = state_to_cookie(
            context.state,
            name=self.state_cookie_name,
            path=self.context_path(context) or "/",
            encryption_key=self.config["STATE_ENCRYPTION_KEY"],
            secure=self.config.get("COOKIE_SECURE"),
            httponly=self.config.get("COOKIE_HTTPONLY"),
            samesite=self.config.get("COOKIE_SAMESITE"),
            max_age=self.config.get("COOKIE_MAX_AGE"),
        )
        resp.add_cookie(cookie)

    def _application_relative_path(self, context):
        """
        Strips the application path from the percent-encoded request path.

        :type context: pymvc.context.Context
        :rtype: str
        :raise MVCNoBoundEndpointError: if the request is not below the application path
        """
        path = context.raw_path or encode_literal(context.path)
        prefix = encode_literal(self.application_path or "")
        if prefix:
            if path != prefix and not path.startswith(prefix + "/"):
                raise MVCNoBoundEndpointError("'{}' is not below the application path".format(path))
            path = path[len(prefix):] or "/"
        return path

    def _route(self, context):
        """
        Matches the request to a route and stores the route and its parameters in the context.

        :type context: pymvc.context.Context
        :rtype: pymvc.routing.Route
        """
        path, context.matrix_params = split_matrix_params(self._application_relative_path(context))
        msg = "Routing path: {path}".format(path=path)
        logline = lu.LOG_FMT.format(id=lu.get_request_id(context), message=msg)
        logger.debug(logline)

        route, context.path_params = self.registry.match(path, context.request_method)
        context.route = route
        msg = "Found route {route} with path parameters {params}".format(route=route, params=context.path_params)
        logline = lu.LOG_FMT.format(id=lu.get_request_id(context), message=msg)
        logger.debug(logline)
        return route

    def create_mvc_context(self, context):
        """
        Creates the request scoped MvcContext.
        Must be called after the route was matched and the CSRF token was verified.

        :type context: pymvc.context.Context
        :rtype: pymvc.context.MvcContext
        """
        locale = resolve_locale(context.accept_language, self.supported_locales, self.default_locale)
        return MvcContext(
            self.config,
            self.registry,
            self.context_path(context),
            self.application_path,
            self.csrf_manager.issue(context.state),
            self.encoders,
            locale,
        )

    def _run_bound_endpoint(self, context, route):
        """
        Calls the controller method and renders its view.

        :type context: pymvc.context.Context
        :type route: pymvc.routing.Route
        :rtype: pymvc.response.Response
        """
        result = route.handler(context)
        if isinstance(result, View):
            body = self.view_renderer.render(result, context)
            return Response(body, status=result.status)
        if isinstance(result, Response):
            return result
        raise MVCError(
            "{} returned {} instead of a Response or a View".format(route.identifier, type(result).__name__)
        )

    def _error_response(self, context, message, error, response=None):
        """
        Logs an error with a new error id.

        :return: a redirect to ERROR_URL if configured, else the given response
        """
        error_id = uuid.uuid4().urn
        msg = {
            "message": message,
            "error": str(error),
            "error_id": error_id,
        }
        logline = lu.LOG_FMT.format(id=lu.get_request_id(context), message=msg)
        logger.error(logline)
        generic_error_url = self.config.get("ERROR_URL")
        if generic_error_url:
            return Redirect("{url}?errorid={error_id}".format(url=generic_error_url, error_id=error_id))
        return response

    def run(self, context):
        """
        Handles a request.

        :type context: pymvc.context.Context
        :rtype: pymvc.response.Response

        :param context: The request context
        :return: response
        """
        try:
            self._load_state(context)
            route = self._route(context)
            self.csrf_manager.verify(context, route)
            context.mvc = self.create_mvc_context(context)
            resp = self._run_bound_endpoint(context, route)
            self._save_state(resp, context)
        except MVCNoBoundEndpointError as e:
            return self._error_response(
                context, "URL-path is not bound to any endpoint function", e,
                NotFound("The page you requested could not be found."),
            )
        except MVCMethodNotAllowedError as e:
            return self._error_response(
                context, "Method not allowed", e,
                MethodNotAllowed("Method {} is not allowed.".format(e.method), e.allowed),
            )
        except MVCCsrfValidationError as e:
            return self._error_response(
                context, "CSRF validation failed", e,
                Forbidden("The request could not be verified."),
            )
        except MVCError as e:
            resp = self._error_response(context, "Uncaught pymvc error", e)
            if resp:
                return resp
            raise
        except Exception as e:
            resp = self._error_response(context, "Uncaught exception", e)
            if resp:
                return resp
            raise MVCUnknownError("Unknown error") from e
        else:
            return resp
