import logging
import logging.config
import uuid
from urllib.parse import quote
from urllib.parse import unquote
from urllib.parse import urlsplit

from werkzeug.wrappers import Request

import pymvc

from .base import MVCBase
from .context import Context
from .response import NotFound
from .response import ServiceError
from .uri_template import encode_literal
from .uri_template import normalize_percent_encoding


logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")
# non-standard keys holding the request target before percent-decoding (gunicorn, uWSGI, mod_wsgi)
RAW_URI_KEYS = ("RAW_URI", "REQUEST_URI")
# characters kept unencoded in a raw path, "%" included so existing escapes survive
_RAW_PATH_SAFE = "/:@!$&'()*+,;=%"

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "formatters": {
        "simple": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s.%(funcName)s] %(message)s"
        }
    },
    "handlers": {
        "stdout": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "level": "DEBUG",
            "formatter": "simple",
        }
    },
    "loggers": {"pymvc": {"level": "INFO"}},
    "root": {"level": "INFO", "handlers": ["stdout"]},
}


def unpack_request(request):
    """
    Unpacks the request parameters: the query string of a GET request, the form or JSON body
    of requests that carry a body.

    :type request: werkzeug.wrappers.Request
    :rtype: dict[str, Any] | None
    """
    data = None
    if request.method in BODY_METHODS:
        if request.is_json:
            data = request.get_json(silent=True)
        else:
            data = request.form.to_dict()
    elif request.method in ("GET", "HEAD"):
        data = request.args.to_dict()

    logline = "read request data: {}".format(data)
    logger.debug(logline)
    return data


def raw_request_path(environ, request):
    """
    Returns the path below SCRIPT_NAME as the client sent it, still percent-encoded.

    PATH_INFO is decoded by the server, so an encoded "/" or ";" inside a path parameter can not
    be told apart from a separator there. The raw request target is used when the server passes
    it on and it agrees with PATH_INFO, otherwise the decoded path is encoded again.

    :type environ: dict[str, Any]
    :type request: werkzeug.wrappers.Request
    :rtype: str
    """
    script_name = environ.get("SCRIPT_NAME", "").rstrip("/")
    for key in RAW_URI_KEYS:
        raw = environ.get(key)
        if not raw:
            continue
        try:
            raw = raw.encode("latin-1").decode("utf-8", "replace")
        except UnicodeEncodeError:
            continue

        path = raw.partition("?")[0] if raw.startswith("/") else urlsplit(raw).path
        if script_name:
            depth = script_name.count("/")
            segments = path.split("/")
            if unquote("/".join(segments[:depth + 1])) != script_name:
                continue
            path = "/" + "/".join(segments[depth + 1:])

        path = normalize_percent_encoding(quote(path, safe=_RAW_PATH_SAFE))
        if unquote(path) == request.path:
            return path
        logger.debug("{key} '{raw}' does not agree with path '{path}'".format(key=key, raw=raw, path=request.path))

    return encode_literal(request.path)


class WsgiApplication(MVCBase):
    """
    The pymvc WSGI application
    """

    def build_context(self, environ):
        """
        Creates the request context from the WSGI environ.

        :type environ: dict[str, Any]
        :rtype: pymvc.context.Context
        """
        request = Request(environ)
        context = Context()
        context.request_id = uuid.uuid4().hex
        context.path = request.path
        context.raw_path = raw_request_path(environ, request)
        context.request = unpack_request(request)
        context.request_uri = request.full_path if request.query_string else request.path
        context.request_method = request.method
        context.qs_params = request.args.to_dict(flat=False)
        context.script_name = request.root_path
        context.http_headers = request.headers
        context.cookie = request.headers.get("Cookie", "")
        context.accept_language = request.headers.get("Accept-Language")
        return context

    def __call__(self, environ, start_response, debug=False):
        path = environ.get("PATH_INFO", "")
        if ".." in path.split("/"):
            resp = NotFound("Couldn't find the page you asked for!")
            return resp(environ, start_response)

        context = self.build_context(environ)

        logline = {
            "message": "Received request",
            "request_id": context.request_id,
            "request_method": context.request_method,
            "request_uri": context.request_uri,
            "raw_path": context.raw_path,
            "query_params": context.qs_params,
            "headers": [name for name, _ in context.http_headers],
        }
        logger.debug(logline)

        try:
            resp = self.run(context)
        except Exception as e:
            logger.exception(str(e))
            if debug:
                raise
            resp = ServiceError("The server failed to handle the request.")
        return resp(environ, start_response)


def make_app(mvc_config):
    """
    Configures logging and creates the WSGI application.

    :type mvc_config: pymvc.mvc_config.MVCConfig
    :rtype: WsgiApplication
    """
    try:
        logging.config.dictConfig(mvc_config.get("LOGGING", DEFAULT_LOGGING_CONFIG))
        logger.info("Running pymvc version {v}".format(v=pymvc.__version__))
        return WsgiApplication(mvc_config)
    except Exception:
        logline = "Failed to create WSGI app."
        logger.exception(logline)
        raise
