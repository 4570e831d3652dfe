"""
CSRF protection and output encoders exposed to views.
"""
import enum
import hmac
import logging
from collections import namedtuple

from markupsafe import escape

from pymvc.exception import MVCConfigurationError
from pymvc.exception import MVCCsrfValidationError
from pymvc.util import rndstr

import pymvc.logging_util as lu


logger = logging.getLogger(__name__)

STATE_KEY = "CSRF_TOKEN"
DEFAULT_HEADER_NAME = "X-CSRF-TOKEN"
TOKEN_LENGTH = 43
UNSAFE_METHODS = frozenset(["POST", "PUT", "PATCH", "DELETE"])


class CsrfProtection(enum.Enum):
    OFF = "off"
    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


class CsrfScope(enum.Enum):
    SESSION = "session"
    REQUEST = "request"


Csrf = namedtuple("Csrf", ["name", "token"])
Csrf.__doc__ = """
The CSRF token of the current request, read-only.

In views: {{mvc.csrf.name}} is the header and form field name, {{mvc.csrf.token}} the token.
"""


class CsrfTokenManager(object):
    """
    Issues CSRF tokens and validates the tokens of unsafe requests
    """

    def __init__(self, protection=CsrfProtection.EXPLICIT, scope=CsrfScope.SESSION,
                 header_name=DEFAULT_HEADER_NAME):
        """
        :type protection: CsrfProtection
        :type scope: CsrfScope
        :type header_name: str
        """
        self.protection = protection
        self.scope = scope
        self.header_name = header_name

    @classmethod
    def from_config(cls, config):
        """
        :type config: pymvc.mvc_config.MVCConfig
        :rtype: CsrfTokenManager
        """
        csrf_conf = config.get("CSRF") or {}
        try:
            protection = CsrfProtection(str(csrf_conf.get("PROTECTION", "explicit")).lower())
            scope = CsrfScope(str(csrf_conf.get("SCOPE", "session")).lower())
        except ValueError as e:
            raise MVCConfigurationError("Invalid CSRF configuration: {}".format(csrf_conf)) from e
        return cls(protection, scope, csrf_conf.get("HEADER_NAME") or DEFAULT_HEADER_NAME)

    def issue(self, state):
        """
        Returns the CSRF token for the current request.

        With session scope the token kept in the client state is reused. With request scope a new
        token replaces the previous one; it is issued after the incoming request has been verified.

        :type state: pymvc.state.State | dict[str, Any]
        :rtype: Csrf
        """
        token = state.get(STATE_KEY)
        if token is None or self.scope is CsrfScope.REQUEST:
            token = rndstr(TOKEN_LENGTH)
            state[STATE_KEY] = token
        return Csrf(self.header_name, token)

    def requires_check(self, method, route):
        """
        :type method: str
        :type route: pymvc.routing.Route
        :rtype: bool
        """
        if method.upper() not in UNSAFE_METHODS:
            return False
        if self.protection is CsrfProtection.IMPLICIT:
            return True
        if self.protection is CsrfProtection.EXPLICIT:
            return route.csrf_protected
        return False

    def submitted_token(self, context):
        """
        Returns the token sent with the request, the header takes precedence over the form field.

        :type context: pymvc.context.Context
        :rtype: str | None
        """
        headers = context.http_headers or {}
        token = headers.get(self.header_name)
        if token:
            return token
        form = context.request or {}
        return form.get(self.header_name)

    def verify(self, context, route):
        """
        Verifies the CSRF token of an unsafe request.

        :type context: pymvc.context.Context
        :type route: pymvc.routing.Route
        :raise MVCCsrfValidationError: if the token is missing or does not match the token in the client state
        """
        if not self.requires_check(context.request_method or "GET", route):
            return

        expected = (context.state or {}).get(STATE_KEY)
        submitted = self.submitted_token(context)
        if not expected or not submitted or not hmac.compare_digest(str(expected), str(submitted)):
            msg = "CSRF validation failed for {}".format(route.identifier)
            lu.mvc_logging(logger, logging.WARNING, msg, context)
            raise MVCCsrfValidationError(msg)


_JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "/": "\\/",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}
_JS_UNICODE_ESCAPED = frozenset("<>&`\u2028\u2029")


class Encoders(object):
    """
    Encoders for writing untrusted values into views.
    """

    def html(self, value):
        """
        Encodes a value for HTML element content and quoted attribute values.

        :type value: Any
        :rtype: str
        """
        if value is None:
            return ""
        return str(escape(value))

    def js(self, value):
        """
        Encodes a value for the inside of a quoted JavaScript string literal.

        :type value: Any
        :rtype: str
        """
        if value is None:
            return ""
        encoded = []
        for char in str(value):
            if char in _JS_ESCAPES:
                encoded.append(_JS_ESCAPES[char])
            elif char in _JS_UNICODE_ESCAPED or ord(char) < 0x20 or ord(char) == 0x7f:
                encoded.append("\\u{:04x}".format(ord(char)))
            else:
                encoded.append(char)
        return "".join(encoded)
