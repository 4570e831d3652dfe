"""
Responses returned by controller methods, and by pymvc itself for errors.
"""


class Response(object):
    """
    A WSGI response with a text or bytes body
    """
    _status = "200 OK"
    _content_type = "text/html; charset=utf-8"
    charset = "utf-8"

    def __init__(self, message=None, status=None, headers=None, content=None):
        """
        :type message: str | bytes | list[str | bytes] | None
        :type status: str | None
        :type headers: list[(str, str)] | None
        :type content: str | None

        :param message: the body, text is encoded with `charset`
        :param status: the status line, the class default if not given
        :param headers: initial headers, copied
        :param content: the Content-Type, used unless `headers` already has one
        """
        self.status = status or self._status
        self.headers = list(headers or [])
        self.message = message if message is not None else ""

        if self.get_header("Content-Type") is None:
            self.headers.append(("Content-Type", content or self._content_type))

    @property
    def status_code(self):
        """
        :rtype: int
        """
        return int(self.status.split(" ", 1)[0])

    def get_header(self, name):
        """
        :type name: str
        :rtype: str | None
        :return: the first value of a header, the name is case insensitive
        """
        name = name.lower()
        return next((value for key, value in self.headers if key.lower() == name), None)

    def add_cookie(self, cookie_header):
        """
        Adds a Set-Cookie header, replacing an earlier one for the same cookie.

        :type cookie_header: str
        :param cookie_header: header value as made by werkzeug.http.dump_cookie
        """
        cookie_name = cookie_header.split("=", 1)[0]
        self.headers = [
            (name, value)
            for (name, value) in self.headers
            if name.lower() != "set-cookie" or value.split("=", 1)[0] != cookie_name
        ]
        self.headers.append(("Set-Cookie", cookie_header))

    def body(self):
        """
        :rtype: list[bytes]
        :return: the body as the byte strings a WSGI server sends
        """
        parts = self.message if isinstance(self.message, (list, tuple)) else [self.message]
        return [part if isinstance(part, bytes) else str(part).encode(self.charset) for part in parts]

    def __call__(self, environ, start_response):
        """
        Sends the status and headers and returns the encoded body.

        :type environ: dict[str, Any]
        :type start_response: (str, list[(str, str)]) -> None
        :rtype: list[bytes]
        """
        body = self.body()
        headers = list(self.headers)
        if self.get_header("Content-Length") is None:
            headers.append(("Content-Length", str(sum(len(part) for part in body))))
        start_response(self.status, headers)
        if environ.get("REQUEST_METHOD") == "HEAD":
            return []
        return body


class Redirect(Response):
    """
    A Redirect response
    """
    _status = "302 Found"

    def __init__(self, redirect_url, headers=None, content=None):
        """
        :type redirect_url: str
        :type headers: list[(str,str)]
        :type content: str
        """
        super().__init__(redirect_url, headers=headers, content=content)
        self.headers.append(("Location", redirect_url))


class SeeOther(Redirect):
    """
    Redirect after a POST, the client follows it with a GET
    """
    _status = "303 See Other"


class Forbidden(Response):
    _status = "403 Forbidden"


class NotFound(Response):
    _status = "404 Not Found"


class MethodNotAllowed(Response):
    _status = "405 Method Not Allowed"

    def __init__(self, message, allowed, headers=None, content=None):
        super().__init__(message, headers=headers, content=content)
        self.headers.append(("Allow", ", ".join(allowed)))


class ServiceError(Response):
    _status = "500 Internal Server Error"
