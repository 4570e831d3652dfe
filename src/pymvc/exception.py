"""
Exceptions for pymvc
"""


class MVCError(Exception):
    """
    Base pymvc exception
    """
    pass


class MVCConfigurationError(MVCError):
    """
    pymvc configuration error
    """
    pass


class MVCRouteNotFoundError(MVCError):
    """
    Raised when a controller method identifier is not bound to any registered route
    """
    pass


class MVCInvalidArgumentError(MVCError, ValueError):
    """
    Raised when the parameters supplied for building an URI do not fit the route template.

    The error is also a ValueError so that callers who only care about bad input can catch it
    without knowing about pymvc.
    """
    pass


class MVCNoBoundEndpointError(MVCError):
    """
    Raised when a given url path is not bound to any endpoint function
    """
    pass


class MVCMethodNotAllowedError(MVCError):
    """
    Raised when a url path is bound to an endpoint, but not for the requested HTTP method
    """

    def __init__(self, path, method, allowed):
        """
        :type path: str
        :type method: str
        :type allowed: list[str]

        :param path: the requested path
        :param method: the requested HTTP method
        :param allowed: the methods the matching routes accept
        """
        super().__init__("'{}' does not accept method {}".format(path, method))
        self.path = path
        self.method = method
        self.allowed = allowed


class MVCCsrfValidationError(MVCError):
    """
    Raised when an unsafe request is missing a valid CSRF token
    """
    pass


class MVCBadContextError(MVCError):
    """
    Raise this exception if validating the Context and failing.
    """
    pass


class MVCViewError(MVCError):
    """
    Raised when a view can not be rendered
    """
    pass


class MVCUnknownError(MVCError):
    """
    pymvc unknown error
    """
    pass


class MVCStateError(MVCError):
    """
    pymvc state error
    """
    pass
