"""
Base class for pymvc controllers
"""
import logging
from typing import Any, Optional


logger = logging.getLogger(__name__)


class Controller(object):
    """
    Abstract class for controllers.

    A controller groups routes below a common path. Its routes are referenced from views by
    the simple class name and the method name, e.g. "BookController#show".
    """

    path = "/"

    def __init__(self, name: str, config: Optional[dict] = None, **kwargs: Any):
        self.name = name
        self.config = config or {}

    def register_routes(self):
        """
        Routes of this controller, relative to `path`.

        Example, binding GET /books/{id} to the show() method:
            path = "/books"

            def register_routes(self):
                return [
                    route("show", "/{id}", self.show),
                ]

        :rtype: list[pymvc.routing.RouteDefinition]
        :return: route declarations made with `pymvc.routing.route`
        """
        return []
