"""
Contains controllers and help methods used by the tests.
"""
from pymvc.controller import Controller
from pymvc.response import Response
from pymvc.response import SeeOther
from pymvc.routing import route
from pymvc.view import View


BOOKS = [
    {"id": 1, "title": "Dune"},
    {"id": 2, "title": "Rock & Roll </script>"},
]


class MyController(Controller):
    path = "/hello"

    def register_routes(self):
        return [
            route("index", "/", self.index),
            route("myMethod", "/{id}", self.my_method, methods=["GET", "POST"], uri_ref="hello-id"),
        ]

    def index(self, context):
        return Response("Hello")

    def my_method(self, context):
        return Response(context.mvc.uri("MyController#myMethod", [context.path_params["id"]]))


class BookController(Controller):
    path = "/books"

    def register_routes(self):
        return [
            route("index", "/", self.index),
            route("create", "/", self.create, methods=["POST"], csrf_protected=True),
            route("show", "/{id: \\d+}", self.show, uri_ref="book-show",
                  query_params=["page"], matrix_params=["lang"]),
            route("chapter", "/{id: \\d+}/chapters/{chapter}", self.chapter),
            route("missing", "/missing", self.missing_template),
            route("broken", "/broken", self.broken),
            route("failing", "/failing", self.failing),
        ]

    def index(self, context):
        context.decorate("site_name", "Library")
        return View("books.mustache", {"books": BOOKS, "first_title": BOOKS[1]["title"]})

    def create(self, context):
        return SeeOther(context.mvc.uri("BookController#index"))

    def show(self, context):
        return Response("book {id} page {page} lang {lang}".format(
            id=context.path_params["id"],
            page=context.qs_params.get("page", ["-"])[0],
            lang=context.matrix_params.get("lang", ["-"])[0],
        ))

    def chapter(self, context):
        return View("chapter.mustache", {"chapter": context.path_params["chapter"]})

    def missing_template(self, context):
        return View("does-not-exist.mustache")

    def broken(self, context):
        return None

    def failing(self, context):
        raise RuntimeError("controller failed")


class AuthorController(Controller):
    path = "/authors"

    def register_routes(self):
        return [
            route("byName", "/{name}", self.by_name),
            route("latest", "/latest", self.latest),
            route("all", "/", self.all, methods=["GET"], csrf_protected=True),
            route("update", "/{name}", self.update, methods=["PUT"]),
        ]

    def by_name(self, context):
        return Response("author " + context.path_params["name"])

    def latest(self, context):
        return Response("latest author")

    def all(self, context):
        return Response("all authors")

    def update(self, context):
        return Response("updated " + context.path_params["name"])


class NotAController(object):
    pass
