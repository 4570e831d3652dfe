"""
Example controllers for a small library application.

Run from the repository root:
    PYMVC_CONFIG=example/mvc_conf.yaml pymvc-serve 8080
"""
import logging

from pymvc.controller import Controller
from pymvc.response import NotFound
from pymvc.response import SeeOther
from pymvc.routing import route
from pymvc.view import View


logger = logging.getLogger(__name__)


class BookController(Controller):
    path = "/books"

    def __init__(self, name, config=None, **kwargs):
        super().__init__(name, config, **kwargs)
        self.books = {
            1: {"id": 1, "title": "The Left Hand of Darkness", "author": "Ursula K. Le Guin"},
            2: {"id": 2, "title": "Solaris", "author": "Stanisław Lem"},
        }

    def register_routes(self):
        return [
            route("index", "/", self.index, query_params=["page"]),
            route("create", "/", self.create, methods=["POST"], csrf_protected=True),
            route("show", "/{id: \\d+}", self.show, uri_ref="book", matrix_params=["lang"]),
        ]

    def index(self, context):
        page_size = self.config.get("page_size", 20)
        page = int(context.qs_params.get("page", ["1"])[0])
        books = sorted(self.books.values(), key=lambda book: book["id"])
        start = (page - 1) * page_size
        return View("books.mustache", {
            "books": books[start:start + page_size],
            "next_page": page + 1 if start + page_size < len(books) else None,
        })

    def create(self, context):
        form = context.request or {}
        title = (form.get("title") or "").strip()
        if title:
            book_id = max(self.books) + 1
            self.books[book_id] = {"id": book_id, "title": title, "author": form.get("author", "")}
            logger.info("Added book {}".format(book_id))
        return SeeOther(context.mvc.uri("BookController#index"))

    def show(self, context):
        book = self.books.get(int(context.path_params["id"]))
        if book is None:
            return NotFound("No such book")
        return View("book.mustache", {"book": book, "lang": context.matrix_params.get("lang", ["en"])[0]})
