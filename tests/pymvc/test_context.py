import pytest

from pymvc.context import Context
from pymvc.context import MvcContext
from pymvc.exception import MVCBadContextError
from pymvc.exception import MVCInvalidArgumentError
from pymvc.exception import MVCRouteNotFoundError
from pymvc.i18n import Locale
from pymvc.security import Csrf
from pymvc.security import Encoders
from pymvc.uri_builder import MvcUriBuilder


def test_path():
    context = Context()
    with pytest.raises(ValueError):
        context.path = None

    with pytest.raises(ValueError):
        context.path = "books/1"

    valid_path = "/resources/books/1"
    context.path = valid_path
    assert context.path == valid_path


def test_decorate():
    context = Context()
    assert context.decorate("book", {"id": 1}) is context
    assert context.get_decoration("book") == {"id": 1}
    assert context.get_decoration("unknown") is None


def make_mvc_context(config, registry, context_path, application_path):
    return MvcContext(config, registry, context_path, application_path, Csrf("X-CSRF-TOKEN", "t"), Encoders(),
                      Locale("en"))


class TestPaths:
    def test_accessors(self, mvc_context, mvc_config):
        assert mvc_context.context_path == "/myapp"
        assert mvc_context.application_path == "/resources"
        assert mvc_context.base_path == "/myapp/resources"
        assert mvc_context.config is mvc_config
        assert mvc_context.config.get_property("site_owner") == "City Library"
        assert mvc_context.csrf == Csrf("X-CSRF-TOKEN", "test-csrf-token")
        assert mvc_context.csrf.name == "X-CSRF-TOKEN"
        assert isinstance(mvc_context.encoders, Encoders)
        assert str(mvc_context.locale) == "en-US"

    @pytest.mark.parametrize("context_path, application_path, base_path", [
        ("/myapp", "/resources", "/myapp/resources"),
        ("/myapp", "", "/myapp"),
        ("/myapp", None, "/myapp"),
        ("", "/resources", "/resources"),
        ("", None, ""),
    ])
    def test_base_path(self, mvc_config, registry, context_path, application_path, base_path):
        mvc = make_mvc_context(mvc_config, registry, context_path, application_path)
        assert mvc.base_path == base_path
        if application_path is None:
            assert mvc.base_path == mvc.context_path
        else:
            assert mvc.base_path == mvc.context_path + mvc.application_path

    @pytest.mark.parametrize("context_path, application_path", [
        ("/myapp/", "/resources"),
        ("myapp", "/resources"),
        ("/myapp", "/resources/"),
        ("/myapp", "resources"),
    ])
    def test_paths_must_be_normalized(self, mvc_config, registry, context_path, application_path):
        with pytest.raises(MVCBadContextError):
            make_mvc_context(mvc_config, registry, context_path, application_path)


class TestUri:
    def test_uri_without_params(self, mvc_context):
        assert mvc_context.uri("BookController#index") == "/myapp/resources/books"
        assert mvc_context.uri("MyController#index") == "/myapp/resources/hello"

    def test_uri_without_params_for_template_with_variables(self, mvc_context):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("MyController#myMethod")

    def test_positional(self, mvc_context):
        assert mvc_context.uri("MyController#myMethod", [42]) == "/myapp/resources/hello/42"
        assert mvc_context.uri("hello-id", ("foo bar",)) == "/myapp/resources/hello/foo%20bar"
        assert mvc_context.uri("BookController#chapter", [1, "intro"]) == "/myapp/resources/books/1/chapters/intro"

    @pytest.mark.parametrize("params", [[], [1], [1, "intro", 3]])
    def test_positional_count_mismatch(self, mvc_context, params):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("BookController#chapter", params)

    def test_positional_none(self, mvc_context):
        with pytest.raises(MVCInvalidArgumentError) as excinfo:
            mvc_context.uri("BookController#chapter", [1, None])
        assert "'chapter'" in str(excinfo.value)

    def test_positional_ignores_query_and_matrix_params(self, mvc_context):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("BookController#show", [7, 2])

    def test_named(self, mvc_context):
        assert mvc_context.uri("MyController#myMethod", {"id": 42}) == "/myapp/resources/hello/42"
        assert mvc_context.uri("BookController#show", {"id": 7}) == "/myapp/resources/books/7"
        assert mvc_context.uri("BookController#show", {"id": 7, "page": 2}) == "/myapp/resources/books/7?page=2"
        assert mvc_context.uri("BookController#show", {"id": 7, "lang": "en"}) == "/myapp/resources/books/7;lang=en"
        assert (
            mvc_context.uri("book-show", {"page": 2, "lang": "en", "id": 7, "unknown": "x"})
            == "/myapp/resources/books/7;lang=en?page=2"
        )

    def test_named_multiple_values(self, mvc_context):
        uri = mvc_context.uri("BookController#show", {"id": 7, "page": [1, 2], "lang": ("en", "sv")})
        assert uri == "/myapp/resources/books/7;lang=en;lang=sv?page=1&page=2"

    def test_named_encodes_query_and_matrix(self, mvc_context):
        uri = mvc_context.uri("BookController#show", {"id": 7, "page": "a&b=c", "lang": "x;y"})
        assert uri == "/myapp/resources/books/7;lang=x%3By?page=a%26b%3Dc"

    def test_named_missing_path_param(self, mvc_context):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("MyController#myMethod", {})
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("BookController#show", {"page": 2})

    @pytest.mark.parametrize("params", [{"id": None}, {"id": 7, "page": None}, {"id": 7, "lang": ["en", None]}])
    def test_named_none(self, mvc_context, params):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("BookController#show", params)

    def test_named_path_param_regex(self, mvc_context):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("BookController#show", {"id": "seven"})

    def test_unknown_identifier(self, mvc_context):
        with pytest.raises(MVCRouteNotFoundError):
            mvc_context.uri("Unknown#method")
        with pytest.raises(MVCRouteNotFoundError):
            mvc_context.uri("Unknown#method", [1])
        with pytest.raises(MVCRouteNotFoundError):
            mvc_context.uri_builder("Unknown#method")

    @pytest.mark.parametrize("params", ["42", 42, b"42", {42}, frozenset([42]), iter([42])])
    def test_params_must_be_sequence_or_mapping(self, mvc_context, params):
        with pytest.raises(MVCInvalidArgumentError):
            mvc_context.uri("MyController#myMethod", params)

    def test_tuple_params(self, mvc_context):
        assert mvc_context.uri("BookController#chapter", (1, "intro")) == "/myapp/resources/books/1/chapters/intro"

    @pytest.mark.parametrize("identifier, params", [
        ("MyController#myMethod", [42]),
        ("MyController#index", None),
        ("BookController#show", {"id": 7, "page": 2, "lang": "en"}),
        ("BookController#chapter", [3, "the end"]),
        ("AuthorController#latest", None),
        ("AuthorController#byName", ["café"]),
    ])
    def test_round_trip(self, mvc_context, registry, identifier, params):
        uri = mvc_context.uri(identifier, params)
        assert uri.startswith(mvc_context.base_path)
        assert "{" not in uri and "}" not in uri
        assert registry.identify(uri, mvc_context.base_path).identifier == identifier

    def test_uri_builder(self, mvc_context):
        builder = mvc_context.uri_builder("BookController#show")
        assert isinstance(builder, MvcUriBuilder)
        assert builder.route.identifier == "BookController#show"
        assert builder.param("id", 7).param("page", 3).build() == "/myapp/resources/books/7?page=3"
