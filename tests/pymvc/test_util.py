import pytest

from pymvc.util import join_paths
from pymvc.util import normalize_application_path
from pymvc.util import normalize_context_path
from pymvc.util import rndstr


@pytest.mark.parametrize("path, expected", [
    (None, ""),
    ("", ""),
    ("/", ""),
    ("/myapp", "/myapp"),
    ("/myapp/", "/myapp"),
    ("myapp", "/myapp"),
    (" /my/app/ ", "/my/app"),
])
def test_normalize_context_path(path, expected):
    assert normalize_context_path(path) == expected


@pytest.mark.parametrize("path, expected", [
    (None, None),
    ("", ""),
    ("/", ""),
    ("/*", ""),
    ("/resources/*", "/resources"),
    ("resources/", "/resources"),
])
def test_normalize_application_path(path, expected):
    assert normalize_application_path(path) == expected


@pytest.mark.parametrize("paths, expected", [
    ((), "/"),
    (("/",), "/"),
    (("/hello", "/"), "/hello"),
    (("/hello/", "/{id}"), "/hello/{id}"),
    (("books", "", "{id}/"), "/books/{id}"),
])
def test_join_paths(paths, expected):
    assert join_paths(*paths) == expected


def test_join_paths_requires_str():
    with pytest.raises(TypeError):
        join_paths("/hello", None)


def test_rndstr():
    value = rndstr(20)
    assert len(value) == 20
    assert value.isalnum()
    assert set(rndstr(10, alphabet="ab")) <= {"a", "b"}
