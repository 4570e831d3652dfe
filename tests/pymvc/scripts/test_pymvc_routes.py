import pytest
import yaml
from click.testing import CliRunner

from pymvc.scripts.pymvc_routes import configured_base_path
from pymvc.scripts.pymvc_routes import list_routes
from pymvc.scripts.pymvc_routes import parse_params


@pytest.fixture
def config_file(tmp_path, mvc_config_dict):
    path = tmp_path / "mvc_conf.yaml"
    path.write_text(yaml.safe_dump(mvc_config_dict))
    return str(path)


class TestListRoutes:
    def test_lists_routes_in_match_order(self, config_file):
        result = CliRunner().invoke(list_routes, [config_file])
        assert result.exit_code == 0, result.output

        lines = result.output.splitlines()

        def position(identifier):
            return next(i for i, line in enumerate(lines) if identifier in line.split())

        assert position("BookController#chapter") < position("BookController#show")
        assert position("AuthorController#latest") < position("AuthorController#byName")
        assert any(line.split()[-2:] == ["BookController#show", "book-show"] for line in lines)
        assert any(line.startswith("GET,POST") and "MyController#myMethod" in line for line in lines)

    def test_resolve_identifier(self, config_file):
        result = CliRunner().invoke(
            list_routes, [config_file, "--identifier", "book-show", "--param", "id=7", "--param", "page=2"]
        )
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "/myapp/resources/books/7?page=2"

    def test_resolve_identifier_with_repeated_param(self, config_file):
        result = CliRunner().invoke(
            list_routes,
            [config_file, "--identifier", "BookController#show", "--param", "id=7",
             "--param", "lang=en", "--param", "lang=sv"],
        )
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "/myapp/resources/books/7;lang=en;lang=sv"

    def test_unknown_identifier(self, config_file):
        result = CliRunner().invoke(list_routes, [config_file, "--identifier", "Unknown#method"])
        assert result.exit_code == 1
        assert "Unknown#method" in result.output

    def test_missing_param(self, config_file):
        result = CliRunner().invoke(list_routes, [config_file, "--identifier", "MyController#myMethod"])
        assert result.exit_code == 1

    def test_malformed_param(self, config_file):
        result = CliRunner().invoke(list_routes, [config_file, "--identifier", "hello-id", "--param", "42"])
        assert result.exit_code == 2

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("CONTEXT_PATH: /myapp\n")
        result = CliRunner().invoke(list_routes, [str(path)])
        assert result.exit_code == 1


def test_parse_params():
    assert parse_params(["id=7", "lang=en", "lang=sv", "q=a=b"]) == {"id": "7", "lang": ["en", "sv"], "q": "a=b"}
    assert parse_params([]) == {}


@pytest.mark.parametrize("config, expected", [
    ({"CONTEXT_PATH": "/myapp/", "APPLICATION_PATH": "/resources/*"}, "/myapp/resources"),
    ({"CONTEXT_PATH": "/myapp"}, "/myapp"),
    ({"APPLICATION_PATH": "/"}, ""),
    ({}, ""),
])
def test_configured_base_path(config, expected):
    assert configured_base_path(config) == expected
