import sys

import pytest

from pymvc.controller import Controller
from pymvc.exception import MVCConfigurationError
from pymvc.mvc_config import MVCConfig
from pymvc.plugin_loader import controller_filter
from pymvc.plugin_loader import load_controllers
from pymvc.plugin_loader import prepend_to_import_path
from pymvc.plugin_loader import register_controllers
from pymvc.routing import RouteRegistry
from tests.util import BookController
from tests.util import MyController
from tests.util import NotAController


class TestFilters(object):
    def test_controller_filter_rejects_base_class(self):
        assert not controller_filter(Controller)

    def test_controller_filter_rejects_other_class(self):
        assert not controller_filter(NotAController)

    def test_controller_filter_rejects_instance(self):
        assert not controller_filter(MyController("hello"))

    def test_controller_filter_accepts_controller(self):
        assert controller_filter(MyController)


class TestLoadControllers(object):
    def test_load_controllers(self, mvc_config):
        controllers = load_controllers(mvc_config)
        assert [type(c).__name__ for c in controllers] == ["MyController", "BookController", "AuthorController"]
        assert [c.name for c in controllers] == ["hello", "books", "AuthorController"]
        assert isinstance(controllers[1], BookController)
        assert controllers[1].config == {"page_size": 10}

    @pytest.mark.parametrize("controller_config", [
        {"name": "no-module"},
        {"module": "tests.util.DoesNotExist"},
        {"module": "tests.util.NotAController"},
        {"module": "pymvc.controller.Controller"},
    ])
    def test_invalid_controller_config(self, controller_config):
        config = MVCConfig({"CONTROLLERS": [controller_config]})
        with pytest.raises(MVCConfigurationError):
            load_controllers(config)

    def test_load_from_custom_module_path(self, tmp_path):
        (tmp_path / "shop_controllers.py").write_text(
            "from pymvc.controller import Controller\n"
            "from pymvc.response import Response\n"
            "from pymvc.routing import route\n"
            "\n"
            "\n"
            "class ShopController(Controller):\n"
            "    path = '/shop'\n"
            "\n"
            "    def register_routes(self):\n"
            "        return [route('index', '/', self.index)]\n"
            "\n"
            "    def index(self, context):\n"
            "        return Response('shop')\n"
        )
        config = MVCConfig({
            "CUSTOM_PLUGIN_MODULE_PATHS": [str(tmp_path)],
            "CONTROLLERS": [{"module": "shop_controllers.ShopController"}],
        })
        path_before = list(sys.path)
        controllers = load_controllers(config)
        assert sys.path == path_before
        registry = register_controllers(RouteRegistry(), controllers)
        assert registry.frozen
        assert registry.lookup("ShopController#index").template.template == "/shop"


def test_prepend_to_import_path():
    path_before = list(sys.path)
    with prepend_to_import_path(["/first", "/second"]):
        assert sys.path[:2] == ["/first", "/second"]
    assert sys.path == path_before
