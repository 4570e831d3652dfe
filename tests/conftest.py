import os

import pytest

from pymvc.context import Context
from pymvc.context import MvcContext
from pymvc.i18n import Locale
from pymvc.mvc_config import MVCConfig
from pymvc.plugin_loader import load_controllers
from pymvc.plugin_loader import register_controllers
from pymvc.routing import RouteRegistry
from pymvc.security import Csrf
from pymvc.security import Encoders

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")
CSRF_TOKEN = "test-csrf-token"
STATE_ENCRYPTION_KEY = "state-encryption-key-for-tests"


@pytest.fixture
def context():
    context = Context()
    context.request_id = "test-request"
    context.path = "/"
    return context


@pytest.fixture
def controller_configs():
    return [
        {"module": "tests.util.MyController", "name": "hello"},
        {"module": "tests.util.BookController", "name": "books", "config": {"page_size": 10}},
        {"module": "tests.util.AuthorController"},
    ]


@pytest.fixture
def mvc_config_dict(controller_configs):
    config = {
        "CONTEXT_PATH": "/myapp",
        "APPLICATION_PATH": "/resources",
        "CONTROLLERS": controller_configs,
        "TEMPLATES_DIR": TEMPLATES_DIR,
        "COOKIE_SECURE": False,
        "STATE_ENCRYPTION_KEY": STATE_ENCRYPTION_KEY,
        "LOCALES": ["en-US", "de", "sv-SE"],
        "DEFAULT_LOCALE": "en-US",
        "PROPERTIES": {"site_owner": "City Library"},
        "LOGGING": {"version": 1, "disable_existing_loggers": False},
    }
    return config


@pytest.fixture
def mvc_config(mvc_config_dict):
    return MVCConfig(mvc_config_dict)


@pytest.fixture
def registry(mvc_config):
    return register_controllers(RouteRegistry(), load_controllers(mvc_config))


@pytest.fixture
def mvc_context(mvc_config, registry):
    return MvcContext(
        mvc_config,
        registry,
        "/myapp",
        "/resources",
        Csrf("X-CSRF-TOKEN", CSRF_TOKEN),
        Encoders(),
        Locale("en", "US"),
    )
