"""
Entry points for serving a pymvc application.

With gunicorn, the configuration file is named by PYMVC_CONFIG (default mvc_conf.yaml):
    gunicorn 'pymvc.wsgi:app'
    gunicorn 'pymvc.wsgi:create_app("library.yaml")'

For development, the Werkzeug server:
    pymvc-serve 8080 --config library.yaml
"""
import os

import click
from werkzeug.serving import run_simple

from pymvc.mvc_config import MVCConfig
from pymvc.server import make_app

DEFAULT_CONFIG_FILE = "mvc_conf.yaml"

_app = None


def create_app(config_file=None):
    """
    :type config_file: str | None
    :rtype: pymvc.server.WsgiApplication

    :param config_file: configuration file, PYMVC_CONFIG or mvc_conf.yaml if not given
    """
    config_file = config_file or os.environ.get("PYMVC_CONFIG", DEFAULT_CONFIG_FILE)
    return make_app(MVCConfig(config_file))


def __getattr__(name):
    # the module level app is created on first access, so importing this module reads no config
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError("module {!r} has no attribute {!r}".format(__name__, name))


@click.command(help="Run a pymvc application with the Werkzeug development server.")
@click.argument("port", type=int)
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False),
              help="Configuration file, defaults to $PYMVC_CONFIG or mvc_conf.yaml.")
@click.option("--host", default="localhost", show_default=True)
@click.option("--keyfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--certfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--reload", "use_reloader", is_flag=True, help="Restart when a source file changes.")
def main(port, config_file, host, keyfile, certfile, use_reloader):
    if bool(keyfile) != bool(certfile):
        raise click.UsageError("Both --keyfile and --certfile must be specified for HTTPS.")

    ssl_context = (certfile, keyfile) if keyfile else None
    run_simple(host, port, create_app(config_file), ssl_context=ssl_context, use_reloader=use_reloader)


if __name__ == "__main__":
    main()
