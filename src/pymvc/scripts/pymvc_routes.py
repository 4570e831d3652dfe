import click

from ..exception import MVCError
from ..mvc_config import MVCConfig
from ..plugin_loader import load_controllers
from ..plugin_loader import register_controllers
from ..routing import RouteRegistry
from ..uri_builder import build_named
from ..util import normalize_application_path
from ..util import normalize_context_path


def build_registry(mvc_conf):
    """
    Loads the controllers of a configuration and returns the frozen route registry.

    :type mvc_conf: str | dict
    :rtype: (pymvc.mvc_config.MVCConfig, pymvc.routing.RouteRegistry)
    """
    config = MVCConfig(mvc_conf)
    return config, register_controllers(RouteRegistry(), load_controllers(config))


def configured_base_path(config):
    context_path = normalize_context_path(config.get("CONTEXT_PATH"))
    application_path = normalize_application_path(config.get("APPLICATION_PATH"))
    if application_path is None:
        return context_path
    return context_path + application_path


def format_routes(registry):
    """
    :type registry: pymvc.routing.RouteRegistry
    :rtype: list[str]
    :return: one line per route, in match order
    """
    lines = []
    for route in registry.routes:
        lines.append("{methods:<12} {template:<40} {identifiers}".format(
            methods=",".join(sorted(route.methods)),
            template=route.template.template,
            identifiers=" ".join(route.identifiers),
        ))
    return lines


def parse_params(params):
    values = {}
    for param in params:
        name, sep, value = param.partition("=")
        if not sep:
            raise click.BadParameter("'{}' is not of the form name=value".format(param), param_hint="--param")
        values.setdefault(name, []).append(value)
    return {name: value[0] if len(value) == 1 else value for name, value in values.items()}


@click.command()
@click.argument("mvc_conf")
@click.option("--identifier", type=click.STRING, default=None,
              help="Resolve this controller method identifier to an URI instead of listing the routes.")
@click.option("--param", "params", type=click.STRING, multiple=True,
              help="Parameter for --identifier, as name=value. Can be repeated.")
def list_routes(mvc_conf, identifier, params):
    """
    Lists the routes of the application configured by MVC_CONF.
    """
    try:
        config, registry = build_registry(mvc_conf)
    except MVCError as e:
        raise click.ClickException(str(e)) from e

    if identifier is None:
        for line in format_routes(registry):
            click.echo(line)
        return

    try:
        route = registry.lookup(identifier)
        uri = build_named(route, configured_base_path(config), parse_params(params))
    except MVCError as e:
        raise click.ClickException(str(e)) from e
    click.echo(uri)
