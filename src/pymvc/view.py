"""
Mustache views.

A controller returns a `View` naming a template; the template is rendered with chevron and
gets the view models plus the request scoped ``mvc`` object.

Inside a template:
    <a href="{{#mvc.uri}}BookController#show id={{{book.id}}}{{/mvc.uri}}">
    <a href="{{#mvc.uri}}BookController#chapter {{{book.id}}} 3{{/mvc.uri}}">
    <input type="hidden" name="{{mvc.csrf.name}}" value="{{mvc.csrf.token}}">
    <script>var title = '{{#mvc.encoders.js}}{{{book.title}}}{{/mvc.encoders.js}}';</script>
"""
import logging
import os
import re

from chevron import render as render_mustache
from markupsafe import escape

from pymvc.exception import MVCInvalidArgumentError
from pymvc.exception import MVCViewError

import pymvc.logging_util as lu


logger = logging.getLogger(__name__)

TEMPLATE_EXTENSION = "mustache"


class View(object):
    """
    The result of a controller method that should be rendered by a template
    """

    def __init__(self, template, models=None, status=None):
        """
        :type template: str
        :type models: dict[str, Any] | None
        :type status: str | None

        :param template: template file name, relative to the templates directory
        :param models: data for the template, added to the models of the request context
        :param status: response status, "200 OK" if not given
        """
        self.template = template
        self.models = models or {}
        self.status = status


# one argument: an optional name, then a bare, double quoted or single quoted value
_URI_ARGUMENT = re.compile(
    r"""(?:(?P<name>[^\s="']+)=)?(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"']+))?(?=\s|\Z)"""
)


def _split_uri_arguments(text):
    """
    :type text: str
    :rtype: list[(str | None, str)]
    :raise MVCInvalidArgumentError: on an unbalanced quote or a quote inside a bare value
    """
    arguments = []
    text = text.strip()
    pos = 0
    while pos < len(text):
        match = _URI_ARGUMENT.match(text, pos)
        if match is None or match.end() == pos:
            raise MVCInvalidArgumentError("Malformed mvc.uri section '{}' at position {}".format(text, pos))
        value = next(
            (v for v in match.group("dq", "sq", "bare") if v is not None),
            "",
        )
        arguments.append((match.group("name"), value))
        pos = match.end()
        while pos < len(text) and text[pos].isspace():
            pos += 1
    return arguments


def parse_uri_arguments(text):
    """
    Parses the text of a {{#mvc.uri}} section.

    "Identifier" -> no parameters, "Identifier a b" -> positional parameters,
    "Identifier x=a y=b" -> named parameters. A repeated name becomes a list of values.

    Arguments are separated by whitespace. A value with whitespace must be quoted, with
    double or single quotes: Identifier "a b" or Identifier title='a b'. There is no escape
    character, so a value can not contain the quote it is wrapped in. Values inserted with
    {{var}} are HTML-escaped by mustache first; use {{{var}}} to pass the raw value.

    :type text: str
    :rtype: (str, list[str] | dict[str, str | list[str]] | None)
    :raise MVCInvalidArgumentError: if the text is empty, malformed or mixes both parameter forms
    """
    arguments = _split_uri_arguments(text)
    if not arguments or arguments[0][0] is not None or not arguments[0][1]:
        raise MVCInvalidArgumentError("Missing controller method identifier in mvc.uri section")
    identifier, args = arguments[0][1], arguments[1:]
    if not args:
        return identifier, None

    named = [name for name, _ in args if name is not None]
    if not named:
        return identifier, [value for _, value in args]
    if len(named) != len(args):
        raise MVCInvalidArgumentError(
            "mvc.uri section for '{}' mixes positional and named parameters".format(identifier)
        )

    params = {}
    for key, value in args:
        if key in params:
            previous = params[key]
            params[key] = (previous if isinstance(previous, list) else [previous]) + [value]
        else:
            params[key] = value
    return identifier, params


class TemplateEncoders(object):
    """
    Mustache lambdas for the encoders
    """

    def __init__(self, encoders):
        self._encoders = encoders

    def html(self, text, render):
        return self._encoders.html(render(text))

    def js(self, text, render):
        return self._encoders.js(render(text))


class TemplateMvc(object):
    """
    The ``mvc`` object as seen by mustache templates
    """

    def __init__(self, mvc):
        """
        :type mvc: pymvc.context.MvcContext
        """
        self._mvc = mvc
        self.encoders = TemplateEncoders(mvc.encoders)

    @property
    def config(self):
        return self._mvc.config

    @property
    def context_path(self):
        return self._mvc.context_path

    @property
    def application_path(self):
        return self._mvc.application_path

    @property
    def base_path(self):
        return self._mvc.base_path

    @property
    def csrf(self):
        return self._mvc.csrf

    @property
    def locale(self):
        return self._mvc.locale

    def uri(self, text, render):
        identifier, params = parse_uri_arguments(render(text))
        return str(escape(self._mvc.uri(identifier, params)))


class ViewRenderer(object):
    """
    Renders views from a template directory
    """

    def __init__(self, templates_dir):
        """
        :type templates_dir: str
        """
        self.templates_dir = os.path.abspath(templates_dir)

    def _template_path(self, template):
        path = os.path.abspath(os.path.join(self.templates_dir, template))
        if os.path.commonpath([path, self.templates_dir]) != self.templates_dir:
            raise MVCViewError("Template '{}' is outside of the templates directory".format(template))
        return path

    def load_template(self, template):
        """
        :type template: str
        :rtype: str
        :raise MVCViewError: if the template can not be read
        """
        path = self._template_path(template)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except IOError as e:
            raise MVCViewError("Could not read template '{}': {}".format(template, e)) from e

    def render(self, view, context):
        """
        Renders a view for the current request.

        :type view: View
        :type context: pymvc.context.Context
        :rtype: str
        """
        data = dict(context.models)
        data.update(view.models)
        if context.mvc is not None:
            data["mvc"] = TemplateMvc(context.mvc)

        msg = "Rendering view {template}".format(template=view.template)
        logline = lu.LOG_FMT.format(id=lu.get_request_id(context), message=msg)
        logger.debug(logline)
        return render_mustache(
            self.load_template(view.template),
            data,
            partials_path=self.templates_dir,
            partials_ext=TEMPLATE_EXTENSION,
        )
