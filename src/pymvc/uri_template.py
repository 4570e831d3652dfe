"""
Route templates.

A template is literal path text with placeholders, either ``{name}`` or ``{name: regex}``.
Templates are parsed once when a route is registered and are immutable afterwards.
"""
import re
from urllib.parse import quote
from urllib.parse import unquote

from pymvc.exception import MVCConfigurationError
from pymvc.exception import MVCInvalidArgumentError


DEFAULT_VARIABLE_REGEX = "[^/]+"
_VARIABLE_NAME = re.compile(r"^\w[\w.\-]*$")
# sub-delims and the other characters allowed unencoded in a path
_LITERAL_SAFE = "/:@!$&'()*+,;="
_PERCENT_ESCAPE = re.compile(r"%([0-9A-Fa-f]{2})")
_UNRESERVED = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~")


def encode_path_segment(value):
    """
    Percent-encodes a value so it is a single path segment.
    Everything but the RFC 3986 unreserved characters is encoded, "/" included.

    :type value: str
    :rtype: str
    """
    return quote(value, safe="")


def encode_query_component(value):
    """
    Percent-encodes a query or matrix parameter name or value.

    :type value: str
    :rtype: str
    """
    return quote(value, safe="")


def encode_literal(text):
    """
    Percent-encodes literal path text, keeping "/" and the sub-delims.

    :type text: str
    :rtype: str
    """
    return quote(text, safe=_LITERAL_SAFE)


def normalize_percent_encoding(path):
    """
    Brings a percent-encoded path to one canonical form: escapes of unreserved characters are
    decoded and all other escapes use upper case hex digits (RFC 3986, 6.2.2).

    :type path: str
    :rtype: str
    """
    def _normalize(match):
        char = chr(int(match.group(1), 16))
        if char in _UNRESERVED:
            return char
        return match.group(0).upper()

    return _PERCENT_ESCAPE.sub(_normalize, path)


class TemplateVariable(object):
    """
    A placeholder of a route template
    """

    def __init__(self, name, regex=None):
        self.name = name
        self.regex = regex or DEFAULT_VARIABLE_REGEX
        self.has_custom_regex = regex is not None
        try:
            self._compiled = re.compile(self.regex)
        except re.error as e:
            raise MVCConfigurationError(
                "Invalid regular expression '{}' for template variable '{}'".format(self.regex, name)
            ) from e

    def accepts(self, value):
        """
        A custom regex is applied to the percent-encoded value, the form the matcher sees in a
        request path.

        :type value: str
        :rtype: bool
        :return: whether the raw value is allowed for this placeholder
        """
        if not value:
            return False
        if self.has_custom_regex:
            return self._compiled.fullmatch(encode_path_segment(value)) is not None
        return True

    def __repr__(self):
        return "TemplateVariable({!r}, {!r})".format(self.name, self.regex)


class UriTemplate(object):
    """
    A parsed route template such as ``/books/{id: \\d+}/chapters/{chapter}``
    """

    def __init__(self, template):
        """
        :type template: str
        :raise MVCConfigurationError: if the template is malformed

        :param template: the raw template text
        """
        self.template = self._normalize(template)
        self.parts = self._parse(self.template)
        self.variables = []
        for part in self.parts:
            if isinstance(part, TemplateVariable) and part.name not in self.variables:
                self.variables.append(part.name)
        self.literal_length = sum(len(part) for part in self.parts if isinstance(part, str))
        self.custom_regex_count = len({
            part.name for part in self.parts if isinstance(part, TemplateVariable) and part.has_custom_regex
        })
        self._pattern = self._compile()

    @staticmethod
    def _normalize(template):
        if not isinstance(template, str):
            raise MVCConfigurationError("Route template must be a str, got {!r}".format(template))
        template = template.strip()
        if not template.startswith("/"):
            template = "/" + template
        if len(template) > 1:
            template = template.rstrip("/") or "/"
        return template

    @staticmethod
    def _parse(template):
        parts = []
        literal = []
        pos = 0
        while pos < len(template):
            char = template[pos]
            if char == "}":
                raise MVCConfigurationError("Unbalanced '}}' in route template '{}'".format(template))
            if char != "{":
                literal.append(char)
                pos += 1
                continue

            depth = 1
            end = pos + 1
            while end < len(template) and depth:
                if template[end] == "{":
                    depth += 1
                elif template[end] == "}":
                    depth -= 1
                end += 1
            if depth:
                raise MVCConfigurationError("Unbalanced '{{' in route template '{}'".format(template))

            if literal:
                parts.append("".join(literal))
                literal = []
            body = template[pos + 1:end - 1]
            name, sep, regex = body.partition(":")
            name = name.strip()
            regex = regex.strip() if sep else None
            if not _VARIABLE_NAME.match(name):
                raise MVCConfigurationError(
                    "Invalid variable name '{}' in route template '{}'".format(name, template)
                )
            if sep and not regex:
                raise MVCConfigurationError(
                    "Empty regular expression for '{}' in route template '{}'".format(name, template)
                )
            parts.append(TemplateVariable(name, regex))
            pos = end

        if literal:
            parts.append("".join(literal))
        return parts

    def _compile(self):
        pattern = ["^"]
        self._groups = []
        for part in self.parts:
            if isinstance(part, str):
                pattern.append(re.escape(normalize_percent_encoding(encode_literal(part))))
            else:
                group = "v{}".format(len(self._groups))
                self._groups.append((group, part.name))
                pattern.append("(?P<{}>{})".format(group, part.regex))
        pattern.append("$")
        return re.compile("".join(pattern))

    def expand(self, values):
        """
        Replaces every placeholder with its percent-encoded value.

        :type values: dict[str, str]
        :rtype: str
        :raise MVCInvalidArgumentError: if a variable has no value or a value the placeholder
        does not accept

        :param values: variable name to raw (not encoded) value
        :return: the expanded path
        """
        missing = [name for name in self.variables if values.get(name) is None]
        if missing:
            raise MVCInvalidArgumentError(
                "Missing value for path parameter(s) {} of template '{}'".format(
                    ", ".join("'{}'".format(name) for name in missing), self.template
                )
            )

        expanded = []
        for part in self.parts:
            if isinstance(part, str):
                expanded.append(encode_literal(part))
                continue
            value = values[part.name]
            if not part.accepts(value):
                raise MVCInvalidArgumentError(
                    "Value '{}' is not valid for path parameter '{}' ({}) of template '{}'".format(
                        value, part.name, part.regex, self.template
                    )
                )
            expanded.append(encode_path_segment(value))
        return "".join(expanded)

    def match(self, path):
        """
        Matches a percent-encoded, application relative path against the template.

        Placeholders capture the encoded text, so an encoded "/" or ";" stays inside its
        segment. The captured values are decoded afterwards.

        :type path: str
        :rtype: dict[str, str] | None

        :param path: the path, without query string or matrix parameters
        :return: decoded variable values if the whole path matches, else None
        """
        path = normalize_percent_encoding(path)
        if len(path) > 1 and path.endswith("/"):
            path = path[:-1]
        match = self._pattern.match(path)
        if match is None:
            return None

        values = {}
        for group, name in self._groups:
            value = unquote(match.group(group))
            if name in values and values[name] != value:
                return None
            values[name] = value
        return values

    def __eq__(self, other):
        return isinstance(other, UriTemplate) and other.template == self.template

    def __hash__(self):
        return hash(self.template)

    def __str__(self):
        return self.template

    def __repr__(self):
        return "UriTemplate({!r})".format(self.template)
