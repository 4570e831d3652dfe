"""
Request locale negotiation.
"""
import logging
from collections import namedtuple

from werkzeug.datastructures import LanguageAccept
from werkzeug.http import parse_accept_header


logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"


class Locale(namedtuple("Locale", ["language", "territory"])):
    """
    A language with an optional territory, e.g. Locale("en", "US")
    """
    __slots__ = ()

    def __new__(cls, language, territory=None):
        return super().__new__(cls, language.lower(), territory.upper() if territory else None)

    @classmethod
    def parse(cls, tag):
        """
        :type tag: str
        :rtype: Locale

        :param tag: language tag such as "en", "en-US" or "en_us"
        """
        language, _, territory = tag.strip().replace("_", "-").partition("-")
        if not language:
            raise ValueError("Empty language tag")
        return cls(language, territory.split("-")[0] or None)

    @property
    def tag(self):
        if self.territory:
            return "{}-{}".format(self.language, self.territory)
        return self.language

    def __str__(self):
        return self.tag


def resolve_locale(accept_language, supported=None, default=DEFAULT_LOCALE):
    """
    Negotiates the locale of a request.

    :type accept_language: str | None
    :type supported: Sequence[str] | None
    :type default: str
    :rtype: Locale

    :param accept_language: the Accept-Language header value
    :param supported: locales the application offers, any locale is accepted if not given
    :param default: locale used when nothing matches
    :return: the negotiated locale
    """
    accepted = parse_accept_header(accept_language or "", LanguageAccept)
    if supported:
        best = accepted.best_match(list(supported), default=default)
    else:
        best = next((value for value, quality in accepted if value != "*" and quality > 0), default)

    try:
        return Locale.parse(best)
    except ValueError:
        logger.debug("Unusable language tag '{}', using {}".format(best, default))
        return Locale.parse(default)
