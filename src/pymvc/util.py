"""
Python package file for util functions.
"""
import logging
import random
import string


logger = logging.getLogger(__name__)


def normalize_context_path(path):
    """
    Normalizes a context path to start with a slash but not end with one.
    The root context ("" or "/") is returned as the empty string, so the value can always be
    prepended to an application path.

    :type path: str | None
    :rtype: str

    :param path: the raw context path, as configured or taken from the WSGI SCRIPT_NAME
    :return: the normalized context path
    """
    path = (path or "").strip()
    path = path.rstrip("/")
    if not path:
        return ""
    if not path.startswith("/"):
        path = "/" + path
    return path


def normalize_application_path(path):
    """
    Normalizes an application path to start with a slash but not end with one.

    An empty path and the catch-all mapping "/*" both become the empty string.
    None is kept, it means that no application path is known.

    :type path: str | None
    :rtype: str | None

    :param path: the raw application path
    :return: the normalized application path
    """
    if path is None:
        return None
    path = path.strip()
    if path.endswith("/*"):
        path = path[:-2]
    return normalize_context_path(path)


def join_paths(*paths):
    """
    Joins path fragments with exactly one slash between them.
    The result always starts with a slash and only ends with one when it is the root path.

    :type paths: str
    :rtype: str

    :param paths: path fragments, e.g. a controller path and a method path
    :return: the joined path
    """
    parts = []
    for path in paths:
        if not isinstance(path, str):
            raise TypeError("path fragments must be str, got {}".format(type(path).__name__))
        stripped = path.strip("/")
        if stripped:
            parts.append(stripped)
    return "/" + "/".join(parts)


def rndstr(size=16, alphabet=""):
    """
    Returns a string of random ascii characters or digits
    :type size: int
    :type alphabet: str
    :param size: The length of the string
    :param alphabet: A string with characters.
    :return: string
    """
    rng = random.SystemRandom()
    if not alphabet:
        alphabet = string.ascii_letters[0:52] + string.digits
    return type(alphabet)().join(rng.choice(alphabet) for _ in range(size))
