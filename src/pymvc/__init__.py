# -*- coding: utf-8 -*-
"""
    pymvc
    ~~~~~~~~~~~~~~~~

    A small WSGI MVC framework.
    Controllers register route templates at startup and views get a
    request scoped ``mvc`` context for paths, CSRF tokens, encoders,
    the request locale and URI building.

    :license: APACHE 2.0, see LICENSE for more details.
"""
from importlib.metadata import version as _resolve_package_version


def _parse_version():
    value = _resolve_package_version("pymvc")
    return value


__version__ = _parse_version()
