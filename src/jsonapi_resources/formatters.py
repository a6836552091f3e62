"""Formatters that translate between internal field names and their external spelling.

A formatter is a stateless strategy object. The built-in ones are registered under
the names ``{underscored,camelized,dasherized}_{key,route}``, and additional ones
can be added with :func:`register_formatter`:

.. code-block:: python

    @register_formatter("upper_key")
    class UpperKeyFormatter(KeyFormatter):
        def format(self, name):
            return name.upper()
"""
from __future__ import annotations

import re

from cachetools import LRUCache

from jsonapi_resources.exceptions import UnknownFormatterError

#: Upper bound of names remembered by a single cached formatter.
CACHED_FORMATTER_MAXSIZE = 4096

_registry: dict[str, type[Formatter]] = {}

RE_ACRONYM_BOUNDARY = re.compile(r"([A-Z\d]+)([A-Z][a-z])")
RE_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
RE_UNDERSCORE_WORD = re.compile(r"_+([a-zA-Z\d])")


def underscore(name: str) -> str:
    """Convert ``fooBar`` or ``foo-bar`` into ``foo_bar``."""
    name = RE_ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = RE_WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


def camelize(name: str) -> str:
    """Convert ``foo_bar`` into ``fooBar``."""
    name = underscore(name)
    return RE_UNDERSCORE_WORD.sub(lambda match: match.group(1).upper(), name)


def dasherize(name: str) -> str:
    """Convert ``foo_bar`` or ``fooBar`` into ``foo-bar``."""
    return underscore(name).replace("_", "-")


def register_formatter(name: str):
    """Class decorator that makes the formatter available by name."""

    def _dec(formatter_class: type[Formatter]) -> type[Formatter]:
        _registry[name] = formatter_class
        return formatter_class

    return _dec


def formatter_for(name: str) -> Formatter:
    """Return a new formatter instance for the registered name."""
    try:
        formatter_class = _registry[name]
    except (KeyError, TypeError):
        raise UnknownFormatterError(name) from None
    return formatter_class()


def get_formatter_names() -> list[str]:
    return sorted(_registry)


class Formatter:
    """Base class for formatters. The default implementation leaves names untouched."""

    def format(self, name: str) -> str:
        return str(name)

    def unformat(self, name: str) -> str:
        return str(name)

    def cached(self) -> CachedFormatter:
        """Wrap this formatter, so repeated names are only formatted once."""
        return CachedFormatter(self)

    def __repr__(self):
        return f"<{self.__class__.__name__}>"


class CachedFormatter(Formatter):
    """Memoizes the results of another formatter.

    The lookup tables are not locked, so an instance should only be used by one thread.
    The configuration takes care of that by caching these per thread.
    """

    def __init__(self, formatter: Formatter, maxsize=CACHED_FORMATTER_MAXSIZE):
        self.formatter = formatter
        self._formatted = LRUCache(maxsize=maxsize)
        self._unformatted = LRUCache(maxsize=maxsize)

    def format(self, name: str) -> str:
        try:
            return self._formatted[name]
        except KeyError:
            value = self._formatted[name] = self.formatter.format(name)
            return value

    def unformat(self, name: str) -> str:
        try:
            return self._unformatted[name]
        except KeyError:
            value = self._unformatted[name] = self.formatter.unformat(name)
            return value

    def cached(self) -> CachedFormatter:
        return self

    def __repr__(self):
        return f"<CachedFormatter: {self.formatter!r}>"


class KeyFormatter(Formatter):
    """Formats the attribute and relationship names in the JSON document."""


class RouteFormatter(Formatter):
    """Formats the resource names that appear in URL paths."""


@register_formatter("underscored_key")
class UnderscoredKeyFormatter(KeyFormatter):
    pass


@register_formatter("camelized_key")
class CamelizedKeyFormatter(KeyFormatter):
    def format(self, name):
        return camelize(str(name))

    def unformat(self, name):
        return underscore(str(name))


@register_formatter("dasherized_key")
class DasherizedKeyFormatter(KeyFormatter):
    def format(self, name):
        return dasherize(str(name))

    def unformat(self, name):
        return underscore(str(name))


@register_formatter("underscored_route")
class UnderscoredRouteFormatter(RouteFormatter):
    pass


@register_formatter("camelized_route")
class CamelizedRouteFormatter(RouteFormatter):
    def format(self, name):
        return camelize(str(name))

    def unformat(self, name):
        return underscore(str(name))


@register_formatter("dasherized_route")
class DasherizedRouteFormatter(RouteFormatter):
    def format(self, name):
        return dasherize(str(name))

    def unformat(self, name):
        return underscore(str(name))
