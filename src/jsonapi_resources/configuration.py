"""The settings of the JSON:API resources library.

A :class:`Configuration` holds every setting with its default. The process-wide
instance is built from the Django setting ``JSONAPI_RESOURCES`` by
:func:`jsonapi_resources.settings.get_configuration`; tests and scripts can
construct their own instance.

Formatters are resolved lazily and cached per thread. Changing a setting that affects
the formatters bumps a shared generation number, which makes every thread discard
its cached formatter on the next lookup.
"""
from __future__ import annotations

import base64
import hashlib
import logging
import threading
from collections.abc import Callable
from typing import Any

from django.conf import settings
from django.core.cache import BaseCache, caches

from jsonapi_resources import formatters, processors
from jsonapi_resources.compat import deprecation_warn
from jsonapi_resources.exceptions import UnknownFormatterError

logger = logging.getLogger(__name__)

DEFAULT_PROCESSOR_CLASS_NAME = "jsonapi_resources.processors.Processor"


def sha256_base64digest(value: str) -> str:
    """The default digest for resource cache keys."""
    if isinstance(value, str):
        value = value.encode()
    return base64.b64encode(hashlib.sha256(value).digest()).decode()


def flatten(items) -> list:
    """Flatten nested lists, tuples and sets into a single list."""
    result = []
    for item in items:
        if isinstance(item, (list, tuple, set, frozenset)):
            result.extend(flatten(item))
        else:
            result.append(item)
    return result


def _class_names(cls: type) -> set[str]:
    return {cls.__qualname__, f"{cls.__module__}.{cls.__qualname__}"}


def _allowlist_name(entry) -> str:
    if isinstance(entry, type):
        return f"{entry.__module__}.{entry.__qualname__}"
    return str(entry)


class FormatterSlot:
    """Holds the per-thread cached formatter for one setting.

    Each thread only writes its own storage. Other threads invalidate it
    by increasing the shared generation number.
    """

    def __init__(self, name):
        self.name = name
        self.generation = 0
        self._local = threading.local()
        self._lock = threading.Lock()

    def invalidate(self):
        with self._lock:
            self.generation += 1

    def get(self, generation):
        """Return the cached formatter, if it was created in the given generation."""
        if getattr(self._local, "generation", None) == generation:
            return self._local.formatter
        return None

    def set(self, formatter, generation):
        self._local.formatter = formatter
        self._local.generation = generation


class Configuration:
    """All settings of the library.

    Most settings are plain attributes. The ones that need bookkeeping when they change
    (the formatter settings and the default processor) are properties.
    """

    def __init__(self, formatter_provider: Callable[[str], Any] | None = None, debug=None):
        #: Resolves a format name into a formatter instance.
        self.formatter_provider = formatter_provider or formatters.formatter_for
        self._key_formatter_slot = FormatterSlot("key")
        self._route_formatter_slot = FormatterSlot("route")
        self._cache_formatters = True
        self._default_processor_class = None
        if debug is None:
            debug = settings.DEBUG

        # "underscored", "camelized", "dasherized" or a custom formatter
        self.key_format = "dasherized"
        self.route_format = "dasherized"

        # "integer", "uuid", "string" or a callable
        self.resource_key_type = "integer"

        # Optional request features
        self.default_allow_include_to_one = True
        self.default_allow_include_to_many = True
        self.allow_sort = True
        self.allow_filter = True

        self.raise_if_parameters_not_allowed = True

        self.warn_on_route_setup_issues = True
        self.warn_on_missing_routes = True
        self.warn_on_performance_issues = True

        # "none", "offset", "paged" or a custom paginator name
        self.default_paginator = "none"
        self.top_level_links_include_pagination = True
        self.default_page_size = 10
        self.maximum_page_size = 20

        # Top level meta
        self.top_level_meta_include_record_count = False
        self.top_level_meta_record_count_key = "record_count"
        self.top_level_meta_include_page_count = False
        self.top_level_meta_page_count_key = "page_count"

        self.use_text_errors = False

        # Tracebacks in error responses, only enabled for development.
        self.include_backtraces_in_errors = debug
        self.include_application_backtraces_in_errors = debug

        # Names (or classes) of exceptions that the exception handler should not rescue.
        # Subclasses of a listed exception are allowed too.
        self.exception_class_allowlist = []
        self.allow_all_exceptions = False

        # Resource linkage for non-compound documents
        self.always_include_to_one_linkage_data = False
        self.always_include_to_many_linkage_data = False

        self.default_processor_class_name = DEFAULT_PROCESSOR_CLASS_NAME

        self.allow_transactions = True

        # Cache the formatter results per thread.
        self.cache_formatters = True

        self.use_relationship_reflection = False

        # Resource cache, a Django cache alias or cache instance. None disables caching.
        self.resource_cache = None
        self.default_caching = False
        self.default_resource_cache_field = "updated_at"
        self.resource_cache_digest_function = sha256_base64digest
        # Called with (resource name, hits, misses)
        self.resource_cache_usage_report_function = None

        # "none", "default", or a list containing "self" and/or "related"
        self.default_exclude_links = "none"

    def __repr__(self):
        return (
            f"<Configuration: key_format={self.key_format!r},"
            f" route_format={self.route_format!r}, cache_formatters={self.cache_formatters!r}>"
        )

    # -- formatters

    @property
    def key_format(self):
        return self._key_format

    @key_format.setter
    def key_format(self, value):
        self._key_format = value
        self._key_formatter_slot.invalidate()

    @property
    def route_format(self):
        return self._route_format

    @route_format.setter
    def route_format(self, value):
        self._route_format = value
        self._route_formatter_slot.invalidate()

    @property
    def cache_formatters(self) -> bool:
        return self._cache_formatters

    @cache_formatters.setter
    def cache_formatters(self, value: bool):
        self._cache_formatters = bool(value)
        self._key_formatter_slot.invalidate()
        self._route_formatter_slot.invalidate()

    @property
    def key_formatter(self) -> formatters.Formatter:
        """The formatter for attribute and relationship names."""
        return self._get_formatter(self._key_formatter_slot, "key_format")

    @property
    def route_formatter(self) -> formatters.Formatter:
        """The formatter for resource names in URLs."""
        return self._get_formatter(self._route_formatter_slot, "route_format")

    def _get_formatter(self, slot: FormatterSlot, setting_name):
        if not self.cache_formatters:
            return self._resolve_formatter(slot, getattr(self, setting_name))

        # Read the generation before the setting, so a concurrent change is never hidden
        # by storing a stale formatter under the new generation.
        generation = slot.generation
        formatter = slot.get(generation)
        if formatter is not None:
            return formatter

        format_value = getattr(self, setting_name)
        formatter = self._resolve_formatter(slot, format_value)
        cached = getattr(formatter, "cached", None)
        formatter = cached() if cached is not None else formatters.CachedFormatter(formatter)
        slot.set(formatter, generation)
        logger.debug(
            "Cached %s formatter %r for thread %s (generation %d)",
            slot.name,
            formatter,
            threading.current_thread().name,
            generation,
        )
        return formatter

    def _resolve_formatter(self, slot: FormatterSlot, format_value):
        if isinstance(format_value, formatters.CachedFormatter):
            # Each thread gets its own lookup tables.
            return format_value.formatter
        elif isinstance(format_value, formatters.Formatter):
            return format_value
        elif isinstance(format_value, type) and issubclass(format_value, formatters.Formatter):
            return format_value()

        # Both the short name ("dasherized") and the registered name are accepted.
        name = format_value
        if isinstance(name, str) and not name.endswith(f"_{slot.name}"):
            name = f"{name}_{slot.name}"
        try:
            return self.formatter_provider(name)
        except UnknownFormatterError:
            raise UnknownFormatterError(format_value) from None

    # -- exceptions

    def exception_class_allowed(self, exc: BaseException) -> bool:
        """Tell whether the exception should propagate, instead of being rescued.
        The exception class or any of its base classes should be found in the allowlist.
        """
        if self.allow_all_exceptions:
            return True

        allowlist = self.exception_class_allowlist
        if not allowlist:
            return False
        elif isinstance(allowlist, (str, type)):
            allowlist = [allowlist]

        allowed = {_allowlist_name(entry) for entry in flatten(allowlist)}
        if not allowed:
            return False

        ancestry = set()
        for cls in type(exc).__mro__:
            ancestry.update(_class_names(cls))
        return not allowed.isdisjoint(ancestry)

    # -- processors

    @property
    def default_processor_class_name(self):
        return self._default_processor_class_name

    @default_processor_class_name.setter
    def default_processor_class_name(self, value):
        self._default_processor_class_name = value
        self._default_processor_class = None

    @property
    def default_processor_class(self) -> type[processors.Processor]:
        if self._default_processor_class is None:
            self._default_processor_class = processors.processor_for(
                self.default_processor_class_name
            )
        return self._default_processor_class

    @default_processor_class.setter
    def default_processor_class(self, value):
        deprecation_warn(
            "`default_processor_class` has been replaced by `default_processor_class_name`."
        )
        self._default_processor_class = value

    # -- resource cache

    @property
    def resource_cache(self) -> BaseCache | None:
        if isinstance(self._resource_cache, str):
            return caches[self._resource_cache]
        return self._resource_cache

    @resource_cache.setter
    def resource_cache(self, value):
        self._resource_cache = value

    # -- deprecated settings

    @property
    def allow_include(self):
        deprecation_warn(
            "`allow_include` has been replaced by `default_allow_include_to_one`"
            " and `default_allow_include_to_many` options."
        )
        return self.default_allow_include_to_one and self.default_allow_include_to_many

    @allow_include.setter
    def allow_include(self, value):
        deprecation_warn(
            "`allow_include` has been replaced by `default_allow_include_to_one`"
            " and `default_allow_include_to_many` options."
        )
        self.default_allow_include_to_one = value
        self.default_allow_include_to_many = value

    @property
    def whitelist_all_exceptions(self):
        deprecation_warn("`whitelist_all_exceptions` has been replaced by `allow_all_exceptions`")
        return self.allow_all_exceptions

    @whitelist_all_exceptions.setter
    def whitelist_all_exceptions(self, value):
        deprecation_warn("`whitelist_all_exceptions` has been replaced by `allow_all_exceptions`")
        self.allow_all_exceptions = value

    @property
    def exception_class_whitelist(self):
        deprecation_warn(
            "`exception_class_whitelist` has been replaced by `exception_class_allowlist`"
        )
        return self.exception_class_allowlist

    @exception_class_whitelist.setter
    def exception_class_whitelist(self, value):
        deprecation_warn(
            "`exception_class_whitelist` has been replaced by `exception_class_allowlist`"
        )
        self.exception_class_allowlist = value
