"""Loading the process-wide configuration from the Django settings.

Configure the library in the project ``settings.py``:

.. code-block:: python

    JSONAPI_RESOURCES = {
        "KEY_FORMAT": "camelized",
        "EXCEPTION_CLASS_ALLOWLIST": ["PermissionDenied"],
    }

The keys are the upper-cased attribute names of
:class:`~jsonapi_resources.configuration.Configuration`.
Any bootstrap code can make further changes using :func:`configure`.
"""
from __future__ import annotations

import functools
import logging
import threading

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver

from jsonapi_resources.configuration import Configuration

logger = logging.getLogger(__name__)

SETTINGS_NAME = "JSONAPI_RESOURCES"

_configuration: Configuration | None = None
_lock = threading.Lock()


def build_configuration(user_settings: dict | None = None) -> Configuration:
    """Create a new configuration from a dict of settings with upper-case names."""
    if user_settings is None:
        user_settings = getattr(settings, SETTINGS_NAME, None) or {}
    if not isinstance(user_settings, dict):
        raise ImproperlyConfigured(f"The {SETTINGS_NAME} setting should be a dictionary.")

    configuration = Configuration()
    for key, value in user_settings.items():
        if not isinstance(key, str):
            raise ImproperlyConfigured(f"Invalid key in the {SETTINGS_NAME} setting: {key!r}")
        _apply(configuration, key.lower(), value, source=f"{SETTINGS_NAME}[{key!r}]")
    return configuration


def get_configuration() -> Configuration:
    """Return the configuration of this process, creating it on first use."""
    global _configuration
    if _configuration is None:
        with _lock:
            if _configuration is None:
                _configuration = build_configuration()
                logger.debug("Initialized %r", _configuration)
    return _configuration


def configure(**options) -> Configuration:
    """Change the process-wide configuration. This is meant for the application bootstrap,
    as other threads only see the changes on their next lookup.
    """
    configuration = get_configuration()
    with _lock:
        for name, value in options.items():
            _apply(configuration, name, value, source=name)
    return configuration


def reset_configuration():
    """Drop the current configuration, so it's recreated from the settings on next use."""
    global _configuration
    with _lock:
        _configuration = None


@receiver(setting_changed)
def reload_configuration(*, setting, **kwargs):
    if setting in (SETTINGS_NAME, "DEBUG"):
        reset_configuration()


@functools.cache
def get_setting_names() -> frozenset[str]:
    """All names that can be assigned in the settings."""
    names = {name for name in vars(Configuration(debug=False)) if not name.startswith("_")}
    names.update(
        name
        for name, attr in vars(Configuration).items()
        if isinstance(attr, property) and attr.fset is not None and not name.startswith("_")
    )
    return frozenset(names)


def _apply(configuration: Configuration, name: str, value, source: str):
    if name not in get_setting_names():
        raise ImproperlyConfigured(f"Unknown jsonapi_resources setting: {source}")
    setattr(configuration, name, value)
