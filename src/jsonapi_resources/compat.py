"""Compatibility helpers.

All deprecation notices of this package go through :func:`deprecation_warn`,
so there is a single place that decides how these are surfaced.
"""
import warnings


class RemovedInNextVersionWarning(DeprecationWarning):
    """Features that will be removed in the next major version of jsonapi_resources."""


def deprecation_warn(message, category=None):
    """Issue a deprecation warning, attributed to the caller of the deprecated feature."""
    # stacklevel 3 points past the deprecated setter to the code that called it.
    warnings.warn(message, category or RemovedInNextVersionWarning, stacklevel=3)
