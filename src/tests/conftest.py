from __future__ import annotations

import pytest
from rest_framework.test import APIRequestFactory

from jsonapi_resources.configuration import Configuration
from jsonapi_resources.formatters import Formatter, formatter_for
from jsonapi_resources.settings import reset_configuration


@pytest.fixture(autouse=True)
def clean_configuration():
    """Make sure every test starts with the configuration from the settings."""
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture()
def configuration() -> Configuration:
    """A configuration with all defaults, independent of the process-wide one."""
    return Configuration()


class CountingFormatter(Formatter):
    """Formatter that tells which instance produced the output."""

    def __init__(self, serial):
        self.serial = serial

    def format(self, name):
        return f"{name}#{self.serial}"


class CountingProvider:
    """Formatter provider that hands out a new, numbered instance on every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        if name.startswith("counting_"):
            return CountingFormatter(len(self.calls))
        return formatter_for(name)


@pytest.fixture()
def counting_provider() -> CountingProvider:
    return CountingProvider()


@pytest.fixture()
def api_rf() -> APIRequestFactory:
    """Request factory for APIView classes"""
    return APIRequestFactory()
