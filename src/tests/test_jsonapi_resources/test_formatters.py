import pytest

from jsonapi_resources import formatters
from jsonapi_resources.exceptions import UnknownFormatterError
from jsonapi_resources.formatters import (
    CachedFormatter,
    DasherizedKeyFormatter,
    Formatter,
    camelize,
    dasherize,
    formatter_for,
    get_formatter_names,
    register_formatter,
    underscore,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("fooBar", "foo_bar"),
        ("foo-bar", "foo_bar"),
        ("foo_bar", "foo_bar"),
        ("HTMLParser", "html_parser"),
        ("address2Line", "address2_line"),
    ],
)
def test_underscore(name, expected):
    assert underscore(name) == expected


def test_camelize_and_dasherize():
    assert camelize("foo_bar_baz") == "fooBarBaz"
    assert camelize("foo-bar") == "fooBar"
    assert dasherize("foo_bar") == "foo-bar"
    assert dasherize("fooBar") == "foo-bar"


class TestFormatterRegistry:
    """Prove that formatters are found by name."""

    @pytest.mark.parametrize(
        "format_name,name,expected",
        [
            ("underscored_key", "foo_bar", "foo_bar"),
            ("camelized_key", "foo_bar", "fooBar"),
            ("dasherized_key", "fooBar", "foo-bar"),
            ("underscored_route", "line_items", "line_items"),
            ("camelized_route", "line_items", "lineItems"),
            ("dasherized_route", "line_items", "line-items"),
        ],
    )
    def test_builtin_formatters(self, format_name, name, expected):
        formatter = formatter_for(format_name)
        assert formatter.format(name) == expected

    def test_unformat(self):
        assert formatter_for("dasherized_key").unformat("foo-bar") == "foo_bar"
        assert formatter_for("camelized_key").unformat("fooBar") == "foo_bar"
        assert formatter_for("underscored_key").unformat("foo_bar") == "foo_bar"

    def test_new_instances(self):
        assert formatter_for("dasherized_key") is not formatter_for("dasherized_key")

    def test_unknown_formatter(self):
        with pytest.raises(UnknownFormatterError) as exc_info:
            formatter_for("not-a-real-format")
        assert exc_info.value.format_name == "not-a-real-format"
        assert "not-a-real-format" in str(exc_info.value)

    def test_register_formatter(self, monkeypatch):
        monkeypatch.setattr(formatters, "_registry", formatters._registry.copy())

        @register_formatter("shouting_key")
        class ShoutingKeyFormatter(Formatter):
            def format(self, name):
                return name.upper()

        assert "shouting_key" in get_formatter_names()
        assert formatter_for("shouting_key").format("foo") == "FOO"


class TestCachedFormatter:
    def test_memoizes(self):
        calls = []

        class TrackingFormatter(Formatter):
            def format(self, name):
                calls.append(name)
                return name.upper()

        formatter = TrackingFormatter().cached()
        assert isinstance(formatter, CachedFormatter)
        assert formatter.format("foo") == "FOO"
        assert formatter.format("foo") == "FOO"
        assert calls == ["foo"]

    def test_unformat(self):
        formatter = DasherizedKeyFormatter().cached()
        assert formatter.unformat("foo-bar") == "foo_bar"
        assert formatter.format("foo_bar") == "foo-bar"

    def test_cached_twice(self):
        formatter = DasherizedKeyFormatter().cached()
        assert formatter.cached() is formatter

    def test_bounded(self):
        formatter = CachedFormatter(DasherizedKeyFormatter(), maxsize=2)
        for name in ("a_b", "c_d", "e_f"):
            formatter.format(name)
        assert len(formatter._formatted) == 2
