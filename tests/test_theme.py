"""Tests for utils/theme.py"""

import pytest

from models.settings import DEFAULT_SETTINGS
from utils import theme


class TestHexToRgb:

    @pytest.mark.parametrize("value,expected", [
        ("#10b981", (16, 185, 129)),
        ("6366F1", (99, 102, 241)),
        ("#fff", (255, 255, 255)),
        ("abc", (170, 187, 204)),
    ])
    def test_valid(self, value, expected):
        assert theme.hex_to_rgb(value) == expected

    @pytest.mark.parametrize("value", ["#12345", "green", "", None, 123, "#ggg"])
    def test_invalid(self, value):
        assert theme.hex_to_rgb(value) is None


class TestCssVariables:

    def test_configured_colors(self):
        css = theme.css_variables({"layout": {"primaryColor": "#ff0000", "secondaryColor": "#00f"}})
        assert "--primary-color: #ff0000;" in css
        assert "--primary-rgb: 255, 0, 0;" in css
        assert "--secondary-rgb: 0, 0, 255;" in css
        assert css.startswith(":root {")

    def test_malformed_color_uses_default_pair(self):
        css = theme.css_variables({"layout": {"primaryColor": "not-a-color"}})
        assert "--primary-color: #10b981;" in css
        assert "--primary-rgb: 16, 185, 129;" in css
        assert "--secondary-rgb: 99, 102, 241;" in css

    def test_no_settings(self):
        assert "--primary-color: #10b981;" in theme.css_variables(None)


class TestPageMetadata:

    def test_defaults(self):
        assert theme.page_metadata({}) == {
            "title": "Herbal Shop",
            "description": "Your one-stop shop for herbal products",
            "favicon": "/favicon.ico",
        }

    def test_from_settings(self):
        meta = theme.page_metadata({"general": {"siteName": "Leaf", "siteDescription": "Teas"}})
        assert (meta["title"], meta["description"]) == ("Leaf", "Teas")

    def test_theme_classes(self):
        assert theme.theme_classes({"layout": {"theme": "dark"}})["body"] == "dark-theme"


class TestCurrency:

    @pytest.mark.parametrize("amount,code,expected", [
        (1234.5, "USD", "$1,234.50"),
        (1234.5, "LKR", "LKR 1,234.50"),
        (-3, "EUR", "-€3.00"),
        (1500, "JPY", "¥1,500"),
        (0, "usd", "$0.00"),
    ])
    def test_format_price(self, amount, code, expected):
        assert theme.format_price(amount, code) == expected

    def test_rejected_code_falls_back_to_symbol(self):
        settings = {"currencies": {"available": [{"code": "RS1", "symbol": "Rs"}]}}
        assert theme.format_price(12, "RS1", settings) == "Rs 12.00"

    def test_active_currency_from_settings(self):
        assert theme.format_price(10, settings=DEFAULT_SETTINGS) == "LKR 10.00"

    def test_symbol(self):
        assert theme.currency_symbol(DEFAULT_SETTINGS, "LKR") == "Rs"
        assert theme.currency_symbol({}, "GBP") == "£"

    def test_convert_price(self):
        assert theme.convert_price(DEFAULT_SETTINGS, 10, "USD", "LKR") == pytest.approx(3205.0)
        assert theme.convert_price(DEFAULT_SETTINGS, 3205, "LKR", "USD") == pytest.approx(10.0)
        assert theme.convert_price(DEFAULT_SETTINGS, 7, "USD", "USD") == 7


class TestShipping:
    """Default shipping: threshold 5000, default fee 350."""

    def test_zone_lookup_is_case_insensitive(self):
        assert theme.shipping_cost(DEFAULT_SETTINGS, "local (colombo)") == 250

    def test_unknown_zone_uses_default_fee(self):
        assert theme.shipping_cost(DEFAULT_SETTINGS, "Mars") == 350

    @pytest.mark.parametrize("subtotal,expected", [(0, 0), (1200, 350), (4999.99, 350), (5000, 0), (9000, 0)])
    def test_shipping_fee(self, subtotal, expected):
        assert theme.shipping_fee(DEFAULT_SETTINGS, subtotal) == expected
