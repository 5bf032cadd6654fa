"""
utils/theme.py
--------------
Presentation values derived from the settings document: theme CSS
variables, page metadata, currency formatting and shipping fees.

Pure functions over the settings mapping returned by SettingsService;
nothing here touches the database.
"""

import re
from typing import Optional

from config import DEFAULT_CURRENCY

DEFAULT_PRIMARY = ("#10b981", "16, 185, 129")
DEFAULT_SECONDARY = ("#6366f1", "99, 102, 241")

_SHORT_HEX = re.compile(r"^#?([a-f\d])([a-f\d])([a-f\d])$", re.IGNORECASE)
_LONG_HEX = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)
_CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}$")

# Symbols the en-US formatter prints instead of the ISO code
_NARROW_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "INR": "₹", "CAD": "CA$", "AUD": "A$"}
_ZERO_DECIMAL = {"JPY", "KRW", "VND", "CLP", "ISK"}


def _section(settings: Optional[dict], name: str) -> dict:
    value = (settings or {}).get(name)
    return value if isinstance(value, dict) else {}


# ── Theme ─────────────────────────────────────────────────

def hex_to_rgb(value) -> Optional[tuple[int, int, int]]:
    """
    Parse '#rrggbb', 'rrggbb', '#rgb' or 'rgb'.

    Returns:
        (r, g, b) or None when the value is not a hex color.
    """
    if not isinstance(value, str):
        return None
    short = _SHORT_HEX.match(value.strip())
    text = "".join(c * 2 for c in short.groups()) if short else value.strip()
    match = _LONG_HEX.match(text)
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def _color_pair(value, default: tuple[str, str]) -> tuple[str, str]:
    rgb = hex_to_rgb(value)
    if rgb is None:
        return default
    return value.strip(), ", ".join(str(c) for c in rgb)


def css_variables(settings: Optional[dict]) -> str:
    """
    Render the theme colors as a `:root` block of CSS custom properties.
    A missing or malformed color falls back to the default pair.
    """
    layout = _section(settings, "layout")
    primary, primary_rgb = _color_pair(layout.get("primaryColor"), DEFAULT_PRIMARY)
    secondary, secondary_rgb = _color_pair(layout.get("secondaryColor"), DEFAULT_SECONDARY)
    return (
        ":root {\n"
        f"  --primary-color: {primary};\n"
        f"  --primary-rgb: {primary_rgb};\n"
        f"  --secondary-color: {secondary};\n"
        f"  --secondary-rgb: {secondary_rgb};\n"
        "}\n"
    )


def theme_classes(settings: Optional[dict]) -> dict:
    theme = _section(settings, "layout").get("theme") or "light"
    return {
        "body": f"{theme}-theme",
        "text": "text-foreground",
        "headings": "text-foreground font-bold",
        "borders": "border-border",
        "buttons": "bg-primary text-white",
    }


def page_metadata(settings: Optional[dict]) -> dict:
    general = _section(settings, "general")
    return {
        "title": general.get("siteName") or "Herbal Shop",
        "description": general.get("siteDescription")
        or general.get("description")
        or "Your one-stop shop for herbal products",
        "favicon": general.get("favicon") or "/favicon.ico",
    }


# ── Currency ──────────────────────────────────────────────

def _currency(settings: Optional[dict], code: str) -> Optional[dict]:
    for entry in _section(settings, "currencies").get("available") or []:
        if isinstance(entry, dict) and entry.get("code") == code:
            return entry
    return None


def active_currency(settings: Optional[dict]) -> str:
    return _section(settings, "currencies").get("active") or DEFAULT_CURRENCY


def currency_symbol(settings: Optional[dict], code: Optional[str] = None) -> str:
    code = code or active_currency(settings)
    entry = _currency(settings, code)
    if entry and entry.get("symbol"):
        return entry["symbol"]
    return _NARROW_SYMBOLS.get(code, "$")


def convert_price(
    settings: Optional[dict], amount: float, from_code: str = "USD", to_code: Optional[str] = None
) -> float:
    """Convert between configured currencies using their USD-based rates (unknown rate = 1)."""
    to_code = to_code or active_currency(settings)
    if from_code == to_code:
        return amount
    from_rate = (_currency(settings, from_code) or {}).get("rate") or 1
    to_rate = (_currency(settings, to_code) or {}).get("rate") or 1
    return amount / from_rate * to_rate


def format_price(amount, currency_code: Optional[str] = None, settings: Optional[dict] = None) -> str:
    """
    Render an amount in en-US currency style, e.g. "$1,234.50" or "LKR 1,234.50".

    When the code is not a valid ISO-4217 shape the formatter cannot be used
    and the result is "<symbol> <amount>" instead.
    """
    code = currency_code or active_currency(settings)
    value = float(amount or 0)
    if not isinstance(code, str) or not _CURRENCY_CODE.match(code):
        entry = _currency(settings, code)
        symbol = (entry or {}).get("symbol") or (code if isinstance(code, str) and code else "$")
        return f"{symbol} {value:.2f}"

    code = code.upper()
    decimals = 0 if code in _ZERO_DECIMAL else 2
    number = f"{abs(value):,.{decimals}f}"
    sign = "-" if value < 0 else ""
    if code in _NARROW_SYMBOLS:
        return f"{sign}{_NARROW_SYMBOLS[code]}{number}"
    return f"{sign}{code} {number}"


# ── Shipping ──────────────────────────────────────────────

def shipping_cost(settings: Optional[dict], zone_name: Optional[str] = None) -> float:
    """
    Fee for a named shipping zone (case-insensitive); the configured default
    fee when the zone is not given or not found.
    """
    shipping = _section(settings, "shipping")
    if zone_name:
        wanted = zone_name.strip().lower()
        for zone in shipping.get("shippingZones") or []:
            if isinstance(zone, dict) and str(zone.get("name", "")).strip().lower() == wanted:
                return float(zone.get("fee") or 0)
    return float(shipping.get("defaultShippingFee") or 0)


def shipping_fee(settings: Optional[dict], subtotal: float, zone_name: Optional[str] = None) -> float:
    """Shipping charged for a cart: free when empty or at/above the free-shipping threshold."""
    if subtotal <= 0:
        return 0.0
    threshold = _section(settings, "shipping").get("freeShippingThreshold")
    if threshold is not None and subtotal >= float(threshold):
        return 0.0
    return shipping_cost(settings, zone_name)
