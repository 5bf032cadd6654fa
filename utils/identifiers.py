"""
utils/identifiers.py
--------------------
Canonical integer form for primary and foreign keys.

Ids reach the core as path parameters (strings), JSON numbers, or driver
values. Everything is funnelled through `normalize_id` so comparisons and
joins do not depend on which representation the caller used.
"""

from exceptions import InvalidIdentifier

ID_FIELDS: tuple[str, ...] = ("id", "category_id", "product_id", "user_id", "order_id")


def normalize_id(value) -> int:
    """
    Convert an id to int. Unparsable input yields 0.

    >>> normalize_id("42"), normalize_id(42), normalize_id(""), normalize_id(None)
    (42, 42, 0, 0)
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else 0
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return 0
    return 0


def require_id(value, field: str = "id") -> int:
    """
    Like `normalize_id`, but reject anything that is not a positive id.

    Raises:
        InvalidIdentifier: If the value does not denote an entity id.
    """
    normalized = normalize_id(value)
    if normalized <= 0:
        raise InvalidIdentifier(value, field)
    return normalized


def normalize_row_ids(row: dict, fields: tuple[str, ...] = ID_FIELDS) -> dict:
    """Normalize id-bearing fields of a result row in place. NULL foreign keys stay None."""
    for name in fields:
        if name in row and row[name] is not None:
            row[name] = normalize_id(row[name])
    return row
