"""
exceptions.py
-------------
Error taxonomy shared by every layer.
Each exception carries the HTTP-equivalent `status_code` the route layer
should answer with, so handlers never have to guess.
"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# ── Store boundary ────────────────────────────────────────

class DatabaseConnectionError(StorefrontError):
    """Raised when no connection can be leased (store unreachable or pool exhausted)."""

    status_code = 503


class QueryError(StorefrontError):
    """Raised when the store rejects a statement. Wraps the driver error."""

    def __init__(self, message: str, pgcode: Optional[str] = None):
        self.pgcode = pgcode
        super().__init__(message, details={"pgcode": pgcode})


class InsertError(QueryError):
    """Raised when an INSERT completes without yielding the new row id."""

    def __init__(self, table: str):
        super().__init__(f"Insert into '{table}' returned no id")
        self.details["table"] = table


class SettingsParseError(StorefrontError):
    """Raised when a stored settings document is not valid JSON."""

    def __init__(self, category: str, reason: str):
        super().__init__(
            f"Corrupt settings for category '{category}': {reason}",
            details={"category": category},
        )
        self.category = category


class AggregationError(StorefrontError):
    """Raised when aggregated child columns do not split to the same length."""


# ── Caller input ──────────────────────────────────────────

class ValidationError(StorefrontError):
    """Raised when caller input is malformed. Always raised before any query."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class InvalidIdentifier(ValidationError):
    """Raised when an entity id cannot be parsed to a positive integer."""

    def __init__(self, value, field: str = "id"):
        super().__init__(f"Invalid {field}: {value!r}", field=field)
        self.value = value


class NotFoundError(StorefrontError):
    """Raised when the addressed record does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity} #{entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )


class PermissionDeniedError(StorefrontError):
    """Raised when a non-admin identity calls an admin-only operation."""

    status_code = 403
