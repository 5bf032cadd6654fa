"""
models/filters.py
-----------------
Closed set of filter predicates used to build WHERE clauses.

Every predicate renders to an SQL fragment plus the values it binds.
Column references come from repository code, never from request input;
request input only ever ends up in the bound values.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from exceptions import ValidationError
from utils.identifiers import require_id

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Equals:
    """`column = value`"""
    column: str
    value: Any

    def render(self) -> tuple[str, list]:
        return f"{self.column} = %s", [self.value]


@dataclass(frozen=True)
class Flag:
    """Boolean column test."""
    column: str
    value: bool

    def render(self) -> tuple[str, list]:
        return f"{self.column} = %s", [bool(self.value)]


@dataclass(frozen=True)
class Search:
    """Case-insensitive substring match over one or more text columns (OR-ed)."""
    columns: tuple[str, ...]
    term: str

    def render(self) -> tuple[str, list]:
        pattern = f"%{escape_like(self.term)}%"
        parts = " OR ".join(f"{c} ILIKE %s" for c in self.columns)
        return f"({parts})", [pattern] * len(self.columns)


@dataclass(frozen=True)
class AnyOf:
    """`column = ANY(values)`; an empty list matches nothing."""
    column: str
    values: tuple

    def render(self) -> tuple[str, list]:
        return f"{self.column} = ANY(%s)", [list(self.values)]


Predicate = Equals | Flag | Search | AnyOf


@dataclass
class WhereClause:
    """Rendered WHERE clause shared by data and count queries."""
    conditions: list[str] = field(default_factory=list)
    params: list = field(default_factory=list)

    @property
    def sql(self) -> str:
        return f"WHERE {' AND '.join(self.conditions)}" if self.conditions else ""


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def coerce_bool(value, name: str) -> bool:
    """Interpret query-string style booleans ("true", "0", ...)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValidationError(f"'{name}' must be a boolean, got {value!r}", field=name)


def _unknown_keys(data: Mapping, accepted: Sequence[str]) -> None:
    unknown = sorted(set(data) - set(accepted))
    if unknown:
        raise ValidationError(f"Unsupported filter keys: {', '.join(unknown)}", field=unknown[0])


# ── Entity filters ────────────────────────────────────────

@dataclass
class ProductFilter:
    """
    Product listing filter.

    Attributes:
        query: Substring matched against name and description.
        category_id: Only products of this category.
        is_published: Published state (None = either).
        is_featured: Featured state (None = either).
    """
    query: Optional[str] = None
    category_id: Optional[int] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None

    ALIASES = {
        "query": "query",
        "q": "query",
        "categoryId": "category_id",
        "category_id": "category_id",
        "isPublished": "is_published",
        "is_published": "is_published",
        "isFeatured": "is_featured",
        "is_featured": "is_featured",
    }

    @classmethod
    def from_mapping(cls, data: Optional[Mapping]) -> "ProductFilter":
        """
        Build a filter from request parameters.

        Raises:
            ValidationError: On unsupported keys or values of the wrong type.
        """
        data = data or {}
        _unknown_keys(data, cls.ALIASES)
        values = {}
        for key, raw in data.items():
            name = cls.ALIASES[key]
            if raw is None:
                continue
            if name == "query":
                term = str(raw).strip()
                if term:
                    values["query"] = term
            elif name == "category_id":
                values["category_id"] = require_id(raw, "categoryId")
            else:
                values[name] = coerce_bool(raw, key)
        return cls(**values)

    def predicates(self, alias: str = "p") -> list[Predicate]:
        prefix = f"{alias}." if alias else ""
        result: list[Predicate] = []
        if self.query:
            result.append(Search((f"{prefix}name", f"{prefix}description"), self.query))
        if self.category_id is not None:
            result.append(Equals(f"{prefix}category_id", self.category_id))
        if self.is_published is not None:
            result.append(Flag(f"{prefix}is_published", self.is_published))
        if self.is_featured is not None:
            result.append(Flag(f"{prefix}is_featured", self.is_featured))
        return result


@dataclass
class OrderFilter:
    """Admin order listing filter: status and free-text search."""
    status: Optional[str] = None
    search: Optional[str] = None
    user_id: Optional[int] = None

    ALIASES = {"status": "status", "search": "search", "q": "search",
               "userId": "user_id", "user_id": "user_id"}

    @classmethod
    def from_mapping(cls, data: Optional[Mapping], statuses: Sequence[str]) -> "OrderFilter":
        data = data or {}
        _unknown_keys(data, cls.ALIASES)
        values = {}
        for key, raw in data.items():
            name = cls.ALIASES[key]
            if raw is None or raw == "":
                continue
            if name == "status":
                if raw == "all":
                    continue
                if raw not in statuses:
                    raise ValidationError(f"Invalid status: {raw!r}", field="status")
                values["status"] = raw
            elif name == "search":
                values["search"] = str(raw).strip()
            else:
                values["user_id"] = require_id(raw, key)
        return cls(**values)

    def predicates(self) -> list[Predicate]:
        result: list[Predicate] = []
        if self.status:
            result.append(Equals("o.status", self.status))
        if self.search:
            result.append(Search(("o.id::text", "u.name", "o.customer_email"), self.search))
        if self.user_id is not None:
            result.append(Equals("o.user_id", self.user_id))
        return result


@dataclass
class UserFilter:
    """Admin user listing filter."""
    search: Optional[str] = None
    role: Optional[str] = None

    ALIASES = {"search": "search", "q": "search", "role": "role"}

    @classmethod
    def from_mapping(cls, data: Optional[Mapping], roles: Sequence[str]) -> "UserFilter":
        data = data or {}
        _unknown_keys(data, cls.ALIASES)
        values = {}
        for key, raw in data.items():
            name = cls.ALIASES[key]
            if raw is None or raw == "":
                continue
            if name == "role" and raw not in roles:
                raise ValidationError(f"Invalid role: {raw!r}", field="role")
            values[name] = str(raw).strip()
        return cls(**values)

    def predicates(self) -> list[Predicate]:
        result: list[Predicate] = []
        if self.search:
            result.append(Search(("name", "email"), self.search))
        if self.role:
            result.append(Equals("role", self.role))
        return result
