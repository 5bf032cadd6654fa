"""
repositories/aggregation.py
---------------------------
Rebuild parent → children shapes from flat query results.

Two shapes are supported:

* aggregated rows: one row per parent, each child column packed into a
  delimiter-joined string (``string_agg``). Index *i* of every column belongs
  to the same child, so the columns must split to equal lengths. Only use
  this for columns whose values cannot contain the delimiter.
* joined rows: one row per parent/child pair from a LEFT JOIN, grouped in
  memory by parent key. No string splitting, so any text is safe.
"""

from typing import Callable, Iterable, Mapping, Optional

from exceptions import AggregationError

DEFAULT_NUMERIC: dict[str, Callable] = {"quantity": int, "price": float}


def _is_empty(value) -> bool:
    return value is None or str(value) == ""


def _split(value, delimiter: str) -> list[str]:
    return ("" if value is None else str(value)).split(delimiter)


def reconstruct(
    parent_row: Mapping,
    child_columns: Mapping[str, str],
    numeric: Optional[Mapping[str, Callable]] = None,
    key: str = "items",
    delimiter: str = ",",
) -> dict:
    """
    Turn one aggregated parent row into ``{...parent, key: [child, ...]}``.

    Args:
        parent_row: Row carrying one joined string per child column.
        child_columns: Joined column name → child field name,
            e.g. ``{"item_ids": "id", "item_prices": "price"}``.
        numeric: Child field → converter (defaults to quantity→int, price→float).
        key: Name of the list attached to the parent.
        delimiter: Separator used by the aggregate.

    Returns:
        Parent fields (joined columns removed) plus the child list. A parent
        without children (NULL or empty joined strings) gets an empty list.

    Raises:
        AggregationError: If the joined columns split to different lengths.
    """
    converters = DEFAULT_NUMERIC if numeric is None else numeric
    parent = {k: v for k, v in parent_row.items() if k not in child_columns}

    # A parent has no children only when every joined column is empty; a single
    # child may legitimately carry "" in one column.
    if all(_is_empty(parent_row.get(column)) for column in child_columns):
        parent[key] = []
        return parent

    split = {field: _split(parent_row.get(column), delimiter) for column, field in child_columns.items()}
    lengths = {field: len(values) for field, values in split.items()}
    if len(set(lengths.values())) > 1:
        raise AggregationError(
            f"Aggregated child columns are misaligned: {lengths}",
            details={"parent_id": parent_row.get("id"), "lengths": lengths},
        )

    count = next(iter(lengths.values()), 0)
    items = []
    for i in range(count):
        child = {}
        for field, values in split.items():
            raw = values[i]
            convert = converters.get(field)
            child[field] = convert(raw) if convert is not None and raw != "" else raw
        items.append(child)
    parent[key] = items
    return parent


def group_joined_rows(
    rows: Iterable[Mapping],
    parent_key: str = "id",
    child_prefix: str = "item_",
    child_key: str = "id",
    key: str = "items",
) -> list[dict]:
    """
    Group LEFT JOIN rows into parents with ordered child lists.

    Child columns are recognised by `child_prefix` (``item_id`` → ``id``).
    Parents keep first-seen order, children keep row order. A row whose
    child key is NULL (parent without children) adds no child.
    """
    parents: dict = {}
    for row in rows:
        pid = row[parent_key]
        if pid not in parents:
            parent = {k: v for k, v in row.items() if not k.startswith(child_prefix)}
            parent[key] = []
            parents[pid] = parent
        child = {k[len(child_prefix):]: v for k, v in row.items() if k.startswith(child_prefix)}
        if child.get(child_key) is not None:
            parents[pid][key].append(child)
    return list(parents.values())
