"""Shared query builder utilities.

Two directions of the same DRF-style list contract:

- Client side: translate a ViewState into the flat query params sent to a
  list endpoint (``page``, ``page_size``, ``ordering``, ``search`` + filters).
- Mock API side: turn those params back into a safe SQL WHERE / ORDER BY.
"""

from typing import Any, Mapping


# Keys owned by the list contract; external filters never override them.
CORE_PARAM_KEYS = ("page", "page_size", "ordering", "search")


def build_ordering(sort_field: str | None, sort_direction: str = "asc") -> str | None:
    """Build a DRF ``ordering`` value.

    Args:
        sort_field: Field to sort by. None (or empty) means server default.
        sort_direction: 'asc' or 'desc' (case-insensitive).

    Returns:
        ``field`` for ascending, ``-field`` for descending, or None.
    """
    if not sort_field:
        return None
    direction = str(getattr(sort_direction, "value", sort_direction)).lower()
    return f"-{sort_field}" if direction == "desc" else sort_field


def build_list_params(
    page: int,
    page_size: int,
    sort_field: str | None = None,
    sort_direction: str = "asc",
    search_text: str | None = None,
    filters: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the flat key/value map for a paginated list request.

    Filter values that are None or empty strings are dropped. Filter keys
    that collide with a core list key are ignored.

    Returns:
        Dict with ``page`` and ``page_size`` always present, ``ordering`` and
        ``search`` only when set, plus passthrough filter keys.
    """
    params: dict[str, Any] = {}
    for key, value in (filters or {}).items():
        if key in CORE_PARAM_KEYS or value is None or value == "":
            continue
        params[key] = value

    params["page"] = int(page)
    params["page_size"] = int(page_size)

    ordering = build_ordering(sort_field, sort_direction)
    if ordering:
        params["ordering"] = ordering

    search = (search_text or "").strip()
    if search:
        params["search"] = search
    return params


def parse_ordering(ordering: str | None, allowed_sorts: set[str]) -> tuple[str, str] | None:
    """Split a DRF ``ordering`` value into (column, direction).

    Raises:
        ValueError: If the column is not in the whitelist.
    """
    if not ordering:
        return None
    column = ordering[1:] if ordering.startswith("-") else ordering
    if column not in allowed_sorts:
        raise ValueError(
            f"Invalid ordering field: '{column}'. "
            f"Must be one of: {', '.join(sorted(allowed_sorts))}"
        )
    return column, "desc" if ordering.startswith("-") else "asc"


def build_where_clause(
    search: str | None = None,
    search_columns: tuple[str, ...] = (),
    filters: Mapping[str, Any] | None = None,
    filter_columns: set[str] | None = None,
) -> tuple[str, list[Any]]:
    """Build a SQL WHERE clause from search text and equality filters.

    Args:
        search: Free-text search; matched case-insensitively as a substring
            of any column in ``search_columns``.
        search_columns: Columns the search text is matched against.
        filters: Column → value equality filters.
        filter_columns: Whitelist of filterable columns; other keys are
            ignored so unknown query params never reach the SQL.

    Returns:
        Tuple of (where_clause_string, params_list). The where_clause_string
        starts with "WHERE " if any conditions exist, or is "" if none.
    """
    conditions: list[str] = []
    params: list[Any] = []

    for column, value in (filters or {}).items():
        if filter_columns is not None and column not in filter_columns:
            continue
        if value is None or value == "":
            continue
        conditions.append(f"CAST({column} AS TEXT) = ?")
        params.append(str(value))

    text = (search or "").strip()
    if text and search_columns:
        like = f"%{text.lower()}%"
        ors = " OR ".join(f"LOWER(COALESCE({c}, '')) LIKE ?" for c in search_columns)
        conditions.append(f"({ors})")
        params.extend([like] * len(search_columns))

    where = "WHERE " + " AND ".join(conditions) if conditions else ""
    return where, params


def build_order_clause(
    ordering: tuple[str, str] | None,
    default_sort: str = "id",
) -> str:
    """Build a safe SQL ORDER BY clause from a parsed ordering.

    A secondary ``id`` key keeps page boundaries stable across requests.

    Returns:
        ORDER BY clause string, e.g. "ORDER BY created_at DESC, id ASC".
    """
    if ordering is None:
        return f"ORDER BY {default_sort} ASC"
    column, direction = ordering
    clause = f"ORDER BY {column} {'DESC' if direction == 'desc' else 'ASC'}"
    if column != "id":
        clause += ", id ASC"
    return clause
