"""
ViewState — what slice of the remote collection the user wants to see.

Transitions are pure functions returning a new frozen ViewState. Any change
to the shape of the result set (page size, sort, search, external filters)
resets ``page`` to 1 because the old page index no longer means anything.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping

from utils.query import build_list_params


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    @classmethod
    def coerce(cls, value: "SortDirection | str | None") -> "SortDirection":
        if value is None:
            return cls.ASCENDING
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized in ("asc", "ascending"):
            return cls.ASCENDING
        if normalized in ("desc", "descending"):
            return cls.DESCENDING
        raise ValueError(f"Unknown sort direction: {value!r}")


def _clean_filters(filters: Mapping[str, Any] | None) -> dict[str, Any]:
    return {
        str(k): v for k, v in (filters or {}).items()
        if v is not None and v != ""
    }


@dataclass(frozen=True)
class ViewState:
    page: int = 1
    page_size: int = 10
    sort_field: str | None = None
    sort_direction: SortDirection = SortDirection.ASCENDING
    search_text: str = ""
    filters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if int(self.page) < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if int(self.page_size) < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        object.__setattr__(self, "sort_direction", SortDirection.coerce(self.sort_direction))
        object.__setattr__(self, "search_text", self.search_text or "")
        object.__setattr__(self, "sort_field", self.sort_field or None)
        object.__setattr__(self, "filters", _clean_filters(self.filters))

    def to_params(self) -> dict[str, Any]:
        """Flat query params for the list endpoint."""
        return build_list_params(
            page=self.page,
            page_size=self.page_size,
            sort_field=self.sort_field,
            sort_direction=self.sort_direction.value,
            search_text=self.search_text,
            filters=self.filters,
        )


def set_page(state: ViewState, page: int) -> ViewState:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    return replace(state, page=page)


def set_page_size(state: ViewState, page_size: int) -> ViewState:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return replace(state, page=1, page_size=page_size)


def set_sort(
    state: ViewState,
    sort_field: str | None,
    direction: SortDirection | str | None = SortDirection.ASCENDING,
) -> ViewState:
    if not sort_field:
        return replace(state, page=1, sort_field=None, sort_direction=SortDirection.ASCENDING)
    return replace(
        state, page=1, sort_field=sort_field,
        sort_direction=SortDirection.coerce(direction),
    )


def toggle_sort(state: ViewState, sort_field: str) -> ViewState:
    """Column-header click: asc, then desc, then unsorted; a new column starts at asc."""
    if not sort_field:
        raise ValueError("toggle_sort needs a field name")
    if state.sort_field != sort_field:
        return set_sort(state, sort_field, SortDirection.ASCENDING)
    if state.sort_direction is SortDirection.ASCENDING:
        return set_sort(state, sort_field, SortDirection.DESCENDING)
    return set_sort(state, None)


def set_search(state: ViewState, text: str | None) -> ViewState:
    return replace(state, page=1, search_text=text or "")


def apply_external_filters(state: ViewState, filters: Mapping[str, Any] | None) -> ViewState:
    return replace(state, page=1, filters=_clean_filters(filters))


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` rows; never less than 1."""
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return max(1, math.ceil(total / page_size))
