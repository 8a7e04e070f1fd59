"""
Result and mutation types shared by the collection controller.

The transport boundary converts every outcome into a tagged result:
``Ok(value)`` or ``Err(kind, detail)``. Callers check with ``isinstance``;
nothing past that boundary inspects raw response shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Error taxonomy surfaced by the controller."""

    CANCELLED = "cancelled"
    TRANSIENT_FETCH_FAILURE = "transient_fetch_failure"
    MUTATION_FAILURE = "mutation_failure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    detail: str
    status_code: int | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.kind is ErrorKind.CANCELLED


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class LoadResult:
    """One authoritative page as reported by the server.

    ``total`` counts every row matching the current search/filters,
    independent of page size.
    """

    items: tuple[Mapping[str, Any], ...]
    total: int

    def __post_init__(self):
        if self.total < 0:
            raise ValueError(f"total must be >= 0, got {self.total}")
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))


# ── Pending mutations ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Insert:
    record: Mapping[str, Any]


@dataclass(frozen=True)
class Replace:
    id: Any
    record: Mapping[str, Any]


@dataclass(frozen=True)
class Remove:
    id: Any


PendingMutation = Union[Insert, Replace, Remove]
