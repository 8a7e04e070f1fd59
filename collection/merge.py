"""
OptimisticMerge — patch the visible page after a confirmed write.

Mutations are applied only after the server accepted the create/update/
delete, so there is never a phantom row to roll back. The patched page is an
approximation: the next authoritative LoadResult replaces it wholesale and
the recorded pending mutations are discarded.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from collection.results import Insert, PendingMutation, Remove, Replace

logger = logging.getLogger(__name__)

Rows = tuple[Mapping[str, Any], ...]


def _same_id(record: Mapping[str, Any], id_field: str, record_id: Any) -> bool:
    value = record.get(id_field) if isinstance(record, Mapping) else None
    return value is not None and str(value) == str(record_id)


def apply_mutation(
    items: Sequence[Mapping[str, Any]],
    total: int,
    mutation: PendingMutation,
    *,
    id_field: str = "id",
    prepend: bool = True,
) -> tuple[Rows, int]:
    """Return ``(items, total)`` with one mutation applied.

    Insert adds the record at the top (or bottom) and bumps the total.
    Replace swaps the matching row in place. Remove drops the matching row
    and decrements the total, floored at zero. Replace/Remove of a row that
    is not on the visible page leave both unchanged.
    """
    rows = tuple(items)
    if isinstance(mutation, Insert):
        record = mutation.record
        rows = (record,) + rows if prepend else rows + (record,)
        return rows, total + 1

    if isinstance(mutation, Replace):
        patched = tuple(
            mutation.record if _same_id(row, id_field, mutation.id) else row
            for row in rows
        )
        return patched, total

    if isinstance(mutation, Remove):
        kept = tuple(row for row in rows if not _same_id(row, id_field, mutation.id))
        if len(kept) == len(rows):
            return rows, total
        return kept, max(0, total - (len(rows) - len(kept)))

    raise TypeError(f"Unknown mutation: {mutation!r}")


class OptimisticMerge:
    """Track mutations applied locally since the last authoritative page."""

    def __init__(self, *, id_field: str = "id", insert_at: str = "start") -> None:
        if insert_at not in ("start", "end"):
            raise ValueError(f"insert_at must be 'start' or 'end', got {insert_at!r}")
        self.id_field = id_field
        self.insert_at = insert_at
        self._pending: list[PendingMutation] = []

    @property
    def pending(self) -> tuple[PendingMutation, ...]:
        return tuple(self._pending)

    def apply(
        self,
        items: Sequence[Mapping[str, Any]],
        total: int,
        mutation: PendingMutation,
    ) -> tuple[Rows, int]:
        rows, new_total = apply_mutation(
            items, total, mutation,
            id_field=self.id_field,
            prepend=self.insert_at == "start",
        )
        self._pending.append(mutation)
        logger.debug(
            "optimistic %s applied: total %d -> %d (pending=%d)",
            type(mutation).__name__, total, new_total, len(self._pending),
        )
        return rows, new_total

    def reconcile(self) -> int:
        """Drop pending mutations once a server page has been applied."""
        dropped = len(self._pending)
        self._pending.clear()
        return dropped
