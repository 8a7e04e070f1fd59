"""Remote-collection view controller for paginated PMIS list screens."""

from collection.controller import (
    CollectionCallbacks,
    CollectionResource,
    CollectionSnapshot,
    FetchStatus,
    RemoteCollectionController,
)
from collection.debounce import Debouncer
from collection.fetch import FetchCoordinator, FetchOutcome
from collection.filters import LocationFilter
from collection.merge import OptimisticMerge, apply_mutation
from collection.results import (
    Err, ErrorKind, Insert, LoadResult, Ok, PendingMutation, Remove, Replace, Result,
)
from collection.view_state import (
    SortDirection,
    ViewState,
    apply_external_filters,
    page_count,
    set_page,
    set_page_size,
    set_search,
    set_sort,
    toggle_sort,
)

__all__ = [
    "CollectionCallbacks",
    "CollectionResource",
    "CollectionSnapshot",
    "Debouncer",
    "Err",
    "ErrorKind",
    "FetchCoordinator",
    "FetchOutcome",
    "FetchStatus",
    "Insert",
    "LoadResult",
    "LocationFilter",
    "Ok",
    "OptimisticMerge",
    "PendingMutation",
    "RemoteCollectionController",
    "Remove",
    "Replace",
    "Result",
    "SortDirection",
    "ViewState",
    "apply_external_filters",
    "apply_mutation",
    "page_count",
    "set_page",
    "set_page_size",
    "set_search",
    "set_sort",
    "toggle_sort",
]
