from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models_listing import Pagination
from ..ui_errors import UserFacingError
from .query_key import QueryFilters


class ViewStateStatus(str, Enum):
    NO_SCOPE = "no_scope"
    LOADING = "loading"
    EMPTY = "empty"
    SUCCESS = "success"
    FATAL_ERROR = "fatal_error"


_STATUS_ICONS = {
    ViewStateStatus.NO_SCOPE: "store",
    ViewStateStatus.LOADING: "spinner",
    ViewStateStatus.EMPTY: "inbox",
    ViewStateStatus.SUCCESS: "check",
    ViewStateStatus.FATAL_ERROR: "error",
}


@dataclass(frozen=True)
class StatusView:
    status: ViewStateStatus
    message: str | None = None
    trace_id: str | None = None
    data_available: bool = False

    def render(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "trace_id": self.trace_id,
            "data_available": self.data_available,
            "icon": _STATUS_ICONS[self.status],
        }


def resolve_state(
    *,
    scope_absent: bool,
    is_initial_load: bool,
    error: str | None,
    has_data: bool,
    trace_id: str | None = None,
) -> StatusView:
    if scope_absent:
        return StatusView(ViewStateStatus.NO_SCOPE, "Select a store to continue", trace_id=trace_id)
    # only the very first resolution may show a loading placeholder
    if is_initial_load:
        return StatusView(ViewStateStatus.LOADING, "Loading data...", trace_id=trace_id)
    if error:
        return StatusView(ViewStateStatus.FATAL_ERROR, error, trace_id=trace_id)
    if not has_data:
        return StatusView(ViewStateStatus.EMPTY, "No data found", trace_id=trace_id)
    return StatusView(ViewStateStatus.SUCCESS, "Ready", trace_id=trace_id, data_available=True)


@dataclass(frozen=True)
class ViewState:
    """Read-only snapshot handed to the rendering layer."""

    current_page: int = 1
    filters: QueryFilters = field(default_factory=QueryFilters)
    items: tuple[Any, ...] = ()
    pagination: Pagination = field(default_factory=Pagination.zero)
    stats: dict[str, Any] = field(default_factory=dict)
    is_initial_load: bool = True
    is_fetching: bool = False
    last_error: UserFacingError | None = None

    @property
    def scope_absent(self) -> bool:
        return self.filters.scope_id is None

    @property
    def status(self) -> StatusView:
        error = self.last_error
        return resolve_state(
            scope_absent=self.scope_absent,
            is_initial_load=self.is_initial_load,
            error=error.message if error else None,
            has_data=bool(self.items),
            trace_id=error.trace_id if error else None,
        )

    def render(self) -> dict[str, Any]:
        return {
            "current_page": self.current_page,
            "filters": {
                "scope_id": self.filters.scope_id,
                "search": self.filters.search,
                "category": self.filters.category,
                **self.filters.extras,
            },
            "items": list(self.items),
            "pagination": {
                **self.pagination.model_dump(),
                "has_previous": self.pagination.has_previous,
                "has_next": self.pagination.has_next,
            },
            "stats": dict(self.stats),
            "loading": self.is_initial_load and not self.scope_absent,
            "refreshing": self.is_fetching and not self.is_initial_load,
            "error": self.last_error.message if self.last_error else None,
            "view_state": self.status.render(),
        }
