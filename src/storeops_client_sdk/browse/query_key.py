from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Union

FilterValue = Union[str, bool]
QueryKey = str

SORT_DIRECTIONS = {"asc", "desc"}
_FILTER_FIELDS = {"search", "category", "sort"}


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: str = "desc"

    def __post_init__(self) -> None:
        if not isinstance(self.field, str) or not self.field or not isinstance(self.direction, str):
            raise ValueError(f"Invalid sort: field={self.field!r} direction={self.direction!r}")
        direction = self.direction.lower()
        if direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unsupported sort direction: {self.direction}")
        object.__setattr__(self, "direction", direction)


def _normalize_extra(
    values: Mapping[str, FilterValue | None] | Iterable[tuple[str, FilterValue | None]] | None,
) -> tuple[tuple[str, FilterValue], ...]:
    if not values:
        return ()
    pairs = dict(values.items() if isinstance(values, Mapping) else values)
    # unset filters are dropped so {"low_stock": None} equals {}
    kept = ((str(key), value) for key, value in pairs.items() if value is not None and value != "")
    return tuple(sorted(kept, key=lambda item: item[0]))


def _normalize_sort(value: Any) -> SortSpec | None:
    if value is None or isinstance(value, SortSpec):
        return value
    if isinstance(value, Mapping):
        try:
            return SortSpec(**value)
        except TypeError as exc:
            raise ValueError(f"Invalid sort: {dict(value)!r}") from exc
    raise ValueError(f"sort must be a SortSpec or a {{field, direction}} mapping, got {value!r}")


@dataclass(frozen=True)
class QueryFilters:
    """Every dimension of a list query except the page number."""

    scope_id: str | None = None
    search: str = ""
    category: str = ""
    extra_filters: tuple[tuple[str, FilterValue], ...] = field(default=())
    sort: SortSpec | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "search", (self.search or "").strip())
        object.__setattr__(self, "category", self.category or "")
        object.__setattr__(self, "extra_filters", _normalize_extra(self.extra_filters))
        object.__setattr__(self, "sort", _normalize_sort(self.sort))

    @property
    def extras(self) -> dict[str, FilterValue]:
        return dict(self.extra_filters)

    def merge(self, partial: Mapping[str, Any]) -> "QueryFilters":
        """Apply a partial filter change; unknown keys land in ``extra_filters``."""
        changes: dict[str, Any] = {}
        extras = self.extras
        for key, value in partial.items():
            if key == "scope_id":
                raise ValueError("scope changes go through on_scope_change")
            if key in _FILTER_FIELDS:
                changes[key] = value if value is not None or key == "sort" else ""
            elif value is None or value == "":
                extras.pop(key, None)
            else:
                extras[key] = value
        changes["extra_filters"] = tuple(extras.items())
        return replace(self, **changes)

    def at_page(self, page: int) -> "Query":
        if self.scope_id is None:
            raise ValueError("a query needs a scope")
        return Query(
            scope_id=self.scope_id,
            page=page,
            search=self.search,
            category=self.category,
            extra_filters=self.extra_filters,
            sort=self.sort,
        )


@dataclass(frozen=True)
class Query:
    scope_id: str
    page: int = 1
    search: str = ""
    category: str = ""
    extra_filters: tuple[tuple[str, FilterValue], ...] = field(default=())
    sort: SortSpec | None = None

    def __post_init__(self) -> None:
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise ValueError(f"page must be an integer >= 1, got {self.page!r}")
        object.__setattr__(self, "search", (self.search or "").strip())
        object.__setattr__(self, "category", self.category or "")
        object.__setattr__(self, "extra_filters", _normalize_extra(self.extra_filters))
        object.__setattr__(self, "sort", _normalize_sort(self.sort))

    @property
    def filters(self) -> QueryFilters:
        return QueryFilters(
            scope_id=self.scope_id,
            search=self.search,
            category=self.category,
            extra_filters=self.extra_filters,
            sort=self.sort,
        )


def encode(query: Query) -> QueryKey:
    """Canonical cache key: equal for field-wise equal queries, however built."""
    payload = {
        "category": query.category,
        "extra_filters": {key: value for key, value in query.extra_filters},
        "page": query.page,
        "scope_id": query.scope_id,
        "search": query.search,
        "sort": None if query.sort is None else {"direction": query.sort.direction, "field": query.sort.field},
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))
