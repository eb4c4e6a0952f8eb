from __future__ import annotations

from typing import Any, Mapping

from ..config import BrowseConfig
from ..models_listing import PageResult
from ..telemetry import TelemetryLogger
from .notifications import NotificationCenter
from .orchestrator import FetchOrchestrator
from .query_key import Query, QueryFilters, SortSpec
from .resource_cache import ResourceCache
from .url_state import Navigator, UrlStateBridge
from .view_state import ViewState


class ListController:
    """Shared wiring of a paginated list view around a FetchOrchestrator."""

    module = "list"
    error_title = "Could not load data"
    zero_stats: Mapping[str, Any] = {}

    def __init__(
        self,
        navigator: Navigator,
        *,
        store_id: str | None = None,
        config: BrowseConfig | None = None,
        notifications: NotificationCenter | None = None,
        telemetry: TelemetryLogger | None = None,
        sort: SortSpec | None = None,
    ) -> None:
        self.config = config or BrowseConfig()
        self.notifications = notifications or NotificationCenter()
        self.orchestrator = FetchOrchestrator(
            self._fetch,
            UrlStateBridge(navigator),
            module=self.module,
            filters=QueryFilters(scope_id=store_id, sort=sort),
            cache=ResourceCache(max_entries=self.config.cache_max_entries),
            notifications=self.notifications,
            telemetry=telemetry,
            zero_stats=self.zero_stats,
            error_title=self.error_title,
        )

    async def _fetch(self, query: Query) -> PageResult:
        raise NotImplementedError

    @property
    def view(self) -> ViewState:
        return self.orchestrator.view

    def start(self) -> None:
        self.orchestrator.start()

    def close(self) -> None:
        self.orchestrator.close()

    async def wait_idle(self) -> None:
        await self.orchestrator.wait_idle()

    def on_page_change(self, page: int) -> bool:
        return self.orchestrator.on_page_change(page)

    def next_page(self) -> bool:
        # bounded by the settled pagination, not by an in-flight request
        pages = self.view.pagination.pages
        target = min(pages, self.view.current_page + 1)
        if target <= self.view.current_page:
            return False
        return self.on_page_change(target)

    def previous_page(self) -> bool:
        target = max(1, self.view.current_page - 1)
        if target == self.view.current_page:
            return False
        return self.on_page_change(target)

    def on_filter_change(self, partial: Mapping[str, Any] | None = None, **changes: Any) -> bool:
        return self.orchestrator.on_filter_change(partial, **changes)

    def on_scope_change(self, store_id: str | None) -> bool:
        return self.orchestrator.on_scope_change(store_id)

    def notify_mutated(self) -> None:
        """A create/update/delete succeeded: refetch instead of patching pages."""
        self.orchestrator.invalidate()

    def render(self) -> dict[str, Any]:
        payload = self.view.render()
        payload["module"] = self.module
        payload["notifications"] = self.notifications.render()
        return payload
