from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..clients.products_client import ProductsClient
from ..config import BrowseConfig
from ..exceptions import ApiError
from ..models_listing import PageResult
from ..models_products import ProductListQuery, ProductStats
from ..telemetry import TelemetryLogger
from .debounce import DebouncedInputFunnel
from .list_controller import ListController
from .notifications import NotificationCenter
from .query_key import Query, SortSpec
from .url_state import Navigator

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_SORT = SortSpec(field="created_at", direction="desc")


class ProductListController(ListController):
    """Product catalog view: debounced search, category and stock filters."""

    module = "products"
    error_title = "Could not load products"
    zero_stats = ProductStats().model_dump()

    def __init__(
        self,
        client: ProductsClient,
        navigator: Navigator,
        *,
        store_id: str | None = None,
        config: BrowseConfig | None = None,
        notifications: NotificationCenter | None = None,
        telemetry: TelemetryLogger | None = None,
        sort: SortSpec | None = DEFAULT_PRODUCT_SORT,
    ) -> None:
        self.client = client
        super().__init__(
            navigator,
            store_id=store_id,
            config=config,
            notifications=notifications,
            telemetry=telemetry,
            sort=sort,
        )
        self.search_funnel = DebouncedInputFunnel(
            self._on_search_settled,
            delay_seconds=self.config.search_debounce_seconds,
        )
        self.categories: list[str] = []
        self._categories_task: asyncio.Task | None = None

    async def _fetch(self, query: Query) -> PageResult:
        extras = query.filters.extras
        api_query = ProductListQuery(
            search=query.search or None,
            category=query.category or None,
            is_active=extras.get("is_active"),
            low_stock=extras.get("low_stock"),
            page=query.page,
            limit=self.config.page_size,
            sort_by=query.sort.field if query.sort else None,
            sort_order=query.sort.direction if query.sort else None,
        )
        response = await self.client.list_products(query.scope_id, api_query)
        return PageResult(
            items=tuple(response.products),
            pagination=response.pagination,
            stats=response.stats.model_dump(),
        )

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        super().start()
        self._schedule_categories()

    def close(self) -> None:
        self.search_funnel.cancel()
        self._cancel_categories()
        super().close()

    async def wait_idle(self) -> None:
        await super().wait_idle()
        task = self._categories_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # -- events --------------------------------------------------------------

    def on_search_input(self, text: str) -> None:
        self.search_funnel.push(text)

    def submit_search(self) -> None:
        self.search_funnel.flush()

    @property
    def is_search_pending(self) -> bool:
        return self.search_funnel.raw.strip() != self.view.filters.search

    def on_category_change(self, category: str | None) -> bool:
        return self.on_filter_change(category=category or "")

    def on_low_stock_toggle(self, enabled: bool) -> bool:
        return self.on_filter_change(low_stock=True if enabled else None)

    def on_active_filter_change(self, is_active: bool | None) -> bool:
        return self.on_filter_change(is_active=is_active)

    def on_scope_change(self, store_id: str | None) -> bool:
        changed = super().on_scope_change(store_id)
        if changed:
            self._cancel_categories()
            self.categories = []
            self._schedule_categories()
        return changed

    def notify_mutated(self) -> None:
        super().notify_mutated()
        self._schedule_categories()

    def _on_search_settled(self, value: str) -> None:
        if self.orchestrator.closed:
            return
        self.on_filter_change(search=value)

    # -- categories side-load ------------------------------------------------

    async def load_categories(self) -> list[str]:
        store_id = self.view.filters.scope_id
        if store_id is None:
            self.categories = []
            return self.categories
        try:
            categories = await self.client.list_categories(store_id)
        except (ApiError, ValueError) as exc:
            logger.warning("failed to load categories for store %s: %s", store_id, exc)
            return self.categories
        if self.view.filters.scope_id == store_id:
            self.categories = categories
        return self.categories

    def _schedule_categories(self) -> None:
        if self.view.filters.scope_id is None or self.orchestrator.closed:
            return
        self._cancel_categories()
        self._categories_task = asyncio.get_running_loop().create_task(self.load_categories())

    def _cancel_categories(self) -> None:
        task, self._categories_task = self._categories_task, None
        if task is not None and not task.done():
            task.cancel()

    def render(self) -> dict[str, Any]:
        payload = super().render()
        payload["categories"] = list(self.categories)
        payload["search_input"] = self.search_funnel.raw
        payload["search_pending"] = self.is_search_pending
        return payload
