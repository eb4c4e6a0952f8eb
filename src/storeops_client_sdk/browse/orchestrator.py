from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

from ..exceptions import RequestCancelledError
from ..models_listing import PageResult, Pagination
from ..telemetry import TelemetryLogger, list_fetch_event
from ..ui_errors import to_user_facing_error
from .cancellation import CancellationHandle, CancellationRegistry
from .notifications import NotificationCenter
from .query_key import Query, QueryFilters, encode
from .resource_cache import ResourceCache
from .url_state import Unsubscribe, UrlStateBridge
from .view_state import ViewState

logger = logging.getLogger(__name__)

FetchPage = Callable[[Query], Awaitable[PageResult]]
ViewListener = Callable[[ViewState], None]


class FetchState(str, Enum):
    IDLE = "idle"
    SERVING_FROM_CACHE = "serving_from_cache"
    FETCHING = "fetching"
    SETTLED = "settled"
    ABORTED = "aborted"


class FetchOrchestrator:
    """Event-driven controller behind one paginated list view.

    Inputs arrive as events (address changed, filters changed, scope changed,
    data mutated). Each one recomputes the effective query and either serves
    the cached page synchronously or issues a cancellable fetch whose result
    is committed only while its handle is still the live one.

    The current page is assigned in exactly one place, the address listener
    registered in :meth:`start`. ``on_page_change`` only rewrites the address.
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        bridge: UrlStateBridge,
        *,
        module: str = "list",
        filters: QueryFilters | None = None,
        cache: ResourceCache | None = None,
        registry: CancellationRegistry | None = None,
        notifications: NotificationCenter | None = None,
        telemetry: TelemetryLogger | None = None,
        zero_stats: Mapping[str, Any] | None = None,
        error_title: str = "Could not load data",
    ) -> None:
        self._fetch_page = fetch_page
        self.bridge = bridge
        self.module = module
        self.cache = cache if cache is not None else ResourceCache()
        self.registry = registry or CancellationRegistry()
        self.notifications = notifications or NotificationCenter()
        self.telemetry = telemetry or TelemetryLogger(app_name="storeops", enabled=False)
        self.error_title = error_title
        self._zero_stats = dict(zero_stats or {})
        self._view = ViewState(
            current_page=bridge.read_page(),
            filters=filters or QueryFilters(),
            stats=dict(self._zero_stats),
        )
        self._fetch_state = FetchState.IDLE
        self._listeners: list[ViewListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe_address: Unsubscribe | None = None
        self._closed = False

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def state(self) -> FetchState:
        return self._fetch_state

    @property
    def current_page(self) -> int:
        return self._view.current_page

    @property
    def filters(self) -> QueryFilters:
        return self._view.filters

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: ViewListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        if self._closed:
            raise RuntimeError("orchestrator is closed")
        if self._unsubscribe_address is None:
            self._unsubscribe_address = self.bridge.subscribe(self._on_address_page)
        page = self.bridge.read_page()
        if page != self._view.current_page:
            self._commit(current_page=page)
        self._evaluate()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.registry.cancel_live()
        if self._unsubscribe_address is not None:
            self._unsubscribe_address()
            self._unsubscribe_address = None
        self.cache.clear()
        self._listeners.clear()
        if self._fetch_state == FetchState.FETCHING:
            self._fetch_state = FetchState.ABORTED

    async def wait_idle(self) -> None:
        """Wait until every issued request (live or superseded) has finished."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    # -- events from the rendering layer ------------------------------------

    def on_page_change(self, page: int) -> bool:
        return self.bridge.write_page(page)

    def on_filter_change(self, partial: Mapping[str, Any] | None = None, **changes: Any) -> bool:
        merged = {**(partial or {}), **changes}
        filters = self._view.filters.merge(merged)
        if filters == self._view.filters:
            return False
        self._apply_filters(filters)
        return True

    def on_scope_change(self, scope_id: str | None) -> bool:
        if scope_id == self._view.filters.scope_id:
            return False
        self._apply_filters(replace(self._view.filters, scope_id=scope_id))
        return True

    def invalidate(self) -> None:
        """Data was mutated elsewhere: drop every cached page and refetch."""
        if self._closed:
            return
        self.cache.clear()
        self._cancel_live()
        self._evaluate()

    # -- transitions ---------------------------------------------------------

    def _on_address_page(self, page: int) -> None:
        if self._closed or page == self._view.current_page:
            return
        self._commit(current_page=page)
        self._evaluate()

    def _apply_filters(self, filters: QueryFilters) -> None:
        if self._closed:
            return
        # aggregates are filter-dependent, so no cached page survives
        self.cache.clear()
        self._cancel_live()
        self._commit(filters=filters)
        if filters.scope_id is not None and self._view.current_page != 1:
            if self.bridge.write_page(1):
                # the address listener re-evaluates with page 1
                return
        self._evaluate()

    def _evaluate(self) -> None:
        if self._closed:
            return
        filters = self._view.filters
        if filters.scope_id is None:
            self._cancel_live()
            self._fetch_state = FetchState.IDLE
            self._commit(
                items=(),
                pagination=Pagination.zero(),
                stats=dict(self._zero_stats),
                is_fetching=False,
                last_error=None,
            )
            return

        query = filters.at_page(self._view.current_page)
        key = encode(query)
        cached = self.cache.get(key)
        if cached is not None:
            self._cancel_live()
            self._fetch_state = FetchState.SERVING_FROM_CACHE
            logger.debug("%s page %d served from cache", self.module, query.page)
            self._apply_result(cached)
            self.telemetry.emit(
                list_fetch_event(module=self.module, outcome="cache_hit", page=query.page, scope_id=query.scope_id)
            )
            return

        live = self.registry.live
        if live is not None and live.key == key and not live.is_cancelled:
            return

        handle = self.registry.register(key)
        self._fetch_state = FetchState.FETCHING
        logger.debug("%s page %d fetching (request #%d)", self.module, query.page, handle.generation)
        if not self._view.is_fetching:
            self._commit(is_fetching=True)
        task = asyncio.get_running_loop().create_task(self._run(handle, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        handle.attach(task)

    async def _run(self, handle: CancellationHandle, query: Query) -> None:
        started = time.monotonic()
        try:
            handle.raise_if_cancelled()
            result = await self._fetch_page(query)
        except asyncio.CancelledError:
            if handle.is_cancelled:
                self._discard(handle)
                return
            raise
        except RequestCancelledError:
            if self.registry.is_live(handle):
                # aborted below us: release the key so the same query can be retried,
                # and never leave rows of an earlier query under the current filters
                self.registry.resolve(handle)
                self._fetch_state = FetchState.ABORTED
                self._commit(
                    items=(),
                    pagination=Pagination.zero(),
                    stats=dict(self._zero_stats),
                    is_fetching=False,
                    last_error=None,
                )
            self._discard(handle)
            return
        except Exception as exc:
            if not self.registry.is_live(handle):
                self._discard(handle)
                return
            self._fail(handle, query, exc, started)
            return

        if not self.registry.is_live(handle):
            self._discard(handle)
            return
        self.registry.resolve(handle)
        self.cache.set(handle.key, result)
        self._fetch_state = FetchState.SETTLED
        self._apply_result(result)
        self.telemetry.emit(
            list_fetch_event(
                module=self.module,
                outcome="settled",
                page=query.page,
                scope_id=query.scope_id,
                duration_ms=_elapsed_ms(started),
            )
        )

    def _fail(self, handle: CancellationHandle, query: Query, exc: Exception, started: float) -> None:
        self.registry.resolve(handle)
        self._fetch_state = FetchState.SETTLED
        user_error = to_user_facing_error(exc)
        logger.warning("%s page %d failed: %s", self.module, query.page, exc)
        self._commit(
            items=(),
            pagination=Pagination.zero(),
            stats=dict(self._zero_stats),
            is_initial_load=False,
            is_fetching=False,
            last_error=user_error,
        )
        self.notifications.push_error(user_error, title=self.error_title)
        self.telemetry.emit(
            list_fetch_event(
                module=self.module,
                outcome="failed",
                page=query.page,
                scope_id=query.scope_id,
                duration_ms=_elapsed_ms(started),
                trace_id=user_error.trace_id,
                error_code=str(getattr(exc, "code", type(exc).__name__)),
            )
        )

    def _discard(self, handle: CancellationHandle) -> None:
        logger.debug("%s discarded outcome of superseded request #%d", self.module, handle.generation)
        if self.registry.live is None and self._fetch_state == FetchState.FETCHING:
            self._fetch_state = FetchState.ABORTED

    def _cancel_live(self) -> None:
        if self.registry.cancel_live():
            if self._fetch_state == FetchState.FETCHING:
                self._fetch_state = FetchState.ABORTED
            if self._view.is_fetching:
                self._commit(is_fetching=False)

    def _apply_result(self, result: PageResult) -> None:
        self._commit(
            items=tuple(result.items),
            pagination=result.pagination,
            stats=dict(result.stats),
            is_initial_load=False,
            is_fetching=False,
            last_error=None,
        )

    def _commit(self, **changes: Any) -> None:
        self._view = replace(self._view, **changes)
        for listener in list(self._listeners):
            listener(self._view)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
