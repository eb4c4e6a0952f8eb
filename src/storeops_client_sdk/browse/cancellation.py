from __future__ import annotations

import asyncio
import logging

from ..exceptions import RequestCancelledError
from .query_key import QueryKey

logger = logging.getLogger(__name__)


class CancellationHandle:
    """Token for one issued request.

    ``cancel()`` is unconditional at the application layer (the outcome is
    ignored from then on) and best-effort at the transport layer (the attached
    task, if still running, is cancelled so the HTTP exchange is aborted).
    """

    def __init__(self, key: QueryKey, generation: int) -> None:
        self.key = key
        self.generation = generation
        self._cancelled = False
        self._resolved = False
        self._task: asyncio.Future | None = None

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "resolved" if self._resolved else "pending"
        return f"<CancellationHandle #{self.generation} {state}>"

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    @property
    def task(self) -> asyncio.Future | None:
        return self._task

    def attach(self, task: asyncio.Future) -> None:
        self._task = task
        if self._cancelled and not task.done():
            task.cancel()

    def cancel(self) -> bool:
        if self._cancelled or self._resolved:
            return False
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True

    def resolve(self) -> None:
        self._resolved = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError(
                code="REQUEST_CANCELLED",
                message="Request superseded by a newer query",
                details={"generation": self.generation},
                trace_id=None,
                status_code=0,
            )


class CancellationRegistry:
    """Holds the single live handle of one orchestrator."""

    def __init__(self) -> None:
        self._live: CancellationHandle | None = None
        self._generation = 0

    @property
    def live(self) -> CancellationHandle | None:
        return self._live

    def register(self, key: QueryKey) -> CancellationHandle:
        self.cancel_live()
        self._generation += 1
        handle = CancellationHandle(key, self._generation)
        self._live = handle
        return handle

    def is_live(self, handle: CancellationHandle) -> bool:
        return handle is self._live and not handle.is_cancelled

    def cancel_live(self) -> bool:
        handle, self._live = self._live, None
        if handle is None:
            return False
        cancelled = handle.cancel()
        if cancelled:
            logger.debug("superseded request #%d cancelled", handle.generation)
        return cancelled

    def resolve(self, handle: CancellationHandle) -> None:
        handle.resolve()
        if self._live is handle:
            self._live = None
