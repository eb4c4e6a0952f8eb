from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DEBOUNCE_SECONDS = 0.5


class DebouncedInputFunnel:
    """Collapse bursts of raw text input into one settled value.

    Every :meth:`push` restarts the quiet period; once ``delay_seconds`` pass
    without another push, ``on_settled`` receives the latest raw value. The
    timer lives on the running event loop, so pushes must happen from inside it.
    """

    def __init__(
        self,
        on_settled: Callable[[str], None],
        *,
        delay_seconds: float = DEFAULT_SEARCH_DEBOUNCE_SECONDS,
        initial: str = "",
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._on_settled = on_settled
        self._delay_seconds = delay_seconds
        self._raw = initial
        self._settled = initial
        self._timer: asyncio.TimerHandle | None = None

    @property
    def raw(self) -> str:
        return self._raw

    @property
    def settled(self) -> str:
        return self._settled

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def push(self, value: str) -> None:
        self._raw = value
        self._cancel_timer()
        if self._delay_seconds == 0:
            self._fire()
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay_seconds, self._fire)

    def flush(self) -> None:
        """Settle the pending value now (e.g. the user pressed Enter)."""
        if self._timer is None:
            return
        self._cancel_timer()
        self._fire()

    def cancel(self) -> None:
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        self._settled = self._raw
        logger.debug("input settled after %.3fs quiet period", self._delay_seconds)
        self._on_settled(self._settled)
