from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Mapping

TRACE_HEADER = "X-Trace-ID"
TRACE_HEADER_ALIASES = (TRACE_HEADER, "X-Trace-Id", "x-trace-id")


def new_trace_id() -> str:
    return str(uuid.uuid4())


@dataclass
class TraceContext:
    """Trace id carried by one logical request.

    Overlapping list requests must not share a mutable trace id, so the HTTP
    client derives a child context per call with :meth:`for_request` and only
    copies the server-confirmed id back into ``last_trace_id``.
    """

    trace_id: str | None = None
    last_trace_id: str | None = field(default=None, compare=False)

    def ensure(self) -> str:
        if not self.trace_id:
            self.trace_id = new_trace_id()
        return self.trace_id

    def for_request(self) -> "TraceContext":
        return TraceContext(trace_id=self.trace_id or new_trace_id())

    def record(self, child: "TraceContext") -> None:
        self.last_trace_id = child.trace_id

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        for key in TRACE_HEADER_ALIASES:
            trace_id = headers.get(key)
            if trace_id:
                self.trace_id = trace_id
                return

    def update_from_payload(self, payload: Mapping[str, object]) -> None:
        trace_id = payload.get("trace_id")
        if isinstance(trace_id, str) and trace_id:
            self.trace_id = trace_id
