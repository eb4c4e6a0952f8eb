from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable
from urllib.parse import urljoin

import httpx

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import TransportError
from .tracing import TRACE_HEADER, TraceContext

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    trace_id: str | None


@dataclass
class HttpClient:
    config: ClientConfig
    trace: TraceContext | None = None
    client: httpx.AsyncClient | None = None
    sleep: Sleeper = asyncio.sleep
    last_operation: LastOperation | None = None
    _owns_client: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.trace is None:
            self.trace = TraceContext()
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.config.read_timeout_seconds,
                    connect=self.config.connect_timeout_seconds,
                ),
                limits=httpx.Limits(
                    max_connections=self.config.max_connections,
                    max_keepalive_connections=self.config.max_connections,
                ),
                verify=self.config.verify_ssl,
            )
            self._owns_client = True

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self.client is not None and self._owns_client:
            await self.client.aclose()

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> dict[str, Any] | list[Any] | None:
        """Issue one API call and return the unwrapped ``data`` payload.

        Cancelling the awaiting task aborts the in-flight exchange;
        ``asyncio.CancelledError`` is never converted into an API error.
        """
        if self.client is None:
            raise RuntimeError("HTTP client not initialized")
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        root_trace = self.trace or TraceContext()
        trace_context = root_trace.for_request()
        request_headers[TRACE_HEADER] = trace_context.ensure()

        normalized_method = method.upper()
        url = self._build_url(path)
        can_retry = normalized_method in {"GET", "HEAD"}
        attempts = self.config.retries + 1 if can_retry else 1

        started = time.monotonic()
        response: httpx.Response | None = None
        for attempt in range(attempts):
            try:
                response = await self.client.request(
                    normalized_method,
                    url,
                    headers=request_headers,
                    json=json_body,
                    params=params,
                )
            except httpx.RequestError as exc:
                if attempt >= attempts - 1:
                    self._record_operation(module, operation, started, "error", trace_context.trace_id)
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc) or type(exc).__name__,
                        details={"type": type(exc).__name__},
                        trace_id=trace_context.trace_id,
                        status_code=0,
                        raw_payload=None,
                    ) from exc
                logger.debug("retrying %s %s after %s (attempt %d)", normalized_method, path, type(exc).__name__, attempt + 1)
            else:
                if response.status_code < 500 or attempt >= attempts - 1:
                    break
                logger.debug("retrying %s %s after HTTP %d", normalized_method, path, response.status_code)
            await self.sleep(self.config.retry_backoff_seconds * (2**attempt))

        if response is None:
            raise RuntimeError("HTTP request failed without response")

        trace_context.update_from_headers(response.headers)

        if response.is_success:
            if not response.content:
                self._finish(root_trace, trace_context, module, operation, started, "success")
                return None
            parsed = response.json()
            if isinstance(parsed, dict) and "success" in parsed:
                trace_context.update_from_payload(parsed)
                if parsed.get("success") is False:
                    self._finish(root_trace, trace_context, module, operation, started, "error")
                    raise map_error(response.status_code, parsed, trace_context.trace_id)
                self._finish(root_trace, trace_context, module, operation, started, "success")
                return parsed.get("data")
            self._finish(root_trace, trace_context, module, operation, started, "success")
            return parsed

        payload: Any
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text}
        trace_context.update_from_payload(payload if isinstance(payload, dict) else {})
        self._finish(root_trace, trace_context, module, operation, started, "error")
        raise map_error(response.status_code, payload if isinstance(payload, dict) else None, trace_context.trace_id)

    def _finish(
        self,
        root: TraceContext,
        child: TraceContext,
        module: str,
        operation: str,
        started: float,
        result: str,
    ) -> None:
        root.record(child)
        self._record_operation(module, operation, started, result, child.trace_id)

    def _record_operation(self, module: str, operation: str, started: float, result: str, trace_id: str | None) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            trace_id=trace_id,
        )
