from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..http_client import HttpClient


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None
    store_id: str | None = None

    def _auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if self.store_id:
            headers["X-Store-ID"] = self.store_id
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any):
        headers = kwargs.pop("headers", {})
        merged = {**self._auth_headers(), **headers}
        return await self.http.request(method, path, headers=merged, **kwargs)


def store_path(store_id: str, suffix: str) -> str:
    if not store_id:
        raise ValueError("store_id is required")
    return f"/api/stores/{store_id}/{suffix.lstrip('/')}"
