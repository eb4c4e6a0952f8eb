from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..exceptions import ClientValidationError
from ..models_sales import SaleListQuery, SaleListResponse, SaleLookupResponse
from .base import BaseClient, store_path


@dataclass
class SalesClient(BaseClient):
    async def list_sales(self, store_id: str, query: SaleListQuery) -> SaleListResponse:
        payload = await self._request(
            "GET",
            store_path(store_id, "sales"),
            params=build_sale_params(query),
            module="sales",
            operation="sales.list",
        )
        if not isinstance(payload, dict):
            raise ValueError("Expected sales list response to be a JSON object")
        return SaleListResponse.model_validate(payload)

    async def search_by_ticket(self, store_id: str, ticket: str) -> SaleLookupResponse:
        term = (ticket or "").strip()
        if not term:
            raise ClientValidationError("ticket", "ticket number or barcode is required")
        payload = await self._request(
            "GET",
            store_path(store_id, "sales/search/ticket"),
            params={"ticket": term},
            module="sales",
            operation="sales.search_ticket",
        )
        if not isinstance(payload, dict):
            raise ValueError("Expected ticket search response to be a JSON object")
        return SaleLookupResponse.model_validate(payload)


def build_sale_params(query: SaleListQuery) -> dict[str, Any]:
    return query.model_dump(exclude_none=True, mode="json")
