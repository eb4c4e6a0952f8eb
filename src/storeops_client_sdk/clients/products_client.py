from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models_products import ProductListQuery, ProductListResponse
from .base import BaseClient, store_path


@dataclass
class ProductsClient(BaseClient):
    async def list_products(self, store_id: str, query: ProductListQuery) -> ProductListResponse:
        payload = await self._request(
            "GET",
            store_path(store_id, "products"),
            params=build_product_params(query),
            module="products",
            operation="products.list",
        )
        if not isinstance(payload, dict):
            raise ValueError("Expected product list response to be a JSON object")
        return ProductListResponse.model_validate(payload)

    async def list_categories(self, store_id: str) -> list[str]:
        payload = await self._request(
            "GET",
            store_path(store_id, "products/categories"),
            module="products",
            operation="products.categories",
        )
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ValueError("Expected category list response to be a JSON array")
        return [str(value) for value in payload if value]


def build_product_params(query: ProductListQuery) -> dict[str, Any]:
    params = query.model_dump(exclude_none=True, mode="json")
    # the API reads booleans as lowercase strings
    for key in ("is_active", "low_stock"):
        if key in params:
            params[key] = "true" if params[key] else "false"
    if not params.get("search"):
        params.pop("search", None)
    if not params.get("category"):
        params.pop("category", None)
    return params
