from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .models_listing import Pagination


class ProductListQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    search: str | None = None
    category: str | None = None
    is_active: bool | None = None
    low_stock: bool | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    sort_by: str | None = None
    sort_order: Literal["asc", "desc"] | None = None


class Product(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    store_id: str | None = None
    name: str
    description: str | None = None
    barcode: str | None = None
    sku: str | None = None
    category: str | None = None
    price: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")
    stock: int = 0
    stock_deposito: int = 0
    stock_venta: int = 0
    min_stock: int = 0
    min_stock_deposito: int = 0
    min_stock_venta: int = 0
    unit: str = "unit"
    image_url: str | None = None
    is_active: bool = True
    created_at: str | None = None
    updated_at: str | None = None


class ProductStats(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    total_products: int = 0
    total_value: Decimal = Decimal("0")
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    categories_count: int = 0


class ProductListResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    products: list[Product] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination.zero)
    stats: ProductStats = Field(default_factory=ProductStats)
