from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from .models_listing import Pagination

PaymentMethod = Literal["cash", "card", "mixed"]
PaymentStatus = Literal["completed", "refunded", "cancelled", "pending"]


class SaleListQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    start_date: str | None = None
    end_date: str | None = None


class SaleItem(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str | None = None
    product_id: str | None = None
    product_name: str | None = None
    product_barcode: str | None = None
    product_sku: str | None = None
    quantity: int = 0
    unit_price: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")


class Sale(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    store_id: str | None = None
    receipt_number: str | None = None
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    total: Decimal = Decimal("0")
    discount: Decimal | None = None
    created_at: str | None = None


class SaleListResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    sales: list[Sale] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination.zero)


class SaleLookupResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    sale: Sale
    items: list[SaleItem] = Field(default_factory=list)


class SalesPageStats(BaseModel):
    """Aggregates of the sales on one page; the sales endpoint returns none."""

    model_config = ConfigDict(frozen=True)

    total_revenue: Decimal = Decimal("0")
    page_count: int = 0
    completed_sales: int = 0
    cash_sales: int = 0
    card_sales: int = 0


def summarize_sales(sales: Iterable[Sale]) -> SalesPageStats:
    rows = list(sales)
    # refunded sales never count towards revenue
    revenue = sum((sale.total for sale in rows if sale.payment_status != "refunded"), Decimal("0"))
    return SalesPageStats(
        total_revenue=revenue,
        page_count=len(rows),
        completed_sales=sum(1 for sale in rows if sale.payment_status == "completed"),
        cash_sales=sum(1 for sale in rows if sale.payment_method == "cash"),
        card_sales=sum(1 for sale in rows if sale.payment_method == "card"),
    )
