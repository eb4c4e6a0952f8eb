from __future__ import annotations

import logging
from datetime import date
from typing import get_args

from pydantic import ValidationError as PayloadValidationError

from ..clients.sales_client import SalesClient
from ..config import BrowseConfig
from ..exceptions import ApiError, ClientValidationError, NotFoundError
from ..models_listing import PageResult
from ..models_sales import (
    PaymentMethod,
    PaymentStatus,
    SaleListQuery,
    SaleLookupResponse,
    SalesPageStats,
    summarize_sales,
)
from ..telemetry import TelemetryLogger
from ..ui_errors import to_user_facing_error
from .list_controller import ListController
from .notifications import NotificationCenter
from .query_key import Query
from .url_state import Navigator

logger = logging.getLogger(__name__)

PAYMENT_METHODS = frozenset(get_args(PaymentMethod))
PAYMENT_STATUSES = frozenset(get_args(PaymentStatus))


class SalesListController(ListController):
    """Sales history view filtered by payment method and status."""

    module = "sales"
    error_title = "Could not load sales"
    zero_stats = SalesPageStats().model_dump()

    def __init__(
        self,
        client: SalesClient,
        navigator: Navigator,
        *,
        store_id: str | None = None,
        config: BrowseConfig | None = None,
        notifications: NotificationCenter | None = None,
        telemetry: TelemetryLogger | None = None,
    ) -> None:
        self.client = client
        super().__init__(
            navigator,
            store_id=store_id,
            config=config,
            notifications=notifications,
            telemetry=telemetry,
        )

    async def _fetch(self, query: Query) -> PageResult:
        extras = query.filters.extras
        api_query = SaleListQuery(
            page=query.page,
            limit=self.config.page_size,
            payment_method=extras.get("payment_method"),
            payment_status=extras.get("payment_status"),
            start_date=extras.get("start_date"),
            end_date=extras.get("end_date"),
        )
        response = await self.client.list_sales(query.scope_id, api_query)
        return PageResult(
            items=tuple(response.sales),
            pagination=response.pagination,
            stats=summarize_sales(response.sales).model_dump(),
        )

    def on_payment_method_change(self, method: str | None) -> bool:
        if method and method not in PAYMENT_METHODS:
            raise ValueError(f"Unsupported payment method: {method}")
        return self.on_filter_change(payment_method=method or None)

    def on_payment_status_change(self, status: str | None) -> bool:
        if status and status not in PAYMENT_STATUSES:
            raise ValueError(f"Unsupported payment status: {status}")
        return self.on_filter_change(payment_status=status or None)

    def on_date_range_change(self, start_date: date | str | None, end_date: date | str | None) -> bool:
        start = _iso_date("start_date", start_date)
        end = _iso_date("end_date", end_date)
        if start and end and start > end:
            raise ValueError(f"start_date {start} is after end_date {end}")
        return self.on_filter_change(start_date=start, end_date=end)

    async def search_ticket(self, term: str) -> SaleLookupResponse | None:
        """Direct lookup by receipt number or barcode; failures become notices."""
        store_id = self.view.filters.scope_id
        if store_id is None:
            self.notifications.push(level="warning", title="Ticket search", message="Select a store first")
            return None
        try:
            return await self.client.search_by_ticket(store_id, term)
        except ClientValidationError:
            self.notifications.push(
                level="error",
                title="Ticket search",
                message="Enter a ticket number or barcode",
            )
        except NotFoundError as exc:
            self.notifications.push(
                level="error",
                title="Ticket search",
                message="Sale not found",
                details={"trace_id": exc.trace_id},
            )
        except ApiError as exc:
            self.notifications.push_error(to_user_facing_error(exc), title="Ticket search")
        except (PayloadValidationError, ValueError) as exc:
            logger.warning("ticket lookup returned an unexpected payload: %s", exc)
            self.notifications.push(
                level="error",
                title="Ticket search",
                message="Unexpected response from the server. Please retry.",
                details={"technical": type(exc).__name__},
            )
        return None


def _iso_date(name: str, value: date | str | None) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()[:10]
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: expected YYYY-MM-DD, got {value!r}") from exc
