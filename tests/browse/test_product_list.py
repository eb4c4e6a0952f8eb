from __future__ import annotations

import asyncio
import math

import httpx
import pytest

from storeops_client_sdk.browse.product_list import ProductListController
from storeops_client_sdk.browse.url_state import InMemoryNavigator
from storeops_client_sdk.clients.products_client import ProductsClient, build_product_params
from storeops_client_sdk.config import BrowseConfig, ClientConfig
from storeops_client_sdk.http_client import HttpClient
from storeops_client_sdk.models_products import ProductListQuery
from storeops_client_sdk.telemetry import TelemetryLogger

TOTAL_PRODUCTS = 23


class ProductsApi:
    """Serves /products and /products/categories for any store."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_categories = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        store_id = request.url.path.split("/")[3]
        if request.url.path.endswith("/products/categories"):
            if self.fail_categories:
                return httpx.Response(500, json={"success": False, "error": {"code": "BOOM", "message": "down"}})
            return httpx.Response(200, json={"success": True, "data": [f"{store_id}-dairy", f"{store_id}-bakery"]})
        params = request.url.params
        page = int(params.get("page", "1"))
        limit = int(params.get("limit", "20"))
        search = params.get("search")
        total = 3 if search else TOTAL_PRODUCTS
        first = (page - 1) * limit
        products = [
            {"id": f"{store_id}-p{index}", "name": f"Product {index}", "stock": index}
            for index in range(first, min(first + limit, total))
        ]
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "products": products,
                    "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
                    "stats": {"total_products": total, "total_value": "1250.50", "low_stock_count": 2},
                },
            },
        )

    def list_requests(self) -> list[httpx.Request]:
        return [request for request in self.requests if not request.url.path.endswith("/categories")]


def _controller(api: ProductsApi, *, store_id: str | None = "store-1", query_string: str = "", **kwargs):
    http = HttpClient(
        config=ClientConfig(env_name="test", api_base_url="https://api.test", retries=0),
        client=httpx.AsyncClient(transport=httpx.MockTransport(api)),
    )
    navigator = InMemoryNavigator(query_string)
    controller = ProductListController(
        ProductsClient(http=http, access_token="token-1"),
        navigator,
        store_id=store_id,
        config=BrowseConfig(page_size=10, search_debounce_ms=20),
        **kwargs,
    )
    return controller, navigator


@pytest.mark.asyncio
async def test_first_load_fetches_page_and_categories() -> None:
    api = ProductsApi()
    controller, _ = _controller(api)

    controller.start()
    assert controller.render()["loading"] is True
    await controller.wait_idle()

    view = controller.render()
    assert view["loading"] is False
    assert len(view["items"]) == 10
    assert view["pagination"]["pages"] == 3
    assert view["stats"]["total_products"] == TOTAL_PRODUCTS
    assert view["categories"] == ["store-1-dairy", "store-1-bakery"]
    request = api.list_requests()[0]
    assert request.url.path == "/api/stores/store-1/products"
    assert request.url.params["limit"] == "10"
    assert request.url.params["sort_by"] == "created_at"
    assert request.url.params["sort_order"] == "desc"
    assert "search" not in request.url.params
    assert request.headers["Authorization"] == "Bearer token-1"


@pytest.mark.asyncio
async def test_next_and_previous_are_clamped_to_known_pages() -> None:
    api = ProductsApi()
    controller, navigator = _controller(api)
    controller.start()
    await controller.wait_idle()

    assert controller.previous_page() is False
    for _ in range(3):
        controller.next_page()
        await controller.wait_idle()

    assert controller.view.current_page == 3
    assert navigator.current_query_string() == "page=3"
    assert controller.next_page() is False
    assert len(api.list_requests()) == 3

    controller.previous_page()
    assert controller.view.current_page == 2
    assert len(api.list_requests()) == 3


@pytest.mark.asyncio
async def test_typing_settles_into_one_search_request() -> None:
    api = ProductsApi()
    controller, navigator = _controller(api, query_string="page=2")
    controller.start()
    await controller.wait_idle()

    for text in ("m", "mi", "mil", "milk"):
        controller.on_search_input(text)
    assert controller.is_search_pending is True
    assert controller.render()["search_input"] == "milk"

    await asyncio.sleep(0.06)
    await controller.wait_idle()

    searches = [request for request in api.list_requests() if "search" in request.url.params]
    assert [request.url.params["search"] for request in searches] == ["milk"]
    assert searches[0].url.params["page"] == "1"
    assert navigator.current_query_string() == ""
    assert controller.view.pagination.total == 3
    assert controller.is_search_pending is False


@pytest.mark.asyncio
async def test_submit_search_skips_the_quiet_period() -> None:
    api = ProductsApi()
    controller, _ = _controller(api)
    controller.start()
    await controller.wait_idle()

    controller.on_search_input("bread")
    controller.submit_search()
    await controller.wait_idle()

    assert api.list_requests()[-1].url.params["search"] == "bread"


@pytest.mark.asyncio
async def test_low_stock_toggle_adds_and_removes_filter() -> None:
    api = ProductsApi()
    controller, _ = _controller(api)
    controller.start()
    await controller.wait_idle()

    controller.on_low_stock_toggle(True)
    await controller.wait_idle()
    assert api.list_requests()[-1].url.params["low_stock"] == "true"

    controller.on_low_stock_toggle(False)
    await controller.wait_idle()
    assert "low_stock" not in api.list_requests()[-1].url.params
    assert len(api.list_requests()) == 3


@pytest.mark.asyncio
async def test_store_switch_reloads_list_and_categories() -> None:
    api = ProductsApi()
    controller, navigator = _controller(api, query_string="page=2")
    controller.start()
    await controller.wait_idle()

    controller.on_scope_change("store-2")
    await controller.wait_idle()

    assert navigator.current_query_string() == ""
    assert api.list_requests()[-1].url.path == "/api/stores/store-2/products"
    assert controller.view.items[0].id == "store-2-p0"
    assert controller.categories == ["store-2-dairy", "store-2-bakery"]


@pytest.mark.asyncio
async def test_category_failure_keeps_list_usable() -> None:
    api = ProductsApi()
    api.fail_categories = True
    controller, _ = _controller(api)

    controller.start()
    await controller.wait_idle()

    assert controller.categories == []
    assert controller.view.items
    assert controller.notifications.messages == []


@pytest.mark.asyncio
async def test_mutation_refetches_current_page() -> None:
    api = ProductsApi()
    controller, _ = _controller(api)
    controller.start()
    await controller.wait_idle()

    controller.notify_mutated()
    await controller.wait_idle()

    assert len(api.list_requests()) == 2
    assert len(controller.orchestrator.cache) == 1


@pytest.mark.asyncio
async def test_without_store_nothing_is_requested() -> None:
    api = ProductsApi()
    controller, _ = _controller(api, store_id=None)

    controller.start()
    await controller.wait_idle()

    assert api.requests == []
    assert controller.render()["view_state"]["status"] == "no_scope"
    assert controller.render()["loading"] is False


@pytest.mark.asyncio
async def test_telemetry_records_cache_hits_without_search_text(tmp_path) -> None:
    api = ProductsApi()
    telemetry = TelemetryLogger(app_name="storeops-test", enabled=True, log_file=tmp_path / "events.jsonl")
    controller, _ = _controller(api, telemetry=telemetry)
    controller.start()
    await controller.wait_idle()
    controller.next_page()
    await controller.wait_idle()
    controller.previous_page()

    categories = [event["category"] for event in telemetry.emitted]
    assert categories == ["api_call_result", "api_call_result", "cache"]
    assert all("search" not in event["context"] for event in telemetry.emitted)
    assert (tmp_path / "events.jsonl").read_text(encoding="utf-8").count("\n") == 3


def test_product_params_drop_empty_text_and_lowercase_booleans() -> None:
    params = build_product_params(ProductListQuery(search="", category=None, is_active=False, low_stock=True, page=2))

    assert params == {"is_active": "false", "low_stock": "true", "page": 2, "limit": 20}
