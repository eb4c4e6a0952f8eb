from .cancellation import CancellationHandle, CancellationRegistry
from .debounce import DebouncedInputFunnel
from .list_controller import ListController
from .notifications import NotificationCenter
from .orchestrator import FetchOrchestrator, FetchState
from .product_list import ProductListController
from .query_key import Query, QueryFilters, QueryKey, SortSpec, encode
from .resource_cache import ResourceCache
from .sales_list import SalesListController
from .url_state import InMemoryNavigator, Navigator, UrlStateBridge, parse_page, with_page
from .view_state import StatusView, ViewState, ViewStateStatus, resolve_state

__all__ = [
    "CancellationHandle",
    "CancellationRegistry",
    "DebouncedInputFunnel",
    "FetchOrchestrator",
    "FetchState",
    "InMemoryNavigator",
    "ListController",
    "Navigator",
    "NotificationCenter",
    "ProductListController",
    "Query",
    "QueryFilters",
    "QueryKey",
    "ResourceCache",
    "SalesListController",
    "SortSpec",
    "StatusView",
    "UrlStateBridge",
    "ViewState",
    "ViewStateStatus",
    "encode",
    "parse_page",
    "resolve_state",
    "with_page",
]
