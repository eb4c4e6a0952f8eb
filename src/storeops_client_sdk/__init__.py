from .browse import (
    FetchOrchestrator,
    FetchState,
    InMemoryNavigator,
    ProductListController,
    Query,
    QueryFilters,
    ResourceCache,
    SalesListController,
    SortSpec,
    UrlStateBridge,
    ViewState,
    encode,
)
from .clients import ProductsClient, SalesClient
from .config import BrowseConfig, ClientConfig, ConfigError, load_browse_config, load_config
from .exceptions import (
    ApiError,
    ClientValidationError,
    ForbiddenError,
    NotFoundError,
    RequestCancelledError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .http_client import HttpClient
from .models_listing import PageResult, Pagination
from .tracing import TraceContext
from .ui_errors import UserFacingError, to_user_facing_error

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "BrowseConfig",
    "ClientConfig",
    "ClientValidationError",
    "ConfigError",
    "FetchOrchestrator",
    "FetchState",
    "ForbiddenError",
    "HttpClient",
    "InMemoryNavigator",
    "NotFoundError",
    "PageResult",
    "Pagination",
    "ProductListController",
    "ProductsClient",
    "Query",
    "QueryFilters",
    "RequestCancelledError",
    "ResourceCache",
    "SalesClient",
    "SalesListController",
    "SortSpec",
    "TraceContext",
    "TransportError",
    "UnauthorizedError",
    "UrlStateBridge",
    "UserFacingError",
    "ValidationError",
    "ViewState",
    "encode",
    "load_browse_config",
    "load_config",
    "to_user_facing_error",
]
