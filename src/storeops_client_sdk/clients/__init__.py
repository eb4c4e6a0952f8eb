from .base import BaseClient
from .products_client import ProductsClient
from .sales_client import SalesClient

__all__ = ["BaseClient", "ProductsClient", "SalesClient"]
