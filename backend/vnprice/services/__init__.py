"""Service layer for persisting and querying scraped products."""

from vnprice.services.product_service import ProductService, SaveResult

__all__ = [
    "ProductService",
    "SaveResult",
]
