"""SQLAlchemy models for VN Price Compare.

All models are imported here so metadata.create_all sees every table.
"""

from vnprice.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from vnprice.models.shop import Shop, shop_name_for_domain
from vnprice.models.product import Product
from vnprice.models.offer import Offer

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Shop",
    "shop_name_for_domain",
    "Product",
    "Offer",
]
