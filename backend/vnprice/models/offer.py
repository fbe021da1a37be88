"""Offer model: one shop's price for one product."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vnprice.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from vnprice.models.product import Product
    from vnprice.models.shop import Shop


class Offer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Price of a product at a shop, refreshed on every crawl."""

    __tablename__ = "offers"

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shop_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False, comment="Price in VND")
    url: Mapped[str] = mapped_column(String(2000), nullable=False)
    last_checked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("product_id", "shop_id", name="uq_offer_product_shop"),
    )

    product: Mapped["Product"] = relationship(back_populates="offers")
    shop: Mapped["Shop"] = relationship(back_populates="offers")

    def __repr__(self) -> str:
        return f"<Offer(product_id={self.product_id}, shop_id={self.shop_id}, price={self.price})>"
