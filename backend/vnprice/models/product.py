"""Product model keyed by canonical name."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vnprice.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from vnprice.models.offer import Offer


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Canonical product shared by offers from every shop.

    Products are deduplicated on ``name``, the canonical name built from
    brand + model + storage.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(300), unique=True, index=True, nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    storage: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    raw_title: Mapped[str] = mapped_column(String(1000), nullable=False, comment="Title of the first scraped listing")
    is_official: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    offers: Mapped[list["Offer"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Offer.price",
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name[:50]}')>"
