"""Shop model representing marketplaces offers are scraped from."""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vnprice.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from vnprice.models.offer import Offer


# Display names for known Vietnamese marketplaces
SHOP_NAMES = {
    "tiki.vn": "Tiki",
    "shopee.vn": "Shopee",
    "lazada.vn": "Lazada",
    "sendo.vn": "Sendo",
    "thegioididong.com": "Thế Giới Di Động",
    "cellphones.com.vn": "CellphoneS",
}


def shop_name_for_domain(domain: str) -> str:
    return SHOP_NAMES.get(domain, domain)


class Shop(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Marketplace identified by its domain (e.g., 'tiki.vn')."""

    __tablename__ = "shops"

    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="Display name (e.g., 'Tiki')")
    domain: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)

    offers: Mapped[list["Offer"]] = relationship(back_populates="shop", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Shop(id={self.id}, domain='{self.domain}', name='{self.name}')>"
