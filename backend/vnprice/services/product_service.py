"""Product service: persistence sink for scraped records.

Each scraped record is normalized into a canonical Product and an Offer
for the shop it came from. Saving is isolated per record: one bad record
is rolled back to its savepoint and reported, the rest are still saved.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vnprice.config import settings
from vnprice.models.offer import Offer
from vnprice.models.product import Product
from vnprice.models.shop import Shop, shop_name_for_domain
from vnprice.scrapers.base import ScrapedRecord
from vnprice.scrapers.utils.normalizer import normalize_product_title

logger = structlog.get_logger(__name__)


@dataclass
class SaveResult:
    """Outcome of saving a batch of scraped records."""

    saved_products: int = 0
    saved_offers: int = 0
    errors: List[str] = field(default_factory=list)


class ProductService:
    """Service for saving scraped records and querying the catalog."""

    def __init__(self, db: AsyncSession):
        """Initialize product service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="product_service")

    async def get_or_create_shop(self, domain: str) -> Shop:
        """Return the shop for a domain, creating it on first use."""
        result = await self.db.execute(select(Shop).where(Shop.domain == domain))
        shop = result.scalar_one_or_none()
        if shop:
            return shop

        shop = Shop(domain=domain, name=shop_name_for_domain(domain))
        self.db.add(shop)
        await self.db.flush()
        self.logger.info("shop_created", domain=domain, name=shop.name)
        return shop

    async def save_scraped_products(
        self,
        records: Iterable[ScrapedRecord],
        shop_domain: Optional[str] = None,
    ) -> SaveResult:
        """Normalize and upsert every record, collecting per-record errors.

        Args:
            records: Records returned by the scrape orchestrator
            shop_domain: Shop the records came from (default: DEFAULT_SHOP_DOMAIN)

        Returns:
            SaveResult with success counts and error messages; never raises
            for a single bad record
        """
        shop_domain = shop_domain or settings.DEFAULT_SHOP_DOMAIN
        result = SaveResult()
        shop = await self.get_or_create_shop(shop_domain)

        for record in records:
            try:
                async with self.db.begin_nested():
                    await self._save_record(shop, record)
            except Exception as e:
                message = f'Error saving product "{record.title}": {e}'
                self.logger.error("save_record_failed", url=record.product_url, error=str(e))
                result.errors.append(message)
                continue

            result.saved_products += 1
            result.saved_offers += 1

        await self.db.commit()

        self.logger.info(
            "scraped_products_saved",
            shop_domain=shop_domain,
            saved_products=result.saved_products,
            saved_offers=result.saved_offers,
            errors=len(result.errors),
        )
        return result

    async def _save_record(self, shop: Shop, record: ScrapedRecord) -> None:
        normalized = normalize_product_title(record.title)
        now = datetime.now(timezone.utc)

        existing = await self.db.execute(
            select(Product).where(Product.name == normalized.canonical_name)
        )
        product = existing.scalar_one_or_none()

        if product:
            if record.image_url:
                product.image = record.image_url
            product.updated_at = now
        else:
            product = Product(
                name=normalized.canonical_name,
                brand=normalized.brand,
                model=normalized.model,
                storage=normalized.storage,
                image=record.image_url or None,
                raw_title=record.title,
                is_official=normalized.is_official,
            )
            self.db.add(product)
            self.logger.debug("creating_new_product", name=normalized.canonical_name)

        await self.db.flush()

        existing = await self.db.execute(
            select(Offer).where(and_(
                Offer.product_id == product.id,
                Offer.shop_id == shop.id,
            ))
        )
        offer = existing.scalar_one_or_none()

        if offer:
            offer.price = record.price
            offer.url = record.product_url
            offer.last_checked_at = now
            offer.updated_at = now
        else:
            offer = Offer(
                product_id=product.id,
                shop_id=shop.id,
                price=record.price,
                url=record.product_url,
                last_checked_at=now,
            )
            self.db.add(offer)

        await self.db.flush()

    def _with_offers(self):
        return selectinload(Product.offers).selectinload(Offer.shop)

    async def search_products(self, query: str, limit: int = 20) -> List[Product]:
        """Case-insensitive search over name, brand, model and raw title."""
        pattern = f"%{query}%"
        result = await self.db.execute(
            select(Product)
            .options(self._with_offers())
            .where(or_(
                Product.name.ilike(pattern),
                Product.brand.ilike(pattern),
                Product.model.ilike(pattern),
                Product.raw_title.ilike(pattern),
            ))
            .order_by(Product.updated_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_product(self, product_id: UUID) -> Optional[Product]:
        """Get a product with its offers, cheapest first."""
        result = await self.db.execute(
            select(Product)
            .options(self._with_offers())
            .where(Product.id == product_id)
        )
        return result.scalar_one_or_none()

    async def list_products(self, page: int = 1, limit: int = 20) -> Tuple[List[Product], int]:
        """Get paginated products, most recently updated first.

        Returns:
            Tuple of (products list, total count)
        """
        offset = (page - 1) * limit
        result = await self.db.execute(
            select(Product)
            .options(self._with_offers())
            .order_by(Product.updated_at.desc())
            .offset(offset)
            .limit(limit)
        )
        products = list(result.scalars().all())

        total_result = await self.db.execute(select(func.count(Product.id)))
        total = total_result.scalar() or 0

        return products, total

    async def get_stats(self) -> dict:
        """Count products, offers and shops."""
        products = await self.db.scalar(select(func.count(Product.id)))
        offers = await self.db.scalar(select(func.count(Offer.id)))
        shops = await self.db.scalar(select(func.count(Shop.id)))
        return {
            "products": products or 0,
            "offers": offers or 0,
            "shops": shops or 0,
        }
