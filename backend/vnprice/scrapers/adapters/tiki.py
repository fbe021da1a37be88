"""Tiki (tiki.vn) crawler.

Search results are a React SPA; product detail links all contain "/p/".

Detail page structure:
  - h1[data-view-id=pdp_details_view_name] (title)
  - .product-price__current-price (sale price, "1.234.567 ₫")
  - [data-view-id=pdp_main_image] img (primary image)
  - [data-view-id=pdp_details_view_merchant] a (seller)
"""

from urllib.parse import quote

from vnprice.scrapers.base import BasePageCrawler
from vnprice.scrapers.extraction import ExtractionRule


class TikiCrawler(BasePageCrawler):
    """Tiki search results crawler."""

    shop_domain = "tiki.vn"
    shop_name = "Tiki"
    base_url = "https://tiki.vn"
    product_path_marker = "/p/"

    product_link_rules = (
        ExtractionRule('a[data-view-id="pdp_main_image"]', attribute="href"),
        ExtractionRule('a[href*="/p/"]', attribute="href"),
        ExtractionRule(".product-item a", attribute="href"),
        ExtractionRule('[data-view-content="product"] a', attribute="href"),
    )

    title_rules = (
        ExtractionRule('h1[data-view-id="pdp_details_view_name"]'),
        ExtractionRule("h1.title"),
        ExtractionRule(".header h1"),
        ExtractionRule("h1"),
    )

    price_rules = (
        ExtractionRule(".product-price__current-price"),
        ExtractionRule('[data-view-id="pdp_details_view_price"] .price-discount__price'),
        ExtractionRule(".price-discount__price"),
        ExtractionRule(".current-price"),
        ExtractionRule('[class*="price"]'),
    )

    image_rules = (
        ExtractionRule(".product-image img", attribute="src"),
        ExtractionRule('[data-view-id="pdp_main_image"] img', attribute="src"),
        ExtractionRule(".main-image img", attribute="src"),
        ExtractionRule(".product-images img", attribute="src"),
        # Lazy-loaded images keep the real URL in data-src
        ExtractionRule(".product-image img", attribute="data-src"),
    )

    seller_rules = (
        ExtractionRule('[data-view-id="pdp_details_view_merchant"] a'),
        ExtractionRule(".seller-name"),
        ExtractionRule(".shop-name"),
        ExtractionRule('[class*="seller"] a'),
        ExtractionRule('[class*="store"] a'),
    )

    next_page_rules = (
        ExtractionRule('a[aria-label="Next page"]'),
        ExtractionRule(".next-page"),
        ExtractionRule(".pagination-next"),
        ExtractionRule('[class*="next"]'),
        ExtractionRule("a", text="Tiếp"),
        ExtractionRule("a", text=">"),
    )

    def build_search_url(self, query: str, page: int = 1) -> str:
        return f"{self.base_url}/search?q={quote(query, safe='')}&page={page}"
