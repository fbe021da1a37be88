"""Command-line product scraper.

Crawls a marketplace search, then normalizes and saves the results.

Usage:
    python scripts/scrape.py "iPhone 13 Pro"
    python scripts/scrape.py --query "Samsung Galaxy S24" --max-pages 3
    python scripts/scrape.py -q "MacBook Air" -p 1 --headless false
    python scripts/scrape.py "Xiaomi 14" --shop tiki.vn --no-save
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

import structlog

# Add backend to path so the script also runs from a plain checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from vnprice.config import settings
from vnprice.core.exceptions import VNPriceException
from vnprice.scrapers import CRAWLERS, run


def _parse_bool(value: str) -> bool:
    return value.strip().lower() != "false"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VN Price Compare - product scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python scripts/scrape.py "iPhone 13 Pro"
  python scripts/scrape.py --query "Samsung Galaxy S24" --max-pages 3
  python scripts/scrape.py -q "MacBook Air" -p 1 --headless false

Supported shops:
{chr(10).join(f"  - {domain}" for domain in sorted(CRAWLERS))}
        """,
    )
    parser.add_argument("positional_query", nargs="?", metavar="query", help="Search query")
    parser.add_argument("-q", "--query", help='Search query (e.g., "iPhone 13 Pro")')
    parser.add_argument(
        "-p",
        "--max-pages",
        type=int,
        default=settings.SCRAPER_MAX_PAGES,
        help=f"Maximum listing pages to scrape (default: {settings.SCRAPER_MAX_PAGES})",
    )
    parser.add_argument(
        "-s",
        "--shop",
        default=settings.DEFAULT_SHOP_DOMAIN,
        help=f"Shop domain (default: {settings.DEFAULT_SHOP_DOMAIN})",
    )
    parser.add_argument(
        "--headless",
        type=_parse_bool,
        default=settings.SCRAPER_HEADLESS,
        help="Run the browser in headless mode (default: true)",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Print the scraped products without writing to the database",
    )
    return parser


async def save_records(records, shop_domain: str):
    # Imported lazily so --no-save runs without a database driver
    from vnprice.db.session import async_session_factory, create_tables, engine
    from vnprice.services.product_service import ProductService

    await create_tables()
    try:
        async with async_session_factory() as session:
            return await ProductService(session).save_scraped_products(records, shop_domain)
    finally:
        await engine.dispose()


async def main_async(args: argparse.Namespace) -> int:
    query = args.query or args.positional_query

    print("🚀 Starting scraping process...")
    print("📊 Configuration:")
    print(f"   Query: {query}")
    print(f"   Max Pages: {args.max_pages}")
    print(f"   Shop Domain: {args.shop}")
    print(f"   Headless: {args.headless}")
    print()

    try:
        records = await run(
            query,
            max_pages=args.max_pages,
            headless=args.headless,
            shop_domain=args.shop,
        )
    except (VNPriceException, ValueError) as e:
        print(f"❌ Scraping failed: {e}")
        return 1

    print(f"✅ Scraped {len(records)} products")
    if not records:
        print("ℹ️  No products found. Exiting.")
        return 0

    if args.no_save:
        for i, record in enumerate(records, 1):
            print(f"[{i}] {record.title}")
            print(f"    💰 Price: {record.price:,}₫")
            print(f"    🏪 Seller: {record.seller_name}")
            print(f"    🔗 URL: {record.product_url}")
        return 0

    print("💾 Saving products to database...")
    result = await save_records(records, args.shop)

    print()
    print("📈 Results Summary:")
    print(f"   Products scraped: {len(records)}")
    print(f"   Products saved: {result.saved_products}")
    print(f"   Offers saved: {result.saved_offers}")

    if result.errors:
        print(f"   Errors: {len(result.errors)}")
        print()
        print("❌ Errors encountered:")
        for i, error in enumerate(result.errors, 1):
            print(f"   {i}. {error}")

    print()
    print("✅ Scraping completed successfully!")
    return 0


def configure_logging(debug: bool) -> None:
    """Route structlog and stdlib logging through the same level threshold."""
    level = logging.INFO if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the scraper."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.query or args.positional_query):
        parser.print_usage()
        print("❌ Error: a search query must be provided")
        return 1

    configure_logging(settings.DEBUG)

    try:
        return asyncio.run(main_async(args))
    except KeyboardInterrupt:
        print("\n⏹️  Scraping interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
