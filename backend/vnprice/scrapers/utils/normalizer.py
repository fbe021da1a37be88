"""Product title, price and URL normalization.

Every function here is total: bad input degrades to ``None``, ``False``,
``0`` or the input itself, never an exception. Pattern tables are ordered
lists so the first matching entry decides ties.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple
from urllib.parse import urlsplit


UNKNOWN_PRODUCT_NAME = "Unknown Product"

# (brand, keywords) in priority order. A title like "Ốp lưng Samsung cho iPhone"
# resolves to Apple because Apple is declared first.
BRAND_PATTERNS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Apple", ("apple", "iphone", "ipad", "macbook", "airpods", "imac")),
    ("Samsung", ("samsung", "galaxy")),
    ("Xiaomi", ("xiaomi", "redmi", "poco", "mi ")),
    ("Oppo", ("oppo", "reno", "find")),
    ("Vivo", ("vivo", "y series", "v series")),
    ("Huawei", ("huawei", "mate", "p series")),
    ("OnePlus", ("oneplus", "nord")),
    ("Realme", ("realme",)),
    ("Nokia", ("nokia",)),
    ("LG", ("lg",)),
    ("Sony", ("sony", "xperia")),
    ("Google", ("google", "pixel")),
]

STORAGE_PATTERN = re.compile(r"(\d+)\s*(gb|tb)(?:\s*(?:ssd|hdd))?", re.IGNORECASE)

OFFICIAL_KEYWORDS: Tuple[str, ...] = (
    "chính hãng",
    "chinh hang",
    "official",
    "hàng chính hãng",
    "hang chinh hang",
    "authorized",
    "bảo hành chính hãng",
    "bao hanh chinh hang",
)

MAX_MODEL_LENGTH = 50

_GENERIC_MODEL = re.compile(r"^[\w\s\-]+", re.ASCII)
_TRAILING_WORD = re.compile(r"\S+$")
_PRICE_NOISE = re.compile(r"[₫đĐ.,\s]")
_LEADING_INT = re.compile(r"^[+-]?\d+")


def _title_words(text: str) -> str:
    """Collapse whitespace and normalize case ("13  pro max" -> "13 Pro Max", "s24" -> "S24")."""
    return " ".join(
        word.capitalize() if word.isalpha() else word.upper() for word in text.split()
    )


# (brand, pattern, formatter) in priority order; the first rule for the
# detected brand whose pattern matches produces the model.
MODEL_RULES: List[Tuple[str, Pattern[str], Callable[[re.Match], str]]] = [
    (
        "Apple",
        re.compile(r"iphone\s*(\d+\s*(?:pro|plus|mini|max)?(?:\s*max)?)", re.IGNORECASE),
        lambda m: f"iPhone {_title_words(m.group(1))}",
    ),
    (
        "Samsung",
        re.compile(r"galaxy\s*([a-z]\d+|note\s*\d+|s\d+)", re.IGNORECASE),
        lambda m: f"Galaxy {_title_words(m.group(1))}",
    ),
    (
        "Xiaomi",
        re.compile(
            r"\b(redmi|poco|mi)\b\s*([a-z0-9 ]+?)\s*(?=\b\d+\s*(?:gb|tb)\b|[^a-z0-9 ]|$)",
            re.IGNORECASE,
        ),
        lambda m: f"{m.group(1).capitalize()} {_title_words(m.group(2))}",
    ),
]


@dataclass(frozen=True)
class NormalizedAttributes:
    """Canonical attributes derived from a raw product title."""

    canonical_name: str
    brand: Optional[str]
    model: Optional[str]
    storage: Optional[str]
    is_official: bool


def detect_brand(title: str) -> Optional[str]:
    """Return the first brand whose keyword appears in the title, or None."""
    if not title:
        return None

    lower_title = title.lower()
    for brand, keywords in BRAND_PATTERNS:
        if any(keyword in lower_title for keyword in keywords):
            return brand
    return None


def extract_storage(title: str) -> Optional[str]:
    """Return the first storage size in the title, e.g. "128GB".

    Only the first match is reported; "iPhone 128GB + thẻ nhớ 256GB" gives
    "128GB".
    """
    if not title:
        return None

    match = STORAGE_PATTERN.search(title)
    if not match:
        return None
    return f"{match.group(1)}{match.group(2).upper()}"


def extract_model(title: str, brand: Optional[str]) -> Optional[str]:
    """Extract a model name for an already detected brand.

    Brand specific rules win; otherwise the ASCII words following the brand
    name are used, capped at 50 characters. Vietnamese suffixes such as
    "chính hãng" never become part of the model.
    """
    if not brand or not title:
        return None

    for rule_brand, pattern, formatter in MODEL_RULES:
        if rule_brand != brand:
            continue
        match = pattern.search(title)
        if match:
            return formatter(match).strip()[:MAX_MODEL_LENGTH]

    brand_index = title.lower().find(brand.lower())
    if brand_index == -1:
        return None

    after_brand = title[brand_index + len(brand):].strip()
    match = _GENERIC_MODEL.match(after_brand)
    if not match:
        return None

    model = match.group(0)
    if match.end() < len(after_brand) and after_brand[match.end()].isalnum():
        # Stopped inside an accented word ("chính"); drop the partial word.
        model = _TRAILING_WORD.sub("", model)

    model = model.strip()[:MAX_MODEL_LENGTH].strip()
    return model or None


def detect_official(title: str) -> bool:
    """True when the title advertises an official / authorized product."""
    if not title:
        return False
    lower_title = title.lower()
    return any(keyword in lower_title for keyword in OFFICIAL_KEYWORDS)


def build_canonical_name(
    brand: Optional[str], model: Optional[str], storage: Optional[str]
) -> str:
    """Join the known parts with a space, or return the placeholder name."""
    parts = [part for part in (brand, model, storage) if part]
    return " ".join(parts) or UNKNOWN_PRODUCT_NAME


def normalize_product_title(raw_title: str) -> NormalizedAttributes:
    """Derive all canonical attributes from a raw title."""
    brand = detect_brand(raw_title)
    model = extract_model(raw_title, brand)
    storage = extract_storage(raw_title)
    return NormalizedAttributes(
        canonical_name=build_canonical_name(brand, model, storage),
        brand=brand,
        model=model,
        storage=storage,
        is_official=detect_official(raw_title),
    )


def normalize_price(price_text: str) -> int:
    """Parse a localized price like "1.234.567 ₫" into an integer.

    Returns 0 when no number can be read; callers treat 0 as "no price".
    """
    if not price_text:
        return 0

    cleaned = _PRICE_NOISE.sub("", price_text)
    match = _LEADING_INT.match(cleaned)
    if not match:
        return 0
    return int(match.group(0))


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """Make a scraped href absolute where possible.

    Absolute URLs pass through, protocol-relative ones get ``https:``,
    root-relative ones are resolved against ``base_url``'s scheme and host.
    Anything else is returned unchanged.
    """
    if not url:
        return url

    if url.startswith("http"):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/") and base_url:
        try:
            base = urlsplit(base_url)
        except ValueError:
            return url
        if base.scheme and base.netloc:
            return f"{base.scheme}://{base.netloc}{url}"
    return url
