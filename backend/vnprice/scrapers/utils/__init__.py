"""Scraper utilities for browser lifecycle, retries and data normalization."""

from .normalizer import (
    NormalizedAttributes,
    build_canonical_name,
    detect_brand,
    detect_official,
    extract_model,
    extract_storage,
    normalize_price,
    normalize_product_title,
    normalize_url,
    UNKNOWN_PRODUCT_NAME,
)


__all__ = [
    "NormalizedAttributes",
    "build_canonical_name",
    "detect_brand",
    "detect_official",
    "extract_model",
    "extract_storage",
    "normalize_price",
    "normalize_product_title",
    "normalize_url",
    "UNKNOWN_PRODUCT_NAME",
]
