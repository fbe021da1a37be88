"""Ordered-fallback field extraction over a rendered page.

Marketplace markup drifts between page variants, so each field is located by
a tuple of rules tried most-specific first. Extraction works on an HTML
snapshot (``page.content()``) parsed with BeautifulSoup, which keeps the
lookup logic independent of a live browser.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Sequence

import structlog
from bs4 import BeautifulSoup, Tag

from vnprice.scrapers.utils.normalizer import normalize_url

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExtractionRule:
    """One candidate lookup for a field.

    Attributes:
        selector: CSS selector
        attribute: Attribute to read instead of the element text
        text: Substring the element text must contain
    """

    selector: str
    attribute: Optional[str] = None
    text: Optional[str] = None


FieldRules = Sequence[ExtractionRule]


class QueryableDocument(Protocol):
    """Read-only view of a page that extraction rules run against."""

    def find_first_match(self, rules: FieldRules) -> str:
        ...

    def find_all_matches(self, rules: FieldRules) -> List[str]:
        ...

    def find_control(self, rules: FieldRules) -> Optional[ExtractionRule]:
        ...


def is_disabled(element: Tag) -> bool:
    """Check the usual disabled markers: attribute, class or ARIA state."""
    if element.has_attr("disabled"):
        return True
    if "disabled" in (element.get("class") or []):
        return True
    return (element.get("aria-disabled") or "").lower() == "true"


class HtmlDocument:
    """BeautifulSoup snapshot of a page implementing QueryableDocument."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html or "", "html.parser")

    def _elements(self, rule: ExtractionRule) -> Iterator[Tag]:
        for element in self.soup.select(rule.selector):
            if rule.text and rule.text not in element.get_text():
                continue
            yield element

    def _first_element(self, rule: ExtractionRule) -> Optional[Tag]:
        return next(self._elements(rule), None)

    @staticmethod
    def _value(element: Tag, rule: ExtractionRule) -> str:
        if rule.attribute:
            value = element.get(rule.attribute)
            if isinstance(value, list):
                value = " ".join(value)
            return (value or "").strip()
        return element.get_text(" ", strip=True)

    def find_first_match(self, rules: FieldRules) -> str:
        """Value of the first element of the first rule that yields text."""
        for rule in rules:
            element = self._first_element(rule)
            if element is None:
                continue
            value = self._value(element, rule)
            if value:
                return value
        return ""

    def find_all_matches(self, rules: FieldRules) -> List[str]:
        """Values of every element of every rule, de-duplicated in order."""
        values: List[str] = []
        seen = set()
        for rule in rules:
            for element in self._elements(rule):
                value = self._value(element, rule)
                if value and value not in seen:
                    seen.add(value)
                    values.append(value)
        return values

    def find_control(self, rules: FieldRules) -> Optional[ExtractionRule]:
        """First rule whose first element exists and is not disabled."""
        for rule in rules:
            element = self._first_element(rule)
            if element is not None and not is_disabled(element):
                return rule
        return None


def locate_field(document: QueryableDocument, rules: FieldRules) -> str:
    """First non-empty match for a field, "" when no rule matches."""
    return document.find_first_match(rules)


def collect_product_links(
    document: QueryableDocument,
    rules: FieldRules,
    base_url: str,
    path_marker: str,
) -> List[str]:
    """Absolute product URLs from a listing page.

    Every rule is applied, hrefs without the product path marker are dropped,
    and the result keeps discovery order without duplicates.
    """
    links: List[str] = []
    for href in document.find_all_matches(rules):
        if path_marker not in href:
            continue
        url = normalize_url(href, base_url)
        if url not in links:
            links.append(url)

    logger.debug("product_links_collected", count=len(links))
    return links
