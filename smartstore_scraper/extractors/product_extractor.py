# smartstore_scraper/extractors/product_extractor.py

"""Field extraction from SmartStore product page markup.

Each field has an ordered list of strategies, most page-specific
first and metadata tags last. A strategy is a pure function of the
parsed document that returns a plausible value or ``None``; the first
non-``None`` result wins. Specifications are the exception: every
matching table row is merged into one map.

Selector lists live in ``config/selectors.json`` under the source name.
"""

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from bs4 import BeautifulSoup, Tag

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import (
    ExtractionError,
    FieldMissingError,
    ScrapeError,
)
from smartstore_scraper.extractors.price_parser import (
    NO_PRICE_LABEL,
    find_prices,
    format_krw,
    parse_prices,
)
from smartstore_scraper.filters.block_detector import visible_text
from smartstore_scraper.filters.url_validator import parse_product_url
from smartstore_scraper.models.options import ExtractOptions
from smartstore_scraper.models.product import (
    PriceInfo,
    ProductRecord,
    Rating,
    Reviews,
    Seller,
    Shipping,
)

T = TypeVar("T")
Strategy = tuple[str, Callable[[BeautifulSoup], T | None]]

_TITLE_SUFFIX = re.compile(
    r"\s*[-:|]\s*(?:네이버|naver).*$", re.IGNORECASE
)
_IMAGE_EXTENSION = re.compile(
    r"\.(jpg|jpeg|png|gif|webp)($|\?)", re.IGNORECASE
)
_LOW_QUALITY_IMAGE = re.compile(
    r"thumb|icon|logo|banner|_small|_s\.|40x40|50x50|100x100",
    re.IGNORECASE,
)
_STANDALONE_NUMBER = re.compile(r"(?<![\d.,])\d+(?:\.\d+)?(?![\d,])")
_RATING_COUNT = re.compile(r"\((\d[\d,]*)\)|(\d[\d,]*)\s*개")
_REVIEW_COUNT = re.compile(r"\((\d[\d,]*)\)|(\d[\d,]*)\s*(?:개|건)")
_FREE_SHIPPING = re.compile(r"무료|free", re.IGNORECASE)


def _clean(text: str) -> str:
    """Collapse runs of whitespace."""
    return " ".join(text.split())


def _to_int(raw: str) -> int:
    return int(raw.replace(",", ""))


def _first_number_in_range(
    text: str, low: float, high: float,
) -> float | None:
    """First standalone number in *text*, if it lies in [low, high]."""
    match = _STANDALONE_NUMBER.search(text)
    if not match:
        return None
    value = float(match.group(0))
    return value if low <= value <= high else None


def _count(pattern: re.Pattern[str], text: str) -> int | None:
    match = pattern.search(text)
    if not match:
        return None
    return _to_int(match.group(1) or match.group(2))


def first_match(
    strategies: Sequence[Strategy[T]],
    soup: BeautifulSoup,
) -> tuple[str, T] | None:
    """Run strategies in order; return ``(label, value)`` of the first hit."""
    for label, strategy in strategies:
        value = strategy(soup)
        if value is not None:
            return label, value
    return None


def selector_text(
    selector: str, accept: Callable[[str], bool],
) -> Strategy[str]:
    """Strategy: first element matching *selector* whose text is accepted."""

    def run(soup: BeautifulSoup) -> str | None:
        for element in soup.select(selector):
            text = _clean(element.get_text(" "))
            if accept(text):
                return text
        return None

    return selector, run


def meta_content(
    selector: str, accept: Callable[[str], bool],
) -> Strategy[str]:
    """Strategy: ``content`` attribute of a meta tag."""

    def run(soup: BeautifulSoup) -> str | None:
        tag = soup.select_one(selector)
        if tag is None:
            return None
        content = tag.get("content")
        if not isinstance(content, str):
            return None
        text = _clean(content)
        return text if accept(text) else None

    return selector, run


class ProductExtractor:
    """Turns raw product page HTML into a :class:`ProductRecord`."""

    def __init__(
        self, source_name: str = Settings.SOURCE_NAME,
    ) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger("smartstore.extractor")
        self.settings = Settings()
        self.selectors: dict[str, list[str]] = self._load_selectors()

    def _load_selectors(self) -> dict[str, list[str]]:
        """Load CSS selector lists for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, list[str]] = all_selectors.get(
            self.source_name, {}
        )
        return result

    def _selectors(self, field: str) -> list[str]:
        return self.selectors.get(field, [])

    # ------------------------------------------------------------------
    # Title
    # ------------------------------------------------------------------

    @staticmethod
    def _plausible_title(text: str) -> bool:
        return 3 < len(text) < 200

    @staticmethod
    def _strip_site_suffix(text: str) -> str:
        return _TITLE_SUFFIX.sub("", text).strip()

    def _title_strategies(self) -> list[Strategy[str]]:
        strategies = [
            selector_text(sel, self._plausible_title)
            for sel in self._selectors("title")
        ]

        def from_meta(selector: str) -> Strategy[str]:
            label, run = meta_content(selector, bool)

            def stripped(soup: BeautifulSoup) -> str | None:
                text = run(soup)
                if text is None:
                    return None
                text = self._strip_site_suffix(text)
                return text if self._plausible_title(text) else None

            return label, stripped

        strategies.extend(
            from_meta(sel) for sel in self._selectors("title_meta")
        )

        def from_title_tag(soup: BeautifulSoup) -> str | None:
            if soup.title is None:
                return None
            text = self._strip_site_suffix(
                _clean(soup.title.get_text())
            )
            return text if self._plausible_title(text) else None

        strategies.append(("title", from_title_tag))
        return strategies

    def _extract_title(self, soup: BeautifulSoup) -> str:
        hit = first_match(self._title_strategies(), soup)
        if hit is None:
            raise FieldMissingError()
        label, title = hit
        self.logger.debug("Title extracted using selector: %s", label)
        return title

    # ------------------------------------------------------------------
    # Price
    # ------------------------------------------------------------------

    def _price_snippets(self, soup: BeautifulSoup) -> list[str]:
        """Text of every price region, each element visited once."""
        seen: set[int] = set()
        snippets: list[str] = []
        for selector in self._selectors("price"):
            for element in soup.select(selector):
                if id(element) in seen:
                    continue
                seen.add(id(element))
                text = _clean(element.get_text(" "))
                if text:
                    snippets.append(text)
        return snippets

    def _meta_price(self, soup: BeautifulSoup) -> int | None:
        for selector in self._selectors("price_meta"):
            tag = soup.select_one(selector)
            if tag is None:
                continue
            content = tag.get("content")
            if not isinstance(content, str):
                continue
            try:
                value = int(float(content.replace(",", "")))
            except ValueError:
                continue
            if value > 0:
                return value
        return None

    def _extract_price(self, soup: BeautifulSoup) -> PriceInfo:
        currency = self.settings.CURRENCY
        price = parse_prices(self._price_snippets(soup), currency)
        if price.has_price:
            return price

        meta_price = self._meta_price(soup)
        if meta_price is not None:
            self.logger.debug("Using meta price tag as fallback")
            return PriceInfo(
                original=meta_price,
                currency=currency,
                formatted=format_krw(meta_price),
            )

        self.logger.warning("No price found on page")
        return PriceInfo(currency=currency, formatted=NO_PRICE_LABEL)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def _is_valid_image_url(url: str) -> bool:
        return (
            url.startswith(("http", "//"))
            and _IMAGE_EXTENSION.search(url) is not None
        )

    def _extract_images(
        self, soup: BeautifulSoup, max_images: int,
    ) -> list[str]:
        images: list[str] = []
        if max_images <= 0:
            return images
        for selector in self._selectors("images"):
            for element in soup.select(selector):
                src = (
                    element.get("src")
                    or element.get("data-src")
                    or element.get("data-original")
                )
                if not isinstance(src, str):
                    continue
                src = src.strip()
                if not self._is_valid_image_url(src):
                    continue
                full_url = f"https:{src}" if src.startswith("//") else src
                if full_url in images or _LOW_QUALITY_IMAGE.search(full_url):
                    continue
                images.append(full_url)
                if len(images) >= max_images:
                    return images
        self.logger.debug("Extracted %d product images", len(images))
        return images

    # ------------------------------------------------------------------
    # Text fields
    # ------------------------------------------------------------------

    def _extract_description(
        self, soup: BeautifulSoup, max_length: int,
    ) -> str:
        strategies = [
            selector_text(sel, lambda t: 20 < len(t) < 2000)
            for sel in self._selectors("description")
        ]
        hit = first_match(strategies, soup)
        if hit is not None:
            _, text = hit
            if len(text) > max_length:
                return text[:max_length] + "..."
            return text

        meta = first_match(
            [
                meta_content(sel, bool)
                for sel in self._selectors("description_meta")
            ],
            soup,
        )
        if meta is not None:
            return meta[1][:max_length]
        return ""

    @staticmethod
    def _prettify_store(store: str) -> str:
        spaced = re.sub(r"[_-]", " ", store)
        return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)

    def _extract_brand(self, soup: BeautifulSoup, store: str) -> str:
        strategies = [
            selector_text(sel, lambda t: 1 < len(t) < 50)
            for sel in self._selectors("brand")
        ]
        hit = first_match(strategies, soup)
        return hit[1] if hit else self._prettify_store(store)

    @staticmethod
    def _category_path(element: Tag) -> str:
        text = _clean(element.get_text(" "))
        if ">" not in text:
            crumbs = element.find_all("li") or element.find_all("a")
            parts = [_clean(c.get_text(" ")) for c in crumbs]
            parts = [p for p in parts if p]
            if len(parts) > 1:
                text = " > ".join(parts)
        return _clean(re.sub(r"\s*>\s*", " > ", text))

    def _extract_category(self, soup: BeautifulSoup) -> str:
        for selector in self._selectors("category"):
            for element in soup.select(selector):
                path = self._category_path(element)
                if path and len(path) < 100:
                    return path
        return ""

    # ------------------------------------------------------------------
    # Rating / reviews
    # ------------------------------------------------------------------

    def _extract_rating(self, soup: BeautifulSoup) -> Rating | None:
        for selector in self._selectors("rating"):
            for element in soup.select(selector):
                text = _clean(element.get_text(" "))
                score = _first_number_in_range(
                    _RATING_COUNT.sub(" ", text), 0, 5
                )
                if score is None:
                    continue
                count = _count(_RATING_COUNT, text) or 0
                return Rating(score=score, count=count)
        return None

    def _extract_reviews(self, soup: BeautifulSoup) -> Reviews | None:
        count: int | None = None
        average: float | None = None
        for selector in self._selectors("reviews"):
            for element in soup.select(selector):
                text = _clean(element.get_text(" "))
                if count is None:
                    count = _count(_REVIEW_COUNT, text)
                if average is None:
                    average = _first_number_in_range(
                        _REVIEW_COUNT.sub(" ", text), 0, 5
                    )
                if count is not None and average is not None:
                    break
            if count is not None and average is not None:
                break
        if count is None and average is None:
            return None
        return Reviews(count=count or 0, average_rating=average or 0.0)

    # ------------------------------------------------------------------
    # Shipping / seller / availability / specifications
    # ------------------------------------------------------------------

    def _extract_shipping(self, soup: BeautifulSoup) -> Shipping | None:
        hit = first_match(
            [
                selector_text(sel, bool)
                for sel in self._selectors("shipping")
            ],
            soup,
        )
        if hit is None:
            return None
        text = hit[1]
        if _FREE_SHIPPING.search(text):
            fee = "무료배송"
        else:
            amounts = find_prices(text)
            fee = f"배송비 {amounts[0][1]}" if amounts else "배송료 별도"
        return Shipping(fee=fee, method="택배배송")

    def _extract_seller(
        self, soup: BeautifulSoup, store: str, store_url: str,
    ) -> Seller:
        hit = first_match(
            [
                selector_text(sel, lambda t: 0 < len(t) < 100)
                for sel in self._selectors("seller")
            ],
            soup,
        )
        return Seller(name=hit[1] if hit else store, url=store_url)

    def _extract_availability(self, soup: BeautifulSoup) -> bool:
        text = visible_text(soup).lower()
        for phrase in self.settings.OUT_OF_STOCK_PHRASES:
            if phrase.lower() in text:
                self.logger.debug(
                    "Out-of-stock phrase found: %s", phrase
                )
                return False
        return True

    def _extract_specifications(
        self, soup: BeautifulSoup,
    ) -> dict[str, str]:
        specs: dict[str, str] = {}
        for selector in self._selectors("specifications"):
            for row in soup.select(selector):
                cells = row.find_all(["th", "td"], recursive=False)
                if len(cells) < 2:
                    continue
                key = _clean(cells[0].get_text(" "))
                value = _clean(cells[1].get_text(" "))
                if key and value and len(key) < 50 and len(value) < 200:
                    specs[key] = value
        return specs

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def extract(
        self,
        html: str,
        source_url: str,
        options: ExtractOptions | None = None,
    ) -> ProductRecord:
        """Extract a product record from *html* fetched from *source_url*.

        Raises ``FieldMissingError`` when no title can be found and
        ``ExtractionError`` on any unexpected parsing failure.
        """
        options = options or ExtractOptions()
        product_url = parse_product_url(source_url)
        self.logger.info(
            "Parsing product data from HTML (%d characters)", len(html)
        )
        try:
            soup = BeautifulSoup(html, "lxml")
            record = ProductRecord(
                title=self._extract_title(soup),
                product_id=product_url.product_id,
                url=source_url,
                price=self._extract_price(soup),
                images=(
                    self._extract_images(soup, options.max_images)
                    if options.extract_images
                    else []
                ),
                description=self._extract_description(
                    soup, options.max_description_length
                ),
                brand=self._extract_brand(soup, product_url.store),
                category=self._extract_category(soup),
                rating=self._extract_rating(soup),
                shipping=self._extract_shipping(soup),
                seller=self._extract_seller(
                    soup, product_url.store, product_url.store_url
                ),
                availability=self._extract_availability(soup),
                specifications=(
                    self._extract_specifications(soup)
                    if options.extract_specifications
                    else {}
                ),
                reviews=self._extract_reviews(soup),
            )
        except ScrapeError as exc:
            exc.url = exc.url or source_url
            raise
        except Exception as exc:
            self.logger.error(
                "Error parsing product data: %s", exc, exc_info=True
            )
            raise ExtractionError(url=source_url) from exc

        self.logger.info("Parsed product: %s", record.title)
        return record
