# smartstore_scraper/extractors/price_parser.py

"""Price collection and original/discounted disambiguation."""

import re
from collections.abc import Iterable

from smartstore_scraper.models.product import PriceInfo

NO_PRICE_LABEL = "가격 정보 없음"

# Hangul that may directly follow the 원 of a real price ("3,000원부터",
# "24,900원특가"). Any other syllable means 원 starts a word (원피스, 원두).
_WON_FOLLOWERS = (
    "이", "에", "을", "은", "의", "으로", "부터", "까지", "대", "씩",
    "짜리", "상당", "특가", "할인", "세일", "쿠폰",
)

# "35,000원", "35,000 원", "₩35,000"
_PRICE_PATTERN = re.compile(
    r"(?P<won>\d[\d,]*)\s*원"
    rf"(?:(?={'|'.join(_WON_FOLLOWERS)})|(?![가-힣]))"
    r"|₩\s*(?P<sym>\d[\d,]*)"
)

DISCOUNT_MARKERS: tuple[str, ...] = (
    "할인",
    "특가",
    "세일",
    "↓",
    "sale",
    "special price",
)

# A lone lowest price at or below this share of the highest is
# read as a discount even without a marker.
DISCOUNT_RATIO = 0.9


def find_prices(text: str) -> list[tuple[int, str]]:
    """Return ``(value, matched_text)`` for every currency-formatted number."""
    found: list[tuple[int, str]] = []
    for match in _PRICE_PATTERN.finditer(text):
        digits = re.sub(r"\D", "", match.group("won") or match.group("sym"))
        if digits:
            found.append((int(digits), match.group(0).strip()))
    return found


def is_discount_context(text: str) -> bool:
    """True when the snippet carries a sale / special-price marker."""
    lower = text.lower()
    return any(marker in lower for marker in DISCOUNT_MARKERS)


def format_krw(value: int) -> str:
    """Format a won amount the way the storefront displays it."""
    return f"{value:,}원"


def parse_prices(
    snippets: Iterable[str], currency: str = "KRW",
) -> PriceInfo:
    """Collect every price in *snippets* and pick original vs discounted.

    The highest value is the original price. The smallest value from a
    discount-marked snippet becomes the discounted price; without any
    marker, the smallest value counts as discounted when it is at most
    90% of the original.
    """
    found: list[int] = []
    marked: list[int] = []
    formatted = ""

    for text in snippets:
        discount = is_discount_context(text)
        for value, raw in find_prices(text):
            if value <= 0:
                continue
            found.append(value)
            if not formatted:
                formatted = raw
            if discount:
                marked.append(value)

    if not found:
        return PriceInfo(currency=currency)

    found.sort(reverse=True)
    original = found[0]
    discounted: int | None = None

    below = [v for v in marked if v < original]
    if below:
        discounted = min(below)
    elif found[-1] <= original * DISCOUNT_RATIO:
        # NOTE: can misfire on multi-variant listings whose option
        # prices differ widely.
        discounted = found[-1]

    return PriceInfo(
        original=original,
        discounted=discounted,
        currency=currency,
        formatted=formatted,
    )
