# smartstore_scraper/filters/block_detector.py

"""Heuristic for bot-challenge pages served instead of real content."""

import re

from bs4 import BeautifulSoup, NavigableString

from smartstore_scraper.config.settings import Settings

# Text inside these never renders, so it cannot be a block notice
_INVISIBLE_TAGS = frozenset(
    {"script", "style", "noscript", "template", "head"}
)


def visible_text(soup: BeautifulSoup) -> str:
    """Join the rendered text nodes of the page body."""
    root = soup.body or soup
    parts = [
        str(node)
        for node in root.find_all(string=True)
        if type(node) is NavigableString
        and node.parent is not None
        and node.parent.name not in _INVISIBLE_TAGS
    ]
    return " ".join(parts)


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Whole words for Latin keywords so "robots" or "unblocked" pass
    if keyword.isascii():
        return re.compile(rf"\b{re.escape(keyword)}\b")
    return re.compile(re.escape(keyword))


def detect_block(html: str) -> str | None:
    """Return why *html* looks like a block page, or None.

    Checks for a suspiciously short body first, then scans the visible
    text for blocking keywords (English and Korean). Markup such as
    ``<meta name="robots">`` or inline scripts is never scanned.
    """
    if len(html) < Settings.MIN_CONTENT_LENGTH:
        return f"short body ({len(html)} chars)"
    text = visible_text(BeautifulSoup(html, "lxml")).lower()
    for keyword in Settings.BLOCKING_KEYWORDS:
        if _keyword_pattern(keyword).search(text):
            return f"keyword '{keyword}'"
    return None
