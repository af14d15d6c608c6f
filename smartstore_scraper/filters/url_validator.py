# smartstore_scraper/filters/url_validator.py

"""SmartStore product URL validation and normalisation."""

import logging
import re
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import InvalidInputError
from smartstore_scraper.models.product_url import ProductURL

logger = logging.getLogger("smartstore.filters")

_DANGEROUS_PARAMS = frozenset(
    {"javascript", "script", "onload", "onerror", "onclick"}
)


def parse_product_url(url: str) -> ProductURL:
    """Split a product URL into storefront key and product id.

    Raises ``InvalidInputError`` unless the URL is http(s), points at a
    storefront host and has a ``/<store>/products/<digits>`` path.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInputError("URL is required", url=url)
    url = url.strip()
    if len(url) > Settings.MAX_URL_LENGTH:
        raise InvalidInputError(
            "URL is too long (maximum "
            f"{Settings.MAX_URL_LENGTH} characters)",
            url=url,
        )

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidInputError(
            f"Unsupported URL scheme '{parsed.scheme}'", url=url
        )
    host = (parsed.hostname or "").lower()
    if host not in Settings.STOREFRONT_HOSTS:
        raise InvalidInputError(
            "URL must be from Naver SmartStore "
            f"({Settings.STOREFRONT_HOSTS[0]})",
            url=url,
        )

    parts = [p for p in parsed.path.split("/") if p]
    segment = Settings.PRODUCT_SEGMENT
    if segment not in parts:
        raise InvalidInputError(
            "URL must contain a product listing segment", url=url
        )
    index = parts.index(segment)
    store = parts[0] if index > 0 else ""
    product_id = (
        parts[index + 1] if index + 1 < len(parts) else ""
    )
    if not store or not product_id.isdigit():
        raise InvalidInputError(
            "Invalid Naver Smartstore URL format. Expected: "
            f"{Settings.STOREFRONT_ROOT}/<store>/products/<id>",
            url=url,
        )
    return ProductURL(store=store, product_id=product_id, url=url)


def is_valid_product_url(url: str) -> bool:
    """Return True when ``parse_product_url`` would accept *url*."""
    try:
        parse_product_url(url)
    except InvalidInputError:
        return False
    return True


def normalize_product_url(url: str) -> str:
    """Trim whitespace and add ``https://`` when the scheme is missing."""
    trimmed = url.strip()
    if not re.match(r"^https?://", trimmed, re.IGNORECASE):
        return f"https://{trimmed}"
    return trimmed


def sanitize_url(url: str) -> str:
    """Drop script-like query parameters, keeping everything else."""
    parsed = urlparse(url)
    if not parsed.scheme:
        return url
    params = parse_qsl(parsed.query, keep_blank_values=True)
    kept = [
        (k, v) for k, v in params
        if k.lower() not in _DANGEROUS_PARAMS
    ]
    dropped = len(params) - len(kept)
    if dropped > 0:
        logger.debug(
            "Removed %d suspicious query params from %s",
            dropped,
            url,
        )
    return urlunparse(parsed._replace(query=urlencode(kept)))
