# smartstore_scraper/filters/record_validator.py

"""Post-extraction validation of a product record."""

import logging

from smartstore_scraper.core.exceptions import InvalidRecordError
from smartstore_scraper.models.product import ProductRecord

logger = logging.getLogger("smartstore.filters")

MIN_TITLE_LENGTH = 3


def validate(record: ProductRecord) -> list[str]:
    """Check the mandatory minimum of a record.

    Raises ``InvalidRecordError`` when the title is missing or too short.
    Missing price and missing images are returned (and logged) as
    warnings instead.
    """
    title = (record.title or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise InvalidRecordError(
            f"Invalid product title: {title!r}", url=record.url
        )

    warnings: list[str] = []
    if not record.price.has_price:
        warnings.append("No price information found")
    if not record.images:
        warnings.append("No product images found")

    for warning in warnings:
        logger.warning(
            "%s (product_id=%s)", warning, record.product_id
        )
    if not warnings:
        logger.debug(
            "Product data validation passed (product_id=%s)",
            record.product_id,
        )
    return warnings
