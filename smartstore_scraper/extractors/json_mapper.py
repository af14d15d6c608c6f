# smartstore_scraper/extractors/json_mapper.py

"""Map product-API JSON captured by the browser fallback to a record.

The payload shape is undocumented, so every lookup is optional and a
missing key simply leaves the field at its default. Only the title is
mandatory, as with HTML extraction.
"""

import logging
from typing import Any

from smartstore_scraper.core.exceptions import FieldMissingError
from smartstore_scraper.extractors.price_parser import (
    NO_PRICE_LABEL,
    format_krw,
)
from smartstore_scraper.models.capture import CapturedPayload
from smartstore_scraper.models.options import ExtractOptions
from smartstore_scraper.models.product import (
    PriceInfo,
    ProductRecord,
    Rating,
    Reviews,
    Seller,
    Shipping,
)
from smartstore_scraper.models.product_url import ProductURL

logger = logging.getLogger("smartstore.extractor")

OUT_OF_STOCK_STATUSES = {"OUTOFSTOCK", "SUSPENSION", "CLOSE", "PROHIBITION"}
SPEC_KEYS = {
    "brandName": "브랜드",
    "manufacturerName": "제조사",
    "modelName": "모델명",
}


def _dig(data: Any, *path: str) -> Any:
    """Walk nested dicts; ``None`` as soon as a key is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and value > 0:
        return int(value)
    if isinstance(value, str):
        digits = value.replace(",", "").strip()
        if digits.isdigit() and int(digits) > 0:
            return int(digits)
    return None


def _map_price(product: dict[str, Any], benefits: dict[str, Any]) -> PriceInfo:
    original = _as_int(product.get("salePrice"))
    discounted = (
        _as_int(_dig(benefits, "optimalDiscount", "discountedSalePrice"))
        or _as_int(benefits.get("discountedSalePrice"))
        or _as_int(_dig(product, "benefitsView", "discountedSalePrice"))
        or _as_int(product.get("discountedSalePrice"))
    )
    if original is None and discounted is None:
        return PriceInfo(formatted=NO_PRICE_LABEL)
    if original is None:
        original, discounted = discounted, None
    if discounted is not None and discounted >= original:
        discounted = None
    return PriceInfo(
        original=original,
        discounted=discounted,
        formatted=format_krw(discounted or original),
    )


def _map_images(product: dict[str, Any], max_images: int) -> list[str]:
    candidates: list[Any] = [_dig(product, "representImage", "url")]
    for image in product.get("productImages") or []:
        candidates.append(_dig(image, "url"))

    images: list[str] = []
    for url in candidates:
        if not isinstance(url, str) or not url:
            continue
        if url.startswith("//"):
            url = f"https:{url}"
        if url not in images:
            images.append(url)
    return images[:max(max_images, 0)]


def _map_shipping(product: dict[str, Any]) -> Shipping | None:
    delivery = _dig(product, "productDeliveryInfo")
    if not isinstance(delivery, dict):
        return None
    fee_type = str(delivery.get("deliveryFeeType") or "").upper()
    base_fee = _as_int(delivery.get("baseFee"))
    if fee_type == "FREE" or (fee_type and base_fee is None):
        fee = "무료배송"
    elif base_fee is not None:
        fee = f"배송비 {format_krw(base_fee)}"
    else:
        fee = "배송료 별도"
    return Shipping(fee=fee, method="택배배송")


def _map_reviews(product: dict[str, Any]) -> Reviews | None:
    summary = _dig(product, "reviewAmount")
    if not isinstance(summary, dict):
        return None
    count = _as_int(summary.get("totalReviewCount")) or 0
    score = summary.get("averageReviewScore")
    average = float(score) if isinstance(score, (int, float)) else 0.0
    return Reviews(count=count, average_rating=average)


def _map_specifications(product: dict[str, Any]) -> dict[str, str]:
    specs: dict[str, str] = {}
    search_info = _dig(product, "naverShoppingSearchInfo") or {}
    for key, label in SPEC_KEYS.items():
        value = _dig(search_info, key)
        if isinstance(value, str) and value.strip():
            specs[label] = value.strip()
    origin = _dig(product, "originAreaInfo", "content")
    if isinstance(origin, str) and origin.strip():
        specs["원산지"] = origin.strip()
    return specs


def map_captured_product(
    payload: CapturedPayload,
    product_url: ProductURL,
    options: ExtractOptions | None = None,
) -> ProductRecord:
    """Build a :class:`ProductRecord` from captured API JSON."""
    options = options or ExtractOptions()
    product = payload.product_json
    benefits = payload.benefits_json

    title = product.get("name") or product.get("productName")
    if not isinstance(title, str) or not 3 < len(title.strip()) < 200:
        raise FieldMissingError(url=product_url.url)
    title = title.strip()

    reviews = _map_reviews(product)
    rating = (
        Rating(score=reviews.average_rating, count=reviews.count)
        if reviews and 0 <= reviews.average_rating <= 5
        else None
    )
    store_name = _dig(product, "channel", "channelName")
    brand = _dig(product, "naverShoppingSearchInfo", "brandName")
    category = _dig(product, "category", "wholeCategoryName")
    description = product.get("detailContents") or ""
    status = str(product.get("productStatusType") or "").upper()

    record = ProductRecord(
        title=title,
        product_id=product_url.product_id,
        url=product_url.url,
        price=_map_price(product, benefits),
        images=(
            _map_images(product, options.max_images)
            if options.extract_images
            else []
        ),
        description=(
            description[: options.max_description_length]
            if isinstance(description, str)
            else ""
        ),
        brand=brand if isinstance(brand, str) and brand else (
            store_name or product_url.store
        ),
        category=(
            " > ".join(p.strip() for p in category.split(">") if p.strip())
            if isinstance(category, str)
            else ""
        ),
        rating=rating,
        shipping=_map_shipping(product),
        seller=Seller(
            name=store_name if isinstance(store_name, str) and store_name
            else product_url.store,
            url=product_url.store_url,
        ),
        availability=(
            status not in OUT_OF_STOCK_STATUSES
            and product.get("stockQuantity") != 0
        ),
        specifications=(
            _map_specifications(product)
            if options.extract_specifications
            else {}
        ),
        reviews=reviews,
    )
    logger.info("Mapped captured product JSON: %s", record.title)
    return record
