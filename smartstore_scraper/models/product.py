# smartstore_scraper/models/product.py

"""Product record data model returned by the extraction pipeline."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class PriceInfo:
    """Original and discounted price of a listing."""

    original: int | None = None
    discounted: int | None = None
    currency: str = "KRW"
    formatted: str = ""

    @property
    def discount_rate(self) -> float | None:
        """Percentage saved, rounded to one decimal."""
        if (
            self.original
            and self.discounted is not None
            and self.discounted < self.original
        ):
            saved = self.original - self.discounted
            return round(saved / self.original * 100, 1)
        return None

    @property
    def has_price(self) -> bool:
        """True when at least one numeric price was found."""
        return (
            self.original is not None
            or self.discounted is not None
        )


@dataclass
class Rating:
    """Star score (0-5) and the number of ratings behind it."""

    score: float
    count: int = 0


@dataclass
class Shipping:
    """Human-readable shipping summary."""

    fee: str
    method: str


@dataclass
class Seller:
    """Storefront owner."""

    name: str
    url: str


@dataclass
class Reviews:
    """Review summary."""

    count: int = 0
    average_rating: float = 0.0


@dataclass
class ProductRecord:
    """Structured product listing extracted from one page."""

    title: str
    product_id: str
    url: str
    price: PriceInfo = field(default_factory=PriceInfo)
    images: list[str] = field(
        default_factory=lambda: list[str]()
    )
    description: str = ""
    brand: str = ""
    category: str = ""
    rating: Rating | None = None
    shipping: Shipping | None = None
    seller: Seller | None = None
    availability: bool = True
    specifications: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    reviews: Reviews | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form suitable for JSON output."""
        data = asdict(self)
        data["price"]["discount_rate"] = (
            self.price.discount_rate
        )
        return data
