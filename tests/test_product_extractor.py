# tests/test_product_extractor.py

"""Tests for HTML field extraction against fixture pages."""

import unittest
from pathlib import Path

from smartstore_scraper.core.exceptions import (
    FieldMissingError,
    InvalidInputError,
)
from smartstore_scraper.extractors.price_parser import NO_PRICE_LABEL
from smartstore_scraper.extractors.product_extractor import ProductExtractor
from smartstore_scraper.models.options import ExtractOptions

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PRODUCT_URL = "https://smartstore.naver.com/greentea/products/1234567890"


def _page(body: str, head: str = "") -> str:
    """Wrap a body fragment in a minimal document."""
    return f"<html><head>{head}</head><body>{body}</body></html>"


class TestProductExtractorFixture(unittest.TestCase):
    """Full extraction of the product page fixture."""

    @classmethod
    def setUpClass(cls) -> None:
        """Parse the fixture once for the whole class."""
        cls.html = (FIXTURES_DIR / "product_page.html").read_text(
            encoding="utf-8"
        )
        cls.extractor = ProductExtractor()
        cls.record = cls.extractor.extract(cls.html, PRODUCT_URL)

    def test_title(self) -> None:
        """The product heading is the title."""
        self.assertEqual(self.record.title, "프리미엄 유기농 녹차 선물세트")

    def test_identity_fields(self) -> None:
        """Product id and URL come from the source URL."""
        self.assertEqual(self.record.product_id, "1234567890")
        self.assertEqual(self.record.url, PRODUCT_URL)

    def test_price_disambiguation(self) -> None:
        """35,000원 plus 24,900원 특가 gives original and discounted."""
        price = self.record.price
        self.assertEqual(price.original, 35000)
        self.assertEqual(price.discounted, 24900)
        self.assertEqual(price.currency, "KRW")
        self.assertEqual(price.formatted, "35,000원")
        self.assertEqual(price.discount_rate, 28.9)

    def test_images_filtered_and_deduplicated(self) -> None:
        """Protocol-relative URLs fixed, junk and duplicates dropped."""
        self.assertEqual(
            self.record.images,
            [
                "https://shop-phinf.pstatic.net/20240101_1/main.jpg",
                "https://shop-phinf.pstatic.net/20240101_2/detail.png"
                "?type=m510",
                "https://shop-phinf.pstatic.net/20240101_3/lazy.webp",
            ],
        )

    def test_description(self) -> None:
        """Whitespace in the description is collapsed."""
        self.assertTrue(
            self.record.description.startswith("제주 청정 지역에서")
        )
        self.assertNotIn("\n", self.record.description)

    def test_brand(self) -> None:
        """Brand comes from the brand element."""
        self.assertEqual(self.record.brand, "그린티하우스")

    def test_category_joined_from_crumbs(self) -> None:
        """Breadcrumb items are joined with ' > '."""
        self.assertEqual(self.record.category, "식품 > 차 > 녹차")

    def test_rating(self) -> None:
        """Score and count are read from the rating block."""
        assert self.record.rating is not None
        self.assertEqual(self.record.rating.score, 4.8)
        self.assertEqual(self.record.rating.count, 1234)

    def test_reviews(self) -> None:
        """Review count and average are combined across elements."""
        assert self.record.reviews is not None
        self.assertEqual(self.record.reviews.count, 1234)
        self.assertEqual(self.record.reviews.average_rating, 4.8)

    def test_shipping(self) -> None:
        """A printed fee is carried into the shipping summary."""
        assert self.record.shipping is not None
        self.assertEqual(self.record.shipping.fee, "배송비 3,000원")
        self.assertEqual(self.record.shipping.method, "택배배송")

    def test_seller(self) -> None:
        """Seller name from the page, URL from the storefront."""
        assert self.record.seller is not None
        self.assertEqual(self.record.seller.name, "그린티하우스 공식스토어")
        self.assertEqual(
            self.record.seller.url, "https://smartstore.naver.com/greentea"
        )

    def test_availability_ignores_hidden_text(self) -> None:
        """Sold-out words in scripts, comments and noscript don't count."""
        self.assertTrue(self.record.availability)

    def test_specifications(self) -> None:
        """Two-cell rows become key/value pairs."""
        self.assertEqual(
            self.record.specifications,
            {"원산지": "국내산 (제주)", "중량": "200g"},
        )

    def test_idempotent(self) -> None:
        """Extracting the same page twice gives identical records."""
        again = self.extractor.extract(self.html, PRODUCT_URL)
        self.assertEqual(again, self.record)
        self.assertEqual(again.to_dict(), self.record.to_dict())

    def test_options_disable_images_and_specs(self) -> None:
        """Image and specification extraction can be switched off."""
        record = self.extractor.extract(
            self.html,
            PRODUCT_URL,
            ExtractOptions(extract_images=False, extract_specifications=False),
        )
        self.assertEqual(record.images, [])
        self.assertEqual(record.specifications, {})

    def test_max_images_caps_list(self) -> None:
        """max_images limits the number of images returned."""
        record = self.extractor.extract(
            self.html, PRODUCT_URL, ExtractOptions(max_images=2)
        )
        self.assertEqual(len(record.images), 2)


class TestProductExtractorRules(unittest.TestCase):
    """Field rules exercised with small synthetic pages."""

    def setUp(self) -> None:
        """Fresh extractor per test."""
        self.extractor = ProductExtractor()

    def test_image_example(self) -> None:
        """A small-variant image is dropped, a plain one kept."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>"
            '<img src="//cdn/x_small.jpg">'
            '<img src="https://cdn/y.jpg">'
        )
        record = self.extractor.extract(html, PRODUCT_URL)
        self.assertEqual(record.images, ["https://cdn/y.jpg"])

    def test_title_from_og_meta_with_suffix_stripped(self) -> None:
        """og:title is used when no heading qualifies."""
        html = _page(
            "<p>본문</p>",
            head='<meta property="og:title" '
            'content="무선 블루투스 이어폰 - 네이버 스마트스토어">',
        )
        record = self.extractor.extract(html, PRODUCT_URL)
        self.assertEqual(record.title, "무선 블루투스 이어폰")

    def test_title_lower_bound(self) -> None:
        """Four characters is the shortest accepted title."""
        record = self.extractor.extract(_page("<h1>abcd</h1>"), PRODUCT_URL)
        self.assertEqual(record.title, "abcd")

    def test_title_too_short_raises(self) -> None:
        """Three characters with no fallback is a missing title."""
        with self.assertRaises(FieldMissingError) as ctx:
            self.extractor.extract(_page("<h1>abc</h1>"), PRODUCT_URL)
        self.assertEqual(ctx.exception.url, PRODUCT_URL)

    def test_title_upper_bound(self) -> None:
        """199 characters is accepted, 200 is not."""
        record = self.extractor.extract(
            _page(f"<h1>{'가' * 199}</h1>"), PRODUCT_URL
        )
        self.assertEqual(len(record.title), 199)
        with self.assertRaises(FieldMissingError):
            self.extractor.extract(_page(f"<h1>{'가' * 200}</h1>"), PRODUCT_URL)

    def test_meta_price_fallback(self) -> None:
        """The product:price:amount meta tag backs up missing prices."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>",
            head='<meta property="product:price:amount" content="15000">',
        )
        price = self.extractor.extract(html, PRODUCT_URL).price
        self.assertEqual(price.original, 15000)
        self.assertIsNone(price.discounted)
        self.assertEqual(price.formatted, "15,000원")

    def test_no_price_label(self) -> None:
        """A page without any price says so."""
        price = self.extractor.extract(
            _page("<h1>무선 블루투스 이어폰</h1>"), PRODUCT_URL
        ).price
        self.assertFalse(price.has_price)
        self.assertEqual(price.formatted, NO_PRICE_LABEL)

    def test_out_of_stock_visible_text(self) -> None:
        """A visible sold-out notice marks the product unavailable."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>"
            '<div class="notice">이 상품은 현재 품절입니다</div>'
        )
        record = self.extractor.extract(html, PRODUCT_URL)
        self.assertFalse(record.availability)

    def test_free_shipping(self) -> None:
        """Free delivery text is normalised."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>"
            '<div class="shipping">무료배송</div>'
        )
        shipping = self.extractor.extract(html, PRODUCT_URL).shipping
        assert shipping is not None
        self.assertEqual(shipping.fee, "무료배송")

    def test_optional_fields_absent(self) -> None:
        """Rating, reviews and shipping stay None when not on the page."""
        record = self.extractor.extract(
            _page("<h1>무선 블루투스 이어폰</h1>"), PRODUCT_URL
        )
        self.assertIsNone(record.rating)
        self.assertIsNone(record.reviews)
        self.assertIsNone(record.shipping)

    def test_brand_and_seller_fall_back_to_store(self) -> None:
        """Without brand or seller markup the store key is used."""
        record = self.extractor.extract(
            _page("<h1>무선 블루투스 이어폰</h1>"),
            "https://smartstore.naver.com/green-tea_house/products/7",
        )
        self.assertEqual(record.brand, "Green Tea House")
        assert record.seller is not None
        self.assertEqual(record.seller.name, "green-tea_house")

    def test_rating_out_of_range_ignored(self) -> None:
        """A score above five is not a rating."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>"
            '<div class="rating">95점</div>'
        )
        self.assertIsNone(self.extractor.extract(html, PRODUCT_URL).rating)

    def test_description_truncated(self) -> None:
        """Long descriptions are cut to the limit with an ellipsis."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>"
            f'<div class="product-description">{"설명" * 100}</div>'
        )
        record = self.extractor.extract(
            html, PRODUCT_URL, ExtractOptions(max_description_length=50)
        )
        self.assertEqual(len(record.description), 53)
        self.assertTrue(record.description.endswith("..."))

    def test_category_with_arrows_normalised(self) -> None:
        """Existing separators get uniform spacing."""
        html = _page(
            "<h1>무선 블루투스 이어폰</h1>"
            '<div class="category">디지털&gt;음향기기 &gt;이어폰</div>'
        )
        record = self.extractor.extract(html, PRODUCT_URL)
        self.assertEqual(record.category, "디지털 > 음향기기 > 이어폰")

    def test_invalid_source_url_rejected(self) -> None:
        """The source URL must itself be a product URL."""
        with self.assertRaises(InvalidInputError):
            self.extractor.extract(
                _page("<h1>무선 블루투스 이어폰</h1>"),
                "https://example.com/p/1",
            )


if __name__ == "__main__":
    unittest.main()
