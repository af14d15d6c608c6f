# smartstore_scraper/services/scrape_orchestrator.py

"""Orchestrates fetch, extraction and validation for product URLs."""

import logging
import time

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import (
    ExtractionError,
    FieldMissingError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ScrapeError,
)
from smartstore_scraper.extractors.json_mapper import map_captured_product
from smartstore_scraper.extractors.product_extractor import ProductExtractor
from smartstore_scraper.filters.block_detector import detect_block
from smartstore_scraper.filters.record_validator import validate
from smartstore_scraper.filters.url_validator import parse_product_url
from smartstore_scraper.models.batch import BatchResult, FailedItem
from smartstore_scraper.models.options import ScrapeOptions
from smartstore_scraper.models.product import ProductRecord
from smartstore_scraper.models.product_url import ProductURL
from smartstore_scraper.scrapers.browser_capture import RenderCapture
from smartstore_scraper.scrapers.page_fetcher import PageFetcher

logger = logging.getLogger("smartstore.orchestrator")


class ScrapeOrchestrator:
    """Runs the single-URL pipeline and sequential batches over it."""

    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        extractor: ProductExtractor | None = None,
        renderer: RenderCapture | None = None,
    ) -> None:
        self.fetcher = fetcher or PageFetcher()
        self.extractor = extractor or ProductExtractor()
        self.renderer = renderer

    # ── Private helpers ──────────────────────────────────

    @staticmethod
    def _log_failure(error: ScrapeError) -> None:
        if isinstance(error, RateLimitedError):
            logger.warning(
                "Rate limited by SmartStore - consider longer delays "
                "between requests"
            )
        elif isinstance(error, NotFoundError):
            logger.warning(
                "Product not found - URL may be invalid or the "
                "product removed"
            )
        elif isinstance(error, ForbiddenError):
            logger.warning(
                "Access forbidden - possible bot detection or IP block"
            )

    def _scrape_html(
        self, product_url: ProductURL, options: ScrapeOptions,
    ) -> ProductRecord:
        outcome = self.fetcher.fetch(product_url.url, options.fetch)

        reason = detect_block(outcome.body)
        if reason:
            logger.warning(
                "Potential bot detection or content blocking (%s): %s",
                reason,
                product_url.url,
            )

        return self.extractor.extract(
            outcome.body, product_url.url, options.extract
        )

    @staticmethod
    def _scrape_rendered(
        renderer: RenderCapture,
        product_url: ProductURL,
        options: ScrapeOptions,
    ) -> ProductRecord:
        payload = renderer.capture(product_url.url)
        return map_captured_product(payload, product_url, options.extract)

    # ── Public API ───────────────────────────────────────

    def scrape_one(
        self,
        url: str,
        options: ScrapeOptions | None = None,
    ) -> ProductRecord:
        """Scrape one product URL into a validated record.

        Fetch errors propagate as-is (the fetcher already retried).
        Anything that is not a ``ScrapeError`` is wrapped in
        ``ExtractionError``.
        """
        options = options or ScrapeOptions()
        product_url = parse_product_url(url)
        logger.info("Starting to scrape SmartStore product: %s", url)

        if options.establish_session:
            self.fetcher.establish_session(product_url.store_url)

        try:
            try:
                record = self._scrape_html(product_url, options)
            except (ForbiddenError, FieldMissingError) as exc:
                if not options.render_fallback or self.renderer is None:
                    raise
                logger.warning(
                    "%s, falling back to browser rendering: %s",
                    exc.message,
                    url,
                )
                record = self._scrape_rendered(
                    self.renderer, product_url, options
                )
            validate(record)
        except ScrapeError as exc:
            self._log_failure(exc)
            raise
        except Exception as exc:
            logger.error(
                "Unexpected error during scraping: %s", exc, exc_info=True
            )
            raise ExtractionError(
                "Failed to scrape product data", url=url
            ) from exc

        logger.info("Successfully scraped product: %s", record.title)
        return record

    def scrape_many(
        self,
        urls: list[str],
        options: ScrapeOptions | None = None,
    ) -> BatchResult:
        """Scrape *urls* one after another.

        Sleeps ``batch_delay`` after each success except the last.
        A rate-limited item doubles the delay (never below
        ``Settings.BATCH_DELAY``) for the rest of the batch and is
        followed by a sleep of the new delay. Every other
        failure is recorded and the batch moves on.
        """
        options = options or ScrapeOptions()
        result = BatchResult()
        delay = options.batch_delay
        last_index = len(urls) - 1

        logger.info("Starting batch scraping of %d products", len(urls))
        for index, url in enumerate(urls):
            logger.info(
                "Processing product %d/%d: %s", index + 1, len(urls), url
            )
            try:
                record = self.scrape_one(url, options)
            except ScrapeError as exc:
                logger.error("Failed to scrape %s: %s", url, exc.message)
                result.failed.append(
                    FailedItem(
                        url=url, reason=exc.message, kind=exc.kind.value
                    )
                )
                if isinstance(exc, RateLimitedError):
                    delay = max(delay * 2, Settings.BATCH_DELAY)
                    logger.warning(
                        "Rate limited, extending delay to %.1fs", delay
                    )
                    time.sleep(delay)
                continue

            result.succeeded.append(record)
            if index < last_index and delay > 0:
                logger.info(
                    "Waiting %.1fs before next request...", delay
                )
                time.sleep(delay)

        logger.info(
            "Batch scraping completed. Success: %d, Failed: %d",
            len(result.succeeded),
            len(result.failed),
        )
        return result

    def test_connection(self, store: str = "test") -> dict[str, object]:
        """Pre-warm against a storefront and report whether it answered."""
        store_url = f"{Settings.STOREFRONT_ROOT}/{store}"
        ok = self.fetcher.establish_session(store_url)
        if ok:
            message = "Connection to SmartStore successful"
        else:
            message = "Connection test failed"
            logger.error("Connection test failed for %s", store_url)
        return {"success": ok, "store_url": store_url, "message": message}

    def info(self) -> dict[str, object]:
        """Identity rotation state plus readiness flags."""
        return {
            **self.fetcher.stats(),
            "render_fallback_available": self.renderer is not None,
            "is_ready": True,
        }
