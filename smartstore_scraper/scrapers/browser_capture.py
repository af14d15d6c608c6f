# smartstore_scraper/scrapers/browser_capture.py

"""Render-and-capture fallback for pages the plain fetch cannot read.

A real Chromium renders the product page under mobile emulation while
we listen for the two JSON calls the page makes for itself: the
product API (``/i/v2/channels/``) and the benefits API
(``/benefits/by-product``). Images are aborted to keep renders cheap.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, Playwright, Response, Route
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import (
    FetchFailedError,
    FetchTimeoutError,
)
from smartstore_scraper.models.capture import CapturedPayload

PRODUCT_API_MARKER = "/i/v2/channels/"
BENEFITS_API_MARKER = "/benefits/by-product"

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
]


class RenderCapture(Protocol):
    """Anything that can render *url* and hand back the captured JSON."""

    def capture(self, url: str) -> CapturedPayload: ...


def _abort_images(route: Route) -> None:
    if route.request.resource_type == "image":
        route.abort()
    else:
        route.continue_()


class BrowserCapture:
    """Playwright-backed :class:`RenderCapture`.

    Connects over CDP when ``BROWSER_CDP_SERVER`` is set, otherwise
    launches a local Chromium, optionally through ``PROXY_SERVER``.
    One browser is started per :meth:`capture` call and torn down
    afterwards.
    """

    def __init__(
        self,
        headless: bool | None = None,
        timeout: float | None = None,
    ) -> None:
        self.logger = logging.getLogger("smartstore.browser")
        self.settings = Settings()
        self.headless = (
            self.settings.BROWSER_HEADLESS if headless is None else headless
        )
        self.timeout = timeout or self.settings.BROWSER_TIMEOUT

    def _proxy(self) -> dict[str, str] | None:
        if not self.settings.PROXY_SERVER:
            return None
        proxy = {"server": self.settings.PROXY_SERVER}
        if self.settings.PROXY_USERNAME:
            proxy["username"] = self.settings.PROXY_USERNAME
            proxy["password"] = self.settings.PROXY_PASSWORD
        return proxy

    def _listen(self, page: Page, url: str) -> CapturedPayload:
        timeout_ms = self.timeout * 1000

        def is_ok(marker: str) -> Callable[[Response], bool]:
            return lambda r: marker in r.url and r.status == 200

        with page.expect_response(
            is_ok(BENEFITS_API_MARKER), timeout=timeout_ms
        ) as benefits_info:
            with page.expect_response(
                is_ok(PRODUCT_API_MARKER), timeout=timeout_ms
            ) as product_info:
                page.goto(url, timeout=timeout_ms)
            product_json = product_info.value.json()
            self.logger.debug("Captured product API response")
        benefits_json = benefits_info.value.json()
        self.logger.debug("Captured benefits API response")
        return CapturedPayload(
            product_json=product_json or {},
            benefits_json=benefits_json or {},
        )

    def _run(self, pw: Playwright, url: str) -> CapturedPayload:
        if self.settings.BROWSER_CDP_SERVER:
            browser = pw.chromium.connect_over_cdp(
                self.settings.BROWSER_CDP_SERVER
            )
        else:
            browser = pw.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
                proxy=self._proxy(),  # type: ignore[arg-type]
            )
        device: dict[str, Any] = {
            key: value
            for key, value in pw.devices[self.settings.BROWSER_DEVICE].items()
            if key != "default_browser_type"
        }
        try:
            context = browser.new_context(
                **device,
                locale="ko-KR",
                timezone_id="Asia/Seoul",
            )
            page = context.new_page()
            page.route("**/*", _abort_images)
            try:
                return self._listen(page, url)
            finally:
                context.close()
        finally:
            browser.close()

    def capture(self, url: str) -> CapturedPayload:
        """Render *url* and return the captured product and benefits JSON.

        Raises ``FetchTimeoutError`` when either API call never shows up
        and ``FetchFailedError`` on any other browser failure.
        """
        self.logger.info("Rendering product page in browser: %s", url)
        try:
            with sync_playwright() as pw:
                return self._run(pw, url)
        except PlaywrightTimeoutError as exc:
            self.logger.warning("Browser capture timed out for %s", url)
            raise FetchTimeoutError(
                "Timed out waiting for product API response", url=url
            ) from exc
        except (PlaywrightError, ValueError) as exc:
            self.logger.error(
                "Browser capture failed for %s: %s", url, exc
            )
            raise FetchFailedError(
                f"Browser capture failed: {exc}", url=url
            ) from exc
