# smartstore_scraper/scrapers/page_fetcher.py

"""HTTP fetch stage: identity rotation, jittered backoff, failure classification."""

import logging
import random
import time

from curl_cffi import requests as curl_requests
from curl_cffi.const import CurlECode
from curl_cffi.requests import exceptions as curl_exceptions

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import (
    FetchFailedError,
    FetchTimeoutError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
    ScrapeError,
    ServiceUnavailableError,
)
from smartstore_scraper.filters.url_validator import parse_product_url
from smartstore_scraper.models.client_identity import ClientIdentity
from smartstore_scraper.models.fetch import (
    FetchOptions,
    FetchOutcome,
    RetryState,
)
from smartstore_scraper.scrapers.client_identity import IdentityRotator


class PageFetcher:
    """Fetches SmartStore product pages with retries and anti-blocking.

    Every attempt picks a browser identity (explicit override or the
    next one in the rotation), sends matching headers over a curl_cffi
    session impersonating that browser's TLS profile, and classifies
    the result. 404/400/DNS failures end the call immediately; 429,
    403, 5xx, refused connections and timeouts are retried until the
    attempt budget runs out.
    """

    def __init__(
        self,
        session: curl_requests.Session | None = None,
        rotator: IdentityRotator | None = None,
    ) -> None:
        self.logger = logging.getLogger("smartstore.fetcher")
        self.settings = Settings()
        self.session = session or curl_requests.Session(
            impersonate=self.settings.DEFAULT_IMPERSONATE
        )
        self.rotator = rotator or IdentityRotator()

    def _select_identity(
        self, override: ClientIdentity | None,
    ) -> ClientIdentity:
        """Use the caller's identity if given, else rotate."""
        return override if override is not None else self.rotator.next()

    def _backoff_delay(
        self, state: RetryState, options: FetchOptions,
    ) -> float:
        """Delay before attempt ``state.attempt`` (>1).

        ``retry_delay * attempt`` plus up to ``2 * retry_delay`` of
        jitter, doubled when the previous attempt was rate limited.
        """
        base = options.retry_delay
        delay = base * state.attempt + random.uniform(0, 2 * base)
        if isinstance(state.last_error, RateLimitedError):
            delay *= 2
        return delay

    def _classify_response(
        self,
        resp: curl_requests.Response,
        url: str,
    ) -> FetchOutcome | ScrapeError:
        """Map an HTTP response to an outcome or a typed error."""
        status = resp.status_code
        if status == 200:
            content_type = resp.headers.get("content-type") or ""
            if "text/html" not in content_type.lower():
                return InvalidInputError(
                    "Response is not HTML content "
                    f"({content_type or 'no content-type'})",
                    url=url,
                    status_code=status,
                )
            return FetchOutcome(
                body=resp.text,
                status_code=status,
                headers=dict(resp.headers),
                final_url=str(resp.url or url),
            )
        if status == 404:
            return NotFoundError(url=url, status_code=status)
        if status == 400:
            return InvalidInputError(
                "Malformed request rejected by server",
                url=url,
                status_code=status,
            )
        if status == 429:
            return RateLimitedError(url=url, status_code=status)
        if status == 403:
            return ForbiddenError(url=url, status_code=status)
        if status >= 500:
            return ServiceUnavailableError(
                f"Service unavailable (HTTP {status})",
                url=url,
                status_code=status,
            )
        return FetchFailedError(
            f"HTTP error {status}", url=url, status_code=status
        )

    @staticmethod
    def _classify_exception(
        exc: curl_exceptions.RequestException, url: str,
    ) -> ScrapeError:
        """Map a transport exception to a typed error."""
        code = getattr(exc, "code", None)
        if (
            isinstance(exc, curl_exceptions.DNSError)
            or code == CurlECode.COULDNT_RESOLVE_HOST
        ):
            return NotFoundError(
                "Product page not found (host could not be resolved)",
                url=url,
            )
        if (
            isinstance(exc, curl_exceptions.Timeout)
            or code == CurlECode.OPERATION_TIMEDOUT
        ):
            return FetchTimeoutError(url=url)
        if (
            isinstance(exc, curl_exceptions.ConnectionError)
            or code == CurlECode.COULDNT_CONNECT
        ):
            return ServiceUnavailableError(
                "Connection refused by server", url=url
            )
        return FetchFailedError(f"Request error: {exc}", url=url)

    def _attempt(
        self,
        url: str,
        identity: ClientIdentity,
        options: FetchOptions,
    ) -> FetchOutcome | ScrapeError:
        """Issue one GET and classify whatever comes back."""
        headers = identity.headers(self.settings.DEFAULT_HEADERS)
        try:
            resp = self.session.get(
                url,
                headers=headers,
                params={"_": str(int(time.time() * 1000))},
                timeout=options.timeout,
                impersonate=identity.impersonate,
            )
        except curl_exceptions.RequestException as exc:
            self.logger.debug(
                "Transport error for %s: %s", url, exc, exc_info=True
            )
            return self._classify_exception(exc, url)
        self.logger.info(
            "Response received: %d from %s", resp.status_code, url
        )
        return self._classify_response(resp, url)

    def fetch(
        self,
        url: str,
        options: FetchOptions | None = None,
    ) -> FetchOutcome:
        """Fetch a product page, retrying per failure kind.

        Raises a ``ScrapeError`` subclass when the URL is not a product
        URL (before any request is made), on a fail-fast classification,
        or once ``max_retries + 1`` attempts have all failed.
        """
        options = options or FetchOptions()
        parse_product_url(url)

        state = RetryState()
        for attempt in range(1, options.max_attempts + 1):
            state.attempt = attempt
            if attempt > 1:
                delay = self._backoff_delay(state, options)
                if isinstance(state.last_error, RateLimitedError):
                    self.logger.warning(
                        "Rate limited, waiting %.1fs before "
                        "attempt %d",
                        delay,
                        attempt,
                    )
                state.total_delay += delay
                time.sleep(delay)

            identity = self._select_identity(options.identity)
            self.logger.info(
                "Fetching product page (attempt %d/%d, %s): %s",
                attempt,
                options.max_attempts,
                identity.name,
                url,
            )
            result = self._attempt(url, identity, options)

            if isinstance(result, FetchOutcome):
                if len(result.body) < self.settings.MIN_CONTENT_LENGTH:
                    self.logger.debug(
                        "Short body (%d chars) from %s",
                        len(result.body),
                        url,
                    )
                self.logger.info(
                    "Successfully fetched product page: %s "
                    "(%d characters)",
                    url,
                    len(result.body),
                )
                return result

            state.last_error = result
            if not result.retryable:
                self.logger.warning(
                    "Attempt %d failed with %s, not retrying: %s",
                    attempt,
                    result.kind.value,
                    result.message,
                )
                raise result
            self.logger.warning(
                "Attempt %d/%d failed with %s: %s",
                attempt,
                options.max_attempts,
                result.kind.value,
                result.message,
            )

        self.logger.error(
            "All %d fetch attempts failed for %s "
            "(%.1fs spent backing off)",
            state.attempt,
            url,
            state.total_delay,
        )
        if state.last_error is not None:
            raise state.last_error
        raise FetchFailedError(url=url)

    def establish_session(self, store_url: str) -> bool:
        """Pre-visit the storefront root so the session carries cookies.

        Best effort: any failure is logged and reported as False.
        """
        identity = self.rotator.next()
        self.logger.info("Establishing session with store: %s", store_url)
        try:
            resp = self.session.get(
                store_url,
                headers=identity.headers(self.settings.DEFAULT_HEADERS),
                timeout=self.settings.SESSION_TIMEOUT,
                impersonate=identity.impersonate,
            )
        except curl_exceptions.RequestException as exc:
            self.logger.warning(
                "Failed to establish session, continuing anyway: %s",
                exc,
            )
            return False

        settle = self.settings.SESSION_SETTLE_DELAY
        time.sleep(settle + random.uniform(0, 2 * settle))
        if resp.status_code >= 400:
            self.logger.warning(
                "Session pre-warm got HTTP %d from %s",
                resp.status_code,
                store_url,
            )
            return False
        self.logger.info("Session established successfully")
        return True

    def stats(self) -> dict[str, object]:
        """Identity rotation state."""
        return self.rotator.stats()
