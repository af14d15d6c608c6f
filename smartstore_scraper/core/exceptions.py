# smartstore_scraper/core/exceptions.py

"""Typed errors raised across the fetch / extract / orchestrate pipeline.

Transport exceptions and parser internals never cross the pipeline
boundary: they are classified into one of these before leaving the
component that saw them.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to every pipeline error."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"
    SERVICE_UNAVAILABLE = "service_unavailable"
    TIMEOUT = "timeout"
    FETCH_FAILED = "fetch_failed"
    FIELD_MISSING = "field_missing"
    INVALID_RECORD = "invalid_record"
    EXTRACTION_FAILED = "extraction_failed"


class ScrapeError(Exception):
    """Base exception for all scraper errors."""

    kind: ErrorKind = ErrorKind.FETCH_FAILED
    retryable: bool = False
    default_message: str = "Failed to scrape product data"

    def __init__(
        self,
        message: str | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.url = url
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        """Serialise for user-facing output."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            "status_code": self.status_code,
            "url": self.url,
        }


class InvalidInputError(ScrapeError):
    """Malformed product URL or a non-HTML response."""

    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid SmartStore product URL"


class NotFoundError(ScrapeError):
    """Product page (or its host) does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Product not found"


class RateLimitedError(ScrapeError):
    """Server-imposed throttling (HTTP 429)."""

    kind = ErrorKind.RATE_LIMITED
    retryable = True
    default_message = "Too many requests - rate limited by server"


class ForbiddenError(ScrapeError):
    """HTTP 403, usually bot detection."""

    kind = ErrorKind.FORBIDDEN
    retryable = True
    default_message = "Access forbidden - possible bot detection"


class ServiceUnavailableError(ScrapeError):
    """5xx responses and refused connections."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    retryable = True
    default_message = "Service unavailable"


class FetchTimeoutError(ScrapeError):
    """An attempt exceeded its request timeout."""

    kind = ErrorKind.TIMEOUT
    retryable = True
    default_message = "Request timeout while fetching product page"


class FetchFailedError(ScrapeError):
    """Any other transient transport failure."""

    kind = ErrorKind.FETCH_FAILED
    retryable = True
    default_message = (
        "Failed to fetch product page after multiple attempts"
    )


class FieldMissingError(ScrapeError):
    """A mandatory field could not be extracted from the markup."""

    kind = ErrorKind.FIELD_MISSING
    default_message = "Product title not found"


class InvalidRecordError(ScrapeError):
    """The extracted record failed structural validation."""

    kind = ErrorKind.INVALID_RECORD
    default_message = "Invalid product title"


class ExtractionError(ScrapeError):
    """Unexpected failure while parsing the page."""

    kind = ErrorKind.EXTRACTION_FAILED
    default_message = "Failed to parse product data from HTML"
