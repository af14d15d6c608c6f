# smartstore_scraper/models/fetch.py

"""Fetch-stage data: options, per-call retry state and the raw outcome."""

from dataclasses import dataclass, field

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import InvalidInputError, ScrapeError
from smartstore_scraper.models.client_identity import ClientIdentity


@dataclass
class FetchOptions:
    """Tunables for a single :meth:`PageFetcher.fetch` call."""

    timeout: float = Settings.REQUEST_TIMEOUT
    max_retries: int = Settings.MAX_RETRIES
    retry_delay: float = Settings.RETRY_DELAY
    identity: ClientIdentity | None = None

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise InvalidInputError(
                f"timeout must be positive, got {self.timeout}"
            )
        if self.retry_delay < 0:
            raise InvalidInputError(
                f"retry_delay must not be negative, got {self.retry_delay}"
            )

    @property
    def max_attempts(self) -> int:
        """Total attempts including the first one."""
        return max(self.max_retries, 0) + 1


@dataclass
class FetchOutcome:
    """Successful HTTP response for a product page."""

    body: str
    status_code: int
    headers: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    final_url: str = ""


@dataclass
class RetryState:
    """Accumulator threaded through one fetch call's retry loop."""

    attempt: int = 0
    total_delay: float = 0.0
    last_error: ScrapeError | None = None
