# smartstore_scraper/models/options.py

"""Option bundles for extraction and end-to-end scraping."""

from dataclasses import dataclass, field

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.core.exceptions import InvalidInputError
from smartstore_scraper.models.fetch import FetchOptions


@dataclass
class ExtractOptions:
    """Tunables for :meth:`ProductExtractor.extract`."""

    extract_images: bool = True
    max_images: int = Settings.MAX_IMAGES
    max_description_length: int = Settings.MAX_DESCRIPTION_LENGTH
    extract_specifications: bool = True


@dataclass
class ScrapeOptions:
    """Everything :class:`ScrapeOrchestrator` needs for one run."""

    fetch: FetchOptions = field(default_factory=FetchOptions)
    extract: ExtractOptions = field(default_factory=ExtractOptions)
    establish_session: bool = False
    batch_delay: float = Settings.BATCH_DELAY
    render_fallback: bool = False

    def __post_init__(self) -> None:
        if self.batch_delay < 0:
            raise InvalidInputError(
                f"batch_delay must not be negative, got {self.batch_delay}"
            )

    @classmethod
    def from_flat(
        cls,
        timeout: float = Settings.REQUEST_TIMEOUT,
        max_retries: int = Settings.MAX_RETRIES,
        retry_delay: float = Settings.RETRY_DELAY,
        max_images: int = Settings.MAX_IMAGES,
        max_description_length: int = (
            Settings.MAX_DESCRIPTION_LENGTH
        ),
        extract_specifications: bool = True,
        establish_session: bool = False,
        batch_delay: float = Settings.BATCH_DELAY,
        render_fallback: bool = False,
    ) -> "ScrapeOptions":
        """Build from the flat option set used by callers and the CLI."""
        return cls(
            fetch=FetchOptions(
                timeout=timeout,
                max_retries=max_retries,
                retry_delay=retry_delay,
            ),
            extract=ExtractOptions(
                max_images=max_images,
                max_description_length=max_description_length,
                extract_specifications=extract_specifications,
            ),
            establish_session=establish_session,
            batch_delay=batch_delay,
            render_fallback=render_fallback,
        )
