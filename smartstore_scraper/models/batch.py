# smartstore_scraper/models/batch.py

"""Batch scrape result container."""

from dataclasses import dataclass, field
from typing import Any

from smartstore_scraper.models.product import ProductRecord


@dataclass
class FailedItem:
    """A URL that could not be scraped and why."""

    url: str
    reason: str
    kind: str = ""


@dataclass
class BatchResult:
    """Successes and failures of one ``scrape_many`` run."""

    succeeded: list[ProductRecord] = field(
        default_factory=lambda: list[ProductRecord]()
    )
    failed: list[FailedItem] = field(
        default_factory=lambda: list[FailedItem]()
    )

    @property
    def total(self) -> int:
        """Number of URLs processed."""
        return len(self.succeeded) + len(self.failed)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form suitable for JSON output."""
        return {
            "succeeded": [r.to_dict() for r in self.succeeded],
            "failed": [
                {"url": f.url, "reason": f.reason, "kind": f.kind}
                for f in self.failed
            ],
        }
