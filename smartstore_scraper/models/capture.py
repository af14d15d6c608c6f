# smartstore_scraper/models/capture.py

"""JSON payloads captured while a real browser rendered a product page."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CapturedPayload:
    """Product API and benefits API bodies seen during one render."""

    product_json: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
    benefits_json: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
