# smartstore_scraper/models/product_url.py

"""Validated SmartStore product locator."""

from dataclasses import dataclass

from smartstore_scraper.config.settings import Settings


@dataclass(frozen=True)
class ProductURL:
    """Storefront key plus numeric product id parsed from a URL."""

    store: str
    product_id: str
    url: str

    @property
    def store_url(self) -> str:
        """Root page of the owning storefront."""
        return f"{Settings.STOREFRONT_ROOT}/{self.store}"
