# smartstore_scraper/services/health_checker.py

"""Storefront connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests
from curl_cffi.requests import exceptions as curl_exceptions

from smartstore_scraper.config.settings import Settings
from smartstore_scraper.scrapers.client_identity import IdentityRotator

logger = logging.getLogger("smartstore.health")

_HEALTH_TIMEOUT = 10  # seconds per store
_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single storefront health check."""

    store: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_store(
    store: str,
    session: curl_requests.Session | None = None,
    rotator: IdentityRotator | None = None,
) -> HealthResult:
    """GET a storefront root page and grade the response."""
    url = f"{Settings.STOREFRONT_ROOT}/{store}"
    session = session or curl_requests.Session(
        impersonate=Settings.DEFAULT_IMPERSONATE
    )
    identity = (rotator or IdentityRotator()).next()

    start = time.monotonic()
    try:
        resp = session.get(
            url,
            headers=identity.headers(Settings.DEFAULT_HEADERS),
            timeout=_HEALTH_TIMEOUT,
            impersonate=identity.impersonate,
        )
    except curl_exceptions.RequestException as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            store=store,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )
    elapsed_ms = (time.monotonic() - start) * 1000

    if resp.status_code != 200:
        return HealthResult(
            store=store,
            status="down",
            latency_ms=elapsed_ms,
            message=f"HTTP {resp.status_code}",
        )

    if elapsed_ms > _SLOW_THRESHOLD_MS:
        return HealthResult(
            store=store,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )

    return HealthResult(
        store=store,
        status="ok",
        latency_ms=elapsed_ms,
        message="",
    )


class HealthChecker:
    """Runs concurrent health probes against a set of storefronts."""

    def __init__(self, stores: list[str]) -> None:
        self.stores = stores
        self.rotator = IdentityRotator()

    async def check_all(self) -> list[HealthResult]:
        """Probe every store concurrently, one thread each."""
        tasks = [
            asyncio.to_thread(probe_store, store, None, self.rotator)
            for store in self.stores
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.store,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
