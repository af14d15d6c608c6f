# tests/test_health_checker.py

"""Tests for the storefront health checker service."""

import itertools
import unittest
from unittest.mock import MagicMock, patch

from curl_cffi.requests import exceptions as curl_exceptions

from smartstore_scraper.services.health_checker import (
    HealthChecker,
    HealthResult,
    probe_store,
)


class TestProbeStore(unittest.TestCase):
    """Tests for the per-store health probe function."""

    def _make_session(self, status_code: int = 200) -> MagicMock:
        """Build a session whose GET returns *status_code*."""
        mock_resp = MagicMock()
        mock_resp.status_code = status_code
        session = MagicMock()
        session.get.return_value = mock_resp
        return session

    def test_ok_status(self) -> None:
        """A fast 200 response should return 'ok' status."""
        session = self._make_session(200)
        result = probe_store("greentea", session=session)
        self.assertEqual(result.status, "ok")
        self.assertEqual(result.store, "greentea")
        self.assertGreaterEqual(result.latency_ms, 0)

    def test_probes_storefront_root(self) -> None:
        """The probe targets the storefront root URL."""
        session = self._make_session(200)
        probe_store("greentea", session=session)
        url = session.get.call_args[0][0]
        self.assertEqual(url, "https://smartstore.naver.com/greentea")

    def test_down_on_http_error(self) -> None:
        """A non-200 response should return 'down' status."""
        session = self._make_session(403)
        result = probe_store("greentea", session=session)
        self.assertEqual(result.status, "down")
        self.assertIn("403", result.message)

    def test_down_on_transport_error(self) -> None:
        """A network error should return 'down' status."""
        session = MagicMock()
        session.get.side_effect = curl_exceptions.ConnectionError(
            "Connection refused",
        )
        result = probe_store("greentea", session=session)
        self.assertEqual(result.status, "down")
        self.assertIn("Connection refused", result.message)

    @patch("smartstore_scraper.services.health_checker.time.monotonic")
    def test_slow_on_high_latency(self, mock_clock: MagicMock) -> None:
        """A 200 that takes over five seconds is 'slow'."""
        mock_clock.side_effect = itertools.chain(
            [100.0], itertools.repeat(106.0)
        )
        session = self._make_session(200)
        result = probe_store("greentea", session=session)
        self.assertEqual(result.status, "slow")
        self.assertAlmostEqual(result.latency_ms, 6000.0)


class TestHealthChecker(unittest.IsolatedAsyncioTestCase):
    """Tests for the HealthChecker orchestrator."""

    @patch("smartstore_scraper.services.health_checker.probe_store")
    async def test_check_all_returns_all_stores(
        self, mock_probe: MagicMock,
    ) -> None:
        """check_all should return one result per store."""
        mock_probe.side_effect = lambda store, *_: HealthResult(
            store=store,
            status="ok",
            latency_ms=100.0,
            message="",
        )

        checker = HealthChecker(["alpha", "beta", "gamma"])
        results = await checker.check_all()

        self.assertEqual(len(results), 3)
        self.assertEqual(
            [r.store for r in results], ["alpha", "beta", "gamma"]
        )


if __name__ == "__main__":
    unittest.main()
