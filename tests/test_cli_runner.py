# tests/test_cli_runner.py

"""Tests for the headless CLI runner and argument parsing."""

import io
import json
import unittest
from unittest.mock import MagicMock, patch

from main import _build_parser, _options_from_args
from smartstore_scraper.cli.runner import cli_scrape, parse_stores
from smartstore_scraper.models.batch import BatchResult, FailedItem
from smartstore_scraper.models.options import ScrapeOptions
from smartstore_scraper.models.product import PriceInfo, ProductRecord

MODULE = "smartstore_scraper.cli.runner"
URL = "https://smartstore.naver.com/greentea/products/1"


def _record() -> ProductRecord:
    """A minimal scraped record."""
    return ProductRecord(
        title="프리미엄 녹차 세트",
        product_id="1",
        url=URL,
        price=PriceInfo(original=10000, discounted=9000),
    )


class TestCliScrape(unittest.TestCase):
    """cli_scrape output and exit codes."""

    @patch(f"{MODULE}.ScrapeOrchestrator")
    def test_json_output_and_success_code(
        self, mock_orch_cls: MagicMock,
    ) -> None:
        """All successes print JSON and exit 0."""
        mock_orch_cls.return_value.scrape_many.return_value = BatchResult(
            succeeded=[_record()]
        )
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = cli_scrape([URL], ScrapeOptions(), "json")
        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual(data["succeeded"][0]["title"], "프리미엄 녹차 세트")
        self.assertEqual(data["failed"], [])

    @patch(f"{MODULE}.ScrapeOrchestrator")
    def test_input_urls_cleaned(self, mock_orch_cls: MagicMock) -> None:
        """Missing schemes are added and script params dropped."""
        mock_orch_cls.return_value.scrape_many.return_value = BatchResult()
        with patch("sys.stdout", new_callable=io.StringIO):
            cli_scrape(
                [
                    " smartstore.naver.com/greentea/products/1 ",
                    f"{URL}?onerror=alert(1)",
                ],
                ScrapeOptions(),
                "json",
            )
        passed = mock_orch_cls.return_value.scrape_many.call_args.args[0]
        self.assertEqual(passed, [URL, URL])

    @patch(f"{MODULE}.ScrapeOrchestrator")
    def test_any_failure_exits_one(self, mock_orch_cls: MagicMock) -> None:
        """A single failure makes the exit code 1."""
        mock_orch_cls.return_value.scrape_many.return_value = BatchResult(
            failed=[FailedItem(url=URL, reason="Product not found")]
        )
        with patch("sys.stdout", new_callable=io.StringIO):
            code = cli_scrape([URL], ScrapeOptions(), "json")
        self.assertEqual(code, 1)

    @patch(f"{MODULE}.BrowserCapture")
    @patch(f"{MODULE}.ScrapeOrchestrator")
    def test_renderer_only_when_requested(
        self, mock_orch_cls: MagicMock, mock_capture_cls: MagicMock,
    ) -> None:
        """The browser is only wired in with render_fallback."""
        mock_orch_cls.return_value.scrape_many.return_value = BatchResult()
        with patch("sys.stdout", new_callable=io.StringIO):
            cli_scrape([URL], ScrapeOptions(), "json")
        mock_capture_cls.assert_not_called()
        mock_orch_cls.assert_called_with(renderer=None)

        with patch("sys.stdout", new_callable=io.StringIO):
            cli_scrape([URL], ScrapeOptions(render_fallback=True), "json")
        mock_capture_cls.assert_called_once()

    def test_parse_stores(self) -> None:
        """Comma lists are split and trimmed."""
        self.assertEqual(parse_stores(" a, b ,,c"), ["a", "b", "c"])


class TestArgumentParsing(unittest.TestCase):
    """main.py flags map onto ScrapeOptions."""

    def test_defaults(self) -> None:
        """Without flags the settings defaults apply."""
        args = _build_parser().parse_args([URL])
        options = _options_from_args(args)
        self.assertEqual(args.urls, [URL])
        self.assertEqual(args.output_format, "json")
        self.assertEqual(options.fetch.max_retries, 3)
        self.assertTrue(options.extract.extract_specifications)
        self.assertFalse(options.render_fallback)

    def test_flags(self) -> None:
        """Every tunable flag reaches its option."""
        args = _build_parser().parse_args(
            [
                URL,
                "--format", "table",
                "--timeout", "5",
                "--retries", "1",
                "--retry-delay", "0.5",
                "--max-images", "4",
                "--max-description", "100",
                "--no-specs",
                "--establish-session",
                "--delay", "1.5",
                "--render-fallback",
            ]
        )
        options = _options_from_args(args)
        self.assertEqual(args.output_format, "table")
        self.assertEqual(options.fetch.timeout, 5.0)
        self.assertEqual(options.fetch.max_retries, 1)
        self.assertEqual(options.fetch.retry_delay, 0.5)
        self.assertEqual(options.extract.max_images, 4)
        self.assertEqual(options.extract.max_description_length, 100)
        self.assertFalse(options.extract.extract_specifications)
        self.assertTrue(options.establish_session)
        self.assertEqual(options.batch_delay, 1.5)
        self.assertTrue(options.render_fallback)

    def test_negative_numbers_rejected(self) -> None:
        """Negative delays and a zero timeout are usage errors."""
        parser = _build_parser()
        for flags in (
            ["--delay", "-1"],
            ["--retry-delay", "-0.5"],
            ["--timeout", "0"],
        ):
            with self.subTest(flags=flags):
                with patch("sys.stderr", new_callable=io.StringIO):
                    with self.assertRaises(SystemExit):
                        parser.parse_args([URL, *flags])

    def test_health_flag(self) -> None:
        """--health takes a store list."""
        args = _build_parser().parse_args(["--health", "a,b"])
        self.assertEqual(args.health, "a,b")
        self.assertEqual(args.urls, [])


if __name__ == "__main__":
    unittest.main()
