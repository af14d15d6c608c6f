# main.py

"""Entry point for the smartstore scraper CLI."""

import argparse
import asyncio
import logging
import sys

from smartstore_scraper.config.logging_config import setup_logging
from smartstore_scraper.config.settings import Settings
from smartstore_scraper.models.options import ScrapeOptions

logger = logging.getLogger("smartstore.main")


def _non_negative_float(raw: str) -> float:
    value = float(raw)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {raw}")
    return value


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {raw}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="smartstore_scraper",
        description="Naver SmartStore product page scraper.",
        epilog=(
            "URL format: "
            f"{Settings.STOREFRONT_ROOT}/<store>/products/<id>"
        ),
    )
    parser.add_argument(
        "urls",
        nargs="*",
        help="Product page URLs to scrape.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=Settings.REQUEST_TIMEOUT,
        help="Per-attempt request timeout in seconds.",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=Settings.MAX_RETRIES,
        help="Retries after the first attempt.",
    )
    parser.add_argument(
        "--retry-delay",
        type=_non_negative_float,
        default=Settings.RETRY_DELAY,
        dest="retry_delay",
        help="Base backoff between attempts in seconds.",
    )
    parser.add_argument(
        "--max-images",
        type=int,
        default=Settings.MAX_IMAGES,
        dest="max_images",
    )
    parser.add_argument(
        "--max-description",
        type=int,
        default=Settings.MAX_DESCRIPTION_LENGTH,
        dest="max_description",
    )
    parser.add_argument(
        "--no-specs",
        action="store_true",
        default=False,
        dest="no_specs",
        help="Skip the specification table.",
    )
    parser.add_argument(
        "--establish-session",
        action="store_true",
        default=False,
        dest="establish_session",
        help="Visit the storefront root before each product.",
    )
    parser.add_argument(
        "--delay",
        type=_non_negative_float,
        default=Settings.BATCH_DELAY,
        help="Seconds to wait between products in a batch.",
    )
    parser.add_argument(
        "--render-fallback",
        action="store_true",
        default=False,
        dest="render_fallback",
        help="Render blocked pages in a real browser (needs playwright).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show progress on stderr (-v info, -vv debug).",
    )
    parser.add_argument(
        "--health",
        default=None,
        metavar="STORE[,STORE]",
        help="Check connectivity to the given storefronts and exit.",
    )
    return parser


def _options_from_args(args: argparse.Namespace) -> ScrapeOptions:
    return ScrapeOptions.from_flat(
        timeout=args.timeout,
        max_retries=args.retries,
        retry_delay=args.retry_delay,
        max_images=args.max_images,
        max_description_length=args.max_description,
        extract_specifications=not args.no_specs,
        establish_session=args.establish_session,
        batch_delay=args.delay,
        render_fallback=args.render_fallback,
    )


def _run_health_check(store_csv: str) -> None:
    """Run storefront connectivity health check."""
    from smartstore_scraper.cli.runner import parse_stores, run_health_check

    exit_code = asyncio.run(run_health_check(parse_stores(store_csv)))
    sys.exit(exit_code)


def _run_cli(args: argparse.Namespace) -> None:
    """Scrape the given URLs and exit."""
    from smartstore_scraper.cli.runner import cli_scrape

    exit_code = cli_scrape(
        urls=args.urls,
        options=_options_from_args(args),
        output_format=args.output_format,
    )
    sys.exit(exit_code)


def main() -> None:
    """Route to a health check or a scrape run."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(args.verbose)
    logger.info("smartstore_scraper starting, log file: %s", log_file)

    if args.health:
        _run_health_check(args.health)
    elif not args.urls:
        parser.error("at least one product URL is required")
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
