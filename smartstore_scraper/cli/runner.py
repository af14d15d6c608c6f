# smartstore_scraper/cli/runner.py

"""Headless CLI runner around the scrape orchestrator."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from smartstore_scraper.filters.url_validator import (
    normalize_product_url,
    sanitize_url,
)
from smartstore_scraper.models.batch import BatchResult
from smartstore_scraper.models.options import ScrapeOptions
from smartstore_scraper.models.product import ProductRecord
from smartstore_scraper.scrapers.browser_capture import BrowserCapture
from smartstore_scraper.services.scrape_orchestrator import (
    ScrapeOrchestrator,
)

logger = logging.getLogger("smartstore.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def parse_stores(store_csv: str) -> list[str]:
    """Split a comma-separated list of storefront keys."""
    return [s.strip() for s in store_csv.split(",") if s.strip()]


def _price_label(record: ProductRecord) -> str:
    price = record.price
    if not price.has_price:
        return "N/A"
    current = price.discounted or price.original
    label = f"{current:,}원"
    if price.discount_rate:
        label += f" (-{price.discount_rate}%)"
    return label


def _print_table(result: BatchResult) -> None:
    """Render a Rich table of scraped products to stdout."""
    table = Table(
        title="SmartStore Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Stock", justify="center")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, record in enumerate(result.succeeded, 1):
        table.add_row(
            str(idx),
            record.title[:60],
            _price_label(record),
            f"{record.rating.score:.1f}" if record.rating else "-",
            "[green]yes[/green]" if record.availability else "[red]no[/red]",
            record.url,
        )

    Console().print(table)


def cli_scrape(
    urls: list[str],
    options: ScrapeOptions,
    output_format: str,
) -> int:
    """Scrape *urls* and return an exit code (0=all ok, 1=any failure)."""
    renderer = BrowserCapture() if options.render_fallback else None
    orchestrator = ScrapeOrchestrator(renderer=renderer)
    # Pasted links often lack a scheme or carry tracking junk
    urls = [sanitize_url(normalize_product_url(u)) for u in urls]

    _err.print(f"[bold]Scraping {len(urls)} product(s)[/bold]")
    result = orchestrator.scrape_many(urls, options)

    logger.info(
        "CLI batch done: %d ok, %d failed",
        len(result.succeeded),
        len(result.failed),
    )
    for item in result.failed:
        _err.print(f"[red]Failed {item.url}: {item.reason}[/red]")

    _err.print(
        f"[green]✓ {len(result.succeeded)} of {result.total} "
        f"scraped[/green]"
    )

    if output_format == "table":
        _print_table(result)
    else:
        json.dump(
            result.to_dict(),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 1 if result.failed else 0


async def run_health_check(stores: list[str]) -> int:
    """Run a connectivity health check against each storefront."""
    from smartstore_scraper.services.health_checker import HealthChecker

    _err.print("[bold]Running storefront health check...[/bold]")
    checker = HealthChecker(stores)
    results = await checker.check_all()

    table = Table(
        title="Storefront Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Store", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "-"
        )
        table.add_row(r.store, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
