#!/usr/bin/env python3
"""Feed health check utility."""

import asyncio
import json
import sys
import time

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import HarvestConfig, get_settings
from .errors import ConfigError, FetchError
from .ingest.feeds import FeedHealthMonitor, FeedSource
from .logging import get_logger

logger = get_logger(__name__)
console = Console()


async def check_all_feeds(harvest_config: HarvestConfig, feed_source=None,
                          health_monitor: FeedHealthMonitor | None = None) -> dict:
    """Fetch every configured feed once and report its health."""
    health_monitor = health_monitor or FeedHealthMonitor(failure_threshold=1)
    feeds = harvest_config.get_feeds()

    console.print("\n[bold cyan]Checking all feeds...[/bold cyan]\n")

    async def check(source):
        for feed in feeds:
            console.print(f"Checking {feed.label}... ", end="")
            start = time.monotonic()
            try:
                items = await source.fetch_feed(feed.url)
            except FetchError as e:
                console.print(f"[red]✗ {e.message}[/red]")
                health_monitor.record_failure(feed.label, e.message)
                continue

            response_time = time.monotonic() - start
            if items:
                console.print(f"[green]✓[/green] ({len(items)} items, {response_time:.2f}s)")
                health_monitor.record_success(feed.label, response_time, len(items))
            else:
                console.print("[yellow]⚠️  No items[/yellow]")
                health_monitor.record_failure(feed.label, "No items found")

    if feed_source is None:
        async with FeedSource(get_settings()) as source:
            await check(source)
    else:
        await check(feed_source)

    return health_monitor.get_health_report()


def display_health_report(report: dict):
    """Display health report in a formatted table."""
    console.print("\n")

    summary = report['summary']
    summary_text = (
        f"[green]Healthy: {summary['healthy']}[/green] | "
        f"[yellow]Degraded: {summary['degraded']}[/yellow] | "
        f"[red]Unhealthy: {summary['unhealthy']}[/red] | "
        f"Total: {summary['total']}"
    )

    console.print(Panel(
        summary_text,
        title="[bold]Feed Health Summary[/bold]",
        border_style="cyan"
    ))

    if not report['feeds']:
        return

    table = Table(
        title="\nDetailed Feed Status",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan"
    )

    table.add_column("Feed", style="dim", overflow="fold")
    table.add_column("Status", justify="center")
    table.add_column("Response Time", justify="right")
    table.add_column("Items", justify="right")
    table.add_column("Last Error", overflow="fold")

    for name, status in report['feeds'].items():
        status_color = {
            'healthy': 'green',
            'degraded': 'yellow',
            'unhealthy': 'red',
        }.get(status['status'], 'dim')

        response_time = status.get('response_time', 0)
        entry_count = status.get('entry_count', 0)
        last_error = status.get('last_error') or '-'
        if len(last_error) > 50:
            last_error = last_error[:47] + "..."

        table.add_row(
            name,
            f"[{status_color}]{status['status'].upper()}[/{status_color}]",
            f"{response_time:.2f}s" if response_time > 0 else "-",
            str(entry_count) if entry_count > 0 else "-",
            last_error,
        )

    console.print(table)


@click.command()
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
def main(output_json: bool):
    """Check health status of all configured feeds."""
    try:
        harvest_config = HarvestConfig(get_settings().harvest_config_path)
        report = asyncio.run(check_all_feeds(harvest_config))
    except ConfigError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(1)

    if output_json:
        print(json.dumps(report, indent=2, default=str))
    else:
        display_health_report(report)

    if report['summary']['unhealthy']:
        sys.exit(1)


if __name__ == "__main__":
    main()
