import asyncio
import signal
import sys
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click

from .config import (
    HarvestConfig,
    PipelineConfig,
    Settings,
    build_pipeline_config,
    get_settings,
    validate_config,
)
from .errors import ConfigError, OutputError
from .extraction.content import ContentExtractor
from .extraction.profiles import ProfileResolver
from .ingest.feeds import FeedItem, FeedSource, gather_feed_items
from .ingest.pages import PageSource
from .logging import PerformanceLogger, get_logger, log_error, log_processing_stage, setup_logging
from .processing.assembler import AiRecord, ArticleAssembler, select_scoring_text
from .processing.relevance import RelevanceFilter
from .processing.scoring import KeywordScorer, ScoreResult
from .render import write_report
from .storage import JsonlWriter

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one harvest run."""
    records: list[AiRecord]
    kept: list[AiRecord]
    records_path: Optional[Path] = None
    report_path: Optional[Path] = None


class HarvestPipeline:
    """Extraction, scoring, assembly and filtering for a batch of feed items."""

    def __init__(self, config: PipelineConfig, page_source: Any):
        self.config = config
        self.extractor = ContentExtractor(page_source, ProfileResolver.from_config(config))
        self.scorer = KeywordScorer(config.taxonomy)
        self.assembler = ArticleAssembler(config)
        self.relevance_filter = RelevanceFilter.from_config(config)

    def _score(self, text: str) -> ScoreResult:
        if not self.config.filter_by_keywords:
            return ScoreResult.empty()
        return self.scorer.score(text)

    async def process_item(self, item: FeedItem) -> AiRecord:
        """Fetch, extract, score and assemble a single feed item."""
        extracted_text = ""
        if self.config.extract_full_content:
            extracted = await self.extractor.extract(item.link)
            extracted_text = extracted.text

        text = select_scoring_text(item, extracted_text)
        return self.assembler.assemble(item, extracted_text, self._score(text))

    async def process_items(self, items: list[FeedItem]) -> list[AiRecord]:
        """Process all items concurrently, keeping input order."""
        results = await asyncio.gather(
            *(self.process_item(item) for item in items),
            return_exceptions=True
        )

        records = []
        for item, result in zip(items, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(**log_error(result, context="process_item", url=item.link))
                result = self.assembler.assemble(item, "", ScoreResult.empty())
            records.append(result)
        return records

    async def harvest(self, feed_source: Any) -> tuple[list[AiRecord], list[AiRecord]]:
        """Run feeds through the pipeline; returns (all records, kept records)."""
        items = await gather_feed_items(feed_source, self.config.feeds)
        if not items:
            return [], []

        logger.info("Processing feed items", count=len(items))
        with PerformanceLogger("process_items", logger):
            records = await self.process_items(items)

        kept = self.relevance_filter.filter(records)
        logger.info(
            **log_processing_stage(
                stage="relevance_filter",
                input_count=len(records),
                output_count=len(kept),
                threshold=self.config.keyword_score_threshold,
            )
        )
        return records, kept


def _write_outputs(result: PipelineResult, settings: Settings) -> None:
    """Persist kept records and the report; write failures are logged only."""
    try:
        result.records_path = JsonlWriter(settings.records_path).write(result.kept)
    except OutputError as e:
        logger.error(**log_error(e, context="write_records"))

    try:
        result.report_path = write_report(result.records, result.kept, settings.report_path)
    except OutputError as e:
        logger.error(**log_error(e, context="write_report"))


async def run_pipeline(
    config: PipelineConfig,
    settings: Settings,
    feed_source: Any = None,
    page_source: Any = None,
) -> PipelineResult:
    """Run one complete harvest.

    Args:
        config: Immutable pipeline configuration.
        settings: Application settings (output paths, HTTP options).
        feed_source: Object with an async ``fetch_feed(url)``; an HTTP
            FeedSource is opened when omitted.
        page_source: Object with an async ``fetch_page(url)``; an HTTP
            PageSource is opened when omitted.

    Returns:
        All assembled records, the kept ones, and where they were written.
    """
    async with AsyncExitStack() as stack:
        if feed_source is None:
            feed_source = await stack.enter_async_context(
                FeedSource(settings, max_entries=config.max_entries_per_feed)
            )
        if page_source is None:
            page_source = await stack.enter_async_context(PageSource(settings))

        with PerformanceLogger("harvest_run", logger):
            records, kept = await HarvestPipeline(config, page_source).harvest(feed_source)

    result = PipelineResult(records=records, kept=kept)
    if not records:
        logger.warning("No articles found in the configured feeds")
        return result

    _write_outputs(result, settings)
    logger.info("Harvest complete", kept=len(kept), total=len(records))
    return result


async def run_forever(
    config: PipelineConfig,
    settings: Settings,
    run_once: Optional[Callable[[PipelineConfig, Settings], Awaitable[Any]]] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> int:
    """Harvest now, then every ``config.fetch_interval`` until SIGINT/SIGTERM.

    Returns:
        Number of runs started.
    """
    run_once = run_once or run_pipeline
    stop_event = stop_event or asyncio.Event()
    interval = config.fetch_interval.total_seconds()

    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # No signal support on this loop (Windows, non-main thread)
            pass

    runs = 0
    try:
        while not stop_event.is_set():
            runs += 1
            try:
                await run_once(config, settings)
            except Exception as e:
                logger.error(**log_error(e, context="scheduled_run", run=runs), exc_info=True)

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)

    logger.info("Harvester stopped", runs=runs)
    return runs


@click.command()
@click.option("--once", is_flag=True, help="Run a single harvest and exit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Harvest YAML file (feeds, taxonomy, site profiles)",
)
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--threshold", type=click.IntRange(min=0), help="Minimum keyword score to keep")
@click.option("--max-entries", type=click.IntRange(min=0), help="Max items per feed")
@click.option("--no-extract", is_flag=True, help="Score feed summaries without fetching pages")
@click.option("--log-level", default=None, help="Log level")
@click.option("--verbose", is_flag=True, help="Human-readable debug logging")
@click.option(
    "--validate-config",
    "validate_config_flag",
    is_flag=True,
    help="Validate configuration and exit",
)
def cli(
    once,
    config_path,
    output_dir,
    threshold,
    max_entries,
    no_extract,
    log_level,
    verbose,
    validate_config_flag,
):
    """Feed harvester - collect RSS articles and keep the relevant ones."""
    if verbose:
        setup_logging(log_level="DEBUG", json_logging=False)
    elif log_level:
        setup_logging(log_level=log_level)

    overrides: dict[str, Any] = {}
    if config_path:
        overrides["harvest_config_path"] = config_path
    if output_dir:
        overrides["output_dir"] = output_dir
    if threshold is not None:
        overrides["keyword_score_threshold"] = threshold
    if max_entries is not None:
        overrides["max_entries_per_feed"] = max_entries
    if no_extract:
        overrides["extract_full_content"] = False
    settings = get_settings().model_copy(update=overrides)

    try:
        harvest_config = HarvestConfig(settings.harvest_config_path)
    except ConfigError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    if not validate_config(settings, harvest_config):
        click.echo("❌ Configuration validation failed", err=True)
        sys.exit(1)
    if validate_config_flag:
        click.echo("✅ Configuration is valid")
        sys.exit(0)

    config = build_pipeline_config(settings, harvest_config)

    try:
        if once:
            result = asyncio.run(run_pipeline(config, settings))
            click.echo(f"Harvest complete: {len(result.kept)}/{len(result.records)} articles kept")
        else:
            asyncio.run(run_forever(config, settings))
    except KeyboardInterrupt:
        click.echo("Harvester stopped")


if __name__ == "__main__":
    cli()
