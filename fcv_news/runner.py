"""
Main pipeline orchestration for the FCV news scraper.

This module coordinates the entire workflow:
1. Open one headless browser for the run
2. Fetch every article detail page (bounded concurrency)
3. Enrich each fetched article with an LLM summary and tag list
4. Normalize the publish date and assemble article records
5. Close the browser once every article has been processed
6. Write the records to the output file
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import tzinfo
import logging
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .config import AppConfig
from .core.dates import DateFormatError, parse_display_date, resolve_timezone
from .core.types import Article, FetchResult
from .fetch.fetcher import fetch_articles, open_browser
from .llm.providers.base import EnrichmentProvider
from .llm.providers.factory import create_provider
from .llm.tracing import set_span_output, setup_langfuse, start_span, tracing_enabled
from .output.writer import build_run_output_dir, output_path, write_articles
from .utils.logging import log_event, setup_llm_logger, setup_logging


@dataclass
class RunStats:
    """Counters collected while processing a batch of article IDs.

    Attributes:
        total: Number of IDs requested
        fetch_failed: Pages that could not be fetched
        missing_fields: Pages fetched without a title, date or body
        enrichment_failed: Articles whose summary or tags call failed
        date_failed: Articles whose publish date could not be normalized
        unexpected_errors: Articles dropped because of an unexpected exception
        assembled: Articles assembled into records
    """
    total: int = 0
    fetch_failed: int = 0
    missing_fields: int = 0
    enrichment_failed: int = 0
    date_failed: int = 0
    unexpected_errors: int = 0
    assembled: int = 0


@dataclass
class RunOutput:
    """Result of a pipeline run."""

    articles: list[Article] = field(default_factory=list)
    output_path: Path | None = None
    stats: RunStats = field(default_factory=RunStats)


def run_pipeline(
    cfg: AppConfig,
    output_dir: Path,
    ids: list[int] | None = None,
    show_progress: bool = True,
    console: Console | None = None,
) -> RunOutput:
    """Run the complete scrape/enrich/assemble pipeline.

    Configuration (output format, timezone, API key) is validated before the
    browser is opened or any request is sent.

    Args:
        cfg: Application configuration
        output_dir: Base directory for the result file and logs
        ids: Article IDs to process (defaults to cfg.fetch.ids)
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)

    Returns:
        RunOutput with the assembled articles, result path and stats

    Raises:
        ValueError: If the configuration is invalid or the API key is missing
    """
    run_output_dir = build_run_output_dir(output_dir, cfg.output)
    result_path = output_path(run_output_dir, cfg.output)
    tz = resolve_timezone(cfg.dates.timezone)

    logger = setup_logging(cfg.logging, run_output_dir)
    llm_logger = setup_llm_logger(cfg.logging, run_output_dir)
    setup_langfuse(cfg.langfuse)
    provider = _build_provider(cfg, llm_logger)

    article_ids = list(ids) if ids else list(cfg.fetch.ids)
    stats = RunStats(total=len(article_ids))
    console = console or Console()

    with start_span(
        "fcv_news.run",
        kind="chain",
        input_value={"ids": article_ids, "output_dir": str(run_output_dir)},
    ) as run_span:
        log_event(
            logger,
            "Pipeline start",
            event="pipeline_start",
            ids=article_ids,
            output=str(run_output_dir),
            tracing=tracing_enabled(),
        )

        if show_progress:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=console,
            )
            with progress:
                task_id = progress.add_task("Articles", total=len(article_ids))
                articles = asyncio.run(
                    _run_async(article_ids, cfg, provider, tz, logger, stats, progress, task_id)
                )
        else:
            articles = asyncio.run(_run_async(article_ids, cfg, provider, tz, logger, stats))

        write_articles(articles, result_path, cfg.output.format)
        _render_stats(stats, console)

        log_event(
            logger,
            "Pipeline complete",
            event="pipeline_complete",
            output=str(result_path),
            total=stats.total,
            assembled=stats.assembled,
        )
        set_span_output(run_span, {"output": str(result_path), "assembled": stats.assembled})

    return RunOutput(articles=articles, output_path=result_path, stats=stats)


async def _run_async(
    ids: list[int],
    cfg: AppConfig,
    provider: EnrichmentProvider,
    tz: tzinfo,
    logger: logging.Logger | None,
    stats: RunStats,
    progress: Progress | None = None,
    task_id: int | None = None,
) -> list[Article]:
    # The browser is released only after collect_articles has joined every item.
    async with open_browser(cfg.fetch) as crawler:
        return await collect_articles(
            crawler, ids, cfg, provider, logger, stats, tz, progress, task_id
        )


async def collect_articles(
    crawler,
    ids: list[int],
    cfg: AppConfig,
    provider: EnrichmentProvider,
    logger: logging.Logger | None = None,
    stats: RunStats | None = None,
    tz: tzinfo | None = None,
    progress: Progress | None = None,
    task_id: int | None = None,
) -> list[Article]:
    """Fetch, enrich and assemble articles for a list of IDs.

    Every fetch result is processed concurrently and all of them are joined
    before this coroutine returns, so callers can safely release the browser
    afterwards. Failures for one ID never affect the others.

    Args:
        crawler: Entered crawler shared by all page fetches
        ids: Article IDs to process
        cfg: Application configuration
        provider: Enrichment provider for summaries and tags
        logger: Logger for pipeline events
        stats: Counters to update (a fresh RunStats is used if None)
        tz: Time zone for publish dates (defaults to cfg.dates.timezone)
        progress: Optional Rich progress bar
        task_id: Task ID for progress updates

    Returns:
        Assembled articles in the same order as ``ids``
    """
    stats = stats if stats is not None else RunStats(total=len(ids))
    zone = tz if tz is not None else resolve_timezone(cfg.dates.timezone)
    enrich_semaphore = asyncio.Semaphore(max(1, cfg.summary.max_concurrent_requests))

    results = await fetch_articles(crawler, ids, cfg.fetch)

    async def _process(result: FetchResult) -> Article | None:
        try:
            return await _process_result(
                result, provider, zone, enrich_semaphore, logger, stats
            )
        finally:
            if progress is not None and task_id is not None:
                progress.advance(task_id, 1)

    outcomes = await asyncio.gather(
        *(_process(result) for result in results), return_exceptions=True
    )

    articles: list[Article] = []
    for result, outcome in zip(results, outcomes):
        if isinstance(outcome, Exception):
            stats.unexpected_errors += 1
            log_event(
                logger,
                "Article processing failed",
                level=logging.ERROR,
                event="article_failed",
                article_id=result.article_id,
                error=f"{type(outcome).__name__}: {outcome}",
            )
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is not None:
            articles.append(outcome)
    return articles


async def _process_result(
    result: FetchResult,
    provider: EnrichmentProvider,
    tz: tzinfo,
    enrich_semaphore: asyncio.Semaphore,
    logger: logging.Logger | None,
    stats: RunStats,
) -> Article | None:
    """Turn one fetch result into an Article, or None if it must be skipped."""
    if result.error:
        stats.fetch_failed += 1
        log_event(
            logger,
            f"ID {result.article_id}: fetch failed - {result.error}",
            level=logging.WARNING,
            event="fetch_error",
            article_id=result.article_id,
            url=result.url,
            error=result.error,
        )
        return None

    if not result.title or not result.body or not result.date:
        stats.missing_fields += 1
        log_event(
            logger,
            f"ID {result.article_id}: missing title, date or body",
            event="missing_fields",
            article_id=result.article_id,
            url=result.url,
            has_title=bool(result.title),
            has_date=bool(result.date),
            has_body=bool(result.body),
        )
        return None

    async with enrich_semaphore:
        tags_result, summary_result = await asyncio.gather(
            provider.generate_tags(result.article_id, result.body),
            provider.summarize(result.article_id, result.body),
        )

    for kind, enrichment in (("tags", tags_result), ("summary", summary_result)):
        if not enrichment.ok:
            stats.enrichment_failed += 1
            log_event(
                logger,
                f"ID {result.article_id}: {kind} enrichment failed ({enrichment.status})",
                level=logging.WARNING,
                event="enrichment_failed",
                article_id=result.article_id,
                kind=kind,
                status=enrichment.status,
                error=enrichment.error,
            )
            return None

    try:
        published_at = parse_display_date(result.date, tz)
    except DateFormatError as exc:
        stats.date_failed += 1
        log_event(
            logger,
            f"ID {result.article_id}: {exc}",
            level=logging.WARNING,
            event="date_error",
            article_id=result.article_id,
            date=result.date,
            error=str(exc),
        )
        return None

    article = Article(
        title=result.title,
        summary=summary_result.payload["resumo"],
        body=result.body,
        published_at=published_at,
        source_id=result.article_id,
        tags=list(tags_result.payload["tags"]),
        images=result.images,
    )
    stats.assembled += 1
    log_event(
        logger,
        f"ID {result.article_id}: article assembled",
        event="article_assembled",
        article_id=result.article_id,
        title=article.title,
        published_at=article.published_at,
        tags=article.tags,
    )
    return article


def _render_stats(stats: RunStats, console: Console) -> None:
    """Display run statistics to the console."""
    console.print(
        "[bold]Run summary[/bold]: "
        f"total={stats.total}, assembled={stats.assembled}, "
        f"fetch_failed={stats.fetch_failed}, missing_fields={stats.missing_fields}, "
        f"enrichment_failed={stats.enrichment_failed}, date_failed={stats.date_failed}, "
        f"unexpected_errors={stats.unexpected_errors}"
    )


def _build_provider(cfg: AppConfig, llm_logger: logging.Logger | None) -> EnrichmentProvider:
    """Build a pluggable LLM provider instance based on configuration."""
    return create_provider(cfg.provider, cfg.summary, cfg.logging, llm_logger)
