"""
Article page fetching through a shared headless browser.

Pages are rendered by Crawl4AI's AsyncWebCrawler (Playwright backend). One
crawler instance owns the browser for the whole run; each ``arun`` call opens
its own tab and the crawler closes that tab when the call returns, on both
success and failure paths.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from crawl4ai import AsyncWebCrawler, BrowserConfig, CacheMode, CrawlerRunConfig

from ..config import FetchConfig
from ..core.types import FetchResult
from .extractor import extract_fields, required_selectors


def article_url(base_url: str, article_id: int) -> str:
    """Build the detail page URL for an article ID.

    Example:
        >>> article_url("https://fcv.org.br/site/noticia/detalhe", 1301)
        'https://fcv.org.br/site/noticia/detalhe/1301'
    """
    return f"{base_url.rstrip('/')}/{article_id}"


def open_browser(cfg: FetchConfig) -> AsyncWebCrawler:
    """Create the crawler that owns the shared browser.

    Use it as an async context manager; the browser is closed on exit.
    """
    browser_kwargs: dict[str, Any] = {"headless": cfg.headless, "verbose": False}
    if cfg.user_agent:
        browser_kwargs["user_agent"] = cfg.user_agent
    return AsyncWebCrawler(config=BrowserConfig(**browser_kwargs))


def build_run_config(cfg: FetchConfig) -> CrawlerRunConfig:
    """Build the per-page crawl configuration.

    Navigation waits for DOMContentLoaded. The page is then held until all
    three content regions exist, with a budget of ``selector_timeout_seconds``
    per region.
    """
    selectors = required_selectors(cfg)
    condition = (
        f"js:() => {json.dumps(selectors)}"
        ".every((sel) => document.querySelector(sel) !== null)"
    )
    return CrawlerRunConfig(
        cache_mode=CacheMode.BYPASS,
        wait_until="domcontentloaded",
        page_timeout=int(cfg.navigation_timeout_seconds * 1000),
        wait_for=condition,
        wait_for_timeout=int(cfg.selector_timeout_seconds * 1000 * len(selectors)),
        verbose=False,
    )


async def fetch_article(crawler: Any, article_id: int, cfg: FetchConfig) -> FetchResult:
    """Fetch one article detail page and extract its fields.

    Never raises: navigation timeouts, missing regions and network errors
    are all returned as a FetchResult carrying the error message.

    Args:
        crawler: An entered AsyncWebCrawler (or any object with a compatible ``arun``)
        article_id: Numeric article ID
        cfg: Fetch configuration

    Returns:
        FetchResult with content fields on success or error on failure
    """
    url = article_url(cfg.base_url, article_id)
    try:
        result = await crawler.arun(url=url, config=build_run_config(cfg))

        if not getattr(result, "success", True):
            error_message = getattr(result, "error_message", None) or "Crawl failed"
            return FetchResult(article_id=article_id, url=url, error=error_message)

        html = getattr(result, "html", None)
        if not html:
            return FetchResult(article_id=article_id, url=url, error="Empty page")

        fields = extract_fields(html, cfg)
    except Exception as exc:  # noqa: BLE001
        return FetchResult(
            article_id=article_id,
            url=url,
            error=f"{type(exc).__name__}: {exc}",
        )

    return FetchResult(
        article_id=article_id,
        url=url,
        title=fields.title,
        date=fields.date,
        body=fields.body,
        images=fields.images,
    )


async def fetch_articles(crawler: Any, ids: list[int], cfg: FetchConfig) -> list[FetchResult]:
    """Fetch all article IDs concurrently with a bounded number of open tabs.

    Results are returned in the same order as ``ids``.
    """
    semaphore = asyncio.Semaphore(max(1, cfg.max_concurrent_pages))

    async def _fetch_one(article_id: int) -> FetchResult:
        async with semaphore:
            return await fetch_article(crawler, article_id, cfg)

    tasks = [asyncio.create_task(_fetch_one(article_id)) for article_id in ids]
    # gather() preserves input order, which keeps downstream article ordering stable.
    return await asyncio.gather(*tasks)
