"""
Article page fetching and extraction.

This package handles headless browser fetching and DOM field
extraction for article detail pages.
"""

from .fetcher import article_url, build_run_config, fetch_article, fetch_articles, open_browser
from .extractor import ExtractedFields, MissingElementError, extract_fields

__all__ = [
    "article_url",
    "build_run_config",
    "fetch_article",
    "fetch_articles",
    "open_browser",
    "ExtractedFields",
    "MissingElementError",
    "extract_fields",
]
