"""
FCV News - scraper and LLM enricher for Fundação Cristiano Varella news.

This package renders article detail pages in a headless browser, extracts
title/date/body/images, enriches each article with an LLM summary and tags,
and writes ready-to-publish records.

Main entry point is the CLI via `fcv-news run` command.

Example:
    $ fcv-news run -o out/ --id 1301 --id 1302
"""

__all__ = ["__version__", "Article", "DateFormatError", "parse_display_date"]
__version__ = "0.1.0"

from .core.dates import DateFormatError, parse_display_date
from .core.types import Article
