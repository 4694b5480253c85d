"""
Core domain models and business logic.

This package contains data types and business logic that is
independent of any specific pipeline stage.
"""

from .types import Article, EnrichmentResult, FetchResult
from .dates import DateFormatError, parse_display_date, resolve_timezone

__all__ = [
    "Article",
    "EnrichmentResult",
    "FetchResult",
    "DateFormatError",
    "parse_display_date",
    "resolve_timezone",
]
