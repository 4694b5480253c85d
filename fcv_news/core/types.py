"""
Core data types for the FCV news scraper.

This module defines the fundamental data structures used throughout the pipeline:
- FetchResult: Fields scraped from one article detail page
- EnrichmentResult: Outcome of one LLM enrichment call (summary or tags)
- Article: Ready-to-publish article record
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FetchResult:
    """Result of fetching one article detail page.

    Either the content fields are populated (success) or error is populated
    (failure), but never both. On failure every content field is None.

    Attributes:
        article_id: The numeric article ID that was requested
        url: The detail page URL
        title: Stripped text of the title region, or None
        date: Stripped text of the date region, or None
        body: Stripped text of the body region, or None
        images: Gallery image URLs, or None on error
        error: Error message if the fetch failed, None on success
    """
    article_id: int
    url: str
    title: str | None = None
    date: str | None = None
    body: str | None = None
    images: list[str] | None = None
    error: str | None = None


@dataclass
class EnrichmentResult:
    """Outcome of a single enrichment call.

    Attributes:
        status: "ok", "provider_error", "parse_error" or "payload_error"
        payload: Parsed JSON object returned by the model when status is "ok"
        error: Human-readable error message when status is not "ok"
        raw: Raw model text, kept for diagnostics
    """
    status: str
    payload: dict[str, Any] | None = None
    error: str | None = None
    raw: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok" and self.payload is not None


@dataclass
class Article:
    """Ready-to-publish news article.

    Attributes:
        title: The article headline
        summary: LLM-generated summary (at most four lines)
        body: Full article text
        published_at: Publish time as Unix epoch seconds
        source_id: Numeric ID of the source page on the site
        tags: LLM-generated tags
        images: Gallery image URLs
    """
    title: str
    summary: str
    body: str
    published_at: int
    source_id: int | None = None
    tags: list[str] | None = field(default=None)
    images: list[str] | None = field(default=None)

    def to_record(self) -> dict[str, Any]:
        """Return the publishable record with the site's field names."""
        return {
            "titulo": self.title,
            "resumo": self.summary,
            "conteudo": self.body,
            "data_publicacao": self.published_at,
            "local_id": self.source_id,
            "tags": self.tags,
            "imagens": self.images,
        }
