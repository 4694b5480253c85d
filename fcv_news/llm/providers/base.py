"""Abstract interfaces for LLM-driven article enrichment."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.types import EnrichmentResult


class EnrichmentProvider(ABC):
    """Provider interface for article summary and tag generation."""

    @abstractmethod
    async def summarize(self, article_id: int, body: str) -> EnrichmentResult:
        """Return a result whose payload holds ``{"resumo": str}``."""
        raise NotImplementedError

    @abstractmethod
    async def generate_tags(self, article_id: int, body: str) -> EnrichmentResult:
        """Return a result whose payload holds ``{"noticiaID": int, "tags": list[str]}``."""
        raise NotImplementedError
