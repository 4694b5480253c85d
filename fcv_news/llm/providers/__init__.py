"""LLM provider implementations."""

from .base import EnrichmentProvider
from .factory import available_providers, create_provider
from .openrouter import OpenRouterProvider

__all__ = [
    "EnrichmentProvider",
    "OpenRouterProvider",
    "available_providers",
    "create_provider",
]
