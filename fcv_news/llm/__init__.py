"""LLM enrichment and observability."""

from .providers.base import EnrichmentProvider
from .providers.factory import available_providers, create_provider
from .providers.openrouter import OpenRouterProvider
from .tracing import setup_langfuse, flush, start_span, set_span_output, record_span_error

__all__ = [
    "EnrichmentProvider",
    "OpenRouterProvider",
    "create_provider",
    "available_providers",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
