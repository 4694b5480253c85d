"""Provider factory and registry for hot-swappable LLM backends."""

from __future__ import annotations

import logging

from ...config import LoggingConfig, ProviderConfig, SummaryConfig, get_api_key
from .base import EnrichmentProvider
from .openrouter import OpenRouterProvider


ProviderBuilder = type[EnrichmentProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "openrouter": OpenRouterProvider,
    "openai": OpenRouterProvider,
    "openai_compatible": OpenRouterProvider,
    "openai-compatible": OpenRouterProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    summary_cfg: SummaryConfig,
    log_cfg: LoggingConfig,
    llm_logger: logging.Logger | None,
) -> EnrichmentProvider:
    """Build a provider instance from runtime config.

    Raises:
        ValueError: If the provider name is unknown or no API key is configured
    """
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    api_key = get_api_key(provider_cfg)
    return builder(provider_cfg, summary_cfg, api_key, log_cfg, llm_logger)
