"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: LLM provider settings (OpenRouter chat completions)
- FetchConfig: Headless browser fetching settings
- DatesConfig: Publish date normalization settings
- SummaryConfig: Enrichment prompt settings
- OutputConfig: Output file settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


DEFAULT_ARTICLE_IDS = [1301, 1302, 1303, 1304, 1305, 1306, 1307, 1308, 1309]


@dataclass
class ProviderConfig:
    """Configuration for the LLM provider.

    Attributes:
        name: Provider name ("openrouter" or "openai_compatible")
        model: Model identifier sent with every chat completion
        base_url: Base URL of the chat-completions API
        api_key_env: Environment variable name containing the API key
        api_key: Optional inline API key (overrides env var)
        timeout_seconds: Request timeout for a single completion
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openrouter"
    model: str = "meta-llama/llama-3.3-8b-instruct:free"
    base_url: str = "https://openrouter.ai/api/v1"
    api_key_env: str = "OPEN_ROUTER_KEY"
    api_key: str | None = None
    timeout_seconds: float = 60.0
    trust_env: bool = True


@dataclass
class FetchConfig:
    """Configuration for headless browser fetching.

    Attributes:
        base_url: Article detail URL prefix; the numeric ID is appended
        ids: Article IDs to fetch
        max_concurrent_pages: Maximum number of browser tabs open at once
        navigation_timeout_seconds: Page navigation timeout
        selector_timeout_seconds: Wait budget per required selector
        headless: Run the browser without a visible window
        user_agent: Optional User-Agent override for the browser
        title_selector: CSS selector of the article title
        date_selector: CSS selector of the publish date
        body_selector: CSS selector of the article body
        image_selector: CSS selector of gallery images
    """

    base_url: str = "https://fcv.org.br/site/noticia/detalhe"
    ids: list[int] = field(default_factory=lambda: list(DEFAULT_ARTICLE_IDS))
    max_concurrent_pages: int = 4
    navigation_timeout_seconds: float = 20.0
    selector_timeout_seconds: float = 1.5
    headless: bool = True
    user_agent: str | None = None
    title_selector: str = ".titulo_det"
    date_selector: str = ".date-cad"
    body_selector: str = ".detalhe_texto"
    image_selector: str = "img.ug-thumb-image"


@dataclass
class DatesConfig:
    """Configuration for publish date normalization.

    Attributes:
        timezone: IANA zone the site's display dates are written in
    """

    timezone: str = "America/Sao_Paulo"


@dataclass
class SummaryConfig:
    """Configuration for enrichment prompts.

    Attributes:
        max_chars: Maximum characters of article body to send to the LLM
        max_concurrent_requests: Maximum number of in-flight LLM requests
    """

    max_chars: int = 12000
    max_concurrent_requests: int = 4


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        format: "json" or "jsonl"
        filename: Base name of the output file (extension follows format)
        run_folder_mode: "flat" to write into the output dir, "timestamp" for a subfolder per run
    """

    format: str = "json"
    filename: str = "noticias"
    run_folder_mode: str = "flat"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "none"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional, falls back to LANGFUSE_PUBLIC_KEY)
        secret_key: Langfuse secret key (optional, falls back to LANGFUSE_SECRET_KEY)
        base_url: Langfuse base URL (optional, falls back to LANGFUSE_BASE_URL)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        timeout_seconds: SDK request timeout
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    base_url: str | None = None
    environment: str | None = None
    release: str | None = None
    timeout_seconds: int = 30
    redaction: str = "none"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    dates: DatesConfig = field(default_factory=DatesConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            known = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(known)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "provider": {
            "name": cfg.provider.name,
            "model": cfg.provider.model,
            "base_url": cfg.provider.base_url,
            "api_key_env": cfg.provider.api_key_env,
            "api_key": cfg.provider.api_key,
            "timeout_seconds": cfg.provider.timeout_seconds,
            "trust_env": cfg.provider.trust_env,
        },
        "fetch": {
            "base_url": cfg.fetch.base_url,
            "ids": list(cfg.fetch.ids),
            "max_concurrent_pages": cfg.fetch.max_concurrent_pages,
            "navigation_timeout_seconds": cfg.fetch.navigation_timeout_seconds,
            "selector_timeout_seconds": cfg.fetch.selector_timeout_seconds,
            "headless": cfg.fetch.headless,
            "user_agent": cfg.fetch.user_agent,
            "title_selector": cfg.fetch.title_selector,
            "date_selector": cfg.fetch.date_selector,
            "body_selector": cfg.fetch.body_selector,
            "image_selector": cfg.fetch.image_selector,
        },
        "dates": {
            "timezone": cfg.dates.timezone,
        },
        "summary": {
            "max_chars": cfg.summary.max_chars,
            "max_concurrent_requests": cfg.summary.max_concurrent_requests,
        },
        "output": {
            "format": cfg.output.format,
            "filename": cfg.output.filename,
            "run_folder_mode": cfg.output.run_folder_mode,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
            "llm_log_enabled": cfg.logging.llm_log_enabled,
            "llm_log_detail": cfg.logging.llm_log_detail,
            "llm_log_redaction": cfg.logging.llm_log_redaction,
            "llm_log_file": cfg.logging.llm_log_file,
        },
        "langfuse": {
            "enabled": cfg.langfuse.enabled,
            "public_key": cfg.langfuse.public_key,
            "secret_key": cfg.langfuse.secret_key,
            "base_url": cfg.langfuse.base_url,
            "environment": cfg.langfuse.environment,
            "release": cfg.langfuse.release,
            "timeout_seconds": cfg.langfuse.timeout_seconds,
            "redaction": cfg.langfuse.redaction,
            "max_text_chars": cfg.langfuse.max_text_chars,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    fetch_data = dict(data["fetch"])
    fetch_data["ids"] = [int(value) for value in fetch_data.get("ids") or []]
    return AppConfig(
        provider=ProviderConfig(**data["provider"]),
        fetch=FetchConfig(**fetch_data),
        dates=DatesConfig(**data["dates"]),
        summary=SummaryConfig(**data["summary"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env)
    return None
