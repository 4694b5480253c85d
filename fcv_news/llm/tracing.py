"""
Optional Langfuse tracing for runs and enrichment calls.

Spans are created only when ``langfuse.enabled`` is set and both keys are
available. The SDK is imported lazily so the ``tracing`` extra stays optional.
Supported SDK line: langfuse 3.x (``Langfuse.start_as_current_span``).
"""

from __future__ import annotations

from contextlib import contextmanager
import json
import logging
import os
from typing import Any, Iterator

from ..config import LangfuseConfig
from ..utils.logging import log_event, redact_text, truncate_text

# Client method used to open a span; must exist on the pinned SDK line.
SPAN_METHOD = "start_as_current_span"

_logger = logging.getLogger("fcv_news.tracing")
_client = None
_settings: LangfuseConfig | None = None


def setup_langfuse(cfg: LangfuseConfig) -> None:
    """Create the Langfuse client for this run, or leave tracing off."""
    global _client, _settings  # noqa: PLW0603
    _settings = cfg
    _client = None
    if not cfg.enabled:
        return

    public_key = _coalesce(cfg.public_key, "LANGFUSE_PUBLIC_KEY")
    secret_key = _coalesce(cfg.secret_key, "LANGFUSE_SECRET_KEY")
    if not public_key or not secret_key:
        log_event(
            _logger,
            "Langfuse enabled but keys are missing; tracing disabled",
            level=logging.WARNING,
            event="tracing_disabled",
            reason="missing_keys",
        )
        return

    try:
        from langfuse import Langfuse  # type: ignore
    except ImportError:
        log_event(
            _logger,
            "Langfuse enabled but the SDK is not installed; tracing disabled",
            level=logging.WARNING,
            event="tracing_disabled",
            reason="sdk_missing",
        )
        return

    if not hasattr(Langfuse, SPAN_METHOD):
        log_event(
            _logger,
            f"Installed Langfuse SDK has no {SPAN_METHOD}(); tracing disabled",
            level=logging.WARNING,
            event="tracing_disabled",
            reason="sdk_unsupported",
        )
        return

    _client = Langfuse(
        public_key=public_key,
        secret_key=secret_key,
        base_url=_coalesce(cfg.base_url, "LANGFUSE_BASE_URL"),
        environment=_coalesce(cfg.environment, "LANGFUSE_ENVIRONMENT"),
        release=_coalesce(cfg.release, "LANGFUSE_RELEASE"),
        timeout=cfg.timeout_seconds,
    )


def tracing_enabled() -> bool:
    return _client is not None


@contextmanager
def start_span(
    name: str,
    kind: str,
    input_value: Any | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any | None]:
    """Open a Langfuse span around a run or an enrichment call.

    Yields None when tracing is off or the span could not be opened, so
    callers never need to branch on tracing state.
    """
    client = _client
    if client is None:
        yield None
        return

    metadata = _clean_attributes(attributes or {})
    if kind:
        metadata.setdefault("span.kind", kind)

    try:
        cm = getattr(client, SPAN_METHOD)(
            name=name,
            input=_normalize_text(input_value),
            metadata=metadata,
        )
        span = cm.__enter__()
    except Exception as exc:  # noqa: BLE001
        log_event(
            _logger,
            f"Could not open span {name}: {exc}",
            level=logging.WARNING,
            event="span_error",
            span=name,
            error=f"{type(exc).__name__}: {exc}",
        )
        yield None
        return

    try:
        yield span
    finally:
        try:
            cm.__exit__(None, None, None)
        except Exception as exc:  # noqa: BLE001
            _logger.debug("Closing span %s failed: %s", name, exc)


def set_span_output(span: Any | None, output_value: Any) -> None:
    if span is None:
        return
    payload = _normalize_text(output_value)
    if payload is not None:
        _update(span, output=payload)


def record_span_error(span: Any | None, exc: Exception | str) -> None:
    if span is not None:
        _update(span, level="ERROR", status_message=str(exc))


def flush() -> None:
    """Send buffered spans before the process exits."""
    client = _client
    if client is None:
        return
    try:
        client.flush()
    except Exception as exc:  # noqa: BLE001
        _logger.debug("Langfuse flush failed: %s", exc)


def _coalesce(value: str | None, env_key: str) -> str | None:
    return value or os.getenv(env_key)


def _normalize_text(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    if _settings is None:
        return text
    return truncate_text(redact_text(text, _settings.redaction), _settings.max_text_chars)


def _clean_attributes(attrs: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value if isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in attrs.items()
        if value is not None
    }


def _update(span: Any, **kwargs: Any) -> None:
    try:
        span.update(**kwargs)
    except Exception as exc:  # noqa: BLE001
        _logger.debug("Span update failed: %s", exc)
