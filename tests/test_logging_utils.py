"""Tests for logging helpers."""

from __future__ import annotations

import json
import logging

from fcv_news.config import LoggingConfig
from fcv_news.utils.logging import (
    log_event,
    redact_text,
    setup_llm_logger,
    setup_logging,
    truncate_text,
)


def test_setup_logging_writes_jsonl_events(tmp_path):
    cfg = LoggingConfig(console=False, file=True, format="jsonl")
    logger = setup_logging(cfg, tmp_path)

    log_event(logger, "Fetch failed", level=logging.WARNING, event="fetch_error", article_id=1301)
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run.jsonl").read_text(encoding="utf-8").splitlines()
    payload = json.loads(lines[-1])
    assert payload["message"] == "Fetch failed"
    assert payload["level"] == "WARNING"
    assert payload["event"] == "fetch_error"
    assert payload["article_id"] == 1301


def test_setup_llm_logger_disabled_without_dir():
    assert setup_llm_logger(LoggingConfig(), None) is None
    assert setup_llm_logger(LoggingConfig(llm_log_enabled=False), None) is None


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing", event="noop")


def test_redact_and_truncate():
    assert redact_text("see https://fcv.org.br/x now", "redact_urls") == "see [REDACTED_URL] now"
    assert redact_text("secret", "redact_content") == ""
    assert redact_text("plain", "none") == "plain"
    assert truncate_text("abcdef", 3) == "abc...(truncated)"
