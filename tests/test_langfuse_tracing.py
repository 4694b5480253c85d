"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

from contextlib import contextmanager
import sys
import types

import pytest

from fcv_news.config import LangfuseConfig
from fcv_news.llm import tracing


class _DummySpan:
    def __init__(self):
        self.updates: list[dict] = []

    def update(self, **kwargs):
        self.updates.append(kwargs)


def _install_fake_langfuse(monkeypatch, captured: dict):
    class DummyLangfuse:
        def __init__(self, **kwargs):
            captured.update(kwargs)
            self.spans: list[_DummySpan] = []

        @contextmanager
        def start_as_current_span(self, **kwargs):
            captured.setdefault("span_calls", []).append(kwargs)
            span = _DummySpan()
            self.spans.append(span)
            yield span

        def flush(self):
            captured["flushed"] = True

    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")
    return DummyLangfuse


def test_setup_langfuse_uses_langfuse_env(monkeypatch):
    captured: dict = {}
    _install_fake_langfuse(monkeypatch, captured)
    monkeypatch.setenv("LANGFUSE_BASE_URL", "https://us.cloud.langfuse.com")

    tracing.setup_langfuse(LangfuseConfig(enabled=True, timeout_seconds=45))

    assert captured["public_key"] == "pk-test"
    assert captured["secret_key"] == "sk-test"
    assert captured["base_url"] == "https://us.cloud.langfuse.com"
    assert captured["timeout"] == 45
    assert tracing.tracing_enabled()

    tracing.setup_langfuse(LangfuseConfig(enabled=False))
    assert not tracing.tracing_enabled()


def test_start_span_yields_sdk_span_when_enabled(monkeypatch):
    captured: dict = {}
    _install_fake_langfuse(monkeypatch, captured)
    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    with tracing.start_span(
        "openrouter.llm_tags",
        kind="llm",
        input_value={"id": 1301},
        attributes={"article.id": 1301, "skip": None},
    ) as span:
        tracing.set_span_output(span, "ok")
        tracing.record_span_error(span, "boom")
    tracing.flush()

    assert isinstance(span, _DummySpan)
    call = captured["span_calls"][0]
    assert call["name"] == "openrouter.llm_tags"
    assert call["input"] == '{"id": 1301}'
    assert call["metadata"] == {"article.id": 1301, "span.kind": "llm"}
    assert span.updates == [{"output": "ok"}, {"level": "ERROR", "status_message": "boom"}]
    assert captured["flushed"] is True

    tracing.setup_langfuse(LangfuseConfig(enabled=False))


def test_setup_langfuse_rejects_sdk_without_span_method(monkeypatch):
    events: list[dict] = []
    monkeypatch.setattr(tracing, "log_event", lambda _logger, _msg, **fields: events.append(fields))

    class NewerLangfuse:
        def __init__(self, **kwargs):
            raise AssertionError("client must not be constructed")

        def start_as_current_observation(self, **kwargs):
            return None

    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=NewerLangfuse))
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    assert not tracing.tracing_enabled()
    assert events[-1]["reason"] == "sdk_unsupported"


def test_installed_langfuse_sdk_exposes_span_method():
    langfuse = pytest.importorskip("langfuse")

    assert hasattr(langfuse.Langfuse, tracing.SPAN_METHOD)


def test_setup_langfuse_disables_tracer_when_keys_missing(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)

    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    assert not tracing.tracing_enabled()


def test_start_span_is_noop_when_disabled():
    tracing.setup_langfuse(LangfuseConfig(enabled=False))

    with tracing.start_span("fcv_news.test", kind="chain", input_value={"a": 1}) as span:
        tracing.set_span_output(span, "done")
        tracing.record_span_error(span, RuntimeError("x"))

    assert span is None
    tracing.flush()
