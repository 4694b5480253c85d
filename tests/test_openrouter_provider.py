"""Tests for the OpenRouter enrichment provider."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from fcv_news.config import LoggingConfig, ProviderConfig, SummaryConfig
from fcv_news.llm.providers.openrouter import OpenRouterProvider, _parse_json_response


def _completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _provider(handler, llm_logger=None, **summary_overrides) -> OpenRouterProvider:
    return OpenRouterProvider(
        ProviderConfig(),
        SummaryConfig(**summary_overrides),
        "test-key",
        LoggingConfig(),
        llm_logger,
        transport=httpx.MockTransport(handler),
    )


def test_summarize_posts_chat_completion_and_parses_nested_json():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion(json.dumps({"resumo": "Resumo curto"})))

    result = asyncio.run(_provider(handler).summarize(1301, "Corpo de teste"))

    assert result.ok
    assert result.payload == {"resumo": "Resumo curto"}
    assert captured["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert captured["auth"] == "Bearer test-key"
    assert captured["content_type"] == "application/json"
    assert captured["body"]["model"] == "meta-llama/llama-3.3-8b-instruct:free"
    messages = captured["body"]["messages"]
    assert len(messages) == 1
    assert messages[0]["role"] == "user"
    assert "Corpo de teste" in messages[0]["content"]
    assert '{"resumo": "..."}' in messages[0]["content"]


def test_generate_tags_prompt_includes_id_and_context():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["prompt"] = json.loads(request.content)["messages"][0]["content"]
        content = json.dumps({"noticiaID": 1301, "tags": [" saude ", "", "oncologia"]})
        return httpx.Response(200, json=_completion(content))

    result = asyncio.run(_provider(handler).generate_tags(1301, "Corpo de teste"))

    assert result.ok
    assert result.payload == {"noticiaID": 1301, "tags": ["saude", "oncologia"]}
    assert "NoticiaID: 1301" in captured["prompt"]
    assert "Fundação Cristiano Varella" in captured["prompt"]
    assert "Corpo de teste" in captured["prompt"]


def test_prompt_body_is_truncated_to_max_chars():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["prompt"] = json.loads(request.content)["messages"][0]["content"]
        return httpx.Response(200, json=_completion('{"resumo": "ok"}'))

    asyncio.run(_provider(handler, max_chars=10).summarize(1, "A" * 10 + "B" * 50))

    assert "A" * 10 in captured["prompt"]
    assert "B" not in captured["prompt"]


def test_http_error_becomes_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    result = asyncio.run(_provider(handler).generate_tags(1301, "Corpo"))

    assert not result.ok
    assert result.status == "provider_error"
    assert "HTTPStatusError" in result.error


def test_network_error_becomes_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = asyncio.run(_provider(handler).summarize(1301, "Corpo"))

    assert result.status == "provider_error"
    assert "ConnectError" in result.error


def test_api_error_object_becomes_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": {"code": 401, "message": "No auth credentials found"}})

    result = asyncio.run(_provider(handler).summarize(1301, "Corpo"))

    assert result.status == "provider_error"
    assert result.error == "API error 401: No auth credentials found"


def test_malformed_model_output_becomes_parse_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion("Aqui está o resumo: sem json"))

    result = asyncio.run(_provider(handler).summarize(1301, "Corpo"))

    assert result.status == "parse_error"
    assert result.raw == "Aqui está o resumo: sem json"


def test_missing_tags_list_becomes_parse_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion('{"noticiaID": 1, "tags": "saude"}'))

    result = asyncio.run(_provider(handler).generate_tags(1, "Corpo"))

    assert result.status == "parse_error"
    assert "tags" in result.error


def test_error_field_in_payload_becomes_payload_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion('{"erro": "texto insuficiente"}'))

    result = asyncio.run(_provider(handler).summarize(1, "Corpo"))

    assert result.status == "payload_error"
    assert result.error == "texto insuficiente"


def test_llm_logger_receives_status(caplog):
    logger = logging.getLogger("test_llm_logger_receives_status")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion('{"resumo": "ok"}'))

    with caplog.at_level(logging.INFO, logger=logger.name):
        asyncio.run(_provider(handler, llm_logger=logger).summarize(7, "Corpo"))

    records = [r for r in caplog.records if r.name == logger.name]
    assert len(records) == 1
    assert records[0].status == "ok"
    assert records[0].article_id == 7
    assert records[0].event == "llm_summary"


def test_parse_json_response_handles_fences_prose_and_double_encoding():
    assert _parse_json_response('```json\n{"resumo": "a"}\n```') == {"resumo": "a"}
    assert _parse_json_response('Claro! {"resumo": "b"} Espero ter ajudado.') == {"resumo": "b"}
    assert _parse_json_response(json.dumps(json.dumps({"resumo": "c"}))) == {"resumo": "c"}
