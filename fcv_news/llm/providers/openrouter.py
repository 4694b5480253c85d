"""OpenRouter chat-completions provider for article enrichment."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx

from ...config import LoggingConfig, ProviderConfig, SummaryConfig
from ...core.types import EnrichmentResult
from ...utils.logging import log_event, redact_text, truncate_text
from ..prompts import build_summary_prompt, build_tags_prompt
from ..tracing import record_span_error, set_span_output, start_span
from .base import EnrichmentProvider


PayloadValidator = Callable[[dict[str, Any]], dict[str, Any]]


class OpenRouterProvider(EnrichmentProvider):
    """Chat-completions backed provider for summaries and tags.

    Works with OpenRouter and any other endpoint that speaks the OpenAI
    chat-completions format.
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        summary_cfg: SummaryConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError(
                f"Missing API key for provider '{cfg.name}'. "
                f"Set {cfg.api_key_env} or provider.api_key."
            )
        self.cfg = cfg
        self.summary_cfg = summary_cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self._transport = transport

    async def summarize(self, article_id: int, body: str) -> EnrichmentResult:
        prompt = build_summary_prompt(body, self.summary_cfg)
        return await self._complete(prompt, article_id, "llm_summary", _validate_summary)

    async def generate_tags(self, article_id: int, body: str) -> EnrichmentResult:
        prompt = build_tags_prompt(article_id, body, self.summary_cfg)
        return await self._complete(prompt, article_id, "llm_tags", _validate_tags)

    async def _complete(
        self,
        prompt: str,
        article_id: int,
        event: str,
        validate: PayloadValidator,
    ) -> EnrichmentResult:
        payload = {
            "model": self.cfg.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        with start_span(
            f"{self.cfg.name}.{event}",
            kind="llm",
            input_value=prompt,
            attributes={
                "llm.model": self.cfg.model,
                "llm.provider": self.cfg.name,
                "article.id": article_id,
            },
        ) as span:
            try:
                data = await self._post(payload)
            except (httpx.HTTPError, ValueError) as exc:
                record_span_error(span, exc)
                return self._finish(
                    article_id,
                    event,
                    prompt,
                    EnrichmentResult(status="provider_error", error=f"{type(exc).__name__}: {exc}"),
                )

            api_error = _extract_api_error(data)
            if api_error:
                record_span_error(span, api_error)
                return self._finish(
                    article_id,
                    event,
                    prompt,
                    EnrichmentResult(status="provider_error", error=api_error),
                )

            content = _extract_text(data)
            set_span_output(span, content)

            try:
                obj = _parse_json_response(content)
            except json.JSONDecodeError as exc:
                record_span_error(span, exc)
                return self._finish(
                    article_id,
                    event,
                    prompt,
                    EnrichmentResult(status="parse_error", error=str(exc), raw=content),
                )

            if not isinstance(obj, dict):
                return self._finish(
                    article_id,
                    event,
                    prompt,
                    EnrichmentResult(
                        status="parse_error",
                        error=f"Expected a JSON object, got {type(obj).__name__}",
                        raw=content,
                    ),
                )

            model_error = obj.get("erro") or obj.get("error")
            if model_error:
                return self._finish(
                    article_id,
                    event,
                    prompt,
                    EnrichmentResult(status="payload_error", error=str(model_error), raw=content),
                )

            try:
                cleaned = validate(obj)
            except ValueError as exc:
                return self._finish(
                    article_id,
                    event,
                    prompt,
                    EnrichmentResult(status="parse_error", error=str(exc), raw=content),
                )

            return self._finish(
                article_id,
                event,
                prompt,
                EnrichmentResult(status="ok", payload=cleaned, raw=content),
            )

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            timeout=self.cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            resp = await client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            return resp.json()

    def _finish(
        self,
        article_id: int,
        event: str,
        prompt: str,
        result: EnrichmentResult,
    ) -> EnrichmentResult:
        self._log_llm_response(article_id, event, result, prompt)
        return result

    def _log_llm_response(
        self,
        article_id: int,
        event: str,
        result: EnrichmentResult,
        prompt: str,
    ) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        content = result.raw if result.raw is not None else (result.error or "")
        payload: dict[str, Any] = {
            "event": event,
            "status": result.status,
            "model": self.cfg.model,
            "article_id": article_id,
            "error": result.error,
            "raw_response": truncate_text(redact_text(content, redaction)),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        log_event(self.llm_logger, "LLM response", **payload)


def _validate_summary(obj: dict[str, Any]) -> dict[str, Any]:
    summary = obj.get("resumo")
    if not isinstance(summary, str) or not summary.strip():
        raise ValueError("Summary payload has no 'resumo' text")
    return {"resumo": summary.strip()}


def _validate_tags(obj: dict[str, Any]) -> dict[str, Any]:
    tags = obj.get("tags")
    if not isinstance(tags, list):
        raise ValueError("Tags payload has no 'tags' list")
    cleaned = [str(tag).strip() for tag in tags if tag is not None and str(tag).strip()]
    return {"noticiaID": obj.get("noticiaID"), "tags": cleaned}


def _extract_api_error(data: Any) -> str | None:
    if not isinstance(data, dict):
        return f"Unexpected response type: {type(data).__name__}"
    error = data.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        message = error.get("message") or json.dumps(error, ensure_ascii=False)
        code = error.get("code")
        return f"API error {code}: {message}" if code else f"API error: {message}"
    return f"API error: {error}"


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    if isinstance(content, list):
        parts = [part.get("text", "") for part in content if isinstance(part, dict)]
        return "".join(parts)
    return content or ""


def _parse_json_response(content: str) -> Any:
    """Parse the model's JSON answer.

    Accepts bare JSON, a fenced ```json block, or the outermost ``{...}``
    snippet inside surrounding prose. A JSON string whose value is itself
    JSON is decoded again.
    """
    if not content or not content.strip():
        raise json.JSONDecodeError("Empty content", content or "", 0)
    try:
        obj = json.loads(content)
    except json.JSONDecodeError:
        obj = json.loads(_extract_json_snippet(content))
    if isinstance(obj, str):
        return _parse_json_response(obj)
    return obj


def _extract_json_snippet(content: str) -> str:
    fence = _extract_fenced_json(content)
    if fence:
        return fence
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise json.JSONDecodeError("No JSON object found", content, 0)
    return content[start : end + 1]


def _extract_fenced_json(content: str) -> str | None:
    lines = content.splitlines()
    start_idx = None
    for idx, line in enumerate(lines):
        if line.strip().startswith("```"):
            start_idx = idx + 1
            break
    if start_idx is None:
        return None
    for idx in range(start_idx, len(lines)):
        if lines[idx].strip().startswith("```"):
            snippet = "\n".join(lines[start_idx:idx]).strip()
            return snippet or None
    return None
