# File: app/services/llm_client.py

"""
Thin wrapper around the OpenAI SDK.

Two entry points are used by the app:
  - chat(): Chat Completions, returns the message text
  - responses(): Responses API, returns the raw payload as a dict

The Responses payload has changed shape several times, so the helpers below
read text and structured output from wherever they may be found instead of
relying on one attribute.
"""

import logging
from typing import Any, Callable

from openai import APIStatusError, OpenAI, OpenAIError

from app.core.config import settings

logger = logging.getLogger(__name__)

LlmClientFactory = Callable[[str], "LlmClient"]


class LlmError(Exception):
    """The upstream call failed (network, HTTP status, SDK error)."""


class LlmResponseError(LlmError):
    """The call succeeded but the output cannot be used."""


class LlmClient:
    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url or settings.openai_base_url,
            timeout=timeout or settings.analysis_timeout_seconds,
            max_retries=0,
        )

    def chat(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float = 0.2,
        timeout: float | None = None,
        json_mode: bool = False,
        max_tokens: int | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if timeout:
            kwargs["timeout"] = timeout

        logger.info("Chat completion: model=%s messages=%d json=%s", model, len(messages), json_mode)
        try:
            response = self._client.chat.completions.create(**kwargs)
        except APIStatusError as exc:
            raise LlmError(f"OpenAI error {exc.status_code}: {exc.response.text}") from exc
        except OpenAIError as exc:
            raise LlmError(f"OpenAI error: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def responses(self, body: dict[str, Any], timeout: float | None = None) -> dict[str, Any]:
        logger.info("Responses API call: model=%s", body.get("model"))
        try:
            if timeout:
                response = self._client.responses.create(**body, timeout=timeout)
            else:
                response = self._client.responses.create(**body)
        except APIStatusError as exc:
            raise LlmError(f"OpenAI error {exc.status_code}: {exc.response.text}") from exc
        except OpenAIError as exc:
            raise LlmError(f"OpenAI error: {exc}") from exc

        payload = response.model_dump()
        # output_text is a computed property on the SDK object, not a field
        text = getattr(response, "output_text", None)
        if isinstance(text, str) and text:
            payload["output_text"] = text
        return payload


def get_llm_client() -> LlmClientFactory:
    """
    Dependency returning a factory so routes can build a client once the
    provider key has been read from the database. Tests override it.
    """
    return LlmClient


def _parts_text(parts: list[Any], require_type: bool) -> str:
    texts = []
    for part in parts:
        if isinstance(part, str):
            texts.append(part)
        elif isinstance(part, dict):
            value = part.get("text")
            if not isinstance(value, str):
                continue
            if require_type and part.get("type") not in ("output_text", "text"):
                continue
            texts.append(value)
    return "\n".join(text for text in texts if text.strip())


def _as_parts(content: Any) -> list[Any]:
    if isinstance(content, list):
        return content
    if content is None:
        return []
    return [content]


def extract_response_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    candidates: list[str] = []

    if isinstance(payload.get("output_text"), str):
        candidates.append(payload["output_text"])

    text_field = payload.get("text")
    if isinstance(text_field, dict) and isinstance(text_field.get("content"), str):
        candidates.append(text_field["content"])

    output = payload.get("output")
    if isinstance(output, list):
        for item in output:
            if not isinstance(item, dict):
                continue
            text = _parts_text(_as_parts(item.get("content")), require_type=True)
            if text:
                candidates.append(text)

    content = payload.get("content")
    if isinstance(content, list):
        text = _parts_text(content, require_type=False)
        if text:
            candidates.append(text)

    for key in ("result", "response"):
        if isinstance(payload.get(key), str):
            candidates.append(payload[key])

    for candidate in candidates:
        trimmed = candidate.strip()
        if trimmed:
            return trimmed
    return ""


def extract_response_json(payload: Any) -> Any | None:
    if not isinstance(payload, dict):
        return None
    if payload.get("output_json") is not None:
        return payload["output_json"]

    output = payload.get("output")
    if isinstance(output, list):
        for item in output:
            if not isinstance(item, dict):
                continue
            for part in _as_parts(item.get("content")):
                if isinstance(part, dict) and part.get("json") is not None:
                    return part["json"]
    return None


def find_text_containing(payload: Any, needle: str) -> str:
    """First string leaf of ``payload`` (depth-first) that contains ``needle``."""
    if isinstance(payload, str):
        return payload if needle in payload else ""
    if isinstance(payload, dict):
        values = payload.values()
    elif isinstance(payload, list):
        values = payload
    else:
        return ""
    for value in values:
        found = find_text_containing(value, needle)
        if found:
            return found
    return ""
