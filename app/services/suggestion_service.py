# File: app/services/suggestion_service.py

"""
Suggestions for the brand form.

Domains come from a single JSON-mode chat call. Competitors go through a
chain of increasingly cheap attempts until one returns something usable:

  1. Responses API with web search on the analysis model
  2. Chat Completions on the same model (only when 1 raised)
  3. Responses API on the reasoning model (when the answer is still short)
  4. Chat Completions on the small model with a strict JSON system message
"""

import logging
import re
import time
from typing import Any

from app.core.config import settings
from app.models.project import Project
from app.services.llm_client import LlmClient, LlmError, extract_response_text, find_text_containing
from app.services.llm_json import LlmJsonError, parse_llm_json
from app.services.prompts import (
    STRICT_JSON_SYSTEM_MESSAGE,
    build_competitors_prompt,
    build_domains_prompt,
    build_fallback_competitors_prompt,
)
from app.services.text_utils import normalize_list, sanitize_competitors, strip_code_fences

logger = logging.getLogger(__name__)

MAX_DOMAIN_SUGGESTIONS = 15
MIN_NAME_LENGTH = 3

# Answer lengths (characters) that decide whether to try the next step
GOOD_ANSWER = 50
SHORT_ANSWER = 30
NO_ANSWER = 10

DOMAINS_TIMEOUT = 15.0
RESPONSES_TIMEOUT = 35.0
CHAT_TIMEOUT = 25.0
REASONING_TIMEOUT = 45.0
FALLBACK_TIMEOUT = 10.0

_NAME_WEBSITE_RE = re.compile(r'"name"\s*:\s*"([^"]+)"(?:[^}]*?"website"\s*:\s*"([^"]*)")?')


class NoSuggestionError(Exception):
    """Every competitor lookup failed or returned nothing usable."""


def suggest_domains(project: Project, client: LlmClient) -> list[str]:
    raw = client.chat(
        model=settings.suggest_model,
        messages=[{"role": "user", "content": build_domains_prompt(project)}],
        temperature=0.5,
        timeout=DOMAINS_TIMEOUT,
        json_mode=True,
    )
    return normalize_list(raw)[:MAX_DOMAIN_SUGGESTIONS]


def _web_search_request(model: str, prompt: str, reasoning: bool = False) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": model,
        "input": [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": prompt}],
            }
        ],
        "text": {"format": {"type": "text"}},
        "tools": [
            {
                "type": "web_search",
                "user_location": {"type": "approximate"},
                "search_context_size": "medium",
            }
        ],
        "store": False,
        "include": ["web_search_call.action.sources"],
    }
    if reasoning:
        body["reasoning"] = {"effort": "medium"}
    else:
        body.update({"temperature": 1, "top_p": 1, "max_output_tokens": 2048})
    return body


def _answer_text(payload: dict[str, Any]) -> str:
    return extract_response_text(payload) or find_text_containing(payload, "competitors")


def _fetch_competitors(
    client: LlmClient,
    brand: str,
    city: str,
    domain_name: str,
) -> tuple[str, str, bool]:
    """Walk the fallback chain; return (answer, source, web search used)."""
    prompt = build_competitors_prompt(brand, city, domain_name)
    result = ""
    source = "none"
    web_search_used = False

    try:
        payload = client.responses(
            _web_search_request(settings.analysis_model, prompt),
            timeout=RESPONSES_TIMEOUT,
        )
        result = _answer_text(payload)
        if len(result) > GOOD_ANSWER:
            source = "gpt4o-responses"
            web_search_used = True
    except LlmError as exc:
        logger.warning("Responses API competitor lookup failed: %s", exc)
        try:
            result = client.chat(
                model=settings.analysis_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.2,
                timeout=CHAT_TIMEOUT,
                json_mode=True,
            )
            if len(result) > GOOD_ANSWER:
                source = "gpt4o-chat"
        except LlmError as chat_exc:
            logger.warning("Chat competitor lookup failed: %s", chat_exc)

    if len(result) < SHORT_ANSWER:
        try:
            payload = client.responses(
                _web_search_request(settings.reasoning_model, prompt, reasoning=True),
                timeout=REASONING_TIMEOUT,
            )
            content = _answer_text(payload)
            if len(content) > GOOD_ANSWER:
                result = content
                source = "o3-fallback"
                web_search_used = True
        except LlmError as exc:
            logger.warning("Reasoning competitor lookup failed: %s", exc)

    if len(result) < SHORT_ANSWER:
        try:
            result = client.chat(
                model=settings.fallback_model,
                messages=[
                    {"role": "system", "content": STRICT_JSON_SYSTEM_MESSAGE},
                    {"role": "user", "content": build_fallback_competitors_prompt(brand, city, domain_name)},
                ],
                temperature=0.1,
                timeout=FALLBACK_TIMEOUT,
                json_mode=True,
            )
            source = "gpt4mini-fallback"
        except LlmError as exc:
            logger.warning("Every competitor lookup failed: %s", exc)

    return result, source, web_search_used


def _keep(name: str, brand: str) -> bool:
    return len(name) >= MIN_NAME_LENGTH and brand.lower() not in name.lower()


def parse_competitors(raw: str, brand: str) -> list[dict[str, Any]]:
    """
    Read ``{"competitors": [{"name", "website"}]}`` (or a bare array) from a
    model answer. Names that are too short or contain the brand itself are
    dropped. When no JSON can be decoded, name/website pairs are picked out
    with a regex.
    """
    if not raw or not raw.strip():
        return []
    text = strip_code_fences(raw)

    items: list[dict[str, Any]] = []
    try:
        parsed = parse_llm_json(text)
    except LlmJsonError:
        logger.debug("Competitor answer is not JSON, scanning for name/website pairs")
        for match in _NAME_WEBSITE_RE.finditer(text):
            name = match.group(1).strip()
            if _keep(name, brand):
                items.append({"name": name, "website": (match.group(2) or "").strip() or None})
        return sanitize_competitors(items)

    if isinstance(parsed, dict) and isinstance(parsed.get("competitors"), list):
        entries = parsed["competitors"]
    elif isinstance(parsed, list):
        entries = parsed
    else:
        entries = []

    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        website = str(entry.get("website") or "").strip() or None
        if _keep(name, brand):
            items.append({"name": name, "website": website})
    return sanitize_competitors(items)


def suggest_competitors(project: Project, domain_name: str, client: LlmClient) -> dict[str, Any]:
    brand = project.name
    city = (project.city or "").strip()
    started = time.monotonic()
    logger.info("Competitor lookup: project=%s domain=%r", project.id, domain_name)

    result, source, web_search_used = _fetch_competitors(client, brand, city, domain_name)
    if len(result) < NO_ANSWER:
        raise NoSuggestionError("No result from any model")

    items = parse_competitors(result, brand)
    elapsed = time.monotonic() - started
    logger.info("Competitor lookup: %d found via %s in %.1fs", len(items), source, elapsed)

    if not items:
        return {
            "items": [],
            "source": source,
            "webSearchUsed": web_search_used,
            "error": "No competitor could be parsed",
            "debug": {
                "resultLength": len(result),
                "resultPreview": result[:300],
            },
        }

    return {
        "items": items,
        "source": source,
        "webSearchUsed": web_search_used,
        "method": "gpt4o-fast-websearch",
        "totalFound": len(items),
        "executionTime": f"{elapsed:.1f}s",
        "performance": "fast" if "gpt4o" in source else "slow",
    }
