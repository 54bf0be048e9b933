# File: app/services/text_utils.py

"""
Small, dependency-free helpers for the loosely-typed lists this app stores
(aliases, competitors) and for the free text that comes back from the LLM.
"""

import json
import re
from typing import Any, Iterable
from urllib.parse import urlparse

_BULLET_RE = re.compile(r"^[-*•\s]+")
_SPLIT_RE = re.compile(r"\r?\n|,|;")
_COMPETITOR_SPLIT_RE = re.compile(r"[\n,;]+")

MAX_COMPETITOR_SUGGESTIONS = 20


def strip_bullet(value: str) -> str:
    return _BULLET_RE.sub("", value).strip()


def load_json_list(raw: str | None) -> list[str]:
    """Decode a JSON array stored in a text column; anything else gives []."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [str(item) for item in parsed if item]


def dump_json_list(items: Iterable[Any]) -> str:
    return json.dumps([str(item) for item in items if item], ensure_ascii=False)


def as_list(value: Any) -> list[str]:
    """
    Accept a list, a JSON-encoded list or a single string and return a list
    of strings. Used for the aliases field of the brand form.
    """
    if isinstance(value, list):
        return [str(item) for item in value if item]
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item) for item in parsed if item]
        return [value]
    return []


def extract_competitor_names(raw: str | None) -> list[str]:
    """
    Read competitor names from a domain's stored value.

    Handles JSON arrays of strings or of ``{"name": ...}`` objects, and falls
    back to splitting free text on newlines, commas and semicolons.
    """
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        parsed = None

    if isinstance(parsed, list):
        names: list[str] = []
        for item in parsed:
            if isinstance(item, str):
                if item.strip():
                    names.append(item.strip())
            elif isinstance(item, dict):
                value = item.get("name")
                if isinstance(value, str) and value.strip():
                    names.append(value.strip())
        return names

    parts = (strip_bullet(part) for part in _COMPETITOR_SPLIT_RE.split(str(raw)))
    return [part for part in parts if part]


def normalize_website(url: str | None) -> str | None:
    if not url:
        return None
    trimmed = url.strip()
    if not trimmed:
        return None
    if re.match(r"^https?://", trimmed, flags=re.IGNORECASE):
        return trimmed
    return f"https://{trimmed}"


def strip_code_fences(text: str | None) -> str:
    """Remove markdown code fences (```json ... ```) around model output."""
    cleaned = str(text or "").strip()
    cleaned = re.sub(r"^```[a-zA-Z]*[ \t]*\n?", "", cleaned)
    cleaned = cleaned.replace("```", "")
    return cleaned.strip()


def _string_leaves(value: Any) -> list[str]:
    if isinstance(value, str):
        trimmed = value.strip()
        return [trimmed] if trimmed else []
    if isinstance(value, list):
        return [leaf for item in value for leaf in _string_leaves(item)]
    if isinstance(value, dict):
        return [leaf for item in value.values() for leaf in _string_leaves(item)]
    return []


def normalize_list(raw: Any) -> list[str]:
    """
    Turn an LLM answer into a flat list of strings.

    JSON answers are flattened to their string leaves (so ``{"domains": [...]}``
    and ``[...]`` both work); plain text is split into lines / comma-separated
    items with bullets stripped.
    """
    if isinstance(raw, list):
        return [str(item) for item in raw if item]
    if not isinstance(raw, str):
        return []

    text = strip_code_fences(raw)
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    if parsed is not None:
        leaves = _string_leaves(parsed)
        if leaves:
            return leaves

    parts = (strip_bullet(part) for part in _SPLIT_RE.split(text))
    return [part for part in parts if part]


def _valid_website(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and "." in (parsed.hostname or "")


def sanitize_competitors(items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Keep named entries, drop websites that are not http(s) URLs with a real
    host, de-duplicate by case-insensitive name and cap the list.
    """
    out: list[dict[str, Any]] = []
    seen: set[str] = set()
    for item in items:
        if not item or not item.get("name"):
            continue
        name = str(item["name"])
        website = item.get("website")
        if not (isinstance(website, str) and website and _valid_website(website)):
            website = None
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append({"name": name, "website": website})
    return out[:MAX_COMPETITOR_SUGGESTIONS]
