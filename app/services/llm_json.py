# File: app/services/llm_json.py

"""
Best-effort JSON decoding of model output.

Models asked for JSON still wrap it in prose or code fences, use smart
quotes, leave trailing commas or get cut off at the token limit. Decoding
goes through increasingly lenient attempts:

  1. the text as-is
  2. without markdown code fences
  3. each balanced ``{...}`` / ``[...]`` block found in the text
  4. regex repairs applied to the first block (or the whole text when no
     block closes), including closing brackets left open by truncation
"""

import json
import logging
import re
from typing import Any, Iterator

from app.services.text_utils import strip_code_fences

logger = logging.getLogger(__name__)

MAX_BLOCK_CANDIDATES = 10

_SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "„": '"',
    "«": '"',
    "»": '"',
    "‘": "'",
    "’": "'",
}

_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT_RE = re.compile(r"//[^\n]*")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_UNQUOTED_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_SINGLE_QUOTED_RE = re.compile(r"([\[{,:]\s*)'((?:[^'\\\n]|\\.)*)'")
_PY_LITERAL_RE = re.compile(r"([:\[,]\s*)(True|False|None)\b")
_NON_FINITE_RE = re.compile(r"([:\[,]\s*)-?(NaN|Infinity)\b")
_STRING_RE = re.compile(r'"(?:[^"\\]|\\.)*"')

_PY_LITERALS = {"True": "true", "False": "false", "None": "null"}


class LlmJsonError(ValueError):
    """Raised when no decoding attempt produced JSON."""


def _try_loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except ValueError:
        return False, None


def _scan_block(text: str, start: int) -> int | None:
    """Return the index closing the bracket opened at ``start``, if any."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return index
    return None


def iter_json_blocks(text: str) -> Iterator[str]:
    """Yield balanced ``{...}`` / ``[...]`` blocks in order of appearance."""
    position = 0
    while position < len(text):
        match = re.search(r"[{\[]", text[position:])
        if match is None:
            return
        start = position + match.start()
        end = _scan_block(text, start)
        if end is None:
            return
        yield text[start:end + 1]
        position = end + 1


def extract_json_block(text: str) -> str | None:
    """First balanced JSON-looking block, or None when nothing closes."""
    return next(iter_json_blocks(text or ""), None)


def _close_open_brackets(text: str) -> str:
    stack: list[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            stack.append("}")
        elif char == "[":
            stack.append("]")
        elif char in "}]" and stack:
            stack.pop()

    repaired = text
    if in_string:
        repaired += '"'
    repaired = repaired.rstrip()
    # A dangling separator, or a key inside an object, cannot be completed; drop it
    if stack and stack[-1] == "}":
        repaired = re.sub(r'(,|:|,\s*"[^"]*"\s*:?)\s*$', "", repaired)
    else:
        repaired = re.sub(r"[,:]\s*$", "", repaired)
    return repaired + "".join(reversed(stack))


def _single_to_double(match: re.Match) -> str:
    inner = match.group(2).replace('\\"', '"').replace("\\'", "'").replace('"', '\\"')
    return f'{match.group(1)}"{inner}"'


def _outside_strings(text: str, fix) -> str:
    """Apply ``fix`` to the parts of ``text`` that are not JSON strings."""
    pieces = []
    last = 0
    for match in _STRING_RE.finditer(text):
        pieces.append(fix(text[last:match.start()]))
        pieces.append(match.group(0))
        last = match.end()
    pieces.append(fix(text[last:]))
    return "".join(pieces)


def _fix_structure(segment: str) -> str:
    segment = _BLOCK_COMMENT_RE.sub("", segment)
    segment = _LINE_COMMENT_RE.sub("", segment)
    segment = _UNQUOTED_KEY_RE.sub(r'\1"\2":', segment)
    segment = _PY_LITERAL_RE.sub(lambda m: m.group(1) + _PY_LITERALS[m.group(2)], segment)
    segment = _NON_FINITE_RE.sub(r"\1null", segment)
    return segment


def repair_json(text: str) -> str:
    """Apply the regex repairs; the result may still be invalid JSON."""
    repaired = text
    # Curly quotes are legal inside strings; only treat them as delimiters
    # when the model used no ASCII quotes at all.
    if '"' not in repaired:
        for smart, plain in _SMART_QUOTES.items():
            repaired = repaired.replace(smart, plain)
    repaired = _outside_strings(repaired, lambda s: _SINGLE_QUOTED_RE.sub(_single_to_double, s))
    repaired = _outside_strings(repaired, _fix_structure)
    repaired = _close_open_brackets(repaired)
    repaired = _outside_strings(repaired, lambda s: _TRAILING_COMMA_RE.sub(r"\1", s))
    return repaired


def parse_llm_json(text: str | None) -> Any:
    if text is None or not str(text).strip():
        raise LlmJsonError("Empty model output")

    ok, value = _try_loads(text)
    if ok:
        return value

    stripped = strip_code_fences(text)
    ok, value = _try_loads(stripped)
    if ok:
        return value

    blocks = []
    for block in iter_json_blocks(stripped):
        ok, value = _try_loads(block)
        if ok:
            logger.debug("Decoded model output from an embedded JSON block")
            return value
        blocks.append(block)
        if len(blocks) >= MAX_BLOCK_CANDIDATES:
            break

    candidates = blocks[:1]
    opener = re.search(r"[{\[]", stripped)
    if opener is not None:
        candidates.append(stripped[opener.start():])
    for candidate in candidates:
        ok, value = _try_loads(repair_json(candidate))
        if ok:
            logger.info("Decoded model output after JSON repair")
            return value

    raise LlmJsonError("Model output is not valid JSON")
