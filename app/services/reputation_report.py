# File: app/services/reputation_report.py

"""
Reputation report shape.

The report is produced by the model in three parts (plus a closing notice):

  part1 - identity synthesis, word cloud, overall sentiment, strengths,
          weaknesses, topics and recommendations
  part2 - optional competitor comparison
  part3 - generated user questions and the probable visibility of the brand
          in LLM answers to them

`REPUTATION_ANALYSIS_JSON_SCHEMA` is sent to the Responses API as a strict
output format. `sanitize_reputation_report` keeps only well-formed fields of
whatever came back; it returns None when a required section is unusable.
"""

import math
from typing import Any

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

REPUTATION_ANALYSIS_JSON_SCHEMA: dict[str, Any] = {
    "name": "reputation_analysis",
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "required": ["part1", "part3", "notice"],
        "properties": {
            "part1": {
                "type": "object",
                "additionalProperties": False,
                "required": [
                    "syntheseIdentite",
                    "nuageMots",
                    "sentimentGlobal",
                    "forces",
                    "faiblesses",
                    "sujets",
                    "recommandations",
                ],
                "properties": {
                    "syntheseIdentite": {**_STRING_ARRAY, "minItems": 3},
                    "nuageMots": {
                        "type": "array",
                        "minItems": 10,
                        "items": {
                            "type": "object",
                            "additionalProperties": False,
                            "required": ["mot", "poids"],
                            "properties": {
                                "mot": {"type": "string"},
                                "poids": {"type": "number"},
                            },
                        },
                    },
                    "sentimentGlobal": {
                        "type": "object",
                        "additionalProperties": False,
                        "required": ["evaluation", "justification"],
                        "properties": {
                            "evaluation": {"type": "string"},
                            "justification": {"type": "string"},
                            "exemples": _STRING_ARRAY,
                            "details": {"type": "string"},
                        },
                    },
                    "forces": {**_STRING_ARRAY, "minItems": 1},
                    "faiblesses": {**_STRING_ARRAY, "minItems": 1},
                    "sujets": {**_STRING_ARRAY, "minItems": 1},
                    "recommandations": {
                        "type": "array",
                        "minItems": 1,
                        "items": {
                            "type": "object",
                            "additionalProperties": False,
                            "required": ["faiblesse", "action"],
                            "properties": {
                                "faiblesse": {"type": "string"},
                                "action": {"type": "string"},
                            },
                        },
                    },
                },
            },
            "part2": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "resume": {"type": "string"},
                    "details": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "additionalProperties": False,
                            "properties": {
                                "acteur": {"type": "string"},
                                "sentiment": {"type": "string"},
                                "specialites": {"type": "string"},
                                "pointsForts": _STRING_ARRAY,
                                "faiblesses": _STRING_ARRAY,
                                "commentaires": {"type": "string"},
                            },
                        },
                    },
                },
            },
            "part3": {
                "type": "object",
                "additionalProperties": False,
                "required": ["generation", "visibilite"],
                "properties": {
                    "introduction": {"type": "string"},
                    "generation": {
                        "type": "object",
                        "additionalProperties": False,
                        "required": ["questions"],
                        "properties": {
                            "introduction": {"type": "string"},
                            "questions": {
                                "type": "array",
                                "minItems": 1,
                                "items": {
                                    "type": "object",
                                    "additionalProperties": False,
                                    "required": ["question"],
                                    "properties": {
                                        "question": {"type": "string"},
                                        "contexte": {"type": "string"},
                                    },
                                },
                            },
                        },
                    },
                    "visibilite": {
                        "type": "object",
                        "additionalProperties": False,
                        "required": ["analyses"],
                        "properties": {
                            "introduction": {"type": "string"},
                            "analyses": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "additionalProperties": False,
                                    "required": [
                                        "question",
                                        "mentionProbable",
                                        "justification",
                                        "concurrents",
                                    ],
                                    "properties": {
                                        "question": {"type": "string"},
                                        "mentionProbable": {"type": "string"},
                                        "justification": {"type": "string"},
                                        "concurrents": _STRING_ARRAY,
                                        "commentaires": {"type": "string"},
                                    },
                                },
                            },
                        },
                    },
                },
            },
            "notice": {"type": "string"},
        },
    },
}


def _text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def _texts(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    items = [text for text in (_text(entry) for entry in value) if text]
    return items or None


def _objects(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _set_optional(target: dict[str, Any], key: str, value: Any) -> None:
    if value:
        target[key] = value


def _weight(value: Any) -> float | None:
    # bool is an int subclass; True is not a weight
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    number = max(0.0, min(100.0, number))
    return int(number) if number.is_integer() else number


def _word_cloud(value: Any) -> list[dict[str, Any]] | None:
    items = []
    for entry in _objects(value):
        word = _text(entry.get("mot"))
        weight = _weight(entry.get("poids"))
        if word and weight is not None:
            items.append({"mot": word, "poids": weight})
    return items or None


def _recommendations(value: Any) -> list[dict[str, str]] | None:
    items = []
    for entry in _objects(value):
        weakness = _text(entry.get("faiblesse"))
        action = _text(entry.get("action"))
        if weakness and action:
            items.append({"faiblesse": weakness, "action": action})
    return items or None


def _sentiment(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    evaluation = _text(value.get("evaluation"))
    justification = _text(value.get("justification"))
    if not evaluation or not justification:
        return None
    sentiment: dict[str, Any] = {"evaluation": evaluation, "justification": justification}
    _set_optional(sentiment, "exemples", _texts(value.get("exemples")))
    _set_optional(sentiment, "details", _text(value.get("details")))
    return sentiment


def _part1(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    part = {
        "syntheseIdentite": _texts(value.get("syntheseIdentite")),
        "nuageMots": _word_cloud(value.get("nuageMots")),
        "sentimentGlobal": _sentiment(value.get("sentimentGlobal")),
        "forces": _texts(value.get("forces")),
        "faiblesses": _texts(value.get("faiblesses")),
        "sujets": _texts(value.get("sujets")),
        "recommandations": _recommendations(value.get("recommandations")),
    }
    if not all(part.values()):
        return None
    return part


def _part2(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None

    details = []
    for entry in _objects(value.get("details")):
        detail: dict[str, Any] = {}
        for key in ("acteur", "sentiment", "specialites"):
            _set_optional(detail, key, _text(entry.get(key)))
        for key in ("pointsForts", "faiblesses"):
            _set_optional(detail, key, _texts(entry.get(key)))
        _set_optional(detail, "commentaires", _text(entry.get("commentaires")))
        if detail:
            details.append(detail)

    part: dict[str, Any] = {}
    _set_optional(part, "resume", _text(value.get("resume")))
    _set_optional(part, "details", details)
    return part or None


def _questions(value: Any) -> list[dict[str, str]] | None:
    items = []
    for entry in _objects(value):
        question = _text(entry.get("question"))
        if not question:
            continue
        item = {"question": question}
        _set_optional(item, "contexte", _text(entry.get("contexte")))
        items.append(item)
    return items or None


def _analyses(value: Any) -> list[dict[str, Any]] | None:
    """Visibility analyses; an empty list is acceptable, a missing one is not."""
    if not isinstance(value, list):
        return None
    items = []
    for entry in _objects(value):
        item = {
            "question": _text(entry.get("question")),
            "mentionProbable": _text(entry.get("mentionProbable")),
            "justification": _text(entry.get("justification")),
            "concurrents": _texts(entry.get("concurrents")),
        }
        if not all(item.values()):
            continue
        _set_optional(item, "commentaires", _text(entry.get("commentaires")))
        items.append(item)
    return items


def _part3(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    generation = value.get("generation")
    visibility = value.get("visibilite")
    if not isinstance(generation, dict) or not isinstance(visibility, dict):
        return None

    questions = _questions(generation.get("questions"))
    analyses = _analyses(visibility.get("analyses"))
    if not questions or analyses is None:
        return None

    part: dict[str, Any] = {
        "generation": {"questions": questions},
        "visibilite": {"analyses": analyses},
    }
    _set_optional(part, "introduction", _text(value.get("introduction")))
    _set_optional(part["generation"], "introduction", _text(generation.get("introduction")))
    _set_optional(part["visibilite"], "introduction", _text(visibility.get("introduction")))
    return part


def sanitize_reputation_report(raw: Any) -> dict[str, Any] | None:
    if not isinstance(raw, dict):
        return None
    part1 = _part1(raw.get("part1"))
    part3 = _part3(raw.get("part3"))
    notice = _text(raw.get("notice"))
    if not part1 or not part3 or not notice:
        return None

    report: dict[str, Any] = {"part1": part1, "part3": part3, "notice": notice}
    _set_optional(report, "part2", _part2(raw.get("part2")))
    return report
