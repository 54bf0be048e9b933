# File: app/services/analysis_summary.py

import math
from datetime import datetime
from typing import Any


def summarize_analysis(report: dict[str, Any], generated_at: datetime | str) -> dict[str, Any]:
    """
    Headline figures of a sanitized report, as shown in the run history and
    on the admin dashboard.

    mentionRate is the share of visibility analyses where the brand would
    probably be mentioned ("Oui"), as a percentage rounded half up.
    """
    analyses = report.get("part3", {}).get("visibilite", {}).get("analyses", [])
    question_count = len(analyses)
    mention_yes = sum(
        1 for item in analyses
        if str(item.get("mentionProbable", "")).strip().lower() == "oui"
    )

    names: list[str] = []
    seen: set[str] = set()
    for item in analyses:
        for name in item.get("concurrents", []):
            trimmed = str(name).strip()
            if trimmed and trimmed not in seen:
                seen.add(trimmed)
                names.append(trimmed)

    mention_rate = 0 if question_count == 0 else math.floor(mention_yes * 100 / question_count + 0.5)

    if isinstance(generated_at, datetime):
        generated_at = generated_at.isoformat()

    return {
        "generatedAt": generated_at,
        "sentiment": report.get("part1", {}).get("sentimentGlobal", {}).get("evaluation"),
        "questionCount": question_count,
        "mentionYes": mention_yes,
        "mentionRate": mention_rate,
        "competitorCount": len(names),
        "competitorNames": names,
    }
