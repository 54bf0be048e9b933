# File: tests/test_analysis_summary.py

from datetime import datetime, timezone

from app.services.analysis_summary import summarize_analysis


def test_summary_counts(sample_report):
    generated = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    summary = summarize_analysis(sample_report, generated)
    assert summary == {
        "generatedAt": "2025-03-01T12:00:00+00:00",
        "sentiment": "Positive",
        "questionCount": 2,
        "mentionYes": 1,
        "mentionRate": 50,
        "competitorCount": 2,
        "competitorNames": ["Globex", "Initech"],
    }


def test_mention_is_case_insensitive_and_rate_rounded(sample_report):
    analyses = sample_report["part3"]["visibilite"]["analyses"]
    analyses.append(dict(analyses[0], mentionProbable="OUI"))
    analyses[1]["mentionProbable"] = "Probable"
    summary = summarize_analysis(sample_report, "2025-03-01T12:00:00Z")
    assert summary["mentionYes"] == 2
    assert summary["mentionRate"] == 67
    assert summary["generatedAt"] == "2025-03-01T12:00:00Z"


def test_no_analyses(sample_report):
    sample_report["part3"]["visibilite"]["analyses"] = []
    summary = summarize_analysis(sample_report, "2025-03-01T12:00:00Z")
    assert summary["questionCount"] == 0
    assert summary["mentionRate"] == 0
    assert summary["competitorNames"] == []


def test_mention_rate_rounds_halves_up(sample_report):
    analyses = sample_report["part3"]["visibilite"]["analyses"]
    analyses[:] = [dict(analyses[1]) for _ in range(8)]
    analyses[0]["mentionProbable"] = "Oui"
    summary = summarize_analysis(sample_report, "2025-03-01T12:00:00Z")
    assert summary["mentionYes"] == 1
    assert summary["mentionRate"] == 13

    for item in analyses[1:3]:
        item["mentionProbable"] = "Oui"
    assert summarize_analysis(sample_report, "2025-03-01T12:00:00Z")["mentionRate"] == 38
