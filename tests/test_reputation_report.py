# File: tests/test_reputation_report.py

from app.services.reputation_report import (
    REPUTATION_ANALYSIS_JSON_SCHEMA,
    sanitize_reputation_report,
)


def test_schema_requires_the_main_sections():
    assert REPUTATION_ANALYSIS_JSON_SCHEMA["name"] == "reputation_analysis"
    schema = REPUTATION_ANALYSIS_JSON_SCHEMA["schema"]
    assert schema["required"] == ["part1", "part3", "notice"]
    assert "part2" in schema["properties"]


def test_valid_report_is_kept(sample_report):
    report = sanitize_reputation_report(sample_report)
    assert report == sample_report


def test_strings_are_trimmed_and_blanks_dropped(sample_report):
    sample_report["part1"]["forces"] = ["  Réactivité  ", "", "   ", 12]
    sample_report["notice"] = "  Notice.  "
    report = sanitize_reputation_report(sample_report)
    assert report["part1"]["forces"] == ["Réactivité"]
    assert report["notice"] == "Notice."


def test_word_cloud_weights_are_coerced_and_clamped(sample_report):
    sample_report["part1"]["nuageMots"] = [
        {"mot": "conseil", "poids": "85"},
        {"mot": "prix", "poids": 150},
        {"mot": "lenteur", "poids": -3},
        {"mot": "flou", "poids": "beaucoup"},
        {"mot": "", "poids": 10},
        "pas un objet",
    ]
    report = sanitize_reputation_report(sample_report)
    assert report["part1"]["nuageMots"] == [
        {"mot": "conseil", "poids": 85},
        {"mot": "prix", "poids": 100},
        {"mot": "lenteur", "poids": 0},
    ]


def test_optional_sentiment_fields(sample_report):
    sample_report["part1"]["sentimentGlobal"]["exemples"] = ["Bon accueil", ""]
    sample_report["part1"]["sentimentGlobal"]["details"] = "   "
    sentiment = sanitize_reputation_report(sample_report)["part1"]["sentimentGlobal"]
    assert sentiment["exemples"] == ["Bon accueil"]
    assert "details" not in sentiment


def test_part1_missing_a_section_rejects_the_report(sample_report):
    sample_report["part1"]["recommandations"] = [{"faiblesse": "Prix"}]
    assert sanitize_reputation_report(sample_report) is None


def test_part2_is_optional(sample_report):
    sample_report["part2"] = {"resume": "  ", "details": [{}, {"acteur": ""}]}
    assert "part2" not in sanitize_reputation_report(sample_report)

    sample_report["part2"] = {
        "resume": "Acme est mieux perçue que Globex.",
        "details": [{"acteur": "Globex", "pointsForts": ["Prix"], "faiblesses": []}],
    }
    part2 = sanitize_reputation_report(sample_report)["part2"]
    assert part2 == {
        "resume": "Acme est mieux perçue que Globex.",
        "details": [{"acteur": "Globex", "pointsForts": ["Prix"]}],
    }


def test_incomplete_visibility_analyses_are_dropped(sample_report):
    analyses = sample_report["part3"]["visibilite"]["analyses"]
    analyses[1]["concurrents"] = []
    report = sanitize_reputation_report(sample_report)
    assert len(report["part3"]["visibilite"]["analyses"]) == 1


def test_empty_analyses_list_is_accepted(sample_report):
    sample_report["part3"]["visibilite"]["analyses"] = []
    report = sanitize_reputation_report(sample_report)
    assert report["part3"]["visibilite"]["analyses"] == []


def test_missing_analyses_list_rejects_the_report(sample_report):
    del sample_report["part3"]["visibilite"]["analyses"]
    assert sanitize_reputation_report(sample_report) is None


def test_questions_are_required(sample_report):
    sample_report["part3"]["generation"]["questions"] = [{"contexte": "sans question"}]
    assert sanitize_reputation_report(sample_report) is None


def test_part3_introductions_are_kept(sample_report):
    sample_report["part3"]["introduction"] = "Intro"
    sample_report["part3"]["generation"]["introduction"] = "Questions"
    sample_report["part3"]["visibilite"]["introduction"] = ""
    part3 = sanitize_reputation_report(sample_report)["part3"]
    assert part3["introduction"] == "Intro"
    assert part3["generation"]["introduction"] == "Questions"
    assert "introduction" not in part3["visibilite"]


def test_non_objects_and_missing_notice(sample_report):
    assert sanitize_reputation_report(None) is None
    assert sanitize_reputation_report(["part1"]) is None
    del sample_report["notice"]
    assert sanitize_reputation_report(sample_report) is None
