# File: tests/test_llm_json.py

import pytest

from app.services.llm_json import LlmJsonError, extract_json_block, parse_llm_json, repair_json


def test_plain_json():
    assert parse_llm_json('{"a": 1}') == {"a": 1}


def test_code_fences_are_stripped():
    assert parse_llm_json('```json\n{"a": 1}\n```') == {"a": 1}


def test_json_surrounded_by_prose():
    text = 'Voici le résultat : {"a": [1, 2]} Bonne lecture.'
    assert parse_llm_json(text) == {"a": [1, 2]}


def test_first_valid_block_wins():
    assert parse_llm_json('Exemple : {a} puis {"b": 2}') == {"b": 2}


def test_single_quotes_and_trailing_commas():
    text = "{'name': 'Acme', 'tags': ['a', 'b',],}"
    assert parse_llm_json(text) == {"name": "Acme", "tags": ["a", "b"]}


def test_unquoted_keys():
    assert parse_llm_json('{name: "Acme", city: "Lyon"}') == {"name": "Acme", "city": "Lyon"}


def test_python_literals_and_nan():
    text = '{"ok": True, "value": None, "score": NaN}'
    assert parse_llm_json(text) == {"ok": True, "value": None, "score": None}


def test_comments_are_removed_outside_strings():
    text = '{\n  // note\n  "a": 1, /* b */ "c": "http://x.y/z"\n}'
    assert parse_llm_json(text) == {"a": 1, "c": "http://x.y/z"}


def test_string_contents_are_left_alone():
    text = '{"text": "l\'agence // top, True", "n": 1,}'
    assert parse_llm_json(text) == {"text": "l'agence // top, True", "n": 1}


def test_smart_quotes():
    assert parse_llm_json("{“name”: “Acme”}") == {"name": "Acme"}


def test_truncated_output_is_closed():
    text = (
        '{"competitors": [{"name": "Globex", "website": "https://globex.fr"}, '
        '{"name": "Init'
    )
    parsed = parse_llm_json(text)
    assert parsed["competitors"][0] == {"name": "Globex", "website": "https://globex.fr"}
    assert parsed["competitors"][1] == {"name": "Init"}


def test_truncated_after_a_key_drops_the_key():
    assert parse_llm_json('{"a": 1, "b') == {"a": 1}


def test_truncated_array_keeps_its_last_string():
    assert parse_llm_json('{"competitors": ["Globex", "Initech"') == {"competitors": ["Globex", "Initech"]}
    assert parse_llm_json('["Globex", "Initech",') == ["Globex", "Initech"]


def test_no_json_raises():
    with pytest.raises(LlmJsonError):
        parse_llm_json("Désolé, je ne peux pas répondre.")


@pytest.mark.parametrize("text", [None, "", "   \n"])
def test_empty_output_raises(text):
    with pytest.raises(LlmJsonError):
        parse_llm_json(text)


def test_extract_json_block_ignores_braces_in_strings():
    assert extract_json_block('texte {"a": "}"} fin') == '{"a": "}"}'
    assert extract_json_block('{"a": [1, 2') is None
    assert extract_json_block("") is None


def test_repair_closes_brackets():
    assert repair_json('[{"a": 1}, {"b": 2') == '[{"a": 1}, {"b": 2}]'
