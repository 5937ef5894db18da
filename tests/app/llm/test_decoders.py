import json

import pytest

from jobcook.app.core.errors import DecodeError
from jobcook.app.llm.decoders import (
    NO_FEEDBACK,
    decode_evaluation,
    decode_ingredients,
    decode_match_analysis,
    decode_refinements,
    decode_text,
)
from jobcook.app.models.analysis import UNKNOWN_COMPANY
from jobcook.app.models.ingredient import IngredientCategory


def test_decode_text_falls_back_on_empty():
    assert decode_text("  hello \n", "fallback") == "hello"
    assert decode_text("   ", "fallback") == "fallback"
    assert decode_text(None, "fallback") == "fallback"


def test_decode_ingredients_normalizes_categories():
    text = json.dumps(
        [
            {"name": "Python", "category": "Skills"},
            {"name": "Acme", "category": "Internship"},
            {"name": "BSc", "category": "Degree"},
            {"name": "Chess bot", "category": "Side Project"},
            {"name": "AWS", "category": "certification"},
            {"name": "Git"},
        ]
    )

    ingredients = decode_ingredients(text)

    assert [i.category for i in ingredients] == [
        IngredientCategory.SKILL,
        IngredientCategory.EXPERIENCE,
        IngredientCategory.EDUCATION,
        IngredientCategory.PROJECT,
        IngredientCategory.CERTIFICATION,
        IngredientCategory.SKILL,
    ]


def test_decode_ingredients_assigns_fresh_unique_ids():
    text = json.dumps([{"id": "same", "name": "A"}, {"id": "same", "name": "B"}])

    ingredients = decode_ingredients(text)

    ids = [i.id for i in ingredients]
    assert "same" not in ids
    assert len(set(ids)) == 2


def test_decode_ingredients_drops_unusable_items():
    text = json.dumps(
        [
            {"name": "   "},
            {"category": "skill"},
            "not an object",
            {"name": " Go ", "details": "  "},
        ]
    )

    ingredients = decode_ingredients(text)

    assert len(ingredients) == 1
    assert ingredients[0].name == "Go"
    assert ingredients[0].details is None


@pytest.mark.parametrize("text", [None, "", "   \n"])
def test_decode_ingredients_empty_output_is_empty_list(text):
    assert decode_ingredients(text) == []


def test_decode_ingredients_accepts_fenced_json():
    text = '```json\n[{"name": "SQL", "category": "skill"}]\n```'

    ingredients = decode_ingredients(text)

    assert [i.name for i in ingredients] == ["SQL"]


def test_decode_ingredients_rejects_non_list():
    with pytest.raises(DecodeError) as exc_info:
        decode_ingredients('{"name": "Python"}')

    assert exc_info.value.message == "Failed to read the resume data returned by the AI service."


def test_decode_ingredients_rejects_non_json():
    with pytest.raises(DecodeError):
        decode_ingredients("Here are the skills I found: Python and SQL.")


def test_decode_match_analysis_clamps_and_defaults():
    text = json.dumps(
        {
            "match_score": 120,
            "missing_requirements": None,
            "fit_summary": " Strong fit. ",
            "improvement_tips": [" Add metrics ", ""],
            "company_name": "  ",
        }
    )

    analysis = decode_match_analysis(text)

    assert analysis.match_score == 100
    assert analysis.missing_requirements == []
    assert analysis.improvement_tips == ["Add metrics"]
    assert analysis.fit_summary == "Strong fit."
    assert analysis.company_name == UNKNOWN_COMPANY
    assert not analysis.has_known_company


def test_decode_match_analysis_keeps_company():
    text = json.dumps({"match_score": 65.5, "company_name": "Acme"})

    analysis = decode_match_analysis(text)

    assert analysis.match_score == 65.5
    assert analysis.company_name == "Acme"
    assert analysis.has_known_company
    assert analysis.verdict == "Good Potential"


def test_decode_match_analysis_failures():
    with pytest.raises(DecodeError) as exc_info:
        decode_match_analysis("")
    assert exc_info.value.message == "No analysis was returned by the AI service."

    with pytest.raises(DecodeError):
        decode_match_analysis(json.dumps({"fit_summary": "no score"}))

    with pytest.raises(DecodeError):
        decode_match_analysis("not json")


def test_decode_refinements():
    result = decode_refinements(json.dumps({"variations": ["a", "b", "c"]}), original="x")

    assert result.original == "x"
    assert result.variations == ["a", "b", "c"]
    assert result.is_complete


def test_decode_refinements_passes_count_mismatch_through():
    result = decode_refinements(json.dumps(["only one"]), original="x")

    assert result.variations == ["only one"]
    assert not result.is_complete


def test_decode_refinements_failures():
    with pytest.raises(DecodeError):
        decode_refinements(json.dumps({"other": 1}), original="x")
    with pytest.raises(DecodeError):
        decode_refinements("", original="x")


@pytest.mark.parametrize("raw, expected", [(7.6, 8), (0, 1), (15, 10), (5, 5)])
def test_decode_evaluation_rounds_and_clamps_score(raw, expected):
    evaluation = decode_evaluation(json.dumps({"score": raw, "feedback": "Solid."}))

    assert evaluation.score == expected
    assert evaluation.feedback == "Solid."
    assert evaluation.transcription is None


def test_decode_evaluation_transcription():
    text = json.dumps({"score": 6, "feedback": "", "transcription": " I led the team. "})

    assert decode_evaluation(text).transcription is None

    evaluation = decode_evaluation(text, expect_transcription=True)
    assert evaluation.transcription == "I led the team."
    assert evaluation.feedback == NO_FEEDBACK

    blank = json.dumps({"score": 6, "feedback": "ok", "transcription": "  "})
    assert decode_evaluation(blank, expect_transcription=True).transcription is None


def test_decode_evaluation_requires_score():
    with pytest.raises(DecodeError):
        decode_evaluation(json.dumps({"feedback": "Nice"}))
