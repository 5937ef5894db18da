"""
Response decoders: turn raw backend text into typed domain results.

Structured decoders parse JSON (plain or fenced in a ```json block) and
validate it against the payload models in `jobcook.app.llm.schemas`. A
parse or validation failure raises DecodeError. The resume decoder is the
one exception: empty output means "found nothing" and decodes to an empty
list. Free-text decoders only check for non-empty output and fall back to
a fixed string.
"""

import json
import logging
import math
from typing import Any

from langchain_core.utils.json import parse_json_markdown
from pydantic import ValidationError

from jobcook.app.core.errors import DecodeError
from jobcook.app.llm.schemas import (
    AnswerEvaluationPayload,
    MatchAnalysisPayload,
    RawIngredient,
    RefinementPayload,
)
from jobcook.app.models.analysis import UNKNOWN_COMPANY, MatchAnalysis
from jobcook.app.models.ingredient import Ingredient, new_ingredient_id, normalize_category
from jobcook.app.models.interview import AnswerEvaluation
from jobcook.app.models.refinement import EXPECTED_VARIATIONS, RefinementResult

log = logging.getLogger(__name__)

NO_FEEDBACK = "No feedback was provided for this answer."


def _parse_json(text: str, what: str) -> Any:
    """Parse JSON or JSON-in-markdown, raising DecodeError on failure."""
    try:
        return parse_json_markdown(text)
    except (json.JSONDecodeError, ValueError, TypeError) as e:
        _msg = f"Failed to parse {what} response as JSON: {e!s}"
        log.exception(_msg)
        raise DecodeError() from e


def decode_text(text: str | None, fallback: str) -> str:
    """Return the stripped text, or `fallback` when the text is empty."""
    value = (text or "").strip()
    if not value:
        _msg = "Empty free-text response, using fallback"
        log.warning(_msg)
        return fallback
    return value


def decode_ingredients(text: str | None) -> list[Ingredient]:
    """Decode a resume-parsing response into ingredients.

    Args:
        text (str | None): The raw backend output.

    Returns:
        list[Ingredient]: The decoded ingredients, each with a fresh identifier.
            Empty when the backend found nothing.

    Raises:
        DecodeError: If the output is not JSON, or not a JSON array.

    Notes:
        1. Empty or absent output, and a JSON null, decode to an empty list.
        2. Items that are not objects or have no usable name are dropped whole.
        3. Categories are normalized with `normalize_category`.
        4. Any identifier present in the output is ignored.

    """
    if text is None or not text.strip():
        return []

    parsed = _parse_json(text, "resume")
    if parsed is None:
        return []
    if not isinstance(parsed, list):
        _msg = f"Resume response is a {type(parsed).__name__}, expected a list"
        log.error(_msg)
        raise DecodeError("Failed to read the resume data returned by the AI service.")

    ingredients = []
    for index, item in enumerate(parsed):
        try:
            raw = RawIngredient.model_validate(item)
        except ValidationError as e:
            _msg = f"Dropping resume item {index}: {e.error_count()} validation error(s)"
            log.warning(_msg)
            continue

        name = raw.name.strip()
        if not name:
            _msg = f"Dropping resume item {index}: empty name"
            log.warning(_msg)
            continue

        details = (raw.details or "").strip() or None
        ingredients.append(
            Ingredient(
                id=new_ingredient_id(),
                name=name,
                category=normalize_category(raw.category),
                details=details,
            )
        )

    _msg = f"Decoded {len(ingredients)} of {len(parsed)} resume items"
    log.debug(_msg)
    return ingredients


def decode_match_analysis(text: str | None) -> MatchAnalysis:
    """Decode a match-analysis response.

    Args:
        text (str | None): The raw backend output.

    Returns:
        MatchAnalysis: The analysis with its score clamped to 0-100.

    Raises:
        DecodeError: If the output is empty, not JSON, or has no numeric score.

    Notes:
        1. Missing or null list fields decode as empty lists.
        2. A missing or blank company name becomes UNKNOWN_COMPANY.

    """
    if text is None or not text.strip():
        raise DecodeError("No analysis was returned by the AI service.")

    parsed = _parse_json(text, "match analysis")
    try:
        payload = MatchAnalysisPayload.model_validate(parsed)
    except ValidationError as e:
        _msg = f"Match analysis failed validation: {e!s}"
        log.exception(_msg)
        raise DecodeError() from e

    if not math.isfinite(payload.match_score):
        raise DecodeError()

    score = min(max(payload.match_score, 0.0), 100.0)
    if score != payload.match_score:
        _msg = f"Clamped out-of-range match score {payload.match_score} to {score}"
        log.warning(_msg)

    company = (payload.company_name or "").strip() or UNKNOWN_COMPANY
    return MatchAnalysis(
        match_score=score,
        missing_requirements=[item.strip() for item in payload.missing_requirements if item.strip()],
        fit_summary=(payload.fit_summary or "").strip(),
        improvement_tips=[item.strip() for item in payload.improvement_tips if item.strip()],
        company_name=company,
    )


def decode_refinements(text: str | None, original: str) -> RefinementResult:
    """Decode a refinement response.

    Args:
        text (str | None): The raw backend output.
        original (str): The text that was submitted for refinement.

    Returns:
        RefinementResult: The decoded variations.

    Raises:
        DecodeError: If the output is empty, not JSON, or has no list of strings.

    Notes:
        1. A bare JSON array of strings is accepted as the variations list.
        2. A list with more or fewer than EXPECTED_VARIATIONS entries is passed
           through as-is and logged.

    """
    if text is None or not text.strip():
        raise DecodeError("No variations were returned by the AI service.")

    parsed = _parse_json(text, "refinement")
    if isinstance(parsed, list):
        parsed = {"variations": parsed}
    try:
        payload = RefinementPayload.model_validate(parsed)
    except ValidationError as e:
        _msg = f"Refinement failed validation: {e!s}"
        log.exception(_msg)
        raise DecodeError() from e

    variations = [variation.strip() for variation in payload.variations]
    if len(variations) != EXPECTED_VARIATIONS:
        _msg = f"Expected {EXPECTED_VARIATIONS} variations, got {len(variations)}"
        log.warning(_msg)

    return RefinementResult(original=original, variations=variations)


def decode_evaluation(text: str | None, *, expect_transcription: bool = False) -> AnswerEvaluation:
    """Decode an answer-evaluation response.

    Args:
        text (str | None): The raw backend output.
        expect_transcription (bool): Whether the response belongs to an audio answer.

    Returns:
        AnswerEvaluation: Score rounded and clamped to 1-10, feedback, and the
            transcription (None when absent or blank, or for text answers).

    Raises:
        DecodeError: If the output is empty, not JSON, or has no numeric score.

    """
    if text is None or not text.strip():
        raise DecodeError("No evaluation was returned by the AI service.")

    parsed = _parse_json(text, "evaluation")
    try:
        payload = AnswerEvaluationPayload.model_validate(parsed)
    except ValidationError as e:
        _msg = f"Evaluation failed validation: {e!s}"
        log.exception(_msg)
        raise DecodeError() from e

    if not math.isfinite(payload.score):
        raise DecodeError()

    score = int(min(max(round(payload.score), 1), 10))
    transcription = None
    if expect_transcription:
        transcription = (payload.transcription or "").strip() or None

    return AnswerEvaluation(
        score=score,
        feedback=payload.feedback.strip() or NO_FEEDBACK,
        transcription=transcription,
    )
