"""
Prompt builders: pure functions turning domain inputs into GenerationRequests.

Builders that expect structured output attach an explicit output schema.
Builders for free-form text omit the schema and constrain the format
through directives in the instruction text instead. List inputs are
rendered in their given order with a fixed layout, so identical inputs
always produce byte-identical instruction text.
"""

import logging
from collections.abc import Sequence
from typing import Any

from langchain_core.prompts import PromptTemplate

from jobcook.app.llm.backend import Attachment, GenerationRequest
from jobcook.app.llm.prompts import (
    AUDIO_ANSWER_EVALUATION_PROMPT,
    COMPANY_RESEARCH_PROMPT,
    COVER_LETTER_PROMPT,
    INTERVIEW_QUESTION_PROMPT,
    JOB_TEXT_EXTRACTION_PROMPT,
    MATCH_ANALYSIS_PROMPT,
    REFINEMENT_PROMPT,
    RESUME_PARSE_PROMPT,
    TEXT_ANSWER_EVALUATION_PROMPT,
)
from jobcook.app.models.analysis import UNKNOWN_COMPANY
from jobcook.app.models.ingredient import Ingredient
from jobcook.app.models.interview import InterviewRole, InterviewTurn

log = logging.getLogger(__name__)

EMPTY_TRANSCRIPT = "(The interview has not started yet.)"

RESUME_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING"},
            # No enum: slight model deviations are remapped by the decoder.
            "category": {"type": "STRING"},
            "details": {"type": "STRING"},
        },
        "required": ["name", "category"],
    },
}

MATCH_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "match_score": {"type": "NUMBER"},
        "missing_requirements": {"type": "ARRAY", "items": {"type": "STRING"}},
        "fit_summary": {"type": "STRING"},
        "improvement_tips": {"type": "ARRAY", "items": {"type": "STRING"}},
        "company_name": {"type": "STRING"},
    },
    "required": [
        "match_score",
        "missing_requirements",
        "fit_summary",
        "improvement_tips",
        "company_name",
    ],
}

REFINEMENT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "variations": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["variations"],
}

TEXT_EVALUATION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "score": {"type": "INTEGER"},
        "feedback": {"type": "STRING"},
    },
    "required": ["score", "feedback"],
}

AUDIO_EVALUATION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "transcription": {"type": "STRING"},
        "score": {"type": "INTEGER"},
        "feedback": {"type": "STRING"},
    },
    "required": ["transcription", "score", "feedback"],
}


def _render(template: str, **kwargs: str) -> str:
    return PromptTemplate.from_template(template).format(**kwargs)


def format_ingredient_list(ingredients: Sequence[Ingredient]) -> str:
    """Render ingredients as one `- CATEGORY: name (details)` line each, in order."""
    lines = []
    for ingredient in ingredients:
        line = f"- {ingredient.category.value.upper()}: {ingredient.name}"
        if ingredient.details:
            line += f" ({ingredient.details})"
        lines.append(line)
    return "\n".join(lines)


def format_ingredient_names(ingredients: Sequence[Ingredient]) -> str:
    return ", ".join(ingredient.name for ingredient in ingredients)


def format_transcript(history: Sequence[InterviewTurn]) -> str:
    """Render the interview history as a plain transcript.

    Args:
        history (Sequence[InterviewTurn]): The turns so far, in order.

    Returns:
        str: One block per turn, or EMPTY_TRANSCRIPT for an empty history.

    Notes:
        1. Interviewer turns render as `Interviewer: <content>`.
        2. Candidate turns render as `Candidate: <content>`, followed by the
           score when the answer has been evaluated.

    """
    if not history:
        return EMPTY_TRANSCRIPT

    lines = []
    for turn in history:
        if turn.role == InterviewRole.INTERVIEWER:
            lines.append(f"Interviewer: {turn.content}")
        else:
            line = f"Candidate: {turn.content}"
            if turn.score is not None:
                line += f" [Score: {turn.score}/10]"
            lines.append(line)
    return "\n".join(lines)


def build_resume_parse_request(attachment: Attachment) -> GenerationRequest:
    return GenerationRequest(
        instruction_text=_render(RESUME_PARSE_PROMPT),
        attachment=attachment,
        output_schema=RESUME_SCHEMA,
    )


def build_job_text_extraction_request(attachment: Attachment) -> GenerationRequest:
    return GenerationRequest(
        instruction_text=_render(JOB_TEXT_EXTRACTION_PROMPT),
        attachment=attachment,
    )


def build_match_analysis_request(
    ingredients: Sequence[Ingredient],
    job_description: str,
) -> GenerationRequest:
    """Build the structured match-analysis request.

    Args:
        ingredients (Sequence[Ingredient]): The candidate's ingredients.
        job_description (str): The job posting text.

    Returns:
        GenerationRequest: Instruction text plus MATCH_ANALYSIS_SCHEMA.

    """
    text = _render(
        MATCH_ANALYSIS_PROMPT,
        ingredients_list=format_ingredient_list(ingredients),
        job_description=job_description.strip(),
        unknown_company=UNKNOWN_COMPANY,
    )
    return GenerationRequest(instruction_text=text, output_schema=MATCH_ANALYSIS_SCHEMA)


def build_company_research_request(
    company_name: str,
    ingredients: Sequence[Ingredient] = (),
) -> GenerationRequest:
    text = _render(
        COMPANY_RESEARCH_PROMPT,
        company_name=company_name.strip(),
        ingredients_names=format_ingredient_names(ingredients),
    )
    return GenerationRequest(instruction_text=text)


def build_cover_letter_request(
    ingredients: Sequence[Ingredient],
    job_description: str,
) -> GenerationRequest:
    text = _render(
        COVER_LETTER_PROMPT,
        ingredients_list=format_ingredient_list(ingredients),
        job_description=job_description.strip(),
    )
    return GenerationRequest(instruction_text=text)


def build_refinement_request(text: str, context: str | None = None) -> GenerationRequest:
    """Build the request for three alternative phrasings of `text`.

    Args:
        text (str): The text to refine.
        context (str | None): Optional description of where the text is used,
            e.g. "cover letter opening".

    Returns:
        GenerationRequest: Instruction text plus REFINEMENT_SCHEMA.

    """
    context_block = f"Context: {context.strip()}\n\n" if context and context.strip() else ""
    instruction = _render(
        REFINEMENT_PROMPT,
        context_block=context_block,
        text=text.strip(),
    )
    return GenerationRequest(instruction_text=instruction, output_schema=REFINEMENT_SCHEMA)


def build_interview_question_request(
    ingredients: Sequence[Ingredient],
    job_description: str,
    history: Sequence[InterviewTurn],
) -> GenerationRequest:
    text = _render(
        INTERVIEW_QUESTION_PROMPT,
        ingredients_list=format_ingredient_list(ingredients),
        job_description=job_description.strip(),
        transcript=format_transcript(history),
    )
    return GenerationRequest(instruction_text=text)


def build_text_answer_evaluation_request(question: str, answer: str) -> GenerationRequest:
    text = _render(
        TEXT_ANSWER_EVALUATION_PROMPT,
        question=question.strip(),
        answer=answer.strip(),
    )
    return GenerationRequest(instruction_text=text, output_schema=TEXT_EVALUATION_SCHEMA)


def build_audio_answer_evaluation_request(
    question: str,
    audio: Attachment,
) -> GenerationRequest:
    text = _render(AUDIO_ANSWER_EVALUATION_PROMPT, question=question.strip())
    return GenerationRequest(
        instruction_text=text,
        attachment=audio,
        output_schema=AUDIO_EVALUATION_SCHEMA,
    )
