from jobcook.app.llm.backend import Attachment
from jobcook.app.llm.builders import (
    AUDIO_EVALUATION_SCHEMA,
    EMPTY_TRANSCRIPT,
    MATCH_ANALYSIS_SCHEMA,
    REFINEMENT_SCHEMA,
    RESUME_SCHEMA,
    TEXT_EVALUATION_SCHEMA,
    build_audio_answer_evaluation_request,
    build_company_research_request,
    build_cover_letter_request,
    build_interview_question_request,
    build_job_text_extraction_request,
    build_match_analysis_request,
    build_refinement_request,
    build_resume_parse_request,
    build_text_answer_evaluation_request,
    format_ingredient_list,
    format_transcript,
)
from jobcook.app.models.ingredient import Ingredient, IngredientCategory
from jobcook.app.models.interview import InterviewRole, InterviewTurn

INGREDIENTS = [
    Ingredient(name="Python", category=IngredientCategory.SKILL, details="5 years"),
    Ingredient(name="Acme Corp", category=IngredientCategory.EXPERIENCE),
]


def test_format_ingredient_list_keeps_order():
    assert format_ingredient_list(INGREDIENTS) == (
        "- SKILL: Python (5 years)\n- EXPERIENCE: Acme Corp"
    )


def test_format_transcript():
    assert format_transcript([]) == EMPTY_TRANSCRIPT

    history = [
        InterviewTurn(role=InterviewRole.INTERVIEWER, content="Why us?"),
        InterviewTurn(role=InterviewRole.CANDIDATE, content="Great team.", score=7, feedback="ok"),
    ]
    assert format_transcript(history) == "Interviewer: Why us?\nCandidate: Great team. [Score: 7/10]"


def test_resume_parse_request_carries_attachment_and_schema():
    attachment = Attachment(data=b"%PDF", mime_type="application/pdf")

    request = build_resume_parse_request(attachment)

    assert request.attachment == attachment
    assert request.output_schema == RESUME_SCHEMA
    assert RESUME_SCHEMA["type"] == "ARRAY"


def test_job_text_extraction_request_is_free_text():
    attachment = Attachment(data=b"png", mime_type="image/png")

    request = build_job_text_extraction_request(attachment)

    assert request.attachment == attachment
    assert request.output_schema is None


def test_match_analysis_request_is_deterministic():
    first = build_match_analysis_request(INGREDIENTS, "Senior Python developer at Acme")
    second = build_match_analysis_request(list(INGREDIENTS), "Senior Python developer at Acme")

    assert first == second
    assert first.output_schema == MATCH_ANALYSIS_SCHEMA
    assert "- SKILL: Python (5 years)" in first.instruction_text
    assert "Senior Python developer at Acme" in first.instruction_text
    assert '"Unknown Company"' in first.instruction_text


def test_company_research_request_lists_names():
    request = build_company_research_request("Acme", INGREDIENTS)

    assert request.output_schema is None
    assert 'Research the company "Acme"' in request.instruction_text
    assert "Python, Acme Corp" in request.instruction_text


def test_cover_letter_request_forbids_theme():
    request = build_cover_letter_request(INGREDIENTS, "Data engineer")

    assert request.output_schema is None
    assert "Do NOT use cooking metaphors" in request.instruction_text
    assert "Data engineer" in request.instruction_text


def test_refinement_request_with_and_without_context():
    plain = build_refinement_request("I like code.")
    with_context = build_refinement_request("I like code.", "cover letter opening")

    assert plain.output_schema == REFINEMENT_SCHEMA
    assert "Context:" not in plain.instruction_text
    assert "Context: cover letter opening" in with_context.instruction_text
    assert "I like code." in with_context.instruction_text


def test_text_is_inserted_verbatim_even_with_braces():
    request = build_refinement_request("Use {curly} braces")

    assert "Use {curly} braces" in request.instruction_text


def test_interview_question_request_includes_transcript():
    history = [InterviewTurn(role=InterviewRole.INTERVIEWER, content="Tell me about Acme.")]

    opening = build_interview_question_request(INGREDIENTS, "Role", [])
    follow_up = build_interview_question_request(INGREDIENTS, "Role", history)

    assert EMPTY_TRANSCRIPT in opening.instruction_text
    assert "Interviewer: Tell me about Acme." in follow_up.instruction_text
    assert follow_up.output_schema is None


def test_answer_evaluation_requests():
    text_request = build_text_answer_evaluation_request("Why?", "Because.")
    audio = Attachment(data=b"RIFF", mime_type="audio/webm")
    audio_request = build_audio_answer_evaluation_request("Why?", audio)

    assert text_request.output_schema == TEXT_EVALUATION_SCHEMA
    assert text_request.attachment is None
    assert "Because." in text_request.instruction_text
    assert audio_request.output_schema == AUDIO_EVALUATION_SCHEMA
    assert audio_request.attachment == audio
    assert "transcription" in AUDIO_EVALUATION_SCHEMA["properties"]
