import logging
from collections.abc import Sequence

from jobcook.app.core.errors import DecodeError, InputValidationError, KitchenError
from jobcook.app.llm.backend import (
    Attachment,
    GenerationBackend,
    GenerationRequest,
    GenerationResult,
)
from jobcook.app.llm.builders import (
    build_audio_answer_evaluation_request,
    build_company_research_request,
    build_cover_letter_request,
    build_interview_question_request,
    build_job_text_extraction_request,
    build_match_analysis_request,
    build_refinement_request,
    build_resume_parse_request,
    build_text_answer_evaluation_request,
)
from jobcook.app.llm.decoders import (
    decode_evaluation,
    decode_ingredients,
    decode_match_analysis,
    decode_refinements,
    decode_text,
)
from jobcook.app.llm.retry import RetryPolicy, with_retry
from jobcook.app.models.analysis import AnalysisOutcome, CompanyResearch, MatchAnalysis
from jobcook.app.models.ingredient import Ingredient
from jobcook.app.models.interview import AnswerEvaluation, InterviewTurn
from jobcook.app.models.notification import Notification
from jobcook.app.models.refinement import RefinementResult

log = logging.getLogger(__name__)

NO_RESEARCH_FOUND = "No information found."
NO_COVER_LETTER = "The cover letter could not be written. Please try again."
DEFAULT_OPENING_QUESTION = "Tell me about yourself and why you are interested in this role."
DEFAULT_FOLLOW_UP_QUESTION = "Can you walk me through another example that shows why you fit this role?"


async def _generate(
    backend: GenerationBackend,
    request: GenerationRequest,
    retry_policy: RetryPolicy | None,
    label: str,
) -> GenerationResult:
    """Issue one request through the retry envelope."""
    return await with_retry(
        lambda: backend.generate(request),
        retry_policy,
        label=label,
    )


def _require_attachment(attachment: Attachment | None, message: str) -> Attachment:
    if attachment is None or not attachment.data:
        raise InputValidationError(message)
    return attachment


def _require_job_description(job_description: str | None) -> str:
    if not job_description or not job_description.strip():
        raise InputValidationError("Job description cannot be empty.")
    return job_description


def _require_ingredients(ingredients: Sequence[Ingredient]) -> Sequence[Ingredient]:
    if not ingredients:
        raise InputValidationError("Please add some ingredients to your pantry first.")
    return ingredients


async def parse_resume(
    attachment: Attachment | None,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> list[Ingredient]:
    """Extract ingredients from a resume document.

    Args:
        attachment (Attachment | None): The resume document bytes and MIME type.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        list[Ingredient]: The decoded ingredients. Empty when nothing was found.

    Raises:
        InputValidationError: If no attachment was supplied.
        KitchenError: Any normalized backend or decode failure.

    Notes:
        1. Validates that a non-empty attachment is present.
        2. Builds the resume-parse request with its output schema.
        3. Issues it through the retry envelope.
        4. Decodes the ingredients, assigning fresh identifiers.

    Network access:
        - This function makes network requests to the generation backend.

    """
    _msg = "parse_resume starting"
    log.debug(_msg)

    attachment = _require_attachment(attachment, "Please provide a resume document to parse.")
    request = build_resume_parse_request(attachment)
    result = await _generate(backend, request, retry_policy, "parse_resume")
    ingredients = decode_ingredients(result.text)

    _msg = f"parse_resume returning {len(ingredients)} ingredients"
    log.debug(_msg)
    return ingredients


async def extract_job_description(
    attachment: Attachment | None,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> str:
    """Read a job posting out of a screenshot.

    Args:
        attachment (Attachment | None): The screenshot bytes and MIME type.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        str: The posting text, in Markdown.

    Raises:
        InputValidationError: If no attachment was supplied.
        DecodeError: If no text could be read from the image.

    """
    _msg = "extract_job_description starting"
    log.debug(_msg)

    attachment = _require_attachment(attachment, "Please provide an image of the job description.")
    request = build_job_text_extraction_request(attachment)
    result = await _generate(backend, request, retry_policy, "extract_job_description")
    text = decode_text(result.text, "")
    if not text:
        raise DecodeError("Could not read text from image.")

    _msg = "extract_job_description returning"
    log.debug(_msg)
    return text


async def analyze_match(
    ingredients: Sequence[Ingredient],
    job_description: str,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> MatchAnalysis:
    """Score the ingredients against a job posting.

    Args:
        ingredients (Sequence[Ingredient]): The candidate's ingredients.
        job_description (str): The job posting text.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        MatchAnalysis: The decoded analysis.

    Raises:
        InputValidationError: If the job description or the ingredients are empty.

    Network access:
        - This function makes a network request to the generation backend.

    """
    _msg = "analyze_match starting"
    log.debug(_msg)

    _require_job_description(job_description)
    _require_ingredients(ingredients)

    request = build_match_analysis_request(ingredients, job_description)
    result = await _generate(backend, request, retry_policy, "analyze_match")
    analysis = decode_match_analysis(result.text)

    _msg = f"analyze_match returning (score={analysis.match_score:g})"
    log.debug(_msg)
    return analysis


async def research_company(
    company_name: str,
    ingredients: Sequence[Ingredient] = (),
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> CompanyResearch:
    """Write a company brief personalized to the candidate.

    Args:
        company_name (str): The employer to research.
        ingredients (Sequence[Ingredient]): Candidate context; may be empty.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        CompanyResearch: The markdown brief. Sources are always empty because
            the backend is not asked to search.

    Raises:
        InputValidationError: If the company name is empty.

    """
    _msg = f"research_company starting for '{company_name}'"
    log.debug(_msg)

    if not company_name or not company_name.strip():
        raise InputValidationError("Company name cannot be empty.")

    request = build_company_research_request(company_name, ingredients)
    result = await _generate(backend, request, retry_policy, "research_company")
    research = CompanyResearch(summary=decode_text(result.text, NO_RESEARCH_FOUND), sources=[])

    _msg = "research_company returning"
    log.debug(_msg)
    return research


async def analyze_and_research(
    ingredients: Sequence[Ingredient],
    job_description: str,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> AnalysisOutcome:
    """Run the match analysis, then research the company when one was named.

    Args:
        ingredients (Sequence[Ingredient]): The candidate's ingredients.
        job_description (str): The job posting text.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        AnalysisOutcome: The analysis, the research when available, and one
            notification per outcome.

    Raises:
        KitchenError: If the match analysis itself fails.

    Notes:
        1. Runs `analyze_match`; its failures propagate unchanged.
        2. Only when the extracted company name is present and not the
           "Unknown Company" sentinel, runs `research_company` with that name
           and the same ingredients, strictly after the analysis.
        3. A research failure is logged and reported as a separate error
           notification; the analysis is still returned as a success.

    """
    _msg = "analyze_and_research starting"
    log.debug(_msg)

    analysis = await analyze_match(
        ingredients,
        job_description,
        backend=backend,
        retry_policy=retry_policy,
    )
    outcome = AnalysisOutcome(
        analysis=analysis,
        notifications=[Notification.success("Analysis complete!")],
    )

    if analysis.has_known_company:
        try:
            outcome.company_research = await research_company(
                analysis.company_name,
                ingredients,
                backend=backend,
                retry_policy=retry_policy,
            )
        except KitchenError as e:
            _msg = f"Company research for '{analysis.company_name}' failed: {e.message}"
            log.warning(_msg)
            outcome.notifications.append(
                Notification.error(f"Company research unavailable: {e.message}")
            )
    else:
        _msg = "No company name extracted, skipping company research"
        log.debug(_msg)

    _msg = "analyze_and_research returning"
    log.debug(_msg)
    return outcome


async def generate_cover_letter(
    ingredients: Sequence[Ingredient],
    job_description: str,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> str:
    """Write a cover letter for the job posting.

    Args:
        ingredients (Sequence[Ingredient]): The candidate's ingredients.
        job_description (str): The job posting text.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        str: The letter in Markdown, or NO_COVER_LETTER when the model returned nothing.

    Raises:
        InputValidationError: If the job description is empty or there are no ingredients.

    """
    _msg = "generate_cover_letter starting"
    log.debug(_msg)

    _require_job_description(job_description)
    _require_ingredients(ingredients)
    request = build_cover_letter_request(ingredients, job_description)
    result = await _generate(backend, request, retry_policy, "generate_cover_letter")
    letter = decode_text(result.text, NO_COVER_LETTER)

    _msg = "generate_cover_letter returning"
    log.debug(_msg)
    return letter


async def refine_text(
    text: str,
    context: str | None = None,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> RefinementResult:
    """Ask for three alternative phrasings of a text.

    Args:
        text (str): The text to refine.
        context (str | None): Where the text is used, to steer the tone.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        RefinementResult: The variations, passed through even when the model
            returned a different count.

    Raises:
        InputValidationError: If the text is empty.
        DecodeError: If the response is not a JSON list of strings.

    """
    _msg = "refine_text starting"
    log.debug(_msg)

    if not text or not text.strip():
        raise InputValidationError("Text to refine cannot be empty.")

    request = build_refinement_request(text, context)
    result = await _generate(backend, request, retry_policy, "refine_text")
    refinement = decode_refinements(result.text, original=text)

    _msg = "refine_text returning"
    log.debug(_msg)
    return refinement


async def get_interview_question(
    ingredients: Sequence[Ingredient],
    job_description: str,
    history: Sequence[InterviewTurn],
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> str:
    """Produce the next interviewer question. Never produces feedback.

    Args:
        ingredients (Sequence[Ingredient]): The candidate's ingredients.
        job_description (str): The job posting text.
        history (Sequence[InterviewTurn]): The complete history so far; empty for the opening question.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        str: The question text.

    """
    _msg = f"get_interview_question starting ({len(history)} prior turns)"
    log.debug(_msg)

    _require_job_description(job_description)
    request = build_interview_question_request(ingredients, job_description, history)
    result = await _generate(backend, request, retry_policy, "get_interview_question")
    fallback = DEFAULT_FOLLOW_UP_QUESTION if history else DEFAULT_OPENING_QUESTION
    question = decode_text(result.text, fallback)

    _msg = "get_interview_question returning"
    log.debug(_msg)
    return question


async def evaluate_text_answer(
    question: str,
    answer: str,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> AnswerEvaluation:
    """Score a typed answer to an interview question.

    Raises:
        InputValidationError: If the question or the answer is empty.

    """
    _msg = "evaluate_text_answer starting"
    log.debug(_msg)

    if not question or not question.strip():
        raise InputValidationError("There is no question to answer.")
    if not answer or not answer.strip():
        raise InputValidationError("Answer cannot be empty.")

    request = build_text_answer_evaluation_request(question, answer)
    result = await _generate(backend, request, retry_policy, "evaluate_text_answer")
    evaluation = decode_evaluation(result.text)

    _msg = f"evaluate_text_answer returning (score={evaluation.score})"
    log.debug(_msg)
    return evaluation


async def evaluate_audio_answer(
    question: str,
    audio: Attachment | None,
    *,
    backend: GenerationBackend,
    retry_policy: RetryPolicy | None = None,
) -> AnswerEvaluation:
    """Transcribe and score a spoken answer to an interview question.

    Args:
        question (str): The interviewer question being answered.
        audio (Attachment | None): The recorded answer.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    Returns:
        AnswerEvaluation: Score, feedback and the transcription (None when the
            model could not transcribe the audio).

    Raises:
        InputValidationError: If the question is empty or no audio was supplied.

    """
    _msg = "evaluate_audio_answer starting"
    log.debug(_msg)

    if not question or not question.strip():
        raise InputValidationError("There is no question to answer.")
    audio = _require_attachment(audio, "Please record an answer first.")

    request = build_audio_answer_evaluation_request(question, audio)
    result = await _generate(backend, request, retry_policy, "evaluate_audio_answer")
    evaluation = decode_evaluation(result.text, expect_transcription=True)

    _msg = f"evaluate_audio_answer returning (score={evaluation.score})"
    log.debug(_msg)
    return evaluation
