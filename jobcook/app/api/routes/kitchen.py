import logging

from fastapi import APIRouter, Depends, File, UploadFile

from jobcook.app.api.dependencies import (
    get_backend,
    get_career_session,
    get_retry_policy,
    read_attachment,
)
from jobcook.app.api.routes.route_models import (
    AnalysisResponse,
    CoverLetterResponse,
    JobDescriptionRequest,
    JobDescriptionResponse,
    NotificationsResponse,
    RefineRequest,
    RefineResponse,
    WorkflowRequest,
)
from jobcook.app.core.config import Settings, get_settings
from jobcook.app.core.sessions import CareerSession
from jobcook.app.llm.backend import GenerationBackend
from jobcook.app.llm.orchestration import (
    analyze_and_research,
    extract_job_description,
    generate_cover_letter,
    refine_text,
)
from jobcook.app.llm.retry import RetryPolicy
from jobcook.app.models.notification import Notification
from jobcook.app.models.refinement import EXPECTED_VARIATIONS

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/kitchen", tags=["kitchen"])


def _apply_job_description(session: CareerSession, request: WorkflowRequest | None) -> None:
    if request is not None and request.job_description is not None:
        session.set_job_description(request.job_description)


@router.post("/job-description", response_model=JobDescriptionResponse)
async def set_job_description(
    request: JobDescriptionRequest,
    session: CareerSession = Depends(get_career_session),
) -> JobDescriptionResponse:
    session.set_job_description(request.job_description)
    return JobDescriptionResponse(job_description=session.job_description)


@router.post("/job-description/scan", response_model=JobDescriptionResponse)
async def scan_job_description(
    file: UploadFile = File(...),
    session: CareerSession = Depends(get_career_session),
    backend: GenerationBackend = Depends(get_backend),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    settings: Settings = Depends(get_settings),
) -> JobDescriptionResponse:
    """
    Read a job posting from a photo or screenshot.

    Notes:
        1. The extracted text replaces the session's job description.
        2. Network access: the generation backend is called once, plus retries.

    """
    _msg = "scan_job_description starting"
    log.debug(_msg)

    attachment = await read_attachment(file, settings)
    text = await extract_job_description(attachment, backend=backend, retry_policy=retry_policy)
    session.set_job_description(text)

    _msg = "scan_job_description returning"
    log.debug(_msg)
    return JobDescriptionResponse(
        job_description=text,
        notifications=[Notification.success("Job description scanned!")],
    )


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    request: WorkflowRequest | None = None,
    session: CareerSession = Depends(get_career_session),
    backend: GenerationBackend = Depends(get_backend),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> AnalysisResponse:
    """
    Analyze the pantry against the job description, then research the company.

    Args:
        request (WorkflowRequest | None): Optional job description override.
        session (CareerSession): The caller's session.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy): The retry policy.

    Returns:
        AnalysisResponse: The analysis, its verdict, the company brief when one
            was produced, and one notification per outcome.

    Notes:
        1. The result is recorded on the session, replacing any earlier analysis.
        2. A research failure yields an extra error notification, not a failed request.
        3. Network access: one analysis call, then at most one research call, plus retries.

    """
    _msg = "analyze starting"
    log.debug(_msg)

    _apply_job_description(session, request)
    outcome = await analyze_and_research(
        session.ingredients,
        session.job_description,
        backend=backend,
        retry_policy=retry_policy,
    )
    session.record_analysis(outcome)

    _msg = "analyze returning"
    log.debug(_msg)
    return AnalysisResponse(
        analysis=outcome.analysis,
        verdict=outcome.analysis.verdict,
        company_research=outcome.company_research,
        notifications=outcome.notifications,
    )


@router.post("/cover-letter", response_model=CoverLetterResponse)
async def cover_letter(
    request: WorkflowRequest | None = None,
    session: CareerSession = Depends(get_career_session),
    backend: GenerationBackend = Depends(get_backend),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> CoverLetterResponse:
    _apply_job_description(session, request)
    letter = await generate_cover_letter(
        session.ingredients,
        session.job_description,
        backend=backend,
        retry_policy=retry_policy,
    )
    session.set_cover_letter(letter)
    return CoverLetterResponse(
        cover_letter=letter,
        notifications=[Notification.success("Cover letter is ready!")],
    )


@router.post("/refine", response_model=RefineResponse)
async def refine(
    request: RefineRequest,
    backend: GenerationBackend = Depends(get_backend),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> RefineResponse:
    """Return alternative phrasings for a piece of text.

    Notes:
        1. A variation count other than the expected one is passed through with an info notification.

    """
    result = await refine_text(
        request.text,
        request.context,
        backend=backend,
        retry_policy=retry_policy,
    )
    notifications = [Notification.success("Refinements ready!")]
    if not result.is_complete:
        notifications.append(
            Notification.info(
                f"Expected {EXPECTED_VARIATIONS} variations but received {len(result.variations)}."
            )
        )
    return RefineResponse(
        original=result.original,
        variations=result.variations,
        notifications=notifications,
    )


@router.delete("/recipe", response_model=NotificationsResponse)
async def clear_recipe(
    session: CareerSession = Depends(get_career_session),
) -> NotificationsResponse:
    session.clear_recipe()
    return NotificationsResponse(notifications=[Notification.info("Recipe book cleared.")])


@router.delete("/cover-letter", response_model=NotificationsResponse)
async def clear_cover_letter(
    session: CareerSession = Depends(get_career_session),
) -> NotificationsResponse:
    session.clear_cover_letter_station()
    return NotificationsResponse(notifications=[Notification.info("Station cleared.")])
