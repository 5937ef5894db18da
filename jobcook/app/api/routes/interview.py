import logging

from fastapi import APIRouter, Depends, File, UploadFile

from jobcook.app.api.dependencies import get_career_session, read_attachment
from jobcook.app.api.routes.route_models import (
    InterviewResponse,
    TextAnswerRequest,
    WorkflowRequest,
)
from jobcook.app.core.config import Settings, get_settings
from jobcook.app.core.sessions import CareerSession
from jobcook.app.llm.interview import AnswerOutcome, InterviewSession
from jobcook.app.models.notification import Notification

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview", tags=["interview"])

DISCARDED_MESSAGE = "The interview was restarted before this step finished."


def _interview_response(
    interview: InterviewSession,
    outcome: AnswerOutcome | None = None,
    notifications: list[Notification] | None = None,
) -> InterviewResponse:
    return InterviewResponse(
        state=interview.state,
        turns=list(interview.turns),
        evaluation=outcome.evaluation if outcome is not None else None,
        notifications=notifications or [],
    )


def _answer_response(interview: InterviewSession, outcome: AnswerOutcome | None) -> InterviewResponse:
    if outcome is None:
        return _interview_response(interview, notifications=[Notification.info(DISCARDED_MESSAGE)])
    return _interview_response(
        interview,
        outcome,
        notifications=[Notification.success(f"Answer scored {outcome.evaluation.score}/10.")],
    )


@router.get("", response_model=InterviewResponse)
async def get_interview(
    session: CareerSession = Depends(get_career_session),
) -> InterviewResponse:
    return _interview_response(session.interview)


@router.post("/start", response_model=InterviewResponse)
async def start_interview(
    request: WorkflowRequest | None = None,
    session: CareerSession = Depends(get_career_session),
) -> InterviewResponse:
    """
    Start a fresh mock interview and post the opening question.

    Notes:
        1. Requires ingredients and a job description in the session.
        2. Any previous history is discarded.
        3. Network access: one question call, plus retries.

    """
    _msg = "start_interview starting"
    log.debug(_msg)

    if request is not None and request.job_description is not None:
        session.set_job_description(request.job_description)

    question = await session.interview.start(session.ingredients, session.job_description)
    if question is None:
        return _interview_response(
            session.interview, notifications=[Notification.info(DISCARDED_MESSAGE)]
        )

    _msg = "start_interview returning"
    log.debug(_msg)
    return _interview_response(session.interview)


@router.post("/answer", response_model=InterviewResponse)
async def answer_text(
    request: TextAnswerRequest,
    session: CareerSession = Depends(get_career_session),
) -> InterviewResponse:
    outcome = await session.interview.submit_text_answer(request.answer)
    return _answer_response(session.interview, outcome)


@router.post("/answer/audio", response_model=InterviewResponse)
async def answer_audio(
    file: UploadFile = File(...),
    session: CareerSession = Depends(get_career_session),
    settings: Settings = Depends(get_settings),
) -> InterviewResponse:
    """
    Answer the current question with a recording.

    Notes:
        1. The candidate turn shows a placeholder until the transcription arrives.
        2. Network access: one evaluation call and one question call, plus retries.

    """
    attachment = await read_attachment(file, settings)
    outcome = await session.interview.submit_audio_answer(attachment)
    return _answer_response(session.interview, outcome)


@router.post("/next-question", response_model=InterviewResponse)
async def next_question(
    session: CareerSession = Depends(get_career_session),
) -> InterviewResponse:
    """Retry fetching the next question after a failed fetch."""
    await session.interview.fetch_next_question()
    return _interview_response(session.interview)


@router.post("/restart", response_model=InterviewResponse)
async def restart_interview(
    session: CareerSession = Depends(get_career_session),
) -> InterviewResponse:
    session.interview.restart()
    return _interview_response(
        session.interview, notifications=[Notification.info("Interview restarted.")]
    )
