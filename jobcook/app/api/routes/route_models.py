import logging

from pydantic import BaseModel, Field

from jobcook.app.llm.interview import InterviewState
from jobcook.app.models.analysis import CompanyResearch, MatchAnalysis
from jobcook.app.models.ingredient import STORAGE_KEY, Ingredient, IngredientCategory
from jobcook.app.models.interview import AnswerEvaluation, InterviewTurn
from jobcook.app.models.notification import Notification

log = logging.getLogger(__name__)


# Request models
class IngredientCreateRequest(BaseModel):
    """Request model for adding an ingredient by hand.

    Attributes:
        name (str): Display name of the ingredient.
        category (IngredientCategory): One of the closed category values.
        details (str | None): Optional free-text detail.

    """

    name: str
    category: IngredientCategory = IngredientCategory.SKILL
    details: str | None = None


class IngredientUpdateRequest(BaseModel):
    """Request model for editing an ingredient. None leaves a field unchanged."""

    name: str | None = None
    category: IngredientCategory | None = None
    details: str | None = None


class IngredientLoadRequest(BaseModel):
    """Request model for restoring a persisted ingredient list.

    Attributes:
        payload (str): The JSON array previously returned by the export endpoint.

    """

    payload: str


class JobDescriptionRequest(BaseModel):
    job_description: str


class WorkflowRequest(BaseModel):
    """Request model for workflows that use the session's job description.

    Attributes:
        job_description (str | None): When provided, replaces the session's job description first.

    """

    job_description: str | None = None


class RefineRequest(BaseModel):
    """Request model for text refinement.

    Attributes:
        text (str): The text to rephrase.
        context (str | None): Where the text is used, e.g. "cover letter opening".

    """

    text: str
    context: str | None = None


class TextAnswerRequest(BaseModel):
    answer: str


# Response models
class NotificationsResponse(BaseModel):
    notifications: list[Notification] = Field(default_factory=list)


class IngredientResponse(NotificationsResponse):
    ingredient: Ingredient


class IngredientListResponse(NotificationsResponse):
    ingredients: list[Ingredient]


class IngredientExportResponse(BaseModel):
    """Response model carrying the persisted form of the ingredient list.

    Attributes:
        storage_key (str): The fixed key collaborators store the payload under.
        payload (str): The JSON array of ingredients.

    """

    storage_key: str = STORAGE_KEY
    payload: str


class JobDescriptionResponse(NotificationsResponse):
    job_description: str


class AnalysisResponse(NotificationsResponse):
    """Response model for the match analysis workflow.

    Attributes:
        analysis (MatchAnalysis): The match analysis.
        verdict (str): Short label for the score band.
        company_research (CompanyResearch | None): The company brief, when one was produced.

    """

    analysis: MatchAnalysis
    verdict: str
    company_research: CompanyResearch | None = None


class CoverLetterResponse(NotificationsResponse):
    cover_letter: str


class RefineResponse(NotificationsResponse):
    original: str
    variations: list[str]


class InterviewResponse(NotificationsResponse):
    """Response model describing the interview after an action.

    Attributes:
        state (InterviewState): The state machine's current state.
        turns (list[InterviewTurn]): The full history, in order.
        evaluation (AnswerEvaluation | None): The evaluation produced by the action, if any.

    """

    state: InterviewState
    turns: list[InterviewTurn]
    evaluation: AnswerEvaluation | None = None


class ErrorResponse(BaseModel):
    detail: str
    notification: Notification
