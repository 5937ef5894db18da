import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import ValidationError

from jobcook.app.api.dependencies import (
    get_backend,
    get_career_session,
    get_retry_policy,
    read_attachment,
)
from jobcook.app.api.routes.route_models import (
    IngredientCreateRequest,
    IngredientExportResponse,
    IngredientListResponse,
    IngredientLoadRequest,
    IngredientResponse,
    IngredientUpdateRequest,
)
from jobcook.app.core.config import Settings, get_settings
from jobcook.app.core.errors import InputValidationError
from jobcook.app.core.sessions import CareerSession
from jobcook.app.llm.backend import GenerationBackend
from jobcook.app.llm.orchestration import parse_resume
from jobcook.app.llm.retry import RetryPolicy
from jobcook.app.models.ingredient import dump_ingredients, load_ingredients
from jobcook.app.models.notification import Notification

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])

EMPTY_RESUME_MESSAGE = "Couldn't find any ingredients in that file. Is it empty?"


@router.get("", response_model=IngredientListResponse)
async def list_ingredients(
    session: CareerSession = Depends(get_career_session),
) -> IngredientListResponse:
    return IngredientListResponse(ingredients=session.ingredients)


@router.post("", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
async def add_ingredient(
    request: IngredientCreateRequest,
    session: CareerSession = Depends(get_career_session),
) -> IngredientResponse:
    ingredient = session.add_ingredient(
        name=request.name,
        category=request.category,
        details=request.details,
    )
    return IngredientResponse(
        ingredient=ingredient,
        notifications=[Notification.success(f"Added {ingredient.name} to the pantry.")],
    )


@router.put("/{ingredient_id}", response_model=IngredientResponse)
async def update_ingredient(
    ingredient_id: str,
    request: IngredientUpdateRequest,
    session: CareerSession = Depends(get_career_session),
) -> IngredientResponse:
    ingredient = session.update_ingredient(
        ingredient_id,
        name=request.name,
        category=request.category,
        details=request.details,
    )
    return IngredientResponse(
        ingredient=ingredient,
        notifications=[Notification.success("Ingredient updated.")],
    )


@router.delete("/{ingredient_id}", response_model=IngredientListResponse)
async def remove_ingredient(
    ingredient_id: str,
    session: CareerSession = Depends(get_career_session),
) -> IngredientListResponse:
    removed = session.remove_ingredient(ingredient_id)
    return IngredientListResponse(
        ingredients=session.ingredients,
        notifications=[Notification.info(f"Removed {removed.name} from the pantry.")],
    )


@router.delete("", response_model=IngredientListResponse)
async def clear_ingredients(
    session: CareerSession = Depends(get_career_session),
) -> IngredientListResponse:
    session.clear_ingredients()
    return IngredientListResponse(
        ingredients=[],
        notifications=[Notification.info("Pantry cleared.")],
    )


@router.post("/import-resume", response_model=IngredientListResponse)
async def import_resume(
    file: UploadFile = File(...),
    session: CareerSession = Depends(get_career_session),
    backend: GenerationBackend = Depends(get_backend),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    settings: Settings = Depends(get_settings),
) -> IngredientListResponse:
    """
    Extract ingredients from an uploaded resume and add them to the pantry.

    Args:
        file (UploadFile): The resume document.
        session (CareerSession): The caller's session.
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy): The retry policy.
        settings (Settings): Application settings.

    Returns:
        IngredientListResponse: The full ingredient list and one notification.

    Notes:
        1. Reads the upload, enforcing the size limit.
        2. Calls `parse_resume` and appends the result to the session.
        3. An empty result is reported with an error notification and leaves the pantry unchanged.
        4. Network access: the generation backend is called once, plus retries.

    """
    _msg = "import_resume starting"
    log.debug(_msg)

    attachment = await read_attachment(file, settings)
    ingredients = await parse_resume(attachment, backend=backend, retry_policy=retry_policy)
    added = session.extend_ingredients(ingredients)

    if added:
        notification = Notification.success(f"Successfully stocked {added} ingredients!")
    else:
        notification = Notification.error(EMPTY_RESUME_MESSAGE)

    _msg = f"import_resume returning ({added} added)"
    log.debug(_msg)
    return IngredientListResponse(ingredients=session.ingredients, notifications=[notification])


@router.get("/export", response_model=IngredientExportResponse)
async def export_ingredients(
    session: CareerSession = Depends(get_career_session),
) -> IngredientExportResponse:
    return IngredientExportResponse(payload=dump_ingredients(session.ingredients))


@router.post("/load", response_model=IngredientListResponse)
async def load_persisted_ingredients(
    request: IngredientLoadRequest,
    session: CareerSession = Depends(get_career_session),
) -> IngredientListResponse:
    """Replace the pantry with a previously exported payload.

    Raises:
        InputValidationError: If the payload is not a valid ingredient list.

    """
    try:
        ingredients = load_ingredients(request.payload)
    except ValidationError as e:
        _msg = f"Rejected persisted ingredients: {e}"
        log.warning(_msg)
        raise InputValidationError("The saved ingredients could not be read.") from e

    session.replace_ingredients(ingredients)
    return IngredientListResponse(
        ingredients=session.ingredients,
        notifications=[Notification.info(f"Loaded {len(ingredients)} ingredients.")],
    )
