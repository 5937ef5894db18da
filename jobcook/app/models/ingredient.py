import logging
import uuid
from enum import Enum

from pydantic import BaseModel, Field, TypeAdapter

log = logging.getLogger(__name__)

STORAGE_KEY = "jobcook_ingredients"


class IngredientCategory(str, Enum):
    """Closed set of categories an ingredient can belong to."""

    SKILL = "skill"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    CERTIFICATION = "certification"
    PROJECT = "project"


# Checked in order; the first keyword found in an unrecognized category wins.
_CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], IngredientCategory], ...] = (
    (("intern", "work"), IngredientCategory.EXPERIENCE),
    (("school", "degree"), IngredientCategory.EDUCATION),
    (("project",), IngredientCategory.PROJECT),
)


def new_ingredient_id() -> str:
    """Return a fresh, unique ingredient identifier."""
    return uuid.uuid4().hex


def normalize_category(raw: str | None) -> IngredientCategory:
    """Coerce a reported category string into the closed category set.

    Args:
        raw (str | None): The category as reported by a user or the model.

    Returns:
        IngredientCategory: The matching category, or a keyword-based reassignment.

    Notes:
        1. The value is stripped and lower-cased before matching.
        2. An exact match against the enum values is returned as-is.
        3. Otherwise "intern"/"work" map to experience, "school"/"degree" to
           education and "project" to project.
        4. Anything else, including a missing value, becomes skill.

    """
    value = (raw or "").strip().lower()
    try:
        return IngredientCategory(value)
    except ValueError:
        pass

    for keywords, category in _CATEGORY_KEYWORDS:
        if any(keyword in value for keyword in keywords):
            return category

    if value:
        _msg = f"Unrecognized ingredient category '{raw}', defaulting to skill"
        log.debug(_msg)
    return IngredientCategory.SKILL


class Ingredient(BaseModel):
    """One atomic career fact.

    Attributes:
        id (str): Unique identifier, generated at creation.
        name (str): Display name.
        category (IngredientCategory): One of the closed category values.
        details (str | None): Optional free-text detail such as dates or level.

    """

    id: str = Field(default_factory=new_ingredient_id)
    name: str = Field(..., min_length=1)
    category: IngredientCategory = IngredientCategory.SKILL
    details: str | None = None


_INGREDIENT_LIST = TypeAdapter(list[Ingredient])


def dump_ingredients(ingredients: list[Ingredient]) -> str:
    """Serialize an ingredient list to the JSON array stored under STORAGE_KEY.

    Args:
        ingredients (list[Ingredient]): The ingredients to serialize.

    Returns:
        str: A JSON array of ingredient objects.

    Notes:
        1. Field names are `id`, `name`, `category` and `details`.
        2. No disk, network, or database access is performed.

    """
    return _INGREDIENT_LIST.dump_json(ingredients).decode("utf-8")


def load_ingredients(payload: str | bytes | None) -> list[Ingredient]:
    """Deserialize an ingredient list previously produced by `dump_ingredients`.

    Args:
        payload (str | bytes | None): The stored JSON array, or None when nothing is stored.

    Returns:
        list[Ingredient]: The restored ingredients, identifiers included.

    Raises:
        pydantic.ValidationError: If the payload is not a valid ingredient array.

    """
    if payload is None or not payload.strip():
        return []
    return _INGREDIENT_LIST.validate_json(payload)
