"""
Session aggregates and their in-memory registry.

A `CareerSession` owns one user's ingredients, the job posting being worked
on, the latest analysis and cover letter, and the mock interview. All
mutations go through its named methods.
"""

import logging
import uuid
from collections.abc import Iterable

from jobcook.app.core.errors import InputValidationError, NotFoundError
from jobcook.app.llm.backend import GenerationBackend
from jobcook.app.llm.interview import InterviewSession
from jobcook.app.llm.retry import RetryPolicy
from jobcook.app.models.analysis import AnalysisOutcome, CompanyResearch, MatchAnalysis
from jobcook.app.models.ingredient import Ingredient, IngredientCategory

log = logging.getLogger(__name__)


class CareerSession:
    """The single-writer aggregate for one client session.

    Args:
        session_id (str): The client session identifier.
        backend (GenerationBackend): Backend used by the session's interview.
        retry_policy (RetryPolicy | None): Retry policy for the interview.

    """

    def __init__(
        self,
        session_id: str,
        backend: GenerationBackend,
        retry_policy: RetryPolicy | None = None,
    ):
        self.session_id = session_id
        self._ingredients: list[Ingredient] = []
        self.job_description = ""
        self.company_name = ""
        self.analysis: MatchAnalysis | None = None
        self.company_research: CompanyResearch | None = None
        self.cover_letter: str | None = None
        self.interview = InterviewSession(backend=backend, retry_policy=retry_policy)

    # Ingredients

    @property
    def ingredients(self) -> list[Ingredient]:
        return list(self._ingredients)

    def _index_of(self, ingredient_id: str) -> int:
        for index, ingredient in enumerate(self._ingredients):
            if ingredient.id == ingredient_id:
                return index
        raise NotFoundError(f"Ingredient '{ingredient_id}' not found.")

    def add_ingredient(
        self,
        name: str,
        category: IngredientCategory = IngredientCategory.SKILL,
        details: str | None = None,
    ) -> Ingredient:
        """Create an ingredient from manual entry and append it.

        Raises:
            InputValidationError: If the name is empty.

        """
        if not name or not name.strip():
            raise InputValidationError("Ingredient name cannot be empty.")
        ingredient = Ingredient(
            name=name.strip(),
            category=category,
            details=(details or "").strip() or None,
        )
        self._ingredients.append(ingredient)
        return ingredient

    def update_ingredient(
        self,
        ingredient_id: str,
        *,
        name: str | None = None,
        category: IngredientCategory | None = None,
        details: str | None = None,
    ) -> Ingredient:
        """Edit an ingredient in place, keeping its identifier and position."""
        index = self._index_of(ingredient_id)
        current = self._ingredients[index]
        if name is not None and not name.strip():
            raise InputValidationError("Ingredient name cannot be empty.")
        updated = current.model_copy(
            update={
                "name": name.strip() if name is not None else current.name,
                "category": category if category is not None else current.category,
                "details": (details.strip() or None) if details is not None else current.details,
            }
        )
        self._ingredients[index] = updated
        return updated

    def remove_ingredient(self, ingredient_id: str) -> Ingredient:
        index = self._index_of(ingredient_id)
        return self._ingredients.pop(index)

    def extend_ingredients(self, ingredients: Iterable[Ingredient]) -> int:
        """Append decoded ingredients, returning how many were added."""
        added = list(ingredients)
        self._ingredients.extend(added)
        return len(added)

    def replace_ingredients(self, ingredients: Iterable[Ingredient]) -> None:
        self._ingredients = list(ingredients)

    def clear_ingredients(self) -> None:
        self._ingredients = []

    # Job posting, analysis and cover letter

    def set_job_description(self, text: str) -> None:
        self.job_description = text or ""

    def record_analysis(self, outcome: AnalysisOutcome) -> None:
        self.analysis = outcome.analysis
        self.company_research = outcome.company_research
        self.company_name = outcome.analysis.company_name

    def set_cover_letter(self, letter: str) -> None:
        self.cover_letter = letter

    def clear_recipe(self) -> None:
        """Forget the job posting, the company and the analysis."""
        self.job_description = ""
        self.company_name = ""
        self.analysis = None
        self.company_research = None

    def clear_cover_letter_station(self) -> None:
        """Forget the job posting and the generated cover letter."""
        self.job_description = ""
        self.cover_letter = None


class SessionRegistry:
    """In-memory map from session identifier to CareerSession."""

    def __init__(self) -> None:
        self._sessions: dict[str, CareerSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get_or_create(
        self,
        session_id: str | None,
        backend: GenerationBackend,
        retry_policy: RetryPolicy | None = None,
    ) -> CareerSession:
        """Return the session for `session_id`, creating it when unknown or missing."""
        if session_id and session_id in self._sessions:
            return self._sessions[session_id]

        new_id = session_id or uuid.uuid4().hex
        session = CareerSession(new_id, backend=backend, retry_policy=retry_policy)
        self._sessions[new_id] = session
        _msg = f"Created session {new_id}"
        log.info(_msg)
        return session

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
