import logging
import uuid
from enum import Enum

from pydantic import BaseModel, Field

log = logging.getLogger(__name__)

AUDIO_ANSWER_PLACEHOLDER = "(Audio Answer Submitted)"
TRANSCRIPTION_FAILED = "(Audio transcription failed)"


class InterviewRole(str, Enum):
    INTERVIEWER = "interviewer"
    CANDIDATE = "candidate"


class InterviewTurn(BaseModel):
    """One message in the interview history.

    Only candidate turns ever carry `feedback` and `score`, and only once the
    answer has been evaluated.

    Attributes:
        id (str): Unique identifier.
        role (InterviewRole): Who spoke.
        content (str): The question, the answer, or a provisional placeholder.
        feedback (str | None): Evaluation feedback for a candidate answer.
        score (int | None): Evaluation score from 1 to 10 for a candidate answer.

    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: InterviewRole
    content: str
    feedback: str | None = None
    score: int | None = Field(default=None, ge=1, le=10)

    @property
    def is_evaluated(self) -> bool:
        return self.score is not None


class AnswerEvaluation(BaseModel):
    """The evaluation of one candidate answer.

    Attributes:
        score (int): Score from 1 to 10.
        feedback (str): Constructive feedback text.
        transcription (str | None): What the candidate said, for audio answers.

    """

    score: int = Field(..., ge=1, le=10)
    feedback: str
    transcription: str | None = None


class InterviewHistory:
    """Append-only, ordered interview history.

    Turns are only ever appended, amended in place to attach evaluation
    results, or discarded all at once by `reset`.
    """

    def __init__(self) -> None:
        self._turns: list[InterviewTurn] = []

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(tuple(self._turns))

    @property
    def turns(self) -> tuple[InterviewTurn, ...]:
        return tuple(self._turns)

    @property
    def last(self) -> InterviewTurn | None:
        return self._turns[-1] if self._turns else None

    def last_question(self) -> InterviewTurn | None:
        """Return the most recent interviewer turn, if any."""
        for turn in reversed(self._turns):
            if turn.role == InterviewRole.INTERVIEWER:
                return turn
        return None

    def append(self, turn: InterviewTurn) -> InterviewTurn:
        """Append a turn to the end of the history.

        Args:
            turn (InterviewTurn): The new turn.

        Returns:
            InterviewTurn: The appended turn.

        Raises:
            ValueError: If a turn with the same identifier is already present,
                or an interviewer turn carries evaluation fields.

        """
        if any(existing.id == turn.id for existing in self._turns):
            raise ValueError(f"Turn '{turn.id}' is already in the history.")
        if turn.role == InterviewRole.INTERVIEWER and (
            turn.feedback is not None or turn.score is not None
        ):
            raise ValueError("Interviewer turns cannot carry feedback or a score.")
        self._turns.append(turn)
        return turn

    def amend(
        self,
        turn_id: str,
        *,
        content: str | None = None,
        feedback: str | None = None,
        score: int | None = None,
    ) -> InterviewTurn:
        """Replace a candidate turn with a copy carrying evaluation results.

        Args:
            turn_id (str): Identifier of the candidate turn to amend.
            content (str | None): New content, e.g. a transcription replacing a placeholder.
            feedback (str | None): Feedback to attach.
            score (int | None): Score to attach.

        Returns:
            InterviewTurn: The amended turn, now stored at the same position.

        Raises:
            KeyError: If no turn has the given identifier.
            ValueError: If the turn is not a candidate turn.

        Notes:
            1. The amended turn is built completely before it replaces the old one,
               so the history never holds a partially written turn.
            2. Fields passed as None are left unchanged.

        """
        for index, turn in enumerate(self._turns):
            if turn.id != turn_id:
                continue
            if turn.role != InterviewRole.CANDIDATE:
                raise ValueError("Only candidate turns can be amended.")
            update = {
                key: value
                for key, value in (
                    ("content", content),
                    ("feedback", feedback),
                    ("score", score),
                )
                if value is not None
            }
            amended = InterviewTurn.model_validate({**turn.model_dump(), **update})
            self._turns[index] = amended
            return amended
        raise KeyError(turn_id)

    def reset(self) -> None:
        """Discard every turn at once."""
        self._turns = []
