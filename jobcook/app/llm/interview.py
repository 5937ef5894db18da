"""
Interview state machine.

    Idle --start--> AwaitingQuestion --question--> QuestionPosted
    QuestionPosted --submit answer--> AwaitingAnswer --evaluation--> Evaluating
    Evaluating --next question requested--> AwaitingQuestion --question--> QuestionPosted
    any state --restart--> Idle

`InterviewSession` is the only writer of its `InterviewHistory`. Every
mutation happens in a synchronous section between two awaits, after
checking that no restart happened while the call was in flight, so turns
are appended or amended atomically and results that arrive after a
restart are discarded.
"""

import logging
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel

from jobcook.app.core.errors import InputValidationError
from jobcook.app.llm.backend import Attachment, GenerationBackend
from jobcook.app.llm.orchestration import (
    evaluate_audio_answer,
    evaluate_text_answer,
    get_interview_question,
)
from jobcook.app.llm.retry import RetryPolicy
from jobcook.app.models.ingredient import Ingredient
from jobcook.app.models.interview import (
    AUDIO_ANSWER_PLACEHOLDER,
    TRANSCRIPTION_FAILED,
    AnswerEvaluation,
    InterviewHistory,
    InterviewRole,
    InterviewTurn,
)

log = logging.getLogger(__name__)


class InterviewState(str, Enum):
    IDLE = "idle"
    AWAITING_QUESTION = "awaiting_question"
    QUESTION_POSTED = "question_posted"
    AWAITING_ANSWER = "awaiting_answer"
    EVALUATING = "evaluating"


class AnswerOutcome(BaseModel):
    """What one answer produced.

    Attributes:
        candidate_turn (InterviewTurn): The amended candidate turn.
        evaluation (AnswerEvaluation): The evaluation attached to it.
        next_question (InterviewTurn): The interviewer turn that followed.

    """

    candidate_turn: InterviewTurn
    evaluation: AnswerEvaluation
    next_question: InterviewTurn


class InterviewDiscarded(Exception):
    """Raised internally when a restart invalidated an in-flight step."""


class InterviewSession:
    """A single mock interview and its history.

    Args:
        backend (GenerationBackend): The generation backend.
        retry_policy (RetryPolicy | None): Retry policy; the defaults when None.

    """

    def __init__(self, backend: GenerationBackend, retry_policy: RetryPolicy | None = None):
        self.backend = backend
        self.retry_policy = retry_policy
        self.history = InterviewHistory()
        self.state = InterviewState.IDLE
        self._ingredients: tuple[Ingredient, ...] = ()
        self._job_description = ""
        self._epoch = 0
        self._fetching_epoch: int | None = None

    @property
    def turns(self) -> tuple[InterviewTurn, ...]:
        return self.history.turns

    def restart(self) -> None:
        """Atomically discard the history and return to Idle, from any state."""
        self._epoch += 1
        self.history.reset()
        self.state = InterviewState.IDLE
        _msg = f"Interview restarted (epoch {self._epoch})"
        log.info(_msg)

    def _check_current(self, epoch: int) -> None:
        if epoch != self._epoch:
            _msg = "Discarding interview result that arrived after a restart"
            log.info(_msg)
            raise InterviewDiscarded()

    def _require_state(self, *allowed: InterviewState) -> None:
        if self.state not in allowed:
            raise InputValidationError(
                f"This action is not available while the interview is {self.state.value}."
            )

    async def start(
        self,
        ingredients: Sequence[Ingredient],
        job_description: str,
    ) -> InterviewTurn | None:
        """Clear the history and post the opening question.

        Args:
            ingredients (Sequence[Ingredient]): The candidate's ingredients.
            job_description (str): The job posting text.

        Returns:
            InterviewTurn | None: The opening interviewer turn, or None when a
                restart happened while the question was being fetched.

        Raises:
            InputValidationError: If there are no ingredients or no job description.
            KitchenError: If fetching the question fails; the machine is left Idle.

        """
        if not job_description or not job_description.strip() or not ingredients:
            raise InputValidationError("Please add ingredients and a job description first!")

        self.restart()
        self._ingredients = tuple(ingredients)
        self._job_description = job_description
        self.state = InterviewState.AWAITING_QUESTION

        epoch = self._epoch
        try:
            return await self._post_next_question(epoch)
        except InterviewDiscarded:
            return None
        except Exception:
            if epoch == self._epoch:
                self.state = InterviewState.IDLE
            raise

    async def fetch_next_question(self) -> InterviewTurn | None:
        """Retry fetching the next question after a failed fetch.

        Raises:
            InputValidationError: If the machine is not awaiting a question, or
                a question is already being fetched.

        """
        self._require_state(InterviewState.AWAITING_QUESTION)
        if self._fetching_epoch == self._epoch:
            raise InputValidationError("The next question is already on its way.")
        epoch = self._epoch
        try:
            return await self._post_next_question(epoch)
        except InterviewDiscarded:
            return None

    async def _post_next_question(self, epoch: int) -> InterviewTurn:
        self._fetching_epoch = epoch
        try:
            question = await get_interview_question(
                self._ingredients,
                self._job_description,
                self.history.turns,
                backend=self.backend,
                retry_policy=self.retry_policy,
            )
        finally:
            if self._fetching_epoch == epoch:
                self._fetching_epoch = None
        self._check_current(epoch)
        turn = self.history.append(
            InterviewTurn(role=InterviewRole.INTERVIEWER, content=question)
        )
        self.state = InterviewState.QUESTION_POSTED
        return turn

    async def submit_text_answer(self, answer: str) -> AnswerOutcome | None:
        """Answer the current question in writing.

        Args:
            answer (str): The candidate's answer.

        Returns:
            AnswerOutcome | None: The evaluated turn and the next question, or
                None when a restart discarded the step.

        Raises:
            InputValidationError: If no question is posted or the answer is empty.

        """
        if not answer or not answer.strip():
            raise InputValidationError("Answer cannot be empty.")
        return await self._submit(provisional_content=answer.strip(), answer=answer, audio=None)

    async def submit_audio_answer(self, audio: Attachment) -> AnswerOutcome | None:
        """Answer the current question with a recording.

        Args:
            audio (Attachment): The recorded answer.

        Returns:
            AnswerOutcome | None: The evaluated turn, whose content is the
                transcription, and the next question; None when a restart
                discarded the step.

        Raises:
            InputValidationError: If no question is posted or the audio is empty.

        """
        if audio is None or not audio.data:
            raise InputValidationError("Please record an answer first.")
        return await self._submit(provisional_content=AUDIO_ANSWER_PLACEHOLDER, answer=None, audio=audio)

    async def _submit(
        self,
        provisional_content: str,
        answer: str | None,
        audio: Attachment | None,
    ) -> AnswerOutcome | None:
        """Run one answer cycle.

        Notes:
            1. Requires QuestionPosted; a second submission while one is
               outstanding is rejected.
            2. Appends the provisional candidate turn immediately and moves to
               AwaitingAnswer.
            3. On evaluation failure the provisional turn stays in the history and
               the machine returns to QuestionPosted so the answer can be re-submitted.
            4. On success moves to Evaluating, amends the candidate turn in place,
               then moves to AwaitingQuestion and fetches the next question with
               the full updated history.
            5. If that fetch fails the machine stays in AwaitingQuestion;
               `fetch_next_question` retries it.

        """
        self._require_state(InterviewState.QUESTION_POSTED)
        question_turn = self.history.last_question()
        if question_turn is None:
            raise InputValidationError("There is no question to answer.")

        epoch = self._epoch
        candidate_turn = self.history.append(
            InterviewTurn(role=InterviewRole.CANDIDATE, content=provisional_content)
        )
        self.state = InterviewState.AWAITING_ANSWER

        try:
            if audio is not None:
                evaluation = await evaluate_audio_answer(
                    question_turn.content,
                    audio,
                    backend=self.backend,
                    retry_policy=self.retry_policy,
                )
            else:
                evaluation = await evaluate_text_answer(
                    question_turn.content,
                    answer,
                    backend=self.backend,
                    retry_policy=self.retry_policy,
                )
        except Exception:
            if epoch == self._epoch:
                self.state = InterviewState.QUESTION_POSTED
            raise

        try:
            self._check_current(epoch)
        except InterviewDiscarded:
            return None

        self.state = InterviewState.EVALUATING
        content = None
        if audio is not None:
            content = evaluation.transcription or TRANSCRIPTION_FAILED
        amended = self.history.amend(
            candidate_turn.id,
            content=content,
            feedback=evaluation.feedback,
            score=evaluation.score,
        )
        self.state = InterviewState.AWAITING_QUESTION

        try:
            next_question = await self._post_next_question(epoch)
        except InterviewDiscarded:
            return None

        return AnswerOutcome(
            candidate_turn=amended,
            evaluation=evaluation,
            next_question=next_question,
        )
