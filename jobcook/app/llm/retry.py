"""
Retry envelope around single generation calls.

Every failure raised by a generation call is first normalized into an
`ErrorShape`, then classified, then either retried (overloaded backend) or
re-raised as one of the normalized errors in `jobcook.app.core.errors`.

Normalization priority, applied uniformly to any exception shape:
    numeric status: `status_code`, `status` (int), `code` (int), nested
        `error.code`, `details.error.code`, `response.status_code`, `response.status`.
    textual status: `status` (str), `code` (str), nested `error.status`,
        `details.error.status`.
    message: `message`, nested `error.message`, `details.error.message`, `str(exc)`.

Classification order: auth, safety, overloaded, other.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from jobcook.app.core.config import Settings
from jobcook.app.core.errors import (
    AuthError,
    BackendError,
    GENERIC_MESSAGE,
    KitchenError,
    OverloadedError,
    RetryExhaustedError,
    SafetyBlockedError,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

MAX_PASSTHROUGH_MESSAGE_LENGTH = 100

_MISSING = object()


class FailureClass(str, Enum):
    AUTH = "auth"
    SAFETY = "safety"
    OVERLOADED = "overloaded"
    OTHER = "other"


@dataclass(frozen=True)
class ErrorShape:
    """The uniform view of a backend failure used for classification."""

    status_code: int | None
    status: str | None
    message: str


@dataclass(frozen=True)
class RetryPolicy:
    """How many times and how slowly to retry an overloaded backend.

    Attributes:
        max_retries (int): Retries allowed after the first failed call.
        initial_delay_ms (float): Delay before the first retry.
        backoff_factor (float): Multiplier applied to the delay after each retry.

    """

    max_retries: int = 5
    initial_delay_ms: float = 3000
    backoff_factor: float = 1.5

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_retries=settings.retry_max_attempts,
            initial_delay_ms=settings.retry_initial_delay_ms,
            backoff_factor=settings.retry_backoff_factor,
        )

    def delays_ms(self) -> list[float]:
        """The full schedule of delays, in order."""
        delays = []
        delay = self.initial_delay_ms
        for _ in range(self.max_retries):
            delays.append(delay)
            delay *= self.backoff_factor
        return delays


@dataclass(frozen=True)
class RetryEvent:
    """Emitted before each retry, for diagnostics.

    Attributes:
        label (str): Name of the operation being retried.
        attempt (int): The retry number, starting at 1.
        delay_ms (float): How long the envelope waits before retrying.
        attempts_left (int): Retries still available after this one.
        message (str): The normalized failure message that triggered the retry.

    """

    label: str
    attempt: int
    delay_ms: float
    attempts_left: int
    message: str


@dataclass
class _RetryState:
    attempts_remaining: int
    current_delay_ms: float
    calls: int = 0


def _lookup(source: Any, *path: str) -> Any:
    """Follow a path of attribute names or mapping keys, returning None when absent."""
    current = source
    for name in path:
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(name)
        else:
            current = getattr(current, name, None)
    return current


def _first_int(*candidates: Any) -> int | None:
    for value in candidates:
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
    return None


def _first_str(*candidates: Any) -> str | None:
    for value in candidates:
        if isinstance(value, str) and value and not value.isdigit():
            return value
    return None


def normalize_error(exc: BaseException) -> ErrorShape:
    """Reduce any backend exception to an ErrorShape.

    Args:
        exc (BaseException): The raised failure, in any of the shapes backends use.

    Returns:
        ErrorShape: Numeric status, textual status and message, in the priority
            order documented at module level.

    """
    status_attr = getattr(exc, "status", None)
    code_attr = getattr(exc, "code", None)

    status_code = _first_int(
        getattr(exc, "status_code", None),
        status_attr,
        code_attr,
        _lookup(exc, "error", "code"),
        _lookup(exc, "details", "error", "code"),
        _lookup(exc, "response", "status_code"),
        _lookup(exc, "response", "status"),
    )
    status = _first_str(
        status_attr,
        code_attr,
        _lookup(exc, "error", "status"),
        _lookup(exc, "details", "error", "status"),
    )
    message = _first_str(
        getattr(exc, "message", None),
        _lookup(exc, "error", "message"),
        _lookup(exc, "details", "error", "message"),
    )
    if message is None:
        message = str(exc) or repr(exc)

    return ErrorShape(status_code=status_code, status=status, message=message)


def classify_error(shape: ErrorShape) -> FailureClass:
    """Decide how a normalized failure is handled.

    Args:
        shape (ErrorShape): The normalized failure.

    Returns:
        FailureClass: AUTH for 400/403 or an API-key message, SAFETY for a
            safety-filter message, OVERLOADED for 503/UNAVAILABLE or an
            overload message, OTHER for everything else.

    """
    message = shape.message.lower()

    if shape.status_code in (400, 403) or "api key" in message or "api_key" in message:
        return FailureClass.AUTH
    if "safety" in message:
        return FailureClass.SAFETY
    if (
        shape.status_code == 503
        or (shape.status or "").upper() == "UNAVAILABLE"
        or "overloaded" in message
        or "503" in message
    ):
        return FailureClass.OVERLOADED
    return FailureClass.OTHER


def to_kitchen_error(failure: FailureClass, shape: ErrorShape) -> KitchenError:
    """Build the normalized error for a classified failure."""
    if failure == FailureClass.AUTH:
        return AuthError()
    if failure == FailureClass.SAFETY:
        return SafetyBlockedError()
    if failure == FailureClass.OVERLOADED:
        return OverloadedError()
    message = shape.message.strip()
    if not message or len(message) >= MAX_PASSTHROUGH_MESSAGE_LENGTH:
        return BackendError(GENERIC_MESSAGE)
    return BackendError(message)


def _classify(exc: BaseException) -> tuple[FailureClass, KitchenError]:
    if isinstance(exc, OverloadedError):
        return FailureClass.OVERLOADED, exc
    if isinstance(exc, KitchenError):
        return FailureClass.OTHER, exc
    shape = normalize_error(exc)
    failure = classify_error(shape)
    return failure, to_kitchen_error(failure, shape)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    label: str = "generation",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_retry: Callable[[RetryEvent], None] | None = None,
) -> T:
    """Run a zero-argument async operation under the retry policy.

    Args:
        operation (Callable[[], Awaitable[T]]): The call to issue. It is invoked
            again, unchanged, for each retry.
        policy (RetryPolicy | None): Retry budget and backoff; the defaults when None.
        label (str): Operation name used in logs and retry events.
        sleep (Callable[[float], Awaitable[Any]]): Awaitable delay, in seconds.
        on_retry (Callable[[RetryEvent], None] | None): Observer called before each retry.

    Returns:
        T: The first successful result.

    Raises:
        AuthError: On 400/403 or an API-key failure. Never retried.
        SafetyBlockedError: On a safety-filter failure. Never retried.
        RetryExhaustedError: If the backend stayed overloaded for the whole budget.
        BackendError: On any other failure.

    Notes:
        1. Failures are normalized and classified; only overloaded ones are retried.
        2. The delay starts at `initial_delay_ms` and is multiplied by
           `backoff_factor` after every retry.
        3. The loop is iterative; the only state is the local retry counter and delay.
        4. Normalized errors already raised by the operation are re-raised as-is,
           except OverloadedError which is retried like any overloaded failure.

    """
    policy = policy or RetryPolicy()
    state = _RetryState(
        attempts_remaining=policy.max_retries,
        current_delay_ms=policy.initial_delay_ms,
    )

    while True:
        state.calls += 1
        try:
            return await operation()
        except Exception as exc:
            failure, error = _classify(exc)

            if failure != FailureClass.OVERLOADED:
                _msg = f"{label} failed ({failure.value}): {error.message}"
                log.error(_msg)
                if error is exc:
                    raise
                raise error from exc

            if state.attempts_remaining <= 0:
                _msg = f"{label} still overloaded after {state.calls} attempts"
                log.error(_msg)
                raise RetryExhaustedError(attempts=state.calls) from exc

            state.attempts_remaining -= 1
            event = RetryEvent(
                label=label,
                attempt=policy.max_retries - state.attempts_remaining,
                delay_ms=state.current_delay_ms,
                attempts_left=state.attempts_remaining,
                message=error.message,
            )
            _msg = (
                f"{label} overloaded. Retrying in {event.delay_ms:g}ms "
                f"(retry {event.attempt}/{policy.max_retries}, "
                f"{event.attempts_left} attempts left)"
            )
            log.warning(_msg)
            if on_retry is not None:
                on_retry(event)

            await sleep(state.current_delay_ms / 1000)
            state.current_delay_ms *= policy.backoff_factor
