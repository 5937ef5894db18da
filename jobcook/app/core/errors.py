"""
Error taxonomy for the JobCook orchestration core.

Every failure that reaches a collaborator is one of the classes below and
carries a short, human-readable `message` that is safe to show to the end
user.

Classes:
    KitchenError: Base class for all normalized failures.
    AuthError: Credentials are missing or rejected. Never retried.
    SafetyBlockedError: The backend refused the content. Never retried.
    OverloadedError: The backend is temporarily overloaded. Retried.
    RetryExhaustedError: The backend stayed overloaded for the whole retry budget.
    BackendError: Any other backend failure. Never retried.
    DecodeError: The backend answered but the answer could not be decoded.
    InputValidationError: A precondition failed before any backend call.
    NotFoundError: A referenced session item does not exist.

"""

AUTH_MESSAGE = "Invalid or missing API Key. Please check your configuration."
SAFETY_MESSAGE = "The request was blocked by safety filters. Please adjust the content."
GENERIC_MESSAGE = "The kitchen is experiencing technical difficulties. Please try again."
OVERLOADED_MESSAGE = "The AI service is overloaded. Please try again in a few moments."


class KitchenError(Exception):
    """Base class for normalized failures surfaced to collaborators."""

    default_message = GENERIC_MESSAGE

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(KitchenError):
    default_message = AUTH_MESSAGE


class SafetyBlockedError(KitchenError):
    default_message = SAFETY_MESSAGE


class OverloadedError(KitchenError):
    default_message = OVERLOADED_MESSAGE


class RetryExhaustedError(KitchenError):
    """The backend was still overloaded after every retry was spent.

    Attributes:
        attempts (int): Total number of calls issued, including the first.

    """

    default_message = OVERLOADED_MESSAGE

    def __init__(self, attempts: int, message: str | None = None):
        self.attempts = attempts
        super().__init__(message)


class BackendError(KitchenError):
    pass


class DecodeError(KitchenError):
    default_message = "The AI service returned an unexpected response. Please try again."


class InputValidationError(KitchenError):
    pass


class NotFoundError(KitchenError):
    pass
