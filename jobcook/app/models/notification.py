from enum import Enum

from pydantic import BaseModel


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """A discrete outcome event for the collaborator to display.

    Attributes:
        kind (NotificationKind): Whether the outcome was a success, an error or informational.
        message (str): Short human-readable text.

    """

    kind: NotificationKind
    message: str

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls(kind=NotificationKind.SUCCESS, message=message)

    @classmethod
    def error(cls, message: str) -> "Notification":
        return cls(kind=NotificationKind.ERROR, message=message)

    @classmethod
    def info(cls, message: str) -> "Notification":
        return cls(kind=NotificationKind.INFO, message=message)
