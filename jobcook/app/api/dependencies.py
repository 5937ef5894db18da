import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, Response, UploadFile

from jobcook.app.core.config import Settings, get_settings
from jobcook.app.core.errors import InputValidationError
from jobcook.app.core.sessions import CareerSession, SessionRegistry
from jobcook.app.llm.backend import Attachment, GeminiBackend, GenerationBackend
from jobcook.app.llm.retry import RetryPolicy

log = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"

_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    """Return the process-wide session registry."""
    return _registry


@lru_cache
def get_backend() -> GenerationBackend:
    """Return the shared generation backend built from settings."""
    return GeminiBackend(get_settings())


def get_retry_policy(settings: Settings = Depends(get_settings)) -> RetryPolicy:
    return RetryPolicy.from_settings(settings)


def get_career_session(
    response: Response,
    x_session_id: Annotated[str | None, Header()] = None,
    registry: SessionRegistry = Depends(get_registry),
    backend: GenerationBackend = Depends(get_backend),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> CareerSession:
    """
    Dependency to get the caller's session, creating one on first use.

    Args:
        response (Response): The outgoing response, used to echo the session id.
        x_session_id (str | None): The `X-Session-Id` request header.
        registry (SessionRegistry): The session registry.
        backend (GenerationBackend): The generation backend for new sessions.
        retry_policy (RetryPolicy): The retry policy for new sessions.

    Returns:
        CareerSession: The existing or newly created session.

    Notes:
        1. Unknown or missing identifiers create a new session.
        2. The session identifier is always echoed in the `X-Session-Id` response header.

    """
    session = registry.get_or_create(x_session_id, backend=backend, retry_policy=retry_policy)
    response.headers[SESSION_HEADER] = session.session_id
    return session


async def read_attachment(upload: UploadFile, settings: Settings) -> Attachment:
    """Read an uploaded file into an opaque Attachment.

    Args:
        upload (UploadFile): The uploaded file.
        settings (Settings): Settings providing the size limit.

    Returns:
        Attachment: The file bytes and the MIME type reported by the client.

    Raises:
        InputValidationError: If the file is empty or larger than `max_upload_bytes`.

    """
    data = await upload.read()
    if not data:
        raise InputValidationError("The uploaded file is empty.")
    if len(data) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise InputValidationError(
            f"File is too large. Please upload a file under {limit_mb:g}MB."
        )

    mime_type = upload.content_type or "application/octet-stream"
    _msg = f"Read upload '{upload.filename}' ({len(data)} bytes, {mime_type})"
    log.debug(_msg)
    return Attachment(data=data, mime_type=mime_type)
