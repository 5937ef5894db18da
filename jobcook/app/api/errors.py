import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from jobcook.app.api.routes.route_models import ErrorResponse
from jobcook.app.core.errors import (
    AuthError,
    BackendError,
    DecodeError,
    InputValidationError,
    KitchenError,
    NotFoundError,
    OverloadedError,
    RetryExhaustedError,
    SafetyBlockedError,
)
from jobcook.app.models.notification import Notification

log = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[KitchenError], int] = {
    InputValidationError: 422,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthError: status.HTTP_401_UNAUTHORIZED,
    SafetyBlockedError: status.HTTP_400_BAD_REQUEST,
    OverloadedError: status.HTTP_503_SERVICE_UNAVAILABLE,
    RetryExhaustedError: status.HTTP_503_SERVICE_UNAVAILABLE,
    DecodeError: status.HTTP_502_BAD_GATEWAY,
    BackendError: status.HTTP_502_BAD_GATEWAY,
}


def status_code_for(error: KitchenError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def kitchen_error_handler(request: Request, exc: KitchenError) -> JSONResponse:
    """Turn a normalized failure into a single error notification.

    Args:
        request (Request): The failing request.
        exc (KitchenError): The normalized failure.

    Returns:
        JSONResponse: `{"detail": ..., "notification": {"kind": "error", ...}}`
            with the status code mapped from the error class.

    """
    status_code = status_code_for(exc)
    _msg = f"{request.method} {request.url.path} failed with {status_code}: {exc.message}"
    log.warning(_msg)

    body = ErrorResponse(detail=exc.message, notification=Notification.error(exc.message))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
