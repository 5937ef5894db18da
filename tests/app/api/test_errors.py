import json
from unittest.mock import MagicMock

import pytest

from jobcook.app.api.errors import kitchen_error_handler, status_code_for
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


@pytest.mark.parametrize(
    "error, expected",
    [
        (InputValidationError("bad"), 422),
        (NotFoundError("missing"), 404),
        (AuthError(), 401),
        (SafetyBlockedError(), 400),
        (OverloadedError(), 503),
        (RetryExhaustedError(attempts=6), 503),
        (DecodeError(), 502),
        (BackendError("boom"), 502),
        (KitchenError(), 500),
    ],
)
def test_status_code_for(error, expected):
    assert status_code_for(error) == expected


@pytest.mark.asyncio
async def test_handler_body():
    request = MagicMock()
    request.method = "POST"
    request.url.path = "/api/kitchen/analyze"

    response = await kitchen_error_handler(request, RetryExhaustedError(attempts=6))

    assert response.status_code == 503
    message = "The AI service is overloaded. Please try again in a few moments."
    assert json.loads(response.body) == {
        "detail": message,
        "notification": {"kind": "error", "message": message},
    }
