from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from jobcook.app.core.config import Settings
from jobcook.app.core.errors import AuthError, SafetyBlockedError
from jobcook.app.llm.backend import Attachment, GeminiBackend, GenerationRequest


def make_response(text="hello", block_reason=None, finish_reason="STOP"):
    return SimpleNamespace(
        text=text,
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        candidates=[SimpleNamespace(finish_reason=finish_reason)],
    )


def make_client(response):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


@pytest.mark.asyncio
async def test_generate_plain_text(test_settings):
    client = make_client(make_response("A question?"))
    backend = GeminiBackend(test_settings, client=client)

    result = await backend.generate(GenerationRequest(instruction_text="Ask something"))

    assert result.text == "A question?"
    client.aio.models.generate_content.assert_awaited_once_with(
        model="gemini-2.5-flash",
        contents=["Ask something"],
        config=None,
    )


@pytest.mark.asyncio
async def test_generate_with_attachment_and_schema(test_settings):
    client = make_client(make_response("[]"))
    backend = GeminiBackend(test_settings, client=client)
    request = GenerationRequest(
        instruction_text="Parse",
        attachment=Attachment(data=b"%PDF", mime_type="application/pdf"),
        output_schema={"type": "ARRAY"},
    )

    await backend.generate(request)

    kwargs = client.aio.models.generate_content.await_args.kwargs
    assert len(kwargs["contents"]) == 2
    assert kwargs["contents"][1] == "Parse"
    assert kwargs["config"].response_mime_type == "application/json"


@pytest.mark.asyncio
async def test_empty_response_text(test_settings):
    backend = GeminiBackend(test_settings, client=make_client(make_response(text=None)))

    result = await backend.generate(GenerationRequest(instruction_text="x"))

    assert result.text == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        make_response(text=None, block_reason="SAFETY"),
        make_response(text=None, finish_reason="FinishReason.SAFETY"),
    ],
)
async def test_blocked_responses_raise(test_settings, response):
    backend = GeminiBackend(test_settings, client=make_client(response))

    with pytest.raises(SafetyBlockedError):
        await backend.generate(GenerationRequest(instruction_text="x"))


@pytest.mark.asyncio
async def test_missing_api_key_raises_auth_error(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    backend = GeminiBackend(Settings(_env_file=None))

    with pytest.raises(AuthError):
        await backend.generate(GenerationRequest(instruction_text="x"))


def test_client_is_created_lazily(test_settings):
    with patch("jobcook.app.llm.backend.genai.Client") as mock_client_cls:
        backend = GeminiBackend(test_settings)
        mock_client_cls.assert_not_called()

        backend._get_client()
        backend._get_client()

    mock_client_cls.assert_called_once_with(api_key="test-key")
