import logging
from typing import Any, Protocol

from google import genai
from google.genai import types
from pydantic import BaseModel, ConfigDict

from jobcook.app.core.config import Settings, get_settings
from jobcook.app.core.errors import AuthError, SafetyBlockedError

log = logging.getLogger(__name__)


class Attachment(BaseModel):
    """An opaque binary payload passed through to the backend unmodified.

    Attributes:
        data (bytes): The raw bytes of a resume document, screenshot or audio clip.
        mime_type (str): The MIME type reported by the collaborator.

    """

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str


class GenerationRequest(BaseModel):
    """A request descriptor produced by a prompt builder.

    Attributes:
        instruction_text (str): The full text prompt.
        attachment (Attachment | None): An optional binary attachment.
        output_schema (dict[str, Any] | None): A structured-output schema. When
            present the backend is asked for JSON matching it.

    """

    model_config = ConfigDict(frozen=True)

    instruction_text: str
    attachment: Attachment | None = None
    output_schema: dict[str, Any] | None = None


class GenerationResult(BaseModel):
    text: str


class GenerationBackend(Protocol):
    """Anything that can turn a GenerationRequest into generated text."""

    async def generate(self, request: GenerationRequest) -> GenerationResult: ...


class GeminiBackend:
    """Generation backend backed by the google-genai async client.

    Args:
        settings (Settings | None): Settings providing the API key and model name.
        client (genai.Client | None): A pre-built client, mainly for tests.

    Notes:
        1. The client is created lazily on the first call.
        2. Backend exceptions are allowed to propagate unchanged; the retry
           envelope normalizes them.

    """

    def __init__(self, settings: Settings | None = None, client: genai.Client | None = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def model_name(self) -> str:
        return self.settings.llm_model_name

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.settings.gemini_api_key:
                raise AuthError()
            self._client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client

    @staticmethod
    def build_contents(request: GenerationRequest) -> list[Any]:
        """Assemble the request contents, attachment first."""
        contents: list[Any] = []
        if request.attachment is not None:
            contents.append(
                types.Part.from_bytes(
                    data=request.attachment.data,
                    mime_type=request.attachment.mime_type,
                )
            )
        contents.append(request.instruction_text)
        return contents

    @staticmethod
    def build_config(request: GenerationRequest) -> types.GenerateContentConfig | None:
        if request.output_schema is None:
            return None
        return types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=request.output_schema,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Issue one generation call.

        Args:
            request (GenerationRequest): The request descriptor.

        Returns:
            GenerationResult: The generated text, empty when the model returned none.

        Raises:
            AuthError: If no API key is configured.
            SafetyBlockedError: If the prompt or the candidate was blocked for safety.

        Network access:
            - This function makes a network request to the generation backend.

        """
        _msg = f"GeminiBackend.generate starting (model={self.model_name})"
        log.debug(_msg)

        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=self.model_name,
            contents=self.build_contents(request),
            config=self.build_config(request),
        )
        _raise_if_blocked(response)

        _msg = "GeminiBackend.generate returning"
        log.debug(_msg)
        return GenerationResult(text=response.text or "")


def _raise_if_blocked(response: types.GenerateContentResponse) -> None:
    """Turn a safety-blocked response into a SafetyBlockedError."""
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        _msg = f"Prompt blocked by the backend: {feedback.block_reason}"
        log.warning(_msg)
        raise SafetyBlockedError()

    for candidate in getattr(response, "candidates", None) or []:
        reason = getattr(candidate, "finish_reason", None)
        if reason is not None and "SAFETY" in str(reason):
            _msg = f"Candidate blocked by the backend: {reason}"
            log.warning(_msg)
            raise SafetyBlockedError()
