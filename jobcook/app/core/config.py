import logging
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This class defines all configuration values used by the application,
    including the generation backend credentials, the retry policy defaults,
    and upload limits. Values are loaded from environment variables with
    fallback defaults.

    Attributes:
        gemini_api_key (str | None): API key for the generation backend.
            Optional at load time; the backend raises an AuthError on first use when missing.
        llm_model_name (str): The model identifier used for every generation call.
        retry_max_attempts (int): Number of retries after the first overloaded failure.
        retry_initial_delay_ms (int): Delay before the first retry, in milliseconds.
        retry_backoff_factor (float): Multiplier applied to the delay after each retry.
        max_upload_bytes (int): Largest accepted attachment, in bytes.
        log_level (str): Root logging level name.

    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Generation backend
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    llm_model_name: str = Field(
        default="gemini-2.5-flash",
        validation_alias="LLM_MODEL_NAME",
    )

    # Retry envelope
    retry_max_attempts: int = Field(default=5, validation_alias="RETRY_MAX_ATTEMPTS")
    retry_initial_delay_ms: int = Field(
        default=3000,
        validation_alias="RETRY_INITIAL_DELAY_MS",
    )
    retry_backoff_factor: float = Field(
        default=1.5,
        validation_alias="RETRY_BACKOFF_FACTOR",
    )

    # Uploads
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        validation_alias="MAX_UPLOAD_BYTES",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    """
    Get the global settings instance.

    Args:
        None: This function does not take any arguments.

    Returns:
        Settings: The global settings instance, containing all configuration values.

    Raises:
        ValidationError: If environment variables are present but invalid.

    Notes:
        1. Reads configuration from environment variables and the .env file.
        2. If environment variables are not set, default values are used.
        3. The function returns a cached instance to avoid repeated parsing of the .env file.
        4. This function performs disk access to read the .env file on first call.

    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure the root logger level from settings.

    Args:
        settings (Settings | None): Settings to read the level from; the global settings when None.

    Returns:
        None

    Notes:
        1. Unknown level names fall back to INFO.
        2. `logging.basicConfig` is a no-op when the root logger already has handlers.

    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(level)
