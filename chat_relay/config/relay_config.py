from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class RelayConfig(BaseSettings):
    """Server-side settings for the provider relay."""

    upstream_timeout: float = Field(40.0, alias="RELAY_UPSTREAM_TIMEOUT")
    default_temperature: float = Field(0.7, alias="RELAY_DEFAULT_TEMPERATURE")
    # Send system messages to Gemini as ``system_instruction`` instead of user turns
    gemini_system_instruction: bool = Field(False, alias="RELAY_GEMINI_SYSTEM_INSTRUCTION")

    @field_validator("upstream_timeout")
    def validate_upstream_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("RELAY_UPSTREAM_TIMEOUT must be positive")
        return value

    @field_validator("default_temperature")
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 2.0:
            raise ValueError("RELAY_DEFAULT_TEMPERATURE must be between 0.0 and 2.0")
        return value

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


class ClientConfig(BaseSettings):
    """Settings for the terminal chat client."""

    server_url: str = Field("http://127.0.0.1:8000", alias="CLIENT_SERVER_URL")
    api_prefix: str = Field("", alias="CLIENT_API_PREFIX")
    timeout: float = Field(45.0, alias="CLIENT_TIMEOUT")
    session_file: Path = Field(
        default_factory=lambda: Path.home() / ".chat_relay" / "session.json",
        alias="CLIENT_SESSION_FILE",
    )
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, alias="CLIENT_SYSTEM_PROMPT")

    @field_validator("timeout")
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("CLIENT_TIMEOUT must be positive")
        return value

    @field_validator("server_url")
    def strip_server_url(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("api_prefix")
    def normalise_api_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @property
    def chat_url(self) -> str:
        return f"{self.server_url}{self.api_prefix}/api/chat"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


@lru_cache()
def get_relay_config() -> RelayConfig:
    """Return a cached relay configuration."""

    return RelayConfig()


@lru_cache()
def get_client_config() -> ClientConfig:
    """Return a cached client configuration."""

    return ClientConfig()
