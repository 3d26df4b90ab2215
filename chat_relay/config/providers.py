"""Upstream provider table.

Every provider the relay can reach is described once here: where its
chat endpoint lives, which environment variable holds the server-side
fallback key and which model to use when the caller does not name one.
The table is built once per process and handed to the relay service as a
read-only mapping, so tests can swap in their own table.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator


class ProviderShape(str, Enum):
    """Request/response envelope spoken by an upstream provider."""

    OPENAI = "openai"
    GEMINI = "gemini"


DEFAULT_PROVIDERS: list[dict[str, Any]] = [
    {
        "id": "openai",
        "base_url": "https://api.openai.com",
        "path": "/v1/chat/completions",
        "env_var": "OPENAI_API_KEY",
        "default_model": "gpt-4o-mini",
    },
    {
        "id": "together",
        "base_url": "https://api.together.xyz",
        "path": "/v1/chat/completions",
        "env_var": "TOGETHER_API_KEY",
        "default_model": "meta-llama/Llama-3.1-8B-Instruct-Turbo",
    },
    {
        "id": "perplexity",
        "base_url": "https://api.perplexity.ai",
        "path": "/v1/chat/completions",
        "env_var": "PPLX_API_KEY",
        "default_model": "llama-3.1-70b-instruct",
    },
    {
        "id": "groq",
        "base_url": "https://api.groq.com",
        "path": "/openai/v1/chat/completions",
        "env_var": "GROQ_API_KEY",
        "default_model": "llama3-70b-8192",
    },
    {
        "id": "mistral",
        "base_url": "https://api.mistral.ai",
        "path": "/v1/chat/completions",
        "env_var": "MISTRAL_API_KEY",
        "default_model": "mistral-large-latest",
    },
    {
        "id": "gemini",
        "base_url": "https://generativelanguage.googleapis.com",
        "path": "",
        "env_var": "GEMINI_API_KEY",
        "default_model": "gemini-1.5-flash",
        "shape": "gemini",
    },
]


class ProviderConfig(BaseModel):
    """Static description of one upstream provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    base_url: str
    path: str = ""
    env_var: str
    default_model: str
    shape: ProviderShape = ProviderShape.OPENAI

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def is_openai_compatible(self) -> bool:
        return self.shape is ProviderShape.OPENAI


ProviderTable = Mapping[str, ProviderConfig]


def build_provider_table(
    entries: list[dict[str, Any]] | None = None,
) -> ProviderTable:
    """Validate provider entries and return them as a read-only mapping."""

    providers = [ProviderConfig.model_validate(entry) for entry in (entries or DEFAULT_PROVIDERS)]
    return MappingProxyType({provider.id: provider for provider in providers})


@lru_cache()
def get_provider_table() -> ProviderTable:
    """Return the process-wide provider table."""

    return build_provider_table()


def default_model_for(provider_id: str, table: ProviderTable | None = None) -> str:
    """Return the configured default model, or an empty string for unknown ids."""

    provider = (table or get_provider_table()).get(provider_id)
    return provider.default_model if provider else ""
