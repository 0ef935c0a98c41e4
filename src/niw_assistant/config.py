"""Configuration models for the NIW assistant service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_MODELS: dict[str, dict[str, str]] = {
    "google": {"chat": "gemini-2.5-flash", "definition": "gemini-2.5-flash-lite"},
    "openai": {"chat": "gpt-4o-mini", "definition": "gpt-4o-mini"},
}


class KnowledgeConfig(BaseModel):
    """Where the knowledge base documents live and which files count."""

    directory: Path = Field(default=Path("data/knowledge"))
    suffixes: tuple[str, ...] = Field(default=(".txt",), min_length=1)


class HistoryConfig(BaseModel):
    """Configures the recency window applied to client-supplied history."""

    max_turns: int = Field(default=10, ge=1)


class PromptConfig(BaseModel):
    """Configures persona prompts."""

    response_language: str = Field(default="Simplified Chinese", min_length=1)
    definition_max_sentences: int = Field(default=3, ge=1, le=10)


class Settings(BaseSettings):
    """Process settings loaded from the environment (prefix ``NIW_``).

    Nested values use ``__`` as delimiter, e.g. ``NIW_KNOWLEDGE__DIRECTORY``.
    Provider credentials are also read from their conventional names
    (``GOOGLE_API_KEY`` / ``OPENAI_API_KEY``).
    """

    model_config = SettingsConfigDict(
        env_prefix="NIW_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    llm_provider: Literal["google", "openai"] = "google"
    google_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("NIW_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("NIW_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    chat_model: str | None = None
    definition_model: str | None = None
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    knowledge: KnowledgeConfig = Field(default_factory=KnowledgeConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    prompts: PromptConfig = Field(default_factory=PromptConfig)

    @property
    def api_key(self) -> str | None:
        """Credential for the active provider, or ``None`` when unset/blank."""
        secret = self.google_api_key if self.llm_provider == "google" else self.openai_api_key
        if secret is None:
            return None
        value = secret.get_secret_value().strip()
        return value or None

    def model_for(self, purpose: Literal["chat", "definition"]) -> str:
        configured = self.chat_model if purpose == "chat" else self.definition_model
        return configured or _DEFAULT_MODELS[self.llm_provider][purpose]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
