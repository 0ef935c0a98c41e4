from pathlib import Path

import pytest

from niw_assistant.chat.llm import create_chat_model
from niw_assistant.config import KnowledgeConfig, Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None, google_api_key="key")

    assert settings.llm_provider == "google"
    assert settings.api_key == "key"
    assert settings.history.max_turns == 10
    assert settings.knowledge == KnowledgeConfig()
    assert settings.model_for("chat") == "gemini-2.5-flash"
    assert settings.model_for("definition") == "gemini-2.5-flash-lite"


def test_blank_credential_counts_as_missing() -> None:
    assert Settings(_env_file=None, google_api_key="   ").api_key is None
    assert Settings(_env_file=None, google_api_key=None).api_key is None


def test_provider_selects_credential_and_models() -> None:
    settings = Settings(
        _env_file=None,
        llm_provider="openai",
        google_api_key="google",
        openai_api_key="openai",
        definition_model="gpt-4.1-nano",
    )

    assert settings.api_key == "openai"
    assert settings.model_for("chat") == "gpt-4o-mini"
    assert settings.model_for("definition") == "gpt-4.1-nano"


def test_environment_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
    monkeypatch.setenv("NIW_KNOWLEDGE__DIRECTORY", str(tmp_path))
    monkeypatch.setenv("NIW_HISTORY__MAX_TURNS", "4")

    settings = Settings(_env_file=None)

    assert settings.api_key == "from-env"
    assert settings.knowledge.directory == Path(tmp_path)
    assert settings.history.max_turns == 4


def test_chat_model_factory_requires_credential() -> None:
    with pytest.raises(RuntimeError, match="google"):
        create_chat_model(Settings(_env_file=None, google_api_key=None))
