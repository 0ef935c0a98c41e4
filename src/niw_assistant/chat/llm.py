"""Factory for the LangChain chat models backing the gateways."""

from __future__ import annotations

from typing import Any, Literal

from niw_assistant.config import Settings


def create_chat_model(settings: Settings, purpose: Literal["chat", "definition"] = "chat") -> Any:
    """Build the provider chat model for ``purpose``.

    Provider packages are imported lazily so only the active one has to be
    installed. Callers check `Settings.api_key` first.
    """

    api_key = settings.api_key
    if api_key is None:
        raise RuntimeError(f"No API key configured for provider {settings.llm_provider!r}")

    model = settings.model_for(purpose)
    if settings.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(model=model, api_key=api_key, temperature=settings.temperature)

    from langchain_google_genai import ChatGoogleGenerativeAI

    return ChatGoogleGenerativeAI(
        model=model,
        google_api_key=api_key,
        temperature=settings.temperature,
    )
