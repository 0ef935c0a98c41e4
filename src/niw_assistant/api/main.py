"""FastAPI entrypoint for the chat and quick-definition endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from starlette.concurrency import run_in_threadpool

from niw_assistant.chat.gateway import ChatCompletionGateway
from niw_assistant.chat.history import normalize_history
from niw_assistant.chat.llm import create_chat_model
from niw_assistant.chat.prompts import build_definition_instruction, build_system_instruction
from niw_assistant.config import Settings, get_settings
from niw_assistant.errors import ApiError, HistoryFormatError
from niw_assistant.knowledge.store import KnowledgeStore
from niw_assistant.obs.log_config import configure_logging

logger = logging.getLogger(__name__)

ModelFactory = Callable[[Settings, str], Any]

CHAT_FAILURE_MESSAGE = "The assistant timed out or ran out of quota. Please try again later."
DEFINITION_FAILURE_MESSAGE = "Failed to generate definition"


class ChatRequest(BaseModel):
    message: str
    history: list[Any] | None = Field(default=None)

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class QuickDefinitionRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Query is required")
        return value.strip()


def create_app(
    settings: Settings | None = None,
    *,
    knowledge_store: KnowledgeStore | None = None,
    model_factory: ModelFactory | None = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    """Wire the service with explicitly constructed collaborators.

    The knowledge store is created once here and shared by every request;
    its corpus is loaded lazily on the first chat request. Chat models are
    built once per purpose, on the first request that passes the credential
    check.
    """

    settings = settings or get_settings()
    app = FastAPI(title="NIW Assistant", version="0.1.0")
    app.state.settings = settings
    app.state.knowledge_store = knowledge_store or KnowledgeStore(settings.knowledge)
    app.state.model_factory = model_factory or create_chat_model
    app.state.models = {}
    app.state.today = today

    def chat_model(purpose: str) -> Any:
        models: dict[str, Any] = app.state.models
        if purpose not in models:
            models[purpose] = app.state.model_factory(settings, purpose)
        return models[purpose]

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    @app.get("/health")
    def health() -> dict[str, Any]:
        store: KnowledgeStore = app.state.knowledge_store
        return {
            "status": "ok",
            "llm_provider": settings.llm_provider,
            "llm_configured": settings.api_key is not None,
            "knowledge_loaded": store.is_loaded,
            "knowledge_documents": len(store.documents),
        }

    @app.post("/chat")
    async def chat(payload: ChatRequest) -> dict[str, str]:
        _require_credential(settings)

        try:
            history = normalize_history(payload.history, max_turns=settings.history.max_turns)
        except HistoryFormatError as exc:
            raise ApiError(400, "Invalid conversation history", str(exc)) from exc

        store: KnowledgeStore = app.state.knowledge_store
        corpus = await run_in_threadpool(store.get_corpus)
        system_instruction = build_system_instruction(
            corpus,
            app.state.today().isoformat(),
            language=settings.prompts.response_language,
        )

        try:
            gateway = ChatCompletionGateway(chat_model("chat"), name="chat")
            reply = await gateway.complete(system_instruction, history, payload.message)
        except Exception as exc:
            logger.exception("Chat request failed")
            raise ApiError(500, CHAT_FAILURE_MESSAGE, _describe(exc)) from exc
        return {"reply": reply}

    @app.post("/quick-definition")
    async def quick_definition(payload: QuickDefinitionRequest) -> dict[str, str]:
        _require_credential(settings)

        system_instruction = build_definition_instruction(
            max_sentences=settings.prompts.definition_max_sentences
        )
        try:
            gateway = ChatCompletionGateway(chat_model("definition"), name="definition")
            definition = await gateway.generate(system_instruction, payload.query)
        except Exception as exc:
            logger.exception("Quick definition request failed")
            raise ApiError(500, DEFINITION_FAILURE_MESSAGE, _describe(exc)) from exc
        return {"definition": definition}

    @app.post("/knowledge/reload")
    async def reload_knowledge() -> dict[str, Any]:
        store: KnowledgeStore = app.state.knowledge_store
        corpus = await run_in_threadpool(store.reload)
        return {
            "loaded": store.is_loaded,
            "documents": len(store.documents),
            "characters": len(corpus),
        }

    return app


def _require_credential(settings: Settings) -> None:
    if settings.api_key is None:
        env_name = "GOOGLE_API_KEY" if settings.llm_provider == "google" else "OPENAI_API_KEY"
        raise ApiError(500, f"API key not configured. Please set {env_name} in the environment.")


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


app = create_app()


def serve() -> None:
    """Console entrypoint: run the API under uvicorn."""

    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port)
