"""Thin async call-through to a LangChain chat model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from niw_assistant.errors import CompletionError
from niw_assistant.obs.tracing import Timer, estimate_token_count
from niw_assistant.types import ConversationTurn, Role

logger = logging.getLogger(__name__)


class ChatCompletionGateway:
    """Sends one request per call to the configured chat model.

    Every failure (transport, quota, malformed output) surfaces as
    `CompletionError` with the upstream message preserved. Nothing is retried.
    """

    def __init__(self, llm: Any, *, name: str = "chat") -> None:
        self.llm = llm
        self.name = name

    async def complete(
        self,
        system_instruction: str,
        history: Sequence[ConversationTurn],
        user_message: str,
    ) -> str:
        """Continue ``history`` with ``user_message`` as the final user turn."""

        messages: list[BaseMessage] = [SystemMessage(content=system_instruction)]
        messages.extend(to_langchain_messages(history))
        messages.append(HumanMessage(content=user_message))
        return await self._invoke(messages)

    async def generate(self, system_instruction: str, prompt: str) -> str:
        """Single-shot completion without history."""

        return await self._invoke(
            [SystemMessage(content=system_instruction), HumanMessage(content=prompt)]
        )

    async def _invoke(self, messages: list[BaseMessage]) -> str:
        prompt_tokens = sum(estimate_token_count(str(message.content)) for message in messages)
        try:
            with Timer() as timer:
                result = await self.llm.ainvoke(messages)
        except Exception as exc:
            logger.warning("%s completion failed: %s", self.name, exc)
            raise CompletionError(str(exc) or exc.__class__.__name__) from exc

        reply = extract_reply_text(result)
        logger.info(
            "%s completion: %d messages, ~%d prompt tokens, ~%d reply tokens, %.0f ms",
            self.name,
            len(messages),
            prompt_tokens,
            estimate_token_count(reply),
            timer.elapsed_ms,
        )
        return reply


def to_langchain_messages(history: Sequence[ConversationTurn]) -> list[BaseMessage]:
    return [
        HumanMessage(content=turn.text) if turn.role is Role.USER else AIMessage(content=turn.text)
        for turn in history
    ]


def extract_reply_text(result: Any) -> str:
    """Pull the text out of a chat model response.

    Content may be a plain string or a list of content blocks. Anything else
    is treated as a malformed response, and so is empty or blank text
    (e.g. a reply withheld by safety filters).
    """

    content = getattr(result, "content", None)
    text = ""
    if isinstance(content, str):
        text = content
    elif isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        text = "".join(parts)
    if text.strip():
        return text
    raise CompletionError(f"Malformed model response: {type(result).__name__}")
