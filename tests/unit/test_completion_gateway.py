import asyncio

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from niw_assistant.chat.gateway import ChatCompletionGateway, extract_reply_text
from niw_assistant.chat.history import normalize_history
from niw_assistant.errors import CompletionError


class RecordingLLM:
    def __init__(self, reply: object = "ok") -> None:
        self.reply = reply
        self.calls: list[list[object]] = []

    async def ainvoke(self, messages: list[object]) -> object:
        self.calls.append(messages)
        if isinstance(self.reply, Exception):
            raise self.reply
        if isinstance(self.reply, (str, list)):
            return AIMessage(content=self.reply)
        return self.reply


def test_complete_appends_user_message_as_final_turn() -> None:
    llm = RecordingLLM("Matter of Dhanasar sets three prongs.")
    gateway = ChatCompletionGateway(llm)
    history = normalize_history([{"role": "model", "text": "hi"}, {"role": "user", "text": "q1"}])

    reply = asyncio.run(gateway.complete("SYSTEM", history, "q2"))

    assert reply == "Matter of Dhanasar sets three prongs."
    assert len(llm.calls) == 1
    messages = llm.calls[0]
    assert isinstance(messages[0], SystemMessage)
    assert messages[0].content == "SYSTEM"
    assert [type(message) for message in messages[1:]] == [HumanMessage, HumanMessage]
    assert [message.content for message in messages[1:]] == ["q1", "q2"]


def test_model_turns_become_ai_messages() -> None:
    llm = RecordingLLM()
    history = normalize_history(
        [{"role": "user", "text": "q1"}, {"role": "model", "parts": [{"text": "a1"}]}]
    )

    asyncio.run(ChatCompletionGateway(llm).complete("S", history, "q2"))

    assert [type(message) for message in llm.calls[0]] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]


def test_generate_sends_single_prompt_without_history() -> None:
    llm = RecordingLLM("A petition category.")

    result = asyncio.run(ChatCompletionGateway(llm, name="definition").generate("S", "EB-2"))

    assert result == "A petition category."
    assert [message.content for message in llm.calls[0]] == ["S", "EB-2"]


def test_upstream_failure_is_wrapped_with_message() -> None:
    gateway = ChatCompletionGateway(RecordingLLM(RuntimeError("429 quota exceeded")))

    with pytest.raises(CompletionError, match="429 quota exceeded"):
        asyncio.run(gateway.complete("S", [], "q"))


def test_response_without_text_content_is_malformed() -> None:
    gateway = ChatCompletionGateway(RecordingLLM(object()))

    with pytest.raises(CompletionError, match="Malformed"):
        asyncio.run(gateway.generate("S", "q"))


def test_content_blocks_are_joined() -> None:
    message = AIMessage(content=[{"type": "text", "text": "Prong "}, "one"])

    assert extract_reply_text(message) == "Prong one"


@pytest.mark.parametrize("content", ["", "   \n", [], [{"type": "text", "text": " "}]])
def test_empty_reply_is_malformed(content) -> None:
    gateway = ChatCompletionGateway(RecordingLLM(content))

    with pytest.raises(CompletionError, match="Malformed model response"):
        asyncio.run(gateway.generate("S", "q"))
