import logging
from functools import cache
from typing import AsyncIterator, Protocol, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from travel_chatbot.chat.events import (
    ChatMessage,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
)
from travel_chatbot.models.chat import MessageRole
from travel_chatbot.settings import config

logger = logging.getLogger(__name__)


class CompletionProxy(Protocol):
    """
    Capability interface for a streaming completion provider.

    ``stream_completion`` yields any number of ``ContentEvent`` followed by
    exactly one ``DoneEvent`` or ``ErrorEvent``. It must not raise.
    """

    def stream_completion(self, history: Sequence[ChatMessage]) -> AsyncIterator[StreamEvent]:
        ...


def to_langchain_messages(history: Sequence[ChatMessage]) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    for msg in history:
        if msg.role == MessageRole.SYSTEM:
            messages.append(SystemMessage(content=msg.content))
        elif msg.role == MessageRole.USER:
            messages.append(HumanMessage(content=msg.content))
        else:
            messages.append(AIMessage(content=msg.content))
    return messages


def chunk_text(content) -> str:
    # Gemini may return a list of content blocks instead of a plain string
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainCompletionProxy:
    """Adapts a LangChain chat model's ``astream`` into ``StreamEvent``s."""

    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    async def stream_completion(
        self, history: Sequence[ChatMessage]
    ) -> AsyncIterator[StreamEvent]:
        fragments = 0
        try:
            async for chunk in self.llm.astream(to_langchain_messages(history)):
                text = chunk_text(chunk.content)
                if text:
                    fragments += 1
                    yield ContentEvent(text=text)
        except Exception as e:
            logger.error(
                f"Completion stream failed after {fragments} fragments: {e}", exc_info=True
            )
            yield ErrorEvent(message=str(e) or e.__class__.__name__)
            return
        yield DoneEvent()


@cache
def build_completion_proxy() -> LangChainCompletionProxy:
    llm = ChatGoogleGenerativeAI(
        model=config.llm_model,
        google_api_key=config.google_api_key,
        temperature=config.llm_temperature,
        max_output_tokens=config.max_completion_tokens,
        streaming=True,
    )
    return LangChainCompletionProxy(llm)
