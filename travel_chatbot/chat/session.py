import asyncio
import enum
import logging
from typing import AsyncIterator

from starlette.concurrency import run_in_threadpool

from travel_chatbot.chat.completion import CompletionProxy
from travel_chatbot.chat.events import (
    ChatMessage,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    StreamEvent,
)
from travel_chatbot.db.chat_store import ConversationStore
from travel_chatbot.exceptions import (
    ConversationNotFound,
    InvalidTurnTransition,
    PersistenceError,
)
from travel_chatbot.models.chat import MessageRole

logger = logging.getLogger(__name__)


SYSTEM_PERSONA = (
    "You are latiNlong, a calm, friendly, and honest travel buddy. "
    "You help users plan trips confidently without overpaying or getting scammed. "
    "You sound like a well-traveled local friend, never robotic or overly verbose. "
    "Your goal is to guide the user naturally through planning their trip, focusing on "
    "destination, duration, and budget (Low/Medium/High)."
)

STREAM_FAILED_MESSAGE = "Failed to send message"
SAVE_FAILED_MESSAGE = "Failed to save assistant message"


class TurnState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    USER_MESSAGE_APPENDED = "user_message_appended"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    TurnState.IDLE: {TurnState.VALIDATING},
    TurnState.VALIDATING: {TurnState.USER_MESSAGE_APPENDED, TurnState.STREAMING, TurnState.FAILED},
    TurnState.USER_MESSAGE_APPENDED: {TurnState.STREAMING, TurnState.FAILED},
    TurnState.STREAMING: {TurnState.COMPLETED, TurnState.FAILED},
    TurnState.COMPLETED: set(),
    TurnState.FAILED: set(),
}

# Turns still driving the model after their client went away.
_running_turns: set[asyncio.Task] = set()


class ChatTurn:
    """
    One request/response cycle of a conversation.

    ``prepare`` does the ownership check and the optional user-message append;
    it raises before any side effect if the conversation is not the caller's.
    ``events`` then drives the completion proxy and yields every fragment in
    arrival order, followed by a single ``DoneEvent`` or ``ErrorEvent``.

    The model stream runs in its own task feeding a queue, so a caller that
    stops reading does not stop the turn: a completed answer is still saved.
    """

    def __init__(
        self,
        store: ConversationStore,
        proxy: CompletionProxy,
        conversation_id: int,
        user_id: str,
    ):
        self.store = store
        self.proxy = proxy
        self.conversation_id = conversation_id
        self.user_id = user_id
        self.state = TurnState.IDLE
        self.accumulator: list[str] = []
        self.context: list[ChatMessage] = []

    def _transition(self, target: TurnState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTurnTransition(self.state, target)
        logger.debug(f"Turn {self.conversation_id}: {self.state.value} -> {target.value}")
        self.state = target

    async def prepare(self, user_text: str) -> None:
        self._transition(TurnState.VALIDATING)
        try:
            await run_in_threadpool(
                self.store.get_conversation, self.conversation_id, self.user_id
            )
        except ConversationNotFound:
            self._transition(TurnState.FAILED)
            raise

        if user_text:
            try:
                await run_in_threadpool(
                    self.store.append_message,
                    self.conversation_id,
                    MessageRole.USER,
                    user_text,
                )
            except PersistenceError:
                self._transition(TurnState.FAILED)
                raise
            self._transition(TurnState.USER_MESSAGE_APPENDED)

        history = await run_in_threadpool(self.store.list_messages, self.conversation_id)
        self.context = [ChatMessage(role=MessageRole.SYSTEM, content=SYSTEM_PERSONA)] + [
            ChatMessage(role=msg["role"], content=msg["content"]) for msg in history
        ]

    async def events(self) -> AsyncIterator[StreamEvent]:
        self._transition(TurnState.STREAMING)
        queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        task = asyncio.create_task(self._drive(queue))
        _running_turns.add(task)
        task.add_done_callback(_running_turns.discard)

        while True:
            event = await queue.get()
            yield event
            if not isinstance(event, ContentEvent):
                return

    async def _drive(self, queue: asyncio.Queue) -> None:
        try:
            async for event in self.proxy.stream_completion(self.context):
                if isinstance(event, ContentEvent):
                    self.accumulator.append(event.text)
                    await queue.put(event)
                elif isinstance(event, DoneEvent):
                    await queue.put(await self._complete())
                    return
                else:
                    logger.warning(
                        f"Upstream error in conversation {self.conversation_id}: {event.message}"
                    )
                    self._fail()
                    await queue.put(ErrorEvent(message=STREAM_FAILED_MESSAGE))
                    return
            logger.error(f"Completion stream for conversation {self.conversation_id} ended without a terminal event")
        except Exception as e:
            logger.error(f"Error streaming conversation {self.conversation_id}: {e}", exc_info=True)
        if self.state is TurnState.STREAMING:
            self._fail()
        await queue.put(ErrorEvent(message=STREAM_FAILED_MESSAGE))

    async def _complete(self) -> StreamEvent:
        if TurnState.COMPLETED not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTurnTransition(self.state, TurnState.COMPLETED)
        content = "".join(self.accumulator)
        try:
            await run_in_threadpool(
                self.store.append_message,
                self.conversation_id,
                MessageRole.ASSISTANT,
                content,
            )
        except PersistenceError as e:
            logger.error(
                f"Streamed reply for conversation {self.conversation_id} was not saved: {e}",
                exc_info=True,
            )
            self._fail()
            return ErrorEvent(message=SAVE_FAILED_MESSAGE)
        self._transition(TurnState.COMPLETED)
        self.accumulator = []
        return DoneEvent()

    def _fail(self) -> None:
        self._transition(TurnState.FAILED)
        self.accumulator = []
