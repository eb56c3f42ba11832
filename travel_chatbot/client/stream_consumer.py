import logging
from typing import Any, Callable, Optional

import requests

from travel_chatbot.client.api import TravelChatClient
from travel_chatbot.client.sse import FrameDecodeError

logger = logging.getLogger(__name__)

UNEXPECTED_END = "Stream ended before the reply finished"


class ChatStreamConsumer:
    """
    Client side of a chat turn.

    While a turn is in flight ``live_text`` holds every fragment received so
    far, in arrival order. On ``done`` the persisted transcript is fetched
    into ``transcript`` and the live state is cleared; on ``error`` the live
    state is cleared without a fetch and ``failed``/``error`` are set.

    If the reply was saved but the refetch failed, ``needs_refresh`` is set
    and ``refresh`` can be retried; the turn still counts as completed.

    ``on_update`` is called with the consumer after every state change.
    """

    def __init__(
        self,
        client: TravelChatClient,
        conversation_id: int,
        on_update: Optional[Callable[["ChatStreamConsumer"], None]] = None,
    ):
        self.client = client
        self.conversation_id = conversation_id
        self.on_update = on_update
        self.is_streaming = False
        self.live_text = ""
        self.failed = False
        self.error: str | None = None
        self.transcript: dict[str, Any] | None = None
        self.needs_refresh = False

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self)

    def send(self, content: str = "") -> bool:
        """Run one turn; returns True when the reply was completed and saved."""
        self.is_streaming = True
        self.live_text = ""
        self.failed = False
        self.error = None
        self.needs_refresh = False
        self._notify()

        outcome = None
        try:
            for payload in self.client.stream_message(self.conversation_id, content):
                if payload.get("error"):
                    outcome = "error"
                    self.error = str(payload["error"])
                    break
                if payload.get("content"):
                    self.live_text += payload["content"]
                    self._notify()
                if payload.get("done"):
                    outcome = "done"
                    break
        except (requests.RequestException, FrameDecodeError) as e:
            logger.error(f"Streaming error: {e}")
            outcome = "error"
            self.error = str(e)

        if outcome is None:
            outcome = "error"
            self.error = UNEXPECTED_END

        if outcome == "done":
            self.refresh()
        else:
            self.failed = True

        self.is_streaming = False
        self.live_text = ""
        self._notify()
        return outcome == "done"

    def refresh(self) -> bool:
        """Fetch the persisted transcript; False leaves ``needs_refresh`` set."""
        try:
            self.transcript = self.client.get_conversation(self.conversation_id)
        except requests.RequestException as e:
            logger.error(f"Failed to refresh conversation {self.conversation_id}: {e}")
            self.needs_refresh = True
            self.error = str(e)
            return False
        self.needs_refresh = False
        self.error = None
        return True
