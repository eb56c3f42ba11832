import json
from typing import Literal, Union

from pydantic import BaseModel, Field

from travel_chatbot.models.chat import MessageRole


class ChatMessage(BaseModel):
    """One entry of the model context: a role and its text."""
    role: MessageRole
    content: str


class ContentEvent(BaseModel):
    kind: Literal["content"] = "content"
    text: str = Field(..., description="Text delta; boundaries carry no meaning")


class DoneEvent(BaseModel):
    kind: Literal["done"] = "done"


class ErrorEvent(BaseModel):
    kind: Literal["error"] = "error"
    message: str


StreamEvent = Union[ContentEvent, DoneEvent, ErrorEvent]


def to_sse_frame(event: StreamEvent) -> str:
    """Encode an event as one ``data: <json>\\n\\n`` frame."""
    if isinstance(event, ContentEvent):
        payload = {"content": event.text}
    elif isinstance(event, DoneEvent):
        payload = {"done": True}
    else:
        payload = {"error": event.message}
    return f"data: {json.dumps(payload)}\n\n"
