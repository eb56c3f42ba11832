from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from travel_chatbot.models.chat import MessageRole


class Message(BaseModel):
    """Message model for conversation history"""
    id: int = Field(..., description="Message ID")
    conversation_id: int = Field(..., description="Conversation this message belongs to")
    role: MessageRole = Field(..., description="Role of the message sender (system, user, assistant)")
    content: str = Field(..., description="Content of the message")
    created_at: Optional[datetime] = Field(None, description="Timestamp when message was created")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 12,
                "conversation_id": 3,
                "role": "user",
                "content": "I want 4 days in Paris on a medium budget",
                "created_at": "2025-07-06T17:47:24.660597+00:00",
            }
        }
    )


class ConversationResponse(BaseModel):
    """A conversation without its messages"""
    id: int = Field(..., description="Unique identifier for the conversation")
    title: str = Field(..., description="Display title")
    created_at: Optional[datetime] = None


class ConversationDetailResponse(ConversationResponse):
    """A conversation with its full ordered transcript"""
    messages: List[Message] = Field(..., description="Messages in creation order")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 3,
                "title": "Paris in spring",
                "created_at": "2025-07-06T17:47:20.000000+00:00",
                "messages": [
                    {
                        "id": 11,
                        "conversation_id": 3,
                        "role": "assistant",
                        "content": "Hey! Where are you dreaming of going?",
                    },
                    {
                        "id": 12,
                        "conversation_id": 3,
                        "role": "user",
                        "content": "Paris, 4 days, medium budget",
                    },
                ],
            }
        }
    )


class ConversationCreateRequest(BaseModel):
    """Request model for creating a conversation"""
    title: Optional[str] = Field(None, max_length=200, description="Defaults to 'New Chat'")


class MessageRequest(BaseModel):
    """Request model for sending messages"""
    content: str = Field(
        "",
        max_length=10000,
        description="The user's message; empty asks the assistant for an opening greeting",
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"content": "Plan Paris"}}
    )
