import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from travel_chatbot.db.crud_helper import conversation_crud, chat_message_crud
from travel_chatbot.exceptions import (
    ConversationNotFound,
    CorruptMessageError,
    PersistenceError,
)
from travel_chatbot.models.chat import Conversation, Message, MessageRole

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"


class ConversationStore:
    """
    Owner-scoped access to conversations and their append-only messages.

    Every conversation lookup is filtered by ``owner_id``; a conversation that
    exists but belongs to someone else is reported exactly like a missing one.
    Each write is a single-row insert committed on its own.
    """

    def create_conversation(self, owner_id: str, title: str | None = None) -> dict[str, Any]:
        try:
            return conversation_crud.create_resource(
                {"owner_id": owner_id, "title": title or DEFAULT_TITLE}
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create conversation: {e}") from e

    def get_conversation(self, conversation_id: int, owner_id: str) -> dict[str, Any]:
        conv = conversation_crud.get_resource(
            resource_id=conversation_id, where=[Conversation.owner_id == owner_id]
        )
        if conv is None:
            raise ConversationNotFound(conversation_id)
        return conv

    def list_conversations(self, owner_id: str) -> list[dict[str, Any]]:
        return conversation_crud.list_resource(
            where=[Conversation.owner_id == owner_id],
            order_by=["-created_at", "-id"],
        )

    def delete_conversation(self, conversation_id: int, owner_id: str) -> None:
        deleted = conversation_crud.delete_resource(
            resource_id=conversation_id, where=[Conversation.owner_id == owner_id]
        )
        if deleted is None:
            raise ConversationNotFound(conversation_id)
        logger.info(f"Deleted conversation {conversation_id}")

    def append_message(
        self, conversation_id: int, role: MessageRole, content: str
    ) -> dict[str, Any]:
        try:
            message = chat_message_crud.create_resource(
                {
                    "conversation_id": conversation_id,
                    "role": MessageRole(role).value,
                    "content": content,
                }
            )
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to append {MessageRole(role).value} message to conversation {conversation_id}: {e}"
            ) from e
        return self._checked(message)

    def list_messages(self, conversation_id: int) -> list[dict[str, Any]]:
        messages = chat_message_crud.list_resource(
            where=[Message.conversation_id == conversation_id],
            order_by=["created_at", "id"],
        )
        return [self._checked(msg) for msg in messages]

    @staticmethod
    def _checked(message: dict[str, Any]) -> dict[str, Any]:
        try:
            message["role"] = MessageRole(message["role"])
        except ValueError as e:
            raise CorruptMessageError(
                f"Message {message.get('id')} has unknown role {message.get('role')!r}"
            ) from e
        return message


chat_store = ConversationStore()
