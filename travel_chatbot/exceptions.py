"""Domain errors raised across the chat pipeline.

Routes translate these into HTTP status codes or SSE ``error`` frames; nothing
below the route layer knows about HTTP.
"""


class TravelChatbotError(Exception):
    """Base class for all errors raised by travel_chatbot."""


class Unauthorized(TravelChatbotError):
    """Bearer token missing, malformed or expired."""


class ConversationNotFound(TravelChatbotError):
    """Conversation is absent or owned by someone else.

    Both cases share this error, so a caller learns nothing about other
    users' conversations.
    """

    def __init__(self, conversation_id: int):
        self.conversation_id = conversation_id
        super().__init__("Conversation not found")


class UpstreamStreamError(TravelChatbotError):
    """The completion provider failed before or during streaming."""


class PersistenceError(TravelChatbotError):
    """A write to the conversation store failed."""


class CorruptMessageError(TravelChatbotError):
    """A stored message carries a role outside ``MessageRole``."""


class InvalidTurnTransition(TravelChatbotError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Illegal turn transition {current.value} -> {target.value}")


class OAuthProfileError(TravelChatbotError):
    """An OAuth provider returned a profile we cannot sign in with."""
