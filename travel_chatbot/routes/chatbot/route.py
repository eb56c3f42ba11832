from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import StreamingResponse
from typing import List
import logging

from travel_chatbot.auth.jwt_auth import CurrentUser, get_current_user
from travel_chatbot.chat.completion import CompletionProxy, build_completion_proxy
from travel_chatbot.chat.events import to_sse_frame
from travel_chatbot.chat.session import ChatTurn
from travel_chatbot.db.chat_store import ConversationStore, chat_store
from travel_chatbot.exceptions import ConversationNotFound, PersistenceError
from travel_chatbot.routes.chatbot.schemas import (
    ConversationCreateRequest,
    ConversationDetailResponse,
    ConversationResponse,
    MessageRequest,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter()


def get_chat_store() -> ConversationStore:
    return chat_store


def get_completion_proxy() -> CompletionProxy:
    return build_completion_proxy()


def not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found"
    )


# --- ROUTES ---


@router.get(
    "",
    response_model=List[ConversationResponse],
    summary="List conversations",
    description="All conversations of the caller, newest first",
)
def list_conversations(
    current_user: CurrentUser = Depends(get_current_user),
    store: ConversationStore = Depends(get_chat_store),
):
    try:
        return store.list_conversations(current_user.user_id)
    except Exception as e:
        logger.error(f"Error fetching conversations: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch conversations",
        )


@router.get(
    "/{conversation_id}",
    response_model=ConversationDetailResponse,
    summary="Get conversation history",
    description="Retrieve a conversation with all of its messages",
)
def get_conversation(
    conversation_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    store: ConversationStore = Depends(get_chat_store),
):
    """
    Get one conversation and its transcript.

    Raises:
        HTTPException: 404 if the conversation is missing or not the caller's
    """
    try:
        conv = store.get_conversation(conversation_id, current_user.user_id)
        messages = store.list_messages(conversation_id)
        return {**conv, "messages": messages}
    except ConversationNotFound:
        raise not_found()
    except Exception as e:
        logger.error(f"Error fetching conversation: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch conversation",
        )


@router.post(
    "",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new conversation",
)
def create_conversation(
    request: ConversationCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    store: ConversationStore = Depends(get_chat_store),
):
    try:
        conv = store.create_conversation(current_user.user_id, request.title)
        logger.info(f"Created conversation {conv['id']} for user {current_user.user_id}")
        return conv
    except Exception as e:
        logger.error(f"Error creating conversation: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create conversation",
        )


@router.delete(
    "/{conversation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a conversation",
    description="Removes the conversation and all of its messages",
)
def delete_conversation(
    conversation_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    store: ConversationStore = Depends(get_chat_store),
):
    try:
        store.delete_conversation(conversation_id, current_user.user_id)
    except ConversationNotFound:
        raise not_found()
    except Exception as e:
        logger.error(f"Error deleting conversation: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete conversation",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{conversation_id}/messages",
    summary="Send a message with streaming response",
    description=(
        "Appends the user's message (if any) and streams the assistant reply as "
        "server-sent events: {content} deltas, then {done: true} or {error}"
    ),
)
async def send_message_stream(
    conversation_id: int,
    request: MessageRequest,
    current_user: CurrentUser = Depends(get_current_user),
    store: ConversationStore = Depends(get_chat_store),
    proxy: CompletionProxy = Depends(get_completion_proxy),
):
    """
    Run one chat turn.

    Ownership and the user-message write happen before the stream opens, so
    those failures surface as plain HTTP errors. Everything after that is
    reported in-band as an ``error`` frame.
    """
    turn = ChatTurn(store, proxy, conversation_id, current_user.user_id)
    try:
        await turn.prepare(request.content)
    except ConversationNotFound:
        raise not_found()
    except PersistenceError as e:
        logger.error(f"Error saving user message: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send message",
        )
    except Exception as e:
        logger.error(f"Error preparing turn for conversation {conversation_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process streaming request",
        )

    async def streamer():
        async for event in turn.events():
            yield to_sse_frame(event)

    return StreamingResponse(
        streamer(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
