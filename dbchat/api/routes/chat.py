"""
Chat Routes

FastAPI endpoint for the database assistant.
"""

import logging

from fastapi import APIRouter

from dbchat.models.api import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/agent/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(chat_request: ChatRequest) -> ChatResponse:
    """
    Send a message to the database assistant.

    Args:
        chat_request: Message, target connection string and optional session/model

    Returns:
        ChatResponse with the assistant message and proposed queries

    Errors are mapped to {success: false, error} bodies by the app's
    exception handlers (400 for bad requests and unknown/unconfigured
    models, 500 for agent failures).
    """
    from dbchat.api.main import get_manager

    logger.info(
        f"Chat request received: {chat_request.message[:100]}",
        extra={"session_id": chat_request.session_id, "model": chat_request.model},
    )

    response = await get_manager().chat(chat_request.to_domain())
    return ChatResponse.from_domain(response)
