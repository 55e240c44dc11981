"""
Chat API endpoints - chat sessions, their messages and the send-message flow.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..models import (
    ChatTurn, MessageCreate, Message, MessageList, SendMessageRequest,
    SessionCreate, SessionCreated, SessionList,
)
from ..services import Services, get_services
from ..utils.auth import get_current_user_id

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/sessions", response_model=SessionList)
async def list_sessions(
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """List the user's sessions, most recently active first."""
    sessions = await services.manager.list_sessions(user_id)
    return SessionList(sessions=sessions)


@router.post("/sessions", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
async def create_session(
    body: SessionCreate,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Create an empty session."""
    session_id = await services.manager.create_session(user_id, body.title)
    return SessionCreated(session_id=session_id)


@router.get("/sessions/{session_id}/messages", response_model=MessageList)
async def get_messages(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Messages of a session in the order they were written."""
    messages = await services.manager.get_messages(user_id, session_id)
    return MessageList(messages=messages)


@router.post(
    "/sessions/{session_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
async def append_message(
    session_id: str,
    message: MessageCreate,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Append a message without generating a reply."""
    return await services.manager.append_message(user_id, session_id, message)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """Delete a session and all of its messages."""
    await services.manager.delete_session(user_id, session_id)


@router.post("/message", response_model=ChatTurn)
async def send_message(
    body: SendMessageRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
):
    """
    Send a user message and get the assistant's reply.

    Opens a new session when ``session_id`` is omitted.
    """
    try:
        return await services.chat.send_message(user_id, body.text, session_id=body.session_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
