"""
Chats API router: direct conversations and their messages.
"""
from typing import List
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from roomboard.api.deps import get_current_user_id, get_emitter, get_store
from roomboard.realtime.emitter import FanOutEmitter
from roomboard.schemas.domain import ChatCreate, ChatRead, MessageCreate, MessageRead
from roomboard.schemas.responses import ApiResponse, Deleted
from roomboard.services.store import Store

router = APIRouter()


@router.get("", response_model=ApiResponse[List[ChatRead]])
def get_chats(
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Chats of the caller, most recently active first."""
    return ApiResponse(success=True, data=store.list_chats(user_id))


@router.post("", response_model=ApiResponse[ChatRead])
def open_chat(
    data: ChatCreate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Open a chat with another user, reusing the existing one if any."""
    return ApiResponse(success=True, data=store.open_chat(user_id, data.userId))


@router.delete("/{chat_id}", response_model=ApiResponse[Deleted])
def delete_chat(
    chat_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    deleted_id = store.delete_chat(user_id, chat_id)
    return ApiResponse(success=True, data=Deleted(id=deleted_id))


@router.get("/{chat_id}/messages", response_model=ApiResponse[List[MessageRead]])
def get_messages(
    chat_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Messages of a chat in the order they were sent."""
    return ApiResponse(success=True, data=store.list_messages(user_id, chat_id))


@router.post("/{chat_id}/messages", response_model=ApiResponse[MessageRead])
async def send_message(
    chat_id: int,
    data: MessageCreate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Send a message; sessions that joined the chat receive it live."""
    message = await run_in_threadpool(store.create_message, user_id, chat_id, data)
    await emitter.message_created(message)
    return ApiResponse(success=True, data=message)
