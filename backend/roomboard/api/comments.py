"""
Comments API router (edit and delete by id).
"""
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from roomboard.api.deps import get_current_user_id, get_emitter, get_store
from roomboard.realtime.emitter import FanOutEmitter
from roomboard.schemas.domain import CommentRead, CommentUpdate
from roomboard.schemas.responses import ApiResponse, Deleted
from roomboard.services.store import Store

router = APIRouter()


@router.patch("/{comment_id}", response_model=ApiResponse[CommentRead])
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Edit one of the caller's own comments."""
    comment = await run_in_threadpool(store.update_comment, user_id, comment_id, data)
    await emitter.comment_updated(comment)
    return ApiResponse(success=True, data=comment)


@router.delete("/{comment_id}", response_model=ApiResponse[Deleted])
async def delete_comment(
    comment_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Delete one of the caller's own comments and the replies below it."""
    ref = await run_in_threadpool(store.delete_comment, user_id, comment_id)
    await emitter.comment_deleted(ref)
    return ApiResponse(success=True, data=Deleted(id=ref.id))
