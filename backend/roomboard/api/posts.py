"""
Posts API router: listings, their comments, likes and bookmarks.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool

from roomboard.api.deps import get_current_user_id, get_emitter, get_store
from roomboard.realtime.emitter import FanOutEmitter
from roomboard.schemas.domain import (
    BookmarkState,
    CommentCreate,
    CommentRead,
    LikesRead,
    LikeState,
    PostCreate,
    PostRead,
    PostUpdate,
)
from roomboard.schemas.enums import PostType
from roomboard.schemas.responses import ApiResponse, Deleted
from roomboard.services.store import Store

router = APIRouter()


@router.get("", response_model=ApiResponse[List[PostRead]])
def get_posts(
    post_type: Optional[PostType] = Query(None, alias="type"),
    search: Optional[str] = Query(None, max_length=100),
    store: Store = Depends(get_store),
):
    """
    Get all posts, newest first, optionally filtered by type (room/job)
    and a search term matched against title, description and location.
    """
    return ApiResponse(success=True, data=store.list_posts(post_type, search))


@router.post("", response_model=ApiResponse[PostRead])
async def create_post(
    data: PostCreate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Create a listing and announce it to every connected session."""
    post = await run_in_threadpool(store.create_post, user_id, data)
    await emitter.post_created(post)
    return ApiResponse(success=True, data=post)


@router.get("/{post_id}", response_model=ApiResponse[PostRead])
def get_post(post_id: int, store: Store = Depends(get_store)):
    return ApiResponse(success=True, data=store.get_post(post_id))


@router.patch("/{post_id}", response_model=ApiResponse[PostRead])
async def update_post(
    post_id: int,
    data: PostUpdate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Edit one of the caller's own posts."""
    post = await run_in_threadpool(store.update_post, user_id, post_id, data)
    await emitter.post_updated(post)
    return ApiResponse(success=True, data=post)


@router.delete("/{post_id}", response_model=ApiResponse[Deleted])
async def delete_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Delete one of the caller's own posts with its comments, likes and bookmarks."""
    deleted_id = await run_in_threadpool(store.delete_post, user_id, post_id)
    await emitter.post_deleted(deleted_id)
    return ApiResponse(success=True, data=Deleted(id=deleted_id))


# Comments


@router.get("/{post_id}/comments", response_model=ApiResponse[List[CommentRead]])
def get_comments(post_id: int, store: Store = Depends(get_store)):
    """Get the comments of a post in chronological order (replies carry parentId)."""
    return ApiResponse(success=True, data=store.list_comments(post_id))


@router.post("/{post_id}/comments", response_model=ApiResponse[CommentRead])
async def create_comment(
    post_id: int,
    data: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Comment on a post, or reply to one of its comments."""
    comment = await run_in_threadpool(store.create_comment, user_id, post_id, data)
    await emitter.comment_created(comment)
    return ApiResponse(success=True, data=comment)


# Likes


@router.get("/{post_id}/likes", response_model=ApiResponse[LikesRead])
def get_likes(post_id: int, store: Store = Depends(get_store)):
    return ApiResponse(success=True, data=store.get_likes(post_id))


@router.post("/{post_id}/likes", response_model=ApiResponse[LikeState])
async def toggle_like(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Like the post, or remove the caller's like."""
    state = await run_in_threadpool(store.toggle_like, user_id, post_id)
    await emitter.likes_updated(state)
    return ApiResponse(success=True, data=state)


# Bookmarks


@router.get("/{post_id}/bookmark", response_model=ApiResponse[BookmarkState])
def get_bookmark(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    return ApiResponse(success=True, data=store.get_bookmark(user_id, post_id))


@router.post("/{post_id}/bookmark", response_model=ApiResponse[BookmarkState])
async def toggle_bookmark(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    emitter: FanOutEmitter = Depends(get_emitter),
):
    """Save the post, or unsave it. Only the caller's own sessions are told."""
    state = await run_in_threadpool(store.toggle_bookmark, user_id, post_id)
    await emitter.bookmark_updated(user_id, state)
    return ApiResponse(success=True, data=state)
