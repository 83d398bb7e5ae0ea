"""
Users API router: profiles, a user's posts, blocking and saved posts.
"""
from typing import List
from fastapi import APIRouter, Depends

from roomboard.api.deps import get_current_user_id, get_store
from roomboard.schemas.domain import PostRead, UserCreate, UserRead
from roomboard.schemas.responses import ApiResponse
from roomboard.services.store import Store

router = APIRouter()


@router.post("/users", response_model=ApiResponse[UserRead])
def create_user(data: UserCreate, store: Store = Depends(get_store)):
    """Register a user whose phone number was verified upstream."""
    return ApiResponse(success=True, data=store.create_user(data))


@router.get("/users/{username}", response_model=ApiResponse[UserRead])
def get_user(username: str, store: Store = Depends(get_store)):
    return ApiResponse(success=True, data=store.get_user_by_username(username))


@router.get("/users/{username}/posts", response_model=ApiResponse[List[PostRead]])
def get_user_posts(username: str, store: Store = Depends(get_store)):
    """Posts of one user, newest first."""
    return ApiResponse(success=True, data=store.list_user_posts(username))


@router.post("/users/{user_id}/block", response_model=ApiResponse[UserRead])
def block_user(
    user_id: int,
    current_user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Stop receiving messages from a user. Blocking twice is harmless."""
    store.block_user(current_user_id, user_id)
    return ApiResponse(success=True, data=store.get_user(user_id))


@router.get("/user/bookmarks", response_model=ApiResponse[List[PostRead]])
def get_bookmarked_posts(
    user_id: int = Depends(get_current_user_id),
    store: Store = Depends(get_store),
):
    """Posts the caller saved, most recently saved first."""
    return ApiResponse(success=True, data=store.list_bookmarked_posts(user_id))
