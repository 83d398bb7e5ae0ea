"""
HTTP client for the Roomboard REST API.

Unwraps the {success, data, error} envelope and returns typed records.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from roomboard.schemas.domain import (
    BookmarkState,
    ChatRead,
    CommentRead,
    LikesRead,
    LikeState,
    MessageRead,
    PostCreate,
    PostRead,
    PostUpdate,
    UserRead,
)
from roomboard.schemas.enums import PostType

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-success answer from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    """
    Thin async client over a shared httpx.AsyncClient.

    Args:
        http_client: Client configured with the API base URL
        user_id: Sent as X-User-Id on every request when set
    """

    def __init__(self, http_client: httpx.AsyncClient, user_id: Optional[int] = None):
        self.http = http_client
        self.user_id = user_id

    async def aclose(self) -> None:
        await self.http.aclose()

    def _headers(self) -> Dict[str, str]:
        if self.user_id is None:
            return {}
        return {"X-User-Id": str(self.user_id)}

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        response = await self.http.request(method, path, json=json, params=params, headers=self._headers())
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or not body.get("success", False):
            message = body.get("error") or response.reason_phrase
            logger.debug("%s %s failed with %s: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return body.get("data")

    # Posts

    async def list_posts(self, post_type: Optional[PostType] = None, search: Optional[str] = None) -> List[PostRead]:
        params = {}
        if post_type:
            params["type"] = post_type.value
        if search:
            params["search"] = search
        data = await self._request("GET", "/api/posts", params=params)
        return [PostRead(**p) for p in data]

    async def create_post(self, data: PostCreate) -> PostRead:
        return PostRead(**await self._request("POST", "/api/posts", json=data.model_dump(mode="json")))

    async def update_post(self, post_id: int, data: PostUpdate) -> PostRead:
        payload = data.model_dump(mode="json", exclude_unset=True)
        return PostRead(**await self._request("PATCH", f"/api/posts/{post_id}", json=payload))

    async def delete_post(self, post_id: int) -> int:
        data = await self._request("DELETE", f"/api/posts/{post_id}")
        return data["id"]

    async def list_bookmarks(self) -> List[PostRead]:
        data = await self._request("GET", "/api/user/bookmarks")
        return [PostRead(**p) for p in data]

    # Comments

    async def list_comments(self, post_id: int) -> List[CommentRead]:
        data = await self._request("GET", f"/api/posts/{post_id}/comments")
        return [CommentRead(**c) for c in data]

    async def create_comment(self, post_id: int, content: str, parent_id: Optional[int] = None) -> CommentRead:
        payload = {"content": content, "parentId": parent_id}
        return CommentRead(**await self._request("POST", f"/api/posts/{post_id}/comments", json=payload))

    async def update_comment(self, comment_id: int, content: str) -> CommentRead:
        payload = {"content": content}
        return CommentRead(**await self._request("PATCH", f"/api/comments/{comment_id}", json=payload))

    async def delete_comment(self, comment_id: int) -> int:
        data = await self._request("DELETE", f"/api/comments/{comment_id}")
        return data["id"]

    # Likes and bookmarks

    async def get_likes(self, post_id: int) -> LikesRead:
        return LikesRead(**await self._request("GET", f"/api/posts/{post_id}/likes"))

    async def toggle_like(self, post_id: int) -> LikeState:
        return LikeState(**await self._request("POST", f"/api/posts/{post_id}/likes"))

    async def get_bookmark(self, post_id: int) -> BookmarkState:
        return BookmarkState(**await self._request("GET", f"/api/posts/{post_id}/bookmark"))

    async def toggle_bookmark(self, post_id: int) -> BookmarkState:
        return BookmarkState(**await self._request("POST", f"/api/posts/{post_id}/bookmark"))

    # Users and chats

    async def get_user(self, username: str) -> UserRead:
        return UserRead(**await self._request("GET", f"/api/users/{username}"))

    async def list_chats(self) -> List[ChatRead]:
        data = await self._request("GET", "/api/chats")
        return [ChatRead(**c) for c in data]

    async def open_chat(self, user_id: int) -> ChatRead:
        return ChatRead(**await self._request("POST", "/api/chats", json={"userId": user_id}))

    async def list_messages(self, chat_id: int) -> List[MessageRead]:
        data = await self._request("GET", f"/api/chats/{chat_id}/messages")
        return [MessageRead(**m) for m in data]

    async def send_message(self, chat_id: int, content: str) -> MessageRead:
        payload = {"content": content}
        return MessageRead(**await self._request("POST", f"/api/chats/{chat_id}/messages", json=payload))
