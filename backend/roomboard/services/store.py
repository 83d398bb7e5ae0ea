"""
Persistent store for Roomboard.

Wraps a SQLAlchemy session with the create/read/update/delete operations
the API needs. Every operation returns the canonical record (a Read schema,
with generated primary key and timestamps) or raises NotFoundError,
ForbiddenError, ValidationError or ConflictError. Mutations commit before
returning, so callers only publish realtime events for committed writes.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from roomboard.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from roomboard.models import Block, Bookmark, Chat, Comment, Like, Message, Post, User
from roomboard.models.base import utcnow
from roomboard.schemas.domain import (
    BookmarkState,
    ChatRead,
    CommentCreate,
    CommentRead,
    CommentRef,
    CommentUpdate,
    LikeRead,
    LikesRead,
    LikeState,
    MessageCreate,
    MessageRead,
    PostCreate,
    PostRead,
    PostUpdate,
    UserCreate,
    UserRead,
    UserStatus,
)
from roomboard.schemas.enums import PostType

logger = logging.getLogger(__name__)

# Replies nest at most this many levels below a top-level comment
MAX_COMMENT_DEPTH = 3


def _iso(dt: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as an ISO 8601 UTC string (naive values are UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _user_read(user: User) -> UserRead:
    return UserRead(
        id=user.id,
        username=user.username,
        fullname=user.fullname,
        isOnline=bool(user.isOnline),
        lastSeen=_iso(user.lastSeen),
        createdAt=_iso(user.createdAt),
    )


def _post_read(post: Post) -> PostRead:
    return PostRead(
        id=post.id,
        userId=post.userId,
        username=post.user.username if post.user else None,
        type=PostType(post.type),
        title=post.title,
        description=post.description,
        price=post.price,
        location=post.location,
        images=list(post.images or []),
        createdAt=_iso(post.createdAt),
        editedAt=_iso(post.editedAt),
    )


def _comment_read(comment: Comment) -> CommentRead:
    return CommentRead(
        id=comment.id,
        postId=comment.postId,
        userId=comment.userId,
        username=comment.user.username if comment.user else None,
        parentId=comment.parentId,
        content=comment.content,
        createdAt=_iso(comment.createdAt),
        editedAt=_iso(comment.editedAt),
    )


def _message_read(message: Message) -> MessageRead:
    return MessageRead(
        id=message.id,
        chatId=message.chatId,
        senderId=message.senderId,
        username=message.sender.username if message.sender else None,
        content=message.content,
        createdAt=_iso(message.createdAt),
    )


def _chat_read(chat: Chat) -> ChatRead:
    last = chat.messages[-1] if chat.messages else None
    return ChatRead(
        id=chat.id,
        participants=[_user_read(u) for u in sorted(chat.participants, key=lambda u: u.id)],
        lastMessage=_message_read(last) if last else None,
        createdAt=_iso(chat.createdAt),
        updatedAt=_iso(chat.updatedAt),
    )


class Store:
    """CRUD operations over one database session."""

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Store write rejected by constraint: %s", e.orig)
            raise ConflictError("Conflicting write, please retry") from e

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def _user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create_user(self, data: UserCreate) -> UserRead:
        if self.db.query(User).filter(User.username == data.username).first():
            raise ConflictError("Username already taken")
        if data.phone and self.db.query(User).filter(User.phone == data.phone).first():
            raise ConflictError("Phone number already registered")

        user = User(username=data.username, fullname=data.fullname, phone=data.phone)
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        logger.info("Created user %s (%s)", user.id, user.username)
        return _user_read(user)

    def get_user(self, user_id: int) -> UserRead:
        return _user_read(self._user(user_id))

    def get_user_by_username(self, username: str) -> UserRead:
        user = self.db.query(User).filter(User.username == username).first()
        if user is None:
            raise NotFoundError("User not found")
        return _user_read(user)

    def set_user_online(self, user_id: int, online: bool) -> UserStatus:
        user = self._user(user_id)
        user.isOnline = online
        user.lastSeen = utcnow()
        self._commit()
        return UserStatus(userId=user.id, online=online, lastSeen=_iso(user.lastSeen))

    def block_user(self, blocker_id: int, blocked_id: int) -> None:
        if blocker_id == blocked_id:
            raise ValidationError("You cannot block yourself")
        self._user(blocked_id)

        if self.is_blocked(blocker_id, blocked_id):
            return
        self.db.add(Block(blockerId=blocker_id, blockedId=blocked_id))
        self._commit()
        logger.info("User %s blocked user %s", blocker_id, blocked_id)

    def is_blocked(self, blocker_id: int, blocked_id: int) -> bool:
        return self.db.get(Block, (blocker_id, blocked_id)) is not None

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def _post(self, post_id: int) -> Post:
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def _owned_post(self, user_id: int, post_id: int) -> Post:
        post = self._post(post_id)
        if post.userId != user_id:
            raise ForbiddenError("You can only modify your own posts")
        return post

    def list_posts(
        self,
        post_type: Optional[PostType] = None,
        search: Optional[str] = None,
    ) -> List[PostRead]:
        """All posts, newest first, optionally filtered by type and text."""
        query = self.db.query(Post)
        if post_type:
            query = query.filter(Post.type == post_type.value)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Post.title.ilike(pattern),
                    Post.description.ilike(pattern),
                    Post.location.ilike(pattern),
                )
            )
        posts = query.order_by(Post.createdAt.desc(), Post.id.desc()).all()
        return [_post_read(p) for p in posts]

    def list_user_posts(self, username: str) -> List[PostRead]:
        user = self.db.query(User).filter(User.username == username).first()
        if user is None:
            raise NotFoundError("User not found")
        posts = (
            self.db.query(Post)
            .filter(Post.userId == user.id)
            .order_by(Post.createdAt.desc(), Post.id.desc())
            .all()
        )
        return [_post_read(p) for p in posts]

    def get_post(self, post_id: int) -> PostRead:
        return _post_read(self._post(post_id))

    def create_post(self, user_id: int, data: PostCreate) -> PostRead:
        self._user(user_id)
        post = Post(
            userId=user_id,
            type=data.type.value,
            title=data.title,
            description=data.description,
            price=data.price,
            location=data.location,
            images=list(data.images),
        )
        self.db.add(post)
        self._commit()
        self.db.refresh(post)
        logger.info("User %s created %s post %s", user_id, post.type, post.id)
        return _post_read(post)

    def update_post(self, user_id: int, post_id: int, data: PostUpdate) -> PostRead:
        post = self._owned_post(user_id, post_id)
        changes = data.model_dump(exclude_unset=True)

        post_type = changes.get("type", post.type)
        images = changes.get("images", post.images)
        price = changes["price"] if "price" in changes else post.price
        if PostType(post_type) == PostType.ROOM and (not images or price is None):
            raise ValidationError("For room posts, images and price are required")

        for field, value in changes.items():
            if field == "type":
                value = PostType(value).value
            setattr(post, field, value)
        post.editedAt = utcnow()

        self._commit()
        self.db.refresh(post)
        return _post_read(post)

    def delete_post(self, user_id: int, post_id: int) -> int:
        post = self._owned_post(user_id, post_id)
        self.db.delete(post)
        self._commit()
        logger.info("User %s deleted post %s", user_id, post_id)
        return post_id

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _comment(self, comment_id: int) -> Comment:
        comment = self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    def _owned_comment(self, user_id: int, comment_id: int) -> Comment:
        comment = self._comment(comment_id)
        if comment.userId != user_id:
            raise ForbiddenError("You can only modify your own comments")
        return comment

    @staticmethod
    def _depth(comment: Comment) -> int:
        depth = 0
        while comment.parent is not None:
            depth += 1
            comment = comment.parent
        return depth

    def list_comments(self, post_id: int) -> List[CommentRead]:
        """Comments of a post in creation order; replies carry parentId."""
        self._post(post_id)
        comments = (
            self.db.query(Comment)
            .filter(Comment.postId == post_id)
            .order_by(Comment.createdAt, Comment.id)
            .all()
        )
        return [_comment_read(c) for c in comments]

    def create_comment(self, user_id: int, post_id: int, data: CommentCreate) -> CommentRead:
        self._post(post_id)
        self._user(user_id)

        if data.parentId is not None:
            parent = self.db.get(Comment, data.parentId)
            if parent is None or parent.postId != post_id:
                raise ValidationError("Parent comment does not belong to this post")
            if self._depth(parent) + 1 > MAX_COMMENT_DEPTH:
                raise ValidationError("Replies cannot be nested any deeper")

        comment = Comment(
            postId=post_id,
            userId=user_id,
            parentId=data.parentId,
            content=data.content,
        )
        self.db.add(comment)
        self._commit()
        self.db.refresh(comment)
        return _comment_read(comment)

    def update_comment(self, user_id: int, comment_id: int, data: CommentUpdate) -> CommentRead:
        comment = self._owned_comment(user_id, comment_id)
        comment.content = data.content
        comment.editedAt = utcnow()
        self._commit()
        self.db.refresh(comment)
        return _comment_read(comment)

    def delete_comment(self, user_id: int, comment_id: int) -> CommentRef:
        """Delete a comment together with all replies below it."""
        comment = self._owned_comment(user_id, comment_id)
        ref = CommentRef(id=comment.id, postId=comment.postId)
        self.db.delete(comment)
        self._commit()
        return ref

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    def _like_count(self, post_id: int) -> int:
        return self.db.query(Like).filter(Like.postId == post_id).count()

    def get_likes(self, post_id: int) -> LikesRead:
        self._post(post_id)
        likes = self.db.query(Like).filter(Like.postId == post_id).order_by(Like.id).all()
        return LikesRead(
            likes=[LikeRead(id=l.id, postId=l.postId, userId=l.userId) for l in likes],
            count=len(likes),
        )

    def toggle_like(self, user_id: int, post_id: int) -> LikeState:
        self._post(post_id)
        existing = (
            self.db.query(Like)
            .filter(Like.postId == post_id, Like.userId == user_id)
            .first()
        )
        if existing:
            self.db.delete(existing)
            liked = False
        else:
            self.db.add(Like(postId=post_id, userId=user_id))
            liked = True
        self._commit()
        return LikeState(postId=post_id, liked=liked, count=self._like_count(post_id))

    # ------------------------------------------------------------------
    # Bookmarks
    # ------------------------------------------------------------------

    def _bookmark(self, user_id: int, post_id: int) -> Optional[Bookmark]:
        return (
            self.db.query(Bookmark)
            .filter(Bookmark.postId == post_id, Bookmark.userId == user_id)
            .first()
        )

    def get_bookmark(self, user_id: int, post_id: int) -> BookmarkState:
        self._post(post_id)
        return BookmarkState(postId=post_id, bookmarked=self._bookmark(user_id, post_id) is not None)

    def toggle_bookmark(self, user_id: int, post_id: int) -> BookmarkState:
        self._post(post_id)
        existing = self._bookmark(user_id, post_id)
        if existing:
            self.db.delete(existing)
        else:
            self.db.add(Bookmark(postId=post_id, userId=user_id))
        self._commit()
        return BookmarkState(postId=post_id, bookmarked=existing is None)

    def list_bookmarked_posts(self, user_id: int) -> List[PostRead]:
        """Posts the user saved, most recently saved first."""
        posts = (
            self.db.query(Post)
            .join(Bookmark, Bookmark.postId == Post.id)
            .filter(Bookmark.userId == user_id)
            .order_by(Bookmark.createdAt.desc(), Bookmark.id.desc())
            .all()
        )
        return [_post_read(p) for p in posts]

    # ------------------------------------------------------------------
    # Chats and messages
    # ------------------------------------------------------------------

    def _chat(self, chat_id: int) -> Chat:
        chat = self.db.get(Chat, chat_id)
        if chat is None:
            raise NotFoundError("Chat not found")
        return chat

    def _participant_chat(self, user_id: int, chat_id: int) -> Chat:
        chat = self._chat(chat_id)
        if user_id not in {u.id for u in chat.participants}:
            raise ForbiddenError("You are not a participant of this chat")
        return chat

    def _chats_of(self, user_id: int) -> List[Chat]:
        return (
            self.db.query(Chat)
            .filter(Chat.participants.any(User.id == user_id))
            .order_by(Chat.updatedAt.desc(), Chat.id.desc())
            .all()
        )

    def is_participant(self, user_id: int, chat_id: int) -> bool:
        chat = self.db.get(Chat, chat_id)
        return chat is not None and user_id in {u.id for u in chat.participants}

    def list_chats(self, user_id: int) -> List[ChatRead]:
        return [_chat_read(c) for c in self._chats_of(user_id)]

    def get_chat(self, user_id: int, chat_id: int) -> ChatRead:
        return _chat_read(self._participant_chat(user_id, chat_id))

    def open_chat(self, user_id: int, other_id: int) -> ChatRead:
        """Return the existing 1:1 chat between the two users, or create it."""
        if user_id == other_id:
            raise ValidationError("You cannot start a chat with yourself")
        me = self._user(user_id)
        other = self._user(other_id)

        for chat in self._chats_of(user_id):
            if {u.id for u in chat.participants} == {user_id, other_id}:
                return _chat_read(chat)

        chat = Chat(participants=[me, other])
        self.db.add(chat)
        self._commit()
        self.db.refresh(chat)
        logger.info("Opened chat %s between users %s and %s", chat.id, user_id, other_id)
        return _chat_read(chat)

    def delete_chat(self, user_id: int, chat_id: int) -> int:
        chat = self._participant_chat(user_id, chat_id)
        self.db.delete(chat)
        self._commit()
        return chat_id

    def list_messages(self, user_id: int, chat_id: int) -> List[MessageRead]:
        chat = self._participant_chat(user_id, chat_id)
        return [_message_read(m) for m in chat.messages]

    def create_message(self, user_id: int, chat_id: int, data: MessageCreate) -> MessageRead:
        chat = self._participant_chat(user_id, chat_id)
        for participant in chat.participants:
            if participant.id != user_id and self.is_blocked(participant.id, user_id):
                raise ForbiddenError("You cannot message this user")

        message = Message(chatId=chat.id, senderId=user_id, content=data.content)
        self.db.add(message)
        chat.updatedAt = utcnow()
        self._commit()
        self.db.refresh(message)
        return _message_read(message)
