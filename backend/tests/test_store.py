import pytest

from roomboard.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from roomboard.schemas.domain import (
    CommentCreate,
    CommentUpdate,
    MessageCreate,
    PostCreate,
    PostUpdate,
    UserCreate,
)
from roomboard.schemas.enums import PostType

from conftest import JOB, ROOM


def test_create_user_rejects_taken_username(store, users):
    with pytest.raises(ConflictError):
        store.create_user(UserCreate(username="alice", fullname="Other Alice"))


def test_created_records_carry_id_and_timestamp(store, users):
    alice = users[0]

    post = store.create_post(alice.id, PostCreate(**ROOM))

    assert post.id > 0
    assert post.userId == alice.id
    assert post.username == "alice"
    assert post.createdAt.endswith("+00:00")
    assert post.editedAt is None


def test_list_posts_filters_and_orders(store, users):
    alice, bob, _ = users
    first = store.create_post(alice.id, PostCreate(**ROOM))
    second = store.create_post(bob.id, PostCreate(**JOB))

    assert [p.id for p in store.list_posts()] == [second.id, first.id]
    assert [p.id for p in store.list_posts(PostType.ROOM)] == [first.id]
    assert [p.id for p in store.list_posts(search="barista")] == [second.id]
    assert [p.id for p in store.list_user_posts("alice")] == [first.id]


def test_update_post_by_owner(store, users):
    alice = users[0]
    post = store.create_post(alice.id, PostCreate(**ROOM))

    updated = store.update_post(alice.id, post.id, PostUpdate(price=8500))

    assert updated.price == 8500
    assert updated.title == post.title
    assert updated.editedAt is not None


def test_update_post_keeps_room_rule(store, users):
    alice = users[0]
    post = store.create_post(alice.id, PostCreate(**ROOM))

    with pytest.raises(ValidationError, match="images and price are required"):
        store.update_post(alice.id, post.id, PostUpdate(images=[]))

    job = store.create_post(alice.id, PostCreate(**JOB))
    with pytest.raises(ValidationError):
        store.update_post(alice.id, job.id, PostUpdate(type=PostType.ROOM))


def test_only_owner_modifies_post(store, users):
    alice, bob, _ = users
    post = store.create_post(alice.id, PostCreate(**JOB))

    with pytest.raises(ForbiddenError):
        store.update_post(bob.id, post.id, PostUpdate(title="Mine now"))
    with pytest.raises(ForbiddenError):
        store.delete_post(bob.id, post.id)


def test_missing_records(store, users):
    alice = users[0]

    with pytest.raises(NotFoundError):
        store.get_post(999)
    with pytest.raises(NotFoundError):
        store.create_comment(alice.id, 999, CommentCreate(content="hi"))
    with pytest.raises(NotFoundError):
        store.toggle_like(alice.id, 999)
    with pytest.raises(NotFoundError):
        store.get_user_by_username("nobody")


def test_delete_post_removes_its_thread_and_reactions(store, users):
    alice, bob, _ = users
    post = store.create_post(alice.id, PostCreate(**JOB))
    store.create_comment(bob.id, post.id, CommentCreate(content="Still open?"))
    store.toggle_like(bob.id, post.id)
    store.toggle_bookmark(bob.id, post.id)

    assert store.delete_post(alice.id, post.id) == post.id

    with pytest.raises(NotFoundError):
        store.list_comments(post.id)
    assert store.list_bookmarked_posts(bob.id) == []


def test_comment_replies_and_depth(store, users):
    alice, bob, _ = users
    post = store.create_post(alice.id, PostCreate(**JOB))

    parent = store.create_comment(bob.id, post.id, CommentCreate(content="level 0"))
    for depth in range(1, 4):
        parent = store.create_comment(alice.id, post.id, CommentCreate(content=f"level {depth}", parentId=parent.id))

    with pytest.raises(ValidationError, match="nested"):
        store.create_comment(bob.id, post.id, CommentCreate(content="too deep", parentId=parent.id))

    assert [c.content for c in store.list_comments(post.id)] == ["level 0", "level 1", "level 2", "level 3"]


def test_reply_must_belong_to_same_post(store, users):
    alice = users[0]
    first = store.create_post(alice.id, PostCreate(**JOB))
    second = store.create_post(alice.id, PostCreate(**JOB))
    comment = store.create_comment(alice.id, first.id, CommentCreate(content="hi"))

    with pytest.raises(ValidationError):
        store.create_comment(alice.id, second.id, CommentCreate(content="reply", parentId=comment.id))


def test_delete_comment_takes_replies(store, users):
    alice, bob, _ = users
    post = store.create_post(alice.id, PostCreate(**JOB))
    top = store.create_comment(bob.id, post.id, CommentCreate(content="top"))
    store.create_comment(alice.id, post.id, CommentCreate(content="reply", parentId=top.id))
    other = store.create_comment(alice.id, post.id, CommentCreate(content="other"))

    ref = store.delete_comment(bob.id, top.id)

    assert (ref.id, ref.postId) == (top.id, post.id)
    assert [c.id for c in store.list_comments(post.id)] == [other.id]


def test_only_author_modifies_comment(store, users):
    alice, bob, _ = users
    post = store.create_post(alice.id, PostCreate(**JOB))
    comment = store.create_comment(bob.id, post.id, CommentCreate(content="mine"))

    with pytest.raises(ForbiddenError):
        store.update_comment(alice.id, comment.id, CommentUpdate(content="edited"))

    edited = store.update_comment(bob.id, comment.id, CommentUpdate(content="edited"))
    assert edited.content == "edited"
    assert edited.editedAt is not None


def test_like_toggle(store, users):
    alice, bob, carol = users
    post = store.create_post(alice.id, PostCreate(**JOB))

    assert store.toggle_like(bob.id, post.id).model_dump() == {"postId": post.id, "liked": True, "count": 1}
    assert store.toggle_like(carol.id, post.id).count == 2
    assert store.toggle_like(bob.id, post.id).model_dump() == {"postId": post.id, "liked": False, "count": 1}
    assert [l.userId for l in store.get_likes(post.id).likes] == [carol.id]


def test_bookmark_toggle(store, users):
    alice, bob, _ = users
    post = store.create_post(alice.id, PostCreate(**JOB))

    assert store.get_bookmark(bob.id, post.id).bookmarked is False
    assert store.toggle_bookmark(bob.id, post.id).bookmarked is True
    assert [p.id for p in store.list_bookmarked_posts(bob.id)] == [post.id]
    assert store.list_bookmarked_posts(alice.id) == []

    assert store.toggle_bookmark(bob.id, post.id).bookmarked is False
    assert store.list_bookmarked_posts(bob.id) == []


def test_open_chat_is_reused(store, users):
    alice, bob, _ = users

    chat = store.open_chat(alice.id, bob.id)

    assert store.open_chat(bob.id, alice.id).id == chat.id
    assert [u.id for u in chat.participants] == [alice.id, bob.id]
    with pytest.raises(ValidationError):
        store.open_chat(alice.id, alice.id)


def test_messages_only_for_participants(store, users):
    alice, bob, carol = users
    chat = store.open_chat(alice.id, bob.id)

    message = store.create_message(alice.id, chat.id, MessageCreate(content="Hello"))

    assert message.chatId == chat.id
    assert store.list_messages(bob.id, chat.id) == [message]
    assert store.list_chats(bob.id)[0].lastMessage == message
    assert store.is_participant(carol.id, chat.id) is False
    with pytest.raises(ForbiddenError):
        store.create_message(carol.id, chat.id, MessageCreate(content="Hi"))
    with pytest.raises(ForbiddenError):
        store.list_messages(carol.id, chat.id)


def test_blocked_sender_cannot_message(store, users):
    alice, bob, _ = users
    chat = store.open_chat(alice.id, bob.id)

    store.block_user(bob.id, alice.id)
    store.block_user(bob.id, alice.id)

    assert store.is_blocked(bob.id, alice.id)
    with pytest.raises(ForbiddenError, match="cannot message"):
        store.create_message(alice.id, chat.id, MessageCreate(content="Hello?"))
    store.create_message(bob.id, chat.id, MessageCreate(content="Bye"))

    with pytest.raises(ValidationError):
        store.block_user(bob.id, bob.id)


def test_user_online_status(store, users):
    alice = users[0]

    status = store.set_user_online(alice.id, True)

    assert status.online is True
    assert status.lastSeen is not None
    assert store.get_user(alice.id).isOnline is True
