import pytest

from roomboard.client.cache import (
    BOOKMARKS,
    MISSING,
    POSTS,
    ClientCache,
    OptimisticUpdate,
    bookmark_key,
    chronological,
    comments_key,
    likes_key,
)
from roomboard.schemas.domain import BookmarkState

from conftest import comment_record, post_record


@pytest.fixture
def cache():
    return ClientCache()


def test_merge_create_is_keyed_by_id(cache):
    assert cache.merge_create(POSTS, post_record(1)) is True
    assert cache.merge_create(POSTS, post_record(1, title="duplicate")) is False

    assert cache.get(POSTS) == [post_record(1)]


def test_merge_create_starts_missing_collection(cache):
    cache.merge_create(comments_key(4), comment_record(1, post_id=4))

    assert cache.collection(comments_key(4)) == [comment_record(1, post_id=4)]


def test_merge_update_replaces_in_place(cache):
    cache.set(POSTS, [post_record(1), post_record(2)])

    assert cache.merge_update(POSTS, post_record(1, title="Edited")) is True
    assert [p.title for p in cache.get(POSTS)] == ["Edited", post_record(2).title]


def test_merge_update_ignores_unknown_records(cache):
    assert cache.merge_update(POSTS, post_record(9)) is False
    assert POSTS not in cache

    cache.set(POSTS, [post_record(1)])
    assert cache.merge_update(POSTS, post_record(9)) is False
    assert cache.get(POSTS) == [post_record(1)]


def test_merge_delete(cache):
    cache.set(POSTS, [post_record(1), post_record(2)])

    assert cache.merge_delete(POSTS, 1) is True
    assert cache.merge_delete(POSTS, 1) is False
    assert cache.get(POSTS) == [post_record(2)]


def test_set_copies_collections(cache):
    posts = [post_record(1)]
    cache.set(POSTS, posts)
    cache.merge_create(POSTS, post_record(2))

    assert len(posts) == 1


def test_discard_prefix(cache):
    cache.set(comments_key(1), [])
    cache.set(likes_key(1), None)
    cache.set(comments_key(2), [])
    cache.set(POSTS, [])

    dropped = cache.discard_prefix(("posts", 1))

    assert sorted(dropped) == sorted([comments_key(1), likes_key(1)])
    assert sorted(cache.keys()) == sorted([comments_key(2), POSTS])


def test_chronological_sorts_by_creation_then_id():
    records = [
        comment_record(3, createdAt="2026-01-02T00:00:00.000000+00:00"),
        comment_record(2, createdAt="2026-01-01T00:00:00.000000+00:00"),
        comment_record(1, createdAt="2026-01-02T00:00:00.000000+00:00"),
    ]

    assert [r.id for r in chronological(records)] == [2, 1, 3]
    assert [r.id for r in chronological(records, newest_first=True)] == [3, 1, 2]


# Optimistic updates


def saved(bookmarked):
    return BookmarkState(postId=1, bookmarked=bookmarked)


def test_optimistic_commit_keeps_speculative_value(cache):
    cache.set(bookmark_key(1), saved(False))

    update = OptimisticUpdate.begin(cache, bookmark_key(1), saved(True))
    assert cache.get(bookmark_key(1)) == saved(True)

    update.commit()
    assert update.state == OptimisticUpdate.COMMITTED
    assert update.snapshot is MISSING
    assert cache.get(bookmark_key(1)) == saved(True)


def test_optimistic_commit_with_confirmed_value(cache):
    update = OptimisticUpdate.begin(cache, bookmark_key(1), saved(True))
    update.commit(saved(False))

    assert cache.get(bookmark_key(1)) == saved(False)


def test_optimistic_rollback_restores_snapshot(cache):
    cache.set(bookmark_key(1), saved(False))

    update = OptimisticUpdate.begin(cache, bookmark_key(1), saved(True))

    assert update.rollback() is True
    assert update.state == OptimisticUpdate.ROLLED_BACK
    assert cache.get(bookmark_key(1)) == saved(False)


def test_optimistic_rollback_of_missing_slot(cache):
    update = OptimisticUpdate.begin(cache, bookmark_key(1), saved(True))
    update.rollback()

    assert bookmark_key(1) not in cache


def test_rollback_keeps_value_confirmed_meanwhile(cache):
    cache.set(bookmark_key(1), saved(True))
    update = OptimisticUpdate.begin(cache, bookmark_key(1), saved(False))

    # Another session re-saved the post and its event arrived first
    cache.set(bookmark_key(1), BookmarkState(postId=1, bookmarked=True))

    assert update.rollback() is False
    assert cache.get(bookmark_key(1)) == saved(True)


def test_update_finishes_once(cache):
    update = OptimisticUpdate.begin(cache, BOOKMARKS, [])
    update.commit()

    with pytest.raises(RuntimeError):
        update.rollback()
    with pytest.raises(RuntimeError):
        update.commit()
