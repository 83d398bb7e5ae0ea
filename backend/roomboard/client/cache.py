"""
Client-side query cache and optimistic updates.

The cache maps query keys (tuples mirroring REST paths) to either a
collection (list of records unique on ``id``) or a value slot (a single
aggregate or status record).
"""

from typing import Any, Dict, Hashable, Iterable, List, Tuple

QueryKey = Tuple[Hashable, ...]

# Query keys

POSTS: QueryKey = ("posts",)
BOOKMARKS: QueryKey = ("user", "bookmarks")


def post_key(post_id: int, resource: str) -> QueryKey:
    return ("posts", post_id, resource)


def comments_key(post_id: int) -> QueryKey:
    return post_key(post_id, "comments")


def likes_key(post_id: int) -> QueryKey:
    return post_key(post_id, "likes")


def liked_key(post_id: int) -> QueryKey:
    """Whether this session's user likes the post."""
    return post_key(post_id, "liked")


def bookmark_key(post_id: int) -> QueryKey:
    return post_key(post_id, "bookmark")


def messages_key(chat_id: int) -> QueryKey:
    return ("chats", chat_id, "messages")


def status_key(user_id: int) -> QueryKey:
    return ("users", user_id, "status")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def _pk(record: Any) -> Any:
    return record["id"] if isinstance(record, dict) else record.id


def chronological(records: Iterable[Any], newest_first: bool = False) -> List[Any]:
    """Sort records by creation time (then id), for rendering."""
    def key(record):
        if isinstance(record, dict):
            return record["createdAt"], record["id"]
        return record.createdAt, record.id

    return sorted(records, key=key, reverse=newest_first)


class ClientCache:
    """Query results of one session, keyed by query key."""

    def __init__(self):
        self._entries: Dict[QueryKey, Any] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def keys(self) -> List[QueryKey]:
        return list(self._entries)

    def get(self, key: QueryKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: QueryKey, value: Any) -> None:
        """Full replace of a collection, or overwrite of a value slot."""
        if isinstance(value, list):
            value = list(value)
        self._entries[key] = value

    def discard(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    def discard_prefix(self, prefix: QueryKey) -> List[QueryKey]:
        """Drop every entry whose key starts with ``prefix``."""
        dropped = [k for k in self._entries if k[: len(prefix)] == prefix]
        for key in dropped:
            del self._entries[key]
        return dropped

    def collection(self, key: QueryKey) -> List[Any]:
        """Copy of a cached collection ([] when not cached)."""
        return list(self._entries.get(key) or [])

    # Merge operations on collections

    def merge_create(self, key: QueryKey, record: Any) -> bool:
        """
        Append ``record`` unless a record with the same id is cached.

        Returns:
            True if the record was appended
        """
        records = self._entries.setdefault(key, [])
        record_id = _pk(record)
        if any(_pk(r) == record_id for r in records):
            return False
        records.append(record)
        return True

    def merge_update(self, key: QueryKey, record: Any) -> bool:
        """
        Replace the cached record with the same id. Records the session
        does not hold are ignored.

        Returns:
            True if a record was replaced
        """
        records = self._entries.get(key)
        if not records:
            return False
        record_id = _pk(record)
        for index, existing in enumerate(records):
            if _pk(existing) == record_id:
                records[index] = record
                return True
        return False

    def merge_delete(self, key: QueryKey, record_id: Any) -> bool:
        """
        Remove the cached record with this id, if any.

        Returns:
            True if a record was removed
        """
        records = self._entries.get(key)
        if not records:
            return False
        kept = [r for r in records if _pk(r) != record_id]
        if len(kept) == len(records):
            return False
        self._entries[key] = kept
        return True


class OptimisticUpdate:
    """
    A speculative value written to one cache slot ahead of the server.

    ``begin`` snapshots the slot and writes the speculative value.
    ``commit`` discards the snapshot, optionally writing the confirmed
    value. ``rollback`` restores the snapshot, unless the slot no longer
    holds the speculative value (a confirmed value arrived meanwhile).
    """

    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

    def __init__(self, cache: ClientCache, key: QueryKey, speculative: Any):
        self.cache = cache
        self.key = key
        self.speculative = speculative
        self.snapshot = cache.get(key, MISSING)
        self.state = self.PENDING

    @classmethod
    def begin(cls, cache: ClientCache, key: QueryKey, speculative: Any) -> "OptimisticUpdate":
        update = cls(cache, key, speculative)
        cache.set(key, speculative)
        return update

    def _finish(self, state: str) -> None:
        if self.state != self.PENDING:
            raise RuntimeError(f"Optimistic update already {self.state}")
        self.state = state

    def commit(self, confirmed: Any = MISSING) -> None:
        self._finish(self.COMMITTED)
        self.snapshot = MISSING
        if confirmed is not MISSING:
            self.cache.set(self.key, confirmed)

    def rollback(self) -> bool:
        """
        Returns:
            True if the snapshot was restored
        """
        self._finish(self.ROLLED_BACK)
        snapshot, self.snapshot = self.snapshot, MISSING

        if self.cache.get(self.key, MISSING) != self.speculative:
            return False
        if snapshot is MISSING:
            self.cache.discard(self.key)
        else:
            self.cache.set(self.key, snapshot)
        return True

