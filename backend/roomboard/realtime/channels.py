"""
Channel names for realtime events.

A channel groups the sessions interested in one entity instance. Names carry
an entity prefix, except chat channels which are the bare chat id.
"""

from typing import Union

# Every connected session is a member; carries post list changes
CHANNEL_POSTS = "posts"

Id = Union[int, str]


def post_channel(post_id: Id) -> str:
    """Comments and likes of one post."""
    return f"post-{post_id}"


def chat_channel(chat_id: Id) -> str:
    """Messages of one chat; the room key is the bare chat id."""
    return str(chat_id)


def user_channel(user_id: Id) -> str:
    """Private channel of all sessions signed in as one user."""
    return f"user-{user_id}"


def presence_channel(user_id: Id) -> str:
    """Online/offline status of one user."""
    return f"presence-{user_id}"
