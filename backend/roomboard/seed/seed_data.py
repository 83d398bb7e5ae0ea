"""
Seed data generation functions for the Roomboard backend.

Creates a small demo board:
- a handful of users
- room and job listings spread over the last weeks
- comment threads with replies
- likes and bookmarks
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Dict, List

from sqlalchemy.orm import Session

from roomboard.models import Bookmark, Comment, Like, Post, User
from roomboard.schemas.enums import PostType

logger = logging.getLogger(__name__)


USERS = [
    {"username": "asha.k", "fullname": "Asha Kumar", "phone": "+919800000001"},
    {"username": "rahul_m", "fullname": "Rahul Mehta", "phone": "+919800000002"},
    {"username": "neha.s", "fullname": "Neha Sharma", "phone": "+919800000003"},
    {"username": "vikram", "fullname": "Vikram Rao", "phone": "+919800000004"},
    {"username": "priya_d", "fullname": "Priya Das", "phone": "+919800000005"},
]

LOCATIONS = ["Koramangala", "Indiranagar", "HSR Layout", "Whitefield", "Jayanagar", "BTM Layout"]

ROOM_TITLES = [
    "Single room in 2BHK, walking distance to metro",
    "Furnished room with balcony",
    "Looking for a flatmate, 3BHK",
    "Room available from next month",
]

JOB_TITLES = [
    "Part-time barista needed",
    "Frontend developer, weekend gigs",
    "Delivery partner, flexible hours",
    "Tutor for class 10 maths",
]

DESCRIPTIONS = [
    "Quiet neighbourhood, close to shops and bus stops.",
    "Friendly people, no brokers please. Message for details.",
    "Reach out on chat, happy to answer questions.",
    "Available immediately. Serious enquiries only.",
]

COMMENT_TEMPLATES = [
    "Is this still available?",
    "Could you share more photos?",
    "What is the deposit?",
    "Sent you a message.",
    "Interested, when can I visit?",
    "Are the hours flexible?",
]

REPLY_TEMPLATES = [
    "Yes, still available.",
    "Sure, check your messages.",
    "Two months of rent.",
    "Anytime this weekend works.",
]

IMAGE_URLS = [
    "https://images.example.com/rooms/1.jpg",
    "https://images.example.com/rooms/2.jpg",
    "https://images.example.com/rooms/3.jpg",
    "https://images.example.com/rooms/4.jpg",
]


def _ago(days: int = 0, hours: int = 0) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days, hours=hours)


def seed_users(db: Session) -> Dict[str, User]:
    """
    Seed users table with the demo members.

    Args:
        db: Database session

    Returns:
        Dictionary mapping usernames to User objects
    """
    users = {}
    for data in USERS:
        user = User(createdAt=_ago(days=random.randint(30, 60)), **data)
        db.add(user)
        users[data["username"]] = user

    db.commit()
    return users


def seed_posts(db: Session, users: Dict[str, User], posts_per_user: int = 2) -> List[Post]:
    """
    Seed posts table with room and job listings. Room listings always carry
    images and a price.

    Args:
        db: Database session
        users: Dictionary of usernames to User objects
        posts_per_user: Number of listings per user

    Returns:
        List of created Post objects
    """
    posts = []
    for user in users.values():
        for _ in range(posts_per_user):
            post_type = random.choice(list(PostType))
            is_room = post_type == PostType.ROOM
            post = Post(
                userId=user.id,
                type=post_type.value,
                title=random.choice(ROOM_TITLES if is_room else JOB_TITLES),
                description=random.choice(DESCRIPTIONS),
                price=random.randrange(6000, 25000, 500) if is_room else None,
                location=random.choice(LOCATIONS),
                images=random.sample(IMAGE_URLS, k=random.randint(1, 3)) if is_room else [],
                createdAt=_ago(days=random.randint(0, 20), hours=random.randint(0, 23)),
            )
            db.add(post)
            posts.append(post)

    db.commit()
    return posts


def seed_comments(db: Session, users: Dict[str, User], posts: List[Post]) -> List[Comment]:
    """
    Seed comment threads: a few top-level comments per post, some with a
    reply from the post's author.
    """
    comments = []
    members = list(users.values())

    for post in posts:
        for _ in range(random.randint(0, 3)):
            author = random.choice([u for u in members if u.id != post.userId])
            comment = Comment(
                postId=post.id,
                userId=author.id,
                content=random.choice(COMMENT_TEMPLATES),
                createdAt=post.createdAt + timedelta(hours=random.randint(1, 12)),
            )
            db.add(comment)
            db.flush()
            comments.append(comment)

            if random.random() < 0.5:
                reply = Comment(
                    postId=post.id,
                    userId=post.userId,
                    parentId=comment.id,
                    content=random.choice(REPLY_TEMPLATES),
                    createdAt=comment.createdAt + timedelta(minutes=random.randint(5, 120)),
                )
                db.add(reply)
                comments.append(reply)

    db.commit()
    return comments


def seed_reactions(db: Session, users: Dict[str, User], posts: List[Post]) -> int:
    """
    Seed likes and bookmarks. Each user reacts at most once per post.

    Returns:
        Number of likes and bookmarks created
    """
    created = 0
    for post in posts:
        for user in users.values():
            if user.id == post.userId:
                continue
            if random.random() < 0.4:
                db.add(Like(postId=post.id, userId=user.id))
                created += 1
            if random.random() < 0.2:
                db.add(Bookmark(postId=post.id, userId=user.id))
                created += 1

    db.commit()
    return created


def run_seed(db: Session, force: bool = False) -> None:
    """
    Run the complete seed process.

    Args:
        db: Database session
        force: If True, skip idempotency check and seed anyway
    """
    existing_user = db.query(User).first()
    if existing_user and not force:
        logger.info("Users already exist in database. Skipping seed.")
        logger.info("To force re-seeding, use --force or delete existing data first.")
        return

    if force:
        # Demo usernames are unique; drop them before seeding again
        for user in db.query(User).filter(User.username.in_([u["username"] for u in USERS])).all():
            db.delete(user)
        db.commit()

    logger.info("Starting seed process...")

    users = seed_users(db)
    logger.info("Created %d users", len(users))

    posts = seed_posts(db, users)
    logger.info("Created %d posts", len(posts))

    comments = seed_comments(db, users, posts)
    logger.info("Created %d comments", len(comments))

    reactions = seed_reactions(db, users, posts)
    logger.info("Created %d likes and bookmarks", reactions)

    logger.info("Seed process completed successfully!")
