"""
Declarative base shared by all ORM models.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Column default for creation/edit timestamps."""
    return datetime.now(timezone.utc)
