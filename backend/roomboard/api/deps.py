"""
Shared FastAPI dependencies for API routers.
"""
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from roomboard.core.db import get_db
from roomboard.core.errors import AuthenticationError, NotFoundError
from roomboard.realtime.emitter import FanOutEmitter
from roomboard.services.store import Store


def get_store(db: Session = Depends(get_db)) -> Store:
    """Store bound to the request's database session."""
    return Store(db)


def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    store: Store = Depends(get_store),
) -> int:
    """
    Identify the caller from the X-User-Id header.

    Session login and phone verification live outside this service; the
    gateway in front of it forwards the verified user id.
    """
    if not x_user_id:
        raise AuthenticationError("Authentication required")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise AuthenticationError("Invalid user id")

    try:
        store.get_user(user_id)
    except NotFoundError:
        raise AuthenticationError("Unknown user")
    return user_id


def get_emitter(request: Request) -> FanOutEmitter:
    """The application's fan-out emitter."""
    return request.app.state.emitter
