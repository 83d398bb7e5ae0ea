"""
FastAPI application entrypoint for the Roomboard backend.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio

from roomboard.api import chats, comments, posts, users
from roomboard.core.config import Settings, settings as default_settings
from roomboard.core.db import SessionLocal, create_db_engine, create_session_factory, engine, init_db
from roomboard.core.errors import register_exception_handlers
from roomboard.core.logging import configure_logging
from roomboard.realtime import (
    ChannelRegistry,
    FanOutEmitter,
    SessionHandlers,
    SocketIOTransport,
    Transport,
    create_socket_server,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, transport: Optional[Transport] = None) -> FastAPI:
    """
    Build the FastAPI app together with its realtime services.

    The database engine follows ``settings`` (DATABASE_URL, SQL_ECHO); the
    process-wide engine is reused when they are the global settings. The
    channel registry and emitter are created once here and shared by the
    REST endpoints (through app.state) and the Socket.IO handlers.
    ``transport`` replaces Socket.IO delivery, e.g. to record events.
    """
    settings = settings or default_settings

    if settings is default_settings:
        db_engine, session_factory = engine, SessionLocal
    else:
        db_engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        session_factory = create_session_factory(db_engine)

    sio = create_socket_server(settings)
    registry = ChannelRegistry(transport or SocketIOTransport(sio))
    emitter = FanOutEmitter(registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        init_db(db_engine)
        registry.init()
        logger.info("%s started", settings.APP_NAME)
        yield
        await registry.teardown()
        if db_engine is not engine:
            db_engine.dispose()
        logger.info("%s stopped", settings.APP_NAME)

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="REST API for rooms and jobs listings, comments, likes, bookmarks and chats",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.state.settings = settings
    app.state.sio = sio
    app.state.registry = registry
    app.state.emitter = emitter
    app.state.engine = db_engine
    app.state.session_factory = session_factory
    app.state.socket_handlers = SessionHandlers(sio, registry, emitter, session_factory)
    app.state.socket_handlers.register()

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "realtime": registry.started,
            "channels": registry.channel_count(),
        }

    # Register routers
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(comments.router, prefix="/api/comments", tags=["comments"])
    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(chats.router, prefix="/api/chats", tags=["chats"])

    return app


app = create_app()

# Export the Socket.IO app as the main ASGI application
# This allows Socket.IO to handle WebSocket connections at /socket.io/
asgi_app = socketio.ASGIApp(app.state.sio, app)

if __name__ == "__main__":
    import uvicorn
    # Run the Socket.IO app which wraps the FastAPI app
    uvicorn.run(asgi_app, host=default_settings.HOST, port=default_settings.PORT)
