"""FastAPI application for the action tracker backend."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from action_tracker.config import ALLOWED_ORIGINS, MAX_BODY_BYTES
from action_tracker.database import ActionStore, StoreError
from action_tracker.routes.actions import router as actions_router

logger = logging.getLogger(__name__)

STATIC_DIR = (Path(__file__).parent / "static").resolve()
INDEX_FILE = STATIC_DIR / "index.html"


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_bytes`` with 413.

    A ``Content-Length`` header is checked up front. Bodies sent without
    one (chunked) are buffered up to the limit and then replayed.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = MAX_BODY_BYTES):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        too_large = JSONResponse(status_code=413, content={"error": "payload too large"})
        length = Headers(scope=scope).get("content-length")
        if length is not None and length.isdigit() and int(length) > self.max_bytes:
            await too_large(scope, receive, send)
            return

        messages: list[Message] = []
        size = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            size += len(message.get("body", b""))
            if size > self.max_bytes:
                await too_large(scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)


def create_app(store: Optional[ActionStore] = None) -> FastAPI:
    """Build the application around an explicitly constructed store."""
    store = store or ActionStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize the store on startup and release it on shutdown."""
        store.initialize()
        yield
        store.close()

    app = FastAPI(title="Action Tracker", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type"],
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=MAX_BODY_BYTES)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "invalid payload"})

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.error(
            "Storage failure on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(status_code=500, content={"error": "internal server error"})

    app.include_router(actions_router)

    @app.get("/{path:path}", include_in_schema=False)
    async def serve_client(path: str):
        """Serve client assets, falling back to index.html for client-side routes."""
        try:
            file_path = (STATIC_DIR / path).resolve()
        except (ValueError, OSError):
            return FileResponse(INDEX_FILE)
        if file_path.is_relative_to(STATIC_DIR) and file_path.is_file():
            return FileResponse(file_path)
        return FileResponse(INDEX_FILE)

    return app


app = create_app()
