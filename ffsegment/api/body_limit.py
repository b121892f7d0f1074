"""ASGI middleware capping the size of request bodies."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ffsegment.core.config.settings import settings

from .uploads import PayloadTooLargeError

logger = logging.getLogger(__name__)


def declared_content_length(scope: Scope) -> Optional[int]:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class BodySizeLimitMiddleware:
    """
    Answers 413 for request bodies larger than ``max_bytes``.

    A declared Content-Length over the limit is refused before any body is read.
    Otherwise the body is counted while it streams in, and reading stops at the
    first chunk that crosses the limit. Without an explicit ``max_bytes`` the
    limit is ``settings.MAX_UPLOAD_BYTES`` at request time.
    """

    def __init__(self, app: ASGIApp, max_bytes: Optional[int] = None):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.max_bytes if self.max_bytes is not None else settings.MAX_UPLOAD_BYTES

        declared = declared_content_length(scope)
        if declared is not None and declared > limit:
            logger.warning(f"Refusing {declared} byte request body, limit is {limit} bytes")
            await self._reject(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    raise PayloadTooLargeError(f"Request body exceeds {limit} bytes")
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except PayloadTooLargeError:
            if response_started:
                raise
            logger.warning(f"Request body crossed the {limit} byte limit after {received} bytes")
            await self._reject(scope, receive, send)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(
            {"detail": "Request Entity Too Large"},
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
        await response(scope, receive, send)
