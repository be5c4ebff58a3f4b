"""
Request size guard.
Rejects bodies larger than the configured limit, whether the size is
declared up front in Content-Length or only known while streaming.
"""
import logging

from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.config.exceptions import error_response

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """ASGI middleware answering 413 for oversized request bodies."""

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    def _too_large(self) -> str:
        return f"Request body exceeds {self.max_body_bytes} bytes"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_body_bytes:
            logger.warning(
                "Rejected %s %s: declared body of %s bytes exceeds %d",
                scope["method"], scope["path"], declared, self.max_body_bytes,
            )
            response = error_response(413, self._too_large())
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.warning(
                        "Rejected %s %s: streamed body exceeds %d bytes",
                        scope["method"], scope["path"], self.max_body_bytes,
                    )
                    raise HTTPException(status_code=413, detail=self._too_large())
            return message

        await self.app(scope, limited_receive, send)
