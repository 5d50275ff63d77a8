"""Request body size ceiling enforced while the body is read."""

import json

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import UploadTooLargeException

logger = get_logger(__name__)


class UploadSizeLimitMiddleware:
    """Reject request bodies larger than ``max_body_bytes`` with a 413.

    Runs as plain ASGI. A declared ``Content-Length`` over the limit is
    refused before any byte is consumed. Bodies without one (chunked
    transfer) are counted message by message, and reading stops at the
    first message that crosses the limit, so the route never parses or
    stages the rest.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_body_bytes: int,
        methods: tuple[str, ...] = ("POST", "PUT"),
    ) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes
        self.methods = methods

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in self.methods:
            await self.app(scope, receive, send)
            return

        declared = self._content_length(scope)
        if declared is not None and declared > self.max_body_bytes:
            self._log_rejection(scope, declared)
            await self._reject(scope, send)
            return

        received = 0
        exceeded = False
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    exceeded = True
                    raise UploadTooLargeException(self.max_body_bytes, received)
            return message

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            # Whatever the app answers after the limit tripped is replaced
            if exceeded:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if not exceeded:
                raise

        if exceeded and not response_started:
            self._log_rejection(scope, received)
            await self._reject(scope, send)

    def _log_rejection(self, scope: Scope, size: int) -> None:
        logger.warning(
            "Request body too large",
            extra={
                "path": scope.get("path"),
                "body_bytes": size,
                "max_body_bytes": self.max_body_bytes,
            },
        )

    @staticmethod
    def _content_length(scope: Scope) -> int | None:
        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    return int(value)
                except ValueError:
                    return None
        return None

    async def _reject(self, scope: Scope, send: Send) -> None:
        request_id = scope.get("state", {}).get("request_id", "unknown")
        body = json.dumps(
            {
                "error": (
                    f"Upload exceeds maximum size of {self.max_body_bytes} bytes"
                ),
                "code": "UPLOAD_TOO_LARGE",
                "request_id": request_id,
            }
        ).encode()
        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode()),
                    (b"connection", b"close"),
                ],
            }
        )
        await send({"type": "http.response.body", "body": body})
