"""Access log middleware for structured JSON logging."""

import time
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from .logger import get_logger

logger = get_logger("pawpal.access")


class AccessLogMiddleware:
    """
    ASGI middleware that logs one structured line per HTTP request.

    Logs method, path, status code, duration and client IP. Must run inside
    ContextMiddleware so the request context is available.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        status_code = 500  # if the response never starts

        async def send_with_logging(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_logging)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            ctx = scope.get("state", {}).get("context")
            client = scope.get("client")

            logger.info(
                "HTTP request completed",
                ctx,
                data={
                    "method": scope.get("method"),
                    "path": scope.get("path"),
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                    "client_ip": client[0] if client else "unknown",
                }
            )
