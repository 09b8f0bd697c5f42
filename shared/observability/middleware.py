from starlette.types import ASGIApp, Message, Receive, Scope, Send
from starlette.requests import Request as StarletteRequest
from .context import (
    RequestContext,
    generate_trace_id,
    generate_request_id,
    generate_span_id,
    is_valid_request_id,
    is_valid_span_id,
    is_valid_trace_id,
    set_current_context,
    reset_current_context,
)


class ContextMiddleware:
    """
    ASGI middleware that builds a RequestContext per HTTP request.

    Reads X-Trace-Id, X-Request-Id, X-Trace-Source, X-Request-Source and
    X-Parent-Span-Id; generates whatever is missing or malformed. A new span_id is always
    generated for this service. The context is stored on request.state and in
    the task-local contextvar so the logger picks it up without plumbing.
    """

    def __init__(self, app: ASGIApp, service_name: str):
        self.app = app
        self.service_name = service_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = StarletteRequest(scope)

        # Malformed caller ids are replaced rather than propagated
        trace_id = request.headers.get('X-Trace-Id', '')
        if not is_valid_trace_id(trace_id):
            trace_id = generate_trace_id()
        request_id = request.headers.get('X-Request-Id', '')
        if not is_valid_request_id(request_id):
            request_id = generate_request_id()
        parent_span_id = request.headers.get('X-Parent-Span-Id')
        if parent_span_id is not None and not is_valid_span_id(parent_span_id):
            parent_span_id = None
        span_id = generate_span_id()

        method = scope.get("method", "GET")
        path = scope.get("path", "/")
        request_source = f"{self.service_name.upper()}:{method}{path}"
        trace_source = request.headers.get('X-Trace-Source') or request_source

        parent_request_source = request.headers.get('X-Request-Source')
        if parent_request_source:
            span_source = f"{parent_request_source}->{request_source}"
        else:
            span_source = request_source

        ctx = RequestContext(
            trace_id=trace_id,
            trace_source=trace_source,
            request_id=request_id,
            request_source=request_source,
            span_id=span_id,
            span_source=span_source,
            parent_span_id=parent_span_id
        )

        scope.setdefault("state", {})["context"] = ctx
        token = set_current_context(ctx)

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-trace-id", trace_id.encode()))
                headers.append((b"x-request-id", request_id.encode()))
                headers.append((b"x-span-id", span_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_headers)
        finally:
            reset_current_context(token)
