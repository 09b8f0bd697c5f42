from typing import Dict, Any, Optional
from contextvars import ContextVar, Token
from dataclasses import dataclass
import time
import secrets
import re


TRACE_ID_PATTERN = re.compile(r'^t\d{10}[0-9a-f]{12}$')
REQUEST_ID_PATTERN = re.compile(r'^r\d{10}[0-9a-f]{12}$')
SPAN_ID_PATTERN = re.compile(r'^s[0-9a-f]{8}$')


def generate_trace_id() -> str:
    """
    Generate a new trace_id.

    Format: t + Unix timestamp (seconds) + 12 hexadecimal characters
    Example: t1735228800a1b2c3d4e5f6

    Returns:
        str: A unique trace_id
    """
    timestamp = int(time.time())
    random_hex = secrets.token_hex(6)
    return f"t{timestamp}{random_hex}"


def generate_request_id() -> str:
    """
    Generate a new request_id.

    Format: r + Unix timestamp (seconds) + 12 hexadecimal characters
    Example: r1735228800f6e5d4c3b2a1

    Returns:
        str: A unique request_id
    """
    timestamp = int(time.time())
    random_hex = secrets.token_hex(6)
    return f"r{timestamp}{random_hex}"


def generate_span_id() -> str:
    """
    Generate a new span_id.

    Format: s + 8 hexadecimal characters
    Example: sa1b2c3d4

    Returns:
        str: A unique span_id
    """
    random_hex = secrets.token_hex(4)
    return f"s{random_hex}"


def is_valid_trace_id(trace_id: str) -> bool:
    """
    Validate trace_id format.

    Args:
        trace_id: The trace_id to validate

    Returns:
        bool: True if valid, False otherwise
    """
    return bool(TRACE_ID_PATTERN.match(trace_id))


def is_valid_request_id(request_id: str) -> bool:
    """
    Validate request_id format.

    Args:
        request_id: The request_id to validate

    Returns:
        bool: True if valid, False otherwise
    """
    return bool(REQUEST_ID_PATTERN.match(request_id))


def is_valid_span_id(span_id: str) -> bool:
    """
    Validate span_id format.

    Args:
        span_id: The span_id to validate

    Returns:
        bool: True if valid, False otherwise
    """
    return bool(SPAN_ID_PATTERN.match(span_id))


@dataclass(frozen=True)
class RequestContext:
    """
    Request context passed explicitly through the application.

    Immutable dataclass containing tracing information for observability.

    Fields:
    - trace_id: Global trace identifier (e.g., "t1735228800a1b2c3d4e5f6")
    - trace_source: Where the trace originated (e.g., "PAWPAL:GET/api/users")
    - request_id: Request identifier (e.g., "r1735228800f6e5d4c3b2a1")
    - request_source: Current service and endpoint (e.g., "PAWPAL:PUT/api/dogs/3")
    - span_id: Span identifier for this operation (e.g., "sa1b2c3d4")
    - span_source: Service call path (e.g., "WEB:GET/profile->PAWPAL:GET/api/users/3")
    - parent_span_id: Caller's span_id when one was propagated
    """
    trace_id: str
    trace_source: str
    request_id: str
    request_source: str
    span_id: str
    span_source: str
    parent_span_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        data = {
            'trace_id': self.trace_id,
            'trace_source': self.trace_source,
            'request_id': self.request_id,
            'request_source': self.request_source,
            'span_id': self.span_id,
            'span_source': self.span_source
        }
        if self.parent_span_id:
            data['parent_span_id'] = self.parent_span_id
        return data


def new_context(source: str) -> RequestContext:
    """Build a fresh context for work that does not start from an HTTP request.

    Used by startup hooks and maintenance tools.
    """
    return RequestContext(
        trace_id=generate_trace_id(),
        trace_source=source,
        request_id=generate_request_id(),
        request_source=source,
        span_id=generate_span_id(),
        span_source=source
    )


_current_context: ContextVar[Optional[RequestContext]] = ContextVar("pawpal_request_context", default=None)


def set_current_context(ctx: RequestContext) -> Token:
    """Make ctx the current context for this task. Returns a token for reset."""
    return _current_context.set(ctx)


def reset_current_context(token: Token) -> None:
    """Restore whatever context was current before set_current_context."""
    _current_context.reset(token)


def get_current_context() -> Optional[RequestContext]:
    return _current_context.get()


def get_context() -> Dict[str, Any]:
    """Current context as a dict, empty outside of a request."""
    ctx = _current_context.get()
    return ctx.to_dict() if ctx else {}
