import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict
from .context import RequestContext, get_context


# Security: Keys that should never be logged
FORBIDDEN_KEYS = {
    'authorization', 'token', 'password', 'secret',
    'api_key', 'bearer', 'jwt', 'credential', 'auth'
}

# Correlation keys that stay at the top level instead of going into "data"
TOP_LEVEL_KEYS = {
    'trace_id', 'trace_source', 'request_id', 'request_source',
    'span_id', 'span_source', 'parent_span_id',
    'user_id', 'dog_id', 'owner_id'
}


class StructuredLogger:
    """
    Structured JSON logger that injects request context.

    Context comes from the explicit ctx argument when given, otherwise from
    the current contextvar (set by ContextMiddleware):
    - trace_id, trace_source
    - request_id, request_source
    - span_id, span_source, parent_span_id

    Usage:
        logger = get_logger("pawpal.repositories.user")
        logger.info("User created", ctx, user_id=7, data={"role": "walker"})
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.logger = logging.getLogger(service_name)
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)
        self.logger.propagate = False

    @staticmethod
    def _sanitize(values: Dict[str, Any]) -> Dict[str, Any]:
        """Remove forbidden keys for security."""
        return {
            k: v for k, v in values.items()
            if k.lower() not in FORBIDDEN_KEYS
        }

    def _log(
        self,
        level: str,
        message: str,
        ctx: Optional[RequestContext] = None,
        data: Any = None,
        **kwargs
    ):
        """
        Build and emit one JSON log line.

        Priority (later overrides earlier):
        1. Base fields (timestamp, level, service, message)
        2. Request context (explicit ctx, else contextvars)
        3. Top-level correlation kwargs (user_id, dog_id, ...)
        Remaining kwargs are merged into the "data" envelope.
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": level,
            "service": self.service_name,
            "message": message
        }

        log_entry.update(ctx.to_dict() if ctx is not None else get_context())

        safe_kwargs = self._sanitize(kwargs)
        payload: Dict[str, Any] = {}
        if data is not None:
            if isinstance(data, dict):
                payload.update(self._sanitize(data))
            else:
                payload["value"] = data

        for key, value in safe_kwargs.items():
            if key in TOP_LEVEL_KEYS:
                log_entry[key] = value
            else:
                payload[key] = value

        if payload:
            log_entry["data"] = payload

        log_line = json.dumps(log_entry, default=str)

        log_method = getattr(self.logger, level.lower())
        log_method(log_line)

    def debug(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("DEBUG", message, ctx, **kwargs)

    def info(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("INFO", message, ctx, **kwargs)

    def warning(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("WARNING", message, ctx, **kwargs)

    def error(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("ERROR", message, ctx, **kwargs)

    def critical(self, message: str, ctx: Optional[RequestContext] = None, **kwargs):
        self._log("CRITICAL", message, ctx, **kwargs)


def get_logger(service_name: str) -> StructuredLogger:
    """Get a structured logger for the given service."""
    return StructuredLogger(service_name)
