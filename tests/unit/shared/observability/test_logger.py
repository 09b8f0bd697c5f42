import json
import logging
from typing import Any, Dict

from shared.observability.logger import get_logger, FORBIDDEN_KEYS
from shared.observability.context import (
    RequestContext,
    reset_current_context,
    set_current_context,
)


class DummyHandler(logging.Handler):
    """Capture log records for assertions."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - trivial
        self.records.append(record)


def _make_logger(service_name: str = "test-service") -> tuple[Any, DummyHandler]:
    """Create a logger instance with a dummy handler attached."""
    logger = get_logger(service_name)

    # Remove any existing handlers and attach dummy
    logger.logger.handlers = []
    handler = DummyHandler()
    logger.logger.addHandler(handler)

    return logger, handler


def _ctx(trace_id: str = "t123", request_id: str = "r456") -> RequestContext:
    return RequestContext(
        trace_id=trace_id,
        trace_source="SRC",
        request_id=request_id,
        request_source="REQ",
        span_id="s789abcd",
        span_source="SPAN",
    )


def test_logger_wraps_kwargs_in_data_envelope():
    logger, handler = _make_logger()

    logger.info("Test message", extra_field="value", count=1)

    assert len(handler.records) == 1
    payload = json.loads(handler.records[0].getMessage())

    assert payload["message"] == "Test message"
    assert payload["level"] == "INFO"
    assert payload["service"] == "test-service"
    assert payload["data"] == {"extra_field": "value", "count": 1}


def test_logger_merges_explicit_data_and_kwargs():
    logger, handler = _make_logger()

    logger.info("With data", data={"a": 1}, b=2)

    payload = json.loads(handler.records[0].getMessage())
    assert payload["data"] == {"a": 1, "b": 2}


def test_logger_keeps_non_dict_data_under_value_key():
    logger, handler = _make_logger()

    logger.info("Non-dict data", data=[1, 2, 3])

    payload = json.loads(handler.records[0].getMessage())
    assert payload["data"] == {"value": [1, 2, 3]}


def test_logger_omits_data_when_empty():
    logger, handler = _make_logger()

    logger.warning("Bare")

    payload = json.loads(handler.records[0].getMessage())
    assert "data" not in payload
    assert payload["level"] == "WARNING"


def test_logger_includes_context_fields_top_level():
    logger, handler = _make_logger()

    logger.info("With context", _ctx(), data={"x": 1})

    payload = json.loads(handler.records[0].getMessage())

    # Context fields are top-level
    assert payload["trace_id"] == "t123"
    assert payload["request_id"] == "r456"
    assert payload["span_id"] == "s789abcd"
    assert payload["data"] == {"x": 1}


def test_logger_uses_current_context_when_none_passed():
    logger, handler = _make_logger()

    token = set_current_context(_ctx(trace_id="t-current", request_id="r-current"))
    try:
        logger.info("Implicit context")
    finally:
        reset_current_context(token)
    logger.info("Outside request")

    inside = json.loads(handler.records[0].getMessage())
    outside = json.loads(handler.records[1].getMessage())
    assert inside["trace_id"] == "t-current"
    assert inside["request_id"] == "r-current"
    assert "trace_id" not in outside


def test_logger_lifts_entity_ids_to_top_level():
    logger, handler = _make_logger()

    logger.info("Override", _ctx(), trace_id="t-override", user_id=7, dog_id=3, fields=["bio"])

    payload = json.loads(handler.records[0].getMessage())
    assert payload["trace_id"] == "t-override"
    assert payload["user_id"] == 7
    assert payload["dog_id"] == 3
    assert payload["data"] == {"fields": ["bio"]}


def test_logger_serializes_non_json_values_as_strings():
    from decimal import Decimal

    logger, handler = _make_logger()

    logger.info("Decimal", data={"rating": Decimal("4.50")})

    payload = json.loads(handler.records[0].getMessage())
    assert payload["data"] == {"rating": "4.50"}


def test_logger_filters_forbidden_top_level_keys():
    logger, handler = _make_logger()

    kwargs: Dict[str, Any] = {key: "SECRET" for key in FORBIDDEN_KEYS}
    kwargs["safe"] = "ok"

    logger.info("Secrets", **kwargs)

    payload = json.loads(handler.records[0].getMessage())

    # No forbidden key should appear anywhere at top level or inside data
    for forbidden in FORBIDDEN_KEYS:
        assert forbidden not in payload
        if "data" in payload and isinstance(payload["data"], dict):
            assert forbidden not in payload["data"]

    assert payload["data"] == {"safe": "ok"}


def test_logger_filters_forbidden_keys_inside_data():
    logger, handler = _make_logger()

    logger.error("Connect failed", data={"password": "hunter2", "host": "db"})

    payload = json.loads(handler.records[0].getMessage())
    assert payload["data"] == {"host": "db"}
