import asyncio
import time

import pytest

from shared.observability.context import (
    RequestContext,
    generate_trace_id,
    generate_request_id,
    generate_span_id,
    get_context,
    get_current_context,
    is_valid_trace_id,
    is_valid_request_id,
    is_valid_span_id,
    new_context,
    reset_current_context,
    set_current_context,
)


def _ctx(**overrides) -> RequestContext:
    fields = dict(
        trace_id='t1735228800a1b2c3d4e5f6',
        trace_source='WEB:GET/profile',
        request_id='r1735228800f6e5d4c3b2a1',
        request_source='PAWPAL:GET/api/users/3',
        span_id='sa1b2c3d4',
        span_source='WEB:GET/profile->PAWPAL:GET/api/users/3'
    )
    fields.update(overrides)
    return RequestContext(**fields)


@pytest.mark.parametrize("generate, prefix, validate", [
    (generate_trace_id, 't', is_valid_trace_id),
    (generate_request_id, 'r', is_valid_request_id),
])
def test_generated_ids_carry_timestamp_and_random_hex(generate, prefix, validate):
    """Trace and request ids are prefix + unix seconds + 12 hex chars."""
    before = int(time.time())
    value = generate()
    after = int(time.time())

    assert value.startswith(prefix)
    assert len(value) == 23
    assert before <= int(value[1:11]) <= after
    assert all(c in '0123456789abcdef' for c in value[11:])
    assert validate(value)
    assert generate() != value


def test_generated_span_id_format():
    span_id = generate_span_id()

    assert span_id.startswith('s')
    assert len(span_id) == 9
    assert is_valid_span_id(span_id)


@pytest.mark.parametrize("value", [
    't-1735228800-abc',
    'r1735228800a1b2c3d4e5f6',
    't1735228800',
    't1735228800ABC',
    't1735228800a1b2c3d4e5f6g',
])
def test_is_valid_trace_id_rejects_malformed(value):
    assert not is_valid_trace_id(value)


@pytest.mark.parametrize("value", ['s123', 'sABCD1234', 'span-123', 'sa1b2c3d4e'])
def test_is_valid_span_id_rejects_malformed(value):
    assert not is_valid_span_id(value)


def test_request_context_to_dict_omits_missing_parent_span():
    result = _ctx().to_dict()

    assert result == {
        'trace_id': 't1735228800a1b2c3d4e5f6',
        'trace_source': 'WEB:GET/profile',
        'request_id': 'r1735228800f6e5d4c3b2a1',
        'request_source': 'PAWPAL:GET/api/users/3',
        'span_id': 'sa1b2c3d4',
        'span_source': 'WEB:GET/profile->PAWPAL:GET/api/users/3'
    }


def test_request_context_to_dict_with_parent_span():
    result = _ctx(parent_span_id='s00000001').to_dict()

    assert result['parent_span_id'] == 's00000001'


def test_request_context_is_immutable():
    ctx = _ctx()

    with pytest.raises(AttributeError):
        ctx.trace_id = 'tother'


def test_new_context_generates_valid_ids():
    ctx = new_context("PAWPAL:startup")

    assert is_valid_trace_id(ctx.trace_id)
    assert is_valid_request_id(ctx.request_id)
    assert is_valid_span_id(ctx.span_id)
    assert ctx.trace_source == ctx.request_source == ctx.span_source == "PAWPAL:startup"


def test_current_context_set_and_reset():
    assert get_current_context() is None
    assert get_context() == {}

    ctx = _ctx()
    token = set_current_context(ctx)
    try:
        assert get_current_context() is ctx
        assert get_context()['request_id'] == ctx.request_id
    finally:
        reset_current_context(token)

    assert get_current_context() is None


@pytest.mark.asyncio
async def test_current_context_is_isolated_per_task():
    """Concurrent requests each see their own context."""
    seen = {}

    async def handle(request_id: str):
        token = set_current_context(_ctx(request_id=request_id))
        try:
            await asyncio.sleep(0)
            seen[request_id] = get_current_context().request_id
        finally:
            reset_current_context(token)

    await asyncio.gather(
        handle('r1735228800aaaaaaaaaaaa'),
        handle('r1735228800bbbbbbbbbbbb'),
    )

    assert seen == {
        'r1735228800aaaaaaaaaaaa': 'r1735228800aaaaaaaaaaaa',
        'r1735228800bbbbbbbbbbbb': 'r1735228800bbbbbbbbbbbb',
    }
