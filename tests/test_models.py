from __future__ import annotations

import json

import pytest

from eventcache_sdk.errors import CorruptRecordError
from eventcache_sdk.models import CachedEvent, ErrorInfo


def test_record_uses_event_key() -> None:
    event = CachedEvent(collection="purchases", payload={"amount": 10})

    record = json.loads(event.to_record())

    assert record == {"collection": "purchases", "event": {"amount": 10}, "error": None}


def test_from_record_accepts_alias_and_nested_error() -> None:
    content = json.dumps(
        {
            "collection": "purchases",
            "event": {"amount": 10},
            "error": {"kind": "ConnectError", "message": "refused", "cause": {"kind": "OSError", "message": "111"}},
        }
    )

    event = CachedEvent.from_record(content)

    assert event.payload == {"amount": 10}
    assert event.error.kind == "ConnectError"
    assert event.error.cause.message == "111"


@pytest.mark.parametrize(
    "content",
    [
        "",
        "not json",
        '{"event": {}}',
        '{"collection": "", "event": {}}',
        '{"collection": "clicks"}',
        '{"collection": "clicks", "event": [1, 2]}',
    ],
)
def test_from_record_rejects_corrupt_content(content: str) -> None:
    with pytest.raises(CorruptRecordError):
        CachedEvent.from_record(content)


def test_error_info_from_exception_follows_cause_chain() -> None:
    try:
        try:
            raise OSError("connection reset")
        except OSError as inner:
            raise RuntimeError("send failed") from inner
    except RuntimeError as exc:
        info = ErrorInfo.from_exception(exc)

    assert info.kind == "RuntimeError"
    assert info.message == "send failed"
    assert info.cause == ErrorInfo(kind="OSError", message="connection reset")


def test_error_info_survives_cyclic_chain() -> None:
    first = ValueError("a")
    second = ValueError("b")
    first.__cause__ = second
    second.__cause__ = first

    info = ErrorInfo.from_exception(first)

    depth = 0
    while info.cause is not None:
        info = info.cause
        depth += 1
    assert depth == 16
