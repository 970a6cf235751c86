from __future__ import annotations

import asyncio

import pytest
from websockets.exceptions import (
    ConnectionClosedError,
    ConnectionClosedOK,
    InvalidHandshake,
    InvalidURI,
)
from websockets.frames import Close

from spark_stream.common.exceptions.client_errors import (
    ClientError,
    IncompleteStreamError,
    InvalidInput,
    TransportError,
)
from spark_stream.common.exceptions.exception_rule import (
    classify_exception,
    wrap_transport_error,
)
from spark_stream.core.types import ErrorCode


def _clean_close() -> ConnectionClosedOK:
    # 양쪽 close 프레임이 모두 있으면 rcvd_then_sent 필수
    return ConnectionClosedOK(Close(1000, ""), Close(1000, ""), rcvd_then_sent=True)


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (_clean_close(), ErrorCode.INCOMPLETE_STREAM),
        (ConnectionClosedError(Close(1011, "boom"), None), ErrorCode.TRANSPORT_ERROR),
        (InvalidHandshake("rejected"), ErrorCode.TRANSPORT_ERROR),
        (InvalidURI("x", "bad"), ErrorCode.TRANSPORT_ERROR),
        (asyncio.TimeoutError(), ErrorCode.TRANSPORT_ERROR),
        (ConnectionResetError("reset"), ErrorCode.TRANSPORT_ERROR),
        (RuntimeError("other"), ErrorCode.TRANSPORT_ERROR),
    ],
)
def test_classify_exception(error: BaseException, expected: ErrorCode) -> None:
    code, error_cls = classify_exception(error)

    assert code is expected
    assert error_cls.code is expected


def test_wrap_transport_error_keeps_cause_and_detail() -> None:
    cause = ConnectionResetError("peer reset")

    wrapped = wrap_transport_error(cause, detail="websocket streaming failed")

    assert isinstance(wrapped, TransportError)
    assert wrapped.__cause__ is cause
    assert wrapped.message == "websocket streaming failed (ConnectionResetError: peer reset)"


def test_wrap_transport_error_without_message_uses_type_name() -> None:
    wrapped = wrap_transport_error(asyncio.TimeoutError())

    assert wrapped.message == "TimeoutError"


def test_wrap_clean_close_is_incomplete_stream() -> None:
    wrapped = wrap_transport_error(_clean_close())

    assert isinstance(wrapped, IncompleteStreamError)


def test_wrap_passes_client_errors_through() -> None:
    original = InvalidInput("empty")

    assert wrap_transport_error(original) is original


@pytest.mark.parametrize(
    ("error_cls", "status"),
    [(InvalidInput, 400), (TransportError, 502), (IncompleteStreamError, 502)],
)
def test_client_error_to_dict(error_cls: type[ClientError], status: int) -> None:
    err = error_cls("detail")

    assert err.http_status == status
    assert err.to_dict() == {"error": err.code.value, "message": "detail"}
