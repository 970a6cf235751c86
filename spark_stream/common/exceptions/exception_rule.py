from __future__ import annotations

import asyncio

from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from spark_stream.common.exceptions.client_errors import (
    ClientError,
    IncompleteStreamError,
    TransportError,
)
from spark_stream.core.dto.internal.common import RuleDomain
from spark_stream.core.types import ErrorCategory, ErrorCode

# 소켓/웹소켓 경계에서 발생 가능한 예외
SOCKET_EXCEPTIONS = (
    asyncio.TimeoutError,
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
    ConnectionClosed,
    OSError,
)

# 1) 정상 종료 규칙: 최종 프레임 없이 닫힌 경우
RULES_CLOSE: list[RuleDomain] = [
    RuleDomain(
        exc=ConnectionClosedOK,
        result=(ErrorCode.INCOMPLETE_STREAM, IncompleteStreamError),
    ),
]

# 2) 핸드셰이크 규칙 (서명 거부 시 401/403 InvalidStatus 포함)
RULES_HANDSHAKE: list[RuleDomain] = [
    RuleDomain(
        exc=(InvalidHandshake, InvalidURI),
        result=(ErrorCode.TRANSPORT_ERROR, TransportError),
    ),
    RuleDomain(
        exc=asyncio.TimeoutError,
        result=(ErrorCode.TRANSPORT_ERROR, TransportError),
    ),
]

# 3) 기타 소켓 규칙 (포괄)
RULES_SOCKET: list[RuleDomain] = [
    RuleDomain(
        exc=SOCKET_EXCEPTIONS,
        result=(ErrorCode.TRANSPORT_ERROR, TransportError),
    ),
]

# 전체 규칙 (구체 -> 포괄 순서를 유지하며 결합)
# 주의: ConnectionClosedOK는 ConnectionClosed의 하위 타입이므로 반드시 먼저 평가합니다.
RULES_FOR_TRANSPORT: list[RuleDomain] = [
    *RULES_CLOSE,
    *RULES_HANDSHAKE,
    *RULES_SOCKET,
]


def classify_exception(err: BaseException) -> ErrorCategory:
    """예외 → (ErrorCode, ClientError 하위 클래스) 분류기 (규칙 테이블 기반)

    - 규칙은 "구체 → 포괄" 순서로 선언되어 가장 특수한 규칙이 먼저 매칭됩니다.
    - 매칭되지 않으면 TransportError로 분류합니다.
    """
    for rule in RULES_FOR_TRANSPORT:
        if isinstance(err, rule.exc):
            return rule.result
    return (ErrorCode.TRANSPORT_ERROR, TransportError)


def wrap_transport_error(err: BaseException, detail: str = "") -> ClientError:
    """전송 계층 예외를 클라이언트 예외로 변환 (원인은 __cause__로 보존)"""
    if isinstance(err, ClientError):
        return err

    _, error_cls = classify_exception(err)
    reason = f"{type(err).__name__}: {err}" if str(err) else type(err).__name__
    message = f"{detail} ({reason})" if detail else reason
    wrapped: ClientError = error_cls(message)
    wrapped.__cause__ = err
    return wrapped
