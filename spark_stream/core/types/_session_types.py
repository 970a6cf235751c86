"""세션/에러 분류에 사용하는 타입 정의 모듈."""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Awaitable, Callable, TypeAlias, Union

# ----------------------------------------------------------------------------
# Callables
# ----------------------------------------------------------------------------
# 프레임 단위 델타 관찰자 (동기/비동기 모두 허용)
DeltaObserver: TypeAlias = Callable[[str], Union[None, Awaitable[None]]]


# ----------------------------------------------------------------------------
# Enums
# ----------------------------------------------------------------------------
class SessionState(StrEnum):
    """스트리밍 세션 상태"""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: frozenset[SessionState] = frozenset(
    {SessionState.COMPLETED, SessionState.FAILED, SessionState.TIMED_OUT}
)


class FrameStatus(IntEnum):
    """인바운드 프레임 header.status 값"""

    FIRST = 0
    CONTINUE = 1
    FINAL = 2


class ErrorCode(StrEnum):
    """에러 코드 분류"""

    INVALID_INPUT = "invalid_input"
    TRANSPORT_ERROR = "transport_error"
    REMOTE_PROTOCOL_ERROR = "remote_protocol_error"
    MALFORMED_FRAME = "malformed_frame"
    INCOMPLETE_STREAM = "incomplete_stream"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    SESSION_CANCELLED = "session_cancelled"
    UNKNOWN_ERROR = "unknown_error"


# (ErrorCode, 클라이언트 예외 클래스)
ErrorCategory: TypeAlias = tuple[ErrorCode, type]
ExceptionMatcher: TypeAlias = type[BaseException] | tuple[type[BaseException], ...]
