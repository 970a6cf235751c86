from spark_stream.core.types._session_types import (
    TERMINAL_STATES,
    DeltaObserver,
    ErrorCategory,
    ErrorCode,
    ExceptionMatcher,
    FrameStatus,
    SessionState,
)

__all__ = [
    "TERMINAL_STATES",
    "DeltaObserver",
    "ErrorCategory",
    "ErrorCode",
    "ExceptionMatcher",
    "FrameStatus",
    "SessionState",
]
