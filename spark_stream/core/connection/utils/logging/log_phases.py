"""세션 로그의 phase 값 상수 모음."""

from __future__ import annotations

PHASE_CONNECT = "connect"
PHASE_SEND = "send_envelope"
PHASE_FRAME = "frame"
PHASE_DELTA_OBSERVER = "delta_observer"
PHASE_COMPLETED = "completed"
PHASE_FAILED = "failed"
PHASE_REMOTE_ERROR = "remote_error"
PHASE_MALFORMED_FRAME = "malformed_frame"
PHASE_TRANSPORT_ERROR = "transport_error"
PHASE_INCOMPLETE = "incomplete_stream"
PHASE_DEADLINE = "deadline"
PHASE_CANCELLED = "cancelled"
PHASE_CLOSE = "close"
PHASE_STATE = "state_transition"
