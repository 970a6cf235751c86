"""클라이언트 호출 단위 예외 계층.

모든 호출 실패는 ``ClientError`` 하위 타입 하나로만 호출자에게 전달됩니다.
웹 레이어는 ``http_status`` / ``to_dict()`` 로 응답을 구성합니다.
"""

from __future__ import annotations

from typing import Any

from spark_stream.core.types import ErrorCode


class ConfigurationError(ValueError):
    """필수 설정 누락/형식 오류 (프로세스 시작 시점에 발생)"""


class ClientError(Exception):
    """채팅 호출 실패의 공통 베이스"""

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code.value, "message": self.message}


class InvalidInput(ClientError):
    """네트워크 활동 이전에 거부되는 입력 오류 (빈 메시지 등)"""

    code = ErrorCode.INVALID_INPUT
    http_status = 400


class TransportError(ClientError):
    """연결 수립 실패 또는 비정상 종료"""

    code = ErrorCode.TRANSPORT_ERROR
    http_status = 502


class RemoteProtocolError(ClientError):
    """원격 서비스가 header.code != 0 을 보고한 경우"""

    code = ErrorCode.REMOTE_PROTOCOL_ERROR
    http_status = 502

    def __init__(self, remote_code: int, remote_message: str | None = None) -> None:
        self.remote_code = remote_code
        self.remote_message = remote_message or "unknown error"
        super().__init__(f"remote error {remote_code}: {self.remote_message}")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["remote_code"] = self.remote_code
        payload["remote_message"] = self.remote_message
        return payload


class MalformedFrameError(ClientError):
    """인바운드 프레임을 해석할 수 없는 경우"""

    code = ErrorCode.MALFORMED_FRAME
    http_status = 502


class IncompleteStreamError(ClientError):
    """최종 프레임(status=2) 수신 전에 연결이 정상 종료된 경우"""

    code = ErrorCode.INCOMPLETE_STREAM
    http_status = 502


class DeadlineExceeded(ClientError):
    """세션 데드라인 초과"""

    code = ErrorCode.DEADLINE_EXCEEDED
    http_status = 504

    def __init__(self, deadline_seconds: float) -> None:
        self.deadline_seconds = deadline_seconds
        super().__init__(f"no final frame within {deadline_seconds:g}s")


class SessionCancelled(ClientError):
    """호출자가 취소 핸들을 통해 세션을 중단한 경우"""

    code = ErrorCode.SESSION_CANCELLED
    http_status = 499
