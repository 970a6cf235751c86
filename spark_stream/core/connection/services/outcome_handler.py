from __future__ import annotations

from typing import Any

from spark_stream.common.events import ChatCompletedEvent, ChatFailedEvent, EventBus
from spark_stream.common.exceptions.client_errors import ClientError
from spark_stream.common.logger import PipelineLogger
from spark_stream.core.connection.utils.logging.log_phases import (
    PHASE_COMPLETED,
    PHASE_FAILED,
)
from spark_stream.core.connection.utils.logging.logging_mixin import ScopedSessionLoggingMixin
from spark_stream.core.dto.internal.session import SessionScopeDomain
from spark_stream.core.types import SessionState

logger = PipelineLogger.get_logger("session_outcome_handler", "session")


class SessionOutcomeHandler(ScopedSessionLoggingMixin):
    """세션 종료 결과 발행 전담 클래스

    책임:
    - 종료 결과 로깅
    - EventBus로 완료/실패 이벤트 발행
    """

    def __init__(self, scope: SessionScopeDomain) -> None:
        self.scope = scope
        self._logger = logger

    async def emit_completion(self, text: str, frame_count: int, elapsed: float) -> None:
        self._log_info(
            "Session completed",
            phase=PHASE_COMPLETED,
            frame_count=frame_count,
            text_length=len(text),
            elapsed=round(elapsed, 3),
        )
        await EventBus.emit(
            ChatCompletedEvent(
                scope=self.scope, text=text, frame_count=frame_count, elapsed=elapsed
            )
        )

    async def emit_failure(
        self,
        err: ClientError,
        state: SessionState,
        frame_count: int,
        elapsed: float,
        **additional_context: Any,  # 실패 유형별 부가 정보 (remote_code 등)
    ) -> None:
        context = {"error_code": err.code.value, **additional_context}
        self._log_warning(
            f"Session failed: {err}",
            phase=PHASE_FAILED,
            state=state.value,
            frame_count=frame_count,
            elapsed=round(elapsed, 3),
            **context,
        )
        await EventBus.emit(
            ChatFailedEvent(
                scope=self.scope,
                error=err,
                state=state,
                frame_count=frame_count,
                elapsed=elapsed,
                context=context,
            )
        )
