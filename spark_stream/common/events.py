"""이벤트 정의 및 Event Bus

세션 결과(완료/실패)를 웹 레이어 등 외부 관찰자에게 알리기 위한 순수 데이터 이벤트입니다.
핸들러 실패는 로그만 남기며 호출 결과에 영향을 주지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from spark_stream.common.exceptions.client_errors import ClientError
from spark_stream.common.logger import PipelineLogger
from spark_stream.core.dto.internal.session import SessionScopeDomain
from spark_stream.core.types import SessionState

logger = PipelineLogger.get_logger("event_bus", "common")


@dataclass(frozen=True, slots=True)
class ChatCompletedEvent:
    """세션 정상 완료 이벤트"""

    scope: SessionScopeDomain
    text: str
    frame_count: int
    elapsed: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class ChatFailedEvent:
    """세션 실패 이벤트 (FAILED / TIMED_OUT)"""

    scope: SessionScopeDomain
    error: ClientError
    state: SessionState
    frame_count: int
    elapsed: float
    context: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventBus:
    """전역 이벤트 버스

    특징:
    - 비동기 핸들러 순차 실행
    - 타입 기반 핸들러 등록
    """

    _handlers: dict[type, list[Callable[[Any], Any]]] = {}

    @classmethod
    async def emit(cls, event: Any) -> None:
        event_type = type(event)
        for handler in cls._handlers.get(event_type, []):
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler failed: {e}",
                    exc_info=True,
                    extra={
                        "event_type": event_type.__name__,
                        "handler": getattr(handler, "__name__", repr(handler)),
                    },
                )

    @classmethod
    def on(cls, event_type: type, handler: Callable[[Any], Any]) -> None:
        """핸들러 등록

        Args:
            event_type: 이벤트 타입 (클래스)
            handler: 핸들러 함수 (async def)
        """
        cls._handlers.setdefault(event_type, []).append(handler)

    @classmethod
    def clear(cls) -> None:
        """모든 핸들러 제거 (테스트용)"""
        cls._handlers.clear()


__all__ = ["ChatCompletedEvent", "ChatFailedEvent", "EventBus"]
