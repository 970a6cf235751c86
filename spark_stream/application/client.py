"""채팅 클라이언트 (외부 공개 API)

호출마다 새 봉투/새 서명 URL/새 세션을 만들고, 세션의 단일 결과를 그대로 돌려줍니다.
재시도/백오프/대체 엔드포인트 선택은 하지 않습니다.

Usage:
    client = SparkChatClient.from_settings()
    text = await client.send("최근 수면 패턴이 괜찮을까요?", user_tag="u-1", context=summary)
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable

from spark_stream.common.logger import PipelineLogger
from spark_stream.config.settings import (
    DEFAULT_CONTEXT_DELIMITER,
    DEFAULT_EMPTY_REPLY,
    DEFAULT_PRIMING_TEXT,
    SessionSettings,
    SparkSettings,
    session_settings,
    spark_settings,
)
from spark_stream.core.connection.envelope import ANONYMOUS_UID, build_envelope
from spark_stream.core.connection.session import StreamingSession
from spark_stream.core.connection.signing import build_connection_url
from spark_stream.core.dto.internal.common import (
    Credentials,
    GenerationParameters,
    SessionPolicy,
    SignedConnectionURL,
)
from spark_stream.core.types import DeltaObserver

logger = PipelineLogger.get_logger("spark_chat_client", "client")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SparkChatClient:
    """서명된 웹소켓 스트리밍 채팅 클라이언트

    자격 증명/생성 파라미터는 불변이며 동시 호출 간 읽기 전용으로 공유됩니다.
    그 외 가변 상태는 모두 세션 단위로 격리됩니다.
    """

    def __init__(
        self,
        credentials: Credentials,
        parameters: GenerationParameters,
        *,
        policy: SessionPolicy | None = None,
        priming_text: str = DEFAULT_PRIMING_TEXT,
        context_delimiter: str = DEFAULT_CONTEXT_DELIMITER,
        anonymous_uid: str = ANONYMOUS_UID,
        empty_reply_text: str = DEFAULT_EMPTY_REPLY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.credentials = credentials
        self.parameters = parameters
        self.policy = policy or SessionPolicy()
        self.priming_text = priming_text
        self.context_delimiter = context_delimiter
        self.anonymous_uid = anonymous_uid
        self.empty_reply_text = empty_reply_text
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        spark: SparkSettings | None = None,
        session: SessionSettings | None = None,
    ) -> SparkChatClient:
        """설정 싱글톤으로부터 생성 (필수 자격 증명 누락 시 ConfigurationError)"""
        spark = spark or spark_settings
        session = session or session_settings
        return cls(
            Credentials.from_settings(spark),
            GenerationParameters.from_settings(spark),
            policy=SessionPolicy.from_settings(session),
            priming_text=spark.priming_text,
            context_delimiter=spark.context_delimiter,
            anonymous_uid=spark.anonymous_uid,
            empty_reply_text=spark.empty_reply_text,
        )

    def create_session(
        self,
        message: str,
        user_tag: str | None = None,
        context: str | None = None,
        *,
        on_delta: DeltaObserver | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> StreamingSession:
        """세션 객체만 생성 (상태 관찰이 필요한 호출자용). 실행은 호출자가 run()으로."""
        envelope = build_envelope(
            self.credentials.app_id,
            user_tag,
            self.parameters,
            self.priming_text,
            context,
            message,
            anonymous_uid=self.anonymous_uid,
            context_delimiter=self.context_delimiter,
        )
        return StreamingSession(
            envelope,
            self._sign_url,
            policy=self.policy,
            empty_reply_text=self.empty_reply_text,
            on_delta=on_delta,
            cancel_event=cancel_event,
        )

    def _sign_url(self) -> SignedConnectionURL:
        # 세션 run() 시점마다 새 시각으로 서명
        return build_connection_url(self.credentials, self._clock())

    async def send(
        self,
        message: str,
        user_tag: str | None = None,
        context: str | None = None,
        *,
        on_delta: DeltaObserver | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """메시지 1건 전송 후 누적 응답 텍스트 반환

        Args:
            message: 사용자 메시지 (비어 있으면 InvalidInput, 네트워크 활동 없음)
            user_tag: 사용자 식별자 (없으면 익명 uid)
            context: system 프롬프트 뒤에 덧붙일 컨텍스트 텍스트
            on_delta: 프레임별 content 관찰자 (선택)
            cancel_event: set() 시 세션을 SessionCancelled로 종료

        Raises:
            ClientError: InvalidInput / TransportError / RemoteProtocolError /
                MalformedFrameError / IncompleteStreamError / DeadlineExceeded /
                SessionCancelled 중 하나
        """
        session = self.create_session(
            message, user_tag, context, on_delta=on_delta, cancel_event=cancel_event
        )
        logger.info(
            f"Sending chat message (uid={session.scope.uid}, session={session.scope.session_id})",
            extra={"message_length": len(message), "has_context": bool(context)},
        )
        return await session.run()
