from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Callable, NoReturn

import websockets

from spark_stream.common.exceptions.client_errors import (
    ClientError,
    DeadlineExceeded,
    IncompleteStreamError,
    MalformedFrameError,
    RemoteProtocolError,
    SessionCancelled,
)
from spark_stream.common.exceptions.exception_rule import (
    SOCKET_EXCEPTIONS,
    wrap_transport_error,
)
from spark_stream.common.logger import PipelineLogger
from spark_stream.config.settings import DEFAULT_EMPTY_REPLY
from spark_stream.core.connection.aggregator import ResponseAggregator
from spark_stream.core.connection.services.outcome_handler import SessionOutcomeHandler
from spark_stream.core.connection.utils.logging.log_phases import (
    PHASE_CANCELLED,
    PHASE_CLOSE,
    PHASE_CONNECT,
    PHASE_DEADLINE,
    PHASE_DELTA_OBSERVER,
    PHASE_FRAME,
    PHASE_INCOMPLETE,
    PHASE_MALFORMED_FRAME,
    PHASE_REMOTE_ERROR,
    PHASE_SEND,
    PHASE_STATE,
    PHASE_TRANSPORT_ERROR,
)
from spark_stream.core.connection.utils.logging.logging_mixin import ScopedSessionLoggingMixin
from spark_stream.core.connection.utils.parse import decode_frame
from spark_stream.core.dto.internal.common import SessionPolicy, SignedConnectionURL
from spark_stream.core.dto.internal.session import SessionScopeDomain, StreamFrame
from spark_stream.core.dto.io.envelope import RequestEnvelopeDTO
from spark_stream.core.types import DeltaObserver, SessionState

logger = PipelineLogger.get_logger("streaming_session", "session")


# 상태 전이 테이블 (종료 상태에서 나가는 전이는 없음)
_ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.CONNECTING}),
    SessionState.CONNECTING: frozenset(
        {SessionState.STREAMING, SessionState.FAILED, SessionState.TIMED_OUT}
    ),
    SessionState.STREAMING: frozenset(
        {SessionState.COMPLETED, SessionState.FAILED, SessionState.TIMED_OUT}
    ),
    SessionState.COMPLETED: frozenset(),
    SessionState.FAILED: frozenset(),
    SessionState.TIMED_OUT: frozenset(),
}


class InvalidStateTransition(RuntimeError):
    """허용되지 않은 세션 상태 전이 (재사용/이중 종료 등)"""


def _caller_cancelling() -> bool:
    """현재 태스크에 외부 취소 요청이 걸려 있는지 여부"""
    current = asyncio.current_task()
    return current is not None and current.cancelling() > 0


class StreamingSession(ScopedSessionLoggingMixin):
    """요청 1건 / 연결 1개 / 결과 1개를 담당하는 스트리밍 세션

    IDLE → CONNECTING → STREAMING → {COMPLETED | FAILED | TIMED_OUT}

    - 서명 URL은 run() 시점에 sign_url()로 생성합니다 (생성 시각이 서명에 포함됨).
    - 봉투는 연결 직후 정확히 1회 전송하고 이후에는 수신만 합니다.
    - 데드라인/취소 신호/교환 태스크 중 먼저 끝난 쪽이 유일한 결과를 결정합니다.
    - 실패 시 부분 누적 텍스트는 노출하지 않습니다.
    """

    def __init__(
        self,
        envelope: RequestEnvelopeDTO,
        sign_url: Callable[[], SignedConnectionURL],
        *,
        policy: SessionPolicy | None = None,
        scope: SessionScopeDomain | None = None,
        empty_reply_text: str = DEFAULT_EMPTY_REPLY,
        on_delta: DeltaObserver | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self.scope = scope or SessionScopeDomain(
            uid=envelope.header.uid,
            domain=envelope.parameter.chat.domain,
        )
        self._logger = logger
        self._envelope = envelope
        self._sign_url = sign_url
        self._policy = policy or SessionPolicy()
        self._empty_reply_text = empty_reply_text
        self._on_delta = on_delta
        self._cancel_event = cancel_event

        self._state = SessionState.IDLE
        self._aggregator = ResponseAggregator()
        self._outcome_handler = SessionOutcomeHandler(self.scope)
        self._websocket: Any | None = None
        self._error: ClientError | None = None
        self._started_at: float | None = None
        self._finished_at: float | None = None

    # ------------------------------------------------------------------
    # 상태
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error(self) -> ClientError | None:
        return self._error

    @property
    def frame_count(self) -> int:
        return self._aggregator.frame_count

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._finished_at if self._finished_at is not None else time.monotonic()
        return end - self._started_at

    def _transition(self, new_state: SessionState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self._state]:
            raise InvalidStateTransition(
                f"session {self.scope.session_id}: {self._state} -> {new_state} not allowed"
            )
        self._log_debug(
            "State transition",
            phase=PHASE_STATE,
            from_state=self._state.value,
            to_state=new_state.value,
        )
        self._state = new_state
        if new_state.is_terminal:
            self._finished_at = time.monotonic()

    # ------------------------------------------------------------------
    # 실행
    # ------------------------------------------------------------------
    async def run(self) -> str:
        """세션 실행. 누적 텍스트를 반환하거나 ClientError 하나를 발생시킵니다.

        Raises:
            InvalidStateTransition: 이미 실행된 세션을 다시 실행한 경우
        """
        self._transition(SessionState.CONNECTING)
        self._started_at = time.monotonic()
        # 서명 URL은 연결 직전에 생성 (date 가 서명에 포함됨)
        signed_url = self._sign_url()

        exchange = asyncio.create_task(
            self._exchange(signed_url), name=f"spark-session-{self.scope.session_id}"
        )
        waiters: set[asyncio.Task[Any]] = {exchange}
        cancel_waiter: asyncio.Task[Any] | None = None
        if self._cancel_event is not None:
            cancel_waiter = asyncio.create_task(self._cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self._policy.deadline_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            # 호출자 태스크 취소: 연결 정리 후 그대로 전파
            try:
                await self._abort(exchange)
            finally:
                self._record_caller_cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if exchange in done:
            try:
                text = exchange.result()
            except ClientError as err:
                await self._fail(SessionState.FAILED, err)
            return await self._complete(text)

        try:
            await self._abort(exchange)
        except asyncio.CancelledError:
            # 정리 대기 중 호출자 태스크가 취소된 경우: 데드라인/취소 결과로 바꾸지 않음
            self._record_caller_cancel()
            raise

        if cancel_waiter is not None and cancel_waiter in done:
            self._log_info("Cancellation requested", phase=PHASE_CANCELLED)
            await self._fail(
                SessionState.FAILED, SessionCancelled("session cancelled by caller")
            )

        self._log_warning(
            "Deadline exceeded, transport force-closed",
            phase=PHASE_DEADLINE,
            deadline=self._policy.deadline_seconds,
        )
        await self._fail(
            SessionState.TIMED_OUT, DeadlineExceeded(self._policy.deadline_seconds)
        )

    def _record_caller_cancel(self) -> None:
        self._log_info("Caller task cancelled", phase=PHASE_CANCELLED)
        if not self._state.is_terminal:
            self._error = SessionCancelled("caller task cancelled")
            self._transition(SessionState.FAILED)

    async def _complete(self, text: str) -> str:
        self._transition(SessionState.COMPLETED)
        await self._outcome_handler.emit_completion(text, self.frame_count, self.elapsed)
        return text

    async def _fail(self, state: SessionState, err: ClientError) -> NoReturn:
        self._transition(state)
        self._error = err
        # 부분 결과는 버림 (all-or-nothing)
        self._aggregator.clear()
        extra: dict[str, Any] = {}
        if isinstance(err, RemoteProtocolError):
            extra["remote_code"] = err.remote_code
        await self._outcome_handler.emit_failure(
            err, state, self.frame_count, self.elapsed, **extra
        )
        raise err

    async def _abort(self, exchange: asyncio.Task[str]) -> None:
        """교환 태스크를 취소하고 연결이 닫힐 때까지 기다립니다.

        호출자 태스크 자신에 대한 취소 요청은 삼키지 않고 전파합니다.
        """
        if exchange.done():
            return
        exchange.cancel()
        try:
            await exchange
        except asyncio.CancelledError:
            if _caller_cancelling():
                raise
        except ClientError as err:
            # 취소와 동시에 종료된 경우: 결과는 이미 데드라인/취소로 결정됨
            self._log_debug("Exchange ended during abort", phase=PHASE_CLOSE, error=str(err))
            if _caller_cancelling():
                raise asyncio.CancelledError from err

    # ------------------------------------------------------------------
    # 교환 (연결 → 전송 → 수신 루프)
    # ------------------------------------------------------------------
    async def _exchange(self, signed_url: SignedConnectionURL) -> str:
        self._log_info("Connecting", phase=PHASE_CONNECT, host=signed_url.host)
        try:
            async with websockets.connect(
                uri=signed_url.to_url(),
                ping_interval=None,
                open_timeout=self._policy.open_timeout,
                close_timeout=self._policy.close_timeout,
            ) as websocket:
                self._websocket = websocket
                self._transition(SessionState.STREAMING)

                await websocket.send(self._envelope.to_wire())
                self._log_info("Envelope sent", phase=PHASE_SEND)

                async for message in websocket:
                    try:
                        frame = decode_frame(message)
                    except MalformedFrameError as e:
                        self._log_warning(str(e), phase=PHASE_MALFORMED_FRAME)
                        raise
                    if await self._on_frame(frame):
                        return self._aggregator.text or self._empty_reply_text

                self._log_warning(
                    "Connection closed before final frame",
                    phase=PHASE_INCOMPLETE,
                    frame_count=self.frame_count,
                )
                raise IncompleteStreamError("connection closed before final frame")
        except ClientError:
            raise
        except SOCKET_EXCEPTIONS as e:
            wrapped = wrap_transport_error(e, detail=f"websocket {self._state.value} failed")
            self._log_warning(
                f"Transport failure: {wrapped}",
                phase=PHASE_TRANSPORT_ERROR,
                error_code=wrapped.code.value,
            )
            raise wrapped from e
        finally:
            self._websocket = None

    async def _on_frame(self, frame: StreamFrame) -> bool:
        """프레임 1건 처리. 최종 프레임이면 True."""
        if frame.is_error:
            self._log_warning(
                "Remote service reported error",
                phase=PHASE_REMOTE_ERROR,
                remote_code=frame.result_code,
                remote_message=frame.result_message,
            )
            raise RemoteProtocolError(frame.result_code, frame.result_message)

        delta = self._aggregator.add(frame)
        self._log_debug(
            "Frame received",
            phase=PHASE_FRAME,
            status=frame.status_code,
            delta_length=len(delta),
        )
        if delta:
            await self._notify_observer(delta)
        return frame.is_final

    async def _notify_observer(self, delta: str) -> None:
        if self._on_delta is None:
            return
        try:
            result = self._on_delta(delta)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self._log_warning(
                f"Delta observer failed: {e}", phase=PHASE_DELTA_OBSERVER, error=str(e)
            )
