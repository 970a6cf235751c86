from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import orjson
from websockets.exceptions import ConnectionClosedError
from websockets.frames import Close

from spark_stream.core.connection.envelope import build_envelope
from spark_stream.core.connection.signing import build_connection_url
from spark_stream.core.dto.internal.common import (
    Credentials,
    GenerationParameters,
    SessionPolicy,
    SignedConnectionURL,
)
from spark_stream.core.dto.io.envelope import RequestEnvelopeDTO

FIXED_NOW = datetime(2024, 5, 1, 8, 30, 15, tzinfo=timezone.utc)
ENDPOINT_URL = "wss://spark-api.example.com/v1.1/chat"
PRIMING_TEXT = "你是一个健康助手。"


def build_credentials(**overrides: str) -> Credentials:
    payload: dict[str, str] = {
        "app_id": "app-123",
        "api_key": "key-abc",
        "api_secret": "secret-xyz",
        "endpoint_url": ENDPOINT_URL,
    }
    payload.update(overrides)
    return Credentials(**payload)


def build_parameters(**overrides: Any) -> GenerationParameters:
    payload: dict[str, Any] = {"domain": "general", "temperature": 0.5, "max_tokens": 1024}
    payload.update(overrides)
    return GenerationParameters(**payload)


def build_policy(**overrides: Any) -> SessionPolicy:
    payload: dict[str, Any] = {"deadline_seconds": 5.0, "open_timeout": 1.0, "close_timeout": 0.1}
    payload.update(overrides)
    return SessionPolicy(**payload)


def build_request_envelope(
    user_message: str = "最近睡眠怎么样？",
    *,
    user_tag: str | None = "user-1",
    context: str | None = None,
) -> RequestEnvelopeDTO:
    return build_envelope(
        "app-123",
        user_tag,
        build_parameters(),
        PRIMING_TEXT,
        context,
        user_message,
    )


def build_signed_url(now: datetime = FIXED_NOW) -> SignedConnectionURL:
    return build_connection_url(build_credentials(), now)


def build_frame_payload(
    content: str | None = "",
    *,
    status: int = 1,
    code: int = 0,
    message: str = "Success",
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "header": {"code": code, "message": message, "sid": "cht000b1234", "status": status},
    }
    if code == 0:
        payload["payload"] = {
            "choices": {
                "status": status,
                "seq": 0,
                "text": [{"content": content, "role": "assistant", "index": 0}],
            }
        }
    return payload


def build_error_frame_payload(code: int = 10013, message: str = "quota exceeded") -> dict[str, Any]:
    return build_frame_payload(None, status=2, code=code, message=message)


def build_completion_frames(*contents: str) -> list[dict[str, Any]]:
    """마지막 조각만 status=2 인 정상 프레임 시퀀스"""
    frames = [build_frame_payload(content, status=1) for content in contents[:-1]]
    frames.append(build_frame_payload(contents[-1], status=2))
    frames[0]["header"]["status"] = 0 if len(frames) > 1 else 2
    return frames


class FakeWebsocket:
    """websockets 연결 객체 대역

    ending:
        "close": 프레임 소진 후 정상 종료 (async for 종료)
        "error": 프레임 소진 후 ConnectionClosedError
        "hang":  프레임 소진 후 무기한 대기

    close_delay: close() 가 완료되기까지 걸리는 시간 (느린 종료 핸드셰이크)
    """

    def __init__(
        self,
        frames: list[Any] | None = None,
        *,
        ending: str = "close",
        close_delay: float = 0.0,
    ) -> None:
        self.frames = list(frames or [])
        self.ending = ending
        self.close_delay = close_delay
        self.sent: list[str] = []
        self.closed = False

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def close(self) -> None:
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        self.closed = True

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            await asyncio.sleep(0)
            if isinstance(frame, (str, bytes)):
                yield frame
            else:
                yield orjson.dumps(frame).decode()
        if self.ending == "hang":
            await asyncio.Event().wait()
        elif self.ending == "error":
            raise ConnectionClosedError(Close(1011, "internal error"), None)


class FakeConnect:
    """websockets.connect 대역 (호출 인자 기록)"""

    def __init__(self, websocket: FakeWebsocket | None = None, error: BaseException | None = None):
        self.websocket = websocket or FakeWebsocket()
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def __call__(self, uri: str, **kwargs: Any) -> _FakeConnectContext:
        self.calls.append({"uri": uri, **kwargs})
        return _FakeConnectContext(self)


class _FakeConnectContext:
    def __init__(self, owner: FakeConnect) -> None:
        self._error = owner.error
        self._websocket = owner.websocket

    async def __aenter__(self) -> FakeWebsocket:
        if self._error is not None:
            raise self._error
        return self._websocket

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self._websocket.close()
        return False
