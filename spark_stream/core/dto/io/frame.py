"""응답 프레임 DTO 모듈

    {
      "header":  {"code": 0, "message": "Success", "sid": ..., "status": 1},
      "payload": {"choices": {"status": 1, "seq": 0, "text": [{"content": "...", "role": "assistant", "index": 0}]}}
    }

payload는 에러 프레임에서 생략될 수 있습니다.
"""

from __future__ import annotations

from pydantic import Field

from spark_stream.core.dto.internal.session import StreamFrame
from spark_stream.core.dto.io._base import InboundModelDTO


class FrameHeaderDTO(InboundModelDTO):
    code: int
    message: str | None = None
    sid: str | None = None
    status: int = 0


class ChoiceTextDTO(InboundModelDTO):
    content: str | None = None
    role: str | None = None
    index: int | None = None


class ChoicesDTO(InboundModelDTO):
    status: int | None = None
    seq: int | None = None
    text: list[ChoiceTextDTO] = Field(default_factory=list)


class FramePayloadDTO(InboundModelDTO):
    choices: ChoicesDTO | None = None


class StreamFrameDTO(InboundModelDTO):
    header: FrameHeaderDTO
    payload: FramePayloadDTO | None = None

    def to_domain(self) -> StreamFrame:
        """와이어 모델 → 내부 도메인 프레임 (첫 번째 text 항목의 content만 사용)"""
        delta: str | None = None
        if self.payload and self.payload.choices and self.payload.choices.text:
            delta = self.payload.choices.text[0].content
        return StreamFrame(
            status_code=self.header.status,
            result_code=self.header.code,
            result_message=self.header.message,
            content_delta=delta,
        )
