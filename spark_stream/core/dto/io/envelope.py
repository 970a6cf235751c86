"""요청 봉투(Envelope) DTO 모듈

웹소켓으로 세션당 1회 전송되는 요청 문서입니다.

    {
      "header":    {"app_id": ..., "uid": ...},
      "parameter": {"chat": {"domain": ..., "temperature": ..., "max_tokens": ...}},
      "payload":   {"message": {"text": [{"role": "system", ...}, {"role": "user", ...}]}}
    }
"""

from __future__ import annotations

from typing import Literal

import orjson
from pydantic import Field, field_validator

from spark_stream.core.dto.io._base import OutboundModelDTO

Role = Literal["system", "user", "assistant"]


class RequestHeaderDTO(OutboundModelDTO):
    app_id: str = Field(..., min_length=1)
    uid: str = Field(..., min_length=1, max_length=32)


class ChatParameterDTO(OutboundModelDTO):
    domain: str
    temperature: float
    max_tokens: int


class ParameterDTO(OutboundModelDTO):
    chat: ChatParameterDTO


class MessageDTO(OutboundModelDTO):
    role: Role
    content: str


class MessageTextDTO(OutboundModelDTO):
    text: tuple[MessageDTO, ...]

    @field_validator("text")
    @classmethod
    def _system_then_user(cls, value: tuple[MessageDTO, ...]) -> tuple[MessageDTO, ...]:
        roles = [m.role for m in value]
        if roles != ["system", "user"]:
            raise ValueError(f"메시지 순서는 system, user 여야 합니다: {roles}")
        return value


class PayloadDTO(OutboundModelDTO):
    message: MessageTextDTO


class RequestEnvelopeDTO(OutboundModelDTO):
    """요청 봉투 (세션마다 새로 생성, 재사용하지 않음)"""

    header: RequestHeaderDTO
    parameter: ParameterDTO
    payload: PayloadDTO

    @property
    def messages(self) -> tuple[MessageDTO, ...]:
        return self.payload.message.text

    def to_wire(self) -> str:
        """전송용 JSON 문자열 (orjson 직렬화, 비ASCII 그대로 유지)"""
        return orjson.dumps(self.model_dump(mode="json")).decode("utf-8")
