"""I/O 경계 DTO 공통 설정 모듈"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# 아웃바운드(요청) 모델: 불변 + 알 수 없는 필드 금지
OUTBOUND_CONFIG = ConfigDict(
    use_enum_values=True,
    extra="forbid",
    validate_default=True,
    frozen=True,
    arbitrary_types_allowed=False,
)

# 인바운드(응답) 모델: 원격 서비스가 필드를 추가해도 깨지지 않도록 무시
INBOUND_CONFIG = ConfigDict(
    use_enum_values=True,
    extra="ignore",
    frozen=True,
    arbitrary_types_allowed=False,
)


class OutboundModelDTO(BaseModel):
    """요청 방향 I/O 경계 베이스 모델"""

    model_config = OUTBOUND_CONFIG


class InboundModelDTO(BaseModel):
    """응답 방향 I/O 경계 베이스 모델"""

    model_config = INBOUND_CONFIG
