from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from spark_stream.core.types import FrameStatus


@dataclass(slots=True, frozen=True, eq=True, repr=True, match_args=False, kw_only=True)
class SessionScopeDomain:
    """세션 스코프(내부 도메인 값 객체).

    - 로그/이벤트에 공통으로 붙는 식별 정보
    """

    uid: str
    domain: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(slots=True, frozen=True, eq=True, repr=True, match_args=True, kw_only=True)
class StreamFrame:
    """디코딩된 인바운드 프레임 1건.

    result_code != 0  → 프로토콜 에러 (종료)
    status_code == 2  → 정상 완료 (최종 프레임)
    """

    status_code: int
    result_code: int = 0
    result_message: str | None = None
    content_delta: str | None = None

    @property
    def is_error(self) -> bool:
        return self.result_code != 0

    @property
    def is_final(self) -> bool:
        return self.status_code == FrameStatus.FINAL
