from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

# 로그에 남기지 않는 필드
_SECRET_KEYS = frozenset({"api_secret", "authorization", "signature"})


class PydanticFilter(BaseModel):
    """Dynamic payload filter using Pydantic BaseModel serialization."""

    model_config = ConfigDict(extra="allow")

    @classmethod
    def filter_dict(cls, payload: dict[str, Any]) -> dict[str, Any]:
        visible = {k: v for k, v in payload.items() if k not in _SECRET_KEYS and v is not None}
        return cls(**visible).model_dump(exclude_none=True)
