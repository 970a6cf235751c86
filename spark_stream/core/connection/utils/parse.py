from __future__ import annotations

import orjson
from pydantic import ValidationError

from spark_stream.common.exceptions.client_errors import MalformedFrameError
from spark_stream.core.dto.internal.session import StreamFrame
from spark_stream.core.dto.io.frame import StreamFrameDTO

# 로그/에러 메시지에 포함할 원문 최대 길이
_PREVIEW_LIMIT = 200


def _preview(message: str | bytes) -> str:
    text = message.decode("utf-8", errors="replace") if isinstance(message, bytes) else message
    return text if len(text) <= _PREVIEW_LIMIT else f"{text[:_PREVIEW_LIMIT]}..."


def decode_frame(message: str | bytes) -> StreamFrame:
    """웹소켓 수신 메시지 1건을 StreamFrame으로 디코딩합니다.

    Raises:
        MalformedFrameError: JSON이 아니거나 header가 없는/잘못된 경우
    """
    try:
        parsed = orjson.loads(message)
    except orjson.JSONDecodeError as e:
        raise MalformedFrameError(f"JSON decode error: {e}, message: {_preview(message)!r}") from e

    if not isinstance(parsed, dict):
        raise MalformedFrameError(f"Non-object frame: {type(parsed).__name__}")

    try:
        dto = StreamFrameDTO.model_validate(parsed)
    except ValidationError as e:
        raise MalformedFrameError(
            f"Invalid frame schema ({e.error_count()} errors), message: {_preview(message)!r}"
        ) from e
    return dto.to_domain()
