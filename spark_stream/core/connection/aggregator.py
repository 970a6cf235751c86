from __future__ import annotations

from collections.abc import Iterable

from spark_stream.core.dto.internal.session import StreamFrame


def fold(frames: Iterable[StreamFrame]) -> str:
    """프레임 시퀀스의 content_delta를 도착 순서대로 이어 붙입니다 (delta 없는 프레임은 빈 문자열)."""
    return "".join(frame.content_delta or "" for frame in frames)


class ResponseAggregator:
    """세션 1건이 단독 소유하는 누적기. 세션 종료 후 폐기됩니다."""

    __slots__ = ("_parts", "_frame_count")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._frame_count = 0

    def add(self, frame: StreamFrame) -> str:
        """프레임 1건을 누적하고 이번에 추가된 delta를 반환"""
        self._frame_count += 1
        delta = fold((frame,))
        if delta:
            self._parts.append(delta)
        return delta

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def clear(self) -> None:
        self._parts.clear()
