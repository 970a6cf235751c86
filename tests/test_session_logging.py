from __future__ import annotations

import logging
from typing import Any

from spark_stream.common.logger import ContextFormatter
from spark_stream.core.connection.utils.logging.logging_mixin import ScopedSessionLoggingMixin
from spark_stream.core.connection.utils.logging.log_phases import PHASE_CONNECT
from spark_stream.core.connection.utils.logging.pydantic_filter import PydanticFilter
from spark_stream.core.dto.internal.session import SessionScopeDomain


class _RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, msg: str, **kwargs: Any) -> None:
        self.records.append(("info", msg, kwargs))

    def warning(self, msg: str, **kwargs: Any) -> None:
        self.records.append(("warning", msg, kwargs))


class _Scoped(ScopedSessionLoggingMixin):
    def __init__(self) -> None:
        self.scope = SessionScopeDomain(uid="user-1", domain="general", session_id="abc123")
        self._logger = _RecordingLogger()  # type: ignore[assignment]


def test_scope_log_extra_contains_standard_keys() -> None:
    extra = _Scoped()._scope_log_extra(PHASE_CONNECT, host="spark-api.example.com")

    assert extra == {
        "session_id": "abc123",
        "uid": "user-1",
        "domain": "general",
        "phase": "connect",
        "host": "spark-api.example.com",
    }


def test_scope_log_extra_drops_secrets_and_none() -> None:
    extra = _Scoped()._scope_log_extra(
        PHASE_CONNECT, authorization="token", api_secret="s", remote_message=None
    )

    assert "authorization" not in extra
    assert "api_secret" not in extra
    assert "remote_message" not in extra


def test_log_helpers_forward_scope_extra() -> None:
    scoped = _Scoped()

    scoped._log_warning("Remote service reported error", phase=PHASE_CONNECT, remote_code=1)

    level, msg, kwargs = scoped._logger.records[0]  # type: ignore[attr-defined]
    assert level == "warning"
    assert msg == "Remote service reported error"
    assert kwargs["extra"]["remote_code"] == 1
    assert kwargs["extra"]["session_id"] == "abc123"


def test_pydantic_filter_keeps_visible_fields() -> None:
    assert PydanticFilter.filter_dict({"a": 1, "b": None, "signature": "x"}) == {"a": 1}


def test_context_formatter_appends_extra_fields() -> None:
    record = logging.makeLogRecord(
        {"msg": "Session completed", "levelname": "INFO", "component": "session"}
    )
    record.phase = "completed"
    record.frame_count = 3

    rendered = ContextFormatter("%(message)s").format(record)

    assert rendered == "Session completed | frame_count=3 phase=completed"
