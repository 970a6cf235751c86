from __future__ import annotations

from typing import Any

from spark_stream.common.logger import PipelineLogger
from spark_stream.core.connection.utils.logging.pydantic_filter import PydanticFilter
from spark_stream.core.dto.internal.session import SessionScopeDomain


class ScopedSessionLoggingMixin:
    """Session scope-aware structured logging helpers."""

    _logger: PipelineLogger
    scope: SessionScopeDomain

    def _scope_log_extra(self, phase: str, **extra: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "session_id": self.scope.session_id,
            "uid": self.scope.uid,
            "domain": self.scope.domain,
            "phase": phase,
        }
        payload.update(extra)
        return PydanticFilter.filter_dict(payload)

    def _log_info(self, message: str, phase: str, **extra: Any) -> None:
        self._logger.info(message, extra=self._scope_log_extra(phase, **extra))

    def _log_debug(self, message: str, phase: str, **extra: Any) -> None:
        self._logger.debug(message, extra=self._scope_log_extra(phase, **extra))

    def _log_warning(self, message: str, phase: str, **extra: Any) -> None:
        self._logger.warning(message, extra=self._scope_log_extra(phase, **extra))
