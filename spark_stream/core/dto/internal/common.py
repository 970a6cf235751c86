from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlencode, urlsplit

from spark_stream.common.exceptions.client_errors import ConfigurationError
from spark_stream.core.types import ErrorCategory, ExceptionMatcher

if TYPE_CHECKING:
    from spark_stream.config.settings import SessionSettings, SparkSettings


_WS_SCHEMES = ("ws", "wss")


def _require(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ConfigurationError(f"필수 설정 누락: {field_name}")
    return value.strip()


@dataclass(slots=True, frozen=True, eq=True, repr=False, match_args=False, kw_only=True)
class Credentials:
    """원격 LLM 서비스 자격 증명(내부 도메인 값 객체).

    - 프로세스 수명 동안 불변, 읽기 전용으로만 공유
    - 생성 시점에 필수 필드/엔드포인트 형식을 검증 (fail fast)
    """

    app_id: str
    api_key: str
    api_secret: str
    endpoint_url: str

    def __post_init__(self) -> None:
        for name in ("app_id", "api_key", "api_secret", "endpoint_url"):
            object.__setattr__(self, name, _require(getattr(self, name), name))

        parts = urlsplit(self.endpoint_url)
        if parts.scheme not in _WS_SCHEMES or not parts.netloc:
            raise ConfigurationError(
                f"endpoint_url은 ws:// 또는 wss:// URL이어야 합니다: {self.endpoint_url!r}"
            )
        if not parts.path or parts.path == "/":
            raise ConfigurationError(
                f"endpoint_url에 핸드셰이크 경로가 없습니다: {self.endpoint_url!r}"
            )

    @property
    def host(self) -> str:
        """스킴/경로를 제외한 호스트(포트 포함)"""
        return urlsplit(self.endpoint_url).netloc

    @property
    def handshake_path(self) -> str:
        """서명 대상 가상 요청 라인에 들어갈 경로"""
        return urlsplit(self.endpoint_url).path

    def __repr__(self) -> str:
        # 비밀값은 노출하지 않음
        return f"Credentials(app_id={self.app_id!r}, endpoint_url={self.endpoint_url!r})"

    @classmethod
    def from_settings(cls, settings: SparkSettings) -> Credentials:
        return cls(
            app_id=settings.app_id,
            api_key=settings.api_key,
            api_secret=settings.api_secret,
            endpoint_url=settings.host_url,
        )


@dataclass(slots=True, frozen=True, eq=True, repr=True, match_args=False, kw_only=True)
class GenerationParameters:
    """생성 파라미터 (domain/temperature/max_tokens). 세션 간 공유, 불변."""

    domain: str
    temperature: float = 0.5
    max_tokens: int = 1024

    def __post_init__(self) -> None:
        object.__setattr__(self, "domain", _require(self.domain, "domain"))
        if not 0.0 < self.temperature <= 1.0:
            raise ConfigurationError(
                f"temperature는 (0, 1] 범위여야 합니다: {self.temperature}"
            )
        if self.max_tokens < 1:
            raise ConfigurationError(f"max_tokens는 1 이상이어야 합니다: {self.max_tokens}")

    @classmethod
    def from_settings(cls, settings: SparkSettings) -> GenerationParameters:
        return cls(
            domain=settings.domain,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )


@dataclass(slots=True, frozen=True, repr=True, eq=True, match_args=False, kw_only=True)
class SessionPolicy:
    """세션 데드라인/핸드셰이크 타임아웃 정책(도메인)."""

    deadline_seconds: float = 30.0
    open_timeout: float | None = 10.0
    close_timeout: float = 1.0

    def __post_init__(self) -> None:
        if self.deadline_seconds <= 0:
            raise ConfigurationError(
                f"deadline_seconds는 0보다 커야 합니다: {self.deadline_seconds}"
            )

    @classmethod
    def from_settings(cls, settings: SessionSettings) -> SessionPolicy:
        return cls(
            deadline_seconds=settings.deadline_seconds,
            open_timeout=settings.open_timeout,
            close_timeout=settings.close_timeout,
        )


@dataclass(slots=True, frozen=True, eq=True, repr=False, match_args=False, kw_only=True)
class SignedConnectionURL:
    """단일 연결 시도에만 유효한 서명 URL.

    서명에 생성 시각(date)이 포함되므로 캐시하거나 세션 간 재사용하지 않습니다.
    """

    base_url: str
    authorization: str
    date: str
    host: str

    def to_url(self) -> str:
        query = urlencode(
            {"authorization": self.authorization, "date": self.date, "host": self.host}
        )
        return f"{self.base_url}?{query}"

    def __repr__(self) -> str:
        return f"SignedConnectionURL(base_url={self.base_url!r}, date={self.date!r})"


@dataclass(
    slots=True, frozen=True, eq=False, repr=False, match_args=False, kw_only=True
)
class RuleDomain:
    """예외 분류 규칙(도메인)

    exc:    매칭할 예외 타입(단일 타입 또는 타입 튜플)
    result: ErrorCategory (ErrorCode, ClientError 하위 클래스)
    """

    exc: ExceptionMatcher
    result: ErrorCategory
