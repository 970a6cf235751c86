"""통합 Settings 모듈 - 환경변수 기반

이 모듈의 역할:
    1. 코드에 합리적인 기본값 제공
    2. 환경변수로 오버라이드 (우선순위 높음)
    3. 타입 안전성 보장 (Pydantic 자동 검증)

설정 우선순위:
    1. 환경변수 (최우선) - export SPARK_APP_ID=...
    2. .env 파일 - config/.env
    3. 코드 기본값 (settings.py 내부)

사용 예시:
    export SPARK_APP_ID=xxxx
    export SPARK_API_KEY=xxxx
    export SPARK_API_SECRET=xxxx
    python main.py "오늘 운동량이 적당한가요?"

자격 증명은 기본값이 비어 있으며, Credentials.from_settings()에서 검증됩니다.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# 설정 파일 경로
config_dir = Path(__file__).resolve().parent.parent.parent / "config"

DEFAULT_PRIMING_TEXT = (
    "你是一个专业的健康顾问和助手，请根据用户的健康信息和问题，提供专业、有益的健康建议。"
)
DEFAULT_CONTEXT_DELIMITER = "\n以下是用户的健康数据："
DEFAULT_EMPTY_REPLY = "抱歉，AI未能生成有效回复"


def env_settings(prefix: str) -> SettingsConfigDict:
    """.env + 환경변수 통합 설정

    Args:
        prefix: 환경변수 접두사 (예: SPARK_, SESSION_)

    Returns:
        Pydantic 설정 딕셔너리
    """
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=config_dir / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppSettings(BaseSettings):
    """애플리케이션 일반 설정

    환경변수 오버라이드:
        APP_ENVIRONMENT: 실행 환경 (dev, prod, test) (기본: dev)
    """

    environment: str = "dev"
    debug: bool = False

    model_config = env_settings("APP_")


class SparkSettings(BaseSettings):
    """원격 LLM(Spark) 서비스 설정

    환경변수 오버라이드:
        SPARK_APP_ID: 애플리케이션 ID
        SPARK_API_KEY: 서명 키 식별자
        SPARK_API_SECRET: 서명 비밀키 (환경변수로만 주입 권장)
        SPARK_HOST_URL: 웹소켓 엔드포인트 (기본: wss://spark-api.xf-yun.com/v1.1/chat)
        SPARK_DOMAIN: 모델 도메인 (기본: general)
        SPARK_TEMPERATURE: 샘플링 온도 (기본: 0.5)
        SPARK_MAX_TOKENS: 최대 토큰 수 (기본: 1024)
        SPARK_ANONYMOUS_UID: uid 미지정 시 사용할 값 (기본: anonymous_user)
    """

    app_id: str = ""
    api_key: str = ""
    api_secret: str = ""
    host_url: str = "wss://spark-api.xf-yun.com/v1.1/chat"

    domain: str = "general"
    temperature: float = 0.5
    max_tokens: int = 1024

    anonymous_uid: str = "anonymous_user"
    priming_text: str = DEFAULT_PRIMING_TEXT
    context_delimiter: str = DEFAULT_CONTEXT_DELIMITER
    empty_reply_text: str = DEFAULT_EMPTY_REPLY

    model_config = env_settings("SPARK_")


class SessionSettings(BaseSettings):
    """스트리밍 세션 설정 (초 단위)

    환경변수 오버라이드:
        SESSION_DEADLINE_SECONDS: 세션 전체 데드라인 (기본: 30초)
        SESSION_OPEN_TIMEOUT: 웹소켓 핸드셰이크 타임아웃 (기본: 10초)
        SESSION_CLOSE_TIMEOUT: 종료 핸드셰이크 대기 시간 (기본: 1초)
    """

    deadline_seconds: float = 30.0
    open_timeout: float | None = 10.0
    close_timeout: float = 1.0

    model_config = env_settings("SESSION_")


class LoggingSettings(BaseSettings):
    """로깅 설정

    환경변수 오버라이드:
        LOG_LEVEL: 로깅 레벨 (기본: INFO)
        LOG_TO_FILE: 파일 로깅 여부 (기본: true)
        LOG_TO_CONSOLE: 콘솔 로깅 여부 (기본: true)
        LOG_DIR: 로그 디렉토리 (기본: logs)
    """

    level: str = "INFO"
    to_file: bool = True
    to_console: bool = True
    dir: str = "logs"

    model_config = env_settings("LOG_")


# ========================================
# 설정 인스턴스 (싱글톤)
# ========================================

app_settings = AppSettings()
spark_settings = SparkSettings()
session_settings = SessionSettings()
logging_settings = LoggingSettings()
