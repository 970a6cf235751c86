"""
Dependency Injection Containers

아키텍처:
- CredentialContainer: settings.py 싱글톤 → 불변 도메인 값 객체 (Credentials 등)
- ApplicationContainer: 최상위 컨테이너 (SparkChatClient 팩토리)

Settings 주입:
    container = ApplicationContainer()
    container.credentials.spark_config()     # → spark_settings 인스턴스
    container.credentials.credentials()      # → Credentials (검증 포함, 싱글톤)
    client = container.chat_client()         # → SparkChatClient

    # 테스트: 설정 오버라이드
    with container.credentials.spark_config.override(SparkSettings(app_id="...")):
        ...
"""

from dependency_injector import containers, providers

from spark_stream.application.client import SparkChatClient
from spark_stream.config.settings import (
    app_settings,
    session_settings,
    spark_settings,
)
from spark_stream.core.dto.internal.common import (
    Credentials,
    GenerationParameters,
    SessionPolicy,
)


# ========================================
# 1. Credential Container (설정 → 도메인)
# ========================================
class CredentialContainer(containers.DeclarativeContainer):
    """자격 증명/파라미터 컨테이너

    - 프로세스 시작 시 1회 생성, 이후 읽기 전용 공유 (Singleton)
    - 필수 필드 누락 시 최초 접근 시점에 ConfigurationError
    """

    # ===== Settings 주입 (DI) =====
    spark_config = providers.Object(spark_settings)
    session_config = providers.Object(session_settings)

    credentials = providers.Singleton(Credentials.from_settings, spark_config)
    parameters = providers.Singleton(GenerationParameters.from_settings, spark_config)
    policy = providers.Singleton(SessionPolicy.from_settings, session_config)


# ========================================
# 2. Application Container (최상위)
# ========================================
class ApplicationContainer(containers.DeclarativeContainer):
    """애플리케이션 최상위 컨테이너"""

    app_config = providers.Object(app_settings)

    credentials = providers.Container(CredentialContainer)

    chat_client = providers.Singleton(
        SparkChatClient,
        credentials=credentials.credentials,
        parameters=credentials.parameters,
        policy=credentials.policy,
        priming_text=credentials.spark_config.provided.priming_text,
        context_delimiter=credentials.spark_config.provided.context_delimiter,
        anonymous_uid=credentials.spark_config.provided.anonymous_uid,
        empty_reply_text=credentials.spark_config.provided.empty_reply_text,
    )
