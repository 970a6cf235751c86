from __future__ import annotations

from pydantic import ValidationError

from spark_stream.common.exceptions.client_errors import InvalidInput
from spark_stream.core.dto.internal.common import GenerationParameters
from spark_stream.core.dto.io.envelope import (
    ChatParameterDTO,
    MessageDTO,
    MessageTextDTO,
    ParameterDTO,
    PayloadDTO,
    RequestEnvelopeDTO,
    RequestHeaderDTO,
)

ANONYMOUS_UID = "anonymous_user"
CONTEXT_DELIMITER = "\n"


def build_system_content(priming_text: str, context: str | None, delimiter: str) -> str:
    """priming 텍스트 뒤에 context를 그대로 덧붙입니다 (빈 context는 생략)."""
    if not context:
        return priming_text
    return f"{priming_text}{delimiter}{context}"


def build_envelope(
    app_id: str,
    user_tag: str | None,
    params: GenerationParameters,
    priming_text: str,
    context: str | None,
    user_message: str,
    *,
    anonymous_uid: str = ANONYMOUS_UID,
    context_delimiter: str = CONTEXT_DELIMITER,
) -> RequestEnvelopeDTO:
    """요청 봉투 생성 (결정적, 부수효과 없음)

    Raises:
        InvalidInput: user_message가 비어 있거나 uid가 형식에 맞지 않는 경우
    """
    if user_message is None or not user_message.strip():
        raise InvalidInput("user message must not be empty")

    uid = user_tag.strip() if user_tag and user_tag.strip() else anonymous_uid

    try:
        return RequestEnvelopeDTO(
            header=RequestHeaderDTO(app_id=app_id, uid=uid),
            parameter=ParameterDTO(
                chat=ChatParameterDTO(
                    domain=params.domain,
                    temperature=params.temperature,
                    max_tokens=params.max_tokens,
                )
            ),
            payload=PayloadDTO(
                message=MessageTextDTO(
                    text=(
                        MessageDTO(
                            role="system",
                            content=build_system_content(
                                priming_text, context, context_delimiter
                            ),
                        ),
                        MessageDTO(role="user", content=user_message),
                    )
                )
            ),
        )
    except ValidationError as e:
        raise InvalidInput(f"invalid request envelope: {e.errors()[0]['msg']}") from e
