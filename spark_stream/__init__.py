"""서명된 웹소켓 스트리밍 채팅 클라이언트

주요 진입점은 ``spark_stream.application.client.SparkChatClient`` 입니다.
"""

from spark_stream.application.client import SparkChatClient
from spark_stream.common.exceptions.client_errors import (
    ClientError,
    ConfigurationError,
    DeadlineExceeded,
    IncompleteStreamError,
    InvalidInput,
    MalformedFrameError,
    RemoteProtocolError,
    SessionCancelled,
    TransportError,
)

__all__ = [
    "ClientError",
    "ConfigurationError",
    "DeadlineExceeded",
    "IncompleteStreamError",
    "InvalidInput",
    "MalformedFrameError",
    "RemoteProtocolError",
    "SessionCancelled",
    "SparkChatClient",
    "TransportError",
]
