"""연결 URL 서명 모듈

핸드셰이크마다 새 서명 URL을 생성합니다. 서명 원문은 아래 세 줄입니다.

    host: <host>
    date: <RFC1123 UTC>
    GET <handshake-path> HTTP/1.1

HMAC-SHA256(api_secret) → base64 → authorization 디스크립터 → base64
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import format_datetime

from spark_stream.core.dto.internal.common import Credentials, SignedConnectionURL

SIGNING_ALGORITHM = "hmac-sha256"
SIGNED_HEADERS = "host date request-line"


def format_rfc1123(now: datetime) -> str:
    """RFC1123 UTC 타임스탬프 (naive datetime은 UTC로 간주)"""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return format_datetime(now.astimezone(timezone.utc).replace(microsecond=0), usegmt=True)


def build_signature_origin(host: str, date: str, handshake_path: str) -> str:
    return f"host: {host}\ndate: {date}\nGET {handshake_path} HTTP/1.1"


def sign(secret: str, origin: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), origin.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_connection_url(credentials: Credentials, now: datetime) -> SignedConnectionURL:
    """(credentials, now)의 순수 함수. I/O 없음."""
    host = credentials.host
    date = format_rfc1123(now)
    signature = sign(
        credentials.api_secret,
        build_signature_origin(host, date, credentials.handshake_path),
    )
    descriptor = (
        f'api_key="{credentials.api_key}", algorithm="{SIGNING_ALGORITHM}", '
        f'headers="{SIGNED_HEADERS}", signature="{signature}"'
    )
    authorization = base64.b64encode(descriptor.encode("utf-8")).decode("ascii")
    return SignedConnectionURL(
        base_url=credentials.endpoint_url,
        authorization=authorization,
        date=date,
        host=host,
    )
