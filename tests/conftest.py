from __future__ import annotations

import os

# 테스트 중에는 logs/ 디렉토리에 파일을 만들지 않음 (settings 임포트 이전에 설정)
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest  # noqa: E402

from spark_stream.common.events import EventBus  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_event_bus():
    EventBus.clear()
    yield
    EventBus.clear()
