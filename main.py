"""애플리케이션 진입점 (DI Container 기반)

서명된 웹소켓 스트리밍 채팅 클라이언트 CLI
- 메시지 1건 전송, 응답 조각을 도착 순서대로 출력
- 건강 기록 JSON 파일을 컨텍스트로 요약해 첨부 가능
- 실패 시 에러 코드 출력 후 비정상 종료

Usage:
    python main.py "最近睡眠怎么样？"
    python main.py "体重控制建议" --uid user-1 --records data/records.json
    SESSION_DEADLINE_SECONDS=10 python main.py "..." --context "心率偏高"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import orjson

from spark_stream.common.events import ChatFailedEvent, EventBus
from spark_stream.common.exceptions.client_errors import ClientError, ConfigurationError
from spark_stream.common.logger import PipelineLogger
from spark_stream.config.containers import ApplicationContainer
from spark_stream.core.context.health_context import summarize_health_records

logger = PipelineLogger.get_logger("main", "app")

EXIT_OK = 0
EXIT_CONFIG = 2
EXIT_CALL_FAILED = 1
EXIT_INPUT = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send one message to the Spark chat service")
    parser.add_argument("message", help="사용자 메시지")
    parser.add_argument("--uid", default=None, help="사용자 식별자 (기본: 익명)")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--context", default=None, help="system 프롬프트에 덧붙일 컨텍스트")
    source.add_argument(
        "--records",
        type=Path,
        default=None,
        help='건강 기록 JSON 파일 ({"records": [...]} 또는 [...])',
    )
    parser.add_argument("--quiet", action="store_true", help="스트리밍 조각 출력 생략")
    return parser


def load_records_context(path: Path) -> str:
    """건강 기록 파일을 읽어 컨텍스트 문자열로 요약"""
    data = orjson.loads(path.read_bytes())
    records = data.get("records", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError(f"records must be a list: {path}")
    if not all(isinstance(record, dict) for record in records):
        raise ValueError(f"each record must be an object: {path}")
    return summarize_health_records(records)


class Application:
    """애플리케이션 메인 클래스

    책임:
    - DI Container 관리
    - Event Bus 리스너 등록
    - 메시지 1건 전송 및 결과 출력
    """

    def __init__(self) -> None:
        self.container = ApplicationContainer()

    def _setup_event_bus(self) -> None:
        async def handle_failure(event: ChatFailedEvent) -> None:
            logger.error(
                f"Chat session failed: {event.error}",
                extra={
                    "session_id": event.scope.session_id,
                    "state": event.state.value,
                    "error_code": event.error.code.value,
                },
            )

        EventBus.on(ChatFailedEvent, handle_failure)

    async def run(self, args: argparse.Namespace) -> int:
        app_config = self.container.app_config()
        logger.info(
            "Starting chat client",
            extra={"environment": app_config.environment, "debug": app_config.debug},
        )
        client = self.container.chat_client()
        self._setup_event_bus()

        context = args.context
        if args.records is not None:
            # orjson.JSONDecodeError 는 ValueError 하위 클래스
            try:
                context = load_records_context(args.records)
            except (OSError, ValueError) as e:
                logger.error(f"건강 기록 로딩 실패: {e}", extra={"path": str(args.records)})
                print(f"records error: {e}", file=sys.stderr)
                return EXIT_INPUT

        streamed: list[str] = []

        def echo(delta: str) -> None:
            streamed.append(delta)
            sys.stdout.write(delta)
            sys.stdout.flush()

        try:
            reply = await client.send(
                args.message,
                user_tag=args.uid,
                context=context,
                on_delta=None if args.quiet else echo,
            )
        except ClientError as e:
            print(f"\n[{e.code.value}] {e.message}", file=sys.stderr)
            return EXIT_CALL_FAILED

        if streamed:
            print()
        else:
            print(reply)
        return EXIT_OK


async def main(argv: list[str] | None = None) -> int:
    """메인 실행 함수"""
    args = build_parser().parse_args(argv)
    app = Application()
    try:
        return await app.run(args)
    except ConfigurationError as e:
        logger.error(f"설정 오류: {e}")
        print(f"configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n프로그램이 종료되었습니다.")
