"""건강 기록 → 컨텍스트 텍스트 변환

업스트림(웹 레이어)이 보유한 건강 기록 dict 목록을 system 프롬프트에 덧붙일
요약 문자열로 만듭니다. 모델이 중국어 프롬프트를 사용하므로 출력도 중국어입니다.

기록 형식: {"type": "heart-rate" | "weight" | "bmi" | "sleep" | "running",
           "value": number, "createdAt": ISO-8601}
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

SECTION_SEPARATOR = "\n\n"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_created_at(raw: Any) -> datetime:
    if not isinstance(raw, str) or not raw:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _group_latest_first(records: Iterable[Mapping[str, Any]]) -> dict[str, list[float]]:
    """type별 값 목록 (최신 기록이 앞). 숫자가 아닌 값은 무시."""
    valid: list[tuple[datetime, str, float]] = []
    for record in records:
        value = record.get("value")
        kind = record.get("type")
        if not isinstance(kind, str) or isinstance(value, bool):
            continue
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        valid.append((_parse_created_at(record.get("createdAt")), kind, number))

    valid.sort(key=lambda item: item[0], reverse=True)
    grouped: dict[str, list[float]] = defaultdict(list)
    for _, kind, number in valid:
        grouped[kind].append(number)
    return grouped


def _fmt(value: float) -> str:
    return f"{value:g}"


def heart_rate_band(avg: float) -> str:
    if avg < 60:
        return "偏低"
    if avg > 100:
        return "偏高"
    return "正常范围内"


def bmi_band(bmi: float) -> str:
    if bmi < 18.5:
        return "偏瘦"
    if bmi < 24.9:
        return "正常"
    if bmi < 29.9:
        return "超重"
    return "肥胖"


def sleep_band(avg: float) -> str:
    if avg < 7:
        return "睡眠时间偏少"
    if avg > 9:
        return "睡眠时间偏多"
    return "睡眠时间适中"


def summarize_health_records(records: Iterable[Mapping[str, Any]]) -> str:
    """건강 기록 요약 문자열 생성 (기록이 없으면 빈 문자열)"""
    grouped = _group_latest_first(records)
    sections: list[str] = []

    if heart_rates := grouped.get("heart-rate"):
        avg = sum(heart_rates) / len(heart_rates)
        sections.append(f"心率情况：平均{avg:.1f}BPM，{heart_rate_band(avg)}")

    if weights := grouped.get("weight"):
        sections.append(f"体重情况：最新记录{_fmt(weights[0])}kg")

    if bmis := grouped.get("bmi"):
        latest = bmis[0]
        sections.append(f"BMI情况：{_fmt(latest)}，属于{bmi_band(latest)}范围")

    if sleeps := grouped.get("sleep"):
        avg = sum(sleeps) / len(sleeps)
        sections.append(f"睡眠情况：平均{avg:.1f}小时，{sleep_band(avg)}")

    if runs := grouped.get("running"):
        sections.append(f"运动情况：共跑步{sum(runs):.1f}公里")

    return SECTION_SEPARATOR.join(sections)
