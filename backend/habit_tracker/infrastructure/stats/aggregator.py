"""
습관 타입별 집계 — 순수 함수.
기간(일/월) 안의 완료 기록을 습관 1개당 숫자 1개로 축약한다.
- checkbox: 기록 수
- duration: duration 합계(None은 0)
- rating: None이 아닌 rating의 평균(소수 첫째 자리 반올림), 없으면 0
동일 입력 → 동일 결과.
"""
import calendar
from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from habit_tracker.infrastructure.stats.constants import (
    DEFAULT_HABIT_TYPE_ORDER,
    RATING_AVERAGE_DECIMALS,
    HabitType,
)


def _type_value(habit_type: Any) -> str:
    return habit_type.value if isinstance(habit_type, HabitType) else str(habit_type or "checkbox")


def average_rating(ratings: Iterable[float | None]) -> float:
    values = [r for r in ratings if r is not None]
    if not values:
        return 0.0
    mean = Decimal(str(sum(values))) / Decimal(len(values))
    quantum = Decimal(1).scaleb(-RATING_AVERAGE_DECIMALS)
    return float(mean.quantize(quantum, rounding=ROUND_HALF_UP))


def aggregate_value(habit_type: Any, completions: Sequence[Any]) -> int | float:
    kind = _type_value(habit_type)
    if kind == HabitType.DURATION.value:
        return sum(c.duration or 0 for c in completions)
    if kind == HabitType.RATING.value:
        return average_rating(c.rating for c in completions)
    return len(completions)


# ── 기간(window) ─────────────────────────────────────────────────

def month_bounds(year: int, month: int) -> tuple[date, date]:
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def trailing_months(end: date, months: int) -> list[tuple[int, int]]:
    """end가 속한 달을 포함한 최근 months개월, 오래된 순."""
    return [shift_month(end.year, end.month, -offset) for offset in range(months - 1, -1, -1)]


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def bucket_by_month(completions: Iterable[Any]) -> dict[tuple[int, int], list[Any]]:
    buckets: dict[tuple[int, int], list[Any]] = defaultdict(list)
    for c in completions:
        d = c.completed_date
        buckets[(d.year, d.month)].append(c)
    return buckets


def bucket_by_day(completions: Iterable[Any]) -> dict[date, list[Any]]:
    buckets: dict[date, list[Any]] = defaultdict(list)
    for c in completions:
        buckets[c.completed_date].append(c)
    return buckets


# ── 그룹·정렬 ───────────────────────────────────────────────────

def type_rank(habit_type: Any, type_order: Sequence[str] = DEFAULT_HABIT_TYPE_ORDER) -> int:
    kind = _type_value(habit_type)
    try:
        return type_order.index(kind)
    except ValueError:
        return len(type_order)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def group_by_category(
    items: Iterable[Any],
    type_order: Sequence[str] = DEFAULT_HABIT_TYPE_ORDER,
) -> list[tuple[str, list[Any]]]:
    """
    카테고리 알파벳순 → 카테고리 내 타입 순서(type_order) → 이름순.
    items는 category, habit_type, name 속성(또는 키)을 가진 객체.
    """
    groups: dict[str, list[Any]] = defaultdict(list)
    for item in items:
        groups[_field(item, "category")].append(item)
    result = []
    for category in sorted(groups, key=lambda c: (c or "").lower()):
        members = sorted(
            groups[category],
            key=lambda h: (
                type_rank(_field(h, "habit_type"), type_order),
                (_field(h, "name") or "").lower(),
            ),
        )
        result.append((category, members))
    return result
