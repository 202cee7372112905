"""
기간별 습관 통계 — StatsManager.
습관 목록과 기간 내 완료 기록을 한 번에 읽어 aggregator로 습관당 숫자 1개(기간별)로 축약한다.
보관된 습관도 포함한다(과거 기록은 통계에 남는다). 조회 실패 시 재시도하지 않는다.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Sequence

from habit_tracker.core.database import get_session_factory
from habit_tracker.domains.habit.models import Habit, HabitCompletion
from habit_tracker.infrastructure.stats.aggregator import (
    aggregate_value,
    bucket_by_day,
    bucket_by_month,
    group_by_category,
    month_bounds,
    month_key,
    trailing_months,
)
from habit_tracker.infrastructure.stats.constants import DEFAULT_HABIT_TYPE_ORDER

logger = logging.getLogger(__name__)


@dataclass
class HabitStat:
    habit_id: str
    name: str
    category: str
    habit_type: str
    active: bool
    value: int | float


@dataclass
class PeriodValue:
    period: str  # YYYY-MM 또는 YYYY-MM-DD
    value: int | float


@dataclass
class HabitSeries:
    habit_id: str
    name: str
    category: str
    habit_type: str
    active: bool
    points: list[PeriodValue] = field(default_factory=list)


@dataclass
class CategoryGroup:
    category: str
    habits: list = field(default_factory=list)


class StatsManager:

    @staticmethod
    def _load(user_id: str, start: date, end: date) -> tuple[list[Habit], dict[str, list[HabitCompletion]]]:
        """end 이전(당일 포함) 생성된 전체 습관 + [start, end] 완료 기록(habit_id별)."""
        end_of_day = datetime.combine(end, time.max)
        with get_session_factory()() as session:
            habits = (
                session.query(Habit)
                .filter(Habit.user_id == user_id, Habit.created_at <= end_of_day)
                .all()
            )
            rows = (
                session.query(HabitCompletion)
                .filter(
                    HabitCompletion.user_id == user_id,
                    HabitCompletion.completed_date >= start,
                    HabitCompletion.completed_date <= end,
                )
                .all()
            )
        by_habit: dict[str, list[HabitCompletion]] = defaultdict(list)
        for r in rows:
            by_habit[r.habit_id].append(r)
        return habits, by_habit

    @staticmethod
    def _grouped(items: list, type_order: Sequence[str]) -> list[CategoryGroup]:
        return [CategoryGroup(category=cat, habits=members) for cat, members in group_by_category(items, type_order)]

    @staticmethod
    def get_month_stats(
        user_id: str,
        year: int,
        month: int,
        type_order: Sequence[str] = DEFAULT_HABIT_TYPE_ORDER,
    ) -> list[CategoryGroup]:
        """해당 달(Month)의 습관별 집계값, 카테고리별 그룹."""
        start, end = month_bounds(year, month)
        habits, by_habit = StatsManager._load(user_id, start, end)
        stats = [
            HabitStat(
                habit_id=h.id,
                name=h.name,
                category=h.category,
                habit_type=h.habit_type,
                active=bool(h.active),
                value=aggregate_value(h.habit_type, by_habit.get(h.id, [])),
            )
            for h in habits
        ]
        logger.info("month stats user_id=%s month=%s habits=%s", user_id, month_key(year, month), len(stats))
        return StatsManager._grouped(stats, type_order)

    @staticmethod
    def get_trend(
        user_id: str,
        end: date,
        months: int,
        type_order: Sequence[str] = DEFAULT_HABIT_TYPE_ORDER,
    ) -> tuple[list[str], list[CategoryGroup]]:
        """end가 속한 달까지 최근 months개월, 습관별 월 집계 시계열."""
        window = trailing_months(end, months)
        start, _ = month_bounds(*window[0])
        _, last = month_bounds(*window[-1])
        habits, by_habit = StatsManager._load(user_id, start, last)
        periods = [month_key(y, m) for y, m in window]
        series = []
        for h in habits:
            buckets = bucket_by_month(by_habit.get(h.id, []))
            series.append(
                HabitSeries(
                    habit_id=h.id,
                    name=h.name,
                    category=h.category,
                    habit_type=h.habit_type,
                    active=bool(h.active),
                    points=[
                        PeriodValue(period=month_key(y, m), value=aggregate_value(h.habit_type, buckets.get((y, m), [])))
                        for y, m in window
                    ],
                )
            )
        return periods, StatsManager._grouped(series, type_order)

    @staticmethod
    def get_daily_series(
        user_id: str,
        year: int,
        month: int,
        type_order: Sequence[str] = DEFAULT_HABIT_TYPE_ORDER,
    ) -> list[CategoryGroup]:
        """해당 달의 날짜별 습관 집계값."""
        start, end = month_bounds(year, month)
        habits, by_habit = StatsManager._load(user_id, start, end)
        days = [start + timedelta(days=i) for i in range((end - start).days + 1)]
        series = []
        for h in habits:
            buckets = bucket_by_day(by_habit.get(h.id, []))
            series.append(
                HabitSeries(
                    habit_id=h.id,
                    name=h.name,
                    category=h.category,
                    habit_type=h.habit_type,
                    active=bool(h.active),
                    points=[
                        PeriodValue(period=d.isoformat(), value=aggregate_value(h.habit_type, buckets.get(d, [])))
                        for d in days
                    ],
                )
            )
        return StatsManager._grouped(series, type_order)
