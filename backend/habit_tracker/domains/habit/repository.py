"""
습관 영속성 — DAO/리포지토리 패턴.
모든 조회는 user_id로 범위를 제한한다. 목록 조회는 habits.active 컬럼이 없는 구 스키마를 만나면
보정(ensure_active_column) 후 1회 재시도하고, 그래도 실패하면 보관 필터 없이 조회한다.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import OperationalError, ProgrammingError

from habit_tracker.core.database import (
    ensure_active_column,
    get_session_factory,
    is_missing_column_error,
)
from habit_tracker.domains.habit.models import Habit, HabitCompletion

logger = logging.getLogger(__name__)

_COLUMNS_WITHOUT_ACTIVE = [c for c in Habit.__table__.columns if c.name != "active"]


class HabitRepository:

    @staticmethod
    def create(user_id: str, values: dict[str, Any], created_at: datetime) -> Habit:
        with get_session_factory()() as session:
            habit = Habit(user_id=user_id, created_at=created_at, active=True, **values)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            return habit

    @staticmethod
    def get(user_id: str, habit_id: str) -> Optional[Habit]:
        with get_session_factory()() as session:
            return (
                session.query(Habit)
                .filter(Habit.id == habit_id, Habit.user_id == user_id)
                .first()
            )

    @staticmethod
    def _query(user_id: str, active: Optional[bool], created_before: Optional[datetime]) -> list[Habit]:
        with get_session_factory()() as session:
            q = session.query(Habit).filter(Habit.user_id == user_id)
            if active is not None:
                q = q.filter(Habit.active.is_(active))
            if created_before is not None:
                q = q.filter(Habit.created_at < created_before)
            return q.order_by(Habit.category, Habit.name).all()

    @staticmethod
    def _query_without_active(user_id: str, created_before: Optional[datetime]) -> list[Habit]:
        """active 컬럼 없이 조회 — 모든 습관을 활성으로 취급한다."""
        table = Habit.__table__
        stmt = select(*_COLUMNS_WITHOUT_ACTIVE).where(table.c.user_id == user_id)
        if created_before is not None:
            stmt = stmt.where(table.c.created_at < created_before)
        stmt = stmt.order_by(table.c.category, table.c.name)
        with get_session_factory()() as session:
            rows = session.execute(stmt).mappings().all()
        return [Habit(**dict(row), active=True) for row in rows]

    @staticmethod
    def list_habits(
        user_id: str,
        active: Optional[bool] = True,
        created_before: Optional[datetime] = None,
    ) -> list[Habit]:
        """
        active=True: 활성, False: 보관, None: 전체. 카테고리·이름순.
        created_before가 있으면 그 시각 이전에 생성된 습관만.
        """
        try:
            return HabitRepository._query(user_id, active, created_before)
        except (OperationalError, ProgrammingError) as e:
            if not is_missing_column_error(e):
                raise
            logger.warning("habits query hit missing column, attempting repair: %s", e)
        result = ensure_active_column()
        logger.info("schema repair status=%s", result.status)
        try:
            return HabitRepository._query(user_id, active, created_before)
        except (OperationalError, ProgrammingError) as e:
            if not is_missing_column_error(e):
                raise
            logger.warning("habits.active unavailable, continuing without archive support")
        if active is False:
            return []
        return HabitRepository._query_without_active(user_id, created_before)

    @staticmethod
    def list_for_day(user_id: str, d: date) -> list[Habit]:
        """날짜 D 화면용: 활성이면서 D 이전(당일 포함)에 생성된 습관."""
        day_end = datetime.combine(d + timedelta(days=1), time.min)
        return HabitRepository.list_habits(user_id, active=True, created_before=day_end)

    @staticmethod
    def update(user_id: str, habit_id: str, patch: dict[str, Any]) -> Optional[Habit]:
        with get_session_factory()() as session:
            habit = (
                session.query(Habit)
                .filter(Habit.id == habit_id, Habit.user_id == user_id)
                .first()
            )
            if not habit:
                return None
            for key, value in patch.items():
                setattr(habit, key, value)
            session.commit()
            session.refresh(habit)
            return habit

    @staticmethod
    def set_active(user_id: str, habit_id: str, active: bool) -> Optional[Habit]:
        return HabitRepository.update(user_id, habit_id, {"active": active})

    @staticmethod
    def delete_with_completions(user_id: str, habit_id: str) -> bool:
        """습관과 모든 완료 기록을 하나의 트랜잭션으로 삭제한다."""
        with get_session_factory()() as session:
            habit = (
                session.query(Habit)
                .filter(Habit.id == habit_id, Habit.user_id == user_id)
                .first()
            )
            if not habit:
                return False
            removed = (
                session.query(HabitCompletion)
                .filter(HabitCompletion.habit_id == habit_id)
                .delete(synchronize_session=False)
            )
            session.delete(habit)
            session.commit()
        logger.info("habit deleted habit_id=%s completions_removed=%s", habit_id, removed)
        return True
