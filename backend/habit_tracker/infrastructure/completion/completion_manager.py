"""
일별 완료 규칙 — CompletionManager.
(habit_id, completed_date)당 최대 1건. 기록 생성·갱신은 유니크 제약 기반 조건부 upsert,
해제는 삭제. 오늘이 아닌 날짜는 읽기 전용. 날짜가 바뀌면 미완료 duration 습관을 0분으로 확정한다.
"""
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from habit_tracker.core.clock import Clock, get_clock
from habit_tracker.core.database import get_session_factory
from habit_tracker.core.exceptions import (
    CompletionLockedError,
    HabitArchivedError,
    InvalidCompletionValueError,
)
from habit_tracker.domains.habit.models import Habit, HabitCompletion
from habit_tracker.infrastructure.stats.constants import (
    DURATION_MAX_MINUTES,
    RATING_MAX,
    RATING_MIN,
    RATING_STEP,
    HabitType,
)

logger = logging.getLogger(__name__)

_UPSERT_KEYS = ["habit_id", "completed_date"]


@dataclass
class CompletionState:
    """set_completion 결과 — 해당 날짜의 최종 상태."""

    habit_id: str
    date: date
    completed: bool
    duration: int | None = None
    rating: float | None = None


def _dialect_insert(session):
    """ON CONFLICT를 지원하는 방언의 insert 생성자. 그 외에는 None."""
    name = session.get_bind().dialect.name
    if name == "sqlite":
        return sqlite_insert
    if name == "postgresql":
        return pg_insert
    return None


def _day_end(d: date) -> datetime:
    return datetime.combine(d + timedelta(days=1), time.min)


class CompletionManager:

    # 타입별 저장 값 결정 + 유효성 검사
    @staticmethod
    def resolve_values(habit: Habit, value: float | None) -> tuple[int | None, float | None]:
        """
        (duration, rating) 반환.
        - checkbox: 둘 다 None (value 무시)
        - duration: 입력값, 미입력 시 0. 0 이상 1440 이하의 정수만 허용
        - rating: 입력값, 미입력 시 habit.default_rating 또는 0. 0~5, 0.5 단위
        """
        kind = habit.habit_type
        if value is not None and not math.isfinite(value):
            raise InvalidCompletionValueError("Value must be a finite number")
        if kind == HabitType.DURATION.value:
            minutes = 0 if value is None else value
            if minutes < 0 or minutes != int(minutes):
                raise InvalidCompletionValueError("Duration must be a non-negative whole number of minutes")
            if minutes > DURATION_MAX_MINUTES:
                raise InvalidCompletionValueError(f"Duration cannot exceed {DURATION_MAX_MINUTES} minutes")
            return int(minutes), None
        if kind == HabitType.RATING.value:
            rating = value if value is not None else (habit.default_rating or 0.0)
            if not RATING_MIN <= rating <= RATING_MAX:
                raise InvalidCompletionValueError("Rating must be between 0 and 5")
            if (rating / RATING_STEP) != int(rating / RATING_STEP):
                raise InvalidCompletionValueError("Rating must be in steps of 0.5")
            return None, float(rating)
        return None, None

    @staticmethod
    def _upsert(session, habit: Habit, d: date, duration: int | None, rating: float | None) -> None:
        values = {
            "id": str(uuid.uuid4()),
            "habit_id": habit.id,
            "user_id": habit.user_id,
            "completed_date": d,
            "duration": duration,
            "rating": rating,
        }
        insert = _dialect_insert(session)
        if insert is not None:
            stmt = insert(HabitCompletion).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=_UPSERT_KEYS,
                set_={"duration": stmt.excluded.duration, "rating": stmt.excluded.rating},
            )
            session.execute(stmt)
            return
        row = (
            session.query(HabitCompletion)
            .filter(HabitCompletion.habit_id == habit.id, HabitCompletion.completed_date == d)
            .first()
        )
        if row:
            row.duration = duration
            row.rating = rating
        else:
            session.add(HabitCompletion(**values))
        session.flush()

    @staticmethod
    def set_completion(
        habit: Habit,
        d: date,
        checked: bool,
        value: float | None = None,
        clock: Clock | None = None,
    ) -> CompletionState:
        """
        습관 H의 날짜 D 완료 상태를 설정한다.
        checked=True → 단일 기록 upsert, checked=False → 기록 삭제.
        같은 인자로 두 번 호출해도 최종 상태는 동일(멱등).
        """
        clock = clock or get_clock()
        if not clock.is_today(d):
            raise CompletionLockedError()
        if not habit.active:
            raise HabitArchivedError(habit.id)

        session_factory = get_session_factory()
        if not checked:
            with session_factory() as session:
                try:
                    deleted = (
                        session.query(HabitCompletion)
                        .filter(HabitCompletion.habit_id == habit.id, HabitCompletion.completed_date == d)
                        .delete(synchronize_session=False)
                    )
                    session.commit()
                except SQLAlchemyError:
                    session.rollback()
                    logger.exception("completion delete failed habit_id=%s date=%s", habit.id, d)
                    raise
            logger.info("completion cleared habit_id=%s date=%s deleted=%s", habit.id, d, deleted)
            return CompletionState(habit_id=habit.id, date=d, completed=False)

        duration, rating = CompletionManager.resolve_values(habit, value)
        with session_factory() as session:
            try:
                try:
                    CompletionManager._upsert(session, habit, d, duration, rating)
                    session.commit()
                except IntegrityError:
                    # select-then-write 경로에서 동시 삽입과 충돌한 경우 1회 재시도
                    session.rollback()
                    CompletionManager._upsert(session, habit, d, duration, rating)
                    session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("completion upsert failed habit_id=%s date=%s", habit.id, d)
                raise
        logger.info(
            "completion upserted habit_id=%s date=%s duration=%s rating=%s",
            habit.id, d, duration, rating,
        )
        return CompletionState(habit_id=habit.id, date=d, completed=True, duration=duration, rating=rating)

    @staticmethod
    def completions_on(user_id: str, d: date) -> dict[str, HabitCompletion]:
        """사용자의 날짜 D 완료 기록 — habit_id → 기록."""
        with get_session_factory()() as session:
            rows = (
                session.query(HabitCompletion)
                .filter(HabitCompletion.user_id == user_id, HabitCompletion.completed_date == d)
                .all()
            )
            return {r.habit_id: r for r in rows}

    # 날짜 변경 시 미완료 duration 습관을 0분으로 확정
    @staticmethod
    def auto_finalize_uncompleted(d: date, user_id: str | None = None) -> list[str]:
        """
        날짜 D에 기록이 없는 활성 duration 습관마다 duration=0 기록을 추가한다.
        user_id가 없으면 전체 사용자 대상(서버 배치). 기존 기록은 덮어쓰지 않는다.
        반환: 새로 확정된 habit_id 목록.
        """
        session_factory = get_session_factory()
        with session_factory() as session:
            q = session.query(Habit).filter(
                Habit.active.is_(True),
                Habit.habit_type == HabitType.DURATION.value,
                Habit.created_at < _day_end(d),
            )
            if user_id is not None:
                q = q.filter(Habit.user_id == user_id)
            habits = q.all()
            if not habits:
                return []
            existing = {
                hid
                for (hid,) in session.query(HabitCompletion.habit_id).filter(
                    HabitCompletion.completed_date == d,
                    HabitCompletion.habit_id.in_([h.id for h in habits]),
                )
            }
            pending = [h for h in habits if h.id not in existing]
            insert = _dialect_insert(session)
            try:
                for h in pending:
                    values = {
                        "id": str(uuid.uuid4()),
                        "habit_id": h.id,
                        "user_id": h.user_id,
                        "completed_date": d,
                        "duration": 0,
                        "rating": None,
                    }
                    if insert is not None:
                        session.execute(
                            insert(HabitCompletion).values(**values).on_conflict_do_nothing(
                                index_elements=_UPSERT_KEYS
                            )
                        )
                    else:
                        session.add(HabitCompletion(**values))
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                logger.exception("auto finalize failed date=%s user_id=%s", d, user_id)
                raise
        finalized = [h.id for h in pending]
        logger.info(
            "auto finalized duration habits date=%s user_id=%s count=%s",
            d, user_id, len(finalized),
        )
        return finalized
