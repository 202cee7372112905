"""
습관·일별 완료 모델.
Habit: 사용자 정의 습관(checkbox/duration/rating). active=False는 보관(archive) 상태.
HabitCompletion: 습관별 하루 1건의 완료 기록 — (habit_id, completed_date) 유니크.
"""
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from habit_tracker.core.database import Base
from habit_tracker.infrastructure.stats.constants import DEFAULT_CATEGORY


def _new_id() -> str:
    return str(uuid.uuid4())


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, default=DEFAULT_CATEGORY)
    habit_type = Column(String(16), nullable=False, default="checkbox")
    default_duration = Column(Integer, nullable=True)  # 분 단위
    default_rating = Column(Float, nullable=True)  # 0~5
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)

    __table_args__ = (Index("habits_active_idx", "active"),)


class HabitCompletion(Base):
    """
    습관의 특정 날짜 결과 기록.
    duration은 duration 타입, rating은 rating 타입에서만 사용한다.
    """

    __tablename__ = "habit_completions"

    id = Column(String(36), primary_key=True, default=_new_id)
    habit_id = Column(
        String(36),
        ForeignKey("habits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(64), nullable=False, index=True)
    completed_date = Column(Date, nullable=False, index=True)
    duration = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)

    __table_args__ = (
        UniqueConstraint("habit_id", "completed_date", name="uq_habit_completion_habit_date"),
    )
