"""
습관 서비스 구현체.
리포지토리·CompletionManager 위에서 사용자 범위 검사, 도메인 예외, 응답 변환을 담당한다.
"""
import logging
from datetime import date
from typing import Optional

from habit_tracker.core.clock import Clock, get_clock
from habit_tracker.core.config import get_settings
from habit_tracker.core.exceptions import HabitNotArchivedError, HabitNotFoundError, InvalidDateError
from habit_tracker.domains.habit.models import Habit
from habit_tracker.domains.habit.repository import HabitRepository
from habit_tracker.domains.habit.schemas import (
    CompletionStateResponse,
    DayCategoryGroup,
    DayHabitEntry,
    DayViewResponse,
    FinalizeResponse,
    HabitCreate,
    HabitResponse,
    HabitUpdate,
)
from habit_tracker.infrastructure.completion import CompletionManager
from habit_tracker.infrastructure.stats.aggregator import group_by_category

logger = logging.getLogger(__name__)


class HabitServiceImpl:

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or get_clock()

    def _require(self, user_id: str, habit_id: str) -> Habit:
        habit = HabitRepository.get(user_id, habit_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    # ── CRUD ────────────────────────────────────────────────────────────

    def create_habit(self, user_id: str, body: HabitCreate) -> HabitResponse:
        values = body.model_dump()
        values["habit_type"] = body.habit_type.value
        habit = HabitRepository.create(user_id, values, created_at=self._clock.now())
        logger.info("habit created habit_id=%s user_id=%s type=%s", habit.id, user_id, habit.habit_type)
        return HabitResponse.model_validate(habit)

    def list_habits(self, user_id: str, archived: bool = False) -> list[HabitResponse]:
        rows = HabitRepository.list_habits(user_id, active=not archived)
        return [HabitResponse.model_validate(h) for h in rows]

    def get_habit(self, user_id: str, habit_id: str) -> HabitResponse:
        return HabitResponse.model_validate(self._require(user_id, habit_id))

    def update_habit(self, user_id: str, habit_id: str, body: HabitUpdate) -> HabitResponse:
        habit = self._require(user_id, habit_id)
        patch = body.model_dump(exclude_unset=True)
        # 기본값은 습관 타입에 맞는 것만 반영
        if habit.habit_type != "duration":
            patch.pop("default_duration", None)
        if habit.habit_type != "rating":
            patch.pop("default_rating", None)
        if not patch:
            return HabitResponse.model_validate(habit)
        updated = HabitRepository.update(user_id, habit_id, patch)
        if updated is None:
            raise HabitNotFoundError(habit_id)
        return HabitResponse.model_validate(updated)

    def archive_habit(self, user_id: str, habit_id: str) -> HabitResponse:
        habit = HabitRepository.set_active(user_id, habit_id, False)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        logger.info("habit archived habit_id=%s user_id=%s", habit_id, user_id)
        return HabitResponse.model_validate(habit)

    def restore_habit(self, user_id: str, habit_id: str) -> HabitResponse:
        habit = HabitRepository.set_active(user_id, habit_id, True)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        logger.info("habit restored habit_id=%s user_id=%s", habit_id, user_id)
        return HabitResponse.model_validate(habit)

    def delete_habit(self, user_id: str, habit_id: str) -> None:
        habit = self._require(user_id, habit_id)
        if habit.active:
            raise HabitNotArchivedError(habit_id)
        if not HabitRepository.delete_with_completions(user_id, habit_id):
            raise HabitNotFoundError(habit_id)

    # ── 완료 기록 ────────────────────────────────────────────────────────

    def set_completion(
        self,
        user_id: str,
        habit_id: str,
        checked: bool,
        value: Optional[float] = None,
        on_date: Optional[date] = None,
    ) -> CompletionStateResponse:
        habit = self._require(user_id, habit_id)
        target = on_date or self._clock.today()
        state = CompletionManager.set_completion(habit, target, checked, value, clock=self._clock)
        return CompletionStateResponse(
            habit_id=state.habit_id,
            date=state.date,
            completed=state.completed,
            duration=state.duration,
            rating=state.rating,
        )

    def get_day_view(self, user_id: str, on_date: Optional[date] = None) -> DayViewResponse:
        """
        날짜 D 화면: 활성 + D 이전 생성 습관에 D의 완료 여부·값을 붙여 카테고리/타입순으로 묶는다.
        미래 날짜는 조회 불가, 오늘이 아닌 날짜는 read_only.
        """
        today = self._clock.today()
        target = on_date or today
        if target > today:
            raise InvalidDateError("Cannot view future dates")
        habits = HabitRepository.list_for_day(user_id, target)
        completions = CompletionManager.completions_on(user_id, target)
        entries = []
        for h in habits:
            c = completions.get(h.id)
            entries.append(
                DayHabitEntry(
                    id=h.id,
                    name=h.name,
                    category=h.category,
                    habit_type=h.habit_type or "checkbox",
                    default_duration=h.default_duration,
                    default_rating=h.default_rating,
                    completed=c is not None,
                    duration=c.duration if c else None,
                    rating=c.rating if c else None,
                )
            )
        groups = group_by_category(entries, get_settings().habit_type_order)
        is_today = target == today
        return DayViewResponse(
            date=target,
            is_today=is_today,
            read_only=not is_today,
            categories=[DayCategoryGroup(category=cat, habits=items) for cat, items in groups],
        )

    def finalize_today(self, user_id: str) -> FinalizeResponse:
        today = self._clock.today()
        finalized = CompletionManager.auto_finalize_uncompleted(today, user_id=user_id)
        return FinalizeResponse(date=today, finalized_habit_ids=finalized)
