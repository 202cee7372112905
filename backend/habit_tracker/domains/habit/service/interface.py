"""
습관 서비스 인터페이스.
습관 CRUD·보관/복원, 일별 화면, 완료 상태 설정 계약을 정의한다.
"""
from datetime import date
from typing import Optional, Protocol

from habit_tracker.domains.habit.schemas import (
    CompletionStateResponse,
    DayViewResponse,
    FinalizeResponse,
    HabitCreate,
    HabitResponse,
    HabitUpdate,
)


class HabitService(Protocol):

    def create_habit(self, user_id: str, body: HabitCreate) -> HabitResponse:
        ...

    def list_habits(self, user_id: str, archived: bool = False) -> list[HabitResponse]:
        """archived=False면 활성 습관, True면 보관된 습관."""
        ...

    def get_habit(self, user_id: str, habit_id: str) -> HabitResponse:
        ...

    def update_habit(self, user_id: str, habit_id: str, body: HabitUpdate) -> HabitResponse:
        ...

    def archive_habit(self, user_id: str, habit_id: str) -> HabitResponse:
        """보관(soft delete): 일별 화면에서 제외, 과거 기록은 유지."""
        ...

    def restore_habit(self, user_id: str, habit_id: str) -> HabitResponse:
        ...

    def delete_habit(self, user_id: str, habit_id: str) -> None:
        """보관된 습관만 영구 삭제 — 완료 기록도 함께 삭제."""
        ...

    def set_completion(
        self,
        user_id: str,
        habit_id: str,
        checked: bool,
        value: Optional[float] = None,
        on_date: Optional[date] = None,
    ) -> CompletionStateResponse:
        ...

    def get_day_view(self, user_id: str, on_date: Optional[date] = None) -> DayViewResponse:
        ...

    def finalize_today(self, user_id: str) -> FinalizeResponse:
        ...
