"""
도메인 예외 — 각 예외는 대응하는 HTTP 상태 코드를 가진다.
서비스 계층에서 발생시키고, main.py의 예외 핸들러가 JSON 응답으로 변환한다.
"""
from fastapi import status


class HabitTrackerError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotAuthenticatedError(HabitTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "User not authenticated"):
        super().__init__(detail)


class HabitNotFoundError(HabitTrackerError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, habit_id: str):
        super().__init__("Habit not found")
        self.habit_id = habit_id


class HabitArchivedError(HabitTrackerError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, habit_id: str):
        super().__init__("Archived habits cannot record completions")
        self.habit_id = habit_id


class HabitNotArchivedError(HabitTrackerError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, habit_id: str):
        super().__init__("Only archived habits can be permanently deleted")
        self.habit_id = habit_id


class CompletionLockedError(HabitTrackerError):
    """오늘이 아닌 날짜의 완료 기록은 읽기 전용."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, detail: str = "Cannot modify habits for past dates"):
        super().__init__(detail)


class InvalidCompletionValueError(HabitTrackerError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidDateError(HabitTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
