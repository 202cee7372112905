"""
습관 도메인 요청/응답 스키마.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from habit_tracker.infrastructure.stats.constants import (
    DEFAULT_CATEGORY,
    DURATION_MAX_MINUTES,
    RATING_MAX,
    RATING_MIN,
    HabitType,
)


# ── 요청 ────────────────────────────────────────────────────────

class HabitCreate(BaseModel):
    name: str = Field(..., max_length=255)
    category: Optional[str] = Field(DEFAULT_CATEGORY, max_length=100, description="비우면 Uncategorized")
    habit_type: HabitType = HabitType.CHECKBOX
    default_duration: Optional[int] = Field(
        None, ge=0, le=DURATION_MAX_MINUTES, description="duration 타입 기본 분(min)"
    )
    default_rating: Optional[float] = Field(None, ge=RATING_MIN, le=RATING_MAX, description="rating 타입 기본 평점")

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Habit name is required")
        return v

    @field_validator("category")
    @classmethod
    def _category_default(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            return DEFAULT_CATEGORY
        return v.strip()

    @model_validator(mode="after")
    def _defaults_match_type(self) -> "HabitCreate":
        # 타입에 맞지 않는 기본값은 저장하지 않는다
        if self.habit_type != HabitType.DURATION:
            self.default_duration = None
        if self.habit_type != HabitType.RATING:
            self.default_rating = None
        return self


class HabitUpdate(BaseModel):
    """habit_type은 생성 후 변경 불가 — 필드 자체를 허용하지 않는다."""

    name: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    default_duration: Optional[int] = Field(None, ge=0, le=DURATION_MAX_MINUTES)
    default_rating: Optional[float] = Field(None, ge=RATING_MIN, le=RATING_MAX)

    model_config = {"extra": "forbid"}

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> str:
        # 명시적 null도 빈 이름과 같이 거부
        v = (v or "").strip()
        if not v:
            raise ValueError("Habit name is required")
        return v

    @field_validator("category")
    @classmethod
    def _category_not_blank(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            return DEFAULT_CATEGORY
        return v.strip()


class CompletionRequest(BaseModel):
    """
    완료 상태 설정 요청.
    checked=False면 해당 날짜 기록 삭제. value는 duration(분) 또는 rating(0~5, 0.5 단위).
    """

    checked: bool
    value: Optional[float] = Field(None, ge=0, le=DURATION_MAX_MINUTES, allow_inf_nan=False)
    completed_date: Optional[date] = Field(None, description="대상 날짜 (없으면 서버 기준 오늘)")


# ── 응답 ────────────────────────────────────────────────────────

class HabitResponse(BaseModel):
    id: str
    user_id: str
    name: str
    category: str
    habit_type: HabitType
    default_duration: Optional[int] = None
    default_rating: Optional[float] = None
    active: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class CompletionStateResponse(BaseModel):
    habit_id: str
    date: date
    completed: bool
    duration: Optional[int] = None
    rating: Optional[float] = None


class DayHabitEntry(BaseModel):
    """일별 화면의 습관 1건 — 해당 날짜 완료 여부·값 포함."""

    id: str
    name: str
    category: str
    habit_type: HabitType
    default_duration: Optional[int] = None
    default_rating: Optional[float] = None
    completed: bool = False
    duration: Optional[int] = None
    rating: Optional[float] = None


class DayCategoryGroup(BaseModel):
    category: str
    habits: list[DayHabitEntry] = Field(default_factory=list)


class DayViewResponse(BaseModel):
    date: date
    is_today: bool
    read_only: bool = Field(..., description="오늘이 아닌 날짜는 수정 불가")
    categories: list[DayCategoryGroup] = Field(default_factory=list)


class FinalizeResponse(BaseModel):
    date: date
    finalized_habit_ids: list[str] = Field(default_factory=list)
