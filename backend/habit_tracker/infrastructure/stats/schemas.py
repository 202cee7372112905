"""
통계 응답 스키마 — 월별 집계, 최근 N개월 추이, 일별 시계열.
"""
from pydantic import BaseModel, Field

from habit_tracker.infrastructure.stats.constants import HabitType


class HabitStatResponse(BaseModel):
    habit_id: str
    name: str
    category: str
    habit_type: HabitType
    active: bool = Field(..., description="False면 보관된 습관(과거 기록만 집계)")
    value: int | float = Field(..., description="checkbox: 횟수, duration: 분 합계, rating: 평균")

    model_config = {"from_attributes": True}


class StatCategoryGroup(BaseModel):
    category: str
    habits: list[HabitStatResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class MonthStatsResponse(BaseModel):
    """GET /stats/month — 특정 달(Month) 습관별 집계."""

    year: int
    month: int
    categories: list[StatCategoryGroup] = Field(default_factory=list)


class PeriodValueResponse(BaseModel):
    period: str = Field(..., description="YYYY-MM 또는 YYYY-MM-DD")
    value: int | float

    model_config = {"from_attributes": True}


class HabitSeriesResponse(BaseModel):
    habit_id: str
    name: str
    category: str
    habit_type: HabitType
    active: bool
    points: list[PeriodValueResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class SeriesCategoryGroup(BaseModel):
    category: str
    habits: list[HabitSeriesResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TrendResponse(BaseModel):
    """GET /stats/trend — 최근 6/12개월 월별 추이."""

    months: int
    periods: list[str] = Field(default_factory=list)
    categories: list[SeriesCategoryGroup] = Field(default_factory=list)


class DailySeriesResponse(BaseModel):
    """GET /stats/daily — 해당 달 날짜별 값."""

    year: int
    month: int
    categories: list[SeriesCategoryGroup] = Field(default_factory=list)
