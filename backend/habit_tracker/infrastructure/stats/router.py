"""
습관 통계 API — 월별 집계, 최근 N개월 추이, 일별 시계열.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from habit_tracker.core.clock import Clock, get_clock
from habit_tracker.core.config import get_settings
from habit_tracker.domains.auth.security import CurrentUser, get_current_user
from habit_tracker.infrastructure.stats.constants import TREND_WINDOW_MONTHS, YEAR_MAX, YEAR_MIN
from habit_tracker.infrastructure.stats.schemas import (
    DailySeriesResponse,
    MonthStatsResponse,
    SeriesCategoryGroup,
    StatCategoryGroup,
    TrendResponse,
)
from habit_tracker.infrastructure.stats.stats_manager import StatsManager

router = APIRouter(prefix="/stats")


def _resolve_month(year: Optional[int], month: Optional[int], clock: Clock) -> tuple[int, int]:
    today = clock.today()
    year = year if year is not None else today.year
    month = month if month is not None else today.month
    if not (1 <= month <= 12):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="month must be 1-12")
    if not (YEAR_MIN <= year <= YEAR_MAX):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"year must be {YEAR_MIN}-{YEAR_MAX}"
        )
    return year, month


@router.get("/month", response_model=MonthStatsResponse, summary="특정 달(Month) 습관별 집계")
def get_month_stats(
    year: Optional[int] = None,
    month: Optional[int] = None,
    current_user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """year/month 미지정 시 이번 달. 보관된 습관도 active=false로 포함."""
    year, month = _resolve_month(year, month, clock)
    groups = StatsManager.get_month_stats(current_user.id, year, month, get_settings().habit_type_order)
    return MonthStatsResponse(
        year=year,
        month=month,
        categories=[StatCategoryGroup.model_validate(g) for g in groups],
    )


@router.get("/trend", response_model=TrendResponse, summary="최근 6/12개월 월별 추이")
def get_trend(
    months: int = 6,
    current_user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    if months not in TREND_WINDOW_MONTHS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"months must be one of {list(TREND_WINDOW_MONTHS)}",
        )
    periods, groups = StatsManager.get_trend(
        current_user.id, clock.today(), months, get_settings().habit_type_order
    )
    return TrendResponse(
        months=months,
        periods=periods,
        categories=[SeriesCategoryGroup.model_validate(g) for g in groups],
    )


@router.get("/daily", response_model=DailySeriesResponse, summary="해당 달 날짜별 습관 값")
def get_daily_series(
    year: Optional[int] = None,
    month: Optional[int] = None,
    current_user: CurrentUser = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    year, month = _resolve_month(year, month, clock)
    groups = StatsManager.get_daily_series(current_user.id, year, month, get_settings().habit_type_order)
    return DailySeriesResponse(
        year=year,
        month=month,
        categories=[SeriesCategoryGroup.model_validate(g) for g in groups],
    )
