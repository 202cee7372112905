"""
습관 API — CRUD·보관/복원·영구 삭제, 일별 화면, 완료 상태 설정.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from habit_tracker.core.clock import Clock, get_clock
from habit_tracker.domains.auth.security import CurrentUser, get_current_user
from habit_tracker.domains.habit.schemas import (
    CompletionRequest,
    CompletionStateResponse,
    DayViewResponse,
    FinalizeResponse,
    HabitCreate,
    HabitResponse,
    HabitUpdate,
)
from habit_tracker.domains.habit.service import HabitServiceImpl

router = APIRouter()


def get_habit_service(clock: Clock = Depends(get_clock)) -> HabitServiceImpl:
    return HabitServiceImpl(clock)


# ── 습관 관리 ───────────────────────────────────────────────────────────────

@router.get("/habits", response_model=list[HabitResponse], summary="습관 목록 (활성 또는 보관)")
def list_habits(
    archived: bool = False,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.list_habits(current_user.id, archived=archived)


@router.post(
    "/habits",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="습관 생성",
)
def create_habit(
    body: HabitCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.create_habit(current_user.id, body)


@router.get("/habits/{habit_id}", response_model=HabitResponse, summary="습관 단건 조회")
def get_habit(
    habit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.get_habit(current_user.id, habit_id)


@router.patch("/habits/{habit_id}", response_model=HabitResponse, summary="습관 수정 (타입 변경 불가)")
def update_habit(
    habit_id: str,
    body: HabitUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.update_habit(current_user.id, habit_id, body)


@router.post("/habits/{habit_id}/archive", response_model=HabitResponse, summary="습관 보관 (soft delete)")
def archive_habit(
    habit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    """일별 화면에서 제외되지만 과거 완료 기록은 통계용으로 유지된다."""
    return service.archive_habit(current_user.id, habit_id)


@router.post("/habits/{habit_id}/restore", response_model=HabitResponse, summary="보관된 습관 복원")
def restore_habit(
    habit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.restore_habit(current_user.id, habit_id)


@router.delete(
    "/habits/{habit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="보관된 습관 영구 삭제 (완료 기록 포함)",
)
def delete_habit(
    habit_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    service.delete_habit(current_user.id, habit_id)


# ── 완료 기록·일별 화면 ──────────────────────────────────────────────────────

@router.put(
    "/habits/{habit_id}/completion",
    response_model=CompletionStateResponse,
    summary="오늘의 완료 상태 설정 (checked=false면 삭제)",
)
def set_completion(
    habit_id: str,
    body: CompletionRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    """
    checkbox: 체크 시 기록 생성, 해제 시 삭제.
    duration/rating: 확정한 값으로 단일 기록 upsert. 오늘이 아닌 날짜는 409.
    """
    return service.set_completion(
        current_user.id,
        habit_id,
        checked=body.checked,
        value=body.value,
        on_date=body.completed_date,
    )


@router.get("/today", response_model=DayViewResponse, summary="일별 화면 — 카테고리별 습관과 완료 상태")
def get_day_view(
    on_date: Optional[date] = Query(None, alias="date"),
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.get_day_view(current_user.id, on_date=on_date)


@router.post(
    "/today/finalize",
    response_model=FinalizeResponse,
    summary="미완료 duration 습관을 0분으로 확정 (오늘 화면 이탈 시)",
)
def finalize_today(
    current_user: CurrentUser = Depends(get_current_user),
    service: HabitServiceImpl = Depends(get_habit_service),
):
    return service.finalize_today(current_user.id)
