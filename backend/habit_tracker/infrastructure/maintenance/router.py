"""
유지보수 API — habits.active 컬럼 보정.
안정된 API 계약이 아닌 운영용 엔드포인트. 200 성공, 207 부분 성공, 500 실패.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from habit_tracker.core.database import (
    REPAIR_INCOMPLETE,
    REPAIR_SUCCESS,
    ensure_active_column,
)
from habit_tracker.domains.auth.security import CurrentUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/add-active-column", summary="habits.active 컬럼 추가 시도")
def add_active_column(current_user: CurrentUser = Depends(get_current_user)):
    logger.info("add-active-column requested user_id=%s", current_user.id)
    result = ensure_active_column()
    if result.status == REPAIR_SUCCESS:
        return JSONResponse(status_code=200, content={"status": "success", "message": result.message})
    if result.status == REPAIR_INCOMPLETE:
        return JSONResponse(status_code=207, content={"status": "incomplete", "message": result.message})
    logger.error("add-active-column failed: %s", result.message)
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to add column", "detail": result.message},
    )
