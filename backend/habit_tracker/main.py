"""
FastAPI 애플리케이션 — 라우터 등록, 예외 핸들러, 시작 시 테이블 생성·날짜 변경 감시 시작.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from habit_tracker.core.clock import get_clock
from habit_tracker.core.config import get_settings
from habit_tracker.core.database import init_db
from habit_tracker.core.exceptions import HabitTrackerError
from habit_tracker.domains.habit.router import router as habit_router
from habit_tracker.domains.profile.router import router as profile_router
from habit_tracker.infrastructure.completion.rollover import DayRolloverWatcher
from habit_tracker.infrastructure.maintenance.router import router as maintenance_router
from habit_tracker.infrastructure.stats.router import router as stats_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db()
    watcher = None
    if settings.rollover_watcher_enabled:
        watcher = DayRolloverWatcher(get_clock(), settings.rollover_poll_seconds)
        watcher.start()
    app.state.rollover_watcher = watcher
    yield
    if watcher is not None:
        watcher.shutdown()


async def habit_tracker_error_handler(request: Request, exc: HabitTrackerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def datastore_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("datastore error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Datastore operation failed"})


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Habit Tracker API", lifespan=lifespan)
    app.add_exception_handler(HabitTrackerError, habit_tracker_error_handler)
    app.add_exception_handler(SQLAlchemyError, datastore_error_handler)
    app.include_router(habit_router, tags=["Habits"])
    app.include_router(stats_router, tags=["Stats"])
    app.include_router(profile_router, tags=["Profile"])
    app.include_router(maintenance_router, tags=["Maintenance"])
    return app


app = create_app()
