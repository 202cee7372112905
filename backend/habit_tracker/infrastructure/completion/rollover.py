"""
날짜 변경(자정 경과) 감시 — 주기적으로 Clock의 날짜를 확인하고,
바뀌었으면 직전 날짜의 미완료 duration 습관을 0분으로 확정한다(전체 사용자).
"""
import logging
from datetime import date, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.exc import SQLAlchemyError

from habit_tracker.core.clock import Clock
from habit_tracker.infrastructure.completion.completion_manager import CompletionManager

logger = logging.getLogger(__name__)

ROLLOVER_JOB_ID = "day-rollover-check"


class DayRolloverWatcher:
    def __init__(self, clock: Clock, interval_seconds: int = 60, scheduler: AsyncIOScheduler | None = None):
        self._clock = clock
        self._interval_seconds = interval_seconds
        self._scheduler = scheduler
        self._last_date: date = clock.today()

    @property
    def last_date(self) -> date:
        return self._last_date

    def check(self) -> list[str] | None:
        """
        날짜가 그대로면 None. 바뀌었으면 마지막으로 본 날짜부터 어제까지 하루씩 확정하고
        확정된 habit_id 목록을 반환한다(프로세스가 며칠 멈춰 있었던 경우 포함).
        확정에 실패하면 그 날짜에 머물러 다음 주기에 다시 시도한다.
        """
        current = self._clock.today()
        if current <= self._last_date:
            return None
        logger.info("day rollover detected previous=%s current=%s", self._last_date, current)
        finalized: list[str] = []
        while self._last_date < current:
            day = self._last_date
            try:
                finalized.extend(CompletionManager.auto_finalize_uncompleted(day))
            except SQLAlchemyError:
                logger.exception("day rollover finalize failed date=%s", day)
                return None
            self._last_date = day + timedelta(days=1)
        return finalized

    def start(self) -> None:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.check,
            "interval",
            seconds=self._interval_seconds,
            id=ROLLOVER_JOB_ID,
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info("day rollover watcher started interval=%ss", self._interval_seconds)

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("day rollover watcher stopped")
