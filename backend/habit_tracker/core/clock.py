"""
현재 시각 제공자(Clock).
'오늘' 판정(is_today)을 한 곳으로 모아, 테스트에서 날짜 변경(자정 경과)을 결정적으로 재현할 수 있게 한다.
"""
from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from habit_tracker.core.config import get_settings


class Clock(Protocol):
    def now(self) -> datetime:
        """설정된 시간대 기준 현재 시각(naive wall-clock)."""
        ...

    def today(self) -> date:
        ...

    def is_today(self, d: date) -> bool:
        ...


class SystemClock:
    """시스템 시계 + 설정 시간대(APP_TIMEZONE)."""

    def __init__(self, tz_name: str = "UTC"):
        self._tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()

    def is_today(self, d: date) -> bool:
        return d == self.today()


class FixedClock:
    """고정 시각 시계. advance()로 시간을 진행시킨다."""

    def __init__(self, current: datetime):
        self._current = current.replace(tzinfo=None)

    def now(self) -> datetime:
        return self._current

    def today(self) -> date:
        return self._current.date()

    def is_today(self, d: date) -> bool:
        return d == self.today()

    def set(self, current: datetime) -> None:
        self._current = current.replace(tzinfo=None)

    def advance(self, **kwargs) -> None:
        self._current = self._current + timedelta(**kwargs)


_clock: Clock | None = None


def get_clock() -> Clock:
    """FastAPI 의존성 겸 모듈 기본 시계. 테스트는 dependency_overrides 또는 set_clock()으로 교체."""
    global _clock
    if _clock is None:
        _clock = SystemClock(get_settings().timezone)
    return _clock


def set_clock(clock: Clock | None) -> None:
    global _clock
    _clock = clock
