"""
애플리케이션 설정 — 환경 변수 기반.
프로세스 단위로 1회 로드(캐시). 테스트에서는 get_settings.cache_clear()로 재로딩한다.
"""
import os
from dataclasses import dataclass
from functools import lru_cache

from habit_tracker.infrastructure.stats.constants import DEFAULT_HABIT_TYPE_ORDER, HabitType


@dataclass(frozen=True)
class Settings:
    database_url: str
    auth_secret_key: str
    auth_algorithm: str
    timezone: str
    habit_type_order: tuple[str, ...]
    rollover_poll_seconds: int
    rollover_watcher_enabled: bool
    log_level: str


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_type_order(raw: str | None) -> tuple[str, ...]:
    """
    HABIT_TYPE_ORDER="checkbox,rating,duration" 형식.
    알 수 없는 타입은 무시하고, 누락된 타입은 기본 순서대로 뒤에 붙인다.
    """
    if not raw:
        return DEFAULT_HABIT_TYPE_ORDER
    known = {t.value for t in HabitType}
    order: list[str] = []
    for part in raw.split(","):
        name = part.strip().lower()
        if name in known and name not in order:
            order.append(name)
    for name in DEFAULT_HABIT_TYPE_ORDER:
        if name not in order:
            order.append(name)
    return tuple(order)


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./habit_tracker.db"),
        auth_secret_key=os.getenv("AUTH_SECRET_KEY", "change-me"),
        auth_algorithm=os.getenv("AUTH_ALGORITHM", "HS256"),
        timezone=os.getenv("APP_TIMEZONE", "UTC"),
        habit_type_order=_parse_type_order(os.getenv("HABIT_TYPE_ORDER")),
        rollover_poll_seconds=int(os.getenv("ROLLOVER_POLL_SECONDS", "60")),
        rollover_watcher_enabled=_parse_bool(os.getenv("ROLLOVER_WATCHER_ENABLED"), True),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
