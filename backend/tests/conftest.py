import os

os.environ["ROLLOVER_WATCHER_ENABLED"] = "false"
os.environ["AUTH_SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from habit_tracker.core import database
from habit_tracker.core.clock import FixedClock, get_clock, set_clock
from habit_tracker.core.config import get_settings
from habit_tracker.domains.auth.security import create_access_token
from habit_tracker.domains.habit.models import HabitCompletion
from habit_tracker.domains.habit.repository import HabitRepository

NOW = datetime(2024, 5, 15, 9, 0)


def use_database(monkeypatch, path) -> None:
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{path}")
    get_settings.cache_clear()
    database.dispose_engine()


@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    use_database(monkeypatch, tmp_path / "test.db")
    database.init_db()
    yield
    database.dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
def clock():
    c = FixedClock(NOW)
    set_clock(c)
    yield c
    set_clock(None)


@pytest.fixture
def client(clock):
    from habit_tracker.main import app

    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def bearer(user_id: str, **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, **claims)}"}



def stored_completion(habit_id: str, d: date):
    with database.get_session_factory()() as session:
        return (
            session.query(HabitCompletion)
            .filter(HabitCompletion.habit_id == habit_id, HabitCompletion.completed_date == d)
            .first()
        )


def completion_count(habit_id: str, d: date | None = None) -> int:
    with database.get_session_factory()() as session:
        q = session.query(HabitCompletion).filter(HabitCompletion.habit_id == habit_id)
        if d is not None:
            q = q.filter(HabitCompletion.completed_date == d)
        return q.count()


@pytest.fixture
def auth_headers():
    return bearer("user-1", email="ada@example.com")


@pytest.fixture
def other_headers():
    return bearer("user-2", email="grace@example.com")


@pytest.fixture
def make_habit():
    def _make(
        name: str,
        habit_type: str = "checkbox",
        user_id: str = "user-1",
        category: str = "Health",
        created_at: datetime = datetime(2024, 5, 1, 8, 0),
        **defaults,
    ):
        values = {
            "name": name,
            "category": category,
            "habit_type": habit_type,
            "default_duration": defaults.get("default_duration"),
            "default_rating": defaults.get("default_rating"),
        }
        return HabitRepository.create(user_id, values, created_at)

    return _make
