import logging
from datetime import date, datetime

import pytest
from sqlalchemy.exc import IntegrityError

from habit_tracker.core.exceptions import (
    CompletionLockedError,
    HabitArchivedError,
    InvalidCompletionValueError,
)
from habit_tracker.domains.habit.repository import HabitRepository
from habit_tracker.infrastructure.completion import CompletionManager
from tests.conftest import completion_count, stored_completion

TODAY = date(2024, 5, 15)


def test_checkbox_check_creates_single_row_and_uncheck_removes_it(clock, make_habit):
    habit = make_habit("Meditate")

    state = CompletionManager.set_completion(habit, TODAY, True, clock=clock)
    assert state.completed is True
    assert completion_count(habit.id, TODAY) == 1
    row = stored_completion(habit.id, TODAY)
    assert row.duration is None and row.rating is None

    CompletionManager.set_completion(habit, TODAY, False, clock=clock)
    assert completion_count(habit.id, TODAY) == 0


def test_checkbox_ignores_value(clock, make_habit):
    habit = make_habit("Meditate")
    state = CompletionManager.set_completion(habit, TODAY, True, value=12, clock=clock)
    assert state.duration is None and state.rating is None


def test_duration_update_keeps_one_row_with_latest_value(clock, make_habit):
    habit = make_habit("Read", "duration", default_duration=20)

    CompletionManager.set_completion(habit, TODAY, True, value=45, clock=clock)
    assert stored_completion(habit.id, TODAY).duration == 45

    CompletionManager.set_completion(habit, TODAY, True, value=30, clock=clock)
    assert completion_count(habit.id, TODAY) == 1
    assert stored_completion(habit.id, TODAY).duration == 30


def test_duration_defaults_to_zero_without_value(clock, make_habit):
    habit = make_habit("Read", "duration", default_duration=20)
    state = CompletionManager.set_completion(habit, TODAY, True, clock=clock)
    assert state.duration == 0


def test_duration_rejects_fractional_minutes(clock, make_habit):
    habit = make_habit("Read", "duration")
    with pytest.raises(InvalidCompletionValueError):
        CompletionManager.set_completion(habit, TODAY, True, value=12.5, clock=clock)


def test_rating_uses_habit_default_when_value_missing(clock, make_habit):
    habit = make_habit("Mood", "rating", default_rating=3.5)
    state = CompletionManager.set_completion(habit, TODAY, True, clock=clock)
    assert state.rating == 3.5


@pytest.mark.parametrize("value", [float("inf"), float("nan"), 1441, 1e30])
def test_duration_rejects_non_finite_and_oversized_minutes(clock, make_habit, value):
    habit = make_habit("Read", "duration")
    with pytest.raises(InvalidCompletionValueError):
        CompletionManager.set_completion(habit, TODAY, True, value=value, clock=clock)
    assert completion_count(habit.id) == 0


def test_rating_rejects_infinity(clock, make_habit):
    habit = make_habit("Mood", "rating")
    with pytest.raises(InvalidCompletionValueError):
        CompletionManager.set_completion(habit, TODAY, True, value=float("inf"), clock=clock)

@pytest.mark.parametrize("value", [3.3, 5.5])
def test_rating_rejects_values_off_the_half_step_scale(clock, make_habit, value):
    habit = make_habit("Mood", "rating")
    with pytest.raises(InvalidCompletionValueError):
        CompletionManager.set_completion(habit, TODAY, True, value=value, clock=clock)


def test_rating_uncheck_deletes_row(clock, make_habit):
    habit = make_habit("Mood", "rating")
    CompletionManager.set_completion(habit, TODAY, True, value=4.5, clock=clock)
    CompletionManager.set_completion(habit, TODAY, False, clock=clock)
    assert stored_completion(habit.id, TODAY) is None


def test_repeating_the_same_call_is_idempotent(clock, make_habit):
    habit = make_habit("Mood", "rating")
    first = CompletionManager.set_completion(habit, TODAY, True, value=4.0, clock=clock)
    second = CompletionManager.set_completion(habit, TODAY, True, value=4.0, clock=clock)
    assert first == second
    assert completion_count(habit.id) == 1


def test_past_and_future_dates_are_locked(clock, make_habit):
    habit = make_habit("Meditate")
    with pytest.raises(CompletionLockedError):
        CompletionManager.set_completion(habit, date(2024, 5, 14), True, clock=clock)
    with pytest.raises(CompletionLockedError):
        CompletionManager.set_completion(habit, date(2024, 5, 16), True, clock=clock)


def test_date_rollover_locks_yesterday(clock, make_habit):
    habit = make_habit("Meditate")
    CompletionManager.set_completion(habit, TODAY, True, clock=clock)
    clock.advance(days=1)
    with pytest.raises(CompletionLockedError):
        CompletionManager.set_completion(habit, TODAY, False, clock=clock)
    assert completion_count(habit.id, TODAY) == 1


def test_archived_habit_cannot_record(clock, make_habit):
    habit = make_habit("Meditate")
    archived = HabitRepository.set_active("user-1", habit.id, False)
    with pytest.raises(HabitArchivedError):
        CompletionManager.set_completion(archived, TODAY, True, clock=clock)


def test_auto_finalize_records_zero_for_untouched_duration_habits(clock, make_habit):
    read = make_habit("Read", "duration", default_duration=20)
    run = make_habit("Run", "duration")
    make_habit("Meditate")
    CompletionManager.set_completion(run, TODAY, True, value=25, clock=clock)

    finalized = CompletionManager.auto_finalize_uncompleted(TODAY)

    assert finalized == [read.id]
    assert stored_completion(read.id, TODAY).duration == 0
    assert stored_completion(run.id, TODAY).duration == 25


def test_auto_finalize_skips_archived_and_not_yet_created_habits(clock, make_habit):
    archived = make_habit("Swim", "duration")
    HabitRepository.set_active("user-1", archived.id, False)
    make_habit("Cycle", "duration", created_at=datetime(2024, 5, 16, 7, 0))

    assert CompletionManager.auto_finalize_uncompleted(TODAY) == []


def test_auto_finalize_can_be_scoped_to_one_user(clock, make_habit):
    mine = make_habit("Read", "duration")
    theirs = make_habit("Read", "duration", user_id="user-2")

    assert CompletionManager.auto_finalize_uncompleted(TODAY, user_id="user-1") == [mine.id]
    assert stored_completion(theirs.id, TODAY) is None


def test_auto_finalize_twice_adds_nothing(clock, make_habit):
    make_habit("Read", "duration")
    CompletionManager.auto_finalize_uncompleted(TODAY)
    assert CompletionManager.auto_finalize_uncompleted(TODAY) == []


def test_failed_retry_after_conflict_is_rolled_back_and_logged(clock, make_habit, monkeypatch, caplog):
    habit = make_habit("Read", "duration")
    calls = []

    def conflicting_upsert(session, *args):
        calls.append(args)
        raise IntegrityError("INSERT INTO habit_completions", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(CompletionManager, "_upsert", staticmethod(conflicting_upsert))

    with caplog.at_level(logging.ERROR, logger="habit_tracker.infrastructure.completion.completion_manager"):
        with pytest.raises(IntegrityError):
            CompletionManager.set_completion(habit, TODAY, True, value=30, clock=clock)

    assert len(calls) == 2
    assert "completion upsert failed" in caplog.text
    assert completion_count(habit.id) == 0
