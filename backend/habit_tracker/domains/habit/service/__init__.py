from habit_tracker.domains.habit.service.impl import HabitServiceImpl
from habit_tracker.domains.habit.service.interface import HabitService

__all__ = ["HabitService", "HabitServiceImpl"]
