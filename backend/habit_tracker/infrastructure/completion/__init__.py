from habit_tracker.infrastructure.completion.completion_manager import CompletionManager, CompletionState

__all__ = ["CompletionManager", "CompletionState"]
