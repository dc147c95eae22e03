"""Lesson catalog, daily tasks and the quiz runner."""

from .catalog import (
    QuizQuestion,
    ModuleVisuals,
    CurriculumModule,
    DailyTask,
    EvolvedContent,
    build_evolved_module,
    replace_with_evolved,
    default_curriculum,
    load_curriculum,
    save_curriculum,
    find_module,
    daily_task_for,
)
from .content import CURRICULUM, DAILY_TASKS
from .quiz import QuizSession

__all__ = [
    "QuizQuestion", "ModuleVisuals", "CurriculumModule", "DailyTask", "EvolvedContent",
    "build_evolved_module", "replace_with_evolved", "default_curriculum",
    "load_curriculum", "save_curriculum", "find_module", "daily_task_for",
    "CURRICULUM", "DAILY_TASKS", "QuizSession",
]
