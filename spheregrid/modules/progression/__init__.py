"""Progression module: XP gain evaluation, awards and achievements."""

from spheregrid.modules.progression.achievements import (
    Achievement,
    AchievementEvaluation,
    AchievementRegistry,
    AchievementStats,
    evaluate_achievements,
)
from spheregrid.modules.progression.service import ProgressionService, XPGainResult

__all__ = [
    "Achievement",
    "AchievementEvaluation",
    "AchievementRegistry",
    "AchievementStats",
    "ProgressionService",
    "XPGainResult",
    "evaluate_achievements",
]
