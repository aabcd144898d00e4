"""
Achievements
============

Purpose
-------
One-off rewards unlocked by progression milestones: tasks completed, streak
length, focus minutes, XP earned and level reached. Each achievement carries
an XP reward the host may grant once it unlocks.

Domain
------
- ``Achievement`` / ``AchievementCondition``: config-driven definitions
- ``AchievementRegistry``: ordered, validated set of definitions
- ``AchievementStats``: the progress snapshot conditions are checked against
- ``evaluate_achievements()``: progress per achievement plus the newly
  unlocked ones

Design Notes
------------
- Definitions live under the ``achievements`` config section, keyed by id,
  in the order they should be shown.
- Evaluation is pure; persisting unlocked ids and granting the XP reward
  are the caller's job.
- An already-unlocked achievement never unlocks again. A repeatable one
  still reports progress.

Usage
-----
    registry = AchievementRegistry.from_config()
    stats = AchievementStats.for_profile(profile, tasks_completed=12, streak_days=7)
    evaluation = evaluate_achievements(stats, registry, unlocked_ids={"first_blood"})
    evaluation.unlocked_ids     # ("task_slayer_10", "streak_week")
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from spheregrid.core.config.manager import ConfigManager
from spheregrid.domain.models.base import ValueObject, validate_not_empty
from spheregrid.domain.models.progress import ProgressProfile
from spheregrid.modules.shared.exceptions import InvalidArgumentError
from spheregrid.modules.shared.validators import (
    validate_choice,
    validate_level,
    validate_non_negative_int,
    validate_non_negative_number,
    validate_positive_number,
)


# ============================================================================
# Definitions
# ============================================================================


class AchievementMetric(str, Enum):
    TASKS_COMPLETED = "tasks_completed"
    STREAK_DAYS = "streak_days"
    FOCUS_MINUTES = "focus_minutes"
    XP_EARNED = "xp_earned"
    LEVEL_REACHED = "level_reached"


RARITIES = ("common", "rare", "epic", "legendary")
TIMEFRAMES = ("all_time", "daily")


@dataclass(frozen=True)
class AchievementCondition(ValueObject):
    """
    Threshold on one metric.

    ``task_category`` narrows ``tasks_completed`` to one task category;
    ``timeframe="daily"`` is only meaningful for ``focus_minutes``.
    """

    metric: AchievementMetric
    target: float
    task_category: Optional[str] = None
    timeframe: str = "all_time"

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        validate_positive_number(self.target, "target")
        validate_choice(self.timeframe, "timeframe", TIMEFRAMES)
        if self.task_category is not None and self.metric is not AchievementMetric.TASKS_COMPLETED:
            raise InvalidArgumentError(
                "task_category", "only applies to tasks_completed", self.task_category
            )
        if self.timeframe == "daily" and self.metric is not AchievementMetric.FOCUS_MINUTES:
            raise InvalidArgumentError("timeframe", "daily only applies to focus_minutes", self.metric.value)


@dataclass(frozen=True)
class Achievement(ValueObject):
    """A named milestone with its unlock condition and XP reward."""

    id: str
    title: str
    condition: AchievementCondition
    xp_reward: int = 0
    description: str = ""
    rarity: str = "common"
    category: str = "general"
    repeatable: bool = False

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        validate_not_empty(self.id, "id")
        validate_not_empty(self.title, "title")
        validate_non_negative_int(self.xp_reward, "xp_reward")
        validate_choice(self.rarity, "rarity", RARITIES)

    @classmethod
    def from_dict(cls, achievement_id: str, data: Mapping[str, Any]) -> "Achievement":
        """
        Build one definition from its config entry.

        Raises:
            InvalidArgumentError: On an unknown metric or any invalid field
        """
        raw = dict(data.get("condition") or {})
        metric = raw.get("metric")
        validate_choice(metric, f"{achievement_id}.metric", [m.value for m in AchievementMetric])
        condition = AchievementCondition(
            metric=AchievementMetric(metric),
            target=raw.get("target"),
            task_category=raw.get("task_category"),
            timeframe=raw.get("timeframe", "all_time"),
        )
        return cls(
            id=str(achievement_id),
            title=data.get("title", ""),
            condition=condition,
            xp_reward=data.get("xp_reward", 0),
            description=data.get("description", ""),
            rarity=data.get("rarity", "common"),
            category=data.get("category", "general"),
            repeatable=bool(data.get("repeatable", False)),
        )


class AchievementRegistry:
    """Ordered achievement definitions with unique ids."""

    def __init__(self, achievements: Iterable[Achievement] = ()) -> None:
        self._achievements: Dict[str, Achievement] = {}
        for achievement in achievements:
            if achievement.id in self._achievements:
                raise InvalidArgumentError("id", "duplicate achievement id", achievement.id)
            self._achievements[achievement.id] = achievement

    @classmethod
    def from_config(cls) -> "AchievementRegistry":
        """Build from the ``achievements`` section (id -> definition)."""
        section = ConfigManager.get_section("achievements")
        return cls(Achievement.from_dict(key, value or {}) for key, value in section.items())

    def get(self, achievement_id: str) -> Optional[Achievement]:
        return self._achievements.get(achievement_id)

    def by_category(self, category: str) -> Tuple[Achievement, ...]:
        return tuple(a for a in self._achievements.values() if a.category == category)

    def __iter__(self) -> Iterator[Achievement]:
        return iter(self._achievements.values())

    def __len__(self) -> int:
        return len(self._achievements)

    def __contains__(self, achievement_id: object) -> bool:
        return achievement_id in self._achievements


# ============================================================================
# Evaluation
# ============================================================================


@dataclass(frozen=True)
class AchievementStats:
    """Progress snapshot that achievement conditions are checked against."""

    total_xp: float
    level: int
    streak_days: int = 0
    focus_minutes: float = 0
    focus_minutes_today: float = 0
    tasks_completed: int = 0
    tasks_by_category: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_non_negative_number(self.total_xp, "total_xp")
        validate_level(self.level)
        validate_non_negative_int(self.streak_days, "streak_days")
        validate_non_negative_number(self.focus_minutes, "focus_minutes")
        validate_non_negative_number(self.focus_minutes_today, "focus_minutes_today")
        validate_non_negative_int(self.tasks_completed, "tasks_completed")
        for category, count in self.tasks_by_category.items():
            validate_non_negative_int(count, f"tasks_by_category.{category}")

    @classmethod
    def for_profile(cls, profile: ProgressProfile, **activity: Any) -> "AchievementStats":
        """Take XP and level from ``profile``; everything else from ``activity``."""
        return cls(total_xp=profile.total_xp, level=profile.level, **activity)

    def value_of(self, condition: AchievementCondition) -> float:
        metric = condition.metric
        if metric is AchievementMetric.TASKS_COMPLETED:
            if condition.task_category is not None:
                return self.tasks_by_category.get(condition.task_category, 0)
            return self.tasks_completed
        if metric is AchievementMetric.STREAK_DAYS:
            return self.streak_days
        if metric is AchievementMetric.FOCUS_MINUTES:
            return self.focus_minutes_today if condition.timeframe == "daily" else self.focus_minutes
        if metric is AchievementMetric.XP_EARNED:
            return self.total_xp
        return self.level


@dataclass(frozen=True)
class AchievementProgress:
    achievement_id: str
    current: float
    target: float
    percent: int
    is_complete: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "achievement_id": self.achievement_id,
            "current": self.current,
            "target": self.target,
            "percent": self.percent,
            "is_complete": self.is_complete,
        }


@dataclass(frozen=True)
class AchievementEvaluation:
    """Newly unlocked achievements plus progress toward every candidate."""

    unlocked: Tuple[Achievement, ...] = ()
    progress: Tuple[AchievementProgress, ...] = ()

    @property
    def unlocked_ids(self) -> Tuple[str, ...]:
        return tuple(a.id for a in self.unlocked)

    @property
    def xp_reward(self) -> int:
        return sum(a.xp_reward for a in self.unlocked)


def achievement_progress(achievement: Achievement, stats: AchievementStats) -> AchievementProgress:
    """
    Progress toward one achievement.

    ``percent`` is floored so it reads 100 only once the target is met.

    Example:
        >>> achievement_progress(level_10, AchievementStats(total_xp=2_000, level=8)).percent
        80
    """
    target = achievement.condition.target
    current = stats.value_of(achievement.condition)
    return AchievementProgress(
        achievement_id=achievement.id,
        current=current,
        target=target,
        percent=min(100, math.floor(100 * current / target)),
        is_complete=current >= target,
    )


def evaluate_achievements(
    stats: AchievementStats,
    registry: AchievementRegistry,
    unlocked_ids: AbstractSet[str] = frozenset(),
) -> AchievementEvaluation:
    """
    Check every definition against ``stats``.

    Achievements already in ``unlocked_ids`` are skipped unless repeatable;
    repeatable ones still report progress but never unlock a second time.
    Results follow registry order.
    """
    unlocked = []
    progress = []
    for achievement in registry:
        already = achievement.id in unlocked_ids
        if already and not achievement.repeatable:
            continue

        item = achievement_progress(achievement, stats)
        progress.append(item)
        if item.is_complete and not already:
            unlocked.append(achievement)

    return AchievementEvaluation(unlocked=tuple(unlocked), progress=tuple(progress))


__all__ = [
    "Achievement",
    "AchievementCondition",
    "AchievementEvaluation",
    "AchievementMetric",
    "AchievementProgress",
    "AchievementRegistry",
    "AchievementStats",
    "achievement_progress",
    "evaluate_achievements",
]
