"""
Progression Service
===================

Purpose
-------
Reward-evaluation collaborator for the UI and state layers: decides what an
XP gain means (level-ups, rank-ups, new in-level progress) and applies gains
to ``ProgressProfile`` aggregates.

Domain
------
- Level-up / rank-up detection by comparing the level before and after a gain
- Session and task XP awards with the configured economy
- Read-only progress snapshots for rendering
- Achievement checks against a profile and its activity counters

Design Notes
------------
- Balance (curve, rank ladder, economy, achievements) is resolved from
  ConfigManager once, at construction; pass explicit objects to pin them.
- No persistence: callers store ``profile.total_xp`` and publish the drained
  domain events themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AbstractSet, Any, Dict, List, Optional, Type

from spheregrid.core.config.manager import ConfigManager
from spheregrid.core.logging.logger import LogContext, get_logger
from spheregrid.domain.models.base import DomainEvent
from spheregrid.domain.models.progress import (
    ProgressionCurve,
    ProgressProfile,
    RankLadder,
    XPEconomy,
)
from spheregrid.modules.progression.achievements import (
    AchievementEvaluation,
    AchievementRegistry,
    AchievementStats,
    evaluate_achievements,
)
from spheregrid.modules.shared import formulas
from spheregrid.modules.shared.base_service import BaseService
from spheregrid.modules.shared.exceptions import InvalidArgumentError
from spheregrid.modules.shared.validators import validate_non_negative_number

if TYPE_CHECKING:
    from logging import Logger


# ============================================================================
# Result Types
# ============================================================================


@dataclass(frozen=True)
class XPGainResult:
    """What a single XP gain changed."""

    total_before: float
    total_after: float
    level_before: int
    level_after: int
    rank_before: str
    rank_after: str
    progress: formulas.LevelProgress
    events: List[DomainEvent] = field(default_factory=list)

    @property
    def levels_gained(self) -> int:
        return self.level_after - self.level_before

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before

    @property
    def ranked_up(self) -> bool:
        return self.rank_after != self.rank_before

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_before": self.total_before,
            "total_after": self.total_after,
            "level_before": self.level_before,
            "level_after": self.level_after,
            "levels_gained": self.levels_gained,
            "rank_before": self.rank_before,
            "rank_after": self.rank_after,
            "leveled_up": self.leveled_up,
            "ranked_up": self.ranked_up,
            "progress": self.progress.to_dict(),
        }


# ============================================================================
# ProgressionService
# ============================================================================


class ProgressionService(BaseService):
    """
    Evaluates and applies XP gains.

    Public Methods
    --------------
    - evaluate_xp_gain() -> Compare level/rank before and after a delta
    - award_xp() -> Apply a gain to a profile and evaluate it
    - session_reward() -> XP for a timed session
    - task_reward() -> XP for a completed task
    - describe() -> Snapshot of a total for rendering
    - check_achievements() -> Newly unlocked achievements and progress
    """

    def __init__(
        self,
        config_manager: Type[ConfigManager] = ConfigManager,
        logger: Optional[Logger] = None,
        curve: Optional[ProgressionCurve] = None,
        ladder: Optional[RankLadder] = None,
        economy: Optional[XPEconomy] = None,
        achievements: Optional[AchievementRegistry] = None,
    ) -> None:
        super().__init__(config_manager, logger or get_logger(__name__))
        self.curve = curve or ProgressionCurve.from_config()
        self.ladder = ladder or RankLadder.from_config()
        self.economy = economy or XPEconomy.from_config()
        self.achievements = achievements if achievements is not None else AchievementRegistry.from_config()

    # ========================================================================
    # PUBLIC API - Evaluation
    # ========================================================================

    def evaluate_xp_gain(self, total_before: float, delta: float) -> XPGainResult:
        """
        Describe what adding ``delta`` to ``total_before`` changes.

        Args:
            total_before: XP total before the gain
            delta: XP gained (non-negative)

        Raises:
            InvalidArgumentError: On negative or non-finite inputs

        Example:
            >>> service.evaluate_xp_gain(90, 150).levels_gained
            2
        """
        validate_non_negative_number(total_before, "total_before")
        validate_non_negative_number(delta, "delta")
        return self._evaluate(total_before, total_before + delta, self.curve, self.ladder)

    def describe(self, total_xp: float) -> Dict[str, Any]:
        """Level, rank and progress for a total, as a plain dict."""
        progress = formulas.get_remaining_xp(total_xp, self.curve)
        return {
            "total_xp": total_xp,
            "rank": formulas.rank_for_level(progress.level, self.ladder),
            **progress.to_dict(),
        }

    # ========================================================================
    # PUBLIC API - Awards
    # ========================================================================

    def award_xp(self, profile: ProgressProfile, amount: float, source: str) -> XPGainResult:
        """
        Apply a gain to ``profile`` and return its evaluation.

        The profile's pending domain events are drained into the result.

        Raises:
            InvalidArgumentError: If ``amount`` is not positive and finite;
                the profile is left unchanged
        """
        with LogContext(user_id=str(profile.id), component="progression", operation="award_xp"):
            total_before = profile.total_xp
            try:
                profile.add_experience(amount, source=source)
            except InvalidArgumentError as exc:
                self.log_error("award_xp", exc, source=source, total_xp=total_before)
                raise
            result = self._evaluate(
                total_before,
                profile.total_xp,
                profile.curve,
                profile.ladder,
                events=profile.clear_domain_events(),
            )

            self.log_operation("award_xp", source=source, **result.to_dict())
            if result.leveled_up:
                self.log.info(
                    "Level up",
                    extra={
                        "level_before": result.level_before,
                        "level_after": result.level_after,
                        "rank_after": result.rank_after,
                    },
                )
            return result

    def session_reward(
        self,
        duration_minutes: float,
        difficulty: Optional[str] = None,
        streak_days: int = 0,
    ) -> int:
        return formulas.xp_for_session(
            duration_minutes, difficulty=difficulty, streak_days=streak_days, economy=self.economy
        )

    def task_reward(
        self,
        task_size: str,
        todays_task_xp: float = 0,
        todays_total_xp: float = 0,
    ) -> int:
        return formulas.xp_for_task(
            task_size,
            todays_task_xp=todays_task_xp,
            todays_total_xp=todays_total_xp,
            economy=self.economy,
        )

    # ========================================================================
    # PUBLIC API - Achievements
    # ========================================================================

    def check_achievements(
        self,
        profile: ProgressProfile,
        unlocked_ids: AbstractSet[str] = frozenset(),
        **activity: Any,
    ) -> AchievementEvaluation:
        """
        Evaluate the achievement registry against a profile.

        Args:
            profile: Source of total XP and level
            unlocked_ids: Ids the user already holds
            **activity: Remaining ``AchievementStats`` fields (streak_days,
                focus_minutes, focus_minutes_today, tasks_completed,
                tasks_by_category)

        Returns:
            The evaluation; granting ``evaluation.xp_reward`` is up to the caller.

        Example:
            >>> service.check_achievements(profile, tasks_completed=1).unlocked_ids
            ('first_blood',)
        """
        with LogContext(user_id=str(profile.id), component="progression", operation="check_achievements"):
            stats = AchievementStats.for_profile(profile, **activity)
            evaluation = evaluate_achievements(stats, self.achievements, unlocked_ids)

            if evaluation.unlocked:
                self.log.info(
                    "Achievements unlocked",
                    extra={
                        "achievement_ids": list(evaluation.unlocked_ids),
                        "xp_reward": evaluation.xp_reward,
                    },
                )
            return evaluation

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @staticmethod
    def _evaluate(
        total_before: float,
        total_after: float,
        curve: ProgressionCurve,
        ladder: RankLadder,
        events: Optional[List[DomainEvent]] = None,
    ) -> XPGainResult:
        level_before = formulas.get_level_from_total_xp(total_before, curve)
        progress = formulas.get_remaining_xp(total_after, curve)
        return XPGainResult(
            total_before=total_before,
            total_after=total_after,
            level_before=level_before,
            level_after=progress.level,
            rank_before=formulas.rank_for_level(level_before, ladder),
            rank_after=formulas.rank_for_level(progress.level, ladder),
            progress=progress,
            events=list(events or []),
        )
