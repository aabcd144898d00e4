"""
Progression Domain Model for SphereGrid.

Purpose
-------
Value objects that parameterize the progression engine (curve, rank ladder,
XP economy) and the ProgressProfile aggregate that applies XP gains to a
user's running total.

Responsibilities
----------------
- Validate balance parameters once, at construction
- Build balance objects from ConfigManager with built-in fallbacks
- Apply XP gains and derive level, rank and in-level progress
- Emit domain events for XP gains, each level crossed and rank changes

Non-Responsibilities
--------------------
- Persistence of the XP total (owned by the host application)
- Deciding how much XP an activity is worth (see formulas.xp_for_session)
- Publishing events (callers drain ``clear_domain_events()``)

Usage Example
-------------
>>> profile = ProgressProfile("user-1", total_xp=90)
>>> profile.add_experience(150, source="session")
>>> profile.level
3
>>> [e.event_name for e in profile.clear_domain_events()]
['progress.experience_gained', 'progress.leveled_up', 'progress.leveled_up']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from spheregrid.core.config.manager import ConfigManager
from spheregrid.domain.models.base import AggregateRoot, ValueObject, validate_not_empty
from spheregrid.modules.shared import constants as C
from spheregrid.modules.shared import formulas
from spheregrid.modules.shared.exceptions import InvalidArgumentError
from spheregrid.modules.shared.validators import (
    validate_non_negative_number,
    validate_positive_int,
    validate_positive_number,
)


# ============================================================================
# VALUE OBJECTS
# ============================================================================


@dataclass(frozen=True)
class ProgressionCurve(ValueObject):
    """
    Parameters of the geometric XP curve.

    Attributes
    ----------
    base_xp : float
        XP required to reach level 2
    growth : float
        Multiplicative factor between consecutive level costs (>= 1)
    max_level : Optional[int]
        Inclusive level cap, or None for an uncapped curve
    """

    base_xp: float = C.DEFAULT_BASE_XP
    growth: float = C.DEFAULT_GROWTH
    max_level: Optional[int] = C.DEFAULT_MAX_LEVEL

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        validate_positive_number(self.base_xp, "base_xp")
        if formulas.round_half_up(self.base_xp) < 1:
            raise InvalidArgumentError("base_xp", "must round to at least 1 XP", self.base_xp)
        validate_positive_number(self.growth, "growth")
        if self.growth < 1:
            raise InvalidArgumentError("growth", "must be >= 1", self.growth)
        if self.max_level is not None:
            validate_positive_int(self.max_level, "max_level")

    @classmethod
    def from_config(cls) -> "ProgressionCurve":
        """Build the curve from ``progression.*`` keys."""
        return cls(
            base_xp=ConfigManager.get("progression.base_xp", C.DEFAULT_BASE_XP),
            growth=ConfigManager.get("progression.growth", C.DEFAULT_GROWTH),
            max_level=ConfigManager.get("progression.max_level", C.DEFAULT_MAX_LEVEL),
        )


@dataclass(frozen=True)
class RankLadder(ValueObject):
    """
    Ordered ``(rank, minimum level)`` pairs; the first rank starts at level 1.
    """

    thresholds: Tuple[Tuple[str, int], ...] = C.DEFAULT_RANK_THRESHOLDS

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        if not self.thresholds:
            raise InvalidArgumentError("thresholds", "rank ladder cannot be empty", self.thresholds)

        previous = 0
        for name, min_level in self.thresholds:
            validate_not_empty(name, "rank")
            validate_positive_int(min_level, f"rank.{name}")
            if min_level <= previous:
                raise InvalidArgumentError(
                    f"rank.{name}", "minimum levels must be strictly ascending", min_level
                )
            previous = min_level

        if self.thresholds[0][1] != C.MIN_LEVEL:
            raise InvalidArgumentError(
                "thresholds", "the lowest rank must start at level 1", self.thresholds[0]
            )

    @property
    def ranks(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.thresholds)

    @classmethod
    def from_config(cls) -> "RankLadder":
        """Build the ladder from the ``ranks.thresholds`` mapping (rank -> min level)."""
        configured = ConfigManager.get("ranks.thresholds", None)
        if not configured:
            return cls()
        ordered = sorted(configured.items(), key=lambda item: item[1])
        return cls(thresholds=tuple((str(name), level) for name, level in ordered))


@dataclass(frozen=True)
class XPEconomy(ValueObject):
    """Knobs for session and task XP awards."""

    xp_per_minute: float = C.SESSION_XP_PER_MINUTE
    session_hard_cap: float = C.SESSION_XP_HARD_CAP
    difficulty_bonus: Mapping[str, float] = field(
        default_factory=lambda: dict(C.SESSION_DIFFICULTY_BONUS)
    )
    streak_daily_percent: float = C.STREAK_DAILY_PERCENT
    streak_max_percent: float = C.STREAK_MAX_PERCENT
    task_xp_by_size: Mapping[str, float] = field(
        default_factory=lambda: dict(C.TASK_XP_BY_SIZE)
    )
    task_daily_share_cap: float = C.TASK_DAILY_SHARE_CAP

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        validate_positive_number(self.xp_per_minute, "xp_per_minute")
        validate_positive_number(self.session_hard_cap, "session_hard_cap")
        validate_non_negative_number(self.streak_daily_percent, "streak_daily_percent")
        validate_non_negative_number(self.streak_max_percent, "streak_max_percent")
        validate_positive_number(self.task_daily_share_cap, "task_daily_share_cap")
        if self.task_daily_share_cap > 1:
            raise InvalidArgumentError(
                "task_daily_share_cap", "must be <= 1", self.task_daily_share_cap
            )
        for key, bonus in self.difficulty_bonus.items():
            validate_non_negative_number(bonus, f"difficulty_bonus.{key}")
        for key, award in self.task_xp_by_size.items():
            validate_non_negative_number(award, f"task_xp_by_size.{key}")

    @classmethod
    def from_config(cls) -> "XPEconomy":
        """Build the economy from ``xp_economy.*`` keys."""
        return cls(
            xp_per_minute=ConfigManager.get(
                "xp_economy.session.xp_per_minute", C.SESSION_XP_PER_MINUTE
            ),
            session_hard_cap=ConfigManager.get(
                "xp_economy.session.hard_cap", C.SESSION_XP_HARD_CAP
            ),
            difficulty_bonus=ConfigManager.get(
                "xp_economy.session.difficulty_bonus", dict(C.SESSION_DIFFICULTY_BONUS)
            ),
            streak_daily_percent=ConfigManager.get(
                "xp_economy.streak.daily_percent", C.STREAK_DAILY_PERCENT
            ),
            streak_max_percent=ConfigManager.get(
                "xp_economy.streak.max_percent", C.STREAK_MAX_PERCENT
            ),
            task_xp_by_size=ConfigManager.get(
                "xp_economy.task.xp_by_size", dict(C.TASK_XP_BY_SIZE)
            ),
            task_daily_share_cap=ConfigManager.get(
                "xp_economy.task.daily_share_cap", C.TASK_DAILY_SHARE_CAP
            ),
        )


DEFAULT_CURVE = ProgressionCurve()
DEFAULT_RANK_LADDER = RankLadder()
DEFAULT_ECONOMY = XPEconomy()


# ============================================================================
# PROGRESS PROFILE AGGREGATE ROOT
# ============================================================================


class ProgressProfile(AggregateRoot):
    """
    A user's XP total with derived level, rank and progress.

    Business Rules
    --------------
    - XP only grows; every gain must be a positive, finite amount
    - Level and rank are always derived from the total, never stored
    - A single gain may cross several levels

    Domain Events
    -------------
    - progress.experience_gained: Every successful gain
    - progress.leveled_up: Once per level crossed
    - progress.rank_up: When the derived rank changes
    """

    def __init__(
        self,
        user_id: str,
        total_xp: float = 0,
        curve: Optional[ProgressionCurve] = None,
        ladder: Optional[RankLadder] = None,
    ) -> None:
        """
        Initialize the profile.

        Parameters
        ----------
        user_id : str
            Owner of the XP total
        total_xp : float
            Starting total (non-negative, finite)
        curve : Optional[ProgressionCurve]
            Curve used to derive levels; defaults to the built-in curve
        ladder : Optional[RankLadder]
            Rank ladder; defaults to the built-in ladder
        """
        validate_not_empty(user_id, "user_id")
        validate_non_negative_number(total_xp, "total_xp")
        super().__init__(user_id)

        self._total_xp = total_xp
        self._curve = curve or DEFAULT_CURVE
        self._ladder = ladder or DEFAULT_RANK_LADDER

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def total_xp(self) -> float:
        return self._total_xp

    @property
    def curve(self) -> ProgressionCurve:
        return self._curve

    @property
    def ladder(self) -> RankLadder:
        return self._ladder

    @property
    def level(self) -> int:
        return formulas.get_level_from_total_xp(self._total_xp, self._curve)

    @property
    def rank(self) -> str:
        return formulas.rank_for_level(self.level, self._ladder)

    @property
    def progress(self) -> formulas.LevelProgress:
        return formulas.get_remaining_xp(self._total_xp, self._curve)

    # ========================================================================
    # BUSINESS LOGIC
    # ========================================================================

    def add_experience(self, amount: float, source: str = "unspecified") -> int:
        """
        Add XP and record the resulting level and rank changes.

        Parameters
        ----------
        amount : float
            XP to add (positive, finite)
        source : str
            What earned the XP (e.g. "session", "task")

        Returns
        -------
        int
            Number of levels gained (0 when the gain stays inside the level)

        Raises
        ------
        InvalidArgumentError
            If amount is not a positive, finite number
        """
        validate_positive_number(amount, "amount")

        old_level = self.level
        old_rank = self.rank

        self._total_xp += amount
        new_level = self.level
        new_rank = self.rank

        self.add_domain_event(
            "progress.experience_gained",
            {
                "user_id": self.id,
                "amount": amount,
                "source": source,
                "new_total": self._total_xp,
            },
        )

        for level in range(old_level + 1, new_level + 1):
            self.add_domain_event(
                "progress.leveled_up",
                {
                    "user_id": self.id,
                    "old_level": level - 1,
                    "new_level": level,
                },
            )

        if new_rank != old_rank:
            self.add_domain_event(
                "progress.rank_up",
                {
                    "user_id": self.id,
                    "old_rank": old_rank,
                    "new_rank": new_rank,
                    "level": new_level,
                },
            )

        return new_level - old_level

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view for rendering and logging."""
        return {
            "user_id": self.id,
            "total_xp": self._total_xp,
            "rank": self.rank,
            **self.progress.to_dict(),
        }
