"""
SphereGrid Progression Formulas

Purpose
-------
Pure calculation functions for the progression engine: the per-level XP cost
curve, cumulative totals, level lookup from total XP, in-level progress,
rank lookup, and the XP awards for timed sessions and completed tasks.

Design Notes
------------
All formulas:
- Accept their balance parameters explicitly (``curve``, ``ladder``,
  ``economy``); ``None`` means the built-in defaults, never ConfigManager
- Are deterministic and side-effect free
- Fail fast with `InvalidArgumentError`; nothing is silently clamped
- Round half up (``x.5`` goes up), matching how the curve was published

Curve indexing
--------------
``xp_for_level(n)`` is the cost of the span that ends at level ``n``:

    xp_for_level(1) = 0
    xp_for_level(n) = round(base_xp * growth ** (n - 2))      n >= 2
    total_xp_to_reach(n) = total_xp_to_reach(n - 1) + xp_for_level(n)

With the default curve (100, 1.35): costs 0 / 100 / 135 / 182, totals
0 / 100 / 235 / 417.

Usage
-----
    from spheregrid.modules.shared.formulas import get_remaining_xp

    progress = get_remaining_xp(167)
    progress.level              # 2
    progress.progress_percent   # 50
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .constants import MAX_PARTIAL_PROGRESS_PERCENT, MIN_LEVEL
from .exceptions import InvalidArgumentError
from .validators import (
    validate_choice,
    validate_level,
    validate_non_negative_int,
    validate_non_negative_number,
)

if TYPE_CHECKING:
    from spheregrid.domain.models.progress import ProgressionCurve, RankLadder, XPEconomy


# ============================================================================
# RESULT TYPES
# ============================================================================


@dataclass(frozen=True)
class LevelProgress:
    """
    Position of an XP total inside its level.

    Attributes
    ----------
    level : int
        Current level (>= 1)
    xp_in_level : float
        XP earned since reaching ``level``
    xp_for_next_level : int
        Cost of the span from ``level`` to ``level + 1`` (0 at a capped max level)
    xp_to_next_level : float
        XP still missing for the next level
    progress_percent : int
        ``round(100 * xp_in_level / xp_for_next_level)``, held at 99 while
        the level is unfinished (once a span costs 200 XP or more, plain
        rounding would read 100 just short of the boundary); 0 at a capped
        max level
    """

    level: int
    xp_in_level: float
    xp_for_next_level: int
    xp_to_next_level: float
    progress_percent: int

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "xp_in_level": self.xp_in_level,
            "xp_for_next_level": self.xp_for_next_level,
            "xp_to_next_level": self.xp_to_next_level,
            "progress_percent": self.progress_percent,
        }


# ============================================================================
# INTERNAL HELPERS
# ============================================================================


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, ties going up.

    Example:
        >>> round_half_up(182.25)
        182
        >>> round_half_up(2.5)
        3
    """
    return int(math.floor(value + 0.5))


def _resolve_curve(curve: Optional[ProgressionCurve]) -> ProgressionCurve:
    if curve is not None:
        return curve
    from spheregrid.domain.models.progress import DEFAULT_CURVE

    return DEFAULT_CURVE


def _resolve_ladder(ladder: Optional[RankLadder]) -> RankLadder:
    if ladder is not None:
        return ladder
    from spheregrid.domain.models.progress import DEFAULT_RANK_LADDER

    return DEFAULT_RANK_LADDER


def _resolve_economy(economy: Optional[XPEconomy]) -> XPEconomy:
    if economy is not None:
        return economy
    from spheregrid.domain.models.progress import DEFAULT_ECONOMY

    return DEFAULT_ECONOMY


def _span_cost(level: int, curve: ProgressionCurve) -> int:
    """Cost of reaching ``level`` from ``level - 1``; no validation."""
    if level <= MIN_LEVEL:
        return 0
    try:
        raw = curve.base_xp * curve.growth ** (level - 2)
    except OverflowError:
        raise InvalidArgumentError(
            "level", "XP cost exceeds floating-point range", level
        ) from None
    if math.isinf(raw):
        raise InvalidArgumentError("level", "XP cost exceeds floating-point range", level)
    return round_half_up(raw)


# ============================================================================
# PROGRESSION CURVE
# ============================================================================


def xp_for_level(level: int, curve: Optional[ProgressionCurve] = None) -> int:
    """
    XP cost attached to ``level``: what it takes to go from ``level - 1`` to it.

    Args:
        level: Level number (>= 1)
        curve: Progression curve; defaults to base 100, growth 1.35

    Returns:
        0 for level 1, otherwise ``round(base_xp * growth ** (level - 2))``

    Raises:
        InvalidArgumentError: If level is < 1, not an int, a bool, or above
            the curve's ``max_level``.

    Example:
        >>> xp_for_level(2)
        100
        >>> xp_for_level(4)
        182
    """
    curve = _resolve_curve(curve)
    validate_level(level, max_level=curve.max_level)
    return _span_cost(level, curve)


def total_xp_to_reach(level: int, curve: Optional[ProgressionCurve] = None) -> int:
    """
    Cumulative XP needed to reach ``level`` starting from zero.

    Example:
        >>> [total_xp_to_reach(n) for n in (1, 2, 3, 4)]
        [0, 100, 235, 417]
    """
    curve = _resolve_curve(curve)
    validate_level(level, max_level=curve.max_level)

    if curve.growth == 1:
        return (level - 1) * _span_cost(2, curve)

    total = 0
    for n in range(2, level + 1):
        total += _span_cost(n, curve)
    return total


def get_level_from_total_xp(total_xp: float, curve: Optional[ProgressionCurve] = None) -> int:
    """
    Largest level whose cumulative requirement is <= ``total_xp``.

    Landing exactly on a boundary counts as having reached that level.

    Raises:
        InvalidArgumentError: If total_xp is negative, NaN, infinite,
            non-numeric or a bool.

    Example:
        >>> get_level_from_total_xp(99)
        1
        >>> get_level_from_total_xp(100)
        2
        >>> get_level_from_total_xp(235)
        3
    """
    validate_non_negative_number(total_xp, "total_xp")
    curve = _resolve_curve(curve)

    if curve.growth == 1:
        level = MIN_LEVEL + int(total_xp // _span_cost(2, curve))
    else:
        level = MIN_LEVEL
        total = 0
        while curve.max_level is None or level < curve.max_level:
            next_total = total + _span_cost(level + 1, curve)
            if next_total > total_xp:
                break
            total = next_total
            level += 1

    if curve.max_level is not None:
        level = min(level, curve.max_level)
    return level


def get_remaining_xp(total_xp: float, curve: Optional[ProgressionCurve] = None) -> LevelProgress:
    """
    Break a total down into level, in-level XP and distance to the next level.

    ``progress_percent`` never reads 100 for an unfinished level; the
    boundary itself reports the new level at 0%.

    Example:
        >>> p = get_remaining_xp(167)
        >>> (p.level, p.xp_in_level, p.xp_for_next_level, p.xp_to_next_level)
        (2, 67, 135, 68)
        >>> p.progress_percent
        50
    """
    curve = _resolve_curve(curve)
    level = get_level_from_total_xp(total_xp, curve)
    xp_in_level = total_xp - total_xp_to_reach(level, curve)

    at_cap = curve.max_level is not None and level >= curve.max_level
    xp_for_next = 0 if at_cap else _span_cost(level + 1, curve)
    xp_to_next = max(0, xp_for_next - xp_in_level)

    if xp_for_next <= 0:
        percent = 0
    else:
        percent = round_half_up(100 * xp_in_level / xp_for_next)
        if xp_in_level < xp_for_next:
            percent = min(percent, MAX_PARTIAL_PROGRESS_PERCENT)

    return LevelProgress(
        level=level,
        xp_in_level=xp_in_level,
        xp_for_next_level=xp_for_next,
        xp_to_next_level=xp_to_next,
        progress_percent=percent,
    )


# ============================================================================
# RANKS
# ============================================================================


def rank_for_level(level: int, ladder: Optional[RankLadder] = None) -> str:
    """
    Letter rank for a level.

    Example:
        >>> rank_for_level(1), rank_for_level(5), rank_for_level(35)
        ('E', 'D', 'SSS')
    """
    validate_level(level)
    ladder = _resolve_ladder(ladder)

    rank = ladder.thresholds[0][0]
    for name, min_level in ladder.thresholds:
        if level >= min_level:
            rank = name
        else:
            break
    return rank


# ============================================================================
# XP AWARDS
# ============================================================================


def xp_for_session(
    duration_minutes: float,
    difficulty: Optional[str] = None,
    streak_days: int = 0,
    economy: Optional[XPEconomy] = None,
) -> int:
    """
    XP awarded for a timed work session.

    ``(minutes * per_minute + difficulty_bonus) * streak_multiplier``, capped
    per session. Sessions shorter than a minute count as one minute.

    Args:
        duration_minutes: Active session length in minutes
        difficulty: Optional difficulty key (basic / intermediate / advanced)
        streak_days: Consecutive days with activity
        economy: XP economy knobs; defaults to the built-in economy

    Example:
        >>> xp_for_session(25)
        15
        >>> xp_for_session(25, difficulty="advanced", streak_days=10)
        42
    """
    validate_non_negative_number(duration_minutes, "duration_minutes")
    validate_non_negative_int(streak_days, "streak_days")
    economy = _resolve_economy(economy)

    bonus = 0
    if difficulty is not None:
        validate_choice(difficulty, "difficulty", economy.difficulty_bonus)
        bonus = economy.difficulty_bonus[difficulty]

    minutes = max(1, math.floor(duration_minutes))
    base = minutes * economy.xp_per_minute

    streak_pct = min(max(streak_days * economy.streak_daily_percent, 0.0), economy.streak_max_percent)
    raw = (base + bonus) * (1 + streak_pct)

    return round_half_up(min(raw, economy.session_hard_cap))


def xp_for_task(
    task_size: str,
    todays_task_xp: float = 0,
    todays_total_xp: float = 0,
    economy: Optional[XPEconomy] = None,
) -> int:
    """
    XP awarded for completing a task, limited by the daily task share.

    Task XP may not exceed ``task_daily_share_cap`` of the day's total
    (including this award); near the cap the award is pro-rated, past it the
    award is 0.

    Example:
        >>> xp_for_task("medium")
        4
        >>> xp_for_task("medium", todays_task_xp=0, todays_total_xp=100)
        12
    """
    economy = _resolve_economy(economy)
    validate_choice(task_size, "task_size", economy.task_xp_by_size)
    validate_non_negative_number(todays_task_xp, "todays_task_xp")
    validate_non_negative_number(todays_total_xp, "todays_total_xp")

    award = economy.task_xp_by_size[task_size]
    max_task_today = (todays_total_xp + award) * economy.task_daily_share_cap

    if todays_task_xp >= max_task_today:
        return 0
    allowed = max_task_today - todays_task_xp
    return round_half_up(min(award, allowed))


__all__ = [
    "LevelProgress",
    "round_half_up",
    "xp_for_level",
    "total_xp_to_reach",
    "get_level_from_total_xp",
    "get_remaining_xp",
    "rank_for_level",
    "xp_for_session",
    "xp_for_task",
]
