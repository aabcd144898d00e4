"""
SphereGrid Domain Constants

Purpose
-------
Built-in defaults for the progression curve, rank ladder, XP economy and
session guard. Every value here can be tuned through ConfigManager; these are
the fallbacks used when no YAML file or override supplies one.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Grouped by system (curve, ranks, economy, guard)
- Durations are integer milliseconds throughout
- No side effects at import time
"""

from __future__ import annotations

from typing import Final, Mapping, Optional, Tuple

# ============================================================================
# PROGRESSION CURVE
# ============================================================================

DEFAULT_BASE_XP: Final[int] = 100  # XP required to reach level 2
DEFAULT_GROWTH: Final[float] = 1.35  # Each level costs 35% more than the last
DEFAULT_MAX_LEVEL: Final[Optional[int]] = None  # Uncapped

MIN_LEVEL: Final[int] = 1

# A level that is not complete never reports 100%.
MAX_PARTIAL_PROGRESS_PERCENT: Final[int] = 99

# ============================================================================
# RANK LADDER
# ============================================================================

# (rank, minimum level), ascending
DEFAULT_RANK_THRESHOLDS: Final[Tuple[Tuple[str, int], ...]] = (
    ("E", 1),
    ("D", 5),
    ("C", 10),
    ("B", 15),
    ("A", 20),
    ("S", 25),
    ("SS", 30),
    ("SSS", 35),
)

# ============================================================================
# XP ECONOMY
# ============================================================================

# Sessions (timed work)
SESSION_XP_PER_MINUTE: Final[float] = 0.6
SESSION_XP_HARD_CAP: Final[int] = 120
SESSION_DIFFICULTY_BONUS: Final[Mapping[str, int]] = {
    "basic": 0,
    "intermediate": 8,
    "advanced": 20,
}
STREAK_DAILY_PERCENT: Final[float] = 0.02  # +2% per consecutive day
STREAK_MAX_PERCENT: Final[float] = 0.20  # Capped at +20%

# Tasks (non-timed completions)
TASK_XP_BY_SIZE: Final[Mapping[str, int]] = {
    "micro": 2,
    "small": 5,
    "medium": 12,
    "big": 25,
}
TASK_DAILY_SHARE_CAP: Final[float] = 0.30  # Task XP <= 30% of the day's total

# ============================================================================
# SESSION GUARD (milliseconds)
# ============================================================================

IDLE_TIMEOUT_MS: Final[int] = 5 * 60 * 1000
TAB_HIDDEN_TIMEOUT_MS: Final[int] = 60 * 1000
MIN_FOCUS_CHUNK_MS: Final[int] = 10 * 60 * 1000
IDLE_CHECK_INTERVAL_MS: Final[int] = 30 * 1000
GRACE_PERIOD_MS: Final[int] = 30 * 1000

# ============================================================================
# AUTO-PAUSE REASONS
# ============================================================================

REASON_USER_IDLE: Final[str] = "user_idle"
REASON_TAB_HIDDEN: Final[str] = "tab_hidden"
