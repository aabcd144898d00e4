"""
Unit Tests for Progression Domain Model
=======================================

Purpose
-------
Test the balance value objects and the ProgressProfile aggregate without
external dependencies.

Test Coverage
-------------
- Curve, rank ladder and economy validation
- Building balance objects from ConfigManager
- Experience gain, multi-level jumps and rank changes
- Domain event emission

Testing Strategy
----------------
- AAA pattern (Arrange, Act, Assert)
- Test one behavior per test
"""

import pytest

from spheregrid.core.config import ConfigManager
from spheregrid.domain.models import (
    DEFAULT_CURVE,
    DEFAULT_ECONOMY,
    DEFAULT_RANK_LADDER,
    ProgressionCurve,
    ProgressProfile,
    RankLadder,
    XPEconomy,
)
from spheregrid.modules.shared.exceptions import InvalidArgumentError
from spheregrid.modules.shared.formulas import total_xp_to_reach


# ============================================================================
# VALUE OBJECT TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestProgressionCurve:
    """Test ProgressionCurve value object."""

    def test_defaults(self):
        curve = ProgressionCurve()

        assert curve.base_xp == 100
        assert curve.growth == 1.35
        assert curve.max_level is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"base_xp": 0},
            {"base_xp": -10},
            {"base_xp": 0.4},
            {"base_xp": 0.4, "growth": 1},
            {"growth": 0.9},
            {"growth": 0},
            {"max_level": 0},
            {"max_level": 2.5},
        ],
    )
    def test_rejects_invalid_parameters(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            ProgressionCurve(**kwargs)

    def test_is_immutable(self):
        curve = ProgressionCurve()

        with pytest.raises(Exception):  # FrozenInstanceError
            curve.growth = 2  # type: ignore[misc]

    def test_equality_by_value(self):
        assert ProgressionCurve(base_xp=50) == ProgressionCurve(base_xp=50)
        assert ProgressionCurve(base_xp=50) != ProgressionCurve(base_xp=60)

    def test_from_config_matches_shipped_defaults(self):
        assert ProgressionCurve.from_config() == DEFAULT_CURVE

    def test_from_config_reads_overrides(self):
        # Arrange
        ConfigManager.override("progression.growth", 1.5)
        ConfigManager.override("progression.max_level", 50)

        # Act
        curve = ProgressionCurve.from_config()

        # Assert
        assert curve.growth == 1.5
        assert curve.max_level == 50
        assert curve.base_xp == 100

    def test_from_config_validates(self):
        ConfigManager.override("progression.growth", 0.5)

        with pytest.raises(InvalidArgumentError):
            ProgressionCurve.from_config()


@pytest.mark.unit
@pytest.mark.domain
class TestRankLadder:
    """Test RankLadder value object."""

    def test_default_ranks(self):
        assert DEFAULT_RANK_LADDER.ranks == ("E", "D", "C", "B", "A", "S", "SS", "SSS")

    def test_rejects_empty_ladder(self):
        with pytest.raises(InvalidArgumentError):
            RankLadder(thresholds=())

    def test_first_rank_must_start_at_level_one(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            RankLadder(thresholds=(("E", 2), ("D", 5)))

        assert "level 1" in str(exc_info.value)

    def test_levels_must_ascend(self):
        with pytest.raises(InvalidArgumentError):
            RankLadder(thresholds=(("E", 1), ("D", 5), ("C", 5)))

    def test_rank_names_cannot_be_empty(self):
        with pytest.raises(InvalidArgumentError):
            RankLadder(thresholds=(("", 1),))

    def test_from_config_sorts_by_level(self, tmp_path):
        # Arrange
        ConfigManager.initialize(config_dir=tmp_path, force=True)
        ConfigManager.override("ranks.thresholds", {"Gold": 10, "Bronze": 1, "Silver": 4})

        # Act
        ladder = RankLadder.from_config()

        # Assert
        assert ladder.thresholds == (("Bronze", 1), ("Silver", 4), ("Gold", 10))

    def test_from_config_matches_shipped_defaults(self):
        assert RankLadder.from_config() == DEFAULT_RANK_LADDER


@pytest.mark.unit
@pytest.mark.domain
class TestXPEconomy:
    """Test XPEconomy value object."""

    def test_defaults(self):
        economy = XPEconomy()

        assert economy.xp_per_minute == 0.6
        assert economy.session_hard_cap == 120
        assert economy.difficulty_bonus == {"basic": 0, "intermediate": 8, "advanced": 20}
        assert economy.task_xp_by_size == {"micro": 2, "small": 5, "medium": 12, "big": 25}
        assert economy.task_daily_share_cap == 0.30

    def test_share_cap_above_one_rejected(self):
        with pytest.raises(InvalidArgumentError):
            XPEconomy(task_daily_share_cap=1.5)

    def test_negative_bonus_rejected(self):
        with pytest.raises(InvalidArgumentError):
            XPEconomy(difficulty_bonus={"basic": -1})

    def test_from_config_matches_shipped_defaults(self):
        assert XPEconomy.from_config() == DEFAULT_ECONOMY

    def test_from_config_reads_overrides(self):
        ConfigManager.override("xp_economy.session.hard_cap", 60)

        assert XPEconomy.from_config().session_hard_cap == 60


# ============================================================================
# PROGRESS PROFILE TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestProgressProfile:
    """Test ProgressProfile aggregate root."""

    def test_new_profile(self):
        # Arrange & Act
        profile = ProgressProfile("user-1")

        # Assert
        assert profile.id == "user-1"
        assert profile.total_xp == 0
        assert profile.level == 1
        assert profile.rank == "E"
        assert profile.get_pending_events() == []

    def test_requires_user_id(self):
        with pytest.raises(InvalidArgumentError):
            ProgressProfile("")

    def test_rejects_negative_start(self):
        with pytest.raises(InvalidArgumentError):
            ProgressProfile("user-1", total_xp=-1)

    def test_gain_within_level(self):
        # Arrange
        profile = ProgressProfile("user-1")

        # Act
        levels = profile.add_experience(40, source="task")

        # Assert
        assert levels == 0
        assert profile.total_xp == 40
        events = profile.clear_domain_events()
        assert [e.event_name for e in events] == ["progress.experience_gained"]
        assert events[0].payload == {
            "user_id": "user-1",
            "amount": 40,
            "source": "task",
            "new_total": 40,
        }

    def test_gain_crossing_two_levels(self):
        """One event per level crossed, in order."""
        # Arrange
        profile = ProgressProfile("user-1", total_xp=90)

        # Act
        levels = profile.add_experience(150, source="session")

        # Assert
        assert levels == 2
        assert profile.level == 3
        level_events = [e for e in profile.clear_domain_events() if e.event_name == "progress.leveled_up"]
        assert [(e.payload["old_level"], e.payload["new_level"]) for e in level_events] == [(1, 2), (2, 3)]

    def test_rank_up_event(self):
        # Arrange
        profile = ProgressProfile("user-1", total_xp=total_xp_to_reach(5) - 1)
        assert profile.rank == "E"

        # Act
        profile.add_experience(1)

        # Assert
        assert profile.rank == "D"
        events = profile.clear_domain_events()
        assert [e.event_name for e in events] == [
            "progress.experience_gained",
            "progress.leveled_up",
            "progress.rank_up",
        ]
        assert events[-1].payload == {"user_id": "user-1", "old_rank": "E", "new_rank": "D", "level": 5}

    @pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf"), "10"])
    def test_rejects_invalid_amounts(self, amount):
        # Arrange
        profile = ProgressProfile("user-1", total_xp=50)

        # Act & Assert
        with pytest.raises(InvalidArgumentError):
            profile.add_experience(amount)

        assert profile.total_xp == 50
        assert profile.get_pending_events() == []

    def test_custom_curve(self):
        profile = ProgressProfile("user-1", curve=ProgressionCurve(base_xp=10, growth=1))

        profile.add_experience(35)

        assert profile.level == 4

    def test_snapshot(self):
        profile = ProgressProfile("user-1", total_xp=167)

        assert profile.snapshot() == {
            "user_id": "user-1",
            "total_xp": 167,
            "rank": "E",
            "level": 2,
            "xp_in_level": 67,
            "xp_for_next_level": 135,
            "xp_to_next_level": 68,
            "progress_percent": 50,
        }

    def test_identity_equality(self):
        assert ProgressProfile("user-1") == ProgressProfile("user-1", total_xp=500)
        assert ProgressProfile("user-1") != ProgressProfile("user-2")
