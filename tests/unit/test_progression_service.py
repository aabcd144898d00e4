"""
Unit tests for ProgressionService.

Tests XP gain evaluation, awards applied to profiles, reward helpers,
achievement checks and config-driven balance.
"""

import pytest

from spheregrid.core.config import ConfigManager, ConfigValidationError
from spheregrid.domain.models import ProgressionCurve, ProgressProfile
from spheregrid.modules.progression import AchievementRegistry, ProgressionService
from spheregrid.modules.shared.exceptions import InvalidArgumentError


@pytest.fixture
def service_logger(mocker):
    return mocker.Mock(name="logger")


@pytest.fixture
def service(service_logger):
    return ProgressionService(logger=service_logger)


@pytest.mark.unit
class TestEvaluateXPGain:
    """Test level-up / rank-up detection."""

    def test_gain_within_level(self, service):
        result = service.evaluate_xp_gain(10, 20)

        assert result.total_after == 30
        assert result.levels_gained == 0
        assert not result.leveled_up
        assert not result.ranked_up

    def test_multi_level_gain(self, service):
        # Arrange & Act
        result = service.evaluate_xp_gain(90, 150)

        # Assert
        assert (result.level_before, result.level_after) == (1, 3)
        assert result.levels_gained == 2
        assert result.leveled_up
        assert result.progress.xp_in_level == 5

    def test_exact_boundary_counts(self, service):
        result = service.evaluate_xp_gain(0, 100)

        assert result.level_after == 2
        assert result.progress.progress_percent == 0

    def test_rank_change(self, service):
        result = service.evaluate_xp_gain(662, 1)

        assert (result.rank_before, result.rank_after) == ("E", "D")
        assert result.ranked_up

    @pytest.mark.parametrize("total_before, delta", [(-1, 10), (10, -1), (float("nan"), 1)])
    def test_rejects_invalid_inputs(self, service, total_before, delta):
        with pytest.raises(InvalidArgumentError):
            service.evaluate_xp_gain(total_before, delta)

    def test_to_dict(self, service):
        data = service.evaluate_xp_gain(90, 77).to_dict()

        assert data["level_before"] == 1
        assert data["level_after"] == 2
        assert data["levels_gained"] == 1
        assert data["progress"]["progress_percent"] == 50


@pytest.mark.unit
class TestAwardXP:
    """Test applying gains to a profile."""

    def test_award_updates_profile_and_drains_events(self, service):
        # Arrange
        profile = ProgressProfile("user-1", total_xp=90)

        # Act
        result = service.award_xp(profile, 150, source="session")

        # Assert
        assert profile.total_xp == 240
        assert result.level_after == 3
        assert [e.event_name for e in result.events] == [
            "progress.experience_gained",
            "progress.leveled_up",
            "progress.leveled_up",
        ]
        assert profile.get_pending_events() == []

    def test_award_logs_level_up(self, service, service_logger):
        profile = ProgressProfile("user-1", total_xp=90)

        service.award_xp(profile, 150, source="session")

        messages = [c.args[0] for c in service_logger.info.call_args_list]
        assert "Service operation: award_xp" in messages
        assert "Level up" in messages

    def test_award_uses_profile_curve(self, service):
        profile = ProgressProfile("user-1", curve=ProgressionCurve(base_xp=10, growth=1))

        result = service.award_xp(profile, 25, source="task")

        assert result.level_after == 3

    def test_invalid_award_is_logged_and_raised(self, service, service_logger):
        # Arrange
        profile = ProgressProfile("user-1", total_xp=50)

        # Act & Assert
        with pytest.raises(InvalidArgumentError):
            service.award_xp(profile, 0, source="task")

        assert profile.total_xp == 50
        service_logger.error.assert_called_once()
        assert service_logger.error.call_args.kwargs["extra"]["service_operation"] == "award_xp"


@pytest.mark.unit
class TestRewards:
    """Test session and task reward helpers."""

    def test_session_reward(self, service):
        assert service.session_reward(25) == 15
        assert service.session_reward(25, difficulty="advanced", streak_days=10) == 42

    def test_task_reward(self, service):
        assert service.task_reward("medium") == 4
        assert service.task_reward("medium", todays_task_xp=0, todays_total_xp=100) == 12

    def test_describe(self, service):
        assert service.describe(167) == {
            "total_xp": 167,
            "rank": "E",
            "level": 2,
            "xp_in_level": 67,
            "xp_for_next_level": 135,
            "xp_to_next_level": 68,
            "progress_percent": 50,
        }

    def test_balance_comes_from_config(self):
        # Arrange
        ConfigManager.override("xp_economy.session.hard_cap", 20)
        ConfigManager.override("progression.base_xp", 50)

        # Act
        service = ProgressionService()

        # Assert
        assert service.session_reward(100) == 20
        assert service.describe(50)["level"] == 2

    def test_explicit_balance_wins(self):
        ConfigManager.override("progression.base_xp", 50)

        service = ProgressionService(curve=ProgressionCurve())

        assert service.describe(50)["level"] == 1


@pytest.mark.unit
class TestCheckAchievements:
    """Test achievement checks driven through the service."""

    def test_unlocks_from_profile_and_activity(self, service, service_logger):
        # Arrange
        profile = ProgressProfile("user-1", total_xp=3_968)

        # Act
        evaluation = service.check_achievements(profile, tasks_completed=1)

        # Assert
        assert evaluation.unlocked_ids == ("first_blood", "level_10")
        assert evaluation.xp_reward == 350
        service_logger.info.assert_called_once()
        assert service_logger.info.call_args.kwargs["extra"]["achievement_ids"] == ["first_blood", "level_10"]

    def test_nothing_new_is_not_logged(self, service, service_logger):
        profile = ProgressProfile("user-1")

        evaluation = service.check_achievements(profile, unlocked_ids={"first_blood"}, tasks_completed=1)

        assert evaluation.unlocked == ()
        service_logger.info.assert_not_called()

    def test_explicit_registry_wins(self, service_logger):
        service = ProgressionService(logger=service_logger, achievements=AchievementRegistry())

        evaluation = service.check_achievements(ProgressProfile("user-1"), tasks_completed=100)

        assert evaluation.progress == ()

    def test_unknown_activity_field(self, service):
        with pytest.raises(TypeError):
            service.check_achievements(ProgressProfile("user-1"), comeback_days=7)


@pytest.mark.unit
class TestBaseServiceConfig:
    """Test config access inherited from BaseService."""

    def test_get_config_with_default(self, service):
        assert service.get_config("progression.base_xp") == 100
        assert service.get_config("progression.missing", default=7) == 7

    def test_required_key_missing(self, service):
        with pytest.raises(ConfigValidationError):
            service.get_config("progression.missing", required=True)
