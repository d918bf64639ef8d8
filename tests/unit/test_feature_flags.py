from unittest.mock import MagicMock, patch

import pytest

from app.services.feature_flags import ConfigBasedFeatureFlagService


def _settings(enabled=True, kill_switch=False, rollout=100):
    mock_settings = MagicMock()
    mock_settings.KILL_SWITCH_ACTIVE = kill_switch
    mock_settings.PERSONALIZATION_ENABLED = enabled
    mock_settings.ROLLOUT_PERCENTAGE = rollout
    return mock_settings


class TestFeatureFlagService:
    @patch("app.services.feature_flags.get_settings")
    def test_personalization_disabled_global(self, mock_get_settings):
        mock_get_settings.return_value = _settings(enabled=False)

        service = ConfigBasedFeatureFlagService()
        assert service.is_personalization_enabled("user1") is False

    @patch("app.services.feature_flags.get_settings")
    def test_enabled_by_default(self, mock_get_settings):
        mock_get_settings.return_value = _settings()

        service = ConfigBasedFeatureFlagService()
        assert service.rollout_percentage == 100.0
        assert service.is_personalization_enabled("user1") is True

    @patch("app.services.feature_flags.get_settings")
    def test_internal_rollout_logic(self, mock_get_settings):
        mock_get_settings.return_value = _settings()

        service = ConfigBasedFeatureFlagService(rollout_percentage=0.0)
        assert service.is_personalization_enabled("user1") is False

        service.set_rollout_percentage(100.0)
        assert service.is_personalization_enabled("user1") is True

    @patch("app.services.feature_flags.get_settings")
    def test_partial_rollout_is_sticky_and_proportional(self, mock_get_settings):
        mock_get_settings.return_value = _settings()
        service = ConfigBasedFeatureFlagService(rollout_percentage=50.0)
        users = [f"user_{i}" for i in range(1000)]

        first = [service.is_personalization_enabled(u) for u in users]
        second = [service.is_personalization_enabled(u) for u in users]

        assert first == second
        assert 350 < sum(first) < 650

    @patch("app.services.feature_flags.get_settings")
    def test_rollout_read_from_settings(self, mock_get_settings):
        mock_get_settings.return_value = _settings(rollout=0)

        service = ConfigBasedFeatureFlagService()
        assert service.is_personalization_enabled("user1") is False

    @pytest.mark.parametrize("requested,stored", [(-10, 0.0), (250, 100.0), (42, 42.0)])
    def test_set_rollout_percentage_clamps(self, requested, stored):
        service = ConfigBasedFeatureFlagService()
        service.set_rollout_percentage(requested)
        assert service.rollout_percentage == stored

    @patch("app.services.feature_flags.get_settings")
    def test_kill_switch_active(self, mock_get_settings):
        mock_get_settings.return_value = _settings(kill_switch=True)

        service = ConfigBasedFeatureFlagService()
        assert service.is_kill_switch_active() is True
        assert service.is_personalization_enabled("user1") is False
