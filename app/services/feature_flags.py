"""
Feature flag service implementation.
Controls rollout of user-based (collaborative) recommendations and the kill switch.
"""
import hashlib
from typing import Optional

from app.config import get_settings
from app.models.interfaces import FeatureFlagService


class ConfigBasedFeatureFlagService(FeatureFlagService):
    """
    Feature flag service backed by application settings.
    Supports percentage-based rollout using consistent hashing.
    """

    def __init__(self, rollout_percentage: Optional[float] = None) -> None:
        """
        Args:
            rollout_percentage: Percentage of users to enable (0-100).
                Defaults to ROLLOUT_PERCENTAGE from settings.
        """
        self._rollout_percentage = rollout_percentage

    @property
    def rollout_percentage(self) -> float:
        if self._rollout_percentage is not None:
            return self._rollout_percentage
        return float(get_settings().ROLLOUT_PERCENTAGE)

    def is_personalization_enabled(self, user_id: str) -> bool:
        """
        Same user always lands in the same bucket, so a shopper does not flip
        between personalized and generic suggestions across page loads.
        """
        if self.is_kill_switch_active():
            return False

        if not get_settings().PERSONALIZATION_ENABLED:
            return False

        if self.rollout_percentage < 100.0:
            return self._is_user_in_rollout(user_id)

        return True

    def is_kill_switch_active(self) -> bool:
        return get_settings().KILL_SWITCH_ACTIVE

    def _is_user_in_rollout(self, user_id: str) -> bool:
        """MD5 hash mod 100 for consistent assignment."""
        hash_bytes = hashlib.md5(user_id.encode()).digest()
        bucket = int.from_bytes(hash_bytes[:4], byteorder="big") % 100
        return bucket < self.rollout_percentage

    def set_rollout_percentage(self, percentage: float) -> None:
        """Update rollout percentage (for dynamic configuration)."""
        self._rollout_percentage = max(0.0, min(100.0, percentage))
