"""Configuration objects for provider-sync."""

from dataclasses import dataclass, field
from datetime import timedelta

from .conditions import Clock, utcnow

DEFAULT_ROLLOUT_INTERVAL = timedelta(minutes=1)
DEFAULT_VERSION_CHECK_INTERVAL = timedelta(hours=24)


@dataclass
class SyncConfig:
    """Configuration for the provider synchronizer.

    Built once when the process starts and handed to every controller and
    synchronizer that needs it.
    """

    rollout_interval: timedelta = DEFAULT_ROLLOUT_INTERVAL
    """Minimum time between two forced rollouts of the same provider."""

    version_check_interval: timedelta = DEFAULT_VERSION_CHECK_INTERVAL
    """Minimum time between two latest version refreshes of the same provider."""

    clock: Clock = field(default=utcnow, repr=False)
    """Source of the current time, in UTC."""
