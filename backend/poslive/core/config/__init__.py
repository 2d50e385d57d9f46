"""Configuration module for poslive.

Usage:
    from poslive.core.config import settings

    if settings.dedup_on_collision:
        ...
"""

from poslive.core.config.settings import LiveSyncSettings

__all__ = [
    "LiveSyncSettings",
    "settings",
]

# Process-wide defaults read from the environment; components still receive
# their settings explicitly.
settings = LiveSyncSettings()
