"""Live sync settings with defaults.

All defaults are defined here in the schema - no external system owns defaults.
Uses Pydantic Settings for automatic env var loading.
"""

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LiveSyncSettings(BaseSettings):
    """Subscription lifecycle configuration with automatic env var loading.

    Env vars use the ``POSLIVE__`` prefix:
        POSLIVE__DEBOUNCE_WINDOW_MS=250
        POSLIVE__DEDUP_ON_COLLISION=false
    """

    model_config = SettingsConfigDict(
        env_prefix="POSLIVE__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debounce_window_ms: int = Field(
        100, description="Delay after the first queued item before a batch auto-flushes"
    )
    max_queue_size: int = Field(50, description="Per-type queue length that forces a flush")
    dedup_on_collision: bool = Field(
        True,
        description=(
            "Transfer key ownership silently when another scope re-adds it; "
            "when False, such collisions are rejected"
        ),
    )
    log_level: str = Field("INFO", description="Level for the poslive package logger")
    metrics_enabled: bool = Field(True, description="Export Prometheus metrics")

    @model_validator(mode="after")
    def validate_config_logic(self):
        """Validate that the batching bounds make sense."""
        if self.debounce_window_ms <= 0:
            raise ValueError(
                f"Invalid config: debounce_window_ms must be positive, got {self.debounce_window_ms}"
            )
        if self.max_queue_size <= 0:
            raise ValueError(
                f"Invalid config: max_queue_size must be positive, got {self.max_queue_size}"
            )
        return self

    def merge_with(self, overrides: Optional[dict]) -> "LiveSyncSettings":
        """Merge these settings with an overrides dict, returning new settings.

        Args:
            overrides: Partial settings to apply. None values are ignored.

        Returns:
            New LiveSyncSettings with overrides applied.
        """
        if not overrides:
            return self

        current = self.model_dump()
        current.update({key: value for key, value in overrides.items() if value is not None})
        return LiveSyncSettings(**current)
