"""
Board configuration.

Tuning constants for capture, playback, selection and history.
All settings can be overridden via environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass
class BoardConfig:
    """Configuration for board editing and playback."""

    # Playback
    animation_speed: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_ANIMATION_SPEED", 150.0)
    )  # pixels per second, shared by every player
    pursuit_fraction: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_PURSUIT_FRACTION", 0.1)
    )
    pursuit_max_step: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_PURSUIT_MAX_STEP", 20.0)
    )
    tick_rate: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_TICK_RATE", 60.0)
    )  # playback ticks per second

    # Route capture
    pause_threshold: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_PAUSE_THRESHOLD", 0.5)
    )  # seconds without movement that commits a rigid pivot
    min_sample_distance: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_MIN_SAMPLE_DISTANCE", 5.0)
    )
    arrow_gap: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_ARROW_GAP", 15.0)
    )

    # Selection
    selection_threshold: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_SELECTION_THRESHOLD", 10.0)
    )

    # History
    history_cap: int = field(
        default_factory=lambda: _env_int("PLAYBOARD_HISTORY_CAP", 50)
    )
    history_debounce: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_HISTORY_DEBOUNCE", 0.05)
    )

    # Field
    field_width: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_FIELD_WIDTH", 800.0)
    )
    field_height: float = field(
        default_factory=lambda: _env_float("PLAYBOARD_FIELD_HEIGHT", 870.0)
    )

    log_level: str = field(
        default_factory=lambda: os.getenv("PLAYBOARD_LOG_LEVEL", "INFO")
    )

    @classmethod
    def from_env(cls) -> "BoardConfig":
        """Create config from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.animation_speed <= 0:
            errors.append("PLAYBOARD_ANIMATION_SPEED must be positive")
        if not 0 < self.pursuit_fraction <= 1:
            errors.append("PLAYBOARD_PURSUIT_FRACTION must be in (0, 1]")
        if self.tick_rate <= 0:
            errors.append("PLAYBOARD_TICK_RATE must be positive")
        if self.history_cap < 1:
            errors.append("PLAYBOARD_HISTORY_CAP must be at least 1")
        if self.history_debounce < 0:
            errors.append("PLAYBOARD_HISTORY_DEBOUNCE must not be negative")
        if self.field_width <= 0 or self.field_height <= 0:
            errors.append("Field dimensions must be positive")
        return errors


# Singleton config instance
_config: Optional[BoardConfig] = None


def get_config() -> BoardConfig:
    """Get the global board configuration."""
    global _config
    if _config is None:
        _config = BoardConfig.from_env()
    return _config


def set_config(config: Optional[BoardConfig]) -> None:
    """
    Replace the global configuration.

    Passing None makes the next get_config() re-read the environment.
    Useful for testing.
    """
    global _config
    _config = config


def configure_logging(config: Optional[BoardConfig] = None) -> None:
    """Install a basic log format at the configured level."""
    config = config or get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
