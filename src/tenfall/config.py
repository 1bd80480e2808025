"""
Configuration
=============

Difficulty tiers, scoring parameters and session pacing. Built-in defaults
come from ``default_config()``; ``load_config()`` reads the same structure
from a YAML file and validates it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

from tenfall import constants
from tenfall.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultyConfig:
    """Board size and tile value distribution for one difficulty tier."""
    name: str
    grid_size: int
    max_value: int
    spawn_weights: Tuple[float, ...]

    @property
    def width(self) -> int:
        return self.grid_size

    @property
    def height(self) -> int:
        return self.grid_size


@dataclass(frozen=True)
class ScoringConfig:
    """Streak and multiplier parameters."""
    base_score: int = constants.BASE_SCORE
    starting_multiplier: float = constants.STARTING_MULTIPLIER
    multiplier_duration: float = constants.MULTIPLIER_DURATION
    drain_rate: float = constants.MULTIPLIER_DRAIN_RATE
    multiplier_increment: float = constants.MULTIPLIER_INCREMENT
    streak_timeout: float = constants.STREAK_TIMEOUT
    win_score: int = constants.WIN_SCORE
    win_grace_period: float = constants.WIN_GRACE_PERIOD


DEFAULT_DIFFICULTIES: Dict[str, DifficultyConfig] = {
    "easy": DifficultyConfig(
        name="easy",
        grid_size=5,
        max_value=5,
        spawn_weights=(0.15, 0.27, 0.26, 0.17, 0.13, 0.02),
    ),
    "normal": DifficultyConfig(
        name="normal",
        grid_size=5,
        max_value=6,
        spawn_weights=(0.15, 0.27, 0.26, 0.17, 0.13, 0.01, 0.01),
    ),
    "hard": DifficultyConfig(
        name="hard",
        grid_size=6,
        max_value=6,
        spawn_weights=(0.20, 0.30, 0.25, 0.13, 0.08, 0.02, 0.02),
    ),
}


@dataclass(frozen=True)
class GameConfig:
    """Complete game configuration."""
    target_sum: int = constants.TARGET_SUM
    session_duration: float = constants.SESSION_DURATION
    unsolvable_reset_delay: float = constants.UNSOLVABLE_RESET_DELAY
    hint_delay: float = constants.HINT_DELAY
    hint_repeat_interval: float = constants.HINT_REPEAT_INTERVAL
    default_difficulty: str = constants.DEFAULT_DIFFICULTY
    difficulties: Dict[str, DifficultyConfig] = field(default_factory=lambda: dict(DEFAULT_DIFFICULTIES))
    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    def difficulty(self, name: Optional[str] = None) -> DifficultyConfig:
        """Get difficulty config by name (default tier when None)."""
        key = name or self.default_difficulty
        if key not in self.difficulties:
            raise ConfigError(f"Unknown difficulty: {key}")
        return self.difficulties[key]


def default_config() -> GameConfig:
    return GameConfig()


def _parse_weights(name: str, weights_data) -> Tuple[float, ...]:
    if not isinstance(weights_data, (list, tuple)) or not weights_data:
        raise ConfigError(f"Difficulty '{name}' needs a non-empty spawn_weights list")
    return tuple(float(w) for w in weights_data)


def _parse_difficulty(name: str, data: dict) -> DifficultyConfig:
    return DifficultyConfig(
        name=name,
        grid_size=int(data["grid_size"]),
        max_value=int(data["max_value"]),
        spawn_weights=_parse_weights(name, data["spawn_weights"]),
    )


def validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.target_sum != constants.TARGET_SUM:
        raise ConfigError(f"target_sum is fixed at {constants.TARGET_SUM}, got {config.target_sum}")
    if not config.difficulties:
        raise ConfigError("At least one difficulty must be configured")
    if config.default_difficulty not in config.difficulties:
        raise ConfigError(f"default_difficulty '{config.default_difficulty}' is not configured")

    for name, tier in config.difficulties.items():
        if tier.grid_size not in constants.SUPPORTED_GRID_SIZES:
            raise ConfigError(
                f"Difficulty '{name}': grid_size must be one of {constants.SUPPORTED_GRID_SIZES}, got {tier.grid_size}"
            )
        if tier.max_value not in constants.SUPPORTED_MAX_VALUES:
            raise ConfigError(
                f"Difficulty '{name}': max_value must be one of {constants.SUPPORTED_MAX_VALUES}, got {tier.max_value}"
            )
        if len(tier.spawn_weights) != tier.max_value + 1:
            raise ConfigError(
                f"Difficulty '{name}': spawn_weights length ({len(tier.spawn_weights)}) must be "
                f"max_value + 1 ({tier.max_value + 1})"
            )
        if any(w < 0 for w in tier.spawn_weights):
            raise ConfigError(f"Difficulty '{name}': spawn_weights must not be negative")
        total = sum(tier.spawn_weights)
        if abs(total - 1.0) > 0.05:
            # Spawning tolerates this through the fallback index.
            logger.warning("Difficulty '%s' spawn weights sum to %.3f, expected ~1.0", name, total)

    scoring = config.scoring
    if scoring.starting_multiplier < 1.0:
        raise ConfigError("starting_multiplier must be >= 1.0")
    if scoring.multiplier_duration <= 0 or scoring.drain_rate <= 0:
        raise ConfigError("multiplier_duration and drain_rate must be positive")
    if scoring.streak_timeout <= 0:
        raise ConfigError("streak_timeout must be positive")
    if config.session_duration <= 0:
        raise ConfigError("session_duration must be positive")


def load_config(config_path: str | Path) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Missing sections fall back to the built-in defaults, so a file may only
    override what it cares about.

    Args:
        config_path: Path to a YAML configuration file.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If config validation fails.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")

    defaults = ScoringConfig()
    scoring_data = raw.get("scoring", {}) or {}
    try:
        scoring = ScoringConfig(
            base_score=int(scoring_data.get("base_score", defaults.base_score)),
            starting_multiplier=float(scoring_data.get("starting_multiplier", defaults.starting_multiplier)),
            multiplier_duration=float(scoring_data.get("multiplier_duration", defaults.multiplier_duration)),
            drain_rate=float(scoring_data.get("drain_rate", defaults.drain_rate)),
            multiplier_increment=float(scoring_data.get("multiplier_increment", defaults.multiplier_increment)),
            streak_timeout=float(scoring_data.get("streak_timeout", defaults.streak_timeout)),
            win_score=int(scoring_data.get("win_score", defaults.win_score)),
            win_grace_period=float(scoring_data.get("win_grace_period", defaults.win_grace_period)),
        )

        difficulties_data = raw.get("difficulties")
        if difficulties_data:
            difficulties = {
                str(name): _parse_difficulty(str(name), data)
                for name, data in difficulties_data.items()
            }
        else:
            difficulties = dict(DEFAULT_DIFFICULTIES)

        config = GameConfig(
            target_sum=int(raw.get("target_sum", constants.TARGET_SUM)),
            session_duration=float(raw.get("session_duration", constants.SESSION_DURATION)),
            unsolvable_reset_delay=float(raw.get("unsolvable_reset_delay", constants.UNSOLVABLE_RESET_DELAY)),
            hint_delay=float(raw.get("hint_delay", constants.HINT_DELAY)),
            hint_repeat_interval=float(raw.get("hint_repeat_interval", constants.HINT_REPEAT_INTERVAL)),
            default_difficulty=str(raw.get("default_difficulty", constants.DEFAULT_DIFFICULTY)),
            difficulties=difficulties,
            scoring=scoring,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config {config_path}: {exc}") from exc

    validate_config(config)
    return config
