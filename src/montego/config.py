"""Configuration management for MonteGo.

Handles environment-based configuration for simulation defaults, local
persistence and logging.
"""

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Optional


@dataclass
class SimulationConfig:
    """Simulation configuration."""

    default_iterations: int = 10000
    min_chunk_size: int = 500
    chunk_divisor: int = 100
    random_seed: Optional[int] = None
    # Share of overall progress reserved for event resolution
    resolve_progress_pct: int = 5


@dataclass
class HistoryConfig:
    """History and preference storage configuration."""

    home_dir: Path = field(default_factory=lambda: Path.home() / ".montego")
    max_entries: int = 50

    @property
    def history_file(self) -> Path:
        return self.home_dir / "history.json"

    @property
    def settings_file(self) -> Path:
        return self.home_dir / "settings.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    log_file: Optional[str] = None


class Config:
    """Main configuration class."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        seed = os.getenv("MONTEGO_RANDOM_SEED")
        self.simulation = SimulationConfig(
            default_iterations=int(os.getenv("MONTEGO_DEFAULT_ITERATIONS", "10000")),
            min_chunk_size=int(os.getenv("MONTEGO_MIN_CHUNK_SIZE", "500")),
            chunk_divisor=int(os.getenv("MONTEGO_CHUNK_DIVISOR", "100")),
            random_seed=int(seed) if seed else None,
        )

        home = os.getenv("MONTEGO_HOME")
        self.history = HistoryConfig(
            home_dir=Path(home).expanduser() if home else Path.home() / ".montego",
            max_entries=int(os.getenv("MONTEGO_HISTORY_MAX_ENTRIES", "50")),
        )

        self.logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format=os.getenv("LOG_FORMAT", "console"),
            log_file=os.getenv("LOG_FILE"),
        )

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(home={self.history.home_dir})"


def get_config() -> Config:
    """Get global configuration instance.

    Returns:
        Configuration instance
    """
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()

    return get_config._instance


def reset_config() -> None:
    """Drop the cached configuration so the environment is read again."""
    if hasattr(get_config, "_instance"):
        del get_config._instance
