"""Game and server configuration loaded from YAML."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "default.yaml"


class ConfigError(ValueError):
    """Raised when a configuration file has unknown keys or bad values."""


@dataclass
class GameConfig:
    """Settings for the board, the two periodic triggers and the server."""

    board_size: int = 15
    move_interval: float = 0.2  # Seconds between movement ticks
    time_interval: float = 1.0  # Seconds between clock ticks
    max_spawn_attempts: int = 100
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("board_size", "max_spawn_attempts", "port"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        for name in ("move_interval", "time_interval"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number, got {value!r}")
        for name in ("host", "log_level"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got {value!r}")

        if self.board_size < 2:
            raise ConfigError(f"board_size must be at least 2, got {self.board_size}")
        if self.move_interval <= 0 or self.time_interval <= 0:
            raise ConfigError("move_interval and time_interval must be positive")
        if self.max_spawn_attempts < 1:
            raise ConfigError(f"max_spawn_attempts must be at least 1, got {self.max_spawn_attempts}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: str | Path | None = None) -> GameConfig:
    """Load configuration from a YAML file.

    Args:
        path: YAML file to read. Falls back to ``$SNAKE_CONFIG`` and then
            ``configs/default.yaml``. A missing file yields the defaults.

    Returns:
        The parsed GameConfig, with ``$PORT`` overriding the port if set
    """
    if path is None:
        path = os.environ.get("SNAKE_CONFIG") or DEFAULT_CONFIG_PATH
    path = Path(path)

    data: dict[str, Any] = {}
    if path.exists():
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(GameConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {unknown}")

    port = os.environ.get("PORT")
    if port:
        try:
            data["port"] = int(port)
        except ValueError as e:
            raise ConfigError(f"PORT must be an integer, got {port!r}") from e

    return GameConfig(**data)
