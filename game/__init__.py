"""Snake game engine, state and host session."""

from game.config import ConfigError, GameConfig, load_config
from game.engine import SnakeGame, render_grid, reset, set_direction, spawn_food, step, tick_clock
from game.session import GameSession, SessionError
from game.state import BOARD_SIZE, CellKind, Direction, GameState, GameStatus, InvalidDirectionError

__all__ = [
    "BOARD_SIZE",
    "CellKind",
    "ConfigError",
    "Direction",
    "GameConfig",
    "GameSession",
    "GameState",
    "GameStatus",
    "InvalidDirectionError",
    "SessionError",
    "SnakeGame",
    "load_config",
    "render_grid",
    "reset",
    "set_direction",
    "spawn_food",
    "step",
    "tick_clock",
]
