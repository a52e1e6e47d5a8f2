from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Tuple

import numpy as np

Position = Tuple[int, int]

BOARD_SIZE = 15


class InvalidDirectionError(ValueError):
    """Raised when a direction name cannot be parsed."""


class Direction(str, Enum):
    """Movement direction of the snake head."""

    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @property
    def offset(self) -> Position:
        return _OFFSETS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, value) -> "Direction":
        """Accept a Direction or a case-insensitive name like "up"."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise InvalidDirectionError(f"Unknown direction: {value!r}")


_OFFSETS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class GameStatus(str, Enum):
    RUNNING = "running"
    GAME_OVER = "game_over"


class CellKind(IntEnum):
    """Per-cell classification handed to the renderer."""

    EMPTY = 0
    SNAKE = 1
    FOOD = 2


@dataclass
class GameState:
    """Represents the current state of a Snake game."""

    snake: List[Position]  # Tail first, head last
    food: Position
    direction: Direction = Direction.RIGHT
    game_over: bool = False
    high_score: int = 0  # Longest snake length reached
    time_played: int = 0  # Seconds
    board_size: int = BOARD_SIZE

    @property
    def head(self) -> Position:
        return self.snake[-1]

    @property
    def tail(self) -> Position:
        return self.snake[0]

    @property
    def status(self) -> GameStatus:
        return GameStatus.GAME_OVER if self.game_over else GameStatus.RUNNING

    def in_bounds(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self.board_size and 0 <= y < self.board_size

    def to_grid(self) -> np.ndarray:
        """Classify every board cell, indexed [y, x].

        A snake cell wins over food when the two overlap, which only
        happens after the food spawner ran out of attempts.
        """
        grid = np.full((self.board_size, self.board_size), CellKind.EMPTY, dtype=np.int8)
        fx, fy = self.food
        if self.in_bounds(self.food):
            grid[fy, fx] = CellKind.FOOD
        for x, y in self.snake:
            grid[y, x] = CellKind.SNAKE
        return grid

    def to_dict(self) -> dict:
        """Convert GameState to a dictionary for JSON serialization."""
        return {
            "snake": [{"x": x, "y": y} for x, y in self.snake],
            "food": {"x": self.food[0], "y": self.food[1]},
            "direction": self.direction.value,
            "status": self.status.value,
            "game_over": self.game_over,
            "high_score": self.high_score,
            "time_played": self.time_played,
            "board_size": self.board_size,
            "grid": self.to_grid().tolist(),
        }
