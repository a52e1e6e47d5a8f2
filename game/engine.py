import logging
import random
from dataclasses import replace
from typing import Iterable, Optional

import numpy as np

from .state import BOARD_SIZE, Direction, GameState, Position

logger = logging.getLogger(__name__)

MAX_SPAWN_ATTEMPTS = 100


def initial_snake(board_size: int = BOARD_SIZE) -> list[Position]:
    """Single cell in the middle of the board."""
    center = board_size // 2
    return [(center, center)]


def spawn_food(
    occupied: Iterable[Position],
    board_size: int = BOARD_SIZE,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_SPAWN_ATTEMPTS,
) -> Position:
    """Pick a random cell for the food.

    Redraws while the candidate lands on an occupied cell, but gives up
    after ``max_attempts`` draws and returns the last candidate anyway.

    Args:
        occupied: Cells the food should avoid (normally the snake)
        board_size: Board width and height in cells
        rng: Random source, defaults to the module-level generator
        max_attempts: Total number of draws allowed

    Returns:
        The food position
    """
    rng = rng or random
    occupied_set = set(occupied)

    candidate = (rng.randrange(board_size), rng.randrange(board_size))
    attempts = 1
    while candidate in occupied_set and attempts < max_attempts:
        candidate = (rng.randrange(board_size), rng.randrange(board_size))
        attempts += 1

    if candidate in occupied_set:
        logger.debug("Food spawn gave up after %d attempts, placing on %s", attempts, candidate)
    return candidate


def reset(
    board_size: int = BOARD_SIZE,
    rng: Optional[random.Random] = None,
    high_score: int = 0,
    max_attempts: int = MAX_SPAWN_ATTEMPTS,
) -> GameState:
    """Build a fresh game state: centred snake, facing right, new food."""
    snake = initial_snake(board_size)
    return GameState(
        snake=snake,
        food=spawn_food(snake, board_size, rng, max_attempts),
        direction=Direction.RIGHT,
        game_over=False,
        high_score=high_score,
        time_played=0,
        board_size=board_size,
    )


def step(
    state: GameState,
    direction: Optional[Direction] = None,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_SPAWN_ATTEMPTS,
) -> GameState:
    """Advance the snake by one cell.

    The new head is checked against the board bounds and against the whole
    pre-move body, so the tail cell about to be vacated still counts as
    occupied. A failed check ends the game and leaves the snake where it
    was.

    Args:
        state: Current state, not modified
        direction: Direction or direction name to move in, defaults to
            ``state.direction``
        rng: Random source for the food respawn
        max_attempts: Food spawn attempt cap

    Returns:
        The next GameState (direction unchanged)
    """
    if state.game_over:
        return state

    heading = state.direction if direction is None else Direction.parse(direction)
    dx, dy = heading.offset
    head_x, head_y = state.head
    new_head = (head_x + dx, head_y + dy)

    if not state.in_bounds(new_head) or new_head in state.snake:
        return replace(state, snake=list(state.snake), game_over=True)

    snake = list(state.snake) + [new_head]

    if new_head == state.food:
        return replace(
            state,
            snake=snake,
            food=spawn_food(snake, state.board_size, rng, max_attempts),
            high_score=max(state.high_score, len(snake)),
        )

    # No food eaten, drop the tail
    snake.pop(0)
    return replace(state, snake=snake)


def set_direction(state: GameState, requested) -> GameState:
    """Turn the snake unless the request would reverse it onto itself."""
    requested = Direction.parse(requested)
    if requested == state.direction.opposite:
        logger.debug("Ignoring reverse turn %s while heading %s", requested.value, state.direction.value)
        return state
    return replace(state, direction=requested)


def tick_clock(state: GameState) -> GameState:
    if state.game_over:
        return state
    return replace(state, time_played=state.time_played + 1)


def render_grid(state: GameState) -> np.ndarray:
    return state.to_grid()


class SnakeGame:
    """Snake game holding the single authoritative state.

    Wraps the pure engine functions so a host loop can drive it with
    ``step`` and ``tick_clock`` and feed it input with ``set_direction``.
    """

    def __init__(
        self,
        board_size: int = BOARD_SIZE,
        rng: Optional[random.Random] = None,
        max_spawn_attempts: int = MAX_SPAWN_ATTEMPTS,
    ):
        self.board_size = board_size
        self.max_spawn_attempts = max_spawn_attempts
        self._rng = rng or random.Random()
        self._state = reset(board_size, self._rng, max_attempts=max_spawn_attempts)

    @property
    def game_over(self) -> bool:
        return self._state.game_over

    @property
    def high_score(self) -> int:
        return self._state.high_score

    def get_state(self) -> GameState:
        return self._state

    def reset(self) -> GameState:
        """Start over, keeping the high score."""
        self._state = reset(
            self.board_size,
            self._rng,
            high_score=self._state.high_score,
            max_attempts=self.max_spawn_attempts,
        )
        return self._state

    def step(self) -> GameState:
        self._state = step(self._state, rng=self._rng, max_attempts=self.max_spawn_attempts)
        return self._state

    def set_direction(self, direction) -> GameState:
        self._state = set_direction(self._state, direction)
        return self._state

    def tick_clock(self) -> GameState:
        self._state = tick_clock(self._state)
        return self._state
