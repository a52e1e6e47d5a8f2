"""Async host loop driving a SnakeGame with two periodic triggers."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Optional

from game.config import GameConfig
from game.engine import SnakeGame
from game.state import GameState

logger = logging.getLogger(__name__)

# Called with ("state_update" | "game_over", state) whenever the state changes
UpdateCallback = Callable[[str, GameState], Awaitable[None]]


class SessionError(RuntimeError):
    """Raised when the session is driven out of order."""


class GameSession:
    """Owns one game and its movement and clock tasks.

    At most one pair of tasks is live at a time. Both are cancelled when the
    game ends or is reset, and a reset tears the old pair down before the
    new one is created.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        on_update: Optional[UpdateCallback] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or GameConfig()
        self.game = SnakeGame(
            board_size=self.config.board_size,
            rng=rng,
            max_spawn_attempts=self.config.max_spawn_attempts,
        )
        self.on_update = on_update
        self._move_task: Optional[asyncio.Task] = None
        self._clock_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> GameState:
        return self.game.get_state()

    @property
    def running(self) -> bool:
        return any(task is not None and not task.done() for task in (self._move_task, self._clock_task))

    def start(self) -> None:
        """Create the movement and clock tasks on the running event loop."""
        if self.running:
            raise SessionError("Session is already running")
        if self.game.game_over:
            raise SessionError("Game is over, reset to play again")

        self._move_task = asyncio.create_task(self._run_movement())
        self._clock_task = asyncio.create_task(self._run_clock())
        # Whichever loop ends first takes its partner down with it
        self._move_task.add_done_callback(partial(self._on_loop_done, self._clock_task))
        self._clock_task.add_done_callback(partial(self._on_loop_done, self._move_task))
        logger.info("Session started (move every %.3fs)", self.config.move_interval)

    async def stop(self) -> None:
        """Cancel both tasks and wait until they have finished."""
        current = asyncio.current_task()
        tasks = [
            task
            for task in (self._move_task, self._clock_task)
            if task is not None and task is not current
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._move_task = None
        self._clock_task = None

    async def reset(self) -> GameState:
        """Stop the triggers, start a fresh game and restart both triggers."""
        await self.stop()
        state = self.game.reset()
        logger.info("Session reset (high score %d)", state.high_score)
        await self._publish("state_update", state)
        self.start()
        return state

    def set_direction(self, direction) -> GameState:
        """Apply a direction change right away; the next tick moves that way."""
        return self.game.set_direction(direction)

    def _on_loop_done(self, sibling: asyncio.Task, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error("Game loop task failed: %r", task.exception())
        if not sibling.done():
            sibling.cancel()

    async def _publish(self, event: str, state: GameState) -> None:
        if self.on_update is not None:
            await self.on_update(event, state)

    async def _run_movement(self) -> None:
        while True:
            await asyncio.sleep(self.config.move_interval)
            state = self.game.step()

            if state.game_over:
                if self._clock_task is not None:
                    self._clock_task.cancel()
                logger.info(
                    "Game over: length %d, high score %d, %ds played",
                    len(state.snake),
                    state.high_score,
                    state.time_played,
                )
                await self._publish("game_over", state)
                return

            await self._publish("state_update", state)

    async def _run_clock(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_interval)
            if self.game.game_over:
                return
            state = self.game.tick_clock()
            await self._publish("state_update", state)
