"""
Tests for game/session.py - the movement and clock triggers.

Intervals are shrunk so the loops run in milliseconds.
"""

import asyncio
import random

import pytest

from game.config import GameConfig
from game.session import GameSession, SessionError
from game.state import Direction


FAST = GameConfig(move_interval=0.01, time_interval=0.02)
SLOW_MOVES = GameConfig(move_interval=10.0, time_interval=0.01)


class Recorder:
    """Collects (event, state) pairs published by a session."""

    def __init__(self):
        self.events = []

    async def __call__(self, event, state):
        self.events.append((event, state))

    def of_type(self, event):
        return [state for name, state in self.events if name == event]


async def wait_until(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


class TestGameSession:
    """Tests for GameSession."""

    def test_initial_state_before_start(self):
        """A new session holds a fresh game and no live tasks."""
        session = GameSession(FAST, rng=random.Random(0))
        assert session.state.snake == [(7, 7)]
        assert session.running is False

    def test_runs_until_wall_and_stops_both_tasks(self):
        """Heading right, the snake hits the wall and both triggers end."""

        async def scenario():
            recorder = Recorder()
            session = GameSession(FAST, on_update=recorder, rng=random.Random(1))
            session.start()
            assert session.running is True

            await wait_until(lambda: recorder.of_type("game_over"))
            await wait_until(lambda: not session.running)

            published = len(recorder.events)
            await asyncio.sleep(0.1)
            return session, recorder, published

        session, recorder, published = asyncio.run(scenario())

        assert session.state.game_over is True
        assert len(recorder.of_type("game_over")) == 1
        # Nothing is published once the game has ended
        assert len(recorder.events) == published
        assert all(0 <= x < 15 and 0 <= y < 15 for x, y in session.state.snake)

    def test_clock_counts_seconds(self):
        """The clock trigger increments time_played independently of moves."""

        async def scenario():
            session = GameSession(SLOW_MOVES, rng=random.Random(2))
            session.start()
            await wait_until(lambda: session.state.time_played >= 3)
            await session.stop()
            return session

        session = asyncio.run(scenario())
        assert session.state.time_played >= 3
        assert session.state.snake == [(7, 7)]
        assert session.running is False

    def test_start_twice_raises(self):
        """Only one pair of triggers may be live."""

        async def scenario():
            session = GameSession(SLOW_MOVES, rng=random.Random(3))
            session.start()
            try:
                with pytest.raises(SessionError):
                    session.start()
            finally:
                await session.stop()

        asyncio.run(scenario())

    def test_start_after_game_over_raises(self):
        """A finished game must be reset before it runs again."""

        async def scenario():
            session = GameSession(FAST, rng=random.Random(4))
            session.start()
            await wait_until(lambda: session.state.game_over and not session.running)
            with pytest.raises(SessionError):
                session.start()

        asyncio.run(scenario())

    def test_reset_replaces_task_pair(self):
        """Reset tears down the old triggers before starting new ones."""

        async def scenario():
            recorder = Recorder()
            session = GameSession(SLOW_MOVES, on_update=recorder, rng=random.Random(5))
            session.start()
            old_tasks = (session._move_task, session._clock_task)
            await wait_until(lambda: session.state.time_played >= 1)

            state = await session.reset()
            new_tasks = (session._move_task, session._clock_task)

            result = {
                "old_done": all(task.done() for task in old_tasks),
                "new_live": all(not task.done() for task in new_tasks),
                "state": state,
                "first_event": recorder.events[-1],
            }
            await session.stop()
            return result

        result = asyncio.run(scenario())
        assert result["old_done"] is True
        assert result["new_live"] is True
        assert result["state"].time_played == 0
        assert result["state"].snake == [(7, 7)]
        assert result["first_event"][0] == "state_update"

    def test_reset_after_game_over_restarts(self):
        """Reset brings a finished game back to running."""

        async def scenario():
            session = GameSession(FAST, rng=random.Random(6))
            session.start()
            await wait_until(lambda: session.state.game_over and not session.running)
            await session.reset()
            running = session.running
            game_over = session.state.game_over
            await session.stop()
            return running, game_over

        running, game_over = asyncio.run(scenario())
        assert running is True
        assert game_over is False

    def test_direction_change_seen_by_next_tick(self):
        """A turn applied between ticks steers the next move."""

        async def scenario():
            session = GameSession(GameConfig(move_interval=0.05), rng=random.Random(7))
            session.set_direction("up")
            session.start()
            await wait_until(lambda: session.state.head != (7, 7))
            head = session.state.head
            await session.stop()
            return head

        assert asyncio.run(scenario()) == (7, 6)

    def test_failed_publish_stops_both_tasks(self):
        """If a loop dies on a publish error, its partner is cancelled too."""

        async def failing_update(event, state):
            if state.head != (7, 7):
                raise ConnectionError("socket closed")

        async def scenario():
            session = GameSession(
                GameConfig(move_interval=0.01, time_interval=0.05),
                on_update=failing_update,
                rng=random.Random(9),
            )
            session.start()
            move_task, clock_task = session._move_task, session._clock_task
            await wait_until(lambda: not session.running)
            time_played = session.state.time_played
            await asyncio.sleep(0.1)
            result = {
                "move_failed": isinstance(move_task.exception(), ConnectionError),
                "clock_cancelled": clock_task.cancelled(),
                "time_frozen": session.state.time_played == time_played,
            }
            await session.stop()
            return result

        result = asyncio.run(scenario())
        assert result == {"move_failed": True, "clock_cancelled": True, "time_frozen": True}

    def test_reverse_direction_ignored(self):
        """The session applies the reverse guard."""
        session = GameSession(FAST, rng=random.Random(8))
        assert session.set_direction(Direction.LEFT).direction == Direction.RIGHT

    def test_stop_without_start(self):
        """Stopping an idle session is harmless."""
        session = GameSession(FAST)
        asyncio.run(session.stop())
        assert session.running is False
