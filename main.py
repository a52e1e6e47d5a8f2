import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from game.config import GameConfig, load_config
from game.session import GameSession, SessionError
from game.state import GameState, InvalidDirectionError

logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).parent
STATIC_DIR = BASE_DIR / "static"


class BoardConfig(BaseModel):
    """Board settings the page needs to draw the grid."""

    board_size: int
    move_interval: float
    time_interval: float


async def send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"type": "error", "message": message})


def create_app(config: Optional[GameConfig] = None) -> FastAPI:
    """Build the FastAPI app serving the page and the game WebSocket."""
    config = config or load_config()
    app = FastAPI(title="Snake Arcade")
    app.state.config = config

    @app.get("/")
    async def serve_index():
        """Serve the main index.html file."""
        index_path = STATIC_DIR / "index.html"
        if index_path.exists():
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/config", response_model=BoardConfig)
    async def get_config():
        """Return the board size and tick intervals."""
        return BoardConfig(
            board_size=config.board_size,
            move_interval=config.move_interval,
            time_interval=config.time_interval,
        )

    @app.websocket("/ws/game")
    async def websocket_game(websocket: WebSocket):
        """WebSocket endpoint for real-time game communication."""
        await websocket.accept()

        session: Optional[GameSession] = None

        async def send_state(event: str, state: GameState) -> None:
            message = {"type": event, "state": state.to_dict()}
            if event == "game_over":
                message["final_length"] = len(state.snake)
                message["high_score"] = state.high_score
            await websocket.send_json(message)

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await send_error(websocket, "Invalid JSON")
                    continue

                msg_type = message.get("type") if isinstance(message, dict) else None

                try:
                    if msg_type == "start_game":
                        # Stop any existing game loop
                        if session is not None:
                            await session.stop()

                        session = GameSession(config, on_update=send_state)
                        await send_state("state_update", session.state)
                        session.start()

                    elif msg_type == "action":
                        if session is None:
                            raise SessionError("No game in progress, send start_game first")
                        before = session.state.direction
                        state = session.set_direction(message.get("action"))
                        if state.direction != before:
                            await send_state("state_update", state)

                    elif msg_type == "reset":
                        if session is None:
                            raise SessionError("No game in progress, send start_game first")
                        await session.reset()

                    else:
                        await send_error(websocket, f"Unknown message type: {msg_type!r}")

                except (InvalidDirectionError, SessionError) as e:
                    logger.warning("Rejected %s message: %s", msg_type, e)
                    await send_error(websocket, str(e))

        except WebSocketDisconnect:
            logger.info("Client disconnected")
        finally:
            if session is not None:
                await session.stop()

    # Mount static files (after all routes)
    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


def find_available_port(start_port: int = 8000, max_attempts: int = 100) -> int:
    """Find an available port starting from start_port.

    Args:
        start_port: Port number to start searching from
        max_attempts: Maximum number of ports to try

    Returns:
        An available port number

    Raises:
        RuntimeError: If no available port is found
    """
    import socket

    for port in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("0.0.0.0", port))
                return port
        except OSError:
            continue

    raise RuntimeError(f"No available port found in range {start_port}-{start_port + max_attempts - 1}")


app = create_app()
