from typing import Optional, Tuple

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def parse_tile(value, board_size: int) -> Optional[Tuple[int, int]]:
    """Parse a pinned winning tile from config.

    Accepts ``None``, an ``"x,y"`` string or an ``(x, y)`` pair and raises
    ``ValueError`` when the coordinates are not integers on the board.
    """
    if value is None or value == '':
        return None
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(',')]
    else:
        parts = list(value)
    if len(parts) != 2:
        raise ValueError(f"WINNING_TILE must be 'x,y', got {value!r}")
    try:
        x, y = int(parts[0]), int(parts[1])
    except (TypeError, ValueError):
        raise ValueError(f"WINNING_TILE must hold two integers, got {value!r}")
    if not (0 <= x < board_size and 0 <= y < board_size):
        raise ValueError(f"WINNING_TILE {value!r} is outside a {board_size}x{board_size} board")
    return x, y


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from findme.main import main
    flask_app.register_blueprint(main)

    # One store, registry and watchdog per app; the handler owns references
    # to all three and is exposed on app.extensions for tests and routes.
    from findme.services.game import ConnectionRegistry, GameStateStore, TurnWatchdog
    from findme.socketio_events import ProtocolHandler

    board_size = int(flask_app.config.get('BOARD_SIZE', 4))
    store = GameStateStore(
        board_size=board_size,
        winning_tile=parse_tile(flask_app.config.get('WINNING_TILE'), board_size),
        min_players=int(flask_app.config.get('MIN_PLAYERS', 1)),
        room_id=flask_app.config.get('ROOM_ID', 'lobby'),
    )
    handler = ProtocolHandler(
        store,
        ConnectionRegistry(),
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'),
        report_rejections=bool(flask_app.config.get('REPORT_REJECTIONS')),
    )
    handler.watchdog = TurnWatchdog(
        flask_app,
        store,
        timeout_sec=float(flask_app.config.get('ROUND_TIMEOUT_SEC', 30)),
        on_expire=handler.broadcast_timeout_reset,
    )
    handler.register(socketio)
    flask_app.extensions['findme'] = handler

    flask_app.logger.info(
        f"[init] room={store.room_id} board={board_size} pinned_tile={store.winning_tile_pinned} "
        f"timeout={handler.watchdog.timeout_sec}s"
    )
    return flask_app
