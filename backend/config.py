import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Browser origins allowed to open a socket (comma separated)
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Single room for now; broadcasts target game:<ROOM_ID>
    ROOM_ID = os.environ.get('ROOM_ID', 'lobby')
    BOARD_SIZE = int(os.environ.get('BOARD_SIZE', '4'))
    # Optional "x,y" to pin the winning tile while debugging. Unset = random.
    WINNING_TILE = os.environ.get('WINNING_TILE') or None
    # Whole-round watchdog (seconds)
    ROUND_TIMEOUT_SEC = int(os.environ.get('ROUND_TIMEOUT_SEC', '30'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '1'))
    # Send a private Rejected event for dropped press/start/malformed messages
    REPORT_REJECTIONS = os.environ.get('REPORT_REJECTIONS', '0').lower() in ('1', 'true', 'yes')
