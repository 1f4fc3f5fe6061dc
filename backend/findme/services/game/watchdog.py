from typing import Callable

from findme import socketio
from .state import GameStateStore


class TurnWatchdog:
    """Single-shot round timer.

    Armed once per round by the protocol handler with the round id that
    ``GameStateStore.start`` returned. When it fires it resets the round and
    calls ``on_expire`` (which broadcasts GameReset) only if that same round is
    still running; a round that already ended by victory or disconnect, or
    that was replaced by a newer round, is left alone.
    """

    def __init__(self, app, store: GameStateStore, timeout_sec: float, on_expire: Callable[[], None]):
        self.app = app
        self.store = store
        self.timeout_sec = timeout_sec
        self.on_expire = on_expire

    def arm(self, round_id: int) -> None:
        app = self.app
        if app.config.get('TESTING') and not app.config.get('ENABLE_WATCHDOG_IN_TESTS'):
            app.logger.info(f"[watchdog-skip] round={round_id} testing mode")
            return
        app.logger.info(f"[watchdog-arm] round={round_id} timeout={self.timeout_sec}s")
        socketio.start_background_task(self._worker, round_id, self.timeout_sec)

    def _worker(self, round_id: int, delay: float) -> None:
        socketio.sleep(delay)
        with self.app.app_context():
            self.expire(round_id)

    def expire(self, round_id: int) -> bool:
        """Fire for ``round_id``. Returns True if the round was reset."""
        with self.store.lock:
            if not self.store.in_progress or self.store.round_id != round_id:
                self.app.logger.info(
                    f"[watchdog-abort] round={round_id} current_round={self.store.round_id} "
                    f"in_progress={self.store.in_progress}"
                )
                return False
            self.app.logger.info(f"[watchdog-fire] round={round_id} resetting")
            self.store.reset()
            self.on_expire()
            return True
