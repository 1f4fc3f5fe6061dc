from typing import Any, Optional

from flask import current_app, request
from flask_socketio import emit, join_room
from pydantic import ValidationError

from findme import socketio
from findme.schemas import JoinPayload, PressPayload
from findme.services.game import (
    ConnectionRegistry,
    GameStateStore,
    PressOutcome,
    Reason,
    TransitionRejected,
)

# Client -> server
JOIN = 'join'
START = 'start'
PRESS = 'press'
EXIT = 'exit'

# Server -> client
CONNECT_RESULT = 'ConnectResult'
JOIN_RESULT = 'JoinResult'
PLAYER_LIST_UPDATE = 'PlayerListUpdate'
GAME_START = 'GameStart'
TILE_PRESS = 'TilePress'
VICTORY = 'Victory'
GAME_RESET = 'GameReset'
REJECTED = 'Rejected'

PLAYER_LEFT_MESSAGE = 'A player left the game.'
TIMEOUT_MESSAGE = 'Time ran out! Nobody found the tile.'


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


class ProtocolHandler:
    """Dispatches client events onto the game state and fans out the results.

    One instance serves every connection. Each handler holds the store lock
    across the transition and the broadcasts it causes, so all clients see
    updates in the order transitions were applied.
    """

    def __init__(self, store: GameStateStore, registry: ConnectionRegistry,
                 namespace: str = '/', report_rejections: bool = False):
        self.store = store
        self.registry = registry
        self.namespace = namespace
        self.report_rejections = report_rejections
        self.watchdog = None

    @property
    def room(self) -> str:
        return f"game:{self.store.room_id}"

    def register(self, sio) -> None:
        """Register Socket.IO event handlers on ``self.namespace``."""
        sio.on_event('connect', self.on_connect, namespace=self.namespace)
        sio.on_event('disconnect', self.on_disconnect, namespace=self.namespace)
        sio.on_event(JOIN, self.on_join, namespace=self.namespace)
        sio.on_event(START, self.on_start, namespace=self.namespace)
        sio.on_event(PRESS, self.on_press, namespace=self.namespace)
        sio.on_event(EXIT, self.on_exit, namespace=self.namespace)

    # ---- outbound helpers ----

    def _payload(self, **extra: Any) -> dict:
        payload = dict(extra)
        payload['state'] = self.store.snapshot().to_dict()
        return payload

    def _broadcast(self, event: str, **extra: Any) -> None:
        current_app.logger.info(f"[send] {event} room={self.room}")
        # socketio.emit so this also works from the watchdog's background task
        socketio.emit(event, self._payload(**extra), to=self.room, namespace=self.namespace)

    def _reply(self, event: str, **extra: Any) -> None:
        current_app.logger.info(f"[send] {event} sid={_get_sid()}")
        emit(event, self._payload(**extra))

    def _reject(self, event: str, reason: Optional[Reason], message: str) -> None:
        if not self.report_rejections:
            return
        emit(REJECTED, {
            'event': event,
            'reason': reason.value if reason else 'invalid_payload',
            'message': message,
        })

    def _drop_invalid(self, event: str, exc: ValidationError) -> None:
        current_app.logger.warning(f"[{event}-invalid] sid={_get_sid()} errors={exc.error_count()}")
        self._reject(event, None, 'Invalid message format.')

    # ---- inbound events ----

    def on_connect(self, auth=None):
        sid = _get_sid()
        current_app.logger.info(f"[recv] connect sid={sid}")
        with self.store.lock:
            self.registry.connect(sid, room_id=self.store.room_id)
            join_room(self.room)
            self._reply(CONNECT_RESULT)

    def on_disconnect(self, reason=None):
        sid = _get_sid()
        current_app.logger.info(f"[recv] disconnect sid={sid} reason={reason}")
        # Registry and roster change together so a join in flight on another
        # thread never claims a seat for a connection that is already gone.
        with self.store.lock:
            self._leave(self.registry.release(sid))

    def on_exit(self, data=None):
        sid = _get_sid()
        current_app.logger.info(f"[recv] {EXIT} sid={sid}")
        with self.store.lock:
            self._leave(self.registry.clear_identity(sid))

    def _leave(self, name: Optional[str]) -> None:
        with self.store.lock:
            aborted = self.store.disconnect(name)
            if aborted:
                current_app.logger.info(f"[reset] player={name!r} left mid-round")
                self._broadcast(GAME_RESET, message=PLAYER_LEFT_MESSAGE)
            else:
                self._broadcast(PLAYER_LIST_UPDATE)

    def on_join(self, data=None):
        sid = _get_sid()
        current_app.logger.info(f"[recv] {JOIN} sid={sid}")
        try:
            payload = JoinPayload.model_validate(data)
        except ValidationError as exc:
            # Malformed joins get no JoinResult
            self._drop_invalid(JOIN, exc)
            return

        with self.store.lock:
            try:
                if self.registry.identity(sid) is not None:
                    raise TransitionRejected(Reason.ALREADY_JOINED)
                self.store.join(payload.name)
            except TransitionRejected as exc:
                current_app.logger.info(f"[join-reject] sid={sid} name={payload.name!r} reason={exc.reason.value}")
                self._reply(JOIN_RESULT, success=False, message=exc.message)
                return
            self.registry.claim(sid, payload.name)
            self._reply(JOIN_RESULT, success=True, name=payload.name)
            self._broadcast(PLAYER_LIST_UPDATE)

    def on_start(self, data=None):
        current_app.logger.info(f"[recv] {START} sid={_get_sid()}")
        with self.store.lock:
            try:
                round_id = self.store.start()
            except TransitionRejected as exc:
                current_app.logger.info(f"[start-reject] reason={exc.reason.value}")
                self._reject(START, exc.reason, exc.message)
                return
            current_app.logger.info(f"[start] round={round_id} players={len(self.store.players)}")
            self._broadcast(GAME_START)
            if self.watchdog is not None:
                self.watchdog.arm(round_id)

    def on_press(self, data=None):
        sid = _get_sid()
        current_app.logger.info(f"[recv] {PRESS} sid={sid}")
        try:
            payload = PressPayload.model_validate(data)
        except ValidationError as exc:
            self._drop_invalid(PRESS, exc)
            return

        with self.store.lock:
            name = self.registry.identity(sid)
            try:
                outcome = self.store.press(name, payload.x, payload.y)
            except TransitionRejected as exc:
                current_app.logger.info(
                    f"[press-reject] player={name!r} x={payload.x} y={payload.y} reason={exc.reason.value}"
                )
                self._reject(PRESS, exc.reason, exc.message)
                return

            if outcome is PressOutcome.VICTORY:
                current_app.logger.info(f"[victory] player={name!r} round={self.store.round_id}")
                self._broadcast(VICTORY)
                self.store.reset()
                self._broadcast(PLAYER_LIST_UPDATE)
            else:
                self._broadcast(TILE_PRESS)

    def broadcast_timeout_reset(self) -> None:
        """Watchdog callback; the store has already been reset."""
        self._broadcast(GAME_RESET, message=TIMEOUT_MESSAGE)
