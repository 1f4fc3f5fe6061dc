import copy
import random
import threading
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple


class TileStatus(IntEnum):
    UNPRESSED = 0
    PRESSED = 1
    WINNING = 2


class Reason(str, Enum):
    GAME_IN_PROGRESS = 'game_in_progress'
    DUPLICATE_NAME = 'duplicate_name'
    ALREADY_JOINED = 'already_joined'
    ALREADY_IN_PROGRESS = 'already_in_progress'
    NOT_ENOUGH_PLAYERS = 'not_enough_players'
    NO_GAME_IN_PROGRESS = 'no_game_in_progress'
    OUT_OF_TURN = 'out_of_turn'
    OUT_OF_BOUNDS = 'out_of_bounds'
    ALREADY_PRESSED = 'already_pressed'


MESSAGES = {
    Reason.GAME_IN_PROGRESS: 'A game is already in progress.',
    Reason.DUPLICATE_NAME: 'This player has already joined the game. Please enter a different name.',
    Reason.ALREADY_JOINED: 'You have already joined the game.',
    Reason.ALREADY_IN_PROGRESS: 'A game is already in progress.',
    Reason.NOT_ENOUGH_PLAYERS: 'Not enough players to start a game.',
    Reason.NO_GAME_IN_PROGRESS: 'No game is in progress.',
    Reason.OUT_OF_TURN: 'It is not your turn.',
    Reason.OUT_OF_BOUNDS: 'That tile is not on the board.',
    Reason.ALREADY_PRESSED: 'That tile has already been pressed.',
}


class TransitionRejected(Exception):
    """A transition's precondition failed. Game state was not modified."""

    def __init__(self, reason: Reason):
        self.reason = reason
        self.message = MESSAGES[reason]
        super().__init__(f"{reason.value}: {self.message}")


class PressOutcome(Enum):
    TILE_PRESSED = 'tile_pressed'
    VICTORY = 'victory'


def empty_board(size: int) -> List[List[TileStatus]]:
    return [[TileStatus.UNPRESSED] * size for _ in range(size)]


@dataclass
class GameState:
    """Public part of the game state; everything here may be sent to clients."""
    game_in_progress: bool = False
    players: List[str] = field(default_factory=list)
    board: List[List[TileStatus]] = field(default_factory=list)
    current_player_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'GameInProgress': self.game_in_progress,
            'Players': list(self.players),
            'Board': [[int(t) for t in row] for row in self.board],
            'CurrentId': self.current_player_index,
        }


class GameStateStore:
    """Single authoritative game state.

    Every transition runs under ``lock`` (re-entrant, so callers may hold it
    across a transition and the broadcasts that follow). Rejected transitions
    raise ``TransitionRejected`` and leave state untouched. The winning tile is
    kept outside ``GameState`` so ``snapshot()`` can never leak it.
    """

    def __init__(self, board_size: int = 4, winning_tile: Optional[Tuple[int, int]] = None,
                 min_players: int = 1, room_id: str = 'lobby', rng: Optional[random.Random] = None):
        self.board_size = board_size
        self.min_players = max(1, min_players)
        self.lock = threading.RLock()
        self._pinned_tile = winning_tile
        self._rng = rng or random.Random()
        self.room_id = room_id
        self._state = GameState(board=empty_board(board_size))
        self._winning_tile: Optional[Tuple[int, int]] = None
        self._round_id = 0

    # ---- read side ----

    @property
    def in_progress(self) -> bool:
        return self._state.game_in_progress

    @property
    def players(self) -> Tuple[str, ...]:
        return tuple(self._state.players)

    @property
    def current_player(self) -> Optional[str]:
        idx = self._state.current_player_index
        if idx is None:
            return None
        return self._state.players[idx]

    @property
    def round_id(self) -> int:
        return self._round_id

    @property
    def winning_tile_pinned(self) -> bool:
        return self._pinned_tile is not None

    def snapshot(self) -> GameState:
        with self.lock:
            return copy.deepcopy(self._state)

    # ---- transitions ----

    def join(self, name: str) -> None:
        with self.lock:
            if self._state.game_in_progress:
                raise TransitionRejected(Reason.GAME_IN_PROGRESS)
            if name in self._state.players:
                raise TransitionRejected(Reason.DUPLICATE_NAME)
            self._state.players.append(name)

    def start(self) -> int:
        """Begin a round and return its round id (used to arm the watchdog)."""
        with self.lock:
            if self._state.game_in_progress:
                raise TransitionRejected(Reason.ALREADY_IN_PROGRESS)
            if len(self._state.players) < self.min_players:
                raise TransitionRejected(Reason.NOT_ENOUGH_PLAYERS)
            self._state.game_in_progress = True
            self._state.board = empty_board(self.board_size)
            self._state.current_player_index = self._rng.randrange(len(self._state.players))
            if self._pinned_tile is not None:
                self._winning_tile = self._pinned_tile
            else:
                self._winning_tile = (self._rng.randrange(self.board_size),
                                      self._rng.randrange(self.board_size))
            self._round_id += 1
            return self._round_id

    def press(self, player_name: Optional[str], x: int, y: int) -> PressOutcome:
        """Press tile (x, y) for ``player_name``.

        On VICTORY the tile is marked WINNING and the round is still running:
        the caller broadcasts, then calls ``reset()``.
        """
        with self.lock:
            state = self._state
            if not state.game_in_progress:
                raise TransitionRejected(Reason.NO_GAME_IN_PROGRESS)
            if player_name is None or player_name != self.current_player:
                raise TransitionRejected(Reason.OUT_OF_TURN)
            if not (0 <= x < self.board_size and 0 <= y < self.board_size):
                raise TransitionRejected(Reason.OUT_OF_BOUNDS)
            if state.board[y][x] != TileStatus.UNPRESSED:
                raise TransitionRejected(Reason.ALREADY_PRESSED)

            if (x, y) == self._winning_tile:
                state.board[y][x] = TileStatus.WINNING
                return PressOutcome.VICTORY

            state.board[y][x] = TileStatus.PRESSED
            state.current_player_index = (state.current_player_index + 1) % len(state.players)
            return PressOutcome.TILE_PRESSED

    def disconnect(self, player_name: Optional[str]) -> bool:
        """Drop a player from the roster. Returns True if this aborted a round.

        Unknown names (spectators) leave the roster and any running round alone.
        """
        with self.lock:
            if player_name is None or player_name not in self._state.players:
                return False
            self._state.players.remove(player_name)
            if self._state.game_in_progress:
                self.reset()
                return True
            return False

    def reset(self) -> None:
        # Board is left as-is; start() reinitializes it.
        with self.lock:
            self._state.game_in_progress = False
            self._state.current_player_index = None
            self._winning_tile = None
