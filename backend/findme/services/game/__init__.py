"""Game domain services: authoritative state, connections and the round timer.

This package contains the game mechanics that socket handlers drive,
keeping transport concerns separated from the rules of a round.
"""

from .registry import Connection, ConnectionRegistry
from .state import (
    GameState,
    GameStateStore,
    PressOutcome,
    Reason,
    TileStatus,
    TransitionRejected,
)
from .watchdog import TurnWatchdog

__all__ = [
    'Connection',
    'ConnectionRegistry',
    'GameState',
    'GameStateStore',
    'PressOutcome',
    'Reason',
    'TileStatus',
    'TransitionRejected',
    'TurnWatchdog',
]
