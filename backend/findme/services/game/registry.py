from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class Connection:
    sid: str
    room_id: str = 'lobby'
    identity: Optional[str] = None


class ConnectionRegistry:
    """Live socket sessions and the player name each one has claimed.

    Name uniqueness is enforced by GameStateStore.join, not here.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, sid: str) -> bool:
        return sid in self._connections

    def connect(self, sid: str, room_id: str = 'lobby') -> Connection:
        conn = Connection(sid=sid, room_id=room_id)
        self._connections[sid] = conn
        return conn

    def identity(self, sid: str) -> Optional[str]:
        conn = self._connections.get(sid)
        return conn.identity if conn else None

    def claim(self, sid: str, name: str) -> None:
        conn = self._connections.get(sid)
        if conn is None:
            raise KeyError(f"unknown connection {sid}")
        if conn.identity is not None:
            raise ValueError(f"connection {sid} already claimed {conn.identity!r}")
        conn.identity = name

    def clear_identity(self, sid: str) -> Optional[str]:
        """Forget the claimed name but keep the connection (voluntary exit)."""
        conn = self._connections.get(sid)
        if conn is None:
            return None
        name, conn.identity = conn.identity, None
        return name

    def release(self, sid: str) -> Optional[str]:
        """Remove the connection and return the identity it held, if any."""
        conn = self._connections.pop(sid, None)
        return conn.identity if conn else None

    def identities(self) -> List[str]:
        return [c.identity for c in self._connections.values() if c.identity is not None]
