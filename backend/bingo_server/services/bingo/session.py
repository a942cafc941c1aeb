"""In-memory session state: rooms, player profiles and live connections.

Connections are ephemeral (one per Socket.IO sid). Everything that must
survive a reconnect lives on the ``PlayerProfile``, keyed by the durable
player id, never by sid.
"""
import copy
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

ROLE_ADMIN = 'admin'
ROLE_PLAYER = 'player'

Card = List[List[Optional[int]]]


def new_player_id() -> str:
    """Opaque durable id: wall-clock millis plus 64 random bits."""
    return f"player_{int(time.time() * 1000)}_{secrets.token_hex(8)}"


@dataclass
class Connection:
    sid: str
    role: str = ROLE_PLAYER
    username: Optional[str] = None
    player_id: Optional[str] = None
    room_code: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class PlayerProfile:
    id: str
    name: str
    card: Optional[Card] = None
    sid: Optional[str] = None

    def to_dict(self):
        return {
            'playerId': self.id,
            'name': self.name,
            'bingoCard': self.card,
        }


@dataclass
class WinnerRecord:
    player_id: str
    player_name: str
    row_number: int
    numbers: List[int]
    card: Optional[Card]


@dataclass
class Room:
    code: str
    admin_sid: Optional[str] = None
    active_sids: Set[str] = field(default_factory=set)
    drawn_numbers: List[int] = field(default_factory=list)
    started: bool = False
    over: bool = False
    winner: Optional[WinnerRecord] = None
    notified_rows: Set[Tuple[str, int]] = field(default_factory=set)
    players: Dict[str, PlayerProfile] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def player_count(self) -> int:
        return len(self.active_sids)

    def find_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[PlayerProfile]:
        lowered = name.lower()
        for pid, profile in self.players.items():
            if pid != exclude_id and profile.name.lower() == lowered:
                return profile
        return None

    def roster(self):
        return [profile.to_dict() for profile in self.players.values()]

    def summary(self, closed_at: Optional[datetime] = None) -> dict:
        """History record for a finished room. Requires a winner."""
        closed_at = closed_at or datetime.now(timezone.utc)
        return {
            'roomId': self.code,
            'createdAt': self.created_at.isoformat(),
            'closedAt': closed_at.isoformat(),
            'winner': self.winner.player_name,
            'winnerRowNumber': self.winner.row_number,
            'winnerNumbers': list(self.winner.numbers),
            'winnerBingoCard': copy.deepcopy(self.winner.card),
            'totalPlayers': len(self.players),
            'totalNumbersDrawn': len(self.drawn_numbers),
        }

    def declare_winner(self, player_id: str, player_name: str, row_number: int, numbers: List[int]) -> None:
        if self.winner is not None:
            return
        profile = self.players.get(player_id)
        self.winner = WinnerRecord(
            player_id=player_id,
            player_name=player_name,
            row_number=row_number,
            numbers=list(numbers),
            card=copy.deepcopy(profile.card) if profile else None,
        )


class ConnectionDirectory:
    """Maps a live sid to whoever is currently using it."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def __len__(self):
        return len(self._connections)

    def get(self, sid: str) -> Optional[Connection]:
        return self._connections.get(sid)

    def register_admin(self, sid: str, username: str) -> Connection:
        conn = self._connections.get(sid)
        if conn is None:
            conn = Connection(sid=sid)
            self._connections[sid] = conn
        conn.role = ROLE_ADMIN
        conn.username = username
        return conn

    def bind_player(self, sid: str, username: str, player_id: str, room_code: str) -> Connection:
        # An admin joining as a player keeps its role
        conn = self._connections.get(sid)
        if conn is None:
            conn = Connection(sid=sid, role=ROLE_PLAYER)
            self._connections[sid] = conn
        conn.username = username
        conn.player_id = player_id
        conn.room_code = room_code
        return conn

    def unbind_room(self, room_code: str) -> None:
        for conn in self._connections.values():
            if conn.room_code == room_code:
                conn.room_code = None

    def remove(self, sid: str) -> Optional[Connection]:
        return self._connections.pop(sid, None)

    def clear(self) -> None:
        self._connections.clear()
