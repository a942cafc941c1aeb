"""Session registry: owns every live room and connection.

All mutations run under one re-entrant lock so Socket.IO handlers and
background win checks never interleave on the same state. The registry does
no network I/O; handlers turn its return values into outbound events.
"""
import copy
import logging
import random
import string
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .draw import POOL_SIZE, pick_number, reveal_time
from .errors import (
    GameOver,
    InvalidRequest,
    NameTaken,
    NotAuthorized,
    PoolExhausted,
    RoomNotFound,
    ValidationError,
)
from .rows import apply_completions, scan_completed_rows
from .session import ConnectionDirectory, PlayerProfile, Room, new_player_id

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6

MSG_CLOSED_BY_ADMIN = 'Room has been closed'
MSG_CLOSED_GAME_OVER = 'Game is over. Room is closing.'


def generate_room_code(rng=None) -> str:
    rng = rng or random
    return ''.join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


@dataclass
class DetachResult:
    room_code: str
    was_admin: bool
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    player_count: int = 0
    admin_sid: Optional[str] = None
    roster: Optional[List[dict]] = None


@dataclass
class CreateResult:
    room: Room
    reconnected: bool
    drawn_numbers: List[int]
    left: Optional[DetachResult] = None


@dataclass
class JoinResult:
    room: Room
    profile: PlayerProfile
    is_admin: bool
    player_count: int
    drawn_numbers: List[int]
    left: Optional[DetachResult] = None


@dataclass
class DrawResult:
    room_code: str
    number: int
    start_time: int
    drawn_numbers: List[int]


@dataclass
class CloseResult:
    room_code: str
    message: str
    archived: bool


def _validate_card(card):
    if card is None:
        return None
    if not isinstance(card, list):
        raise InvalidRequest('Invalid bingo card')
    for row in card:
        if not isinstance(row, list):
            raise InvalidRequest('Invalid bingo card')
        for slot in row:
            if slot is not None and (isinstance(slot, bool) or not isinstance(slot, int)):
                raise InvalidRequest('Invalid bingo card')
    return copy.deepcopy(card)


class SessionRegistry:
    def __init__(self, archiver=None, rng: Optional[random.Random] = None,
                 code_factory: Optional[Callable[[], str]] = None,
                 reveal_lead_ms: int = 500):
        self.archiver = archiver
        self.rng = rng or random.SystemRandom()
        self.code_factory = code_factory or (lambda: generate_room_code(self.rng))
        self.reveal_lead_ms = reveal_lead_ms
        self.connections = ConnectionDirectory()
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()

    # ---- lookups ----

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    def get_room(self, code: str) -> Optional[Room]:
        return self._find(code)

    def _find(self, code) -> Optional[Room]:
        # Codes come straight off the wire
        if not isinstance(code, str):
            return None
        return self._rooms.get(code)

    def roster(self, code: str) -> List[dict]:
        with self._lock:
            room = self._find(code)
            return room.roster() if room else []

    # ---- admin ----

    def login_admin(self, sid: str, username: str):
        with self._lock:
            return self.connections.register_admin(sid, username)

    def create_room(self, sid: str, existing_code: Optional[str] = None) -> CreateResult:
        with self._lock:
            conn = self.connections.get(sid)
            if conn is None or not conn.is_admin:
                raise NotAuthorized('Only admins can create rooms')
            if not conn.username:
                conn.username = 'Admin'

            room = self._find(existing_code)
            if room is not None and room.admin_sid is None:
                left = self._leave_for(conn, room.code)
                room.admin_sid = sid
                room.active_sids.add(sid)
                conn.room_code = room.code
                logger.info(f"[room-rebind] room={room.code} admin={conn.username}")
                return CreateResult(room=room, reconnected=True,
                                    drawn_numbers=list(room.drawn_numbers), left=left)

            left = self._leave_for(conn, None)
            code = self.code_factory()
            while code in self._rooms:
                code = self.code_factory()
            room = Room(code=code, admin_sid=sid, active_sids={sid})
            self._rooms[code] = room
            conn.room_code = code
            logger.info(f"[room-create] room={code} admin={conn.username} sid={sid}")
            return CreateResult(room=room, reconnected=False, drawn_numbers=[], left=left)

    # ---- players ----

    def join_room(self, sid: str, code: str, name: Optional[str],
                  prior_player_id: Optional[str] = None) -> JoinResult:
        with self._lock:
            room = self._find(code)
            if room is None:
                raise RoomNotFound()
            if not isinstance(prior_player_id, str):
                prior_player_id = None
            trimmed = (name or '').strip() if isinstance(name, str) else ''
            if not trimmed:
                raise ValidationError()
            if room.find_name(trimmed, exclude_id=prior_player_id) is not None:
                raise NameTaken()

            conn = self.connections.get(sid)
            left = self._leave_for(conn, code) if conn is not None else None

            profile = room.players.get(prior_player_id) if prior_player_id else None
            if profile is None:
                profile = PlayerProfile(id=new_player_id(), name=trimmed, sid=sid)
                room.players[profile.id] = profile
            else:
                profile.name = trimmed
                profile.sid = sid

            conn = self.connections.bind_player(sid, trimmed, profile.id, code)
            room.active_sids.add(sid)
            logger.info(f"[room-join] room={code} player={profile.id} name={trimmed}")
            return JoinResult(
                room=room,
                profile=profile,
                is_admin=conn.is_admin,
                player_count=room.player_count,
                drawn_numbers=list(room.drawn_numbers),
                left=left,
            )

    def submit_card(self, sid: str, code: str, card, player_id: Optional[str] = None):
        """Store a player's card. Returns (room, profile)."""
        with self._lock:
            conn = self.connections.get(sid)
            room = self._find(code)
            if conn is None or room is None or sid not in room.active_sids:
                raise InvalidRequest()
            card = _validate_card(card)
            # The id bound at join wins over whatever the payload claims
            actual_id = conn.player_id or player_id
            if not actual_id or not isinstance(actual_id, str):
                raise InvalidRequest()
            profile = room.players.get(actual_id)
            if profile is None:
                profile = PlayerProfile(id=actual_id, name=conn.username or 'Player', sid=sid)
                room.players[actual_id] = profile
            profile.card = card
            logger.info(f"[card] room={code} player={actual_id} rows={len(card or [])}")
            return room, profile

    # ---- draws ----

    def draw_number(self, sid: str) -> DrawResult:
        with self._lock:
            conn = self.connections.get(sid)
            if conn is None or not conn.is_admin or not conn.room_code:
                raise NotAuthorized('Only room admin can draw numbers')
            room = self._rooms.get(conn.room_code)
            if room is None:
                raise RoomNotFound()
            if room.admin_sid != sid:
                raise NotAuthorized('Only room admin can draw numbers')
            if room.over:
                raise GameOver()
            if len(room.drawn_numbers) >= POOL_SIZE:
                raise PoolExhausted()

            number = pick_number(room.drawn_numbers, self.rng)
            room.drawn_numbers.append(number)
            room.started = True
            logger.info(f"[draw] room={room.code} number={number} count={len(room.drawn_numbers)}")
            return DrawResult(
                room_code=room.code,
                number=number,
                start_time=reveal_time(self.reveal_lead_ms),
                drawn_numbers=list(room.drawn_numbers),
            )

    def check_rows(self, code: str) -> Optional[List[dict]]:
        """Run one win-detection pass against the room's current draws.

        Returns None when the room is gone, otherwise the newly completed rows.
        """
        with self._lock:
            room = self._find(code)
            if room is None:
                return None
            completions = scan_completed_rows(room)
            apply_completions(room, completions)
            if completions:
                logger.info(f"[win-check] room={code} completions={len(completions)} winner={room.winner.player_name}")
            return completions

    # ---- teardown ----

    def close_room(self, sid: str, code: str) -> CloseResult:
        with self._lock:
            room = self._find(code)
            if room is None:
                raise RoomNotFound()
            conn = self.connections.get(sid)
            is_room_admin = conn is not None and conn.is_admin and room.admin_sid == sid
            if is_room_admin:
                message = MSG_CLOSED_BY_ADMIN
            elif room.over:
                message = MSG_CLOSED_GAME_OVER
            else:
                raise NotAuthorized('Only the room admin can close the room')

            archived = self._archive(room)
            del self._rooms[code]
            self.connections.unbind_room(code)
            logger.info(f"[room-close] room={code} admin={is_room_admin} archived={archived}")
            return CloseResult(room_code=code, message=message, archived=archived)

    def detach(self, sid: str) -> Optional[DetachResult]:
        with self._lock:
            conn = self.connections.remove(sid)
            if conn is None:
                return None
            return self._release(conn)

    def _leave_for(self, conn, target_code: Optional[str]) -> Optional[DetachResult]:
        """Release the connection's current room unless it is ``target_code``.

        A connection belongs to at most one room; moving it elsewhere must
        free the admin slot, presence and profile link it held.
        """
        if not conn.room_code or conn.room_code == target_code:
            return None
        left = self._release(conn)
        conn.room_code = None
        conn.player_id = None
        return left

    def _release(self, conn) -> Optional[DetachResult]:
        sid = conn.sid
        room = self._rooms.get(conn.room_code) if conn.room_code else None
        if room is None:
            return None
        room.active_sids.discard(sid)
        if conn.player_id:
            profile = room.players.get(conn.player_id)
            if profile is not None and profile.sid == sid:
                profile.sid = None

        if conn.is_admin and room.admin_sid == sid:
            room.admin_sid = None
            logger.info(f"[admin-left] room={room.code} kept alive")
            return DetachResult(room_code=room.code, was_admin=True, player_count=room.player_count)

        if not conn.player_id:
            return None
        logger.info(f"[player-left] room={room.code} player={conn.player_id}")
        return DetachResult(
            room_code=room.code,
            was_admin=False,
            player_id=conn.player_id,
            player_name=conn.username,
            player_count=room.player_count,
            admin_sid=room.admin_sid,
            roster=room.roster(),
        )

    def shutdown(self) -> int:
        """Archive finished rooms and drop all state. Returns rooms archived."""
        with self._lock:
            archived = 0
            for room in list(self._rooms.values()):
                if self._archive(room):
                    archived += 1
            self._rooms.clear()
            self.connections.clear()
            logger.info(f"[shutdown] archived={archived}")
            return archived

    def _archive(self, room: Room) -> bool:
        if not (room.over and room.winner) or self.archiver is None:
            return False
        summary = room.summary(datetime.now(timezone.utc))
        return bool(self.archiver.append(summary))
