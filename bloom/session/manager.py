"""
Room Manager - Creates and manages game rooms.

LIFECYCLE:
1. A client creates a room (6-character id)
2. Players join; each join takes the next seat index
3. Someone starts the game; the room owns the GameState from then on
4. Seats submit actions through the room's GameLoop
5. The room is deleted when its last human leaves, or on request

PERSISTENCE RULES:
- Rooms live in memory only
- Nothing survives a restart

CONCURRENCY:
- Every room carries its own lock; all mutation of the room or its
  GameState happens while holding it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import string
import threading
import time

from ..engine_core.state import GameState
from ..bots import BotPolicy, GreedyPolicy


logger = logging.getLogger(__name__)

ROOM_ID_LENGTH = 6
ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits


class RoomState(Enum):
    """State of a game room."""
    WAITING = "waiting"  # Seats filling, no game yet
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Final scoreboard applied


class RoomError(Exception):
    """A room operation that cannot be carried out."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class RoomNotFoundError(RoomError):
    def __init__(self, room_id: str):
        super().__init__(f"No such room: {room_id}", "ROOM_NOT_FOUND")
        self.room_id = room_id


@dataclass
class Seat:
    """
    One seat at the table.

    The seat index is the player id inside the GameState. A seat with a
    policy is played by that bot.
    """
    index: int
    name: str
    policy: BotPolicy | None = None
    left: bool = False

    @property
    def is_bot(self) -> bool:
        return self.policy is not None


@dataclass
class Room:
    """
    An in-memory game room.

    Contains:
    - The seats, in join order
    - The GameState once the game starts
    - A lock serializing every mutation
    """
    room_id: str
    created_at: float
    state: RoomState = RoomState.WAITING
    seats: list[Seat] = field(default_factory=list)
    game_state: GameState | None = None
    finalized: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def roster(self) -> list[str]:
        """Names of the seats still present."""
        return [seat.name for seat in self.seats if not seat.left]

    def human_seats(self) -> list[Seat]:
        return [seat for seat in self.seats if not seat.is_bot and not seat.left]

    def get_seat(self, index: int) -> Seat | None:
        if 0 <= index < len(self.seats):
            return self.seats[index]
        return None

    def policy_for(self, index: int) -> BotPolicy | None:
        """Bot policy for a player index, or None for a human seat."""
        seat = self.get_seat(index)
        return seat.policy if seat else None

    def is_human_turn(self) -> bool:
        """Check if the current player is a human seat."""
        if not self.game_state or self.game_state.is_over:
            return False
        return self.policy_for(self.game_state.current_player_idx) is None


class RoomManager:
    """
    Manages game rooms.

    Responsibilities:
    - Create rooms with unique ids
    - Seat players
    - Remove rooms once empty

    No persistence - rooms are in-memory only.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()
        self._rng = rng or random.Random()

    def _new_room_id(self) -> str:
        while True:
            room_id = "".join(self._rng.choice(ROOM_ID_ALPHABET) for _ in range(ROOM_ID_LENGTH))
            if room_id not in self._rooms:
                return room_id

    def create_room(self) -> Room:
        """Create an empty room waiting for players."""
        with self._lock:
            room = Room(room_id=self._new_room_id(), created_at=time.time())
            self._rooms[room.room_id] = room
        logger.info("Room %s created", room.room_id)
        return room

    def get_room(self, room_id: str) -> Room | None:
        """Get a room by ID."""
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        """Get a room by ID or raise RoomNotFoundError."""
        room = self.get_room(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def join_room(
        self,
        room_id: str,
        name: str | None = None,
        is_bot: bool = False,
        policy: BotPolicy | None = None,
    ) -> int:
        """
        Take the next seat in a room.

        Args:
            room_id: Room to join
            name: Display name; defaults to "P<n>"
            is_bot: Seat is played by a bot (GreedyPolicy unless `policy` is given)
            policy: Explicit bot policy for the seat

        Returns:
            The seat index
        """
        room = self.require_room(room_id)
        with room.lock:
            if room.state != RoomState.WAITING:
                raise RoomError("Game already started", "GAME_ALREADY_STARTED")
            index = len(room.seats)
            if policy is None and is_bot:
                policy = GreedyPolicy()
            room.seats.append(Seat(index=index, name=name or f"P{index + 1}", policy=policy))
        logger.info("Room %s: %s took seat %d", room_id, room.seats[index].name, index)
        return index

    def leave_room(self, room_id: str, seat: int) -> None:
        """
        Leave a seat.

        Before the game starts the seat is removed and later seats move up.
        During a game the seat stays in the GameState and a greedy bot takes
        it over. The room is deleted once no human is left.
        """
        room = self.require_room(room_id)
        with room.lock:
            target = room.get_seat(seat)
            if target is None or target.left:
                raise RoomError(f"Seat {seat} is not occupied", "SEAT_NOT_FOUND")

            if room.state == RoomState.WAITING:
                room.seats.pop(seat)
                for index, remaining in enumerate(room.seats):
                    remaining.index = index
            else:
                target.left = True
                if target.policy is None:
                    target.policy = GreedyPolicy()

            empty = not room.human_seats()

        logger.info("Room %s: seat %d left", room_id, seat)
        if empty:
            self.delete_room(room_id)

    def delete_room(self, room_id: str) -> bool:
        """
        Remove a room and drop its state.

        Returns False if the room did not exist.
        """
        with self._lock:
            room = self._rooms.pop(room_id, None)
        if room is None:
            return False
        with room.lock:
            room.game_state = None
            room.seats.clear()
        logger.info("Room %s deleted", room_id)
        return True

    def list_rooms(self) -> list[Room]:
        """All rooms, oldest first."""
        return sorted(self._rooms.values(), key=lambda r: r.created_at)
