"""
Session Module - Rooms, seats and game drivers.

A room represents one play-through of a game:
- Created on request, filled by joining seats
- Holds the GameState once started
- Runs bot seats between human intents
- Destroyed when the last human leaves

Rooms are EPHEMERAL:
- No persistence to database
- Ends cleanly when deleted

Bot-only batch play lives in simulation.
"""

from .manager import RoomManager, Room, RoomState, Seat, RoomError, RoomNotFoundError
from .game_loop import GameLoop, LoopState, TurnResult
from .simulation import simulate_game, run_batch, BatchStats

__all__ = [
    "RoomManager",
    "Room",
    "RoomState",
    "Seat",
    "RoomError",
    "RoomNotFoundError",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "simulate_game",
    "run_batch",
    "BatchStats",
]
