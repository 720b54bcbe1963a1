"""
API Module - HTTP and WebSocket interface to game rooms.

Clients:
1. Create a room and join seats
2. Start the game
3. Submit actions for their seat
4. Receive state and roster pushes over a WebSocket

All state is room-scoped and in memory. No accounts.
"""

from .schemas import (
    # Requests
    ActionRequest,
    JoinRequest,
    LeaveRequest,
    StartRequest,
    # Responses
    RoomResponse,
    RoomListResponse,
    JoinResponse,
    GameStateResponse,
    TurnResponse,
    LegalActionsResponse,
    ErrorResponse,
    # Shared
    ActionModel,
    PlayerInfo,
    CellInfo,
    RollInfo,
    # Enums
    ErrorCode,
    RoomStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "JoinRequest",
    "LeaveRequest",
    "StartRequest",
    # Responses
    "RoomResponse",
    "RoomListResponse",
    "JoinResponse",
    "GameStateResponse",
    "TurnResponse",
    "LegalActionsResponse",
    "ErrorResponse",
    # Shared
    "ActionModel",
    "PlayerInfo",
    "CellInfo",
    "RollInfo",
    # Enums
    "ErrorCode",
    "RoomStatus",
    # Service
    "APIService",
    "create_app",
]
