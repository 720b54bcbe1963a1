"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine. The full
GameState (boards, hands, roll, weed pool, season, water step) is sent on
every state response.

Error Codes:
- ROOM_NOT_FOUND: Room does not exist or was deleted
- SEAT_NOT_FOUND: Seat index is not occupied
- NOT_YOUR_TURN: Seat is not the current player
- GAME_NOT_STARTED: Room has no game yet
- GAME_ALREADY_STARTED: Room no longer accepts joins or starts
- GAME_OVER: Final scoreboard already applied
- ILLEGAL_ACTION: Engine rejected the action (reason in details)
- VALIDATION_ERROR: Malformed request
"""

from enum import Enum
from dataclasses import fields
from typing import Annotated, Optional, Any
from pydantic import BaseModel, Field, model_validator

from ..engine_core.state import BOARD_SIZE, Species
from ..engine_core.action import Action, ActionPayload, ActionType, ShovelTarget


# =============================================================================
# Enums
# =============================================================================

class RoomStatus(str, Enum):
    """Room status values."""
    WAITING = "waiting"
    YOUR_TURN = "your_turn"
    BOTS_THINKING = "bots_thinking"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    SEAT_NOT_FOUND = "SEAT_NOT_FOUND"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    GAME_OVER = "GAME_OVER"
    ILLEGAL_ACTION = "ILLEGAL_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

Coordinate = Annotated[int, Field(ge=1, le=BOARD_SIZE)]


class CellInfo(BaseModel):
    """One board square."""
    row: int
    col: int
    species: Optional[Species] = None
    weed: bool = False
    flooded: bool = False
    pond: bool = False
    bee: bool = False

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """A seat's full state, board included."""
    seat: int
    name: str
    is_bot: bool = False
    is_current_turn: bool = False
    score: int = 0
    tokens: int = 0
    hand: list[Species] = Field(default_factory=list)
    passed: bool = False
    flood_active: bool = False
    board: list[list[CellInfo]] = Field(default_factory=list, description="Rows 1-6, columns 1-6")


class RollInfo(BaseModel):
    """The season's dice."""
    colors: list[str] = Field(description="Two faces: a species or Wild")
    row: int
    col: int
    zone: str


class SeatInfo(BaseModel):
    seat: int
    name: str
    is_bot: bool = False
    left: bool = False


class ActionModel(BaseModel):
    """
    Wire form of an action.

    Only the fields the action type needs are required:
    - Plant: species, r, c
    - PlantWeed: target_player_id, r, c
    - Shovel: shovel_target, r, c (target_player_id for another board's weed)
    - Steal: target_player_id, from_r, from_c, to_r, to_c
    - Swap: target_player_id, my_r, my_c, their_r, their_c
    """
    type: ActionType
    species: Optional[Species] = None
    r: Optional[Coordinate] = None
    c: Optional[Coordinate] = None
    target_player_id: Optional[int] = Field(None, ge=0)
    shovel_target: Optional[ShovelTarget] = None
    from_r: Optional[Coordinate] = None
    from_c: Optional[Coordinate] = None
    to_r: Optional[Coordinate] = None
    to_c: Optional[Coordinate] = None
    my_r: Optional[Coordinate] = None
    my_c: Optional[Coordinate] = None
    their_r: Optional[Coordinate] = None
    their_c: Optional[Coordinate] = None

    @model_validator(mode="after")
    def check_required_fields(self) -> "ActionModel":
        missing = [name for name in _REQUIRED_FIELDS[self.type] if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.type.value} requires {', '.join(missing)}")
        return self

    def to_action(self) -> Action:
        payload = self.model_dump(exclude={"type"})
        return Action(action_type=self.type, payload=ActionPayload(**payload))

    @classmethod
    def from_action(cls, action: Action) -> "ActionModel":
        p = action.payload
        return cls(
            type=action.action_type,
            **{f.name: getattr(p, f.name) for f in fields(ActionPayload)},
        )


_REQUIRED_FIELDS: dict[ActionType, tuple[str, ...]] = {
    ActionType.PLANT: ("species", "r", "c"),
    ActionType.PLANT_WEED: ("target_player_id", "r", "c"),
    ActionType.SHOVEL: ("shovel_target", "r", "c"),
    ActionType.STEAL: ("target_player_id", "from_r", "from_c", "to_r", "to_c"),
    ActionType.SWAP: ("target_player_id", "my_r", "my_c", "their_r", "their_c"),
    ActionType.PASS: (),
}


# =============================================================================
# Request Models
# =============================================================================

class JoinRequest(BaseModel):
    """Request to take a seat."""
    name: Optional[str] = Field(None, max_length=40, description="Display name")
    is_bot: bool = Field(False, description="Seat is played by the greedy AI")


class LeaveRequest(BaseModel):
    seat: int = Field(..., ge=0)


class StartRequest(BaseModel):
    """Request to start the room's game."""
    solo_mode: bool = Field(False, description="Enable the season-5 drought")
    seed: Optional[int] = Field(None, description="Seed for reproducible bag and dice")
    players: Optional[list[str]] = Field(
        None, description="Override seat names; extra names become bot seats"
    )


class ActionRequest(BaseModel):
    """A seat's intent."""
    seat: int = Field(..., ge=0)
    action: ActionModel


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class RoomResponse(BaseModel):
    """Room information."""
    room_id: str
    status: RoomStatus
    seats: list[SeatInfo] = Field(default_factory=list)
    roster: list[str] = Field(default_factory=list)
    started: bool = False
    created_at: float = 0.0
    api_version: str = "v1"


class RoomListResponse(BaseModel):
    rooms: list[RoomResponse]
    count: int


class JoinResponse(BaseModel):
    room_id: str
    seat: int
    roster: list[str] = Field(default_factory=list)


class DeleteRoomResponse(BaseModel):
    success: bool
    room_id: str


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    room_id: str
    status: RoomStatus
    season: int
    water_step: int
    current_player: int
    start_player: int
    weeds_remaining: int
    bag_size: int
    solo_mode: bool = False
    roll: Optional[RollInfo] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    is_over: bool = False
    winner: Optional[str] = None
    api_version: str = "v1"


class TurnResponse(BaseModel):
    """Result of a start or an action, with the state that followed."""
    success: bool
    status: RoomStatus
    error: Optional[str] = None
    error_code: Optional[str] = None
    changes: list[str] = Field(default_factory=list)
    bot_actions: list[str] = Field(default_factory=list)
    winner: Optional[str] = None
    game_state: Optional[GameStateResponse] = None
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    room_id: str
    seat: int
    actions: list[ActionModel] = Field(default_factory=list)
    count: int = 0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str
