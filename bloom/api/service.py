"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to room and game-loop calls
2. Owns one GameLoop per room
3. Formats engine state into response schemas

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Unknown rooms and seats raise RoomError; rejected intents come back as a
TurnResponse with success=False.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    ActionRequest,
    JoinRequest,
    StartRequest,
    # Responses
    GameStateResponse,
    JoinResponse,
    LegalActionsResponse,
    RoomListResponse,
    RoomResponse,
    TurnResponse,
    # Shared
    ActionModel,
    CellInfo,
    PlayerInfo,
    RollInfo,
    SeatInfo,
    # Enums
    RoomStatus,
)
from ..engine_core.state import GameConfig
from ..engine_core.action_generator import legal_actions
from ..session import GameLoop, LoopState, Room, RoomError, RoomManager, TurnResult
from ..session.game_loop import DEFAULT_MAX_STEPS


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        room = service.create_room()
        seat = service.join_room(room.room_id, JoinRequest(name="Ada")).seat
        service.start_game(room.room_id, StartRequest(players=["Ada", "Bot1"]))
        service.submit_action(room.room_id, ActionRequest(seat=seat, action=...))
    """
    room_manager: RoomManager = field(default_factory=RoomManager)
    max_autoplay_steps: int = DEFAULT_MAX_STEPS

    # Game loops per room
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def create_room(self) -> RoomResponse:
        room = self.room_manager.create_room()
        self._game_loops[room.room_id] = GameLoop(room, max_steps=self.max_autoplay_steps)
        return self._room_to_response(room)

    def get_room(self, room_id: str) -> RoomResponse:
        return self._room_to_response(self.room_manager.require_room(room_id))

    def list_rooms(self) -> RoomListResponse:
        rooms = [self._room_to_response(room) for room in self.room_manager.list_rooms()]
        return RoomListResponse(rooms=rooms, count=len(rooms))

    def delete_room(self, room_id: str) -> bool:
        self._game_loops.pop(room_id, None)
        return self.room_manager.delete_room(room_id)

    def join_room(self, room_id: str, request: JoinRequest) -> JoinResponse:
        seat = self.room_manager.join_room(room_id, name=request.name, is_bot=request.is_bot)
        room = self.room_manager.require_room(room_id)
        return JoinResponse(room_id=room_id, seat=seat, roster=room.roster())

    def leave_room(self, room_id: str, seat: int) -> RoomResponse | None:
        """
        Leave a seat.

        Returns the updated room, or None once the room has been deleted.
        Bots that take over a departed seat play immediately if it was that
        seat's turn.
        """
        self.room_manager.leave_room(room_id, seat)
        room = self.room_manager.get_room(room_id)
        if room is None:
            self._game_loops.pop(room_id, None)
            return None
        if room.game_state is not None:
            self._loop(room_id).run_bots()
        return self._room_to_response(room)

    def start_game(self, room_id: str, request: StartRequest) -> TurnResponse:
        """Set up the room's game, begin season 1 and let bot seats play."""
        config = GameConfig(solo_mode=request.solo_mode, seed=request.seed)
        result = self._loop(room_id).start(config, names=request.players)
        return self._turn_result_to_response(room_id, result)

    def submit_action(self, room_id: str, request: ActionRequest) -> TurnResponse:
        """Apply a seat's intent."""
        result = self._loop(room_id).submit_action(request.seat, request.action.to_action())
        return self._turn_result_to_response(room_id, result)

    def get_game_state(self, room_id: str) -> GameStateResponse:
        room = self.room_manager.require_room(room_id)
        if room.game_state is None:
            raise RoomError("Game not started", "GAME_NOT_STARTED")
        return self._build_game_state(room)

    def legal_actions(self, room_id: str, seat: int) -> LegalActionsResponse:
        """Every legal action for a seat under the current roll."""
        room = self.room_manager.require_room(room_id)
        with room.lock:
            game = room.game_state
            if game is None:
                raise RoomError("Game not started", "GAME_NOT_STARTED")
            if game.get_player(seat) is None:
                raise RoomError(f"Seat {seat} is not occupied", "SEAT_NOT_FOUND")
            actions = [ActionModel.from_action(a) for a in legal_actions(game, seat)]
        return LegalActionsResponse(room_id=room_id, seat=seat, actions=actions, count=len(actions))

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _loop(self, room_id: str) -> GameLoop:
        room = self.room_manager.require_room(room_id)
        loop = self._game_loops.get(room_id)
        if loop is None:
            loop = GameLoop(room, max_steps=self.max_autoplay_steps)
            self._game_loops[room_id] = loop
        return loop

    def _status(self, room: Room) -> RoomStatus:
        """Convert loop state to API status."""
        mapping = {
            LoopState.WAITING_START: RoomStatus.WAITING,
            LoopState.RUNNING_BOTS: RoomStatus.BOTS_THINKING,
            LoopState.WAITING_HUMAN_ACTION: RoomStatus.YOUR_TURN,
            LoopState.GAME_OVER: RoomStatus.GAME_OVER,
        }
        return mapping[self._loop(room.room_id).state]

    def _room_to_response(self, room: Room) -> RoomResponse:
        """Convert Room to RoomResponse."""
        return RoomResponse(
            room_id=room.room_id,
            status=self._status(room),
            seats=[
                SeatInfo(seat=seat.index, name=seat.name, is_bot=seat.is_bot, left=seat.left)
                for seat in room.seats
            ],
            roster=room.roster(),
            started=room.game_state is not None,
            created_at=room.created_at,
        )

    def _turn_result_to_response(self, room_id: str, result: TurnResult) -> TurnResponse:
        room = self.room_manager.require_room(room_id)
        return TurnResponse(
            success=result.success,
            status=self._status(room),
            error=result.error,
            error_code=result.error_code,
            changes=result.changes,
            bot_actions=result.bot_actions,
            winner=result.winner,
            game_state=self._build_game_state(room) if room.game_state else None,
        )

    def _build_game_state(self, room: Room) -> GameStateResponse:
        """Build complete game state response."""
        game = room.game_state
        roll = None
        if game.current_roll is not None:
            r = game.current_roll
            roll = RollInfo(
                colors=[getattr(face, "value", face) for face in r.colors],
                row=r.row,
                col=r.col,
                zone=r.zone.value,
            )

        players = []
        for player in game.players:
            seat = room.get_seat(player.id)
            players.append(
                PlayerInfo(
                    seat=player.id,
                    name=player.name,
                    is_bot=seat.is_bot if seat else False,
                    is_current_turn=player.id == game.current_player_idx,
                    score=player.score,
                    tokens=player.tokens,
                    hand=list(player.hand),
                    passed=player.passed,
                    flood_active=player.flood_active,
                    board=[
                        [CellInfo.model_validate(cell) for cell in row]
                        for row in player.board.cells
                    ],
                )
            )

        winner = None
        if game.is_over:
            winner = max(game.players, key=lambda p: p.score).name

        return GameStateResponse(
            room_id=room.room_id,
            status=self._status(room),
            season=game.season,
            water_step=game.water_step,
            current_player=game.current_player_idx,
            start_player=game.start_player_idx,
            weeds_remaining=game.weeds_remaining,
            bag_size=len(game.bag),
            solo_mode=game.config.solo_mode,
            roll=roll,
            players=players,
            is_over=game.is_over,
            winner=winner,
        )
