"""
FastAPI Application - REST + WebSocket API for game rooms.

Endpoints:
    POST   /api/v1/rooms                 Create a room
    GET    /api/v1/rooms                 List rooms
    GET    /api/v1/rooms/{id}            Get room status
    DELETE /api/v1/rooms/{id}            Delete a room
    POST   /api/v1/rooms/{id}/join       Take a seat
    POST   /api/v1/rooms/{id}/leave      Leave a seat
    POST   /api/v1/rooms/{id}/start      Start the game
    POST   /api/v1/rooms/{id}/actions    Submit a seat's action
    GET    /api/v1/rooms/{id}/state      Get game state
    GET    /api/v1/rooms/{id}/legal      Legal actions for a seat
    WS     /api/v1/rooms/{id}/ws         Real-time state and roster pushes

Every mutation is applied under the room's lock and fully processed before
the resulting state is broadcast to the room's WebSocket clients.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import json
import logging
import os

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .. import __version__
from .service import APIService
from .schemas import (
    # Request models
    ActionRequest,
    JoinRequest,
    LeaveRequest,
    StartRequest,
    # Response models
    DeleteRoomResponse,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    JoinResponse,
    LegalActionsResponse,
    RoomListResponse,
    RoomResponse,
    TurnResponse,
    # Enums
    ErrorCode,
)
from ..session import RoomError


logger = logging.getLogger(__name__)

# Environment configuration
BLOOM_ENV = os.getenv("BLOOM_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
BLOOM_MAX_AUTOPLAY_STEPS = int(os.getenv("BLOOM_MAX_AUTOPLAY_STEPS", "200"))

# HTTP status per error code; anything else is a 400
_STATUS_CODES = {
    ErrorCode.ROOM_NOT_FOUND: 404,
    ErrorCode.SEAT_NOT_FOUND: 404,
    ErrorCode.NOT_YOUR_TURN: 409,
    ErrorCode.GAME_NOT_STARTED: 409,
    ErrorCode.GAME_ALREADY_STARTED: 409,
    ErrorCode.GAME_OVER: 409,
    ErrorCode.VALIDATION_ERROR: 422,
}


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Bloom Engine API",
        description="""
Rules engine for an eight-season garden tile-placement game.

## Flow

1. `POST /rooms`, then `POST /rooms/{id}/join` once per player
2. `POST /rooms/{id}/start`; bot seats play immediately
3. The current seat submits `POST /rooms/{id}/actions`
4. Connect to `WS /rooms/{id}/ws` for pushed `state` and `roster` messages

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | Room does not exist |
| `NOT_YOUR_TURN` | Seat is not the current player |
| `GAME_NOT_STARTED` | Room has no game yet |
| `GAME_OVER` | Game has ended |
| `ILLEGAL_ACTION` | Engine rejected the action; reason in `details` |
| `VALIDATION_ERROR` | Malformed request |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(max_autoplay_steps=BLOOM_MAX_AUTOPLAY_STEPS)

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int | None = None,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code or _STATUS_CODES.get(error_code, 400),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_from_code(code: str, message: str) -> JSONResponse:
        """Map a room or engine code onto the API's error codes."""
        if code in ErrorCode.__members__:
            return make_error_response(ErrorCode(code), message)
        return make_error_response(ErrorCode.ILLEGAL_ACTION, message, details={"reason": code})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies and query parameters use the standard error body."""
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            details={"errors": jsonable_encoder(exc.errors())},
        )

    async def broadcast_to_room(room_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a room."""
        if room_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[room_id]:
                try:
                    await ws.send_json(message)
                except (RuntimeError, WebSocketDisconnect):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[room_id].remove(ws)

    async def broadcast_state(room_id: str):
        try:
            state = api_service.get_game_state(room_id)
        except RoomError:
            return
        await broadcast_to_room(room_id, {"type": "state", "game": state.model_dump(mode="json")})

    async def broadcast_roster(room_id: str):
        room = api_service.room_manager.get_room(room_id)
        if room is not None:
            await broadcast_to_room(room_id, {"type": "roster", "players": room.roster()})

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=RoomResponse,
        tags=["Rooms"],
        summary="Create a new room",
    )
    async def create_room() -> RoomResponse:
        """Create an empty room. Players join it by its 6-character id."""
        return api_service.create_room()

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List rooms",
    )
    async def list_rooms() -> RoomListResponse:
        return api_service.list_rooms()

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get room status",
    )
    async def get_room(room_id: str) -> Union[RoomResponse, JSONResponse]:
        try:
            return api_service.get_room(room_id)
        except RoomError as e:
            return error_from_code(e.code, str(e))

    @app.delete(
        "/api/v1/rooms/{room_id}",
        response_model=DeleteRoomResponse,
        tags=["Rooms"],
        summary="Delete a room",
    )
    async def delete_room(room_id: str) -> DeleteRoomResponse:
        """Delete a room and drop its game. Open WebSockets are closed."""
        success = api_service.delete_room(room_id)
        for ws in ws_connections.pop(room_id, []):
            try:
                await ws.close()
            except RuntimeError:
                logger.debug("WebSocket for room %s already closed", room_id)
        return DeleteRoomResponse(success=success, room_id=room_id)

    @app.post(
        "/api/v1/rooms/{room_id}/join",
        response_model=JoinResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Take the next seat",
    )
    async def join_room(room_id: str, body: JoinRequest) -> Union[JoinResponse, JSONResponse]:
        try:
            response = api_service.join_room(room_id, body)
        except RoomError as e:
            return error_from_code(e.code, str(e))
        await broadcast_roster(room_id)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/leave",
        response_model=Optional[RoomResponse],
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Leave a seat",
    )
    async def leave_room(room_id: str, body: LeaveRequest) -> Union[RoomResponse, JSONResponse, None]:
        """
        Leave a seat.

        Returns null once the last human has left and the room is gone.
        """
        try:
            response = api_service.leave_room(room_id, body.seat)
        except RoomError as e:
            return error_from_code(e.code, str(e))
        if response is not None:
            await broadcast_roster(room_id)
            await broadcast_state(room_id)
        return response

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms/{room_id}/start",
        response_model=TurnResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Start the game",
    )
    async def start_game(
        room_id: str,
        body: Optional[StartRequest] = None,
    ) -> Union[TurnResponse, JSONResponse]:
        """
        Set up the game from the roster and begin season 1.

        Bot seats play until a human is to act.
        """
        try:
            response = api_service.start_game(room_id, body or StartRequest())
        except RoomError as e:
            return error_from_code(e.code, str(e))
        if not response.success:
            return error_from_code(response.error_code, response.error)
        await broadcast_state(room_id)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/actions",
        response_model=TurnResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Illegal action"},
            404: {"model": ErrorResponse, "description": "Room not found"},
            409: {"model": ErrorResponse, "description": "Out of turn or game not running"},
        },
        tags=["Game"],
        summary="Submit a seat's action",
    )
    async def submit_action(room_id: str, body: ActionRequest) -> Union[TurnResponse, JSONResponse]:
        """
        Submit an action for the current seat.

        An illegal action is discarded and the state is left untouched.

        **Request Body:**
        ```json
        {"seat": 0, "action": {"type": "Plant", "species": "Rose", "r": 2, "c": 4}}
        ```
        """
        try:
            response = api_service.submit_action(room_id, body)
        except RoomError as e:
            return error_from_code(e.code, str(e))
        if not response.success:
            return error_from_code(response.error_code, response.error)
        await broadcast_state(room_id)
        return response

    @app.get(
        "/api/v1/rooms/{room_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get game state",
    )
    async def get_state(room_id: str) -> Union[GameStateResponse, JSONResponse]:
        try:
            return api_service.get_game_state(room_id)
        except RoomError as e:
            return error_from_code(e.code, str(e))

    @app.get(
        "/api/v1/rooms/{room_id}/legal",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List legal actions for a seat",
    )
    async def get_legal_actions(
        room_id: str,
        seat: Annotated[int, Query(ge=0, description="Seat index")],
    ) -> Union[LegalActionsResponse, JSONResponse]:
        try:
            return api_service.legal_actions(room_id, seat)
        except RoomError as e:
            return error_from_code(e.code, str(e))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/rooms/{room_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, room_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state: Game state changed
        - roster: Seats changed
        - result: Outcome of an action sent over this socket
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        - action: {"type": "action", "seat": n, "action": {...}}
        """
        await websocket.accept()
        if api_service.room_manager.get_room(room_id) is None:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": f"No such room: {room_id}", "code": "ROOM_NOT_FOUND"},
            })
            await websocket.close()
            return

        ws_connections.setdefault(room_id, []).append(websocket)

        try:
            room = api_service.room_manager.get_room(room_id)
            await websocket.send_json({"type": "roster", "players": room.roster()})
            if room.game_state is not None:
                state = api_service.get_game_state(room_id)
                await websocket.send_json({"type": "state", "game": state.model_dump(mode="json")})

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON", "code": "VALIDATION_ERROR"},
                    })
                    continue

                kind = message.get("type") if isinstance(message, dict) else None
                if kind == "ping":
                    await websocket.send_json({"type": "pong"})
                elif kind == "action":
                    await _handle_ws_action(websocket, room_id, message)
                else:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unknown message type: {kind}", "code": "VALIDATION_ERROR"},
                    })

        except WebSocketDisconnect:
            logger.debug("WebSocket for room %s disconnected", room_id)
        finally:
            if room_id in ws_connections and websocket in ws_connections[room_id]:
                ws_connections[room_id].remove(websocket)

    async def _handle_ws_action(websocket: WebSocket, room_id: str, message: dict):
        try:
            request = ActionRequest.model_validate({
                "seat": message.get("seat"),
                "action": message.get("action"),
            })
        except ValidationError as e:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": str(e), "code": "VALIDATION_ERROR"},
            })
            return

        try:
            response = api_service.submit_action(room_id, request)
        except RoomError as e:
            await websocket.send_json({"type": "error", "payload": {"message": str(e), "code": e.code}})
            return

        await websocket.send_json({
            "type": "result",
            "payload": response.model_dump(mode="json", exclude={"game_state"}),
        })
        if response.success:
            await broadcast_state(room_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="bloom-engine",
            version=__version__,
            environment=BLOOM_ENV,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Bloom Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn bloom.api.app:app
app = create_app()
