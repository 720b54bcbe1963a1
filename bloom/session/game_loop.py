"""
Game Loop - Drives a room's game between human intents and bot turns.

The loop:
1. A human seat submits an action
2. The engine validates and applies it (illegal intents change nothing)
3. The turn advances, or the season ends once every seat has passed
4. Bot seats play until a human is to act again
5. The final scoreboard is applied exactly once when season 8 ends
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import TYPE_CHECKING

from ..engine_core.state import GameConfig
from ..engine_core.action import Action
from ..engine_core.reducer import try_apply_action
from ..engine_core.engine import (
    setup_game,
    begin_season,
    end_season,
    final_scoreboard,
    all_passed,
    advance_turn,
    standings,
)
from ..bots import GreedyPolicy
from .manager import RoomState, Seat

if TYPE_CHECKING:
    from .manager import Room


logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 200


class LoopState(Enum):
    """State of the game loop."""
    WAITING_START = "waiting_start"
    RUNNING_BOTS = "running_bots"
    WAITING_HUMAN_ACTION = "waiting_human_action"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of processing an intent.

    Contains what changed and which bot moves followed.
    """
    success: bool
    loop_state: LoopState

    # Errors
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes from the submitted action
    changes: list[str] = field(default_factory=list)

    # Bot actions taken afterwards
    bot_actions: list[str] = field(default_factory=list)

    # Game over info
    winner: str | None = None

    @classmethod
    def failure(cls, loop_state: LoopState, error: str, error_code: str) -> TurnResult:
        return cls(success=False, loop_state=loop_state, error=error, error_code=error_code)


class GameLoop:
    """
    The main game loop driver for one room.

    Usage:
        loop = GameLoop(room)
        loop.start(GameConfig(seed=7))

        result = loop.submit_action(seat, Action.pass_())
        if not result.success:
            show_error(result.error_code)
    """

    def __init__(self, room: Room, max_steps: int = DEFAULT_MAX_STEPS):
        self.room = room
        self.max_steps = max_steps

    @property
    def state(self) -> LoopState:
        game = self.room.game_state
        if game is None:
            return LoopState.WAITING_START
        if game.is_over:
            return LoopState.GAME_OVER
        if self.room.is_human_turn():
            return LoopState.WAITING_HUMAN_ACTION
        return LoopState.RUNNING_BOTS

    def start(self, config: GameConfig | None = None, names: list[str] | None = None) -> TurnResult:
        """
        Set up the game and begin season 1.

        `names` renames the seats in order; entries past the last seated
        player become greedy bot seats. Bot seats past the end of `names`
        are dropped; a human seat past the end is rejected.
        """
        room = self.room
        with room.lock:
            if room.game_state is not None:
                return TurnResult.failure(self.state, "Game already started", "GAME_ALREADY_STARTED")

            if names:
                dropped = [seat.name for seat in room.seats[len(names):] if not seat.is_bot]
                if dropped:
                    return TurnResult.failure(
                        self.state,
                        f"No name given for seated players {dropped}",
                        "VALIDATION_ERROR",
                    )
                for index, name in enumerate(names):
                    if index < len(room.seats):
                        room.seats[index].name = name
                    else:
                        room.seats.append(Seat(index=index, name=name, policy=GreedyPolicy()))
                del room.seats[len(names):]
            if not room.seats:
                return TurnResult.failure(self.state, "No players in room", "VALIDATION_ERROR")

            room.game_state = setup_game([seat.name for seat in room.seats], config)
            room.state = RoomState.ACTIVE
            begin_season(room.game_state)
            logger.info("Room %s: game started with %s", room.room_id, room.roster())

            bot_actions = self.run_bots()
            return self._result(bot_actions=bot_actions)

    def submit_action(self, seat: int, action: Action) -> TurnResult:
        """
        Apply a human intent for a seat.

        The seat must be the current player. An illegal action is discarded
        and the state is left untouched.
        """
        room = self.room
        with room.lock:
            game = room.game_state
            if game is None:
                return TurnResult.failure(self.state, "Game not started", "GAME_NOT_STARTED")
            if game.is_over:
                return TurnResult.failure(self.state, "Game is over", "GAME_OVER")
            if game.get_player(seat) is None:
                return TurnResult.failure(self.state, f"Unknown seat {seat}", "VALIDATION_ERROR")
            if seat != game.current_player_idx:
                return TurnResult.failure(
                    self.state,
                    f"It is {game.current_player.name}'s turn",
                    "NOT_YOUR_TURN",
                )

            result = try_apply_action(game, action)
            if not result.success:
                logger.debug("Room %s: seat %d rejected: %s", room.room_id, seat, result.error)
                return TurnResult.failure(self.state, result.error, result.error_code)

            self._after_action()
            bot_actions = self.run_bots()
            return self._result(changes=result.state_changes, bot_actions=bot_actions)

    def run_bots(self, max_steps: int | None = None) -> list[str]:
        """
        Play bot seats until a human is to act or the game ends.

        At most `max_steps` bot turns per season; a season that exhausts
        the guard is ended as it stands.
        """
        room = self.room
        limit = max_steps or self.max_steps
        actions: list[str] = []
        with room.lock:
            game = room.game_state
            steps = 0
            season = game.season if game else 0
            while game is not None and not game.is_over and not room.is_human_turn():
                if game.season != season:
                    season = game.season
                    steps = 0
                if steps >= limit:
                    logger.warning("Room %s: season %d hit the %d-step guard", room.room_id, season, limit)
                    for player in game.players:
                        player.passed = True
                    self._after_action()
                    continue

                player = game.current_player
                policy = room.policy_for(player.id)
                decision = policy.select_action(game, player.id)
                result = try_apply_action(game, decision.action)
                if result.success:
                    actions.append(f"{player.name}: {decision.action.describe()}")
                else:
                    logger.debug(
                        "%s (%s): bot action rejected (%s), passing",
                        player.name, policy.get_name(), result.error_code,
                    )
                    player.passed = True
                    actions.append(f"{player.name}: pass")
                steps += 1
                self._after_action()
        return actions

    def _after_action(self) -> None:
        """Advance the turn, or close the season once everyone passed."""
        game = self.room.game_state
        if not all_passed(game):
            advance_turn(game)
            return

        end_season(game)
        if game.season <= 8:
            begin_season(game)
        elif not self.room.finalized:
            final_scoreboard(game)
            self.room.finalized = True
            self.room.state = RoomState.GAME_OVER
            logger.info("Room %s: game over, winner %s", self.room.room_id, self._winner())

    def _winner(self) -> str | None:
        game = self.room.game_state
        if game is None or not game.is_over:
            return None
        return standings(game)[0].name

    def _result(self, changes: list[str] | None = None, bot_actions: list[str] | None = None) -> TurnResult:
        return TurnResult(
            success=True,
            loop_state=self.state,
            changes=changes or [],
            bot_actions=bot_actions or [],
            winner=self._winner(),
        )
