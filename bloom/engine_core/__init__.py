"""
Engine Core - Rules, scoring and the season state machine.

The engine is the runtime that:
1. Sets up a GameState
2. Rolls the season's dice
3. Validates and applies actions via the reducer
4. Scores board patterns through the ratchet
5. Resolves the scheduled water events
"""

from .state import (
    BOARD_SIZE,
    WILD,
    Board,
    Cell,
    DiceRoll,
    GameConfig,
    GameState,
    PlayerState,
    Species,
    Zone,
)
from .action import Action, ActionType, ActionPayload, ActionResult, IllegalActionError, ShovelTarget
from .reducer import Reducer, apply_action, add_pattern_delta_and_tokens, try_apply_action
from .action_generator import ActionGenerator, legal_actions
from .engine import (
    setup_game,
    begin_season,
    end_season,
    take_turn_once,
    final_scoreboard,
    all_passed,
    advance_turn,
    standings,
)

__all__ = [
    "BOARD_SIZE",
    "WILD",
    "Board",
    "Cell",
    "DiceRoll",
    "GameConfig",
    "GameState",
    "PlayerState",
    "Species",
    "Zone",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "IllegalActionError",
    "ShovelTarget",
    "Reducer",
    "apply_action",
    "try_apply_action",
    "add_pattern_delta_and_tokens",
    "ActionGenerator",
    "legal_actions",
    "setup_game",
    "begin_season",
    "end_season",
    "take_turn_once",
    "final_scoreboard",
    "all_passed",
    "advance_turn",
    "standings",
]
