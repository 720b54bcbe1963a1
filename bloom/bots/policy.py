"""
Bot Policy - Who plays a seat when no human does.

Rooms hold one policy per bot seat and ask it for a move whenever that
seat is current. The move comes back as a BotDecision: the Action plus a
short explanation shown in turn summaries.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import random
from typing import TYPE_CHECKING, Any

from ..engine_core.action import Action, ActionType
from .greedy import choose_action_ai

if TYPE_CHECKING:
    from ..engine_core.state import GameState


@dataclass
class BotDecision:
    """A bot's chosen move, with a one-line reason and optional search details."""
    action: Action
    explanation: str = ""
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Base class for seat policies.

    Implementations only propose; the reducer validates whatever they
    return, and the game loop turns a rejected proposal into a pass.
    """

    @abstractmethod
    def select_action(self, state: GameState, player_index: int) -> BotDecision:
        """Pick a move for `player_index`. Must not leave `state` modified."""

    def get_name(self) -> str:
        """Policy name used in logs."""
        return self.__class__.__name__


class GreedyPolicy(BotPolicy):
    """
    Greedy policy - the engine's built-in AI.

    Plants when it can, then steals, swaps or weeds.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(self, state: GameState, player_index: int) -> BotDecision:
        action = choose_action_ai(state, player_index, rng=self.rng)
        return BotDecision(
            action=action,
            explanation=_EXPLANATIONS[action.action_type],
            evaluation_details={"description": action.describe()},
        )


class PassPolicy(BotPolicy):
    """
    Pass policy - always passes.

    Used for:
    - Deterministic testing
    - Idle seats
    """

    def select_action(self, state: GameState, player_index: int) -> BotDecision:
        return BotDecision(action=Action.pass_(), explanation="Always passes")


_EXPLANATIONS = {
    ActionType.PLANT: "Best point gain from the hand",
    ActionType.STEAL: "No plant available, best steal from the leader",
    ActionType.SWAP: "No plant or steal available, best swap",
    ActionType.PLANT_WEED: "Nothing to grow, weeding the leader",
    ActionType.SHOVEL: "Clearing the board",
    ActionType.PASS: "Nothing worth doing",
}
