"""
Action System - Actions, payloads, and results.

The action set is closed: Plant, PlantWeed, Shovel, Steal, Swap, Pass.
Every action is applied by the reducer, which validates before it mutates.
Illegal actions raise IllegalActionError; the caller decides whether to
discard the attempt or turn it into a pass.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .state import Species


class ActionType(Enum):
    """Types of player actions."""
    PLANT = "Plant"
    PLANT_WEED = "PlantWeed"
    SHOVEL = "Shovel"
    STEAL = "Steal"
    SWAP = "Swap"
    PASS = "Pass"


class ShovelTarget(Enum):
    """What a Shovel action digs up."""
    WEED = "Weed"
    FLOOD = "Flood"
    FLOWER = "Flower"


class IllegalActionError(ValueError):
    """
    Raised when an action violates a precondition.

    Always recoverable: validation runs before any mutation, so the state
    is untouched when this is raised.
    """

    def __init__(self, message: str, code: str = "ILLEGAL_ACTION"):
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class ActionPayload:
    """
    Parameters of an action.

    Different action types use different fields; the reducer checks that
    the ones it needs are present.
    """
    species: Species | None = None
    r: int | None = None
    c: int | None = None
    target_player_id: int | None = None
    shovel_target: ShovelTarget | None = None

    # Steal: source on the victim's board, destination on the actor's
    from_r: int | None = None
    from_c: int | None = None
    to_r: int | None = None
    to_c: int | None = None

    # Swap: actor's cell and the opponent's cell
    my_r: int | None = None
    my_c: int | None = None
    their_r: int | None = None
    their_c: int | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action for the current player.

    Build actions through the factory methods; the reducer always acts on
    behalf of `state.current_player`.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def plant(cls, species: Species, r: int, c: int) -> Action:
        """Factory for plant action."""
        return cls(
            action_type=ActionType.PLANT,
            payload=ActionPayload(species=species, r=r, c=c),
        )

    @classmethod
    def plant_weed(cls, target_player_id: int, r: int, c: int) -> Action:
        """Factory for weed placement on an opponent's board."""
        return cls(
            action_type=ActionType.PLANT_WEED,
            payload=ActionPayload(target_player_id=target_player_id, r=r, c=c),
        )

    @classmethod
    def shovel(
        cls,
        target: ShovelTarget,
        r: int,
        c: int,
        target_player_id: int | None = None,
    ) -> Action:
        """Factory for shovel action. `target_player_id` only matters for weeds."""
        return cls(
            action_type=ActionType.SHOVEL,
            payload=ActionPayload(
                shovel_target=target, r=r, c=c, target_player_id=target_player_id
            ),
        )

    @classmethod
    def steal(
        cls,
        target_player_id: int,
        from_r: int,
        from_c: int,
        to_r: int,
        to_c: int,
        species: Species | None = None,
    ) -> Action:
        """Factory for steal action."""
        return cls(
            action_type=ActionType.STEAL,
            payload=ActionPayload(
                target_player_id=target_player_id,
                from_r=from_r,
                from_c=from_c,
                to_r=to_r,
                to_c=to_c,
                species=species,
            ),
        )

    @classmethod
    def swap(
        cls,
        target_player_id: int,
        my_r: int,
        my_c: int,
        their_r: int,
        their_c: int,
    ) -> Action:
        """Factory for swap action."""
        return cls(
            action_type=ActionType.SWAP,
            payload=ActionPayload(
                target_player_id=target_player_id,
                my_r=my_r,
                my_c=my_c,
                their_r=their_r,
                their_c=their_c,
            ),
        )

    @classmethod
    def pass_(cls) -> Action:
        """Factory for pass action."""
        return cls(action_type=ActionType.PASS)

    def describe(self) -> str:
        """Short human-readable description, used in logs and turn summaries."""
        p = self.payload
        kind = self.action_type
        if kind == ActionType.PLANT:
            return f"plant {p.species.value} at ({p.r},{p.c})"
        if kind == ActionType.PLANT_WEED:
            return f"weed player {p.target_player_id} at ({p.r},{p.c})"
        if kind == ActionType.SHOVEL:
            return f"shovel {p.shovel_target.value.lower()} at ({p.r},{p.c})"
        if kind == ActionType.STEAL:
            return (
                f"steal from player {p.target_player_id} "
                f"({p.from_r},{p.from_c}) -> ({p.to_r},{p.to_c})"
            )
        if kind == ActionType.SWAP:
            return (
                f"swap ({p.my_r},{p.my_c}) with player {p.target_player_id} "
                f"({p.their_r},{p.their_c})"
            )
        return "pass"


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - Error message and code (if rejected)
    - Human-readable changes (for UI/logging)
    """
    success: bool
    error: str | None = None
    error_code: str | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result for a rejected action."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def ok(cls, changes: list[str] | None = None) -> ActionResult:
        """Create a success result."""
        return cls(success=True, state_changes=changes or [])
