"""
Reducer - Applies player actions to game state.

The reducer is the single point of action-driven state mutation.

Design principles:
- Validates before applying: a rejected action leaves no trace
- Acts on behalf of state.current_player
- Under-resourced PlantWeed/Shovel/Steal/Swap degrade to a pass instead
  of raising
- Every board mutation that can change pattern value runs the ratchet
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Callable

from .state import WILD, GameState, PlayerState, Species, in_bounds
from .action import Action, ActionResult, ActionType, IllegalActionError, ShovelTarget
from .rules import allowed_species_from_hand, legal_cells, legal_weed_cells, spatially_allowed
from .scoring import score_board


logger = logging.getLogger(__name__)

STEAL_COST = 2
SWAP_COST = 3


def add_pattern_delta_and_tokens(player: PlayerState) -> None:
    """
    Score ratchet.

    Credit only the positive part of the change in the board's pattern
    points and tokens, then overwrite the snapshot with the fresh values
    whatever their sign. Score never drops through this path.
    """
    current = score_board(player.board)
    dp = current.points - player.last_pattern_points
    dt = current.tokens - player.last_pattern_tokens
    if dp > 0:
        player.score += dp
    if dt > 0:
        player.tokens += dt
    player.last_pattern_points = current.points
    player.last_pattern_tokens = current.tokens


def _check_coords(r: int | None, c: int | None) -> tuple[int, int]:
    if r is None or c is None or not in_bounds(r, c):
        raise IllegalActionError(f"Cell ({r},{c}) is off the board", "OUT_OF_BOUNDS")
    return r, c


def _degrade_to_pass(player: PlayerState, reason: str) -> ActionResult:
    player.passed = True
    logger.debug("%s passes: %s", player.name, reason)
    return ActionResult.ok([f"{player.name} passes ({reason})"])


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action for the current player.

        Raises IllegalActionError if a precondition fails.
        """
        handler = self._get_handler(action.action_type)
        if handler is None:
            raise IllegalActionError(
                f"No handler for action type: {action.action_type}", "NO_HANDLER"
            )
        # Passing needs no roll
        if action.action_type != ActionType.PASS and state.current_roll is None:
            raise IllegalActionError("No dice rolled this season", "NO_ROLL")
        return handler(state, action)

    def _get_handler(self, action_type: ActionType) -> Callable[[GameState, Action], ActionResult] | None:
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLANT: self._handle_plant,
            ActionType.PLANT_WEED: self._handle_plant_weed,
            ActionType.SHOVEL: self._handle_shovel,
            ActionType.STEAL: self._handle_steal,
            ActionType.SWAP: self._handle_swap,
            ActionType.PASS: self._handle_pass,
        }
        return handlers.get(action_type)

    def _opponent(self, state: GameState, actor: PlayerState, player_id: int | None) -> PlayerState:
        target = state.get_player(player_id) if player_id is not None else None
        if target is None:
            raise IllegalActionError(f"Unknown player {player_id}", "UNKNOWN_PLAYER")
        if target.id == actor.id:
            raise IllegalActionError("Action must target another player", "SELF_TARGET")
        return target

    def _handle_pass(self, state: GameState, action: Action) -> ActionResult:
        player = state.current_player
        player.passed = True
        return ActionResult.ok([f"{player.name} passes"])

    def _handle_plant(self, state: GameState, action: Action) -> ActionResult:
        """Handle plant action."""
        player = state.current_player
        roll = state.current_roll
        try:
            species = Species(action.payload.species)
        except ValueError:
            raise IllegalActionError(f"Unknown species {action.payload.species!r}", "NOT_IN_HAND") from None

        if species not in player.hand:
            raise IllegalActionError(f"{species.value} not in hand", "NOT_IN_HAND")
        if species not in allowed_species_from_hand(roll.colors, player.hand):
            raise IllegalActionError(f"{species.value} not allowed by roll", "SPECIES_NOT_ALLOWED")

        r, c = _check_coords(action.payload.r, action.payload.c)
        if (r, c) not in legal_cells(player.board, roll):
            raise IllegalActionError(f"({r},{c}) is not a legal destination", "ILLEGAL_DESTINATION")

        cell = player.board.cell(r, c)
        if not cell.is_open:
            raise IllegalActionError(f"({r},{c}) is occupied or blocked", "CELL_BLOCKED")

        cell.species = species
        player.hand.remove(species)
        add_pattern_delta_and_tokens(player)
        return ActionResult.ok([f"{player.name} planted {species.value} at ({r},{c})"])

    def _handle_plant_weed(self, state: GameState, action: Action) -> ActionResult:
        """Handle weed placement on an opponent's board."""
        player = state.current_player
        if state.weeds_remaining <= 0 or player.tokens < 1:
            return _degrade_to_pass(player, "no weed available")

        victim = self._opponent(state, player, action.payload.target_player_id)
        r, c = _check_coords(action.payload.r, action.payload.c)
        if (r, c) not in legal_weed_cells(victim.board, state.current_roll):
            raise IllegalActionError(f"({r},{c}) is not a legal weed spot", "ILLEGAL_DESTINATION")

        cell = victim.board.cell(r, c)
        if not cell.is_open:
            raise IllegalActionError(f"({r},{c}) is occupied or blocked", "CELL_BLOCKED")

        cell.weed = True
        player.tokens -= 1
        state.weeds_remaining -= 1
        return ActionResult.ok([f"{player.name} planted a weed on {victim.name}'s ({r},{c})"])

    def _handle_shovel(self, state: GameState, action: Action) -> ActionResult:
        """Handle shovel: remove a weed, clear own flood, or dig up own flower."""
        player = state.current_player
        if player.tokens < 1:
            return _degrade_to_pass(player, "no token for shovel")

        target = action.payload.shovel_target
        r, c = _check_coords(action.payload.r, action.payload.c)

        if target == ShovelTarget.WEED:
            owner_id = action.payload.target_player_id
            owner = player if owner_id is None else state.get_player(owner_id)
            if owner is None:
                raise IllegalActionError(f"Unknown player {owner_id}", "UNKNOWN_PLAYER")
            cell = owner.board.cell(r, c)
            if not cell.weed:
                raise IllegalActionError(f"No weed at ({r},{c})", "NO_WEED")
            cell.weed = False
            player.tokens -= 1
            state.weeds_remaining += 1
            return ActionResult.ok([f"{player.name} removed a weed from {owner.name}'s ({r},{c})"])

        if target == ShovelTarget.FLOOD:
            cell = player.board.cell(r, c)
            if not cell.flooded:
                raise IllegalActionError(f"No flood at ({r},{c})", "NO_FLOOD")
            cell.flooded = False
            player.tokens -= 1
            return ActionResult.ok([f"{player.name} drained ({r},{c})"])

        if target == ShovelTarget.FLOWER:
            cell = player.board.cell(r, c)
            if cell.species is None:
                raise IllegalActionError(f"No flower at ({r},{c})", "NO_FLOWER")
            species = cell.species
            state.bag.append(species)
            cell.species = None
            player.tokens -= 1
            add_pattern_delta_and_tokens(player)
            return ActionResult.ok([f"{player.name} dug up {species.value} at ({r},{c})"])

        raise IllegalActionError(f"Unknown shovel target: {target}", "VALIDATION_ERROR")

    def _handle_steal(self, state: GameState, action: Action) -> ActionResult:
        """Handle steal: move a matching flower from a victim's board onto the actor's."""
        player = state.current_player
        roll = state.current_roll
        if player.tokens < STEAL_COST:
            return _degrade_to_pass(player, "not enough tokens to steal")

        p = action.payload
        victim = self._opponent(state, player, p.target_player_id)
        from_r, from_c = _check_coords(p.from_r, p.from_c)
        to_r, to_c = _check_coords(p.to_r, p.to_c)

        source = victim.board.cell(from_r, from_c)
        if source.species is None:
            raise IllegalActionError(f"No flower at ({from_r},{from_c})", "NO_FLOWER")

        species = source.species
        c1, c2 = roll.colors
        if not (c1 == WILD or c2 == WILD or species == c1 or species == c2):
            raise IllegalActionError(f"{species.value} does not match the color dice", "COLOR_MISMATCH")

        dest = player.board.cell(to_r, to_c)
        if not dest.is_open:
            raise IllegalActionError(f"({to_r},{to_c}) is occupied or blocked", "CELL_BLOCKED")
        if not spatially_allowed(player.board, roll, to_r, to_c):
            raise IllegalActionError(f"({to_r},{to_c}) is not a legal destination", "ILLEGAL_DESTINATION")

        source.species = None
        dest.species = species
        player.tokens -= STEAL_COST
        add_pattern_delta_and_tokens(player)
        add_pattern_delta_and_tokens(victim)
        return ActionResult.ok([
            f"{player.name} stole {species.value} from {victim.name}'s ({from_r},{from_c}) "
            f"to ({to_r},{to_c})"
        ])

    def _handle_swap(self, state: GameState, action: Action) -> ActionResult:
        """Handle swap: exchange one of the actor's flowers with an opponent's."""
        player = state.current_player
        roll = state.current_roll
        if player.tokens < SWAP_COST:
            return _degrade_to_pass(player, "not enough tokens to swap")

        p = action.payload
        opponent = self._opponent(state, player, p.target_player_id)
        my_r, my_c = _check_coords(p.my_r, p.my_c)
        their_r, their_c = _check_coords(p.their_r, p.their_c)

        mine = player.board.cell(my_r, my_c)
        theirs = opponent.board.cell(their_r, their_c)
        if mine.species is None or theirs.species is None:
            raise IllegalActionError("Both cells must hold a flower", "NO_FLOWER")

        # Each flower must be placeable where it lands
        if not spatially_allowed(opponent.board, roll, their_r, their_c):
            raise IllegalActionError("Swap illegal on opponent's board", "ILLEGAL_SWAP")
        if not spatially_allowed(player.board, roll, my_r, my_c):
            raise IllegalActionError("Swap illegal on own board", "ILLEGAL_SWAP")

        mine.species, theirs.species = theirs.species, mine.species
        player.tokens -= SWAP_COST
        add_pattern_delta_and_tokens(player)
        add_pattern_delta_and_tokens(opponent)
        return ActionResult.ok([
            f"{player.name} swapped ({my_r},{my_c}) with {opponent.name}'s ({their_r},{their_c})"
        ])


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action; IllegalActionError
    propagates to the caller.
    """
    reducer = Reducer()
    return reducer.apply(state, action)


def try_apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Apply an action, reporting a rejection as a failed ActionResult.

    The state is untouched when the result is a failure.
    """
    try:
        return apply_action(state, action)
    except IllegalActionError as e:
        return ActionResult.failure(str(e), e.code)
