"""
Greedy AI - One-ply search over the current roll.

Candidates are tried in a fixed order and the first kind that yields any
move wins:

    Plant -> Steal -> Swap -> PlantWeed -> Pass

Within a kind, every candidate is simulated on the live boards, scored
with score_board(), and reverted. The first candidate with the strictly
highest point delta is kept. There is no profitability floor: a move worth
zero or less is still preferred over falling through to the next kind.
"""

from __future__ import annotations
import random

from ..engine_core.state import WILD, GameState, PlayerState, DiceRoll
from ..engine_core.action import Action
from ..engine_core.rules import allowed_species_from_hand, legal_cells, spatially_allowed
from ..engine_core.scoring import score_board
from ..engine_core.reducer import STEAL_COST, SWAP_COST


def _points(player: PlayerState) -> int:
    return score_board(player.board).points


def _top_opponent(state: GameState, me: PlayerState) -> PlayerState | None:
    """Highest-scoring opponent, earliest seat on ties."""
    opponents = [p for p in state.players if p.id != me.id]
    if not opponents:
        return None
    return max(opponents, key=lambda p: p.score)


def best_plant(me: PlayerState, roll: DiceRoll) -> Action | None:
    cells = legal_cells(me.board, roll)
    allowed = allowed_species_from_hand(roll.colors, me.hand)
    if not cells or not allowed:
        return None

    best = None
    best_delta = float("-inf")
    before = _points(me)
    for r, c in cells:
        cell = me.board.cell(r, c)
        for species in allowed:
            cell.species = species
            delta = _points(me) - before
            cell.species = None
            if delta > best_delta:
                best_delta = delta
                best = Action.plant(species, r, c)
    return best


def best_steal(me: PlayerState, state: GameState) -> Action | None:
    """Move a die-matching flower from the top opponent onto a legal cell of ours."""
    if me.tokens < STEAL_COST:
        return None
    roll = state.current_roll
    destinations = legal_cells(me.board, roll)
    victim = _top_opponent(state, me)
    if not destinations or victim is None:
        return None

    c1, c2 = roll.colors
    best = None
    best_gain = float("-inf")
    before = _points(me)
    for source in victim.board.iter_cells():
        species = source.species
        if species is None or source.weed or source.flooded:
            continue
        if not (c1 == WILD or c2 == WILD or species == c1 or species == c2):
            continue

        for to_r, to_c in destinations:
            dest = me.board.cell(to_r, to_c)
            source.species = None
            dest.species = species
            gain = _points(me) - before
            dest.species = None
            source.species = species

            if gain > best_gain:
                best_gain = gain
                best = Action.steal(
                    victim.id, source.row, source.col, to_r, to_c, species=species
                )
    return best


def best_swap(me: PlayerState, state: GameState) -> Action | None:
    """Exchange one of our flowers with any opponent's, both cells within the roll."""
    if me.tokens < SWAP_COST:
        return None
    roll = state.current_roll
    opponents = [p for p in state.players if p.id != me.id]

    best = None
    best_gain = float("-inf")
    before = _points(me)
    for mine in me.board.iter_cells():
        if mine.species is None or mine.weed or mine.flooded:
            continue
        if not spatially_allowed(me.board, roll, mine.row, mine.col):
            continue

        for opponent in opponents:
            for theirs in opponent.board.iter_cells():
                if theirs.species is None or theirs.weed or theirs.flooded:
                    continue
                if not spatially_allowed(opponent.board, roll, theirs.row, theirs.col):
                    continue

                my_species, their_species = mine.species, theirs.species
                mine.species, theirs.species = their_species, my_species
                gain = _points(me) - before
                mine.species, theirs.species = my_species, their_species

                if gain > best_gain:
                    best_gain = gain
                    best = Action.swap(opponent.id, mine.row, mine.col, theirs.row, theirs.col)
    return best


def best_weed(me: PlayerState, state: GameState, rng: random.Random) -> Action | None:
    """Drop a weed on a random legal cell of the top opponent."""
    if me.tokens < 1 or state.weeds_remaining <= 0:
        return None
    victim = _top_opponent(state, me)
    if victim is None:
        return None
    cells = legal_cells(victim.board, state.current_roll)
    if not cells:
        return None
    r, c = cells[int(rng.random() * len(cells))]
    return Action.plant_weed(victim.id, r, c)


def choose_action_ai(
    state: GameState,
    player_index: int,
    rng: random.Random | None = None,
) -> Action:
    """
    Choose an action for a seat.

    Boards are mutated during the search but always restored, so the
    state is unchanged when this returns.

    Args:
        state: Game state with a roll drawn
        player_index: Seat to choose for
        rng: Source for the weed cell choice; defaults to a fresh
            unseeded generator

    Returns:
        The chosen Action (Pass when nothing else applies)
    """
    me = state.players[player_index]
    roll = state.current_roll
    if roll is None:
        return Action.pass_()

    action = best_plant(me, roll)
    if action is None:
        action = best_steal(me, state)
    if action is None:
        action = best_swap(me, state)
    if action is None:
        action = best_weed(me, state, rng or random.Random())
    return action or Action.pass_()
