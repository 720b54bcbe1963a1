"""
Action Generator - Enumerates the legal actions of a seat.

The action generator is used by:
1. The API to show a seat what it can do
2. Tests, to check the reducer accepts everything listed here

Design: Generates fully-specified Action objects. Under-resourced actions
are left out even though the reducer would accept them as a pass.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import WILD, GameState, PlayerState
from .action import Action, ShovelTarget
from .rules import allowed_species_from_hand, legal_cells, legal_weed_cells, spatially_allowed
from .reducer import STEAL_COST, SWAP_COST


@dataclass
class ActionGenerator:
    """Generates legal actions for one seat under the current roll."""

    def generate(self, state: GameState, player_index: int) -> list[Action]:
        """
        Generate every legal action for a seat, Pass last.

        Returns an empty list when no roll is drawn, the game is over or
        the seat has already passed.
        """
        player = state.get_player(player_index)
        if player is None or state.current_roll is None or state.is_over or player.passed:
            return []

        actions: list[Action] = []
        actions.extend(self._plants(state, player))
        actions.extend(self._weeds(state, player))
        actions.extend(self._shovels(state, player))
        actions.extend(self._steals(state, player))
        actions.extend(self._swaps(state, player))
        actions.append(Action.pass_())
        return actions

    def _opponents(self, state: GameState, player: PlayerState) -> list[PlayerState]:
        return [p for p in state.players if p.id != player.id]

    def _plants(self, state: GameState, player: PlayerState) -> list[Action]:
        roll = state.current_roll
        allowed = allowed_species_from_hand(roll.colors, player.hand)
        return [
            Action.plant(species, r, c)
            for r, c in legal_cells(player.board, roll)
            for species in allowed
        ]

    def _weeds(self, state: GameState, player: PlayerState) -> list[Action]:
        if player.tokens < 1 or state.weeds_remaining <= 0:
            return []
        return [
            Action.plant_weed(opponent.id, r, c)
            for opponent in self._opponents(state, player)
            for r, c in legal_weed_cells(opponent.board, state.current_roll)
        ]

    def _shovels(self, state: GameState, player: PlayerState) -> list[Action]:
        if player.tokens < 1:
            return []
        actions = []
        for owner in state.players:
            for cell in owner.board.iter_cells():
                if cell.weed:
                    actions.append(Action.shovel(ShovelTarget.WEED, cell.row, cell.col, owner.id))
        for cell in player.board.iter_cells():
            if cell.flooded:
                actions.append(Action.shovel(ShovelTarget.FLOOD, cell.row, cell.col))
            if cell.species is not None:
                actions.append(Action.shovel(ShovelTarget.FLOWER, cell.row, cell.col))
        return actions

    def _steals(self, state: GameState, player: PlayerState) -> list[Action]:
        if player.tokens < STEAL_COST:
            return []
        roll = state.current_roll
        c1, c2 = roll.colors
        destinations = legal_cells(player.board, roll)
        actions = []
        for victim in self._opponents(state, player):
            for source in victim.board.iter_cells():
                species = source.species
                if species is None:
                    continue
                if not (c1 == WILD or c2 == WILD or species == c1 or species == c2):
                    continue
                for to_r, to_c in destinations:
                    actions.append(
                        Action.steal(victim.id, source.row, source.col, to_r, to_c, species=species)
                    )
        return actions

    def _swaps(self, state: GameState, player: PlayerState) -> list[Action]:
        if player.tokens < SWAP_COST:
            return []
        roll = state.current_roll
        mine = [
            cell for cell in player.board.iter_cells()
            if cell.species is not None and spatially_allowed(player.board, roll, cell.row, cell.col)
        ]
        actions = []
        for opponent in self._opponents(state, player):
            theirs = [
                cell for cell in opponent.board.iter_cells()
                if cell.species is not None
                and spatially_allowed(opponent.board, roll, cell.row, cell.col)
            ]
            for a in mine:
                for b in theirs:
                    actions.append(Action.swap(opponent.id, a.row, a.col, b.row, b.col))
        return actions


def legal_actions(state: GameState, player_index: int) -> list[Action]:
    """Convenience function to generate legal actions for a seat."""
    generator = ActionGenerator()
    return generator.generate(state, player_index)
