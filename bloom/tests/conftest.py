"""
Pytest fixtures for Bloom tests.
"""

import pytest

from ..engine_core.state import DiceRoll, GameConfig, GameState, PlayerState, Species, Zone
from ..engine_core.rules import make_empty_board


def blank_board():
    """A board with no ponds and no bees."""
    return make_empty_board(ponds=[], bees=[])


def plant(board, species, *cells):
    """Put `species` on each (r, c) without going through the engine."""
    for r, c in cells:
        board.cell(r, c).species = species
    return board


def make_state(
    num_players=2,
    roll=None,
    hands=None,
    tokens=3,
    boards=None,
    config=None,
):
    """
    Build a mid-season GameState directly.

    Boards default to blank boards; the bag is empty.
    """
    players = []
    for i in range(num_players):
        players.append(
            PlayerState(
                id=i,
                name=f"P{i + 1}",
                board=boards[i] if boards else blank_board(),
                hand=list(hands[i]) if hands else [],
                tokens=tokens,
            )
        )
    return GameState(
        players=players,
        bag=[],
        current_roll=roll,
        config=config or GameConfig(),
    )


class FakeRng:
    """Replays fixed values from random()."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


@pytest.fixture
def row1_roll() -> DiceRoll:
    """Rose/Lily, row 1, column 1, no zone restriction."""
    return DiceRoll(colors=(Species.ROSE, Species.LILY), row=1, col=1, zone=Zone.FREE)


@pytest.fixture
def two_player_state(row1_roll) -> GameState:
    """Two players on blank boards, P1 holding a Rose and a Fern."""
    return make_state(
        num_players=2,
        roll=row1_roll,
        hands=[[Species.ROSE, Species.FERN], [Species.LILY]],
    )


@pytest.fixture
def three_player_state(row1_roll) -> GameState:
    return make_state(num_players=3, roll=row1_roll, hands=[[], [], []])
