"""
Game State - Boards, players and the shared season state.

Design principles:
- Mutable in place: the engine owns the whole state during a turn
- Serializable: plain dataclasses, converted to wire schemas by the API
- Boards are owned by exactly one player; cross-player effects go
  through explicit actions
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


BOARD_SIZE = 6

# Wildcard dice face. Never a plantable value.
WILD = "Wild"


class Species(str, Enum):
    """The four plantable flower species."""
    ROSE = "Rose"
    LILY = "Lily"
    DAISY = "Daisy"
    FERN = "Fern"


class Zone(str, Enum):
    """Geometric constraint drawn on the zone die."""
    DIAGONAL = "Diagonal"
    EDGE = "Edge"
    CENTER = "Center"
    FREE = "Free"


def in_bounds(r: int, c: int) -> bool:
    """Check a 1-indexed coordinate against the 6x6 grid."""
    return 1 <= r <= BOARD_SIZE and 1 <= c <= BOARD_SIZE


@dataclass
class Cell:
    """
    A single board square.

    `pond` and `bee` are terrain, fixed when the board is built.
    `species`, `weed` and `flooded` change during play; legality checks
    treat them as mutually exclusive.
    """
    row: int
    col: int
    species: Species | None = None
    weed: bool = False
    flooded: bool = False
    pond: bool = False
    bee: bool = False

    @property
    def is_open(self) -> bool:
        """Empty, unweeded and not flooded."""
        return self.species is None and not self.weed and not self.flooded


@dataclass
class Board:
    """A 6x6 grid of cells addressed with 1-indexed (row, col)."""
    cells: list[list[Cell]] = field(default_factory=list)

    def cell(self, r: int, c: int) -> Cell:
        return self.cells[r - 1][c - 1]

    def species_at(self, r: int, c: int) -> Species | None:
        return self.cells[r - 1][c - 1].species

    def iter_cells(self) -> Iterator[Cell]:
        """Iterate cells in row-major order."""
        for row in self.cells:
            yield from row


@dataclass(frozen=True)
class DiceRoll:
    """
    The season's roll, shared read-only by every player.

    `colors` holds two faces, each a Species or WILD.
    """
    colors: tuple[Species | str, Species | str]
    row: int
    col: int
    zone: Zone

    @property
    def has_wild(self) -> bool:
        return WILD in self.colors


@dataclass
class GameConfig:
    """Per-game options."""
    solo_mode: bool = False
    seed: int | None = None


@dataclass
class PlayerState:
    """
    State for a single seat.

    `last_pattern_points` / `last_pattern_tokens` hold the board's pattern
    value at the last ratchet, not the player's cumulative score.
    """
    id: int
    name: str
    board: Board
    hand: list[Species] = field(default_factory=list)
    tokens: int = 0
    score: int = 0
    last_pattern_points: int = 0
    last_pattern_tokens: int = 0
    passed: bool = False
    flood_active: bool = False


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    `water_step` drives the event schedule and stops at 8; `season` keeps
    counting, so the game is over once it passes 8.
    """
    players: list[PlayerState] = field(default_factory=list)
    bag: list[Species] = field(default_factory=list)
    season: int = 1
    water_step: int = 1
    current_roll: DiceRoll | None = None
    current_player_idx: int = 0
    start_player_idx: int = 0
    weeds_remaining: int = 10
    config: GameConfig = field(default_factory=GameConfig)

    @property
    def current_player(self) -> PlayerState:
        """Get the current player."""
        return self.players[self.current_player_idx]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_over(self) -> bool:
        return self.season > 8

    def get_player(self, player_id: int) -> PlayerState | None:
        """Get player by seat index."""
        if 0 <= player_id < len(self.players):
            return self.players[player_id]
        return None
