"""
Board Rules - Board construction, dice, and placement legality.

Positional dice use OR logic: a cell qualifies when its row matches the
row die or its column matches the column die. The zone die must also
allow the cell. Pond and bee terrain never blocks occupancy.
"""

from __future__ import annotations
import random

from .state import (
    BOARD_SIZE,
    WILD,
    Board,
    Cell,
    DiceRoll,
    Species,
    Zone,
)


# Terrain shared by every board in a game
PONDS: list[tuple[int, int]] = [(2, 3), (2, 5), (5, 2), (5, 5)]
BEES: list[tuple[int, int]] = [(1, 2), (2, 5), (6, 3), (6, 6)]

# Two of six color faces are wild
COLOR_FACES: list[Species | str] = [
    Species.ROSE,
    Species.LILY,
    Species.DAISY,
    Species.FERN,
    WILD,
    WILD,
]

REROLL = "ReRoll"
ZONE_FACES: list[Zone | str] = [Zone.DIAGONAL, Zone.EDGE, Zone.CENTER, Zone.FREE, REROLL]
REAL_ZONES: list[Zone] = [Zone.DIAGONAL, Zone.EDGE, Zone.CENTER, Zone.FREE]


def make_empty_board(
    ponds: list[tuple[int, int]] | None = None,
    bees: list[tuple[int, int]] | None = None,
) -> Board:
    """Build a 6x6 board of empty cells, then mark ponds and bees."""
    cells = [
        [Cell(row=r, col=c) for c in range(1, BOARD_SIZE + 1)]
        for r in range(1, BOARD_SIZE + 1)
    ]
    board = Board(cells=cells)
    for r, c in (PONDS if ponds is None else ponds):
        board.cell(r, c).pond = True
    for r, c in (BEES if bees is None else bees):
        board.cell(r, c).bee = True
    return board


def _pick(rng: random.Random, faces: list):
    return faces[int(rng.random() * len(faces))]


def roll_dice(rng: random.Random) -> DiceRoll:
    """
    Roll the four dice.

    The zone die has a fifth ReRoll face; on ReRoll the zone is redrawn
    from the four real zones, so each real zone ends up at exactly 1/4.
    """
    zone = _pick(rng, ZONE_FACES)
    if zone == REROLL:
        zone = _pick(rng, REAL_ZONES)

    colors = (_pick(rng, COLOR_FACES), _pick(rng, COLOR_FACES))
    row = int(rng.random() * BOARD_SIZE) + 1
    col = int(rng.random() * BOARD_SIZE) + 1
    return DiceRoll(colors=colors, row=row, col=col, zone=zone)


def allowed_species_from_hand(
    colors: tuple[Species | str, Species | str],
    hand: list[Species],
) -> list[Species]:
    """Distinct species in hand that the color dice allow, in hand order."""
    wild = WILD in colors
    allowed: list[Species] = []
    for s in hand:
        if s in allowed:
            continue
        if wild or s == colors[0] or s == colors[1]:
            allowed.append(s)
    return allowed


def zone_allows_cell(zone: Zone, r: int, c: int) -> bool:
    if zone == Zone.DIAGONAL:
        return r == c or r + c == BOARD_SIZE + 1
    if zone == Zone.EDGE:
        return r == 1 or r == BOARD_SIZE or c == 1 or c == BOARD_SIZE
    if zone == Zone.CENTER:
        return 2 <= r <= BOARD_SIZE - 1 and 2 <= c <= BOARD_SIZE - 1
    return True


def spatially_allowed(board: Board, roll: DiceRoll, r: int, c: int) -> bool:
    """Positional and zone check for an explicit destination."""
    if not (r == roll.row or c == roll.col):
        return False
    return zone_allows_cell(roll.zone, r, c)


def legal_cells(board: Board, roll: DiceRoll) -> list[tuple[int, int]]:
    """Open cells the roll allows, in row-major order."""
    return [
        (cell.row, cell.col)
        for cell in board.iter_cells()
        if cell.is_open and spatially_allowed(board, roll, cell.row, cell.col)
    ]


def legal_weed_cells(board: Board, roll: DiceRoll) -> list[tuple[int, int]]:
    """Weeds follow the same placement rule as flowers."""
    return legal_cells(board, roll)


def empty_cells(board: Board) -> list[tuple[int, int]]:
    """All open cells, ignoring the dice."""
    return [(cell.row, cell.col) for cell in board.iter_cells() if cell.is_open]
