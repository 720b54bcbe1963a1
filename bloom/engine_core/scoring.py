"""
Pattern Scoring - Instantaneous point/token value of a board.

score_board() is pure and recomputed from scratch on every call. The
engine turns changes in this value into score through the ratchet in the
reducer.

Patterns:
- Line runs: +3 per maximal run of 3+ same-species cells in a row or
  column; +1 token if any run exists
- Clusters: +4 per orthogonally connected same-species group of 4+;
  +1 token if any cluster exists
- Mirror: +5 and +1 token once, for a connected group of 2+ flowers that
  is its own reflection across the vertical centre line (c -> 7 - c)
- Pollinator path: +6 and +1 token once, for a connected group of 5+
  flowers covering 2+ bee cells
- Pond adjacency: +1 per flower orthogonally next to a pond
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

from .state import BOARD_SIZE, Board, Cell, in_bounds


LINE_RUN_POINTS = 3
CLUSTER_POINTS = 4
MIRROR_POINTS = 5
POLLINATOR_POINTS = 6
HARVEST_POINTS_PER_CLUSTER = 2

MIN_RUN = 3
MIN_CLUSTER = 4
MIN_MIRROR = 2
MIN_POLLINATOR = 5
MIN_BEES = 2

ORTHOGONAL = ((-1, 0), (1, 0), (0, -1), (0, 1))
SURROUNDING = tuple((dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0))


@dataclass(frozen=True)
class Score:
    points: int = 0
    tokens: int = 0


def score_board(board: Board) -> Score:
    """Compute the board's total pattern points and tokens."""
    points = 0
    tokens = 0

    runs = count_line_runs(board)
    if runs > 0:
        points += LINE_RUN_POINTS * runs
        tokens += 1

    clusters = count_clusters(board)
    if clusters > 0:
        points += CLUSTER_POINTS * clusters
        tokens += 1

    if has_mirrored_component(board):
        points += MIRROR_POINTS
        tokens += 1

    if has_pollinator_path(board):
        points += POLLINATOR_POINTS
        tokens += 1

    points += count_pond_adjacent(board)
    return Score(points=points, tokens=tokens)


def harvest_bonus_clusters(board: Board) -> int:
    """End-of-game harvest: +2 per qualifying cluster."""
    return count_clusters(board) * HARVEST_POINTS_PER_CLUSTER


def count_pond_touchers(board: Board) -> int:
    """Flowers with a pond in any of the 8 surrounding cells. Podium metric only."""
    total = 0
    for cell in board.iter_cells():
        if cell.species is None:
            continue
        if any(
            in_bounds(cell.row + dr, cell.col + dc) and board.cell(cell.row + dr, cell.col + dc).pond
            for dr, dc in SURROUNDING
        ):
            total += 1
    return total


# =============================================================================
# Pattern detectors
# =============================================================================

def _count_runs(line: list[Cell]) -> int:
    runs = 0
    current = None
    length = 0
    for cell in line:
        if cell.species is not None and cell.species == current:
            length += 1
            continue
        if current is not None and length >= MIN_RUN:
            runs += 1
        current = cell.species
        length = 1 if current is not None else 0
    if current is not None and length >= MIN_RUN:
        runs += 1
    return runs


def count_line_runs(board: Board) -> int:
    """Maximal same-species runs of 3+ across all rows and columns."""
    rows = board.cells
    cols = [[board.cell(r, c) for r in range(1, BOARD_SIZE + 1)] for c in range(1, BOARD_SIZE + 1)]
    return sum(_count_runs(line) for line in rows) + sum(_count_runs(line) for line in cols)


def _components(
    board: Board,
    same_group: Callable[[Cell, Cell], bool],
) -> list[list[Cell]]:
    """Orthogonally connected groups of planted cells under `same_group`."""
    seen: set[tuple[int, int]] = set()
    components: list[list[Cell]] = []
    for start in board.iter_cells():
        if start.species is None or (start.row, start.col) in seen:
            continue
        component: list[Cell] = []
        stack = [start]
        seen.add((start.row, start.col))
        while stack:
            cell = stack.pop()
            component.append(cell)
            for dr, dc in ORTHOGONAL:
                nr, nc = cell.row + dr, cell.col + dc
                if not in_bounds(nr, nc) or (nr, nc) in seen:
                    continue
                neighbour = board.cell(nr, nc)
                if neighbour.species is None or not same_group(start, neighbour):
                    continue
                seen.add((nr, nc))
                stack.append(neighbour)
        components.append(component)
    return components


def _same_species(a: Cell, b: Cell) -> bool:
    return a.species == b.species


def _any_species(a: Cell, b: Cell) -> bool:
    return True


def count_clusters(board: Board) -> int:
    """Same-species connected groups of 4+."""
    return sum(1 for comp in _components(board, _same_species) if len(comp) >= MIN_CLUSTER)


def has_mirrored_component(board: Board) -> bool:
    """True if some connected group of 2+ flowers mirrors itself across c -> 7 - c."""
    for comp in _components(board, _any_species):
        if len(comp) < MIN_MIRROR:
            continue
        members = {(cell.row, cell.col) for cell in comp}
        if all(
            (cell.row, BOARD_SIZE + 1 - cell.col) in members
            and board.species_at(cell.row, BOARD_SIZE + 1 - cell.col) == cell.species
            for cell in comp
        ):
            return True
    return False


def has_pollinator_path(board: Board) -> bool:
    """True if a connected group of 5+ flowers covers 2+ bee cells."""
    for comp in _components(board, _any_species):
        if len(comp) >= MIN_POLLINATOR and sum(1 for cell in comp if cell.bee) >= MIN_BEES:
            return True
    return False


def count_pond_adjacent(board: Board) -> int:
    """Flowers with at least one orthogonal pond neighbour."""
    total = 0
    for cell in board.iter_cells():
        if cell.species is None:
            continue
        if any(
            in_bounds(cell.row + dr, cell.col + dc) and board.cell(cell.row + dr, cell.col + dc).pond
            for dr, dc in ORTHOGONAL
        ):
            total += 1
    return total
