"""
Flood - Pond overflow onto orthogonal neighbours.

A flood marks every open, non-pond neighbour of a pond as flooded. Floods
are cleared at the start of each season.
"""

from __future__ import annotations

from .state import Board, Cell, in_bounds
from .scoring import ORTHOGONAL


def list_ponds(board: Board) -> list[tuple[int, int]]:
    """Pond coordinates in row-major order."""
    return [(cell.row, cell.col) for cell in board.iter_cells() if cell.pond]


def _floodable_neighbours(board: Board, pond: tuple[int, int]) -> list[Cell]:
    r, c = pond
    out = []
    for dr, dc in ORTHOGONAL:
        nr, nc = r + dr, c + dc
        if not in_bounds(nr, nc):
            continue
        cell = board.cell(nr, nc)
        if cell.is_open and not cell.pond:
            out.append(cell)
    return out


def count_flood_potential(board: Board, pond: tuple[int, int]) -> int:
    """How many neighbours would flood from this pond."""
    return len(_floodable_neighbours(board, pond))


def apply_flood(board: Board, pond: tuple[int, int]) -> int:
    """Flood the pond's open neighbours. Returns how many cells flooded."""
    cells = _floodable_neighbours(board, pond)
    for cell in cells:
        cell.flooded = True
    return len(cells)


def clear_flood(board: Board) -> None:
    for cell in board.iter_cells():
        cell.flooded = False
