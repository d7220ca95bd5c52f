"""
rules.py - Win detection and game results for 3D Connect Four

A player wins by owning four consecutive cells along any of the 13 line
directions. The scan visits cells in x, y, z order with the directions
innermost and reports the first complete line it meets.

The windows are enumerated once at import time and stored as numpy index
tables, so checking a board is a single fancy-indexing pass over the
raveled grid rather than a Python loop over 832 windows.
"""

from typing import Iterator, List, Optional, Tuple

import numpy as np

from connect4_3d.debug import debug
from connect4_3d.game.board import Board
from connect4_3d.utils import (BOARD_SIZE, DIRECTION_VECTORS, WINNING_LENGTH, Coord,
                               GameResult, Player, flat_index, is_valid_position)

Window = Tuple[Coord, ...]

# Index of the padding cell appended after the 64 real cells; always EMPTY
PAD_INDEX = BOARD_SIZE ** 3


def iter_windows(include_partial: bool = False) -> Iterator[Window]:
    """
    Yield the cells of every window in scan order.

    A window starts at a cell and takes up to WINNING_LENGTH steps along one
    of the 13 directions, stopping at the first step off the board.

    Args:
        include_partial: Also yield windows cut short by the board edge

    Yields:
        Tuples of (x, y, z) coordinates, starting cell first
    """
    for x in range(BOARD_SIZE):
        for y in range(BOARD_SIZE):
            for z in range(BOARD_SIZE):
                for dx, dy, dz in DIRECTION_VECTORS:
                    cells = []
                    for i in range(WINNING_LENGTH):
                        position = (x + i * dx, y + i * dy, z + i * dz)
                        if not is_valid_position(*position):
                            break
                        cells.append(position)
                    if include_partial or len(cells) == WINNING_LENGTH:
                        yield tuple(cells)


def build_window_index(include_partial: bool) -> np.ndarray:
    """
    Build a (windows, WINNING_LENGTH) table of raveled cell indices.

    Cells missing from a partial window point at PAD_INDEX.
    """
    rows = []
    for window in iter_windows(include_partial):
        indices = [flat_index(*cell) for cell in window]
        indices += [PAD_INDEX] * (WINNING_LENGTH - len(indices))
        rows.append(indices)
    return np.array(rows, dtype=np.intp)


# The 76 complete lines of the 4x4x4 cube, in scan order
LINE_INDEX = build_window_index(include_partial=False)
LINES: List[Window] = list(iter_windows())


def _line_hits(board: Board) -> Tuple[np.ndarray, np.ndarray]:
    cells = board.grid.ravel()[LINE_INDEX]
    hits = (cells[:, 0] != Player.EMPTY.value) & np.all(cells == cells[:, :1], axis=1)
    return cells, hits


def check_winner(board: Board) -> Optional[Player]:
    """
    Find the player who owns a complete line, if any.

    Wins are assumed unique; if a position somehow held lines for both
    players, the first one in scan order is reported.

    Args:
        board: The board to inspect

    Returns:
        The winning player, or None
    """
    cells, hits = _line_hits(board)
    if not hits.any():
        return None
    return Player(int(cells[int(np.argmax(hits)), 0]))


def find_winning_line(board: Board) -> List[Coord]:
    """
    Get the cells of the first winning line.

    Returns:
        List of four (x, y, z) positions, or an empty list if nobody has won
    """
    _, hits = _line_hits(board)
    if not hits.any():
        return []
    return list(LINES[int(np.argmax(hits))])


def get_game_result(board: Board) -> GameResult:
    """Classify a board as a win, a draw or a game still in progress."""
    winner = check_winner(board)
    if winner is not None:
        debug.debug(f"Line completed by {winner.name}", "rules")
        return GameResult.for_winner(winner)
    if board.is_full():
        return GameResult.DRAW
    return GameResult.IN_PROGRESS
