"""
heuristic.py - Static position evaluation for the minimax search

Every (cell, direction) window is scored from one player's point of view:
windows only one side has entered are worth the number of pieces in them
(positive for the player, negative for the opponent), a full window is worth
100, and windows both sides have entered are dead. Windows are not
deduplicated, so well-connected central cells count more often.
"""

import numpy as np

from connect4_3d.game.board import Board
from connect4_3d.game.rules import build_window_index
from connect4_3d.utils import WINNING_LENGTH, Player

COMPLETED_WINDOW_SCORE = 100

# All 832 (cell, direction) windows, including those cut short by an edge
WINDOW_INDEX = build_window_index(include_partial=True)


def evaluate_board(board: Board, player: Player) -> int:
    """
    Score a position for ``player``.

    Args:
        board: The position to score
        player: The player the search is maximizing for

    Returns:
        Sum of the window scores; 0 for an empty board
    """
    opponent = player.other()
    # Off-board slots of partial windows read the trailing EMPTY cell
    padded = np.append(board.grid.ravel(), np.int8(Player.EMPTY.value))
    cells = padded[WINDOW_INDEX]

    mine = np.count_nonzero(cells == player.value, axis=1)
    theirs = np.count_nonzero(cells == opponent.value, axis=1)

    own_score = np.where(mine == WINNING_LENGTH, COMPLETED_WINDOW_SCORE, mine)
    their_score = np.where(theirs == WINNING_LENGTH, -COMPLETED_WINDOW_SCORE, -theirs)
    scores = np.where(theirs == 0, own_score, np.where(mine == 0, their_score, 0))

    return int(scores.sum())
