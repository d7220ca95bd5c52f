"""
connect4_3d.game - Core game mechanics for 3D Connect Four

This package contains the board representation, win detection, turn
orchestration and the Gymnasium environment. Only the board and the rules
are imported here; the orchestrator and the environment depend on
connect4_3d.ai, which in turn depends on this package.
"""

from connect4_3d.game.board import Board, apply_move, column_is_full, create_empty_board, is_full
from connect4_3d.game.rules import check_winner, find_winning_line, get_game_result

__all__ = [
    'Board', 'apply_move', 'column_is_full', 'create_empty_board', 'is_full',
    'check_winner', 'find_winning_line', 'get_game_result',
]
