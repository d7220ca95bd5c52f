"""
connect4_3d/ai/__init__.py - Computer opponent for 3D Connect Four

The heuristic evaluator scores positions and the minimax module searches
the game tree with alpha-beta pruning.
"""

from connect4_3d.ai.heuristic import evaluate_board
from connect4_3d.ai.minimax import NO_MOVE, MinimaxPlayer, get_best_move, minimax

__all__ = ['evaluate_board', 'NO_MOVE', 'MinimaxPlayer', 'get_best_move', 'minimax']
