"""
connect4_3d - Three-dimensional Connect Four with a minimax opponent

This package provides a 4x4x4 gravity board, win detection along the 13
line directions of the cube, a heuristic evaluator and an alpha-beta
minimax search, and a turn orchestrator that sequences human and computer
moves for a presentation layer.
"""

# Version number
__version__ = '0.1.0'
