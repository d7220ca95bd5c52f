"""
minimax.py - Minimax search with alpha-beta pruning for 3D Connect Four

This module provides a MinimaxPlayer class that picks the computer's move by
searching the game tree to a fixed depth, plus the module-level ``minimax``
and ``get_best_move`` functions used by the orchestrator and the CLI.

Scoring is always from the AI player's point of view:
1. A position with a completed line is worth +1000 (AI won) or -1000
2. When depth runs out, or no column is open, the heuristic evaluator scores it
3. Otherwise children are searched in x-major, y-minor column order

Each child position is an independent copy of its parent, so no branch can
observe another branch's hypothetical moves.
"""

import math
from typing import Tuple

from connect4_3d.ai.heuristic import evaluate_board
from connect4_3d.debug import debug
from connect4_3d.exceptions import ConfigError
from connect4_3d.game.board import Board, apply_move
from connect4_3d.game.rules import check_winner
from connect4_3d.utils import DEFAULT_DEPTH, MAX_DEPTH, MIN_DEPTH, Column, Player

WIN_SCORE = 1000
LOSS_SCORE = -WIN_SCORE

# Returned by get_best_move when every column is full
NO_MOVE: Column = (-1, -1)


def validate_depth(depth) -> int:
    """Check a configured search depth, returning it unchanged."""
    if isinstance(depth, bool) or not isinstance(depth, int):
        raise ConfigError(f"Search depth must be an integer, got {depth!r}")
    if not MIN_DEPTH <= depth <= MAX_DEPTH:
        raise ConfigError(f"Search depth must be between {MIN_DEPTH} and {MAX_DEPTH}, got {depth}")
    return depth


class MinimaxPlayer:
    """
    A 3D Connect Four player that uses minimax with alpha-beta pruning.

    The player always maximizes for ``player``; the opponent's plies are the
    minimizing levels of the tree.
    """

    def __init__(self, depth: int = DEFAULT_DEPTH, player: Player = Player.TWO):
        """
        Initialize the minimax player.

        Args:
            depth: Plies searched below each candidate move (1-5)
            player: The player this AI moves for
        """
        if player not in (Player.ONE, Player.TWO):
            raise ConfigError(f"MinimaxPlayer cannot play as {player!r}")
        self.depth = validate_depth(depth)
        self.player = player
        self.nodes_evaluated = 0  # For performance tracking
        self.last_score = None

    def get_move(self, board: Board) -> Column:
        """
        Get the best column for this player.

        Args:
            board: The current position; it is never modified

        Returns:
            The (x, y) column to play, or NO_MOVE if the board is full
        """
        self.nodes_evaluated = 0

        debug.start_timer("search")
        move, score = self._search_root(board, self.depth)
        elapsed = debug.end_timer("search", "search")

        self.last_score = score
        if move == NO_MOVE:
            debug.warning("No legal move: every column is full", "search")
        else:
            debug.debug(f"Best move {move} score {score} depth {self.depth} "
                        f"({self.nodes_evaluated} nodes, {elapsed:.3f}s)", "search")
        return move

    def _search_root(self, board: Board, depth: int) -> Tuple[Column, float]:
        best_score = -math.inf
        best_move = NO_MOVE

        for x, y in board.valid_moves():
            child = apply_move(board, x, y, self.player)
            # The reply belongs to the opponent
            score = self._minimax(child, depth, -math.inf, math.inf, False)
            debug.trace(f"Candidate ({x}, {y}) scored {score}", "search")

            # Strict improvement keeps the first best column
            if score > best_score:
                best_score = score
                best_move = (x, y)

        return best_move, best_score

    def _minimax(self, board: Board, depth: int, alpha: float, beta: float,
                 is_maximizing: bool) -> int:
        """
        Minimax algorithm with alpha-beta pruning.

        Args:
            board: Current position
            depth: Remaining search depth
            alpha: Best score the maximizer can already guarantee
            beta: Best score the minimizer can already guarantee
            is_maximizing: True if it is this player's ply

        Returns:
            The score of this position for self.player
        """
        self.nodes_evaluated += 1

        # A finished line outranks any remaining depth
        winner = check_winner(board)
        if winner is not None:
            return WIN_SCORE if winner == self.player else LOSS_SCORE

        if depth == 0:
            return evaluate_board(board, self.player)

        valid_moves = board.valid_moves()
        if not valid_moves:
            return evaluate_board(board, self.player)

        if is_maximizing:
            max_score = -math.inf

            for x, y in valid_moves:
                child = apply_move(board, x, y, self.player)
                score = self._minimax(child, depth - 1, alpha, beta, False)

                if score > max_score:
                    max_score = score
                alpha = max(alpha, score)

                # Beta cutoff
                if beta <= alpha:
                    break

            return max_score

        else:  # Minimizing
            min_score = math.inf
            opponent = self.player.other()

            for x, y in valid_moves:
                child = apply_move(board, x, y, opponent)
                score = self._minimax(child, depth - 1, alpha, beta, True)

                if score < min_score:
                    min_score = score
                beta = min(beta, score)

                # Alpha cutoff
                if beta <= alpha:
                    break

            return min_score


def minimax(board: Board, depth: int, alpha: float, beta: float, maximizing: bool,
            ai_player: Player = Player.TWO) -> int:
    """
    Score ``board`` for ``ai_player`` with a depth-limited alpha-beta search.

    Unlike MinimaxPlayer this accepts any depth >= 0, so callers can use it
    as a reference search.
    """
    if depth < 0:
        raise ConfigError(f"Search depth cannot be negative, got {depth}")
    return MinimaxPlayer(player=ai_player)._minimax(board, depth, alpha, beta, maximizing)


def get_best_move(board: Board, depth: int, ai_player: Player = Player.TWO) -> Column:
    """
    Pick the column ``ai_player`` should play on ``board``.

    Returns:
        The (x, y) column, or NO_MOVE when every column is full
    """
    if depth < 0:
        raise ConfigError(f"Search depth cannot be negative, got {depth}")
    searcher = MinimaxPlayer(player=ai_player)
    move, score = searcher._search_root(board, depth)
    debug.debug(f"get_best_move depth {depth}: {move} (score {score})", "search")
    return move
