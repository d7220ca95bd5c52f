"""
board.py - Board representation and gravity mechanics for 3D Connect Four

This module implements the Board class, a 4x4x4 grid indexed (x, y, z)
where z is the gravity axis. Pieces dropped into an (x, y) column land on
the lowest empty cell, so every column is a contiguous stack from z=0.
"""

from typing import List, Optional

import numpy as np

from connect4_3d.debug import debug
from connect4_3d.exceptions import InvalidMoveError
from connect4_3d.utils import (BOARD_SIZE, BOARD_SHAPE, Column, Player,
                               PLAYER_SYMBOLS, SYMBOL_PLAYERS, is_valid_column,
                               render_board_ascii)


class Board:
    """
    Represents a 3D Connect Four game board.

    The board only knows about cells and gravity. Turn order, winners and
    game results live in the rules module and the turn orchestrator.
    """

    __hash__ = None

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Initialize a board.

        Args:
            grid: Optional (4, 4, 4) array of Player values; copied if given
        """
        if grid is None:
            self.grid = np.zeros(BOARD_SHAPE, dtype=np.int8)
        else:
            grid = np.array(grid, dtype=np.int8)
            if grid.shape != BOARD_SHAPE:
                raise ValueError(f"Board grid must have shape {BOARD_SHAPE}, got {grid.shape}")
            self.grid = grid

    @classmethod
    def from_string(cls, position: str, validate: bool = True) -> 'Board':
        """
        Build a board from a 64-character position string.

        Characters are '.', 'X' and 'O' in x-major, then y, then z order.
        Whitespace is ignored so positions can be written column by column.

        Args:
            position: The position string
            validate: Reject positions with floating pieces

        Returns:
            The decoded board
        """
        symbols = "".join(position.split()).upper()
        if len(symbols) != BOARD_SIZE ** 3:
            raise ValueError(f"Position string must have {BOARD_SIZE ** 3} cells, got {len(symbols)}")

        try:
            values = [SYMBOL_PLAYERS[symbol].value for symbol in symbols]
        except KeyError as e:
            raise ValueError(f"Unknown cell symbol {e.args[0]!r} in position string") from None

        board = cls(np.array(values, dtype=np.int8).reshape(BOARD_SHAPE))
        if validate and not board.is_gravity_consistent():
            raise ValueError("Position has pieces floating above empty cells")
        return board

    def to_string(self) -> str:
        """Encode the board in the format read by from_string."""
        return "".join(PLAYER_SYMBOLS[Player(int(v))] for v in self.grid.ravel())

    def copy(self) -> 'Board':
        """
        Create a deep copy of the board.

        Returns:
            A new Board whose grid shares no memory with this one
        """
        return Board(self.grid)

    def cell(self, x: int, y: int, z: int) -> Player:
        return Player(int(self.grid[x, y, z]))

    def column_height(self, x: int, y: int) -> int:
        """Number of pieces stacked in column (x, y)."""
        return int(np.count_nonzero(self.grid[x, y]))

    def column_is_full(self, x: int, y: int) -> bool:
        """True iff the top cell of column (x, y) is occupied."""
        return bool(self.grid[x, y, BOARD_SIZE - 1] != Player.EMPTY.value)

    def is_valid_move(self, x: int, y: int) -> bool:
        """
        Check if a piece can be dropped into column (x, y).

        Returns:
            True if the column exists and is not full
        """
        return is_valid_column(x, y) and not self.column_is_full(x, y)

    def valid_moves(self) -> List[Column]:
        """Open columns in x-major, y-minor order."""
        return [(x, y)
                for x in range(BOARD_SIZE)
                for y in range(BOARD_SIZE)
                if self.grid[x, y, BOARD_SIZE - 1] == Player.EMPTY.value]

    def drop(self, x: int, y: int, player: Player) -> int:
        """
        Drop a piece into column (x, y) of this board, in place.

        Args:
            x: Column x coordinate
            y: Column y coordinate
            player: The player whose piece is dropped

        Returns:
            The height z the piece landed on

        Raises:
            InvalidMoveError: if the column is full or off the board
        """
        if player not in (Player.ONE, Player.TWO):
            raise InvalidMoveError(f"Cannot drop a piece for {player!r}", x, y)
        if not is_valid_column(x, y):
            raise InvalidMoveError(f"Column ({x!r}, {y!r}) is not on the board", x, y)
        if self.column_is_full(x, y):
            raise InvalidMoveError(f"Column ({x}, {y}) is full", x, y)

        z = self.column_height(x, y)
        self.grid[x, y, z] = player.value
        debug.trace(f"Placed {player.name} at ({x}, {y}, {z})", "board")
        return z

    def is_full(self) -> bool:
        """True iff every column is full (no move remains)."""
        return bool(np.all(self.grid[:, :, BOARD_SIZE - 1] != Player.EMPTY.value))

    def is_empty(self) -> bool:
        return not self.grid.any()

    def move_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def is_gravity_consistent(self) -> bool:
        """Check that every column is a contiguous stack starting at z=0."""
        occupied = self.grid != Player.EMPTY.value
        # Once a column has an empty cell, nothing above it may be occupied
        return not np.any(occupied[:, :, 1:] & ~occupied[:, :, :-1])

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    def __repr__(self) -> str:
        return f"Board({self.to_string()!r})"

    def __str__(self) -> str:
        return self.render()


def create_empty_board() -> Board:
    """Create a board with all 64 cells empty."""
    return Board()


def column_is_full(board: Board, x: int, y: int) -> bool:
    return board.column_is_full(x, y)


def apply_move(board: Board, x: int, y: int, player: Player) -> Board:
    """
    Return a new board with ``player``'s piece dropped into column (x, y).

    The input board is left untouched, so search branches can share a
    parent position safely.

    Raises:
        InvalidMoveError: if the column is full or off the board
    """
    new_board = board.copy()
    new_board.drop(x, y, player)
    return new_board


def is_full(board: Board) -> bool:
    return board.is_full()
