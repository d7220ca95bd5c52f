"""
utils.py - Constants, enumerations and helpers for the 3D Connect Four engine

This module holds the board geometry (edge length, winning length, the 13
line directions), the Player and GameResult enumerations, and the ASCII
renderer shared by the board, the CLI and the Gymnasium environment.
"""

import numbers
from enum import Enum, auto
from typing import List, Optional, Tuple

import numpy as np

# Game constants
BOARD_SIZE = 4
WINNING_LENGTH = 4
BOARD_SHAPE = (BOARD_SIZE, BOARD_SIZE, BOARD_SIZE)  # (x, y, z), z is the gravity axis
NUM_COLUMNS = BOARD_SIZE * BOARD_SIZE

# Search depth limits exposed to the presentation layer
MIN_DEPTH = 1
MAX_DEPTH = 5
DEFAULT_DEPTH = 3

Coord = Tuple[int, int, int]
Column = Tuple[int, int]


class Player(Enum):
    """Enumeration representing players and cell states."""
    EMPTY = 0
    ONE = 1    # Human, moves first unless the AI opens
    TWO = 2    # Computer

    def other(self) -> 'Player':
        """Get the other player."""
        if self == Player.ONE:
            return Player.TWO
        elif self == Player.TWO:
            return Player.ONE
        return Player.EMPTY

    @property
    def symbol(self) -> str:
        return PLAYER_SYMBOLS[self]

    def __str__(self):
        return self.symbol


PLAYER_SYMBOLS = {
    Player.EMPTY: ".",
    Player.ONE: "X",
    Player.TWO: "O",
}
SYMBOL_PLAYERS = {symbol: player for player, symbol in PLAYER_SYMBOLS.items()}


class GameResult(Enum):
    """Enumeration representing the game outcome."""
    IN_PROGRESS = auto()
    PLAYER_ONE_WIN = auto()
    PLAYER_TWO_WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self != GameResult.IN_PROGRESS

    @property
    def winner(self) -> Optional[Player]:
        if self == GameResult.PLAYER_ONE_WIN:
            return Player.ONE
        if self == GameResult.PLAYER_TWO_WIN:
            return Player.TWO
        return None

    @classmethod
    def for_winner(cls, player: Player) -> 'GameResult':
        if player == Player.ONE:
            return cls.PLAYER_ONE_WIN
        if player == Player.TWO:
            return cls.PLAYER_TWO_WIN
        raise ValueError(f"{player!r} cannot win a game")


# One vector per undirected line through a cell. Together with their
# negations they cover all 26 neighbours exactly once.
DIRECTION_VECTORS: List[Coord] = [
    (1, 0, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 1, 0),
    (1, -1, 0),
    (1, 0, 1),
    (1, 0, -1),
    (0, 1, 1),
    (0, 1, -1),
    (1, 1, 1),
    (1, 1, -1),
    (1, -1, 1),
    (1, -1, -1),
]


def is_valid_position(x: int, y: int, z: int) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        x: X index
        y: Y index
        z: Height index

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE and 0 <= z < BOARD_SIZE


def is_valid_column(x: int, y: int) -> bool:
    """Check if (x, y) names one of the 16 columns. Only integer coordinates qualify."""
    for value in (x, y):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            return False
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def flat_index(x: int, y: int, z: int) -> int:
    """Position of (x, y, z) in a C-ordered ravel of the grid."""
    return (x * BOARD_SIZE + y) * BOARD_SIZE + z


def column_to_action(x: int, y: int) -> int:
    return x * BOARD_SIZE + y


def action_to_column(action: int) -> Column:
    return divmod(int(action), BOARD_SIZE)


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render the board as ASCII art, one horizontal slice per height.

    Slices are printed side by side from the bottom (z=0) to the top.
    Within a slice, rows are y and columns are x.

    Args:
        grid: The (x, y, z) game grid

    Returns:
        ASCII representation of the board
    """
    gap = "   "
    block_width = BOARD_SIZE * 2 - 1
    x_labels = " ".join(str(x) for x in range(BOARD_SIZE))

    header = "    " + gap.join(f"z={z}".ljust(block_width) for z in range(BOARD_SIZE))
    result = [header, "    " + gap.join(x_labels for _ in range(BOARD_SIZE))]

    for y in range(BOARD_SIZE):
        blocks = []
        for z in range(BOARD_SIZE):
            blocks.append(" ".join(Player(int(grid[x, y, z])).symbol for x in range(BOARD_SIZE)))
        result.append(f"y{y}  " + gap.join(blocks))

    return "\n".join(result)
