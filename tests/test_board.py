import random
import unittest

import numpy as np

from connect4_3d.exceptions import InvalidMoveError
from connect4_3d.game.board import Board, apply_move, column_is_full, create_empty_board, is_full
from connect4_3d.utils import BOARD_SIZE, Player


def fill_all_columns(board):
    """Fill every column with alternating pieces, column by column."""
    player = Player.ONE
    for x in range(BOARD_SIZE):
        for y in range(BOARD_SIZE):
            while not board.column_is_full(x, y):
                board.drop(x, y, player)
                player = player.other()
    return board


class TestBoard(unittest.TestCase):
    def test_given_new_board_when_inspected_then_all_cells_empty(self):
        board = create_empty_board()
        self.assertEqual(board.grid.shape, (4, 4, 4))
        self.assertTrue(board.is_empty())
        self.assertEqual(board.move_count(), 0)
        self.assertFalse(is_full(board))
        self.assertEqual(len(board.valid_moves()), 16)
        self.assertEqual(board.valid_moves()[:3], [(0, 0), (0, 1), (0, 2)])

    def test_given_column_when_dropping_then_pieces_stack_from_bottom(self):
        board = Board()
        heights = [board.drop(1, 2, player) for player in (Player.ONE, Player.TWO, Player.ONE, Player.TWO)]
        self.assertEqual(heights, [0, 1, 2, 3])
        self.assertEqual(board.cell(1, 2, 0), Player.ONE)
        self.assertEqual(board.cell(1, 2, 3), Player.TWO)
        self.assertTrue(column_is_full(board, 1, 2))
        self.assertNotIn((1, 2), board.valid_moves())

    def test_given_full_column_when_dropping_then_invalid_and_board_unchanged(self):
        board = Board()
        for _ in range(4):
            board.drop(0, 0, Player.ONE)
        before = board.copy()
        with self.assertRaises(InvalidMoveError):
            board.drop(0, 0, Player.TWO)
        with self.assertRaises(InvalidMoveError):
            apply_move(board, 0, 0, Player.TWO)
        self.assertEqual(board, before)

    def test_given_out_of_range_column_when_dropping_then_invalid(self):
        board = Board()
        for x, y in [(4, 0), (0, 4), (-1, 0), (0, -1)]:
            with self.subTest(column=(x, y)):
                with self.assertRaises(InvalidMoveError):
                    board.drop(x, y, Player.ONE)
                self.assertFalse(board.is_valid_move(x, y))
        self.assertTrue(board.is_empty())

    def test_given_non_integer_column_when_dropping_then_invalid(self):
        board = Board()
        for x, y in [(1.5, 0), ("1", 0), (0, None), (True, 1)]:
            with self.subTest(column=(x, y)):
                with self.assertRaises(InvalidMoveError):
                    board.drop(x, y, Player.ONE)
                self.assertFalse(board.is_valid_move(x, y))
        self.assertTrue(board.is_empty())

    def test_given_numpy_integer_column_when_dropping_then_accepted(self):
        board = Board()
        self.assertEqual(board.drop(np.int64(2), np.int8(3), Player.TWO), 0)
        self.assertEqual(board.cell(2, 3, 0), Player.TWO)

    def test_given_empty_player_when_dropping_then_invalid(self):
        with self.assertRaises(InvalidMoveError):
            Board().drop(0, 0, Player.EMPTY)

    def test_given_board_when_applying_move_then_original_untouched(self):
        board = Board()
        board.drop(2, 2, Player.ONE)
        new_board = apply_move(board, 2, 2, Player.TWO)
        self.assertEqual(board.move_count(), 1)
        self.assertEqual(new_board.move_count(), 2)
        self.assertEqual(new_board.cell(2, 2, 1), Player.TWO)
        self.assertFalse(np.shares_memory(board.grid, new_board.grid))

    def test_given_copy_when_mutated_then_original_unchanged(self):
        board = Board()
        clone = board.copy()
        clone.drop(3, 3, Player.TWO)
        self.assertTrue(board.is_empty())
        self.assertNotEqual(board, clone)

    def test_given_random_moves_when_played_then_gravity_consistent(self):
        rng = random.Random(7)
        board = Board()
        player = Player.ONE
        for _ in range(40):
            x, y = rng.choice(board.valid_moves())
            board = apply_move(board, x, y, player)
            player = player.other()
            self.assertTrue(board.is_gravity_consistent())
        self.assertEqual(board.move_count(), 40)

    def test_given_floating_piece_when_checking_gravity_then_inconsistent(self):
        board = Board()
        board.grid[1, 1, 2] = Player.ONE.value
        self.assertFalse(board.is_gravity_consistent())

    def test_given_every_column_filled_when_checking_then_full(self):
        board = fill_all_columns(Board())
        self.assertTrue(board.is_full())
        self.assertEqual(board.valid_moves(), [])
        self.assertEqual(board.move_count(), 64)

    def test_given_position_string_when_round_tripped_then_same_board(self):
        board = Board()
        board.drop(0, 0, Player.ONE)
        board.drop(0, 0, Player.TWO)
        board.drop(3, 1, Player.ONE)
        text = board.to_string()
        self.assertEqual(text[:4], "XO..")
        self.assertEqual(Board.from_string(text), board)

    def test_given_bad_position_strings_when_parsing_then_value_error(self):
        with self.assertRaises(ValueError):
            Board.from_string("X" * 10)
        with self.assertRaises(ValueError):
            Board.from_string("Z" + "." * 63)
        with self.assertRaises(ValueError):
            Board.from_string(".X" + "." * 62)  # piece above an empty cell
        floating = Board.from_string(".X" + "." * 62, validate=False)
        self.assertEqual(floating.cell(0, 0, 1), Player.ONE)

    def test_given_wrong_grid_shape_when_constructing_then_value_error(self):
        with self.assertRaises(ValueError):
            Board(np.zeros((6, 7), dtype=np.int8))

    def test_given_board_when_rendered_then_slices_and_symbols_shown(self):
        board = Board()
        board.drop(0, 0, Player.ONE)
        board.drop(0, 0, Player.TWO)
        text = board.render()
        for z in range(4):
            self.assertIn(f"z={z}", text)
        self.assertIn("X", text)
        self.assertIn("O", text)
        self.assertEqual(str(board), text)


if __name__ == '__main__':
    unittest.main()
