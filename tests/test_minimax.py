import math
import random
import unittest
from unittest import mock

from connect4_3d.ai.heuristic import evaluate_board
from connect4_3d.ai.minimax import (LOSS_SCORE, NO_MOVE, WIN_SCORE, MinimaxPlayer, get_best_move,
                                    minimax)
from connect4_3d.exceptions import ConfigError
from connect4_3d.game.board import Board, apply_move
from connect4_3d.game.rules import check_winner
from connect4_3d.utils import Player


def plain_minimax(board, depth, maximizing, ai_player=Player.TWO):
    """Full-width minimax without pruning."""
    winner = check_winner(board)
    if winner is not None:
        return WIN_SCORE if winner == ai_player else LOSS_SCORE
    moves = board.valid_moves()
    if depth == 0 or not moves:
        return evaluate_board(board, ai_player)
    mover = ai_player if maximizing else ai_player.other()
    scores = [plain_minimax(apply_move(board, x, y, mover), depth - 1, not maximizing, ai_player)
              for x, y in moves]
    return max(scores) if maximizing else min(scores)


def random_board(seed, pieces):
    rng = random.Random(seed)
    board = Board()
    player = Player.ONE
    for _ in range(pieces):
        if check_winner(board) is not None:
            break
        x, y = rng.choice(board.valid_moves())
        board.drop(x, y, player)
        player = player.other()
    return board


def three_in_a_row(player):
    board = Board()
    for x in range(3):
        board.drop(x, 0, player)
    return board


class TestMinimax(unittest.TestCase):
    def test_given_winning_board_when_searching_then_terminal_score_regardless_of_depth(self):
        board = Board()
        for _ in range(4):
            board.drop(1, 1, Player.TWO)
        for depth in (0, 1, 3):
            self.assertEqual(minimax(board, depth, -math.inf, math.inf, True), WIN_SCORE)
            self.assertEqual(minimax(board, depth, -math.inf, math.inf, False, ai_player=Player.ONE),
                             LOSS_SCORE)

    def test_given_depth_zero_when_searching_then_static_evaluation(self):
        board = random_board(3, 6)
        self.assertEqual(minimax(board, 0, -math.inf, math.inf, True),
                         evaluate_board(board, Player.TWO))

    def test_given_positions_when_pruning_then_same_value_as_plain_minimax(self):
        for seed in range(4):
            board = random_board(seed, 5 + seed)
            for depth in (1, 2):
                for maximizing in (True, False):
                    with self.subTest(seed=seed, depth=depth, maximizing=maximizing):
                        self.assertEqual(minimax(board, depth, -math.inf, math.inf, maximizing),
                                         plain_minimax(board, depth, maximizing))

    def test_given_random_positions_when_searching_then_score_within_bounds(self):
        for seed in range(5):
            board = random_board(100 + seed, 10 + 2 * seed)
            with self.subTest(seed=seed):
                score = minimax(board, 1, -math.inf, math.inf, seed % 2 == 0)
                self.assertGreaterEqual(score, LOSS_SCORE)
                self.assertLessEqual(score, WIN_SCORE)

    def test_given_full_board_without_winner_when_searching_then_static_evaluation(self):
        board = Board()
        board.grid[:] = Player.ONE.value
        with mock.patch('connect4_3d.ai.minimax.check_winner', return_value=None):
            self.assertEqual(minimax(board, 3, -math.inf, math.inf, True),
                             evaluate_board(board, Player.TWO))

    def test_given_negative_depth_when_searching_then_config_error(self):
        with self.assertRaises(ConfigError):
            minimax(Board(), -1, -math.inf, math.inf, True)


class TestGetBestMove(unittest.TestCase):
    def test_given_opponent_three_in_a_row_when_choosing_then_blocks(self):
        board = three_in_a_row(Player.ONE)
        for depth in (1, 2):
            with self.subTest(depth=depth):
                self.assertEqual(get_best_move(board, depth, ai_player=Player.TWO), (3, 0))

    def test_given_own_three_in_a_row_when_choosing_then_completes_line(self):
        board = three_in_a_row(Player.TWO)
        board.drop(3, 3, Player.ONE)
        board.drop(0, 3, Player.ONE)
        board.drop(2, 2, Player.ONE)
        self.assertEqual(get_best_move(board, 1, ai_player=Player.TWO), (3, 0))

    def test_given_full_column_when_choosing_then_never_selected(self):
        board = Board()
        for player in (Player.ONE, Player.TWO, Player.ONE, Player.TWO):
            board.drop(0, 0, player)
        move = get_best_move(board, 1)
        self.assertNotEqual(move, (0, 0))
        self.assertIn(move, board.valid_moves())

    def test_given_single_open_column_when_choosing_then_that_column(self):
        board = Board()
        board.grid[:] = Player.ONE.value
        board.grid[2, 1, :] = Player.EMPTY.value
        self.assertEqual(get_best_move(board, 2), (2, 1))

    def test_given_full_board_when_choosing_then_no_move_sentinel(self):
        board = Board()
        board.grid[:] = Player.TWO.value
        self.assertEqual(get_best_move(board, 3), NO_MOVE)
        self.assertEqual(MinimaxPlayer(2).get_move(board), NO_MOVE)

    def test_given_board_when_searching_then_input_not_modified(self):
        board = random_board(11, 7)
        before = board.copy()
        get_best_move(board, 2)
        self.assertEqual(board, before)

    def test_given_empty_board_when_choosing_then_first_best_column_kept(self):
        # Symmetric columns tie; strict improvement keeps the earliest one
        board = Board()
        move = get_best_move(board, 1)
        self.assertIn(move, board.valid_moves())
        self.assertEqual(get_best_move(board, 1), move)


class TestMinimaxPlayer(unittest.TestCase):
    def test_given_bad_depths_when_constructing_then_config_error(self):
        for depth in (0, 6, 2.5, True):
            with self.subTest(depth=depth):
                with self.assertRaises(ConfigError):
                    MinimaxPlayer(depth)
        with self.assertRaises(ConfigError):
            MinimaxPlayer(2, Player.EMPTY)

    def test_given_player_when_moving_then_stats_recorded(self):
        player = MinimaxPlayer(depth=1, player=Player.TWO)
        move = player.get_move(three_in_a_row(Player.TWO))
        self.assertEqual(move, (3, 0))
        self.assertEqual(player.last_score, WIN_SCORE)
        self.assertGreater(player.nodes_evaluated, 0)


if __name__ == '__main__':
    unittest.main()
