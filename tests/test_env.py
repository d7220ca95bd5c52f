import unittest

import numpy as np

from connect4_3d.game.board import Board
from connect4_3d.game.env import ConnectFour3DEnv
from connect4_3d.utils import BOARD_SHAPE, Player, column_to_action


class TestConnectFour3DEnv(unittest.TestCase):
    def setUp(self):
        self.env = ConnectFour3DEnv(opponent_depth=1)

    def test_given_new_episode_when_reset_then_empty_observation(self):
        obs, info = self.env.reset(seed=0)
        self.assertEqual(obs.shape, BOARD_SHAPE)
        self.assertEqual(obs.dtype, np.int8)
        self.assertFalse(obs.any())
        self.assertEqual(info['valid_moves'], list(range(16)))
        self.assertEqual(info['game_result'], 'IN_PROGRESS')
        self.assertEqual(info['current_player'], Player.ONE.value)
        self.assertTrue(self.env.observation_space.contains(obs))

    def test_given_step_when_agent_moves_then_opponent_replies(self):
        self.env.reset()
        obs, reward, terminated, truncated, info = self.env.step(0)

        self.assertEqual(obs[0, 0, 0], Player.ONE.value)
        self.assertEqual(int((obs == Player.TWO.value).sum()), 1)
        self.assertEqual(info['moves_made'], 2)
        self.assertEqual(reward, self.env.reward_step)
        self.assertFalse(terminated)
        self.assertFalse(truncated)
        self.assertEqual(info['current_player'], Player.ONE.value)

    def test_given_observation_when_board_changes_then_observation_is_a_copy(self):
        obs, _ = self.env.reset()
        self.env.step(5)
        self.assertFalse(obs.any())

    def test_given_invalid_actions_when_stepping_then_penalized_and_truncated(self):
        self.env.reset()
        board = Board()
        for player in (Player.ONE, Player.TWO, Player.ONE, Player.TWO):
            board.drop(0, 0, player)
        self.env.board = board

        for action in (0, 16):
            with self.subTest(action=action):
                before = self.env.board.copy()
                _, reward, terminated, truncated, info = self.env.step(action)
                self.assertEqual(reward, self.env.reward_invalid_move)
                self.assertFalse(terminated)
                self.assertTrue(truncated)
                self.assertTrue(info['invalid_move'])
                self.assertEqual(self.env.board, before)

    def test_given_ai_opens_option_when_reset_then_opponent_has_moved(self):
        obs, info = self.env.reset(options={"ai_opens": True})
        self.assertEqual(int((obs == Player.TWO.value).sum()), 1)
        self.assertEqual(info['moves_made'], 1)
        self.assertEqual(info['current_player'], Player.ONE.value)

    def test_given_three_in_a_row_when_agent_completes_line_then_win_reward(self):
        self.env.reset()
        board = Board()
        for x in range(3):
            board.drop(x, 0, Player.ONE)
        board.drop(0, 3, Player.TWO)
        board.drop(1, 3, Player.TWO)
        self.env.board = board

        _, reward, terminated, truncated, info = self.env.step(column_to_action(3, 0))
        self.assertEqual(reward, self.env.reward_win)
        self.assertTrue(terminated)
        self.assertFalse(truncated)
        self.assertEqual(info['game_result'], 'PLAYER_ONE_WIN')
        self.assertEqual(info['valid_moves'], [])
        self.assertEqual(info['winning_line'], [(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0)])

        _, reward, _, truncated, _ = self.env.step(5)
        self.assertEqual(reward, self.env.reward_invalid_move)
        self.assertTrue(truncated)

    def test_given_opponent_threat_when_agent_ignores_it_then_loss_reward(self):
        self.env.reset()
        board = Board()
        for x in range(3):
            board.drop(x, 2, Player.TWO)
        board.drop(0, 0, Player.ONE)
        board.drop(3, 3, Player.ONE)
        self.env.board = board

        _, reward, terminated, _, info = self.env.step(column_to_action(1, 1))
        self.assertEqual(reward, self.env.reward_lose)
        self.assertTrue(terminated)
        self.assertEqual(info['game_result'], 'PLAYER_TWO_WIN')
        self.assertEqual(self.env.last_move, (3, 2, 0))

    def test_given_ascii_mode_when_rendering_then_returns_board_text(self):
        env = ConnectFour3DEnv(opponent_depth=1, render_mode='ascii')
        env.reset()
        env.step(0)
        self.assertEqual(env.render(), env.board.render())
        self.assertIsNone(ConnectFour3DEnv(opponent_depth=1).render())


if __name__ == '__main__':
    unittest.main()
