"""
env.py - Gymnasium environment for 3D Connect Four

The agent plays Player.ONE against a MinimaxPlayer on Player.TWO. The
opponent replies inside step(), so every observation shows a position where
the agent is to move (or the game is over).
"""

from typing import Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from connect4_3d.ai.minimax import NO_MOVE, MinimaxPlayer
from connect4_3d.debug import debug
from connect4_3d.game.board import Board
from connect4_3d.game.rules import find_winning_line, get_game_result
from connect4_3d.utils import (BOARD_SHAPE, NUM_COLUMNS, GameResult, Player,
                               action_to_column, column_to_action)


class ConnectFour3DEnv(gym.Env):
    """
    3D Connect Four environment following the Gymnasium interface.

    Actions are column indices 0-15, where action a drops into column
    (a // 4, a % 4).
    """

    metadata = {'render_modes': ['ascii', 'human'], 'render_fps': 4}

    def __init__(self, opponent_depth: int = 2, render_mode: Optional[str] = None):
        """
        Initialize the environment.

        Args:
            opponent_depth: Search depth of the minimax opponent (1-5)
            render_mode: 'ascii', 'human' or None
        """
        debug.debug("Initializing ConnectFour3DEnv", "env")

        self.action_space = spaces.Discrete(NUM_COLUMNS)
        # 4x4x4 board with 3 possible values (0, 1, 2)
        self.observation_space = spaces.Box(low=0, high=2, shape=BOARD_SHAPE, dtype=np.int8)

        self.render_mode = render_mode
        self.agent = Player.ONE
        self.opponent = MinimaxPlayer(opponent_depth, Player.TWO)

        self.board = Board()
        self.game_result = GameResult.IN_PROGRESS
        self.last_move = None
        self.current_player = self.agent

        self.reward_win = 1.0
        self.reward_lose = -1.0
        self.reward_draw = 0.1
        self.reward_invalid_move = -0.5
        self.reward_step = -0.01

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        """
        Reset the environment to an empty board.

        Args:
            seed: Random seed for reproducibility
            options: {'ai_opens': True} lets the opponent move first

        Returns:
            Initial observation and info dictionary
        """
        super().reset(seed=seed)
        debug.debug("Resetting environment", "env")

        self.board = Board()
        self.game_result = GameResult.IN_PROGRESS
        self.last_move = None
        self.current_player = self.agent

        if options and options.get("ai_opens"):
            self._opponent_move()

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Drop the agent's piece, then let the opponent reply.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        x, y = action_to_column(action)
        debug.debug(f"Environment step with action {action} -> column ({x}, {y})", "env")

        if self.game_result.is_game_over() or not self.board.is_valid_move(x, y):
            debug.warning(f"Invalid action: {action}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, True, info

        self._play(x, y, self.agent)
        if not self.game_result.is_game_over():
            self._opponent_move()

        reward = self.reward_step
        terminated = self.game_result.is_game_over()
        if self.game_result.winner == self.agent:
            reward = self.reward_win
        elif self.game_result.winner == self.opponent.player:
            reward = self.reward_lose
        elif self.game_result == GameResult.DRAW:
            reward = self.reward_draw
        if terminated:
            debug.info(f"Game over: {self.game_result.name}", "env")

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), reward, terminated, False, self._get_info()

    def _play(self, x: int, y: int, player: Player):
        z = self.board.drop(x, y, player)
        self.last_move = (x, y, z)
        self.game_result = get_game_result(self.board)
        self.current_player = player.other()

    def _opponent_move(self):
        x, y = self.opponent.get_move(self.board)
        if (x, y) == NO_MOVE:
            self.game_result = GameResult.DRAW
            return
        self._play(x, y, self.opponent.player)

    def render(self) -> Optional[str]:
        if self.render_mode == "ascii":
            return self.board.render()
        if self.render_mode == "human":
            print(self.board.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.board.grid.copy()

    def _get_info(self) -> Dict:
        valid_moves = [column_to_action(x, y) for x, y in self.board.valid_moves()]
        if self.game_result.is_game_over():
            valid_moves = []

        return {
            'valid_moves': valid_moves,
            'num_valid_moves': len(valid_moves),
            'current_player': self.current_player.value,
            'game_result': self.game_result.name,
            'moves_made': self.board.move_count(),
            'winning_line': find_winning_line(self.board),
            'last_move': self.last_move,
        }
