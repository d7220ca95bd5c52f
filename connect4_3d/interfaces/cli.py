"""
cli.py - Command-line interface for 3D Connect Four

This module provides a terminal front end for playing against the minimax
opponent, analyzing board positions and benchmarking the engine. The
interactive game is a thin presentation layer over TurnOrchestrator: it
forwards column choices and prints whatever the orchestrator reports.
"""

import argparse
import random
import sys
import time
from typing import Callable, List, Optional, Tuple

from connect4_3d.ai.heuristic import evaluate_board
from connect4_3d.ai.minimax import NO_MOVE, MinimaxPlayer
from connect4_3d.debug import debug, DebugLevel
from connect4_3d.exceptions import Connect3DError
from connect4_3d.game.board import Board
from connect4_3d.game.orchestrator import AI_PLAYER, GameConfig, GameState, TurnOrchestrator, TurnPhase
from connect4_3d.game.rules import check_winner, find_winning_line
from connect4_3d.game.scheduling import ManualScheduler
from connect4_3d.utils import DEFAULT_DEPTH, MAX_DEPTH, MIN_DEPTH, Player

QUIT = "quit"
RESTART = "restart"
MOVE = "move"


class SimpleCLI:
    """Simple command-line interface for 3D Connect Four."""

    def __init__(self, input_func: Callable[[str], str] = input,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the CLI.

        Args:
            input_func: Reads one line of user input (replaced in tests)
            sleep: Paces the computer's thinking delay
        """
        self.args = None
        self.input_func = input_func
        self.sleep = sleep

    def parse_args(self, argv: Optional[List[str]] = None) -> None:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(description='3D Connect Four CLI')
        parser.add_argument('--debug', action='store_true', help='Enable debug logging')
        parser.add_argument('--debug-level', default='warning',
                            choices=[level.name.lower() for level in DebugLevel],
                            help='Logging level when --debug is not given')
        parser.add_argument('--log-file', default=None, help='Also write the log to this file')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        play_parser = subparsers.add_parser('play', help='Play a game against the computer')
        self._add_depth_argument(play_parser)
        play_parser.add_argument('--ai-opens', action='store_true',
                                 help='Let the computer make the first move')
        play_parser.add_argument('--think-delay', type=float, default=0.5,
                                 help='Seconds the computer pauses before moving')

        analyze_parser = subparsers.add_parser('analyze', help='Analyze a board position')
        analyze_parser.add_argument('--position', type=str, required=True,
                                    help='64 cells of . X O in x, y, z order')
        self._add_depth_argument(analyze_parser)

        benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark engine performance')
        benchmark_parser.add_argument('--iterations', type=int, default=200,
                                      help='Number of iterations for the static benchmarks')
        benchmark_parser.add_argument('--max-depth', type=int, default=3,
                                      choices=range(MIN_DEPTH, MAX_DEPTH + 1),
                                      help='Deepest search to time')

        self.args = parser.parse_args(argv)

        if self.args.debug:
            debug.configure(level=DebugLevel.DEBUG)
        else:
            debug.set_from_string(self.args.debug_level)
        if self.args.log_file:
            debug.configure(log_file=self.args.log_file)

    @staticmethod
    def _add_depth_argument(parser: argparse.ArgumentParser):
        parser.add_argument('--depth', type=int, default=DEFAULT_DEPTH,
                            choices=range(MIN_DEPTH, MAX_DEPTH + 1),
                            help='Search depth of the computer')

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI based on the parsed arguments."""
        if not self.args:
            self.parse_args(argv)

        if self.args.command == 'play':
            self.play_game()
        elif self.args.command == 'analyze':
            return self.analyze_position()
        elif self.args.command == 'benchmark':
            self.benchmark()
        else:
            print("Please specify a command. Use --help for options.")
            return 1
        return 0

    # Interactive play

    def play_game(self) -> None:
        """Play a game against the computer, driven by a TurnOrchestrator."""
        config = GameConfig(depth=self.args.depth, ai_opens=self.args.ai_opens,
                            think_delay=self.args.think_delay, settle_delay=0.0)
        scheduler = ManualScheduler()
        game = TurnOrchestrator(config, scheduler)

        game.subscribe('board_changed', self._on_board_changed)
        game.subscribe('turn_changed', self._on_turn_changed)
        game.subscribe('game_over', self._on_game_over)
        game.subscribe('move_rejected', self._on_move_rejected)

        print("Starting a new 3D Connect Four game!")
        print("Enter a column as 'x y' (each 0-3). 'r' restarts, 'q' quits.")
        if config.ai_opens:
            print("AI is thinking...")
        else:
            print(game.state.board.render())

        try:
            while True:
                scheduler.run_until_idle(sleep=self.sleep)

                command = self.get_human_command(game.phase)
                if command is None:
                    continue
                if command[0] == QUIT:
                    print("Quitting game.")
                    break
                if command[0] == RESTART:
                    game.reset()
                    print("Game restarted.")
                    if game.config.ai_opens:
                        print("AI is thinking...")
                    else:
                        print(game.state.board.render())
                    continue

                _, x, y = command
                game.submit_human_move(x, y)
        finally:
            game.close()

    def get_human_command(self, phase: TurnPhase) -> Optional[Tuple]:
        """
        Read one command from the player.

        Returns:
            (MOVE, x, y), (QUIT,), (RESTART,) or None if the input was invalid
        """
        prompt = "Game over (r/q): " if phase == TurnPhase.TERMINAL else "Your move (x y, r, q): "
        try:
            user_input = self.input_func(prompt).strip().lower()
        except EOFError:
            return (QUIT,)

        if user_input == 'q':
            return (QUIT,)
        if user_input == 'r':
            return (RESTART,)

        try:
            x, y = (int(part) for part in user_input.replace(',', ' ').split())
        except ValueError:
            print("Invalid input. Enter two column coordinates such as '1 2'.")
            return None
        return (MOVE, x, y)

    def _on_board_changed(self, state: GameState):
        x, y, z = state.last_move
        mover = state.board.cell(x, y, z)
        who = "AI" if mover == AI_PLAYER else "You"
        print(f"{who} played column ({x}, {y}), landing at height {z}")
        print(state.board.render())

    def _on_turn_changed(self, state: GameState):
        if state.current_player == AI_PLAYER:
            print("AI is thinking...")

    def _on_game_over(self, winner: Optional[Player], state: GameState):
        print("Game over!")
        if winner is None:
            print("It's a draw!")
        elif winner == AI_PLAYER:
            print("AI wins! Better luck next time.")
        else:
            print("You win! Congratulations!")
        line = find_winning_line(state.board)
        if line:
            print(f"Winning line: {line}")

    def _on_move_rejected(self, error: Connect3DError, state: GameState):
        print(f"Move ignored: {error}")

    # Analysis

    def analyze_position(self) -> int:
        """Report the winner, evaluations and best move for a position."""
        try:
            board = Board.from_string(self.args.position)
        except ValueError as e:
            print(f"Error parsing position: {e}")
            return 1

        print("Loaded position:")
        print(board.render())

        winner = check_winner(board)
        if winner is not None:
            print(f"\nWinner: {winner.name} along {find_winning_line(board)}")
        else:
            print("\nNo winner")

        print(f"Pieces: {board.move_count()}, open columns: {len(board.valid_moves())}")
        for player in (Player.ONE, Player.TWO):
            print(f"Evaluation for {player.name}: {evaluate_board(board, player)}")

        if winner is None:
            mover = Player.ONE if board.move_count() % 2 == 0 else Player.TWO
            searcher = MinimaxPlayer(self.args.depth, mover)
            move = searcher.get_move(board)
            if move == NO_MOVE:
                print("No legal move: the board is full")
            else:
                print(f"Best move for {mover.name} at depth {self.args.depth}: "
                      f"{move} (score {searcher.last_score}, {searcher.nodes_evaluated} nodes)")
        return 0

    # Benchmarks

    def benchmark(self) -> None:
        """Benchmark the engine on random positions."""
        iterations = self.args.iterations
        print(f"Running benchmark with {iterations} iterations...")

        boards = [self.random_board(random.randint(4, 24)) for _ in range(iterations)]

        debug.start_timer("win_check")
        for board in boards:
            check_winner(board)
        win_check_time = debug.end_timer("win_check")
        print(f"Win checks: {win_check_time:.6f} seconds total, "
              f"{win_check_time / iterations * 1000:.6f} ms per board")

        debug.start_timer("evaluation")
        for board in boards:
            evaluate_board(board, Player.TWO)
        evaluation_time = debug.end_timer("evaluation")
        print(f"Evaluations: {evaluation_time:.6f} seconds total, "
              f"{evaluation_time / iterations * 1000:.6f} ms per board")

        board = self.random_board(6)
        for depth in range(MIN_DEPTH, self.args.max_depth + 1):
            searcher = MinimaxPlayer(depth, Player.TWO)
            debug.start_timer("search_benchmark")
            move = searcher.get_move(board)
            search_time = debug.end_timer("search_benchmark")
            print(f"Search depth {depth}: move {move}, {searcher.nodes_evaluated} nodes, "
                  f"{search_time:.3f} seconds")

    @staticmethod
    def random_board(pieces: int) -> Board:
        """Play random alternating moves, stopping early if someone wins."""
        board = Board()
        player = Player.ONE
        for _ in range(pieces):
            moves = board.valid_moves()
            if not moves or check_winner(board) is not None:
                break
            x, y = random.choice(moves)
            board.drop(x, y, player)
            player = player.other()
        return board


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    cli = SimpleCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
