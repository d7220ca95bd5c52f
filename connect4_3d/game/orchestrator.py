"""
orchestrator.py - Turn sequencing between the human and the computer

The TurnOrchestrator owns the live board and is the only code that changes
it. A move is applied at once, but the winner check that follows is a
deferred step, and so is the computer's reply after the human moves. At
most one of these steps is pending at any time. Each is tied to a token
object, and reset() or close() invalidates that token. A callback that
fires with a stale token does nothing.

Presentation layers drive the game through submit_human_move() and
reset(), and watch it through subscribe():

    board_changed(state)          a piece was placed
    turn_changed(state)           the other side is now to move
    game_over(winner, state)      winner is None on a draw
    move_rejected(error, state)   a human move was ignored
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from connect4_3d.ai.minimax import NO_MOVE, MinimaxPlayer, validate_depth
from connect4_3d.debug import debug
from connect4_3d.exceptions import (ConfigError, Connect3DError, InvalidMoveError,
                                    MoveRejectedBusy, MoveRejectedTerminal)
from connect4_3d.game.board import Board, create_empty_board
from connect4_3d.game.rules import get_game_result
from connect4_3d.game.scheduling import AsyncioScheduler
from connect4_3d.utils import DEFAULT_DEPTH, Coord, GameResult, Player

HUMAN_PLAYER = Player.ONE
AI_PLAYER = Player.TWO

EVENTS = ("board_changed", "turn_changed", "game_over", "move_rejected")


class TurnPhase(Enum):
    HUMAN_TURN = auto()
    AI_TURN = auto()
    TERMINAL = auto()


@dataclass
class GameConfig:
    """
    Settings chosen by the presentation layer.

    Attributes:
        depth: Search depth for the computer (1-5)
        ai_opens: Let the computer make the first move
        think_delay: Seconds between the human's move settling and the AI move
        settle_delay: Seconds between placing a piece and checking for a winner
    """
    depth: int = DEFAULT_DEPTH
    ai_opens: bool = False
    think_delay: float = 0.5
    settle_delay: float = 0.1

    def __post_init__(self):
        validate_depth(self.depth)
        for name in ("think_delay", "settle_delay"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigError(f"{name} cannot be negative, got {value}")

    def replace(self, **changes) -> 'GameConfig':
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class GameState:
    """
    An immutable snapshot of a game, safe to hand to any listener.

    Snapshots compare by value. Like Board they are unhashable.
    """
    __hash__ = None

    board: Board
    current_player: Player
    winner: Optional[Player] = None
    terminal: bool = False
    result: GameResult = GameResult.IN_PROGRESS
    last_move: Optional[Coord] = None
    move_count: int = 0


def create_game(config: Optional[GameConfig] = None) -> GameState:
    """Initial state for a game played with ``config``."""
    config = config or GameConfig()
    return GameState(board=create_empty_board(),
                     current_player=AI_PLAYER if config.ai_opens else HUMAN_PLAYER)


class _PendingStep:
    """Token for the single deferred step a game may have outstanding."""

    __slots__ = ("kind", "handle")

    def __init__(self, kind: str):
        self.kind = kind
        self.handle = None

    def cancel(self):
        if self.handle is not None:
            self.handle.cancel()


class TurnOrchestrator:
    """
    Sequences human and computer moves for one game at a time.

    The orchestrator runs on a single thread. Deferred steps go through the
    scheduler, which is an AsyncioScheduler unless one is passed in.
    """

    def __init__(self, config: Optional[GameConfig] = None, scheduler=None):
        """
        Create the orchestrator and start the first game.

        Args:
            config: Game settings; defaults to GameConfig()
            scheduler: Object with call_later(delay, callback, *args)
        """
        self._config = config or GameConfig()
        self._next_config = self._config
        self._scheduler = scheduler or AsyncioScheduler()
        self._listeners: Dict[str, List[Callable[..., Any]]] = {event: [] for event in EVENTS}
        self._pending: Optional[_PendingStep] = None
        self._closed = False
        self._start()

    # Public surface

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def in_flight(self) -> bool:
        """True while a move or an AI step is pending."""
        return self._pending is not None

    @property
    def state(self) -> GameState:
        return GameState(board=self._board.copy(),
                         current_player=self._current,
                         winner=self._result.winner,
                         terminal=self._phase == TurnPhase.TERMINAL,
                         result=self._result,
                         last_move=self._last_move,
                         move_count=self._move_count)

    def subscribe(self, event: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """
        Register a listener for one of EVENTS.

        Returns:
            A function that removes the listener again
        """
        if event not in self._listeners:
            raise ValueError(f"Unknown event {event!r}; expected one of {EVENTS}")
        self._listeners[event].append(callback)

        def unsubscribe():
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        return unsubscribe

    def submit_human_move(self, x: int, y: int) -> GameState:
        """
        Play the human's piece in column (x, y).

        Rejected moves change nothing. They are logged and reported through
        the move_rejected event.

        Returns:
            The state after the move, or the unchanged state if rejected
        """
        try:
            self._check_human_turn()
            self._begin_move(x, y, HUMAN_PLAYER)
        except Connect3DError as error:
            debug.debug(f"Rejected human move ({x}, {y}): {error}", "game")
            self._emit("move_rejected", error, self.state)
        return self.state

    def configure(self, **changes) -> GameConfig:
        """Change settings for the next game; the current one is unaffected."""
        self._next_config = self._next_config.replace(**changes)
        debug.debug(f"Next game will use {self._next_config}", "game")
        return self._next_config

    def reset(self, config: Optional[GameConfig] = None) -> GameState:
        """
        Abandon the current game and start a new one.

        Any pending deferred step is cancelled before the board is cleared.

        Args:
            config: Settings for the new game; defaults to the configured ones
        """
        if config is not None:
            self._next_config = config
        self._config = self._next_config
        self._start()
        return self.state

    def close(self):
        """Cancel pending work and stop accepting moves."""
        self._cancel_pending()
        self._closed = True
        for listeners in self._listeners.values():
            listeners.clear()
        debug.debug("Orchestrator closed", "game")

    # State machine

    def _start(self):
        self._cancel_pending()
        self._closed = False
        self._board = create_empty_board()
        self._result = GameResult.IN_PROGRESS
        self._last_move: Optional[Coord] = None
        self._move_count = 0
        self._ai = MinimaxPlayer(self._config.depth, AI_PLAYER)

        if self._config.ai_opens:
            self._current = AI_PLAYER
            self._phase = TurnPhase.AI_TURN
            self._schedule_ai_step(0.0)
        else:
            self._current = HUMAN_PLAYER
            self._phase = TurnPhase.HUMAN_TURN
        debug.info(f"New game: depth {self._config.depth}, "
                   f"{'AI' if self._config.ai_opens else 'human'} opens", "game")

    def _check_human_turn(self):
        if self._closed:
            raise MoveRejectedTerminal("the game has been closed")
        if self._phase == TurnPhase.TERMINAL:
            raise MoveRejectedTerminal("the game is over")
        if self._pending is not None:
            raise MoveRejectedBusy("another move is still in flight")
        if self._phase != TurnPhase.HUMAN_TURN:
            raise MoveRejectedBusy("it is not the human's turn")

    def _begin_move(self, x: int, y: int, player: Player):
        # The settle step is booked before the board changes, so a
        # SchedulerError or InvalidMoveError leaves the game untouched
        token = _PendingStep("settle")
        token.handle = self._scheduler.call_later(self._config.settle_delay, self._settle, token)
        try:
            z = self._board.drop(x, y, player)
        except InvalidMoveError:
            token.cancel()
            raise

        self._pending = token
        self._last_move = (x, y, z)
        self._move_count += 1
        debug.info(f"{player.name} played ({x}, {y}, {z})", "game")
        self._emit("board_changed", self.state)

    def _settle(self, token: _PendingStep):
        if token is not self._pending:
            debug.trace("Ignoring stale winner check", "game")
            return
        self._pending = None

        result = get_game_result(self._board)
        if result.is_game_over():
            self._finish(result)
            return

        self._current = self._current.other()
        if self._current == AI_PLAYER:
            self._phase = TurnPhase.AI_TURN
            self._schedule_ai_step(self._config.think_delay)
        else:
            self._phase = TurnPhase.HUMAN_TURN
        self._emit("turn_changed", self.state)

    def _schedule_ai_step(self, delay: float):
        token = _PendingStep("ai")
        token.handle = self._scheduler.call_later(delay, self._ai_step, token)
        self._pending = token

    def _ai_step(self, token: _PendingStep):
        if token is not self._pending:
            debug.trace("Ignoring stale AI step", "game")
            return

        x, y = self._ai.get_move(self._board.copy())
        if (x, y) == NO_MOVE:
            self._finish(GameResult.DRAW)
            return
        self._begin_move(x, y, AI_PLAYER)

    def _finish(self, result: GameResult):
        self._pending = None
        self._result = result
        self._phase = TurnPhase.TERMINAL
        if result.winner is None:
            debug.info("Game over: draw", "game")
        else:
            debug.info(f"Game over: {result.winner.name} wins", "game")
        self._emit("game_over", result.winner, self.state)

    def _cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _emit(self, event: str, *args):
        for callback in list(self._listeners[event]):
            try:
                callback(*args)
            except Exception as e:
                debug.error(f"Listener for {event} failed: {e}", "game")


def submit_human_move(orchestrator: TurnOrchestrator, x: int, y: int) -> GameState:
    return orchestrator.submit_human_move(x, y)


def reset_game(orchestrator: TurnOrchestrator, config: Optional[GameConfig] = None) -> GameState:
    return orchestrator.reset(config)
