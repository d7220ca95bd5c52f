"""
exceptions.py - Error taxonomy for the 3D Connect Four engine

The board raises these errors. The turn orchestrator catches them at its
public entry points, so a rejected input never crashes the host
application.
"""


class Connect3DError(Exception):
    """Base class for every error raised by the engine."""


class ConfigError(Connect3DError, ValueError):
    """A game or search setting is outside its allowed range."""


class InvalidMoveError(Connect3DError, ValueError):
    """The target column is full, or the coordinates are off the board."""

    def __init__(self, message: str, x: int = None, y: int = None):
        super().__init__(message)
        self.x = x
        self.y = y


class MoveRejected(Connect3DError):
    """A well-formed move arrived when the game could not accept it."""


class MoveRejectedBusy(MoveRejected):
    """Another move is still in flight, or it is not the human's turn."""


class MoveRejectedTerminal(MoveRejected):
    """The game is over; only a reset is accepted."""


class SchedulerError(Connect3DError, RuntimeError):
    """A deferred step could not be scheduled, usually for lack of an event loop."""
