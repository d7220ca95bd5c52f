"""
scheduling.py - Deferred steps for the turn orchestrator

The orchestrator never sleeps. It hands each deferred step, such as the AI's
"thinking" pause or the post-move winner check, to a scheduler with the
asyncio ``call_later(delay, callback, *args)`` signature. The returned
handle must support ``cancel()``.

Two schedulers are provided:

* ``AsyncioScheduler`` forwards to an asyncio event loop, for hosts that
  already run one.
* ``ManualScheduler`` keeps a virtual clock that the host advances
  explicitly. Tests use it, and so does the terminal front end.
"""

import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional

from connect4_3d.debug import debug
from connect4_3d.exceptions import SchedulerError


class AsyncioScheduler:
    """Schedule steps on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: Event loop to use; defaults to the loop running at call time
        """
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> asyncio.TimerHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise SchedulerError("AsyncioScheduler needs a running event loop "
                                     "or an explicit loop") from e
        return loop.call_later(delay, callback, *args)


class ScheduledStep:
    """A pending callback on a ManualScheduler."""

    __slots__ = ("when", "callback", "args", "_cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "pending"
        return f"<ScheduledStep {getattr(self.callback, '__name__', self.callback)} at {self.when:.3f} {state}>"


class ManualScheduler:
    """
    A single-threaded scheduler driven by an explicit virtual clock.

    Callbacks fire in order of their due time. Callbacks due at the same
    time fire in the order they were scheduled.
    """

    def __init__(self):
        self._now = 0.0
        self._queue: List[tuple] = []
        self._sequence = itertools.count()

    def time(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled, not yet cancelled or fired, steps."""
        return sum(1 for _, _, step in self._queue if not step.cancelled())

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> ScheduledStep:
        if delay < 0:
            delay = 0.0
        step = ScheduledStep(self._now + delay, callback, args)
        heapq.heappush(self._queue, (step.when, next(self._sequence), step))
        return step

    def _pop_live(self) -> Optional[ScheduledStep]:
        while self._queue:
            _, _, step = heapq.heappop(self._queue)
            if not step.cancelled():
                return step
        return None

    def _run(self, step: ScheduledStep):
        self._now = max(self._now, step.when)
        debug.trace(f"Running {step!r}", "game")
        step.callback(*step.args)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every step that falls due.

        Steps scheduled by fired callbacks also run if they fall due within
        the same window.

        Returns:
            The number of callbacks fired
        """
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            step = self._pop_live()
            if step is None:
                break
            if step.when > target:
                heapq.heappush(self._queue, (step.when, next(self._sequence), step))
                break
            self._run(step)
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, sleep: Optional[Callable[[float], Any]] = None,
                       max_steps: int = 10000) -> int:
        """
        Fire steps until nothing is left to run.

        Args:
            sleep: Called with the wait before each step that is not yet
                due (for example ``time.sleep`` to pace a terminal game)
            max_steps: Safety limit against callbacks that keep rescheduling

        Returns:
            The number of callbacks fired
        """
        fired = 0
        while True:
            step = self._pop_live()
            if step is None:
                return fired
            if fired >= max_steps:
                raise RuntimeError(f"Scheduler still busy after {max_steps} steps")

            wait = step.when - self._now
            if sleep is not None and wait > 0:
                sleep(wait)
            self._run(step)
            fired += 1
