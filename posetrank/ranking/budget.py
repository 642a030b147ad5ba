"""Cooperative step and time budgets for long-running computations."""

import time

from posetrank.ranking.errors import IntractableInputError


class ComputationBudget:
    """Budget checked by enumeration and counting loops.

    Each unit of work calls ``tick()``; once the step count or the elapsed
    wall-clock time exceeds its limit, ``IntractableInputError`` is raised
    from inside the loop. A budget with no limits never fires.

    Example:
        >>> budget = ComputationBudget(max_steps=2)
        >>> budget.tick()
        >>> budget.tick()
        >>> budget.tick()
        Traceback (most recent call last):
        ...
        posetrank.ranking.errors.IntractableInputError: step budget of 2 exhausted
    """

    # Clock reads are amortised over this many ticks
    CLOCK_INTERVAL = 1024

    def __init__(
        self,
        max_steps: int | None = None,
        time_limit_seconds: float | None = None,
    ) -> None:
        if max_steps is not None and max_steps <= 0:
            raise ValueError("max_steps must be greater than 0")
        if time_limit_seconds is not None and time_limit_seconds <= 0:
            raise ValueError("time_limit_seconds must be greater than 0")
        self.max_steps = max_steps
        self.time_limit_seconds = time_limit_seconds
        self.steps = 0
        self._started = time.monotonic()
        self._next_clock_check = 0

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._started

    def restart(self) -> None:
        """Reset the step counter and the clock."""
        self.steps = 0
        self._started = time.monotonic()
        self._next_clock_check = 0

    def tick(self, steps: int = 1) -> None:
        """Consume ``steps`` units of work.

        Raises:
            IntractableInputError: If the step or time limit is exceeded
        """
        self.steps += steps
        if self.max_steps is not None and self.steps > self.max_steps:
            raise IntractableInputError(
                f"step budget of {self.max_steps} exhausted", limit=self.max_steps
            )
        if self.time_limit_seconds is not None and self.steps >= self._next_clock_check:
            self._next_clock_check = self.steps + self.CLOCK_INTERVAL
            if self.elapsed_seconds > self.time_limit_seconds:
                raise IntractableInputError(
                    f"time budget of {self.time_limit_seconds}s exhausted",
                    limit=self.time_limit_seconds,
                )
