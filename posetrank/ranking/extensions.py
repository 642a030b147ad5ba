"""Linear extension counting and enumeration.

A linear extension of a partial order is a ranking of its elements that
never places a dominated element above its dominator. Both operations
here use the same decomposition: the top remaining rank goes to one of
the currently maximal elements, and the rest of the ranking is an
extension of the order with that element removed.

Counting memoises on the set of remaining elements (an int bitset), so
identical sub-orders reached through different removal sequences are
visited once. The states are processed one rank level at a time, which
keeps the count exact for any size and free of recursion limits.
Enumeration walks the same decomposition depth first on an explicit
stack, so long chains are no deeper than short ones.

Dependencies:
    - posetrank.ranking.partial_order: PartialOrder bitset accessors
    - posetrank.ranking.budget: cooperative cancellation
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator

from posetrank.common.config import RankingConfig
from posetrank.common.logging import get_logger
from posetrank.ranking.budget import ComputationBudget
from posetrank.ranking.errors import IntractableInputError, MalformedRelationError
from posetrank.ranking.models import Ranking
from posetrank.ranking.partial_order import PartialOrder, iter_bits

logger = get_logger("ranking.extensions")


def _cycle_error(remaining: int) -> MalformedRelationError:
    members = list(iter_bits(remaining))
    return MalformedRelationError(
        f"relation contains a cycle among elements {members}; no linear extension exists"
    )


class LinearExtensionEnumerator:
    """Counts and enumerates the linear extensions of partial orders.

    The enumerator holds only limits; every call builds its own budget and
    memo, so one instance can serve any number of orders.
    """

    DEFAULT_MAX_ELEMENTS = 15

    def __init__(
        self,
        max_elements: int = DEFAULT_MAX_ELEMENTS,
        max_steps: int | None = None,
        time_limit_seconds: float | None = None,
    ) -> None:
        """Initialize the enumerator.

        Args:
            max_elements: Largest order size accepted for full enumeration
            max_steps: Optional work limit per call
            time_limit_seconds: Optional wall-clock limit per call
        """
        if max_elements <= 0:
            raise ValueError("max_elements must be greater than 0")
        self.max_elements = max_elements
        self.max_steps = max_steps
        self.time_limit_seconds = time_limit_seconds

    @classmethod
    def from_config(cls, config: RankingConfig) -> LinearExtensionEnumerator:
        return cls(
            max_elements=config.max_elements,
            max_steps=config.max_steps,
            time_limit_seconds=config.time_limit_seconds,
        )

    def _new_budget(self) -> ComputationBudget:
        return ComputationBudget(self.max_steps, self.time_limit_seconds)

    def count(self, order: PartialOrder) -> int:
        """Count the linear extensions of ``order`` exactly.

        Args:
            order: The partial order

        Returns:
            Number of linear extensions (1 for the empty order)

        Raises:
            IntractableInputError: If the step or time budget runs out
            MalformedRelationError: If the relation contains a cycle

        Example:
            >>> order = PartialOrder.from_pairs(3, [(0, 1), (0, 2)])
            >>> LinearExtensionEnumerator().count(order)
            2
        """
        n = order.size
        above = [order.above_mask(i) for i in range(n)]
        budget = self._new_budget()

        layer: dict[int, int] = {(1 << n) - 1: 1}
        for _ in range(n):
            next_layer: dict[int, int] = defaultdict(int)
            for remaining, ways in layer.items():
                budget.tick()
                has_maximal = False
                for e in iter_bits(remaining):
                    if above[e] & remaining:
                        continue
                    has_maximal = True
                    next_layer[remaining & ~(1 << e)] += ways
                if not has_maximal:
                    raise _cycle_error(remaining)
            layer = next_layer

        total = layer[0]
        logger.debug(
            "Counted linear extensions",
            {"elements": n, "linear_extensions": total, "states": budget.steps},
        )
        return total

    def enumerate(self, order: PartialOrder) -> Iterator[Ranking]:
        """Lazily enumerate the linear extensions of ``order``.

        The size check runs immediately; the rankings are produced on
        demand. Calling again restarts from scratch, and abandoning the
        iterator early leaves nothing behind.

        Args:
            order: The partial order

        Returns:
            Iterator of rankings, ``ranking[i]`` being the rank of element i

        Raises:
            IntractableInputError: If the order exceeds ``max_elements``, or
                (during iteration) if the budget runs out
            MalformedRelationError: During iteration, if the relation
                contains a cycle
        """
        if order.size > self.max_elements:
            logger.info(
                "Refusing full enumeration",
                {"elements": order.size, "max_elements": self.max_elements},
            )
            raise IntractableInputError(
                f"order has {order.size} elements; full enumeration is limited to "
                f"{self.max_elements}",
                limit=self.max_elements,
            )
        return self._generate(order, self._new_budget())

    def _generate(self, order: PartialOrder, budget: ComputationBudget) -> Iterator[Ranking]:
        n = order.size
        above = [order.above_mask(i) for i in range(n)]
        ranks = [0] * n

        if n == 0:
            yield ()
            return

        def maximal(remaining: int) -> Iterator[int]:
            budget.tick()
            elements = [e for e in iter_bits(remaining) if not above[e] & remaining]
            if not elements:
                raise _cycle_error(remaining)
            return iter(elements)

        # One frame per placed rank: (remaining elements, untried maximal elements)
        full = (1 << n) - 1
        stack = [(full, maximal(full))]
        while stack:
            remaining, candidates = stack[-1]
            e = next(candidates, None)
            if e is None:
                stack.pop()
                continue
            ranks[e] = n + 1 - len(stack)
            rest = remaining & ~(1 << e)
            if rest:
                stack.append((rest, maximal(rest)))
            else:
                yield tuple(ranks)


def count_linear_extensions(
    order: PartialOrder,
    max_steps: int | None = None,
    time_limit_seconds: float | None = None,
) -> int:
    """Count the linear extensions of ``order``; see LinearExtensionEnumerator.count."""
    enumerator = LinearExtensionEnumerator(
        max_steps=max_steps, time_limit_seconds=time_limit_seconds
    )
    return enumerator.count(order)


def enumerate_linear_extensions(
    order: PartialOrder,
    max_elements: int = LinearExtensionEnumerator.DEFAULT_MAX_ELEMENTS,
    max_steps: int | None = None,
    time_limit_seconds: float | None = None,
) -> Iterator[Ranking]:
    """Enumerate the linear extensions of ``order``; see LinearExtensionEnumerator.enumerate."""
    enumerator = LinearExtensionEnumerator(
        max_elements=max_elements,
        max_steps=max_steps,
        time_limit_seconds=time_limit_seconds,
    )
    return enumerator.enumerate(order)


def ranking_to_order(ranking: Ranking) -> list[int]:
    """Convert a ranking into the list of elements from bottom to top.

    Example:
        >>> ranking_to_order((1, 3, 2))
        [0, 2, 1]
    """
    order = [0] * len(ranking)
    for element, rank in enumerate(ranking):
        order[rank - 1] = element
    return order
