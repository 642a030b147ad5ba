"""Rank statistics over the linear extensions of a partial order.

This module folds a stream of rankings into rank probabilities,
relative-rank probabilities, expected ranks and rank spread, and
provides rank intervals through a fast path that never enumerates.

Accumulator state per analysis:
    - one count per (element, rank) cell
    - running sum and sum of squares of each element's rank
    - one count per ordered pair (i, j) with rk(i) < rk(j)

Moments are kept as exact integers until the final division, so a
total order reports a spread of exactly zero.

Dependencies:
    - posetrank.ranking.extensions: lazy enumeration
    - posetrank.ranking.models: RankInterval, RankStatisticsResult
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from posetrank.common.config import RankingConfig
from posetrank.common.logging import get_logger
from posetrank.ranking.errors import DegenerateInputError, MalformedRelationError
from posetrank.ranking.extensions import LinearExtensionEnumerator
from posetrank.ranking.models import Ranking, RankInterval, RankStatisticsResult
from posetrank.ranking.partial_order import PartialOrder, iter_bits

logger = get_logger("ranking.statistics")


class RankAccumulator:
    """Single-pass accumulator for rank statistics."""

    def __init__(self, size: int) -> None:
        self.size = size
        self.total = 0
        self.rank_counts = [[0] * size for _ in range(size)]
        self.rank_sums = [0] * size
        self.rank_square_sums = [0] * size
        self.lower_counts = [[0] * size for _ in range(size)]

    def add(self, ranking: Ranking) -> None:
        """Record one ranking (``ranking[i]`` is the rank of element i)."""
        self.total += 1
        for i, rank in enumerate(ranking):
            self.rank_counts[i][rank - 1] += 1
            self.rank_sums[i] += rank
            self.rank_square_sums[i] += rank * rank
            lower_row = self.lower_counts[i]
            for j, other in enumerate(ranking):
                if rank < other:
                    lower_row[j] += 1

    def add_all(self, rankings: Iterable[Ranking]) -> None:
        for ranking in rankings:
            self.add(ranking)

    def result(
        self,
        labels: tuple[str, ...],
        exact: bool,
        metadata: dict[str, float] | None = None,
    ) -> RankStatisticsResult:
        """Normalise the counts into a RankStatisticsResult.

        Raises:
            DegenerateInputError: If no ranking was recorded
        """
        total = self.total
        if total == 0:
            raise DegenerateInputError("no rankings were recorded", min_required=1)

        rank_prob = tuple(tuple(c / total for c in row) for row in self.rank_counts)
        relative_rank = tuple(tuple(c / total for c in row) for row in self.lower_counts)
        expected_rank = tuple(s / total for s in self.rank_sums)

        spreads = []
        for s, sq in zip(self.rank_sums, self.rank_square_sums, strict=True):
            # total^2 * variance, exact
            scaled_variance = total * sq - s * s
            spreads.append(math.sqrt(max(scaled_variance, 0)) / total)

        return RankStatisticsResult(
            labels=labels,
            rank_prob=rank_prob,
            relative_rank=relative_rank,
            expected_rank=expected_rank,
            rank_spread=tuple(spreads),
            linear_extensions=total if exact else None,
            exact=exact,
            samples=total,
            metadata=metadata or {},
        )


def _closure(masks: list[int], start: int) -> int:
    """Bitset of everything reachable from ``start`` through ``masks``."""
    seen = 0
    frontier = masks[start]
    while frontier:
        seen |= frontier
        nxt = 0
        for k in iter_bits(frontier):
            nxt |= masks[k]
        frontier = nxt & ~seen
    return seen


def _greedy_rank(order: PartialOrder, element: int, earliest: bool) -> int:
    """Place ``element`` as early or as late as possible in a bottom-up build.

    Elements are placed one at a time, each one minimal among those not
    yet placed. For the earliest placement only ancestors of ``element``
    are placed before it; for the latest placement it is placed only
    when nothing else is minimal.
    """
    n = order.size
    below = [order.below_mask(i) for i in range(n)]
    ancestors = _closure(below, element)
    element_bit = 1 << element
    remaining = (1 << n) - 1

    for position in range(1, n + 1):
        minimal = 0
        for e in iter_bits(remaining):
            if not below[e] & remaining:
                minimal |= 1 << e
        if not minimal:
            raise MalformedRelationError(
                f"relation contains a cycle among elements {list(iter_bits(remaining))}"
            )
        if earliest:
            if minimal & element_bit:
                return position
            candidates = minimal & ancestors
            if not candidates:
                raise MalformedRelationError(
                    f"relation contains a cycle through element {element}"
                )
        else:
            candidates = minimal & ~element_bit
            if not candidates:
                return position
        chosen = candidates & -candidates
        remaining &= ~chosen

    raise AssertionError("element was never placed")


class RankStatistics:
    """Computes rank statistics and rank intervals for partial orders.

    Exact statistics go through the enumerator and therefore share its
    size limit and budget; rank intervals do not.
    """

    MIN_ELEMENTS = 2

    def __init__(self, enumerator: LinearExtensionEnumerator | None = None) -> None:
        """Initialize with an optional pre-configured enumerator."""
        self.enumerator = enumerator or LinearExtensionEnumerator()

    @classmethod
    def from_config(cls, config: RankingConfig) -> RankStatistics:
        return cls(LinearExtensionEnumerator.from_config(config))

    def compute(self, order: PartialOrder) -> RankStatisticsResult:
        """Compute exact rank statistics in one pass over all linear extensions.

        Args:
            order: The partial order

        Returns:
            RankStatisticsResult with ``exact=True``

        Raises:
            DegenerateInputError: If the order has fewer than MIN_ELEMENTS elements
            IntractableInputError: Propagated from the enumerator

        Example:
            >>> order = PartialOrder.from_pairs(3, [(0, 1), (0, 2)])
            >>> result = RankStatistics().compute(order)
            >>> result.linear_extensions
            2
            >>> result.relative_rank[1][2]
            0.5
        """
        if order.size < self.MIN_ELEMENTS:
            raise DegenerateInputError(
                f"rank statistics need at least {self.MIN_ELEMENTS} elements",
                min_required=self.MIN_ELEMENTS,
            )

        accumulator = RankAccumulator(order.size)
        accumulator.add_all(self.enumerator.enumerate(order))

        logger.info(
            "Computed exact rank statistics",
            {"elements": order.size, "linear_extensions": accumulator.total},
        )
        return accumulator.result(order.labels, exact=True)

    def rank_interval(self, order: PartialOrder, element: int) -> RankInterval:
        """Lowest and highest rank ``element`` can take, without enumeration.

        Raises:
            IndexError: If ``element`` is out of range
        """
        if not 0 <= element < order.size:
            raise IndexError(f"element {element} out of range for {order.size} elements")
        return RankInterval(
            _greedy_rank(order, element, earliest=True),
            _greedy_rank(order, element, earliest=False),
        )

    def rank_intervals(self, order: PartialOrder) -> list[RankInterval]:
        return [self.rank_interval(order, i) for i in range(order.size)]


def approximate_expected_ranks(order: PartialOrder) -> tuple[float, ...]:
    """Approximate expected ranks with the local partial order model.

    For element i with s elements strictly below it and u elements
    incomparable to it, the estimate is (s + 1)(n + 1) / (n + 1 - u).
    It is exact for total orders and for antichains and needs no
    enumeration.

    Example:
        >>> approximate_expected_ranks(PartialOrder([[1, 0], [0, 1]]))
        (1.5, 1.5)
    """
    n = order.size
    estimates = []
    for i in range(n):
        below = bin(order.below_mask(i)).count("1")
        above = bin(order.above_mask(i)).count("1")
        incomparable = n - 1 - below - above
        estimates.append((below + 1) * (n + 1) / (n + 1 - incomparable))
    return tuple(estimates)


def compute_rank_statistics(
    order: PartialOrder,
    max_elements: int = LinearExtensionEnumerator.DEFAULT_MAX_ELEMENTS,
    max_steps: int | None = None,
    time_limit_seconds: float | None = None,
) -> RankStatisticsResult:
    """Compute exact rank statistics; see RankStatistics.compute."""
    enumerator = LinearExtensionEnumerator(
        max_elements=max_elements,
        max_steps=max_steps,
        time_limit_seconds=time_limit_seconds,
    )
    return RankStatistics(enumerator).compute(order)


def rank_interval(order: PartialOrder, element: int) -> RankInterval:
    """Rank interval of one element; see RankStatistics.rank_interval."""
    return RankStatistics().rank_interval(order, element)


def rank_intervals(order: PartialOrder) -> list[RankInterval]:
    """Rank intervals of every element."""
    return RankStatistics().rank_intervals(order)
