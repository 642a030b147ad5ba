"""Approximate rank statistics by sampling linear extensions.

This module provides ExtensionSampler, which estimates the same
RankStatisticsResult as exact enumeration for orders whose extension
set is too large to walk.

Sampling approach:
    A lazy Markov chain over linear extensions. Each transition picks
    an adjacent pair of positions uniformly and, with probability 1/2,
    swaps the two elements if they are incomparable. The chain is
    symmetric and connected, so its stationary distribution is uniform
    over all linear extensions.

    - Start: a greedy bottom-up topological ranking
    - Burn-in: n**3 transitions unless configured
    - Thinning: n transitions between recorded states unless configured

Dependencies:
    - posetrank.ranking.statistics: RankAccumulator for the fold
    - posetrank.ranking.errors: InsufficientSamplesError, DegenerateInputError
"""

from __future__ import annotations

import random
from collections.abc import Callable

from posetrank.common.config import SamplingConfig
from posetrank.common.logging import get_logger
from posetrank.ranking.errors import (
    DegenerateInputError,
    InsufficientSamplesError,
    MalformedRelationError,
)
from posetrank.ranking.models import RankStatisticsResult
from posetrank.ranking.partial_order import PartialOrder, iter_bits
from posetrank.ranking.statistics import RankAccumulator

logger = get_logger("ranking.sampling")


class ExtensionSampler:
    """Estimator of rank statistics from uniformly sampled linear extensions."""

    MIN_SAMPLES = 2
    DEFAULT_SAMPLES = 10000

    def __init__(
        self,
        seed: int | None = None,
        burn_in: int | None = None,
        thinning: int | None = None,
    ) -> None:
        """Initialize the sampler with an optional random seed.

        Args:
            seed: Random seed for reproducibility
            burn_in: Transitions discarded before the first sample
            thinning: Transitions between consecutive samples
        """
        if burn_in is not None and burn_in < 0:
            raise ValueError("burn_in must not be negative")
        if thinning is not None and thinning <= 0:
            raise ValueError("thinning must be greater than 0")
        self.seed = seed
        self.burn_in = burn_in
        self.thinning = thinning
        self.rng = random.Random(seed)

    @classmethod
    def from_config(cls, config: SamplingConfig) -> ExtensionSampler:
        return cls(seed=config.seed, burn_in=config.burn_in, thinning=config.thinning)

    def estimate(
        self,
        order: PartialOrder,
        n_samples: int = DEFAULT_SAMPLES,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> RankStatisticsResult:
        """Estimate rank statistics from sampled linear extensions.

        Args:
            order: The partial order
            n_samples: Number of chain states to record
            progress_callback: Optional callback(current, total) for progress

        Returns:
            RankStatisticsResult with ``exact=False``

        Raises:
            DegenerateInputError: If the order has fewer than 2 elements
            InsufficientSamplesError: If n_samples < MIN_SAMPLES

        Example:
            >>> sampler = ExtensionSampler(seed=42)
            >>> result = sampler.estimate(order, n_samples=5000)
            >>> print(f"{result.labels[0]} expected rank {result.expected_rank[0]:.2f}")
        """
        self._validate_inputs(order, n_samples)

        n = order.size
        burn_in = self.burn_in if self.burn_in is not None else n**3
        thinning = self.thinning if self.thinning is not None else n

        sequence = self._initial_extension(order)
        accumulator = self._run_chain(
            order, sequence, n_samples, burn_in, thinning, progress_callback
        )

        logger.info(
            "Estimated rank statistics by sampling",
            {
                "elements": n,
                "samples": n_samples,
                "burn_in": burn_in,
                "thinning": thinning,
                "seed": self.seed,
            },
        )
        return accumulator.result(
            order.labels,
            exact=False,
            metadata={"burn_in": burn_in, "thinning": thinning},
        )

    def _validate_inputs(self, order: PartialOrder, n_samples: int) -> None:
        if order.size < 2:
            raise DegenerateInputError(
                "rank statistics need at least 2 elements", min_required=2
            )
        if n_samples < self.MIN_SAMPLES:
            msg = f"n_samples must be at least {self.MIN_SAMPLES} for rank estimation"
            raise InsufficientSamplesError(msg, min_required=self.MIN_SAMPLES)

    def _initial_extension(self, order: PartialOrder) -> list[int]:
        """Build a linear extension bottom-up, taking the lowest minimal index each time.

        Returns:
            Elements listed from rank 1 to rank n
        """
        n = order.size
        below = [order.below_mask(i) for i in range(n)]
        remaining = (1 << n) - 1
        sequence: list[int] = []
        while remaining:
            for e in iter_bits(remaining):
                if not below[e] & remaining:
                    sequence.append(e)
                    remaining &= ~(1 << e)
                    break
            else:
                raise MalformedRelationError(
                    f"relation contains a cycle among elements {list(iter_bits(remaining))}"
                )
        return sequence

    def _run_chain(
        self,
        order: PartialOrder,
        sequence: list[int],
        n_samples: int,
        burn_in: int,
        thinning: int,
        progress_callback: Callable[[int, int], None] | None,
    ) -> RankAccumulator:
        """Advance the chain and record every ``thinning``-th state after burn-in."""
        n = order.size
        above = [order.above_mask(i) for i in range(n)]
        ranks = [0] * n
        for position, element in enumerate(sequence, start=1):
            ranks[element] = position

        def step() -> None:
            p = self.rng.randrange(n - 1)
            if self.rng.random() < 0.5:
                return
            lower, upper = sequence[p], sequence[p + 1]
            if above[lower] >> upper & 1:
                return
            sequence[p], sequence[p + 1] = upper, lower
            ranks[upper] = p + 1
            ranks[lower] = p + 2

        for _ in range(burn_in):
            step()

        accumulator = RankAccumulator(n)
        for i in range(n_samples):
            for _ in range(thinning):
                step()
            accumulator.add(tuple(ranks))

            if progress_callback:
                progress_callback(i + 1, n_samples)

        return accumulator


def estimate_rank_statistics(
    order: PartialOrder,
    n_samples: int = ExtensionSampler.DEFAULT_SAMPLES,
    seed: int | None = None,
) -> RankStatisticsResult:
    """Estimate rank statistics by sampling; see ExtensionSampler.estimate."""
    return ExtensionSampler(seed=seed).estimate(order, n_samples=n_samples)
