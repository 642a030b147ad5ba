"""Data classes for rank analysis results."""

from dataclasses import dataclass, field
from typing import NamedTuple

# ranks[i] is the rank of element i, 1 (bottom) .. n (top)
Ranking = tuple[int, ...]


class RankInterval(NamedTuple):
    """Lowest and highest rank an element takes over all linear extensions."""

    min_rank: int
    max_rank: int

    @property
    def width(self) -> int:
        return self.max_rank - self.min_rank

    @property
    def midpoint(self) -> float:
        return (self.min_rank + self.max_rank) / 2


@dataclass(frozen=True)
class RankStatisticsResult:
    """Rank distribution summary over the linear extensions of an order.

    For exact results ``linear_extensions`` is the extension count; for
    sampled results it is None and ``samples`` holds the number of
    recorded chain states.
    """

    labels: tuple[str, ...]
    rank_prob: tuple[tuple[float, ...], ...]  # rank_prob[i][r - 1] = P(rk(i) = r)
    relative_rank: tuple[tuple[float, ...], ...]  # relative_rank[i][j] = P(rk(i) < rk(j))
    expected_rank: tuple[float, ...]
    rank_spread: tuple[float, ...]
    linear_extensions: int | None = None
    exact: bool = True
    samples: int = 0
    metadata: dict[str, float] = field(default_factory=dict, compare=False)

    @property
    def size(self) -> int:
        return len(self.labels)

    def rank_probability(self, element: int, rank: int) -> float:
        """Probability that ``element`` receives ``rank`` (1-based)."""
        if not 1 <= rank <= self.size:
            raise IndexError(f"rank {rank} out of range 1..{self.size}")
        return self.rank_prob[element][rank - 1]

    def modal_rank(self, element: int) -> int:
        """Most probable rank of ``element``; ties resolve to the lower rank."""
        row = self.rank_prob[element]
        return max(range(len(row)), key=lambda r: (row[r], -r)) + 1

    def rank_support(self, element: int) -> list[int]:
        """Ranks that ``element`` takes with non-zero probability."""
        return [r + 1 for r, p in enumerate(self.rank_prob[element]) if p > 0]
