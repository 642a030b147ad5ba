"""Partial orders over a finite set of elements.

This module provides the PartialOrder class, a validated boolean
dominance matrix, together with pairwise comparability queries.

Conventions:
    - ``leq[i][j]`` true means element i is dominated by element j
      (i is not more central than j).
    - Rank 1 is the bottom of a ranking and rank n is the top.
    - Reflexivity is required. Transitivity is a precondition that is
      checked and reported, never repaired.

Dependencies:
    - posetrank.ranking.errors: MalformedRelationError, DegenerateInputError
    - posetrank.common.logging: structured warnings for approximate relations
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import Enum

from posetrank.common.logging import get_logger
from posetrank.ranking.errors import DegenerateInputError, MalformedRelationError

logger = get_logger("ranking.partial_order")


class Comparability(Enum):
    """Classification of an ordered pair of elements."""

    LESS_EQUAL = "less_equal"
    GREATER_EQUAL = "greater_equal"
    EQUAL = "equal"
    INCOMPARABLE = "incomparable"


def iter_bits(mask: int) -> Iterator[int]:
    """Yield the indices of the set bits of ``mask`` in ascending order."""
    while mask:
        low = mask & -mask
        yield low.bit_length() - 1
        mask ^= low


def transitive_closure(matrix: Sequence[Sequence[object]]) -> list[list[bool]]:
    """Return the reflexive transitive closure of a square relation matrix.

    Construction of a PartialOrder never closes its input; callers that
    start from a covering relation use this explicitly.

    Args:
        matrix: Square matrix of truthy/falsy entries

    Returns:
        New boolean matrix with the diagonal set and all implied pairs added

    Example:
        >>> transitive_closure([[0, 1, 0], [0, 0, 1], [0, 0, 0]])[0][2]
        True
    """
    n = len(matrix)
    for row in matrix:
        if len(row) != n:
            raise MalformedRelationError("relation matrix must be square")

    reach = [
        sum(1 << j for j in range(n) if matrix[i][j]) | (1 << i) for i in range(n)
    ]
    # Warshall over bitsets
    for k in range(n):
        bit_k = 1 << k
        for i in range(n):
            if reach[i] & bit_k:
                reach[i] |= reach[k]

    return [[bool(reach[i] >> j & 1) for j in range(n)] for i in range(n)]


class PartialOrder:
    """A dominance relation over n labelled elements.

    The relation is stored as two families of bitsets: ``above[i]`` holds
    every j != i with ``leq[i][j]`` and ``below[i]`` every j != i with
    ``leq[j][i]``.

    Example:
        >>> order = PartialOrder([[1, 1, 1], [0, 1, 0], [0, 0, 1]])
        >>> order.comparability(0, 1)
        <Comparability.LESS_EQUAL: 'less_equal'>
        >>> order.comparable_fraction()
        0.6666666666666666
    """

    MAX_REPORTED_VIOLATIONS = 10

    def __init__(
        self,
        matrix: Sequence[Sequence[object]],
        labels: Sequence[str] | None = None,
        check_transitivity: bool = True,
    ) -> None:
        """Validate and store a relation matrix.

        Args:
            matrix: n x n matrix whose entry [i][j] is truthy when i <= j
            labels: Optional unique element names (defaults to "0".."n-1")
            check_transitivity: Scan for missing implied pairs and log them

        Raises:
            MalformedRelationError: If the matrix is not square, a diagonal
                entry is false, labels do not match, or two distinct elements
                dominate each other
        """
        n = len(matrix)
        for i, row in enumerate(matrix):
            if len(row) != n:
                raise MalformedRelationError(
                    f"relation matrix must be square: row {i} has {len(row)} entries, expected {n}"
                )

        for i in range(n):
            if not matrix[i][i]:
                raise MalformedRelationError(f"relation is not reflexive at element {i}")

        if labels is None:
            labels = [str(i) for i in range(n)]
        if len(labels) != n:
            raise MalformedRelationError(f"expected {n} labels, got {len(labels)}")
        if len(set(labels)) != n:
            raise MalformedRelationError("element labels must be unique")

        self._n = n
        self._labels = tuple(str(label) for label in labels)
        self._above = [
            sum(1 << j for j in range(n) if j != i and matrix[i][j]) for i in range(n)
        ]
        self._below = [
            sum(1 << j for j in range(n) if j != i and matrix[j][i]) for i in range(n)
        ]

        for i in range(n):
            mutual = self._above[i] & self._below[i]
            if mutual:
                j = next(iter_bits(mutual))
                raise MalformedRelationError(
                    f"relation is not antisymmetric: elements {i} and {j} dominate each other"
                )

        self.transitivity_violations: list[tuple[int, int, int]] = []
        self.transitivity_violation_count = 0
        if check_transitivity:
            self._check_transitivity()

    @classmethod
    def from_pairs(
        cls,
        size: int,
        pairs: Iterable[tuple[int, int]],
        labels: Sequence[str] | None = None,
    ) -> PartialOrder:
        """Build an order from ``(lower, upper)`` pairs, closing them transitively.

        Args:
            size: Number of elements
            pairs: Iterable of (i, j) meaning i <= j
            labels: Optional element labels

        Raises:
            IndexError: If a pair references an element outside 0..size-1
            MalformedRelationError: If the pairs contain a cycle
        """
        matrix = [[i == j for j in range(size)] for i in range(size)]
        for i, j in pairs:
            if not (0 <= i < size and 0 <= j < size):
                raise IndexError(f"pair ({i}, {j}) out of range for {size} elements")
            matrix[i][j] = True
        return cls(transitive_closure(matrix), labels=labels, check_transitivity=False)

    def _check_transitivity(self) -> None:
        """Record (i, j, k) witnesses with i <= j <= k but not i <= k."""
        for i in range(self._n):
            for j in iter_bits(self._above[i]):
                missing = self._above[j] & ~self._above[i] & ~(1 << i)
                for k in iter_bits(missing):
                    self.transitivity_violation_count += 1
                    if len(self.transitivity_violations) < self.MAX_REPORTED_VIOLATIONS:
                        self.transitivity_violations.append((i, j, k))

        if self.transitivity_violation_count:
            logger.warning(
                "Relation is not transitive; results describe its transitive closure",
                {
                    "elements": self._n,
                    "violations": self.transitivity_violation_count,
                    "examples": self.transitivity_violations,
                },
            )

    def _check_index(self, i: int) -> None:
        if not 0 <= i < self._n:
            raise IndexError(f"element {i} out of range for {self._n} elements")

    @property
    def size(self) -> int:
        return self._n

    def __len__(self) -> int:
        return self._n

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    def __repr__(self) -> str:
        return f"PartialOrder(size={self._n}, comparable_pairs={self.comparable_pair_count()})"

    def index_of(self, label: str) -> int:
        """Return the element index carrying ``label``.

        Raises:
            KeyError: If no element has this label
        """
        try:
            return self._labels.index(label)
        except ValueError:
            raise KeyError(label) from None

    def leq(self, i: int, j: int) -> bool:
        """Return True when i <= j."""
        self._check_index(i)
        self._check_index(j)
        return i == j or bool(self._above[i] >> j & 1)

    def above_mask(self, i: int) -> int:
        """Bitset of elements strictly dominating i."""
        return self._above[i]

    def below_mask(self, i: int) -> int:
        """Bitset of elements strictly dominated by i."""
        return self._below[i]

    def strictly_above(self, i: int) -> list[int]:
        self._check_index(i)
        return list(iter_bits(self._above[i]))

    def strictly_below(self, i: int) -> list[int]:
        self._check_index(i)
        return list(iter_bits(self._below[i]))

    def comparability(self, i: int, j: int) -> Comparability:
        """Classify the pair (i, j).

        EQUAL is returned only for i == j; distinct elements are never
        equal in a partial order.
        """
        self._check_index(i)
        self._check_index(j)
        if i == j:
            return Comparability.EQUAL
        if self._above[i] >> j & 1:
            return Comparability.LESS_EQUAL
        if self._below[i] >> j & 1:
            return Comparability.GREATER_EQUAL
        return Comparability.INCOMPARABLE

    def comparable_pair_count(self) -> int:
        """Number of unordered pairs {i, j}, i != j, related in either direction."""
        return sum(bin(mask).count("1") for mask in self._above)

    def incomparable_pairs(self) -> list[tuple[int, int]]:
        """All unordered incomparable pairs as (i, j) with i < j."""
        pairs = []
        for i in range(self._n):
            related = self._above[i] | self._below[i]
            for j in range(i + 1, self._n):
                if not related >> j & 1:
                    pairs.append((i, j))
        return pairs

    def comparable_fraction(self) -> float:
        """Fraction of unordered pairs of distinct elements that are comparable.

        Returns:
            Comparable pairs divided by n choose 2

        Raises:
            DegenerateInputError: If the order has fewer than 2 elements
        """
        if self._n < 2:
            raise DegenerateInputError(
                "comparable fraction needs at least 2 elements", min_required=2
            )
        total_pairs = self._n * (self._n - 1) // 2
        return self.comparable_pair_count() / total_pairs

    def is_total(self) -> bool:
        """True when every pair of distinct elements is comparable."""
        return self.comparable_pair_count() == self._n * (self._n - 1) // 2

    def to_matrix(self) -> list[list[bool]]:
        """Return the relation as a fresh boolean matrix."""
        return [[self.leq(i, j) for j in range(self._n)] for i in range(self._n)]
