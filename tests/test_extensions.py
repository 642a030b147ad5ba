"""Tests for linear extension counting and enumeration."""

import sys
from itertools import islice, permutations
from math import comb

import pytest
from conftest import antichain, chain, factorial

from posetrank.ranking.errors import IntractableInputError, MalformedRelationError
from posetrank.ranking.extensions import (
    LinearExtensionEnumerator,
    count_linear_extensions,
    enumerate_linear_extensions,
    ranking_to_order,
)
from posetrank.ranking.partial_order import PartialOrder


def respects(order: PartialOrder, ranking: tuple[int, ...]) -> bool:
    return all(
        ranking[i] <= ranking[j]
        for i in range(order.size)
        for j in range(order.size)
        if order.leq(i, j)
    )


def brute_force(order: PartialOrder) -> set[tuple[int, ...]]:
    """Every order-respecting permutation of ranks 1..n."""
    n = order.size
    candidates = (tuple(p) for p in permutations(range(1, n + 1)))
    return {ranking for ranking in candidates if respects(order, ranking)}


class TestCountLinearExtensions:
    """Tests for exact counting."""

    def test_vee_has_two_extensions(self, vee: PartialOrder):
        assert count_linear_extensions(vee) == 2

    def test_n_shaped_has_five_extensions(self, n_shaped: PartialOrder):
        assert count_linear_extensions(n_shaped) == 5

    def test_diamond_has_two_extensions(self, diamond: PartialOrder):
        assert count_linear_extensions(diamond) == 2

    @pytest.mark.parametrize("size", [1, 2, 3, 5, 8])
    def test_antichain_has_factorial_extensions(self, size: int):
        assert count_linear_extensions(antichain(size)) == factorial(size)

    @pytest.mark.parametrize("size", [2, 11, 300])
    def test_chain_has_one_extension(self, size: int):
        assert count_linear_extensions(chain(size)) == 1

    def test_empty_order_has_one_extension(self):
        assert count_linear_extensions(PartialOrder([])) == 1

    def test_large_counts_are_exact(self):
        # Two disjoint chains of 20: interleavings = C(40, 20)
        pairs = [(i, i + 1) for i in range(19)] + [(20 + i, 21 + i) for i in range(19)]
        order = PartialOrder.from_pairs(40, pairs)
        total = count_linear_extensions(order)
        assert total == comb(40, 20)
        assert total > 2**32

    def test_matches_brute_force(self, mixed: PartialOrder):
        assert count_linear_extensions(mixed) == len(brute_force(mixed))

    def test_count_ignores_enumeration_size_limit(self):
        enumerator = LinearExtensionEnumerator(max_elements=2)
        assert enumerator.count(antichain(6)) == 720

    def test_step_budget_aborts_count(self):
        with pytest.raises(IntractableInputError) as exc_info:
            count_linear_extensions(antichain(6), max_steps=5)
        assert exc_info.value.limit == 5

    def test_cycle_is_reported(self):
        cyclic = PartialOrder(
            [[1, 1, 0], [0, 1, 1], [1, 0, 1]],
            check_transitivity=False,
        )
        with pytest.raises(MalformedRelationError, match="cycle"):
            count_linear_extensions(cyclic)


class TestEnumerateLinearExtensions:
    """Tests for lazy enumeration."""

    def test_vee_extensions(self, vee: PartialOrder):
        rankings = set(enumerate_linear_extensions(vee))
        assert rankings == {(1, 2, 3), (1, 3, 2)}

    def test_vee_extensions_bottom_to_top(self, vee: PartialOrder):
        orders = sorted(ranking_to_order(r) for r in enumerate_linear_extensions(vee))
        assert orders == [[0, 1, 2], [0, 2, 1]]

    def test_antichain_yields_every_permutation(self):
        rankings = list(enumerate_linear_extensions(antichain(4)))
        assert len(rankings) == 24
        assert set(rankings) == set(permutations(range(1, 5)))

    def test_chain_yields_identity(self):
        assert list(enumerate_linear_extensions(chain(11))) == [tuple(range(1, 12))]

    def test_empty_order_yields_empty_ranking(self):
        assert list(enumerate_linear_extensions(PartialOrder([]))) == [()]

    def test_every_ranking_respects_order(self, mixed: PartialOrder):
        rankings = list(enumerate_linear_extensions(mixed))
        assert all(respects(mixed, r) for r in rankings)

    def test_matches_brute_force_exactly(self, n_shaped: PartialOrder, mixed: PartialOrder):
        for order in (n_shaped, mixed):
            rankings = list(enumerate_linear_extensions(order))
            assert len(rankings) == len(set(rankings))
            assert set(rankings) == brute_force(order)

    def test_length_matches_count(self, diamond: PartialOrder, mixed: PartialOrder):
        for order in (diamond, mixed, antichain(5)):
            assert len(list(enumerate_linear_extensions(order))) == count_linear_extensions(order)

    def test_is_restartable(self, mixed: PartialOrder):
        first = set(enumerate_linear_extensions(mixed))
        second = set(enumerate_linear_extensions(mixed))
        assert first == second

    def test_early_termination(self):
        order = antichain(9)
        first_three = list(islice(enumerate_linear_extensions(order), 3))
        assert len(first_three) == 3
        assert len(set(first_three)) == 3
        assert next(enumerate_linear_extensions(order)) == first_three[0]

    def test_size_limit_raises_before_iteration(self):
        with pytest.raises(IntractableInputError) as exc_info:
            enumerate_linear_extensions(antichain(5), max_elements=4)
        assert exc_info.value.limit == 4

    def test_size_limit_is_inclusive(self):
        assert len(list(enumerate_linear_extensions(antichain(4), max_elements=4))) == 24

    def test_long_chain_is_enumerated_without_recursion(self):
        n = sys.getrecursionlimit() + 200
        rankings = list(enumerate_linear_extensions(chain(n), max_elements=n))
        assert rankings == [tuple(range(1, n + 1))]

    def test_step_budget_aborts_enumeration(self):
        rankings = enumerate_linear_extensions(antichain(6), max_steps=10)
        with pytest.raises(IntractableInputError):
            list(rankings)

    def test_time_budget_aborts_enumeration(self):
        enumerator = LinearExtensionEnumerator(time_limit_seconds=1e-9)
        with pytest.raises(IntractableInputError):
            list(enumerator.enumerate(antichain(8)))

    def test_cycle_is_reported_during_iteration(self):
        cyclic = PartialOrder(
            [[1, 1, 0], [0, 1, 1], [1, 0, 1]],
            check_transitivity=False,
        )
        rankings = enumerate_linear_extensions(cyclic)
        with pytest.raises(MalformedRelationError):
            list(rankings)


class TestLinearExtensionEnumerator:
    def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            LinearExtensionEnumerator(max_elements=0)

    def test_from_config(self):
        from posetrank.common.config import RankingConfig

        config = RankingConfig(max_elements=3, max_steps=100, time_limit_seconds=2.5)
        enumerator = LinearExtensionEnumerator.from_config(config)
        assert enumerator.max_elements == 3
        assert enumerator.max_steps == 100
        assert enumerator.time_limit_seconds == 2.5

    def test_instance_is_reusable(self, vee: PartialOrder, diamond: PartialOrder):
        enumerator = LinearExtensionEnumerator(max_steps=50)
        assert enumerator.count(vee) == 2
        assert enumerator.count(diamond) == 2
        assert len(list(enumerator.enumerate(vee))) == 2


class TestRankingToOrder:
    def test_inverts_ranking(self):
        assert ranking_to_order((3, 1, 2)) == [1, 2, 0]

    def test_empty(self):
        assert ranking_to_order(()) == []
