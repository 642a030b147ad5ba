"""Tests for ExtensionSampler."""

import pytest
from conftest import antichain, chain

from posetrank.common.config import SamplingConfig
from posetrank.ranking.errors import DegenerateInputError, InsufficientSamplesError
from posetrank.ranking.partial_order import PartialOrder
from posetrank.ranking.sampling import ExtensionSampler, estimate_rank_statistics
from posetrank.ranking.statistics import compute_rank_statistics, rank_intervals


class TestExtensionSampler:
    """Tests for ExtensionSampler.estimate."""

    def test_chain_is_reproduced_exactly(self):
        sampler = ExtensionSampler(seed=1)
        result = sampler.estimate(chain(5), n_samples=50)
        assert result.exact is False
        assert result.linear_extensions is None
        assert result.samples == 50
        for i in range(5):
            assert result.rank_prob[i][i] == 1.0
        assert result.rank_spread == (0.0,) * 5

    def test_bottom_element_never_moves(self, vee: PartialOrder):
        result = ExtensionSampler(seed=7).estimate(vee, n_samples=2000)
        assert result.rank_prob[0] == (1.0, 0.0, 0.0)

    def test_vee_relative_rank_is_balanced(self, vee: PartialOrder):
        result = ExtensionSampler(seed=7).estimate(vee, n_samples=4000)
        assert result.relative_rank[1][2] == pytest.approx(0.5, abs=0.1)
        assert result.relative_rank[1][2] + result.relative_rank[2][1] == pytest.approx(1.0)

    def test_antichain_expected_ranks(self):
        result = ExtensionSampler(seed=3).estimate(antichain(4), n_samples=5000)
        for expected in result.expected_rank:
            assert expected == pytest.approx(2.5, abs=0.2)

    def test_close_to_exact_statistics(self, n_shaped: PartialOrder):
        exact = compute_rank_statistics(n_shaped)
        sampled = ExtensionSampler(seed=11).estimate(n_shaped, n_samples=5000)
        for exact_row, sampled_row in zip(exact.rank_prob, sampled.rank_prob, strict=True):
            assert sampled_row == pytest.approx(exact_row, abs=0.1)

    def test_samples_stay_inside_rank_intervals(self, mixed: PartialOrder):
        result = ExtensionSampler(seed=5).estimate(mixed, n_samples=1000)
        for i, interval in enumerate(rank_intervals(mixed)):
            support = result.rank_support(i)
            assert interval.min_rank <= min(support)
            assert max(support) <= interval.max_rank

    def test_rows_sum_to_one(self, diamond: PartialOrder):
        result = ExtensionSampler(seed=2).estimate(diamond, n_samples=500)
        for row in result.rank_prob:
            assert sum(row) == pytest.approx(1.0)

    def test_same_seed_same_result(self, mixed: PartialOrder):
        first = ExtensionSampler(seed=42).estimate(mixed, n_samples=300)
        second = ExtensionSampler(seed=42).estimate(mixed, n_samples=300)
        assert first == second

    def test_default_burn_in_and_thinning(self, vee: PartialOrder):
        result = ExtensionSampler(seed=0).estimate(vee, n_samples=10)
        assert result.metadata == {"burn_in": 27, "thinning": 3}

    def test_explicit_burn_in_and_thinning(self, vee: PartialOrder):
        result = ExtensionSampler(seed=0, burn_in=0, thinning=1).estimate(vee, n_samples=10)
        assert result.metadata == {"burn_in": 0, "thinning": 1}

    def test_progress_callback(self, vee: PartialOrder):
        calls: list[tuple[int, int]] = []
        ExtensionSampler(seed=0).estimate(
            vee, n_samples=5, progress_callback=lambda c, t: calls.append((c, t))
        )
        assert calls == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]

    def test_too_few_samples_raise(self, vee: PartialOrder):
        with pytest.raises(InsufficientSamplesError) as exc_info:
            ExtensionSampler().estimate(vee, n_samples=1)
        assert exc_info.value.min_required == 2

    def test_too_few_elements_raise(self):
        with pytest.raises(DegenerateInputError):
            ExtensionSampler().estimate(antichain(1), n_samples=10)

    def test_invalid_parameters_raise(self):
        with pytest.raises(ValueError):
            ExtensionSampler(burn_in=-1)
        with pytest.raises(ValueError):
            ExtensionSampler(thinning=0)

    def test_from_config(self):
        sampler = ExtensionSampler.from_config(SamplingConfig(seed=9, burn_in=4, thinning=2))
        assert sampler.seed == 9
        assert sampler.burn_in == 4
        assert sampler.thinning == 2

    def test_handles_orders_beyond_enumeration(self):
        order = antichain(40)
        result = estimate_rank_statistics(order, n_samples=20, seed=1)
        assert result.size == 40
        assert all(sum(row) == pytest.approx(1.0) for row in result.rank_prob)
