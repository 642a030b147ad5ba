from posetrank.ranking.budget import ComputationBudget
from posetrank.ranking.errors import (
    DegenerateInputError,
    InsufficientSamplesError,
    IntractableInputError,
    MalformedRelationError,
    RankingError,
)
from posetrank.ranking.extensions import (
    LinearExtensionEnumerator,
    count_linear_extensions,
    enumerate_linear_extensions,
    ranking_to_order,
)
from posetrank.ranking.models import Ranking, RankInterval, RankStatisticsResult
from posetrank.ranking.partial_order import Comparability, PartialOrder, transitive_closure
from posetrank.ranking.sampling import ExtensionSampler, estimate_rank_statistics
from posetrank.ranking.statistics import (
    RankStatistics,
    approximate_expected_ranks,
    compute_rank_statistics,
    rank_interval,
    rank_intervals,
)

__all__ = [
    "Comparability",
    "ComputationBudget",
    "DegenerateInputError",
    "ExtensionSampler",
    "InsufficientSamplesError",
    "IntractableInputError",
    "LinearExtensionEnumerator",
    "MalformedRelationError",
    "PartialOrder",
    "RankInterval",
    "RankStatistics",
    "RankStatisticsResult",
    "Ranking",
    "RankingError",
    "approximate_expected_ranks",
    "compute_rank_statistics",
    "count_linear_extensions",
    "enumerate_linear_extensions",
    "estimate_rank_statistics",
    "rank_interval",
    "rank_intervals",
    "ranking_to_order",
    "transitive_closure",
]
