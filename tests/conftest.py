import math
from pathlib import Path

import pytest

from posetrank.common.logging import configure_logging, get_log_path, set_analysis_id
from posetrank.ranking.partial_order import PartialOrder


@pytest.fixture(autouse=True)
def log_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Send every log line of a test to its own temporary file."""
    path = tmp_path / "logs" / "posetrank.jsonl"
    previous = get_log_path()
    monkeypatch.setenv("POSETRANK_LOG_PATH", str(path))
    configure_logging(path)
    yield path
    configure_logging(previous)
    set_analysis_id(None)


def chain(n: int) -> PartialOrder:
    """Total order 0 < 1 < ... < n-1."""
    return PartialOrder.from_pairs(n, [(i, i + 1) for i in range(n - 1)])


def antichain(n: int) -> PartialOrder:
    """n pairwise incomparable elements."""
    return PartialOrder([[i == j for j in range(n)] for i in range(n)])


@pytest.fixture
def vee() -> PartialOrder:
    """0 below both 1 and 2; 1 and 2 incomparable."""
    return PartialOrder.from_pairs(3, [(0, 1), (0, 2)], labels=["a", "b", "c"])


@pytest.fixture
def diamond() -> PartialOrder:
    """
        3
       / \\
      1   2
       \\ /
        0
    """
    return PartialOrder.from_pairs(4, [(0, 1), (0, 2), (1, 3), (2, 3)])


@pytest.fixture
def n_shaped() -> PartialOrder:
    """
    2   3
    |\\  |
    | \\ |
    0   1

    0 < 2, 1 < 2, 1 < 3; five linear extensions.
    """
    return PartialOrder.from_pairs(4, [(0, 2), (1, 2), (1, 3)])


@pytest.fixture
def mixed() -> PartialOrder:
    """Six elements with a chain, a fork and a free element."""
    return PartialOrder.from_pairs(6, [(0, 1), (1, 2), (0, 3), (3, 4)])


def factorial(n: int) -> int:
    return math.factorial(n)
