"""Ranking module command-line entry point.

This module renders the analysis of a relation file: comparable
fraction, linear extension count, rank intervals, and exact or sampled
rank statistics.

Fallback order when full enumeration is intractable:
    1. Sampled statistics, if ``--samples`` is positive
    2. Rank intervals and the extension count only

Dependencies:
    - posetrank.common.yaml_config: settings and relation loading
    - posetrank.common.display: console output and formatting
"""

import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from posetrank.common.config import ConfigError, RankingConfig, Settings
from posetrank.common.display import (
    approximate_badge,
    create_probability_table,
    create_rank_table,
    create_summary_panel,
    failed_badge,
    get_console,
    success_badge,
)
from posetrank.common.logging import (
    configure_logging,
    generate_id,
    get_logger,
    set_analysis_id,
)
from posetrank.common.yaml_config import load_relation, load_settings
from posetrank.ranking.errors import IntractableInputError, RankingError
from posetrank.ranking.extensions import LinearExtensionEnumerator
from posetrank.ranking.models import RankInterval, RankStatisticsResult
from posetrank.ranking.partial_order import PartialOrder
from posetrank.ranking.sampling import ExtensionSampler
from posetrank.ranking.statistics import RankStatistics

app = typer.Typer()
logger = get_logger("ranking.main")

DEFAULT_CONFIG_PATH = Path("posetrank.yaml")


def _prepare(config_path: Path) -> Settings:
    settings = load_settings(config_path)
    configure_logging(settings.log_path)
    set_analysis_id(generate_id())
    return settings


def _load_order(relation_path: Path, settings: Settings) -> PartialOrder:
    return load_relation(relation_path, check_transitivity=settings.ranking.check_transitivity)


def _count_extensions(order: PartialOrder, config: RankingConfig) -> int | None:
    """Count linear extensions, giving up on oversized orders once the count budget runs out."""
    if order.size <= config.max_elements:
        return LinearExtensionEnumerator.from_config(config).count(order)

    max_steps = config.count_max_steps
    if config.max_steps is not None:
        max_steps = min(max_steps, config.max_steps)
    enumerator = LinearExtensionEnumerator(
        max_elements=config.max_elements,
        max_steps=max_steps,
        time_limit_seconds=config.time_limit_seconds,
    )
    try:
        return enumerator.count(order)
    except IntractableInputError:
        logger.info(
            "Linear extension count abandoned",
            {"elements": order.size, "max_steps": max_steps},
        )
        return None


@app.command()
def analyze(
    relation_path: Annotated[Path, typer.Argument(help="YAML file holding the relation")],
    config_path: Annotated[
        Path, typer.Option("--config", help="Path to posetrank.yaml settings file")
    ] = DEFAULT_CONFIG_PATH,
    max_elements: Annotated[
        int | None,
        typer.Option("--max-elements", help="Largest order to enumerate exactly"),
    ] = None,
    samples: Annotated[
        int | None,
        typer.Option("--samples", help="Samples for the fallback estimate (0 disables it)"),
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Random seed for sampling")] = None,
    probabilities: Annotated[
        bool, typer.Option("--probabilities", help="Also print the rank probability table")
    ] = False,
) -> None:
    """Analyse the linear extensions of a partial order."""
    console = get_console()

    try:
        settings = _prepare(config_path)
        order = _load_order(relation_path, settings)
    except (ConfigError, RankingError, FileNotFoundError) as e:
        console.print(failed_badge(), f"[error]{escape(str(e))}[/error]")
        sys.exit(1)

    ranking_config = settings.ranking
    if max_elements is not None:
        ranking_config = ranking_config.model_copy(update={"max_elements": max_elements})
    sampling_config = settings.sampling
    if seed is not None:
        sampling_config = sampling_config.model_copy(update={"seed": seed})
    n_samples = sampling_config.n_samples if samples is None else samples

    if order.transitivity_violation_count:
        console.print(
            f"[warning]Relation is not transitive "
            f"({order.transitivity_violation_count} missing pair(s)); "
            f"results describe its transitive closure[/warning]"
        )

    fraction = order.comparable_fraction() if order.size >= 2 else None
    statistics = RankStatistics.from_config(ranking_config)

    intervals: list[RankInterval] = []
    linear_extensions: int | None = None
    result: RankStatisticsResult | None = None
    try:
        intervals = statistics.rank_intervals(order)
        linear_extensions = _count_extensions(order, ranking_config)
        if order.size >= RankStatistics.MIN_ELEMENTS:
            result = statistics.compute(order)
    except IntractableInputError as e:
        console.print(
            approximate_badge(), f"[warning]Exact analysis unavailable: {escape(str(e))}[/warning]"
        )
        if n_samples > 0 and order.size >= 2:
            try:
                sampler = ExtensionSampler.from_config(sampling_config)
                result = sampler.estimate(order, n_samples=n_samples)
            except RankingError as sampling_error:
                console.print(failed_badge(), f"[error]{escape(str(sampling_error))}[/error]")
                sys.exit(1)
    except RankingError as e:
        console.print(failed_badge(), f"[error]{escape(str(e))}[/error]")
        sys.exit(1)

    console.print(create_summary_panel(order.size, fraction, linear_extensions))
    console.print()
    console.print(create_rank_table(order.labels, intervals, result))
    if probabilities and result is not None:
        console.print()
        console.print(create_probability_table(result))
    console.print()
    console.print(success_badge(), "Analysis complete", style="success")


@app.command()
def count(
    relation_path: Annotated[Path, typer.Argument(help="YAML file holding the relation")],
    config_path: Annotated[
        Path, typer.Option("--config", help="Path to posetrank.yaml settings file")
    ] = DEFAULT_CONFIG_PATH,
) -> None:
    """Print the exact number of linear extensions."""
    console = get_console()

    try:
        settings = _prepare(config_path)
        order = _load_order(relation_path, settings)
        total = LinearExtensionEnumerator.from_config(settings.ranking).count(order)
    except (ConfigError, RankingError, FileNotFoundError) as e:
        console.print(failed_badge(), f"[error]{escape(str(e))}[/error]")
        sys.exit(1)

    console.print(str(total), highlight=False)


if __name__ == "__main__":
    app()
