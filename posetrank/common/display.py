from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from posetrank.ranking.models import RankInterval, RankStatisticsResult

LILAC = "#C8A2C8"
GOLD = "#FFD700"


_posetrank_theme = Theme(
    {
        "primary": LILAC,
        "accent": GOLD,
        "bold": "bold",
        "success": "green bold",
        "error": "red bold",
        "warning": "yellow bold",
        "info": "blue bold",
    }
)


_console: Console | None = None


def get_theme() -> Theme:
    return _posetrank_theme


def get_console(force_terminal: bool | None = None) -> Console:
    global _console

    if _console is None or force_terminal is not None:
        _console = Console(
            theme=_posetrank_theme,
            force_terminal=force_terminal,
            legacy_windows=False,
        )

    return _console


def success_badge() -> Text:
    return Text("[SUCCESS]", style="success")


def failed_badge() -> Text:
    return Text("[FAILED]", style="error")


def approximate_badge() -> Text:
    return Text("[APPROX]", style=f"bold {GOLD}")


def create_summary_panel(
    size: int,
    comparable_fraction: float | None,
    linear_extensions: int | None,
) -> Panel:
    """Summarise an order: size, comparable fraction and extension count."""
    fraction = f"{comparable_fraction:.3f}" if comparable_fraction is not None else "-"
    extensions = f"{linear_extensions:,}" if linear_extensions is not None else "-"

    summary_text = Text.assemble(
        ("Elements: ", "info"),
        (f"{size}", "bold accent"),
        (" | ", "default"),
        ("Comparable fraction: ", "info"),
        (fraction, "bold accent"),
        (" | ", "default"),
        ("Linear extensions: ", "info"),
        (extensions, "bold accent"),
    )
    return Panel(summary_text, title="Partial Order", border_style="accent")


def create_rank_table(
    labels: tuple[str, ...],
    intervals: list[RankInterval],
    result: RankStatisticsResult | None = None,
) -> Table:
    """Tabulate rank intervals, with expected rank and spread when available.

    Rows are sorted by expected rank (or interval midpoint), highest first.
    """
    title = "Rank Intervals"
    if result is not None:
        title = "Rank Statistics" if result.exact else "Rank Statistics (sampled)"

    table = Table(
        title=title,
        title_style=f"bold {LILAC}",
        border_style=GOLD,
        header_style=f"bold {LILAC}",
        row_styles=["", "dim"],
        padding=(0, 1),
    )

    table.add_column("Element", style="bold")
    table.add_column("Min Rank", justify="right")
    table.add_column("Max Rank", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Spread", justify="right")
    table.add_column("Modal", justify="right")

    if not labels:
        table.add_row("-", "-", "-", "-", "-", "-")
        return table

    def sort_key(i: int) -> float:
        if result is not None:
            return result.expected_rank[i]
        return intervals[i].midpoint

    for i in sorted(range(len(labels)), key=sort_key, reverse=True):
        interval = intervals[i]
        if result is not None:
            expected = f"{result.expected_rank[i]:.2f}"
            spread = f"{result.rank_spread[i]:.2f}"
            modal = str(result.modal_rank(i))
        else:
            expected = spread = modal = "-"
        table.add_row(
            labels[i],
            str(interval.min_rank),
            str(interval.max_rank),
            expected,
            spread,
            modal,
        )

    return table


def create_probability_table(result: RankStatisticsResult) -> Table:
    """Tabulate rank probabilities, one row per element and one column per rank."""
    table = Table(
        title="Rank Probabilities",
        title_style=f"bold {LILAC}",
        border_style=GOLD,
        header_style=f"bold {LILAC}",
        padding=(0, 1),
    )

    table.add_column("Element", style="bold")
    for rank in range(1, result.size + 1):
        table.add_column(str(rank), justify="right")

    for label, row in zip(result.labels, result.rank_prob, strict=True):
        table.add_row(label, *(f"{p:.3f}" if p > 0 else "." for p in row))

    return table
