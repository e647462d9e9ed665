# src/acminer/reporting.py
from __future__ import annotations

from typing import Iterable, Optional, Sequence

import pandas as pd
from rich.table import Table

from .entries import PatternEntry
from .ranking import ScoreContext, StrategyLike, Strategy, score_entry
from .utils import console

__all__ = ["ranking_frame", "print_ranking"]

_COLUMNS = ["rank", "pattern", "occurrences", "score"]


def _strategy_name(strategy: StrategyLike) -> str:
    if callable(strategy) and not isinstance(strategy, str):
        return getattr(strategy, "__name__", "custom")
    return Strategy(strategy).value


def ranking_frame(
    entries: Iterable[PatternEntry],
    strategy: StrategyLike,
    *,
    context: Optional[ScoreContext] = None,
) -> pd.DataFrame:
    """
    Tabulate already-ranked entries.

    Parameters
    ----------
    entries : iterable of PatternEntry
        Entries in ranked order (e.g. the output of ``rank_entries``).
    strategy : Strategy, str or callable
        Strategy used to fill the ``score`` column.
    context : ScoreContext, optional

    Returns
    -------
    pandas.DataFrame
        Columns ``rank`` (1-based), ``pattern`` (printed code),
        ``occurrences`` and ``score``. Empty input gives an empty frame with
        the same columns.
    """
    rows = []
    for i, e in enumerate(entries, 1):
        rows.append({
            "rank": i,
            "pattern": e.code.pretty(),
            "occurrences": e.size,
            "score": score_entry(e, strategy, context),
        })
    return pd.DataFrame(rows, columns=_COLUMNS)


def print_ranking(
    entries: Sequence[PatternEntry],
    strategy: StrategyLike,
    *,
    context: Optional[ScoreContext] = None,
    title: Optional[str] = None,
    max_items: int = 20,
) -> None:
    """Print the head of a ranking as a rich table on the module console."""
    df = ranking_frame(list(entries)[:max_items], strategy, context=context)
    table = Table(title=title or f"Patterns by {_strategy_name(strategy)}")
    table.add_column("#", justify="right")
    table.add_column("pattern")
    table.add_column("occurrences", justify="right")
    table.add_column("score", justify="right")
    for row in df.itertuples(index=False):
        table.add_row(str(row.rank), row.pattern, str(row.occurrences), f"{row.score:.3f}")
    console.print(table)
    if len(entries) > max_items:
        console.print(f"... {len(entries) - max_items} more")
