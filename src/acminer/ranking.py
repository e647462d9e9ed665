# src/acminer/ranking.py

from __future__ import annotations
import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from .blocks import EmulatableBlock, UseBlock
from .codes import PatternCode
from .config import CostModel, DEFAULT_COST_MODEL, RankingConfig, StatePairing, Strategy
from .entries import PatternEntry, PatternsLike, as_side_table, entries_from_mapping
from .errors import MissingCostMetadataError
from .evaluation import (
    emulation_profit,
    pattern_occurrence_cost,
    pattern_profit,
    pattern_profit_state,
    pattern_profit_state_multi,
    validate_occurrences,
)
from .utils import log_event

"""
Ordering strategies for pattern entries.

Every strategy maps an entry to a scalar score; one generic comparator turns
two scores into the usual three-way result and applies the direction flag.
Side tables (emulation blocks, use blocks) travel in a :class:`ScoreContext`
passed at sort time, so comparators carry no state of their own.

Examples
--------
>>> from acminer.codes import string_to_code
>>> from acminer.entries import PatternEntry
>>> from acminer.ranking import Strategy, rank_entries
>>> a = PatternEntry(string_to_code("(0,1)(0,2)+"), [(4,), (9,), (12,)])
>>> b = PatternEntry(string_to_code("(0,1)(0,2)*"), [(5,)])
>>> [e.size for e in rank_entries([a, b], Strategy.OCCURRENCE_COUNT)]
[1, 3]
"""

__all__ = [
    "Strategy",
    "StatePairing",
    "ScoreContext",
    "score_entry",
    "compare_entries",
    "entry_comparator",
    "rank_entries",
    "select_best",
]


@dataclass(frozen=True)
class ScoreContext:
    """
    Read-only inputs a strategy may need besides the entry itself.

    Parameters
    ----------
    emulatable : mapping PatternCode -> EmulatableBlock, optional
        Required by :attr:`Strategy.EMULATION_PROFIT`.
    use_blocks : mapping PatternCode -> UseBlock, optional
        Required by :attr:`Strategy.USE_BLOCK_PROFIT`.
    cost_model : CostModel, default=DEFAULT_COST_MODEL
    state_pairing : StatePairing, default=StatePairing.OWN

    Notes
    -----
    Tables are re-keyed by :class:`PatternCode` on construction. Do not mutate
    the source mappings while a sort that uses this context is running.
    """

    emulatable: Optional[Mapping[PatternCode, EmulatableBlock]] = None
    use_blocks: Optional[Mapping[PatternCode, UseBlock]] = None
    cost_model: CostModel = DEFAULT_COST_MODEL
    state_pairing: StatePairing = StatePairing.OWN

    def __post_init__(self):
        object.__setattr__(self, "emulatable", as_side_table(self.emulatable))
        object.__setattr__(self, "use_blocks", as_side_table(self.use_blocks))
        object.__setattr__(self, "state_pairing", StatePairing(self.state_pairing))

    def emulated_block(self, code: PatternCode) -> EmulatableBlock:
        return _lookup(self.emulatable, code, "emulatable")

    def use_block(self, code: PatternCode) -> UseBlock:
        return _lookup(self.use_blocks, code, "use_blocks")


_DEFAULT_CONTEXT = ScoreContext()


def _lookup(table, code, name):
    if table is None:
        raise MissingCostMetadataError(None, name)
    try:
        return table[code]
    except KeyError:
        raise MissingCostMetadataError(code, name) from None


# ───────────────────────────── Scoring functions ─────────────────────────── #

def _occurrence_cost(entry: PatternEntry, ctx: ScoreContext) -> float:
    return pattern_occurrence_cost(entry.code, entry.size, ctx.cost_model)


def _emulation_profit(entry: PatternEntry, ctx: ScoreContext) -> float:
    block = ctx.emulated_block(entry.code)
    return emulation_profit(entry.code, block, entry.size, ctx.cost_model)


def _occurrence_count(entry: PatternEntry, ctx: ScoreContext) -> float:
    return entry.size


def _pattern_size(entry: PatternEntry, ctx: ScoreContext) -> float:
    return entry.structural_size()


def _profit(entry: PatternEntry, ctx: ScoreContext) -> float:
    return pattern_profit(entry.code, entry.occurrences, ctx.cost_model)


def _profit_state(entry: PatternEntry, ctx: ScoreContext) -> float:
    return pattern_profit_state(entry.code, entry.occurrences, ctx.cost_model)


def _profit_state_multi(entry: PatternEntry, ctx: ScoreContext) -> float:
    return pattern_profit_state_multi(entry.code, entry.occurrences, ctx.cost_model)


def _use_block_profit(entry: PatternEntry, ctx: ScoreContext) -> float:
    return ctx.use_block(entry.code).profit


ScoreFn = Callable[[PatternEntry, ScoreContext], float]

_SCORERS = {
    Strategy.OCCURRENCE_COST: _occurrence_cost,
    Strategy.EMULATION_PROFIT: _emulation_profit,
    Strategy.OCCURRENCE_COUNT: _occurrence_count,
    Strategy.PATTERN_SIZE: _pattern_size,
    Strategy.PROFIT: _profit,
    Strategy.PROFIT_STATE: _profit_state,
    Strategy.PROFIT_STATE_MULTI: _profit_state_multi,
    Strategy.USE_BLOCK_PROFIT: _use_block_profit,
}

_STATE_SCORERS = {
    Strategy.PROFIT_STATE: pattern_profit_state,
    Strategy.PROFIT_STATE_MULTI: pattern_profit_state_multi,
}

StrategyLike = Union[Strategy, str, ScoreFn]


def _resolve(strategy: StrategyLike) -> ScoreFn:
    if callable(strategy) and not isinstance(strategy, str):
        return strategy
    return _SCORERS[Strategy(strategy)]


def score_entry(
    entry: PatternEntry,
    strategy: StrategyLike,
    context: Optional[ScoreContext] = None,
) -> float:
    """
    Score one entry under ``strategy``.

    Empty occurrence collections never raise: occurrence-based scores become
    ``0`` and the pattern-size score falls back to the operation-node count.

    Raises
    ------
    MissingCostMetadataError
        When a side-table strategy finds no metadata for ``entry.code``.
    """
    ctx = context or _DEFAULT_CONTEXT
    return float(_resolve(strategy)(entry, ctx))


def _three_way(x: float, y: float) -> int:
    # NaN sorts above every number and compares equal only to NaN
    x_nan, y_nan = math.isnan(x), math.isnan(y)
    if x_nan or y_nan:
        return x_nan - y_nan
    return (x > y) - (x < y)


def compare_entries(
    a: PatternEntry,
    b: PatternEntry,
    strategy: StrategyLike,
    *,
    ascending: bool = True,
    context: Optional[ScoreContext] = None,
) -> int:
    """
    Three-way comparison of two entries under ``strategy``.

    Returns ``-1``, ``0`` or ``1``. The descending result is exactly the
    negated ascending one. A NaN score ranks above every number.
    """
    ctx = context or _DEFAULT_CONTEXT
    if (
        ctx.state_pairing is StatePairing.SECOND_OPERAND
        and not callable(strategy)
        and Strategy(strategy) in _STATE_SCORERS
    ):
        fn = _STATE_SCORERS[Strategy(strategy)]
        sa = fn(a.code, b.occurrences, ctx.cost_model)
        sb = fn(a.code, b.occurrences, ctx.cost_model)
    else:
        score = _resolve(strategy)
        sa = score(a, ctx)
        sb = score(b, ctx)
    result = _three_way(sa, sb)
    return result if ascending else -result


def entry_comparator(
    strategy: StrategyLike,
    *,
    ascending: bool = True,
    context: Optional[ScoreContext] = None,
) -> Callable[[PatternEntry, PatternEntry], int]:
    """
    Return a two-argument comparator for use with :func:`functools.cmp_to_key`.

    >>> import functools
    >>> cmp = entry_comparator("occurrence_count", ascending=False)
    >>> key = functools.cmp_to_key(cmp)
    """
    if not callable(strategy):
        strategy = Strategy(strategy)

    def compare(a: PatternEntry, b: PatternEntry) -> int:
        return compare_entries(a, b, strategy, ascending=ascending, context=context)

    return compare


def rank_entries(
    entries: Iterable[PatternEntry],
    strategy: StrategyLike,
    *,
    ascending: bool = True,
    context: Optional[ScoreContext] = None,
    validate: bool = False,
) -> List[PatternEntry]:
    """
    Sort entries by ``strategy`` and return a new list.

    The sort is stable, so entries comparing equal keep their input order.

    Parameters
    ----------
    entries : iterable of PatternEntry
    strategy : Strategy, str or callable
        A :class:`Strategy`, its name, or ``fn(entry, context) -> float``.
    ascending : bool, default=True
        ``False`` puts the highest score first.
    context : ScoreContext, optional
        Side tables and cost model.
    validate : bool, default=False
        Check every entry with :func:`~acminer.evaluation.validate_occurrences`
        before sorting.

    Raises
    ------
    MissingCostMetadataError
        Propagated from side-table strategies.
    MalformedOccurrenceError
        When ``validate`` finds an occurrence that does not fit its pattern.
    """
    items = list(entries)
    if validate:
        for e in items:
            validate_occurrences(e.code, e.occurrences)
    cmp = entry_comparator(strategy, ascending=ascending, context=context)
    return sorted(items, key=cmp_to_key(cmp))


def select_best(
    patterns: Union[PatternsLike, Iterable[PatternEntry]],
    config: Optional[RankingConfig] = None,
    *,
    emulatable: Optional[Mapping[Any, EmulatableBlock]] = None,
    use_blocks: Optional[Mapping[Any, UseBlock]] = None,
    verbose: bool = False,
) -> List[PatternEntry]:
    """
    Rank mined patterns and keep the ``config.x_best`` best.

    Parameters
    ----------
    patterns : mapping, pairs or entries
        ``code -> occurrences`` mapping, ``(code, occurrences)`` pairs, or
        ready-made :class:`PatternEntry` objects.
    config : RankingConfig, optional
        Defaults to descending profit over all entries.
    emulatable, use_blocks : mapping, optional
        Side tables for the emulation and use-block strategies.
    verbose : bool, default=False
        Log the pass and the head of the ranking to the console.

    Returns
    -------
    list of PatternEntry
        Best first (under the configured direction).
    """
    cfg = config or RankingConfig()
    if isinstance(patterns, Mapping):
        entries = entries_from_mapping(patterns)
    else:
        entries = [
            p if isinstance(p, PatternEntry) else PatternEntry(*p)
            for p in patterns
        ]
    context = ScoreContext(
        emulatable=emulatable,
        use_blocks=use_blocks,
        cost_model=cfg.cost_model,
        state_pairing=cfg.state_pairing,
    )
    ranked = rank_entries(
        entries,
        cfg.strategy,
        ascending=cfg.ascending,
        context=context,
        validate=cfg.validate,
    )
    if cfg.x_best is not None:
        ranked = ranked[:cfg.x_best]

    if verbose:
        order = "ascending" if cfg.ascending else "descending"
        log_event(f"ranked {len(entries)} patterns by {cfg.strategy} ({order}), kept {len(ranked)}")
        if ranked:
            best = ranked[0]
            log_event(f"best: {best.code.pretty()} score={score_entry(best, cfg.strategy, context):.3f}")
    return ranked
