import itertools

import numpy as np
import pytest

import acminer.ranking as ranking_mod
from acminer.blocks import EmulatableBlock, UseBlock
from acminer.config import RankingConfig
from acminer.entries import PatternEntry
from acminer.errors import MissingCostMetadataError, MalformedOccurrenceError
from acminer.ranking import (
    Strategy, StatePairing, ScoreContext, score_entry, compare_entries, entry_comparator,
    rank_entries, select_best,
)
from acminer.states import StateSingleOutput, StateMultiOutput


@pytest.fixture
def blocks(sum2, prod_of_sum):
    return {
        sum2: EmulatableBlock(sum2, active_sum_count=1, inactive_mult_count=1, active_input_count=2),
        prod_of_sum: EmulatableBlock(
            prod_of_sum, active_sum_count=1, active_mult_count=1, active_input_count=3
        ),
    }


@pytest.fixture
def state_entries(sum2, prod_of_sum):
    covered = StateSingleOutput(root=1, vertices=(1, 2))
    return [
        PatternEntry(prod_of_sum, [covered, covered]),
        PatternEntry(prod_of_sum, [covered]),
        PatternEntry(sum2, [StateSingleOutput(root=3, vertices=(3,))]),
    ]


def _positions(ranked, entries):
    return [next(i for i, e in enumerate(entries) if e is r) for r in ranked]


# ───────────────────────────── Strategies ─────────────────────────────────── #

def test_occurrence_count_ascending(entries):
    ranked = rank_entries(entries, Strategy.OCCURRENCE_COUNT)
    assert [e.size for e in ranked] == [0, 1, 3, 5]


def test_occurrence_count_scenario(sum2):
    es = [PatternEntry(sum2, [(i,) for i in range(n)]) for n in (3, 1, 7)]
    assert [e.size for e in rank_entries(es, "occurrence_count")] == [1, 3, 7]


def test_occurrence_cost_uses_cost_function(monkeypatch, sum2, prod_of_sum):
    # A costs 10, B costs 2: ascending puts B first
    fake = {sum2: 10.0, prod_of_sum: 2.0}
    monkeypatch.setattr(ranking_mod, "pattern_occurrence_cost", lambda code, n, model: fake[code])
    a = PatternEntry(sum2, [(1,)])
    b = PatternEntry(prod_of_sum, [(2, 3)])
    assert rank_entries([a, b], Strategy.OCCURRENCE_COST) == [b, a]
    assert rank_entries([a, b], Strategy.OCCURRENCE_COST, ascending=False) == [a, b]


def test_occurrence_cost_real_values(entries):
    scores = [score_entry(e, "occurrence_cost") for e in entries]
    assert scores == pytest.approx([3 * 232.9, 468.9, 0.0, 5 * 468.9])


def test_profit_descending(entries):
    ranked = rank_entries(entries, Strategy.PROFIT, ascending=False)
    # 880, 176, then the two zero-profit sums in input order
    assert _positions(ranked, entries) == [3, 1, 0, 2]


def test_profit_scenario(sum2, prod_of_sum):
    y = PatternEntry(sum2, [(i,) for i in range(100)])
    x = PatternEntry(prod_of_sum, [(1, 2), (3, 4), (5, 6), (7, 8)])
    assert score_entry(x, "profit") == pytest.approx(704.0)
    assert score_entry(y, "profit") == pytest.approx(0.0)
    assert rank_entries([y, x], Strategy.PROFIT, ascending=False)[0] is x


def test_pattern_size_falls_back_to_operation_nodes(entries, sum2):
    assert score_entry(PatternEntry(sum2), Strategy.PATTERN_SIZE) == 1.0
    ranked = rank_entries(entries, Strategy.PATTERN_SIZE)
    assert _positions(ranked, entries) == [0, 2, 1, 3]


def test_emulation_profit(entries, blocks):
    ctx = ScoreContext(emulatable=blocks)
    scores = [score_entry(e, Strategy.EMULATION_PROFIT, ctx) for e in entries]
    assert scores == pytest.approx([-1.2, 176.0, 0.0, 880.0])
    ranked = rank_entries(entries, Strategy.EMULATION_PROFIT, context=ctx)
    assert _positions(ranked, entries) == [0, 2, 1, 3]


def test_emulation_profit_table_keys_compare_by_content(sum2, blocks):
    raw = {tuple(k): v for k, v in blocks.items()}
    ctx = ScoreContext(emulatable=raw)
    assert score_entry(PatternEntry(sum2, [(1,)]), "emulation_profit", ctx) == pytest.approx(-0.4)


def test_use_block_profit(entries, sum2, prod_of_sum):
    table = {sum2: UseBlock(sum2, profit=5.0), prod_of_sum: UseBlock(prod_of_sum, profit=2.5)}
    ctx = ScoreContext(use_blocks=table)
    assert score_entry(entries[1], Strategy.USE_BLOCK_PROFIT, ctx) == 2.5
    ranked = rank_entries(entries, Strategy.USE_BLOCK_PROFIT, ascending=False, context=ctx)
    assert _positions(ranked, entries) == [0, 2, 1, 3]


def test_missing_side_table_raises(entries, sum2, blocks):
    with pytest.raises(MissingCostMetadataError, match="no 'emulatable' side table"):
        rank_entries(entries, Strategy.EMULATION_PROFIT)
    with pytest.raises(MissingCostMetadataError) as info:
        rank_entries(entries, Strategy.EMULATION_PROFIT, context=ScoreContext(emulatable={sum2: blocks[sum2]}))
    assert info.value.table == "emulatable"
    assert info.value.code == entries[1].code
    # still a KeyError for callers that only know about mappings
    with pytest.raises(KeyError):
        score_entry(entries[0], Strategy.USE_BLOCK_PROFIT, ScoreContext(use_blocks={}))


def test_profit_state_own_pairing(state_entries):
    ranked = rank_entries(state_entries, Strategy.PROFIT_STATE)
    assert _positions(ranked, state_entries) == [2, 1, 0]
    assert score_entry(state_entries[0], "profit_state") == pytest.approx(352.0)


def test_profit_state_second_operand_keeps_input_order(state_entries):
    ctx = ScoreContext(state_pairing=StatePairing.SECOND_OPERAND)
    for a, b in itertools.product(state_entries, repeat=2):
        assert compare_entries(a, b, Strategy.PROFIT_STATE, context=ctx) == 0
    for ascending in (True, False):
        ranked = rank_entries(state_entries, Strategy.PROFIT_STATE, ascending=ascending, context=ctx)
        assert _positions(ranked, state_entries) == [0, 1, 2]


def test_second_operand_pairing_only_affects_state_strategies(entries):
    ctx = ScoreContext(state_pairing="second_operand")
    assert ctx.state_pairing is StatePairing.SECOND_OPERAND
    assert compare_entries(entries[0], entries[1], Strategy.OCCURRENCE_COUNT, context=ctx) == 1


def test_profit_state_multi(two_output):
    one = PatternEntry(two_output, [StateMultiOutput((1, 2), (1, 2))])
    three = PatternEntry(two_output, [StateMultiOutput((i, i + 1), (i,)) for i in range(3)])
    empty = PatternEntry(two_output, [])
    ranked = rank_entries([one, empty, three], Strategy.PROFIT_STATE_MULTI, ascending=False)
    assert ranked == [three, one, empty]
    assert score_entry(empty, Strategy.PROFIT_STATE_MULTI) == 0.0


@pytest.mark.parametrize("strategy", [Strategy.PROFIT_STATE, Strategy.PROFIT_STATE_MULTI])
def test_state_strategies_on_empty_entries(strategy, sum2, prod_of_sum):
    es = [PatternEntry(sum2), PatternEntry(prod_of_sum)]
    assert [score_entry(e, strategy) for e in es] == [0.0, 0.0]
    assert rank_entries(es, strategy) == es


def test_custom_and_named_strategies(entries):
    by_name = rank_entries(entries, "occurrence_count", ascending=False)
    assert by_name == rank_entries(entries, Strategy.OCCURRENCE_COUNT, ascending=False)
    custom = rank_entries(entries, lambda e, ctx: -e.size)
    assert [e.size for e in custom] == [5, 3, 1, 0]
    with pytest.raises(ValueError):
        rank_entries(entries, "largest_first")


def test_validate_rejects_malformed_occurrences(prod_of_sum):
    bad = [PatternEntry(prod_of_sum, [(1, 2), (3, 4, 5)])]
    assert rank_entries(bad, Strategy.PROFIT) == bad
    with pytest.raises(MalformedOccurrenceError):
        rank_entries(bad, Strategy.PROFIT, validate=True)


def test_rank_entries_returns_new_list(entries):
    before = list(entries)
    ranked = rank_entries(entries, Strategy.PROFIT, ascending=False)
    assert ranked is not entries
    assert entries == before


# ───────────────────────────── Ordering properties ────────────────────────── #

@pytest.fixture(params=[StatePairing.OWN, StatePairing.SECOND_OPERAND], ids=lambda p: p.value)
def full_context(request, sum2, prod_of_sum, blocks):
    use_blocks = {sum2: UseBlock(sum2, profit=3.0), prod_of_sum: UseBlock(prod_of_sum, profit=-1.5)}
    return ScoreContext(emulatable=blocks, use_blocks=use_blocks, state_pairing=request.param)


@pytest.fixture
def mixed_entries(entries, state_entries, prod_of_sum):
    dangling = StateSingleOutput(root=7, vertices=(7, 8), inter_node=8)
    return entries + state_entries + [PatternEntry(prod_of_sum, [dangling])]


@pytest.mark.parametrize("strategy", list(Strategy))
def test_descending_is_negated_ascending(mixed_entries, full_context, strategy):
    for a, b in itertools.product(mixed_entries, repeat=2):
        up = compare_entries(a, b, strategy, context=full_context)
        down = compare_entries(a, b, strategy, ascending=False, context=full_context)
        assert down == -up
        assert up in (-1, 0, 1)


@pytest.mark.parametrize("strategy", list(Strategy))
def test_strict_weak_ordering(mixed_entries, full_context, strategy):
    cmp = entry_comparator(strategy, context=full_context)
    for a in mixed_entries:
        assert cmp(a, a) == 0
    for a, b in itertools.product(mixed_entries, repeat=2):
        assert cmp(a, b) == -cmp(b, a)
    for a, b, c in itertools.product(mixed_entries, repeat=3):
        if cmp(a, b) <= 0 and cmp(b, c) <= 0:
            assert cmp(a, c) <= 0


@pytest.mark.parametrize("strategy", list(Strategy))
def test_ranking_is_deterministic(mixed_entries, full_context, strategy):
    first = rank_entries(mixed_entries, strategy, ascending=False, context=full_context)
    assert rank_entries(mixed_entries, strategy, ascending=False, context=full_context) == first
    cmp = entry_comparator(strategy, context=full_context)
    forward = rank_entries(mixed_entries, strategy, context=full_context)
    backward = rank_entries(list(reversed(mixed_entries)), strategy, context=full_context)
    # same order up to ties
    assert all(cmp(x, y) == 0 for x, y in zip(forward, backward))


@pytest.fixture
def nan_entries(sum2, prod_of_sum, two_output):
    codes = [sum2, prod_of_sum, two_output]
    table = {c: UseBlock(c, profit=p) for c, p in zip(codes, [1.0, float("nan"), 0.0])}
    return [PatternEntry(c) for c in codes], ScoreContext(use_blocks=table)


def test_nan_score_sorts_above_every_number(nan_entries):
    es, ctx = nan_entries
    cmp = entry_comparator(Strategy.USE_BLOCK_PROFIT, context=ctx)
    assert cmp(es[1], es[1]) == 0
    assert cmp(es[0], es[1]) == -1
    assert cmp(es[1], es[2]) == 1
    for a, b, c in itertools.product(es, repeat=3):
        if cmp(a, b) <= 0 and cmp(b, c) <= 0:
            assert cmp(a, c) <= 0


def test_nan_score_ranks_consistently(nan_entries):
    es, ctx = nan_entries
    expected = [es[2], es[0], es[1]]
    assert rank_entries(es, Strategy.USE_BLOCK_PROFIT, context=ctx) == expected
    assert rank_entries(es[::-1], Strategy.USE_BLOCK_PROFIT, context=ctx) == expected
    descending = rank_entries(es, Strategy.USE_BLOCK_PROFIT, ascending=False, context=ctx)
    assert descending == expected[::-1]


# ───────────────────────────── select_best ────────────────────────────────── #

def test_select_best_from_mapping(sum2, prod_of_sum):
    patterns = {sum2: [(1,), (2,)], prod_of_sum: [(3, 4), (5, 6)]}
    ranked = select_best(patterns)
    assert [e.code for e in ranked] == [prod_of_sum, sum2]
    assert len(select_best(patterns, RankingConfig(x_best=1))) == 1


def test_select_best_accepts_array_pairs(sum2, prod_of_sum):
    pairs = [
        (np.array(list(sum2), dtype=np.uint64), [(1,)]),
        (np.array(list(prod_of_sum), dtype=np.uint64), [(2, 3)]),
    ]
    cfg = RankingConfig(strategy="occurrence_cost", ascending=True)
    ranked = select_best(pairs, cfg)
    assert [e.code for e in ranked] == [sum2, prod_of_sum]


def test_select_best_validates_by_default(prod_of_sum):
    with pytest.raises(MalformedOccurrenceError):
        select_best({prod_of_sum: [(1, 2, 3)]})
    cfg = RankingConfig(validate=False)
    assert select_best({prod_of_sum: [(1, 2, 3)]}, cfg)[0].size == 1


def test_select_best_passes_side_tables(entries, blocks):
    cfg = RankingConfig(strategy="emulation_profit", x_best=2)
    ranked = select_best(entries, cfg, emulatable=blocks)
    assert [e.size for e in ranked] == [5, 1]
    with pytest.raises(MissingCostMetadataError):
        select_best(entries, cfg)


def test_select_best_state_pairing(state_entries):
    cfg = RankingConfig(strategy="profit_state", state_pairing="second_operand")
    assert select_best(state_entries, cfg) == state_entries


def test_select_best_verbose_logs(monkeypatch, entries):
    lines = []
    monkeypatch.setattr(ranking_mod, "log_event", lines.append)
    select_best(entries, RankingConfig(x_best=2), verbose=True)
    assert lines[0] == "ranked 4 patterns by profit (descending), kept 2"
    assert lines[1].startswith("best: (0,1)(0,2)*o(1,3)(1,4)+ score=880.000")
