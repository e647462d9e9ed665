# scripts/demo_ranking.py
from __future__ import annotations

from acminer import (
    EmulatableBlock,
    PatternEntry,
    RankingConfig,
    ScoreContext,
    Strategy,
    print_ranking,
    rank_entries,
    remove_overlap,
    select_best,
    string_to_code,
)

def main():

    # 0) A few mined patterns with their occurrences (vertex ids in the circuit)
    sum2 = string_to_code("(0,1)(0,2)+")
    prod_of_sum = string_to_code("(0,1)(0,2)*(1,3)(1,4)+")
    sum3 = string_to_code("(0,1)(0,2)(0,3)+")

    mined = {
        sum2: [(i,) for i in range(40)],
        prod_of_sum: [(100, 101), (101, 102), (103, 104), (105, 106)],
        sum3: [(200,), (201,)],
    }

    # 1) Overlapping occurrences cannot all be replaced
    entries = remove_overlap([PatternEntry(c, o) for c, o in mined.items()])
    for e in entries:
        print(f"{e.code.pretty():28s} {e.size:3d} usable occurrences")

    # 2) Greedy order: highest profit first
    print_ranking(rank_entries(entries, Strategy.PROFIT, ascending=False), Strategy.PROFIT)

    # 3) Pruning order: cheapest patterns first
    print_ranking(rank_entries(entries, Strategy.OCCURRENCE_COST), Strategy.OCCURRENCE_COST)

    # 4) Emulating the plain sum with the product-of-sum block
    blocks = {
        sum2: EmulatableBlock(sum2, active_sum_count=1, inactive_mult_count=1, active_input_count=2),
    }
    ctx = ScoreContext(emulatable=blocks)
    print_ranking(
        rank_entries(entries[:1], Strategy.EMULATION_PROFIT, context=ctx),
        Strategy.EMULATION_PROFIT,
        context=ctx,
    )

    # 5) One-call selection with a config
    best = select_best(mined, RankingConfig(strategy="profit", x_best=2, validate=False), verbose=True)
    print("\nSelected:", [e.code.pretty() for e in best])

if __name__ == "__main__":
    main()
