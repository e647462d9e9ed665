from .codes import PatternCode, string_to_code, print_code, operation_node_count
from .config import CostModel, DEFAULT_COST_MODEL, RankingConfig
from .errors import (
    AcminerError,
    MissingCostMetadataError,
    MalformedOccurrenceError,
    PatternCodeError,
)
from .states import StateSingleOutput, StateMultiOutput
from .evaluation import (
    pattern_occurrence_cost,
    dedicated_block_cost,
    pattern_block_cost,
    emulation_profit,
    pattern_profit,
    pattern_profit_count,
    pattern_profit_state,
    pattern_profit_state_multi,
    validate_occurrences,
)
from .blocks import EmulatableBlock, UseBlock
from .entries import PatternEntry, entries_from_mapping
from .ranking import (
    Strategy,
    StatePairing,
    ScoreContext,
    score_entry,
    compare_entries,
    entry_comparator,
    rank_entries,
    select_best,
)
from .overlap import involved_nodes, remove_overlap
from .reporting import ranking_frame, print_ranking

__all__ = [
    "PatternCode",
    "string_to_code",
    "print_code",
    "operation_node_count",
    "CostModel",
    "DEFAULT_COST_MODEL",
    "RankingConfig",
    "AcminerError",
    "MissingCostMetadataError",
    "MalformedOccurrenceError",
    "PatternCodeError",
    "StateSingleOutput",
    "StateMultiOutput",
    "pattern_occurrence_cost",
    "dedicated_block_cost",
    "pattern_block_cost",
    "emulation_profit",
    "pattern_profit",
    "pattern_profit_count",
    "pattern_profit_state",
    "pattern_profit_state_multi",
    "validate_occurrences",
    "EmulatableBlock",
    "UseBlock",
    "PatternEntry",
    "entries_from_mapping",
    "Strategy",
    "StatePairing",
    "ScoreContext",
    "score_entry",
    "compare_entries",
    "entry_comparator",
    "rank_entries",
    "select_best",
    "involved_nodes",
    "remove_overlap",
    "ranking_frame",
    "print_ranking",
]
