# src/acminer/config.py

from __future__ import annotations
import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

"""
Configuration objects for cost evaluation and ranking.

:class:`CostModel` holds the energy constants used by every cost and profit
function; :class:`RankingConfig` bundles the knobs of a ranking pass
(strategy, direction, truncation). Both are frozen dataclasses: treat them as
immutable snapshots you pass into the evaluation and ranking functions.

Examples
--------
>>> from acminer.config import CostModel, RankingConfig
>>> CostModel().io_cost
50
>>> cfg = RankingConfig(strategy="profit", x_best=5)
>>> cfg.ascending
False
"""

__all__ = [
    "CostModel",
    "DEFAULT_COST_MODEL",
    "RankingConfig",
    "Strategy",
    "StatePairing",
    "STRATEGY_NAMES",
    "STATE_PAIRING_NAMES",
]


class Strategy(str, Enum):
    """Scoring models an entry can be ranked by."""

    OCCURRENCE_COST = "occurrence_cost"
    EMULATION_PROFIT = "emulation_profit"
    OCCURRENCE_COUNT = "occurrence_count"
    PATTERN_SIZE = "pattern_size"
    PROFIT = "profit"
    PROFIT_STATE = "profit_state"
    PROFIT_STATE_MULTI = "profit_state_multi"
    USE_BLOCK_PROFIT = "use_block_profit"


class StatePairing(str, Enum):
    """
    Which code and state collection the output-state strategies combine.

    - ``OWN``: each entry is scored from its own code and its own states.
    - ``SECOND_OPERAND``: both entries are scored from the first entry's code
      and the second entry's states. Both scores are then identical, so every
      pair compares equal and a stable sort keeps the input order.
    """

    OWN = "own"
    SECOND_OPERAND = "second_operand"


STRATEGY_NAMES = tuple(s.value for s in Strategy)
STATE_PAIRING_NAMES = tuple(p.value for p in StatePairing)


@dataclass(frozen=True)
class CostModel:
    """
    Energy cost constants of the target hardware.

    Parameters
    ----------
    instruction_cost_base : float, default=70
        Base cost of one instruction (one node, or one call of a hardware block).
    instruction_cost_extra : float, default=6
        Extra instruction cost per active input.
    io_cost : float, default=50
        Cost of one input or output port.
    sum_cost : float, default=0.9
        Cost of an active sum operation.
    sum_cost_inactive : float, default=0.09
        Cost of a sum operation that is idle during an emulation.
    multiplication_cost : float, default=4
        Cost of an active multiplication.
    multiplication_cost_inactive : float, default=0.4
        Cost of a multiplication that is idle during an emulation.

    Notes
    -----
    - All constants must be finite and non-negative. This keeps
      ``pattern_occurrence_cost(code, n)`` non-decreasing in ``n``.
    - The operation costs do not depend on arity: a 3-input sum costs the
      same as a 2-input one.
    """

    instruction_cost_base: float = 70
    instruction_cost_extra: float = 6
    io_cost: float = 50
    sum_cost: float = 0.9
    sum_cost_inactive: float = 0.09
    multiplication_cost: float = 4
    multiplication_cost_inactive: float = 0.4

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value!r}")
            if value < 0:
                raise ValueError(f"{f.name} must be ≥ 0")


DEFAULT_COST_MODEL = CostModel()


@dataclass(frozen=True)
class RankingConfig:
    """
    Knobs of one ranking pass, used by :func:`acminer.ranking.select_best`.

    Parameters
    ----------
    strategy : str, default="profit"
        One of ``STRATEGY_NAMES``.
    ascending : bool, default=False
        ``False`` puts the highest score first (greedy replacement order);
        ``True`` puts the lowest first (useful for pruning).
    x_best : int or None, default=None
        Keep only the first ``x_best`` entries of the ranking. ``None`` keeps all.
    state_pairing : {"own", "second_operand"}, default="own"
        How the output-state profit strategies pair codes with state
        collections. See :class:`acminer.ranking.StatePairing`.
    validate : bool, default=True
        Check every occurrence against its pattern before sorting.
    cost_model : CostModel, default=DEFAULT_COST_MODEL
    """

    strategy: str = "profit"
    ascending: bool = False
    x_best: Optional[int] = None
    state_pairing: str = "own"
    validate: bool = True
    cost_model: CostModel = DEFAULT_COST_MODEL

    def __post_init__(self):
        if self.strategy not in STRATEGY_NAMES:
            raise ValueError(f"unknown strategy {self.strategy!r}; expected one of {STRATEGY_NAMES}")
        if self.state_pairing not in STATE_PAIRING_NAMES:
            raise ValueError(f"unknown state_pairing {self.state_pairing!r}")
        if self.x_best is not None and self.x_best < 1:
            raise ValueError("x_best must be ≥ 1")
