# src/acminer/blocks.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .codes import PatternCode, as_code, print_code
from .config import CostModel, DEFAULT_COST_MODEL
from .evaluation import emulation_profit, pattern_profit_count

__all__ = ["EmulatableBlock", "UseBlock"]


@dataclass(frozen=True)
class EmulatableBlock:
    """
    How a hardware block P emulates another pattern.

    Only the emulation is described; P itself is not stored.

    Parameters
    ----------
    emulated_code : PatternCode
        Code of the pattern being emulated.
    input : tuple of int
        Inputs fed to P, each in ``{0, 1, 2}`` where ``2`` is an actual value.
    emulated_index_to_actual_input_index : tuple of int
        ``[i]`` is the position in ``input`` that receives the i-th input of the
        emulated pattern.
    options : tuple of int
        Per-node evaluation options of P under ``input`` (``2`` = active value,
        ``3`` = meaningless value).
    active_mult_count, active_sum_count : int
        Operations of P doing useful work.
    inactive_mult_count, inactive_sum_count : int
        Operations of P that are idle during the emulation.
    active_input_count : int
        Inputs that matter. Can be lower than the number of ``2`` values in
        ``input`` when an input is multiplied by zero.
    """

    emulated_code: PatternCode
    input: Tuple[int, ...] = ()
    emulated_index_to_actual_input_index: Tuple[int, ...] = ()
    options: Tuple[int, ...] = ()
    active_mult_count: int = 0
    active_sum_count: int = 0
    inactive_mult_count: int = 0
    inactive_sum_count: int = 0
    active_input_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, "emulated_code", as_code(self.emulated_code))
        for name in ("input", "emulated_index_to_actual_input_index", "options"):
            object.__setattr__(self, name, tuple(int(v) for v in getattr(self, name)))
        for name in (
            "active_mult_count",
            "active_sum_count",
            "inactive_mult_count",
            "inactive_sum_count",
            "active_input_count",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be ≥ 0")

    def __str__(self) -> str:
        return "\n".join([
            f"Emulated: {print_code(self.emulated_code)}",
            f"With input: {list(self.input)}",
            f"Options: {list(self.options)}",
            f"activeMultCount: {self.active_mult_count}",
            f"activeSumCount: {self.active_sum_count}",
            f"inactiveMultCount: {self.inactive_mult_count}",
            f"inactiveSumCount: {self.inactive_sum_count}",
            f"activeInputCount: {self.active_input_count}",
        ])


@dataclass
class UseBlock:
    """
    A decided use of hardware block ``pattern_p``.

    ``occurrences[0]`` holds the occurrences of ``pattern_p`` itself and
    ``occurrences[i + 1]`` the non-conflicting occurrences of ``patterns[i]``
    that will be replaced by an emulating call of ``pattern_p``.

    Fill the fields, then call :meth:`calculate_profit`. Ranking reads
    ``profit`` as-is and never recomputes it.
    """

    pattern_p: PatternCode
    patterns: Tuple[EmulatableBlock, ...] = ()
    occurrences: List[Sequence] = field(default_factory=list)
    profit: float = 0.0

    def __post_init__(self):
        self.pattern_p = as_code(self.pattern_p)
        self.patterns = tuple(self.patterns)

    def calculate_profit(self, model: CostModel = DEFAULT_COST_MODEL) -> float:
        """
        Set and return :attr:`profit`.

        Every emulated pattern in :attr:`patterns` is assumed to be worth
        replacing; leave out the ones that are not.
        """
        if len(self.occurrences) != len(self.patterns) + 1:
            raise ValueError(
                f"expected {len(self.patterns) + 1} occurrence lists, got {len(self.occurrences)}"
            )
        total = pattern_profit_count(self.pattern_p, len(self.occurrences[0]), model)
        for block, occs in zip(self.patterns, self.occurrences[1:]):
            total += emulation_profit(block.emulated_code, block, len(occs), model)
        self.profit = float(total)
        return self.profit
