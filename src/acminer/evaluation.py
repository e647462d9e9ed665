# src/acminer/evaluation.py

from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, Sequence

from .codes import as_code, input_node_count, operation_counts, operation_node_count
from .config import CostModel, DEFAULT_COST_MODEL
from .errors import MalformedOccurrenceError
from .states import state_vertices

if TYPE_CHECKING:
    from .blocks import EmulatableBlock

"""
Cost and profit formulas for arithmetic-circuit patterns.

Two ways to evaluate a pattern are compared throughout:

- **naive**: every operation node is its own instruction on the primitive
  ``+``/``*`` hardware (:func:`pattern_occurrence_cost`);
- **specialised**: the whole pattern is one call of a dedicated hardware block
  (:func:`dedicated_block_cost`), or of an existing block that emulates it
  (:func:`pattern_block_cost`).

The profit of a pattern is the naive cost minus the specialised cost, times
the number of occurrences being replaced. Profit can be negative.

All functions are pure. Costs are real-valued and scale linearly with the
occurrence count, so they are non-decreasing in it.

Examples
--------
>>> from acminer.codes import string_to_code
>>> from acminer.evaluation import pattern_occurrence_cost, pattern_profit_count
>>> code = string_to_code("(0,1)(0,2)*(1,3)(1,4)+")
>>> round(pattern_occurrence_cost(code, 1), 6)
468.9
>>> round(pattern_profit_count(code, 4), 6)
704.0
"""

__all__ = [
    "pattern_occurrence_cost",
    "dedicated_block_cost",
    "pattern_block_cost",
    "emulation_profit",
    "profit_per_occurrence",
    "pattern_profit_count",
    "pattern_profit",
    "pattern_profit_state",
    "pattern_profit_state_multi",
    "operation_node_count",
    "validate_occurrences",
]


def _check_count(n: int) -> int:
    if isinstance(n, bool):
        raise MalformedOccurrenceError(f"occurrence count must be an integer, got {n!r}")
    try:
        count = int(n)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedOccurrenceError(f"occurrence count must be an integer, got {n!r}") from e
    if count != n:
        raise MalformedOccurrenceError(f"occurrence count must be an integer, got {n!r}")
    if count < 0:
        raise MalformedOccurrenceError(f"occurrence count must be ≥ 0, got {count}")
    return count


def pattern_occurrence_cost(
    code: Iterable[int],
    n: int,
    model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """
    Cost of evaluating ``n`` occurrences with primitive ``+``/``*`` only.

    Per occurrence:

    - instructions: ``instruction_cost_base`` per operation and
      ``instruction_cost_extra`` per incoming edge;
    - outputs: ``io_cost`` per operation (each operation writes one value);
    - inputs: ``io_cost`` per incoming edge;
    - operations: ``sum_cost`` per sum, ``multiplication_cost`` per product.

    Parameters
    ----------
    code : sequence of int
        Canonical pattern code. Only sum/product labels are expected.
    n : int
        Number of occurrences (``≥ 0``).
    model : CostModel, optional

    Returns
    -------
    float
        ``0.0`` when ``n == 0``.
    """
    n = _check_count(n)
    if n == 0:
        return 0.0
    code = as_code(code)
    sums, products, _ = operation_counts(code)
    ops = sums + products
    edges = len(code) - ops

    instruction_and_output = (model.instruction_cost_base + model.io_cost) * ops
    instruction_and_output += model.instruction_cost_extra * edges
    operations = model.sum_cost * sums + model.multiplication_cost * products
    inputs = model.io_cost * edges
    return float((operations + instruction_and_output + inputs) * n)


def dedicated_block_cost(
    code: Iterable[int],
    n: int,
    model: CostModel = DEFAULT_COST_MODEL,
    *,
    multi_output: bool = False,
) -> float:
    """
    Cost of evaluating ``n`` occurrences as calls of one block built for ``code``.

    One instruction per call, one input port per input node and one output
    port per outputting operation. A single-output block always pays for
    exactly one output port; with ``multi_output=True`` the output labels of
    the code are counted instead.
    """
    n = _check_count(n)
    if n == 0:
        return 0.0
    code = as_code(code)
    sums, products, outputs = operation_counts(code)
    if not multi_output:
        outputs = 1
    inputs = input_node_count(code)

    instruction_and_output = (
        model.instruction_cost_base
        + model.io_cost * outputs
        + model.instruction_cost_extra * inputs
    )
    operations = model.sum_cost * sums + model.multiplication_cost * products
    input_cost = model.io_cost * inputs
    return float((operations + instruction_and_output + input_cost) * n)


def pattern_block_cost(
    block: "EmulatableBlock",
    n: int,
    model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """
    Cost of evaluating ``n`` occurrences by reusing an emulating block.

    Only the active inputs are paid for, and idle (inactive) operations inside
    the emulating block still cost their reduced ``*_inactive`` amount.

    Parameters
    ----------
    block : EmulatableBlock
        Emulation metadata: active/inactive operation counts and the number of
        active inputs.
    n : int
        Number of occurrences of ``block.emulated_code``.
    model : CostModel, optional
    """
    n = _check_count(n)
    operations = (
        model.sum_cost * block.active_sum_count
        + model.multiplication_cost * block.active_mult_count
    )
    inactive_operations = (
        model.sum_cost_inactive * block.inactive_sum_count
        + model.multiplication_cost_inactive * block.inactive_mult_count
    )
    instruction_and_output = (
        model.instruction_cost_base
        + model.instruction_cost_extra * block.active_input_count
        + model.io_cost
    )
    inputs = model.io_cost * block.active_input_count
    return float((operations + inactive_operations + instruction_and_output + inputs) * n)


def emulation_profit(
    code: Iterable[int],
    block: "EmulatableBlock",
    n: int,
    model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """Savings of realising ``n`` occurrences of ``code`` through an emulating block."""
    n = _check_count(n)
    per_occurrence = pattern_occurrence_cost(code, 1, model) - pattern_block_cost(block, 1, model)
    return float(per_occurrence * n)


def profit_per_occurrence(
    code: Iterable[int],
    model: CostModel = DEFAULT_COST_MODEL,
    *,
    multi_output: bool = False,
) -> float:
    return pattern_occurrence_cost(code, 1, model) - dedicated_block_cost(
        code, 1, model, multi_output=multi_output
    )


def pattern_profit_count(
    code: Iterable[int],
    n: int,
    model: CostModel = DEFAULT_COST_MODEL,
    *,
    multi_output: bool = False,
) -> float:
    """Profit of replacing ``n`` occurrences by a dedicated block (0 when ``n == 0``)."""
    n = _check_count(n)
    if n == 0:
        return 0.0
    return float(profit_per_occurrence(code, model, multi_output=multi_output) * n)


def pattern_profit(
    code: Iterable[int],
    occurrences: Sequence,
    model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """
    Net savings of a dedicated single-output block used for every occurrence.

    Returns
    -------
    float
        ``(naive cost - block cost) * len(occurrences)``; ``0.0`` for an empty
        collection. Negative when specialisation does not pay off.
    """
    if not occurrences:
        return 0.0
    return pattern_profit_count(code, len(occurrences), model)


def pattern_profit_state(
    code: Iterable[int],
    states: Sequence,
    model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """
    Wiring-aware profit over single-output state descriptors.

    Only fully covered states (no pending ``inter_node``) can be replaced by a
    single-output block, so only those contribute. An empty collection has
    profit ``0.0``.
    """
    if not states:
        return 0.0
    replaceable = sum(1 for s in states if getattr(s, "inter_node", None) is None)
    return pattern_profit_count(code, replaceable, model)


def pattern_profit_state_multi(
    code: Iterable[int],
    states: Sequence,
    model: CostModel = DEFAULT_COST_MODEL,
) -> float:
    """
    Profit over multi-output state descriptors.

    The dedicated block pays one output port per outputting operation of the
    pattern. An empty collection has profit ``0.0``.
    """
    if not states:
        return 0.0
    return pattern_profit_count(code, len(states), model, multi_output=True)


def validate_occurrences(code: Iterable[int], occurrences: Iterable) -> None:
    """
    Check that every occurrence maps exactly the pattern's operation nodes.

    Accepts plain vertex sequences or state descriptors (their ``vertices``).

    Raises
    ------
    MalformedOccurrenceError
        On the first occurrence whose length differs from
        ``operation_node_count(code)``.
    """
    code = as_code(code)
    expected = operation_node_count(code)
    for i, occ in enumerate(occurrences):
        got = len(state_vertices(occ))
        if got != expected:
            raise MalformedOccurrenceError(
                f"occurrence {i} of {code!r} has {got} vertices, expected {expected}"
            )
