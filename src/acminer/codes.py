# src/acminer/codes.py

from __future__ import annotations
from typing import Iterable, Tuple

import numpy as np

from .errors import PatternCodeError

"""
Canonical pattern codes and the structural counts derived from them.

A pattern code is a flat sequence of 64-bit integers. Every edge ``(a, b)``
going into internal node ``a`` is stored as ``(a << 32) | b``; once all the
incoming edges of a node are listed, the node's operation label follows,
stored as ``LABEL_BASE - op``. For example the single-output pattern

    (0,1)(0,2)*(1,3)(1,4)+

is a product at node 0 (the output) fed by node 1 and input 2, where node 1 is
a sum of inputs 3 and 4.

Labels are recognised by magnitude: any value ``>= LABEL_BASE - HIGHEST_OP``
is an operation label, everything below it is an edge.

Examples
--------
>>> from acminer.codes import (
...     string_to_code, print_code, operation_node_count, input_node_count,
... )
>>> code = string_to_code("(0,1)(0,2)*(1,3)(1,4)+")
>>> operation_node_count(code), input_node_count(code)
(2, 3)
>>> print_code(code)
'(0,1)(0,2)*o(1,3)(1,4)+'
"""

__all__ = [
    "INPUT",
    "SUM",
    "PRODUCT",
    "MARKER",
    "SUM_OUTPUT",
    "PRODUCT_OUTPUT",
    "HIGHEST_OP",
    "LABEL_BASE",
    "PatternCode",
    "as_code",
    "encode_edge",
    "decode_edge",
    "encode_label",
    "decode_label",
    "is_label",
    "string_to_code",
    "print_code",
    "operation_counts",
    "operation_node_count",
    "operation_node_count_by_chunks",
    "node_count",
    "input_node_count",
    "internal_edge_count",
]

# Operation ids. *_OUTPUT marks an operation with an additional external output.
INPUT = 0
SUM = 1
PRODUCT = 2
MARKER = 3
SUM_OUTPUT = 4
PRODUCT_OUTPUT = 5
HIGHEST_OP = 5

LABEL_BASE = 2**63 - 1
_LABEL_THRESHOLD = LABEL_BASE - HIGHEST_OP
_LOW_MASK = (1 << 32) - 1

_OP_SYMBOLS = {
    SUM: "+",
    PRODUCT: "*",
    SUM_OUTPUT: "+o",
    PRODUCT_OUTPUT: "*o",
    INPUT: "i",
    MARKER: "m",
}


class PatternCode(tuple):
    """
    Immutable canonical pattern code with content-based equality and hashing.

    ``PatternCode`` is a ``tuple`` of Python ints, so two codes built from
    equal sequences (lists, tuples, NumPy arrays) compare equal and hash the
    same. This is what makes it usable as a dictionary key for side tables.
    """

    __slots__ = ()

    def __new__(cls, values: Iterable[int] = ()):
        return super().__new__(cls, (int(v) for v in values))

    @classmethod
    def from_string(cls, text: str, *, multi_output: bool = False) -> "PatternCode":
        return string_to_code(text, multi_output=multi_output)

    def to_array(self) -> np.ndarray:
        return np.asarray(self, dtype=np.int64)

    def pretty(self) -> str:
        return print_code(self)

    def __repr__(self) -> str:
        return f"PatternCode({print_code(self)!r})"


def as_code(code: Iterable[int]) -> PatternCode:
    """Coerce any integer sequence into a :class:`PatternCode` (no copy if already one)."""
    if isinstance(code, PatternCode):
        return code
    return PatternCode(code)


# ───────────────────────────── Encoding helpers ───────────────────────────── #

def encode_edge(left: int, right: int) -> int:
    if left < 0 or right < 0 or left > _LOW_MASK >> 1 or right > _LOW_MASK:
        raise PatternCodeError(f"edge ({left},{right}) does not fit the code format")
    value = (left << 32) | right
    # the top HIGHEST_OP + 1 values are reserved for operation labels
    if value >= _LABEL_THRESHOLD:
        raise PatternCodeError(f"edge ({left},{right}) collides with the operation labels")
    return value


def decode_edge(value: int) -> Tuple[int, int]:
    if is_label(value):
        raise PatternCodeError(f"value {value} is an operation label, not an edge")
    return value >> 32, value & _LOW_MASK


def encode_label(op: int) -> int:
    if not 0 <= op <= HIGHEST_OP:
        raise PatternCodeError(f"unknown operation id {op}")
    return LABEL_BASE - op


def decode_label(value: int) -> int:
    if not is_label(value):
        raise PatternCodeError(f"value {value} is an edge, not an operation label")
    return LABEL_BASE - value


def is_label(value: int) -> bool:
    return value >= _LABEL_THRESHOLD


def _label_mask(code: Iterable[int]) -> np.ndarray:
    # uint64 keeps the comparison exact for values near LABEL_BASE
    arr = np.fromiter((int(v) for v in code), dtype=np.uint64)
    return arr >= np.uint64(_LABEL_THRESHOLD)


def _edges(code: Iterable[int]):
    for v in code:
        if not is_label(v):
            yield v >> 32, v & _LOW_MASK


# ───────────────────────────── Text conversion ───────────────────────────── #

def string_to_code(text: str, *, multi_output: bool = False) -> PatternCode:
    """
    Parse a pattern written as ``(a,b)...op(a,b)...op`` into a code.

    Parameters
    ----------
    text : str
        Pattern string. Only ``+`` and ``*`` operations are accepted.
    multi_output : bool, default=False
        - ``False``: single-output convention. The first operation in the
          string is the outputting one; an ``o`` suffix is not allowed.
        - ``True``: multi-output convention. Outputting operations carry an
          ``o`` suffix (``+o``, ``*o``), every other operation is internal.

    Returns
    -------
    PatternCode

    Raises
    ------
    PatternCodeError
        On an unexpected character, a malformed edge or a misplaced ``o``.
    """
    values = []
    index = 0
    output_seen = False
    n = len(text)

    while index < n:
        ch = text[index]
        if ch == "(":
            comma = text.find(",", index)
            close = text.find(")", index)
            if comma < 0 or close < 0 or not index < comma < close:
                raise PatternCodeError(f"malformed edge at position {index} in {text!r}")
            try:
                left = int(text[index + 1:comma])
                right = int(text[comma + 1:close])
            except ValueError as e:
                raise PatternCodeError(f"malformed edge at position {index} in {text!r}") from e
            values.append(encode_edge(left, right))
            index = close + 1
        elif ch in "*+":
            is_product = ch == "*"
            marked = index + 1 < n and text[index + 1] == "o"
            if multi_output:
                is_output = marked
            else:
                if marked:
                    raise PatternCodeError(
                        f"output marker 'o' at position {index + 1} requires multi_output=True"
                    )
                is_output = not output_seen
                output_seen = True
            if is_output:
                op = PRODUCT_OUTPUT if is_product else SUM_OUTPUT
            else:
                op = PRODUCT if is_product else SUM
            values.append(encode_label(op))
            index += 2 if marked else 1
        else:
            raise PatternCodeError(f"unexpected character {ch!r} in {text!r}")

    return PatternCode(values)


def print_code(code: Iterable[int]) -> str:
    """Render a code in the multi-output text convention (outputs marked with ``o``)."""
    parts = []
    for v in code:
        if is_label(v):
            op = LABEL_BASE - v
            try:
                parts.append(_OP_SYMBOLS[op])
            except KeyError:
                raise PatternCodeError(f"unknown operation label {v}") from None
        else:
            parts.append(f"({v >> 32},{v & _LOW_MASK})")
    return "".join(parts)


# ───────────────────────────── Structural counts ─────────────────────────── #

def operation_counts(code: Iterable[int]) -> Tuple[int, int, int]:
    """
    Count ``(sums, products, outputs)`` among the labels of ``code``.

    ``SUM_OUTPUT`` counts as a sum and an output, ``PRODUCT_OUTPUT`` as a
    product and an output. ``INPUT`` and ``MARKER`` labels are ignored.
    """
    sums = products = outputs = 0
    for v in code:
        if not is_label(v):
            continue
        op = LABEL_BASE - v
        if op == SUM:
            sums += 1
        elif op == PRODUCT:
            products += 1
        elif op == SUM_OUTPUT:
            sums += 1
            outputs += 1
        elif op == PRODUCT_OUTPUT:
            products += 1
            outputs += 1
    return sums, products, outputs


def operation_node_count(code: Iterable[int]) -> int:
    """
    Number of internal (operation) nodes, counted as the number of labels.

    Used as the structural-size fallback when no occurrence is available.
    ``INPUT``/``MARKER`` labels are assumed absent; if present they count.
    """
    return int(_label_mask(code).sum())


def operation_node_count_by_chunks(code: Iterable[int]) -> int:
    """
    Number of internal nodes, counted as distinct edge sources.

    Assumes node 0 is internal and edges are grouped by source, as canonical
    codes are. Agrees with :func:`operation_node_count` on well-formed codes.
    """
    count = 1
    prev = 0
    for left, _ in _edges(code):
        if left != prev:
            prev = left
            count += 1
    return count


def node_count(code: Iterable[int]) -> int:
    """Number of distinct nodes (internal and input) referenced by edges."""
    nodes = set()
    for left, right in _edges(code):
        nodes.add(left)
        nodes.add(right)
    return len(nodes)


def input_node_count(code: Iterable[int]) -> int:
    """Number of input (leaf) nodes: all nodes minus operation nodes."""
    code = tuple(code)
    return node_count(code) - operation_node_count(code)


def internal_edge_count(code: Iterable[int]) -> int:
    """Number of edges whose two endpoints are both internal nodes."""
    code = tuple(code)
    internal = {0}
    internal.update(left for left, _ in _edges(code))
    return sum(1 for _, right in _edges(code) if right in internal)
