# src/acminer/entries.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from .codes import PatternCode, as_code, operation_node_count
from .states import state_vertices

__all__ = ["PatternEntry", "entries_from_mapping", "as_side_table"]

T = TypeVar("T")


@dataclass(frozen=True)
class PatternEntry:
    """
    The unit being ranked: a pattern code and its occurrences.

    ``occurrences`` is either a collection of vertex tuples or a collection of
    state descriptors (:class:`~acminer.states.StateSingleOutput`,
    :class:`~acminer.states.StateMultiOutput`). Its order does not matter for
    ranking, except that the pattern-size strategy looks at the first one.
    """

    code: PatternCode
    occurrences: Tuple[Any, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "code", as_code(self.code))
        object.__setattr__(self, "occurrences", tuple(_freeze(o) for o in self.occurrences))

    @property
    def size(self) -> int:
        return len(self.occurrences)

    def first_occurrence_length(self) -> Optional[int]:
        if not self.occurrences:
            return None
        return len(state_vertices(self.occurrences[0]))

    def structural_size(self) -> int:
        """Length of the first occurrence, or the operation-node count if there is none."""
        n = self.first_occurrence_length()
        if n is None:
            return operation_node_count(self.code)
        return n


def _freeze(occurrence):
    if hasattr(occurrence, "vertices"):
        return occurrence
    return tuple(int(v) for v in occurrence)


PatternsLike = Union[Mapping[Any, Sequence], Iterable[Tuple[Any, Sequence]]]


def entries_from_mapping(patterns: PatternsLike) -> List[PatternEntry]:
    """
    Build entries from a ``code -> occurrences`` mapping or from ``(code, occurrences)`` pairs.

    Pairs are accepted so codes held as unhashable arrays can be passed
    without building a dict first. Entries are returned in input order.
    """
    items = patterns.items() if isinstance(patterns, Mapping) else patterns
    return [PatternEntry(code, occs) for code, occs in items]


def as_side_table(table: Optional[Mapping[Any, T]]) -> Optional[Dict[PatternCode, T]]:
    """Re-key a side table by :class:`PatternCode` so lookups compare code contents."""
    if table is None:
        return None
    return {as_code(k): v for k, v in table.items()}
