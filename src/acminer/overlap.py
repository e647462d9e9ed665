# src/acminer/overlap.py

from __future__ import annotations
from typing import AbstractSet, Iterable, List, Optional

import numpy as np

from .entries import PatternEntry
from .states import state_vertices

"""
Overlap handling between the occurrences of ranked patterns.

Occurrences of one pattern may share vertices; only a non-overlapping subset
can be replaced. These helpers compute that subset without touching the
input entries, so the replacement engine can re-rank after every round.
"""

__all__ = ["involved_nodes", "remove_overlap", "remove_overlap_entry"]


def involved_nodes(
    occurrences: Iterable,
    start: Optional[AbstractSet[int]] = None,
) -> frozenset:
    """
    All vertices used by ``occurrences``, united with ``start`` if given.

    ``start`` is never modified.
    """
    arrays = [np.asarray(state_vertices(o), dtype=np.int64) for o in occurrences]
    nodes = set(start) if start else set()
    if arrays:
        nodes.update(int(v) for v in np.unique(np.concatenate(arrays)))
    return frozenset(nodes)


def remove_overlap_entry(
    entry: PatternEntry,
    forbidden: Optional[AbstractSet[int]] = None,
) -> PatternEntry:
    """
    First-come subset of ``entry.occurrences`` that share no vertex.

    An occurrence touching a vertex in ``forbidden`` (e.g. vertices already
    claimed by a previously replaced pattern) is dropped as well.
    """
    used = set(forbidden) if forbidden else set()
    kept = []
    for occ in entry.occurrences:
        vertices = state_vertices(occ)
        if used.isdisjoint(vertices):
            used.update(vertices)
            kept.append(occ)
    return PatternEntry(entry.code, kept)


def remove_overlap(
    entries: Iterable[PatternEntry],
    forbidden: Optional[AbstractSet[int]] = None,
) -> List[PatternEntry]:
    """
    Apply :func:`remove_overlap_entry` to every entry independently.

    Entries keep their order; overlap is only removed within an entry, never
    across entries.
    """
    return [remove_overlap_entry(e, forbidden) for e in entries]
