# src/acminer/states.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

__all__ = ["StateSingleOutput", "StateMultiOutput", "state_vertices"]


@dataclass(frozen=True)
class StateSingleOutput:
    """
    One occurrence of a single-output pattern, with its wiring information.

    Parameters
    ----------
    root : int
        The outputting node of the occurrence (graph numbering).
    vertices : tuple of int
        Sorted internal vertices of the occurrence.
    inter_node : int or None, default=None
        An internal vertex that still feeds a node outside the occurrence, i.e.
        an extra external output that a single-output block cannot provide.
        ``None`` when every internal value is consumed inside the occurrence.
    """

    root: int
    vertices: Tuple[int, ...]
    inter_node: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(int(v) for v in self.vertices))

    @property
    def covered(self) -> bool:
        return self.inter_node is None


@dataclass(frozen=True)
class StateMultiOutput:
    """
    One occurrence of a multi-output pattern.

    Parameters
    ----------
    vertices : tuple of int
        Sorted internal vertices of the occurrence.
    output_nodes : tuple of int
        Vertices whose value is used outside the occurrence.
    """

    vertices: Tuple[int, ...]
    output_nodes: Tuple[int, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(int(v) for v in self.vertices))
        object.__setattr__(self, "output_nodes", tuple(int(v) for v in self.output_nodes))


def state_vertices(occurrence) -> Tuple[int, ...]:
    """Vertices of a plain occurrence or of a state descriptor."""
    vertices = getattr(occurrence, "vertices", None)
    if vertices is None:
        return tuple(occurrence)
    return vertices
