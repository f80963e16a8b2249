"""Structural checks run on a graph before it reaches an encoder."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidEdgeEndpoint, InvalidVertexCount, SelfLoop, StructuralError
from .graph import Graph


@dataclass(frozen=True)
class ValidationOutcome:
    error: Optional[StructuralError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def validate(graph: Graph) -> ValidationOutcome:
    """Report the first structural problem of ``graph``, if any.

    Duplicate edges are not reported here; encoders reject them.
    """

    if graph.vertices <= 0:
        return ValidationOutcome(InvalidVertexCount(graph.vertices))

    for edge in graph.edges:
        i, j = edge
        if not (0 <= i < graph.vertices and 0 <= j < graph.vertices):
            return ValidationOutcome(InvalidEdgeEndpoint(edge, graph.vertices))
        if i == j:
            return ValidationOutcome(SelfLoop(edge))

    return ValidationOutcome()


def check_graph(graph: Graph) -> Graph:
    """Raising shorthand for :func:`validate`."""

    validate(graph).raise_for_error()
    return graph


__all__ = ["ValidationOutcome", "validate", "check_graph"]
