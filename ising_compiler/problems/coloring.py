"""Graph k-colouring encoding with one-hot spins."""
from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Optional

from ..errors import InvalidColorCount
from ..graph import Graph
from ..ising import InteractionBuilder, IsingModel
from .base import IsingEncoder, ProblemKind, iter_unique_edges


def spin_index(vertex: int, color: int, colors: int) -> int:
    """Spin that is +1 when ``vertex`` takes ``color``."""

    return vertex * colors + color


@dataclass(frozen=True)
class ColoringEncoder(IsingEncoder):
    """One spin per ``(vertex, color)`` pair.

    Two penalty families share the interaction map and accumulate: a one-hot
    penalty between the colours of a vertex and an adjacency penalty between
    equal colours of neighbouring vertices. Every spin carries ``field``.
    ``colors`` overrides the colour count stored on the graph.
    """

    colors: Optional[int] = None
    onehot_penalty: float = 2.0
    adjacency_penalty: float = 2.0
    field: float = -1.0
    kind = ProblemKind.COLORING

    def __post_init__(self) -> None:
        if self.onehot_penalty <= 0 or self.adjacency_penalty <= 0:
            raise ValueError(
                "colouring penalties must be positive, got "
                f"onehot={self.onehot_penalty}, adjacency={self.adjacency_penalty}"
            )
        if self.field >= 0:
            raise ValueError(f"colouring field must be negative, got {self.field}")

    def resolve_colors(self, graph: Graph) -> int:
        k = self.colors if self.colors is not None else graph.colors
        if k is None or k <= 0:
            raise InvalidColorCount(k)
        return k

    def encode(self, graph: Graph) -> IsingModel:
        k = self.resolve_colors(graph)
        edges = [key for _, key in iter_unique_edges(graph)]

        builder = InteractionBuilder(graph.vertices * k)
        for vertex in range(graph.vertices):
            for c in range(k):
                builder.field(spin_index(vertex, c, k), self.field)
            for c1, c2 in combinations(range(k), 2):
                builder.add(
                    spin_index(vertex, c1, k),
                    spin_index(vertex, c2, k),
                    self.onehot_penalty,
                )

        for i, j in edges:
            for c in range(k):
                builder.add(spin_index(i, c, k), spin_index(j, c, k), self.adjacency_penalty)

        return builder.build()


def encode_coloring(
    graph: Graph,
    colors: Optional[int] = None,
    onehot_penalty: float = 2.0,
    adjacency_penalty: float = 2.0,
    field: float = -1.0,
) -> IsingModel:
    encoder = ColoringEncoder(
        colors=colors,
        onehot_penalty=onehot_penalty,
        adjacency_penalty=adjacency_penalty,
        field=field,
    )
    return encoder.encode(graph)


__all__ = ["ColoringEncoder", "encode_coloring", "spin_index"]
