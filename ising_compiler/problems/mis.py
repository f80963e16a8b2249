"""Maximum Independent Set encoding."""
from __future__ import annotations

from dataclasses import dataclass

from ..graph import Graph
from ..ising import InteractionBuilder, IsingModel
from .base import IsingEncoder, ProblemKind


@dataclass(frozen=True)
class MISEncoder(IsingEncoder):
    """One spin per vertex; ``h`` on every spin and ``J`` on every edge.

    With ``h < 0`` the field favours selected (+1) vertices and ``J > 0``
    penalises selecting both ends of an edge.
    """

    h: float = -1.0
    j: float = 2.0
    kind = ProblemKind.MIS

    def encode(self, graph: Graph) -> IsingModel:
        builder = InteractionBuilder(graph.vertices)
        for i in range(graph.vertices):
            builder.field(i, self.h)
        for i, j in graph.edges:
            builder.set(i, j, self.j)
        return builder.build()


def encode_mis(graph: Graph, h: float = -1.0, j: float = 2.0) -> IsingModel:
    return MISEncoder(h=h, j=j).encode(graph)


__all__ = ["MISEncoder", "encode_mis"]
