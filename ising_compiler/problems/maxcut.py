"""Weighted Max-Cut encoding."""
from __future__ import annotations

from dataclasses import dataclass

from ..graph import Graph
from ..ising import InteractionBuilder, IsingModel
from .base import IsingEncoder, ProblemKind


@dataclass(frozen=True)
class MaxCutEncoder(IsingEncoder):
    """Couplings ``J_ij = -w_ij`` and no fields.

    The cut weight ``sum w_ij (1 - s_i s_j) / 2`` of a configuration equals
    ``(W + E(s)) / 2`` where ``W`` is the total edge weight and ``E`` is
    :meth:`IsingModel.energy`. Unweighted edges count ``default_weight``.
    """

    default_weight: float = 1.0
    kind = ProblemKind.MAXCUT

    def encode(self, graph: Graph) -> IsingModel:
        builder = InteractionBuilder(graph.vertices)
        for index, (i, j) in enumerate(graph.edges):
            builder.set(i, j, -graph.edge_weight(index, self.default_weight))
        return builder.build()


def encode_maxcut(graph: Graph, default_weight: float = 1.0) -> IsingModel:
    return MaxCutEncoder(default_weight=default_weight).encode(graph)


__all__ = ["MaxCutEncoder", "encode_maxcut"]
