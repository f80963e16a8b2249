"""Interface shared by the problem encoders."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, Set, Tuple

import scipy.sparse as sp

from ..errors import DuplicateInteraction
from ..graph import Graph
from ..ising import IsingModel, SpinPair, canonical_pair


class ProblemKind(str, Enum):
    """Problem families with an Ising encoding."""

    MIS = "mis"
    MAXCUT = "maxcut"
    COLORING = "coloring"


class IsingEncoder(ABC):
    """Interface implemented by all encoders.

    Encoders hold only their parameters, so a single instance may be shared
    between threads.
    """

    kind: ProblemKind

    @abstractmethod
    def encode(self, graph: Graph) -> IsingModel:
        """Return the Ising model of a validated ``graph``."""

    def encode_sparse(self, graph: Graph) -> sp.csr_matrix:
        """Convenience helper returning only the coupling matrix."""

        return self.encode(graph).to_sparse()

    def __call__(self, graph: Graph) -> IsingModel:
        return self.encode(graph)


def iter_unique_edges(graph: Graph) -> Iterator[Tuple[int, SpinPair]]:
    """Yield ``(index, canonical edge)`` and reject repeated vertex pairs."""

    seen: Set[SpinPair] = set()
    for index, (i, j) in enumerate(graph.edges):
        key = canonical_pair(i, j)
        if key in seen:
            raise DuplicateInteraction(key)
        seen.add(key)
        yield index, key


__all__ = ["ProblemKind", "IsingEncoder", "iter_unique_edges"]
