"""Graph description of a combinatorial problem instance."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import networkx as nx

from .errors import GraphFormatError

Edge = Tuple[int, int]


@dataclass(frozen=True)
class Graph:
    """Immutable problem instance: vertex count, edges and optional extras.

    ``weights`` is parallel to ``edges`` when given. ``colors`` is only used by
    the colouring encoder.
    """

    vertices: int
    edges: Tuple[Edge, ...] = ()
    weights: Optional[Tuple[float, ...]] = None
    colors: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "edges", tuple((int(i), int(j)) for i, j in self.edges))
        if self.weights is not None:
            weights = tuple(float(w) for w in self.weights)
            if len(weights) != len(self.edges):
                raise ValueError(
                    f"expected {len(self.edges)} edge weights, got {len(weights)}"
                )
            object.__setattr__(self, "weights", weights)

    @property
    def weighted(self) -> bool:
        return self.weights is not None

    def edge_weight(self, index: int, default: float = 1.0) -> float:
        if self.weights is None:
            return default
        return self.weights[index]

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Graph":
        """Parse ``{"vertices", "edges", "weights"?, "colors"?}``."""

        if not isinstance(data, Mapping):
            raise GraphFormatError("graph description must be a JSON object")
        if "vertices" not in data:
            raise GraphFormatError("missing required key 'vertices'")

        vertices = _as_int(data["vertices"], "vertices")
        edges = tuple(_parse_edge(edge) for edge in data.get("edges") or ())
        weights = _parse_weights(data.get("weights"), edges)

        colors = data.get("colors")
        if colors is not None:
            colors = _as_int(colors, "colors")

        return cls(vertices=vertices, edges=edges, weights=weights, colors=colors)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "vertices": self.vertices,
            "edges": [list(edge) for edge in self.edges],
        }
        if self.weights is not None:
            data["weights"] = list(self.weights)
        if self.colors is not None:
            data["colors"] = self.colors
        return data

    # ------------------------------------------------------------------
    # networkx interop
    # ------------------------------------------------------------------

    def to_networkx(self) -> nx.Graph:
        graph = nx.Graph()
        graph.add_nodes_from(range(self.vertices))
        for index, (i, j) in enumerate(self.edges):
            if self.weights is None:
                graph.add_edge(i, j)
            else:
                graph.add_edge(i, j, weight=self.weights[index])
        return graph

    @classmethod
    def from_networkx(
        cls, graph: nx.Graph, *, weight: str | None = "weight", colors: int | None = None
    ) -> "Graph":
        """Build a graph from ``networkx``, relabelling nodes to ``0..n-1``."""

        relabelled = nx.convert_node_labels_to_integers(graph, ordering="sorted")
        edges = tuple((int(i), int(j)) for i, j in relabelled.edges())

        weights = None
        if weight is not None and any(
            weight in attrs for _, _, attrs in relabelled.edges(data=True)
        ):
            weights = tuple(
                float(attrs.get(weight, 1.0)) for _, _, attrs in relabelled.edges(data=True)
            )

        return cls(
            vertices=relabelled.number_of_nodes(),
            edges=edges,
            weights=weights,
            colors=colors,
        )


def load_graph(path: str | Path) -> Graph:
    """Read a graph from a JSON file."""

    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GraphFormatError(f"failed to read file: {exc}", path) from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise GraphFormatError(f"failed to parse JSON: {exc}", path) from exc

    try:
        return Graph.from_dict(data)
    except GraphFormatError as exc:
        raise GraphFormatError(str(exc), path) from exc


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GraphFormatError(f"'{name}' must be an integer, got {value!r}")
    return value


def _parse_edge(edge: Any) -> Edge:
    if not isinstance(edge, (list, tuple)) or len(edge) != 2:
        raise GraphFormatError(f"edges must be pairs of vertex indices, got {edge!r}")
    return _as_int(edge[0], "edges"), _as_int(edge[1], "edges")


def _parse_weights(
    raw: Any, edges: Tuple[Edge, ...]
) -> Optional[Tuple[float, ...]]:
    """Accept either a parallel array or an ``"i,j" -> weight`` mapping."""

    if raw is None:
        return None

    if isinstance(raw, Mapping):
        by_key: Dict[Edge, float] = {}
        for key, value in raw.items():
            try:
                i, j = (int(part) for part in str(key).split(","))
            except ValueError as exc:
                raise GraphFormatError(f"invalid weight key {key!r}") from exc
            by_key[(min(i, j), max(i, j))] = _as_float(value)

        weights = []
        for i, j in edges:
            canonical = (min(i, j), max(i, j))
            weights.append(by_key.pop(canonical, 1.0))
        if by_key:
            stray = ", ".join(f"{i},{j}" for i, j in sorted(by_key))
            raise GraphFormatError(f"weights given for edges not in the graph: {stray}")
        return tuple(weights)

    if isinstance(raw, (list, tuple)):
        if len(raw) != len(edges):
            raise GraphFormatError(
                f"expected {len(edges)} edge weights, got {len(raw)}"
            )
        return tuple(_as_float(value) for value in raw)

    raise GraphFormatError(f"'weights' must be an array or an object, got {raw!r}")


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GraphFormatError(f"edge weight must be a number, got {value!r}")
    return float(value)


__all__ = ["Edge", "Graph", "load_graph"]
