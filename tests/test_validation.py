from __future__ import annotations

import pytest

from ising_compiler.errors import (
    InvalidEdgeEndpoint,
    InvalidVertexCount,
    SelfLoop,
    StructuralError,
)
from ising_compiler.graph import Graph
from ising_compiler.validation import check_graph, validate


def test_valid_graph_is_accepted(cycle4) -> None:
    outcome = validate(cycle4)

    assert outcome.ok
    assert outcome
    assert outcome.error is None


def test_graph_without_edges_is_valid() -> None:
    assert validate(Graph(vertices=1)).ok


@pytest.mark.parametrize("vertices", [0, -3])
def test_non_positive_vertex_count(vertices) -> None:
    outcome = validate(Graph(vertices=vertices))

    assert not outcome.ok
    assert isinstance(outcome.error, InvalidVertexCount)
    assert outcome.error.vertices == vertices


@pytest.mark.parametrize("edge", [(0, 4), (-1, 2), (5, 6)])
def test_out_of_range_endpoint(edge) -> None:
    outcome = validate(Graph(vertices=4, edges=((0, 1), edge)))

    assert isinstance(outcome.error, InvalidEdgeEndpoint)
    assert outcome.error.edge == edge
    assert str(list(edge)) in str(outcome.error)


def test_self_loop() -> None:
    outcome = validate(Graph(vertices=3, edges=((0, 1), (2, 2))))

    assert isinstance(outcome.error, SelfLoop)
    assert outcome.error.edge == (2, 2)


def test_duplicate_edges_pass_validation() -> None:
    assert validate(Graph(vertices=2, edges=((0, 1), (1, 0)))).ok


def test_check_graph_raises_structural_error() -> None:
    with pytest.raises(StructuralError):
        check_graph(Graph(vertices=2, edges=((0, 0),)))


def test_check_graph_returns_graph(cycle4) -> None:
    assert check_graph(cycle4) is cycle4
