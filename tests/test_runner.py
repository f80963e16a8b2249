from __future__ import annotations

import threading
import time

import pytest

from ising_compiler.errors import DuplicateInteraction, GraphFormatError, SelfLoop
from ising_compiler.graph import Graph
from ising_compiler.problems import MISEncoder, encode_mis
from ising_compiler.runner import (
    BatchConfig,
    BatchResult,
    BatchRunner,
    CompilerConfig,
    InstanceResult,
    compile_batch,
)


def _runner(**kwargs) -> BatchRunner:
    return BatchRunner(MISEncoder(h=-1.0, j=2.0), BatchConfig(progress=False), **kwargs)


def _path_graph(n: int) -> Graph:
    return Graph(vertices=n, edges=tuple((i, i + 1) for i in range(n - 1)))


def test_one_invalid_instance_does_not_affect_the_others() -> None:
    sources = {f"g{n}": _path_graph(n) for n in range(2, 8)}
    sources["broken"] = Graph(vertices=3, edges=((0, 1), (2, 2)))

    result = _runner().run(sources)

    assert len(result) == len(sources)
    assert [r.instance_id for r in result.failed] == ["broken"]
    assert isinstance(result["broken"].error, SelfLoop)
    assert result["broken"].model is None
    for n in range(2, 8):
        item = result[f"g{n}"]
        assert item.ok
        assert item.model == encode_mis(_path_graph(n), h=-1.0, j=2.0)


def test_encoding_failures_are_isolated() -> None:
    sources = {
        "dup": Graph(vertices=2, edges=((0, 1), (1, 0))),
        "ok": _path_graph(3),
    }

    result = _runner().run(sources)

    assert isinstance(result["dup"].error, DuplicateInteraction)
    assert result["ok"].ok


def test_files_are_read_and_tagged_by_path(write_graph, tmp_path) -> None:
    good = write_graph("good.json", {"vertices": 4, "edges": [[0, 1], [1, 2], [2, 3], [3, 0]]})
    bad = tmp_path / "bad.json"
    bad.write_text("[", encoding="utf-8")
    missing = tmp_path / "missing.json"

    result = _runner().run([good, bad, missing])

    assert set(r.instance_id for r in result) == {str(good), str(bad), str(missing)}
    assert result[str(good)].model.spins == 4
    assert isinstance(result[str(bad)].error, GraphFormatError)
    assert isinstance(result[str(missing)].error, GraphFormatError)


def test_results_are_collected_regardless_of_completion_order() -> None:
    # The first instance is the slowest to load.
    delays = {"slow": 0.2, "fast-1": 0.0, "fast-2": 0.0}

    def loader(name: str) -> Graph:
        time.sleep(delays[name])
        return _path_graph(3)

    result = _runner(loader=loader).run({name: name for name in delays})

    assert len(result) == 3
    assert all(r.ok for r in result)


def test_every_instance_reported_exactly_once_with_small_queues() -> None:
    seen = []
    sources = {str(n): _path_graph(2 + n % 4) for n in range(25)}
    sources["7"] = Graph(vertices=0)
    runner = BatchRunner(MISEncoder(), BatchConfig(queue_capacity=1, progress=False))

    result = runner.run(sources, on_result=seen.append)

    assert len(result) == 25
    assert sorted(r.instance_id for r in seen) == sorted(sources)
    assert [r.instance_id for r in result.failed] == ["7"]


def test_loader_exceptions_become_failures() -> None:
    def loader(source: str) -> Graph:
        raise RuntimeError(f"cannot fetch {source}")

    result = _runner(loader=loader).run({"remote": "s3://bucket/graph.json"})

    assert not result["remote"].ok
    assert "s3://bucket" in str(result["remote"].error)


def test_loader_runs_on_the_read_stage_thread() -> None:
    threads = set()

    def loader(source: str) -> Graph:
        threads.add(threading.current_thread().name)
        return _path_graph(2)

    _runner(loader=loader).run({"a": "a-source", "b": _path_graph(3)})

    # In-memory graphs skip the loader.
    assert threads == {"read-validate"}


def test_empty_batch() -> None:
    result = _runner().run({})

    assert len(result) == 0
    assert result.succeeded == [] and result.failed == []


def test_duplicate_paths_are_rejected(tmp_path) -> None:
    path = tmp_path / "g.json"

    with pytest.raises(ValueError, match="more than once"):
        _runner().run([path, path])


def test_batch_result_refuses_second_report() -> None:
    result = BatchResult([InstanceResult("a", error=ValueError("x"))])

    with pytest.raises(RuntimeError):
        result.add(InstanceResult("a", model=encode_mis(_path_graph(2))))


def test_compile_batch_uses_the_configured_family() -> None:
    graph = Graph(vertices=2, edges=((0, 1),), weights=(3.0,))

    result = compile_batch(
        {"cut": graph},
        CompilerConfig(problem="maxcut"),
        BatchConfig(progress=False),
    )

    assert dict(result["cut"].model.interactions) == {(0, 1): -3.0}


class _Abort(BaseException):
    pass


class _AbortingEncoder(MISEncoder):
    def encode(self, graph: Graph):
        if graph.vertices == 3:
            raise _Abort("encoder gave up")
        return super().encode(graph)


def test_loader_base_exception_stops_the_batch_without_hanging() -> None:
    def loader(source: str) -> Graph:
        if source == "b":
            raise _Abort("loader gave up")
        return _path_graph(2)

    runner = BatchRunner(
        MISEncoder(), BatchConfig(queue_capacity=1, progress=False), loader=loader
    )

    with pytest.raises(_Abort, match="loader gave up"):
        runner.run({name: name for name in "abcdef"})


def test_encoder_base_exception_stops_the_batch_without_hanging() -> None:
    sources = {str(n): _path_graph(2 + n % 3) for n in range(10)}
    runner = BatchRunner(_AbortingEncoder(), BatchConfig(queue_capacity=1, progress=False))

    with pytest.raises(_Abort, match="encoder gave up"):
        runner.run(sources)


def test_mapping_keys_that_collide_as_strings_are_rejected() -> None:
    graph = _path_graph(2)

    with pytest.raises(ValueError, match="more than once"):
        _runner().run({1: graph, "1": graph})
