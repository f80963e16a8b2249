"""Concurrent batch compilation of graph instances into Ising models."""
from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from tqdm import tqdm

from .graph import Graph, load_graph
from .ising import IsingModel
from .problems import ColoringEncoder, IsingEncoder, MaxCutEncoder, MISEncoder, ProblemKind
from .validation import check_graph

logger = logging.getLogger(__name__)


@dataclass
class CompilerConfig:
    problem: str = "mis"
    h: float = -1.0
    j: float = 2.0
    colors: Optional[int] = None
    onehot_penalty: float = 2.0
    adjacency_penalty: float = 2.0
    coloring_field: float = -1.0
    default_weight: float = 1.0


ENCODER_DEFINITIONS: Dict[ProblemKind, Callable[[CompilerConfig], IsingEncoder]] = {
    ProblemKind.MIS: lambda config: MISEncoder(h=config.h, j=config.j),
    ProblemKind.MAXCUT: lambda config: MaxCutEncoder(default_weight=config.default_weight),
    ProblemKind.COLORING: lambda config: ColoringEncoder(
        colors=config.colors,
        onehot_penalty=config.onehot_penalty,
        adjacency_penalty=config.adjacency_penalty,
        field=config.coloring_field,
    ),
}


def create_encoder(config: CompilerConfig) -> IsingEncoder:
    try:
        kind = ProblemKind(config.problem.lower())
        constructor = ENCODER_DEFINITIONS[kind]
    except (ValueError, KeyError) as exc:
        raise ValueError(f"Unknown problem family '{config.problem}'") from exc
    return constructor(config)


@dataclass
class BatchConfig:
    """Pipeline settings.

    ``queue_capacity`` bounds every inter-stage queue; ``None`` sizes the
    queues to the batch.
    """

    queue_capacity: Optional[int] = None
    progress: bool = True


@dataclass(frozen=True)
class InstanceResult:
    """Outcome of one instance: a model or the error that stopped it."""

    instance_id: str
    model: Optional[IsingModel] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchResult:
    """Results keyed by instance id, in completion order."""

    def __init__(self, results: Iterable[InstanceResult] = ()) -> None:
        self._results: Dict[str, InstanceResult] = {}
        for result in results:
            self.add(result)

    def add(self, result: InstanceResult) -> None:
        if result.instance_id in self._results:
            raise RuntimeError(f"instance '{result.instance_id}' reported twice")
        self._results[result.instance_id] = result

    @property
    def succeeded(self) -> List[InstanceResult]:
        return [r for r in self._results.values() if r.ok]

    @property
    def failed(self) -> List[InstanceResult]:
        return [r for r in self._results.values() if not r.ok]

    def __getitem__(self, instance_id: str) -> InstanceResult:
        return self._results[instance_id]

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._results

    def __iter__(self) -> Iterator[InstanceResult]:
        return iter(self._results.values())

    def __len__(self) -> int:
        return len(self._results)


Source = Union[str, Path, Graph, Any]
Sources = Union[Mapping[str, Source], Iterable[Union[str, Path]]]

# End-of-stream marker put on a queue by the stage that owns it.
_DONE = object()


class BatchRunner:
    """Compile many instances with one thread per pipeline stage.

    Stages are connected by bounded queues: source enumeration, read and
    validate, encode. The calling thread collects results. A failure is
    turned into a tagged :class:`InstanceResult` and sent straight to the
    result queue, so it never reaches later stages nor stops other instances.
    Anything that is not an ``Exception`` (``KeyboardInterrupt``, say) stops
    its stage; the pipeline still winds down and :meth:`run` re-raises it.
    """

    def __init__(
        self,
        encoder: IsingEncoder,
        config: BatchConfig | None = None,
        loader: Callable[[Any], Graph] = load_graph,
    ) -> None:
        self.encoder = encoder
        self.config = config or BatchConfig()
        self.loader = loader

    def run(
        self,
        sources: Sources,
        on_result: Callable[[InstanceResult], None] | None = None,
    ) -> BatchResult:
        items = _normalise_sources(sources)
        result = BatchResult()
        if not items:
            return result

        capacity = self.config.queue_capacity or len(items)
        source_queue: queue.Queue = queue.Queue(maxsize=capacity)
        graph_queue: queue.Queue = queue.Queue(maxsize=capacity)
        result_queue: queue.Queue = queue.Queue(maxsize=capacity)
        # Errors that stopped a stage thread rather than a single instance.
        aborted: List[BaseException] = []

        stages = [
            threading.Thread(
                target=self._enumerate,
                args=(items, source_queue),
                name="enumerate",
                daemon=True,
            ),
            threading.Thread(
                target=self._read_and_validate,
                args=(source_queue, graph_queue, result_queue, aborted),
                name="read-validate",
                daemon=True,
            ),
            threading.Thread(
                target=self._encode,
                args=(graph_queue, result_queue, aborted),
                name="encode",
                daemon=True,
            ),
        ]
        for stage in stages:
            stage.start()

        # Both the read and the encode stage write to the result queue.
        producers = 2
        with tqdm(
            total=len(items), desc="compile", disable=not self.config.progress
        ) as progress:
            while producers:
                item = result_queue.get()
                if item is _DONE:
                    producers -= 1
                    continue
                result.add(item)
                if not item.ok:
                    logger.info("instance %s failed: %s", item.instance_id, item.error)
                if on_result is not None:
                    on_result(item)
                progress.update(1)

        for stage in stages:
            stage.join()
        if aborted:
            raise aborted[0]

        logger.debug(
            "batch finished: %d succeeded, %d failed",
            len(result.succeeded),
            len(result.failed),
        )
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _enumerate(self, items: List[Tuple[str, Source]], out: queue.Queue) -> None:
        for item in items:
            out.put(item)
        out.put(_DONE)

    def _read_and_validate(
        self,
        inbox: queue.Queue,
        out: queue.Queue,
        results: queue.Queue,
        aborted: List[BaseException],
    ) -> None:
        try:
            while True:
                item = inbox.get()
                if item is _DONE:
                    break
                instance_id, source = item
                try:
                    graph = source if isinstance(source, Graph) else self.loader(source)
                    check_graph(graph)
                except Exception as exc:
                    results.put(InstanceResult(instance_id, error=exc))
                    continue
                out.put((instance_id, graph))
        except BaseException as exc:
            aborted.append(exc)
            _drain(inbox)
        finally:
            out.put(_DONE)
            results.put(_DONE)

    def _encode(
        self, inbox: queue.Queue, results: queue.Queue, aborted: List[BaseException]
    ) -> None:
        try:
            while True:
                item = inbox.get()
                if item is _DONE:
                    break
                instance_id, graph = item
                try:
                    model = self.encoder.encode(graph)
                except Exception as exc:
                    results.put(InstanceResult(instance_id, error=exc))
                    continue
                logger.debug("encoded %s: %d spins", instance_id, model.spins)
                results.put(InstanceResult(instance_id, model=model))
        except BaseException as exc:
            aborted.append(exc)
            _drain(inbox)
        finally:
            results.put(_DONE)


def _drain(inbox: queue.Queue) -> None:
    """Discard items up to the end-of-stream marker so upstream never blocks."""

    while inbox.get() is not _DONE:
        pass


def _normalise_sources(sources: Sources) -> List[Tuple[str, Source]]:
    pairs = (
        sources.items()
        if isinstance(sources, Mapping)
        else ((source, source) for source in sources)
    )

    items: List[Tuple[str, Source]] = []
    seen = set()
    for key, source in pairs:
        instance_id = str(key)
        if instance_id in seen:
            raise ValueError(f"instance '{instance_id}' is listed more than once")
        seen.add(instance_id)
        items.append((instance_id, source))
    return items


def compile_batch(
    sources: Sources,
    config: CompilerConfig | None = None,
    batch_config: BatchConfig | None = None,
) -> BatchResult:
    """Compile ``sources`` with the encoder selected by ``config``."""

    encoder = create_encoder(config or CompilerConfig())
    return BatchRunner(encoder, batch_config).run(sources)


__all__ = [
    "CompilerConfig",
    "ENCODER_DEFINITIONS",
    "create_encoder",
    "BatchConfig",
    "InstanceResult",
    "BatchResult",
    "BatchRunner",
    "compile_batch",
]
