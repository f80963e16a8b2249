"""Compile graph optimisation problems into Ising models for analog hardware."""

from .graph import Graph, load_graph
from .ising import InteractionBuilder, IsingModel, canonical_pair
from .problems import (
    ColoringEncoder,
    IsingEncoder,
    MaxCutEncoder,
    MISEncoder,
    ProblemKind,
    encode_coloring,
    encode_maxcut,
    encode_mis,
)
from .runner import (
    BatchConfig,
    BatchResult,
    BatchRunner,
    CompilerConfig,
    InstanceResult,
    compile_batch,
)
from .sequence import (
    AdiabaticSweepPolicy,
    Channel,
    Pulse,
    PulseSequence,
    Waveform,
    build_sequence,
    deserialize,
    sequence_from_model,
    serialize,
)
from .validation import ValidationOutcome, check_graph, validate

__version__ = "0.1.0"

__all__ = [
    "Graph",
    "load_graph",
    "IsingModel",
    "InteractionBuilder",
    "canonical_pair",
    "IsingEncoder",
    "ProblemKind",
    "MISEncoder",
    "MaxCutEncoder",
    "ColoringEncoder",
    "encode_mis",
    "encode_maxcut",
    "encode_coloring",
    "CompilerConfig",
    "BatchConfig",
    "BatchRunner",
    "BatchResult",
    "InstanceResult",
    "compile_batch",
    "Waveform",
    "Channel",
    "Pulse",
    "PulseSequence",
    "AdiabaticSweepPolicy",
    "build_sequence",
    "serialize",
    "deserialize",
    "sequence_from_model",
    "ValidationOutcome",
    "validate",
    "check_graph",
]
