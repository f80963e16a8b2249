"""Pulse-sequence description for analog neutral-atom hardware.

The serializer knows nothing about how Ising coefficients translate into
waveforms. That mapping is supplied by a :class:`SequencePolicy`; the default
:class:`AdiabaticSweepPolicy` lays the atoms out with ``networkx`` and applies
a single global sweep.
"""
from __future__ import annotations

import json
import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

import networkx as nx
import numpy as np

from .errors import DanglingChannelReference, DuplicateChannelLabel, DuplicateQubitLabel
from .ising import IsingModel

Position = Tuple[float, float]


class WaveformShape(str, Enum):
    CONSTANT = "constant"
    RAMP = "ramp"
    BLACKMAN = "blackman"


# Wire keys per shape. ``value`` is an extension: the hardware format only
# lists start/stop/area, and a constant could be sent as a flat ramp.
_SHAPE_PARAMETERS: Dict[WaveformShape, Tuple[str, ...]] = {
    WaveformShape.CONSTANT: ("value",),
    WaveformShape.RAMP: ("start", "stop"),
    WaveformShape.BLACKMAN: ("area",),
}


@dataclass(frozen=True)
class Waveform:
    """Tagged waveform: a shape, a duration in ns and the shape's parameters."""

    shape: WaveformShape
    duration: int
    parameters: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        shape = WaveformShape(self.shape)
        if isinstance(self.duration, bool) or not isinstance(self.duration, numbers.Integral):
            raise ValueError(
                f"waveform duration must be a whole number of ns, got {self.duration!r}"
            )
        if self.duration <= 0:
            raise ValueError(f"waveform duration must be positive, got {self.duration}")

        expected = _SHAPE_PARAMETERS[shape]
        missing = [name for name in expected if name not in self.parameters]
        extra = [name for name in self.parameters if name not in expected]
        if missing or extra:
            raise ValueError(
                f"{shape.value} waveform takes parameters {list(expected)}, "
                f"got {sorted(self.parameters)}"
            )

        object.__setattr__(self, "shape", shape)
        object.__setattr__(self, "duration", int(self.duration))
        object.__setattr__(
            self,
            "parameters",
            MappingProxyType({name: float(self.parameters[name]) for name in expected}),
        )

    @classmethod
    def constant(cls, duration: int, value: float) -> "Waveform":
        return cls(WaveformShape.CONSTANT, duration, {"value": value})

    @classmethod
    def ramp(cls, duration: int, start: float, stop: float) -> "Waveform":
        return cls(WaveformShape.RAMP, duration, {"start": start, "stop": stop})

    @classmethod
    def blackman(cls, duration: int, area: float) -> "Waveform":
        return cls(WaveformShape.BLACKMAN, duration, {"area": area})

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.shape.value, "duration": self.duration, **self.parameters}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Waveform":
        parameters = {k: v for k, v in data.items() if k not in {"type", "duration"}}
        return cls(WaveformShape(data["type"]), data["duration"], parameters)


@dataclass(frozen=True)
class Channel:
    type: str


@dataclass(frozen=True)
class Pulse:
    channel: str
    amplitude: Waveform
    detuning: Waveform
    phase: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "amplitude": self.amplitude.to_dict(),
            "detuning": self.detuning.to_dict(),
            "phase": self.phase,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pulse":
        return cls(
            channel=str(data["channel"]),
            amplitude=Waveform.from_dict(data["amplitude"]),
            detuning=Waveform.from_dict(data["detuning"]),
            phase=float(data.get("phase", 0.0)),
        )


@dataclass(frozen=True)
class PulseSequence:
    """Register, channel declarations and pulses ready for serialization.

    Every pulse must target a declared channel. :func:`build_sequence` also
    accepts label/position pairs and channel type strings.
    """

    register: Mapping[str, Position]
    channels: Mapping[str, Channel]
    pulses: Tuple[Pulse, ...]

    def __post_init__(self) -> None:
        pulses = tuple(self.pulses)
        for pulse in pulses:
            if pulse.channel not in self.channels:
                raise DanglingChannelReference(pulse.channel)

        object.__setattr__(self, "register", MappingProxyType(dict(self.register)))
        object.__setattr__(self, "channels", MappingProxyType(dict(self.channels)))
        object.__setattr__(self, "pulses", pulses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence_builder": {
                "channels": {label: {"type": ch.type} for label, ch in self.channels.items()},
                "pulses": [pulse.to_dict() for pulse in self.pulses],
                "register": {
                    "qubits": {
                        "positions": {
                            label: [float(x), float(y)] for label, (x, y) in self.register.items()
                        }
                    }
                },
            }
        }


RegisterInput = Union[Mapping[str, Sequence[float]], Iterable[Tuple[str, Sequence[float]]]]
ChannelInput = Union[
    Mapping[str, Union[Channel, str]], Iterable[Tuple[str, Union[Channel, str]]]
]


def build_sequence(
    register: RegisterInput,
    channels: ChannelInput,
    pulses: Iterable[Pulse],
) -> PulseSequence:
    """Normalise the parts of a sequence; labels must be unique."""

    items = register.items() if isinstance(register, Mapping) else register
    positions: Dict[str, Position] = {}
    for label, position in items:
        label = str(label)
        if label in positions:
            raise DuplicateQubitLabel(label)
        x, y = position
        positions[label] = (float(x), float(y))

    channel_items = channels.items() if isinstance(channels, Mapping) else channels
    declared: Dict[str, Channel] = {}
    for label, ch in channel_items:
        label = str(label)
        if label in declared:
            raise DuplicateChannelLabel(label)
        declared[label] = ch if isinstance(ch, Channel) else Channel(str(ch))

    return PulseSequence(register=positions, channels=declared, pulses=tuple(pulses))


def serialize(sequence: PulseSequence) -> bytes:
    return json.dumps(sequence.to_dict(), indent=2).encode("utf-8")


class _DecodedObject(dict):
    """JSON object that also remembers its key/value pairs in order."""

    def __init__(self, pairs: List[Tuple[str, Any]]) -> None:
        super().__init__(pairs)
        self.pairs = pairs


def deserialize(payload: Union[bytes, str]) -> PulseSequence:
    data = json.loads(payload, object_pairs_hook=_DecodedObject)
    builder = data["sequence_builder"]
    # Raw pairs keep repeated labels visible to build_sequence.
    positions = builder["register"]["qubits"]["positions"].pairs
    channels = [(label, Channel(spec["type"])) for label, spec in builder["channels"].pairs]
    pulses = [Pulse.from_dict(item) for item in builder.get("pulses", [])]
    return build_sequence(positions, channels, pulses)


# ---------------------------------------------------------------------------
# Ising model -> sequence
# ---------------------------------------------------------------------------


class SequencePolicy(Protocol):
    """Caller-supplied mapping from coefficients to a concrete sequence."""

    def register(self, model: IsingModel) -> RegisterInput:
        ...

    def channels(self, model: IsingModel) -> ChannelInput:
        ...

    def pulses(self, model: IsingModel) -> Iterable[Pulse]:
        ...


@dataclass(frozen=True)
class AdiabaticSweepPolicy:
    """Single global pulse: Blackman amplitude with a linear detuning sweep.

    Atoms are placed with a seeded spring layout of the interaction graph,
    so strongly coupled spins end up close to each other.
    """

    duration: int = 1000
    area: float = math.pi
    detuning_start: float = -5.0
    detuning_stop: float = 5.0
    phase: float = 0.0
    spacing: float = 5.0
    channel: str = "ch0"
    channel_type: str = "rydberg_global"
    seed: Optional[int] = 0

    def labels(self, model: IsingModel) -> List[str]:
        return [f"q{i}" for i in range(model.spins)]

    def register(self, model: IsingModel) -> RegisterInput:
        labels = self.labels(model)
        graph = nx.Graph()
        graph.add_nodes_from(range(model.spins))
        graph.add_weighted_edges_from(
            (i, j, abs(value)) for (i, j), value in model.interactions.items() if value
        )
        layout = nx.spring_layout(graph, seed=self.seed, scale=self.spacing)
        return [
            (labels[i], tuple(np.round(layout[i], 6).tolist()))
            for i in range(model.spins)
        ]

    def channels(self, model: IsingModel) -> ChannelInput:
        return {self.channel: Channel(self.channel_type)}

    def pulses(self, model: IsingModel) -> Iterable[Pulse]:
        return [
            Pulse(
                channel=self.channel,
                amplitude=Waveform.blackman(self.duration, self.area),
                detuning=Waveform.ramp(self.duration, self.detuning_start, self.detuning_stop),
                phase=self.phase,
            )
        ]


def sequence_from_model(
    model: IsingModel, policy: Optional[SequencePolicy] = None
) -> PulseSequence:
    policy = policy if policy is not None else AdiabaticSweepPolicy()
    return build_sequence(policy.register(model), policy.channels(model), policy.pulses(model))


__all__ = [
    "WaveformShape",
    "Waveform",
    "Channel",
    "Pulse",
    "PulseSequence",
    "SequencePolicy",
    "AdiabaticSweepPolicy",
    "build_sequence",
    "serialize",
    "deserialize",
    "sequence_from_model",
]
