"""Encoders turning problem graphs into Ising coefficient sets."""

from .base import IsingEncoder, ProblemKind
from .coloring import ColoringEncoder, encode_coloring
from .maxcut import MaxCutEncoder, encode_maxcut
from .mis import MISEncoder, encode_mis

__all__ = [
    "IsingEncoder",
    "ProblemKind",
    "MISEncoder",
    "MaxCutEncoder",
    "ColoringEncoder",
    "encode_mis",
    "encode_maxcut",
    "encode_coloring",
]
