"""Exception hierarchy shared by the compiler components."""
from __future__ import annotations

from pathlib import Path
from typing import Tuple


class CompilerError(Exception):
    """Base class for every error raised by :mod:`ising_compiler`."""


# ---------------------------------------------------------------------------
# Malformed graphs
# ---------------------------------------------------------------------------


class StructuralError(CompilerError, ValueError):
    """The graph does not describe a well-formed problem instance."""


class InvalidVertexCount(StructuralError):
    def __init__(self, vertices: int) -> None:
        super().__init__(f"number of vertices must be greater than 0, got {vertices}")
        self.vertices = vertices


class InvalidEdgeEndpoint(StructuralError):
    def __init__(self, edge: Tuple[int, int], vertices: int) -> None:
        super().__init__(
            f"edge indices must be between 0 and {vertices - 1}: {list(edge)}"
        )
        self.edge = edge
        self.vertices = vertices


class SelfLoop(StructuralError):
    def __init__(self, edge: Tuple[int, int]) -> None:
        super().__init__(f"loops are not allowed: {list(edge)}")
        self.edge = edge


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class EncodingConflict(CompilerError, ValueError):
    """The encoder cannot produce a consistent coefficient set."""


class DuplicateInteraction(EncodingConflict):
    def __init__(self, key: Tuple[int, int]) -> None:
        super().__init__(f"duplicate interaction for spin pair {list(key)}")
        self.key = key


class InvalidColorCount(EncodingConflict):
    def __init__(self, colors: int | None) -> None:
        super().__init__(f"number of colors must be a positive integer, got {colors}")
        self.colors = colors


# ---------------------------------------------------------------------------
# Pulse sequences
# ---------------------------------------------------------------------------


class SerializationReferenceError(CompilerError, ValueError):
    """A pulse sequence refers to something it does not declare."""


class DanglingChannelReference(SerializationReferenceError):
    def __init__(self, channel: str) -> None:
        super().__init__(f"pulse references undeclared channel '{channel}'")
        self.channel = channel


class DuplicateQubitLabel(SerializationReferenceError):
    def __init__(self, label: str) -> None:
        super().__init__(f"qubit label '{label}' is declared more than once")
        self.label = label


class DuplicateChannelLabel(SerializationReferenceError):
    def __init__(self, label: str) -> None:
        super().__init__(f"channel label '{label}' is declared more than once")
        self.label = label


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class GraphFormatError(CompilerError, OSError):
    """A graph source could not be read or parsed."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


__all__ = [
    "CompilerError",
    "StructuralError",
    "InvalidVertexCount",
    "InvalidEdgeEndpoint",
    "SelfLoop",
    "EncodingConflict",
    "DuplicateInteraction",
    "InvalidColorCount",
    "SerializationReferenceError",
    "DanglingChannelReference",
    "DuplicateQubitLabel",
    "DuplicateChannelLabel",
    "GraphFormatError",
]
