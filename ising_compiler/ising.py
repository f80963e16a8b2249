"""Ising coefficient model and its hardware-facing wire format."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import numpy as np
import scipy.sparse as sp

from .errors import DuplicateInteraction

SpinPair = Tuple[int, int]


def canonical_pair(i: int, j: int) -> SpinPair:
    """Return ``(i, j)`` with the smaller index first."""

    return (i, j) if i < j else (j, i)


@dataclass(frozen=True, eq=False)
class IsingModel:
    """Fields ``h_i`` and couplings ``J_ij`` over ``spins`` binary spins.

    Energies use ``E(s) = sum_i h_i s_i + sum_{i<j} J_ij s_i s_j`` with
    ``s_i = +/-1``.
    """

    spins: int
    interactions: Mapping[SpinPair, float] = field(default_factory=dict)
    fields: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.spins < 0:
            raise ValueError(f"spin count must be non-negative, got {self.spins}")

        interactions: Dict[SpinPair, float] = {}
        for (i, j), value in self.interactions.items():
            if not 0 <= i < j < self.spins:
                raise ValueError(
                    f"interaction key {(i, j)} is not a canonical pair of spins "
                    f"below {self.spins}"
                )
            interactions[(int(i), int(j))] = float(value)

        fields: Dict[int, float] = {}
        for i, value in self.fields.items():
            if not 0 <= i < self.spins:
                raise ValueError(f"field index {i} is out of range for {self.spins} spins")
            fields[int(i)] = float(value)

        object.__setattr__(self, "interactions", MappingProxyType(interactions))
        object.__setattr__(self, "fields", MappingProxyType(fields))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IsingModel):
            return NotImplemented
        return (
            self.spins == other.spins
            and dict(self.interactions) == dict(other.interactions)
            and dict(self.fields) == dict(other.fields)
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.spins,
                frozenset(self.interactions.items()),
                frozenset(self.fields.items()),
            )
        )

    # ------------------------------------------------------------------
    # Array views
    # ------------------------------------------------------------------

    def field_vector(self) -> np.ndarray:
        h = np.zeros(self.spins, dtype=float)
        for i, value in self.fields.items():
            h[i] = value
        return h

    def to_sparse(self) -> sp.csr_matrix:
        """Return the symmetric coupling matrix with ``J_ij`` at ``(i, j)`` and ``(j, i)``."""

        if not self.interactions:
            return sp.csr_matrix((self.spins, self.spins), dtype=float)

        pairs = np.array(list(self.interactions.keys()), dtype=np.int64)
        values = np.fromiter(self.interactions.values(), dtype=float)
        rows = np.concatenate([pairs[:, 0], pairs[:, 1]])
        cols = np.concatenate([pairs[:, 1], pairs[:, 0]])
        data = np.concatenate([values, values])
        return sp.csr_matrix((data, (rows, cols)), shape=(self.spins, self.spins))

    def energy(self, spins: np.ndarray) -> float | np.ndarray:
        """Energy of one configuration ``(N,)`` or a batch ``(K, N)``."""

        s = np.asarray(spins, dtype=float)
        if s.shape[-1] != self.spins:
            raise ValueError(f"expected configurations of {self.spins} spins, got {s.shape}")
        if not np.all(np.abs(s) == 1.0):
            raise ValueError("spin values must be +1 or -1")

        batch = np.atleast_2d(s)
        J = self.to_sparse()
        # The symmetric matrix counts every pair twice.
        interaction = 0.5 * np.sum(batch * (J @ batch.T).T, axis=1)
        energies = batch @ self.field_vector() + interaction
        return float(energies[0]) if s.ndim == 1 else energies

    # ------------------------------------------------------------------
    # Coefficient wire format
    # ------------------------------------------------------------------

    def to_coefficients(self) -> Dict[str, Any]:
        """Return ``{"spins", "h": {"i": h}, "J": {"i,j": J}}`` with sorted keys."""

        return {
            "spins": self.spins,
            "h": {str(i): self.fields[i] for i in sorted(self.fields)},
            "J": {f"{i},{j}": self.interactions[(i, j)] for i, j in sorted(self.interactions)},
        }

    @classmethod
    def from_coefficients(cls, data: Mapping[str, Any]) -> "IsingModel":
        """Parse a coefficient set; ``spins`` defaults to the highest index + 1."""

        fields: Dict[int, float] = {}
        for key, value in (data.get("h") or {}).items():
            fields[int(key)] = float(value)

        interactions: Dict[SpinPair, float] = {}
        for key, value in (data.get("J") or {}).items():
            try:
                i, j = (int(part) for part in str(key).split(","))
            except ValueError as exc:
                raise ValueError(f"invalid interaction key {key!r}") from exc
            if i >= j:
                raise ValueError(f"interaction key {key!r} must list the lower index first")
            if (i, j) in interactions:
                raise DuplicateInteraction((i, j))
            interactions[(i, j)] = float(value)

        spins = data.get("spins")
        if spins is None:
            indices = list(fields) + [j for _, j in interactions]
            spins = max(indices) + 1 if indices else 0

        return cls(spins=int(spins), interactions=interactions, fields=fields)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_coefficients(), indent=indent)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "IsingModel":
        return cls.from_coefficients(json.loads(payload))

    def summary(self) -> str:
        return (
            f"IsingModel(spins={self.spins}, "
            f"fields={dict(sorted(self.fields.items()))}, "
            f"interactions={dict(sorted(self.interactions.items()))})"
        )


class InteractionBuilder:
    """Mutable staging area used while an encoder assembles a model.

    Builders are local to a single encode call so that a failed encode never
    hands out a partially populated model.
    """

    def __init__(self, spins: int) -> None:
        self.spins = spins
        self._interactions: Dict[SpinPair, float] = {}
        self._fields: Dict[int, float] = {}

    def set(self, i: int, j: int, value: float) -> None:
        key = canonical_pair(i, j)
        if key in self._interactions:
            raise DuplicateInteraction(key)
        self._interactions[key] = value

    def add(self, i: int, j: int, value: float) -> None:
        key = canonical_pair(i, j)
        self._interactions[key] = self._interactions.get(key, 0.0) + value

    def field(self, i: int, value: float) -> None:
        self._fields[i] = value

    def build(self) -> IsingModel:
        return IsingModel(
            spins=self.spins,
            interactions=self._interactions,
            fields=self._fields,
        )


__all__ = ["SpinPair", "IsingModel", "InteractionBuilder", "canonical_pair"]
