from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from ising_compiler.graph import Graph


@pytest.fixture
def cycle4() -> Graph:
    return Graph(vertices=4, edges=((0, 1), (1, 2), (2, 3), (3, 0)))


@pytest.fixture
def write_graph(tmp_path: Path) -> Callable[[str, Dict[str, Any]], Path]:
    def _write(name: str, payload: Dict[str, Any]) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
