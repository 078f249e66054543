import importlib.util
import json
import sys
from pathlib import Path
from uuid import uuid4

import numpy as np
import pytest


def load_module(module_path: Path):
    spec = importlib.util.spec_from_file_location(f"testmod_{uuid4().hex}", module_path)
    module = importlib.util.module_from_spec(spec)
    assert spec and spec.loader
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


class ScriptedRng:
    """Stands in for np.random.Generator: hands out queued uniform draws in order."""

    def __init__(self, *draws):
        self._draws = [np.asarray(d, dtype=float) for d in draws]

    def random(self, size=None):
        out = self._draws.pop(0)
        assert size is None or len(out) == size
        return out


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def default_params() -> dict:
    return {
        "simulation": {
            "cutoff": 50,
            "effect_size": 15,
            "noise_level": 5,
            "sample_size": 200,
            "slope": 0.5,
            "curvature": 0,
        }
    }


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    return _write


@pytest.fixture
def load_script():
    return load_module
