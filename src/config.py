from dataclasses import dataclass, asdict
from typing import Any, Dict

@dataclass(frozen=True)
class SimulationConfig:
    cutoff: float = 50.0
    effect_size: float = 15.0
    noise_level: float = 5.0
    sample_size: int = 200
    slope: float = 0.5
    curvature: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Slider bounds (min, max, step) exposed by the frontend and the editor.
PARAMETER_RANGES: Dict[str, tuple] = {
    "cutoff": (10.0, 90.0, 1.0),
    "effect_size": (-30.0, 50.0, 1.0),
    "noise_level": (0.0, 20.0, 0.5),
    "slope": (-2.0, 2.0, 0.1),
    "curvature": (-5.0, 5.0, 0.5),
}

# Sample size is toggled rather than slid.
SAMPLE_SIZE_OPTIONS = (200, 500)

PARAMETER_FIELDS = ("cutoff", "effect_size", "noise_level", "sample_size", "slope", "curvature")
