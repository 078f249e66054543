import json
import math
from pathlib import Path
from typing import Any, Dict, List

from config import PARAMETER_FIELDS, PARAMETER_RANGES, SimulationConfig

def load_params(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Parameter file not found: {p.resolve()}")
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)

def _as_float(value: object, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {field_name}: {value}") from exc

def simulation_block(params: Dict[str, Any]) -> Dict[str, Any]:
    """The dict holding the parameters: params["simulation"] when present, else params itself."""
    if "simulation" in params and isinstance(params["simulation"], dict):
        return params["simulation"]
    return params

def validate_params(params: Dict[str, Any], enforce_ranges: bool = True) -> List[str]:
    """
    Expected structure (flexible):
      params["simulation"] -> {cutoff, effect_size, noise_level, sample_size, slope, curvature}
      or the same keys at the top level.
    Returns a list of error messages (empty when valid).
    """
    params = simulation_block(params)

    errors: List[str] = []
    for field in PARAMETER_FIELDS:
        if field not in params:
            errors.append(f"simulation: missing {field}.")

    for field, (low, high, _step) in PARAMETER_RANGES.items():
        if field not in params:
            continue
        try:
            value = _as_float(params[field], field)
        except ValueError as exc:
            errors.append(f"simulation: {exc}")
            continue
        if not math.isfinite(value):
            errors.append(f"simulation: {field} must be a finite number.")
            continue
        if field == "noise_level" and value < 0:
            errors.append("simulation: noise_level must be >= 0.")
            continue
        if enforce_ranges and not (low <= value <= high):
            errors.append(f"simulation: {field} must be between {low:g} and {high:g}.")

    if "sample_size" in params:
        raw = params["sample_size"]
        try:
            n = _as_float(raw, "sample_size")
            if not n.is_integer():
                errors.append("simulation: sample_size must be an integer.")
            elif n <= 0:
                errors.append("simulation: sample_size must be > 0.")
        except ValueError:
            errors.append("simulation: sample_size must be an integer.")

    return errors

def config_from_params(params: Dict[str, Any], enforce_ranges: bool = True) -> SimulationConfig:
    errors = validate_params(params, enforce_ranges=enforce_ranges)
    if errors:
        raise ValueError("Invalid simulation parameters: " + "; ".join(errors))

    params = simulation_block(params)

    return SimulationConfig(
        cutoff=float(params["cutoff"]),
        effect_size=float(params["effect_size"]),
        noise_level=float(params["noise_level"]),
        sample_size=int(float(params["sample_size"])),
        slope=float(params["slope"]),
        curvature=float(params["curvature"]),
    )
