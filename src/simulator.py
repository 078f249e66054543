from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd

from config import SimulationConfig


BASELINE_OUTCOME = 50.0
RUNNING_VARIABLE_HALF_WIDTH = 50.0
CURVATURE_SCALE = 0.01
NOISE_SCALE = 5.0


@dataclass
class Observation:
    id: int
    x: float
    y: float
    is_treated: bool
    fitted_control: Optional[float] = None      # set only when x < cutoff
    fitted_treatment: Optional[float] = None    # set only when x >= cutoff


@dataclass
class LinearFit:
    slope: float
    intercept: float

    def predict(self, x):
        return self.slope * x + self.intercept


@dataclass
class RddDataset:
    config: SimulationConfig
    observations: List[Observation]
    control_fit: LinearFit
    treated_fit: LinearFit
    estimated_jump: float   # gap between the two fitted lines at the cutoff


def _signal(rel_x: np.ndarray, config: SimulationConfig) -> np.ndarray:
    return BASELINE_OUTCOME + config.slope * rel_x + config.curvature * CURVATURE_SCALE * rel_x * rel_x


def generate_rdd_data(config: SimulationConfig, rng) -> List[Observation]:
    """
    Draw `sample_size` synthetic observations around the cutoff.

      x = c + U * 100 - 50                      (uniform on [c-50, c+50))
      y = 50 + slope*(x-c) + curvature*0.01*(x-c)^2 + effect*[x >= c] + (U - 0.5)*noise*5

    The noise term is uniform, not Gaussian. All `sample_size` x draws are taken
    from `rng` before the `sample_size` noise draws. Observations are returned
    sorted by x (stable sort) and carry their generation index as `id`.
    """
    n = int(config.sample_size)
    if n <= 0:
        return []

    u_x = np.asarray(rng.random(n), dtype=float)
    u_noise = np.asarray(rng.random(n), dtype=float)

    x = config.cutoff + (u_x * 2 * RUNNING_VARIABLE_HALF_WIDTH - RUNNING_VARIABLE_HALF_WIDTH)
    is_treated = x >= config.cutoff

    y = _signal(x - config.cutoff, config)
    y = y + np.where(is_treated, config.effect_size, 0.0)
    y = y + (u_noise - 0.5) * config.noise_level * NOISE_SCALE

    order = np.argsort(x, kind="stable")
    return [
        Observation(id=int(i), x=float(x[i]), y=float(y[i]), is_treated=bool(is_treated[i]))
        for i in order
    ]


def fit_group(x: Sequence[float], y: Sequence[float]) -> LinearFit:
    """
    Closed-form simple OLS of y on x.

    Fewer than two points, or no spread in x, leaves the line undefined; both
    cases return a flat LinearFit(0, 0) instead of a non-finite coefficient.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)
    if n < 2:
        return LinearFit(slope=0.0, intercept=0.0)

    if np.all(x == x[0]):
        return LinearFit(slope=0.0, intercept=0.0)

    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_xx = float(np.sum(x * x))

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0 or not np.isfinite(denom):
        return LinearFit(slope=0.0, intercept=0.0)

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return LinearFit(slope=float(slope), intercept=float(intercept))


def fit_piecewise(observations: Sequence[Observation]) -> Tuple[LinearFit, LinearFit]:
    """Fit the control side and the treated side independently. Returns (control, treated)."""
    control = [o for o in observations if not o.is_treated]
    treated = [o for o in observations if o.is_treated]

    control_fit = fit_group([o.x for o in control], [o.y for o in control])
    treated_fit = fit_group([o.x for o in treated], [o.y for o in treated])
    return control_fit, treated_fit


def annotate_fitted_values(
    observations: Sequence[Observation],
    control_fit: LinearFit,
    treated_fit: LinearFit,
    cutoff: float,
) -> List[Observation]:
    # Only one side's fitted value is set so a line plot breaks at the cutoff.
    annotated = []
    for obs in observations:
        if obs.x < cutoff:
            annotated.append(replace(obs, fitted_control=control_fit.predict(obs.x), fitted_treatment=None))
        else:
            annotated.append(replace(obs, fitted_control=None, fitted_treatment=treated_fit.predict(obs.x)))
    return annotated


def derive_dataset(
    config: SimulationConfig,
    rng=None,
    seed: Optional[int] = None,
) -> RddDataset:
    """
    Recompute the full dataset for one configuration: generate, fit both sides,
    attach fitted values. Each call is independent; pass `seed` (or an explicit
    numpy Generator) for reproducible output.
    """
    if rng is None:
        rng = np.random.default_rng(seed)

    observations = generate_rdd_data(config, rng)
    control_fit, treated_fit = fit_piecewise(observations)
    annotated = annotate_fitted_values(observations, control_fit, treated_fit, config.cutoff)
    jump = treated_fit.predict(config.cutoff) - control_fit.predict(config.cutoff)

    return RddDataset(
        config=config,
        observations=annotated,
        control_fit=control_fit,
        treated_fit=treated_fit,
        estimated_jump=float(jump),
    )


def dataset_to_frame(observations: Sequence[Observation]) -> pd.DataFrame:
    columns = ["id", "x", "y", "is_treated", "fitted_control", "fitted_treatment"]
    if not observations:
        return pd.DataFrame(columns=columns)

    return pd.DataFrame(
        {
            "id": [o.id for o in observations],
            "x": [o.x for o in observations],
            "y": [o.y for o in observations],
            "is_treated": [o.is_treated for o in observations],
            "fitted_control": [np.nan if o.fitted_control is None else o.fitted_control for o in observations],
            "fitted_treatment": [np.nan if o.fitted_treatment is None else o.fitted_treatment for o in observations],
        },
        columns=columns,
    )
