from __future__ import annotations

from typing import BinaryIO, Union
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from simulator import RddDataset, dataset_to_frame


CONTROL_COLOR = "#38bdf8"
TREATED_COLOR = "#facc15"
CUTOFF_COLOR = "#e879f9"


def render_rdd_chart(dataset: RddDataset, target: Union[str, Path, BinaryIO], dpi: int = 150) -> None:
    """Scatter of the observations, one fitted line per side and a dashed cutoff marker."""
    df = dataset_to_frame(dataset.observations)
    cutoff = dataset.config.cutoff

    fig, ax = plt.subplots(figsize=(9, 5))

    if not df.empty:
        control = df[~df["is_treated"].astype(bool)]
        treated = df[df["is_treated"].astype(bool)]
        ax.scatter(control["x"], control["y"], color=CONTROL_COLOR, alpha=0.6, s=18, label="Control")
        ax.scatter(treated["x"], treated["y"], color=TREATED_COLOR, alpha=0.6, s=18, label="Treated")

        # NaN rows break each line at the cutoff.
        ax.plot(df["x"], df["fitted_control"], color=CONTROL_COLOR, linewidth=2.5, label="Control fit")
        ax.plot(df["x"], df["fitted_treatment"], color=TREATED_COLOR, linewidth=2.5, label="Treated fit")

    ax.axvline(cutoff, color=CUTOFF_COLOR, linestyle="--", linewidth=2)
    ax.annotate(
        "Cutoff (c)",
        xy=(cutoff, 1.0),
        xycoords=("data", "axes fraction"),
        xytext=(-6, -14),
        textcoords="offset points",
        ha="right",
        color=CUTOFF_COLOR,
    )

    ax.set_xlabel("Running variable (x)")
    ax.set_ylabel("Outcome (y)")
    ax.set_title(f"Regression Discontinuity (estimated jump {dataset.estimated_jump:.2f})")
    ax.grid(axis="y", linestyle=":", alpha=0.5)
    ax.legend(loc="upper left")

    fig.tight_layout()
    fig.savefig(target, dpi=dpi, format="png")
    plt.close(fig)
