import argparse
import json
from pathlib import Path
import sys

# Allow running without installing the package.
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from io_utils import config_from_params, load_params
from simulator import dataset_to_frame, derive_dataset
from charts import render_rdd_chart


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic regression discontinuity dataset with piecewise OLS fits"
    )
    parser.add_argument(
        "--params",
        type=Path,
        default=Path("input_parameters") / "simulation_parameters.json",
        help="Path to simulation_parameters.json",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("outputs") / "simulator",
        help="Directory for the dataset, metadata and chart",
    )
    parser.add_argument("--no-chart", action="store_true", help="Skip the PNG chart")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    params = load_params(str(args.params))
    config = config_from_params(params, enforce_ranges=False)

    dataset = derive_dataset(config, seed=args.seed)

    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    data_path = output_dir / "rdd_dataset.csv"
    dataset_to_frame(dataset.observations).to_csv(data_path, index=False)

    n_treated = sum(1 for o in dataset.observations if o.is_treated)
    meta_path = output_dir / "rdd_metadata.json"
    meta_payload = {
        "config": config.to_dict(),
        "seed": args.seed,
        "counts": {
            "total": len(dataset.observations),
            "control": len(dataset.observations) - n_treated,
            "treated": n_treated,
        },
        "control_fit": {"slope": dataset.control_fit.slope, "intercept": dataset.control_fit.intercept},
        "treated_fit": {"slope": dataset.treated_fit.slope, "intercept": dataset.treated_fit.intercept},
        "estimated_jump": dataset.estimated_jump,
    }
    meta_path.write_text(json.dumps(meta_payload, indent=2) + "\n", encoding="utf-8")

    print(f"Saved: {data_path}")
    print(f"Saved: {meta_path}")

    if not args.no_chart:
        chart_path = output_dir / "rdd_chart.png"
        render_rdd_chart(dataset, chart_path)
        print(f"Saved: {chart_path}")

    print(
        f"True effect: {config.effect_size:g} | estimated jump at cutoff: {dataset.estimated_jump:.4f}"
    )


if __name__ == "__main__":
    main()
