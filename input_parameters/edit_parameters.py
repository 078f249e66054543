import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config import PARAMETER_FIELDS, PARAMETER_RANGES, SAMPLE_SIZE_OPTIONS
from io_utils import _as_float, simulation_block, validate_params


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Interactive editor for input_parameters/simulation_parameters.json"
    )
    parser.add_argument(
        "--path",
        type=Path,
        default=Path("input_parameters") / "simulation_parameters.json",
        help="Path to simulation_parameters.json",
    )
    return parser.parse_args()


def _print_params(params: dict) -> None:
    print("\nSimulation parameters:")
    print(" idx | parameter    |      value | range")
    print("-----+--------------+------------+---------------------")
    for idx, field in enumerate(PARAMETER_FIELDS, start=1):
        value = params.get(field, "<missing>")
        if field in PARAMETER_RANGES:
            low, high, step = PARAMETER_RANGES[field]
            bounds = f"{low:g} .. {high:g} (step {step:g})"
        else:
            bounds = " / ".join(str(opt) for opt in SAMPLE_SIZE_OPTIONS)
        print(f"{idx:>4} | {field:<12} | {str(value):>10} | {bounds}")


def _choose_index(max_value: int, prompt: str) -> int | None:
    raw = input(prompt).strip().lower()
    if raw in {"q", "quit", "back", "b"}:
        return None
    try:
        idx = int(raw)
    except ValueError:
        print("Invalid input. Enter a number or 'q' to go back.")
        return None
    if idx < 1 or idx > max_value:
        print(f"Out of range. Choose between 1 and {max_value}.")
        return None
    return idx - 1


def _edit_param(params: dict) -> bool:
    _print_params(params)
    field_idx = _choose_index(len(PARAMETER_FIELDS), "Parameter index (or q to cancel): ")
    if field_idx is None:
        return False

    field = PARAMETER_FIELDS[field_idx]
    raw = input(f"New value for {field} (current {params.get(field)}): ").strip()
    try:
        value = _as_float(raw, field)
    except ValueError as exc:
        print(exc)
        return False

    if field == "sample_size":
        if not value.is_integer() or value <= 0:
            print("sample_size must be a positive integer.")
            return False
        params[field] = int(value)
    else:
        low, high, _step = PARAMETER_RANGES[field]
        if not (low <= value <= high):
            print(f"{field} must be between {low:g} and {high:g}.")
            return False
        params[field] = value

    print(f"Updated {field}.")
    return True


def _save(path: Path, cfg: dict) -> Path:
    backup_path = path.with_suffix(path.suffix + ".bak")
    backup_path.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
    path.write_text(json.dumps(cfg, indent=2) + "\n", encoding="utf-8")
    return backup_path


def main() -> None:
    args = parse_args()
    if not args.path.exists():
        raise FileNotFoundError(f"Missing parameter file: {args.path}")

    cfg = json.loads(args.path.read_text(encoding="utf-8"))
    params = simulation_block(cfg)
    has_unsaved_changes = False

    while True:
        print("\nSimulation Parameter Editor")
        print("1) List parameters")
        print("2) Edit parameter")
        print("3) Validate")
        print("4) Save")
        exit_label = "Exit without saving" if has_unsaved_changes else "Exit"
        print(f"5) {exit_label}")
        choice = input("Choose option: ").strip()

        if choice == "1":
            _print_params(params)
        elif choice == "2":
            has_unsaved_changes = _edit_param(params) or has_unsaved_changes
        elif choice == "3":
            errors = validate_params(cfg)
            if errors:
                print("\nValidation errors:")
                for err in errors:
                    print(f"- {err}")
            else:
                print("Validation passed.")
        elif choice == "4":
            errors = validate_params(cfg)
            if errors:
                print("\nCannot save due to validation errors:")
                for err in errors:
                    print(f"- {err}")
                continue

            backup_path = _save(args.path, cfg)
            print(f"Saved: {args.path}")
            print(f"Backup: {backup_path}")
            has_unsaved_changes = False
        elif choice == "5":
            if has_unsaved_changes:
                print("Exited without saving.")
            else:
                print("Exited.")
            break
        else:
            print("Invalid choice.")


if __name__ == "__main__":
    main()
