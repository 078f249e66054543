import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent
PARAMS_PATH = ROOT / "input_parameters" / "simulation_parameters.json"

sys.path.insert(0, str(ROOT / "src"))


def _run_script(script: str, extra_args: list[str] | None = None) -> None:
    cmd = [sys.executable, str(ROOT / script)]
    if extra_args:
        cmd.extend(extra_args)
    print(f"\nRunning: {' '.join(cmd)}")
    subprocess.run(cmd, check=True)


def run_generation() -> None:
    seed = input("Random seed [42]: ").strip()
    _run_script("main.py", ["--seed", seed] if seed else None)
    print("\nDataset generation completed.")


def run_editor() -> None:
    _run_script("input_parameters/edit_parameters.py", ["--path", str(PARAMS_PATH)])


def run_explanation() -> None:
    from explainer import build_explanation_client, get_rdd_explanation
    from io_utils import config_from_params, load_params

    config = config_from_params(load_params(str(PARAMS_PATH)), enforce_ranges=False)
    print("\n" + get_rdd_explanation(config, build_explanation_client()))


def main() -> None:
    while True:
        print("\nChoose action:")
        print("1) Generate dataset")
        print("2) Edit simulation parameters")
        print("3) AI explanation of current parameters")
        print("4) Exit")
        choice = input("Enter 1, 2, 3 or 4: ").strip()

        if choice == "1":
            run_generation()
        elif choice == "2":
            run_editor()
        elif choice == "3":
            run_explanation()
        elif choice == "4":
            print("Exiting pipeline menu.")
            break
        else:
            print("Invalid choice. Please select 1, 2, 3 or 4.")


if __name__ == "__main__":
    main()
