from pathlib import Path
import sys

from timetable_engine.cli.main import run_pipeline

root = Path(__file__).resolve().parents[1]


def main() -> None:
    request = Path(sys.argv[1]) if len(sys.argv) > 1 else root / "data" / "request.json"
    text, validation, audit = run_pipeline(request, config_path=root, outputs_dir=root / "outputs")
    print(text)
    print(validation)
    print(audit)


if __name__ == "__main__":
    main()
