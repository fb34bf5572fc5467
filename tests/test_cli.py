from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from timetable_engine.cli.main import app

runner = CliRunner()


def _request(tmp_path: Path, **overrides) -> Path:
    data = {"workingDays": 5, "classesPerDay": 4, "subjects": ["Math", "Art"], "teachersPerSubject": [2, 2]}
    data.update(overrides)
    path = tmp_path / "request.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_generate_json(tmp_path: Path) -> None:
    result = runner.invoke(app, ["generate", str(_request(tmp_path)), "--format", "json", "--log-level", "ERROR"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["days"][0] == "Monday"
    assert data["periods"][2] == "Lunch"
    assert data["schedule"][0][0] == "Math - Math-Teacher-1"
    assert data["warnings"] == []


def test_generate_text_writes_outputs(tmp_path: Path) -> None:
    out = tmp_path / "outputs"
    result = runner.invoke(
        app, ["generate", str(_request(tmp_path)), "--outputs", str(out), "--log-level", "ERROR"]
    )
    assert result.exit_code == 0
    assert result.stdout.startswith("Timetable")
    for name in ("validation.json", "timetable.csv", "schedule.json", "audit.txt"):
        assert (out / name).exists()


def test_generate_bad_request_exits_2(tmp_path: Path) -> None:
    result = runner.invoke(app, ["generate", str(_request(tmp_path, workingDays=0)), "--log-level", "CRITICAL"])
    assert result.exit_code == 2


def test_generate_unknown_solver_exits_2(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["generate", str(_request(tmp_path)), "--solver", "greedy", "--log-level", "CRITICAL"]
    )
    assert result.exit_code == 2


def test_generate_no_placeable_subject_exits_3(tmp_path: Path) -> None:
    path = _request(tmp_path, constraints=[{"type": "forbidden_slot", "subject": "Math"}, {"type": "forbidden_slot", "subject": "Art"}])
    result = runner.invoke(app, ["generate", str(path), "--log-level", "CRITICAL"])
    assert result.exit_code == 3


def test_validate_accepts_generated_and_rejects_tampered(tmp_path: Path) -> None:
    request = _request(tmp_path)
    generated = runner.invoke(app, ["generate", str(request), "--format", "json", "--log-level", "ERROR"])
    data = json.loads(generated.stdout)
    schedule = tmp_path / "schedule.json"
    schedule.write_text(json.dumps(data), encoding="utf-8")

    ok = runner.invoke(app, ["validate", str(request), str(schedule), "--log-level", "ERROR"])
    assert ok.exit_code == 0
    assert "violation_count: 0" in ok.stdout

    data["schedule"][1][0] = data["schedule"][0][0]
    schedule.write_text(json.dumps(data), encoding="utf-8")
    bad = runner.invoke(app, ["validate", str(request), str(schedule), "--log-level", "ERROR"])
    assert bad.exit_code == 5
    assert "double_booking" in bad.stdout


def test_validate_malformed_schedule_exits_2(tmp_path: Path) -> None:
    schedule = tmp_path / "schedule.json"
    schedule.write_text("[", encoding="utf-8")
    result = runner.invoke(app, ["validate", str(_request(tmp_path)), str(schedule), "--log-level", "CRITICAL"])
    assert result.exit_code == 2


def test_validate_non_object_schedule_exits_2(tmp_path: Path) -> None:
    schedule = tmp_path / "schedule.json"
    schedule.write_text("[1, 2]", encoding="utf-8")
    result = runner.invoke(app, ["validate", str(_request(tmp_path)), str(schedule), "--log-level", "CRITICAL"])
    assert result.exit_code == 2
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_export_csv(tmp_path: Path) -> None:
    result = runner.invoke(app, ["export-csv", str(_request(tmp_path)), "--log-level", "ERROR"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == "Period,Monday,Tuesday,Wednesday,Thursday,Friday"
    assert len(lines) == 6
