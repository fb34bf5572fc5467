from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from ..config import EngineConfig, config_from_dict, load_config
from ..data.loader import load_json, load_request
from ..errors import (
    Cancelled,
    ConfigError,
    ConstraintConflict,
    SolverError,
    TimetableError,
    ValidationError,
)
from ..generate import generate, prepare
from ..models.timetable import Schedule
from ..render.csv_out import csv_grid, write_csv_grid
from ..render.text_out import dumps, text_table
from ..validate.checks import validate_all
from ..validate.report import format_validation_report, write_validation_report

EXIT_CODES = {
    ConfigError: 2,
    ConstraintConflict: 2,
    SolverError: 3,
    Cancelled: 4,
    ValidationError: 5,
}


def _setup_logging(level: str | int = logging.INFO, log_file: Path | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def _resolve_config(
    config_path: Path | None,
    *,
    solver: str | None = None,
    timeout: float | None = None,
) -> EngineConfig:
    config = load_config(config_path)
    overrides = {}
    if solver is not None:
        overrides["solver"] = solver
    if timeout is not None:
        overrides["timeout_sec"] = timeout
    return config_from_dict(overrides, config) if overrides else config


def _write_outputs(schedule: Schedule, report: dict, audit_text: str, outputs_dir: Path) -> None:
    write_validation_report(report, outputs_dir)
    write_csv_grid(csv_grid(schedule), outputs_dir)
    with (outputs_dir / "schedule.json").open("w", encoding="utf-8") as f:
        f.write(dumps(schedule))
    with (outputs_dir / "audit.txt").open("w", encoding="utf-8") as f:
        f.write(audit_text)


def run_pipeline(
    request_path: Path,
    *,
    config_path: Path | None = None,
    solver: str | None = None,
    timeout: float | None = None,
    outputs_dir: Path | None = None,
) -> tuple[str, str, str]:
    """Generate, validate and render; returns (text table, validation, audit)."""
    config = _resolve_config(config_path, solver=solver, timeout=timeout)
    request = load_request(request_path)
    result = generate(request, config=config)
    schedule, plan = result.schedule, result.plan

    report = validate_all(schedule, plan.registry, plan.subjects)
    text = text_table(schedule)
    audit_text = "\n".join(["Placements:"] + result.audit)

    if outputs_dir is not None:
        _write_outputs(schedule, report, audit_text, outputs_dir)

    return text, format_validation_report(report), audit_text


def _fail(e: TimetableError) -> typer.Exit:
    logging.getLogger(__name__).error(str(e))
    for cls, code in EXIT_CODES.items():
        if isinstance(e, cls):
            return typer.Exit(code)
    return typer.Exit(1)


app = typer.Typer(add_completion=False, help="Weekly class timetable generator")


@app.command("generate")
def cli_generate(
    request: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request JSON file"),
    fmt: str = typer.Option("text", "--format", help="Output format: text, json or csv"),
    solver: Optional[str] = typer.Option(None, help="Solver backend: backtrack or cpsat"),
    timeout: Optional[float] = typer.Option(None, help="Abort after this many seconds"),
    config: Optional[Path] = typer.Option(None, help="Engine TOML config (file or project root)"),
    outputs: Optional[Path] = typer.Option(None, help="Also write outputs into this directory"),
    log_level: Optional[str] = typer.Option(None, help="Log level (default from config)"),
    log_file: Optional[Path] = typer.Option(None, help="Also log to this file"),
) -> None:
    _setup_logging(log_level or "INFO", log_file)
    if fmt not in {"text", "json", "csv"}:
        raise typer.BadParameter(f"unknown format {fmt!r}", param_hint="--format")
    try:
        engine_config = _resolve_config(config, solver=solver, timeout=timeout)
        if log_level is None:
            _setup_logging(engine_config.log_level, log_file)
        result = generate(load_request(request), config=engine_config)
    except TimetableError as e:
        raise _fail(e)
    schedule = result.schedule
    if outputs is not None:
        report = validate_all(schedule, result.plan.registry, result.plan.subjects)
        _write_outputs(schedule, report, "\n".join(["Placements:"] + result.audit), outputs)
    if fmt == "json":
        print(dumps(schedule))
    elif fmt == "csv":
        print(csv_grid(schedule), end="")
    else:
        print(text_table(schedule), end="")
        for w in schedule.warnings:
            print(f"warning: {w.message}")


@app.command("validate")
def cli_validate(
    request: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request JSON file"),
    schedule: Path = typer.Argument(..., exists=True, dir_okay=False, help="Schedule JSON to check"),
    config: Optional[Path] = typer.Option(None, help="Engine TOML config (file or project root)"),
    log_level: Optional[str] = typer.Option(None, help="Log level (default from config)"),
) -> None:
    _setup_logging(log_level or "INFO")
    try:
        engine_config = _resolve_config(config)
        if log_level is None:
            _setup_logging(engine_config.log_level)
        plan = prepare(load_request(request), engine_config)
        parsed = Schedule.from_dict(load_json(schedule))
    except TimetableError as e:
        raise _fail(e)
    except json.JSONDecodeError as e:
        logging.getLogger(__name__).error(f"{schedule}: {e}")
        raise typer.Exit(2)
    report = validate_all(parsed, plan.registry, plan.subjects)
    print(format_validation_report(report))
    if report["violation_count"]:
        raise typer.Exit(EXIT_CODES[ValidationError])


@app.command("export-csv")
def cli_export_csv(
    request: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request JSON file"),
    config: Optional[Path] = typer.Option(None, help="Engine TOML config (file or project root)"),
    log_level: Optional[str] = typer.Option(None, help="Log level (default from config)"),
) -> None:
    _setup_logging(log_level or "INFO")
    try:
        engine_config = _resolve_config(config)
        if log_level is None:
            _setup_logging(engine_config.log_level)
        result = generate(load_request(request), config=engine_config)
    except TimetableError as e:
        raise _fail(e)
    print(csv_grid(result.schedule), end="")


if __name__ == "__main__":
    app()
