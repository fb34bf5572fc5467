from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigError

SOLVERS = ("backtrack", "cpsat")


@dataclass(frozen=True)
class EngineConfig:
    # Insert a Lunch row mid-day when the request names no breaks
    default_break: bool = True
    default_break_label: str = "Lunch"
    # Backtrack steps allowed per dead end; None means teaching slots * subjects
    backtrack_budget: int | None = None
    timeout_sec: float | None = None
    solver: str = "backtrack"
    cpsat_workers: int = 1
    cpsat_seed: int = 0
    log_level: str = "INFO"


def _project_root() -> Path:
    # timetable_engine/config.py -> project root is parents[1]
    return Path(__file__).resolve().parents[1]


def _check_value(name: str, value: Any, default: Any) -> Any:
    if name == "backtrack_budget":
        if value is not None and (not isinstance(value, int) or isinstance(value, bool) or value < 0):
            raise ConfigError(f"expected a non-negative integer, got {value!r}", name)
        return value
    if name == "timeout_sec":
        if value is not None and (not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0):
            raise ConfigError(f"expected a positive number of seconds, got {value!r}", name)
        return None if value is None else float(value)
    if name == "solver" and value not in SOLVERS:
        raise ConfigError(f"expected one of {', '.join(SOLVERS)}, got {value!r}", name)
    if type(value) is not type(default):
        raise ConfigError(f"expected {type(default).__name__}, got {value!r}", name)
    return value


def config_from_dict(data: Dict[str, Any], base: EngineConfig | None = None) -> EngineConfig:
    base = base or EngineConfig()
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown keys {unknown}", "engine config")
    values = {k: _check_value(k, v, getattr(base, k)) for k, v in data.items()}
    return replace(base, **values)


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Load engine settings from configs/engine.toml if present, else defaults.

    ``path`` may point at a TOML file or at a project root holding
    ``configs/engine.toml``. Keys may sit at the top level or under
    ``[engine]``. TOML has no null, so leave ``backtrack_budget`` and
    ``timeout_sec`` out to keep their defaults.
    """
    base = EngineConfig()
    target = _project_root() if path is None else Path(path)
    cfg = target if target.suffix == ".toml" else target / "configs" / "engine.toml"
    if not cfg.exists():
        return base
    try:
        data: Dict[str, Any] = tomllib.loads(cfg.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{cfg}: {e}", "engine config") from e
    section = data.get("engine") if isinstance(data.get("engine"), dict) else data
    return config_from_dict(section, base)
