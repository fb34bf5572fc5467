from __future__ import annotations

import json
from pathlib import Path
from typing import Dict


def write_validation_report(report: Dict[str, object], outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / "validation.json"
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    return path


def format_validation_report(report: Dict[str, object]) -> str:
    lines: list[str] = []
    lines.append(f"violation_count: {report.get('violation_count')}")
    violations = report.get("violations_by_rule", {})
    lines.append("violations_by_rule:")
    if isinstance(violations, dict):
        for k, v in violations.items():
            lines.append(f"  - {k}: {len(v)}")
            for msg in v[:3]:
                lines.append(f"      {msg}")
    lines.append("subject_load:")
    load = report.get("subject_load", {})
    if isinstance(load, dict):
        for subj, v in load.items():
            lines.append(f"  - {subj}: {v['assigned']} / target {v['target']}")
    lines.append(f"empty_teaching_slots: {report.get('empty_teaching_slots')}")
    for w in report.get("warnings", []) or []:
        lines.append(f"warning: {w}")
    return "\n".join(lines)
