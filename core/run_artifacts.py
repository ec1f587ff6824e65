"""Run report artifacts for normalization runs."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str | Path = "output/run_reports",
) -> str:
    """Write ``report`` as ``<output_dir>/<run_id>.json`` and return the path."""
    target_dir = Path(output_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = target_dir / f"{run_id}.json"
    path.write_text(
        json.dumps(payload, indent=2, sort_keys=True, default=str) + "\n",
        encoding="utf-8",
    )
    return str(path)
