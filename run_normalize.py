#!/usr/bin/env python3
"""
Normalize assembly manifest references across a project.

Every manifest under the scan directory is rewritten, only when needed, so
that it references the common module by identifier, carries no dangling or
duplicate references and lists them in a deterministic order.

Usage:
    python run_normalize.py --project-root /path/to/project
    python run_normalize.py --project-root . --scan-dir Assets/Scripts --check
    python run_normalize.py --config refsync.yml --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from core.run_artifacts import write_run_report
from core.settings import (
    DEFAULT_REPORT_DIR,
    ConfigValidationError,
    load_environment,
    resolve_settings,
    resolve_strict_config_validation,
)
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from module_index.file_index import FileModuleIndex
from normalization.orchestrator import inject_common_references

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inject the common module reference into every assembly manifest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_normalize.py --project-root ./MyGame\n"
            "  python run_normalize.py --project-root ./MyGame --check\n"
        ),
    )
    parser.add_argument(
        "--project-root",
        default=None,
        help="Project root directory. Default: REFSYNC_PROJECT_ROOT or '.'",
    )
    parser.add_argument(
        "--scan-dir",
        default=None,
        help="Directory (relative to the project root) whose manifests are normalized.",
    )
    parser.add_argument(
        "--common-manifest",
        default=None,
        help="File name of the common module manifest.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML settings file.",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Directory for the JSON run report.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Report manifests that would change without writing; exit 1 if any.",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail on missing or malformed settings files instead of using defaults.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def _finish(
    run_report: dict[str, Any],
    run_id: str,
    report_dir: Optional[str],
    exit_code: int,
) -> int:
    report_path = write_run_report(run_report, run_id, report_dir or DEFAULT_REPORT_DIR)
    logger.info("Run report written: %s", report_path)
    return exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_environment()
    args = parse_args(argv)
    configure_structured_logging(level=args.log_level)
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "normalize_references",
        "status": "failed",
    }
    report_dir = args.report_dir

    try:
        with phase_scope("settings"):
            settings = resolve_settings(
                config_path=args.config,
                overrides={
                    "project_root": args.project_root,
                    "scan_dir": args.scan_dir,
                    "common_manifest_file": args.common_manifest,
                    "report_dir": args.report_dir,
                },
                strict=args.strict_config,
            )
        report_dir = settings.report_dir
        run_report["settings"] = {
            "project_root": str(settings.root_path),
            "scan_dir": str(settings.scan_path),
            "common_manifest_file": settings.common_manifest_file,
        }

        with phase_scope("index"):
            index = FileModuleIndex(settings.root_path, settings.manifest_extension)
        stats = inject_common_references(index, settings, dry_run=args.check)
        run_report.update(stats.to_dict())
    except ConfigValidationError as exc:
        run_report["error"] = str(exc)
        logger.error("Invalid configuration: %s", exc)
        return _finish(run_report, run_id, report_dir, exit_code=1)
    except Exception as exc:
        run_report["error"] = str(exc)
        logger.error("Reference normalization failed: %s", exc, exc_info=True)
        return _finish(run_report, run_id, report_dir, exit_code=1)

    exit_code = 0
    if args.check and stats.has_changes:
        logger.warning("%d manifest(s) are not canonical", stats.manifests_updated)
        exit_code = 1
    return _finish(run_report, run_id, report_dir, exit_code=exit_code)


if __name__ == "__main__":
    sys.exit(main())
