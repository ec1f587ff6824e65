"""Normalizer settings resolution.

Settings come from, in increasing precedence: built-in defaults, an optional
YAML settings file, ``REFSYNC_*`` environment variables (a ``.env`` file is
honoured via python-dotenv) and explicit overrides from the command line.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from core.reference_contract import IDENTIFIER_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_SCAN_DIR = "Assets/Scripts"
DEFAULT_COMMON_MANIFEST = "Solution.Common.Runtime.asmdef"
DEFAULT_MANIFEST_EXTENSION = ".asmdef"
DEFAULT_REPORT_DIR = "output/run_reports"

_ENV_FIELDS = {
    "project_root": "REFSYNC_PROJECT_ROOT",
    "scan_dir": "REFSYNC_SCAN_DIR",
    "common_manifest_file": "REFSYNC_COMMON_MANIFEST",
    "manifest_extension": "REFSYNC_MANIFEST_EXTENSION",
    "report_dir": "REFSYNC_REPORT_DIR",
}


class ConfigValidationError(RuntimeError):
    """Raised when strict settings validation fails."""


@dataclass(frozen=True)
class NormalizerSettings:
    """Resolved settings for one normalization run."""

    project_root: str = "."
    scan_dir: str = DEFAULT_SCAN_DIR
    common_manifest_file: str = DEFAULT_COMMON_MANIFEST
    manifest_extension: str = DEFAULT_MANIFEST_EXTENSION
    identifier_prefix: str = IDENTIFIER_PREFIX
    report_dir: str = DEFAULT_REPORT_DIR

    @property
    def root_path(self) -> Path:
        return Path(self.project_root).resolve()

    @property
    def scan_path(self) -> Path:
        raw = Path(self.scan_dir)
        return raw if raw.is_absolute() else self.root_path / raw


def load_environment() -> None:
    """Load ``.env`` into the process environment; existing variables win."""
    load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def load_settings_file(path: str, strict: bool = False) -> dict[str, Any]:
    """Load a YAML settings file.

    In non-strict mode read/parse problems are logged and an empty mapping is
    returned. In strict mode they raise ``ConfigValidationError``.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Settings file not found: {path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse settings YAML at {path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected settings payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def _coerce_payload(payload: dict[str, Any], strict: bool) -> dict[str, str]:
    known = {f.name for f in fields(NormalizerSettings)}
    values: dict[str, str] = {}
    for key, raw in payload.items():
        if key not in known:
            msg = f"Unknown settings key '{key}'"
            if strict:
                raise ConfigValidationError(msg)
            logger.warning("%s; ignoring", msg)
            continue
        if raw is None:
            continue
        values[key] = str(raw).strip()
    return values


def _validate(settings: NormalizerSettings) -> None:
    if not settings.common_manifest_file:
        raise ConfigValidationError("common_manifest_file must be non-empty")
    if not settings.manifest_extension.startswith("."):
        raise ConfigValidationError(
            f"manifest_extension must start with '.': {settings.manifest_extension}"
        )
    if not settings.common_manifest_file.lower().endswith(
        settings.manifest_extension.lower()
    ):
        raise ConfigValidationError(
            f"common_manifest_file '{settings.common_manifest_file}' does not use "
            f"extension '{settings.manifest_extension}'"
        )
    if not settings.identifier_prefix:
        raise ConfigValidationError("identifier_prefix must be non-empty")


def resolve_settings(
    config_path: Optional[str] = None,
    overrides: Optional[dict[str, Any]] = None,
    strict: Optional[bool] = None,
) -> NormalizerSettings:
    """Resolve settings from file, environment and explicit overrides."""
    load_environment()
    if strict is None:
        strict = resolve_strict_config_validation(default=False)

    values: dict[str, str] = {}
    if config_path:
        values.update(_coerce_payload(load_settings_file(config_path, strict=strict), strict))

    for field_name, env_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    for key, raw in (overrides or {}).items():
        if raw is not None:
            values[key] = str(raw)

    settings = replace(NormalizerSettings(), **_coerce_payload(values, strict=True))
    _validate(settings)
    logger.debug("Resolved settings: %s", settings)
    return settings
