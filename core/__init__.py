"""Core shared contracts and utilities."""

from core.reference_contract import (
    IDENTIFIER_PREFIX,
    is_identifier_reference,
    make_identifier_reference,
    make_stable_identifier,
    parse_identifier_reference,
)
from core.structured_logging import (
    configure_structured_logging,
    get_run_id,
    manifest_scope,
    phase_scope,
    set_run_id,
)
from core.settings import (
    ConfigValidationError,
    NormalizerSettings,
    load_environment,
    load_settings_file,
    resolve_settings,
    resolve_strict_config_validation,
)
from core.run_artifacts import write_run_report
from core.manifest_document import (
    ManifestDocument,
    ManifestParseError,
    load_manifest_document,
    parse_manifest_text,
    render_manifest_document,
    save_manifest_document,
)

__all__ = [
    "IDENTIFIER_PREFIX",
    "is_identifier_reference",
    "make_identifier_reference",
    "make_stable_identifier",
    "parse_identifier_reference",
    "configure_structured_logging",
    "get_run_id",
    "manifest_scope",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "NormalizerSettings",
    "load_environment",
    "load_settings_file",
    "resolve_settings",
    "resolve_strict_config_validation",
    "write_run_report",
    "ManifestDocument",
    "ManifestParseError",
    "load_manifest_document",
    "parse_manifest_text",
    "render_manifest_document",
    "save_manifest_document",
]
