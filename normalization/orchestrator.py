"""
Injection orchestrator: apply the normalizer to every manifest of a project.

Each run locates the common manifest, captures an index snapshot, normalizes
every other manifest under the scan root, writes only the manifests whose
reference list actually changed and finally asks the index to refresh.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.manifest_document import load_manifest_document, save_manifest_document
from core.settings import NormalizerSettings
from core.structured_logging import manifest_scope, phase_scope
from module_index.contracts import ModuleIndex
from module_index.snapshot import IndexSnapshot, manifest_stem
from normalization.normalizer import (
    InvalidResolutionContextError,
    ResolutionContext,
    normalize_references,
)

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_COMPLETED_WITH_ERRORS = "completed_with_errors"
STATUS_COMMON_MODULE_MISSING = "common_module_missing"


class InjectionStats:
    """Statistics for one normalization run."""

    def __init__(self):
        self.status = STATUS_COMPLETED
        self.dry_run = False
        self.common_manifest: Optional[str] = None
        self.manifests_scanned = 0
        self.manifests_skipped = 0
        self.manifests_unchanged = 0
        self.manifests_updated = 0
        self.manifests_failed = 0
        self.references_converted = 0
        self.references_dropped = 0
        self.references_injected = 0
        self.updated_paths: List[str] = []
        self.failures: List[Dict[str, str]] = []

    @property
    def has_changes(self) -> bool:
        return self.manifests_updated > 0

    def record_failure(self, path: Path, stage: str, exc: Exception) -> None:
        self.manifests_failed += 1
        self.failures.append({"path": str(path), "stage": stage, "error": str(exc)})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "dry_run": self.dry_run,
            "common_manifest": self.common_manifest,
            "manifests_scanned": self.manifests_scanned,
            "manifests_skipped": self.manifests_skipped,
            "manifests_unchanged": self.manifests_unchanged,
            "manifests_updated": self.manifests_updated,
            "manifests_failed": self.manifests_failed,
            "references_converted": self.references_converted,
            "references_dropped": self.references_dropped,
            "references_injected": self.references_injected,
            "updated_paths": list(self.updated_paths),
            "failures": list(self.failures),
        }

    def __str__(self) -> str:
        return (
            f"InjectionStats(status={self.status}, scanned={self.manifests_scanned}, "
            f"updated={self.manifests_updated}, unchanged={self.manifests_unchanged}, "
            f"failed={self.manifests_failed}, dropped={self.references_dropped})"
        )


def is_common_manifest(path: Path, common_file_name: str) -> bool:
    return path.name.lower() == common_file_name.lower()


def locate_common_manifest(index: ModuleIndex, settings: NormalizerSettings) -> Optional[Path]:
    """Resolve the common manifest file name to a path through the index.

    The exact name is tried first; otherwise the first manifest of the project
    whose file name matches ignoring case is used.
    """
    name = manifest_stem(Path(settings.common_manifest_file), settings.manifest_extension)
    path = index.name_to_path(name)
    if path is not None and is_common_manifest(path, settings.common_manifest_file):
        return path
    for candidate in index.enumerate_manifests(settings.root_path):
        if is_common_manifest(candidate, settings.common_manifest_file):
            return candidate
    return None


def references_equal(original: List[str], updated: List[str]) -> bool:
    """Ordered, element-wise comparison; a reordering counts as a change."""
    if len(original) != len(updated):
        return False
    return all(a == b for a, b in zip(original, updated))


def _process_manifest(
    path: Path,
    context: ResolutionContext,
    stats: InjectionStats,
    dry_run: bool,
) -> None:
    try:
        document = load_manifest_document(path)
    except Exception as exc:
        stats.record_failure(path, "load", exc)
        logger.error("Failed to load manifest %s: %s", path, exc, exc_info=True)
        return

    result = normalize_references(document.references, context)
    stats.references_converted += result.converted
    stats.references_dropped += len(result.dropped)
    if result.dropped:
        logger.info(
            "Dropped %d unresolvable reference(s) from %s: %s",
            len(result.dropped),
            document.name or path.name,
            ", ".join(result.dropped),
        )

    if references_equal(document.references, result.references):
        stats.manifests_unchanged += 1
        logger.debug("References already canonical: %s", path)
        return

    if result.injected_common:
        stats.references_injected += 1

    if dry_run:
        stats.manifests_updated += 1
        stats.updated_paths.append(str(path))
        logger.info("Would update references of %s (dry run)", path)
        return

    try:
        save_manifest_document(document, result.references)
    except Exception as exc:
        stats.record_failure(path, "write", exc)
        logger.error("Failed to write manifest %s: %s", path, exc, exc_info=True)
        return

    stats.manifests_updated += 1
    stats.updated_paths.append(str(path))
    logger.info(
        "Updated references of %s (%d reference(s))",
        path,
        len(result.references),
    )


def inject_common_references(
    index: ModuleIndex,
    settings: NormalizerSettings,
    *,
    dry_run: bool = False,
) -> InjectionStats:
    """Normalize every manifest under the scan root.

    Running twice without intervening file changes performs no writes on the
    second run.

    Args:
        index: Module index for the project.
        settings: Resolved settings (scan root, common manifest name, ...).
        dry_run: Compute and report changes without writing or refreshing.

    Returns:
        Run statistics.

    Raises:
        InvalidResolutionContextError: If the common manifest was found but
            its identifier cannot anchor the run.
    """
    stats = InjectionStats()
    stats.dry_run = dry_run

    with phase_scope("locate_common"):
        common_path = locate_common_manifest(index, settings)
        if common_path is None:
            logger.warning(
                "Could not find %s; common module references will not be injected "
                "into other manifests",
                settings.common_manifest_file,
            )
            stats.status = STATUS_COMMON_MODULE_MISSING
            return stats
        stats.common_manifest = str(common_path)
        try:
            common_identifier = index.path_to_identifier(common_path)
        except KeyError as exc:
            raise InvalidResolutionContextError(
                f"common manifest {common_path} has no identifier in the index"
            ) from exc

    with phase_scope("snapshot"):
        snapshot = IndexSnapshot.capture(
            index, settings.scan_path, settings.manifest_extension
        )
        context = ResolutionContext(
            snapshot=snapshot,
            common_identifier=common_identifier,
            prefix=settings.identifier_prefix,
        )

    with phase_scope("normalize"):
        for path in snapshot.paths:
            stats.manifests_scanned += 1
            if is_common_manifest(path, settings.common_manifest_file):
                stats.manifests_skipped += 1
                continue
            with manifest_scope(path.name):
                _process_manifest(path, context, stats, dry_run)

    if stats.manifests_failed:
        stats.status = STATUS_COMPLETED_WITH_ERRORS

    if not dry_run:
        with phase_scope("refresh"):
            index.refresh()

    logger.info("Reference normalization finished: %s", stats)
    return stats
