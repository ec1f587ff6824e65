"""
File-scanning module index.

Walks a project tree once per scan, records every manifest and every sidecar
identifier, and answers lookups from those tables until ``refresh`` is called.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

from core.reference_contract import make_stable_identifier
from module_index.config import (
    MANIFEST_EXTENSION,
    META_EXTENSION,
    META_GUID_KEY,
    SKIP_DIRS,
)
from module_index.snapshot import manifest_stem

logger = logging.getLogger(__name__)


class IndexScanStats:
    """Statistics for one project scan."""

    def __init__(self):
        self.manifests_found = 0
        self.sidecars_read = 0
        self.sidecars_failed = 0
        self.derived_identifiers = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "manifests_found": self.manifests_found,
            "sidecars_read": self.sidecars_read,
            "sidecars_failed": self.sidecars_failed,
            "derived_identifiers": self.derived_identifiers,
        }

    def __str__(self) -> str:
        return (
            f"IndexScanStats(manifests={self.manifests_found}, "
            f"sidecars={self.sidecars_read}, failed={self.sidecars_failed}, "
            f"derived={self.derived_identifiers})"
        )


def read_sidecar_identifier(meta_path: Path) -> Optional[str]:
    """Read the identifier stored in a ``.meta`` sidecar.

    Returns None when the sidecar has no usable identifier.

    Raises:
        OSError: If the sidecar cannot be read.
        yaml.YAMLError: If the sidecar is not valid YAML.
    """
    with open(meta_path, "r", encoding="utf-8") as f:
        # BaseLoader keeps every scalar a string; hex digests with leading
        # zeros would otherwise be read as octal integers.
        payload = yaml.load(f, Loader=yaml.BaseLoader)
    if not isinstance(payload, dict):
        return None
    raw = payload.get(META_GUID_KEY)
    if raw is None:
        return None
    identifier = str(raw).strip()
    return identifier or None


class FileModuleIndex:
    """Module index backed by a scan of the project directory."""

    def __init__(
        self,
        project_root: str | Path,
        manifest_extension: str = MANIFEST_EXTENSION,
    ):
        self.project_root = Path(project_root).resolve()
        self.manifest_extension = manifest_extension
        self.stats = IndexScanStats()
        self._manifests: List[Path] = []
        self._path_to_id: Dict[Path, str] = {}
        self._id_to_path: Dict[str, Path] = {}
        self.refresh()

    def _is_manifest(self, file_name: str) -> bool:
        return file_name.lower().endswith(self.manifest_extension.lower())

    def _walk(self) -> List[Path]:
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for name in sorted(filenames):
                found.append(Path(dirpath) / name)
        return found

    def _register(self, path: Path, identifier: str) -> None:
        existing = self._id_to_path.get(identifier)
        if existing is not None and existing != path:
            logger.warning(
                "Duplicate identifier %s for %s and %s; keeping first",
                identifier,
                existing,
                path,
            )
            return
        self._id_to_path[identifier] = path
        self._path_to_id[path] = identifier

    def refresh(self) -> None:
        """Re-scan the project tree and rebuild every lookup table."""
        stats = IndexScanStats()
        manifests: List[Path] = []
        self._path_to_id = {}
        self._id_to_path = {}

        files = self._walk()
        existing = set(files)
        for path in files:
            if path.name.endswith(META_EXTENSION):
                target = path.with_name(path.name[: -len(META_EXTENSION)])
                if target not in existing:
                    continue
                try:
                    identifier = read_sidecar_identifier(path)
                except (OSError, yaml.YAMLError) as exc:
                    stats.sidecars_failed += 1
                    logger.warning("Skipping unreadable sidecar %s: %s", path, exc)
                    continue
                if identifier:
                    stats.sidecars_read += 1
                    self._register(target, identifier)
            elif self._is_manifest(path.name):
                manifests.append(path)

        for path in manifests:
            if path not in self._path_to_id:
                relative = path.relative_to(self.project_root)
                stats.derived_identifiers += 1
                self._register(path, make_stable_identifier(relative))

        manifests.sort()
        self._manifests = manifests
        stats.manifests_found = len(manifests)
        self.stats = stats
        logger.info("Indexed %s: %s", self.project_root, stats)

    def enumerate_manifests(self, root: Path) -> Sequence[Path]:
        scan_root = Path(root).resolve()
        return [
            path for path in self._manifests
            if path == scan_root or scan_root in path.parents
        ]

    def name_to_path(self, name: str) -> Optional[Path]:
        for path in self._manifests:
            if manifest_stem(path, self.manifest_extension) == name:
                return path
        return None

    def path_to_identifier(self, path: Path) -> str:
        return self._path_to_id[Path(path).resolve()]

    def identifier_to_path(self, identifier: str) -> Optional[Path]:
        return self._id_to_path.get(identifier)
