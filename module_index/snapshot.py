"""Run-scoped, read-only view over a module index."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from module_index.config import MANIFEST_EXTENSION
from module_index.contracts import ModuleIndex

logger = logging.getLogger(__name__)


def manifest_stem(path: Path, manifest_extension: str = MANIFEST_EXTENSION) -> str:
    """Return the module name of a manifest path (file name minus extension)."""
    name = path.name
    if name.lower().endswith(manifest_extension.lower()):
        return name[: -len(manifest_extension)]
    return path.stem


@dataclass(frozen=True)
class IndexSnapshot:
    """Manifest paths and lookups captured once at the start of a run.

    Name and path lookups are answered from the captured tables only.
    Identifiers of manifests outside the scanned root fall through to the
    index, which serves a static view until it is refreshed.
    """

    root: Path
    paths: tuple[Path, ...]
    manifest_extension: str
    name_table: Mapping[str, Path]
    identifier_table: Mapping[Path, str]
    path_table: Mapping[str, Path]
    index: Optional[ModuleIndex] = None

    @classmethod
    def capture(
        cls,
        index: ModuleIndex,
        root: Path,
        manifest_extension: str = MANIFEST_EXTENSION,
    ) -> "IndexSnapshot":
        paths = tuple(index.enumerate_manifests(root))
        names: dict[str, Path] = {}
        identifiers: dict[Path, str] = {}
        by_identifier: dict[str, Path] = {}

        for path in paths:
            # First match wins when two manifests share a file name.
            names.setdefault(manifest_stem(path, manifest_extension), path)
            try:
                identifier = index.path_to_identifier(path)
            except KeyError:
                logger.warning("Manifest has no identifier in index: %s", path)
                continue
            identifiers[path] = identifier
            by_identifier.setdefault(identifier, path)

        logger.info(
            "Captured index snapshot: root=%s manifests=%d identifiers=%d",
            root,
            len(paths),
            len(identifiers),
        )
        return cls(
            root=root,
            paths=paths,
            manifest_extension=manifest_extension,
            name_table=MappingProxyType(names),
            identifier_table=MappingProxyType(identifiers),
            path_table=MappingProxyType(by_identifier),
            index=index,
        )

    def resolve_name(self, name: str) -> Optional[Path]:
        return self.name_table.get(name)

    def identifier_for(self, path: Path) -> Optional[str]:
        return self.identifier_table.get(path)

    def path_for_identifier(self, identifier: str) -> Optional[Path]:
        path = self.path_table.get(identifier)
        if path is None and self.index is not None:
            path = self.index.identifier_to_path(identifier)
        return path

    def is_manifest_path(self, path: Optional[Path]) -> bool:
        return path is not None and path.name.lower().endswith(
            self.manifest_extension.lower()
        )

    def stem(self, path: Path) -> str:
        return manifest_stem(path, self.manifest_extension)
