"""Map-backed module index for tests and embedding callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from module_index.config import MANIFEST_EXTENSION
from module_index.snapshot import manifest_stem


@dataclass
class InMemoryModuleIndex:
    """Module index over an explicit ``path -> identifier`` table.

    ``extra_identifiers`` maps identifiers to non-manifest or out-of-tree
    files, mirroring a project database that knows about every asset.
    """

    identifiers: dict[Path, str] = field(default_factory=dict)
    extra_identifiers: dict[str, Path] = field(default_factory=dict)
    manifest_extension: str = MANIFEST_EXTENSION
    refresh_count: int = 0

    @classmethod
    def from_names(
        cls,
        root: Path,
        names_to_identifiers: dict[str, str],
        manifest_extension: str = MANIFEST_EXTENSION,
    ) -> "InMemoryModuleIndex":
        """Build an index with one manifest per module name directly under ``root``."""
        return cls(
            identifiers={
                root / f"{name}{manifest_extension}": identifier
                for name, identifier in names_to_identifiers.items()
            },
            manifest_extension=manifest_extension,
        )

    def add(self, path: Path, identifier: str) -> None:
        self.identifiers[Path(path)] = identifier

    def enumerate_manifests(self, root: Path) -> Sequence[Path]:
        root = Path(root)
        return sorted(
            path for path in self.identifiers
            if path.name.lower().endswith(self.manifest_extension.lower())
            and (path == root or root in path.parents)
        )

    def name_to_path(self, name: str) -> Optional[Path]:
        for path in sorted(self.identifiers):
            if manifest_stem(path, self.manifest_extension) == name:
                return path
        return None

    def path_to_identifier(self, path: Path) -> str:
        return self.identifiers[Path(path)]

    def identifier_to_path(self, identifier: str) -> Optional[Path]:
        for path, value in self.identifiers.items():
            if value == identifier:
                return path
        return self.extra_identifiers.get(identifier)

    def refresh(self) -> None:
        self.refresh_count += 1
