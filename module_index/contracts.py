"""Module index contract consumed by the normalizer and orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ModuleIndex(Protocol):
    """Maps between manifest paths, module names and stable identifiers.

    Implementations must serve a static view between calls to ``refresh``;
    file system changes become visible only after a refresh.
    """

    def enumerate_manifests(self, root: Path) -> Sequence[Path]:
        """Return every manifest under ``root`` in a stable order."""
        ...

    def name_to_path(self, name: str) -> Optional[Path]:
        """Resolve a module name (file stem) to its manifest path."""
        ...

    def path_to_identifier(self, path: Path) -> str:
        """Return the stable identifier of the file at ``path``.

        Raises:
            KeyError: If ``path`` is not indexed.
        """
        ...

    def identifier_to_path(self, identifier: str) -> Optional[Path]:
        """Resolve a stable identifier back to a file path."""
        ...

    def refresh(self) -> None:
        """Re-scan the project so later lookups observe written files."""
        ...
