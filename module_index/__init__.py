"""
Module index: manifest discovery and name/path/identifier resolution.

Provides the ``ModuleIndex`` contract, a file-scanning implementation, a
map-backed implementation and the run-scoped ``IndexSnapshot``.
"""

from module_index.contracts import ModuleIndex
from module_index.file_index import FileModuleIndex, IndexScanStats, read_sidecar_identifier
from module_index.memory_index import InMemoryModuleIndex
from module_index.snapshot import IndexSnapshot, manifest_stem

__all__ = [
    # Contract
    "ModuleIndex",
    # Implementations
    "FileModuleIndex",
    "InMemoryModuleIndex",
    "IndexScanStats",
    "read_sidecar_identifier",
    # Run-scoped view
    "IndexSnapshot",
    "manifest_stem",
]
