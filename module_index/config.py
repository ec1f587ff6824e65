"""
Configuration constants for manifest discovery and identifier sidecars.
"""

from typing import Set

from core.settings import DEFAULT_MANIFEST_EXTENSION

# Manifest file extension scanned by the file-backed index
MANIFEST_EXTENSION: str = DEFAULT_MANIFEST_EXTENSION

# Sidecar carrying the stable identifier of the file it accompanies
META_EXTENSION: str = ".meta"

# Key holding the identifier inside a sidecar
META_GUID_KEY: str = "guid"

# Directories never descended into while scanning a project
SKIP_DIRS: Set[str] = {
    ".git",
    ".idea",
    ".vs",
    ".vscode",
    "__pycache__",
    "node_modules",
    "Library",
    "Temp",
    "Logs",
    "obj",
    "UserSettings",
}
