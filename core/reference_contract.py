"""Reference contract shared by the module index and the normalizer."""

from __future__ import annotations

import hashlib
from pathlib import PurePath

IDENTIFIER_PREFIX = "GUID:"


def is_identifier_reference(reference: str, prefix: str = IDENTIFIER_PREFIX) -> bool:
    """Return True when ``reference`` carries the identifier prefix tag."""
    return reference.startswith(prefix)


def make_identifier_reference(identifier: str, prefix: str = IDENTIFIER_PREFIX) -> str:
    """Build an identifier reference string, e.g. ``GUID:0f3c...``."""
    if not identifier:
        raise ValueError("identifier must be non-empty")
    return f"{prefix}{identifier}"


def parse_identifier_reference(reference: str, prefix: str = IDENTIFIER_PREFIX) -> str:
    """Strip the prefix tag from an identifier reference.

    Raises:
        ValueError: If ``reference`` is a name reference.
    """
    if not is_identifier_reference(reference, prefix):
        raise ValueError(f"Not an identifier reference: {reference}")
    return reference[len(prefix):]


def make_stable_identifier(relative_path: str | PurePath) -> str:
    """Derive a content-independent identifier from a project-relative path.

    Used when a manifest has no sidecar carrying an explicit identifier. The
    digest only changes when the manifest is moved or renamed.
    """
    canonical = PurePath(relative_path).as_posix().strip()
    if not canonical:
        raise ValueError("relative_path must be non-empty")
    return hashlib.md5(canonical.encode("utf-8")).hexdigest()
