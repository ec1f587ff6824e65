"""
Reference normalization: canonical reference lists for assembly manifests.

The normalizer is a pure transformation over one reference list; the
orchestrator applies it to every manifest of a project and persists changes.
"""

from normalization.normalizer import (
    InvalidResolutionContextError,
    NormalizationResult,
    ResolutionContext,
    clean_references,
    convert_name_references,
    inject_common_reference,
    normalize_references,
    sort_references,
)
from normalization.orchestrator import (
    InjectionStats,
    inject_common_references,
    locate_common_manifest,
    references_equal,
)

__all__ = [
    # Normalizer
    "InvalidResolutionContextError",
    "NormalizationResult",
    "ResolutionContext",
    "convert_name_references",
    "clean_references",
    "sort_references",
    "inject_common_reference",
    "normalize_references",
    # Orchestrator
    "InjectionStats",
    "inject_common_references",
    "locate_common_manifest",
    "references_equal",
]
