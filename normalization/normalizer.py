"""Reference normalizer: canonical form for one manifest's reference list.

The pipeline runs four stages in a fixed order:

1. name -> identifier conversion, only when no raw reference is already an
   identifier reference (a mixed list passes through unconverted);
2. cleaning: references that do not resolve to a manifest are dropped;
3. exact deduplication and a stable sort by resolved display name;
4. injection of the common module reference, unless the manifest being
   processed is the common module itself.

Nothing here touches the file system or mutates the snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from core.reference_contract import (
    IDENTIFIER_PREFIX,
    is_identifier_reference,
    make_identifier_reference,
    parse_identifier_reference,
)
from module_index.snapshot import IndexSnapshot


class InvalidResolutionContextError(ValueError):
    """Raised when the common module identifier cannot anchor a run."""


@dataclass(frozen=True)
class ResolutionContext:
    """Snapshot plus the common module identifier for one run."""

    snapshot: IndexSnapshot
    common_identifier: str
    prefix: str = IDENTIFIER_PREFIX

    def __post_init__(self) -> None:
        if not self.common_identifier or not self.common_identifier.strip():
            raise InvalidResolutionContextError("common module identifier is empty")
        if not self.prefix:
            raise InvalidResolutionContextError("identifier prefix is empty")
        target = self.snapshot.path_for_identifier(self.common_identifier)
        if not self.snapshot.is_manifest_path(target):
            raise InvalidResolutionContextError(
                f"common module identifier {self.common_identifier} does not "
                f"resolve to a manifest"
            )

    @property
    def common_reference(self) -> str:
        return make_identifier_reference(self.common_identifier, self.prefix)

    def is_identifier(self, reference: str) -> bool:
        return is_identifier_reference(reference, self.prefix)

    def target_path(self, reference: str) -> Path | None:
        """Resolve any reference to the manifest path it points at."""
        if self.is_identifier(reference):
            identifier = parse_identifier_reference(reference, self.prefix)
            return self.snapshot.path_for_identifier(identifier)
        return self.snapshot.resolve_name(reference)

    def display_name(self, reference: str) -> str:
        """Sort key: target file stem for identifiers, the name itself otherwise."""
        if not self.is_identifier(reference):
            return reference
        path = self.target_path(reference)
        return self.snapshot.stem(path) if path is not None else ""


@dataclass
class NormalizationResult:
    """Canonical reference list plus what it took to get there."""

    references: list[str]
    converted: int = 0
    dropped: list[str] = field(default_factory=list)
    injected_common: bool = False


def convert_name_references(
    references: list[str],
    context: ResolutionContext,
) -> tuple[list[str], int]:
    """Stage 1. Returns the converted list and how many names were converted."""
    if any(context.is_identifier(ref) for ref in references):
        return list(references), 0

    converted: list[str] = []
    count = 0
    for ref in references:
        path = context.snapshot.resolve_name(ref)
        identifier = context.snapshot.identifier_for(path) if path is not None else None
        if identifier:
            converted.append(make_identifier_reference(identifier, context.prefix))
            count += 1
        else:
            converted.append(ref)
    return converted, count


def clean_references(
    references: list[str],
    context: ResolutionContext,
) -> tuple[list[str], list[str]]:
    """Stage 2. Returns (kept, dropped)."""
    kept: list[str] = []
    dropped: list[str] = []
    for ref in references:
        if context.is_identifier(ref):
            valid = context.snapshot.is_manifest_path(context.target_path(ref))
        else:
            valid = context.snapshot.resolve_name(ref) is not None
        (kept if valid else dropped).append(ref)
    return kept, dropped


def sort_references(references: list[str], context: ResolutionContext) -> list[str]:
    """Stage 3. Exact-string dedup keeping first occurrence, then ordinal sort."""
    unique = list(dict.fromkeys(references))
    return sorted(unique, key=context.display_name)


def inject_common_reference(
    references: list[str],
    context: ResolutionContext,
) -> tuple[list[str], bool]:
    """Stage 4. Returns the list and whether the common reference was added."""
    common = context.common_reference
    if common in references:
        return references, False
    return sort_references(references + [common], context), True


def normalize_references(
    raw_references: list[str] | None,
    context: ResolutionContext,
    is_common: bool = False,
) -> NormalizationResult:
    """Run the full pipeline over one manifest's raw references."""
    references, converted = convert_name_references(list(raw_references or []), context)
    references, dropped = clean_references(references, context)
    references = sort_references(references, context)

    injected = False
    if not is_common:
        references, injected = inject_common_reference(references, context)

    return NormalizationResult(
        references=references,
        converted=converted,
        dropped=dropped,
        injected_common=injected,
    )
