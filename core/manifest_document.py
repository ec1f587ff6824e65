"""Manifest document contract: load, render and save assembly manifests."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_INDENT_RE = re.compile(r"^([ \t]+)\S", re.MULTILINE)
DEFAULT_INDENT = 4
_BOM = "\ufeff"


class ManifestParseError(ValueError):
    """Raised when a manifest file cannot be decoded into a document."""


@dataclass
class ManifestDocument:
    """In-memory view of one manifest file.

    ``payload`` keeps every field in source order so a rewrite only changes
    the ``references`` value.
    """

    path: Path
    name: str
    references: list[str]
    payload: dict[str, Any] = field(default_factory=dict)
    raw_text: str = ""
    indent: int | str = DEFAULT_INDENT
    newline: str = "\n"
    trailing_newline: bool = False
    bom: bool = False


def _detect_indent(text: str) -> int | str:
    match = _INDENT_RE.search(text)
    if match is None:
        return DEFAULT_INDENT
    whitespace = match.group(1)
    if "\t" in whitespace:
        return "\t"
    return len(whitespace)


def _detect_newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def _parse_references(raw: Any, path: Path) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ManifestParseError(f"{path}: 'references' must be a list")
    references: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ManifestParseError(
                f"{path}: 'references' contains non-string entry {item!r}"
            )
        references.append(item)
    return references


def parse_manifest_text(text: str, path: str | Path = "<memory>") -> ManifestDocument:
    """Decode manifest JSON text into a ``ManifestDocument``."""
    manifest_path = Path(path)
    # Editors commonly save these files with a UTF-8 BOM.
    body = text[1:] if text.startswith(_BOM) else text
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"{manifest_path}: invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ManifestParseError(f"{manifest_path}: manifest must be a JSON object")

    name = payload.get("name", "")
    if not isinstance(name, str):
        raise ManifestParseError(f"{manifest_path}: 'name' must be a string")

    return ManifestDocument(
        path=manifest_path,
        name=name,
        references=_parse_references(payload.get("references"), manifest_path),
        payload=payload,
        raw_text=text,
        indent=_detect_indent(body),
        newline=_detect_newline(body),
        trailing_newline=body.endswith(("\n", "\r\n")),
        bom=text.startswith(_BOM),
    )


def load_manifest_document(path: str | Path) -> ManifestDocument:
    """Read and decode a manifest file.

    Raises:
        FileNotFoundError: If ``path`` is not a file.
        ManifestParseError: If the content is not a valid manifest.
    """
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Manifest file not found: {manifest_path}")
    with open(manifest_path, "r", encoding="utf-8", newline="") as f:
        text = f.read()
    return parse_manifest_text(text, manifest_path)


def render_manifest_document(document: ManifestDocument, references: list[str]) -> str:
    """Render ``document`` with ``references`` replacing its reference list.

    Field order, indentation style, newline style and trailing newline are
    taken from the source text.
    """
    payload = dict(document.payload)
    payload["references"] = list(references)
    text = json.dumps(payload, indent=document.indent, ensure_ascii=False)
    if document.newline != "\n":
        text = text.replace("\n", document.newline)
    if document.trailing_newline:
        text += document.newline
    if document.bom:
        text = _BOM + text
    return text


def save_manifest_document(document: ManifestDocument, references: list[str]) -> str:
    """Persist ``references`` into the manifest file and update ``document``.

    Returns the written text.
    """
    text = render_manifest_document(document, references)
    # newline="" keeps the detected line endings untouched on every platform.
    with open(document.path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    document.payload["references"] = list(references)
    document.references = list(references)
    document.raw_text = text
    return text
