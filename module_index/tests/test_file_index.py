"""Tests for the file-scanning module index."""

import tempfile
import unittest
from pathlib import Path

from core.reference_contract import make_stable_identifier
from core.settings import NormalizerSettings
from module_index.file_index import FileModuleIndex, read_sidecar_identifier


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestFileModuleIndex(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        self.scripts = self.root / "Assets" / "Scripts"

        self.game = _write(self.scripts / "Game" / "Game.asmdef", '{"name": "Game"}')
        _write(
            self.scripts / "Game" / "Game.asmdef.meta",
            "fileFormatVersion: 2\nguid: 9a1b2c3d4e5f60718293a4b5c6d7e8f9\n",
        )
        self.util = _write(self.scripts / "Util" / "Util.asmdef", '{"name": "Util"}')
        self.package = _write(
            self.root / "Packages" / "Vendor" / "Vendor.asmdef", '{"name": "Vendor"}'
        )
        self.source = _write(self.scripts / "Game" / "Player.cs", "class Player {}")
        _write(self.scripts / "Game" / "Player.cs.meta", "guid: 11112222333344445555666677778888\n")
        _write(self.root / "Library" / "Cached.asmdef", '{"name": "Cached"}')

    def test_sidecar_identifier_is_used(self) -> None:
        index = FileModuleIndex(self.root)
        self.assertEqual(
            index.path_to_identifier(self.game), "9a1b2c3d4e5f60718293a4b5c6d7e8f9"
        )
        self.assertEqual(
            index.identifier_to_path("9a1b2c3d4e5f60718293a4b5c6d7e8f9"), self.game
        )

    def test_missing_sidecar_derives_identifier_from_relative_path(self) -> None:
        index = FileModuleIndex(self.root)
        expected = make_stable_identifier("Assets/Scripts/Util/Util.asmdef")
        self.assertEqual(index.path_to_identifier(self.util), expected)
        self.assertEqual(index.stats.derived_identifiers, 2)

    def test_non_manifest_identifiers_resolve_to_their_file(self) -> None:
        index = FileModuleIndex(self.root)
        self.assertEqual(
            index.identifier_to_path("11112222333344445555666677778888"), self.source
        )

    def test_enumerate_is_limited_to_root_and_skips_cache_dirs(self) -> None:
        index = FileModuleIndex(self.root)
        self.assertEqual(index.enumerate_manifests(self.scripts), [self.game, self.util])
        everything = index.enumerate_manifests(self.root)
        self.assertIn(self.package, everything)
        self.assertFalse(any("Library" in p.parts for p in everything))

    def test_name_to_path_matches_whole_stem(self) -> None:
        index = FileModuleIndex(self.root)
        self.assertEqual(index.name_to_path("Util"), self.util)
        self.assertEqual(index.name_to_path("Vendor"), self.package)
        self.assertIsNone(index.name_to_path("til"))

    def test_unknown_path_raises_key_error(self) -> None:
        index = FileModuleIndex(self.root)
        with self.assertRaises(KeyError):
            index.path_to_identifier(self.root / "Nope.asmdef")

    def test_refresh_observes_new_manifests(self) -> None:
        index = FileModuleIndex(self.root)
        added = _write(self.scripts / "Late" / "Late.asmdef", '{"name": "Late"}')
        self.assertIsNone(index.name_to_path("Late"))
        index.refresh()
        self.assertEqual(index.name_to_path("Late"), added)

    def test_unreadable_sidecar_falls_back_to_derived_identifier(self) -> None:
        _write(self.scripts / "Util" / "Util.asmdef.meta", "guid: [broken\n")
        with self.assertLogs("module_index.file_index", level="WARNING"):
            index = FileModuleIndex(self.root)
        self.assertEqual(index.stats.sidecars_failed, 1)
        self.assertEqual(
            index.path_to_identifier(self.util),
            make_stable_identifier("Assets/Scripts/Util/Util.asmdef"),
        )

    def test_default_extension_matches_settings_default(self) -> None:
        index = FileModuleIndex(self.root)
        self.assertEqual(index.manifest_extension, NormalizerSettings().manifest_extension)


class TestReadSidecarIdentifier(unittest.TestCase):
    def test_missing_guid_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            meta = _write(Path(tmpdir) / "A.asmdef.meta", "fileFormatVersion: 2\n")
            self.assertIsNone(read_sidecar_identifier(meta))


if __name__ == "__main__":
    unittest.main()
