"""Tests for the pure reference normalizer."""

import unittest
from pathlib import Path

from module_index.memory_index import InMemoryModuleIndex
from module_index.snapshot import IndexSnapshot
from normalization.normalizer import (
    InvalidResolutionContextError,
    ResolutionContext,
    clean_references,
    convert_name_references,
    normalize_references,
    sort_references,
)

ROOT = Path("/project/Assets/Scripts")
COMMON = "GUID:c0"


def _context(**extra_names: str) -> ResolutionContext:
    names = {"Common": "c0", "A": "a1", "B": "b1", "C": "c1", "D": "d1"}
    names.update(extra_names)
    index = InMemoryModuleIndex.from_names(ROOT, names)
    index.extra_identifiers["cs1"] = ROOT / "Player.cs"
    index.extra_identifiers["pkg1"] = Path("/project/Packages/Vendor/Vendor.asmdef")
    return ResolutionContext(snapshot=IndexSnapshot.capture(index, ROOT), common_identifier="c0")


class TestExampleScenarios(unittest.TestCase):
    def test_mixed_list_skips_conversion(self) -> None:
        result = normalize_references(["B", COMMON], _context())
        self.assertEqual(result.references, ["B", COMMON])
        self.assertEqual(result.converted, 0)
        self.assertFalse(result.injected_common)

    def test_all_names_are_converted_and_common_appended(self) -> None:
        result = normalize_references(["C"], _context())
        self.assertEqual(result.references, ["GUID:c1", COMMON])
        self.assertEqual(result.converted, 1)
        self.assertTrue(result.injected_common)

    def test_unresolvable_name_is_dropped(self) -> None:
        result = normalize_references(["Ghost"], _context())
        self.assertEqual(result.references, [COMMON])
        self.assertEqual(result.dropped, ["Ghost"])

    def test_common_module_never_self_injects(self) -> None:
        result = normalize_references(["C", "B", "Ghost"], _context(), is_common=True)
        self.assertEqual(result.references, ["GUID:b1", "GUID:c1"])
        self.assertFalse(result.injected_common)

    def test_normalizing_canonical_output_is_a_fixed_point(self) -> None:
        context = _context()
        first = normalize_references(["D", "Ghost", "B", "B"], context)
        second = normalize_references(first.references, context)
        self.assertEqual(second.references, first.references)
        self.assertEqual(second.dropped, [])
        self.assertFalse(second.injected_common)


class TestConversion(unittest.TestCase):
    def test_single_identifier_blocks_conversion_of_every_name(self) -> None:
        # A manifest mixing one identifier with bare names keeps the names.
        result = normalize_references(["D", "GUID:a1", "B"], _context())
        self.assertEqual(result.references, ["GUID:a1", "B", COMMON, "D"])
        self.assertEqual(
            [ref for ref in result.references if not ref.startswith("GUID:")], ["B", "D"]
        )

    def test_unresolved_names_stay_names_during_conversion(self) -> None:
        converted, count = convert_name_references(["A", "Ghost"], _context())
        self.assertEqual(converted, ["GUID:a1", "Ghost"])
        self.assertEqual(count, 1)

    def test_empty_and_missing_lists(self) -> None:
        self.assertEqual(normalize_references([], _context()).references, [COMMON])
        self.assertEqual(normalize_references(None, _context()).references, [COMMON])


class TestCleaning(unittest.TestCase):
    def test_identifier_without_path_is_dropped(self) -> None:
        kept, dropped = clean_references(["GUID:a1", "GUID:missing"], _context())
        self.assertEqual(kept, ["GUID:a1"])
        self.assertEqual(dropped, ["GUID:missing"])

    def test_identifier_of_non_manifest_file_is_dropped(self) -> None:
        result = normalize_references(["GUID:cs1", COMMON], _context())
        self.assertEqual(result.references, [COMMON])
        self.assertEqual(result.dropped, ["GUID:cs1"])

    def test_identifier_outside_scan_root_is_kept(self) -> None:
        result = normalize_references(["GUID:pkg1", COMMON], _context())
        self.assertEqual(result.references, [COMMON, "GUID:pkg1"])

    def test_name_must_match_whole_file_stem(self) -> None:
        kept, dropped = clean_references(["ommon", "Common"], _context())
        self.assertEqual(kept, ["Common"])
        self.assertEqual(dropped, ["ommon"])


class TestOrdering(unittest.TestCase):
    def test_duplicates_removed(self) -> None:
        result = normalize_references(["GUID:b1", COMMON, "GUID:b1"], _context())
        self.assertEqual(result.references, ["GUID:b1", COMMON])
        self.assertEqual(len(result.references), len(set(result.references)))

    def test_sort_uses_display_name_not_raw_string(self) -> None:
        context = _context(Alpha="zz9", Zulu="aa1")
        ordered = sort_references(["GUID:aa1", "GUID:zz9"], context)
        self.assertEqual(ordered, ["GUID:zz9", "GUID:aa1"])

    def test_sort_is_case_sensitive(self) -> None:
        context = _context(alpha="x1", Beta="x2")
        ordered = sort_references(["GUID:x1", "GUID:x2"], context)
        self.assertEqual(ordered, ["GUID:x2", "GUID:x1"])

    def test_common_reference_appears_exactly_once(self) -> None:
        result = normalize_references(["Common", "A", "Common"], _context())
        self.assertEqual(result.references.count(COMMON), 1)
        self.assertEqual(result.references, ["GUID:a1", COMMON])


class TestResolutionContext(unittest.TestCase):
    def test_empty_common_identifier_is_fatal(self) -> None:
        snapshot = _context().snapshot
        with self.assertRaises(InvalidResolutionContextError):
            ResolutionContext(snapshot=snapshot, common_identifier="")

    def test_unresolved_common_identifier_is_fatal(self) -> None:
        snapshot = _context().snapshot
        with self.assertRaises(InvalidResolutionContextError):
            ResolutionContext(snapshot=snapshot, common_identifier="nope")

    def test_common_identifier_must_point_at_manifest(self) -> None:
        snapshot = _context().snapshot
        with self.assertRaises(InvalidResolutionContextError):
            ResolutionContext(snapshot=snapshot, common_identifier="cs1")

    def test_display_name(self) -> None:
        context = _context()
        self.assertEqual(context.display_name("GUID:b1"), "B")
        self.assertEqual(context.display_name("Ghost"), "Ghost")
        self.assertEqual(context.display_name("GUID:missing"), "")


if __name__ == "__main__":
    unittest.main()
