"""
Tests for the selection module.
"""
import unittest

from lightroom_plugin.selection import parse_selection, is_item_selected


class TestSelection(unittest.TestCase):
    """Test cases for selection filtering."""

    NAMES = ["Portraits 2024", "Landscapes", "foo-archive", "Barcelona"]

    def test_empty_filter_matches_everything(self):
        """Test that empty, missing or blank filters select all items."""
        for expression in (None, "", "   ", " ; ;"):
            for name in self.NAMES:
                self.assertTrue(is_item_selected(name, expression))

    def test_disabled_matches_everything(self):
        """Test that a disabled filter selects all items."""
        self.assertTrue(is_item_selected("Landscapes", "Portraits", enabled=False))

    def test_multi_pattern(self):
        """Test semicolon-separated, trimmed patterns."""
        expression = "foo; bar "
        self.assertTrue(is_item_selected("my foo album", expression))
        self.assertTrue(is_item_selected("crowbar", expression))
        self.assertFalse(is_item_selected("Barcelona", expression))
        self.assertFalse(is_item_selected("Landscapes", expression))

    def test_case_sensitive_literal(self):
        """Test that matching is literal and case-sensitive."""
        self.assertFalse(is_item_selected("Portraits 2024", "portraits"))
        self.assertTrue(is_item_selected("Portraits 2024", "Portraits"))
        self.assertFalse(is_item_selected("Portraits 2024", "Port*"))
        self.assertTrue(is_item_selected("a.b", "."))

    def test_blank_pattern_matches_everything(self):
        """Test that a whitespace-only piece trims to a pattern matching every name."""
        for name in self.NAMES:
            self.assertTrue(is_item_selected(name, "foo; "))

    def test_only_separators_matches_nothing(self):
        """Test that an expression of bare semicolons yields no patterns."""
        for expression in (";", ";;;"):
            for name in self.NAMES:
                self.assertFalse(is_item_selected(name, expression))

    def test_parse_selection(self):
        self.assertEqual(parse_selection("foo; bar ;;  baz"), ["foo", "bar", "baz"])
        self.assertEqual(parse_selection("foo; "), ["foo", ""])
        self.assertEqual(parse_selection(";"), [])
        self.assertEqual(parse_selection(None), [])
        self.assertEqual(parse_selection(""), [])


if __name__ == '__main__':
    unittest.main()
