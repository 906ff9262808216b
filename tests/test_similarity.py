"""
Tests for the similarity module.
"""
import itertools
import unittest

from lightroom_plugin.similarity import (
    levenshtein_distance, normalize_name, calculate_similarity, find_best_match
)


class TestLevenshteinDistance(unittest.TestCase):
    """Test cases for levenshtein_distance."""

    SAMPLES = ["", "a", "kitten", "sitting", "flaw", "lawn", "Sunset", "sunset 2024", "abc", "cba"]

    def test_known_distances(self):
        """Test classic examples."""
        self.assertEqual(levenshtein_distance("kitten", "sitting"), 3)
        self.assertEqual(levenshtein_distance("flaw", "lawn"), 2)
        self.assertEqual(levenshtein_distance("abc", "abd"), 1)
        self.assertEqual(levenshtein_distance("abc", "cba"), 2)

    def test_empty_strings(self):
        """Test that an empty side costs the length of the other side."""
        self.assertEqual(levenshtein_distance("", ""), 0)
        self.assertEqual(levenshtein_distance("", "abc"), 3)
        self.assertEqual(levenshtein_distance("abcd", ""), 4)

    def test_identity(self):
        """Test that a string has distance 0 to itself."""
        for s in self.SAMPLES:
            self.assertEqual(levenshtein_distance(s, s), 0)

    def test_symmetry(self):
        """Test that argument order does not matter."""
        for a, b in itertools.product(self.SAMPLES, repeat=2):
            self.assertEqual(levenshtein_distance(a, b), levenshtein_distance(b, a))

    def test_triangle_inequality(self):
        """Test that edit distance behaves as a metric."""
        for a, b, c in itertools.product(self.SAMPLES, repeat=3):
            self.assertLessEqual(
                levenshtein_distance(a, b),
                levenshtein_distance(a, c) + levenshtein_distance(c, b)
            )

    def test_case_sensitive(self):
        """Test that the raw distance does not normalize."""
        self.assertEqual(levenshtein_distance("Sunset", "sunset"), 1)

    def test_rejects_non_strings(self):
        """Test that invalid arguments fail fast."""
        with self.assertRaises(TypeError):
            levenshtein_distance(None, "abc")
        with self.assertRaises(TypeError):
            levenshtein_distance("abc", 12)


class TestNormalizeName(unittest.TestCase):
    """Test cases for normalize_name."""

    def test_removes_separators(self):
        """Test removal of whitespace, hyphens and underscores anywhere."""
        self.assertEqual(normalize_name("My Collection"), "mycollection")
        self.assertEqual(normalize_name("  Foo_Bar - Baz\t2024 "), "foobarbaz2024")
        self.assertEqual(normalize_name("a--b__c  d"), "abcd")

    def test_empty(self):
        """Test normalizing to an empty string."""
        self.assertEqual(normalize_name(""), "")
        self.assertEqual(normalize_name(" - _ "), "")

    def test_rejects_non_strings(self):
        """Test that None is not coerced."""
        with self.assertRaises(TypeError):
            normalize_name(None)


class TestCalculateSimilarity(unittest.TestCase):
    """Test cases for calculate_similarity."""

    def test_normalization_insensitive(self):
        """Test that case and separators are ignored."""
        self.assertEqual(calculate_similarity("My Collection", "my-collection"), 1.0)
        self.assertEqual(calculate_similarity("Foo_Bar", "foobar"), 1.0)

    def test_identical_and_empty(self):
        """Test the equal short-circuit, including empty names."""
        self.assertEqual(calculate_similarity("Sunset", "Sunset"), 1.0)
        self.assertEqual(calculate_similarity("", ""), 1.0)
        self.assertEqual(calculate_similarity("-", "_ "), 1.0)

    def test_kitten_sitting(self):
        """Test the score for a known distance."""
        self.assertAlmostEqual(calculate_similarity("kitten", "sitting"), 1 - 3 / 7)

    def test_one_side_empty(self):
        """Test a completely different name scores 0."""
        self.assertEqual(calculate_similarity("", "abc"), 0.0)
        self.assertEqual(calculate_similarity("abc", "xyz"), 0.0)

    def test_bounds(self):
        """Test that scores stay within [0, 1]."""
        names = ["", "Portraits", "portrait", "Street-Photography", "street", "x", "Weddings 2023"]
        for a, b in itertools.product(names, repeat=2):
            score = calculate_similarity(a, b)
            self.assertGreaterEqual(score, 0.0)
            self.assertLessEqual(score, 1.0)

    def test_rejects_non_strings(self):
        """Test that None is rejected."""
        with self.assertRaises(TypeError):
            calculate_similarity(None, "abc")


class TestFindBestMatch(unittest.TestCase):
    """Test cases for find_best_match."""

    def test_best_candidate(self):
        """Test that the highest score wins."""
        match = find_best_match("Portrait", ["Landscapes", "Portraits", "Ports"], threshold=0.5)
        self.assertEqual(match[0], "Portraits")
        self.assertAlmostEqual(match[1], 1 - 1 / 9)

    def test_exact_after_normalization(self):
        """Test a normalized-equal candidate scores 1.0."""
        self.assertEqual(find_best_match("street photography", ["Street-Photography"]), ("Street-Photography", 1.0))

    def test_below_threshold(self):
        """Test that nothing is returned under the threshold."""
        self.assertIsNone(find_best_match("Weddings", ["Landscapes", "Macro"], threshold=0.8))

    def test_no_candidates(self):
        """Test an empty candidate list."""
        self.assertIsNone(find_best_match("Weddings", []))

    def test_tie_keeps_first(self):
        """Test that equal scores keep the earlier candidate."""
        match = find_best_match("abcd", ["abce", "abcf"], threshold=0.5)
        self.assertEqual(match[0], "abce")

    def test_invalid_threshold(self):
        """Test that thresholds outside [0, 1] are rejected."""
        with self.assertRaises(ValueError):
            find_best_match("a", ["a"], threshold=1.5)


if __name__ == '__main__':
    unittest.main()
