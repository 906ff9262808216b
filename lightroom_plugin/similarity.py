"""
Fuzzy name matching based on Levenshtein distance.
"""

import re
from typing import Iterable, Optional, Tuple

_SEPARATORS = re.compile(r'[\s\-_]+')


def _require_str(value, name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}")


def levenshtein_distance(str1: str, str2: str) -> int:
    """
    Calculate the Levenshtein (edit) distance between two strings.

    Args:
        str1: First string
        str2: Second string

    Returns:
        Minimum number of single-character insertions, deletions and
        substitutions needed to turn str1 into str2

    Raises:
        TypeError: If either argument is not a string
    """
    _require_str(str1, "str1")
    _require_str(str2, "str2")

    # Keep the shorter string along the row
    if len(str1) < len(str2):
        str1, str2 = str2, str1
    if not str2:
        return len(str1)

    previous_row = list(range(len(str2) + 1))
    for i, char1 in enumerate(str1, start=1):
        current_row = [i]
        for j, char2 in enumerate(str2, start=1):
            cost = 0 if char1 == char2 else 1
            current_row.append(min(
                previous_row[j] + 1,         # deletion
                current_row[j - 1] + 1,      # insertion
                previous_row[j - 1] + cost,  # substitution
            ))
        previous_row = current_row

    return previous_row[-1]


def normalize_name(name: str) -> str:
    """
    Normalize a name for comparison: lowercase, no whitespace, hyphens or underscores.

    >>> normalize_name("My Collection_2024")
    'mycollection2024'
    """
    _require_str(name, "name")
    return _SEPARATORS.sub("", name.lower())


def calculate_similarity(name1: str, name2: str) -> float:
    """
    Calculate the similarity of two names.

    Args:
        name1: First name
        name2: Second name

    Returns:
        Score between 0.0 and 1.0; 1.0 when the normalized names are equal
    """
    normalized1 = normalize_name(name1)
    normalized2 = normalize_name(name2)

    if normalized1 == normalized2:
        return 1.0

    distance = levenshtein_distance(normalized1, normalized2)
    max_len = max(len(normalized1), len(normalized2))

    return (1.0 - distance / max_len) if max_len > 0 else 0.0


def find_best_match(name: str, candidates: Iterable[str],
                    threshold: float = 0.8) -> Optional[Tuple[str, float]]:
    """
    Find the candidate most similar to a name.

    Args:
        name: Name to look up
        candidates: Names to compare against
        threshold: Minimum similarity for a candidate to count as a match

    Returns:
        (candidate, score) for the best match at or above the threshold, or
        None. Ties keep the earliest candidate.
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError("threshold must be between 0.0 and 1.0")

    best = None
    for candidate in candidates:
        score = calculate_similarity(name, candidate)
        if score >= threshold and (best is None or score > best[1]):
            best = (candidate, score)
            if score == 1.0:
                break

    return best
