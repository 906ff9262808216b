#!/usr/bin/env python3
"""
Example 1: Fuzzy Collection Matching

This example lists the collections of a Lightroom catalog and shows which of
them a set of names would be reconciled with, using the similarity scorer.
"""

import argparse
import sys
from pathlib import Path

# Add the parent directory to sys.path to import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from lightroom_plugin.catalog import CatalogCollections
from lightroom_plugin.config import AppConfig
from lightroom_plugin.similarity import calculate_similarity, find_best_match


def fuzzy_matching_example():
    """Fuzzy matching example."""
    parser = argparse.ArgumentParser(description="Fuzzy collection matching example")
    parser.add_argument("catalog_path", help="Path to Lightroom catalog (.lrcat file)")
    parser.add_argument("names", nargs="+", help="Names to look up")
    parser.add_argument("--threshold", type=float, default=0.8, help="Minimum similarity (0.0-1.0)")
    args = parser.parse_args()

    try:
        collections = CatalogCollections(args.catalog_path, AppConfig()).get_collections()
    except (FileNotFoundError, RuntimeError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Catalog has {len(collections)} collections")

    for name in args.names:
        match = find_best_match(name, collections.keys(), args.threshold)
        if match:
            print(f"  {name!r} -> {match[0]!r} (similarity {match[1]:.2f})")
            continue

        # Show the closest candidate even when it is below the threshold
        closest = max(collections, key=lambda c: calculate_similarity(name, c), default=None)
        if closest is None:
            print(f"  {name!r} -> no collections to compare with")
        else:
            print(f"  {name!r} -> no match (closest: {closest!r}, {calculate_similarity(name, closest):.2f})")

    return 0


if __name__ == "__main__":
    sys.exit(fuzzy_matching_example())
