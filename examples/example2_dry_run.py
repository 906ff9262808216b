#!/usr/bin/env python3
"""
Example 2: Dry Run Against a Catalog

This example runs the main operation in dry-run mode, reporting every retry of
the external service call on the console.
"""

import argparse
import os
import sys
from pathlib import Path

# Add the parent directory to sys.path to import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from lightroom_plugin.catalog import CatalogCollections
from lightroom_plugin.config import load_config
from lightroom_plugin.external_api import ExternalAPI, has_items
from lightroom_plugin.logging_setup import setup_logging
from lightroom_plugin.operation import MainOperation, OperationOptions
from lightroom_plugin.retry import retry_call


class VerboseAPI(ExternalAPI):
    """ExternalAPI that prints each failed attempt."""

    def get_data_with_retry(self, policy=None, cancel_event=None):
        def report(attempt, max_retries, outcome):
            print(f"Attempt {attempt} of {max_retries + 1} failed: {outcome.describe()}")

        return retry_call(
            self.get_data,
            validate=has_items,
            policy=policy or self.config.retry_policy("Get data"),
            on_failure=report,
            cancel_event=cancel_event,
        )


def dry_run_example():
    """Dry run example."""
    parser = argparse.ArgumentParser(description="Dry run example for the Lightroom plugin toolkit")
    parser.add_argument("catalog_path", help="Path to Lightroom catalog (.lrcat file)")
    parser.add_argument("--fuzzy", action="store_true", help="Enable fuzzy collection matching")
    args = parser.parse_args()

    config_path = os.path.join(Path(__file__).parent.parent, "config.json")
    config = load_config(config_path)
    if args.fuzzy:
        config.enable_fuzzy_matching = True

    setup_logging(config)

    operation = MainOperation(config, VerboseAPI(config), CatalogCollections(args.catalog_path, config))
    result = operation.run(OperationOptions(is_dry_run=True))

    print(result.message)
    for key, value in result.to_dict().items():
        print(f"  {key}: {value}")

    return 0


if __name__ == "__main__":
    sys.exit(dry_run_example())
