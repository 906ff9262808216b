"""
Command-line interface for the Lightroom plugin toolkit.
"""

import argparse
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .catalog import CatalogCollections, StaticCollections
from .config import AppConfig, PreferenceStore
from .external_api import ExternalAPI
from .logging_setup import setup_logging, get_logger
from .operation import (
    OperationOptions, OperationResult, STATUS_CANCELED, STATUS_NO_DATA, perform_main_operation
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELED = 130


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Match external service items to Lightroom collections and process them"
    )
    parser.add_argument(
        "--config",
        default="config.json",
        help="Path to configuration JSON file (default: config.json)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode regardless of config setting"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    run_parser = subparsers.add_parser("run", help="Run the main operation")
    run_parser.add_argument("--catalog", help="Path to Lightroom catalog (.lrcat file)")
    run_parser.add_argument("--dry-run", action="store_true", help="Log intended actions without performing them")
    run_parser.add_argument("--quick", action="store_true", help="Only process the first few matching items")
    run_parser.add_argument("--filter", help="Override the selection filter (semicolon-separated patterns)")
    run_parser.add_argument("--fuzzy", action="store_true", help="Enable fuzzy collection name matching")

    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.required = True
    config_sub.add_parser("show", help="Show all settings")
    set_parser = config_sub.add_parser("set", help="Change a setting")
    set_parser.add_argument("name", help="Setting name")
    set_parser.add_argument("value", help="New value")

    subparsers.add_parser("test-connection", help="Check the connection to the external service")

    return parser


def process_arguments(args: argparse.Namespace, config: AppConfig) -> AppConfig:
    """
    Apply command-line overrides to the configuration.

    Args:
        args: Parsed arguments
        config: Loaded configuration

    Returns:
        Updated configuration
    """
    if args.debug:
        config.debug_mode = True
    if getattr(args, "filter", None) is not None:
        config.selection_filter = args.filter
        config.enable_selection_filter = True
    if getattr(args, "fuzzy", False):
        config.enable_fuzzy_matching = True
    return config


def _show_config(store: PreferenceStore) -> int:
    for name, value in store.items():
        if name == "api_key" and value:
            value = "********"
        print(f"{name} = {value}")
    return EXIT_OK


def _set_config(store: PreferenceStore, name: str, value: str) -> int:
    try:
        store.set(name, value)
    except KeyError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except ValueError as e:
        logger.error(f"Invalid value for {name}: {e}")
        return EXIT_FAILURE
    print("Configuration has been saved successfully.")
    return EXIT_OK


def _test_connection(config: AppConfig) -> int:
    if not config.server_url:
        print("Please enter a server URL first.")
        return EXIT_FAILURE
    if ExternalAPI(config).test_connection():
        print("Connection successful.")
        return EXIT_OK
    print("Connection failed. Check the log for details.")
    return EXIT_FAILURE


def _run_operation(args: argparse.Namespace, config: AppConfig) -> int:
    collections = CatalogCollections(args.catalog, config) if args.catalog else StaticCollections({})
    cancel_event = threading.Event()
    options = OperationOptions(is_dry_run=args.dry_run, is_quick_mode=args.quick, cancel_event=cancel_event)

    # The operation runs on a worker so Ctrl-C can cancel it cleanly
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="MainAction") as executor:
        future = executor.submit(perform_main_operation, config, options, None, collections)
        try:
            result: OperationResult = future.result()
        except KeyboardInterrupt:
            logger.info("Cancel requested, waiting for the operation to stop")
            cancel_event.set()
            result = future.result()

    print(result.message)
    logger.info(
        f"Collections: {result.collections_found}, items received: {result.items_received}, "
        f"selected: {result.items_selected}, processed: {result.items_processed}, "
        f"failed: {result.items_failed}, fuzzy matches: {result.fuzzy_matches}, "
        f"time: {result.total_time:.1f}s"
    )

    if result.status == STATUS_CANCELED:
        return EXIT_CANCELED
    if result.status == STATUS_NO_DATA or result.items_failed:
        return EXIT_FAILURE
    return EXIT_OK


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the command-line interface.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = build_parser().parse_args(argv)
    config = None

    try:
        store = PreferenceStore(args.config)

        if args.command == "config":
            if args.config_command == "show":
                return _show_config(store)
            return _set_config(store, args.name, args.value)

        config = process_arguments(args, store.as_config())
        setup_logging(config, log_prefix="lightroom_plugin" if config.debug_mode else None)

        logger.info(f"Python version: {sys.version}")
        logger.info(f"Server URL: {config.server_url or 'not configured'}")
        logger.info(f"Retries: {config.max_retries} (delay {config.retry_delay}s)")

        if args.command == "test-connection":
            return _test_connection(config)

        return _run_operation(args, config)

    except Exception as e:
        logger.error(f"Script execution failed: {str(e)}")
        if config is not None and config.debug_mode:
            import traceback
            logger.error(f"Traceback: {traceback.format_exc()}")
        return EXIT_FAILURE
