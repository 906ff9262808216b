"""
Main plugin operation: match external items to Lightroom collections and process them.
"""

import threading
import time
import traceback
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .catalog import CollectionRecord, CollectionSource, StaticCollections
from .config import AppConfig
from .external_api import ExternalAPI
from .logging_setup import get_logger, dry_run_prefix
from .progress import ProgressFactory, progress_scope
from .retry import retry_call
from .selection import is_item_selected
from .similarity import find_best_match

logger = get_logger(__name__)

QUICK_MODE_LIMIT = 10

STATUS_COMPLETED = "completed"
STATUS_CANCELED = "canceled"
STATUS_NO_DATA = "no_data"


@dataclass
class OperationOptions:
    """Per-run options."""
    is_dry_run: bool = False
    is_quick_mode: bool = False
    cancel_event: Optional[threading.Event] = None


@dataclass
class WorkItem:
    """An external item paired with the collection it belongs to."""
    name: str
    data: Dict[str, Any]
    collection: CollectionRecord
    similarity: float = 1.0


@dataclass
class OperationResult:
    """Outcome and statistics of one run."""
    status: str = STATUS_COMPLETED
    dry_run: bool = False
    quick_mode: bool = False
    collections_found: int = 0
    items_received: int = 0
    items_selected: int = 0
    items_processed: int = 0
    items_failed: int = 0
    fuzzy_matches: int = 0
    start_time: float = 0
    total_time: float = 0
    processed_names: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        """User-facing summary of the run."""
        mode = "Quick " if self.quick_mode else ""
        if self.status == STATUS_CANCELED:
            return f"{mode}Operation canceled."
        if self.status == STATUS_NO_DATA:
            return "Could not retrieve data from the external service. Check the log for details."
        if self.dry_run:
            return f"{mode}Dry run completed. Check the log for details on what would happen during a real operation."
        return f"{mode}Operation completed successfully."

    def to_dict(self) -> Dict[str, Any]:
        result = {k: v for k, v in self.__dict__.items()}
        result['message'] = self.message
        return result


class MainOperation:
    """Runs the three phases of the plugin's main action with progress and cancellation."""

    def __init__(self, config: AppConfig, api: ExternalAPI, collections: CollectionSource,
                 progress_factory: Optional[ProgressFactory] = None):
        """
        Initialize the operation.

        Args:
            config: Application configuration
            api: External service client
            collections: Source of Lightroom collections
            progress_factory: Optional factory for progress scopes (defaults to tqdm)
        """
        self.config = config
        self.api = api
        self.collections = collections
        self.progress_factory = progress_factory

    def run(self, options: Optional[OperationOptions] = None) -> OperationResult:
        """
        Perform the operation.

        Args:
            options: Run options

        Returns:
            OperationResult describing what happened
        """
        options = options or OperationOptions()
        cancel_event = options.cancel_event or threading.Event()
        options = replace(options, cancel_event=cancel_event)
        prefix = dry_run_prefix(options.is_dry_run)
        mode = "Quick " if options.is_quick_mode else ""

        result = OperationResult(dry_run=options.is_dry_run, quick_mode=options.is_quick_mode)
        result.start_time = time.time()

        logger.info(f"{prefix}Starting {mode}operation{' (no changes will be made)' if options.is_dry_run else ''}")

        try:
            # Phase 1: Lightroom data
            with progress_scope("Getting Lightroom data", cancel_event, self.progress_factory) as scope:
                lightroom_collections = self.collections.get_collections()
                result.collections_found = len(lightroom_collections)
                logger.info(f"{prefix}Found {len(lightroom_collections)} Lightroom collections")
                if scope.is_canceled():
                    logger.info("Operation canceled during Lightroom data retrieval")
                    return self._finish(result, STATUS_CANCELED)

            # Phase 2: external service data
            with progress_scope("Getting external service data", cancel_event, self.progress_factory) as scope:
                external_data = self.api.get_data_with_retry(cancel_event=cancel_event)
                if scope.is_canceled():
                    logger.info("Operation canceled during external data retrieval")
                    return self._finish(result, STATUS_CANCELED)
                if external_data is None:
                    logger.error("No data received from external service")
                    return self._finish(result, STATUS_NO_DATA)
                logger.info(f"{prefix}Retrieved external data")

            # Phase 3: processing
            with progress_scope("Processing items", cancel_event, self.progress_factory) as scope:
                items = external_data.get("items", []) if isinstance(external_data, dict) else []
                result.items_received = len(items)

                work_items = self.select_items(items, lightroom_collections)
                result.items_selected = len(work_items)
                result.fuzzy_matches = sum(1 for w in work_items if w.name != w.collection.name)

                if options.is_quick_mode and len(work_items) > QUICK_MODE_LIMIT:
                    logger.info(f"Quick mode: limiting to first {QUICK_MODE_LIMIT} of {len(work_items)} items")
                    work_items = work_items[:QUICK_MODE_LIMIT]

                logger.info(f"{prefix}Processing {len(work_items)} items")

                total = len(work_items)
                for i, item in enumerate(work_items, start=1):
                    scope.set_caption(f"Processing item {i}/{total} ({item.name})")
                    scope.set_portion_complete(i - 1, total)
                    logger.info(f"{prefix}Processing item: {item.name}")

                    if scope.is_canceled():
                        logger.info(f"Operation canceled while processing item: {item.name}")
                        return self._finish(result, STATUS_CANCELED)

                    if self.process_item(item, options):
                        result.items_processed += 1
                        result.processed_names.append(item.name)
                    else:
                        result.items_failed += 1

                scope.set_portion_complete(total, total)

        except Exception as e:
            logger.error(f"Operation failed: {str(e)}")
            if self.config.debug_mode:
                logger.error(f"Traceback: {traceback.format_exc()}")
            raise

        logger.info(f"{prefix}{mode}Operation completed successfully")
        return self._finish(result, STATUS_COMPLETED)

    def select_items(self, items: List[Any],
                     lightroom_collections: Dict[str, CollectionRecord]) -> List[WorkItem]:
        """
        Pair selected external items with their Lightroom collections.

        Items without a name, not matching the selection filter, or without a
        matching collection are skipped.
        """
        work_items = []
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                logger.debug(f"Skipping item without a name: {item!r}")
                continue

            name = item["name"]
            if not is_item_selected(name, self.config.selection_filter, self.config.enable_selection_filter):
                continue

            collection = lightroom_collections.get(name)
            score = 1.0
            if collection is None and self.config.enable_fuzzy_matching:
                match = find_best_match(name, lightroom_collections.keys(), self.config.similarity_threshold)
                if match:
                    collection = lightroom_collections[match[0]]
                    score = match[1]
                    logger.info(f"Fuzzy matched '{name}' to collection '{match[0]}' ({score:.2f})")

            if collection is None:
                logger.debug(f"No Lightroom collection for item: {name}")
                continue

            work_items.append(WorkItem(name=name, data=item, collection=collection, similarity=score))

        return work_items

    def process_item(self, item: WorkItem, options: OperationOptions) -> bool:
        """
        Process one matched item.

        Links the external record to its collection by sending the collection
        details back to the service. Items without an "id" have nothing to
        update. Dry runs only log the intended change.

        Returns:
            True if the item was processed
        """
        if options.is_dry_run:
            logger.info(f"Dry run - would process: {item.name} -> collection '{item.collection.name}'")
            return True

        item_id = item.data.get("id")
        if item_id is None:
            logger.info(f"Nothing to update for item without id: {item.name}")
            return True

        payload = {
            "lightroom_collection": item.collection.name,
            "lightroom_collection_id": item.collection.id_local,
        }

        def update():
            # An empty body (204) still counts as success
            response = self.api.update_data(item_id, payload)
            return response if response is not None else True

        response = retry_call(
            update,
            policy=self.config.retry_policy(f"Update {item.name}"),
            cancel_event=options.cancel_event,
        )
        if response is None:
            logger.warning(f"Failed to update item: {item.name}")
            return False
        return True

    def _finish(self, result: OperationResult, status: str) -> OperationResult:
        result.status = status
        result.total_time = time.time() - result.start_time
        return result


def perform_main_operation(config: AppConfig,
                           options: Optional[OperationOptions] = None,
                           api: Optional[ExternalAPI] = None,
                           collections: Optional[CollectionSource] = None,
                           progress_factory: Optional[ProgressFactory] = None) -> OperationResult:
    """
    Run the main operation with default collaborators where none are given.

    Args:
        config: Application configuration
        options: Run options
        api: External service client (defaults to ExternalAPI(config))
        collections: Collection source (defaults to no collections)
        progress_factory: Progress scope factory (defaults to tqdm)

    Returns:
        OperationResult
    """
    operation = MainOperation(
        config,
        api or ExternalAPI(config),
        collections or StaticCollections({}),
        progress_factory
    )
    return operation.run(options)
