"""
Read-only access to collections in a Lightroom catalog.
"""

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional

from .config import AppConfig
from .logging_setup import get_logger

logger = get_logger(__name__)

COLLECTION_SET_CREATION_ID = "com.adobe.ag.library.group"


@dataclass(frozen=True)
class CollectionRecord:
    """A collection as stored in the catalog."""
    id_local: int
    name: str
    creation_id: str = "com.adobe.ag.library.collection"
    parent: Optional[int] = None


class CollectionSource:
    """Anything that can provide collections keyed by name."""

    def get_collections(self) -> Dict[str, CollectionRecord]:
        raise NotImplementedError


class StaticCollections(CollectionSource):
    """Collections held in memory."""

    def __init__(self, collections: Dict[str, CollectionRecord]):
        self._collections = dict(collections)

    @classmethod
    def from_names(cls, *names: str) -> "StaticCollections":
        return cls({name: CollectionRecord(id_local=i, name=name) for i, name in enumerate(names, start=1)})

    def get_collections(self) -> Dict[str, CollectionRecord]:
        return dict(self._collections)


class CatalogCollections(CollectionSource):
    """Collections read from the AgLibraryCollection table of a .lrcat file."""

    def __init__(self, catalog_path: str, config: AppConfig, include_nested: bool = False):
        """
        Initialize the collection reader.

        Args:
            catalog_path: Path to the Lightroom catalog file
            config: Application configuration
            include_nested: Also return collections inside collection sets

        Raises:
            FileNotFoundError: If the catalog file doesn't exist
        """
        if not os.path.exists(catalog_path):
            raise FileNotFoundError(f"Lightroom catalog not found: {catalog_path}")

        self.catalog_path = catalog_path
        self.config = config
        self.include_nested = include_nested
        self.db_busy_timeout = config.db_busy_timeout

    @contextmanager
    def cursor(self):
        """
        Get a read-only cursor as a context manager.

        Raises:
            RuntimeError: If the catalog cannot be opened
        """
        uri = f"file:{os.path.abspath(self.catalog_path)}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True)
            conn.execute(f"PRAGMA busy_timeout={self.db_busy_timeout}")
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to Lightroom catalog: {str(e)}")
            raise RuntimeError(f"Failed to connect to Lightroom catalog: {str(e)}")

        cursor = conn.cursor()
        try:
            yield cursor
        finally:
            cursor.close()
            conn.close()

    def get_collections(self) -> Dict[str, CollectionRecord]:
        """
        Query collections from the catalog.

        Returns:
            Mapping of collection name to CollectionRecord. When two
            collections share a name, the one with the lowest id wins.

        Raises:
            RuntimeError: If the catalog cannot be queried
        """
        query = """
            SELECT id_local, name, creationId, parent
            FROM AgLibraryCollection
            WHERE (creationId IS NULL OR creationId != ?)
        """
        if not self.include_nested:
            query += " AND parent IS NULL"
        query += " ORDER BY id_local"

        try:
            with self.cursor() as cursor:
                cursor.execute(query, (COLLECTION_SET_CREATION_ID,))
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise RuntimeError(f"Failed to retrieve collections from catalog: {str(e)}")

        collections = {}
        for id_local, name, creation_id, parent in rows:
            if name is None or name in collections:
                continue
            collections[name] = CollectionRecord(
                id_local=id_local,
                name=name,
                creation_id=creation_id,
                parent=parent
            )

        logger.info(f"Retrieved {len(collections)} collections from catalog")
        return collections
