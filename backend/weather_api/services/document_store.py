"""
Document Store
==============

Named collections of JSON documents, persisted to a single file.

PERSISTENCE:
-----------
Everything is saved to one JSON file (weather_db.json by default) so data
survives restarts:
- Every insert/update/delete writes the whole file (atomic write:
  temp file, then rename)
- Restart server = collections are loaded back automatically
- No file configured = in-memory only (used by the tests)

ATOMICITY:
---------
Each operation runs under one lock and builds the new collection state on
the side. The in-memory state is only swapped in after the file write
succeeds, so a bulk update either changes every matching document or none.
There is no locking across operations: a read followed by a replace can
lose a concurrent write.

DOCUMENTS:
---------
Plain dicts. Every document gets an "_id" (UUID string) on insert. Datetimes
are stored as {"$date": "<iso>"} in the file and come back as aware UTC
datetimes. find() returns copies in insertion order.
"""

import copy
import json
import logging
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from weather_api.errors import StoreFailure
from weather_api.services.criteria import Predicate
from weather_api.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def _encode(value: Any) -> Any:
    """json.dump default hook: datetimes become tagged ISO strings."""
    if isinstance(value, datetime):
        return {"$date": ensure_utc(value).isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(obj: dict) -> Any:
    """json.load object hook: reverse of _encode."""
    if len(obj) == 1 and "$date" in obj:
        return ensure_utc(datetime.fromisoformat(obj["$date"]))
    return obj


class DocumentStore:
    """
    Holds every collection and owns the file they are saved to.

    Usage:
        store = DocumentStore(Path("weather_db.json"))
        readings = store.collection("readings")
        readings.insert_one({"device_name": "S1", ...})
    """

    def __init__(self, db_file: Optional[Union[str, Path]] = None):
        self.db_file = Path(db_file) if db_file else None
        self._lock = threading.RLock()
        self._data: dict[str, dict[str, dict]] = {}
        self._collections: dict[str, "Collection"] = {}
        self._load_from_file()

    def collection(self, name: str) -> "Collection":
        with self._lock:
            if name not in self._collections:
                self._data.setdefault(name, {})
                self._collections[name] = Collection(self, name)
            return self._collections[name]

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _load_from_file(self):
        """Load all collections from the JSON file."""
        if self.db_file is None:
            logger.info("No database file configured, documents are kept in memory")
            return
        if not self.db_file.exists():
            logger.info(f"No existing database found at {self.db_file}")
            return

        try:
            with open(self.db_file, 'r', encoding='utf-8') as f:
                data = json.load(f, object_hook=_decode)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing database JSON: {e}")
            raise StoreFailure(f"Database file {self.db_file} is corrupted") from e
        except OSError as e:
            logger.error(f"Error reading database file: {e}", exc_info=True)
            raise StoreFailure(f"Could not read database file {self.db_file}") from e

        for name, documents in data.items():
            self._data[name] = {doc["_id"]: doc for doc in documents if "_id" in doc}
            logger.info(f"Loaded {len(self._data[name])} documents into '{name}'")

    def _commit(self, name: str, documents: dict[str, dict]):
        """
        Save the database with `documents` as the new contents of collection
        `name`, then make it the live state.

        Raises:
            StoreFailure: if the file could not be written. Live state is untouched.
        """
        if self.db_file is not None:
            snapshot = {
                collection: list(docs.values())
                for collection, docs in {**self._data, name: documents}.items()
            }
            temp_file = self.db_file.with_suffix('.json.tmp')
            try:
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(snapshot, f, indent=2, ensure_ascii=False, default=_encode)
                # Atomic rename (works on Windows too)
                temp_file.replace(self.db_file)
            except PermissionError as e:
                logger.error(f"Permission denied saving database: {e}")
                raise StoreFailure("Permission denied saving database") from e
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Error saving database: {e}", exc_info=True)
                raise StoreFailure(f"Could not save database: {e}") from e
            logger.debug(f"Saved '{name}' ({len(documents)} documents)")

        self._data[name] = documents


class Collection:
    """
    One named set of documents.

    Predicates are the ones built by services.criteria; passing None
    matches every document.
    """

    def __init__(self, store: DocumentStore, name: str):
        self._store = store
        self.name = name

    @property
    def _documents(self) -> dict[str, dict]:
        return self._store._data[self.name]

    @staticmethod
    def _matches(predicate: Optional[Predicate], document: dict) -> bool:
        return predicate is None or predicate.matches(document)

    # =========================================================================
    # READS
    # =========================================================================

    def find(self, predicate: Optional[Predicate] = None) -> list[dict]:
        with self._store._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._documents.values()
                if self._matches(predicate, doc)
            ]

    def find_one(self, predicate: Optional[Predicate] = None) -> Optional[dict]:
        with self._store._lock:
            for doc in self._documents.values():
                if self._matches(predicate, doc):
                    return copy.deepcopy(doc)
        return None

    def count(self, predicate: Optional[Predicate] = None) -> int:
        with self._store._lock:
            return sum(1 for doc in self._documents.values() if self._matches(predicate, doc))

    # =========================================================================
    # WRITES
    # =========================================================================

    def insert_one(self, document: dict) -> str:
        return self.insert_many([document])[0]

    def insert_many(self, documents: Iterable[dict]) -> list[str]:
        new_docs = []
        for document in documents:
            doc = copy.deepcopy(document)
            doc["_id"] = doc.get("_id") or str(uuid.uuid4())
            new_docs.append(doc)

        with self._store._lock:
            updated = dict(self._documents)
            for doc in new_docs:
                if doc["_id"] in updated:
                    raise StoreFailure(f"Duplicate id {doc['_id']} in '{self.name}'")
                updated[doc["_id"]] = doc
            self._store._commit(self.name, updated)
        return [doc["_id"] for doc in new_docs]

    def replace_one(self, document_id: str, document: dict) -> int:
        """
        Replace a whole document, keeping its id.

        Returns:
            1 if the stored document changed, 0 if it was missing or identical
        """
        replacement = copy.deepcopy(document)
        replacement["_id"] = document_id

        with self._store._lock:
            current = self._documents.get(document_id)
            if current is None or current == replacement:
                return 0
            updated = dict(self._documents)
            updated[document_id] = replacement
            self._store._commit(self.name, updated)
        return 1

    def update_one(self, predicate: Optional[Predicate], fields: dict) -> int:
        return self._update(predicate, fields, limit=1)

    def update_many(self, predicate: Optional[Predicate], fields: dict) -> int:
        return self._update(predicate, fields)

    def _update(self, predicate: Optional[Predicate], fields: dict, limit: Optional[int] = None) -> int:
        """
        Set `fields` on matching documents.

        Returns:
            Number of documents whose values actually changed
        """
        values = copy.deepcopy(fields)
        modified = 0

        with self._store._lock:
            updated = dict(self._documents)
            matched = 0
            for doc_id, doc in self._documents.items():
                if limit is not None and matched >= limit:
                    break
                if not self._matches(predicate, doc):
                    continue
                matched += 1
                if all(doc.get(key) == value for key, value in values.items()):
                    continue
                updated[doc_id] = {**doc, **values}
                modified += 1

            if modified:
                self._store._commit(self.name, updated)
        return modified

    def delete_one(self, predicate: Optional[Predicate]) -> int:
        return self._delete(predicate, limit=1)

    def delete_many(self, predicate: Optional[Predicate]) -> int:
        return self._delete(predicate)

    def _delete(self, predicate: Optional[Predicate], limit: Optional[int] = None) -> int:
        with self._store._lock:
            doomed = []
            for doc_id, doc in self._documents.items():
                if limit is not None and len(doomed) >= limit:
                    break
                if self._matches(predicate, doc):
                    doomed.append(doc_id)

            if doomed:
                removed = set(doomed)
                updated = {k: v for k, v in self._documents.items() if k not in removed}
                self._store._commit(self.name, updated)
        return len(doomed)
