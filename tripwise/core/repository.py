"""
Storage for the current itinerary and a short history of recent ones.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
import uuid
from typing import Any, Optional

from pymongo import ASCENDING, MongoClient

from tripwise.core.schemas import Itinerary, TripRequest

logger = logging.getLogger(__name__)

CURRENT_KEY = "current"


class MemoryStore:
    """Process-local persisted slot, used when no database is configured."""

    def __init__(self):
        self._current: Optional[dict[str, Any]] = None
        self._history: list[dict[str, Any]] = []

    def read_current(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._current)

    def write_current(self, entry: dict[str, Any]) -> None:
        self._current = copy.deepcopy(entry)

    def delete_current(self) -> None:
        self._current = None

    def history_entries(self) -> list[dict[str, Any]]:
        """Oldest first."""
        return copy.deepcopy(self._history)

    def trim_history(self, keep: int) -> None:
        drop = len(self._history) - keep
        if drop > 0:
            del self._history[:drop]

    def push_history(self, entry: dict[str, Any]) -> None:
        self._history.append(copy.deepcopy(entry))


class MongoStore:
    """Persisted slot and history in MongoDB."""

    def __init__(self, mongodb_uri: str, database_name: str, client: MongoClient | None = None):
        self.client = client or MongoClient(
            mongodb_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=10000,
            socketTimeoutMS=20000,
            retryWrites=True,
            retryReads=True,
        )
        self.db = self.client[database_name]
        self.current_collection = self.db.current_itinerary
        self.history_collection = self.db.itinerary_history

        try:
            self.history_collection.create_index([("saved_at", ASCENDING)])
            self.history_collection.create_index("record_id", unique=True)
        except Exception as e:
            logger.warning(f"[Repository] Could not create indexes: {e}")

    def read_current(self) -> Optional[dict[str, Any]]:
        doc = self.current_collection.find_one({"_key": CURRENT_KEY})
        if doc:
            doc.pop("_id", None)
            doc.pop("_key", None)
        return doc

    def write_current(self, entry: dict[str, Any]) -> None:
        self.current_collection.replace_one(
            {"_key": CURRENT_KEY}, {"_key": CURRENT_KEY, **entry}, upsert=True
        )

    def delete_current(self) -> None:
        self.current_collection.delete_many({"_key": CURRENT_KEY})

    def history_entries(self) -> list[dict[str, Any]]:
        docs = list(self.history_collection.find({}).sort("saved_at", ASCENDING))
        for doc in docs:
            doc.pop("_id", None)
        return docs

    def trim_history(self, keep: int) -> None:
        docs = list(
            self.history_collection.find({}, {"record_id": 1}).sort("saved_at", ASCENDING)
        )
        drop = len(docs) - keep
        if drop > 0:
            stale = [doc["record_id"] for doc in docs[:drop]]
            self.history_collection.delete_many({"record_id": {"$in": stale}})

    def push_history(self, entry: dict[str, Any]) -> None:
        self.history_collection.insert_one(dict(entry))


class ItineraryRepository:
    """
    Single "current itinerary" slot plus capped history.

    The current slot lives in memory and in the backing store. Replacing it
    clears both before writing either, inside one lock, so readers never see
    the old and new itinerary mixed.
    """

    def __init__(self, store: MemoryStore | MongoStore | None = None, history_limit: int = 5):
        self.store = store or MemoryStore()
        self.history_limit = history_limit
        self._lock = threading.Lock()
        self._current: Optional[dict[str, Any]] = None
        self._version = 0

    def _stamp(self, itinerary: Itinerary, request: TripRequest | None) -> dict[str, Any]:
        self._version += 1
        entry: dict[str, Any] = {
            "record_id": f"itn_{uuid.uuid4().hex[:12]}",
            "saved_at": time.time(),
            "version": self._version,
            "itinerary": itinerary.model_dump(mode="json"),
        }
        if request is not None:
            entry["request"] = request.model_dump(mode="json", by_alias=True)
        return entry

    def get_current(self) -> Optional[dict[str, Any]]:
        with self._lock:
            if self._current is None:
                self._current = self.store.read_current()
            return copy.deepcopy(self._current)

    def replace_current(
        self, itinerary: Itinerary, request: TripRequest | None = None
    ) -> dict[str, Any]:
        """Clear the memory and persisted slots, then write both."""
        with self._lock:
            entry = self._stamp(itinerary, request)
            self._current = None
            self.store.delete_current()
            self.store.write_current(entry)
            self._current = copy.deepcopy(entry)
            logger.info(
                f"[Repository] Current itinerary replaced "
                f"({entry['record_id']}, version {entry['version']})"
            )
            return copy.deepcopy(entry)

    def append_history(self, entry: dict[str, Any], cap: int | None = None) -> None:
        """Trim the oldest entries to cap - 1, then append."""
        cap = self.history_limit if cap is None else cap
        with self._lock:
            self.store.trim_history(max(cap - 1, 0))
            if cap > 0:
                self.store.push_history(entry)

    def save(self, itinerary: Itinerary, request: TripRequest | None = None) -> dict[str, Any]:
        entry = self.replace_current(itinerary, request)
        self.append_history(entry)
        return entry

    def history(self) -> list[dict[str, Any]]:
        """Newest first."""
        with self._lock:
            return list(reversed(self.store.history_entries()))

    def clear_current(self) -> None:
        with self._lock:
            self._current = None
            self.store.delete_current()
            logger.info("[Repository] Current itinerary cleared")


def create_repository(mongodb_uri: str = "", database_name: str = "tripwise", history_limit: int = 5) -> ItineraryRepository:
    if mongodb_uri:
        logger.info(f"[Repository] Using MongoDB database {database_name}")
        return ItineraryRepository(MongoStore(mongodb_uri, database_name), history_limit)
    logger.info("[Repository] MONGODB_URI not set, using in-memory store")
    return ItineraryRepository(MemoryStore(), history_limit)
