"""
Document stores for the ledger and the two secondary record stores.

Two backends share one small interface:
- JsonDocumentStore: a JSON file per store, for local runs and tests
- FirestoreDocumentStore: one Firestore collection, each store may
  live in its own Firestore database

Usage:
    stores = open_stores(settings)
    stores.ledger.put(job.job_id, job.model_dump(mode="json"))
"""

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from loguru import logger

from ..config import Settings


class DocumentStore:
    """Minimal keyed document store."""

    name: str = "store"

    def put(self, doc_id: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def get(self, doc_id: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def find(self, limit: int = 100, **filters: Any) -> list[dict[str, Any]]:
        raise NotImplementedError


class JsonDocumentStore(DocumentStore):
    """JSON-backed store that persists every write to disk."""

    def __init__(self, name: str, directory: Path):
        self.name = name
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.file_path = self.directory / f"{name}.json"
        self._lock = threading.Lock()
        self._data = self._load()
        logger.info(f"JsonDocumentStore '{name}' initialized with {len(self._data)} entries")

    def _load(self) -> dict:
        if self.file_path.exists():
            try:
                with open(self.file_path, "r") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to load {self.file_path}: {e}, starting fresh")
                return {}
        return {}

    def _save(self, data: dict):
        # Write errors propagate: callers decide how a lost write is reported
        tmp_path = self.file_path.with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2, default=str)
        tmp_path.replace(self.file_path)

    def put(self, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            # Memory only changes once the file on disk has it
            updated = {**self._data, doc_id: data}
            self._save(updated)
            self._data = updated

    def get(self, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self._data.get(doc_id)
        return dict(doc) if doc is not None else None

    def find(self, limit: int = 100, **filters: Any) -> list[dict[str, Any]]:
        docs = [
            dict(doc) for doc in self._data.values()
            if all(doc.get(k) == v for k, v in filters.items())
        ]
        docs.sort(key=lambda d: str(d.get("created_at", "")), reverse=True)
        return docs[:limit]


class FirestoreDocumentStore(DocumentStore):
    """One Firestore collection."""

    def __init__(
        self,
        collection: str,
        project: Optional[str] = None,
        database: str = "(default)",
        client=None,
    ):
        if client is None:
            from google.cloud import firestore
            client = firestore.Client(project=project, database=database)
        self.name = f"{database}/{collection}"
        self.db = client
        self.collection = self.db.collection(collection)

    def put(self, doc_id: str, data: dict[str, Any]) -> None:
        self.collection.document(doc_id).set(data)

    def get(self, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self.collection.document(doc_id).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    def find(self, limit: int = 100, **filters: Any) -> list[dict[str, Any]]:
        from google.cloud import firestore

        query = self.collection
        for key, value in filters.items():
            query = query.where(key, "==", value)
        query = query.order_by("created_at", direction=firestore.Query.DESCENDING)
        query = query.limit(limit)
        return [doc.to_dict() for doc in query.stream()]


@dataclass
class StoreSet:
    """The three independent stores: canonical ledger plus two secondaries."""
    ledger: DocumentStore
    theater: DocumentStore
    archive: DocumentStore


def open_stores(settings: Settings) -> StoreSet:
    """Open the three stores for the configured backend."""
    if settings.store_backend == "firestore":
        logger.info(f"Using Firestore stores (project={settings.gcp_project_id})")
        return StoreSet(
            ledger=FirestoreDocumentStore(
                settings.ledger_collection, settings.gcp_project_id, settings.ledger_database
            ),
            theater=FirestoreDocumentStore(
                settings.theater_collection, settings.gcp_project_id, settings.theater_database
            ),
            archive=FirestoreDocumentStore(
                settings.archive_collection, settings.gcp_project_id, settings.archive_database
            ),
        )

    return StoreSet(
        ledger=JsonDocumentStore(settings.ledger_collection, settings.store_dir),
        theater=JsonDocumentStore(settings.theater_collection, settings.store_dir),
        archive=JsonDocumentStore(settings.archive_collection, settings.store_dir),
    )
