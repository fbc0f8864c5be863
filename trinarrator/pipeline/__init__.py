"""
Pipeline Module

Contains the main orchestration logic and the job/record stores.
"""

from .jobs import InvalidTransitionError, JobLedger, JobNotFoundError
from .orchestrator import VideoPipeline
from .records import MultiStoreRecorder, SecondaryWriteError
from .storage import (
    DocumentStore,
    FirestoreDocumentStore,
    JsonDocumentStore,
    StoreSet,
    open_stores,
)

__all__ = [
    "VideoPipeline",
    "JobLedger",
    "JobNotFoundError",
    "InvalidTransitionError",
    "MultiStoreRecorder",
    "SecondaryWriteError",
    "DocumentStore",
    "FirestoreDocumentStore",
    "JsonDocumentStore",
    "StoreSet",
    "open_stores",
]
