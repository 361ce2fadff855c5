"""Persistence: blob stores plus dataset and run collections on top."""

from evalstudio.storage.blob_store import BlobStore, JsonFileBlobStore, MemoryBlobStore
from evalstudio.storage.dataset_store import DatasetStore
from evalstudio.storage.run_store import MAX_RUNS, RunStore

__all__ = [
    "BlobStore",
    "DatasetStore",
    "JsonFileBlobStore",
    "MAX_RUNS",
    "MemoryBlobStore",
    "RunStore",
]
