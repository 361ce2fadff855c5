"""Dataset CRUD over an opaque blob store.

Every operation reads or writes the full collection. Concurrent writers
may clobber each other; the store assumes a single session.
"""

from __future__ import annotations

import json

import structlog
from pydantic import TypeAdapter

from evalstudio.errors import DatasetNotFoundError
from evalstudio.ids import IdGenerator, default_id_generator
from evalstudio.models.dataset import Dataset, DatasetSource, utc_now
from evalstudio.storage.blob_store import BlobStore

log = structlog.get_logger(__name__)

_DATASET_LIST = TypeAdapter(list[Dataset])


class DatasetStore:
    """Create, save, load and delete datasets.

    Args:
        blob_store: Backing text store.
        id_generator: Source of new dataset ids.
        key: Logical key the collection is stored under.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        id_generator: IdGenerator | None = None,
        key: str = "datasets",
    ) -> None:
        self._blob_store = blob_store
        self._id_generator = id_generator or default_id_generator
        self._key = key

    @property
    def id_generator(self) -> IdGenerator:
        return self._id_generator

    def create(
        self,
        name: str,
        description: str | None = None,
        source: DatasetSource = DatasetSource.manual,
    ) -> Dataset:
        """Build a new empty dataset. It is not persisted until saved."""
        now = utc_now()
        return Dataset(
            id=self._id_generator(),
            name=name,
            description=description,
            data_points=[],
            created_at=now,
            updated_at=now,
            source=source,
        )

    def load(self) -> list[Dataset]:
        """Return every stored dataset in insertion order."""
        stored = self._blob_store.get(self._key)
        if not stored:
            return []
        return _DATASET_LIST.validate_json(stored)

    def save_all(self, datasets: list[Dataset]) -> None:
        """Replace the whole collection."""
        data = _DATASET_LIST.dump_python(datasets, mode="json")
        self._blob_store.set(self._key, json.dumps(data, indent=2, ensure_ascii=False))

    def save(self, dataset: Dataset) -> Dataset:
        """Upsert *dataset* by id.

        Existing datasets are replaced in place with a refreshed
        ``updated_at``; new ones are appended.

        Returns:
            The dataset as stored.
        """
        datasets = self.load()
        for index, existing in enumerate(datasets):
            if existing.id == dataset.id:
                stored = dataset.model_copy(update={"updated_at": utc_now()})
                datasets[index] = stored
                log.debug("dataset.updated", dataset_id=dataset.id)
                break
        else:
            stored = dataset
            datasets.append(stored)
            log.debug("dataset.created", dataset_id=dataset.id)
        self.save_all(datasets)
        log.info(
            "dataset.saved",
            dataset_id=stored.id,
            data_points=len(stored.data_points),
        )
        return stored

    def get(self, dataset_id: str) -> Dataset | None:
        """Return the dataset with *dataset_id*, or None."""
        for dataset in self.load():
            if dataset.id == dataset_id:
                return dataset
        return None

    def require(self, dataset_id: str) -> Dataset:
        """Like get(), but raises DatasetNotFoundError when absent."""
        dataset = self.get(dataset_id)
        if dataset is None:
            raise DatasetNotFoundError(dataset_id)
        return dataset

    def delete(self, dataset_id: str) -> bool:
        """Remove a dataset. Returns True if it existed."""
        datasets = self.load()
        remaining = [d for d in datasets if d.id != dataset_id]
        existed = len(remaining) != len(datasets)
        self.save_all(remaining)
        if existed:
            log.info("dataset.deleted", dataset_id=dataset_id)
        return existed
