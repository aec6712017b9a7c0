"""Dense vectors stored contiguously in a flat array."""

from __future__ import annotations

import operator
from typing import Any, Iterable, Iterator

import numpy as np

from .dataset import Dataset, DistanceType

MISSING_ID = -1
"""Id reported by :meth:`DenseDataset.top1` when the dataset is empty."""

_CHUNK_ELEMENTS = 1 << 22


class DenseDataset(Dataset):
    """Fixed-dimension vectors stored row after row in one flat array."""

    def __init__(
        self,
        d: int,
        distance: "DistanceType | str" = DistanceType.EUCLIDEAN,
        dtype: Any = np.float32,
    ) -> None:
        if d <= 0:
            raise ValueError(f"Dimensionality must be positive, got {d}")
        self._d = int(d)
        self.distance = DistanceType.parse(distance)
        self.dtype = np.dtype(dtype)
        self._data = np.empty(0, dtype=self.dtype)
        self._n = 0

    @classmethod
    def from_vec(
        cls,
        data: Any,
        d: int,
        distance: "DistanceType | str" = DistanceType.EUCLIDEAN,
        dtype: Any = np.float32,
    ) -> "DenseDataset":
        """Build a dataset from a flat (or row-major) sequence of values."""
        dataset = cls(d, distance, dtype)
        dataset._data = np.array(data, dtype=dataset.dtype).ravel()
        dataset._n = dataset._data.size // dataset._d
        return dataset

    def __len__(self) -> int:
        return self._n

    def __iter__(self) -> Iterator[np.ndarray]:
        return self.iter_batches(1)

    def __repr__(self) -> str:
        return (
            f"DenseDataset(n_vecs={self._n}, d={self._d}, "
            f"distance={self.distance.name}, dtype={self.dtype.name})"
        )

    def values(self) -> np.ndarray:
        """Read-only view of all stored values."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def dim(self) -> int:
        return self._d

    def shape(self) -> tuple[int, int]:
        return self._n, self._d

    def nnz(self) -> int:
        return self._n * self._d

    def _rows(self) -> np.ndarray:
        return self._data[: self._n * self._d].reshape(self._n, self._d)

    def get(self, index: int) -> np.ndarray:
        """Read-only view of the vector at ``index``."""
        index = operator.index(index)
        if not 0 <= index < self._n:
            raise IndexError("Index out of bounds.")
        start = index * self._d
        return self.values()[start : start + self._d]

    def push(self, vector: Any) -> None:
        """Append one vector of length ``dim()``."""
        row = np.asarray(vector, dtype=self.dtype).ravel()
        if row.size != self._d:
            raise ValueError(
                f"Input vector length ({row.size}) does not match "
                f"the dimensionality ({self._d})."
            )
        self._data = np.concatenate([self._data, row])
        self._n += 1

    def extend(self, items: Iterable[Any]) -> None:
        """Append raw values; the vector count follows the total length."""
        source = items if isinstance(items, np.ndarray) else list(items)
        extra = np.asarray(source, dtype=self.dtype).ravel()
        self._data = np.concatenate([self._data, extra])
        self._n = self._data.size // self._d

    def compute_distance_by_id(self, idx1: int, idx2: int) -> float:
        first = self.get(idx1).astype(np.float32)
        second = self.get(idx2).astype(np.float32)
        if self.distance is DistanceType.EUCLIDEAN:
            diff = first - second
            return float(diff @ diff)
        return -float(first @ second)

    def _check_query(self, query: Any) -> np.ndarray:
        checked = np.asarray(query, dtype=np.float32).ravel()
        if checked.size != self._d:
            raise ValueError(
                f"Query dimension ({checked.size}) does not match "
                f"the vector dimension ({self._d})."
            )
        return checked

    def _distance_matrix(self, queries: np.ndarray) -> np.ndarray:
        rows = self._rows().astype(np.float32)
        if self.distance is DistanceType.DOT_PRODUCT:
            return -(queries @ rows.T)
        result = np.empty((queries.shape[0], self._n), dtype=np.float32)
        step = max(1, _CHUNK_ELEMENTS // max(1, self._n * self._d))
        for start in range(0, queries.shape[0], step):
            diff = queries[start : start + step, None, :] - rows[None, :, :]
            result[start : start + step] = np.einsum("qnd,qnd->qn", diff, diff)
        return result

    def _distances(self, query: np.ndarray) -> np.ndarray:
        return self._distance_matrix(query[None, :])[0]

    def compute_distances(self, query: Any) -> np.ndarray:
        """Distances from ``query`` to every stored vector, in id order."""
        return self._distances(self._check_query(query))

    def search(self, query: Any, k: int) -> list[tuple[float, int]]:
        return super().search(query, k)

    def get_space_usage_bytes(self) -> int:
        return self._n * self._d * self.dtype.itemsize

    def iter_batches(self, batch_size: int) -> Iterator[np.ndarray]:
        """Yield flat slices of ``batch_size`` vectors; the last may be shorter."""
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        step = batch_size * self._d
        values = self.values()
        for start in range(0, values.size, step):
            yield values[start : start + step]

    def from_random_sample(self, n_vecs: int, rng: Any = None) -> "DenseDataset":
        """Return ``n_vecs`` distinct vectors drawn at random, Euclidean distance."""
        if not 0 <= n_vecs <= self._n:
            raise ValueError(
                f"Cannot sample {n_vecs} vectors from a dataset of {self._n}."
            )
        generator = np.random.default_rng(rng)
        ids = generator.choice(self._n, size=n_vecs, replace=False)
        sample = DenseDataset(self._d, DistanceType.EUCLIDEAN, self.dtype)
        sample.extend(self._rows()[ids])
        return sample

    def top1(self, queries: Any) -> list[tuple[float, int]]:
        """Nearest stored vector for each query as ``(distance, id)``.

        An empty dataset yields ``(float32 max, MISSING_ID)`` for every query.
        """
        flat = np.asarray(queries, dtype=np.float32).ravel()
        if flat.size % self._d != 0:
            raise ValueError(
                f"Query length ({flat.size}) is not a multiple of "
                f"the centroid dimension ({self._d})."
            )
        batch = flat.reshape(-1, self._d)
        if self._n == 0:
            worst = float(np.finfo(np.float32).max)
            return [(worst, MISSING_ID)] * batch.shape[0]
        matrix = self._distance_matrix(batch)
        best = np.argmin(matrix, axis=1)
        picked = matrix[np.arange(batch.shape[0]), best]
        return [(float(dist), int(idx)) for dist, idx in zip(picked, best)]