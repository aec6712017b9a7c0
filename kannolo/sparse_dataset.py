"""Sparse vectors stored as concatenated components, values and offsets."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np

from .dataset import Dataset, DistanceType

_MAX_COMPONENT = np.iinfo(np.uint16).max


@dataclass(frozen=True, eq=False)
class SparseVector:
    """A sparse vector: sorted component ids with their values."""

    components: np.ndarray
    values: np.ndarray
    d: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "components", np.asarray(self.components).ravel())
        object.__setattr__(self, "values", np.asarray(self.values).ravel())

    def __len__(self) -> int:
        return int(self.components.size)


def _as_sparse(vector: Any) -> SparseVector:
    if isinstance(vector, SparseVector):
        return vector
    components, values = vector
    return SparseVector(np.asarray(components), np.asarray(values))


def sparse_dot_product(first: Any, second: Any) -> float:
    """Inner product of two sparse vectors given as vectors or (components, values)."""
    a = _as_sparse(first)
    b = _as_sparse(second)
    _, ia, ib = np.intersect1d(
        a.components, b.components, assume_unique=False, return_indices=True
    )
    return float(
        np.dot(a.values[ia].astype(np.float32), b.values[ib].astype(np.float32))
    )


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class SparseDataset(Dataset):
    """Variable-length sparse vectors; the dimension grows with the largest component."""

    def __init__(
        self,
        distance: "DistanceType | str" = DistanceType.DOT_PRODUCT,
        dtype: Any = np.float32,
    ) -> None:
        self.distance = DistanceType.parse(distance)
        self.dtype = np.dtype(dtype)
        self._d = 0
        self._n = 0
        self._components = np.empty(0, dtype=np.uint16)
        self._values = np.empty(0, dtype=self.dtype)
        self._offsets = np.zeros(1, dtype=np.int64)
        self._pending: list[tuple[np.ndarray, np.ndarray, int]] = []

    def _ensure_dim(self, d: int) -> None:
        self._d = max(self._d, int(d))

    def _flush(self) -> None:
        if not self._pending:
            return
        comps, vals, lengths = zip(*self._pending)
        last = int(self._offsets[-1])
        new_offsets = last + np.cumsum(np.asarray(lengths, dtype=np.int64))
        self._components = np.concatenate([self._components, *comps])
        self._values = np.concatenate([self._values, *vals])
        self._offsets = np.concatenate([self._offsets, new_offsets])
        self._pending = []

    def __len__(self) -> int:
        return self._n

    def __iter__(self) -> Iterator[SparseVector]:
        return (self.get(i) for i in range(self._n))

    def __repr__(self) -> str:
        return (
            f"SparseDataset(n_vecs={self._n}, d={self._d}, nnz={self.nnz()}, "
            f"distance={self.distance.name}, dtype={self.dtype.name})"
        )

    def values(self) -> np.ndarray:
        """Read-only view of all stored values."""
        self._flush()
        return _read_only(self._values)

    def components(self) -> np.ndarray:
        """Read-only view of all stored component ids."""
        self._flush()
        return _read_only(self._components)

    def offsets(self) -> np.ndarray:
        """Read-only view of the offsets; vector ``i`` spans ``offsets[i]:offsets[i+1]``."""
        self._flush()
        return _read_only(self._offsets)

    def dim(self) -> int:
        """Largest component id seen plus one (or the reserved dimension)."""
        return self._d

    def shape(self) -> tuple[int, int]:
        return self._n, self._d

    def nnz(self) -> int:
        return int(self._components.size) + sum(len(c) for c, _, _ in self._pending)

    def get(self, index: int) -> SparseVector:
        index = operator.index(index)
        if not 0 <= index < self._n:
            raise IndexError("Index out of bounds.")
        offsets = self.offsets()
        start, end = int(offsets[index]), int(offsets[index + 1])
        return SparseVector(
            self.components()[start:end], self.values()[start:end], self._d
        )

    def get_with_offset(self, offset: int, length: int) -> SparseVector:
        """The slice of ``length`` entries starting at ``offset``."""
        if offset < 0 or length < 0 or offset + length > self.nnz():
            raise IndexError("The id is out of range")
        return SparseVector(
            self.components()[offset : offset + length],
            self.values()[offset : offset + length],
            self._d,
        )

    def offset_to_id(self, offset: int) -> int:
        """Id of the vector that starts at ``offset``."""
        offsets = self.offsets()
        position = int(np.searchsorted(offsets, offset))
        if position >= offsets.size or int(offsets[position]) != offset:
            raise ValueError(f"No vector starts at offset {offset}")
        return position

    def vector_len(self, index: int) -> int:
        """Number of non-zero entries of vector ``index``."""
        offsets = self.offsets()
        if not 0 <= index < offsets.size - 1:
            raise IndexError("The id is out of range")
        return int(offsets[index + 1] - offsets[index])

    def push(self, components: Any, values: Any) -> None:
        """Append one vector; components must be sorted and non-empty."""
        comps = np.asarray(components).ravel()
        vals = np.asarray(values).ravel()
        if comps.size != vals.size:
            raise ValueError("Vectors have different sizes")
        if comps.size == 0:
            raise ValueError("A sparse vector must have at least one component")
        wide = comps.astype(np.int64)
        if np.any(wide < 0) or np.any(wide > _MAX_COMPONENT):
            raise ValueError(f"Components must lie in [0, {_MAX_COMPONENT}]")
        if np.any(np.diff(wide) < 0):
            raise ValueError("Components must be given in sorted order")
        self._ensure_dim(int(wide[-1]) + 1)
        self._pending.append(
            (wide.astype(np.uint16), vals.astype(self.dtype), int(comps.size))
        )
        self._n += 1

    def compute_distance_by_id(self, idx1: int, idx2: int) -> float:
        if self.distance is DistanceType.EUCLIDEAN:
            raise ValueError("Euclidean distance is not supported for sparse datasets.")
        return -sparse_dot_product(self.get(idx1), self.get(idx2))

    def _check_query(self, query: Any) -> SparseVector:
        vector = _as_sparse(query)
        if vector.components.size != vector.values.size:
            raise ValueError("Query components and values length must match.")
        return vector

    def _distances(self, query: SparseVector) -> np.ndarray:
        if self.distance is DistanceType.EUCLIDEAN:
            raise ValueError("Euclidean distance is not supported for sparse datasets.")
        comps = self.components().astype(np.intp)
        vals = self.values().astype(np.float32)
        query_comps = query.components.astype(np.intp)
        size = self._d
        if query_comps.size:
            size = max(size, int(query_comps.max()) + 1)
        dense = np.zeros(size, dtype=np.float32)
        np.add.at(dense, query_comps, query.values.astype(np.float32))
        contributions = dense[comps] * vals
        ids = np.repeat(np.arange(self._n), np.diff(self.offsets()))
        return -np.bincount(ids, weights=contributions, minlength=self._n)

    def search(self, query: Any, k: int) -> list[tuple[float, int]]:
        return super().search(query, k)

    def get_space_usage_bytes(self) -> int:
        return int(
            self.components().nbytes + self.values().nbytes + self.offsets().nbytes
        )