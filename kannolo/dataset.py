"""Common dataset interface, distance kinds and top-k selection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Sequence

import numpy as np


class DistanceType(Enum):
    """Distance used to compare vectors.

    ``EUCLIDEAN`` is the squared Euclidean distance. ``DOT_PRODUCT`` is the
    negated inner product, so that smaller is always better.
    """

    EUCLIDEAN = "l2"
    DOT_PRODUCT = "ip"

    @classmethod
    def parse(cls, name: "str | DistanceType") -> "DistanceType":
        """Return the distance named ``'l2'`` or ``'ip'`` (or a member itself)."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(
                "Invalid distance type. Choose between 'l2' and 'ip'."
            ) from None


def select_topk(distances: Sequence[float], k: int) -> list[tuple[float, int]]:
    """Return the ``k`` smallest distances as ``(distance, index)`` pairs.

    Results are in ascending order of distance; ties keep index order.
    """
    if k < 0:
        raise ValueError(f"k must not be negative, got {k}")
    values = np.asarray(distances, dtype=np.float64).ravel()
    order = np.argsort(values, kind="stable")[:k]
    return [(float(values[i]), int(i)) for i in order]


class Dataset(ABC):
    """A collection of vectors that can be searched by distance."""

    distance: DistanceType

    @abstractmethod
    def __len__(self) -> int:
        """Number of vectors."""

    @abstractmethod
    def dim(self) -> int:
        """Dimensionality of the vectors."""

    @abstractmethod
    def nnz(self) -> int:
        """Number of stored components."""

    @abstractmethod
    def get(self, index: int) -> Any:
        """Return the vector at ``index``."""

    @abstractmethod
    def compute_distance_by_id(self, idx1: int, idx2: int) -> float:
        """Distance between two stored vectors."""

    @abstractmethod
    def get_space_usage_bytes(self) -> int:
        """Bytes used by the stored vectors."""

    @abstractmethod
    def _distances(self, query: Any) -> np.ndarray:
        """Distances from a checked query to every stored vector."""

    def _check_query(self, query: Any) -> Any:
        return np.asarray(query)

    def shape(self) -> tuple[int, int]:
        """``(number of vectors, dimensionality)``."""
        return len(self), self.dim()

    def is_empty(self) -> bool:
        """True when no vector is stored."""
        return len(self) == 0

    def search(self, query: Any, k: int) -> list[tuple[float, int]]:
        """Exhaustively find the ``k`` nearest vectors to ``query``."""
        checked = self._check_query(query)
        if self.is_empty():
            return []
        return select_topk(self._distances(checked), k)