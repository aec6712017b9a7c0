"""Dense and sparse vector datasets, file readers and exact ground truth for nearest neighbour search."""

__version__ = "0.3.1"

__all__ = [
    "dataset",
    "dense_dataset",
    "sparse_dataset",
    "io_utils",
    "groundtruth",
]