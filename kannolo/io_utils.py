"""Readers for numpy arrays, fvecs/ivecs files and TSV result files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import numpy as np

_U32_MAX = 2**32 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


def read_numpy_flatten_2d(filepath: "str | Path") -> tuple[np.ndarray, int]:
    """Load a 2-D ``.npy`` array; return its rows flattened and the row length."""
    array = np.load(filepath, allow_pickle=False)
    if array.ndim != 2:
        raise ValueError(f"Expected a 2-D array, found {array.ndim} dimensions")
    return np.ascontiguousarray(array).ravel(), int(array.shape[1])


def read_numpy_flatten_1d(filepath: "str | Path") -> tuple[np.ndarray, int]:
    """Load a 1-D ``.npy`` array; return its values and their count."""
    array = np.load(filepath, allow_pickle=False)
    if array.ndim != 1:
        raise ValueError(f"Expected a 1-D array, found {array.ndim} dimensions")
    return np.ascontiguousarray(array), int(array.shape[0])


def _read_vecs(fname: "str | Path", fmt: str) -> tuple[np.ndarray, int, int]:
    raw = Path(fname).read_bytes()
    if len(raw) < 4:
        raise EOFError("File is too short to hold a dimension")
    d = int.from_bytes(raw[:4], "little")
    itemsize = np.dtype(fmt).itemsize
    n_rows = len(raw) // (d * itemsize + 4)
    table = np.frombuffer(raw, dtype=fmt, count=n_rows * (d + 1)).reshape(
        n_rows, d + 1
    )
    data = np.ascontiguousarray(table[:, 1:]).astype(np.dtype(fmt).newbyteorder("="))
    return data.ravel(), d, n_rows


def read_fvecs_file(fname: "str | Path") -> tuple[np.ndarray, int, int]:
    """Read an ``.fvecs`` file; return ``(flat float32 data, d, n_rows)``."""
    return _read_vecs(fname, "<f4")


def read_ivecs_file(fname: "str | Path") -> tuple[np.ndarray, int, int]:
    """Read an ``.ivecs`` file; return ``(flat uint32 data, d, n_rows)``."""
    return _read_vecs(fname, "<u4")


def _parse_u32(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"Parse error: invalid digit in {text!r}")
    value = int(text)
    if value > _U32_MAX:
        raise ValueError(f"Parse error: {text!r} is too large")
    return value


def read_tsv_file(fname: "str | Path") -> tuple[list[list[int]], int]:
    """Read ``query\\tdoc\\trank\\tscore`` lines grouped by consecutive query.

    Returns the document ids of each query group and the largest group size.
    """
    groups: list[list[int]] = []
    current_query: Any = None
    with open(fname, encoding="utf-8", newline="") as handle:
        for line in handle:
            line = line.removesuffix("\n").removesuffix("\r")
            parts = line.split("\t")
            if len(parts) != 4:
                raise ValueError(f"Invalid number of columns found in line: {line}")
            query_id = _parse_u32(parts[0])
            doc_id = _parse_u32(parts[1])
            if current_query is None or current_query != query_id:
                groups.append([])
                current_query = query_id
            groups[-1].append(doc_id)
    return groups, max((len(group) for group in groups), default=0)