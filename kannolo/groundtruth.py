"""Exact nearest-neighbour ground truth for a set of queries."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from .dataset import DistanceType
from .dense_dataset import DenseDataset
from .io_utils import read_numpy_flatten_2d


def compute_groundtruth(
    dataset: DenseDataset, queries: DenseDataset, k: int
) -> list[list[tuple[float, int]]]:
    """Exhaustively find the ``k`` nearest documents for every query."""
    return [dataset.search(query, k) for query in queries]


def _format_score(score: float) -> str:
    return np.format_float_positional(np.float32(score), trim="-")


def write_results(
    output_path: "str | Path",
    results: Iterable[Sequence[tuple[float, int]]],
) -> None:
    """Write ``query\\tdoc\\trank\\tscore`` lines, ranks starting at 1."""
    with open(output_path, "w", encoding="utf-8", newline="\n") as handle:
        for query_id, result in enumerate(results):
            for rank, (score, doc_id) in enumerate(result, start=1):
                handle.write(f"{query_id}\t{doc_id}\t{rank}\t{_format_score(score)}\n")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute exact nearest neighbours of queries over a dataset."
    )
    parser.add_argument("-i", "--input-file", required=True, help="The path of the dataset file.")
    parser.add_argument("-q", "--queries-file", required=True, help="The path of the query file.")
    parser.add_argument("--k", type=int, default=10, help="The number of neighbors to retrieve.")
    parser.add_argument(
        "--metric",
        default="l2",
        help="The type of distance to use. Either 'l2' (Euclidean) or 'ip' (Inner product).",
    )
    parser.add_argument(
        "-o", "--output-path", required=True, help="The output file to write the results."
    )
    return parser


def main(argv: "Sequence[str] | None" = None) -> int:
    args = _parser().parse_args(argv)

    try:
        distance = DistanceType.parse(args.metric)
    except ValueError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    docs, d = read_numpy_flatten_2d(args.input_file)
    dataset = DenseDataset.from_vec(docs, d, distance, np.float32)
    query_values, query_d = read_numpy_flatten_2d(args.queries_file)
    queries = DenseDataset.from_vec(query_values, query_d, distance, np.float32)

    print(f"N documents: {len(dataset)}")
    print(f"N dims: {dataset.dim()}")
    print(f"N queries: {len(queries)}")
    print(f"N dims: {queries.dim()}")

    results = compute_groundtruth(dataset, queries, args.k)
    write_results(args.output_path, results)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())