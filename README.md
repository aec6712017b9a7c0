# kannolo

Building blocks for nearest neighbour search over dense and sparse
vectors: in-memory datasets with exhaustive top-k search, readers for
common vector file formats, and a command that computes exact ground
truth.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Distances

`kannolo.dataset.DistanceType` has two members. `EUCLIDEAN` (`"l2"`) is
the squared Euclidean distance. `DOT_PRODUCT` (`"ip"`) is the inner
product reported negated. In both cases a smaller value means closer.
`DistanceType.parse("l2")` or `DistanceType.parse("ip")` turns a name
into a member and raises `ValueError` for anything else.

`select_topk(distances, k)` returns the `k` smallest distances as
`(distance, index)` pairs in ascending order. Ties keep index order.

## Dense vectors

```python
import numpy as np
from kannolo.dataset import DistanceType
from kannolo.dense_dataset import DenseDataset

data = np.random.rand(1000, 64).astype(np.float32)
dataset = DenseDataset.from_vec(data.ravel(), 64, DistanceType.EUCLIDEAN, np.float32)

for score, doc_id in dataset.search(data[0], 10):
    print(doc_id, score)
```

`DenseDataset(d, distance, dtype)` starts empty. The members are:

- `push(vector)` appends one vector of length `d`.
- `extend(values)` appends raw values. The vector count follows the total
  length.
- `get(i)` returns a read-only view of vector `i`.
- `values()` returns a read-only view of all stored values.
- `compute_distances(query)` returns the distance from `query` to every
  vector, in id order.
- `compute_distance_by_id(i, j)` returns the distance between two stored
  vectors.
- `iter_batches(n)` yields flat slices of `n` vectors at a time.
  Iterating the dataset yields one vector at a time.
- `from_random_sample(n, rng)` returns `n` distinct vectors drawn at
  random.
- `top1(queries)` takes a flattened batch of queries and returns the
  nearest `(distance, id)` for each one. On an empty dataset it returns
  the largest float32 and `MISSING_ID` (-1).

A query whose length differs from `d` raises `ValueError`.

## Sparse vectors

```python
import numpy as np
from kannolo.dataset import DistanceType
from kannolo.sparse_dataset import SparseDataset

dataset = SparseDataset(DistanceType.DOT_PRODUCT, np.float32)
dataset.push([1, 5, 9], [0.5, 1.0, 0.25])
dataset.push([2, 5], [1.0, 2.0])
print(dataset.search(dataset.get(0), 2))
```

Each vector is stored as sorted `uint16` component ids with their values.
Vector `i` spans `offsets()[i]:offsets()[i+1]` of `components()` and
`values()`. The dimension is the largest component id seen, plus one.

Rules and extra members:

- `push` rejects empty vectors, unsorted components, components outside
  `0..65535`, and mismatched lengths.
- `get_with_offset`, `offset_to_id` and `vector_len` give access by
  position.
- `sparse_dot_product(a, b)` computes the inner product of two sparse
  vectors. Each can be a `SparseVector` or a `(components, values)` pair.
- Only the inner product is supported. Asking a sparse dataset for
  Euclidean distances raises `ValueError`.

## Reading files

`kannolo.io_utils` provides these readers:

- `read_numpy_flatten_2d(path)` reads a 2-D `.npy` array and returns its
  values flattened row by row, together with the row length.
- `read_numpy_flatten_1d(path)` reads a 1-D `.npy` array and returns it
  with its length.
- `read_fvecs_file(path)` and `read_ivecs_file(path)` return
  `(flat data, d, n_rows)` for `.fvecs` (float32) and `.ivecs` (uint32)
  files.
- `read_tsv_file(path)` reads `query\tdoc\trank\tscore` lines. It groups
  document ids by consecutive query id and returns those groups together
  with the size of the largest group.

## Ground truth

```
kannolo-groundtruth --input-file docs.npy --queries-file queries.npy --k 10 --metric l2 --output-path gt.tsv
```

Both inputs are 2-D `.npy` files, read as float32. `--metric` is `l2`
(Euclidean, the default) or `ip` (inner product). `--k` defaults to 10.

Each output line holds four tab-separated fields: the query id, the
document id, the rank (from 1) and the score. The same work is available
from Python:

- `compute_groundtruth(dataset, queries, k)` computes the results.
- `write_results(path, results)` writes them to a file.

## What this package does not do

There is no approximate index here: every search is an exhaustive scan.
The package has no graph-based index and no way to save a built index.
It has no k-means clustering. It also cannot read the binary sparse
vector file format, so sparse datasets are built with
`SparseDataset.push`.