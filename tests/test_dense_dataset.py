import numpy as np
import pytest

from kannolo.dataset import DistanceType
from kannolo.dense_dataset import MISSING_ID, DenseDataset


def make_dataset(distance=DistanceType.EUCLIDEAN, dtype=np.float32, n=6, d=4):
    rng = np.random.default_rng(11)
    data = rng.normal(size=(n, d)).astype(np.float32)
    return DenseDataset.from_vec(data.ravel(), d, distance, dtype), data


def test_from_vec_shape_and_nnz():
    dataset, data = make_dataset()
    assert dataset.shape() == data.shape
    assert len(dataset) == data.shape[0]
    assert dataset.dim() == data.shape[1]
    assert dataset.nnz() == data.size


def test_values_round_trip():
    dataset, data = make_dataset()
    np.testing.assert_array_equal(dataset.values(), data.ravel())


def test_values_are_read_only():
    dataset, _ = make_dataset()
    with pytest.raises(ValueError):
        dataset.values()[0] = 1.0


def test_get_returns_row():
    dataset, data = make_dataset()
    for i, row in enumerate(data):
        np.testing.assert_array_equal(dataset.get(i), row)


@pytest.mark.parametrize("index", [-1, 6, 100])
def test_get_out_of_bounds(index):
    dataset, _ = make_dataset()
    with pytest.raises(IndexError, match="Index out of bounds"):
        dataset.get(index)


def test_push_appends_vector():
    dataset = DenseDataset(3)
    assert dataset.is_empty()
    dataset.push([1.0, 2.0, 3.0])
    dataset.push(np.array([4.0, 5.0, 6.0]))
    assert len(dataset) == 2
    np.testing.assert_array_equal(dataset.get(1), [4.0, 5.0, 6.0])


def test_push_wrong_length():
    dataset = DenseDataset(3)
    with pytest.raises(ValueError):
        dataset.push([1.0, 2.0])
    assert len(dataset) == 0


def test_extend_counts_whole_vectors():
    dataset = DenseDataset(2)
    dataset.extend(iter([1.0, 2.0, 3.0, 4.0, 5.0]))
    assert len(dataset) == 2
    assert dataset.values().size == 5


def test_invalid_dimension():
    with pytest.raises(ValueError):
        DenseDataset(0)


def test_euclidean_distance_by_id():
    dataset = DenseDataset.from_vec([0.0, 0.0, 3.0, 4.0], 2)
    assert dataset.compute_distance_by_id(0, 1) == pytest.approx(25.0)
    assert dataset.compute_distance_by_id(1, 1) == 0.0


def test_dot_product_distance_by_id():
    dataset = DenseDataset.from_vec([1.0, 2.0, 3.0, 4.0], 2, "ip")
    assert dataset.compute_distance_by_id(0, 1) == pytest.approx(-11.0)


def test_distance_by_id_is_symmetric():
    dataset, _ = make_dataset()
    assert dataset.compute_distance_by_id(1, 4) == pytest.approx(
        dataset.compute_distance_by_id(4, 1)
    )


@pytest.mark.parametrize("distance", list(DistanceType))
def test_compute_distances_match_by_id(distance):
    dataset, data = make_dataset(distance)
    distances = dataset.compute_distances(data[2])
    assert distances.shape == (len(dataset),)
    for i in range(len(dataset)):
        assert distances[i] == pytest.approx(
            dataset.compute_distance_by_id(2, i), rel=1e-5, abs=1e-5
        )


def test_search_finds_itself_first():
    dataset, data = make_dataset()
    result = dataset.search(data[3], 3)
    assert len(result) == 3
    assert result[0][1] == 3
    assert result[0][0] == pytest.approx(0.0, abs=1e-6)
    scores = [s for s, _ in result]
    assert scores == sorted(scores)


def test_search_wrong_dimension():
    dataset, _ = make_dataset()
    with pytest.raises(ValueError, match="does not match"):
        dataset.search([1.0, 2.0], 1)


def test_search_empty_dataset():
    assert DenseDataset(4).search([0.0, 0.0, 0.0, 0.0], 5) == []


def test_space_usage_bytes():
    dataset32, _ = make_dataset(n=3, d=4)
    dataset16, _ = make_dataset(n=3, d=4, dtype=np.float16)
    assert dataset32.get_space_usage_bytes() == 48
    assert dataset16.get_space_usage_bytes() * 2 == dataset32.get_space_usage_bytes()


def test_iter_yields_rows():
    dataset, data = make_dataset()
    rows = list(dataset)
    assert len(rows) == len(data)
    for got, expected in zip(rows, data):
        np.testing.assert_array_equal(got, expected)


def test_iter_batches_last_shorter():
    dataset, data = make_dataset(n=5, d=4)
    batches = list(dataset.iter_batches(2))
    assert [b.size for b in batches] == [8, 8, 4]
    np.testing.assert_array_equal(np.concatenate(batches), data.ravel())


def test_iter_batches_invalid_size():
    dataset, _ = make_dataset()
    with pytest.raises(ValueError):
        list(dataset.iter_batches(0))


def test_from_random_sample_subset():
    dataset, data = make_dataset(distance=DistanceType.DOT_PRODUCT)
    sample = dataset.from_random_sample(4, rng=3)
    assert len(sample) == 4
    assert sample.distance is DistanceType.EUCLIDEAN
    rows = {tuple(r) for r in data}
    picked = [tuple(r) for r in sample]
    assert len(set(picked)) == 4
    assert set(picked) <= rows


def test_from_random_sample_too_many():
    dataset, _ = make_dataset()
    with pytest.raises(ValueError):
        dataset.from_random_sample(len(dataset) + 1)


def test_top1_matches_search():
    dataset, data = make_dataset()
    rng = np.random.default_rng(5)
    queries = rng.normal(size=(4, data.shape[1])).astype(np.float32)
    results = dataset.top1(queries.ravel())
    assert len(results) == 4
    for (dist, idx), query in zip(results, queries):
        best = dataset.search(query, 1)[0]
        assert idx == best[1]
        assert dist == pytest.approx(best[0], rel=1e-5)


def test_top1_on_own_rows():
    dataset, data = make_dataset()
    results = dataset.top1(data)
    assert [idx for _, idx in results] == list(range(len(data)))


def test_top1_empty_dataset():
    dataset = DenseDataset(2)
    results = dataset.top1([1.0, 2.0, 3.0, 4.0])
    worst = float(np.finfo(np.float32).max)
    assert results == [(worst, MISSING_ID), (worst, MISSING_ID)]


def test_top1_bad_query_length():
    dataset, _ = make_dataset()
    with pytest.raises(ValueError):
        dataset.top1([1.0, 2.0, 3.0])