"""Tests for relevance scoring and weight normalization."""

import numpy as np
import pytest
import torch

from crw.core import (
    ClusteringError,
    DimensionMismatchError,
    RelevanceScorer,
    SchemaError,
    WeightedDataset,
    WeightingConfig,
    WeightNormalizer,
    get_weight_stats,
    validate_weights,
)


class TestWeightingConfig:
    def test_defaults(self):
        cfg = WeightingConfig()
        assert cfg.epsilon == 1e-3
        assert cfg.scoring_batch_size == 4096

    @pytest.mark.parametrize("kwargs", [{"epsilon": 0.0}, {"epsilon": -1e-3}, {"scoring_batch_size": 0}])
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            WeightingConfig(**kwargs)


class TestRelevanceScorer:
    def test_compute_distances(self):
        distances = RelevanceScorer().compute_distances(
            np.array([[3.0, 4.0], [0.0, 0.0]]),
            np.array([[0.0, 0.0], [3.0, 0.0]]),
        )

        np.testing.assert_allclose(distances, [[5.0, 4.0], [0.0, 3.0]])

    def test_score_takes_nearest_centroid(self, line_dataset):
        features = line_dataset.feature_matrix()
        raw = RelevanceScorer().score(line_dataset, features, np.array([[0.0], [10.0]]))

        np.testing.assert_array_equal(raw, [0.0, 5.0, 0.0])

    def test_score_all_coincident(self):
        dataset = WeightedDataset.from_arrays([[0.0], [0.0], [10.0]])
        raw = RelevanceScorer().score(dataset, dataset.feature_matrix(), np.array([[0.0], [10.0]]))

        np.testing.assert_array_equal(raw, [0.0, 0.0, 0.0])

    def test_score_does_not_mutate_dataset(self, line_dataset):
        RelevanceScorer().score(line_dataset, line_dataset.feature_matrix(), np.array([[1.0]]))

        np.testing.assert_array_equal(line_dataset.weights, [1.0, 1.0, 1.0])

    def test_chunking_does_not_change_results(self):
        rng = np.random.default_rng(3)
        features = rng.normal(size=(101, 4))
        centroids = rng.normal(size=(7, 4))
        dataset = WeightedDataset.from_arrays(features)

        one_by_one = RelevanceScorer(WeightingConfig(scoring_batch_size=1)).score(dataset, features, centroids)
        chunked = RelevanceScorer(WeightingConfig(scoring_batch_size=16)).score(dataset, features, centroids)
        whole = RelevanceScorer().score(dataset, features, centroids)

        np.testing.assert_array_equal(one_by_one, whole)
        np.testing.assert_array_equal(chunked, whole)

    def test_accepts_unlabeled_dataset_and_tensors(self, line_dataset):
        from crw.core import strip_label

        raw = RelevanceScorer().score(
            line_dataset,
            strip_label(line_dataset),
            torch.tensor([[0.0], [10.0]], dtype=torch.float64),
        )

        np.testing.assert_array_equal(raw, [0.0, 5.0, 0.0])

    def test_dimension_mismatch(self, line_dataset):
        with pytest.raises(DimensionMismatchError):
            RelevanceScorer().score(line_dataset, line_dataset.feature_matrix(), np.zeros((2, 3)))

    def test_dimension_mismatch_is_a_clustering_error(self):
        assert issubclass(DimensionMismatchError, ClusteringError)

    def test_empty_centroids(self, line_dataset):
        with pytest.raises(ClusteringError):
            RelevanceScorer().score(line_dataset, line_dataset.feature_matrix(), np.zeros((0, 1)))

    def test_row_count_mismatch(self, line_dataset):
        with pytest.raises(SchemaError):
            RelevanceScorer().score(line_dataset, np.zeros((2, 1)), np.zeros((1, 1)))

    def test_non_finite_scores(self, line_dataset):
        with pytest.raises(ClusteringError):
            RelevanceScorer().score(line_dataset, line_dataset.feature_matrix(), np.array([[np.inf]]))


class TestWeightNormalizer:
    def test_divides_by_min_plus_epsilon(self):
        normalized = WeightNormalizer().normalize_weights(np.array([2.0, 4.0, 3.0]))

        np.testing.assert_allclose(normalized, np.array([2.0, 4.0, 3.0]) / 2.001, rtol=1e-12)

    def test_zero_minimum_divides_by_epsilon(self):
        normalized = WeightNormalizer().normalize_weights(np.array([0.0, 5.0, 0.0]))

        np.testing.assert_allclose(normalized, [0.0, 5000.0, 0.0])

    def test_all_zero_stays_zero(self):
        normalized = WeightNormalizer().normalize_weights(np.zeros(3))

        np.testing.assert_array_equal(normalized, [0.0, 0.0, 0.0])

    def test_custom_epsilon(self):
        normalized = WeightNormalizer(WeightingConfig(epsilon=0.5)).normalize_weights([1.0, 3.0])

        np.testing.assert_allclose(normalized, [1.0 / 1.5, 3.0 / 1.5])

    def test_preserves_order(self):
        rng = np.random.default_rng(5)
        weights = rng.uniform(0.0, 10.0, size=50)
        normalized = WeightNormalizer().normalize_weights(weights)

        np.testing.assert_array_equal(np.argsort(weights, kind="stable"), np.argsort(normalized, kind="stable"))

    def test_input_is_not_modified(self):
        weights = np.array([1.0, 2.0])
        WeightNormalizer().normalize_weights(weights)

        np.testing.assert_array_equal(weights, [1.0, 2.0])

    def test_normalize_dataset_in_place(self):
        dataset = WeightedDataset.from_arrays([[0.0], [1.0]], weights=[1.0, 3.0])
        result = WeightNormalizer().normalize(dataset)

        assert result is dataset
        np.testing.assert_allclose(dataset.weights, [1.0 / 1.001, 3.0 / 1.001])

    def test_empty(self):
        assert WeightNormalizer().normalize_weights([]).size == 0
        dataset = WeightedDataset([])
        assert WeightNormalizer().normalize(dataset) is dataset


def test_get_weight_stats():
    stats = get_weight_stats(np.array([0.0, 5000.0, 0.0]))

    assert stats["n_weights"] == 3
    assert stats["min_weight"] == 0.0
    assert stats["max_weight"] == 5000.0
    assert stats["n_unique_weights"] == 2
    assert get_weight_stats([]) == {"n_weights": 0}


def test_validate_weights():
    assert validate_weights(np.array([0.0, 1.0]))
    for bad in ([np.nan], [np.inf], [-1.0]):
        with pytest.raises(ValueError):
            validate_weights(np.array(bad))
