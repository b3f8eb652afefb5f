"""Tests for the weighted dataset model."""

import numpy as np
import pytest
import torch

from crw.core import Record, SchemaError, WeightedDataset


def test_from_arrays_appends_label_column():
    dataset = WeightedDataset.from_arrays(
        [[1.0, 2.0], [3.0, 4.0]],
        labels=["yes", "no"],
        attribute_names=["x", "y"],
    )

    assert len(dataset) == 2
    assert dataset.attribute_names == ["x", "y", "class"]
    assert dataset.label_index == 2
    assert dataset.has_label
    assert dataset.labels() == ["yes", "no"]
    np.testing.assert_array_equal(dataset.feature_matrix(), [[1.0, 2.0], [3.0, 4.0]])
    np.testing.assert_array_equal(dataset.weights, [1.0, 1.0])


def test_from_arrays_accepts_tensor_and_weights():
    dataset = WeightedDataset.from_arrays(torch.tensor([[1.0], [2.0]]), weights=[0.5, 2.0])

    assert not dataset.has_label
    assert dataset.labels() is None
    np.testing.assert_array_equal(dataset.weights, [0.5, 2.0])


def test_from_arrays_rejects_label_count_mismatch():
    with pytest.raises(SchemaError):
        WeightedDataset.from_arrays([[1.0], [2.0]], labels=["a"])


def test_label_can_sit_in_the_middle():
    records = [Record([1.0, "a", 2.0]), Record([3.0, "b", 4.0])]
    dataset = WeightedDataset(records, attribute_names=["x", "label", "y"], label_index=1)

    assert dataset.feature_indices() == [0, 2]
    np.testing.assert_array_equal(dataset.feature_matrix(), [[1.0, 2.0], [3.0, 4.0]])


def test_set_weights_is_positional():
    dataset = WeightedDataset.from_arrays([[0.0], [1.0], [2.0]])
    dataset.set_weights([3.0, 2.0, 1.0])

    assert [record.weight for record in dataset] == [3.0, 2.0, 1.0]


def test_set_weights_rejects_wrong_length():
    dataset = WeightedDataset.from_arrays([[0.0], [1.0]])

    with pytest.raises(SchemaError):
        dataset.set_weights([1.0])
    np.testing.assert_array_equal(dataset.weights, [1.0, 1.0])


@pytest.mark.parametrize("label_index", [-1, 2, 5])
def test_validate_schema_rejects_label_index_out_of_range(label_index):
    dataset = WeightedDataset([Record([1.0, 2.0])], label_index=label_index)

    with pytest.raises(SchemaError):
        dataset.validate_schema()


def test_validate_schema_rejects_ragged_records():
    dataset = WeightedDataset(
        [Record([1.0, 2.0]), Record([1.0])],
        attribute_names=["x", "y"],
    )

    with pytest.raises(SchemaError):
        dataset.validate_schema()


def test_feature_matrix_rejects_non_numeric_feature():
    dataset = WeightedDataset([Record(["abc", "label"])], label_index=1)

    with pytest.raises(SchemaError):
        dataset.feature_matrix()


def test_copy_is_independent():
    dataset = WeightedDataset.from_arrays([[1.0]], labels=["a"])
    clone = dataset.copy()
    clone[0].weight = 9.0
    clone[0].values[0] = 7.0

    assert dataset[0].weight == 1.0
    assert dataset[0].values[0] == 1.0
    assert clone.label_index == dataset.label_index


def test_empty_dataset_has_empty_matrix():
    dataset = WeightedDataset([], attribute_names=["x", "y"])

    assert dataset.feature_matrix().shape == (0, 2)
    assert dataset.weights.shape == (0,)
