"""Tests for weighted sampling over relevance weights."""

import numpy as np
import pytest
import torch

from crw.core import WeightedDataset
from crw.data import WeightedRecordDataset, create_weighted_sampler, validate_sampling_weights


def test_validate_sampling_weights():
    assert validate_sampling_weights([0.0, 5000.0, 0.0])


@pytest.mark.parametrize("weights", [[], [0.0, 0.0, 0.0], [1.0, -1.0], [1.0, float("nan")]])
def test_validate_sampling_weights_rejects(weights):
    with pytest.raises(ValueError):
        validate_sampling_weights(weights)


def test_sampler_draws_only_relevant_records():
    sampler = create_weighted_sampler(np.array([0.0, 5000.0, 0.0]), num_samples=20, seed=0)
    indices = list(sampler)

    assert len(indices) == 20
    assert set(indices) == {1}


def test_sampler_is_seeded():
    weights = torch.tensor([1.0, 2.0, 3.0, 4.0])
    first = list(create_weighted_sampler(weights, num_samples=50, seed=3))
    second = list(create_weighted_sampler(weights, num_samples=50, seed=3))

    assert first == second


def test_weighted_record_dataset():
    dataset = WeightedDataset.from_arrays(
        [[0.0, 1.0], [2.0, 3.0], [4.0, 5.0]],
        labels=["b", "a", "b"],
        weights=[1.0, 2.0, 3.0],
    )
    torch_dataset = WeightedRecordDataset(dataset)

    assert len(torch_dataset) == 3
    assert torch_dataset.classes == ["b", "a"]
    features, weight, label = torch_dataset[1]
    assert features.tolist() == [2.0, 3.0]
    assert weight.item() == 2.0
    assert label.item() == 1


def test_weighted_record_dataset_without_label():
    torch_dataset = WeightedRecordDataset(WeightedDataset.from_arrays([[0.0], [1.0]]))

    assert torch_dataset.labels.tolist() == [-1, -1]
