"""Shared fixtures for CRW tests."""

import numpy as np
import pytest

from crw.core import ClusterDiscoverer, WeightedDataset


BLOB_CENTERS = np.array([[0.0, 0.0], [20.0, 0.0], [0.0, 20.0]])


class RecordingDiscoverer(ClusterDiscoverer):
    """Returns fixed centroids and records every call."""

    def __init__(self, centroids):
        super().__init__()
        self.centroids = np.asarray(centroids, dtype=np.float64)
        self.calls = []

    def discover(self, features, min_k, max_k, max_iterations):
        self.calls.append((np.array(features, copy=True), min_k, max_k, max_iterations))
        return self.centroids


class FailingDiscoverer(ClusterDiscoverer):
    """Raises the given exception on every call."""

    def __init__(self, exc):
        super().__init__()
        self.exc = exc

    def discover(self, features, min_k, max_k, max_iterations):
        raise self.exc


@pytest.fixture
def blob_features():
    rng = np.random.default_rng(0)
    return np.vstack([
        center + rng.normal(scale=0.5, size=(50, 2)) for center in BLOB_CENTERS
    ])


@pytest.fixture
def line_dataset():
    """Three 1-feature records at 0, 5 and 10 with a text label."""
    return WeightedDataset.from_arrays([[0.0], [5.0], [10.0]], labels=["a", "b", "a"])
