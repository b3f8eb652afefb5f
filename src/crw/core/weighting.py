"""Relevance scoring and weight normalization for CRW."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import torch

from .dataset import WeightedDataset
from .exceptions import ClusteringError, DimensionMismatchError, SchemaError


logger = logging.getLogger(__name__)

ArrayInput = Union[WeightedDataset, np.ndarray, torch.Tensor]


@dataclass
class WeightingConfig:
    """Configuration for relevance scoring and normalization."""

    epsilon: float = 1e-3
    scoring_batch_size: int = 4096

    def __post_init__(self) -> None:
        """Validate numeric configuration values after dataclass initialization."""
        if not self.epsilon > 0:
            raise ValueError("epsilon must be positive")
        if self.scoring_batch_size <= 0:
            raise ValueError("scoring_batch_size must be positive")


def _as_matrix(values: ArrayInput) -> np.ndarray:
    if isinstance(values, WeightedDataset):
        return values.feature_matrix()
    if isinstance(values, torch.Tensor):
        values = values.detach().cpu().numpy()
    return np.asarray(values, dtype=np.float64)


class RelevanceScorer:
    """
    Score records by their distance to the nearest centroid.

    The raw weight of row ``i`` is the smallest Euclidean distance between
    the stripped feature vector ``i`` and any centroid, so records close to
    a cluster center are less relevant than records far from all of them.
    Features are used as given; scale them beforehand if needed.
    """

    def __init__(self, config: Optional[WeightingConfig] = None):
        """Initialize the scorer with an optional weighting configuration."""
        self.config = config or WeightingConfig()

    def _check_centroids(self, features: np.ndarray, centroids: np.ndarray) -> None:
        if centroids.ndim != 2 or centroids.shape[0] == 0:
            raise ClusteringError(
                f"Centroids must be a non-empty 2D array, got shape {centroids.shape}"
            )
        if features.ndim != 2:
            raise SchemaError(f"Features must be a 2D array, got shape {features.shape}")
        if centroids.shape[1] != features.shape[1]:
            raise DimensionMismatchError(
                f"Centroid dimensionality {centroids.shape[1]} does not match "
                f"feature dimensionality {features.shape[1]}"
            )
        if not np.all(np.isfinite(centroids)):
            raise ClusteringError("Centroids contain NaN or infinite values")

    def compute_distances(self, features: ArrayInput, centroids: ArrayInput) -> np.ndarray:
        """
        Euclidean distance from every feature vector to every centroid.

        Returns:
            Array of shape (n_samples, n_centroids)
        """
        features = _as_matrix(features)
        centroids = _as_matrix(centroids)
        self._check_centroids(features, centroids)

        diff = features[:, None, :] - centroids[None, :, :]
        return np.sqrt(np.sum(diff * diff, axis=2))

    def score(
        self,
        dataset: WeightedDataset,
        unlabeled_view: ArrayInput,
        centroids: ArrayInput,
    ) -> np.ndarray:
        """
        Compute raw relevance weights, one per record of ``dataset``.

        Rows are processed in chunks of ``config.scoring_batch_size``; each
        row's result is independent of the chunking.

        Args:
            dataset: Original dataset (defines the row count)
            unlabeled_view: Stripped features, row-aligned with ``dataset``
            centroids: Centroid array of shape (k, d)

        Returns:
            Raw weights, float64 array of shape (n_samples,)

        Raises:
            SchemaError: If the view and the dataset have different lengths
            ClusteringError: If centroids are empty or yield non-finite distances
            DimensionMismatchError: If centroid and feature dimensionality differ
        """
        features = _as_matrix(unlabeled_view)
        centroids = _as_matrix(centroids)

        if features.ndim == 2 and features.shape[0] != len(dataset):
            raise SchemaError(
                f"Unlabelled view has {features.shape[0]} rows, dataset has {len(dataset)}"
            )
        self._check_centroids(features, centroids)

        n_samples = features.shape[0]
        batch_size = self.config.scoring_batch_size
        raw_weights = np.empty(n_samples, dtype=np.float64)

        for start in range(0, n_samples, batch_size):
            end = min(start + batch_size, n_samples)
            distances = self.compute_distances(features[start:end], centroids)
            raw_weights[start:end] = np.min(distances, axis=1)

        if not np.all(np.isfinite(raw_weights)):
            raise ClusteringError("Relevance scores contain NaN or infinite values")

        logger.debug(
            "Scored %d records against %d centroids (min=%.6f, max=%.6f)",
            n_samples,
            centroids.shape[0],
            float(raw_weights.min()) if n_samples else 0.0,
            float(raw_weights.max()) if n_samples else 0.0,
        )
        return raw_weights


class WeightNormalizer:
    """
    Rescale weights by the dataset minimum.

    Every weight ``w`` becomes ``w / (m + epsilon)`` where ``m`` is the
    smallest weight. Epsilon only guards against division by zero, so the
    minimum maps to ``m / (m + epsilon)``: close to 1 when ``m`` is large
    relative to epsilon, and 0 when ``m`` is 0.
    """

    def __init__(self, config: Optional[WeightingConfig] = None):
        """Initialize the normalizer with an optional weighting configuration."""
        self.config = config or WeightingConfig()

    def normalize_weights(self, weights: Union[np.ndarray, torch.Tensor]) -> np.ndarray:
        """Return normalized copies of ``weights``; empty input is returned as-is."""
        if isinstance(weights, torch.Tensor):
            weights = weights.detach().cpu().numpy()
        weights = np.array(weights, dtype=np.float64)

        if weights.size == 0:
            return weights

        # The minimum must be known before any weight is rescaled.
        min_weight = float(np.min(weights))
        return weights / (min_weight + self.config.epsilon)

    def normalize(self, dataset: WeightedDataset) -> WeightedDataset:
        """Normalize the weights of ``dataset`` in place and return it."""
        if len(dataset) == 0:
            return dataset
        dataset.set_weights(self.normalize_weights(dataset.weights))
        return dataset


def get_weight_stats(weights: Union[np.ndarray, torch.Tensor]) -> dict:
    """Summarize computed weights."""
    if isinstance(weights, torch.Tensor):
        weights = weights.detach().cpu().numpy()
    weights = np.asarray(weights, dtype=np.float64)

    if weights.size == 0:
        return {"n_weights": 0}

    return {
        "n_weights": int(weights.size),
        "mean_weight": float(np.mean(weights)),
        "std_weight": float(np.std(weights)),
        "min_weight": float(np.min(weights)),
        "max_weight": float(np.max(weights)),
        "n_unique_weights": int(len(np.unique(weights))),
    }


def validate_weights(weights: Union[np.ndarray, torch.Tensor]) -> bool:
    """Validate computed weights."""
    if isinstance(weights, torch.Tensor):
        weights = weights.detach().cpu().numpy()
    weights = np.asarray(weights, dtype=np.float64)

    if np.any(np.isnan(weights)):
        raise ValueError("Weights contain NaN values")
    if np.any(np.isinf(weights)):
        raise ValueError("Weights contain infinite values")
    if np.any(weights < 0):
        raise ValueError("Weights contain negative values")
    return True
