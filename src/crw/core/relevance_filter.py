"""
Relevance filter: clustering-based per-record weights.

This module wires the four CRW steps together:
1. Strip the label column
2. Discover centroids on the unlabelled features
3. Score every record by its distance to the nearest centroid
4. Normalize the weights by the dataset minimum

Weights are staged and committed to the dataset only after every step
succeeded, so a failing call leaves the caller's weights untouched.
"""


import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .clustering import ClusterDiscoverer, ClusteringConfig, create_discoverer
from .dataset import WeightedDataset
from .exceptions import ClusteringError, RelevanceError
from .label_stripper import strip_label
from .weighting import (
    RelevanceScorer,
    WeightNormalizer,
    WeightingConfig,
    get_weight_stats,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    """What kinds of datasets the filter accepts."""

    attribute_types: tuple = ("numeric", "nominal", "string", "date")
    label_types: tuple = ("numeric", "nominal", "string", "date")
    no_label: bool = True


class RelevanceFilter:
    """
    Assign clustering-based relevance weights to every record of a dataset.

    Records far from every centroid get larger weights than records close
    to one. A dataset with a single record is not clustered: its weight is
    only normalized.

    Example:
        >>> from crw.core import RelevanceFilter, FixedCentroidDiscoverer, WeightedDataset
        >>> dataset = WeightedDataset.from_arrays([[0.0], [5.0], [10.0]])
        >>> flt = RelevanceFilter(discoverer=FixedCentroidDiscoverer([[0.0], [10.0]]))
        >>> [round(r.weight, 6) for r in flt.process(dataset)]
        [0.0, 5000.0, 0.0]
    """

    def __init__(
        self,
        clustering_config: Optional[ClusteringConfig] = None,
        weighting_config: Optional[WeightingConfig] = None,
        discoverer: Optional[ClusterDiscoverer] = None,
    ):
        """Initialize the filter.

        Args:
            clustering_config: Cluster search range and algorithm (uses defaults if None)
            weighting_config: Epsilon and scoring batch size (uses defaults if None)
            discoverer: Explicit discoverer; built from ``clustering_config`` if None
        """
        self.clustering_config = clustering_config if clustering_config else ClusteringConfig()
        self.weighting_config = weighting_config if weighting_config else WeightingConfig()

        self.discoverer = discoverer or create_discoverer(config=self.clustering_config)
        self.scorer = RelevanceScorer(self.weighting_config)
        self.normalizer = WeightNormalizer(self.weighting_config)

        self.last_centroids: Optional[np.ndarray] = None
        self.last_stats: Optional[dict] = None

    @staticmethod
    def global_info() -> str:
        """Return a one-line description of the filter."""
        return "Computes relevance scores for data instances, based on clustering"

    @staticmethod
    def get_capabilities() -> Capabilities:
        """Return the dataset kinds the filter accepts, unlabelled data included."""
        return Capabilities()

    @staticmethod
    def determine_output_format(dataset: WeightedDataset) -> List[str]:
        """The output schema equals the input schema."""
        return list(dataset.attribute_names)

    def _discover(self, unlabeled: WeightedDataset) -> np.ndarray:
        cfg = self.clustering_config
        try:
            centroids = self.discoverer.discover(
                unlabeled,
                cfg.min_clusters,
                cfg.max_clusters,
                cfg.max_iterations,
            )
        except ClusteringError:
            raise
        except Exception as exc:
            raise ClusteringError(
                f"{type(self.discoverer).__name__} failed: {exc}"
            ) from exc

        centroids = np.asarray(centroids, dtype=np.float64)
        if centroids.ndim != 2 or centroids.shape[0] == 0:
            raise ClusteringError(
                f"Discoverer returned no usable centroids (shape {centroids.shape})"
            )
        if centroids.shape[0] > cfg.max_clusters:
            raise ClusteringError(
                f"Discoverer returned {centroids.shape[0]} centroids, "
                f"more than max_clusters={cfg.max_clusters}"
            )
        return centroids

    def compute_weights(self, dataset: WeightedDataset) -> np.ndarray:
        """
        Compute final weights without touching ``dataset``.

        Returns:
            Normalized weights in dataset order
        """
        dataset.validate_schema()
        staged = dataset.weights
        centroids = None

        if len(dataset) == 0:
            logger.info("Empty dataset: nothing to score")
            return staged

        if len(dataset) == 1:
            logger.info("Single record: skipping clustering, normalizing only")
        else:
            unlabeled = strip_label(dataset)
            features = unlabeled.feature_matrix()
            centroids = self._discover(features)
            staged = self.scorer.score(dataset, features, centroids)
            logger.info(
                "Scored %d records against %d centroids", len(dataset), centroids.shape[0]
            )

        staged = self.normalizer.normalize_weights(staged)

        self.last_centroids = centroids
        self.last_stats = get_weight_stats(staged)
        return staged

    def process(self, dataset: WeightedDataset) -> WeightedDataset:
        """
        Replace every record's weight with its normalized relevance.

        Args:
            dataset: Dataset to weight; mutated in place

        Returns:
            The same dataset object

        Raises:
            SchemaError: If the label column is inconsistent with the schema
            ClusteringError: If centroid discovery fails
            DimensionMismatchError: If centroid dimensionality is wrong
        """
        try:
            weights = self.compute_weights(dataset)
        except RelevanceError as exc:
            logger.error("Relevance weighting failed: %s", exc)
            raise

        dataset.set_weights(weights)

        if self.last_stats and self.last_stats.get("n_weights"):
            logger.info(
                "Relevance weights: min=%.6f, max=%.6f, mean=%.6f",
                self.last_stats["min_weight"],
                self.last_stats["max_weight"],
                self.last_stats["mean_weight"],
            )
        return dataset
