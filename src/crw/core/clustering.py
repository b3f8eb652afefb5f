"""Cluster discovery for CRW: centroid sets sized automatically within a range."""

from __future__ import annotations

import logging
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

import hdbscan
import numpy as np
import torch
from sklearn.cluster import KMeans
from sklearn.exceptions import ConvergenceWarning

from .dataset import WeightedDataset
from .exceptions import ClusteringError


logger = logging.getLogger(__name__)

FeatureInput = Union[WeightedDataset, np.ndarray, torch.Tensor]

# Floor for the pooled variance in the BIC so coincident points stay finite.
_MIN_VARIANCE = 1e-12

_DISCOVERER_REGISTRY: Dict[str, Callable[..., "ClusterDiscoverer"]] = {}


@dataclass
class ClusteringConfig:
    """Configuration for cluster discovery."""

    algorithm: str = "xmeans"
    min_clusters: int = 2
    max_clusters: int = 1000
    max_iterations: int = 1000
    random_state: Optional[int] = 42
    n_init: int = 10
    min_cluster_size: int = 5
    min_samples: int = 1

    def __post_init__(self) -> None:
        """Validate the cluster search range after dataclass initialization."""
        check_search_range(self.min_clusters, self.max_clusters, self.max_iterations)
        if self.n_init < 1:
            raise ValueError("n_init must be at least 1")
        if self.min_cluster_size < 2:
            raise ValueError("min_cluster_size must be at least 2")
        if self.min_samples < 1:
            raise ValueError("min_samples must be at least 1")


def check_search_range(min_k: int, max_k: int, max_iterations: int) -> None:
    """Raise ValueError unless 1 <= min_k <= max_k and max_iterations >= 1."""
    if min_k < 1:
        raise ValueError(f"min_clusters must be at least 1, got {min_k}")
    if max_k < min_k:
        raise ValueError(f"max_clusters ({max_k}) must be >= min_clusters ({min_k})")
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")


def to_numpy_features(features: FeatureInput) -> np.ndarray:
    """Convert a dataset, tensor or array into a finite float64 matrix."""
    if isinstance(features, WeightedDataset):
        features = features.feature_matrix()
    elif isinstance(features, torch.Tensor):
        features = features.detach().cpu().numpy()
    features = np.asarray(features, dtype=np.float64)

    if features.ndim != 2:
        raise ClusteringError(f"Features must be a 2D array, got shape {features.shape}")
    if features.shape[0] == 0:
        raise ClusteringError("Features array is empty")
    if not np.all(np.isfinite(features)):
        raise ClusteringError("Features contain NaN or infinite values")

    return features


def _freeze(centroids: np.ndarray) -> np.ndarray:
    centroids = np.array(centroids, dtype=np.float64)
    centroids.setflags(write=False)
    return centroids


def register_discoverer(name: str) -> Callable:
    """Register a discoverer class under ``name``.

    Raises:
        ValueError: If the name is already registered
    """
    def decorator(builder: Callable) -> Callable:
        if name in _DISCOVERER_REGISTRY:
            raise ValueError(f"Discoverer '{name}' is already registered")
        logger.debug(f"Registering discoverer: {name}")
        _DISCOVERER_REGISTRY[name] = builder
        return builder

    return decorator


def list_discoverers() -> List[str]:
    """Names of all registered discoverers."""
    return sorted(_DISCOVERER_REGISTRY)


def create_discoverer(
    name: Optional[str] = None,
    config: Optional[ClusteringConfig] = None,
    **kwargs,
) -> "ClusterDiscoverer":
    """
    Create a discoverer by registry name.

    Args:
        name: Registered name (defaults to ``config.algorithm``)
        config: Clustering configuration
        **kwargs: Extra constructor arguments (e.g. ``centroids`` for "fixed")

    Raises:
        KeyError: If the name is not registered
    """
    config = config or ClusteringConfig()
    name = name or config.algorithm

    if name not in _DISCOVERER_REGISTRY:
        raise KeyError(
            f"Discoverer '{name}' is not registered. "
            f"Available discoverers: {', '.join(list_discoverers())}"
        )
    return _DISCOVERER_REGISTRY[name](config=config, **kwargs)


class ClusterDiscoverer(ABC):
    """
    Interface for automatic cluster discovery.

    Implementations receive unlabelled features and return a non-empty
    ``(k, d)`` centroid array with ``k <= max_k``. Failures are raised as
    ClusteringError.
    """

    def __init__(self, config: Optional[ClusteringConfig] = None):
        """Initialize the discoverer with optional configuration overrides."""
        self.config = config or ClusteringConfig()

    @abstractmethod
    def discover(
        self,
        features: FeatureInput,
        min_k: int,
        max_k: int,
        max_iterations: int,
    ) -> np.ndarray:
        """Return the centroids discovered in ``features``."""
        raise NotImplementedError

    def discover_from_config(self, features: FeatureInput) -> np.ndarray:
        """Run ``discover`` with the search range held in ``self.config``."""
        return self.discover(
            features,
            self.config.min_clusters,
            self.config.max_clusters,
            self.config.max_iterations,
        )


@register_discoverer("xmeans")
class XMeansDiscoverer(ClusterDiscoverer):
    """
    K-means with the number of clusters chosen by BIC (X-means).

    The search starts from ``min_k`` centers and alternates two steps:

    1. Improve parameters: run k-means from the current centers.
    2. Improve structure: split each center into two children with a local
       2-means on its members, and keep the split when the children's BIC
       beats the parent's. When more splits qualify than ``max_k`` allows,
       the largest BIC gains win.

    The search stops when no split is accepted, ``max_k`` centers exist,
    or ``max_iterations`` rounds have run. Results are deterministic for a
    fixed ``config.random_state``.

    Reference: Pelleg & Moore, "X-means: Extending K-means with Efficient
    Estimation of the Number of Clusters", ICML 2000.
    """

    def discover(
        self,
        features: FeatureInput,
        min_k: int,
        max_k: int,
        max_iterations: int,
    ) -> np.ndarray:
        check_search_range(min_k, max_k, max_iterations)
        points = to_numpy_features(features)
        n_samples = points.shape[0]

        if n_samples < min_k:
            raise ClusteringError(
                f"Cannot build {min_k} clusters from {n_samples} samples"
            )

        centers = self._kmeans(points, min_k, max_iterations).cluster_centers_

        for iteration in range(max_iterations):
            model = self._kmeans(points, len(centers), max_iterations, init=centers)
            centers = model.cluster_centers_

            if len(centers) >= max_k:
                break

            split_centers = self._improve_structure(
                points, centers, model.labels_, max_k, max_iterations
            )
            logger.debug(
                "X-means round %d: %d -> %d centers",
                iteration + 1,
                len(centers),
                len(split_centers),
            )
            if len(split_centers) == len(centers):
                break
            centers = split_centers
        else:
            logger.warning(
                "X-means stopped after max_iterations=%d with %d centers",
                max_iterations,
                len(centers),
            )
            centers = self._kmeans(points, len(centers), max_iterations, init=centers).cluster_centers_

        if not np.all(np.isfinite(centers)):
            raise ClusteringError("X-means produced non-finite centroids")

        logger.info("X-means selected %d clusters for %d samples", len(centers), n_samples)
        return _freeze(centers)

    def _kmeans(
        self,
        points: np.ndarray,
        n_clusters: int,
        max_iterations: int,
        init: Optional[np.ndarray] = None,
    ) -> KMeans:
        if init is None:
            model = KMeans(
                n_clusters=n_clusters,
                n_init=self.config.n_init,
                max_iter=max_iterations,
                random_state=self.config.random_state,
            )
        else:
            model = KMeans(
                n_clusters=n_clusters,
                init=np.asarray(init, dtype=np.float64),
                n_init=1,
                max_iter=max_iterations,
                random_state=self.config.random_state,
            )

        # Fewer distinct points than clusters is legal here; duplicate centers are fine.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=ConvergenceWarning)
            try:
                return model.fit(points)
            except ValueError as exc:
                raise ClusteringError(f"k-means failed with k={n_clusters}: {exc}") from exc

    def _improve_structure(
        self,
        points: np.ndarray,
        centers: np.ndarray,
        labels: np.ndarray,
        max_k: int,
        max_iterations: int,
    ) -> np.ndarray:
        budget = max_k - len(centers)
        candidates = []

        for j, center in enumerate(centers):
            region = points[labels == j]
            # The two-child model needs more points than centers for a variance estimate.
            if region.shape[0] < 3:
                continue

            children = self._kmeans(region, 2, max_iterations)
            if np.unique(children.labels_).size < 2:
                continue

            parent_bic = bic_score(region, np.zeros(region.shape[0], dtype=np.int64), center[None, :])
            child_bic = bic_score(region, children.labels_, children.cluster_centers_)
            if child_bic > parent_bic:
                candidates.append((child_bic - parent_bic, j, children.cluster_centers_))

        candidates.sort(key=lambda candidate: (-candidate[0], candidate[1]))
        accepted = {j: children for _, j, children in candidates[:budget]}

        new_centers = []
        for j, center in enumerate(centers):
            if j in accepted:
                new_centers.extend(accepted[j])
            else:
                new_centers.append(center)

        return np.vstack(new_centers)


def bic_score(points: np.ndarray, labels: np.ndarray, centers: np.ndarray) -> float:
    """
    Bayesian Information Criterion of a spherical Gaussian mixture.

    Uses the pooled-variance likelihood of Pelleg & Moore. Higher is better.

    Args:
        points: Array of shape (n_points, n_dims)
        labels: Cluster index of every point
        centers: Array of shape (k, n_dims)

    Returns:
        BIC value, or -inf when there are no more points than centers
    """
    n_points, n_dims = points.shape
    k = centers.shape[0]
    if n_points <= k:
        return float("-inf")

    labels = np.asarray(labels, dtype=np.int64)
    squared_error = float(np.sum((points - centers[labels]) ** 2))
    variance = max(squared_error / (n_points - k), _MIN_VARIANCE)

    log_likelihood = 0.0
    for count in np.bincount(labels, minlength=k):
        if count == 0:
            continue
        log_likelihood += (
            count * np.log(count)
            - count * np.log(n_points)
            - count / 2.0 * np.log(2.0 * np.pi)
            - count * n_dims / 2.0 * np.log(variance)
            - (count - k) / 2.0
        )

    n_parameters = (k - 1) + n_dims * k + 1
    return float(log_likelihood - n_parameters / 2.0 * np.log(n_points))


@register_discoverer("hdbscan")
class HDBSCANDiscoverer(ClusterDiscoverer):
    """Density-based discovery: centroids are the means of HDBSCAN clusters."""

    def discover(
        self,
        features: FeatureInput,
        min_k: int,
        max_k: int,
        max_iterations: int,
    ) -> np.ndarray:
        check_search_range(min_k, max_k, max_iterations)
        points = to_numpy_features(features)

        if points.shape[0] < self.config.min_cluster_size:
            raise ClusteringError(
                f"HDBSCAN needs at least min_cluster_size={self.config.min_cluster_size} "
                f"samples, got {points.shape[0]}"
            )

        clusterer = hdbscan.HDBSCAN(
            min_cluster_size=self.config.min_cluster_size,
            min_samples=self.config.min_samples,
            metric="euclidean",
            allow_single_cluster=min_k <= 1,
        )
        labels = clusterer.fit_predict(points).astype(np.int64)

        cluster_ids = np.unique(labels[labels != -1])
        if cluster_ids.size == 0:
            raise ClusteringError("HDBSCAN labelled every sample as noise")
        if cluster_ids.size > max_k:
            raise ClusteringError(
                f"HDBSCAN found {cluster_ids.size} clusters, more than max_clusters={max_k}"
            )
        if cluster_ids.size < min_k:
            logger.warning(
                "HDBSCAN found %d clusters, fewer than min_clusters=%d",
                cluster_ids.size,
                min_k,
            )

        centroids = np.vstack([points[labels == c].mean(axis=0) for c in cluster_ids])
        logger.info(
            "HDBSCAN found %d clusters (%d noise samples)",
            cluster_ids.size,
            int(np.sum(labels == -1)),
        )
        return _freeze(centroids)


@register_discoverer("fixed")
class FixedCentroidDiscoverer(ClusterDiscoverer):
    """Return a fixed, externally supplied centroid set."""

    def __init__(
        self,
        centroids: Union[np.ndarray, torch.Tensor, Sequence[Sequence[float]]],
        config: Optional[ClusteringConfig] = None,
    ):
        """Store the centroids that every ``discover`` call returns."""
        super().__init__(config)
        if isinstance(centroids, torch.Tensor):
            centroids = centroids.detach().cpu().numpy()
        self.centroids = _freeze(np.asarray(centroids, dtype=np.float64))

    def discover(
        self,
        features: FeatureInput,
        min_k: int,
        max_k: int,
        max_iterations: int,
    ) -> np.ndarray:
        check_search_range(min_k, max_k, max_iterations)
        if self.centroids.ndim != 2 or self.centroids.shape[0] == 0:
            raise ClusteringError(
                f"Fixed centroids must be a non-empty 2D array, got shape {self.centroids.shape}"
            )
        if self.centroids.shape[0] > max_k:
            raise ClusteringError(
                f"{self.centroids.shape[0]} fixed centroids exceed max_clusters={max_k}"
            )
        return self.centroids


def get_cluster_stats(features: FeatureInput, centroids: np.ndarray) -> dict:
    """Summarize nearest-centroid membership of ``features``."""
    points = to_numpy_features(features)
    centroids = np.asarray(centroids, dtype=np.float64)

    squared = np.sum((points[:, None, :] - centroids[None, :, :]) ** 2, axis=2)
    assignments = np.argmin(squared, axis=1)
    sizes = np.bincount(assignments, minlength=centroids.shape[0])

    return {
        "n_clusters": int(centroids.shape[0]),
        "n_samples": int(points.shape[0]),
        "cluster_sizes": {int(i): int(size) for i, size in enumerate(sizes)},
        "mean_cluster_size": float(np.mean(sizes)),
        "std_cluster_size": float(np.std(sizes)),
        "n_empty_clusters": int(np.sum(sizes == 0)),
    }
