"""Initialization for the `crw.core` package.

Responsibilities:
- Model weighted tabular datasets and strip their label column.
- Discover centroids with an automatically chosen cluster count.
- Turn nearest-centroid distances into normalized relevance weights.
"""

from .exceptions import (
    RelevanceError,
    SchemaError,
    ClusteringError,
    DimensionMismatchError,
)
from .dataset import Record, WeightedDataset
from .label_stripper import strip_label
from .clustering import (
    ClusteringConfig,
    ClusterDiscoverer,
    XMeansDiscoverer,
    HDBSCANDiscoverer,
    FixedCentroidDiscoverer,
    create_discoverer,
    register_discoverer,
    list_discoverers,
    get_cluster_stats,
    bic_score,
)
from .weighting import (
    WeightingConfig,
    RelevanceScorer,
    WeightNormalizer,
    get_weight_stats,
    validate_weights,
)
from .relevance_filter import Capabilities, RelevanceFilter

__all__ = [
    # Errors
    'RelevanceError',
    'SchemaError',
    'ClusteringError',
    'DimensionMismatchError',
    # Data model
    'Record',
    'WeightedDataset',
    'strip_label',
    # Clustering
    'ClusteringConfig',
    'ClusterDiscoverer',
    'XMeansDiscoverer',
    'HDBSCANDiscoverer',
    'FixedCentroidDiscoverer',
    'create_discoverer',
    'register_discoverer',
    'list_discoverers',
    'get_cluster_stats',
    'bic_score',
    # Weighting
    'WeightingConfig',
    'RelevanceScorer',
    'WeightNormalizer',
    'get_weight_stats',
    'validate_weights',
    # Filter
    'Capabilities',
    'RelevanceFilter',
]
