"""Error types raised by the relevance weighting pipeline."""


class RelevanceError(Exception):
    """Base class for all CRW errors."""


class SchemaError(RelevanceError, ValueError):
    """Dataset schema is inconsistent (label index, ragged rows, non-numeric features)."""


class ClusteringError(RelevanceError, RuntimeError):
    """The cluster discovery step did not produce a usable centroid set."""


class DimensionMismatchError(ClusteringError):
    """Centroid dimensionality disagrees with the feature dimensionality."""
