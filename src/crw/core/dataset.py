"""
Tabular dataset model for CRW.

This module provides:
- Record: one row of attribute values plus a mutable relevance weight
- WeightedDataset: ordered records sharing one schema, with an optional label column

Row order is load-bearing: every view derived from a dataset (stripped copy,
feature matrix, weight vector) keeps position ``i`` aligned with record ``i``.
"""


from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Union

import numpy as np
import torch

from .exceptions import SchemaError


@dataclass
class Record:
    """A single row: attribute values (label included) and its weight."""

    values: List[Any]
    weight: float = 1.0


class WeightedDataset:
    """
    Ordered collection of weighted records.

    Args:
        records: Records in dataset order
        attribute_names: Column names (defaults to ``attr_0 .. attr_{n-1}``)
        label_index: Position of the label column, or None for unlabelled data

    Example:
        >>> dataset = WeightedDataset.from_arrays([[0.0], [5.0]], labels=['a', 'b'])
        >>> dataset.label_index
        1
        >>> dataset.feature_matrix()
        array([[0.],
               [5.]])
    """

    def __init__(
        self,
        records: Optional[Sequence[Record]] = None,
        attribute_names: Optional[Sequence[str]] = None,
        label_index: Optional[int] = None,
    ) -> None:
        """Store records and schema; consistency is checked by ``validate_schema``."""
        self.records: List[Record] = list(records) if records is not None else []

        if attribute_names is None:
            n_attributes = len(self.records[0].values) if self.records else 0
            attribute_names = [f"attr_{i}" for i in range(n_attributes)]

        self.attribute_names: List[str] = [str(name) for name in attribute_names]
        self.label_index = label_index

    @classmethod
    def from_arrays(
        cls,
        features: Union[np.ndarray, torch.Tensor, Sequence[Sequence[float]]],
        labels: Optional[Sequence[Any]] = None,
        weights: Optional[Sequence[float]] = None,
        attribute_names: Optional[Sequence[str]] = None,
        label_name: str = "class",
    ) -> "WeightedDataset":
        """
        Build a dataset from a feature matrix and optional labels/weights.

        The label, when given, is appended as the last column.

        Args:
            features: 2D array-like of shape (n_samples, n_features)
            labels: Optional per-row label values
            weights: Optional per-row weights (defaults to 1.0)
            attribute_names: Optional feature column names
            label_name: Name of the appended label column

        Returns:
            New WeightedDataset

        Raises:
            SchemaError: If shapes of features, labels and weights disagree
        """
        if isinstance(features, torch.Tensor):
            features = features.detach().cpu().numpy()
        features = np.asarray(features, dtype=np.float64)

        if features.ndim == 1 and features.size == 0:
            features = features.reshape(0, 0)
        if features.ndim != 2:
            raise SchemaError(f"Features must be a 2D array, got shape {features.shape}")

        n_samples, n_features = features.shape

        if labels is not None and len(labels) != n_samples:
            raise SchemaError(
                f"Feature and label counts don't match: "
                f"{n_samples} features vs {len(labels)} labels"
            )
        if weights is not None and len(weights) != n_samples:
            raise SchemaError(
                f"Feature and weight counts don't match: "
                f"{n_samples} features vs {len(weights)} weights"
            )

        if attribute_names is None:
            attribute_names = [f"attr_{i}" for i in range(n_features)]
        attribute_names = list(attribute_names)
        if len(attribute_names) != n_features:
            raise SchemaError(
                f"Expected {n_features} attribute names, got {len(attribute_names)}"
            )

        records = []
        for i in range(n_samples):
            values: List[Any] = features[i].tolist()
            if labels is not None:
                values.append(labels[i])
            weight = float(weights[i]) if weights is not None else 1.0
            records.append(Record(values=values, weight=weight))

        label_index = None
        if labels is not None:
            attribute_names.append(label_name)
            label_index = n_features

        return cls(records, attribute_names=attribute_names, label_index=label_index)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, idx: int) -> Record:
        return self.records[idx]

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def num_attributes(self) -> int:
        return len(self.attribute_names)

    @property
    def has_label(self) -> bool:
        return self.label_index is not None

    @property
    def weights(self) -> np.ndarray:
        """Current weights as a float64 array (a copy)."""
        return np.array([record.weight for record in self.records], dtype=np.float64)

    def set_weights(self, weights: Union[np.ndarray, Sequence[float]]) -> None:
        """
        Assign one weight per record, in dataset order.

        Raises:
            SchemaError: If the number of weights differs from the number of records
        """
        weights = np.asarray(weights, dtype=np.float64)
        if weights.ndim != 1 or weights.shape[0] != len(self.records):
            raise SchemaError(
                f"Weight count doesn't match record count: "
                f"{weights.shape} vs {len(self.records)} records"
            )
        for record, weight in zip(self.records, weights):
            record.weight = float(weight)

    def validate_schema(self) -> None:
        """
        Check the label index and record lengths against the declared schema.

        Raises:
            SchemaError: On any inconsistency
        """
        if self.label_index is not None:
            if isinstance(self.label_index, bool) or not isinstance(self.label_index, (int, np.integer)):
                raise SchemaError(f"Label index must be an integer, got {self.label_index!r}")
            if not 0 <= self.label_index < self.num_attributes:
                raise SchemaError(
                    f"Label index {self.label_index} out of range for "
                    f"{self.num_attributes} attributes"
                )

        for i, record in enumerate(self.records):
            if len(record.values) != self.num_attributes:
                raise SchemaError(
                    f"Record {i} has {len(record.values)} values, "
                    f"schema declares {self.num_attributes} attributes"
                )

    def feature_indices(self) -> List[int]:
        """Column positions of every non-label attribute, in schema order."""
        return [j for j in range(self.num_attributes) if j != self.label_index]

    def feature_matrix(self) -> np.ndarray:
        """
        Numeric matrix of the non-label columns.

        Returns:
            Array of shape (n_samples, n_features), dtype float64

        Raises:
            SchemaError: If the schema is inconsistent or a feature is non-numeric
        """
        self.validate_schema()
        columns = self.feature_indices()

        try:
            matrix = np.array(
                [[float(record.values[j]) for j in columns] for record in self.records],
                dtype=np.float64,
            )
        except (TypeError, ValueError) as exc:
            raise SchemaError(f"Non-numeric feature value: {exc}") from exc

        return matrix.reshape(len(self.records), len(columns))

    def labels(self) -> Optional[List[Any]]:
        """Label value of every record, or None for unlabelled data."""
        if self.label_index is None:
            return None
        return [record.values[self.label_index] for record in self.records]

    def copy(self) -> "WeightedDataset":
        """Deep copy of records and schema."""
        records = [Record(values=list(r.values), weight=r.weight) for r in self.records]
        return WeightedDataset(
            records,
            attribute_names=list(self.attribute_names),
            label_index=self.label_index,
        )

    def __repr__(self) -> str:
        return (
            f"WeightedDataset(n_records={len(self)}, "
            f"n_attributes={self.num_attributes}, label_index={self.label_index})"
        )
