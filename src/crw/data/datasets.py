"""Torch dataset view over a weighted CRW table."""


from typing import Dict, List, Tuple

import torch
from torch.utils.data import Dataset

from ..core.dataset import WeightedDataset


class WeightedRecordDataset(Dataset):
    """
    Dataset yielding (features, weight, label_index) tensors.

    Labels are mapped to integer indices in order of first appearance;
    unlabelled datasets yield -1.

    Args:
        dataset: Scored WeightedDataset

    Attributes:
        features: Float tensor of shape (n_samples, n_features)
        weights: Double tensor of shape (n_samples,)
        classes: Distinct label values
        class_to_idx: Mapping from label value to index

    Example:
        >>> torch_dataset = WeightedRecordDataset(dataset)
        >>> features, weight, label = torch_dataset[0]
    """

    def __init__(self, dataset: WeightedDataset) -> None:
        """Snapshot features, weights and labels of ``dataset``."""
        self.features = torch.as_tensor(dataset.feature_matrix(), dtype=torch.float32)
        self.weights = torch.as_tensor(dataset.weights, dtype=torch.float64)

        raw_labels = dataset.labels()
        self.classes: List = []
        self.class_to_idx: Dict = {}
        if raw_labels is None:
            self.labels = torch.full((len(dataset),), -1, dtype=torch.long)
        else:
            for label in raw_labels:
                if label not in self.class_to_idx:
                    self.class_to_idx[label] = len(self.classes)
                    self.classes.append(label)
            self.labels = torch.tensor(
                [self.class_to_idx[label] for label in raw_labels], dtype=torch.long
            )

    def __len__(self) -> int:
        return int(self.features.shape[0])

    def __getitem__(self, idx: int) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        return self.features[idx], self.weights[idx], self.labels[idx]
