"""
Weighted sampling over relevance weights.

Downstream consumers draw records proportionally to their CRW relevance
weight through torch's WeightedRandomSampler.
"""


from typing import List, Optional, Union

import numpy as np
import torch
from torch.utils.data import WeightedRandomSampler


def validate_sampling_weights(weights: Union[List[float], np.ndarray, torch.Tensor]) -> bool:
    """
    Validate that weights are suitable for sampling.

    Raises:
        ValueError: If weights are empty, negative, non-finite or all zero

    Example:
        >>> validate_sampling_weights([0.0, 5000.0, 0.0])
        True
    """
    weights = torch.as_tensor(np.asarray(weights, dtype=np.float64))

    if weights.numel() == 0:
        raise ValueError("Weights list is empty")
    if not torch.all(torch.isfinite(weights)):
        raise ValueError("Weights must be finite")
    if torch.any(weights < 0):
        raise ValueError("Weights must be non-negative")

    # Every record coinciding with a centroid leaves nothing to sample from.
    if float(weights.sum()) == 0.0:
        raise ValueError("All weights are zero - cannot sample")

    return True


def create_weighted_sampler(
    weights: Union[List[float], np.ndarray, torch.Tensor],
    num_samples: Optional[int] = None,
    replacement: bool = True,
    seed: Optional[int] = None,
) -> WeightedRandomSampler:
    """
    Create a WeightedRandomSampler from relevance weights.

    Args:
        weights: One weight per record, in dataset order
        num_samples: Number of draws per epoch (defaults to len(weights))
        replacement: If True, samples are drawn with replacement
        seed: Optional seed for a dedicated torch.Generator

    Returns:
        WeightedRandomSampler configured with the given weights

    Example:
        >>> sampler = create_weighted_sampler(dataset.weights, seed=42)
        >>> dataloader = DataLoader(WeightedRecordDataset(dataset), sampler=sampler, batch_size=32)
    """
    validate_sampling_weights(weights)

    if isinstance(weights, torch.Tensor):
        weights_tensor = weights.double()
    else:
        weights_tensor = torch.tensor(np.asarray(weights, dtype=np.float64), dtype=torch.double)

    if num_samples is None:
        num_samples = int(weights_tensor.numel())

    generator = None
    if seed is not None:
        generator = torch.Generator()
        generator.manual_seed(int(seed))

    return WeightedRandomSampler(
        weights=weights_tensor,
        num_samples=num_samples,
        replacement=replacement,
        generator=generator,
    )
