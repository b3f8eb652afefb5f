"""Reproducibility utilities for setting random seeds."""


import random
import os

import numpy as np
import torch


def set_seed(seed: int) -> None:
    """
    Set random seed for reproducibility across all libraries.

    Seeds the Python ``random`` module, NumPy and PyTorch, and exports
    PYTHONHASHSEED for child processes.

    Args:
        seed: Random seed value

    Example:
        >>> from crw.utils.reproducibility import set_seed
        >>> set_seed(42)
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    os.environ['PYTHONHASHSEED'] = str(seed)


def get_random_state() -> dict:
    """Get the current random state of Python, NumPy and PyTorch."""
    return {
        'python': random.getstate(),
        'numpy': np.random.get_state(),
        'torch': torch.get_rng_state(),
    }


def restore_random_state(state: dict) -> None:
    """Restore a state captured by ``get_random_state``."""
    random.setstate(state['python'])
    np.random.set_state(state['numpy'])
    torch.set_rng_state(state['torch'])
