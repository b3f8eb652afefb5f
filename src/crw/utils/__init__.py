"""
Utility modules for CRW.

This module provides:
- Logging utilities
- Reproducibility utilities (seed setting)
- Configuration utilities for Hydra/OmegaConf
"""


from .logging import get_logger, setup_logger, log_config
from .reproducibility import set_seed, get_random_state, restore_random_state
from .config_utils import (
    validate_config,
    build_clustering_config,
    build_weighting_config,
    print_config,
    get_config_value,
    save_config,
    load_config,
)

__all__ = [
    # Logging
    'get_logger',
    'setup_logger',
    'log_config',
    # Reproducibility
    'set_seed',
    'get_random_state',
    'restore_random_state',
    # Config utils
    'validate_config',
    'build_clustering_config',
    'build_weighting_config',
    'print_config',
    'get_config_value',
    'save_config',
    'load_config',
]
