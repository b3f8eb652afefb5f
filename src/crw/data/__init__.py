"""
Data adapters for CRW.

This module provides:
- CSV table loading and weights table export
- A torch Dataset over weighted records
- Weighted samplers driven by relevance weights
"""


from .table_io import load_table, save_weights_table, load_weights_table
from .datasets import WeightedRecordDataset
from .samplers import create_weighted_sampler, validate_sampling_weights

__all__ = [
    # Table I/O
    'load_table',
    'save_weights_table',
    'load_weights_table',
    # Datasets
    'WeightedRecordDataset',
    # Samplers
    'create_weighted_sampler',
    'validate_sampling_weights',
]
