"""
CRW (Clustering Relevance Weighting).

This package assigns a relevance weight to every record of a tabular
dataset: records far from every cluster center weigh more than records
sitting on one.

Modules:
    core: Dataset model, label stripping, cluster discovery, scoring, normalization
    data: CSV table I/O and weighted samplers for downstream training
    utils: Logging, reproducibility, config utilities

Example:
    >>> from crw.core import RelevanceFilter
    >>> from crw.data import load_table, save_weights_table
    >>>
    >>> dataset = load_table('train.csv', label_column='class')
    >>> RelevanceFilter().process(dataset)
    >>> save_weights_table(dataset, './outputs', 'relevance_weights_train')
"""


__version__ = '0.1.0'

__all__ = ['__version__']
