"""Remove the label column so clustering only sees predictor features."""


import logging

from .dataset import Record, WeightedDataset


logger = logging.getLogger(__name__)


def strip_label(dataset: WeightedDataset) -> WeightedDataset:
    """
    Copy a dataset without its label column.

    Column order and row order/count are preserved, so row ``i`` of the
    result corresponds to row ``i`` of the input. Weights are copied.
    An unlabelled dataset yields a plain copy.

    Args:
        dataset: Dataset with at most one label column

    Returns:
        New unlabelled WeightedDataset

    Raises:
        SchemaError: If the label index is inconsistent with the schema
    """
    dataset.validate_schema()

    if dataset.label_index is None:
        logger.debug("No label column to remove (%d rows)", len(dataset))
        unlabeled = dataset.copy()
        unlabeled.label_index = None
        return unlabeled

    label_index = dataset.label_index
    logger.debug(
        "Removing label column %d (%s) from %d rows",
        label_index,
        dataset.attribute_names[label_index],
        len(dataset),
    )

    columns = dataset.feature_indices()
    records = [
        Record(values=[record.values[j] for j in columns], weight=record.weight)
        for record in dataset
    ]
    attribute_names = [dataset.attribute_names[j] for j in columns]

    return WeightedDataset(records, attribute_names=attribute_names, label_index=None)
