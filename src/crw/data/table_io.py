"""
CSV table I/O for CRW.

Loads a header-first CSV table into a WeightedDataset and persists computed
relevance weights as CSV, pickle and a JSON summary.
"""


import csv
import json
import logging
import pickle
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from ..core.dataset import Record, WeightedDataset
from ..core.exceptions import SchemaError
from ..core.weighting import get_weight_stats


logger = logging.getLogger(__name__)


def load_table(
    path: Union[str, Path],
    label_column: Optional[str] = None,
    weight_column: Optional[str] = None,
) -> WeightedDataset:
    """
    Load a CSV table into a WeightedDataset.

    Feature cells are parsed as floats; the label column is kept as text.
    The weight column, when given, is read into the record weights and
    dropped from the attributes.

    Args:
        path: CSV file with a header row
        label_column: Name of the label column (None for unlabelled data)
        weight_column: Name of an existing weight column

    Returns:
        Loaded dataset

    Raises:
        FileNotFoundError: If the file does not exist
        SchemaError: If a named column is missing or a feature cell is not numeric
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Table file not found: {path}")

    with open(path, "r", newline="", encoding="utf-8") as table_file:
        reader = csv.reader(table_file)
        try:
            header = next(reader)
        except StopIteration:
            raise SchemaError(f"Table file is empty: {path}")
        rows = [row for row in reader if row]

    for column in (label_column, weight_column):
        if column is not None and column not in header:
            raise SchemaError(f"Column '{column}' not found in {path}")

    weight_idx = header.index(weight_column) if weight_column is not None else None
    attribute_idx = [j for j in range(len(header)) if j != weight_idx]
    attribute_names = [header[j] for j in attribute_idx]
    label_index = attribute_names.index(label_column) if label_column is not None else None

    records = []
    for line_no, row in enumerate(rows, start=2):
        if len(row) != len(header):
            raise SchemaError(
                f"{path}:{line_no}: expected {len(header)} cells, got {len(row)}"
            )
        values: List[Any] = []
        for position, j in enumerate(attribute_idx):
            cell = row[j]
            if position == label_index:
                values.append(cell)
                continue
            try:
                values.append(float(cell))
            except ValueError:
                raise SchemaError(
                    f"{path}:{line_no}: non-numeric value {cell!r} in column '{header[j]}'"
                )
        weight = 1.0
        if weight_idx is not None:
            try:
                weight = float(row[weight_idx])
            except ValueError:
                raise SchemaError(f"{path}:{line_no}: non-numeric weight {row[weight_idx]!r}")
        records.append(Record(values=values, weight=weight))

    dataset = WeightedDataset(records, attribute_names=attribute_names, label_index=label_index)
    logger.info(
        "Loaded %d records with %d attributes from %s (label=%s)",
        len(dataset),
        dataset.num_attributes,
        path,
        label_column,
    )
    return dataset


def save_weights_table(
    dataset: WeightedDataset,
    output_dir: Union[str, Path],
    name: str,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Path]:
    """
    Persist the weights of ``dataset``.

    Outputs:
        - <name>.csv: index, label, weight
        - <name>.pkl: dict with labels and float64 weights
        - <name>_summary.json: weight statistics plus ``extra``

    Returns:
        Mapping of output kind to written path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    weights = dataset.weights
    labels = dataset.labels()

    csv_path = output_dir / f"{name}.csv"
    with open(csv_path, "w", newline="") as csv_file:
        writer = csv.writer(csv_file)
        writer.writerow(["index", "label", "weight"])
        for idx, weight in enumerate(weights):
            label = labels[idx] if labels is not None else ""
            writer.writerow([int(idx), label, repr(float(weight))])

    pkl_path = output_dir / f"{name}.pkl"
    with open(pkl_path, "wb") as pkl_file:
        pickle.dump(
            {
                "attribute_names": list(dataset.attribute_names),
                "label_index": dataset.label_index,
                "labels": labels,
                "weights": weights.astype(np.float64, copy=False),
            },
            pkl_file,
        )

    summary = {
        "name": name,
        "num_records": len(dataset),
        **get_weight_stats(weights),
        "outputs": {
            "weights_csv": str(csv_path),
            "weights_pkl": str(pkl_path),
        },
    }
    if extra:
        summary.update(extra)

    summary_path = output_dir / f"{name}_summary.json"
    with open(summary_path, "w") as summary_file:
        json.dump(summary, summary_file, indent=2, default=str)

    logger.info(f"Saved weights CSV: {csv_path}")
    logger.info(f"Saved weights PKL: {pkl_path}")
    logger.info(f"Saved summary JSON: {summary_path}")

    return {"csv": csv_path, "pkl": pkl_path, "summary": summary_path}


def load_weights_table(path: Union[str, Path]) -> np.ndarray:
    """Read the weight column back from a CSV written by ``save_weights_table``."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Weights table not found: {path}")

    with open(path, "r", newline="") as csv_file:
        reader = csv.DictReader(csv_file)
        return np.array([float(row["weight"]) for row in reader], dtype=np.float64)
