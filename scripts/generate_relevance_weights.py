#!/usr/bin/env python3
"""
Generate relevance weights for a CSV table.

This script strips the label column, discovers clusters (X-means by
default), scores every record by its distance to the nearest centroid,
normalizes the weights and writes:
    - <experiment.name>.csv
    - <experiment.name>.pkl
    - <experiment.name>_summary.json

Usage:
    python scripts/generate_relevance_weights.py \
        input.path=./data/train.csv \
        input.label_column=class \
        relevance.clustering.max_clusters=50 \
        output_dir=./outputs/train_relevance
"""


import sys
from pathlib import Path

import hydra
from omegaconf import DictConfig, OmegaConf

# Add src to path for imports
src_path = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(src_path))

from crw.core import RelevanceFilter, get_cluster_stats, strip_label
from crw.data import load_table, save_weights_table
from crw.utils.config_utils import (
    build_clustering_config,
    build_weighting_config,
    print_config,
    validate_config,
)
from crw.utils.logging import setup_logger
from crw.utils.reproducibility import set_seed


@hydra.main(config_path="../configs", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Run relevance weighting and persist the weights table."""
    output_dir = Path(str(cfg.output_dir))
    output_dir.mkdir(parents=True, exist_ok=True)
    log_dir = output_dir / "logs"

    logger = setup_logger(
        name="crw",
        log_file=str(log_dir / "relevance_weights.log"),
        level=cfg.get("log_level", "INFO"),
    )
    print_config(cfg, save_to_file=str(output_dir / "config.yaml"))

    validate_config(cfg)
    set_seed(int(cfg.experiment.seed))

    clustering_cfg = build_clustering_config(cfg)
    weighting_cfg = build_weighting_config(cfg)

    dataset = load_table(
        cfg.input.path,
        label_column=cfg.input.get("label_column"),
        weight_column=cfg.input.get("weight_column"),
    )

    relevance_filter = RelevanceFilter(
        clustering_config=clustering_cfg,
        weighting_config=weighting_cfg,
    )
    logger.info(relevance_filter.global_info())
    relevance_filter.process(dataset)

    extra = {
        "input": str(cfg.input.path),
        "label_column": cfg.input.get("label_column"),
        "clustering": OmegaConf.to_container(cfg.relevance.clustering, resolve=True),
        "weighting": OmegaConf.to_container(cfg.relevance.weighting, resolve=True),
    }
    if relevance_filter.last_centroids is not None:
        cluster_stats = get_cluster_stats(strip_label(dataset), relevance_filter.last_centroids)
        extra["num_clusters"] = cluster_stats["n_clusters"]
        extra["cluster_sizes"] = cluster_stats["cluster_sizes"]
        logger.info("Clusters: %d", cluster_stats["n_clusters"])

    outputs = save_weights_table(dataset, output_dir, str(cfg.experiment.name), extra=extra)

    print("\n" + "=" * 80)
    print("Relevance weight generation complete")
    print("=" * 80)
    print(f"records:          {len(dataset)}")
    print(f"csv table:        {outputs['csv']}")
    print(f"pkl table:        {outputs['pkl']}")
    print(f"summary:          {outputs['summary']}")
    print("=" * 80)


if __name__ == "__main__":
    main()
