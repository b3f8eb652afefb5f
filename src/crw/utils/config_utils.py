"""Configuration utilities for Hydra/OmegaConf.

This module provides utilities for loading, validating, and turning
OmegaConf configurations into the typed CRW configuration dataclasses.
"""


import os
from pathlib import Path
from typing import Any, Optional

from omegaconf import DictConfig, OmegaConf

from ..core.clustering import ClusteringConfig
from ..core.weighting import WeightingConfig
from .logging import get_logger

logger = get_logger(__name__)


def validate_config(cfg: DictConfig) -> None:
    """
    Validate configuration for required fields.

    Args:
        cfg: Configuration to validate

    Raises:
        ValueError: If required fields are missing or invalid

    Example:
        >>> validate_config(cfg)  # Raises ValueError if invalid
    """
    required_keys = ['experiment', 'input', 'relevance']

    for key in required_keys:
        if key not in cfg:
            raise ValueError(f"Config missing required key: {key}")

    if not cfg.input.get('path'):
        raise ValueError("Config 'input.path' must be set")

    if 'clustering' not in cfg.relevance:
        raise ValueError("Config missing 'relevance.clustering'")
    if 'weighting' not in cfg.relevance:
        raise ValueError("Config missing 'relevance.weighting'")

    # Building the dataclasses runs their range checks.
    build_clustering_config(cfg)
    build_weighting_config(cfg)

    logger.info("Configuration validation passed")


def build_clustering_config(cfg: DictConfig) -> ClusteringConfig:
    """Build typed clustering config from a dict config."""
    clustering_cfg = get_config_value(cfg, "relevance.clustering", {}) or {}
    random_state = clustering_cfg.get("random_state", 42)
    return ClusteringConfig(
        algorithm=str(clustering_cfg.get("algorithm", "xmeans")),
        min_clusters=int(clustering_cfg.get("min_clusters", 2)),
        max_clusters=int(clustering_cfg.get("max_clusters", 1000)),
        max_iterations=int(clustering_cfg.get("max_iterations", 1000)),
        random_state=int(random_state) if random_state is not None else None,
        n_init=int(clustering_cfg.get("n_init", 10)),
        min_cluster_size=int(clustering_cfg.get("min_cluster_size", 5)),
        min_samples=int(clustering_cfg.get("min_samples", 1)),
    )


def build_weighting_config(cfg: DictConfig) -> WeightingConfig:
    """Build typed weighting config from a dict config."""
    weighting_cfg = get_config_value(cfg, "relevance.weighting", {}) or {}
    return WeightingConfig(
        epsilon=float(weighting_cfg.get("epsilon", 1e-3)),
        scoring_batch_size=int(weighting_cfg.get("scoring_batch_size", 4096)),
    )


def print_config(
    cfg: DictConfig,
    resolve: bool = True,
    save_to_file: Optional[str] = None,
) -> None:
    """
    Pretty print configuration.

    Args:
        cfg: Configuration to print
        resolve: Whether to resolve interpolations (default: True)
        save_to_file: Optional file path to save config (default: None)
    """
    config_str = OmegaConf.to_yaml(cfg, resolve=resolve)

    logger.info("=" * 80)
    logger.info("Configuration:")
    logger.info("=" * 80)
    logger.info(config_str)
    logger.info("=" * 80)

    if save_to_file:
        Path(save_to_file).parent.mkdir(parents=True, exist_ok=True)
        with open(save_to_file, 'w') as f:
            f.write(config_str)
        logger.info(f"Configuration saved to: {save_to_file}")


def get_config_value(
    cfg: DictConfig,
    key: str,
    default: Any = None,
) -> Any:
    """
    Safely get config value with default fallback.

    Args:
        cfg: Configuration
        key: Dot-separated key path (e.g., "relevance.weighting.epsilon")
        default: Default value if key not found

    Returns:
        Config value or default

    Example:
        >>> epsilon = get_config_value(cfg, "relevance.weighting.epsilon", default=1e-3)
    """
    try:
        value = cfg
        for part in key.split('.'):
            value = value[part]
        return value
    except (KeyError, AttributeError, TypeError):
        return default


def save_config(cfg: DictConfig, output_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        cfg: Configuration to save
        output_path: Path to save config file
    """
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        OmegaConf.save(config=cfg, f=f, resolve=True)
    logger.info(f"Configuration saved to: {output_path}")


def load_config(config_path: str) -> DictConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file

    Returns:
        Loaded configuration

    Example:
        >>> cfg = load_config("configs/config.yaml")
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    cfg = OmegaConf.load(config_path)
    logger.info(f"Configuration loaded from: {config_path}")
    return cfg
