"""Centralized logging setup for CRW.

Provides consistent logging configuration across all modules with both
file and console handlers.
"""


import sys
import logging
from pathlib import Path
from typing import Optional


_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_logger(
    name: str,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
    log_level: int = logging.INFO,
    console: bool = True,
    file_output: bool = True
) -> logging.Logger:
    """
    Create and configure logger with consistent formatting.

    Args:
        name: Logger name (typically __name__ from calling module)
        log_dir: Directory to save log files (created if doesn't exist)
        log_file: Log file name (defaults to '{name}.log' if not provided)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console: Whether to add console (stdout) handler
        file_output: Whether to add file handler

    Returns:
        Configured logger instance

    Example:
        >>> from crw.utils.logging import get_logger
        >>> logger = get_logger(__name__, log_dir='./logs')
        >>> logger.info("Scoring started")
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates
    logger.handlers = []

    log_format = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    if file_output and log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        if log_file is None:
            log_file = f"{name.split('.')[-1]}.log"

        file_handler = logging.FileHandler(log_dir / log_file, mode='a')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(log_format)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(log_format)
        logger.addHandler(console_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
    console: bool = True,
) -> logging.Logger:
    """
    Set up a logger with optional file output.

    Simpler interface for scripts that maps string log levels to logging
    constants.

    Args:
        name: Logger name
        log_file: Path to log file (if None, only console logging)
        level: Log level as string ("DEBUG", "INFO", ...)
        console: Whether to output to console

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("crw", log_file="./logs/weights.log")
    """
    log_level = _LEVEL_MAP.get(str(level).upper(), logging.INFO)

    log_dir = None
    log_file_name = None
    if log_file:
        log_path = Path(log_file)
        log_dir = str(log_path.parent)
        log_file_name = log_path.name

    return get_logger(
        name=name,
        log_dir=log_dir,
        log_file=log_file_name,
        log_level=log_level,
        console=console,
        file_output=log_file is not None,
    )


def log_config(logger: logging.Logger, config: dict) -> None:
    """
    Log configuration parameters in a readable format.

    Args:
        logger: Logger instance
        config: Configuration dictionary (or OmegaConf DictConfig)
    """
    logger.info("=" * 80)
    logger.info("Configuration:")
    logger.info("=" * 80)

    if hasattr(config, 'items'):
        for key, value in config.items():
            if isinstance(value, dict) or (hasattr(value, 'items') and not isinstance(value, str)):
                logger.info(f"{key}:")
                for sub_key, sub_value in value.items():
                    logger.info(f"  {sub_key}: {sub_value}")
            else:
                logger.info(f"{key}: {value}")
    else:
        logger.info(str(config))

    logger.info("=" * 80)
