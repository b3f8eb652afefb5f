"""Tests for logging and reproducibility helpers."""

import logging
import random

import numpy as np
import torch

from crw.utils import get_logger, get_random_state, log_config, restore_random_state, set_seed, setup_logger


def test_setup_logger_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "weights.log"
    logger = setup_logger("crw.test_file", log_file=str(log_file), level="debug", console=False)

    logger.debug("scored 3 records")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert not logger.propagate
    assert "scored 3 records" in log_file.read_text()


def test_get_logger_replaces_handlers():
    first = get_logger("crw.test_handlers", file_output=False)
    second = get_logger("crw.test_handlers", file_output=False)

    assert first is second
    assert len(second.handlers) == 1


def test_log_config(tmp_path):
    log_file = tmp_path / "config.log"
    logger = setup_logger("crw.test_config", log_file=str(log_file), console=False)

    log_config(logger, {"weighting": {"epsilon": 0.001}, "seed": 42})
    for handler in logger.handlers:
        handler.flush()

    text = log_file.read_text()
    assert "epsilon: 0.001" in text
    assert "seed: 42" in text


def test_set_seed_is_reproducible():
    set_seed(123)
    first = (random.random(), np.random.rand(), torch.rand(1).item())
    set_seed(123)
    second = (random.random(), np.random.rand(), torch.rand(1).item())

    assert first == second


def test_restore_random_state():
    state = get_random_state()
    expected = np.random.rand()
    restore_random_state(state)

    assert np.random.rand() == expected
