"""Tests for configuration loading and logger setup."""

import logging
from pathlib import Path

import pytest

from jax_frames import DEFAULT_CONFIG, FrameSemanticsConfig, load_config
from jax_frames.utils import setup_logger

FIXTURES = Path(__file__).parent / "fixtures"


def test_defaults():
    assert DEFAULT_CONFIG.model_frame_name == "__model__"
    assert DEFAULT_CONFIG.world_frame_name == "world"
    assert DEFAULT_CONFIG.scope_delimiter == "::"
    assert DEFAULT_CONFIG.log_level == "WARNING"


def test_load_config():
    config = load_config(FIXTURES / "config.yaml")
    assert config == FrameSemanticsConfig(log_level="DEBUG")


def test_load_config_partial_and_empty(tmp_path):
    """Missing keys keep their defaults; an empty file is all defaults."""
    partial = tmp_path / "partial.yaml"
    partial.write_text("scope_delimiter: /\n")
    assert load_config(partial) == FrameSemanticsConfig(scope_delimiter="/")

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config(empty) == DEFAULT_CONFIG


@pytest.mark.parametrize("text, match", [
    ("unknown_key: 1\n", "Unknown config keys"),
    ("- a\n- b\n", "must contain a mapping"),
])
def test_load_config_invalid(tmp_path, text, match):
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(ValueError, match=match):
        load_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_setup_logger_from_config(package_logger):
    """The package logger takes its level from the config and is not duplicated."""
    config = load_config(FIXTURES / "config.yaml")

    logger = setup_logger("jax_frames", config.log_level)
    logger = setup_logger("jax_frames", config.log_level)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert logging.getLogger("jax_frames.frame_semantics").getEffectiveLevel() == logging.DEBUG

    setup_logger("jax_frames", DEFAULT_CONFIG.log_level)
    assert logger.level == logging.WARNING
