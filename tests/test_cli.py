"""Tests for the command line entry point."""

import logging
from pathlib import Path

from jax_frames.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


def test_main_reports_frames(capsys, package_logger):
    """Each frame is printed with its body and its pose in the model frame."""
    status = main([str(FIXTURES / "model_frame_relative_to_joint.sdf")])
    out = capsys.readouterr().out

    assert status == 0
    assert "model_frame_relative_to_joint:" in out
    assert "  P  attached_to[P]  pose[1 0 0 " in out
    assert "  J  attached_to[C]  pose[2 3 0 " in out
    assert "  F4  attached_to[C]  pose[6 3 3 " in out
    # The default WARNING level hides progress messages.
    assert "Resolving" not in out


def test_main_relative_to(capsys, package_logger):
    status = main([str(FIXTURES / "model_frame_relative_to_joint.sdf"), "--relative-to", "P"])
    out = capsys.readouterr().out

    assert status == 0
    assert "  F1  attached_to[P]  pose[0 0 1 " in out


def test_main_log_level_from_config(capsys, package_logger):
    """``log_level`` from the config file sets the package logger level."""
    status = main([str(FIXTURES / "world_nested_models.sdf"), "--config", str(FIXTURES / "config.yaml")])
    out = capsys.readouterr().out

    assert status == 0
    assert package_logger.level == logging.DEBUG
    assert "DEBUG" in out
    assert "Resolving 8 frames of [default] relative to [world]" in out
    assert "  robot::gripper::tip  attached_to[robot::gripper::palm]  pose[1 0.2 1.6 " in out


def test_main_reports_errors(capsys, package_logger):
    """Invalid graphs are logged as errors and give a non-zero status."""
    status = main([str(FIXTURES / "model_invalid_frames.sdf")])
    out = capsys.readouterr().out

    assert status == 1
    assert "ERROR" in out
    assert "Error Code FRAME_ATTACHED_TO_INVALID" in out
    assert "attached_to[missing]" in out
    assert "Error Code POSE_RELATIVE_TO_INVALID" in out


def test_main_missing_file(capsys, package_logger):
    status = main([str(FIXTURES / "does_not_exist.sdf")])
    out = capsys.readouterr().out

    assert status == 1
    assert "Error Code FILE_READ" in out
