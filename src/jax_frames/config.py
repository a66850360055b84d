"""Configuration for frame-graph construction.

The defaults match the scene-description format: a model's own frame is
called ``__model__``, the world frame ``world``, and nested names are joined
with ``::``. A YAML file may override any of them.
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import yaml


@dataclass(frozen=True)
class FrameSemanticsConfig:
    """Names and switches used by the graph builders.

    Attributes:
        model_frame_name: Name of the sentinel vertex of a model scope.
        world_frame_name: Name of the sentinel vertex of a world scope.
        scope_delimiter: Separator between a nested model name and its members.
        log_level: Level passed to :func:`jax_frames.utils.logging.setup_logger`.
    """
    model_frame_name: str = "__model__"
    world_frame_name: str = "world"
    scope_delimiter: str = "::"
    log_level: str = "WARNING"


DEFAULT_CONFIG = FrameSemanticsConfig()


def load_config(path: Union[str, Path]) -> FrameSemanticsConfig:
    """Load a :class:`FrameSemanticsConfig` from a YAML mapping.

    Missing keys keep their defaults; an empty file yields the defaults.

    Raises:
        FileNotFoundError: if ``path`` does not exist
        ValueError: if the file is not a mapping or holds unknown keys
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    known = {field.name for field in dataclasses.fields(FrameSemanticsConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {unknown}")

    return FrameSemanticsConfig(**data)
