"""
JAX Frames: frame semantics for hierarchical scene descriptions.

This library loads SDF-style documents, builds attached-to and relative-to
graphs over their named frames, and resolves which body a frame moves with
and its pose relative to any other frame, using JAX for the pose math.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import transforms
from . import core
from . import io
from .config import DEFAULT_CONFIG, FrameSemanticsConfig, load_config
from .frame_semantics import (
    FrameAttachedToGraph,
    FrameType,
    KinematicGraph,
    PoseRelativeToGraph,
    build_frame_attached_to_graph,
    build_kinematic_graph,
    build_pose_relative_to_graph,
    find_root_link,
    resolve_frame_attached_to_body,
    resolve_pose,
    resolve_pose_relative_to_root,
    validate_frame_attached_to_graph,
    validate_pose_relative_to_graph,
)

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "io",
    "DEFAULT_CONFIG",
    "FrameSemanticsConfig",
    "load_config",
    "FrameAttachedToGraph",
    "FrameType",
    "KinematicGraph",
    "PoseRelativeToGraph",
    "build_frame_attached_to_graph",
    "build_kinematic_graph",
    "build_pose_relative_to_graph",
    "find_root_link",
    "resolve_frame_attached_to_body",
    "resolve_pose",
    "resolve_pose_relative_to_root",
    "validate_frame_attached_to_graph",
    "validate_pose_relative_to_graph",
]
