"""Command line entry point: load a document and report its frames.

For every model and world in the file the attached-to and relative-to graphs
are built and validated, then each frame is printed with the body it is
attached to and its ``x y z roll pitch yaw`` pose in the scope's root frame.
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, FrameSemanticsConfig, load_config
from .core import Errors
from .frame_semantics import (
    build_frame_attached_to_graph,
    build_pose_relative_to_graph,
    resolve_frame_attached_to_body,
    resolve_pose,
    validate_frame_attached_to_graph,
    validate_pose_relative_to_graph,
)
from .io import load_sdf
from .transforms import se3
from .utils import setup_logger


def _report_scope(entity, config: FrameSemanticsConfig, relative_to: Optional[str],
                  logger: logging.Logger) -> Errors:
    attached, errors = build_frame_attached_to_graph(entity, config)
    errors += validate_frame_attached_to_graph(attached)
    relative, pose_errors = build_pose_relative_to_graph(entity, config)
    errors += pose_errors + validate_pose_relative_to_graph(relative)
    if errors:
        return errors

    reference = relative_to or relative.source_name
    logger.info("Resolving %d frames of [%s] relative to [%s]", len(relative.map), entity.name, reference)
    print(f"{entity.name}:")
    for name in relative.map:
        body, body_errors = resolve_frame_attached_to_body(attached, name)
        pose, pose_errors = resolve_pose(relative, name, reference)
        if body_errors or pose_errors:
            errors += body_errors + pose_errors
            continue
        values = " ".join(f"{v:.6g}" for v in se3.to_xyz_rpy(pose).tolist())
        print(f"  {name}  attached_to[{body}]  pose[{values}]")
    return errors


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve frame attachments and poses of an SDF file")
    parser.add_argument("sdf_path", type=str)
    parser.add_argument("--config", type=str, default=None, help="YAML FrameSemanticsConfig overrides")
    parser.add_argument("--relative-to", type=str, default=None,
                        help="Frame to express poses in (default: the scope's root frame)")
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    logger = setup_logger("jax_frames", config.log_level)

    root, errors = load_sdf(args.sdf_path)
    scopes: List = list(root.worlds) + list(root.models)
    if not errors:
        for entity in scopes:
            errors += _report_scope(entity, config, args.relative_to, logger)

    for error in errors:
        logger.error("%s", error)
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
