"""SDF parser for loading scene descriptions into immutable entities.

This module reads SDF-style XML (``<sdf>`` holding worlds, models and
lights) and converts it into the :mod:`jax_frames.core.entities` tree that
the frame-semantics builders consume. Problems are collected into an error
list and loading continues wherever the document still makes sense.
"""

import logging
import math
from pathlib import Path
from typing import Iterable, List, Tuple, Union

import jax
from lxml import etree

from jax_frames.core.entities import Frame, Joint, Light, Link, Model, Root, World
from jax_frames.core.errors import Error, ErrorCode, Errors
from jax_frames.transforms import se3

logger = logging.getLogger(__name__)

Array = jax.Array

JOINT_TYPES = (
    "ball", "continuous", "fixed", "gearbox", "prismatic",
    "revolute", "revolute2", "screw", "universal",
)


def load_sdf(sdf_path: Union[str, Path]) -> Tuple[Root, Errors]:
    """Load an SDF file.

    Args:
        sdf_path: Path to the SDF file to load.

    Returns:
        The parsed Root (empty if the file cannot be read) and all errors.
    """
    try:
        tree = etree.parse(str(sdf_path))
    except (OSError, etree.XMLSyntaxError) as e:
        return Root(), [Error(ErrorCode.FILE_READ, f"Unable to read file[{sdf_path}]: {e}")]
    return _load_root(tree.getroot())


def load_sdf_string(sdf_string: str) -> Tuple[Root, Errors]:
    """Load SDF from an in-memory XML string."""
    try:
        root = etree.fromstring(sdf_string.encode("utf-8"))
    except etree.XMLSyntaxError as e:
        return Root(), [Error(ErrorCode.FILE_READ, f"Unable to parse SDF string: {e}")]
    return _load_root(root)


def _load_root(elem) -> Tuple[Root, Errors]:
    errors: Errors = []

    if elem.tag != "sdf":
        errors.append(Error(
            ErrorCode.ELEMENT_INCORRECT_TYPE,
            f"Attempting to load a Root, but the provided element is <{elem.tag}>, not <sdf>."))
        return Root(), errors

    version = elem.get("version")
    if version is None:
        errors.append(Error(ErrorCode.ATTRIBUTE_MISSING, "SDF does not have a version."))

    worlds = [_load_world(e, errors) for e in elem.findall("world")]
    _check_unique("World", worlds, "root", errors)
    models = _load_models(elem, "root", errors)
    lights = _load_lights(elem, "root", errors)

    logger.debug("Loaded SDF version %s: %d worlds, %d models, %d lights, %d errors",
                 version, len(worlds), len(models), len(lights), len(errors))
    return Root(version=version or "", worlds=tuple(worlds), models=tuple(models),
                lights=tuple(lights)), errors


def _load_world(elem, errors: Errors) -> World:
    name = _load_name(elem, "world", errors)
    frames = [_load_frame(e, errors) for e in elem.findall("frame")]
    models = [_load_model(e, errors) for e in elem.findall("model")]
    _check_unique("Frame or model", frames + models, f"world with name[{name}]", errors)
    lights = _load_lights(elem, f"world with name[{name}]", errors)
    return World(name=name, models=tuple(models), frames=tuple(frames), lights=tuple(lights))


def _load_models(elem, scope: str, errors: Errors) -> List[Model]:
    models = [_load_model(e, errors) for e in elem.findall("model")]
    _check_unique("Model", models, scope, errors)
    return models


def _load_model(elem, errors: Errors) -> Model:
    name = _load_name(elem, "model", errors)
    pose, relative_to = _load_pose(elem, f"model[{name}]", errors)

    links = [_load_link(e, errors) for e in elem.findall("link")]
    joints = [_load_joint(e, errors) for e in elem.findall("joint")]
    frames = [_load_frame(e, errors) for e in elem.findall("frame")]
    models = [_load_model(e, errors) for e in elem.findall("model")]
    # Links, joints, frames and nested models share one frame namespace.
    _check_unique("Frame-bearing element", links + joints + frames + models,
                  f"model with name[{name}]", errors)

    return Model(
        name=name,
        canonical_link=elem.get("canonical_link", ""),
        attached_to=elem.get("attached_to", ""),
        pose=pose,
        pose_relative_to=relative_to,
        static=_load_bool(elem, "static", False),
        links=tuple(links),
        joints=tuple(joints),
        frames=tuple(frames),
        models=tuple(models),
    )


def _load_link(elem, errors: Errors) -> Link:
    name = _load_name(elem, "link", errors)
    pose, relative_to = _load_pose(elem, f"link[{name}]", errors)
    return Link(name=name, pose=pose, pose_relative_to=relative_to)


def _load_joint(elem, errors: Errors) -> Joint:
    name = _load_name(elem, "joint", errors)
    pose, relative_to = _load_pose(elem, f"joint[{name}]", errors)

    links = {}
    for role in ("parent", "child"):
        text = elem.findtext(role)
        if text is None:
            errors.append(Error(
                ErrorCode.ELEMENT_MISSING,
                f"The {role} element of joint with name[{name}] is missing."))
            text = ""
        links[role] = text.strip()

    joint_type = elem.get("type")
    if joint_type is None:
        errors.append(Error(
            ErrorCode.ATTRIBUTE_MISSING,
            f"A joint type is required, but is not set on joint with name[{name}]."))
        joint_type = ""
    else:
        joint_type = joint_type.lower()
        if joint_type not in JOINT_TYPES:
            errors.append(Error(
                ErrorCode.ATTRIBUTE_INVALID,
                f"Joint type of {joint_type} is invalid on joint with name[{name}]."))

    return Joint(name=name, type=joint_type, parent_link_name=links["parent"],
                 child_link_name=links["child"], pose=pose, pose_relative_to=relative_to)


def _load_frame(elem, errors: Errors) -> Frame:
    name = _load_name(elem, "frame", errors)
    pose, relative_to = _load_pose(elem, f"frame[{name}]", errors)
    return Frame(name=name, attached_to=elem.get("attached_to", ""), pose=pose,
                 pose_relative_to=relative_to)


def _load_lights(elem, scope: str, errors: Errors) -> List[Light]:
    lights = []
    for light_elem in elem.findall("light"):
        name = _load_name(light_elem, "light", errors)
        pose, relative_to = _load_pose(light_elem, f"light[{name}]", errors)
        light_type = light_elem.get("type")
        if light_type is None:
            errors.append(Error(ErrorCode.ATTRIBUTE_MISSING, f"Light[{name}] has no type."))
        lights.append(Light(name=name, type=light_type or "",
                            cast_shadows=_load_bool(light_elem, "cast_shadows", False),
                            pose=pose, pose_relative_to=relative_to))
    _check_unique("Light", lights, scope, errors)
    return lights


def _load_name(elem, kind: str, errors: Errors) -> str:
    name = elem.get("name")
    if not name:
        errors.append(Error(
            ErrorCode.ATTRIBUTE_MISSING,
            f"A {kind} name is required, but the name is not set."))
        return ""
    return name


def _load_pose(elem, owner: str, errors: Errors) -> Tuple[Array, str]:
    """Read the optional ``<pose>`` child of ``elem``.

    ``relative_to`` names the frame the pose is expressed in; the legacy
    ``frame`` attribute is accepted in its place. Six values are
    ``x y z roll pitch yaw``; with ``rotation_format="quat_xyzw"`` seven
    values are ``x y z qx qy qz qw``.
    """
    pose_elem = elem.find("pose")
    if pose_elem is None:
        return se3.identity(), ""

    relative_to = pose_elem.get("relative_to", pose_elem.get("frame", ""))
    text = (pose_elem.text or "").split()
    try:
        values = [float(v) for v in text] if text else [0.0] * 6
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"pose values must be finite, got {pose_elem.text.strip()}")
        if pose_elem.get("rotation_format", "euler_rpy") == "quat_xyzw":
            if len(values) != 7:
                raise ValueError(f"quat_xyzw pose must have 7 values, got {len(values)}")
            qx, qy, qz, qw = values[3:]
            if qx == qy == qz == qw == 0.0:
                raise ValueError("quat_xyzw quaternion must have a non-zero norm")
            pose = se3.from_xyz_quaternion(values[:3], [qw, qx, qy, qz])
        else:
            pose = se3.from_xyz_rpy(values)
    except ValueError as e:
        errors.append(Error(ErrorCode.ATTRIBUTE_INVALID, f"Unable to load the {owner}'s pose: {e}."))
        return se3.identity(), relative_to

    return pose, relative_to


def _load_bool(elem, tag: str, default: bool) -> bool:
    text = elem.findtext(tag)
    if text is None:
        return default
    return text.strip().lower() in ("true", "1")


def _check_unique(kind: str, entities: Iterable, scope: str, errors: Errors) -> None:
    seen = set()
    for entity in entities:
        if entity.name in seen:
            errors.append(Error(
                ErrorCode.DUPLICATE_NAME,
                f"{kind} with name[{entity.name}] already exists in {scope}. "
                f"Each must have a unique name."))
            logger.warning("Duplicate name[%s] in %s", entity.name, scope)
        seen.add(entity.name)
