"""Read-only document entities consumed by the frame-semantics builders.

Each entity is an immutable flax dataclass. Poses are JAX arrays (PyTree
leaves) and child entities are PyTree nodes, so every pose in a document is
a leaf of its Root; names and references are static fields. An empty reference string
(``attached_to``, ``pose_relative_to``) means "use the default target".
"""

from typing import Optional, Tuple

import jax
from flax import struct

from jax_frames.transforms import se3

Array = jax.Array


@struct.dataclass
class Link:
    """A rigid body.

    Attributes:
        name: Link name, unique within its model.
        pose: Authored (4, 4) pose.
        pose_relative_to: Frame the pose is expressed in.
    """
    name: str = struct.field(pytree_node=False)
    pose: Array = struct.field(default_factory=se3.identity)
    pose_relative_to: str = struct.field(pytree_node=False, default="")


@struct.dataclass
class Joint:
    """A joint between a parent and a child link.

    Attributes:
        name: Joint name.
        type: Joint type as written in the document (``revolute``, ``fixed``...).
        parent_link_name: Name of the parent link, or ``world``.
        child_link_name: Name of the child link.
        pose: Authored (4, 4) pose.
        pose_relative_to: Frame the pose is expressed in; defaults to the
            child link.
    """
    name: str = struct.field(pytree_node=False)
    type: str = struct.field(pytree_node=False, default="")
    parent_link_name: str = struct.field(pytree_node=False, default="")
    child_link_name: str = struct.field(pytree_node=False, default="")
    pose: Array = struct.field(default_factory=se3.identity)
    pose_relative_to: str = struct.field(pytree_node=False, default="")


@struct.dataclass
class Frame:
    """An explicit frame.

    Attributes:
        name: Frame name.
        attached_to: Frame this one moves with; defaults to the scope frame.
        pose: Authored (4, 4) pose.
        pose_relative_to: Frame the pose is expressed in; defaults to
            ``attached_to``.
    """
    name: str = struct.field(pytree_node=False)
    attached_to: str = struct.field(pytree_node=False, default="")
    pose: Array = struct.field(default_factory=se3.identity)
    pose_relative_to: str = struct.field(pytree_node=False, default="")


@struct.dataclass
class Light:
    """A light source. Lights are loaded but take no part in the frame graphs."""
    name: str = struct.field(pytree_node=False)
    type: str = struct.field(pytree_node=False, default="")
    cast_shadows: bool = struct.field(pytree_node=False, default=False)
    pose: Array = struct.field(default_factory=se3.identity)
    pose_relative_to: str = struct.field(pytree_node=False, default="")


@struct.dataclass
class Model:
    """A model, possibly nested inside another model or a world.

    Attributes:
        name: Model name.
        canonical_link: Link the model frame is attached to; defaults to the
            first link.
        attached_to: Attachment override used when the model is nested.
        pose: Authored (4, 4) pose of the model frame.
        pose_relative_to: Frame the pose is expressed in.
        static: Whether the model is immovable.
        links, joints, frames, models: Child entities in document order.
    """
    name: str = struct.field(pytree_node=False)
    canonical_link: str = struct.field(pytree_node=False, default="")
    attached_to: str = struct.field(pytree_node=False, default="")
    pose: Array = struct.field(default_factory=se3.identity)
    pose_relative_to: str = struct.field(pytree_node=False, default="")
    static: bool = struct.field(pytree_node=False, default=False)
    links: Tuple[Link, ...] = struct.field(default=())
    joints: Tuple[Joint, ...] = struct.field(default=())
    frames: Tuple[Frame, ...] = struct.field(default=())
    models: Tuple["Model", ...] = struct.field(default=())

    def find_link(self, name: str) -> Optional[Link]:
        return next((link for link in self.links if link.name == name), None)

    def find_joint(self, name: str) -> Optional[Joint]:
        return next((joint for joint in self.joints if joint.name == name), None)

    def find_frame(self, name: str) -> Optional[Frame]:
        return next((frame for frame in self.frames if frame.name == name), None)

    def find_model(self, name: str) -> Optional["Model"]:
        return next((model for model in self.models if model.name == name), None)


@struct.dataclass
class World:
    """A world holding models, explicit frames and lights."""
    name: str = struct.field(pytree_node=False)
    models: Tuple[Model, ...] = struct.field(default=())
    frames: Tuple[Frame, ...] = struct.field(default=())
    lights: Tuple[Light, ...] = struct.field(default=())

    def find_model(self, name: str) -> Optional[Model]:
        return next((model for model in self.models if model.name == name), None)

    def find_frame(self, name: str) -> Optional[Frame]:
        return next((frame for frame in self.frames if frame.name == name), None)


@struct.dataclass
class Root:
    """Top of a parsed document."""
    version: str = struct.field(pytree_node=False, default="")
    worlds: Tuple[World, ...] = struct.field(default=())
    models: Tuple[Model, ...] = struct.field(default=())
    lights: Tuple[Light, ...] = struct.field(default=())
