"""Frame semantics: kinematic, attached-to and relative-to graphs.

This module answers two questions about every named frame of a model or
world: which rigid body is it attached to, and what is its pose relative to
another frame. Both are answered by building a directed graph over the
scope's frames once, validating it, and then walking it per query.

All functions report failures as a list of :class:`~jax_frames.core.Error`
returned next to their result. Builders and validators collect every
problem they find; resolvers stop at the first one.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

import jax

from .config import DEFAULT_CONFIG, FrameSemanticsConfig
from .core import Edge, Error, ErrorCode, Errors, Graph, Model, Vertex, World
from .transforms import se3

logger = logging.getLogger(__name__)

Array = jax.Array


class FrameType(enum.Enum):
    """Kind of entity a frame-graph vertex stands for."""
    WORLD = "world"
    MODEL = "model"
    LINK = "link"
    JOINT = "joint"
    FRAME = "frame"


# Vertices a frame may ultimately be attached to.
_BODY_TYPES = (FrameType.LINK, FrameType.WORLD)


@dataclass
class KinematicGraph:
    """Links as vertices (payload: link pose), joints as parent -> child edges.

    Attributes:
        graph: The underlying directed graph.
        map: Link name to vertex id.
        joint_map: Joint name to edge id.
    """
    graph: Graph = field(default_factory=Graph)
    map: Dict[str, int] = field(default_factory=dict)
    joint_map: Dict[str, int] = field(default_factory=dict)


@dataclass
class FrameAttachedToGraph:
    """Frames as vertices, "is attached to" relations as edges.

    Attributes:
        graph: The underlying directed graph; vertex payload is a FrameType.
        map: Frame name to vertex id (first vertex registered for a name).
        scope_name: Name of the scope's own frame (``__model__`` or ``world``).
    """
    graph: Graph = field(default_factory=Graph)
    map: Dict[str, int] = field(default_factory=dict)
    scope_name: str = ""


@dataclass
class PoseRelativeToGraph:
    """Frames as vertices, "pose is relative to" relations as edges.

    Edge payloads are the authored (4, 4) poses.

    Attributes:
        graph: The underlying directed graph; vertex payload is a FrameType.
        map: Frame name to vertex id (first vertex registered for a name).
        source_name: Name of the root frame every walk must end on.
    """
    graph: Graph = field(default_factory=Graph)
    map: Dict[str, int] = field(default_factory=dict)
    source_name: str = ""


@dataclass(frozen=True)
class _Scope:
    """Name resolution context of one model or world."""
    frame_name: str
    prefix: str
    is_model: bool
    label: str

    def qualify(self, ref: str, config: FrameSemanticsConfig) -> str:
        if self.is_model and ref == config.model_frame_name:
            return self.frame_name
        return self.prefix + ref

    def nested(self, model_name: str, config: FrameSemanticsConfig) -> "_Scope":
        frame_name = self.prefix + model_name
        return _Scope(frame_name, frame_name + config.scope_delimiter, True, frame_name)

    def describe(self) -> str:
        kind = "model" if self.is_model else "world"
        return f"{kind} with name[{self.label}]"


# A scope member: (vertex name, kind, entity, scope the entity is declared in)
_Member = Tuple[str, FrameType, object, _Scope]


def _walk_model(model: Model, scope: _Scope, config: FrameSemanticsConfig) -> Iterator[_Member]:
    for link in model.links:
        yield scope.prefix + link.name, FrameType.LINK, link, scope
    for joint in model.joints:
        yield scope.prefix + joint.name, FrameType.JOINT, joint, scope
    for frame in model.frames:
        yield scope.prefix + frame.name, FrameType.FRAME, frame, scope
    for nested in model.models:
        nested_scope = scope.nested(nested.name, config)
        yield nested_scope.frame_name, FrameType.MODEL, nested, scope
        yield from _walk_model(nested, nested_scope, config)


def _walk_world(world: World, scope: _Scope, config: FrameSemanticsConfig) -> Iterator[_Member]:
    for frame in world.frames:
        yield scope.prefix + frame.name, FrameType.FRAME, frame, scope
    for model in world.models:
        model_scope = scope.nested(model.name, config)
        yield model_scope.frame_name, FrameType.MODEL, model, scope
        yield from _walk_model(model, model_scope, config)


def _root_scope(entity, config: FrameSemanticsConfig) -> Optional[Tuple[_Scope, FrameType, List[_Member]]]:
    """Scope, sentinel type and members of a model or world; None otherwise."""
    if isinstance(entity, Model):
        scope = _Scope(config.model_frame_name, "", True, entity.name)
        return scope, FrameType.MODEL, list(_walk_model(entity, scope, config))
    if isinstance(entity, World):
        scope = _Scope(config.world_frame_name, "", False, entity.name)
        return scope, FrameType.WORLD, list(_walk_world(entity, scope, config))
    return None


def _add_vertex(graph: Graph, name_map: Dict[str, int], name: str, data) -> Vertex:
    vertex = graph.add_vertex(name, data)
    name_map.setdefault(name, vertex.id)
    return vertex


def _unique_vertex(graph: Graph, name: str) -> Optional[Vertex]:
    """The vertex called ``name``, or None if there are zero or several."""
    matches = graph.vertices_named(name)
    return matches[0] if len(matches) == 1 else None


def _reference(ref: str, default: str, owner: _Scope, config: FrameSemanticsConfig) -> str:
    return owner.qualify(ref, config) if ref else default


class _WalkStatus(enum.Enum):
    SINK = "reached a vertex without outgoing edges"
    BRANCH = "reached a vertex with multiple outgoing edges"
    CYCLE = "detected a cycle"
    EXCEEDED = "exceeded the maximum number of steps"


def _walk_to_sink(graph: Graph, vertex_id: int) -> Tuple[Vertex, List[Edge], _WalkStatus]:
    """Follow outgoing edges from ``vertex_id`` as far as they are unique.

    The walk takes at most ``len(graph)`` steps.

    Returns:
        The last vertex reached, the edges traversed in order, and why the
        walk stopped.
    """
    edges: List[Edge] = []
    visited = {vertex_id}
    current = vertex_id
    for _ in range(len(graph)):
        out_edges = graph.out_edges(current)
        if not out_edges:
            return graph.vertex(current), edges, _WalkStatus.SINK
        if len(out_edges) > 1:
            return graph.vertex(current), edges, _WalkStatus.BRANCH
        edge = out_edges[0]
        edges.append(edge)
        current = edge.head
        if current in visited:
            return graph.vertex(current), edges, _WalkStatus.CYCLE
        visited.add(current)
    return graph.vertex(current), edges, _WalkStatus.EXCEEDED


###############################################################################
# Kinematic graph


def build_kinematic_graph(
    model: Model, config: FrameSemanticsConfig = DEFAULT_CONFIG
) -> Tuple[KinematicGraph, Errors]:
    """Build the graph of a model's links connected by its joints.

    Joints whose parent is the world frame anchor the model and contribute no
    edge. A joint naming a missing or duplicated link is reported and skipped.

    Args:
        model: Model whose links and joints are read.
        config: Naming configuration.

    Returns:
        The graph and the list of errors found while building it.
    """
    out = KinematicGraph()
    errors: Errors = []

    if not isinstance(model, Model):
        errors.append(Error(
            ErrorCode.ELEMENT_INCORRECT_TYPE,
            "Attempting to build a KinematicGraph from an entity that is not a <model>."))
        return out, errors

    for link in model.links:
        if link.name in out.map:
            errors.append(Error(
                ErrorCode.DUPLICATE_NAME,
                f"Link with name[{link.name}] appears more than once in model with name[{model.name}]."))
        _add_vertex(out.graph, out.map, link.name, link.pose)

    for joint in model.joints:
        if joint.parent_link_name == config.world_frame_name:
            logger.debug("Joint[%s] attaches model[%s] to the world", joint.name, model.name)
            continue

        ends = {}
        for role, link_name in (("parent", joint.parent_link_name), ("child", joint.child_link_name)):
            vertex = _unique_vertex(out.graph, link_name)
            if vertex is not None:
                ends[role] = vertex.id
            elif link_name in out.map:
                errors.append(Error(
                    ErrorCode.ATTRIBUTE_INVALID,
                    f"Joint with name[{joint.name}] has {role} link name[{link_name}] "
                    f"that matches more than one link in model with name[{model.name}]."))
            else:
                errors.append(Error(
                    ErrorCode.ELEMENT_MISSING,
                    f"Joint with name[{joint.name}] has {role} link name[{link_name}] "
                    f"that is not a link in model with name[{model.name}]."))
        if len(ends) == 2:
            edge = out.graph.add_edge(ends["parent"], ends["child"], joint.pose)
            out.joint_map[joint.name] = edge.id

    logger.debug("KinematicGraph for model[%s]: %d vertices, %d edges, %d errors",
                 model.name, len(out.graph), len(out.graph.edges()), len(errors))
    return out, errors


def find_root_link(graph: KinematicGraph) -> Tuple[str, Errors]:
    """Find the single link that is not the child of any joint.

    Returns:
        The root link name (empty on failure) and any errors.
    """
    roots = [v.name for v in graph.graph.vertices() if graph.graph.in_degree(v.id) == 0]
    if len(roots) == 1:
        return roots[0], []
    if not roots:
        return "", [Error(
            ErrorCode.ELEMENT_MISSING,
            "KinematicGraph has no root link: every link is the child of a joint.")]
    return "", [Error(
        ErrorCode.ATTRIBUTE_INVALID,
        f"KinematicGraph has multiple root links: {roots}.")]


###############################################################################
# Attached-to graph


def _attached_to_target(
    frame_type: FrameType, entity, owner: _Scope, config: FrameSemanticsConfig
) -> Tuple[str, str, str]:
    """(attribute label, raw reference, target vertex name) for a member."""
    if frame_type is FrameType.JOINT:
        return "child", entity.child_link_name, owner.qualify(entity.child_link_name, config)
    return ("attached_to", entity.attached_to,
            _reference(entity.attached_to, owner.frame_name, owner, config))


def build_frame_attached_to_graph(
    entity: Union[Model, World], config: FrameSemanticsConfig = DEFAULT_CONFIG
) -> Tuple[FrameAttachedToGraph, Errors]:
    """Build the attached-to graph of a model or world, nested models included.

    Edges point from each frame to the frame it moves with:

    * the model frame to its canonical link (the first link unless set);
    * a joint to its child link;
    * an explicit frame to ``attached_to``, else to its scope's frame;
    * a nested model to ``attached_to``, else to its parent scope's frame.

    Links and the world frame have no outgoing edges.

    Joints follow SDFormat rather than attaching to the enclosing scope
    frame: a joint always moves with its child link.

    Args:
        entity: Model or world to build from.
        config: Naming configuration.

    Returns:
        The graph and the list of errors found while building it.
    """
    out = FrameAttachedToGraph()
    errors: Errors = []

    resolved = _root_scope(entity, config)
    if resolved is None:
        errors.append(Error(
            ErrorCode.ELEMENT_INCORRECT_TYPE,
            "Attempting to build a FrameAttachedToGraph from an entity that is not a <model> or <world>."))
        return out, errors
    scope, scope_type, members = resolved

    out.scope_name = scope.frame_name
    scope_vertex = _add_vertex(out.graph, out.map, scope.frame_name, scope_type)
    placed = [(_add_vertex(out.graph, out.map, name, frame_type), frame_type, item, owner)
              for name, frame_type, item, owner in members]

    if scope_type is FrameType.MODEL:
        if not entity.links:
            errors.append(Error(
                ErrorCode.ELEMENT_MISSING,
                f"A model must have at least one link, but {scope.describe()} has none."))
        else:
            canonical = entity.canonical_link or entity.links[0].name
            target = _unique_vertex(out.graph, canonical)
            if target is None or target.data is not FrameType.LINK:
                errors.append(Error(
                    ErrorCode.FRAME_ATTACHED_TO_INVALID,
                    f"canonical_link[{canonical}] does not match a unique link in {scope.describe()}."))
            else:
                out.graph.add_edge(scope_vertex.id, target.id)

    for vertex, frame_type, item, owner in placed:
        if frame_type is FrameType.LINK:
            continue
        attribute, ref, target_name = _attached_to_target(frame_type, item, owner, config)
        target = _unique_vertex(out.graph, target_name)
        if target is None:
            errors.append(Error(
                ErrorCode.FRAME_ATTACHED_TO_INVALID,
                f"{attribute}[{ref or target_name}] of {frame_type.value} with name[{vertex.name}] "
                f"does not match a unique link, joint, frame or model name in {owner.describe()}."))
            continue
        out.graph.add_edge(vertex.id, target.id)

    logger.debug("FrameAttachedToGraph for %s: %d vertices, %d edges, %d errors",
                 scope.describe(), len(out.graph), len(out.graph.edges()), len(errors))
    return out, errors


def validate_frame_attached_to_graph(graph: FrameAttachedToGraph) -> Errors:
    """Check the structure of an attached-to graph.

    Every violation is reported: a missing scope frame, links or the world
    with outgoing edges, frames with several outgoing edges, cycles, and
    walks that end anywhere but on a link or the world.
    """
    errors: Errors = []
    g = graph.graph

    scope_vertices = g.vertices_named(graph.scope_name)
    if len(scope_vertices) != 1:
        errors.append(Error(
            ErrorCode.FRAME_ATTACHED_TO_GRAPH_ERROR,
            f"FrameAttachedToGraph error: scope frame[{graph.scope_name}] must appear exactly once, "
            f"found {len(scope_vertices)}."))
        return errors
    if scope_vertices[0].data not in (FrameType.MODEL, FrameType.WORLD):
        errors.append(Error(
            ErrorCode.FRAME_ATTACHED_TO_GRAPH_ERROR,
            f"FrameAttachedToGraph error: scope frame[{graph.scope_name}] is a "
            f"{scope_vertices[0].data}, not a model or world."))
        return errors

    for vertex in g.vertices():
        degree = g.out_degree(vertex.id)
        if vertex.data in _BODY_TYPES and degree > 0:
            errors.append(Error(
                ErrorCode.FRAME_ATTACHED_TO_INVALID,
                f"FrameAttachedToGraph error: {vertex.data.value} vertex with name[{vertex.name}] "
                f"should have no outgoing edges, found {degree}."))
        elif degree > 1:
            errors.append(Error(
                ErrorCode.FRAME_ATTACHED_TO_INVALID,
                f"FrameAttachedToGraph error: vertex with name[{vertex.name}] is attached to "
                f"{degree} frames, it must be attached to exactly one."))

    for vertex in g.vertices():
        sink, _, status = _walk_to_sink(g, vertex.id)
        if status is _WalkStatus.SINK:
            if sink.data not in _BODY_TYPES:
                errors.append(Error(
                    ErrorCode.FRAME_ATTACHED_TO_INVALID,
                    f"FrameAttachedToGraph error: vertex with name[{vertex.name}] is attached to "
                    f"{sink.data.value} with name[{sink.name}], which is not a link or the world."))
        elif status is _WalkStatus.BRANCH:
            # Already reported by the out-degree check above.
            continue
        else:
            errors.append(Error(
                ErrorCode.FRAME_ATTACHED_TO_INVALID,
                f"FrameAttachedToGraph error: following attached_to from vertex with "
                f"name[{vertex.name}] {status.value}."))

    logger.debug("Validated FrameAttachedToGraph[%s]: %d errors", graph.scope_name, len(errors))
    return errors


def resolve_frame_attached_to_body(graph: FrameAttachedToGraph, frame_name: str) -> Tuple[str, Errors]:
    """Name of the link (or world) that ``frame_name`` is rigidly attached to.

    Args:
        graph: A validated attached-to graph.
        frame_name: Frame to resolve.

    Returns:
        The body name (empty on failure) and the first error found, if any.
    """
    vertex = _unique_vertex(graph.graph, frame_name)
    if vertex is None:
        return "", [Error(
            ErrorCode.FRAME_ATTACHED_TO_INVALID,
            f"FrameAttachedToGraph unable to find unique frame with name [{frame_name}] in graph.")]

    sink, _, status = _walk_to_sink(graph.graph, vertex.id)
    if status is not _WalkStatus.SINK:
        return "", [Error(
            ErrorCode.FRAME_ATTACHED_TO_GRAPH_ERROR,
            f"FrameAttachedToGraph error: walk from frame with name [{frame_name}] {status.value}.")]
    if sink.data not in _BODY_TYPES:
        return "", [Error(
            ErrorCode.FRAME_ATTACHED_TO_INVALID,
            f"Frame with name [{frame_name}] is attached to {sink.data.value} with name "
            f"[{sink.name}], which is not a link or the world.")]
    return sink.name, []


###############################################################################
# Relative-to graph


def _relative_to_target(
    frame_type: FrameType, entity, owner: _Scope, config: FrameSemanticsConfig
) -> Tuple[str, str]:
    """(raw reference, target vertex name) for a member's pose."""
    ref = entity.pose_relative_to
    if frame_type is FrameType.JOINT:
        default = owner.qualify(entity.child_link_name, config)
    elif frame_type is FrameType.FRAME:
        default = _reference(entity.attached_to, owner.frame_name, owner, config)
    else:
        default = owner.frame_name
    return ref, _reference(ref, default, owner, config)


def build_pose_relative_to_graph(
    entity: Union[Model, World], config: FrameSemanticsConfig = DEFAULT_CONFIG
) -> Tuple[PoseRelativeToGraph, Errors]:
    """Build the relative-to graph of a model or world, nested models included.

    Each frame gets one edge, weighted by its authored pose, toward the
    frame named by its ``relative_to`` reference. Without a reference:

    * links and nested models are relative to their scope's frame;
    * joints are relative to their child link;
    * explicit frames are relative to the frame they are attached to.

    The scope's own frame (``__model__`` or ``world``) is the root and has
    no outgoing edge.

    Only links and models fall back to the enclosing scope frame. The joint
    and frame defaults follow SDFormat, so an unreferenced joint pose is read
    in its child link and an unreferenced frame pose in its ``attached_to``.

    Args:
        entity: Model or world to build from.
        config: Naming configuration.

    Returns:
        The graph and the list of errors found while building it.
    """
    out = PoseRelativeToGraph()
    errors: Errors = []

    resolved = _root_scope(entity, config)
    if resolved is None:
        errors.append(Error(
            ErrorCode.ELEMENT_INCORRECT_TYPE,
            "Attempting to build a PoseRelativeToGraph from an entity that is not a <model> or <world>."))
        return out, errors
    scope, scope_type, members = resolved

    out.source_name = scope.frame_name
    _add_vertex(out.graph, out.map, scope.frame_name, scope_type)
    placed = [(_add_vertex(out.graph, out.map, name, frame_type), frame_type, item, owner)
              for name, frame_type, item, owner in members]

    for vertex, frame_type, item, owner in placed:
        ref, target_name = _relative_to_target(frame_type, item, owner, config)
        target = _unique_vertex(out.graph, target_name)
        if target is None:
            errors.append(Error(
                ErrorCode.POSE_RELATIVE_TO_INVALID,
                f"relative_to[{ref or target_name}] of {frame_type.value} with name[{vertex.name}] "
                f"does not match a unique link, joint, frame or model name in {owner.describe()}."))
            continue
        out.graph.add_edge(vertex.id, target.id, item.pose)

    logger.debug("PoseRelativeToGraph for %s: %d vertices, %d edges, %d errors",
                 scope.describe(), len(out.graph), len(out.graph.edges()), len(errors))
    return out, errors


def validate_pose_relative_to_graph(graph: PoseRelativeToGraph) -> Errors:
    """Check the structure of a relative-to graph.

    The root frame must exist once and have no outgoing edge, every other
    frame exactly one, and every walk must reach the root without a cycle.
    """
    errors: Errors = []
    g = graph.graph

    sources = g.vertices_named(graph.source_name)
    if len(sources) != 1:
        errors.append(Error(
            ErrorCode.POSE_RELATIVE_TO_GRAPH_ERROR,
            f"PoseRelativeToGraph error: root frame[{graph.source_name}] must appear exactly once, "
            f"found {len(sources)}."))
        return errors
    source = sources[0]

    for vertex in g.vertices():
        degree = g.out_degree(vertex.id)
        if vertex.id == source.id:
            if degree != 0:
                errors.append(Error(
                    ErrorCode.POSE_RELATIVE_TO_INVALID,
                    f"PoseRelativeToGraph error: root frame with name[{vertex.name}] should have "
                    f"no outgoing edges, found {degree}."))
        elif degree == 0:
            errors.append(Error(
                ErrorCode.POSE_RELATIVE_TO_INVALID,
                f"PoseRelativeToGraph error: vertex with name[{vertex.name}] has no relative_to "
                f"frame."))
        elif degree > 1:
            errors.append(Error(
                ErrorCode.POSE_RELATIVE_TO_INVALID,
                f"PoseRelativeToGraph error: vertex with name[{vertex.name}] is relative to "
                f"{degree} frames, it must be relative to exactly one."))

    for vertex in g.vertices():
        sink, _, status = _walk_to_sink(g, vertex.id)
        if status is _WalkStatus.SINK:
            if sink.id != source.id and sink.id != vertex.id:
                errors.append(Error(
                    ErrorCode.POSE_RELATIVE_TO_INVALID,
                    f"PoseRelativeToGraph error: following relative_to from vertex with "
                    f"name[{vertex.name}] ends at [{sink.name}] instead of root frame "
                    f"[{graph.source_name}]."))
        elif status is not _WalkStatus.BRANCH:
            errors.append(Error(
                ErrorCode.POSE_RELATIVE_TO_INVALID,
                f"PoseRelativeToGraph error: following relative_to from vertex with "
                f"name[{vertex.name}] {status.value}."))

    logger.debug("Validated PoseRelativeToGraph[%s]: %d errors", graph.source_name, len(errors))
    return errors


def resolve_pose_relative_to_root(graph: PoseRelativeToGraph, frame_name: str) -> Tuple[Array, Errors]:
    """Pose of ``frame_name`` in the graph's root frame.

    Walks from the frame toward the root, left-multiplying each traversed
    edge pose onto the accumulated result.

    Args:
        graph: A validated relative-to graph.
        frame_name: Frame to resolve.

    Returns:
        The (4, 4) pose (identity on failure) and the first error found, if any.
    """
    vertex = _unique_vertex(graph.graph, frame_name)
    if vertex is None:
        return se3.identity(), [Error(
            ErrorCode.POSE_RELATIVE_TO_INVALID,
            f"PoseRelativeToGraph unable to find unique frame with name [{frame_name}] in graph.")]

    sink, edges, status = _walk_to_sink(graph.graph, vertex.id)
    if status is not _WalkStatus.SINK:
        return se3.identity(), [Error(
            ErrorCode.POSE_RELATIVE_TO_GRAPH_ERROR,
            f"PoseRelativeToGraph error: walk from frame with name [{frame_name}] {status.value}.")]
    if sink.name != graph.source_name:
        return se3.identity(), [Error(
            ErrorCode.POSE_RELATIVE_TO_INVALID,
            f"PoseRelativeToGraph error: frame with name [{frame_name}] does not lead to root "
            f"frame [{graph.source_name}], it ends at [{sink.name}].")]

    pose = se3.identity()
    for edge in edges:
        pose = se3.multiply(edge.data, pose)
    return pose, []


def resolve_pose(graph: PoseRelativeToGraph, frame_name: str, relative_to: str) -> Tuple[Array, Errors]:
    """Pose of ``frame_name`` expressed in the frame ``relative_to``.

    Args:
        graph: A validated relative-to graph.
        frame_name: Frame whose pose is wanted.
        relative_to: Frame to express the pose in.

    Returns:
        The (4, 4) pose (identity on failure) and the first error found, if any.
    """
    pose, errors = resolve_pose_relative_to_root(graph, frame_name)
    if errors:
        return se3.identity(), errors

    reference, errors = resolve_pose_relative_to_root(graph, relative_to)
    if errors:
        return se3.identity(), errors

    return se3.multiply(se3.inverse(reference), pose), []
