"""Core data structures for jax_frames.

This module provides the error values, the directed graph substrate and the
immutable document entities the frame graphs are built from.
"""

from .entities import Frame, Joint, Light, Link, Model, Root, World
from .errors import Error, ErrorCode, Errors
from .graph import Edge, Graph, Vertex

__all__ = [
    "Edge",
    "Error",
    "ErrorCode",
    "Errors",
    "Frame",
    "Graph",
    "Joint",
    "Light",
    "Link",
    "Model",
    "Root",
    "Vertex",
    "World",
]
