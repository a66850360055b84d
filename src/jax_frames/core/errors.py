"""Error values returned by loaders, graph builders and resolvers.

Failures in this library are data, not exceptions: every operation that can
fail returns a list of :class:`Error` next to its result, and an empty list
means success.
"""

import enum
from dataclasses import dataclass
from typing import List


class ErrorCode(enum.Enum):
    """Kinds of failure reported by jax_frames."""

    NONE = "none"
    FILE_READ = "file_read"
    ELEMENT_INCORRECT_TYPE = "element_incorrect_type"
    ELEMENT_MISSING = "element_missing"
    ATTRIBUTE_MISSING = "attribute_missing"
    ATTRIBUTE_INVALID = "attribute_invalid"
    DUPLICATE_NAME = "duplicate_name"
    # A reference could not be resolved, or the attached-to graph is malformed.
    FRAME_ATTACHED_TO_INVALID = "frame_attached_to_invalid"
    FRAME_ATTACHED_TO_GRAPH_ERROR = "frame_attached_to_graph_error"
    # Same for the relative-to graph.
    POSE_RELATIVE_TO_INVALID = "pose_relative_to_invalid"
    POSE_RELATIVE_TO_GRAPH_ERROR = "pose_relative_to_graph_error"


@dataclass(frozen=True)
class Error:
    """A single reported failure.

    Attributes:
        code: Kind of failure.
        message: Human-readable description naming the offending entity.
    """
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"Error Code {self.code.name}: Msg: {self.message}"


Errors = List[Error]
