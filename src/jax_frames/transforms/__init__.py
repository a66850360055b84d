"""
Pose math for frame resolution.

This module provides pure JAX implementations of:
- SO(3) rotations and their authored parameterizations (so3 module)
- SE(3) homogeneous poses (se3 module)
"""

from . import so3
from . import se3

__all__ = [
    "so3",
    "se3",
]
