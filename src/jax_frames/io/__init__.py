"""I/O utilities for loading scene descriptions.

This module provides functions for parsing SDF documents into the immutable
entity tree consumed by the frame graphs.
"""

from .sdf_parser import load_sdf, load_sdf_string

__all__ = ["load_sdf", "load_sdf_string"]
