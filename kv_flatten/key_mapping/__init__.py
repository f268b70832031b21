"""Key mapping and nested reconstruction utilities."""

from .mapper import KeyMapper, Path, PathSegment
from .nested import iter_leaves, reconstruct_nested


__all__ = ["KeyMapper", "Path", "PathSegment", "iter_leaves", "reconstruct_nested"]
