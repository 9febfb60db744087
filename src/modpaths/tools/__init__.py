"""Named index operations shared by the front ends."""

from .index_tools import IndexTools, ToolError

__all__ = ["IndexTools", "ToolError"]
