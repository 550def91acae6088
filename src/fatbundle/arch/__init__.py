"""Architecture inspection and merge backends."""

from fatbundle.arch.base import ArchitectureInfo, ArchitectureTool
from fatbundle.arch.lipo import LipoTool
from fatbundle.arch.registry import get_architecture_tool, register_tool

__all__ = [
    "ArchitectureInfo",
    "ArchitectureTool",
    "LipoTool",
    "get_architecture_tool",
    "register_tool",
]
