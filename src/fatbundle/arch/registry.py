"""Architecture tool registry - maps backend names to tools."""

from fatbundle.arch.base import ArchitectureTool
from fatbundle.arch.lipo import LipoTool
from fatbundle.errors import ConfigurationError

_tools: dict[str, type[ArchitectureTool]] = {
    "lipo": LipoTool,
}


def register_tool(name: str, tool_class: type[ArchitectureTool]) -> None:
    """Register an architecture tool backend."""
    _tools[name] = tool_class


def list_tools() -> list[str]:
    """List registered backend names."""
    return list(_tools.keys())


def get_architecture_tool(name: str = "lipo", **kwargs) -> ArchitectureTool:
    """Instantiate the backend registered under ``name``."""
    tool_class = _tools.get(name)
    if tool_class is None:
        raise ConfigurationError(
            f"Unknown architecture tool '{name}' (available: {', '.join(list_tools())})"
        )
    return tool_class(**kwargs)
