"""Exception hierarchy for fatbundle.

Discovery errors are fatal for a run, tool errors are reported per
artifact, signing errors never roll back fusion.
"""

from pathlib import Path


class FatBundleError(Exception):
    """Base exception for all fatbundle errors."""


class ConfigurationError(FatBundleError):
    """Raised when required paths or settings are missing or invalid."""


class DiscoveryError(FatBundleError):
    """Raised when the primary tree cannot be fully traversed."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {path}")


class ToolError(FatBundleError):
    """Raised when an external architecture tool fails."""

    def __init__(self, message: str, path: Path | str | None = None, stderr: str = "") -> None:
        self.path = Path(path) if path is not None else None
        self.stderr = stderr.strip()
        detail = f"{message}: {path}" if path is not None else message
        if self.stderr:
            detail = f"{detail} ({self.stderr})"
        super().__init__(detail)


class ToolNotFoundError(ToolError):
    """Raised when the tool executable is not on PATH."""


class InspectionError(ToolError):
    """Raised when the architecture of a file cannot be determined."""


class MergeError(ToolError):
    """Raised when two artifacts cannot be fused."""


class SigningError(FatBundleError):
    """Raised when the bundle cannot be located or signed."""
