"""Base architecture tool interface.

The discovery and fusion code depends only on this contract:
inspect the architectures of a file, and merge several single
architecture files into one.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ArchitectureInfo:
    """Architecture composition of a single file."""
    path: Path
    architectures: list[str] = field(default_factory=list)
    is_fat: bool = False

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "architectures": self.architectures,
            "is_fat": self.is_fat,
        }


class ArchitectureTool(ABC):
    """Base class for architecture inspection/merge backends."""

    # Backend name
    name: str = "base"

    @abstractmethod
    def inspect(self, path: Path) -> ArchitectureInfo:
        """Report the architectures contained in a file.

        Raises:
            InspectionError: The file is not a binary the backend understands.
        """
        pass

    @abstractmethod
    def merge(self, inputs: Sequence[Path], output: Path) -> None:
        """Write a multi-architecture file built from the inputs.

        The output path may equal one of the inputs.

        Raises:
            MergeError: An input is missing, unreadable or incompatible.
        """
        pass

    def describe_merge(self, inputs: Sequence[Path], output: Path) -> str:
        """Human readable form of the merge, used by dry runs."""
        sources = " + ".join(str(p) for p in inputs)
        return f"{self.name}: {sources} -> {output}"

    def is_available(self) -> bool:
        """Check if the backend can run on this machine."""
        return True
