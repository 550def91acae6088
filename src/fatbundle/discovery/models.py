"""Data types shared by the walker, classifier and pairing collector."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class EntryKind(str, Enum):
    """Type tag of a filesystem entry seen during traversal."""
    FILE = "file"
    SYMLINK_FILE = "symlink_file"
    DIRECTORY = "directory"
    SYMLINK_DIR = "symlink_dir"
    OTHER = "other"


@dataclass(frozen=True)
class ArtifactCandidate:
    """A non-directory entry found under the primary tree."""
    path: Path  # Logical path, as reached from the root
    real_path: Path  # Fully resolved target
    relative_path: Path  # Relative to the walk base, logical
    mode: int  # st_mode of the resolved target
    kind: EntryKind


@dataclass
class ClassificationVerdict:
    """Outcome of classifying a candidate."""
    accepted: bool
    reason: str
    architectures: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.accepted


@dataclass(frozen=True)
class ArtifactPair:
    """One unit of fusion work."""
    primary_path: Path
    secondary_path: Path
    relative_path: Path

    def to_dict(self) -> dict:
        return {
            "primary": str(self.primary_path),
            "secondary": str(self.secondary_path),
            "relative": str(self.relative_path),
        }
