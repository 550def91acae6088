"""Executable artifact classifier.

Decides whether a file is a binary worth fusing:

- regular file with an execute bit, a known helper name or a library suffix
- not a shell script, not a known single-architecture addon
- not already multi-architecture (checked with the architecture tool)
"""

import stat
from pathlib import Path

from fatbundle.arch.base import ArchitectureTool
from fatbundle.config import ClassifierConfig
from fatbundle.discovery.models import ClassificationVerdict
from fatbundle.errors import InspectionError
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)

EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

# Verdict reasons
NOT_A_FILE = "not-a-file"
NOT_EXECUTABLE = "not-executable"
SHELL_SCRIPT = "shell-script"
EXCLUDED = "excluded"
NOT_A_BINARY = "not-a-binary"
ALREADY_FAT = "already-fat"
NOT_FAT = "not-fat"


class Classifier:
    """Classify filesystem entries as mergeable binaries."""

    def __init__(
        self,
        tool: ArchitectureTool,
        rules: ClassifierConfig | None = None,
        strict: bool = False,
    ) -> None:
        self.tool = tool
        self.rules = rules or ClassifierConfig()
        self.strict = strict

    def _has_suffix(self, name: str, suffixes: list[str]) -> bool:
        return any(name.endswith(suffix) for suffix in suffixes)

    def is_candidate(self, path: Path, mode: int) -> ClassificationVerdict:
        """Apply the name/permission heuristic without inspecting the file."""
        if not stat.S_ISREG(mode):
            return ClassificationVerdict(False, NOT_A_FILE)

        name = Path(path).name
        executable = (
            bool(mode & EXECUTE_BITS)
            or name in self.rules.special_executables
            or self._has_suffix(name, self.rules.library_suffixes)
        )
        if not executable:
            return ClassificationVerdict(False, NOT_EXECUTABLE)

        if self._has_suffix(name, self.rules.script_suffixes):
            return ClassificationVerdict(False, SHELL_SCRIPT)

        if name in self.rules.excluded_names:
            return ClassificationVerdict(False, EXCLUDED)

        return ClassificationVerdict(True, NOT_FAT)

    def classify(self, path: Path, mode: int) -> ClassificationVerdict:
        """Classify a file, querying its architectures when it looks executable."""
        verdict = self.is_candidate(path, mode)
        if not verdict:
            return verdict

        try:
            info = self.tool.inspect(path)
        except InspectionError as e:
            if self.strict:
                raise
            logger.warning(f"Skipping {path}: {e}")
            return ClassificationVerdict(False, NOT_A_BINARY)

        if info.is_fat:
            logger.info(f"Already fat: {path}")
            return ClassificationVerdict(False, ALREADY_FAT, info.architectures)

        logger.info(f"Not fat: {path}")
        return ClassificationVerdict(True, NOT_FAT, info.architectures)
