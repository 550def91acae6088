"""Fusion executor - turns artifact pairs into multi-architecture binaries.

Pairs are processed one at a time: the merge rewrites the primary file
in place, so two merges against the same path must never overlap.
A failing pair is recorded and the next one is processed.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from fatbundle.arch.base import ArchitectureTool
from fatbundle.discovery.models import ArtifactPair
from fatbundle.errors import ToolError, ToolNotFoundError
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FusionFailure:
    """A pair that could not be fused."""
    pair: ArtifactPair
    message: str

    def to_dict(self) -> dict:
        return {**self.pair.to_dict(), "error": self.message}


@dataclass
class FusionReport:
    """Result of running the executor over a pair list."""

    timestamp: datetime = field(default_factory=datetime.now)
    dry_run: bool = False
    planned: list[str] = field(default_factory=list)
    fused: list[Path] = field(default_factory=list)
    failures: list[FusionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "dry_run": self.dry_run,
            "planned": self.planned,
            "fused": [str(p) for p in self.fused],
            "failures": [f.to_dict() for f in self.failures],
        }


class FusionExecutor:
    """Fuses each pair with the architecture tool."""

    def __init__(self, tool: ArchitectureTool, dry_run: bool = False, verify: bool = True):
        self.tool = tool
        self.dry_run = dry_run
        self.verify = verify

    def _output_path(self, pair: ArtifactPair) -> Path:
        # Write through symlinks so bundle links stay links
        return Path(os.path.realpath(pair.primary_path))

    def fuse(self, pair: ArtifactPair) -> None:
        """Fuse a single pair in place.

        Raises:
            ToolError: Counterpart missing, merge failed or verification failed.
        """
        if not pair.secondary_path.is_file():
            raise ToolError("Counterpart not found", pair.secondary_path)

        output = self._output_path(pair)
        self.tool.merge([pair.primary_path, pair.secondary_path], output)

        if self.verify:
            info = self.tool.inspect(output)
            if not info.is_fat:
                raise ToolError(
                    f"Output is still single-architecture ({', '.join(info.architectures)})",
                    output,
                )

    def run(self, pairs: list[ArtifactPair]) -> FusionReport:
        """Process every pair, in order.

        Raises:
            ToolNotFoundError: The tool disappeared; no further pair can succeed.
        """
        report = FusionReport(dry_run=self.dry_run)

        for pair in pairs:
            if self.dry_run:
                action = self.tool.describe_merge(
                    [pair.primary_path, pair.secondary_path], self._output_path(pair)
                )
                logger.info(f"Preview: {action}")
                report.planned.append(action)
                continue

            try:
                self.fuse(pair)
            except ToolNotFoundError:
                raise
            except ToolError as e:
                logger.error(f"Error: {e}")
                report.failures.append(FusionFailure(pair=pair, message=str(e)))
                continue

            logger.info(f"Fattened: {pair.primary_path}")
            report.fused.append(pair.primary_path)

        return report
