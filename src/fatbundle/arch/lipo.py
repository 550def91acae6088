"""lipo backend: shells out to the Xcode lipo tool."""

import shlex
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from fatbundle.arch.base import ArchitectureInfo, ArchitectureTool
from fatbundle.errors import InspectionError, MergeError, ToolNotFoundError
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)

NON_FAT_MARKER = "Non-fat file"


def parse_lipo_info(path: Path, output: str) -> ArchitectureInfo:
    """Parse the output of ``lipo -info``.

    Output format: "Architectures in the fat file: /path are: x86_64 arm64"
    or: "Non-fat file: /path is architecture: x86_64"
    """
    output = output.strip()
    architectures: list[str] = []
    if "are:" in output:
        architectures = output.split("are:")[-1].split()
    elif "is architecture:" in output:
        architectures = output.split("is architecture:")[-1].split()

    return ArchitectureInfo(
        path=path,
        architectures=architectures,
        is_fat=NON_FAT_MARKER not in output,
    )


class LipoTool(ArchitectureTool):
    """Inspect and merge Mach-O files with lipo."""

    name = "lipo"

    def __init__(self, executable: str = "lipo") -> None:
        self.executable = executable

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        cmd = [self.executable, *args]
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            return subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ToolNotFoundError(f"{self.executable} not found on PATH") from e

    def inspect(self, path: Path) -> ArchitectureInfo:
        result = self._run(["-info", str(path)])
        if result.returncode != 0:
            raise InspectionError("Cannot inspect architectures", path, result.stderr)
        return parse_lipo_info(Path(path), result.stdout)

    def merge_command(self, inputs: Sequence[Path], output: Path) -> list[str]:
        return [self.executable, "-create", *(str(p) for p in inputs), "-output", str(output)]

    def merge(self, inputs: Sequence[Path], output: Path) -> None:
        cmd = self.merge_command(inputs, output)
        result = self._run(cmd[1:])
        if result.returncode != 0:
            raise MergeError("lipo -create failed", output, result.stderr)
        if result.stderr.strip():
            logger.warning(f"lipo: {result.stderr.strip()}")

    def describe_merge(self, inputs: Sequence[Path], output: Path) -> str:
        return shlex.join(self.merge_command(inputs, output))

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None
