"""Copy named files back from the secondary tree into the primary tree.

Some resources are architecture specific data rather than binaries
(e.g. the x86_64 V8 snapshot), so the fused bundle needs the secondary
build's copy next to its own.
"""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CopyBackResult:
    """Result of copying one filename back."""
    filename: str
    copied: list[tuple[Path, Path]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "copied": [{"source": str(s), "destination": str(d)} for s, d in self.copied],
            "errors": self.errors,
        }


def copy_named_file(
    source_root: Path,
    destination_root: Path,
    filename: str,
    dry_run: bool = False,
) -> CopyBackResult:
    """Copy every ``filename`` under ``source_root`` to the mirrored destination.

    Destination directories are never created; a copy into a missing
    directory is recorded as an error.
    """
    result = CopyBackResult(filename=filename)
    source_root = Path(source_root)
    destination_root = Path(destination_root)

    def on_error(error: OSError) -> None:
        result.errors.append(f"Cannot read {error.filename}: {error.strerror}")

    for dirpath, _dirnames, filenames in os.walk(source_root, onerror=on_error):
        if filename not in filenames:
            continue

        source = Path(dirpath) / filename
        if not source.is_file():
            continue
        destination = destination_root / source.relative_to(source_root)

        if not dry_run:
            try:
                shutil.copyfile(source, destination)
            except OSError as e:
                logger.error(f"Error copying {source}: {e}")
                result.errors.append(f"{source}: {e}")
                continue

        logger.info(f"Copied: {source} to {destination}")
        result.copied.append((source, destination))

    return result
