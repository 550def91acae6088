"""Depth-first walker over a bundle tree.

Directories are traversed with an explicit stack of entry iterators, so
a subdirectory is fully enumerated before the siblings that follow it,
without recursion. Symlinks are followed; paths handed back stay logical
(as reached from the root) so they can be re-rooted onto the other tree.
"""

import os
import stat
from collections.abc import Iterator
from pathlib import Path

from fatbundle.discovery.models import ArtifactCandidate, EntryKind
from fatbundle.errors import DiscoveryError
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)


def _list_dir(directory: Path) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        raise DiscoveryError(directory, f"Cannot read directory ({e.strerror or e})") from e
    return iter(entries)


def _entry_kind(mode: int, symlink: bool) -> EntryKind:
    if stat.S_ISDIR(mode):
        return EntryKind.SYMLINK_DIR if symlink else EntryKind.DIRECTORY
    if symlink:
        return EntryKind.SYMLINK_FILE
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    return EntryKind.OTHER


def walk_tree(
    root: Path | str,
    base: Path | str | None = None,
    *,
    follow_symlinks: bool = True,
    guard_cycles: bool = True,
) -> Iterator[ArtifactCandidate]:
    """Yield every non-directory entry under ``root``.

    Args:
        root: Directory to walk.
        base: Path relative paths are computed against (defaults to root).
        follow_symlinks: Resolve symlinks; when False they are skipped.
        guard_cycles: Traverse each real directory, and yield each real
            file, at most once. Without it a directory symlink cycle
            never terminates.

    Raises:
        DiscoveryError: A directory cannot be read or a symlink is broken.
    """
    root = Path(os.path.abspath(root))
    base = Path(os.path.abspath(base)) if base is not None else root

    root_real = Path(os.path.realpath(root))
    visited_dirs: set[Path] = {root_real}
    visited_files: set[Path] = set()

    stack: list[tuple[Path, Path, Iterator[os.DirEntry]]] = [
        (root, root_real, _list_dir(root))
    ]

    while stack:
        directory, real_directory, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        path = directory / entry.name
        symlink = entry.is_symlink()

        if symlink:
            if not follow_symlinks:
                logger.debug(f"Skipping symlink: {path}")
                continue
            try:
                mode = os.stat(path).st_mode
            except OSError as e:
                raise DiscoveryError(path, f"Cannot resolve symlink ({e.strerror or e})") from e
            real_path = Path(os.path.realpath(path))
            logger.debug(f"Symlink found: {path} -> {real_path}")
        else:
            try:
                mode = entry.stat(follow_symlinks=False).st_mode
            except OSError as e:
                raise DiscoveryError(path, f"Cannot stat ({e.strerror or e})") from e
            real_path = real_directory / entry.name

        kind = _entry_kind(mode, symlink)

        if kind in (EntryKind.DIRECTORY, EntryKind.SYMLINK_DIR):
            if guard_cycles:
                if real_path in visited_dirs:
                    logger.debug(f"Already traversed: {path} ({real_path})")
                    continue
                visited_dirs.add(real_path)
            stack.append((path, real_path, _list_dir(path)))
            continue

        if guard_cycles:
            if real_path in visited_files:
                logger.debug(f"Already seen: {path} ({real_path})")
                continue
            visited_files.add(real_path)

        yield ArtifactCandidate(
            path=path,
            real_path=real_path,
            relative_path=Path(os.path.relpath(path, base)),
            mode=mode,
            kind=kind,
        )
