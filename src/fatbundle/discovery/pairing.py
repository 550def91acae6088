"""Pair mergeable binaries in the primary tree with their counterparts."""

import os
from collections import Counter
from pathlib import Path

from fatbundle.config import TraversalConfig
from fatbundle.discovery.classifier import ALREADY_FAT, Classifier
from fatbundle.discovery.models import ArtifactPair
from fatbundle.discovery.walker import walk_tree
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)


def map_path(primary_root: Path, secondary_root: Path, primary_path: Path) -> Path:
    """Re-root ``primary_path`` from the primary tree onto the secondary tree.

    Purely lexical: the counterpart is not required to exist.

    Raises:
        ValueError: ``primary_path`` is not under ``primary_root``.
    """
    primary_root = Path(os.path.abspath(primary_root))
    relative = Path(os.path.abspath(primary_path)).relative_to(primary_root)
    return Path(os.path.abspath(secondary_root)) / relative


class PairingCollector:
    """Walks the primary tree and builds the ordered list of pairs."""

    def __init__(
        self,
        primary_root: Path,
        secondary_root: Path,
        classifier: Classifier,
        traversal: TraversalConfig | None = None,
    ) -> None:
        self.primary_root = Path(os.path.abspath(primary_root))
        self.secondary_root = Path(os.path.abspath(secondary_root))
        self.classifier = classifier
        self.traversal = traversal or TraversalConfig()

        self.pairs: list[ArtifactPair] = []
        self.skipped: Counter[str] = Counter()
        self.already_fat: list[Path] = []

    def collect(self) -> list[ArtifactPair]:
        """Collect pairs in traversal order.

        Raises:
            DiscoveryError: The primary tree could not be fully traversed.
        """
        self.skipped.clear()
        self.already_fat = []
        pairs: list[ArtifactPair] = []

        candidates = walk_tree(
            self.primary_root,
            follow_symlinks=self.traversal.follow_symlinks,
            guard_cycles=self.traversal.guard_cycles,
        )
        for candidate in candidates:
            # A symlinked file is judged by its target
            verdict = self.classifier.classify(candidate.real_path, candidate.mode)
            if not verdict:
                self.skipped[verdict.reason] += 1
                if verdict.reason == ALREADY_FAT:
                    self.already_fat.append(candidate.path)
                continue

            pairs.append(ArtifactPair(
                primary_path=candidate.path,
                secondary_path=map_path(self.primary_root, self.secondary_root, candidate.path),
                relative_path=candidate.relative_path,
            ))

        logger.info(
            f"Found {len(pairs)} binaries to fuse, "
            f"{len(self.already_fat)} already fat"
        )
        self.pairs = pairs
        return pairs


def collect_pairs(
    primary_root: Path,
    secondary_root: Path,
    classifier: Classifier,
    traversal: TraversalConfig | None = None,
) -> list[ArtifactPair]:
    """Collect the pairs for two trees in one call."""
    return PairingCollector(primary_root, secondary_root, classifier, traversal).collect()
