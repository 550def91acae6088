"""Artifact discovery: walking, classification and pairing."""

from fatbundle.discovery.classifier import Classifier
from fatbundle.discovery.models import (
    ArtifactCandidate,
    ArtifactPair,
    ClassificationVerdict,
    EntryKind,
)
from fatbundle.discovery.pairing import PairingCollector, collect_pairs, map_path
from fatbundle.discovery.walker import walk_tree

__all__ = [
    "ArtifactCandidate",
    "ArtifactPair",
    "ClassificationVerdict",
    "Classifier",
    "EntryKind",
    "PairingCollector",
    "collect_pairs",
    "map_path",
    "walk_tree",
]
