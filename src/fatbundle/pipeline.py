"""Run driver: discovery, fusion, copy-back and signing in sequence."""

from dataclasses import dataclass, field
from pathlib import Path

from fatbundle.arch.base import ArchitectureTool
from fatbundle.arch.registry import get_architecture_tool
from fatbundle.config import FatBundleConfig, get_default_config
from fatbundle.copyback import CopyBackResult, copy_named_file
from fatbundle.discovery.classifier import Classifier
from fatbundle.discovery.models import ArtifactPair
from fatbundle.discovery.pairing import PairingCollector
from fatbundle.errors import ConfigurationError, SigningError, ToolNotFoundError
from fatbundle.fusion import FusionExecutor, FusionReport
from fatbundle.signing import SigningResult, sign_bundle
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RunSummary:
    """Everything a run did."""
    primary: Path
    secondary: Path
    dry_run: bool
    pairs: list[ArtifactPair] = field(default_factory=list)
    already_fat: list[Path] = field(default_factory=list)
    skipped: dict[str, int] = field(default_factory=dict)
    fusion: FusionReport | None = None
    copy_back: list[CopyBackResult] = field(default_factory=list)
    signing: SigningResult | None = None
    signing_error: str | None = None

    @property
    def ok(self) -> bool:
        if self.fusion is not None and not self.fusion.ok:
            return False
        if any(r.errors for r in self.copy_back):
            return False
        return self.signing_error is None

    def to_dict(self) -> dict:
        return {
            "primary": str(self.primary),
            "secondary": str(self.secondary),
            "dry_run": self.dry_run,
            "pairs": [p.to_dict() for p in self.pairs],
            "already_fat": [str(p) for p in self.already_fat],
            "skipped": self.skipped,
            "fusion": self.fusion.to_dict() if self.fusion else None,
            "copy_back": [r.to_dict() for r in self.copy_back],
            "signing": self.signing.to_dict() if self.signing else None,
            "signing_error": self.signing_error,
            "ok": self.ok,
        }


def tool_from_config(config: FatBundleConfig) -> ArchitectureTool:
    """Build the configured architecture tool."""
    if config.tools.backend == "lipo":
        return get_architecture_tool("lipo", executable=config.tools.lipo)
    return get_architecture_tool(config.tools.backend)


def validate_roots(primary: Path | None, secondary: Path | None) -> tuple[Path, Path]:
    """Check both trees exist before anything is traversed.

    Raises:
        ConfigurationError: A path is missing, not a directory, or the two
            trees overlap.
    """
    roots = []
    for label, path in (("primary", primary), ("secondary", secondary)):
        if path is None or str(path) == "":
            raise ConfigurationError(f"Missing {label} tree path")
        path = Path(path)
        if not path.is_dir():
            raise ConfigurationError(f"The {label} tree is not a directory: {path}")
        roots.append(path)

    primary_real, secondary_real = roots[0].resolve(), roots[1].resolve()
    if primary_real == secondary_real:
        raise ConfigurationError("Primary and secondary trees are the same directory")
    # The walk would reach into the other tree and rewrite secondary files
    if secondary_real in primary_real.parents or primary_real in secondary_real.parents:
        raise ConfigurationError(
            f"Primary and secondary trees are nested: {roots[0]}, {roots[1]}"
        )
    return roots[0], roots[1]


def require_tool(tool: ArchitectureTool) -> None:
    """Fail before traversal when the backend cannot run here.

    Raises:
        ToolNotFoundError: The backend executable is not available.
    """
    if not tool.is_available():
        raise ToolNotFoundError(f"{tool.name} is not available on this machine")


def discover(
    primary: Path,
    secondary: Path,
    config: FatBundleConfig,
    tool: ArchitectureTool,
) -> PairingCollector:
    """Run the pairing collector and return it with its pairs collected.

    Raises:
        ToolNotFoundError: The architecture tool is missing.
        DiscoveryError: The primary tree could not be walked.
    """
    require_tool(tool)
    classifier = Classifier(
        tool,
        rules=config.classifier,
        strict=config.fusion.strict_inspection,
    )
    collector = PairingCollector(primary, secondary, classifier, config.traversal)
    collector.collect()
    return collector


def run(
    primary: Path,
    secondary: Path,
    config: FatBundleConfig | None = None,
    tool: ArchitectureTool | None = None,
    dry_run: bool = False,
    identity: str | None = None,
    copy_back: bool = True,
) -> RunSummary:
    """Fuse ``secondary`` into ``primary`` in place.

    Raises:
        ConfigurationError: Bad input paths (nothing has been touched).
        DiscoveryError: The primary tree could not be walked (nothing fused).
        ToolNotFoundError: The architecture tool is missing (nothing fused).
    """
    config = config or get_default_config()
    primary, secondary = validate_roots(primary, secondary)
    tool = tool or tool_from_config(config)

    summary = RunSummary(primary=primary, secondary=secondary, dry_run=dry_run)

    collector = discover(primary, secondary, config, tool)
    summary.pairs = collector.pairs
    summary.already_fat = collector.already_fat
    summary.skipped = dict(collector.skipped)

    for pair in summary.pairs:
        logger.debug(f"Pair: {pair.relative_path}")

    executor = FusionExecutor(tool, dry_run=dry_run, verify=config.fusion.verify)
    summary.fusion = executor.run(summary.pairs)

    if copy_back:
        for filename in config.fusion.copy_back:
            summary.copy_back.append(
                copy_named_file(secondary, primary, filename, dry_run=dry_run)
            )

    identity = identity or config.signing.identity
    if identity:
        try:
            summary.signing = sign_bundle(
                primary,
                identity,
                codesign=config.tools.codesign,
                suffix=config.signing.bundle_suffix,
                deep=config.signing.deep,
                verify=config.signing.verify,
                dry_run=dry_run,
            )
        except SigningError as e:
            logger.error(f"Signing failed: {e}")
            summary.signing_error = str(e)

    return summary
