"""Final codesign step for the fused bundle."""

import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from fatbundle.errors import SigningError
from fatbundle.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SigningResult:
    """Result of signing the app bundle."""
    bundle: Path
    identity: str
    commands: list[str] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> dict:
        return {
            "bundle": str(self.bundle),
            "identity": self.identity,
            "commands": self.commands,
            "dry_run": self.dry_run,
        }


def find_app_bundle(root: Path, suffix: str = ".app") -> Path:
    """Locate the single top-level app bundle directory inside ``root``.

    Raises:
        SigningError: Zero or several bundle directories were found.
    """
    root = Path(root)
    try:
        bundles = sorted(p for p in root.iterdir() if p.is_dir() and p.name.endswith(suffix))
    except OSError as e:
        raise SigningError(f"Cannot list {root}: {e}") from e

    if not bundles:
        raise SigningError(f"No {suffix} bundle found in {root}")
    if len(bundles) > 1:
        names = ", ".join(b.name for b in bundles)
        raise SigningError(f"Multiple {suffix} bundles found in {root}: {names}")
    return bundles[0]


def _run(cmd: list[str]) -> None:
    logger.debug(f"Running: {shlex.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise SigningError(f"{cmd[0]} not found on PATH") from e
    if result.returncode != 0:
        raise SigningError(f"{shlex.join(cmd)} failed: {result.stderr.strip()}")


def sign_bundle(
    root: Path,
    identity: str,
    *,
    codesign: str = "codesign",
    suffix: str = ".app",
    deep: bool = True,
    verify: bool = True,
    dry_run: bool = False,
) -> SigningResult:
    """Sign the app bundle found in ``root`` with ``identity``.

    ``identity`` "-" requests an ad-hoc signature.
    """
    bundle = find_app_bundle(root, suffix)
    result = SigningResult(bundle=bundle, identity=identity, dry_run=dry_run)

    sign_cmd = [codesign, "--force"]
    if deep:
        sign_cmd.append("--deep")
    sign_cmd += ["--sign", identity, str(bundle)]
    commands = [sign_cmd]

    if verify:
        verify_cmd = [codesign, "--verify", "--strict"]
        if deep:
            verify_cmd.append("--deep")
        verify_cmd += ["--verbose=2", str(bundle)]
        commands.append(verify_cmd)

    for cmd in commands:
        result.commands.append(shlex.join(cmd))
        if dry_run:
            logger.info(f"Preview: {shlex.join(cmd)}")
            continue
        _run(cmd)

    if not dry_run:
        logger.info(f"Signed: {bundle} ({'ad-hoc' if identity == '-' else identity})")
    return result
