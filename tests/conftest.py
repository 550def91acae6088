"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from fatbundle.arch.base import ArchitectureInfo, ArchitectureTool
from fatbundle.errors import InspectionError, MergeError


class FakeArchTool(ArchitectureTool):
    """In-memory stand-in for lipo.

    A "binary" is a text file whose first line is ``arch:<a>[,<b>...]``.
    """

    name = "fake"

    def __init__(self) -> None:
        self.inspected: list[Path] = []
        self.merged: list[tuple[list[Path], Path]] = []
        self.available = True

    def _read(self, path: Path) -> list[str]:
        try:
            first_line = Path(path).read_text().splitlines()[0]
        except (OSError, UnicodeDecodeError, IndexError) as e:
            raise InspectionError("Cannot inspect architectures", path) from e
        if not first_line.startswith("arch:"):
            raise InspectionError("Not a binary", path)
        return first_line[len("arch:"):].split(",")

    def inspect(self, path: Path) -> ArchitectureInfo:
        self.inspected.append(Path(path))
        architectures = self._read(path)
        return ArchitectureInfo(
            path=Path(path),
            architectures=architectures,
            is_fat=len(architectures) > 1,
        )

    def is_available(self) -> bool:
        return self.available

    def merge(self, inputs, output) -> None:
        self.merged.append(([Path(p) for p in inputs], Path(output)))
        architectures: list[str] = []
        for path in inputs:
            try:
                found = self._read(path)
            except InspectionError as e:
                raise MergeError("Cannot open input", path) from e
            if len(found) > 1:
                raise MergeError("Input is already fat", path)
            architectures += found
        Path(output).write_text("arch:" + ",".join(architectures) + "\n")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_config(temp_dir, monkeypatch):
    """Keep tests away from the user's config file and environment."""
    monkeypatch.setattr("fatbundle.config.DEFAULT_CONFIG_DIR", temp_dir / ".fatbundle")
    monkeypatch.setattr("fatbundle.config.DEFAULT_CONFIG_FILE", temp_dir / ".fatbundle" / "fatbundle.yaml")
    monkeypatch.delenv("FATBUNDLE_SIGN_IDENTITY", raising=False)


@pytest.fixture
def fake_tool():
    """Create a fake architecture tool."""
    return FakeArchTool()


@pytest.fixture
def make_binary():
    """Return a helper writing a fake binary."""
    def _make(path: Path, archs: str = "arm64", mode: int = 0o755) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"arch:{archs}\nfake machine code\n")
        path.chmod(mode)
        return path
    return _make


@pytest.fixture
def bundle_trees(temp_dir, make_binary):
    """Create an arm64 and an x86_64 build of the same NW.js-style app."""
    arm = temp_dir / "arm"
    intel = temp_dir / "intel"

    for root, arch in ((arm, "arm64"), (intel, "x86_64")):
        contents = root / "My.app" / "Contents"
        make_binary(contents / "MacOS" / "nwjs", arch)
        make_binary(contents / "Frameworks" / "libffmpeg.dylib", arch, mode=0o644)
        make_binary(contents / "Frameworks" / "web_app_shortcut_copier", arch, mode=0o644)
        make_binary(contents / "Resources" / "addon.node", arch, mode=0o644)
        make_binary(contents / "Resources" / "greenworks-linux64.node", arch)
        make_binary(contents / "Resources" / "universal", "arm64,x86_64")

        script = contents / "Resources" / "launch.sh"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o755)

        data = contents / "Resources" / "app.nw"
        data.write_text("not a binary")
        data.chmod(0o644)

    return arm, intel
