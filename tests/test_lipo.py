"""Tests for the lipo backend and the tool registry."""

import subprocess
from pathlib import Path

import pytest

from fatbundle.arch import LipoTool, get_architecture_tool, register_tool
from fatbundle.arch.lipo import parse_lipo_info
from fatbundle.errors import ConfigurationError, InspectionError, MergeError, ToolNotFoundError


class FakeRun:
    """Records subprocess.run calls and returns a canned result."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = ""):
        self.calls: list[list[str]] = []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


def test_parse_non_fat():
    info = parse_lipo_info(Path("/x/tool"), "Non-fat file: /x/tool is architecture: arm64\n")
    assert info.is_fat is False
    assert info.architectures == ["arm64"]


def test_parse_fat():
    info = parse_lipo_info(
        Path("/x/tool"),
        "Architectures in the fat file: /x/tool are: x86_64 arm64 \n",
    )
    assert info.is_fat is True
    assert info.architectures == ["x86_64", "arm64"]


def test_inspect_runs_lipo_info(monkeypatch):
    fake = FakeRun(stdout="Non-fat file: /x/tool is architecture: x86_64")
    monkeypatch.setattr(subprocess, "run", fake)

    info = LipoTool("/usr/bin/lipo").inspect(Path("/x/tool"))

    assert fake.calls == [["/usr/bin/lipo", "-info", "/x/tool"]]
    assert info.architectures == ["x86_64"]


def test_inspect_failure(monkeypatch):
    fake = FakeRun(returncode=1, stderr="can't figure out the architecture type of: /x/a.txt")
    monkeypatch.setattr(subprocess, "run", fake)

    with pytest.raises(InspectionError) as exc_info:
        LipoTool().inspect(Path("/x/a.txt"))
    assert "architecture type" in str(exc_info.value)


def test_merge_command(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)

    LipoTool().merge([Path("/arm/tool"), Path("/intel/tool")], Path("/arm/tool"))

    assert fake.calls == [["lipo", "-create", "/arm/tool", "/intel/tool", "-output", "/arm/tool"]]


def test_merge_failure(monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRun(returncode=1, stderr="same architectures"))

    with pytest.raises(MergeError):
        LipoTool().merge([Path("/a"), Path("/b")], Path("/a"))


def test_missing_executable(monkeypatch):
    def not_found(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", not_found)

    with pytest.raises(ToolNotFoundError):
        LipoTool("no-such-lipo").inspect(Path("/a"))


def test_describe_merge_quotes_paths():
    command = LipoTool().describe_merge(
        [Path("/arm/nwjs Helper (Alerts)"), Path("/intel/nwjs Helper (Alerts)")],
        Path("/arm/nwjs Helper (Alerts)"),
    )
    assert command.startswith("lipo -create '/arm/nwjs Helper (Alerts)'")
    assert command.endswith("-output '/arm/nwjs Helper (Alerts)'")


def test_registry(fake_tool):
    assert isinstance(get_architecture_tool("lipo"), LipoTool)

    register_tool("fake", type(fake_tool))
    assert get_architecture_tool("fake").name == "fake"

    with pytest.raises(ConfigurationError):
        get_architecture_tool("objcopy")


def test_is_available(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/lipo" if name == "lipo" else None)

    assert LipoTool().is_available()
    assert not LipoTool("no-such-lipo").is_available()
