"""Tests for path mapping and pair collection."""

from pathlib import Path

import pytest

from fatbundle.discovery.classifier import Classifier
from fatbundle.discovery.pairing import PairingCollector, collect_pairs, map_path

EXPECTED = {
    "My.app/Contents/MacOS/nwjs",
    "My.app/Contents/Frameworks/libffmpeg.dylib",
    "My.app/Contents/Frameworks/web_app_shortcut_copier",
    "My.app/Contents/Resources/addon.node",
}


def test_map_path():
    assert map_path(Path("/a/arm"), Path("/b/intel"), Path("/a/arm/x/y")) == Path("/b/intel/x/y")


def test_map_path_does_not_check_existence(temp_dir):
    mapped = map_path(temp_dir / "arm", temp_dir / "intel", temp_dir / "arm" / "ghost")
    assert mapped == temp_dir / "intel" / "ghost"
    assert not mapped.exists()


def test_map_path_outside_root():
    with pytest.raises(ValueError):
        map_path(Path("/a/arm"), Path("/b/intel"), Path("/elsewhere/tool"))


def test_collect_pairs(bundle_trees, fake_tool):
    arm, intel = bundle_trees
    pairs = collect_pairs(arm, intel, Classifier(fake_tool))

    relative = [str(p.relative_path) for p in pairs]
    assert sorted(relative) == sorted(EXPECTED)
    assert len(relative) == len(set(relative))

    for pair in pairs:
        assert pair.primary_path == arm / pair.relative_path
        assert pair.secondary_path == intel / pair.relative_path


def test_excluded_files_never_paired(bundle_trees, fake_tool):
    arm, intel = bundle_trees
    names = {p.primary_path.name for p in collect_pairs(arm, intel, Classifier(fake_tool))}

    assert "greenworks-linux64.node" not in names
    assert "launch.sh" not in names
    assert "app.nw" not in names
    assert "universal" not in names


def test_collector_reports_skips(bundle_trees, fake_tool):
    arm, intel = bundle_trees
    collector = PairingCollector(arm, intel, Classifier(fake_tool))
    pairs = collector.collect()

    assert collector.pairs == pairs
    assert [p.name for p in collector.already_fat] == ["universal"]
    assert collector.skipped["already-fat"] == 1
    assert collector.skipped["excluded"] == 1
    assert collector.skipped["shell-script"] == 1
    assert collector.skipped["not-executable"] == 1


def test_secondary_tree_not_inspected(bundle_trees, fake_tool):
    arm, intel = bundle_trees
    collect_pairs(arm, intel, Classifier(fake_tool))

    assert fake_tool.inspected
    assert all(arm.resolve() in p.resolve().parents for p in fake_tool.inspected)


def test_symlinked_subdirectory_pairs_use_logical_path(temp_dir, fake_tool, make_binary):
    arm = temp_dir / "arm"
    intel = temp_dir / "intel"
    shared = temp_dir / "shared-arm"
    make_binary(shared / "tool", "arm64")
    arm.mkdir()
    (arm / "Libs").symlink_to(shared, target_is_directory=True)
    make_binary(intel / "Libs" / "tool", "x86_64")

    [pair] = collect_pairs(arm, intel, Classifier(fake_tool))

    assert pair.relative_path == Path("Libs/tool")
    assert pair.secondary_path == intel / "Libs" / "tool"


def test_symlinked_file_pairs_use_logical_path(temp_dir, fake_tool, make_binary):
    arm = temp_dir / "arm"
    intel = temp_dir / "intel"
    make_binary(temp_dir / "shared" / "helper", "arm64")
    (arm / "bin").mkdir(parents=True)
    (arm / "bin" / "helper").symlink_to(temp_dir / "shared" / "helper")
    make_binary(intel / "bin" / "helper", "x86_64")

    [pair] = collect_pairs(arm, intel, Classifier(fake_tool))

    assert pair.primary_path == arm / "bin" / "helper"
    assert pair.relative_path == Path("bin/helper")
    assert pair.secondary_path == intel / "bin" / "helper"


def test_framework_layout_yields_one_pair(temp_dir, fake_tool, make_binary):
    arm = temp_dir / "arm"
    framework = arm / "Foo.framework"
    make_binary(framework / "Versions" / "A" / "Foo", "arm64")
    (framework / "Versions" / "Current").symlink_to("A", target_is_directory=True)
    (framework / "Foo").symlink_to(Path("Versions") / "Current" / "Foo")

    pairs = collect_pairs(arm, temp_dir / "intel", Classifier(fake_tool))

    assert len(pairs) == 1
    [pair] = pairs
    assert pair.secondary_path == temp_dir / "intel" / pair.relative_path
    assert pair.primary_path.resolve() == (framework / "Versions" / "A" / "Foo").resolve()
