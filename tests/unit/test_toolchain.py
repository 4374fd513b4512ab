from __future__ import annotations

import json
from pathlib import Path

import pytest

from cargo_prof import toolchain

METADATA = {
    "packages": [
        {
            "name": "serde",
            "targets": [{"name": "serde", "kind": ["lib"], "src_path": "/home/u/.cargo/registry/src/serde/lib.rs"}],
        },
        {
            "name": "demo",
            "targets": [
                {"name": "demo", "kind": ["lib"], "src_path": "/work/demo/src/lib.rs"},
                {"name": "demo-cli", "kind": ["bin"], "src_path": "/work/demo/src/main.rs"},
                {"name": "other", "kind": ["bin"], "src_path": "/work/demo/src/bin/other.rs"},
            ],
        },
    ]
}


def _write_fake_cargo(bin_dir: Path, *, build_exit: int = 0) -> Path:
    metadata = bin_dir / "metadata.json"
    metadata.write_text(json.dumps(METADATA))
    exe = bin_dir / "cargo"
    exe.write_text(
        "#!/usr/bin/env bash\n"
        f"printf '%s\\n' \"$@\" >> '{bin_dir / 'cargo.args'}'\n"
        f"if [ \"$1\" = build ]; then exit {build_exit}; fi\n"
        f"if [ \"$1\" = metadata ]; then cat '{metadata}'; fi\n"
    )
    exe.chmod(0o755)
    return exe


def test_build_cargo_argv() -> None:
    assert toolchain.build_cargo_argv(None) == ["cargo", "build", "--release"]
    assert toolchain.build_cargo_argv("demo") == ["cargo", "build", "--release", "--bin", "demo"]


def test_first_bin_target_skips_registry_and_libs() -> None:
    assert toolchain.first_bin_target(METADATA) == "demo-cli"


def test_first_bin_target_without_bins() -> None:
    with pytest.raises(FileNotFoundError):
        toolchain.first_bin_target({"packages": [{"targets": [{"name": "x", "kind": ["lib"], "src_path": "x"}]}]})


def test_release_binary_uses_explicit_name_without_metadata() -> None:
    assert toolchain.release_binary("other") == str(Path("target") / "release" / "other")


def test_build_and_locate(fake_bin_dir: Path, tmp_path: Path) -> None:
    _write_fake_cargo(fake_bin_dir)
    assert toolchain.build_and_locate(None, cwd=tmp_path) == str(Path("target") / "release" / "demo-cli")
    calls = (fake_bin_dir / "cargo.args").read_text().splitlines()
    assert calls[:2] == ["build", "--release"]
    assert "metadata" in calls


def test_cargo_build_failure(fake_bin_dir: Path) -> None:
    _write_fake_cargo(fake_bin_dir, build_exit=101)
    with pytest.raises(toolchain.BuildError, match="exit 101"):
        toolchain.cargo_build("demo")
