from __future__ import annotations

import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Any

from .prereqs import require_command

logger = logging.getLogger(__name__)


class BuildError(RuntimeError):
    """`cargo build` exited non-zero."""


def build_cargo_argv(bin: str | None) -> list[str]:
    argv = ["cargo", "build", "--release"]
    if bin:
        argv += ["--bin", bin]
    return argv


def cargo_build(bin: str | None, *, cwd: Path | None = None) -> None:
    """Build the release profile; compiler diagnostics stream to the terminal."""
    require_command("cargo")
    argv = build_cargo_argv(bin)
    logger.info("running: %s", shlex.join(argv))
    proc = subprocess.run(argv, cwd=cwd, stdout=subprocess.DEVNULL, check=False)
    if proc.returncode != 0:
        raise BuildError(f"Cargo could not build the project (exit {proc.returncode}): {shlex.join(argv)}")


def cargo_metadata(*, cwd: Path | None = None) -> dict[str, Any]:
    out = subprocess.check_output(
        [
            "cargo",
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            "./Cargo.toml",
            "--all-features",
            "--no-deps",
        ],
        cwd=cwd,
    )
    return json.loads(out)


def first_bin_target(metadata: dict[str, Any]) -> str:
    """Name of the first `bin` target of the workspace packages (registry crates skipped)."""
    for package in metadata.get("packages", []):
        for target in package.get("targets", []):
            if ".cargo/registry" in str(target.get("src_path", "")):
                continue
            if "bin" in target.get("kind", []):
                return str(target["name"])
    raise FileNotFoundError("no bin target found in cargo metadata")


def release_binary(bin: str | None, *, cwd: Path | None = None) -> str:
    """Path of the release binary, relative to the crate root."""
    name = bin or first_bin_target(cargo_metadata(cwd=cwd))
    return str(Path("target") / "release" / name)


def build_and_locate(bin: str | None, *, cwd: Path | None = None) -> str:
    cargo_build(bin, cwd=cwd)
    return release_binary(bin, cwd=cwd)
