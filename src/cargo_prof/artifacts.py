from __future__ import annotations

import json
import platform
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import attrs
from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from .config import ProfConfig
from .model import Summary


@attrs.define(frozen=True, slots=True)
class RunArtifacts:
    run_dir: Path
    log_path: Path
    summary_path: Path
    metadata_path: Path
    readme_path: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_dir": str(self.run_dir),
            "log_path": str(self.log_path),
            "summary_path": str(self.summary_path),
            "metadata_path": str(self.metadata_path),
            "readme_path": str(self.readme_path),
        }


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def default_run_id(report: str) -> str:
    return f"{report}-{datetime.now(timezone.utc).strftime('%Y-%m-%dT%H-%M-%SZ')}"


def sanitize_run_id(run_id: str) -> str:
    s = re.sub(r"[^A-Za-z0-9_.-]+", "-", run_id.strip()).strip("-")
    if not s:
        raise ValueError(f"run id must contain at least one alphanumeric character: {run_id!r}")
    return s


def ensure_new_run_dir(run_dir: Path) -> None:
    """Each archive gets a fresh directory; an existing one is never reused."""
    if run_dir.exists():
        raise FileExistsError(f"valgrind run archive already exists: {run_dir}")


def run_artifacts_paths(*, out_dir: Path, run_id: str) -> RunArtifacts:
    run_dir = (out_dir / sanitize_run_id(run_id)).resolve()
    return RunArtifacts(
        run_dir=run_dir,
        log_path=run_dir / "valgrind.log",
        summary_path=run_dir / "summary.json",
        metadata_path=run_dir / "meta.json",
        readme_path=run_dir / "README.md",
    )


def _write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2, sort_keys=True) + "\n")


def _write_readme(
    paths: RunArtifacts, *, config: ProfConfig, binary: str, command: str, summary: dict[str, Any]
) -> None:
    md = MdUtils(file_name=str(paths.readme_path.with_suffix("")), title=f"Valgrind {config.report} summary")
    md.new_paragraph(f"Profiled binary: `{binary}`")
    md.new_header(level=1, title="Command")
    md.new_paragraph(f"`{command}`")
    md.new_header(level=1, title="Summary")
    cells = ["field", "value"]
    for name, value in summary.items():
        cells += [name, str(value)]
    md.new_table(columns=2, rows=len(summary) + 1, text=cells, text_align="left")
    md.new_header(level=1, title="Outputs")
    md.new_list(
        [
            f"`{paths.log_path.name}`: raw valgrind stderr",
            f"`{paths.summary_path.name}`: summary with exact byte counts (JSON)",
            f"`{paths.metadata_path.name}`: run metadata",
        ]
    )
    md.create_md_file()


def write_run_archive(
    *,
    out_dir: Path,
    config: ProfConfig,
    command: str,
    raw_output: str,
    summary: Summary,
    started_at: str,
    binary: str,
    tool_version: str | None,
) -> RunArtifacts:
    """Archive one invocation under `<out_dir>/<report>-<timestamp>/`."""
    paths = run_artifacts_paths(out_dir=out_dir, run_id=default_run_id(config.report))
    ensure_new_run_dir(paths.run_dir)
    paths.run_dir.mkdir(parents=True)

    paths.log_path.write_text(raw_output)
    # Declared field order, same as the --json output.
    paths.summary_path.write_text(json.dumps(summary.to_dict(), indent=2) + "\n")
    _write_json(
        paths.metadata_path,
        {
            "report": config.report,
            "started_at": started_at,
            "finished_at": utc_now_iso(),
            "binary": binary,
            "command": command,
            "config": config.to_dict(),
            "host": {"platform": platform.platform(), "machine": platform.machine()},
            "tool_versions": {"valgrind": tool_version},
            "outputs": paths.to_dict(),
        },
    )
    _write_readme(paths, config=config, binary=binary, command=command, summary=summary.to_human_dict())
    return paths
