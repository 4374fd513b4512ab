from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import attrs

ReportName = Literal["heap", "leak", "cache"]

REPORTS: tuple[str, ...] = ("heap", "leak", "cache")

# Runtime baseline taken off `allocated_total` unless --subtract-bytes says otherwise.
DEFAULT_SUBTRACT_BYTES = 0

VALGRIND_ENV = "CARGO_PROF_VALGRIND"
LOG_LEVEL_ENV = "CARGO_PROF_LOG"


@attrs.define(frozen=True, slots=True)
class ProfConfig:
    report: ReportName
    bin: str | None = None
    json: bool = False
    target_args: tuple[str, ...] = attrs.field(default=(), converter=tuple)
    subtract_bytes: int = DEFAULT_SUBTRACT_BYTES
    out_dir: Path | None = None
    cargo: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "report": self.report,
            "bin": self.bin,
            "json": self.json,
            "target_args": list(self.target_args),
            "subtract_bytes": self.subtract_bytes,
            "out_dir": str(self.out_dir) if self.out_dir is not None else None,
            "cargo": self.cargo,
        }


def valgrind_command() -> str:
    """Valgrind executable name/path (``$CARGO_PROF_VALGRIND`` overrides)."""
    return os.environ.get(VALGRIND_ENV) or "valgrind"


def log_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
