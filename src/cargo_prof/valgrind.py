from __future__ import annotations

import logging
import shlex
import subprocess

import attrs

from .config import ReportName, valgrind_command
from .prereqs import require_command

logger = logging.getLogger(__name__)

# memcheck is valgrind's default tool; cachegrind needs the simulator switched
# on explicitly on valgrind >= 3.21 or no miss rates are printed.
TOOL_ARGS: dict[str, tuple[str, ...]] = {
    "heap": (),
    "leak": ("--leak-check=full",),
    "cache": ("--tool=cachegrind", "--cache-sim=yes"),
}


@attrs.define(frozen=True, slots=True)
class ValgrindRun:
    command: list[str]
    returncode: int
    output: str

    @property
    def rendered_command(self) -> str:
        return shlex.join(self.command)


def build_command(*, valgrind: str, report: ReportName, bin: str, target_args: tuple[str, ...] = ()) -> list[str]:
    return [valgrind, *TOOL_ARGS[report], bin, *target_args]


def run_valgrind(*, report: ReportName, bin: str, target_args: tuple[str, ...] = ()) -> ValgrindRun:
    """Run `bin` under valgrind and return its whole stderr capture.

    The target's exit status is recorded but not interpreted. Undecodable
    output raises `UnicodeDecodeError`.
    """
    valgrind = require_command(valgrind_command())
    cmd = build_command(valgrind=valgrind, report=report, bin=bin, target_args=target_args)
    logger.info("running: %s", shlex.join(cmd))

    proc = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, check=False)
    output = proc.stderr.decode("utf-8")
    logger.debug("valgrind exited with %d, captured %d bytes of stderr", proc.returncode, len(proc.stderr))
    return ValgrindRun(command=cmd, returncode=proc.returncode, output=output)


def valgrind_version() -> str | None:
    try:
        out = subprocess.check_output([valgrind_command(), "--version"], stderr=subprocess.STDOUT)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode(errors="replace").strip() or None
