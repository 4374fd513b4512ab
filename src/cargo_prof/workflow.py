from __future__ import annotations

import logging
import sys

from . import artifacts, prereqs, reports, toolchain, valgrind
from .config import ProfConfig
from .export import render

logger = logging.getLogger(__name__)


def resolve_binary(config: ProfConfig) -> str:
    """Binary to profile: the cargo release build in cargo mode, otherwise `--bin`."""
    if config.cargo:
        return toolchain.build_and_locate(config.bin)
    if not config.bin:
        raise ValueError("provide a --bin <BIN>")
    return config.bin


def run(config: ProfConfig) -> int:
    """Profile one binary and print its summary. Returns the process exit code.

    Exit codes: 0 ok, 1 runtime failure, 2 missing prerequisites.
    """
    checks = prereqs.check_all(config)
    if any(c.failed for c in checks):
        print(prereqs.format_prereq_failures(checks, report=config.report), file=sys.stderr)
        return 2

    started_at = artifacts.utc_now_iso()
    try:
        binary = resolve_binary(config)

        result = valgrind.run_valgrind(report=config.report, bin=binary, target_args=config.target_args)
        summary = reports.assemble(config.report, result.output, subtract_bytes=config.subtract_bytes)
        print(render(summary, as_json=config.json))

        if config.out_dir is not None:
            paths = artifacts.write_run_archive(
                out_dir=config.out_dir,
                config=config,
                command=result.rendered_command,
                raw_output=result.output,
                summary=summary,
                started_at=started_at,
                binary=binary,
                tool_version=valgrind.valgrind_version(),
            )
            logger.info("run archived in %s", paths.run_dir)
    except UnicodeDecodeError as e:
        print(f"valgrind output is not valid UTF-8: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"{config.report} failed: {e}", file=sys.stderr)
        return 1
    return 0
