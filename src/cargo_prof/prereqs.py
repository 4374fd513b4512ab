from __future__ import annotations

import platform
import shutil

from .config import ProfConfig, valgrind_command
from .model import PrerequisiteCheck


class ToolNotFoundError(FileNotFoundError):
    def __init__(self, command: str):
        self.command = command
        self.suggestion = install_suggestion(command)
        super().__init__(f"Command: {command} not found ({self.suggestion})")


def install_suggestion(command: str) -> str:
    return f"make sure {command} is installed and it's on your PATH: https://command-not-found.com/{command}"


def require_command(command: str) -> str:
    """Return the resolved path of `command` or raise `ToolNotFoundError`."""
    path = shutil.which(command)
    if path is None:
        raise ToolNotFoundError(command)
    return path


def check_platform_supported() -> PrerequisiteCheck:
    if platform.system() == "Windows":
        return PrerequisiteCheck(
            check_name="platform_supported",
            status="fail",
            details="Valgrind is not supported on Windows",
        )
    return PrerequisiteCheck(check_name="platform_supported", status="pass")


def check_command_available(command: str) -> PrerequisiteCheck:
    name = f"{command.rsplit('/', 1)[-1]}_available"
    if shutil.which(command) is not None:
        return PrerequisiteCheck(check_name=name, status="pass")
    return PrerequisiteCheck(check_name=name, status="fail", details=install_suggestion(command))


def check_bin_given(config: ProfConfig) -> PrerequisiteCheck:
    # In cargo mode the binary is resolved after the build.
    if config.cargo or config.bin:
        return PrerequisiteCheck(check_name="bin_given", status="pass")
    return PrerequisiteCheck(check_name="bin_given", status="fail", details="provide a --bin <BIN>")


def check_all(config: ProfConfig) -> list[PrerequisiteCheck]:
    checks = [
        check_platform_supported(),
        check_command_available(valgrind_command()),
        check_bin_given(config),
    ]
    if config.cargo:
        checks.append(check_command_available("cargo"))
    return checks


def format_prereq_failures(checks: list[PrerequisiteCheck], *, report: str) -> str:
    """One stderr block naming every failed check and how to fix it."""
    lines: list[str] = [f"cannot run valgrind {report} profile:"]
    for c in checks:
        if c.failed:
            lines.append(f"  {c.check_name}: {c.details or 'failed'}")
    return "\n".join(lines)
