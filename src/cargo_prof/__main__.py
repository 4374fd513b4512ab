from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__, workflow
from .config import DEFAULT_SUBTRACT_BYTES, ProfConfig, log_level


def _abs_path(p: str) -> Path:
    return Path(p).expanduser().resolve()


def _split_target_args(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split at the first ``--``: (own args, args forwarded to the target binary)."""
    if "--" not in argv:
        return argv, []
    i = argv.index("--")
    return argv[:i], argv[i + 1 :]


def _add_common_options(p: argparse.ArgumentParser, *, suppress: bool) -> None:
    # Subcommand copies default to SUPPRESS: a value given before the subcommand is kept.
    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress else value

    p.add_argument("-b", "--bin", default=default(None), help="The binary target to profile.")
    p.add_argument(
        "-j",
        "--json",
        action="store_true",
        default=default(False),
        help="JSON output with exact byte counts (default: YAML with human-readable bytes).",
    )
    p.add_argument(
        "--out-dir",
        type=_abs_path,
        default=default(None),
        help="Also archive the raw valgrind log, summary and metadata under this directory.",
    )


def build_parser(*, prog: str = "prof") -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    _add_common_options(common, suppress=True)

    parser = argparse.ArgumentParser(
        prog=prog,
        description="Profile a binary with valgrind. Pass extra arguments to the target binary after `--`.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_common_options(parser, suppress=False)
    sub = parser.add_subparsers(dest="cmd", required=True)

    heap = sub.add_parser("heap", parents=[common], help="Output the total bytes allocated and freed by the program.")
    heap.add_argument(
        "-s",
        "--subtract-bytes",
        type=int,
        default=DEFAULT_SUBTRACT_BYTES,
        help="Subtract bytes from total allocated (runtime baseline).",
    )
    sub.add_parser("leak", parents=[common], help="Output leaked bytes from the program.")
    sub.add_parser("cache", parents=[common], help="Check cache miss rates.")

    return parser


def parse_config(argv: list[str], *, cargo: bool = False) -> ProfConfig:
    own, target_args = _split_target_args(argv)
    ns = build_parser(prog="cargo prof" if cargo else "prof").parse_args(own)
    return ProfConfig(
        report=ns.cmd,
        bin=ns.bin,
        json=ns.json,
        target_args=target_args,
        subtract_bytes=getattr(ns, "subtract_bytes", DEFAULT_SUBTRACT_BYTES),
        out_dir=ns.out_dir,
        cargo=cargo,
    )


def _configure_logging() -> None:
    logging.basicConfig(
        level=log_level(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """`prof` entrypoint. Returns process exit code."""
    config = parse_config(sys.argv[1:] if argv is None else argv)
    _configure_logging()
    return workflow.run(config)


def cargo_main(argv: list[str] | None = None) -> int:
    """`cargo prof` entrypoint: builds the crate in release mode before profiling."""
    args = sys.argv[1:] if argv is None else argv
    # cargo runs `cargo-prof prof <args>` for `cargo prof <args>`.
    if args and args[0] == "prof":
        args = args[1:]
    config = parse_config(args, cargo=True)
    _configure_logging()
    return workflow.run(config)


if __name__ == "__main__":
    raise SystemExit(main())
