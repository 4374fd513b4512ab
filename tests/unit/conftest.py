from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import Callable

import pytest

MEMCHECK_OUTPUT = """\
==12345== Memcheck, a memory error detector
==12345== Copyright (C) 2002-2022, and GNU GPL'd, by Julian Seward et al.
==12345== Using Valgrind-3.19.0 and LibVEX; rerun with -h for copyright info
==12345== Command: ./target/release/demo
==12345==
==12345==
==12345== HEAP SUMMARY:
==12345==     in use at exit: 3,600 bytes in 12 blocks
==12345==   total heap usage: 1,204 allocs, 1,192 frees, 100,000 bytes allocated
==12345==
==12345== LEAK SUMMARY:
==12345==    definitely lost: 1,024 bytes in 1 blocks
==12345==    indirectly lost: 512 bytes in 2 blocks
==12345==      possibly lost: 2,048 bytes in 4 blocks
==12345==    still reachable: 72,704 bytes in 5 blocks
==12345==         suppressed: 16 bytes in 3 blocks
==12345== Rerun with --leak-check=full to see details of leaked memory
==12345==
==12345== For lists of detected and suppressed errors, rerun with: -s
==12345== ERROR SUMMARY: 0 errors from 0 contexts (suppressed: 0 from 0)
"""

NO_LEAK_OUTPUT = """\
==777== Memcheck, a memory error detector
==777== Command: ./demo
==777==
==777== HEAP SUMMARY:
==777==     in use at exit: 0 bytes in 0 blocks
==777==   total heap usage: 2 allocs, 2 frees, 2,157 bytes allocated
==777==
==777== All heap blocks were freed -- no leaks are possible
==777==
==777== ERROR SUMMARY: 0 errors from 0 contexts (suppressed: 0 from 0)
"""

CACHEGRIND_OUTPUT = """\
==20000== Cachegrind, a high-precision tracing profiler
==20000== Command: ./demo
==20000==
==20000== I refs:        1,234,567
==20000== I1  misses:          1,234
==20000== LLi misses:          1,100
==20000== I1  miss rate:        0.10%
==20000== LLi miss rate:        0.09%
==20000==
==20000== D refs:          456,789  (300,000 rd   + 156,789 wr)
==20000== D1  misses:        8,000  (  6,000 rd   +   2,000 wr)
==20000== LLd misses:        4,000  (  3,000 rd   +   1,000 wr)
==20000== D1  miss rate:        1.8% (    2.0%     +     1.3%  )
==20000== LLd miss rate:        0.9% (    1.0%     +     0.6%  )
==20000==
==20000== LL refs:           9,234  (  7,234 rd   +   2,000 wr)
==20000== LL misses:         5,100  (  4,100 rd   +   1,000 wr)
==20000== LL miss rate:         0.3% (    0.2%     +     0.6%  )
"""


@pytest.fixture
def memcheck_output() -> str:
    return MEMCHECK_OUTPUT


@pytest.fixture
def no_leak_output() -> str:
    return NO_LEAK_OUTPUT


@pytest.fixture
def cachegrind_output() -> str:
    return CACHEGRIND_OUTPUT


@pytest.fixture
def fake_bin_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A directory prepended to PATH for stub `valgrind` / `cargo` executables."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.delenv("CARGO_PROF_VALGRIND", raising=False)
    return bin_dir


def _write_fake_valgrind(bin_dir: Path, output: str, *, exit_code: int = 0) -> Path:
    """Stub valgrind: records its argv in `valgrind.args` and prints `output` on stderr."""
    report = bin_dir / "valgrind.out"
    report.write_text(output)
    args_file = bin_dir / "valgrind.args"
    exe = bin_dir / "valgrind"
    exe.write_text(
        "#!/usr/bin/env bash\n"
        f"printf '%s\\n' \"$@\" > '{args_file}'\n"
        f"cat '{report}' >&2\n"
        f"exit {exit_code}\n"
    )
    exe.chmod(0o755)
    return exe


@pytest.fixture
def fake_valgrind(fake_bin_dir: Path) -> Callable[..., Path]:
    return functools.partial(_write_fake_valgrind, fake_bin_dir)
