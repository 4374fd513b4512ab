"""Valgrind / cachegrind summary tool.

Runs a binary under an external memory profiler, scrapes the free-form
diagnostic text it prints on stderr and re-emits a flat, structured
summary (exact JSON or human-readable YAML).
"""

from __future__ import annotations

__version__ = "0.3.0"
