"""
Report assemblers: raw valgrind / cachegrind stderr -> summary records.

Each report kind owns a fixed table of sections. The regexes only ever consume
non-digit characters *on the same line* between fields, so a short line never
borrows numbers from the next one (the ``==PID==`` prefix, for instance).
"""

from __future__ import annotations

import logging

from .extract import SectionPattern, read_sections
from .model import CacheMissSummary, HeapSummary, LeakSummary, Summary

logger = logging.getLogger(__name__)

# Thousands-separated count followed by the filler up to the next number on the line.
_NUM = r"([\d,]*)"
_GAP = r"[^\d\n]*"
_RATE = r"\s*miss rate:\s*([\d.]*)"

HEAP_SECTIONS: tuple[SectionPattern, ...] = (
    SectionPattern(
        "in use at exit",
        rf"in use at exit:{_GAP}{_NUM}{_GAP}{_NUM}",
        ("allocated_at_exit", "blocks_at_exit"),
    ),
    SectionPattern(
        "total heap usage",
        rf"total heap usage:{_GAP}{_NUM}{_GAP}{_NUM}{_GAP}{_NUM}",
        ("allocations", "frees", "allocated_total"),
    ),
)


def _leak_section(label: str, field: str) -> SectionPattern:
    return SectionPattern(label, rf"{label}:{_GAP}{_NUM}{_GAP}{_NUM}", (field, f"{field}_blocks"))


LEAK_SECTIONS: tuple[SectionPattern, ...] = (
    _leak_section("definitely lost", "definitely_lost"),
    _leak_section("indirectly lost", "indirectly_lost"),
    _leak_section("possibly lost", "possibly_lost"),
    _leak_section("still reachable", "still_reachable"),
    _leak_section("suppressed", "suppressed"),
)

# Printed by memcheck in place of the LEAK SUMMARY block when nothing is left on the heap.
NO_LEAKS_BANNER = "All heap blocks were freed -- no leaks are possible"

CACHE_SECTIONS: tuple[SectionPattern, ...] = (
    SectionPattern("I1 miss rate", rf"I1{_RATE}", ("i1_miss_rate",), kind="float"),
    SectionPattern("LL/L2 instruction miss rate", rf"L[L2]i{_RATE}", ("lli_miss_rate",), kind="float"),
    SectionPattern("D1 miss rate", rf"D1{_RATE}", ("d1_miss_rate",), kind="float"),
    SectionPattern("LL/L2 data miss rate", rf"L[L2]d{_RATE}", ("lld_miss_rate",), kind="float"),
    SectionPattern("LL/L2 total miss rate", rf"L[L2]{_RATE}", ("ll_miss_rate",), kind="float"),
)


def assemble_heap(text: str, *, subtract_bytes: int = 0, log: logging.Logger = logger) -> HeapSummary:
    """Build a `HeapSummary`; `subtract_bytes` (runtime baseline) is taken off the allocated total."""
    values = read_sections(HEAP_SECTIONS, text, log=log)
    values["allocated_total"] = int(values["allocated_total"]) - subtract_bytes
    return HeapSummary(**values)


def assemble_leak(text: str, *, log: logging.Logger = logger) -> LeakSummary:
    if NO_LEAKS_BANNER in text:
        log.debug("memcheck reported no leaks; emitting an all-zero leak summary")
        return LeakSummary()
    return LeakSummary(**read_sections(LEAK_SECTIONS, text, log=log))


def assemble_cache(text: str, *, log: logging.Logger = logger) -> CacheMissSummary:
    return CacheMissSummary(**read_sections(CACHE_SECTIONS, text, log=log))


def assemble(report: str, text: str, *, subtract_bytes: int = 0, log: logging.Logger = logger) -> Summary:
    """Dispatch on the report name (``heap`` / ``leak`` / ``cache``)."""
    if report == "heap":
        return assemble_heap(text, subtract_bytes=subtract_bytes, log=log)
    if report == "leak":
        return assemble_leak(text, log=log)
    if report == "cache":
        return assemble_cache(text, log=log)
    raise ValueError(f"Unknown report: {report!r}")
