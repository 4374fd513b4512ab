"""
Section extraction for valgrind-style diagnostic text.

A report kind is described by a fixed table of `SectionPattern`s. Each pattern
is one regular expression with one capturing group per field of the summary
line it targets (e.g. ``total heap usage: A allocs, F frees, T bytes allocated``
yields three fields from a single pattern).

Failure policy is two-tiered:

- the section line is absent from the text: `SectionNotFoundError`, fatal for
  the whole report;
- the line is present but a field is empty or unparsable: a warning is logged
  and the field defaults to zero.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Literal

import attrs

logger = logging.getLogger(__name__)

FieldKind = Literal["int", "float"]


class SectionNotFoundError(ValueError):
    """An expected report section is missing from the tool output."""

    def __init__(self, label: str, pattern: str):
        self.label = label
        self.pattern = pattern
        super().__init__(f"section {label!r} not found in valgrind output (no match for regex: {pattern})")


@attrs.define(frozen=True, slots=True)
class SectionPattern:
    """One labeled report section and the fields its line carries, in capture order."""

    label: str
    regex: re.Pattern[str] = attrs.field(converter=re.compile)
    fields: tuple[str, ...] = attrs.field(converter=tuple)
    kind: FieldKind = "int"

    def __attrs_post_init__(self) -> None:
        if self.regex.groups != len(self.fields):
            raise ValueError(
                f"section {self.label!r}: regex has {self.regex.groups} capture groups "
                f"but {len(self.fields)} fields were declared"
            )


@attrs.define(frozen=True, slots=True)
class CaptureSet:
    """Captured substrings of one section match.

    `values` holds the capturing groups only, in order; the implicit
    whole-match group 0 is never part of it. A group that did not take part
    in the match is ``None``.
    """

    label: str
    values: tuple[str | None, ...]

    def __iter__(self) -> Iterator[str | None]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


def extract(section: SectionPattern, text: str) -> CaptureSet:
    """Return the captures of the first match of `section` in `text`."""
    m = section.regex.search(text)
    if m is None:
        raise SectionNotFoundError(section.label, section.regex.pattern)
    return CaptureSet(label=section.label, values=m.groups())


def parse_int(label: str, captured: str | None, *, log: logging.Logger = logger) -> int:
    """Parse a captured count such as ``"1,024"``; missing or bad input yields 0."""
    if captured is None:
        log.warning("%s not found in valgrind output", label)
        return 0
    try:
        return int(captured.replace(",", ""))
    except ValueError as e:
        log.warning("failed to parse int for %s: %s", label, e)
        return 0


def parse_float(label: str, captured: str | None, *, log: logging.Logger = logger) -> float:
    """Parse a captured percentage such as ``"0.25"``; missing or bad input yields 0.0."""
    if captured is None:
        log.warning("%s not found in valgrind output", label)
        return 0.0
    try:
        return float(captured)
    except ValueError as e:
        log.warning("failed to parse float for %s: %s", label, e)
        return 0.0


def read_section(section: SectionPattern, text: str, *, log: logging.Logger = logger) -> dict[str, int | float]:
    """Extract one section and parse every declared field, defaulting bad fields to zero.

    Raises `SectionNotFoundError` if the section line itself is missing.
    """
    captures = extract(section, text)
    parse = parse_float if section.kind == "float" else parse_int
    out: dict[str, int | float] = {}
    for i, name in enumerate(section.fields):
        captured = captures.values[i] if i < len(captures) else None
        out[name] = parse(f"{section.label}: {name}", captured, log=log)
    return out


def read_sections(
    sections: tuple[SectionPattern, ...], text: str, *, log: logging.Logger = logger
) -> dict[str, int | float]:
    out: dict[str, int | float] = {}
    for section in sections:
        out.update(read_section(section, text, log=log))
    return out
