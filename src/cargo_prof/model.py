from __future__ import annotations

from typing import Any, Literal

import attrs

from .units import human_bytes

CheckStatus = Literal["pass", "fail"]

# attrs metadata key marking size-denominated fields (rendered by `human_bytes`).
BYTES = "bytes"


def _byte_field() -> Any:
    return attrs.field(default=0, metadata={BYTES: True})


def _count_field() -> Any:
    return attrs.field(default=0)


def _human_dict(record: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in attrs.fields(type(record)):
        value = getattr(record, f.name)
        out[f.name] = human_bytes(value) if f.metadata.get(BYTES) else value
    return out


@attrs.define(frozen=True, slots=True)
class HeapSummary:
    allocated_total: int = _byte_field()
    frees: int = _count_field()
    allocations: int = _count_field()
    allocated_at_exit: int = _byte_field()
    blocks_at_exit: int = _count_field()

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    def to_human_dict(self) -> dict[str, Any]:
        return _human_dict(self)


@attrs.define(frozen=True, slots=True)
class LeakSummary:
    definitely_lost: int = _byte_field()
    indirectly_lost: int = _byte_field()
    possibly_lost: int = _byte_field()
    still_reachable: int = _byte_field()
    suppressed: int = _byte_field()
    definitely_lost_blocks: int = _count_field()
    indirectly_lost_blocks: int = _count_field()
    possibly_lost_blocks: int = _count_field()
    still_reachable_blocks: int = _count_field()
    suppressed_blocks: int = _count_field()

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    def to_human_dict(self) -> dict[str, Any]:
        return _human_dict(self)


@attrs.define(frozen=True, slots=True)
class CacheMissSummary:
    """Cachegrind miss rates, in percent."""

    i1_miss_rate: float = 0.0
    lli_miss_rate: float = 0.0
    d1_miss_rate: float = 0.0
    lld_miss_rate: float = 0.0
    ll_miss_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    def to_human_dict(self) -> dict[str, Any]:
        # Rates carry no unit scaling; both forms are the same record.
        return attrs.asdict(self)


Summary = HeapSummary | LeakSummary | CacheMissSummary


@attrs.define(frozen=True, slots=True)
class PrerequisiteCheck:
    check_name: str
    status: CheckStatus
    details: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == "fail"
