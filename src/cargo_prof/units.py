from __future__ import annotations

I64_MAX = (1 << 63) - 1

_UNITS: tuple[str, ...] = ("GB", "MB", "KB", "B")


def human_bytes(size: int) -> str:
    """Render a signed byte count as e.g. ``"1GB 3MB 512B"``.

    Zero-valued units are dropped; all arithmetic is integer, so the
    remainder always surfaces at the smallest unit. ``0`` renders as ``"0B"``.
    """
    if size == 0:
        return "0B"

    sign = ""
    if size < 0:
        sign = "-"
        # Magnitude is clamped to the i64 range (-(2**63) has no positive twin).
        size = min(-size, I64_MAX)

    kb, b = divmod(size, 1024)
    mb = kb // 1024
    if mb > 0:
        kb %= 1024
    gb = mb // 1024
    if gb > 0:
        mb %= 1024

    parts = [f"{value}{unit}" for value, unit in zip((gb, mb, kb, b), _UNITS) if value > 0]
    return sign + " ".join(parts)
