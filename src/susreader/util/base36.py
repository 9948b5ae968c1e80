from __future__ import annotations

DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

def b36(text: str) -> int:
    """'01' -> 1, 'zz' -> 1295. Groß-/Kleinschreibung egal."""
    return int(text, 36)

def to_b36(value: int, width: int = 2) -> str:
    if value < 0:
        raise ValueError(f"negative base-36 value: {value}")
    out = ""
    while value:
        value, rem = divmod(value, 36)
        out = DIGITS[rem] + out
    return out.rjust(width, "0")