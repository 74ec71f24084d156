"""32-bit sequence numbers that wrap around relative to a zero point."""

from __future__ import annotations

from dataclasses import dataclass

_MOD32 = 1 << 32
_MASK32 = _MOD32 - 1
_MASK64 = (1 << 64) - 1
_HALF32 = 1 << 31


@dataclass(frozen=True)
class Wrap32:
    """A 32-bit unsigned value that starts at an arbitrary point and wraps at 2**32."""

    raw_value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_value", self.raw_value & _MASK32)

    @staticmethod
    def wrap(n: int, zero_point: Wrap32) -> Wrap32:
        """Wrap the absolute sequence number ``n`` relative to ``zero_point``."""
        return zero_point + (n & _MASK32)

    def unwrap(self, zero_point: Wrap32, checkpoint: int) -> int:
        """Return the absolute sequence number nearest ``checkpoint`` that wraps to this value."""
        diff = (self.raw_value - Wrap32.wrap(checkpoint, zero_point).raw_value) & _MASK32
        absolute = (checkpoint + diff) & _MASK64
        if diff >= _HALF32 and absolute >= _MOD32:
            absolute -= _MOD32
        return absolute

    def __add__(self, n: int) -> Wrap32:
        return Wrap32(self.raw_value + n)

    def __str__(self) -> str:
        return f"Wrap32<{self.raw_value}>"