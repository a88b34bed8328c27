"""Integer type descriptors and fixed-width integer helpers."""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace
from enum import Enum

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_POINTER_SIZE = struct.calcsize("P")


class TypeKind(Enum):
    """Kind of a value type; VOID marks an error or absent type."""

    VOID = 0
    INT = 1


@dataclass(frozen=True)
class IntType:
    """A type with a kind and a width in bits."""

    kind: TypeKind = TypeKind.VOID
    size: int = 0

    def promote(self, min_bitwidth: int) -> IntType:
        """Return this type widened to at least ``min_bitwidth`` bits."""
        if self.size < min_bitwidth:
            return replace(self, size=min_bitwidth)
        return self

    def byte_size(self) -> int:
        """Width in whole bytes, rounded up."""
        return sizeof_bits(self.size)


def int_type(bitwidth: int) -> IntType:
    """Return an integer type of the given bit width."""
    return IntType(TypeKind.INT, bitwidth)


def sizeof_bits(bitsize: int) -> int:
    """Round a size in bits up to whole bytes."""
    return (bitsize + 7) // 8


def alignof(bytesize: int) -> int:
    """Alignment for a value of ``bytesize`` bytes, capped at pointer size."""
    if bytesize >= _POINTER_SIZE:
        return _POINTER_SIZE
    for alignment in (8, 4, 2):
        if bytesize >= alignment:
            return alignment
    return 1


def native_size(bitwidth: int) -> int:
    """Byte size of the smallest native integer holding ``bitwidth`` bits."""
    for bits, size in ((8, 1), (16, 2), (32, 4), (64, 8)):
        if bitwidth <= bits:
            return size
    raise ValueError(f"integers wider than 64 bits are not supported ({bitwidth} bits)")


def wrap_signed(value: int, bitwidth: int) -> int:
    """Wrap ``value`` into a two's-complement signed integer of ``bitwidth`` bits."""
    if bitwidth <= 0:
        raise ValueError(f"bit width must be positive, got {bitwidth}")
    modulus = 1 << bitwidth
    value %= modulus
    if value >= modulus >> 1:
        value -= modulus
    return value


def _outside_int64(value: int) -> bool:
    return not INT64_MIN <= value <= INT64_MAX


def would_overflow_add(a: int, b: int) -> bool:
    """True if ``a + b`` does not fit in a signed 64-bit integer."""
    return _outside_int64(a + b)


def would_overflow_sub(a: int, b: int) -> bool:
    """True if ``a - b`` does not fit in a signed 64-bit integer."""
    return _outside_int64(a - b)


def would_overflow_mul(a: int, b: int) -> bool:
    """True if ``a * b`` does not fit in a signed 64-bit integer."""
    return _outside_int64(a * b)