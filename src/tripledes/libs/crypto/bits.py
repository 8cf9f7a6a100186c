from __future__ import annotations

import re
from collections.abc import Iterator
from typing import overload

from .errors import PreconditionError

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


class BitArray:
    """Immutable fixed-length sequence of bits.

    Bits are numbered MSB-first: index ``0`` is the most significant bit of
    the first byte, which is the convention used by the DES tables. The value
    is stored as a single integer together with its bit count, so leading zero
    bits are preserved.
    """

    __slots__ = ("_value", "_count")

    def __init__(self, value: int, count: int) -> None:
        """Create a bit block from an integer.

        Args:
            value: Integer whose low ``count`` bits form the block.
            count: Number of bits in the block.

        Raises:
            PreconditionError: If ``count`` is negative or ``value`` does not
                fit in ``count`` bits.
        """
        if count < 0:
            raise PreconditionError(f"Bit count must be non-negative, got {count}")
        if value < 0 or value >> count:
            raise PreconditionError(f"Value does not fit in {count} bits")
        self._value = value
        self._count = count

    @classmethod
    def create(cls, count: int) -> BitArray:
        """Return a zero-filled block of ``count`` bits."""
        return cls(0, count)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> BitArray:
        """Return a block holding the bits of ``data``, 8 per byte."""
        return cls(int.from_bytes(data, "big"), 8 * len(data))

    @classmethod
    def from_hex(cls, text: str) -> BitArray:
        """Return a block from hexadecimal digits, 4 bits per digit.

        Whitespace is ignored so that grouped vectors such as
        ``"01234567 89abcdef"`` can be pasted directly.
        """
        digits = "".join(text.split())
        if not digits:
            return cls.create(0)
        if not _HEX_DIGITS.fullmatch(digits):
            raise PreconditionError(f"Invalid hex string: {text!r}")
        return cls(int(digits, 16), 4 * len(digits))

    @classmethod
    def from_string(cls, text: str) -> BitArray:
        """Return a block from a string of ``0`` and ``1`` characters."""
        if text.strip("01"):
            raise PreconditionError(f"Invalid bit string: {text!r}")
        return cls(int(text, 2) if text else 0, len(text))

    @property
    def count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[int]:
        for shift in range(self._count - 1, -1, -1):
            yield (self._value >> shift) & 1

    @overload
    def __getitem__(self, index: int) -> int: ...

    @overload
    def __getitem__(self, index: slice) -> BitArray: ...

    def __getitem__(self, index: int | slice) -> int | BitArray:
        if isinstance(index, slice):
            start, stop, step = index.indices(self._count)
            if step != 1:
                raise PreconditionError("BitArray slices must be contiguous")
            return self.slice(start, max(0, stop - start))
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError("BitArray index out of range")
        return (self._value >> (self._count - 1 - index)) & 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitArray):
            return NotImplemented
        return self._count == other._count and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._value, self._count))

    def __add__(self, other: BitArray) -> BitArray:
        if not isinstance(other, BitArray):
            return NotImplemented
        return BitArray(
            (self._value << other._count) | other._value,
            self._count + other._count,
        )

    def __repr__(self) -> str:
        if self._count % 4 == 0:
            return f"BitArray.from_hex({self.hex()!r})"
        return f"BitArray.from_string({self.to_string()!r})"

    def slice(self, start: int, count: int) -> BitArray:
        """Return bits ``[start, start + count)`` as a new block.

        Raises:
            PreconditionError: If the range falls outside this block.
        """
        self._check_range(start, count)
        shift = self._count - start - count
        return BitArray((self._value >> shift) & ((1 << count) - 1), count)

    def copy_from(
        self,
        source: BitArray,
        source_start: int,
        destination_start: int,
        count: int,
    ) -> BitArray:
        """Return a copy of this block with a range overwritten from ``source``.

        Bits ``[destination_start, destination_start + count)`` of the result
        are taken from ``source[source_start : source_start + count]``; all
        other bits are unchanged. Neither block is modified.

        Args:
            source: Block to copy bits from.
            source_start: First bit to read in ``source``.
            destination_start: First bit to overwrite in this block.
            count: Number of bits to copy.

        Returns:
            The new block, with the same length as this one.

        Raises:
            PreconditionError: If either range is out of bounds.
        """
        chunk = source.slice(source_start, count)
        self._check_range(destination_start, count)
        shift = self._count - destination_start - count
        mask = ((1 << count) - 1) << shift
        value = (self._value & ~mask) | (chunk._value << shift)
        return BitArray(value, self._count)

    def to_int(self) -> int:
        return self._value

    def to_bytes(self) -> bytes:
        """Return the block as bytes.

        Raises:
            PreconditionError: If the bit count is not a multiple of 8.
        """
        if self._count % 8:
            raise PreconditionError(
                f"Cannot convert {self._count} bits to bytes; not byte aligned"
            )
        return self._value.to_bytes(self._count // 8, "big")

    def hex(self) -> str:
        if self._count % 4:
            raise PreconditionError(
                f"Cannot convert {self._count} bits to hex; not nibble aligned"
            )
        return format(self._value, f"0{self._count // 4}x") if self._count else ""

    def to_string(self) -> str:
        return format(self._value, f"0{self._count}b") if self._count else ""

    def _check_range(self, start: int, count: int) -> None:
        if start < 0 or count < 0 or start + count > self._count:
            raise PreconditionError(
                f"Bit range [{start}, {start + count}) is outside a "
                f"{self._count}-bit block"
            )
