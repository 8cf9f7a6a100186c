"""
Single-block DES primitive.

Keys and blocks are 64-bit :class:`~tripledes.libs.crypto.bits.BitArray`
values. The low bit of every key byte is a parity bit and is ignored by the
key schedule.
"""

from __future__ import annotations

import functools

from ..bits import BitArray
from ..errors import PreconditionError

block_size = 64
key_size = 64

# fmt: off
IP = [
    58, 50, 42, 34, 26, 18, 10, 2,
    60, 52, 44, 36, 28, 20, 12, 4,
    62, 54, 46, 38, 30, 22, 14, 6,
    64, 56, 48, 40, 32, 24, 16, 8,
    57, 49, 41, 33, 25, 17, 9,  1,
    59, 51, 43, 35, 27, 19, 11, 3,
    61, 53, 45, 37, 29, 21, 13, 5,
    63, 55, 47, 39, 31, 23, 15, 7,
]

FP = [
    40, 8, 48, 16, 56, 24, 64, 32,
    39, 7, 47, 15, 55, 23, 63, 31,
    38, 6, 46, 14, 54, 22, 62, 30,
    37, 5, 45, 13, 53, 21, 61, 29,
    36, 4, 44, 12, 52, 20, 60, 28,
    35, 3, 43, 11, 51, 19, 59, 27,
    34, 2, 42, 10, 50, 18, 58, 26,
    33, 1, 41, 9,  49, 17, 57, 25,
]

E = [
    32, 1,  2,  3,  4,  5,
    4,  5,  6,  7,  8,  9,
    8,  9,  10, 11, 12, 13,
    12, 13, 14, 15, 16, 17,
    16, 17, 18, 19, 20, 21,
    20, 21, 22, 23, 24, 25,
    24, 25, 26, 27, 28, 29,
    28, 29, 30, 31, 32, 1,
]

P = [
    16, 7,  20, 21,
    29, 12, 28, 17,
    1,  15, 23, 26,
    5,  18, 31, 10,
    2,  8,  24, 14,
    32, 27, 3,  9,
    19, 13, 30, 6,
    22, 11, 4,  25,
]

PC1 = [
    57, 49, 41, 33, 25, 17, 9,
    1,  58, 50, 42, 34, 26, 18,
    10, 2,  59, 51, 43, 35, 27,
    19, 11, 3,  60, 52, 44, 36,
    63, 55, 47, 39, 31, 23, 15,
    7,  62, 54, 46, 38, 30, 22,
    14, 6,  61, 53, 45, 37, 29,
    21, 13, 5,  28, 20, 12, 4,
]

PC2 = [
    14, 17, 11, 24, 1,  5,
    3,  28, 15, 6,  21, 10,
    23, 19, 12, 4,  26, 8,
    16, 7,  27, 20, 13, 2,
    41, 52, 31, 37, 47, 55,
    30, 40, 51, 45, 33, 48,
    44, 49, 39, 56, 34, 53,
    46, 42, 50, 36, 29, 32,
]

SHIFTS = [1, 1, 2, 2, 2, 2, 2, 2, 1, 2, 2, 2, 2, 2, 2, 1]

SBOXES = [
    # S1
    [
        [14, 4,  13, 1,  2,  15, 11, 8,  3,  10, 6,  12, 5,  9,  0,  7],
        [0,  15, 7,  4,  14, 2,  13, 1,  10, 6,  12, 11, 9,  5,  3,  8],
        [4,  1,  14, 8,  13, 6,  2,  11, 15, 12, 9,  7,  3,  10, 5,  0],
        [15, 12, 8,  2,  4,  9,  1,  7,  5,  11, 3,  14, 10, 0,  6,  13],
    ],
    # S2
    [
        [15, 1,  8,  14, 6,  11, 3,  4,  9,  7,  2,  13, 12, 0,  5,  10],
        [3,  13, 4,  7,  15, 2,  8,  14, 12, 0,  1,  10, 6,  9,  11, 5],
        [0,  14, 7,  11, 10, 4,  13, 1,  5,  8,  12, 6,  9,  3,  2,  15],
        [13, 8,  10, 1,  3,  15, 4,  2,  11, 6,  7,  12, 0,  5,  14, 9],
    ],
    # S3
    [
        [10, 0,  9,  14, 6,  3,  15, 5,  1,  13, 12, 7,  11, 4,  2,  8],
        [13, 7,  0,  9,  3,  4,  6,  10, 2,  8,  5,  14, 12, 11, 15, 1],
        [13, 6,  4,  9,  8,  15, 3,  0,  11, 1,  2,  12, 5,  10, 14, 7],
        [1,  10, 13, 0,  6,  9,  8,  7,  4,  15, 14, 3,  11, 5,  2,  12],
    ],
    # S4
    [
        [7,  13, 14, 3,  0,  6,  9,  10, 1,  2,  8,  5,  11, 12, 4,  15],
        [13, 8,  11, 5,  6,  15, 0,  3,  4,  7,  2,  12, 1,  10, 14, 9],
        [10, 6,  9,  0,  12, 11, 7,  13, 15, 1,  3,  14, 5,  2,  8,  4],
        [3,  15, 0,  6,  10, 1,  13, 8,  9,  4,  5,  11, 12, 7,  2,  14],
    ],
    # S5
    [
        [2,  12, 4,  1,  7,  10, 11, 6,  8,  5,  3,  15, 13, 0,  14, 9],
        [14, 11, 2,  12, 4,  7,  13, 1,  5,  0,  15, 10, 3,  9,  8,  6],
        [4,  2,  1,  11, 10, 13, 7,  8,  15, 9,  12, 5,  6,  3,  0,  14],
        [11, 8,  12, 7,  1,  14, 2,  13, 6,  15, 0,  9,  10, 4,  5,  3],
    ],
    # S6
    [
        [12, 1,  10, 15, 9,  2,  6,  8,  0,  13, 3,  4,  14, 7,  5,  11],
        [10, 15, 4,  2,  7,  12, 9,  5,  6,  1,  13, 14, 0,  11, 3,  8],
        [9,  14, 15, 5,  2,  8,  12, 3,  7,  0,  4,  10, 1,  13, 11, 6],
        [4,  3,  2,  12, 9,  5,  15, 10, 11, 14, 1,  7,  6,  0,  8,  13],
    ],
    # S7
    [
        [4,  11, 2,  14, 15, 0,  8,  13, 3,  12, 9,  7,  5,  10, 6,  1],
        [13, 0,  11, 7,  4,  9,  1,  10, 14, 3,  5,  12, 2,  15, 8,  6],
        [1,  4,  11, 13, 12, 3,  7,  14, 10, 15, 6,  8,  0,  5,  9,  2],
        [6,  11, 13, 8,  1,  4,  10, 7,  9,  5,  0,  15, 14, 2,  3,  12],
    ],
    # S8
    [
        [13, 2,  8,  4,  6,  15, 11, 1,  10, 9,  3,  14, 5,  0,  12, 7],
        [1,  15, 13, 8,  10, 3,  7,  4,  12, 5,  6,  11, 0,  14, 9,  2],
        [7,  11, 4,  1,  9,  12, 14, 2,  0,  6,  10, 13, 15, 3,  5,  8],
        [2,  1,  14, 7,  4,  10, 8,  13, 15, 12, 9,  0,  3,  5,  6,  11],
    ],
]
# fmt: on


def _permute(x: int, table: list[int], in_bits: int) -> int:
    """Apply a DES permutation table.

    The table contains 1-based bit positions. Bits are read MSB-first.
    """
    out = 0
    for pos in table:
        out = (out << 1) | ((x >> (in_bits - pos)) & 1)
    return out


def _rotl28(x: int, n: int) -> int:
    return ((x << n) & 0x0FFFFFFF) | (x >> (28 - n))


def _feistel(r: int, subkey: int) -> int:
    """Round function f(R, K): expand, mix with the subkey, substitute, permute."""
    x = _permute(r, E, 32) ^ subkey

    out32 = 0
    for i in range(8):
        chunk = (x >> (42 - 6 * i)) & 0x3F
        row = ((chunk & 0x20) >> 4) | (chunk & 0x01)
        col = (chunk >> 1) & 0x0F
        out32 = (out32 << 4) | SBOXES[i][row][col]

    return _permute(out32, P, 32)


@functools.lru_cache(maxsize=64)
def _key_schedule(key64: int) -> tuple[int, ...]:
    """Return the 16 round keys for a 64-bit key.

    PC-1 drops the parity bits, so keys differing only in parity share a
    schedule.
    """
    key56 = _permute(key64, PC1, 64)
    c = (key56 >> 28) & 0x0FFFFFFF
    d = key56 & 0x0FFFFFFF

    subkeys: list[int] = []
    for shift in SHIFTS:
        c = _rotl28(c, shift)
        d = _rotl28(d, shift)
        subkeys.append(_permute((c << 28) | d, PC2, 56))
    return tuple(subkeys)


def check_arguments(key: BitArray, block: BitArray, block_name: str) -> None:
    if key is None:
        raise PreconditionError("key must not be None")
    if not isinstance(key, BitArray):
        raise TypeError(f"key must be BitArray, not {type(key).__name__}")
    if key.count != key_size:
        raise PreconditionError(f"DES key must be {key_size} bits, got {key.count}")
    if block is None:
        raise PreconditionError(f"{block_name} must not be None")
    if not isinstance(block, BitArray):
        raise TypeError(f"{block_name} must be BitArray, not {type(block).__name__}")
    if block.count != block_size:
        raise PreconditionError(
            f"{block_name} must be {block_size} bits, got {block.count}"
        )


def _crypt_block(key: BitArray, block: BitArray, decrypt: bool) -> BitArray:
    keys = _key_schedule(key.to_int())
    if decrypt:
        keys = keys[::-1]

    ip = _permute(block.to_int(), IP, 64)
    left = (ip >> 32) & 0xFFFFFFFF
    right = ip & 0xFFFFFFFF

    for k in keys:
        left, right = right, left ^ _feistel(right, k)

    # Preoutput is R16 || L16
    return BitArray(_permute((right << 32) | left, FP, 64), block_size)


def encrypt(key: BitArray, plaintext: BitArray) -> BitArray:
    """Encrypt a single 64-bit block.

    Args:
        key: 64-bit DES key. Parity bits are ignored.
        plaintext: 64-bit plaintext block.

    Returns:
        The 64-bit ciphertext block.

    Raises:
        PreconditionError: If an argument is missing or has the wrong length.
    """
    check_arguments(key, plaintext, "plaintext")
    return _crypt_block(key, plaintext, decrypt=False)


def decrypt(key: BitArray, ciphertext: BitArray) -> BitArray:
    """Decrypt a single 64-bit block.

    Args:
        key: 64-bit DES key. Parity bits are ignored.
        ciphertext: 64-bit ciphertext block.

    Returns:
        The 64-bit plaintext block.

    Raises:
        PreconditionError: If an argument is missing or has the wrong length.
    """
    check_arguments(key, ciphertext, "ciphertext")
    return _crypt_block(key, ciphertext, decrypt=True)


def add_parity(key56: BitArray) -> BitArray:
    """Expand a packed 56-bit key into a 64-bit key with odd parity bits.

    Each group of 7 key bits becomes the high 7 bits of one key byte; the low
    bit is set so that the byte has an odd number of ones.

    Raises:
        PreconditionError: If ``key56`` is not 56 bits long.
    """
    if key56.count != 56:
        raise PreconditionError(f"Packed DES key must be 56 bits, got {key56.count}")
    value = key56.to_int()
    out = 0
    for i in range(8):
        seven = (value >> (49 - 7 * i)) & 0x7F
        parity = (bin(seven).count("1") + 1) & 1
        out = (out << 8) | (seven << 1) | parity
    return BitArray(out, key_size)
