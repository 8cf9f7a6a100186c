"""
Interchangeable single-DES backends.

Triple DES only needs two operations from DES, encrypting and decrypting one
block under one key. :class:`BlockCipher` captures that capability so the
composition in :mod:`.DES3` never depends on a concrete DES implementation.
"""

from __future__ import annotations

__all__ = ["BlockCipher", "BuiltinDES", "PyCryptodomeDES", "create_backend"]

from typing import Protocol

from ..bits import BitArray
from . import DES


class BlockCipher(Protocol):
    """Single-block cipher keyed per call.

    Implementations must be stateless (or internally synchronised) so that
    one instance can be shared between threads.
    """

    name: str

    def encrypt(self, key: BitArray, plaintext: BitArray) -> BitArray: ...

    def decrypt(self, key: BitArray, ciphertext: BitArray) -> BitArray: ...


class BuiltinDES:
    """Pure-Python DES from :mod:`.DES`."""

    name = "builtin"

    def encrypt(self, key: BitArray, plaintext: BitArray) -> BitArray:
        return DES.encrypt(key, plaintext)

    def decrypt(self, key: BitArray, ciphertext: BitArray) -> BitArray:
        return DES.decrypt(key, ciphertext)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PyCryptodomeDES:
    """DES through PyCryptodome's ``Crypto.Cipher.DES`` in ECB mode.

    Requires the ``pycryptodome`` extra.
    """

    name = "pycryptodome"

    def __init__(self) -> None:
        from Crypto.Cipher import DES as _DES

        self._des = _DES

    def encrypt(self, key: BitArray, plaintext: BitArray) -> BitArray:
        DES.check_arguments(key, plaintext, "plaintext")
        cipher = self._des.new(key.to_bytes(), self._des.MODE_ECB)
        return BitArray.from_bytes(cipher.encrypt(plaintext.to_bytes()))

    def decrypt(self, key: BitArray, ciphertext: BitArray) -> BitArray:
        DES.check_arguments(key, ciphertext, "ciphertext")
        cipher = self._des.new(key.to_bytes(), self._des.MODE_ECB)
        return BitArray.from_bytes(cipher.decrypt(ciphertext.to_bytes()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def create_backend(name: str) -> BlockCipher:
    """Create a DES backend by name.

    Supported backends:
        * "builtin"
        * "pycryptodome"

    Args:
        name: Name of the backend to use.

    Returns:
        BlockCipher: A ready-to-use backend instance.

    Raises:
        ValueError: If the backend name is not supported.
        ImportError: If the backend's library is not installed.
    """
    match name:
        case "builtin":
            return BuiltinDES()
        case "pycryptodome":
            return PyCryptodomeDES()
        case _:
            raise ValueError(f"Unsupported backend: {name!r}")
