"""
Triple DES (TDEA) in the Encrypt-Decrypt-Encrypt construction.

The key material is a bundle of two or three DES keys, either parity-bearing
(64 bits each) or packed (56 bits each)::

    bits   keys   form
    ----   ----   -----------------------------------
    112    2      packed, K3 = K1
    128    2      parity-bearing, K3 = K1
    168    3      packed
    192    3      parity-bearing

Encryption is ``E(K3, D(K2, E(K1, P)))`` and decryption is the exact inverse
``D(K1, E(K2, D(K3, C)))``. Both operate on exactly one 64-bit block.
"""

from __future__ import annotations

__all__ = [
    "TripleDESCipher",
    "TwoKey",
    "ThreeKey",
    "KeyBundle",
    "split_key_material",
    "encrypt",
    "decrypt",
]

import logging
from dataclasses import dataclass

from ..bits import BitArray
from ..errors import PostconditionError, PreconditionError
from . import DES
from .backends import BlockCipher, BuiltinDES

logger = logging.getLogger(__name__)

block_size = DES.block_size

# bit length -> (number of keys, bits per key)
_KEY_FORMS: dict[int, tuple[int, int]] = {
    112: (2, 56),
    128: (2, 64),
    168: (3, 56),
    192: (3, 64),
}
key_size = tuple(_KEY_FORMS)

Data = BitArray | bytes | bytearray


@dataclass(frozen=True, slots=True)
class TwoKey:
    """Two-key bundle (keying option 2). The third key is the first one."""

    k1: BitArray
    k2: BitArray

    @property
    def k3(self) -> BitArray:
        return self.k1


@dataclass(frozen=True, slots=True)
class ThreeKey:
    """Three independent keys (keying option 1)."""

    k1: BitArray
    k2: BitArray
    k3: BitArray


KeyBundle = TwoKey | ThreeKey


def _as_bits(value: Data | None, name: str) -> BitArray:
    if value is None:
        raise PreconditionError(f"{name} must not be None")
    if isinstance(value, BitArray):
        return value
    if isinstance(value, (bytes, bytearray)):
        return BitArray.from_bytes(value)
    raise TypeError(
        f"{name} must be BitArray, bytes or bytearray, not {type(value).__name__}"
    )


def split_key_material(key_material: Data | None) -> KeyBundle:
    """Split key material into its DES sub-keys.

    Packed 56-bit keys are expanded to 64 bits with :func:`DES.add_parity`, so
    the returned sub-keys are always 64-bit DES keys.

    Args:
        key_material: 112, 128, 168 or 192 bits of key material.

    Returns:
        TwoKey or ThreeKey: The derived sub-keys.

    Raises:
        PreconditionError: If the key material is missing or has an
            unsupported length.
    """
    bits = _as_bits(key_material, "key_material")
    form = _KEY_FORMS.get(bits.count)
    if form is None:
        raise PreconditionError(
            f"key_material must be one of {key_size} bits, got {bits.count}"
        )
    nkeys, width = form

    keys = []
    for i in range(nkeys):
        k = BitArray.create(width).copy_from(bits, i * width, 0, width)
        keys.append(k if width == DES.key_size else DES.add_parity(k))

    if nkeys == 2:
        return TwoKey(keys[0], keys[1])
    return ThreeKey(keys[0], keys[1], keys[2])


class TripleDESCipher:
    """Triple DES bound to a single-DES backend.

    The instance holds no per-call state; any number of threads may share it
    as long as the backend is reentrant.
    """

    __slots__ = ("_des",)

    def __init__(self, backend: BlockCipher | None = None) -> None:
        """Initialize the cipher.

        Args:
            backend: Single-DES implementation. Defaults to :class:`BuiltinDES`.
        """
        self._des = backend if backend is not None else BuiltinDES()

    @property
    def backend(self) -> BlockCipher:
        return self._des

    def encrypt(self, key_material: Data, plaintext: Data) -> Data:
        """Encrypt one 64-bit block (EDE).

        Args:
            key_material: Two or three packed DES keys. See the module
                docstring for accepted lengths.
            plaintext: 64-bit plaintext block.

        Returns:
            The 64-bit ciphertext block, as ``bytes`` if ``plaintext`` was
            bytes-like and as a :class:`BitArray` otherwise.

        Raises:
            PreconditionError: If an argument is missing or has the wrong
                length. Raised before any DES operation runs.
            TypeError: If an argument has an unsupported type.
        """
        keys, block = self._prepare(key_material, plaintext, "plaintext")
        x = self._des.encrypt(keys.k1, block)
        x = self._des.decrypt(keys.k2, x)
        x = self._des.encrypt(keys.k3, x)
        return self._finish(x, plaintext)

    def decrypt(self, key_material: Data, ciphertext: Data) -> Data:
        """Decrypt one 64-bit block (DED).

        Args:
            key_material: The key material used for encryption.
            ciphertext: 64-bit ciphertext block.

        Returns:
            The 64-bit plaintext block, as ``bytes`` if ``ciphertext`` was
            bytes-like and as a :class:`BitArray` otherwise.

        Raises:
            PreconditionError: If an argument is missing or has the wrong
                length. Raised before any DES operation runs.
            TypeError: If an argument has an unsupported type.
        """
        keys, block = self._prepare(key_material, ciphertext, "ciphertext")
        x = self._des.decrypt(keys.k3, block)
        x = self._des.encrypt(keys.k2, x)
        x = self._des.decrypt(keys.k1, x)
        return self._finish(x, ciphertext)

    def _prepare(
        self,
        key_material: Data,
        data: Data,
        name: str,
    ) -> tuple[KeyBundle, BitArray]:
        keys = split_key_material(key_material)
        block = _as_bits(data, name)
        if block.count != block_size:
            raise PreconditionError(
                f"{name} must be {block_size} bits, got {block.count}"
            )
        logger.debug(
            "3DES %s-key mode via %s backend",
            "two" if isinstance(keys, TwoKey) else "three",
            self._des.name,
        )
        return keys, block

    @staticmethod
    def _finish(result: BitArray, data: Data) -> Data:
        if not isinstance(result, BitArray) or result.count != block_size:
            raise PostconditionError(
                f"DES backend returned {result!r}; expected a {block_size}-bit block"
            )
        if isinstance(data, (bytes, bytearray)):
            return result.to_bytes()
        return result


_default = TripleDESCipher()


def encrypt(key_material: Data, plaintext: Data) -> Data:
    """Encrypt one block with the built-in DES backend."""
    return _default.encrypt(key_material, plaintext)


def decrypt(key_material: Data, ciphertext: Data) -> Data:
    """Decrypt one block with the built-in DES backend."""
    return _default.decrypt(key_material, ciphertext)
