from __future__ import annotations

import random
import threading

import pytest
from Crypto.Cipher import DES as RefDES
from Crypto.Cipher import DES3 as RefDES3

from tripledes.libs.crypto import BitArray, PostconditionError, PreconditionError
from tripledes.libs.crypto.cipher import DES, DES3
from tripledes.libs.crypto.cipher.backends import BuiltinDES

_rng = random.Random(20251123)


def randbytes(n: int) -> bytes:
    return bytes(_rng.randrange(0, 256) for _ in range(n))


def make_ref_compatible_key(key_len: int) -> bytes:
    """Generate a DES3 key with proper parity bits."""
    assert key_len in (16, 24)
    for _ in range(1000):
        raw = randbytes(key_len)
        key = RefDES3.adjust_key_parity(raw)
        try:
            RefDES3.new(key, RefDES3.MODE_ECB)
            return key
        except ValueError:
            continue
    raise RuntimeError("Failed to generate a valid DES3 key with correct parity")


def pack56(key: bytes) -> BitArray:
    """Drop the parity bit of every byte, the inverse of ``DES.add_parity``."""
    out = BitArray.create(0)
    for byte in key:
        out = out + BitArray(byte >> 1, 7)
    return out


K1 = "0123456789abcdef"
K2 = "23456789abcdef01"
K3 = "456789abcdef0123"


class RecordingDES:
    """Backend that logs every call and delegates to the built-in DES."""

    name = "recording"

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self._inner = BuiltinDES()

    def encrypt(self, key, plaintext):
        self.calls.append(("E", key.hex()))
        return self._inner.encrypt(key, plaintext)

    def decrypt(self, key, ciphertext):
        self.calls.append(("D", key.hex()))
        return self._inner.decrypt(key, ciphertext)


class ShortDES:
    """Backend that returns 32-bit blocks."""

    name = "short"

    def encrypt(self, key, plaintext):
        return BitArray.create(32)

    def decrypt(self, key, ciphertext):
        return BitArray.create(32)


# ===========================================================
# Known answers
# ===========================================================


@pytest.mark.parametrize(
    ("pt", "ct"),
    [
        ("5468652071756663", "a826fd8ce53b855f"),  # "The qufc"
        ("6b2062726f776e20", "cce21c8112256fe6"),  # "k brown "
        ("666f78206a756d70", "68d5c05dd9b6b900"),  # "fox jump"
    ],
)
def test_three_key_known_answers(pt, ct):
    key = BitArray.from_hex(K1 + K2 + K3)
    assert DES3.encrypt(key, BitArray.from_hex(pt)) == BitArray.from_hex(ct)
    assert DES3.decrypt(key, BitArray.from_hex(ct)) == BitArray.from_hex(pt)


def test_known_answer_with_bytes_returns_bytes():
    key = bytes.fromhex(K1 + K2 + K3)
    ct = DES3.encrypt(key, b"The qufc")
    assert ct == bytes.fromhex("a826fd8ce53b855f")
    assert DES3.decrypt(key, ct) == b"The qufc"


# ===========================================================
# Matches reference
# ===========================================================


@pytest.mark.parametrize("key_len", [16, 24])
@pytest.mark.parametrize("trial", range(4))
def test_des3_encrypt_matches_pycryptodome(key_len, trial):
    key = make_ref_compatible_key(key_len)
    pt = randbytes(8)

    ref = RefDES3.new(key, RefDES3.MODE_ECB)
    assert DES3.encrypt(key, pt) == ref.encrypt(pt)


@pytest.mark.parametrize("key_len", [16, 24])
@pytest.mark.parametrize("trial", range(4))
def test_des3_decrypt_matches_pycryptodome(key_len, trial):
    key = make_ref_compatible_key(key_len)
    pt = randbytes(8)
    ct = RefDES3.new(key, RefDES3.MODE_ECB).encrypt(pt)

    assert DES3.decrypt(key, ct) == pt


# ===========================================================
# Algebraic properties
# ===========================================================


@pytest.mark.parametrize("key_bits", [112, 128, 168, 192])
@pytest.mark.parametrize("trial", range(3))
def test_round_trip(key_bits, trial):
    key = BitArray(_rng.getrandbits(key_bits), key_bits)
    pt = BitArray(_rng.getrandbits(64), 64)
    assert DES3.decrypt(key, DES3.encrypt(key, pt)) == pt


def test_two_key_equals_three_key_with_k3_k1():
    pt = BitArray.from_hex("5468652071756663")
    two = BitArray.from_hex(K1 + K2)
    three = BitArray.from_hex(K1 + K2 + K1)
    assert DES3.encrypt(two, pt) == DES3.encrypt(three, pt)
    assert DES3.decrypt(two, pt) == DES3.decrypt(three, pt)


def test_packed_two_key_equals_three_key_form():
    k1, k2 = randbytes(8), randbytes(8)
    pt = randbytes(8)
    packed = pack56(k1) + pack56(k2)
    assert DES3.encrypt(packed, pt) == DES3.encrypt(k1 + k2 + k1, pt)


@pytest.mark.parametrize("key_len", [16, 24])
def test_packed_form_matches_parity_form(key_len):
    key = make_ref_compatible_key(key_len)
    pt = randbytes(8)
    assert DES3.encrypt(pack56(key), pt) == DES3.encrypt(key, pt)


def test_all_equal_subkeys_reduce_to_single_des():
    k = BitArray.from_hex("133457799bbcdff1")
    pt = BitArray.from_hex("0123456789abcdef")
    expected = BitArray.from_hex("85e813540f0ab405")

    assert DES.encrypt(k, pt) == expected
    assert DES3.encrypt(k + k + k, pt) == expected
    assert DES3.encrypt(k + k, pt) == expected
    assert DES3.decrypt(k + k + k, expected) == pt


def test_all_equal_subkeys_match_reference_single_des():
    key = randbytes(8)
    pt = randbytes(8)
    ref = RefDES.new(key, RefDES.MODE_ECB).encrypt(pt)
    assert DES3.encrypt(key * 3, pt) == ref


def test_deterministic():
    key = make_ref_compatible_key(24)
    pt = randbytes(8)
    results = {DES3.encrypt(key, pt) for _ in range(5)}
    assert len(results) == 1


def test_shared_cipher_across_threads():
    cipher = DES3.TripleDESCipher()
    key = make_ref_compatible_key(24)
    blocks = [randbytes(8) for _ in range(16)]
    expected = [RefDES3.new(key, RefDES3.MODE_ECB).encrypt(b) for b in blocks]
    results: list[bytes | None] = [None] * len(blocks)

    def work(i: int) -> None:
        results[i] = cipher.encrypt(key, blocks[i])

    threads = [threading.Thread(target=work, args=(i,)) for i in range(len(blocks))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results == expected


# ===========================================================
# Sub-key derivation
# ===========================================================


def test_split_two_key_material():
    keys = DES3.split_key_material(BitArray.from_hex(K1 + K2))
    assert isinstance(keys, DES3.TwoKey)
    assert keys.k1 == BitArray.from_hex(K1)
    assert keys.k2 == BitArray.from_hex(K2)
    assert keys.k3 == keys.k1


def test_split_three_key_material():
    keys = DES3.split_key_material(bytes.fromhex(K1 + K2 + K3))
    assert isinstance(keys, DES3.ThreeKey)
    assert (keys.k1.hex(), keys.k2.hex(), keys.k3.hex()) == (K1, K2, K3)


def test_split_packed_material_expands_to_64_bit_keys():
    keys = DES3.split_key_material(BitArray.create(168))
    assert isinstance(keys, DES3.ThreeKey)
    for k in (keys.k1, keys.k2, keys.k3):
        assert k == BitArray.from_hex("0101010101010101")


def test_key_bundles_are_frozen():
    keys = DES3.split_key_material(BitArray.from_hex(K1 + K2))
    with pytest.raises(AttributeError):
        keys.k1 = BitArray.create(64)


def test_encrypt_call_order():
    des = RecordingDES()
    DES3.TripleDESCipher(des).encrypt(
        BitArray.from_hex(K1 + K2 + K3), BitArray.create(64)
    )
    assert des.calls == [("E", K1), ("D", K2), ("E", K3)]


def test_decrypt_call_order():
    des = RecordingDES()
    DES3.TripleDESCipher(des).decrypt(
        BitArray.from_hex(K1 + K2 + K3), BitArray.create(64)
    )
    assert des.calls == [("D", K3), ("E", K2), ("D", K1)]


def test_two_key_call_order_reuses_k1():
    des = RecordingDES()
    DES3.TripleDESCipher(des).encrypt(BitArray.from_hex(K1 + K2), BitArray.create(64))
    assert des.calls == [("E", K1), ("D", K2), ("E", K1)]


# ===========================================================
# Validation
# ===========================================================


@pytest.mark.parametrize(
    "key_bits", [0, 64, 111, 113, 127, 129, 167, 169, 191, 193, 256]
)
def test_rejects_bad_key_material_length(key_bits):
    des = RecordingDES()
    cipher = DES3.TripleDESCipher(des)
    with pytest.raises(PreconditionError):
        cipher.encrypt(BitArray.create(key_bits), BitArray.create(64))
    with pytest.raises(PreconditionError):
        cipher.decrypt(BitArray.create(key_bits), BitArray.create(64))
    assert des.calls == []


@pytest.mark.parametrize("block_bits", [0, 56, 63, 65, 128])
def test_rejects_bad_block_length(block_bits):
    des = RecordingDES()
    cipher = DES3.TripleDESCipher(des)
    with pytest.raises(PreconditionError):
        cipher.encrypt(BitArray.create(128), BitArray.create(block_bits))
    with pytest.raises(PreconditionError):
        cipher.decrypt(BitArray.create(192), BitArray.create(block_bits))
    assert des.calls == []


def test_rejects_bad_byte_lengths():
    with pytest.raises(PreconditionError):
        DES3.encrypt(b"\x00" * 15, b"\x00" * 8)
    with pytest.raises(PreconditionError):
        DES3.encrypt(b"\x00" * 25, b"\x00" * 8)
    with pytest.raises(PreconditionError):
        DES3.decrypt(b"\x00" * 16, b"\x00" * 7)


def test_rejects_none():
    with pytest.raises(PreconditionError):
        DES3.encrypt(None, BitArray.create(64))
    with pytest.raises(PreconditionError):
        DES3.decrypt(BitArray.create(128), None)


def test_precondition_error_is_value_error():
    with pytest.raises(ValueError):
        DES3.encrypt(b"", b"\x00" * 8)


def test_rejects_wrong_types():
    with pytest.raises(TypeError):
        DES3.encrypt("0123456789abcdef" * 2, b"\x00" * 8)


def test_backend_returning_wrong_size_is_postcondition_error():
    cipher = DES3.TripleDESCipher(ShortDES())
    with pytest.raises(PostconditionError):
        cipher.encrypt(BitArray.from_hex(K1 + K2), BitArray.create(64))
