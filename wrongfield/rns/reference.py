"""
Pure-Python reference arithmetic for the wrong-field RNS engine.

Scalar modular helpers used for both the native and the wrong field,
and the limb decompose / compose primitives every Integer is built on.

All operations are exact (integer arithmetic, no floating-point).
"""

from typing import List, Optional


# ---------------------------------------------------------------------------
# Scalar modular arithmetic
# ---------------------------------------------------------------------------

def add_mod(a: int, b: int, p: int) -> int:
    """(a + b) mod p.  Assumes 0 <= a, b < p."""
    s = a + b
    return s - p if s >= p else s


def sub_mod(a: int, b: int, p: int) -> int:
    """(a - b) mod p.  Assumes 0 <= a, b < p."""
    return (a - b) % p


def mul_mod(a: int, b: int, p: int) -> int:
    """(a * b) mod p."""
    return (a * b) % p


def neg_mod(a: int, p: int) -> int:
    """(-a) mod p."""
    return 0 if a == 0 else p - a


def pow_mod(base: int, exp: int, p: int) -> int:
    """base^exp mod p via Python built-in three-arg pow."""
    return pow(base, exp, p)


def inv_mod(a: int, p: int) -> Optional[int]:
    """Modular inverse a^{-1} mod p using Fermat's little theorem.
    Requires p prime.  Returns None if a == 0 mod p."""
    a = a % p
    if a == 0:
        return None
    return pow(a, p - 2, p)


# ---------------------------------------------------------------------------
# Limb decompose / compose
# ---------------------------------------------------------------------------

def decompose(value: int, number_of_limbs: int, bit_len: int) -> List[int]:
    """Split value into number_of_limbs little-endian limbs of bit_len bits.

    Lossless for value < 2^(bit_len * number_of_limbs); higher bits are
    dropped.
    """
    mask = (1 << bit_len) - 1
    limbs = []
    for _ in range(number_of_limbs):
        limbs.append(value & mask)
        value >>= bit_len
    return limbs


def compose(limbs: List[int], bit_len: int) -> int:
    """Inverse of decompose: sum(limb[i] * 2^(i * bit_len)).

    Limbs wider than bit_len are accepted and simply carry into the
    next window.
    """
    value = 0
    for i, limb in enumerate(limbs):
        value += int(limb) << (bit_len * i)
    return value


def bits(value: int) -> int:
    """Bit length of a non-negative integer (0 for 0)."""
    return int(value).bit_length()


# ---------------------------------------------------------------------------
# Byte conversions
# ---------------------------------------------------------------------------

def int_from_bytes_le(data: bytes) -> int:
    return int.from_bytes(data, "little")


def int_to_bytes_le(value: int, length: int) -> bytes:
    return int(value).to_bytes(length, "little")
