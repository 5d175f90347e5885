"""
Prime field descriptors.

A PrimeField pins one modulus and provides modular arithmetic over plain
Python ints.  Elements are canonical ints in [0, modulus).  The engine is
always built over a fixed pair of descriptors: the wrong (emulated) field
and the native (proving) field.
"""

import random
from dataclasses import dataclass
from typing import Optional

from .reference import (
    add_mod, sub_mod, mul_mod, neg_mod, pow_mod, inv_mod,
    int_from_bytes_le, int_to_bytes_le,
)


@dataclass(frozen=True)
class PrimeField:
    """Prime field Z/pZ.

    Attributes:
        modulus: The prime p.
        name: Short identifier, e.g. "secp256k1_base".
    """
    modulus: int
    name: str = ""

    def __post_init__(self):
        if self.modulus < 2:
            raise ValueError(f"Field modulus must be >= 2, got {self.modulus}")

    @property
    def bit_len(self) -> int:
        return self.modulus.bit_length()

    @property
    def byte_len(self) -> int:
        return (self.bit_len + 7) // 8

    def element(self, x: int) -> int:
        """Reduce an arbitrary int into the field."""
        return int(x) % self.modulus

    def add(self, a: int, b: int) -> int:
        return add_mod(a, b, self.modulus)

    def sub(self, a: int, b: int) -> int:
        return sub_mod(a, b, self.modulus)

    def mul(self, a: int, b: int) -> int:
        return mul_mod(a, b, self.modulus)

    def neg(self, a: int) -> int:
        return neg_mod(a, self.modulus)

    def pow(self, base: int, exp: int) -> int:
        return pow_mod(base, exp, self.modulus)

    def invert(self, a: int) -> Optional[int]:
        """a^{-1}, or None when a is zero."""
        return inv_mod(a, self.modulus)

    def from_bytes_le(self, data: bytes) -> int:
        return self.element(int_from_bytes_le(data))

    def to_bytes_le(self, a: int) -> bytes:
        return int_to_bytes_le(self.element(a), self.byte_len)

    def rand(self, rng: Optional[random.Random] = None) -> int:
        rng = rng or random
        return rng.randrange(self.modulus)
