"""
Limb / Integer representation of wrong-field values.

An Integer is a fixed tuple of NUMBER_OF_LIMBS native-field limbs,
little-endian, each nominally bit_len_limb bits wide:

    value = sum(limb[i] * 2^(i * bit_len_limb))

Limbs may exceed 2^bit_len_limb (unreduced integers after additions);
compose() carries them into the next window.
"""

from dataclasses import dataclass
from typing import List, Union

from .reference import decompose, compose, int_from_bytes_le, int_to_bytes_le

NUMBER_OF_LIMBS = 4
NUMBER_OF_LOOKUP_LIMBS = 4


@dataclass(frozen=True)
class Limb:
    """One native-field element read as an unsigned window."""
    value: int

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"Limb value must be non-negative, got {self.value}")


@dataclass(frozen=True)
class Integer:
    """Multi-limb integer.

    Attributes:
        limbs: NUMBER_OF_LIMBS limbs, least significant first.
        bit_len_limb: Window width in bits.
    """
    limbs: tuple
    bit_len_limb: int

    def __post_init__(self):
        if len(self.limbs) != NUMBER_OF_LIMBS:
            raise ValueError(
                f"Integer needs {NUMBER_OF_LIMBS} limbs, got {len(self.limbs)}"
            )

    @classmethod
    def from_limbs(cls, limbs: List[int], bit_len_limb: int) -> "Integer":
        return cls(tuple(Limb(int(v)) for v in limbs), bit_len_limb)

    @classmethod
    def from_big(cls, value: int, bit_len_limb: int,
                 number_of_limbs: int = NUMBER_OF_LIMBS) -> "Integer":
        if value < 0:
            raise ValueError("Integer value must be non-negative")
        return cls.from_limbs(decompose(value, number_of_limbs, bit_len_limb),
                              bit_len_limb)

    @classmethod
    def from_bytes_le(cls, data: bytes, bit_len_limb: int) -> "Integer":
        return cls.from_big(int_from_bytes_le(data), bit_len_limb)

    def to_bytes_le(self, length: int) -> bytes:
        return int_to_bytes_le(self.value(), length)

    def limb_values(self) -> List[int]:
        return [limb.value for limb in self.limbs]

    def limb_value(self, idx: int) -> int:
        return self.limbs[idx].value

    def value(self) -> int:
        return compose(self.limb_values(), self.bit_len_limb)

    def native(self, native_modulus: int) -> int:
        """Value reduced into the native field (the CRT cross-check term)."""
        return self.value() % native_modulus

    def add(self, other: "Integer") -> "Integer":
        """Limbwise sum, no carry propagation and no reduction."""
        limbs = [a + b for a, b in zip(self.limb_values(), other.limb_values())]
        return Integer.from_limbs(limbs, self.bit_len_limb)

    def __repr__(self) -> str:
        limbs = ", ".join(hex(v) for v in self.limb_values())
        return f"Integer(value={hex(self.value())}, limbs=[{limbs}])"


# ---------------------------------------------------------------------------
# Operation outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ShortQuotient:
    """Reduction quotient: a single native-field element."""
    value: int


@dataclass(frozen=True)
class LongQuotient:
    """Multiplication quotient: a full Integer."""
    integer: Integer

    @property
    def value(self) -> int:
        return self.integer.value()


Quotient = Union[ShortQuotient, LongQuotient]


@dataclass(frozen=True)
class ReductionContext:
    """Witnesses for one reduce or mul.

    Attributes:
        result: Remainder Integer, value < 2^bits(wrong_modulus).
        quotient: ShortQuotient (reduce) or LongQuotient (mul).
        t: Intermediate window terms, one per limb.
        u0, u1: Two-limb residues (native field).
        v0, v1: Carries, u / 2^(2 * bit_len_limb).
    """
    result: Integer
    quotient: Quotient
    t: List[int]
    u0: int
    u1: int
    v0: int
    v1: int


@dataclass(frozen=True)
class ComparisonResult:
    """(wrong_modulus - 1) - integer, with per-limb borrow flags."""
    result: Integer
    borrow: List[bool]
