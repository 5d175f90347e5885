"""
RNS parameter set and witness algorithms for wrong-field arithmetic.

An Rns is derived once from bit_len_limb and a (wrong, native) field pair.
Every bound, shifter and overflow length the integer gadgets need is
computed here, and every soundness inequality is checked before the
object is handed out.

Soundness rests on the CRT modulus  binary_modulus * native_modulus:
a relation checked both modulo 2^(4 * bit_len_limb) (limbwise, via the
residue windows) and modulo the native modulus (via native values) holds
over the integers as long as both sides stay below the CRT modulus.

Witness algorithms:
  reduce(a)     -> a = q * w + r, q a single limb
  mul(a, b)     -> a * b = q * w + r, q a full Integer
  residues(t,r) -> two-window carry check shared by both
  make_aux(max) -> multiple of w dominating b's limbs, for a - b
  compare_to_modulus(a) -> (w - 1) - a with borrows
"""

from dataclasses import dataclass
from typing import List, Optional

from ..errors import SoundnessError, ensure
from .field import PrimeField
from .integer import (
    Integer, ShortQuotient, LongQuotient, ReductionContext, ComparisonResult,
    NUMBER_OF_LIMBS, NUMBER_OF_LOOKUP_LIMBS,
)
from .reference import decompose, compose, bits


def _calculate_base_aux(wrong_modulus: int, bit_len_limb: int) -> List[int]:
    """Limbs of a multiple of w where each limb can absorb a subtraction.

    Starts from 2 * w and, walking from the top limb down, moves one unit
    of the higher limb into the lower one whenever the lower limb is
    narrower than bit_len_limb + 1 bits.
    """
    r = 1 << bit_len_limb
    base_aux = [limb << 1 for limb in decompose(wrong_modulus, NUMBER_OF_LIMBS, bit_len_limb)]

    for i in range(NUMBER_OF_LIMBS - 1):
        hidx = NUMBER_OF_LIMBS - i - 1
        lidx = hidx - 1
        if bits(base_aux[lidx]) < bit_len_limb + 1:
            base_aux[hidx] -= 1
            base_aux[lidx] += r

    return base_aux


def _residue_carries(t: List[int], bit_len_limb: int):
    """Integer-only residue windows used by the bound simulation."""
    u0 = t[0] + (t[1] << bit_len_limb)
    u1 = t[2] + (t[3] << bit_len_limb)
    u1 = u1 + (u0 >> (2 * bit_len_limb))
    v0 = u0 >> (2 * bit_len_limb)
    v1 = u1 >> (2 * bit_len_limb)
    return v0, v1


@dataclass(frozen=True)
class Rns:
    """Immutable RNS parameter bundle for one (wrong, native) pair.

    Build with Rns.construct(); never instantiate field by field.
    """
    wrong: PrimeField
    native: PrimeField

    bit_len_limb: int
    bit_len_lookup: int

    wrong_modulus: int
    native_modulus: int
    binary_modulus: int
    crt_modulus: int

    right_shifter_r: int
    right_shifter_2r: int
    left_shifter_r: int
    left_shifter_2r: int
    left_shifter_3r: int

    base_aux: Integer

    negative_wrong_modulus_decomposed: tuple
    wrong_modulus_decomposed: tuple
    wrong_modulus_minus_one: Integer
    wrong_modulus_in_native_modulus: int

    max_reduced_limb: int
    max_unreduced_limb: int
    max_remainder: int
    max_operand: int
    max_mul_quotient: int
    max_reducible_value: int
    max_with_max_unreduced_limbs: int
    max_dense_value: int

    max_most_significant_reduced_limb: int
    max_most_significant_operand_limb: int
    max_most_significant_unreduced_limb: int
    max_most_significant_mul_quotient_limb: int

    mul_v0_overflow: int
    mul_v1_overflow: int
    red_v0_overflow: int
    red_v1_overflow: int

    two_limb_mask: int

    # -- construction -------------------------------------------------------

    @classmethod
    def construct(cls, bit_len_limb: int, wrong: PrimeField, native: PrimeField,
                  number_of_lookup_limbs: int = NUMBER_OF_LOOKUP_LIMBS) -> "Rns":
        """Derive and validate every parameter.

        Raises:
            SoundnessError: if any bound inequality fails.
        """
        if bit_len_limb <= 0:
            raise ValueError(f"bit_len_limb must be positive, got {bit_len_limb}")

        L = bit_len_limb
        wrong_modulus = wrong.modulus
        native_modulus = native.modulus
        binary_modulus = 1 << (L * NUMBER_OF_LIMBS)

        ensure(binary_modulus > wrong_modulus,
               "binary modulus must exceed wrong modulus")
        ensure(binary_modulus > native_modulus,
               "binary modulus must exceed native modulus")
        ensure(binary_modulus * native_modulus > wrong_modulus * wrong_modulus,
               "crt modulus must exceed wrong_modulus^2")

        two_inv = native.invert(2)
        right_shifter_r = native.pow(two_inv, L)
        right_shifter_2r = native.pow(two_inv, 2 * L)
        left_shifter_r = native.pow(2, L)
        left_shifter_2r = native.pow(2, 2 * L)
        left_shifter_3r = native.pow(2, 3 * L)

        wrong_modulus_in_native_modulus = wrong_modulus % native_modulus
        negative_wrong_modulus_decomposed = tuple(
            decompose(binary_modulus - wrong_modulus, NUMBER_OF_LIMBS, L))
        wrong_modulus_decomposed = tuple(decompose(wrong_modulus, NUMBER_OF_LIMBS, L))
        wrong_modulus_minus_one = Integer.from_big(wrong_modulus - 1, L)

        two_limb_mask = (1 << (2 * L)) - 1

        crt_modulus = binary_modulus * native_modulus
        crt_modulus_bit_len = bits(crt_modulus)

        # n * T > a' * a'
        pre_max_operand_bit_len = crt_modulus_bit_len // 2 - 1
        pre_max_operand = (1 << pre_max_operand_bit_len) - 1

        # n * T > q * w + r
        max_remainder = (1 << bits(wrong_modulus)) - 1

        pre_max_mul_quotient = (crt_modulus - max_remainder) // wrong_modulus
        max_mul_quotient = (1 << (bits(pre_max_mul_quotient) - 1)) - 1

        max_operand_bit_len = bits(max_mul_quotient * wrong_modulus + max_remainder) // 2 - 1
        max_operand = (1 << max_operand_bit_len) - 1

        max_reduced_limb = (1 << L) - 1
        max_unreduced_limb = (1 << (L + L // 2)) - 1

        ensure(crt_modulus > pre_max_operand * pre_max_operand,
               "crt modulus must exceed pre_max_operand^2")
        ensure(pre_max_operand > wrong_modulus,
               "pre_max_operand must exceed wrong modulus")
        ensure(crt_modulus > max_mul_quotient * wrong_modulus + max_remainder,
               "crt modulus must exceed max_mul_quotient * w + max_remainder")
        ensure(max_mul_quotient > wrong_modulus,
               "max_mul_quotient must exceed wrong modulus")
        ensure(max_operand <= pre_max_operand,
               "max_operand must not exceed pre_max_operand")
        ensure(max_operand > wrong_modulus,
               "max_operand must exceed wrong modulus")
        ensure(crt_modulus > max_operand * max_operand,
               "crt modulus must exceed max_operand^2")
        ensure(max_mul_quotient * wrong_modulus + max_remainder > max_operand * max_operand,
               "max_mul_quotient * w + max_remainder must exceed max_operand^2")

        top_shift = (NUMBER_OF_LIMBS - 1) * L
        max_most_significant_reduced_limb = max_remainder >> top_shift
        max_most_significant_operand_limb = max_operand >> top_shift
        max_most_significant_unreduced_limb = max_unreduced_limb
        max_most_significant_mul_quotient_limb = max_mul_quotient >> top_shift

        ensure(bits(max_most_significant_reduced_limb) < L,
               "most significant reduced limb must be narrower than a limb")
        ensure(bits(max_most_significant_operand_limb) < L,
               "most significant operand limb must be narrower than a limb")
        ensure(bits(max_most_significant_mul_quotient_limb) <= L,
               "most significant mul quotient limb must fit a limb")

        # reduction quotient is limited to a single limb
        max_reduction_quotient = max_reduced_limb
        max_reducible_value = max_reduction_quotient * wrong_modulus + max_remainder
        max_with_max_unreduced_limbs = compose([max_unreduced_limb] * NUMBER_OF_LIMBS, L)
        ensure(max_reducible_value > max_with_max_unreduced_limbs,
               "max reducible value must exceed the max unreduced integer")
        max_dense_value = compose([max_reduced_limb] * NUMBER_OF_LIMBS, L)

        p = list(negative_wrong_modulus_decomposed)

        # emulate multiplication to find out max residue overflows
        a = [max_reduced_limb] * (NUMBER_OF_LIMBS - 1) + [max_most_significant_operand_limb]
        q = [max_reduced_limb] * (NUMBER_OF_LIMBS - 1) + [max_most_significant_mul_quotient_limb]
        t = [0] * (2 * NUMBER_OF_LIMBS - 1)
        for i in range(NUMBER_OF_LIMBS):
            for j in range(NUMBER_OF_LIMBS):
                t[i + j] += a[i] * a[j] + p[i] * q[j]
        mul_v0_max, mul_v1_max = _residue_carries(t, L)
        mul_v0_overflow = max(0, bits(mul_v0_max) - L)
        mul_v1_overflow = max(0, bits(mul_v1_max) - L)

        # emulate reduction to find out max residue overflows
        a = [max_unreduced_limb] * NUMBER_OF_LIMBS
        q_max = compose(a, L) // wrong_modulus
        ensure(q_max < (1 << L), "max reduction quotient must fit a limb")
        t = [a_i + max_reduced_limb * p_i for a_i, p_i in zip(a, p)]
        red_v0_max, red_v1_max = _residue_carries(t, L)
        red_v0_overflow = max(0, bits(red_v0_max) - L)
        red_v1_overflow = max(0, bits(red_v1_max) - L)

        bit_len_lookup = L // number_of_lookup_limbs
        ensure(bit_len_lookup * number_of_lookup_limbs == L,
               "bit_len_limb must split evenly into lookup limbs")

        base_aux = Integer.from_limbs(_calculate_base_aux(wrong_modulus, L), L)
        ensure(base_aux.value() % wrong_modulus == 0,
               "base aux must be a multiple of the wrong modulus")
        ensure(base_aux.value() > max_remainder,
               "base aux must exceed max remainder")
        for i in range(NUMBER_OF_LIMBS):
            is_last_limb = i == NUMBER_OF_LIMBS - 1
            target = max_most_significant_reduced_limb if is_last_limb else max_reduced_limb
            ensure(base_aux.limb_value(i) >= target,
                   f"base aux limb {i} must dominate the reduced limb bound")

        rns = cls(
            wrong=wrong,
            native=native,
            bit_len_limb=L,
            bit_len_lookup=bit_len_lookup,
            wrong_modulus=wrong_modulus,
            native_modulus=native_modulus,
            binary_modulus=binary_modulus,
            crt_modulus=crt_modulus,
            right_shifter_r=right_shifter_r,
            right_shifter_2r=right_shifter_2r,
            left_shifter_r=left_shifter_r,
            left_shifter_2r=left_shifter_2r,
            left_shifter_3r=left_shifter_3r,
            base_aux=base_aux,
            negative_wrong_modulus_decomposed=negative_wrong_modulus_decomposed,
            wrong_modulus_decomposed=wrong_modulus_decomposed,
            wrong_modulus_minus_one=wrong_modulus_minus_one,
            wrong_modulus_in_native_modulus=wrong_modulus_in_native_modulus,
            max_reduced_limb=max_reduced_limb,
            max_unreduced_limb=max_unreduced_limb,
            max_remainder=max_remainder,
            max_operand=max_operand,
            max_mul_quotient=max_mul_quotient,
            max_reducible_value=max_reducible_value,
            max_with_max_unreduced_limbs=max_with_max_unreduced_limbs,
            max_dense_value=max_dense_value,
            max_most_significant_reduced_limb=max_most_significant_reduced_limb,
            max_most_significant_operand_limb=max_most_significant_operand_limb,
            max_most_significant_unreduced_limb=max_most_significant_unreduced_limb,
            max_most_significant_mul_quotient_limb=max_most_significant_mul_quotient_limb,
            mul_v0_overflow=mul_v0_overflow,
            mul_v1_overflow=mul_v1_overflow,
            red_v0_overflow=red_v0_overflow,
            red_v1_overflow=red_v1_overflow,
            two_limb_mask=two_limb_mask,
        )

        # the derived bounds must survive the worst reduction they admit
        worst = rns.new_from_limbs([max_unreduced_limb] * NUMBER_OF_LIMBS)
        quotient = rns.reduce(worst).quotient
        if not isinstance(quotient, ShortQuotient):
            raise SoundnessError("short quotient is expected")
        ensure(quotient.value < max_reduced_limb,
               "worst-case reduction quotient must fit a limb")

        return rns

    # -- integer constructors ----------------------------------------------

    def new(self, fe: int) -> Integer:
        """Integer from a wrong-field element."""
        return Integer.from_big(self.wrong.element(fe), self.bit_len_limb)

    def zero(self) -> Integer:
        return Integer.from_big(0, self.bit_len_limb)

    def one(self) -> Integer:
        return Integer.from_big(1, self.bit_len_limb)

    def new_from_limbs(self, limbs: List[int]) -> Integer:
        return Integer.from_limbs(limbs, self.bit_len_limb)

    def new_from_big(self, e: int) -> Integer:
        if e > self.max_dense_value:
            raise ValueError(
                f"value needs more than {NUMBER_OF_LIMBS * self.bit_len_limb} bits"
            )
        return Integer.from_big(e, self.bit_len_limb)

    def new_from_bytes_le(self, data: bytes) -> Integer:
        return self.new_from_big(int.from_bytes(data, "little"))

    def value(self, a: Integer) -> int:
        return a.value()

    def native_value(self, a: Integer) -> int:
        return a.native(self.native_modulus)

    # -- witness algorithms -------------------------------------------------

    def compare_to_modulus(self, integer: Integer) -> ComparisonResult:
        """(w - 1) - integer via limbwise borrow propagation.

        A final borrow of True means integer > w - 1, i.e. not canonical.

        Raises:
            ValueError: if a limb is wider than max_reduced_limb.
        """
        if any(limb > self.max_reduced_limb for limb in integer.limb_values()):
            raise ValueError(
                f"compare_to_modulus needs reduced limbs, got {integer!r}"
            )
        borrow = []
        limbs = []
        prev_borrow = 0
        for limb, modulus_limb in zip(integer.limb_values(),
                                      self.wrong_modulus_minus_one.limb_values()):
            cur_borrow = modulus_limb < limb + prev_borrow
            borrow.append(cur_borrow)
            res_limb = (modulus_limb + (int(cur_borrow) << self.bit_len_limb)) - prev_borrow - limb
            limbs.append(res_limb)
            prev_borrow = int(cur_borrow)

        return ComparisonResult(result=self.new_from_limbs(limbs), borrow=borrow)

    def mul(self, integer_0: Integer, integer_1: Integer) -> ReductionContext:
        """Quotient, remainder and residues for integer_0 * integer_1 mod w."""
        native = self.native
        negative_modulus = self.negative_wrong_modulus_decomposed

        quotient, result = divmod(integer_0.value() * integer_1.value(), self.wrong_modulus)

        quotient = self.new_from_big(quotient)
        result = self.new_from_big(result)

        # only the low NUMBER_OF_LIMBS windows matter modulo the binary modulus
        t = [0] * NUMBER_OF_LIMBS
        for k in range(NUMBER_OF_LIMBS):
            for i in range(k + 1):
                j = k - i
                t[k] = native.element(
                    t[k]
                    + integer_0.limb_value(i) * integer_1.limb_value(j)
                    + negative_modulus[i] * quotient.limb_value(j)
                )

        u0, u1, v0, v1 = self.residues(t, result)

        return ReductionContext(
            result=result, quotient=LongQuotient(quotient),
            t=t, u0=u0, u1=u1, v0=v0, v1=v1,
        )

    def reduce(self, integer: Integer) -> ReductionContext:
        """Quotient, remainder and residues for integer mod w."""
        native = self.native

        quotient, result = divmod(integer.value(), self.wrong_modulus)
        ensure(quotient < (1 << self.bit_len_limb),
               "reduction quotient must fit in a single limb")

        # compute intermediate values
        t = [
            native.element(a + p * quotient)
            for a, p in zip(integer.limb_values(), self.negative_wrong_modulus_decomposed)
        ]

        result = self.new_from_big(result)

        u0, u1, v0, v1 = self.residues(t, result)

        return ReductionContext(
            result=result, quotient=ShortQuotient(native.element(quotient)),
            t=t, u0=u0, u1=u1, v0=v0, v1=v1,
        )

    def residues(self, t: List[int], r: Integer):
        """Two-window carry check of t against the claimed remainder r.

        Returns (u0, u1, v0, v1) as native field elements.
        """
        native = self.native
        s = self.left_shifter_r

        u0 = native.element(t[0] + s * t[1] - r.limb_value(0) - s * r.limb_value(1))
        u1 = native.element(t[2] + s * t[3] - r.limb_value(2) - s * r.limb_value(3))

        # sanity check
        carried = native.element(u0 * self.right_shifter_2r + u1)
        ensure(u0 & self.two_limb_mask == 0, "low residue window must vanish")
        ensure(carried & self.two_limb_mask == 0, "high residue window must vanish")

        v0 = native.mul(u0, self.right_shifter_2r)
        v1 = native.mul(native.add(u1, v0), self.right_shifter_2r)

        return u0, u1, v0, v1

    def invert(self, a: Integer) -> Optional[Integer]:
        """Wrong-field inverse of a, or None when a is zero mod w."""
        inv = self.wrong.invert(a.value() % self.wrong_modulus)
        if inv is None:
            return None
        return self.new_from_big(inv)

    def div(self, a: Integer, b: Integer) -> Optional[Integer]:
        """a / b in the wrong field, or None when b is zero mod w."""
        b_inv = self.invert(b)
        if b_inv is None:
            return None
        return self.new_from_big((a.value() * b_inv.value()) % self.wrong_modulus)

    def make_aux(self, max_vals: List[int]) -> Integer:
        """base_aux shifted left until every limb dominates max_vals."""
        max_shift = 0
        for max_val, aux in zip(max_vals, self.base_aux.limb_values()):
            shift = 1
            while max_val > aux:
                aux <<= 1
                max_shift = max(shift, max_shift)
                shift += 1
        return self.new_from_limbs([limb << max_shift for limb in self.base_aux.limb_values()])

    def overflow_lengths(self) -> List[int]:
        """Bit lengths the range tables must cover beyond full lookup limbs."""
        lookup = self.bit_len_lookup
        return [
            self.mul_v0_overflow,
            self.mul_v1_overflow,
            self.red_v0_overflow,
            self.red_v1_overflow,
            bits(self.max_most_significant_mul_quotient_limb) % lookup,
            bits(self.max_most_significant_operand_limb) % lookup,
            bits(self.max_most_significant_reduced_limb) % lookup,
        ]

    def summary(self) -> dict:
        """Derived parameters as a flat JSON-friendly dict."""
        return {
            "wrong": self.wrong.name,
            "native": self.native.name,
            "bit_len_limb": self.bit_len_limb,
            "bit_len_lookup": self.bit_len_lookup,
            "wrong_modulus_bits": bits(self.wrong_modulus),
            "native_modulus_bits": bits(self.native_modulus),
            "crt_modulus_bits": bits(self.crt_modulus),
            "max_operand_bits": bits(self.max_operand),
            "max_mul_quotient_bits": bits(self.max_mul_quotient),
            "max_remainder_bits": bits(self.max_remainder),
            "max_unreduced_limb_bits": bits(self.max_unreduced_limb),
            "mul_v0_overflow": self.mul_v0_overflow,
            "mul_v1_overflow": self.mul_v1_overflow,
            "red_v0_overflow": self.red_v0_overflow,
            "red_v1_overflow": self.red_v1_overflow,
            "overflow_lengths": self.overflow_lengths(),
        }
