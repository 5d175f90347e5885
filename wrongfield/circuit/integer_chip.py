"""
Integer chip: wrong-field gadgets over the main gate and range chip.

Every gadget takes the witness algorithm from Rns (reduce, mul, make_aux,
compare_to_modulus, invert) and lays out the rows that let a verifier
check its output:

  - limbwise relations modulo 2^(4 * bit_len_limb) through the two
    residue windows, with the carries v0, v1 range checked to the
    overflow lengths derived by the Rns
  - the same relation modulo the native modulus through the assigned
    native values

Together the two checks pin the relation down over the integers.
"""

from typing import List, Optional, Tuple

from ..rns.integer import Integer, NUMBER_OF_LIMBS
from ..rns.reference import bits
from ..rns.rns import Rns
from .assigned import AssignedCondition, AssignedInteger, AssignedLimb, AssignedValue
from .main_gate import MainGate, Term, CombinationOption
from .range_chip import RangeChip
from .region import Region, Offset
from .value import Value, combine_values


class IntegerChip:
    """Wrong-field integer gadgets.

    Usage:
        chip = IntegerChip.configure(rns)
        region, offset = Region(), Offset()
        a = chip.range_assign_integer(region, Value.known(x), chip.remainder_msl_bits, offset)
        inv, cond = chip.invert(region, a, offset)
        failures = chip.verify(region)
    """

    def __init__(self, rns: Rns, main_gate: MainGate, range_chip: RangeChip,
                 logger=None):
        self.rns = rns
        self.main_gate = main_gate
        self.range_chip = range_chip
        self.logger = logger

    @classmethod
    def configure(cls, rns: Rns, logger=None) -> "IntegerChip":
        main_gate = MainGate(rns.native_modulus)
        range_chip = RangeChip.from_rns(main_gate, rns)
        range_chip.load_tables()
        return cls(rns, main_gate, range_chip, logger=logger)

    @property
    def remainder_msl_bits(self) -> int:
        return bits(self.rns.max_most_significant_reduced_limb)

    @property
    def operand_msl_bits(self) -> int:
        return bits(self.rns.max_most_significant_operand_limb)

    @property
    def mul_quotient_msl_bits(self) -> int:
        return bits(self.rns.max_most_significant_mul_quotient_limb)

    def verify(self, region: Region):
        return region.verify(self.rns.native_modulus, self.range_chip.load_tables())

    def _log(self, op: str, region: Region, start: int, offset: Offset):
        if self.logger is not None:
            self.logger.log_op({
                "op": op,
                "region": region.name,
                "offset": start,
                "rows": offset.value - start,
            })

    def _native(self, integer: Value) -> Value:
        return integer.map(lambda e: e.native(self.rns.native_modulus))

    def _exceeds(self, a: AssignedInteger, most_significant_bound: int) -> bool:
        """True if a limb bound of a is above max_reduced_limb (top limb: most_significant_bound)."""
        bounds = [self.rns.max_reduced_limb] * (NUMBER_OF_LIMBS - 1) + [most_significant_bound]
        return any(max_val > bound for max_val, bound in zip(a.max_vals(), bounds))

    def _operand(self, region: Region, a: AssignedInteger,
                 offset: Offset) -> AssignedInteger:
        """a as a multiplication operand, reduced when its limb bounds are too wide.

        The mul residue overflows are derived for operands within these bounds.
        """
        if self._exceeds(a, self.rns.max_most_significant_operand_limb):
            return self.reduce(region, a, offset)
        return a

    # -- assignment ---------------------------------------------------------

    def _compose_native(self, region: Region, limbs: List[AssignedLimb],
                        native_value: Value, offset: Offset) -> AssignedValue:
        """Tie the native value to the limbs: sum(limb_i * 2^(i*L)) = native."""
        rns = self.rns
        self.main_gate.combine(
            region,
            Term.assigned(limbs[0], 1),
            Term.assigned(limbs[1], rns.left_shifter_r),
            Term.assigned(limbs[2], rns.left_shifter_2r),
            Term.assigned(limbs[3], rns.left_shifter_3r),
            0, offset, CombinationOption.combine_to_next_add(-1),
        )
        _, _, _, native_cell = self.main_gate.combine(
            region, Term.zero(), Term.zero(), Term.zero(),
            Term.unassigned(native_value, 0), 0, offset,
            CombinationOption.single_liner_add(),
        )
        return native_cell

    def assign_integer(self, region: Region, integer: Value,
                       offset: Offset) -> AssignedInteger:
        """Assign limbs without range checks.

        The caller vouches that every limb is at most max_reduced_limb.
        """
        rns = self.rns
        start = offset.value
        limb_values = [integer.map(lambda e, i=i: e.limb_value(i)) for i in range(NUMBER_OF_LIMBS)]

        cells = self.main_gate.combine(
            region,
            Term.unassigned(limb_values[0], 1),
            Term.unassigned(limb_values[1], rns.left_shifter_r),
            Term.unassigned(limb_values[2], rns.left_shifter_2r),
            Term.unassigned(limb_values[3], rns.left_shifter_3r),
            0, offset, CombinationOption.combine_to_next_add(-1),
        )
        _, _, _, native_cell = self.main_gate.combine(
            region, Term.zero(), Term.zero(), Term.zero(),
            Term.unassigned(self._native(integer), 0), 0, offset,
            CombinationOption.single_liner_add(),
        )

        limbs = [AssignedLimb(cell.cell, cell.value, rns.max_reduced_limb) for cell in cells]
        self._log("assign_integer", region, start, offset)
        return AssignedInteger(limbs, native_cell, rns.bit_len_limb)

    def range_assign_integer(self, region: Region, integer: Value,
                             most_significant_limb_bit_len: int,
                             offset: Offset) -> AssignedInteger:
        """Assign limbs with range checks; the top limb gets a tighter bound."""
        rns = self.rns
        if most_significant_limb_bit_len > rns.bit_len_limb:
            raise ValueError(
                f"most significant limb bound {most_significant_limb_bit_len} "
                f"exceeds limb width {rns.bit_len_limb}"
            )
        start = offset.value

        limbs = []
        for i in range(NUMBER_OF_LIMBS):
            is_last_limb = i == NUMBER_OF_LIMBS - 1
            bit_len = most_significant_limb_bit_len if is_last_limb else rns.bit_len_limb
            value = integer.map(lambda e, i=i: e.limb_value(i))
            assigned = self.range_chip.range_value(region, value, bit_len, offset)
            limbs.append(AssignedLimb(assigned.cell, assigned.value, (1 << bit_len) - 1))

        native_cell = self._compose_native(region, limbs, self._native(integer), offset)
        self._log("range_assign_integer", region, start, offset)
        return AssignedInteger(limbs, native_cell, rns.bit_len_limb)

    # -- addition / subtraction ---------------------------------------------

    def add(self, region: Region, a: AssignedInteger, b: AssignedInteger,
            offset: Offset) -> AssignedInteger:
        """Limbwise a + b, unreduced."""
        start = offset.value
        limbs = []
        for a_limb, b_limb in zip(a.limbs, b.limbs):
            c = self.main_gate.add(region, a_limb, b_limb, offset)
            limbs.append(AssignedLimb(c.cell, c.value, a_limb.max_val + b_limb.max_val))
        native = self.main_gate.add(region, a.native_value, b.native_value, offset)
        self._log("add", region, start, offset)
        return AssignedInteger(limbs, native, self.rns.bit_len_limb)

    def sub(self, region: Region, a: AssignedInteger, b: AssignedInteger,
            offset: Offset) -> AssignedInteger:
        """Limbwise a - b + aux, where aux = 0 mod w dominates b's limbs."""
        start = offset.value
        aux = self.rns.make_aux(b.max_vals())
        aux_native = aux.native(self.rns.native_modulus)

        limbs = []
        for a_limb, b_limb, aux_limb in zip(a.limbs, b.limbs, aux.limb_values()):
            c = self.main_gate.sub_with_constant(region, a_limb, b_limb, aux_limb, offset)
            limbs.append(AssignedLimb(c.cell, c.value, a_limb.max_val + aux_limb))

        native = self.main_gate.sub_with_constant(
            region, a.native_value, b.native_value, aux_native, offset)
        self._log("sub", region, start, offset)
        return AssignedInteger(limbs, native, self.rns.bit_len_limb)

    # -- reduction / multiplication -----------------------------------------

    def _constrain_residues(self, region: Region, t: List[AssignedValue],
                            result: AssignedInteger, v0: Value, v1: Value,
                            v0_bit_len: int, v1_bit_len: int, offset: Offset):
        """u0 = 2^(2L) * v0 and u1 + v0 = 2^(2L) * v1, carries range checked."""
        rns = self.rns
        s = rns.left_shifter_r
        big_r = rns.left_shifter_2r
        r = result.limbs

        v0 = self.range_chip.range_value(region, v0, v0_bit_len, offset)
        v1 = self.range_chip.range_value(region, v1, v1_bit_len, offset)

        # t0 + s*t1 - r0 - s*r1 - R^2 * v0 = 0
        self.main_gate.combine(
            region,
            Term.assigned(t[0], 1), Term.assigned(t[1], s),
            Term.assigned(r[0], -1), Term.assigned(r[1], -s),
            0, offset, CombinationOption.combine_to_next_add(-big_r),
        )
        # x = t2 + s*t3 - r2 + v0
        x = combine_values(
            [t[2].value, t[3].value, r[2].value, v0.value],
            lambda t2, t3, r2, v: (t2 + s * t3 - r2 + v) % rns.native_modulus,
        )
        self.main_gate.combine(
            region,
            Term.assigned(t[2], 1), Term.assigned(t[3], s),
            Term.assigned(r[2], -1), Term.assigned(v0, 1),
            0, offset, CombinationOption.combine_to_next_add(-1),
        )
        # x - s*r3 - R^2 * v1 = 0
        self.main_gate.combine(
            region,
            Term.assigned(r[3], -s), Term.assigned(v1, -big_r),
            Term.zero(), Term.unassigned(x, 1),
            0, offset, CombinationOption.single_liner_add(),
        )

    def reduce(self, region: Region, a: AssignedInteger,
               offset: Offset) -> AssignedInteger:
        """a mod w with a single-limb quotient."""
        rns = self.rns
        if any(max_val > rns.max_unreduced_limb for max_val in a.max_vals()):
            raise ValueError(
                f"reduce operand limbs {[bits(m) for m in a.max_vals()]} bits "
                f"exceed the unreduced limb bound of {bits(rns.max_unreduced_limb)} bits"
            )
        start = offset.value
        context = a.integer().map(rns.reduce)

        quotient = self.range_chip.range_value(
            region, context.map(lambda c: c.quotient.value), rns.bit_len_limb, offset)
        result = self.range_assign_integer(
            region, context.map(lambda c: c.result), self.remainder_msl_bits, offset)

        # t_i = a_i + p_i * q
        t = []
        for i, p_i in enumerate(rns.negative_wrong_modulus_decomposed):
            t_i = context.map(lambda c, i=i: c.t[i])
            _, _, _, t_cell = self.main_gate.combine(
                region,
                Term.assigned(a.limbs[i], 1), Term.assigned(quotient, p_i),
                Term.zero(), Term.unassigned(t_i, -1),
                0, offset, CombinationOption.single_liner_add(),
            )
            t.append(t_cell)

        self._constrain_residues(
            region, t, result,
            context.map(lambda c: c.v0), context.map(lambda c: c.v1),
            rns.bit_len_limb + rns.red_v0_overflow,
            rns.bit_len_limb + rns.red_v1_overflow,
            offset,
        )

        # a - q * w - r = 0 (mod native)
        self.main_gate.combine(
            region,
            Term.assigned(a.native_value, 1),
            Term.assigned(quotient, -rns.wrong_modulus_in_native_modulus),
            Term.assigned(result.native_value, -1),
            Term.zero(),
            0, offset, CombinationOption.single_liner_add(),
        )
        self._log("reduce", region, start, offset)
        return result

    def mul(self, region: Region, a: AssignedInteger, b: AssignedInteger,
            offset: Offset) -> AssignedInteger:
        """a * b mod w with a full-integer quotient.

        Operands whose limb bounds exceed the multiplication operand bounds
        are reduced first.
        """
        rns = self.rns
        start = offset.value
        a = self._operand(region, a, offset)
        b = self._operand(region, b, offset)
        context = a.integer().zip_with(b.integer(), rns.mul)

        quotient = self.range_assign_integer(
            region, context.map(lambda c: c.quotient.integer), self.mul_quotient_msl_bits, offset)
        result = self.range_assign_integer(
            region, context.map(lambda c: c.result), self.remainder_msl_bits, offset)

        # t_k = sum_{i+j=k} a_i * b_j + p_i * q_j, chained through d
        p = rns.negative_wrong_modulus_decomposed
        t = []
        for k in range(NUMBER_OF_LIMBS):
            acc: Optional[Value] = None
            for i in range(k + 1):
                j = k - i
                d = Term.zero() if acc is None else Term.unassigned(acc, 1)
                self.main_gate.combine(
                    region,
                    Term.assigned(a.limbs[i], 0), Term.assigned(b.limbs[j], 0),
                    Term.assigned(quotient.limbs[j], p[i]), d,
                    0, offset, CombinationOption.combine_to_next_mul(-1),
                )
                step = combine_values(
                    [a.limbs[i].value, b.limbs[j].value, quotient.limbs[j].value],
                    lambda x, y, q, p_i=p[i]: x * y + p_i * q,
                )
                acc = step if acc is None else acc.zip_with(
                    step, lambda u, w: (u + w) % rns.native_modulus)
            _, _, _, t_cell = self.main_gate.combine(
                region, Term.zero(), Term.zero(), Term.zero(), Term.unassigned(acc, 0),
                0, offset, CombinationOption.single_liner_add(),
            )
            t.append(t_cell)

        self._constrain_residues(
            region, t, result,
            context.map(lambda c: c.v0), context.map(lambda c: c.v1),
            rns.bit_len_limb + rns.mul_v0_overflow,
            rns.bit_len_limb + rns.mul_v1_overflow,
            offset,
        )

        # a * b - q * w - r = 0 (mod native)
        self.main_gate.combine(
            region,
            Term.assigned(a.native_value, 0), Term.assigned(b.native_value, 0),
            Term.assigned(quotient.native_value, -rns.wrong_modulus_in_native_modulus),
            Term.assigned(result.native_value, -1),
            0, offset, CombinationOption.single_liner_mul(),
        )
        self._log("mul", region, start, offset)
        return result

    # -- canonicality -------------------------------------------------------

    def assert_in_field(self, region: Region, a: AssignedInteger, offset: Offset):
        """Constrain a < w by subtracting it from w - 1 with borrows.

        Raises:
            ValueError: if a's limb bounds are not those of a reduced integer.
        """
        rns = self.rns
        if self._exceeds(a, rns.max_most_significant_reduced_limb):
            raise ValueError(
                f"assert_in_field needs reduced limbs, got bounds of "
                f"{[bits(m) for m in a.max_vals()]} bits; reduce the integer first"
            )
        start = offset.value
        comparison = a.integer().map(rns.compare_to_modulus)
        modulus_minus_one = rns.wrong_modulus_minus_one.limb_values()
        shifter = 1 << rns.bit_len_limb

        prev_borrow: Optional[AssignedValue] = None
        for i in range(NUMBER_OF_LIMBS):
            is_last_limb = i == NUMBER_OF_LIMBS - 1
            bit_len = self.remainder_msl_bits if is_last_limb else rns.bit_len_limb
            result_limb = self.range_chip.range_value(
                region, comparison.map(lambda c, i=i: c.result.limb_value(i)), bit_len, offset)
            borrow = self.main_gate.assign_bit(
                region, comparison.map(lambda c, i=i: int(c.borrow[i])), offset)

            # m_i - a_i + 2^L * borrow_i - borrow_{i-1} - r_i = 0
            prev = Term.zero() if prev_borrow is None else Term.assigned(prev_borrow, -1)
            self.main_gate.combine(
                region,
                Term.assigned(a.limbs[i], -1), Term.assigned(borrow, shifter),
                prev, Term.assigned(result_limb, -1),
                modulus_minus_one[i], offset, CombinationOption.single_liner_add(),
            )
            prev_borrow = borrow

        # a borrow out of the top limb means a > w - 1
        self.main_gate.assert_zero(region, prev_borrow, offset)
        self._log("assert_in_field", region, start, offset)

    # -- inversion ----------------------------------------------------------

    def invert(self, region: Region, a: AssignedInteger,
               offset: Offset) -> Tuple[AssignedInteger, AssignedCondition]:
        """Inverse of a, or one when a is zero.

        Returns:
            (inv_or_one, cond) where cond = 1 flags a non-invertible a.
        """
        rns = self.rns
        start = offset.value
        main_gate = self.main_gate
        a = self._operand(region, a, offset)

        def invert_or_one(integer: Integer) -> Integer:
            inv = rns.invert(integer)
            return rns.one() if inv is None else inv

        inv_or_one = self.range_assign_integer(
            region, a.integer().map(invert_or_one), self.remainder_msl_bits, offset)
        a_mul_inv = self.mul(region, a, inv_or_one, offset)

        # the product is 0 or 1: limbs 1.. vanish, limb 0 is boolean
        for i in range(1, NUMBER_OF_LIMBS):
            main_gate.assert_zero(region, a_mul_inv.limbs[i], offset)
        main_gate.assert_bit(region, a_mul_inv.limbs[0], offset)

        # if the product is 0 then inv_or_one must be [1, 0, 0, 0]
        # (a_mul_inv[0] - 1) * inv[i] = 0 for i > 0
        for i in range(1, NUMBER_OF_LIMBS):
            main_gate.combine(
                region,
                Term.assigned(a_mul_inv.limbs[0], 0), Term.assigned(inv_or_one.limbs[i], -1),
                Term.zero(), Term.zero(),
                0, offset, CombinationOption.single_liner_mul(),
            )
        # (a_mul_inv[0] - 1) * (inv[0] - 1) = 0
        main_gate.combine(
            region,
            Term.assigned(a_mul_inv.limbs[0], -1), Term.assigned(inv_or_one.limbs[0], -1),
            Term.zero(), Term.zero(),
            1, offset, CombinationOption.single_liner_mul(),
        )

        # cond = 1 - a_mul_inv[0]
        cond = a_mul_inv.limbs[0].value.map(lambda x: (1 - x) % rns.native_modulus)
        _, cond_cell, _, _ = main_gate.combine(
            region,
            Term.assigned(a_mul_inv.limbs[0], 1), Term.unassigned(cond, 1),
            Term.zero(), Term.zero(),
            -1, offset, CombinationOption.single_liner_add(),
        )
        self._log("invert", region, start, offset)
        return inv_or_one, cond_cell

    def div(self, region: Region, a: AssignedInteger, b: AssignedInteger,
            offset: Offset) -> Tuple[AssignedInteger, AssignedCondition]:
        """a / b; when b is zero the result is a mod w and cond is 1."""
        start = offset.value
        b_inv, cond = self.invert(region, b, offset)
        result = self.mul(region, a, b_inv, offset)
        self._log("div", region, start, offset)
        return result, cond

