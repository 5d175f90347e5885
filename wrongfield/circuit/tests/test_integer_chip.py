"""
Unit tests for the wrong-field integer gadgets.

Every gadget is synthesized with honest witnesses and checked with
Region.verify(); tampered witnesses and non-canonical inputs must be
rejected, and synthesis without witnesses must lay out the same rows.
"""

import json
import unittest
import random
import sys
import os
import tempfile
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', '..'))

from wrongfield.constants import get_field
from wrongfield.circuit.value import Value
from wrongfield.circuit.region import Region, Offset
from wrongfield.circuit.assigned import AssignedInteger, AssignedLimb
from wrongfield.circuit.integer_chip import IntegerChip
from wrongfield.logging import SynthesisLogger
from wrongfield.rns.rns import Rns


class IntegerChipTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.rns = Rns.construct(68, get_field("secp256k1_base"), get_field("bn254_scalar"))
        cls.chip = IntegerChip.configure(cls.rns)

    def setUp(self):
        self.rng = random.Random(42)
        self.w = self.rns.wrong_modulus
        self.region = Region(self._testMethodName)
        self.offset = Offset()

    def assign(self, x):
        return self.chip.range_assign_integer(
            self.region, Value.known(self.rns.new_from_big(x)),
            self.chip.remainder_msl_bits, self.offset)

    def value_of(self, assigned):
        return assigned.integer().unwrap().value()

    def rand(self):
        return self.rng.randrange(self.w)

    def assert_satisfied(self):
        self.assertEqual(self.chip.verify(self.region), [])
        self.assertEqual(self.offset.value, self.region.n_rows)


class TestAssignment(IntegerChipTestCase):

    def test_assign_integer(self):
        x = self.rand()
        a = self.chip.assign_integer(self.region, Value.known(self.rns.new(x)), self.offset)
        self.assertEqual(self.value_of(a), x)
        self.assertEqual(a.native_value.value, Value.known(x % self.rns.native_modulus))
        self.assertEqual(a.max_vals(), [self.rns.max_reduced_limb] * 4)
        self.assert_satisfied()

    def test_range_assign_integer(self):
        x = self.rand()
        a = self.assign(x)
        self.assertEqual(self.value_of(a), x)
        self.assertEqual(a.limb(3).max_val, self.rns.max_most_significant_reduced_limb)
        self.assert_satisfied()

    def test_range_assign_rejects_wide_msl(self):
        with self.assertRaises(ValueError):
            self.chip.range_assign_integer(
                self.region, Value.known(self.rns.one()), 69, self.offset)

    def test_tampered_native_value(self):
        a = self.assign(self.rand())
        row = self.region.rows[a.native_value.cell.row]
        row.values["d"] = row.values["d"].map(lambda v: v + 1)
        self.assertNotEqual(self.chip.verify(self.region), [])


class TestAddSub(IntegerChipTestCase):

    def test_add_then_reduce(self):
        for _ in range(5):
            x, y = self.rand(), self.rand()
            c = self.chip.add(self.region, self.assign(x), self.assign(y), self.offset)
            self.assertEqual(self.value_of(c), x + y)
            r = self.chip.reduce(self.region, c, self.offset)
            self.assertEqual(self.value_of(r), (x + y) % self.w)
        self.assert_satisfied()

    def test_add_tracks_limb_maxima(self):
        a, b = self.assign(self.rand()), self.assign(self.rand())
        c = self.chip.add(self.region, a, b, self.offset)
        self.assertEqual(c.max_vals(), [x + y for x, y in zip(a.max_vals(), b.max_vals())])

    def test_sub_then_reduce(self):
        for _ in range(5):
            x, y = self.rand(), self.rand()
            c = self.chip.sub(self.region, self.assign(x), self.assign(y), self.offset)
            self.assertEqual(self.value_of(c) % self.w, (x - y) % self.w)
            r = self.chip.reduce(self.region, c, self.offset)
            self.assertEqual(self.value_of(r), (x - y) % self.w)
        self.assert_satisfied()

    def test_sub_of_larger_operand(self):
        a = self.assign(0)
        b = self.assign(self.w - 1)
        c = self.chip.sub(self.region, a, b, self.offset)
        self.assertTrue(all(l.value.unwrap() < self.rns.native_modulus // 2 for l in c.limbs))
        r = self.chip.reduce(self.region, c, self.offset)
        self.assertEqual(self.value_of(r), 1)
        self.assert_satisfied()


class TestMulReduce(IntegerChipTestCase):

    def test_mul(self):
        for _ in range(5):
            x, y = self.rand(), self.rand()
            c = self.chip.mul(self.region, self.assign(x), self.assign(y), self.offset)
            self.assertEqual(self.value_of(c), (x * y) % self.w)
        self.assert_satisfied()

    def test_mul_one_by_one(self):
        c = self.chip.mul(self.region, self.assign(1), self.assign(1), self.offset)
        self.assertEqual(self.value_of(c), 1)
        self.assert_satisfied()

    def test_mul_edge_values(self):
        for x, y in [(0, self.w - 1), (self.w - 1, self.w - 1), (self.w, 2)]:
            c = self.chip.mul(self.region, self.assign(x), self.assign(y), self.offset)
            self.assertEqual(self.value_of(c), (x * y) % self.w)
        self.assert_satisfied()

    def test_mul_tampered_result(self):
        c = self.chip.mul(self.region, self.assign(self.rand()), self.assign(self.rand()), self.offset)
        self.assertEqual(self.chip.verify(self.region), [])
        # forge the result's native value by one
        row = self.region.rows[c.native_value.cell.row]
        row.values["d"] = row.values["d"].map(lambda v: (v + 1) % self.rns.native_modulus)
        self.assertNotEqual(self.chip.verify(self.region), [])

    def test_reduce_dense_value(self):
        x = self.rns.max_dense_value
        a = self.chip.assign_integer(self.region, Value.known(self.rns.new_from_big(x)), self.offset)
        r = self.chip.reduce(self.region, a, self.offset)
        self.assertEqual(self.value_of(r), x % self.w)
        self.assert_satisfied()


class TestInvertDiv(IntegerChipTestCase):

    def test_invert(self):
        x = self.rng.randrange(1, self.w)
        inv, cond = self.chip.invert(self.region, self.assign(x), self.offset)
        self.assertEqual((self.value_of(inv) * x) % self.w, 1)
        self.assertEqual(cond.value, Value.known(0))
        self.assert_satisfied()

    def test_invert_zero(self):
        inv, cond = self.chip.invert(self.region, self.assign(0), self.offset)
        self.assertEqual(self.value_of(inv), 1)
        self.assertEqual(cond.value, Value.known(1))
        self.assert_satisfied()

    def test_invert_modulus_is_zero(self):
        inv, cond = self.chip.invert(self.region, self.assign(self.w), self.offset)
        self.assertEqual(cond.value, Value.known(1))
        self.assert_satisfied()

    def test_div(self):
        x, y = self.rand(), self.rng.randrange(1, self.w)
        c, cond = self.chip.div(self.region, self.assign(x), self.assign(y), self.offset)
        self.assertEqual((self.value_of(c) * y - x) % self.w, 0)
        self.assertEqual(cond.value, Value.known(0))
        self.assert_satisfied()

    def test_div_by_zero(self):
        x = self.rand()
        c, cond = self.chip.div(self.region, self.assign(x), self.assign(0), self.offset)
        self.assertEqual(self.value_of(c), x)
        self.assertEqual(cond.value, Value.known(1))
        self.assert_satisfied()

    def test_forged_condition(self):
        _, cond = self.chip.invert(self.region, self.assign(self.rng.randrange(1, self.w)), self.offset)
        self.region.rows[cond.cell.row].values[cond.cell.column] = Value.known(1)
        self.assertNotEqual(self.chip.verify(self.region), [])


class TestAssertInField(IntegerChipTestCase):

    def test_canonical_values(self):
        for x in [0, 1, self.w - 1, self.rand()]:
            self.chip.assert_in_field(self.region, self.assign(x), self.offset)
        self.assert_satisfied()

    def test_modulus_rejected(self):
        self.chip.assert_in_field(self.region, self.assign(self.w), self.offset)
        self.assertNotEqual(self.chip.verify(self.region), [])

    def test_above_modulus_rejected(self):
        self.chip.assert_in_field(self.region, self.assign(self.w + 12345), self.offset)
        self.assertNotEqual(self.chip.verify(self.region), [])


class TestOperandBounds(IntegerChipTestCase):
    """Unreduced operands are reduced before multiplication."""

    def test_mul_of_difference(self):
        for _ in range(20):
            x, y, z = self.rand(), self.rand(), self.rand()
            diff = self.chip.sub(self.region, self.assign(x), self.assign(y), self.offset)
            c = self.chip.mul(self.region, diff, self.assign(z), self.offset)
            self.assertEqual(self.value_of(c), ((x - y) * z) % self.w)
        self.assert_satisfied()

    def test_mul_of_sum_on_both_sides(self):
        x, y = self.rng.randrange(self.w), self.rand()
        a, b = self.assign(x), self.assign(y)
        c = self.chip.mul(self.region, self.chip.add(self.region, a, b, self.offset),
                          self.chip.sub(self.region, a, b, self.offset), self.offset)
        self.assertEqual(self.value_of(c), ((x + y) * (x - y)) % self.w)
        self.assert_satisfied()

    def test_invert_and_div_of_difference(self):
        x, y, z = self.rand(), self.rand(), self.rand()
        diff = self.chip.sub(self.region, self.assign(x), self.assign(y), self.offset)
        inv, cond = self.chip.invert(self.region, diff, self.offset)
        self.assertEqual((self.value_of(inv) * (x - y)) % self.w, 1)
        self.assertEqual(cond.value, Value.known(0))
        c, _ = self.chip.div(self.region, self.assign(z), diff, self.offset)
        self.assertEqual((self.value_of(c) * (x - y) - z) % self.w, 0)
        self.assert_satisfied()

    def test_range_assigned_operands_not_reduced(self):
        a, b = self.assign(self.rand()), self.assign(self.rand())
        rows_before = self.region.n_rows
        self.chip.mul(self.region, a, b, self.offset)
        mul_rows = self.region.n_rows - rows_before
        diff = self.chip.sub(self.region, a, b, self.offset)
        rows_before = self.region.n_rows
        self.chip.mul(self.region, diff, b, self.offset)
        self.assertGreater(self.region.n_rows - rows_before, mul_rows)
        self.assert_satisfied()

    def test_mul_rejects_limbs_beyond_unreduced_bound(self):
        a = self.assign(self.rand())
        wide = AssignedInteger(
            [AssignedLimb(limb.cell, limb.value, 1 << 110) for limb in a.limbs],
            a.native_value, self.rns.bit_len_limb)
        with self.assertRaises(ValueError):
            self.chip.mul(self.region, wide, a, self.offset)
        with self.assertRaises(ValueError):
            self.chip.reduce(self.region, wide, self.offset)

    def test_assert_in_field_rejects_unreduced(self):
        a = self.assign((1 << 68) - 1)
        doubled = self.chip.add(self.region, a, a, self.offset)
        with self.assertRaises(ValueError):
            self.chip.assert_in_field(self.region, doubled, self.offset)
        reduced = self.chip.reduce(self.region, doubled, self.offset)
        self.chip.assert_in_field(self.region, reduced, self.offset)
        self.assert_satisfied()


class TestUnknownWitnesses(IntegerChipTestCase):
    """Key generation lays out the same table without witnesses."""

    def synthesize(self, a_value, b_value):
        region, offset = Region("layout"), Offset()
        msl = self.chip.remainder_msl_bits
        a = self.chip.range_assign_integer(region, a_value, msl, offset)
        b = self.chip.range_assign_integer(region, b_value, msl, offset)
        c = self.chip.mul(region, a, b, offset)
        d = self.chip.reduce(region, self.chip.sub(region, self.chip.add(region, a, b, offset), c, offset), offset)
        e, cond = self.chip.div(region, d, b, offset)
        self.chip.assert_in_field(region, e, offset)
        return region, e, cond

    def test_same_layout(self):
        x, y = self.rand(), self.rng.randrange(1, self.w)
        known, e, _ = self.synthesize(Value.known(self.rns.new(x)), Value.known(self.rns.new(y)))
        unknown, e_unknown, cond_unknown = self.synthesize(Value.unknown(), Value.unknown())
        self.assertEqual(known.stats(), unknown.stats())
        self.assertEqual(self.chip.verify(known), [])
        self.assertFalse(e_unknown.integer().is_known)
        self.assertFalse(cond_unknown.value.is_known)
        self.assertEqual(self.value_of(e), ((x + y - x * y) * pow(y, -1, self.w)) % self.w)

    def test_unknown_rows_reported(self):
        unknown, _, _ = self.synthesize(Value.unknown(), Value.unknown())
        kinds = {f["kind"] for f in self.chip.verify(unknown)}
        self.assertEqual(kinds, {"unknown_witness"})


class TestSynthesisLogging(IntegerChipTestCase):

    def test_ops_logged(self):
        with tempfile.TemporaryDirectory() as tmp:
            with SynthesisLogger(Path(tmp), name="chip") as logger:
                chip = IntegerChip(self.rns, self.chip.main_gate, self.chip.range_chip, logger=logger)
                a = chip.range_assign_integer(
                    self.region, Value.known(self.rns.new(3)), chip.remainder_msl_bits, self.offset)
                chip.mul(self.region, a, a, self.offset)
                logger.log_failures(chip.verify(self.region), region=self.region.name)
                summary = logger.summary

            # mul logs its two range assignments before itself
            self.assertEqual(summary["ops_logged"], 4)
            self.assertEqual(summary["failures_logged"], 0)
            lines = (Path(tmp) / "ops_chip.jsonl").read_text().splitlines()
            records = [json.loads(line) for line in lines]
            self.assertEqual([r["op"] for r in records],
                             ["range_assign_integer"] * 3 + ["mul"])
            self.assertEqual(records[-1]["offset"] + records[-1]["rows"], self.offset.value)


if __name__ == "__main__":
    unittest.main()
