"""
Unit tests for the main gate, the region table and witness values.
"""

import unittest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', '..'))

from wrongfield.constants import get_field
from wrongfield.errors import SynthesisError
from wrongfield.circuit.value import Value, combine_values
from wrongfield.circuit.region import Region, Row, Offset, Cell
from wrongfield.circuit.main_gate import MainGate, Term, CombinationOption


class TestValue(unittest.TestCase):

    def test_known(self):
        v = Value.known(3)
        self.assertTrue(v.is_known)
        self.assertEqual(v.map(lambda x: x + 1), Value.known(4))
        self.assertEqual(v.zip_with(Value.known(5), lambda x, y: x * y), Value.known(15))

    def test_unknown_propagates(self):
        u = Value.unknown()
        self.assertFalse(u.map(lambda x: x + 1).is_known)
        self.assertFalse(Value.known(1).zip_with(u, lambda x, y: x + y).is_known)
        self.assertFalse(combine_values([Value.known(1), u], lambda x, y: x).is_known)
        self.assertEqual(u.unwrap_or(7), 7)
        with self.assertRaises(ValueError):
            u.unwrap()

    def test_from_optional(self):
        self.assertFalse(Value.from_optional(None).is_known)
        self.assertEqual(Value.from_optional(0), Value.known(0))


class TestMainGate(unittest.TestCase):

    def setUp(self):
        self.n = get_field("bn254_scalar").modulus
        self.gate = MainGate(self.n)
        self.region = Region("test")
        self.offset = Offset()

    def verify(self):
        return self.region.verify(self.n)

    def test_add_sub_mul(self):
        a = self.gate.assign_value(self.region, Value.known(5), self.offset)
        b = self.gate.assign_value(self.region, Value.known(7), self.offset)
        s = self.gate.add(self.region, a, b, self.offset)
        d = self.gate.sub_with_constant(self.region, a, b, 10, self.offset)
        m = self.gate.mul(self.region, a, b, self.offset)
        self.assertEqual(s.value, Value.known(12))
        self.assertEqual(d.value, Value.known(8))
        self.assertEqual(m.value, Value.known(35))
        self.assertEqual(self.verify(), [])
        self.assertEqual(self.offset.value, self.region.n_rows)

    def test_negative_results_wrap(self):
        a = self.gate.assign_value(self.region, Value.known(1), self.offset)
        b = self.gate.assign_value(self.region, Value.known(2), self.offset)
        d = self.gate.sub_with_constant(self.region, a, b, 0, self.offset)
        self.assertEqual(d.value, Value.known(self.n - 1))
        self.assertEqual(self.verify(), [])

    def test_combine_to_next(self):
        # 2*x + 3*y - d_next = 0, then d_next placed on the following row
        self.gate.combine(
            self.region, Term.unassigned(Value.known(4), 2), Term.unassigned(Value.known(5), 3),
            Term.zero(), Term.zero(), 0, self.offset, CombinationOption.combine_to_next_add(-1),
        )
        self.gate.assign_value(self.region, Value.known(23), self.offset)
        self.assertEqual(self.verify(), [])

    def test_combine_to_next_wrong_sum(self):
        self.gate.combine(
            self.region, Term.unassigned(Value.known(4), 2), Term.zero(),
            Term.zero(), Term.zero(), 0, self.offset, CombinationOption.combine_to_next_add(-1),
        )
        self.gate.assign_value(self.region, Value.known(9), self.offset)
        kinds = {f["kind"] for f in self.verify()}
        self.assertIn("gate", kinds)

    def test_dangling_combine_to_next(self):
        self.gate.combine(
            self.region, Term.zero(), Term.zero(), Term.zero(), Term.zero(),
            0, self.offset, CombinationOption.combine_to_next_add(-1),
        )
        failures = self.verify()
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0]["kind"], "gate")

    def test_assert_bit(self):
        self.gate.assign_bit(self.region, Value.known(1), self.offset)
        self.gate.assign_bit(self.region, Value.known(0), self.offset)
        self.assertEqual(self.verify(), [])
        self.gate.assign_bit(self.region, Value.known(2), self.offset)
        self.assertEqual([f["kind"] for f in self.verify()], ["gate"])

    def test_assert_zero_and_equal(self):
        a = self.gate.assign_value(self.region, Value.known(3), self.offset)
        b = self.gate.assign_value(self.region, Value.known(3), self.offset)
        z = self.gate.assign_value(self.region, Value.known(0), self.offset)
        self.gate.assert_equal(self.region, a, b, self.offset)
        self.gate.assert_zero(self.region, z, self.offset)
        self.assertEqual(self.verify(), [])
        self.gate.assert_zero(self.region, a, self.offset)
        self.assertEqual(len(self.verify()), 1)

    def test_copy_constraint_catches_tamper(self):
        a = self.gate.assign_value(self.region, Value.known(5), self.offset)
        self.gate.add(self.region, a, a, self.offset)
        # overwrite the original cell, leaving its copy untouched
        self.region.rows[a.cell.row].values["d"] = Value.known(6)
        kinds = {f["kind"] for f in self.verify()}
        self.assertIn("copy", kinds)

    def test_unknown_witness_reported(self):
        self.gate.assign_value(self.region, Value.unknown(), self.offset)
        self.assertEqual(self.verify()[0]["kind"], "unknown_witness")


class TestRegion(unittest.TestCase):

    def test_offset_must_be_next_row(self):
        region = Region("r")
        row = Row(values={c: Value.known(0) for c in "abcd"},
                  coeffs={c: 0 for c in "abcd"})
        with self.assertRaises(SynthesisError):
            region.assign_row(row, Offset(3))
        self.assertEqual(region.assign_row(row, Offset(0)), 0)

    def test_missing_cell(self):
        region = Region("r")
        with self.assertRaises(SynthesisError):
            region.constrain_equal(Cell("a", 0), Cell("b", 0))
        with self.assertRaises(SynthesisError):
            region.lookup(Cell("e", 0), 8)

    def test_stats(self):
        n = get_field("bn254_scalar").modulus
        gate, region, offset = MainGate(n), Region("r"), Offset()
        a = gate.assign_value(region, Value.known(1), offset)
        gate.add(region, a, a, offset)
        self.assertEqual(region.stats(), {"rows": 2, "copies": 2, "lookups": 0})


if __name__ == "__main__":
    unittest.main()
