"""
Main gate: the single arithmetic primitive of the constraint layer.

Each combine() call places one row enforcing

    sa*a + sb*b + sc*c + sd*d + s_mul*a*b + constant + s_next*d_next = 0

over the native field.  Terms are either already-assigned cells (copied
into the new row with an equality constraint), fresh witnesses, or zero.
The CombineToNext options fold the d cell of the following row into the
current row's relation, which is how multi-row sums are chained.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .assigned import AssignedValue
from .region import Cell, Region, Row, Offset, COLUMNS
from .value import Value


@dataclass(frozen=True)
class Term:
    """One weighted operand of a combination."""
    value: Value
    coeff: int = 0
    cell: Optional[Cell] = None

    @classmethod
    def assigned(cls, assigned, coeff: int) -> "Term":
        """Term over an existing cell (AssignedValue or AssignedLimb)."""
        return cls(assigned.value, coeff, assigned.cell)

    @classmethod
    def unassigned(cls, value: Value, coeff: int) -> "Term":
        return cls(value, coeff, None)

    @classmethod
    def zero(cls) -> "Term":
        return cls(Value.known(0), 0, None)


@dataclass(frozen=True)
class CombinationOption:
    """Selector settings for a combine() row."""
    mul: bool = False
    to_next: bool = False
    next_coeff: int = 0

    @classmethod
    def single_liner_add(cls) -> "CombinationOption":
        return cls()

    @classmethod
    def single_liner_mul(cls) -> "CombinationOption":
        return cls(mul=True)

    @classmethod
    def combine_to_next_add(cls, coeff: int) -> "CombinationOption":
        return cls(to_next=True, next_coeff=coeff)

    @classmethod
    def combine_to_next_mul(cls, coeff: int) -> "CombinationOption":
        return cls(mul=True, to_next=True, next_coeff=coeff)


class MainGate:
    """Combination gate over the native field."""

    def __init__(self, native_modulus: int):
        self.native_modulus = native_modulus

    def _fe(self, x: int) -> int:
        return int(x) % self.native_modulus

    def combine(
        self,
        region: Region,
        a: Term,
        b: Term,
        c: Term,
        d: Term,
        constant: int,
        offset: Offset,
        option: CombinationOption,
    ) -> Tuple[AssignedValue, AssignedValue, AssignedValue, AssignedValue]:
        """Place one row and return the four assigned cells."""
        terms = dict(zip(COLUMNS, (a, b, c, d)))
        row = Row(
            values={col: term.value.map(self._fe) for col, term in terms.items()},
            coeffs={col: self._fe(term.coeff) for col, term in terms.items()},
            s_mul=1 if option.mul else 0,
            s_next=self._fe(option.next_coeff) if option.to_next else 0,
            constant=self._fe(constant),
        )
        row_idx = region.assign_row(row, offset)

        assigned = []
        for col, term in terms.items():
            cell = Cell(col, row_idx)
            if term.cell is not None:
                region.constrain_equal(term.cell, cell)
            assigned.append(AssignedValue(cell, row.values[col]))
        return tuple(assigned)

    # -- helpers ------------------------------------------------------------

    def assign_value(self, region: Region, value: Value, offset: Offset) -> AssignedValue:
        """Place a free witness in the d column."""
        _, _, _, d = self.combine(
            region, Term.zero(), Term.zero(), Term.zero(),
            Term.unassigned(value, 0), 0, offset,
            CombinationOption.single_liner_add(),
        )
        return d

    def assign_bit(self, region: Region, value: Value, offset: Offset) -> AssignedValue:
        assigned = self.assign_value(region, value, offset)
        self.assert_bit(region, assigned, offset)
        return assigned

    def assert_zero(self, region: Region, a, offset: Offset):
        self.combine(
            region, Term.assigned(a, 1), Term.zero(), Term.zero(), Term.zero(),
            0, offset, CombinationOption.single_liner_add(),
        )

    def assert_equal(self, region: Region, a, b, offset: Offset):
        self.combine(
            region, Term.assigned(a, 1), Term.assigned(b, -1), Term.zero(), Term.zero(),
            0, offset, CombinationOption.single_liner_add(),
        )

    def assert_bit(self, region: Region, a, offset: Offset):
        """a * a - a = 0"""
        self.combine(
            region, Term.assigned(a, 0), Term.assigned(a, 0), Term.assigned(a, -1), Term.zero(),
            0, offset, CombinationOption.single_liner_mul(),
        )

    def add(self, region: Region, a, b, offset: Offset) -> AssignedValue:
        c = a.value.zip_with(b.value, lambda x, y: self._fe(x + y))
        _, _, out, _ = self.combine(
            region, Term.assigned(a, 1), Term.assigned(b, 1), Term.unassigned(c, -1), Term.zero(),
            0, offset, CombinationOption.single_liner_add(),
        )
        return out

    def sub_with_constant(self, region: Region, a, b, constant: int,
                          offset: Offset) -> AssignedValue:
        """a - b + constant"""
        c = a.value.zip_with(b.value, lambda x, y: self._fe(x - y + constant))
        _, _, out, _ = self.combine(
            region, Term.assigned(a, 1), Term.assigned(b, -1), Term.unassigned(c, -1), Term.zero(),
            constant, offset, CombinationOption.single_liner_add(),
        )
        return out

    def mul(self, region: Region, a, b, offset: Offset) -> AssignedValue:
        c = a.value.zip_with(b.value, lambda x, y: self._fe(x * y))
        _, _, out, _ = self.combine(
            region, Term.assigned(a, 0), Term.assigned(b, 0), Term.unassigned(c, -1), Term.zero(),
            0, offset, CombinationOption.single_liner_mul(),
        )
        return out
