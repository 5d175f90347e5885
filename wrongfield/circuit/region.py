"""
Append-only constraint table.

A Region holds rows of four advice cells (a, b, c, d) together with the
fixed coefficients of the main gate, copy constraints between cells and
lookup queries.  Rows are placed at the position given by an explicit
Offset cursor, which every chip call receives and advances; the region
refuses any row that is not the next one.

Region.verify() plays the role of a mock prover: it re-evaluates every
gate, copy and lookup over the assigned witnesses and returns the list
of failures (empty when the table is satisfied).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Any

import numpy as np

from ..errors import SynthesisError
from .value import Value

COLUMNS = ("a", "b", "c", "d")


@dataclass(frozen=True)
class Cell:
    """Position of one advice value."""
    column: str
    row: int


@dataclass
class Row:
    """One main gate row.

    Enforced relation (mod native):
        sa*a + sb*b + sc*c + sd*d + s_mul*a*b + constant + s_next*d_next = 0
    """
    values: Dict[str, Value]
    coeffs: Dict[str, int]
    s_mul: int = 0
    s_next: int = 0
    constant: int = 0


class Offset:
    """Strictly increasing row cursor, passed explicitly through chip calls."""

    def __init__(self, start: int = 0):
        self.value = start

    def advance(self) -> int:
        current = self.value
        self.value += 1
        return current

    def __repr__(self) -> str:
        return f"Offset({self.value})"


class Region:
    """Single-writer table of rows, copies and lookups."""

    def __init__(self, name: str = "region"):
        self.name = name
        self.rows: List[Row] = []
        self.copies: List[Tuple[Cell, Cell]] = []
        self.lookups: List[Tuple[Cell, int]] = []

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    def assign_row(self, row: Row, offset: Offset) -> int:
        """Place row at offset and advance the cursor.

        Returns:
            The row index the row was placed at.
        """
        if offset.value != len(self.rows):
            raise SynthesisError(
                f"{self.name}: offset {offset.value} is not the next free row "
                f"({len(self.rows)})"
            )
        self.rows.append(row)
        return offset.advance()

    def _check_cell(self, cell: Cell):
        if cell.column not in COLUMNS or not (0 <= cell.row < len(self.rows)):
            raise SynthesisError(f"{self.name}: no such cell {cell}")

    def value_at(self, cell: Cell) -> Value:
        self._check_cell(cell)
        return self.rows[cell.row].values[cell.column]

    def constrain_equal(self, left: Cell, right: Cell):
        self._check_cell(left)
        self._check_cell(right)
        self.copies.append((left, right))

    def lookup(self, cell: Cell, bit_len: int):
        self._check_cell(cell)
        self.lookups.append((cell, bit_len))

    def stats(self) -> Dict[str, int]:
        return {
            "rows": len(self.rows),
            "copies": len(self.copies),
            "lookups": len(self.lookups),
        }

    # -- verification -------------------------------------------------------

    def verify(self, native_modulus: int,
               tables: Optional[Dict[int, np.ndarray]] = None) -> List[Dict[str, Any]]:
        """Check every gate, copy constraint and lookup.

        Args:
            native_modulus: Modulus of the native field.
            tables: Lookup tables keyed by bit length.  When None, lookups
                are checked against the bit bound directly.

        Returns:
            List of failure dicts with keys kind, row and detail.
        """
        failures: List[Dict[str, Any]] = []
        n = native_modulus

        for idx, row in enumerate(self.rows):
            values = row.values
            if not all(values[col].is_known for col in COLUMNS):
                failures.append({"kind": "unknown_witness", "row": idx,
                                 "detail": "row has unassigned witnesses"})
                continue
            a, b, c, d = (values[col].unwrap() for col in COLUMNS)
            acc = (row.coeffs["a"] * a + row.coeffs["b"] * b
                   + row.coeffs["c"] * c + row.coeffs["d"] * d
                   + row.s_mul * a * b + row.constant)
            if row.s_next:
                if idx + 1 >= len(self.rows):
                    failures.append({"kind": "gate", "row": idx,
                                     "detail": "combination refers to a missing next row"})
                    continue
                d_next = self.rows[idx + 1].values["d"]
                if not d_next.is_known:
                    failures.append({"kind": "unknown_witness", "row": idx + 1,
                                     "detail": "next row d is unassigned"})
                    continue
                acc += row.s_next * d_next.unwrap()
            if acc % n != 0:
                failures.append({"kind": "gate", "row": idx,
                                 "detail": f"gate evaluates to {acc % n}"})

        for left, right in self.copies:
            lv, rv = self.value_at(left), self.value_at(right)
            if not (lv.is_known and rv.is_known):
                failures.append({"kind": "unknown_witness", "row": left.row,
                                 "detail": f"copy {left} -> {right} over unknown value"})
            elif lv.unwrap() % n != rv.unwrap() % n:
                failures.append({"kind": "copy", "row": left.row,
                                 "detail": f"{left} != {right}"})

        for cell, bit_len in self.lookups:
            value = self.value_at(cell)
            if not value.is_known:
                failures.append({"kind": "unknown_witness", "row": cell.row,
                                 "detail": f"lookup at {cell} over unknown value"})
                continue
            v = value.unwrap()
            if tables is None:
                ok = 0 <= v < (1 << bit_len)
            else:
                table = tables.get(bit_len)
                if table is None:
                    failures.append({"kind": "lookup", "row": cell.row,
                                     "detail": f"no {bit_len}-bit table"})
                    continue
                ok = 0 <= v < table.size and int(table[v]) == v
            if not ok:
                failures.append({"kind": "lookup", "row": cell.row,
                                 "detail": f"{v} not in {bit_len}-bit table"})

        return failures
