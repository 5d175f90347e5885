"""
Range chip: proves a value lies in [0, 2^bit_len).

The value is split into bit_len_lookup-bit chunks, each chunk is looked up
in a table, and the chunks are recomposed into the value with the main
gate.  A trailing partial chunk is looked up in a smaller table, so one
table exists per distinct overflow length the Rns can produce.

Row layout (three chunks per row, running sum chained through d):

    | c_0  | c_1  | c_2  | 0      |  -> next d
    | c_3  | c_4  | c_5  | acc_1  |  -> next d
    | 0    | 0    | 0    | value  |
"""

from typing import Dict, Iterable, List, Optional

import numpy as np

from ..errors import SynthesisError
from .assigned import AssignedValue
from .main_gate import MainGate, Term, CombinationOption
from .region import Region, Offset
from .value import Value

CHUNKS_PER_ROW = 3


class RangeChip:
    """Lookup-backed range checks.

    Usage:
        chip = RangeChip.from_rns(main_gate, rns)
        chip.load_tables()
        assigned = chip.range_value(region, Value.known(x), 68, offset)
    """

    def __init__(self, main_gate: MainGate, bit_len_lookup: int,
                 overflow_lengths: Iterable[int] = ()):
        if bit_len_lookup <= 0:
            raise ValueError(f"bit_len_lookup must be positive, got {bit_len_lookup}")
        self.main_gate = main_gate
        self.bit_len_lookup = bit_len_lookup
        sizes = {bit_len_lookup}
        for length in overflow_lengths:
            rem = int(length) % bit_len_lookup
            if rem:
                sizes.add(rem)
        self.table_sizes = sorted(sizes)
        self.tables: Dict[int, np.ndarray] = {}

    @classmethod
    def from_rns(cls, main_gate: MainGate, rns) -> "RangeChip":
        return cls(main_gate, rns.bit_len_lookup, rns.overflow_lengths())

    def load_tables(self) -> Dict[int, np.ndarray]:
        """Build one table per supported chunk width (idempotent)."""
        if not self.tables:
            for size in self.table_sizes:
                self.tables[size] = np.arange(1 << size, dtype=np.uint32)
        return self.tables

    def chunk_bit_lens(self, bit_len: int) -> List[int]:
        lookup = self.bit_len_lookup
        n_full, rem = divmod(bit_len, lookup)
        return [lookup] * n_full + ([rem] if rem else [])

    def range_value(self, region: Region, value: Value, bit_len: int,
                    offset: Offset) -> AssignedValue:
        """Assign value and constrain it to bit_len bits.

        Raises:
            SynthesisError: if no table covers the trailing chunk width.
        """
        if bit_len <= 0:
            raise ValueError(f"bit_len must be positive, got {bit_len}")
        chunk_bits = self.chunk_bit_lens(bit_len)
        if chunk_bits[-1] not in self.table_sizes:
            raise SynthesisError(
                f"no {chunk_bits[-1]}-bit lookup table for a {bit_len}-bit range check"
            )

        lookup = self.bit_len_lookup
        chunks = []
        for i, size in enumerate(chunk_bits):
            mask = (1 << size) - 1
            shift = i * lookup
            chunks.append(value.map(lambda v, shift=shift, mask=mask: (v >> shift) & mask))

        acc: Optional[Value] = None
        for start in range(0, len(chunks), CHUNKS_PER_ROW):
            group = list(range(start, min(start + CHUNKS_PER_ROW, len(chunks))))
            terms = [Term.unassigned(chunks[i], 1 << (i * lookup)) for i in group]
            terms += [Term.zero()] * (CHUNKS_PER_ROW - len(terms))
            d = Term.zero() if acc is None else Term.unassigned(acc, 1)

            cells = self.main_gate.combine(
                region, terms[0], terms[1], terms[2], d, 0, offset,
                CombinationOption.combine_to_next_add(-1),
            )
            for pos, i in enumerate(group):
                region.lookup(cells[pos].cell, chunk_bits[i])

            for i in group:
                step = chunks[i].map(lambda c, i=i: c << (i * lookup))
                acc = step if acc is None else acc.zip_with(step, lambda x, y: x + y)

        # the last chained sum must equal value, which fails when out of range
        _, _, _, assigned = self.main_gate.combine(
            region, Term.zero(), Term.zero(), Term.zero(), Term.unassigned(value, 0),
            0, offset, CombinationOption.single_liner_add(),
        )
        return assigned
