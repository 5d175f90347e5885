"""
Values bound to cells of a Region.
"""

from dataclasses import dataclass
from typing import List

from ..rns.integer import Integer
from .region import Cell
from .value import Value, combine_values


@dataclass(frozen=True)
class AssignedValue:
    cell: Cell
    value: Value


# a boolean AssignedValue
AssignedCondition = AssignedValue


@dataclass(frozen=True)
class AssignedLimb:
    """Assigned limb with the largest value it may hold."""
    cell: Cell
    value: Value
    max_val: int

    def as_value(self) -> AssignedValue:
        return AssignedValue(self.cell, self.value)


@dataclass(frozen=True)
class AssignedInteger:
    """Assigned limbs plus the assigned native value of the integer."""
    limbs: List[AssignedLimb]
    native_value: AssignedValue
    bit_len_limb: int

    def limb(self, idx: int) -> AssignedLimb:
        return self.limbs[idx]

    def max_vals(self) -> List[int]:
        return [limb.max_val for limb in self.limbs]

    def integer(self) -> Value:
        """The witness Integer, unknown if any limb is unknown."""
        return combine_values(
            [limb.value for limb in self.limbs],
            lambda *vs: Integer.from_limbs(list(vs), self.bit_len_limb),
        )
