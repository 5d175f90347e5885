"""
Reference constraint layer for the wrong-field integer gadgets.
"""

from .value import Value, combine_values
from .region import Cell, Row, Offset, Region, COLUMNS
from .assigned import AssignedValue, AssignedCondition, AssignedLimb, AssignedInteger
from .main_gate import MainGate, Term, CombinationOption
from .range_chip import RangeChip
from .integer_chip import IntegerChip

__all__ = [
    "Value", "combine_values",
    "Cell", "Row", "Offset", "Region", "COLUMNS",
    "AssignedValue", "AssignedCondition", "AssignedLimb", "AssignedInteger",
    "MainGate", "Term", "CombinationOption",
    "RangeChip",
    "IntegerChip",
]
