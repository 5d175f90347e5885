"""
RNS (Residue Number System) module for wrong-field arithmetic.

Provides:
1. Pure Python modular arithmetic and limb decompose/compose helpers
2. PrimeField descriptors for the wrong and native fields
3. The Integer limb representation and the Rns parameter set with its
   reduce / mul / invert / div / compare witness algorithms
"""

from .reference import (
    add_mod, sub_mod, mul_mod, inv_mod, pow_mod,
    neg_mod,
    decompose, compose, bits,
)
from .field import PrimeField
from .integer import (
    Limb, Integer, ShortQuotient, LongQuotient, Quotient,
    ReductionContext, ComparisonResult,
    NUMBER_OF_LIMBS, NUMBER_OF_LOOKUP_LIMBS,
)
from .rns import Rns

__all__ = [
    "add_mod", "sub_mod", "mul_mod", "inv_mod", "pow_mod",
    "neg_mod",
    "decompose", "compose", "bits",
    "PrimeField",
    "Limb", "Integer", "ShortQuotient", "LongQuotient", "Quotient",
    "ReductionContext", "ComparisonResult",
    "NUMBER_OF_LIMBS", "NUMBER_OF_LOOKUP_LIMBS",
    "Rns",
]
